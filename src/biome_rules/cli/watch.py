import asyncio
import contextlib
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console

from biome_rules.cli.check import run_check
from biome_rules.watcher.watchfiles_adapter import WatchfilesWatcher

console = Console()


def watch(
    config: Annotated[
        str, typer.Option("--config", "-c", envvar="BIOME_RULES_CONFIG", help="Path to biome.json.")
    ] = "biome.json",
    tsconfig: Annotated[
        str | None,
        typer.Option("--tsconfig", "-t", envvar="BIOME_RULES_TSCONFIG", help="Path to tsconfig.json."),
    ] = None,
    cwd: Annotated[str | None, typer.Option("--cwd", help="Working directory to watch.")] = None,
    preset: Annotated[
        str | None, typer.Option(help="Merge a rule preset (recommended, strict, all) under biomeRules.")
    ] = None,
) -> None:
    """Re-run the configured rules whenever a TypeScript file changes."""
    directory = Path(cwd) if cwd else Path.cwd()

    def _check() -> None:
        run_check(config, tsconfig, str(directory), preset=preset)

    async def _on_change(paths: set[Path]) -> None:
        console.print(f"[cyan]{len(paths)} file(s) changed, re-running rules[/cyan]")
        await asyncio.to_thread(_check)

    async def _run() -> None:
        watcher = WatchfilesWatcher(directory, _on_change)
        await asyncio.to_thread(_check)
        await watcher.start()
        console.print(f"[green]Watching {directory} (Ctrl+C to stop)[/green]")
        try:
            await watcher.wait()
        finally:
            await watcher.stop()

    with contextlib.suppress(KeyboardInterrupt):
        asyncio.run(_run())
