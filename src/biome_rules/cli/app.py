import logging
from typing import Annotated

import typer
from rich.logging import RichHandler

from biome_rules.cli.check import err_console, run_check
from biome_rules.cli.rules import list_rules
from biome_rules.cli.watch import watch

app = typer.Typer(
    name="biome-rules",
    help="biome-rules CLI: run type-aware lint rules configured in biome.json.",
    context_settings={"help_option_names": ["-h", "--help"]},
)

app.command("rules")(list_rules)
app.command("watch")(watch)


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


@app.callback(invoke_without_command=True)
def check(
    ctx: typer.Context,
    config: Annotated[
        str, typer.Option("--config", "-c", envvar="BIOME_RULES_CONFIG", help="Path to biome.json.")
    ] = "biome.json",
    tsconfig: Annotated[
        str | None,
        typer.Option("--tsconfig", "-t", envvar="BIOME_RULES_TSCONFIG", help="Path to tsconfig.json."),
    ] = None,
    cwd: Annotated[str | None, typer.Option("--cwd", help="Working directory.")] = None,
    fix: Annotated[bool, typer.Option("--fix", help="Apply auto-fixes where possible.")] = False,
    preset: Annotated[
        str | None, typer.Option(help="Merge a rule preset (recommended, strict, all) under biomeRules.")
    ] = None,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Enable debug logging.")] = False,
) -> None:
    """Run every configured rule and exit non-zero on violations."""
    configure_logging(verbose)
    if ctx.invoked_subcommand is not None:
        return
    raise typer.Exit(run_check(config, tsconfig, cwd, fix=fix, preset=preset))


def main() -> None:
    app()


if __name__ == "__main__":
    main()
