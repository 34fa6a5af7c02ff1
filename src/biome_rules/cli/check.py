from pathlib import Path

from rich.console import Console
from rich.markup import escape

from biome_rules.config.loader import load_biome_config, merge_biome_rules_config
from biome_rules.core.runner import plan_rules, run_rule, summarize
from biome_rules.models import RuleRun

console = Console()
err_console = Console(stderr=True)


def _print_run(run: RuleRun) -> None:
    result = run.result
    if result.success:
        console.print(f"  [green]✓[/green] {escape(result.message)}\n")
        return
    err_console.print(f"  [red]✗[/red] {escape(result.message)}")
    for violation in result.violations:
        err_console.print(
            f"    {violation.file_path}:{violation.line}:{violation.column} - {violation.message}",
            markup=False,
            highlight=False,
        )
    err_console.print("")


def run_check(
    config_path: str,
    ts_config_path: str | None = None,
    cwd: str | None = None,
    fix: bool = False,
    preset: str | None = None,
) -> int:
    """Run the configured rules once and return the process exit code."""
    config = merge_biome_rules_config(load_biome_config(config_path), preset)
    if not config.biome_rules:
        console.print("No biome-rules configured. Add biomeRules to biome.json")
        return 0

    working_dir = Path(cwd) if cwd else Path.cwd()
    console.print(f"Running {len(config.biome_rules)} rule(s)...\n")

    runs: list[RuleRun] = []
    for rule in plan_rules(config.biome_rules):
        description = f" ({rule.meta.description})" if rule.meta and rule.meta.description else ""
        console.print(f"Running: {escape(rule.name)}{escape(description)}...")
        run = run_rule(rule, working_dir, ts_config_path, fix)
        _print_run(run)
        runs.append(run)

    summary = summarize(runs)
    if summary.success:
        console.print("[green]All rules passed![/green]")
        return 0
    err_console.print(
        f"\n[red]Found {summary.total_violations} violation(s) across {summary.rule_count} rule(s)[/red]"
    )
    return 1
