from rich.console import Console
from rich.table import Table

from biome_rules.rules import RULE_HANDLERS, get_available_rules, get_rule_meta

console = Console()


def list_rules() -> None:
    """List available rules."""
    table = Table(show_lines=False)
    for header in ("rule", "description", "fixable", "handler"):
        table.add_column(header)
    names = get_available_rules()
    for name in names:
        meta = get_rule_meta(name)
        table.add_row(
            name,
            meta.description if meta else "",
            "yes" if meta and meta.fixable else "no",
            "yes" if name in RULE_HANDLERS else "no",
        )
    console.print(table)
    console.print(f"({len(names)} rules)")
