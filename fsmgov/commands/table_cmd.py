"""Fixed transition table commands."""

from __future__ import annotations

from rich.console import Console
from rich.table import Table

from ..definition.load import dumps_definition
from ..errors import FsmError
from ..lifecycle import TRANSITION_TABLES, parse_status, status_type_for, table_definition


def run_table(kind: str, state: str | None = None, export: bool = False) -> int:
    console = Console()
    err_console = Console(stderr=True)

    try:
        status_type = status_type_for(kind)
        current = parse_status(status_type, state) if state else None
    except FsmError as e:
        err_console.print(e.message, style="bold red", markup=False)
        return 2

    if export:
        print(dumps_definition(table_definition(status_type)))
        return 0

    table_rows = TRANSITION_TABLES[status_type]
    rows = [current] if current is not None else list(status_type)

    table = Table(title=f"{kind.lower()} transitions")
    table.add_column("State", style="cyan", no_wrap=True)
    table.add_column("Next states")
    table.add_column("Terminal", justify="center")

    for s in rows:
        successors = table_rows[s]
        table.add_row(
            s.value,
            ", ".join(t.value for t in successors) or "-",
            "yes" if not successors else "",
        )

    console.print(table)
    return 0
