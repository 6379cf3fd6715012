"""CLI entrypoint for fsmgov."""

import logging
import sys
from pathlib import Path

import click

from . import __version__
from .lifecycle import ENTITY_KINDS


@click.group()
@click.version_option(__version__, prog_name="fsmgov")
@click.option(
    "--verbose",
    "-V",
    is_flag=True,
    help="Enable debug logging on stderr",
)
@click.pass_context
def cli(ctx: click.Context, verbose: bool) -> None:
    """fsmgov - Transition validation for governed entities.

    Validate declarative FSM definitions, inspect the built-in idea and
    grant lifecycles, and verify audit trail exports.
    """
    ctx.ensure_object(dict)
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    ctx.obj["verbose"] = verbose


@cli.command()
@click.argument("path", type=click.Path(exists=False, dir_okay=False, path_type=Path))
@click.option(
    "--schema",
    "schema",
    type=str,
    default=None,
    metavar="PATH|default",
    help="Check the document against a JSON schema first ('default' uses the bundled schema)",
)
@click.option(
    "--strict",
    is_flag=True,
    help="Also require at least one invariant and defaults.initialState",
)
@click.option(
    "--json",
    "output_json",
    is_flag=True,
    help="Output the result as JSON",
)
def validate(path: Path, schema: str | None, strict: bool, output_json: bool) -> None:
    """Validate a declarative FSM definition (.json or .toml).

    Structure is checked first, then each invariant in order. The first
    failure is reported.

    Examples:

        fsmgov validate examples/definitions/voting.json

        fsmgov validate definition.json --schema default --strict
    """
    from .commands.validate_cmd import resolve_schema_path, run_validate

    exit_code = run_validate(path, resolve_schema_path(schema), strict=strict, output_json=output_json)
    sys.exit(exit_code)


@cli.command()
@click.argument("kind", type=click.Choice(sorted(ENTITY_KINDS)))
@click.argument("state", required=False)
@click.option(
    "--export",
    is_flag=True,
    help="Print the table as a declarative definition (JSON)",
)
def table(kind: str, state: str | None, export: bool) -> None:
    """Show a built-in transition table.

    Examples:

        fsmgov table grant

        fsmgov table idea Approved

        fsmgov table grant --export > grant.json
    """
    from .commands.table_cmd import run_table

    sys.exit(run_table(kind, state, export=export))


@cli.group()
def audit() -> None:
    """Audit trail commands (JSON Lines exports)."""
    pass


@audit.command("verify")
@click.argument("path", type=click.Path(exists=False, dir_okay=False, path_type=Path))
@click.option(
    "--kind",
    type=click.Choice(sorted(ENTITY_KINDS)),
    default="grant",
    show_default=True,
    help="Entity kind of the recorded states",
)
def audit_verify(path: Path, kind: str) -> None:
    """Re-record every entry against its table and check chain continuity."""
    from .commands.audit_cmd import run_audit_verify

    sys.exit(run_audit_verify(path, kind))


@audit.command("show")
@click.argument("path", type=click.Path(exists=False, dir_okay=False, path_type=Path))
@click.option(
    "--kind",
    type=click.Choice(sorted(ENTITY_KINDS)),
    default="grant",
    show_default=True,
    help="Entity kind of the recorded states",
)
@click.option("--last", "last_n", type=int, default=None, help="Only show the last N entries")
def audit_show(path: Path, kind: str, last_n: int | None) -> None:
    """Print entries of an audit export."""
    from .commands.audit_cmd import run_audit_show

    sys.exit(run_audit_show(path, kind, last_n=last_n))


def main() -> None:
    """Main entrypoint."""
    cli()


if __name__ == "__main__":
    main()
