"""CLI entry point for predicate-security.

Invoked as::

    predsec [OPTIONS] COMMAND [ARGS]...

or during development::

    python -m predicate_security.cli.main

Commands
--------
- validate   Load a policy file, resolving every content type and predicate
- inspect    Show the groups and permission verdicts of a policy file
- explain    Render the decision expression for a permission and user key
- version    Show version information
"""
from __future__ import annotations

import logging
import sys
from pathlib import Path

import click
from rich import box
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from predicate_security import __version__
from predicate_security.config.loader import PolicyLoader
from predicate_security.core.errors import PredicateSecurityError
from predicate_security.core.permission_value import PermissionValue

console = Console()
err_console = Console(stderr=True)

_VERDICT_STYLES: dict[PermissionValue, str] = {
    PermissionValue.ALLOW: "green",
    PermissionValue.DENY: "red",
    PermissionValue.INHERIT: "dim",
}


def _parse_global(entries: tuple[str, ...]) -> list[tuple[str, PermissionValue]]:
    parsed: list[tuple[str, PermissionValue]] = []
    for entry in entries:
        name, sep, value = entry.partition("=")
        if not sep or not name.strip():
            raise click.BadParameter(
                f"expected NAME=VALUE, got {entry!r}", param_hint="--global"
            )
        try:
            parsed.append((name.strip(), PermissionValue.parse(value)))
        except ValueError as exc:
            raise click.BadParameter(str(exc), param_hint="--global") from exc
    return parsed


# ---------------------------------------------------------------------------
# Root command group
# ---------------------------------------------------------------------------


@click.group()
@click.version_option(version=__version__, prog_name="predsec")
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default="WARNING",
    show_default=True,
    help="Logging level for library diagnostics.",
)
def cli(log_level: str) -> None:
    """Predicate security CLI: validate, inspect and explain policy files."""
    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


# ---------------------------------------------------------------------------
# version
# ---------------------------------------------------------------------------


@cli.command(name="version")
def version_command() -> None:
    """Show detailed version information."""
    console.print(
        Panel(
            f"[bold]predicate-security[/bold]  v[cyan]{__version__}[/cyan]\n"
            "Relational permission filtering for Python collections.",
            title="Version",
            border_style="blue",
        )
    )


# ---------------------------------------------------------------------------
# validate
# ---------------------------------------------------------------------------


@cli.command(name="validate")
@click.argument("policy_file", type=click.Path(exists=True, dir_okay=False))
def validate_command(policy_file: str) -> None:
    """Load POLICY_FILE and resolve every content type and match predicate."""
    try:
        security = PolicyLoader().load(policy_file)
    except PredicateSecurityError as exc:
        console.print(
            Panel(
                f"[red]INVALID[/red]  {escape(str(exc))}",
                title="Policy Validation",
                border_style="red",
            )
        )
        sys.exit(1)

    summary = security.groups.summary()
    console.print(
        Panel(
            f"[green]VALID[/green]  {Path(policy_file).name}\n"
            f"  Groups: {summary['group_count']}  "
            f"Content types: {len(summary['content_types'])}  "  # type: ignore[arg-type]
            f"Permissions: {len(summary['permissions'])}",  # type: ignore[arg-type]
            title="Policy Validation",
            border_style="green",
        )
    )


# ---------------------------------------------------------------------------
# inspect
# ---------------------------------------------------------------------------


@cli.command(name="inspect")
@click.argument("policy_file", type=click.Path(exists=True, dir_okay=False))
def inspect_command(policy_file: str) -> None:
    """Show the groups and permission verdicts declared in POLICY_FILE.

    References are not resolved, so the application does not need to be
    importable.
    """
    try:
        document = PolicyLoader().read_document(policy_file)
    except PredicateSecurityError as exc:
        err_console.print(f"[red]Parse error:[/red] {escape(str(exc))}")
        sys.exit(1)

    permission_names = document.permission_names()
    table = Table(title=f"Security Groups ({Path(policy_file).name})", box=box.SIMPLE)
    table.add_column("Group", style="cyan")
    table.add_column("Content type", style="magenta")
    table.add_column("Match")
    for name in permission_names:
        table.add_column(name, justify="center")

    for declaration in document.groups:
        verdicts = {k.casefold(): v for k, v in declaration.permissions.items()}
        cells = []
        for name in permission_names:
            verdict = verdicts.get(name.casefold(), PermissionValue.INHERIT)
            style = _VERDICT_STYLES[verdict]
            cells.append(f"[{style}]{verdict.value}[/{style}]")
        table.add_row(
            escape(declaration.name),
            escape(declaration.content_type),
            escape(declaration.match),
            *cells,
        )

    console.print(table)
    console.print(
        f"  Reusing group names: [cyan]{document.allow_reusing_group_names}[/cyan]"
    )


# ---------------------------------------------------------------------------
# explain
# ---------------------------------------------------------------------------


@cli.command(name="explain")
@click.argument("policy_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--permission", "-p", required=True, help="Permission name to resolve.")
@click.option(
    "--content-type",
    "-t",
    "content_type_ref",
    required=True,
    help="Content type reference, as used in the policy file.",
)
@click.option(
    "--user-key",
    "-u",
    required=True,
    help="User key substituted into the match atoms.",
)
@click.option(
    "--global",
    "-g",
    "global_entries",
    multiple=True,
    help="Global permission of the user as NAME=VALUE (repeatable).",
)
def explain_command(
    policy_file: str,
    permission: str,
    content_type_ref: str,
    user_key: str,
    global_entries: tuple[str, ...],
) -> None:
    """Render the decision expression POLICY_FILE yields for a permission."""
    global_permissions = _parse_global(global_entries)
    loader = PolicyLoader()
    try:
        security = loader.load(
            policy_file,
            get_global_permissions=lambda _user: global_permissions,
        )
        content_type = loader.resolve_content_type(content_type_ref, policy_file)
    except PredicateSecurityError as exc:
        err_console.print(f"[red]Policy error:[/red] {escape(str(exc))}")
        sys.exit(1)

    decision = security.build_predicate(permission, user_key, content_type)

    table = Table(title=f"Decision for '{permission}'", box=box.SIMPLE, show_header=False)
    table.add_column("Field", style="cyan")
    table.add_column("Value")
    table.add_row("Content type", content_type.__qualname__)
    verdict_style = _VERDICT_STYLES[decision.global_verdict]
    table.add_row(
        "Global verdict",
        f"[{verdict_style}]{decision.global_verdict.value}[/{verdict_style}]",
    )
    table.add_row("Allow groups", ", ".join(g.name for g in decision.allow_groups) or "-")
    table.add_row("Deny groups", ", ".join(g.name for g in decision.deny_groups) or "-")
    console.print(table)
    console.print(Panel(Text(str(decision)), title="Expression", border_style="blue"))


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    cli()
