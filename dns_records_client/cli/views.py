"""
Terminal views for the DNS records client.

Rendering only: tables, pager footers and dialog feedback are drawn with
rich from the state held by the list controllers and the session.
"""

from typing import Optional

from rich.console import Console
from rich.table import Table

from ..core.list_controller import Dialog, ResourceListController

console = Console()


def pager_summary(controller: ResourceListController) -> str:
    """Footer text matching the web pager."""
    total = controller.total_count
    if not controller.paginated:
        return f"{total} {controller.noun}s"

    first = min((controller.page - 1) * controller.page_size + 1, total)
    last = min(controller.page * controller.page_size, total)
    pages = controller.last_page if controller.last_page > 0 else 1
    return f"Showing {first} to {last} of {total} results  |  Page {controller.page} of {pages}"


def render_list(controller: ResourceListController, title: str) -> None:
    # A failed fetch replaces the table.
    if controller.error:
        console.print(f"[red]{controller.error}[/red]")
        return

    table = Table(title=title)
    for column in controller.columns:
        table.add_column(column.header, style="cyan" if column.accessor == "domain_name" else None)

    for item in controller.items:
        table.add_row(*[column.value(item) for column in controller.columns])

    console.print(table)
    if controller.debounced_search_term:
        console.print(f"[blue]Search: {controller.debounced_search_term}[/blue]")
    console.print(pager_summary(controller))


def render_dialog_errors(dialog: Optional[Dialog]) -> None:
    if dialog is None:
        return
    if dialog.server_error:
        console.print(f"[red]{dialog.server_error}[/red]")
    for field_name, message in dialog.field_errors.items():
        console.print(f"[red]{field_name}: {message}[/red]")


def render_record(record) -> None:
    table = Table(title=f"DNS Record {record.id}", show_header=False)
    table.add_column("Field", style="cyan")
    table.add_column("Value")
    table.add_row("Domain Name", record.domain_name)
    table.add_row("Type", record.record_type)
    table.add_row("Value", record.value)
    if record.owner_username:
        table.add_row("Owner", record.owner_username)
    table.add_row("Created", record.created_at or "")
    table.add_row("Updated", record.updated_at or "")
    console.print(table)


def render_identity(identity) -> None:
    console.print(
        f"[green]{identity.username}[/green] (id {identity.id}, role {identity.role})"
    )
