#!/usr/bin/env python3
"""
DNS Records Client - Command Line Interface

Main entry point for the DNS records client CLI.
"""

import argparse
import logging
import sys
from getpass import getpass
from pathlib import Path
from typing import Dict, List, Optional

import yaml
from rich.prompt import Confirm, Prompt

from ..core.dns_records_client import DNSRecordsClient
from ..core.errors import (
    ApiError,
    DNSRecordsClientError,
    SessionExpired,
    ValidationError,
)
from ..core.list_controller import DIALOG_CREATE, DIALOG_DELETE, DIALOG_EDIT
from ..core.routes import ADMIN, DASHBOARD, LOGIN, resolve_route
from .views import (
    console,
    render_dialog_errors,
    render_identity,
    render_list,
    render_record,
)

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = "~/.config/dns-records-client/config.yaml"


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.config and not Path(args.config).expanduser().exists():
        print(f"Error: Configuration file '{args.config}' not found")
        return 1

    config = load_config(args.config or DEFAULT_CONFIG_PATH)
    config_logger(config, verbose=args.verbose)

    client = DNSRecordsClient(config)

    try:
        client.start()
        return args.handler(client, args)
    except SessionExpired:
        console.print("[red]Session expired, please log in again.[/red]")
        return 1
    except DNSRecordsClientError as e:
        console.print(f"[red]Error: {e}[/red]")
        if args.verbose:
            import traceback

            traceback.print_exc()
        return 1


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="dns-records",
        description="DNS Records Client - Manage internal DNS records",
    )
    parser.add_argument(
        "--config",
        "-c",
        help=f"Configuration file path (default: {DEFAULT_CONFIG_PATH})",
    )
    parser.add_argument(
        "--verbose", "-v", action="store_true", help="Enable verbose logging"
    )
    commands = parser.add_subparsers(dest="command", required=True)

    login = commands.add_parser("login", help="Sign in and store the session")
    login.add_argument("--username", "-u", required=True)
    login.add_argument("--password", "-p", help="Prompted for when omitted")
    login.set_defaults(handler=cmd_login)

    register = commands.add_parser("register", help="Create an account")
    register.add_argument("--username", "-u", required=True)
    register.add_argument("--password", "-p", help="Prompted for when omitted")
    register.set_defaults(handler=cmd_register)

    commands.add_parser("logout", help="End the session").set_defaults(handler=cmd_logout)
    commands.add_parser("whoami", help="Show the signed-in user").set_defaults(
        handler=cmd_whoami
    )

    records = commands.add_parser("records", help="Manage DNS records")
    record_commands = records.add_subparsers(dest="records_command", required=True)

    all_records = argparse.ArgumentParser(add_help=False)
    all_records.add_argument(
        "--all", action="store_true", help="Every user's records (admin only)"
    )

    record_list = record_commands.add_parser("list", parents=[all_records])
    record_list.add_argument("--page", type=int, default=1)
    record_list.add_argument("--search", "-s", default="")
    record_list.set_defaults(handler=cmd_records_list)

    record_show = record_commands.add_parser("show")
    record_show.add_argument("id", type=int)
    record_show.set_defaults(handler=cmd_records_show)

    record_create = record_commands.add_parser("create", parents=[all_records])
    record_create.add_argument("--domain", "-d", default="")
    record_create.add_argument("--type", "-t", default="A", choices=["A", "CNAME"])
    record_create.add_argument("--value", default="")
    record_create.set_defaults(handler=cmd_records_create)

    record_update = record_commands.add_parser("update", parents=[all_records])
    record_update.add_argument("id", type=int)
    record_update.add_argument("--domain", "-d")
    record_update.add_argument("--type", "-t", choices=["A", "CNAME"])
    record_update.add_argument("--value")
    record_update.set_defaults(handler=cmd_records_update)

    record_delete = record_commands.add_parser("delete", parents=[all_records])
    record_delete.add_argument("id", type=int)
    record_delete.add_argument("--yes", "-y", action="store_true", help="Skip confirmation")
    record_delete.set_defaults(handler=cmd_records_delete)

    users = commands.add_parser("users", help="Administer user accounts (admin only)")
    user_commands = users.add_subparsers(dest="users_command", required=True)
    user_commands.add_parser("list").set_defaults(handler=cmd_users_list)
    for name, enabled in (("enable", True), ("disable", False), ("toggle", None)):
        user_command = user_commands.add_parser(name)
        user_command.add_argument("id", type=int)
        user_command.set_defaults(handler=cmd_users_status, enabled=enabled)

    browse = commands.add_parser(
        "browse", parents=[all_records], help="Page through records interactively"
    )
    browse.set_defaults(handler=cmd_browse)

    return parser


def load_config(config_path: str) -> Dict:
    """Load configuration from YAML file."""
    path = Path(config_path).expanduser()
    try:
        with open(path, "r") as f:
            config = yaml.safe_load(f) or {}
        logger.info(f"Configuration loaded from {path}")
        return config
    except FileNotFoundError:
        logger.debug(f"Config file {path} not found, using defaults")
        return get_default_config()
    except yaml.YAMLError as e:
        print(f"Error: Could not parse config file {path}: {e}")
        sys.exit(1)


def get_default_config() -> Dict:
    """Return default configuration."""
    return {
        "api": {"base_url": "http://localhost:8080/api/v1", "timeout": 10},
        "session": {"token_file": "~/.config/dns-records-client/session.yaml"},
        "records": {
            "page_size": 10,
            "search_debounce": 0.5,
            "reset_page_on_search": True,
        },
        "logging": {"level": "WARNING"},
    }


def config_logger(config: Dict, verbose: bool = False):
    """Configure logging."""
    logging_config = config.get("logging") or {}
    log_level = "DEBUG" if verbose else logging_config.get("level", "WARNING")

    # stdout carries the tables; logs go to stderr.
    handlers = [logging.StreamHandler(sys.stderr)]
    log_file = logging_config.get("file")
    if log_file:
        handlers.append(logging.FileHandler(Path(log_file).expanduser()))

    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=handlers,
    )


def _gate(client: DNSRecordsClient, route: str) -> Optional[str]:
    """Resolve a view, printing the redirect notice; None means not signed in."""
    resolved = resolve_route(client.session, route)
    if resolved == LOGIN:
        console.print("[red]Not logged in. Run 'dns-records login' first.[/red]")
        return None
    if route == ADMIN and resolved == DASHBOARD:
        console.print("[yellow]Admin access required, showing your dashboard.[/yellow]")
    return resolved


def _record_view(client: DNSRecordsClient, args) -> Optional[str]:
    return _gate(client, ADMIN if getattr(args, "all", False) else DASHBOARD)


def _records_title(admin: bool) -> str:
    return "All DNS Records" if admin else "My DNS Records"


def _show_dashboard(client: DNSRecordsClient) -> int:
    controller = client.record_list(admin=False)
    controller.fetch_page()
    render_list(controller, _records_title(False))
    return 1 if controller.error else 0


def _ask_password(password: Optional[str]) -> str:
    return password if password is not None else getpass("Password: ")


def cmd_login(client: DNSRecordsClient, args) -> int:
    try:
        identity = client.session.login(args.username, _ask_password(args.password))
    except ValidationError as e:
        for message in e.errors.values():
            console.print(f"[red]{message}[/red]")
        return 1
    except ApiError as e:
        console.print(f"[red]{e.message or 'Invalid username or password'}[/red]")
        return 1

    if identity is None:
        console.print("[red]The server issued an unusable access token.[/red]")
        return 1

    console.print("[green]Logged in.[/green]")
    render_identity(identity)
    return 0


def cmd_register(client: DNSRecordsClient, args) -> int:
    try:
        client.session.register(args.username, _ask_password(args.password))
    except ValidationError as e:
        for message in e.errors.values():
            console.print(f"[red]{message}[/red]")
        return 1
    except ApiError as e:
        console.print(f"[red]{e.message}[/red]")
        return 1

    console.print("[green]Account created. You can now log in.[/green]")
    return 0


def cmd_logout(client: DNSRecordsClient, args) -> int:
    client.session.logout()
    console.print("Logged out.")
    return 0


def cmd_whoami(client: DNSRecordsClient, args) -> int:
    if _gate(client, DASHBOARD) is None:
        return 1
    render_identity(client.session.identity)
    return 0


def cmd_records_list(client: DNSRecordsClient, args) -> int:
    view = _record_view(client, args)
    if view is None:
        return 1

    admin = view == ADMIN
    controller = client.record_list(admin=admin)
    if not controller.load(page=args.page, search=args.search) and not controller.error:
        console.print(
            f"[yellow]Page {args.page} is out of range, showing page {controller.page}.[/yellow]"
        )

    render_list(controller, _records_title(admin))
    return 1 if controller.error else 0


def cmd_records_show(client: DNSRecordsClient, args) -> int:
    if _gate(client, DASHBOARD) is None:
        return 1
    record = _load_record(client, args.id)
    if record is None:
        return 1
    render_record(record)
    return 0


def _submit(controller, form: Dict[str, str], done: str) -> int:
    if not controller.submit_form(form):
        render_dialog_errors(controller.dialog)
        return 1
    console.print(f"[green]{done}[/green]")
    render_list(controller, _records_title(controller.admin))
    return 0


def cmd_records_create(client: DNSRecordsClient, args) -> int:
    view = _record_view(client, args)
    if view is None:
        return 1

    controller = client.record_list(admin=view == ADMIN)
    controller.open_dialog(DIALOG_CREATE)
    form = {"DomainName": args.domain, "Type": args.type, "Value": args.value}
    return _submit(controller, form, "Record created.")


def _load_record(client: DNSRecordsClient, record_id: int):
    try:
        return client.records_api.get(record_id)
    except SessionExpired:
        raise
    except ApiError as e:
        console.print(f"[red]{e.message or f'Record {record_id} not found.'}[/red]")
        return None


def cmd_records_update(client: DNSRecordsClient, args) -> int:
    view = _record_view(client, args)
    if view is None:
        return 1

    record = _load_record(client, args.id)
    if record is None:
        return 1

    controller = client.record_list(admin=view == ADMIN)
    dialog = controller.open_dialog(DIALOG_EDIT, record)
    form = dict(dialog.form)
    if args.domain is not None:
        form["DomainName"] = args.domain
    if args.type is not None:
        form["Type"] = args.type
    if args.value is not None:
        form["Value"] = args.value
    return _submit(controller, form, "Record updated.")


def cmd_records_delete(client: DNSRecordsClient, args) -> int:
    view = _record_view(client, args)
    if view is None:
        return 1

    record = _load_record(client, args.id)
    if record is None:
        return 1

    if not args.yes and not Confirm.ask(
        f"Are you sure you want to delete the record for {record.domain_name}?",
        console=console,
    ):
        console.print("Cancelled.")
        return 0

    controller = client.record_list(admin=view == ADMIN)
    controller.open_dialog(DIALOG_DELETE, record)
    if not controller.confirm_delete():
        render_dialog_errors(controller.dialog)
        return 1
    console.print("[green]Record deleted.[/green]")
    render_list(controller, _records_title(controller.admin))
    return 0


def cmd_users_list(client: DNSRecordsClient, args) -> int:
    view = _gate(client, ADMIN)
    if view is None:
        return 1
    if view != ADMIN:
        return _show_dashboard(client)

    controller = client.user_admin()
    controller.fetch_page()
    render_list(controller, "Users")
    return 1 if controller.error else 0


def cmd_users_status(client: DNSRecordsClient, args) -> int:
    view = _gate(client, ADMIN)
    if view is None:
        return 1
    if view != ADMIN:
        return _show_dashboard(client)

    controller = client.user_admin()
    if not controller.fetch_page():
        render_list(controller, "Users")
        return 1

    user = controller.find(args.id)
    if user is None:
        console.print(f"[red]User {args.id} not found.[/red]")
        return 1

    if args.enabled is not None and user.enabled == args.enabled:
        state = "enabled" if user.enabled else "disabled"
        console.print(f"User {user.username} is already {state}.")
        return 0

    if not controller.toggle_status(user):
        console.print(f"[red]{controller.status_error}[/red]")
        return 1

    render_list(controller, "Users")
    return 0


BROWSE_HELP = "[n]ext  [p]rev  [g N] go to page  [s TERM] search  [r]efresh  [q]uit"


def cmd_browse(client: DNSRecordsClient, args) -> int:
    view = _record_view(client, args)
    if view is None:
        return 1

    admin = view == ADMIN
    controller = client.record_list(admin=admin)
    controller.fetch_page()

    try:
        while True:
            render_list(controller, _records_title(admin))
            answer = Prompt.ask(BROWSE_HELP, default="q", console=console)
            command, _, argument = answer.strip().partition(" ")

            if command == "q":
                break
            elif command == "n":
                if not controller.next_page():
                    console.print("[yellow]Already on the last page.[/yellow]")
            elif command == "p":
                if not controller.previous_page():
                    console.print("[yellow]Already on the first page.[/yellow]")
            elif command == "g":
                try:
                    target = int(argument)
                except ValueError:
                    console.print("[red]Usage: g <page>[/red]")
                    continue
                if not controller.change_page(target):
                    console.print(f"[yellow]Page {target} is out of range.[/yellow]")
            elif command == "s":
                # Each prompt line is a complete search; skip the quiet window.
                controller.set_search(argument.strip())
                controller.flush_search()
            elif command == "r":
                controller.fetch_page()
            else:
                console.print(f"[red]Unknown command: {command}[/red]")
    finally:
        controller.close()

    return 0


if __name__ == "__main__":
    sys.exit(main())
