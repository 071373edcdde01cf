"""Command-line entry point for share-keeper"""

import sys
import time
from pathlib import Path
from typing import Optional, Sequence

from rich.console import Console

from share_keeper.cli.args import parse_args
from share_keeper.config import Config
from share_keeper.constants import CONFIG_FILE_NAME
from share_keeper.core.share_keeper import ShareKeeper
from share_keeper.exceptions import ShareKeeperError
from share_keeper.formatters.status import format_state_markup
from share_keeper.logging_config import setup_logging
from share_keeper.models.status import SyncState
from share_keeper.utils.threading import get_threading_info

console = Console()


def build_config(parsed_args) -> Config:
    """Merge the JSON settings file with command-line overrides."""
    if parsed_args.config:
        config_file = Path(parsed_args.config)
    elif parsed_args.config_dir:
        config_file = Path(parsed_args.config_dir).expanduser() / CONFIG_FILE_NAME
    else:
        config_file = Config.default_config_file()

    return Config.from_file(
        config_file,
        shared_root=parsed_args.root,
        config_dir=parsed_args.config_dir,
        poll_interval=parsed_args.poll_interval,
        fetch_interval=parsed_args.fetch_interval,
        workers=parsed_args.workers,
        sequential=parsed_args.sequential or None,
        verbose=parsed_args.verbose or None,
        debug=parsed_args.debug or None,
    )


def connect_console(keeper: ShareKeeper) -> None:
    """Print every signal the keeper publishes."""
    keeper.on_syncing.connect(lambda: console.print(format_state_markup(SyncState.SYNCING)))
    keeper.on_error.connect(lambda: console.print(format_state_markup(SyncState.ERROR)))
    keeper.folder_size_changed.connect(
        lambda size: console.print(format_state_markup(SyncState.IDLE, size))
    )
    keeper.repository_list_changed.connect(
        lambda: console.print(
            f"[dim]Repositories: {', '.join(h.name for h in keeper.repositories) or 'none'}[/dim]"
        )
    )
    keeper.on_first_run.connect(
        lambda: console.print(
            "[yellow]No identity configured yet.[/yellow] "
            "Run [cyan]share-keeper --set-name NAME --set-email EMAIL[/cyan]"
        )
    )
    keeper.on_invitation.connect(
        lambda path: console.print(f"[magenta]Invitation received:[/magenta] {path}")
    )
    keeper.conflict_notification_raised.connect(
        lambda: console.print("[red]Conflict detected[/red], sync paused until it is resolved")
    )
    keeper.notification_raised.connect(
        lambda description, path: console.print(
            f"[green]{Path(path).name}[/green] {description}"
        )
    )


def print_status(keeper: ShareKeeper) -> None:
    """One-shot report without starting any worker."""
    console.print(f"[bold]Shared folder:[/bold] {keeper.shared_root}")
    repositories = keeper.find_repositories()
    if repositories:
        for path in repositories:
            console.print(f"  • {path.name}")
    else:
        console.print("  [dim]no repositories[/dim]")
    console.print(f"[bold]Size:[/bold] {keeper.get_folder_size()}")

    identity = keeper.identity
    if identity.is_set:
        console.print(f"[bold]Identity:[/bold] {identity.name} <{identity.email}>")
    else:
        console.print("[bold]Identity:[/bold] [yellow]not configured[/yellow]")
    enabled = "on" if keeper.notifications_enabled else "off"
    console.print(f"[bold]Notifications:[/bold] {enabled}")


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Main entry point for the application."""
    parsed_args = None
    keeper = None
    try:
        parsed_args = parse_args(argv)
        config = build_config(parsed_args)
        setup_logging(verbose=config.verbose, debug=config.debug, log_file=config.log_file)

        if config.debug:
            console.print("[yellow]Debug mode enabled[/yellow]")
            threading_info = get_threading_info()
            console.print("[yellow]Threading Information:[/yellow]")
            console.print(f"  Python version: {threading_info['python_version']}")
            console.print(f"  Threading mode: {threading_info['mode']}")
            console.print(f"  CPU count: {threading_info['cpu_count']}")
            console.print(f"  Optimal workers: {threading_info['optimal_workers']}")
            console.print("[yellow]Configuration:[/yellow]")
            for key, value in config.to_dict().items():
                console.print(f"  {key}: {value}")
            console.print(f"[dim]Log file: {config.log_file}[/dim]")

        keeper = ShareKeeper(config)

        if parsed_args.set_name or parsed_args.set_email or parsed_args.toggle_notifications:
            if parsed_args.set_name:
                keeper.user_name = parsed_args.set_name
            if parsed_args.set_email:
                keeper.user_email = parsed_args.set_email
            if parsed_args.toggle_notifications:
                enabled = keeper.toggle_notifications()
                console.print(f"Notifications {'on' if enabled else 'off'}")
            identity = keeper.identity
            if identity.is_set:
                console.print(f"Identity: {identity.name} <{identity.email}>")
            return 0

        if parsed_args.status:
            print_status(keeper)
            return 0

        connect_console(keeper)
        keeper.start()
        console.print(f"[cyan]Watching {config.shared_root}[/cyan] (Ctrl+C to quit)")
        while True:
            time.sleep(1)

    except KeyboardInterrupt:
        console.print("\n[yellow]Shutting down...[/yellow]")
        if keeper is not None:
            keeper.quit()
        return 0
    except ShareKeeperError as e:
        console.print(f"[red]Error: {e}[/red]")
        return 1
    except Exception as e:
        console.print(f"[red]Error: {e}[/red]")
        if parsed_args is not None and parsed_args.debug:
            console.print_exception()
        return 1


if __name__ == "__main__":
    sys.exit(main())
