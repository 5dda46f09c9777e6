"""termtab command line interface.

Usage:
    termtab detect                          # Which terminal would be used
    termtab open DIR --label L -- CMD ...   # Open a tab running CMD in DIR
    termtab close DIR                       # Close the tab recorded for DIR
    termtab show DIR                        # Print the recorded session
    termtab config --set-terminal kitty     # Print or change config.yaml
"""

import argparse
import json
import logging
import sys
from pathlib import Path

import yaml

from termtab import __version__
from termtab.errors import TabOpenError
from termtab.models.config import TermtabConfig
from termtab.services.config_service import get_config_service
from termtab.services.lifecycle import close_worktree_tab, detect_terminal, open_worktree_tab
from termtab.services.registry import build_default_registry
from termtab.services.session_store import SessionStore

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="termtab",
        description="Open, track and close terminal tabs for background tasks",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--config", "-c", help="Path to config.yaml")
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")

    sub = parser.add_subparsers(dest="command", required=True)

    detect = sub.add_parser("detect", help="Show which terminal driver would be used")
    detect.add_argument("--json", action="store_true", help="Machine-readable output")

    open_ = sub.add_parser("open", help="Open a tab running a command in a directory")
    open_.add_argument("directory", help="Worktree directory")
    open_.add_argument("--label", "-l", default="", help="Tab title")
    open_.add_argument("--branch", "-b", default="", help="Git branch, stored with the session")

    close = sub.add_parser("close", help="Close the tab recorded for a directory")
    close.add_argument("directory", help="Worktree directory")

    show = sub.add_parser("show", help="Print the session recorded for a directory")
    show.add_argument("directory", help="Worktree directory")

    config = sub.add_parser("config", help="Print the effective configuration")
    config.add_argument("--set-terminal", metavar="NAME", help="Save preferred_terminal ('auto' clears it)")

    return parser


def load_config(config_path: str | None, directory: str | Path | None) -> TermtabConfig:
    service = get_config_service(config_path, directory)
    logger.debug(f"Using config {service.config_path}")
    return service.get_config()


def cmd_detect(args: argparse.Namespace) -> int:
    config = load_config(args.config, Path.cwd())
    registry = build_default_registry(config)
    result = detect_terminal(config, registry=registry)
    ide = registry.detect_ide()

    if args.json:
        print(
            json.dumps(
                {
                    "driver": result.driver.name,
                    "strategy": result.strategy.value,
                    "detail": result.detail,
                    "ide": ide.name if ide else None,
                },
                indent=2,
            )
        )
        return 0

    print(f"Driver:   {result.driver.name}")
    print(f"Strategy: {result.strategy.value}")
    print(f"Detail:   {result.detail}")
    if ide:
        print(f"IDE:      {ide.name} (embedded terminal, not used for tabs)")
    return 0


def cmd_open(args: argparse.Namespace) -> int:
    command = args.cmd
    if not command:
        print("error: no command given (use: termtab open DIR -- CMD ...)", file=sys.stderr)
        return 2

    config = load_config(args.config, args.directory)
    try:
        result = open_worktree_tab(
            args.directory,
            command,
            label=args.label,
            branch=args.branch,
            registry=build_default_registry(config),
            store=SessionStore(config.session_store),
            config=config,
        )
    except TabOpenError as e:
        print(f"error: {e}", file=sys.stderr)
        return 1

    session = result.session
    print(f"Opened {session.driver_name} tab ({result.detection.strategy.value}: {result.detection.detail})")
    if not session.is_addressable():
        print("Note: this tab cannot be closed automatically")
    return 0


def cmd_close(args: argparse.Namespace) -> int:
    config = load_config(args.config, args.directory)
    closed = close_worktree_tab(
        args.directory,
        registry=build_default_registry(config),
        store=SessionStore(config.session_store),
    )
    print("Closed" if closed else "Nothing closed")
    return 0


def cmd_show(args: argparse.Namespace) -> int:
    config = load_config(args.config, args.directory)
    session = SessionStore(config.session_store).read(args.directory)
    if session is None:
        print(f"No session recorded for {args.directory}")
        return 0
    print(session.model_dump_json(indent=2))
    return 0


def cmd_config(args: argparse.Namespace) -> int:
    service = get_config_service(args.config, Path.cwd())
    if args.set_terminal is None:
        config = service.get_config()
    else:
        updated = service.get_config().model_copy(update={"preferred_terminal": args.set_terminal})
        if not service.save(updated):
            print(f"error: could not write {service.config_path}", file=sys.stderr)
            return 1
        config = service.reload()
        print(f"# saved to {service.config_path}")

    print(yaml.dump(config.model_dump(mode="json"), default_flow_style=False, sort_keys=False), end="")
    return 0


COMMANDS = {
    "detect": cmd_detect,
    "open": cmd_open,
    "close": cmd_close,
    "show": cmd_show,
    "config": cmd_config,
}


def split_command(argv: list[str]) -> tuple[list[str], list[str]]:
    """Split argv at the first ``--`` into termtab arguments and the tab command."""
    if "--" not in argv:
        return argv, []
    index = argv.index("--")
    return argv[:index], argv[index + 1 :]


def main(argv: list[str] | None = None) -> int:
    """Run the termtab CLI."""
    own_args, command = split_command(sys.argv[1:] if argv is None else list(argv))
    args = build_parser().parse_args(own_args)
    args.cmd = command

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    return COMMANDS[args.command](args)


if __name__ == "__main__":
    sys.exit(main())
