"""Line-oriented command router for the component runtime."""

from __future__ import annotations

from typing import Callable, Dict, List, Optional, Protocol, TextIO

HELP_CMD = "help"
LIST_CMD = "list"
INFO_CMD = "info"
ENABLE_CMD = "enable"
DISABLE_CMD = "disable"
CONFIG_CMD = "config"


class ComponentCommands(Protocol):
    """Runtime registry operations the shell forwards to."""

    def list(self, bundle_id: Optional[str], out: TextIO) -> None:  # pragma: no cover - interface
        ...

    def info(self, component_id: Optional[str], out: TextIO) -> None:  # pragma: no cover - interface
        ...

    def change(self, component_id: Optional[str], out: TextIO, enable: bool) -> None:  # pragma: no cover - interface
        ...

    def config(self, out: TextIO) -> None:  # pragma: no cover - interface
        ...


_DETAILED_HELP: Dict[str, tuple[str, str]] = {
    LIST_CMD: (
        f"scr {LIST_CMD} [ <bundleId> ]",
        "This command lists registered components. If a bundle ID is\n"
        "added, only the components of the selected bundles are listed.",
    ),
    INFO_CMD: (
        f"scr {INFO_CMD} <componentId>",
        "This command dumps information of the component whose\n"
        "component ID is given as command argument.",
    ),
    ENABLE_CMD: (
        f"scr {ENABLE_CMD} <componentId>",
        "This command enables the component whose component ID\nis given as command argument.",
    ),
    DISABLE_CMD: (
        f"scr {DISABLE_CMD} <componentId>",
        "This command disables the component whose component ID\nis given as command argument.",
    ),
    CONFIG_CMD: (
        f"scr {CONFIG_CMD}",
        "This command lists the current SCR configuration.",
    ),
}

USAGE_SUMMARY = [
    f"scr {HELP_CMD} [{LIST_CMD}]",
    f"scr {LIST_CMD} [ <bundleId> ]",
    f"scr {INFO_CMD} <componentId>",
    f"scr {ENABLE_CMD} <componentId>",
    f"scr {DISABLE_CMD} <componentId>",
    f"scr {CONFIG_CMD}",
]


class ComponentShellCommand:
    """Parses ``scr <command> [arg]`` lines and forwards them to a registry handle."""

    name = "scr"
    usage = "scr help"
    short_description = "Declarative Services Runtime"

    def __init__(self, commands: ComponentCommands) -> None:
        self.commands = commands

    def execute(self, command_line: str, out: TextIO, err: TextIO) -> None:
        # first token is the invoking command name
        tokens = command_line.split()[1:]
        command = tokens[0] if tokens else HELP_CMD
        rest = tokens[1:]

        if command == HELP_CMD:
            self.help(out, rest)
            return

        handlers: Dict[str, Callable[[Optional[str]], None]] = {
            LIST_CMD: lambda arg: self.commands.list(arg, out),
            INFO_CMD: lambda arg: self.commands.info(arg, out),
            ENABLE_CMD: lambda arg: self.commands.change(arg, out, True),
            DISABLE_CMD: lambda arg: self.commands.change(arg, out, False),
            CONFIG_CMD: lambda arg: self.commands.config(out),
        }
        handler = handlers.get(command)
        if handler is None:
            print(f"Unknown command: {command}", file=err)
            return
        try:
            handler(rest[0] if rest else None)
        except ValueError as exc:
            print(str(exc), file=err)

    def help(self, out: TextIO, args: List[str]) -> None:
        topic = args[0] if args else HELP_CMD
        detail = _DETAILED_HELP.get(topic)
        if detail is None:
            for line in USAGE_SUMMARY:
                print(line, file=out)
            return
        synopsis, description = detail
        print("", file=out)
        print(synopsis, file=out)
        print("", file=out)
        print(description, file=out)
        print("", file=out)
