"""Command name dispatch.

Commands are registered explicitly in a CommandTable; nothing is looked up
by attribute name. Unknown names fall back to the host's help output.
"""

import logging
import re
from collections.abc import Callable, Iterable, Iterator, Sequence
from dataclasses import dataclass

from wdiodocs.exceptions import BuildError

logger = logging.getLogger(__name__)

TRUE_VALUES = frozenset({"true", "yes", "1", "on"})
FALSE_VALUES = frozenset({"false", "no", "0", "off"})


class UsageError(BuildError):
    """Raised when a command gets arguments it cannot accept."""

    pass


def kebab_case(name: str) -> str:
    """Convert a camelCase command name to its kebab-case alias.

    Example:
        >>> kebab_case("compressCSS")
        'compress-css'
    """
    return re.sub(r"(?<=[a-z0-9])([A-Z])", r"-\1", name).lower()


def parse_bool(value: str) -> bool:
    """Parse a command-line boolean such as 'true' or 'no'.

    Raises:
        UsageError: If value is not a recognised boolean
    """
    normalized = value.strip().lower()
    if normalized in TRUE_VALUES:
        return True
    if normalized in FALSE_VALUES:
        return False
    raise UsageError(f"Expected true or false, got '{value}'")


@dataclass(frozen=True)
class Command:
    """A named operation and the arguments it accepts."""

    name: str
    handler: Callable[..., None]
    summary: str
    usage: str = ""
    min_args: int = 0
    max_args: int = 0

    @property
    def alias(self) -> str:
        return kebab_case(self.name)

    def check_args(self, args: Sequence[str]) -> None:
        if not self.min_args <= len(args) <= self.max_args:
            usage = f"{self.name} {self.usage}".strip()
            raise UsageError(f"Usage: {usage} (got {len(args)} arguments)")


class CommandTable:
    """Mapping of command names, and their kebab-case aliases, to commands."""

    def __init__(self, commands: Iterable[Command]):
        self._commands: list[Command] = []
        self._by_name: dict[str, Command] = {}
        for command in commands:
            self.register(command)

    def register(self, command: Command) -> None:
        names = {command.name, command.alias}
        taken = sorted(name for name in names if name in self._by_name)
        if taken:
            raise ValueError(f"Command name already registered: {', '.join(taken)}")

        self._commands.append(command)
        for name in names:
            self._by_name[name] = command

    def get(self, name: str) -> Command | None:
        return self._by_name.get(name)

    def __contains__(self, name: object) -> bool:
        return name in self._by_name

    def __iter__(self) -> Iterator[Command]:
        return iter(self._commands)

    def __len__(self) -> int:
        return len(self._commands)


class CommandRouter:
    """Resolve a command name and run it."""

    def __init__(self, table: CommandTable, help_fallback: Callable[[], None]):
        """Initialize router.

        Args:
            table: Registered commands
            help_fallback: Called instead of raising when a name is unknown
        """
        self.table = table
        self.help_fallback = help_fallback

    def run(self, command_name: str, args: Sequence[str] = ()) -> None:
        """Run command_name with args, or show help if it is not registered.

        Raises:
            UsageError: If the argument count does not fit the command
            BuildError: Whatever the command itself raises
        """
        command = self.table.get(command_name)
        if command is None:
            logger.debug(f"Unknown command: {command_name!r}")
            self.help_fallback()
            return

        command.check_args(args)
        command.handler(*args)


__all__ = [
    "Command",
    "CommandRouter",
    "CommandTable",
    "UsageError",
    "kebab_case",
    "parse_bool",
]
