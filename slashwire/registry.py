"""Command registry: the store for every registered interaction handler.

Handlers are bucketed by CommandKind so that a button and a slash
command may share a literal name. Within a bucket the identity key is
the lower-cased name; autocomplete handlers add the focused option name
normalised like the option index (lower-cased, underscores dropped), so
``search_term`` and ``searchTerm`` address the same handler. An empty
option means "fallback for the command".

Duplicates are rejected with DuplicateCommandError; nothing is ever
silently overwritten.

Registration takes a lock around check-then-insert and publishes a new
copy of the bucket, so lookups and iteration never lock and never see
a partially applied insert.
"""

import threading
from typing import Dict, Iterator, Tuple

import structlog

from .exceptions import CommandNotFoundError, DuplicateCommandError
from .models import CommandKind, RegisteredCommand
from .options import normalize_name, normalize_option_name

logger = structlog.get_logger("slashwire.registry")

RegistryKey = Tuple[str, str]


def identity_key(kind: CommandKind, name: str, option_name: str = "") -> RegistryKey:
    """Build the bucket key for ``name`` (and ``option_name`` for autocomplete)."""
    if kind == CommandKind.AUTOCOMPLETE:
        return (normalize_name(name), normalize_option_name(option_name))
    return (normalize_name(name), "")


class CommandRegistry:
    """Per-kind ordered tables of RegisteredCommand."""

    def __init__(self):
        self._lock = threading.Lock()
        self._buckets: Dict[CommandKind, Dict[RegistryKey, RegisteredCommand]] = {
            kind: {} for kind in CommandKind
        }

    def register(self, command: RegisteredCommand) -> None:
        """Insert ``command`` into its kind's bucket.

        Raises:
            DuplicateCommandError: The identity key is already taken.
                The registry is left unchanged.
        """
        key = identity_key(command.kind, command.name, command.option_name)
        with self._lock:
            bucket = self._buckets[command.kind]
            if key in bucket:
                raise DuplicateCommandError(
                    f"duplicate command registration: {command.name}",
                    kind=command.kind.value,
                    name=command.name,
                    option_name=command.option_name,
                )
            updated = dict(bucket)
            updated[key] = command
            self._buckets[command.kind] = updated
        logger.debug(
            "command_registered",
            kind=command.kind.value,
            command=key[0],
            option=key[1] or None,
            guild_id=command.guild_id or None,
        )

    def find(self, kind: CommandKind, name: str) -> RegisteredCommand:
        """Look up a handler by kind and case-insensitive name.

        For AUTOCOMPLETE only the fallback handler is considered; use
        find_autocomplete to honour the focused option.

        Raises:
            CommandNotFoundError: Nothing is registered under that name.
        """
        command = self._buckets[kind].get(identity_key(kind, name))
        if command is None:
            raise CommandNotFoundError(
                f"command not found: {name}", command_kind=kind.value, name=name
            )
        return command

    def find_autocomplete(self, name: str, option_name: str = "") -> RegisteredCommand:
        """Resolve an autocomplete handler for ``name`` and the focused option.

        The option-specific handler wins when one exists; otherwise the
        command's fallback handler is returned.

        Raises:
            CommandNotFoundError: Neither handler is registered.
        """
        bucket = self._buckets[CommandKind.AUTOCOMPLETE]
        if option_name:
            specific = bucket.get(identity_key(CommandKind.AUTOCOMPLETE, name, option_name))
            if specific is not None:
                return specific

        fallback = bucket.get(identity_key(CommandKind.AUTOCOMPLETE, name))
        if fallback is not None:
            return fallback

        raise CommandNotFoundError(
            f"command not found: {name}",
            command_kind=CommandKind.AUTOCOMPLETE.value,
            name=name,
        )

    def pairs(self, kind: CommandKind) -> Iterator[Tuple[RegistryKey, RegisteredCommand]]:
        """Yield ``(key, command)`` for ``kind`` in registration order."""
        yield from self._buckets[kind].items()

    def has(self, kind: CommandKind, name: str, option_name: str = "") -> bool:
        return identity_key(kind, name, option_name) in self._buckets[kind]

    def count(self, kind: CommandKind) -> int:
        return len(self._buckets[kind])

    def __len__(self) -> int:
        return sum(len(bucket) for bucket in self._buckets.values())
