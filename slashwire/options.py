"""Slash option declarations and the per-command option index.

Key classes:
    OptionType: Discord application command option types.
    SlashParam: One declared slash parameter (name, type, required).
    SlashOptionIndex: Known option names per slash command, used to
        validate option-linked autocomplete registrations.

Key functions:
    normalize_name: ASCII-only lower-casing shared by every name lookup.
    normalize_option_name: Lower-cases and strips underscores so
        ``snake_case``, ``camelCase`` and ``PascalCase`` collapse to
        the same key.
"""

import threading
from dataclasses import dataclass
from enum import IntEnum
from typing import Dict, Iterable, List, Tuple, Union


class OptionType(IntEnum):
    """Application command option type, as sent by Discord."""
    SUB_COMMAND = 1
    SUB_COMMAND_GROUP = 2
    STRING = 3
    INTEGER = 4
    BOOLEAN = 5
    USER = 6
    CHANNEL = 7
    ROLE = 8
    MENTIONABLE = 9
    NUMBER = 10
    ATTACHMENT = 11


# Types get_slash_arg knows how to coerce
EXTRACTABLE_TYPES = frozenset({
    OptionType.STRING, OptionType.INTEGER, OptionType.BOOLEAN,
    OptionType.NUMBER, OptionType.USER, OptionType.ROLE,
})


_ASCII_LOWER = str.maketrans(
    "ABCDEFGHIJKLMNOPQRSTUVWXYZ", "abcdefghijklmnopqrstuvwxyz"
)


def normalize_name(name: str) -> str:
    """Lower-case ASCII letters only, matching Discord's name rules."""
    return name.translate(_ASCII_LOWER)


def normalize_option_name(name: str) -> str:
    """Return the lookup key for an option name (lossy on purpose)."""
    return normalize_name(name).replace("_", "")


@dataclass(frozen=True)
class SlashParam:
    """A slash command parameter declared alongside its handler.

    The handler receives the extracted value as a keyword argument
    named ``name``. Optional parameters arrive as None when absent.

    Attributes:
        name: Parameter name; also the published option name (lower-cased).
        type: Expected option type.
        required: Whether a missing value is an invalid interaction.
        description: Shown in the Discord UI; defaults to the name.
        autocomplete: Ask Discord to send autocomplete requests for it.
    """
    name: str
    type: OptionType = OptionType.STRING
    required: bool = True
    description: str = ""
    autocomplete: bool = False

    @property
    def key(self) -> str:
        return normalize_option_name(self.name)


ParamSpec = Union[str, SlashParam]


def coerce_params(params: Iterable[ParamSpec]) -> Tuple[SlashParam, ...]:
    """Turn plain option names into STRING SlashParams."""
    result = []
    for param in params:
        if isinstance(param, SlashParam):
            result.append(param)
        elif isinstance(param, str):
            result.append(SlashParam(name=param))
        else:
            raise TypeError(
                f"slash params must be str or SlashParam, got {type(param).__name__}"
            )
    return tuple(result)


class SlashOptionIndex:
    """Maps a normalised command name to its declared option names.

    Recording a command again replaces its list; nothing is merged.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._options: Dict[str, Tuple[str, ...]] = {}

    def record(self, command_name: str, option_names: Iterable[str]) -> None:
        """Store the normalised, de-duplicated option names for a command.

        Args:
            command_name: Slash command name (case-insensitive).
            option_names: Declared names in declaration order. Empty
                names are skipped; the first occurrence of a duplicate wins.
        """
        normalized: List[str] = []
        for item in option_names:
            option = normalize_option_name(item)
            if option and option not in normalized:
                normalized.append(option)
        with self._lock:
            self._options[normalize_name(command_name)] = tuple(normalized)

    def names(self, command_name: str) -> List[str]:
        """Return the recorded option names, or an empty list."""
        return list(self._options.get(normalize_name(command_name), ()))

    def contains(self, command_name: str, option_name: str) -> bool:
        """Whether ``option_name`` was declared for ``command_name``."""
        recorded = self._options.get(normalize_name(command_name))
        if recorded is None:
            return False
        return normalize_option_name(option_name) in recorded

    def __len__(self) -> int:
        return len(self._options)
