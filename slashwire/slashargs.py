"""Typed extraction of slash-command options from an Interaction.

Two families of helpers:

- ``get_slash_arg`` returns the value, or None when the option is
  absent or carries a different type.
- ``require_slash_arg`` returns the value or raises
  InvalidInteractionError.

Supported types: STRING, INTEGER, BOOLEAN, NUMBER, USER and ROLE.
USER and ROLE values are resolved through ``data.resolved``.

For autocomplete interactions, ``focused_option``,
``focused_option_name`` and ``focused_option_value`` describe the
option the user is currently typing in.
"""

from typing import Any, Dict, Iterable, Optional

from .exceptions import InvalidInteractionError
from .models import (
    ApplicationCommandType,
    Interaction,
    InteractionDataOption,
    InteractionType,
)
from .options import EXTRACTABLE_TYPES, OptionType, SlashParam, normalize_option_name

_SUB_COMMAND_TYPES = (OptionType.SUB_COMMAND, OptionType.SUB_COMMAND_GROUP)


def _tail_options(options: Iterable[InteractionDataOption]) -> Dict[str, InteractionDataOption]:
    """Unwrap sub-command groups down to the leaf options."""
    current = list(options)
    while len(current) == 1 and current[0].type in _SUB_COMMAND_TYPES:
        current = current[0].options
    return {normalize_option_name(opt.name): opt for opt in current}


def slash_options(interaction: Interaction) -> Dict[str, InteractionDataOption]:
    """Return the leaf options of a slash (or slash autocomplete) interaction.

    Any other interaction yields an empty dict so callers can iterate
    without guards. Keys are normalised option names.
    """
    if interaction.type not in (
        InteractionType.APPLICATION_COMMAND,
        InteractionType.APPLICATION_COMMAND_AUTOCOMPLETE,
    ):
        return {}
    data = interaction.data
    if data is None:
        return {}
    if data.type is not None and data.type != ApplicationCommandType.CHAT_INPUT:
        return {}
    return _tail_options(data.options)


def focused_option(interaction: Interaction) -> Optional[InteractionDataOption]:
    for opt in slash_options(interaction).values():
        if opt.focused:
            return opt
    return None


def focused_option_name(interaction: Interaction) -> Optional[str]:
    """Name of the option being typed in during autocomplete."""
    opt = focused_option(interaction)
    return opt.name if opt is not None else None


def focused_option_value(interaction: Interaction) -> Optional[str]:
    """The partial value typed so far, always as a string.

    Returns None when nothing is focused or the value is not a
    string, integer, number or boolean.
    """
    opt = focused_option(interaction)
    if opt is None or opt.value is None:
        return None
    value = opt.value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (str, int, float)):
        return str(value)
    return None


def _coerce(interaction: Interaction, opt: InteractionDataOption, option_type: OptionType) -> Any:
    if opt.type != option_type:
        return None
    value = opt.value
    resolved = interaction.data.resolved if interaction.data is not None else None

    if option_type == OptionType.STRING:
        return value if isinstance(value, str) else None
    if option_type == OptionType.INTEGER:
        if isinstance(value, bool) or not isinstance(value, int):
            return None
        return value
    if option_type == OptionType.BOOLEAN:
        return value if isinstance(value, bool) else None
    if option_type == OptionType.NUMBER:
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            return None
        return float(value)
    if option_type == OptionType.USER:
        if resolved is None:
            return None
        return resolved.users.get(str(value))
    if option_type == OptionType.ROLE:
        if resolved is None:
            return None
        return resolved.roles.get(str(value))
    return None


def get_slash_arg(interaction: Interaction, name: str, option_type: OptionType) -> Any:
    """Extract a slash option by (normalised) name.

    Args:
        interaction: The slash command interaction.
        name: Option name; ``snake_case`` and ``camelCase`` both match.
        option_type: Expected type. USER returns a User, ROLE a Role.

    Returns:
        The coerced value, or None when absent or of another type.
    """
    if option_type not in EXTRACTABLE_TYPES:
        raise ValueError(f"unsupported slash option type: {option_type!r}")
    opt = slash_options(interaction).get(normalize_option_name(name))
    if opt is None:
        return None
    return _coerce(interaction, opt, option_type)


def require_slash_arg(interaction: Interaction, name: str, option_type: OptionType) -> Any:
    """Same as get_slash_arg, but a missing value is an invalid interaction."""
    value = get_slash_arg(interaction, name, option_type)
    if value is None:
        raise InvalidInteractionError(
            f"missing or invalid slash option: {name}", option=name
        )
    return value


def extract_slash_args(interaction: Interaction, params: Iterable[SlashParam]) -> Dict[str, Any]:
    """Extract every declared parameter into a kwargs dict.

    Raises:
        InvalidInteractionError: A required parameter is missing.
    """
    kwargs: Dict[str, Any] = {}
    for param in params:
        if param.required:
            kwargs[param.name] = require_slash_arg(interaction, param.name, param.type)
        else:
            kwargs[param.name] = get_slash_arg(interaction, param.name, param.type)
    return kwargs
