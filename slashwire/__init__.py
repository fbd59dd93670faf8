"""slashwire: interaction-first command handling for Discord.

Register slash commands, context-menu commands, buttons, selects,
modals and autocomplete handlers on an InteractionHandler, publish the
application commands with register_commands(), and route each inbound
interaction to exactly one handler with handle_interaction().
"""

from .client import DiscordClient
from .componentargs import custom_id, modal_value, modal_values, select_values
from .dispatch import handle_interaction, parse_interaction
from .exceptions import (
    CommandNotFoundError,
    ConfigurationError,
    DuplicateCommandError,
    EmptyDescriptionError,
    ErrorCategory,
    HandlerError,
    HandlerErrorKind,
    InvalidInteractionError,
    NotImplementedInteractionError,
    PlatformAPIError,
    RegistrationError,
    ScopeUnavailableError,
    SlashwireError,
    UnknownOptionError,
)
from .handler import InteractionHandler
from .models import (
    ApplicationCommand,
    ApplicationCommandOption,
    CommandKind,
    Interaction,
    InteractionType,
    RegisteredCommand,
)
from .options import OptionType, SlashOptionIndex, SlashParam, normalize_option_name
from .registry import CommandRegistry
from .slashargs import (
    focused_option,
    focused_option_name,
    focused_option_value,
    get_slash_arg,
    require_slash_arg,
    slash_options,
)
from .sync import collect_commands_for, register_commands

__version__ = "0.1.0"

__all__ = [
    # Core
    "InteractionHandler",
    "CommandRegistry",
    "RegisteredCommand",
    "CommandKind",
    "SlashOptionIndex",
    "SlashParam",
    "OptionType",
    "normalize_option_name",
    # Dispatch and sync
    "handle_interaction",
    "parse_interaction",
    "collect_commands_for",
    "register_commands",
    # Payload models
    "Interaction",
    "InteractionType",
    "ApplicationCommand",
    "ApplicationCommandOption",
    # Client
    "DiscordClient",
    # Extraction helpers
    "slash_options",
    "focused_option",
    "focused_option_name",
    "focused_option_value",
    "get_slash_arg",
    "require_slash_arg",
    "custom_id",
    "select_values",
    "modal_values",
    "modal_value",
    # Errors
    "SlashwireError",
    "ErrorCategory",
    "RegistrationError",
    "DuplicateCommandError",
    "EmptyDescriptionError",
    "UnknownOptionError",
    "HandlerError",
    "HandlerErrorKind",
    "CommandNotFoundError",
    "InvalidInteractionError",
    "NotImplementedInteractionError",
    "ConfigurationError",
    "ScopeUnavailableError",
    "PlatformAPIError",
]
