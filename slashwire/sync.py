"""Command synchronisation: bulk-overwrites application commands on Discord.

Only application commands are published. Buttons, selects, modals and
autocomplete handlers are dispatched locally and have no server-side
registration.

    SLASH      lower-cased name, description, options
    USER       name only (context menu)
    MESSAGE    name only (context menu)

Guild-scoped commands update instantly; global commands can take up to
an hour to propagate, so a default guild is handy during development.
"""

from typing import TYPE_CHECKING, Any, List

import structlog

from .exceptions import ScopeUnavailableError
from .models import (
    PUBLISHED_KINDS,
    ApplicationCommand,
    ApplicationCommandOption,
    ApplicationCommandType,
    CommandKind,
    RegisteredCommand,
)
from .options import OptionType, normalize_name
from .registry import CommandRegistry

if TYPE_CHECKING:
    from .handler import InteractionHandler

logger = structlog.get_logger("slashwire.sync")

_AUTOCOMPLETE_TYPES = (OptionType.STRING, OptionType.INTEGER, OptionType.NUMBER)


def _slash_options(registry: CommandRegistry, command: RegisteredCommand) -> List[ApplicationCommandOption]:
    options = []
    for param in command.params:
        autocomplete = param.autocomplete or registry.has(
            CommandKind.AUTOCOMPLETE, command.name, param.name
        )
        options.append(ApplicationCommandOption(
            name=normalize_name(param.name),
            description=param.description or param.name,
            type=param.type,
            required=param.required,
            autocomplete=True if autocomplete and param.type in _AUTOCOMPLETE_TYPES else None,
        ))
    # Discord rejects required options after optional ones
    options.sort(key=lambda opt: not opt.required)
    return options


def to_application_command(registry: CommandRegistry, command: RegisteredCommand) -> ApplicationCommand:
    """Map a registered slash/user/message command to its publish shape."""
    if command.kind == CommandKind.SLASH:
        # Discord only accepts lower-case slash names; context menus keep theirs
        return ApplicationCommand(
            name=normalize_name(command.name),
            type=ApplicationCommandType.CHAT_INPUT,
            description=command.description,
            options=_slash_options(registry, command) or None,
        )
    if command.kind == CommandKind.USER:
        return ApplicationCommand(name=command.name, type=ApplicationCommandType.USER)
    if command.kind == CommandKind.MESSAGE:
        return ApplicationCommand(name=command.name, type=ApplicationCommandType.MESSAGE)
    raise ValueError(f"{command.kind.value} handlers are not published")


def collect_commands_for(registry: CommandRegistry, guild_id: str) -> List[ApplicationCommand]:
    """Gather the slash, user and message commands to publish for ``guild_id``.

    A command is included when it is global or scoped to exactly that
    guild. Order is SLASH, USER, MESSAGE, each in registration order.
    """
    result = []
    for kind in PUBLISHED_KINDS:
        for _, command in registry.pairs(kind):
            if command.is_global or command.guild_id == guild_id:
                result.append(to_application_command(registry, command))
    return result


async def register_commands(handler: "InteractionHandler", guild_id: str = "") -> Any:
    """Bulk-overwrite all registered commands for one guild (or globally).

    Replaces every command previously published in that scope. Must be
    called once the client knows the application id, typically when
    the gateway reports ready.

    Args:
        handler: Owner of the registry and the client.
        guild_id: Target guild. Falls back to ``handler.default_guild_id``;
            when both are empty the commands are published globally.

    Returns:
        The platform's response body.

    Raises:
        ScopeUnavailableError: No client, or the application id is unknown.
    """
    target = guild_id or handler.default_guild_id
    payload = collect_commands_for(handler.registry, target)

    client = handler.client
    if client is None:
        raise ScopeUnavailableError("cannot register commands without a platform client")
    application_id = client.application_id
    if not application_id:
        raise ScopeUnavailableError(
            "cannot register commands before the application id is available"
        )

    result = await client.bulk_overwrite_application_commands(
        application_id,
        [command.to_payload() for command in payload],
        guild_id=target,
    )
    logger.info(
        "commands_synced",
        scope=target or "global",
        count=len(payload),
        names=[command.name for command in payload],
    )
    return result
