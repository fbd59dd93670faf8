"""Interaction dispatch: routes each inbound interaction to one handler.

Call handle_interaction from the application's interaction callback::

    async def on_interaction(shard, payload):
        try:
            await handler.handle_interaction(shard, payload)
        except HandlerError as e:
            logger.warning("dispatch_failed", kind=e.kind.value, error=str(e))

Routing by interaction type:

    APPLICATION_COMMAND      data.name + data.type -> SLASH / USER / MESSAGE
    MESSAGE_COMPONENT        data.custom_id -> BUTTON, falling back to SELECT
    AUTOCOMPLETE             data.name + focused option -> find_autocomplete
    MODAL_SUBMIT             data.custom_id -> MODAL
    PING                     ignored, returns False

Errors propagate as-is: InvalidInteractionError when the payload lacks
a routing field, CommandNotFoundError from the registry, and anything
the callback itself raises.
"""

from typing import TYPE_CHECKING, Any, Mapping, Optional, Union

import structlog
from pydantic import ValidationError

from .exceptions import (
    CommandNotFoundError,
    InvalidInteractionError,
    NotImplementedInteractionError,
)
from .models import (
    ApplicationCommandType,
    CommandKind,
    Interaction,
    InteractionType,
    RegisteredCommand,
)
from .slashargs import focused_option_name

if TYPE_CHECKING:
    from .handler import InteractionHandler

logger = structlog.get_logger("slashwire.dispatch")

_COMMAND_KINDS = {
    ApplicationCommandType.CHAT_INPUT: CommandKind.SLASH,
    ApplicationCommandType.USER: CommandKind.USER,
    ApplicationCommandType.MESSAGE: CommandKind.MESSAGE,
}


def parse_interaction(payload: Union[Interaction, Mapping[str, Any]]) -> Interaction:
    """Validate a raw interaction dict into an Interaction model.

    Raises:
        InvalidInteractionError: The payload does not match the schema.
    """
    if isinstance(payload, Interaction):
        return payload
    try:
        return Interaction.model_validate(payload)
    except ValidationError as e:
        raise InvalidInteractionError(
            "interaction payload failed validation", errors=e.error_count()
        ) from e


def _command_name(interaction: Interaction) -> Optional[str]:
    if interaction.data is None:
        return None
    return interaction.data.name


def _custom_id(interaction: Interaction) -> Optional[str]:
    if interaction.data is None:
        return None
    return interaction.data.custom_id


def _command_kind(interaction: Interaction) -> CommandKind:
    # An absent subtype is CHAT_INPUT, Discord's default
    subtype = interaction.data.type if interaction.data is not None else None
    if subtype is None:
        return CommandKind.SLASH
    try:
        return _COMMAND_KINDS[ApplicationCommandType(subtype)]
    except (KeyError, ValueError):
        raise NotImplementedInteractionError(
            f"unsupported application command type: {subtype}", command_type=subtype
        ) from None


def resolve_command(handler: "InteractionHandler", interaction: Interaction) -> Optional[RegisteredCommand]:
    """Find the handler for ``interaction`` without invoking it.

    Returns:
        The RegisteredCommand, or None for ignored interactions (PING).

    Raises:
        InvalidInteractionError: A routing field is missing.
        CommandNotFoundError: Nothing is registered for it.
        NotImplementedInteractionError: Unknown interaction type.
    """
    registry = handler.registry
    kind = interaction.type

    if kind == InteractionType.APPLICATION_COMMAND:
        name = _command_name(interaction)
        if name is None:
            raise InvalidInteractionError("application command interaction has no command name")
        return registry.find(_command_kind(interaction), name)

    if kind == InteractionType.MESSAGE_COMPONENT:
        component_id = _custom_id(interaction)
        if component_id is None:
            raise InvalidInteractionError("message component interaction has no custom id")
        try:
            return registry.find(CommandKind.BUTTON, component_id)
        except CommandNotFoundError:
            return registry.find(CommandKind.SELECT, component_id)

    if kind == InteractionType.APPLICATION_COMMAND_AUTOCOMPLETE:
        name = _command_name(interaction)
        if name is None:
            raise InvalidInteractionError("autocomplete interaction has no command name")
        focused = focused_option_name(interaction) or ""
        return registry.find_autocomplete(name, focused)

    if kind == InteractionType.MODAL_SUBMIT:
        form_id = _custom_id(interaction)
        if form_id is None:
            raise InvalidInteractionError("modal submit interaction has no custom id")
        return registry.find(CommandKind.MODAL, form_id)

    if kind == InteractionType.PING:
        return None

    raise NotImplementedInteractionError(
        f"unsupported interaction type: {kind}", interaction_type=kind
    )


async def handle_interaction(
    handler: "InteractionHandler",
    shard: Any,
    payload: Union[Interaction, Mapping[str, Any]],
) -> bool:
    """Route one interaction to its registered handler and await it.

    Args:
        handler: Owner of the registry.
        shard: Gateway context, passed through to the callback.
        payload: Parsed Interaction or the raw JSON dict.

    Returns:
        True when a handler ran, False for ignored interactions (PING).
    """
    interaction = parse_interaction(payload)
    command = resolve_command(handler, interaction)
    if command is None:
        logger.debug("interaction_ignored", interaction_id=interaction.id, type=interaction.type)
        return False

    logger.debug(
        "interaction_dispatched",
        interaction_id=interaction.id,
        kind=command.kind.value,
        command=command.name,
        option=command.option_name or None,
    )
    await command.callback(shard, interaction)
    return True
