"""Convenience helpers for responding to interactions.

    quick reply (< 3 s)     reply(handler, interaction, content)
    slow work               defer_response(...) then followup(...)
    more messages           followup(...), repeatable
    autocomplete results    suggest(handler, interaction, choices)

Discord expects the initial response within 3 seconds. Meeting that
deadline is up to the handler; call defer_response first when the
work takes longer.
"""

from typing import TYPE_CHECKING, Any, Dict, List, Mapping, Sequence, Union

import structlog

from .exceptions import ScopeUnavailableError
from .models import Interaction, ResponseType

if TYPE_CHECKING:
    from .client import DiscordClient
    from .handler import InteractionHandler

logger = structlog.get_logger("slashwire.client")

MAX_CHOICES = 25
EPHEMERAL_FLAG = 1 << 6

Choice = Union[str, Mapping[str, Any]]


def _client(handler: "InteractionHandler") -> "DiscordClient":
    if handler.client is None:
        raise ScopeUnavailableError(
            "cannot respond to interactions without a platform client", module="context"
        )
    return handler.client


def _message(content: str, ephemeral: bool) -> Dict[str, Any]:
    data: Dict[str, Any] = {"content": content}
    if ephemeral:
        data["flags"] = EPHEMERAL_FLAG
    return data


async def reply(
    handler: "InteractionHandler",
    interaction: Interaction,
    content: str,
    *,
    ephemeral: bool = False,
) -> None:
    """Send an immediate visible (or ephemeral) reply."""
    await _client(handler).create_interaction_response(
        interaction.id,
        interaction.token,
        {
            "type": int(ResponseType.CHANNEL_MESSAGE_WITH_SOURCE),
            "data": _message(content, ephemeral),
        },
    )


async def defer_response(
    handler: "InteractionHandler",
    interaction: Interaction,
    *,
    ephemeral: bool = False,
) -> None:
    """Acknowledge now and show a "thinking..." indicator.

    Follow up later with followup().
    """
    body: Dict[str, Any] = {"type": int(ResponseType.DEFERRED_CHANNEL_MESSAGE_WITH_SOURCE)}
    if ephemeral:
        body["data"] = {"flags": EPHEMERAL_FLAG}
    await _client(handler).create_interaction_response(interaction.id, interaction.token, body)


async def followup(
    handler: "InteractionHandler",
    interaction: Interaction,
    content: str,
    *,
    ephemeral: bool = False,
) -> Any:
    """Send a followup message after the initial response or deferral.

    Returns:
        The message object created by Discord.
    """
    client = _client(handler)
    application_id = interaction.application_id or client.application_id
    return await client.create_followup_message(
        application_id, interaction.token, _message(content, ephemeral)
    )


def build_choices(choices: Sequence[Choice]) -> List[Dict[str, Any]]:
    """Normalise choices to ``{"name", "value"}`` dicts.

    Plain strings become choices whose name and value are equal.
    Anything past the first 25 is dropped, since Discord rejects more.
    """
    mapped: List[Dict[str, Any]] = []
    for choice in choices:
        if isinstance(choice, str):
            mapped.append({"name": choice, "value": choice})
        else:
            mapped.append({"name": choice["name"], "value": choice["value"]})
    if len(mapped) > MAX_CHOICES:
        logger.debug("autocomplete_choices_truncated", given=len(mapped), sent=MAX_CHOICES)
        mapped = mapped[:MAX_CHOICES]
    return mapped


async def suggest(
    handler: "InteractionHandler",
    interaction: Interaction,
    choices: Sequence[Choice],
) -> None:
    """Answer an autocomplete interaction with ``choices``."""
    await _client(handler).create_interaction_response(
        interaction.id,
        interaction.token,
        {
            "type": int(ResponseType.APPLICATION_COMMAND_AUTOCOMPLETE_RESULT),
            "data": {"choices": build_choices(choices)},
        },
    )
