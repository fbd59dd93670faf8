"""Domain and payload models for slashwire.

Registry models (built at registration time):
    CommandKind, RegisteredCommand, CommandCallback

Inbound payload models (pydantic, parsed from interaction JSON):
    Interaction, InteractionData, InteractionDataOption, ResolvedData,
    Component, User, Member, Role

Outbound payload models (pydantic, sent by the sync layer):
    ApplicationCommand, ApplicationCommandOption

Enums:
    CommandKind, InteractionType, ApplicationCommandType, ComponentType,
    ResponseType
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Any, Awaitable, Callable, Dict, List, Optional, Tuple

from pydantic import BaseModel, Field

from .options import OptionType, SlashParam

# Signature every handler callback must match: async (shard, interaction) -> None.
# The shard is whatever gateway context the embedding application passes in.
CommandCallback = Callable[[Any, "Interaction"], Awaitable[None]]


class CommandKind(str, Enum):
    """The interaction category a handler is registered for."""
    SLASH = "slash"
    USER = "user"
    MESSAGE = "message"
    BUTTON = "button"
    SELECT = "select"
    MODAL = "modal"
    AUTOCOMPLETE = "autocomplete"


# Kinds that exist as application commands on the Discord side
PUBLISHED_KINDS = (CommandKind.SLASH, CommandKind.USER, CommandKind.MESSAGE)


@dataclass(frozen=True)
class RegisteredCommand:
    """One registered handler, as stored in the registry.

    Attributes:
        kind: Which bucket the handler lives in.
        name: Command name or component custom id, as declared.
        callback: Coroutine function invoked at dispatch time.
        option_name: Focused option (autocomplete only; empty = fallback).
        description: Shown in the Discord UI (slash only).
        guild_id: Restricts sync to one guild; empty = global.
        params: Declared slash parameters (slash only).
    """
    kind: CommandKind
    name: str
    callback: CommandCallback
    option_name: str = ""
    description: str = ""
    guild_id: str = ""
    params: Tuple[SlashParam, ...] = ()

    @property
    def is_global(self) -> bool:
        return not self.guild_id


class InteractionType(IntEnum):
    PING = 1
    APPLICATION_COMMAND = 2
    MESSAGE_COMPONENT = 3
    APPLICATION_COMMAND_AUTOCOMPLETE = 4
    MODAL_SUBMIT = 5


class ApplicationCommandType(IntEnum):
    CHAT_INPUT = 1
    USER = 2
    MESSAGE = 3
    PRIMARY_ENTRY_POINT = 4


class ComponentType(IntEnum):
    ACTION_ROW = 1
    BUTTON = 2
    STRING_SELECT = 3
    TEXT_INPUT = 4
    USER_SELECT = 5
    ROLE_SELECT = 6
    MENTIONABLE_SELECT = 7
    CHANNEL_SELECT = 8
    LABEL = 18


SELECT_COMPONENT_TYPES = frozenset({
    ComponentType.STRING_SELECT, ComponentType.USER_SELECT,
    ComponentType.ROLE_SELECT, ComponentType.MENTIONABLE_SELECT,
    ComponentType.CHANNEL_SELECT,
})


class ResponseType(IntEnum):
    """Interaction callback types used by the context helpers."""
    PONG = 1
    CHANNEL_MESSAGE_WITH_SOURCE = 4
    DEFERRED_CHANNEL_MESSAGE_WITH_SOURCE = 5
    DEFERRED_UPDATE_MESSAGE = 6
    UPDATE_MESSAGE = 7
    APPLICATION_COMMAND_AUTOCOMPLETE_RESULT = 8
    MODAL = 9


# ---------------------------------------------------------------------------
# Inbound payload
# ---------------------------------------------------------------------------

class User(BaseModel):
    id: str
    username: str = ""
    global_name: Optional[str] = None
    discriminator: Optional[str] = None
    bot: bool = False

    @property
    def display_name(self) -> str:
        return self.global_name or self.username


class Member(BaseModel):
    user: Optional[User] = None
    nick: Optional[str] = None
    roles: List[str] = Field(default_factory=list)


class Role(BaseModel):
    id: str
    name: str = ""
    color: int = 0
    position: int = 0


class ResolvedData(BaseModel):
    """Objects Discord resolved for user/role/channel options."""

    users: Dict[str, User] = Field(default_factory=dict)
    members: Dict[str, Member] = Field(default_factory=dict)
    roles: Dict[str, Role] = Field(default_factory=dict)
    channels: Dict[str, Dict[str, Any]] = Field(default_factory=dict)
    messages: Dict[str, Dict[str, Any]] = Field(default_factory=dict)
    attachments: Dict[str, Dict[str, Any]] = Field(default_factory=dict)


class InteractionDataOption(BaseModel):
    """A (possibly nested) option node of an application command."""

    name: str
    type: int
    value: Any = None
    options: List[InteractionDataOption] = Field(default_factory=list)
    focused: bool = False


class Component(BaseModel):
    """A message or modal component node."""

    type: int
    custom_id: Optional[str] = None
    value: Optional[str] = None
    values: List[str] = Field(default_factory=list)
    components: List[Component] = Field(default_factory=list)
    component: Optional[Component] = None


class InteractionData(BaseModel):
    """The ``data`` object of an interaction.

    Application command and autocomplete interactions fill ``name``,
    ``type`` and ``options``; components and modals fill ``custom_id``.
    """

    id: Optional[str] = None
    name: Optional[str] = None
    type: Optional[int] = None
    options: List[InteractionDataOption] = Field(default_factory=list)
    resolved: ResolvedData = Field(default_factory=ResolvedData)
    target_id: Optional[str] = None
    guild_id: Optional[str] = None
    custom_id: Optional[str] = None
    component_type: Optional[int] = None
    values: List[str] = Field(default_factory=list)
    components: List[Component] = Field(default_factory=list)


class Interaction(BaseModel):
    """An inbound interaction as delivered by Discord."""

    id: str
    application_id: str = ""
    type: int
    data: Optional[InteractionData] = None
    guild_id: Optional[str] = None
    channel_id: Optional[str] = None
    member: Optional[Member] = None
    user: Optional[User] = None
    token: str = ""
    version: int = 1
    locale: Optional[str] = None
    guild_locale: Optional[str] = None
    message: Optional[Dict[str, Any]] = None

    @property
    def invoking_user(self) -> Optional[User]:
        """The user who triggered the interaction (guild or DM)."""
        if self.member is not None and self.member.user is not None:
            return self.member.user
        return self.user


# ---------------------------------------------------------------------------
# Outbound payload
# ---------------------------------------------------------------------------

class ApplicationCommandOption(BaseModel):
    name: str
    description: str
    type: OptionType = OptionType.STRING
    required: bool = True
    autocomplete: Optional[bool] = None


class ApplicationCommand(BaseModel):
    """Shape sent to the bulk-overwrite endpoint."""

    name: str
    type: ApplicationCommandType = ApplicationCommandType.CHAT_INPUT
    description: Optional[str] = None
    options: Optional[List[ApplicationCommandOption]] = None

    def to_payload(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", exclude_none=True)
