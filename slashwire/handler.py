"""InteractionHandler: owner of the registry and the registration API.

There is typically one handler per bot process. Create it, register
handlers, publish the commands once the application id is known, then
forward every inbound interaction to handle_interaction::

    client = DiscordClient(token)
    handler = InteractionHandler(client, default_guild_id="123456789")

    @handler.add_slash("ping", "Replies with pong")
    async def ping(shard, interaction):
        await handler.reply(interaction, "pong")

    @handler.add_slash("sum", "Adds two numbers", params=[
        SlashParam("a", OptionType.INTEGER),
        SlashParam("b", OptionType.INTEGER),
    ])
    async def add(shard, interaction, a, b):
        await handler.reply(interaction, f"sum = {a + b}")

    await handler.register_commands()
    ...
    await handler.handle_interaction(shard, payload)

Every add_* method can be called directly with a callback or used as a
decorator. Registration errors are raised immediately.
"""

import functools
from typing import Any, Callable, Iterable, List, Mapping, Optional, Sequence, Union

from . import context, dispatch, sync
from .client import DiscordClient
from .exceptions import EmptyDescriptionError, UnknownOptionError
from .models import ApplicationCommand, CommandCallback, CommandKind, Interaction, RegisteredCommand
from .options import ParamSpec, SlashOptionIndex, SlashParam, coerce_params
from .registry import CommandRegistry
from .slashargs import extract_slash_args

Decorator = Callable[[CommandCallback], CommandCallback]


def _bind_params(callback: Callable[..., Any], params: Sequence[SlashParam]) -> CommandCallback:
    """Wrap ``callback`` so declared params arrive as keyword arguments."""

    @functools.wraps(callback)
    async def invoke(shard: Any, interaction: Interaction) -> None:
        kwargs = extract_slash_args(interaction, params)
        await callback(shard, interaction, **kwargs)

    return invoke


class InteractionHandler:
    """Wires a DiscordClient to a CommandRegistry.

    Args:
        client: REST client used for publishing commands and replying.
            May be None for dispatch-only use (tests, HTTP frontends
            that answer inline).
        default_guild_id: Guild targeted by register_commands() when
            none is given; empty means global.
    """

    def __init__(self, client: Optional[DiscordClient] = None, default_guild_id: str = ""):
        self.client = client
        self.default_guild_id = default_guild_id
        self.registry = CommandRegistry()
        self.option_index = SlashOptionIndex()

    def _add(
        self,
        kind: CommandKind,
        name: str,
        callback: CommandCallback,
        *,
        description: str = "",
        guild_id: str = "",
        option_name: str = "",
        params: Sequence[SlashParam] = (),
    ) -> None:
        if not callable(callback):
            raise TypeError(f"handler for {name!r} must be callable")
        self.registry.register(RegisteredCommand(
            kind=kind,
            name=name,
            callback=callback,
            option_name=option_name,
            description=description,
            guild_id=guild_id,
            params=tuple(params),
        ))

    @staticmethod
    def _maybe_decorate(
        callback: Optional[CommandCallback],
        register: Callable[[CommandCallback], None],
    ) -> Union[CommandCallback, Decorator]:
        if callback is not None:
            register(callback)
            return callback

        def decorator(func: CommandCallback) -> CommandCallback:
            register(func)
            return func

        return decorator

    # ------------------------------------------------------------------
    # Slash option index
    # ------------------------------------------------------------------

    def register_slash_option_names(self, command_name: str, option_names: Iterable[str]) -> None:
        """Record the option names declared for a slash command."""
        self.option_index.record(command_name, option_names)

    def slash_option_names(self, command_name: str) -> List[str]:
        return self.option_index.names(command_name)

    def has_slash_option(self, command_name: str, option_name: str) -> bool:
        return self.option_index.contains(command_name, option_name)

    # ------------------------------------------------------------------
    # Registration API
    # ------------------------------------------------------------------

    def add_slash(
        self,
        name: str,
        description: str,
        callback: Optional[Callable[..., Any]] = None,
        *,
        guild_id: str = "",
        params: Optional[Iterable[ParamSpec]] = None,
    ):
        """Register a slash command.

        Args:
            name: Command name (case-insensitive).
            description: Shown in the Discord UI; must not be empty.
            callback: ``async (shard, interaction, **params)``. Omit to
                use as a decorator.
            guild_id: Restrict the command to one guild.
            params: Declared options, as SlashParam or plain names
                (required strings). Each is extracted at dispatch time
                and passed to the callback by name. A missing required
                option raises InvalidInteractionError before the
                callback runs.

        Raises:
            EmptyDescriptionError: ``description`` is empty.
            DuplicateCommandError: ``name`` is already a slash command.
        """
        if not description:
            raise EmptyDescriptionError(
                f"slash command description must not be empty: {name}", name=name
            )
        declared = coerce_params(params or ())

        def register(func: Callable[..., Any]) -> None:
            bound = _bind_params(func, declared) if declared else func
            self._add(
                CommandKind.SLASH, name, bound,
                description=description, guild_id=guild_id, params=declared,
            )
            self.register_slash_option_names(name, [param.name for param in declared])

        return self._maybe_decorate(callback, register)

    def add_user(self, name: str, callback: Optional[CommandCallback] = None, *, guild_id: str = ""):
        """Register a user context-menu command (Apps > name on a user)."""
        return self._maybe_decorate(
            callback, lambda func: self._add(CommandKind.USER, name, func, guild_id=guild_id)
        )

    def add_message(self, name: str, callback: Optional[CommandCallback] = None, *, guild_id: str = ""):
        """Register a message context-menu command (Apps > name on a message)."""
        return self._maybe_decorate(
            callback, lambda func: self._add(CommandKind.MESSAGE, name, func, guild_id=guild_id)
        )

    def add_button(self, custom_id: str, callback: Optional[CommandCallback] = None):
        """Register a handler for button presses carrying ``custom_id``."""
        return self._maybe_decorate(
            callback, lambda func: self._add(CommandKind.BUTTON, custom_id, func)
        )

    def add_select(self, custom_id: str, callback: Optional[CommandCallback] = None):
        """Register a handler for select menus carrying ``custom_id``.

        Component interactions try buttons first, so a button registered
        under the same id takes precedence.
        """
        return self._maybe_decorate(
            callback, lambda func: self._add(CommandKind.SELECT, custom_id, func)
        )

    def add_modal(self, custom_id: str, callback: Optional[CommandCallback] = None):
        return self._maybe_decorate(
            callback, lambda func: self._add(CommandKind.MODAL, custom_id, func)
        )

    def add_autocomplete(
        self,
        name: str,
        callback: Optional[CommandCallback] = None,
        *,
        guild_id: str = "",
        option_name: str = "",
    ):
        """Register an autocomplete handler for slash command ``name``.

        With an empty ``option_name`` the handler is the fallback for
        every option of the command; otherwise it only answers for that
        option and takes precedence over the fallback.
        """
        return self._maybe_decorate(
            callback,
            lambda func: self._add(
                CommandKind.AUTOCOMPLETE, name, func,
                guild_id=guild_id, option_name=option_name,
            ),
        )

    def add_autocomplete_for_option(
        self,
        name: str,
        option_name: str,
        callback: Optional[CommandCallback] = None,
        *,
        guild_id: str = "",
    ):
        """Register an option-specific autocomplete handler, validated.

        The option must have been declared by the earlier add_slash call
        for ``name``, which catches typos at startup.

        Raises:
            UnknownOptionError: ``option_name`` is not a declared option.
        """
        if not self.has_slash_option(name, option_name):
            raise UnknownOptionError(
                f"unknown slash option for autocomplete link: {name}.{option_name}",
                command_name=name,
                option_name=option_name,
            )
        return self.add_autocomplete(name, callback, guild_id=guild_id, option_name=option_name)

    # ------------------------------------------------------------------
    # Dispatch and sync
    # ------------------------------------------------------------------

    async def handle_interaction(self, shard: Any, payload: Union[Interaction, Mapping[str, Any]]) -> bool:
        """Route one interaction to its handler. See dispatch.handle_interaction."""
        return await dispatch.handle_interaction(self, shard, payload)

    def collect_commands(self, guild_id: str = "") -> List[ApplicationCommand]:
        """Commands that register_commands() would publish for ``guild_id``."""
        return sync.collect_commands_for(self.registry, guild_id or self.default_guild_id)

    async def register_commands(self, guild_id: str = "") -> Any:
        """Publish commands for ``guild_id``. See sync.register_commands."""
        return await sync.register_commands(self, guild_id)

    # ------------------------------------------------------------------
    # Responses
    # ------------------------------------------------------------------

    async def reply(self, interaction: Interaction, content: str, *, ephemeral: bool = False) -> None:
        await context.reply(self, interaction, content, ephemeral=ephemeral)

    async def defer_response(self, interaction: Interaction, *, ephemeral: bool = False) -> None:
        await context.defer_response(self, interaction, ephemeral=ephemeral)

    async def followup(self, interaction: Interaction, content: str, *, ephemeral: bool = False) -> Any:
        return await context.followup(self, interaction, content, ephemeral=ephemeral)

    async def suggest(self, interaction: Interaction, choices: Sequence[context.Choice]) -> None:
        await context.suggest(self, interaction, choices)
