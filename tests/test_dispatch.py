"""Tests for interaction dispatch."""

from unittest.mock import AsyncMock

import pytest

from slashwire import (
    CommandNotFoundError,
    HandlerErrorKind,
    InteractionHandler,
    InvalidInteractionError,
    NotImplementedInteractionError,
    OptionType,
    SlashParam,
)
from slashwire.client import DiscordClient
from slashwire.dispatch import parse_interaction
from slashwire.models import Interaction


def _payload(interaction_type, data=None, **extra):
    payload = {
        "id": "111",
        "application_id": "999",
        "type": interaction_type,
        "token": "tok",
    }
    if data is not None:
        payload["data"] = data
    payload.update(extra)
    return payload


def _command(name, command_type=1, options=None):
    data = {"id": "c1", "type": command_type, "options": options or []}
    if name is not None:
        data["name"] = name
    return _payload(2, data)


def _component(custom_id, component_type=2, values=None):
    data = {"component_type": component_type, "values": values or []}
    if custom_id is not None:
        data["custom_id"] = custom_id
    return _payload(3, data)


def _autocomplete(name, options=None):
    data = {"id": "c1", "type": 1, "options": options or []}
    if name is not None:
        data["name"] = name
    return _payload(4, data)


def _modal(custom_id, components=None):
    data = {"components": components or []}
    if custom_id is not None:
        data["custom_id"] = custom_id
    return _payload(5, data)


# -------------------------------------------------------------------
# Application commands
# -------------------------------------------------------------------

class TestApplicationCommands:

    @pytest.mark.asyncio
    async def test_slash_dispatch(self):
        handler = InteractionHandler()
        callback = AsyncMock()
        handler.add_slash("ping", "Pong!", callback)
        shard = object()

        handled = await handler.handle_interaction(shard, _command("PING"))

        assert handled is True
        callback.assert_awaited_once()
        called_shard, interaction = callback.await_args.args
        assert called_shard is shard
        assert isinstance(interaction, Interaction)
        assert interaction.data.name == "PING"

    @pytest.mark.asyncio
    async def test_user_and_message_menus(self):
        handler = InteractionHandler()
        user_cb, message_cb, slash_cb = AsyncMock(), AsyncMock(), AsyncMock()
        handler.add_user("info", user_cb)
        handler.add_message("info", message_cb)
        handler.add_slash("info", "Slash info", slash_cb)

        await handler.handle_interaction(None, _command("info", command_type=2))
        await handler.handle_interaction(None, _command("info", command_type=3))

        user_cb.assert_awaited_once()
        message_cb.assert_awaited_once()
        slash_cb.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_missing_subtype_defaults_to_slash(self):
        handler = InteractionHandler()
        callback = AsyncMock()
        handler.add_slash("ping", "Pong!", callback)
        payload = _payload(2, {"name": "ping"})
        assert await handler.handle_interaction(None, payload) is True
        callback.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_unsupported_subtype_not_aliased_to_slash(self):
        handler = InteractionHandler()
        callback = AsyncMock()
        handler.add_slash("launch", "Launch", callback)
        with pytest.raises(NotImplementedInteractionError) as exc_info:
            await handler.handle_interaction(None, _command("launch", command_type=4))
        assert exc_info.value.kind == HandlerErrorKind.NOT_IMPLEMENTED
        callback.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_missing_name_is_invalid_not_not_found(self):
        handler = InteractionHandler()
        with pytest.raises(InvalidInteractionError) as exc_info:
            await handler.handle_interaction(None, _command(None))
        assert exc_info.value.kind == HandlerErrorKind.INVALID_INTERACTION

    @pytest.mark.asyncio
    async def test_missing_data_is_invalid(self):
        handler = InteractionHandler()
        with pytest.raises(InvalidInteractionError):
            await handler.handle_interaction(None, _payload(2))

    @pytest.mark.asyncio
    async def test_unknown_command_not_found(self):
        handler = InteractionHandler()
        with pytest.raises(CommandNotFoundError) as exc_info:
            await handler.handle_interaction(None, _command("nope"))
        assert exc_info.value.kind == HandlerErrorKind.NOT_FOUND

    @pytest.mark.asyncio
    async def test_callback_errors_propagate_unchanged(self):
        handler = InteractionHandler()
        boom = RuntimeError("boom")
        handler.add_slash("fail", "Fails", AsyncMock(side_effect=boom))
        with pytest.raises(RuntimeError) as exc_info:
            await handler.handle_interaction(None, _command("fail"))
        assert exc_info.value is boom


# -------------------------------------------------------------------
# Typed parameters
# -------------------------------------------------------------------

class TestTypedParams:

    @pytest.mark.asyncio
    async def test_params_passed_as_kwargs(self):
        handler = InteractionHandler()
        received = {}

        @handler.add_slash("sum", "Adds two numbers", params=[
            SlashParam("a", OptionType.INTEGER),
            SlashParam("b", OptionType.INTEGER),
            SlashParam("note", required=False),
        ])
        async def add(shard, interaction, a, b, note):
            received.update(a=a, b=b, note=note)

        await handler.handle_interaction(None, _command("sum", options=[
            {"name": "a", "type": 4, "value": 2},
            {"name": "b", "type": 4, "value": 3},
        ]))
        assert received == {"a": 2, "b": 3, "note": None}

    @pytest.mark.asyncio
    async def test_missing_required_param_is_invalid(self):
        handler = InteractionHandler()
        callback = AsyncMock()
        handler.add_slash("sum", "Adds", callback, params=[SlashParam("a", OptionType.INTEGER)])
        with pytest.raises(InvalidInteractionError):
            await handler.handle_interaction(None, _command("sum"))
        callback.assert_not_awaited()


# -------------------------------------------------------------------
# Components and modals
# -------------------------------------------------------------------

class TestComponents:

    @pytest.mark.asyncio
    async def test_select_only_handler_resolves_for_any_component(self):
        handler = InteractionHandler()
        select_cb = AsyncMock()
        handler.add_select("x", select_cb)

        await handler.handle_interaction(None, _component("x", component_type=2))
        await handler.handle_interaction(None, _component("x", component_type=3, values=["a"]))

        assert select_cb.await_count == 2

    @pytest.mark.asyncio
    async def test_button_preferred_over_select(self):
        handler = InteractionHandler()
        button_cb, select_cb = AsyncMock(), AsyncMock()
        handler.add_button("x", button_cb)
        handler.add_select("x", select_cb)

        await handler.handle_interaction(None, _component("X", component_type=3))

        button_cb.assert_awaited_once()
        select_cb.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_component_without_any_handler(self):
        handler = InteractionHandler()
        with pytest.raises(CommandNotFoundError):
            await handler.handle_interaction(None, _component("missing"))

    @pytest.mark.asyncio
    async def test_component_without_custom_id(self):
        handler = InteractionHandler()
        with pytest.raises(InvalidInteractionError):
            await handler.handle_interaction(None, _component(None))

    @pytest.mark.asyncio
    async def test_modal_dispatch(self):
        handler = InteractionHandler()
        modal_cb = AsyncMock()
        handler.add_modal("feedback_form", modal_cb)
        assert await handler.handle_interaction(None, _modal("feedback_form")) is True
        modal_cb.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_modal_does_not_see_buttons(self):
        handler = InteractionHandler()
        handler.add_button("form", AsyncMock())
        with pytest.raises(CommandNotFoundError):
            await handler.handle_interaction(None, _modal("form"))

    @pytest.mark.asyncio
    async def test_modal_without_custom_id(self):
        handler = InteractionHandler()
        with pytest.raises(InvalidInteractionError):
            await handler.handle_interaction(None, _modal(None))


# -------------------------------------------------------------------
# Autocomplete
# -------------------------------------------------------------------

class TestAutocompleteDispatch:

    @pytest.mark.asyncio
    async def test_fallback_handler_suggests(self):
        client = DiscordClient(application_id="999")
        client.create_interaction_response = AsyncMock()
        handler = InteractionHandler(client)
        handler.add_slash("sum", "Adds two numbers", AsyncMock())

        @handler.add_autocomplete("sum")
        async def complete(shard, interaction):
            await handler.suggest(interaction, ["1", "2", "3"])

        assert await handler.handle_interaction(None, _autocomplete("sum")) is True

        client.create_interaction_response.assert_awaited_once_with("111", "tok", {
            "type": 8,
            "data": {"choices": [
                {"name": "1", "value": "1"},
                {"name": "2", "value": "2"},
                {"name": "3", "value": "3"},
            ]},
        })

    @pytest.mark.asyncio
    async def test_focused_option_selects_specific_handler(self):
        handler = InteractionHandler()
        fallback, query = AsyncMock(), AsyncMock()
        handler.add_slash("search", "Search", AsyncMock(), params=["query", "tag"])
        handler.add_autocomplete("search", fallback)
        handler.add_autocomplete_for_option("search", "query", query)

        await handler.handle_interaction(None, _autocomplete("search", options=[
            {"name": "query", "type": 3, "value": "li", "focused": True},
            {"name": "tag", "type": 3, "value": "x"},
        ]))
        await handler.handle_interaction(None, _autocomplete("search", options=[
            {"name": "query", "type": 3, "value": "lin"},
            {"name": "tag", "type": 3, "value": "x", "focused": True},
        ]))

        query.assert_awaited_once()
        fallback.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_camel_case_link_answers_snake_case_option(self):
        handler = InteractionHandler()
        fallback, specific = AsyncMock(), AsyncMock()
        handler.add_slash("find", "Find things", AsyncMock(), params=[SlashParam("search_term")])
        handler.add_autocomplete("find", fallback)
        handler.add_autocomplete_for_option("find", "searchTerm", specific)

        await handler.handle_interaction(None, _autocomplete("find", options=[
            {"name": "search_term", "type": 3, "value": "py", "focused": True},
        ]))

        specific.assert_awaited_once()
        fallback.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_autocomplete_without_handler(self):
        handler = InteractionHandler()
        with pytest.raises(CommandNotFoundError):
            await handler.handle_interaction(None, _autocomplete("unknown", options=[
                {"name": "x", "type": 3, "value": "", "focused": True},
            ]))

    @pytest.mark.asyncio
    async def test_autocomplete_without_name(self):
        handler = InteractionHandler()
        with pytest.raises(InvalidInteractionError):
            await handler.handle_interaction(None, _autocomplete(None))


# -------------------------------------------------------------------
# Ping, unknown types and payload validation
# -------------------------------------------------------------------

class TestOtherInteractions:

    @pytest.mark.asyncio
    async def test_ping_is_ignored(self):
        handler = InteractionHandler()
        assert await handler.handle_interaction(None, _payload(1)) is False

    @pytest.mark.asyncio
    async def test_unknown_interaction_type(self):
        handler = InteractionHandler()
        with pytest.raises(NotImplementedInteractionError):
            await handler.handle_interaction(None, _payload(42, {"name": "x"}))

    @pytest.mark.asyncio
    async def test_malformed_payload_is_invalid(self):
        handler = InteractionHandler()
        with pytest.raises(InvalidInteractionError):
            await handler.handle_interaction(None, {"type": "not-a-number"})

    def test_parse_interaction_passes_models_through(self):
        interaction = Interaction(id="1", type=1)
        assert parse_interaction(interaction) is interaction

    @pytest.mark.asyncio
    async def test_accepts_parsed_model(self):
        handler = InteractionHandler()
        callback = AsyncMock()
        handler.add_button("ok", callback)
        interaction = parse_interaction(_component("ok"))
        await handler.handle_interaction(None, interaction)
        assert callback.await_args.args[1] is interaction
