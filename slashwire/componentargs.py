"""Helpers for message-component and modal-submit payloads.

    custom_id      the ``custom_id`` of a component or modal interaction
    select_values  values picked in a select menu
    modal_values   every text input of a modal, keyed by custom id
    modal_value    one text input by custom id
"""

from typing import Dict, Iterable, List, Optional

from .models import (
    SELECT_COMPONENT_TYPES,
    Component,
    ComponentType,
    Interaction,
    InteractionType,
)


def custom_id(interaction: Interaction) -> Optional[str]:
    """Return the custom id, or None for commands and pings."""
    if interaction.type not in (
        InteractionType.MESSAGE_COMPONENT,
        InteractionType.MODAL_SUBMIT,
    ):
        return None
    if interaction.data is None:
        return None
    return interaction.data.custom_id


def select_values(interaction: Interaction) -> List[str]:
    """Values picked in any select variant; empty for other interactions."""
    if interaction.type != InteractionType.MESSAGE_COMPONENT or interaction.data is None:
        return []
    if interaction.data.component_type not in SELECT_COMPONENT_TYPES:
        return []
    return list(interaction.data.values)


def _collect_modal_values(components: Iterable[Component], out: Dict[str, str]) -> None:
    # Text inputs sit inside action rows or labels
    for component in components:
        if component is None:
            continue
        if (
            component.type == ComponentType.TEXT_INPUT
            and component.custom_id is not None
            and component.value is not None
        ):
            out[component.custom_id] = component.value
        if component.components:
            _collect_modal_values(component.components, out)
        if component.type == ComponentType.LABEL and component.component is not None:
            _collect_modal_values([component.component], out)


def modal_values(interaction: Interaction) -> Dict[str, str]:
    """All text-input values of a modal submit, keyed by custom id."""
    values: Dict[str, str] = {}
    if interaction.type == InteractionType.MODAL_SUBMIT and interaction.data is not None:
        _collect_modal_values(interaction.data.components, values)
    return values


def modal_value(interaction: Interaction, field_custom_id: str) -> Optional[str]:
    return modal_values(interaction).get(field_custom_id)
