"""
Builders for the moderator notification and the verification UI components.

Everything here is side-effect free: views and embeds are built, never sent.
"""

from datetime import datetime
from typing import Optional, Tuple

import discord

from ..config import REJECTION_MODAL_TIMEOUT_SECONDS, REJECTION_REASON_MAX_LENGTH
from .custom_ids import (
    DecisionAction,
    DecisionPayload,
    RejectionModalPayload,
    REJECTION_REASON_INPUT_ID,
    VERIFICATION_BUTTON_ID,
)
from .message_templates import MessageTemplates, create_embed


def _relative_timestamp(moment: Optional[datetime]) -> str:
    if moment is None:
        return "unknown"
    return discord.utils.format_dt(moment, style="R")


def build_notification_embed(member: discord.Member) -> discord.Embed:
    """Build the moderator-facing embed describing a join request."""
    description = MessageTemplates.format_notification(
        tag=str(member),
        user_id=member.id,
        joined=_relative_timestamp(member.joined_at),
        created=_relative_timestamp(member.created_at),
    )
    return create_embed(MessageTemplates.NOTIFICATION_TITLE, description, "primary")


def build_decision_view(requester_id: int, disabled: bool = False) -> discord.ui.View:
    """Build the approve/deny button row for a request.

    Args:
        requester_id: User ID embedded in both buttons' custom IDs.
        disabled: Render the resolved (non-clickable) variant.
    """
    view = discord.ui.View(timeout=None)
    view.add_item(discord.ui.Button(
        label=MessageTemplates.APPROVE_LABEL,
        style=discord.ButtonStyle.success,
        custom_id=DecisionPayload(DecisionAction.APPROVE, requester_id).custom_id,
        disabled=disabled,
    ))
    view.add_item(discord.ui.Button(
        label=MessageTemplates.DENY_LABEL,
        style=discord.ButtonStyle.danger,
        custom_id=DecisionPayload(DecisionAction.DENY, requester_id).custom_id,
        disabled=disabled,
    ))
    return view


def compose_notification(member: discord.Member) -> Tuple[discord.Embed, discord.ui.View]:
    """Compose the notification posted to the moderators' channel."""
    return build_notification_embed(member), build_decision_view(member.id)


def build_verification_panel() -> Tuple[discord.Embed, discord.ui.View]:
    """Build the public panel carrying the verification button."""
    embed = create_embed(MessageTemplates.PANEL_TITLE, MessageTemplates.PANEL, "accent")
    view = discord.ui.View(timeout=None)
    view.add_item(discord.ui.Button(
        label=MessageTemplates.PANEL_BUTTON_LABEL,
        style=discord.ButtonStyle.primary,
        custom_id=VERIFICATION_BUTTON_ID,
        emoji="✅",
    ))
    return embed, view


class RejectionReasonModal(discord.ui.Modal):
    """Form collecting the reason a verification is denied.

    Submissions are handled by the interaction dispatcher through the modal's
    custom ID, so this class only describes the form.
    """

    def __init__(self, requester_id: int) -> None:
        super().__init__(
            title=MessageTemplates.REJECTION_MODAL_TITLE,
            custom_id=RejectionModalPayload(requester_id).custom_id,
            timeout=REJECTION_MODAL_TIMEOUT_SECONDS,
        )
        self.requester_id = requester_id
        self.reason = discord.ui.TextInput(
            label=MessageTemplates.REJECTION_INPUT_LABEL,
            style=discord.TextStyle.paragraph,
            custom_id=REJECTION_REASON_INPUT_ID,
            placeholder=MessageTemplates.REJECTION_INPUT_PLACEHOLDER,
            required=True,
            min_length=1,
            max_length=REJECTION_REASON_MAX_LENGTH,
        )
        self.add_item(self.reason)


def notification_matches(message: discord.Message, requester_id: int) -> bool:
    """Check whether a message is the still-open notification for a requester."""
    if not message.embeds:
        return False
    description = message.embeds[0].description
    if not description or str(requester_id) not in description:
        return False
    return any(
        not getattr(child, "disabled", True)
        for row in message.components
        for child in getattr(row, "children", [])
    )
