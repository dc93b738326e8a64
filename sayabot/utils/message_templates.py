"""
Message templates for Discord messages.

This module provides centralized message templates and the themed embed
builder every reply goes through.
"""

from typing import Optional

import discord

from ..config import get_theme_color, get_footer_text, MAX_EMBED_DESCRIPTION_LENGTH
from .text_utils import truncate_text


def create_embed(title: str, description: Optional[str] = None, color: str = "primary") -> discord.Embed:
    """Create an embed in the bot's theme.

    Args:
        title: Embed title.
        description: Embed body; truncated to Discord's limit.
        color: Theme color name ('primary', 'accent', 'success', 'error').

    Returns:
        The embed, stamped with the theme footer and the current time.
    """
    if description is not None:
        description = truncate_text(description, MAX_EMBED_DESCRIPTION_LENGTH)
    embed = discord.Embed(
        title=title,
        description=description,
        color=get_theme_color(color),
        timestamp=discord.utils.utcnow(),
    )
    embed.set_footer(text=get_footer_text())
    return embed


class MessageTemplates:
    """Centralized message templates for Discord messages."""

    # Configuration
    NOT_CONFIGURED_TITLE = "Verification Not Configured"
    NOT_CONFIGURED = "The verification system has not been configured on this server yet."

    # Requester-facing
    ALREADY_VERIFIED_TITLE = "Already Verified ✅"
    ALREADY_VERIFIED = (
        "You are already verified on this server!\n\n"
        "You have full access to every channel and feature."
    )

    REQUEST_SENT_TITLE = "Verification Started 🔄"
    REQUEST_SENT = (
        "Your verification request has been sent!\n\n"
        "**Next steps:**\n"
        "• A moderator will review your request shortly\n"
        "• Please wait while your request is analysed\n"
        "• You will be notified once it is approved\n\n"
        "*Thank you for your patience!*"
    )

    REQUEST_PENDING_TITLE = "Request Already Pending ⏳"
    REQUEST_PENDING = (
        "You already have a verification request waiting for a moderator.\n"
        "You will be notified once it has been reviewed."
    )

    # Moderator notification
    NOTIFICATION_TITLE = "New Verification Request 📋"
    NOTIFICATION = (
        "**User:** {tag} ({user_id})\n"
        "**Mention:** <@{user_id}>\n"
        "**Joined server:** {joined}\n"
        "**Account created:** {created}\n\n"
        "*Click the user's name to review their profile before deciding.*"
    )
    APPROVE_LABEL = "✅ Approve"
    DENY_LABEL = "❌ Deny"

    # Verification panel
    PANEL_TITLE = "Verification"
    PANEL = (
        "Welcome! Press the button below to request verification.\n"
        "A moderator will review your request."
    )
    PANEL_BUTTON_LABEL = "Verify"

    # Decisions
    APPROVED_TITLE = "Verification Approved ✅"
    APPROVED = "{tag} was approved and verified successfully!"
    APPROVED_DM_TITLE = "Verification Approved! ✅"
    APPROVED_DM = (
        "Congratulations! Your verification on **{guild_name}** was approved.\n\n"
        "You now have full access to every channel and feature of the server."
    )

    MEMBER_NOT_FOUND_TITLE = "User Not Found"
    MEMBER_NOT_FOUND = "This user is no longer on the server or left after requesting verification."

    APPROVAL_FAILED_TITLE = "Approval Failed"
    APPROVAL_FAILED = "Something went wrong while approving this verification. Please try again."

    DENIED_TITLE = "Verification Denied ❌"
    DENIED = "The verification of {tag} was denied.\n\n**Reason:** {reason}"
    DENIED_DM = (
        "Your verification request on **{guild_name}** was denied.\n\n"
        "**Reason:** {reason}\n\n"
        "Contact the moderation team if you believe this was a mistake."
    )

    DENIAL_FAILED_TITLE = "Denial Failed"
    DENIAL_FAILED = "Something went wrong while recording this denial. Please try again."

    REASON_INVALID_TITLE = "Invalid Reason"
    REASON_INVALID = "A rejection reason is required and must be at most {max_length} characters."

    REJECTION_MODAL_TITLE = "Rejection Reason"
    REJECTION_INPUT_LABEL = "Reason for rejection:"
    REJECTION_INPUT_PLACEHOLDER = "Type the reason this verification is being denied..."

    DM_FAILED_TITLE = "DM Not Delivered"
    DM_FAILED = "Could not send a direct message to {tag}. They may have DMs disabled."

    ALREADY_HANDLED_TITLE = "Already Handled"
    ALREADY_HANDLED = "This verification request is already being handled or has been resolved."

    # Configuration command
    SETUP_DONE_TITLE = "Verification Configured ✅"
    SETUP_DONE = "Verified role: <@&{role_id}>\nNotification channel: <#{channel_id}>"
    REMOVED_TITLE = "Verification Disabled"
    REMOVED = "The verification configuration for this server was removed."
    NOTHING_TO_REMOVE = "Verification is not configured on this server."
    PANEL_POSTED = "Verification panel posted in {channel}."

    # Generic
    UNKNOWN_ACTION_TITLE = "Unknown Action"
    UNKNOWN_ACTION = "This action was not recognized."
    ERROR_TITLE = "Error"
    COMMAND_ERROR = "An error occurred while running this command."
    INTERACTION_ERROR = "An error occurred while processing this action."

    @classmethod
    def format_notification(cls, tag: str, user_id: int, joined: str, created: str) -> str:
        """Format the moderator notification body."""
        return cls.NOTIFICATION.format(tag=tag, user_id=user_id, joined=joined, created=created)

    @classmethod
    def format_denied(cls, tag: str, reason: str) -> str:
        """Format the moderator-facing denial confirmation."""
        return cls.DENIED.format(tag=tag, reason=reason)

    @classmethod
    def format_denied_dm(cls, guild_name: str, reason: str) -> str:
        """Format the requester-facing denial DM."""
        return cls.DENIED_DM.format(guild_name=guild_name, reason=reason)

    @classmethod
    def format_reason_invalid(cls, max_length: int) -> str:
        """Format the invalid rejection reason message."""
        return cls.REASON_INVALID.format(max_length=max_length)
