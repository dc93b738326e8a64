"""
Helpers for replying to and reading Discord interactions.
"""

from typing import Optional

import discord

from .logging import logger
from .message_templates import MessageTemplates, create_embed


async def send_ephemeral(interaction: discord.Interaction, embed: discord.Embed) -> None:
    """Send a private reply, using a follow-up once the response is spent."""
    if interaction.response.is_done():
        await interaction.followup.send(embed=embed, ephemeral=True)
    else:
        await interaction.response.send_message(embed=embed, ephemeral=True)


async def reply_error(interaction: discord.Interaction, description: str = MessageTemplates.INTERACTION_ERROR) -> None:
    """Send the generic error embed, logging if even that fails."""
    embed = create_embed(MessageTemplates.ERROR_TITLE, description, "error")
    try:
        await send_ephemeral(interaction, embed)
    except discord.HTTPException as e:
        logger.warning(f"Could not send error reply for interaction {interaction.id}: {e}")


def get_custom_id(interaction: discord.Interaction) -> Optional[str]:
    """Get the custom ID of a component or modal interaction."""
    data = interaction.data or {}
    return data.get("custom_id")


def get_modal_value(interaction: discord.Interaction, input_id: str) -> Optional[str]:
    """Read a text input's submitted value from a modal interaction.

    Args:
        interaction: The modal submit interaction.
        input_id: Custom ID of the text input.

    Returns:
        The submitted text, or None if the input is absent.
    """
    data = interaction.data or {}
    for row in data.get("components", []):
        for component in row.get("components", []):
            if component.get("custom_id") == input_id:
                return component.get("value")
    return None
