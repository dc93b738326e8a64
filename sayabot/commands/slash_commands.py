"""
Slash commands for the Saya bot.

This module provides:
- /setupverify: Configure the verified role and notification channel
- /removeverify: Disable verification on the server
- /verifypanel: Post the panel carrying the verification button
- /userinfo: Show a member's info card
- /ping: Show the gateway latency
"""

from typing import Optional

import discord
from discord import app_commands

from ..utils.guild_config import GuildConfig, get_config_store
from ..utils.interactions import reply_error, send_ephemeral
from ..utils.logging import logger
from ..utils.message_templates import MessageTemplates, create_embed
from ..utils.notification import build_verification_panel
from .user_lookup import build_user_info


def setup_slash_commands(bot) -> tuple:
    """Set up the slash commands on the bot.

    Returns:
        Tuple of (setupverify, removeverify, verifypanel, userinfo, ping) command functions.
    """
    store = get_config_store()

    @bot.tree.command(
        name="setupverify",
        description="Configure the verification role and moderator channel"
    )
    @app_commands.describe(
        role="Role granted when a verification is approved",
        channel="Channel where moderators receive verification requests"
    )
    @app_commands.guild_only()
    @app_commands.default_permissions(manage_guild=True)
    async def setupverify(
        interaction: discord.Interaction,
        role: discord.Role,
        channel: discord.TextChannel
    ) -> None:
        """Store the guild's verification config."""
        store.set_server_config(GuildConfig(
            guild_id=interaction.guild.id,
            verified_role_id=role.id,
            notify_channel_id=channel.id,
        ))
        await send_ephemeral(interaction, create_embed(
            MessageTemplates.SETUP_DONE_TITLE,
            MessageTemplates.SETUP_DONE.format(role_id=role.id, channel_id=channel.id),
            "success"
        ))
        logger.info(f"{interaction.user} configured verification in guild {interaction.guild.id}")

    @bot.tree.command(
        name="removeverify",
        description="Disable verification on this server"
    )
    @app_commands.guild_only()
    @app_commands.default_permissions(manage_guild=True)
    async def removeverify(interaction: discord.Interaction) -> None:
        """Delete the guild's verification config."""
        if store.remove_server_config(interaction.guild.id):
            embed = create_embed(MessageTemplates.REMOVED_TITLE, MessageTemplates.REMOVED, "success")
        else:
            embed = create_embed(MessageTemplates.REMOVED_TITLE, MessageTemplates.NOTHING_TO_REMOVE, "accent")
        await send_ephemeral(interaction, embed)

    @bot.tree.command(
        name="verifypanel",
        description="Post the verification button panel"
    )
    @app_commands.describe(
        channel="Channel to post the panel in (defaults to this one)"
    )
    @app_commands.guild_only()
    @app_commands.default_permissions(manage_guild=True)
    async def verifypanel(
        interaction: discord.Interaction,
        channel: Optional[discord.TextChannel] = None
    ) -> None:
        """Post the verification panel."""
        target = channel or interaction.channel
        embed, view = build_verification_panel()
        await target.send(embed=embed, view=view)
        await interaction.response.send_message(
            MessageTemplates.PANEL_POSTED.format(channel=target.mention),
            ephemeral=True
        )

    @bot.tree.command(
        name="userinfo",
        description="Show information about a member"
    )
    @app_commands.describe(member="Member to look up (defaults to you)")
    async def userinfo(
        interaction: discord.Interaction,
        member: Optional[discord.Member] = None
    ) -> None:
        """Show a member's info card."""
        embed, view = build_user_info(member or interaction.user)
        await interaction.response.send_message(embed=embed, view=view)

    @bot.tree.command(
        name="ping",
        description="Show the bot's latency"
    )
    async def ping(interaction: discord.Interaction) -> None:
        """Reply with the gateway latency."""
        latency_ms = round(bot.latency * 1000)
        await interaction.response.send_message(
            embed=create_embed("Pong! 🏓", f"Latency: **{latency_ms}ms**", "accent"),
            ephemeral=True
        )

    @bot.tree.error
    async def on_app_command_error(
        interaction: discord.Interaction,
        error: app_commands.AppCommandError
    ) -> None:
        """Log a failed slash command and tell the user."""
        command_name = interaction.command.name if interaction.command else "unknown"
        logger.error(f"Error in slash command /{command_name}: {error}", exc_info=error)
        await reply_error(interaction, MessageTemplates.COMMAND_ERROR)

    return setupverify, removeverify, verifypanel, userinfo, ping
