"""
Discord bot client for the Saya verification bot.
"""

import asyncio
import signal
import sys
from typing import Optional

import discord
from discord import app_commands

from .config import (
    DISCORD_BOT_TOKEN,
    BOT_NAME,
    COMMAND_PREFIX,
    REQUEST_RETENTION_MINUTES,
    REQUEST_CLEANUP_INTERVAL_MINUTES,
    get_presence_text,
)
from .utils.logging import logger
from .utils.verification_registry import get_verification_registry


class SayaBot(discord.Client):
    """Discord bot client with application commands support."""

    def __init__(self) -> None:
        intents = discord.Intents.default()
        intents.message_content = True  # Required for prefix commands
        intents.members = True  # Required for member join data and role grants
        super().__init__(intents=intents)
        self.tree = app_commands.CommandTree(self)

    async def setup_hook(self) -> None:
        """Called before connecting to sync commands and start background tasks."""
        await self.tree.sync()
        registry = get_verification_registry(REQUEST_RETENTION_MINUTES)
        await registry.start_cleanup_task(REQUEST_CLEANUP_INTERVAL_MINUTES)

    async def on_error(self, event_method: str, *args, **kwargs) -> None:
        """Log uncaught event handler errors without stopping the bot."""
        logger.exception(f"Unhandled error in event {event_method}")

    async def cleanup(self) -> None:
        """Cleanup resources before shutdown."""
        logger.info("Cleaning up resources...")
        get_verification_registry().stop_cleanup_task()
        # Close the Discord connection gracefully
        if not self.is_closed():
            await self.close()
        logger.info("Cleanup complete")


# Bot instance management using factory pattern
_bot_instance: Optional[SayaBot] = None


def get_bot() -> SayaBot:
    """Get or create the bot instance (singleton pattern)."""
    global _bot_instance
    if _bot_instance is None:
        _bot_instance = SayaBot()
    return _bot_instance


def create_bot() -> SayaBot:
    """Create a new bot instance (useful for testing)."""
    return SayaBot()


def reset_bot() -> None:
    """Reset the global bot instance (useful for testing)."""
    global _bot_instance
    _bot_instance = None


async def on_ready_handler(bot: SayaBot) -> None:
    """Handle the on_ready event."""
    logger.info(f"{BOT_NAME} is online! Logged in as {bot.user}")
    logger.info(f"Serving {len(bot.guilds)} guild(s) with prefix '{COMMAND_PREFIX}'")

    try:
        await bot.change_presence(
            activity=discord.Game(name=get_presence_text()),
            status=discord.Status.online
        )
    except (discord.HTTPException, ConnectionError) as e:
        logger.warning(f"Could not set presence: {e}")

    logger.info(
        f"Invite URL: https://discord.com/api/oauth2/authorize?"
        f"client_id={bot.user.id}&permissions=268504064&scope=bot%20applications.commands"
    )


def setup_signal_handlers(bot: SayaBot) -> None:
    """Set up signal handlers for graceful shutdown."""
    def signal_handler(sig: int, frame) -> None:
        logger.info(f"Received signal {sig}, initiating graceful shutdown...")
        # Schedule cleanup in the event loop
        loop = asyncio.get_event_loop()
        if loop.is_running():
            asyncio.create_task(bot.cleanup())
        sys.exit(0)

    # Register signal handlers (SIGTERM may not exist on Windows)
    signal.signal(signal.SIGINT, signal_handler)
    if hasattr(signal, 'SIGTERM'):
        signal.signal(signal.SIGTERM, signal_handler)


def run_bot() -> None:
    """Start the Discord bot."""
    if not DISCORD_BOT_TOKEN:
        raise ValueError("DISCORD_BOT_TOKEN environment variable is required")

    bot = get_bot()

    @bot.event
    async def on_ready() -> None:
        """Discord event handler for when the bot is ready."""
        await on_ready_handler(bot)

    # Set up signal handlers for graceful shutdown
    setup_signal_handlers(bot)

    logger.info(f"Starting {BOT_NAME}...")
    bot.run(DISCORD_BOT_TOKEN, log_handler=None)
