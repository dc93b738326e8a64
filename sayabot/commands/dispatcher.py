"""
Routing of inbound Discord events to handlers.

- Messages starting with the prefix go to the prefix command registry.
- Button presses go to the verification workflow or the user lookups.
- Modal submissions go to the verification workflow.

Slash commands are routed by the command tree and never reach this module.
"""

from typing import Awaitable, Callable, List, Optional, Tuple

import discord

from ..config import COMMAND_PREFIX, REQUEST_RETENTION_MINUTES
from ..utils.custom_ids import (
    DecisionPayload,
    RejectionModalPayload,
    UserLookupPayload,
    REJECTION_REASON_INPUT_ID,
    VERIFICATION_BUTTON_ID,
)
from ..utils.guild_config import get_config_store
from ..utils.interactions import get_custom_id, get_modal_value, reply_error, send_ephemeral
from ..utils.logging import logger
from ..utils.message_templates import MessageTemplates, create_embed
from ..utils.verification_registry import get_verification_registry
from .prefix_commands import CommandRegistry, build_default_registry
from .user_lookup import handle_user_lookup
from .verification import VerificationWorkflow


def parse_prefix_command(content: str, prefix: str = COMMAND_PREFIX) -> Optional[Tuple[str, List[str]]]:
    """Split a prefixed message into a lowercase command name and its args.

    Returns:
        (name, args), or None if the message is not a command.
    """
    if not prefix or not content.startswith(prefix):
        return None
    parts = content[len(prefix):].strip().split()
    if not parts:
        return None
    return parts[0].lower(), parts[1:]


async def run_guarded(
    interaction: discord.Interaction,
    handler: Callable[..., Awaitable[None]],
    *args
) -> None:
    """Run an interaction handler, guaranteeing the user gets a reply on failure."""
    try:
        await handler(interaction, *args)
    except Exception as e:
        logger.error(
            f"Error handling interaction {get_custom_id(interaction)!r}: {type(e).__name__}: {e}",
            exc_info=e
        )
        await reply_error(interaction)


def create_verification_workflow() -> VerificationWorkflow:
    """Build the workflow from the global config store and registry."""
    return VerificationWorkflow(
        store=get_config_store(),
        registry=get_verification_registry(REQUEST_RETENTION_MINUTES),
    )


async def _reply_unknown_action(interaction: discord.Interaction) -> None:
    await send_ephemeral(interaction, create_embed(
        MessageTemplates.UNKNOWN_ACTION_TITLE,
        MessageTemplates.UNKNOWN_ACTION,
        "error"
    ))


def setup_interaction_listener(bot, workflow: Optional[VerificationWorkflow] = None) -> Callable:
    """Set up routing of button presses and modal submissions.

    Returns:
        The on_interaction event handler function.
    """
    workflow = workflow or create_verification_workflow()

    async def route_component(interaction: discord.Interaction) -> None:
        custom_id = get_custom_id(interaction)

        if custom_id == VERIFICATION_BUTTON_ID:
            await run_guarded(interaction, workflow.initiate)
            return

        decision = DecisionPayload.parse(custom_id)
        if decision is not None:
            await run_guarded(interaction, workflow.decide, decision)
            return

        lookup = UserLookupPayload.parse(custom_id)
        if lookup is not None:
            await run_guarded(interaction, handle_user_lookup, lookup)
            return

        logger.info(f"Unrecognized button {custom_id!r} pressed by {interaction.user}")
        await run_guarded(interaction, _reply_unknown_action)

    async def route_modal(interaction: discord.Interaction) -> None:
        custom_id = get_custom_id(interaction)
        rejection = RejectionModalPayload.parse(custom_id)
        if rejection is None:
            return

        reason = get_modal_value(interaction, REJECTION_REASON_INPUT_ID)
        await run_guarded(interaction, workflow.resolve_denial, rejection.requester_id, reason)

    @bot.event
    async def on_interaction(interaction: discord.Interaction) -> None:
        """Dispatch component and modal interactions."""
        if interaction.type is discord.InteractionType.component:
            await route_component(interaction)
        elif interaction.type is discord.InteractionType.modal_submit:
            await route_modal(interaction)

    return on_interaction


def setup_message_listener(bot, registry: Optional[CommandRegistry] = None) -> Callable:
    """Set up the message listener for prefix commands.

    Returns:
        The on_message event handler function.
    """
    registry = registry or build_default_registry()

    @bot.event
    async def on_message(message: discord.Message) -> None:
        """Run the prefix command a message invokes, if any."""
        if message.author.bot:
            return

        parsed = parse_prefix_command(message.content, COMMAND_PREFIX)
        if parsed is None:
            return

        name, args = parsed
        command = registry.get(name)
        if command is None:
            return

        try:
            await command.handler(message, args, bot)
        except Exception as e:
            logger.error(f"Error in command {name}: {type(e).__name__}: {e}", exc_info=e)
            try:
                await message.reply(embed=create_embed(
                    MessageTemplates.ERROR_TITLE,
                    MessageTemplates.COMMAND_ERROR,
                    "error"
                ))
            except discord.HTTPException as reply_error_exc:
                logger.warning(f"Could not send command error reply: {reply_error_exc}")

    return on_message
