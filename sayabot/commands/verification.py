"""
Member verification workflow.

A member presses the verification button, moderators get a notification
with approve/deny buttons, and the decision either grants the verified role
or collects a rejection reason through a modal. Request state lives in the
verification registry; the notification's buttons are disabled once the
request is resolved.
"""

from typing import Optional

import discord

from ..config import NOTIFY_SCAN_LIMIT, REJECTION_REASON_MAX_LENGTH
from ..utils.custom_ids import DecisionAction, DecisionPayload
from ..utils.guild_config import GuildConfig, GuildConfigStore
from ..utils.interactions import send_ephemeral
from ..utils.logging import logger
from ..utils.message_templates import MessageTemplates, create_embed
from ..utils.notification import (
    RejectionReasonModal,
    build_decision_view,
    compose_notification,
    notification_matches,
)
from ..utils.text_utils import normalize_reason
from ..utils.verification_registry import (
    VerificationOutcome,
    VerificationRegistry,
    VerificationRequest,
)

UNKNOWN_MEMBER_ERROR_CODE = 10007


def is_unknown_member_error(error: Exception) -> bool:
    """Check whether a platform error means the member left the guild."""
    if getattr(error, "code", None) == UNKNOWN_MEMBER_ERROR_CODE:
        return True
    return "Unknown Member" in str(error)


class VerificationWorkflow:
    """Runs the request, notify, decide and resolve steps of verification."""

    def __init__(self, store: GuildConfigStore, registry: VerificationRegistry) -> None:
        self.store = store
        self.registry = registry

    async def _get_config(self, interaction: discord.Interaction) -> Optional[GuildConfig]:
        """Load the guild's config, replying "not configured" when absent."""
        guild = interaction.guild
        config = self.store.get_server_config(guild.id) if guild else None
        if config is None:
            logger.info(f"Verification used in unconfigured guild {getattr(guild, 'id', None)}")
            await send_ephemeral(interaction, create_embed(
                MessageTemplates.NOT_CONFIGURED_TITLE,
                MessageTemplates.NOT_CONFIGURED,
                "error"
            ))
        return config

    async def initiate(self, interaction: discord.Interaction) -> None:
        """Handle a press of the verification button."""
        config = await self._get_config(interaction)
        if config is None:
            return

        guild = interaction.guild
        member = interaction.user

        if member.get_role(config.verified_role_id) is not None:
            await send_ephemeral(interaction, create_embed(
                MessageTemplates.ALREADY_VERIFIED_TITLE,
                MessageTemplates.ALREADY_VERIFIED,
                "success"
            ))
            return

        request, created = await self.registry.open_request(guild.id, member.id)
        if not created:
            await send_ephemeral(interaction, create_embed(
                MessageTemplates.REQUEST_PENDING_TITLE,
                MessageTemplates.REQUEST_PENDING,
                "accent"
            ))
            return

        posted = False
        try:
            await send_ephemeral(interaction, create_embed(
                MessageTemplates.REQUEST_SENT_TITLE,
                MessageTemplates.REQUEST_SENT,
                "accent"
            ))

            channel = guild.get_channel(config.notify_channel_id)
            if channel is None:
                request.log.warning(
                    f"Notify channel {config.notify_channel_id} not found, moderator notification skipped"
                )
                return

            embed, view = compose_notification(member)
            try:
                message = await channel.send(embed=embed, view=view)
            except discord.HTTPException as e:
                request.log.warning(f"Could not post moderator notification: {e}")
                return

            await self.registry.attach_notification(guild.id, member.id, channel.id, message.id)
            posted = True
        finally:
            # Without a posted notification nothing could ever resolve the request.
            if not posted:
                await self.registry.discard(guild.id, member.id)

    async def decide(self, interaction: discord.Interaction, payload: DecisionPayload) -> None:
        """Handle an approve or deny button press by a moderator."""
        config = await self._get_config(interaction)
        if config is None:
            return

        if payload.action is DecisionAction.DENY:
            await self._request_denial_reason(interaction, payload.requester_id)
        else:
            await self._approve(interaction, config, payload.requester_id)

    async def _reply_already_handled(self, interaction: discord.Interaction) -> None:
        await send_ephemeral(interaction, create_embed(
            MessageTemplates.ALREADY_HANDLED_TITLE,
            MessageTemplates.ALREADY_HANDLED,
            "error"
        ))

    async def _approve(self, interaction: discord.Interaction, config: GuildConfig, requester_id: int) -> None:
        guild = interaction.guild
        moderator = interaction.user

        request = await self.registry.claim(guild.id, requester_id, moderator.id)
        if request is None:
            await self._reply_already_handled(interaction)
            return

        try:
            # Authoritative fetch: the member cache misses recent joiners.
            member = await guild.fetch_member(requester_id)
            await member.add_roles(
                discord.Object(id=config.verified_role_id),
                reason=f"Verification approved by {moderator}"
            )
        except Exception as e:
            await self.registry.release(guild.id, requester_id)
            if is_unknown_member_error(e):
                request.log.info("Approval skipped, member is no longer in the guild")
                await send_ephemeral(interaction, create_embed(
                    MessageTemplates.MEMBER_NOT_FOUND_TITLE,
                    MessageTemplates.MEMBER_NOT_FOUND,
                    "error"
                ))
            else:
                request.log.error(f"Approval failed: {type(e).__name__}: {e}")
                await send_ephemeral(interaction, create_embed(
                    MessageTemplates.APPROVAL_FAILED_TITLE,
                    MessageTemplates.APPROVAL_FAILED,
                    "error"
                ))
            return

        await self.registry.resolve(guild.id, requester_id, VerificationOutcome.APPROVED)
        request.log.info(f"Approved by moderator {moderator.id}")

        await send_ephemeral(interaction, create_embed(
            MessageTemplates.APPROVED_TITLE,
            MessageTemplates.APPROVED.format(tag=member),
            "success"
        ))

        await self._notify_requester(interaction, request, member, create_embed(
            MessageTemplates.APPROVED_DM_TITLE,
            MessageTemplates.APPROVED_DM.format(guild_name=guild.name),
            "success"
        ))

        await self.disable_notification_controls(guild, config, requester_id)

    async def _request_denial_reason(self, interaction: discord.Interaction, requester_id: int) -> None:
        """Open the rejection-reason form; the decision completes on submit."""
        guild = interaction.guild
        if not await self.registry.mark_deny_pending(guild.id, requester_id, interaction.user.id):
            await self._reply_already_handled(interaction)
            return
        await interaction.response.send_modal(RejectionReasonModal(requester_id))

    async def resolve_denial(
        self,
        interaction: discord.Interaction,
        requester_id: int,
        reason: Optional[str]
    ) -> None:
        """Handle submission of the rejection-reason form."""
        config = await self._get_config(interaction)
        if config is None:
            return

        reason = normalize_reason(reason, REJECTION_REASON_MAX_LENGTH)
        if reason is None:
            await send_ephemeral(interaction, create_embed(
                MessageTemplates.REASON_INVALID_TITLE,
                MessageTemplates.format_reason_invalid(REJECTION_REASON_MAX_LENGTH),
                "error"
            ))
            return

        guild = interaction.guild
        moderator = interaction.user

        request = await self.registry.claim(guild.id, requester_id, moderator.id)
        if request is None:
            await self._reply_already_handled(interaction)
            return

        try:
            target_user = await interaction.client.fetch_user(requester_id)
        except Exception as e:
            await self.registry.release(guild.id, requester_id)
            request.log.error(f"Denial failed, could not fetch user: {type(e).__name__}: {e}")
            await send_ephemeral(interaction, create_embed(
                MessageTemplates.DENIAL_FAILED_TITLE,
                MessageTemplates.DENIAL_FAILED,
                "error"
            ))
            return

        await self.registry.resolve(guild.id, requester_id, VerificationOutcome.DENIED)
        request.log.info(f"Denied by moderator {moderator.id}")

        await send_ephemeral(interaction, create_embed(
            MessageTemplates.DENIED_TITLE,
            MessageTemplates.format_denied(str(target_user), reason),
            "error"
        ))

        await self._notify_requester(interaction, request, target_user, create_embed(
            MessageTemplates.DENIED_TITLE,
            MessageTemplates.format_denied_dm(guild.name, reason),
            "error"
        ))

        await self.disable_notification_controls(guild, config, requester_id)

    async def _notify_requester(
        self,
        interaction: discord.Interaction,
        request: VerificationRequest,
        user: discord.abc.User,
        embed: discord.Embed
    ) -> bool:
        """DM the requester; on failure log it and tell the moderator.

        Returns:
            True if the DM was delivered.
        """
        try:
            await user.send(embed=embed)
            return True
        except discord.HTTPException as e:
            request.log.warning(f"Could not DM {user}: {e}")
            try:
                await send_ephemeral(interaction, create_embed(
                    MessageTemplates.DM_FAILED_TITLE,
                    MessageTemplates.DM_FAILED.format(tag=user),
                    "error"
                ))
            except discord.HTTPException as notice_error:
                logger.warning(f"Could not send DM failure notice: {notice_error}")
            return False

    async def disable_notification_controls(
        self,
        guild: discord.Guild,
        config: GuildConfig,
        requester_id: int
    ) -> bool:
        """Replace a request's notification buttons with disabled ones.

        The embed is left unchanged. Failures are logged, never raised.

        Returns:
            True if a notification was found and edited.
        """
        try:
            message = await self._find_notification(guild, config, requester_id)
            if message is None:
                logger.info(f"[verify:{requester_id}] No open notification found to disable")
                return False
            await message.edit(embeds=message.embeds, view=build_decision_view(requester_id, disabled=True))
            return True
        except discord.HTTPException as e:
            logger.warning(f"[verify:{requester_id}] Could not disable notification buttons: {e}")
            return False

    async def _find_notification(
        self,
        guild: discord.Guild,
        config: GuildConfig,
        requester_id: int
    ) -> Optional[discord.Message]:
        """Locate the notification, by recorded ID first, then by history scan."""
        request = await self.registry.get_request(guild.id, requester_id)
        if request and request.channel_id and request.message_id:
            channel = guild.get_channel(request.channel_id)
            if channel is not None:
                try:
                    return await channel.fetch_message(request.message_id)
                except discord.HTTPException as e:
                    logger.info(f"[verify:{requester_id}] Recorded notification unavailable ({e}), scanning history")

        channel = guild.get_channel(config.notify_channel_id)
        if channel is None:
            return None
        async for message in channel.history(limit=NOTIFY_SCAN_LIMIT):
            if notification_matches(message, requester_id):
                return message
        return None
