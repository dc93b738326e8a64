"""
User info lookups: the info card and its avatar/banner/permissions buttons.
"""

from typing import List, Tuple, Union

import discord

from ..utils.custom_ids import UserLookupAction, UserLookupPayload
from ..utils.interactions import send_ephemeral
from ..utils.message_templates import create_embed

IMPORTANT_PERMISSIONS = [
    "administrator",
    "manage_messages",
    "manage_roles",
    "manage_guild",
    "ban_members",
    "kick_members",
    "manage_channels",
]

_LOOKUP_LABELS = {
    UserLookupAction.AVATAR: "Avatar",
    UserLookupAction.BANNER: "Banner",
    UserLookupAction.PERMISSIONS: "Permissions",
}


def get_important_permissions(member: discord.Member) -> List[str]:
    """List the moderation-relevant permissions a member holds."""
    permissions = member.guild_permissions
    return [name for name in IMPORTANT_PERMISSIONS if getattr(permissions, name, False)]


def _format_permission(name: str) -> str:
    return name.replace("_", " ").title()


def build_user_info(user: Union[discord.Member, discord.User]) -> Tuple[discord.Embed, discord.ui.View]:
    """Build the user info card and its lookup buttons."""
    lines = [
        f"**User:** {user} ({user.id})",
        f"**Mention:** {user.mention}",
        f"**Account created:** {discord.utils.format_dt(user.created_at, style='R')}",
    ]
    joined_at = getattr(user, "joined_at", None)
    if joined_at is not None:
        lines.append(f"**Joined server:** {discord.utils.format_dt(joined_at, style='R')}")

    embed = create_embed(f"About {user.name}", "\n".join(lines), "accent")
    embed.set_thumbnail(url=user.display_avatar.url)

    view = discord.ui.View(timeout=None)
    for action, label in _LOOKUP_LABELS.items():
        view.add_item(discord.ui.Button(
            label=label,
            style=discord.ButtonStyle.secondary,
            custom_id=UserLookupPayload(action, user.id).custom_id,
        ))
    return embed, view


async def handle_user_lookup(interaction: discord.Interaction, payload: UserLookupPayload) -> None:
    """Answer an avatar, banner or permissions button press."""
    client = interaction.client

    if payload.action is UserLookupAction.AVATAR:
        user = await client.fetch_user(payload.user_id)
        avatar = user.display_avatar
        embed = create_embed(
            f"{user.name}'s Avatar",
            f"[Click here to download]({avatar.with_size(1024).url})",
            "accent"
        )
        embed.set_image(url=avatar.with_size(512).url)
        await send_ephemeral(interaction, embed)

    elif payload.action is UserLookupAction.BANNER:
        # fetch_user always hits the API, which is the only source of banners
        user = await client.fetch_user(payload.user_id)
        if user.banner:
            embed = create_embed(
                f"{user.name}'s Banner",
                f"[Click here to download]({user.banner.with_size(1024).url})",
                "accent"
            )
            embed.set_image(url=user.banner.with_size(512).url)
        else:
            embed = create_embed(
                "Banner Not Found",
                f"{user.name} does not have a custom banner.",
                "error"
            )
        await send_ephemeral(interaction, embed)

    else:
        member = interaction.guild.get_member(payload.user_id) if interaction.guild else None
        if member is None:
            await send_ephemeral(interaction, create_embed(
                "User Not Found",
                "This user is not on the server.",
                "error"
            ))
            return

        important = get_important_permissions(member)
        embed = create_embed(f"{member.name}'s Permissions", None, "accent")
        if important:
            embed.add_field(
                name="**Important Permissions**",
                value="\n".join(_format_permission(name) for name in important),
                inline=False
            )
        else:
            embed.description = "This user has no special administrative permissions."
        await send_ephemeral(interaction, embed)
