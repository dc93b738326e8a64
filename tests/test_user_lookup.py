"""
Tests for the user info card and its lookup buttons.
"""

from datetime import datetime, timezone
from unittest.mock import MagicMock, AsyncMock

import discord
import pytest

from sayabot.commands.user_lookup import (
    build_user_info,
    get_important_permissions,
    handle_user_lookup,
)
from sayabot.utils.custom_ids import UserLookupAction, UserLookupPayload


def make_user(user_id=42, banner=None):
    user = MagicMock()
    user.id = user_id
    user.name = "newbie"
    user.mention = f"<@{user_id}>"
    user.__str__ = MagicMock(return_value="newbie")
    user.created_at = datetime(2020, 1, 1, tzinfo=timezone.utc)
    user.joined_at = datetime(2024, 1, 1, tzinfo=timezone.utc)
    user.display_avatar.url = "https://cdn.example/avatar.png"
    user.display_avatar.with_size.return_value.url = "https://cdn.example/avatar.png?size=1024"
    user.banner = banner
    return user


def make_interaction(user=None, member=None):
    interaction = MagicMock()
    interaction.client.fetch_user = AsyncMock(return_value=user)
    interaction.guild.get_member = MagicMock(return_value=member)
    interaction.response.is_done = MagicMock(return_value=False)
    interaction.response.send_message = AsyncMock()
    interaction.followup.send = AsyncMock()
    return interaction


def sent_embed(interaction):
    return interaction.response.send_message.call_args.kwargs["embed"]


class TestImportantPermissions:
    """Tests for get_important_permissions."""

    def test_lists_held_permissions(self):
        """Only moderation-relevant permissions the member holds are listed, in order."""
        member = MagicMock()
        member.guild_permissions = discord.Permissions(kick_members=True, administrator=True, send_messages=True)

        assert get_important_permissions(member) == ["administrator", "kick_members"]

    def test_no_permissions(self):
        member = MagicMock()
        member.guild_permissions = discord.Permissions.none()

        assert get_important_permissions(member) == []


class TestBuildUserInfo:
    """Tests for the user info card."""

    @pytest.mark.asyncio
    async def test_card(self):
        """
        Tests the card:
        - Description names the user, ID and join time
        - Three lookup buttons carry the user's ID
        """
        embed, view = build_user_info(make_user())

        assert "newbie (42)" in embed.description
        assert "Joined server" in embed.description
        assert [item.custom_id for item in view.children] == ["avatar_42", "banner_42", "permissions_42"]


class TestHandleUserLookup:
    """Tests for the lookup button handler."""

    @pytest.mark.asyncio
    async def test_avatar(self):
        """The avatar lookup fetches the user and shows their avatar."""
        user = make_user()
        interaction = make_interaction(user=user)

        await handle_user_lookup(interaction, UserLookupPayload(UserLookupAction.AVATAR, 42))

        interaction.client.fetch_user.assert_called_once_with(42)
        embed = sent_embed(interaction)
        assert "Avatar" in embed.title
        assert embed.image.url == "https://cdn.example/avatar.png?size=1024"
        assert interaction.response.send_message.call_args.kwargs["ephemeral"] is True

    @pytest.mark.asyncio
    async def test_banner_missing(self):
        """Users without a banner get a not-found reply."""
        interaction = make_interaction(user=make_user(banner=None))

        await handle_user_lookup(interaction, UserLookupPayload(UserLookupAction.BANNER, 42))

        assert sent_embed(interaction).title == "Banner Not Found"

    @pytest.mark.asyncio
    async def test_banner(self):
        banner = MagicMock()
        banner.with_size.return_value.url = "https://cdn.example/banner.png"
        interaction = make_interaction(user=make_user(banner=banner))

        await handle_user_lookup(interaction, UserLookupPayload(UserLookupAction.BANNER, 42))

        assert sent_embed(interaction).image.url == "https://cdn.example/banner.png"

    @pytest.mark.asyncio
    async def test_permissions(self):
        """Held permissions are listed in a field."""
        member = make_user()
        member.guild_permissions = discord.Permissions(ban_members=True)
        interaction = make_interaction(member=member)

        await handle_user_lookup(interaction, UserLookupPayload(UserLookupAction.PERMISSIONS, 42))

        embed = sent_embed(interaction)
        assert embed.fields[0].value == "Ban Members"

    @pytest.mark.asyncio
    async def test_permissions_none(self):
        member = make_user()
        member.guild_permissions = discord.Permissions.none()
        interaction = make_interaction(member=member)

        await handle_user_lookup(interaction, UserLookupPayload(UserLookupAction.PERMISSIONS, 42))

        assert "no special" in sent_embed(interaction).description

    @pytest.mark.asyncio
    async def test_permissions_member_left(self):
        """A user no longer in the guild gets a not-found reply."""
        interaction = make_interaction(member=None)

        await handle_user_lookup(interaction, UserLookupPayload(UserLookupAction.PERMISSIONS, 42))

        assert sent_embed(interaction).title == "User Not Found"
