"""
Tests for the slash commands.

Commands are captured from a mock command tree and called directly.
"""

import json
from unittest.mock import MagicMock, AsyncMock, patch

import pytest

from sayabot.commands.slash_commands import setup_slash_commands
from sayabot.utils.guild_config import GuildConfig, GuildConfigStore
from sayabot.utils.message_templates import MessageTemplates


@pytest.fixture
def store(tmp_path):
    return GuildConfigStore(tmp_path / "server_configs.json")


@pytest.fixture
def commands(store):
    """Register the commands on a mock bot and return them by name."""
    mock_bot = MagicMock()
    mock_bot.latency = 0.05
    mock_bot.tree.command = lambda **kwargs: (lambda func: func)

    with patch('sayabot.commands.slash_commands.get_config_store', return_value=store):
        setupverify, removeverify, verifypanel, userinfo, ping = setup_slash_commands(mock_bot)

    return {
        "setupverify": setupverify,
        "removeverify": removeverify,
        "verifypanel": verifypanel,
        "userinfo": userinfo,
        "ping": ping,
    }


def make_interaction():
    interaction = MagicMock()
    interaction.guild.id = 1
    interaction.response.is_done = MagicMock(return_value=False)
    interaction.response.send_message = AsyncMock()
    interaction.followup.send = AsyncMock()
    return interaction


class TestSetupVerify:
    """Tests for /setupverify and /removeverify."""

    @pytest.mark.asyncio
    async def test_setupverify_writes_config(self, commands, store):
        """
        Tests /setupverify:
        - The role and channel are stored for the guild
        - The moderator gets a private confirmation
        """
        interaction = make_interaction()
        role = MagicMock(id=100)
        channel = MagicMock(id=200)

        await commands["setupverify"](interaction, role, channel)

        assert store.get_server_config(1) == GuildConfig(1, 100, 200)
        assert json.loads(store.path.read_text())["1"] == {"verifiedRole": "100", "notifyChannel": "200"}
        kwargs = interaction.response.send_message.call_args.kwargs
        assert kwargs["embed"].title == MessageTemplates.SETUP_DONE_TITLE
        assert kwargs["ephemeral"] is True

    @pytest.mark.asyncio
    async def test_removeverify(self, commands, store):
        """
        Tests /removeverify:
        - Removes an existing config
        - Reports when there was nothing to remove
        """
        store.set_server_config(GuildConfig(1, 100, 200))
        interaction = make_interaction()

        await commands["removeverify"](interaction)

        assert store.get_server_config(1) is None
        assert interaction.response.send_message.call_args.kwargs["embed"].description == MessageTemplates.REMOVED

        again = make_interaction()
        await commands["removeverify"](again)
        assert again.response.send_message.call_args.kwargs["embed"].description == MessageTemplates.NOTHING_TO_REMOVE


class TestVerifyPanel:
    """Tests for /verifypanel."""

    @pytest.mark.asyncio
    async def test_posts_panel(self, commands):
        """The panel is posted to the given channel with the verification button."""
        interaction = make_interaction()
        channel = MagicMock()
        channel.mention = "<#300>"
        channel.send = AsyncMock()

        await commands["verifypanel"](interaction, channel)

        view = channel.send.call_args.kwargs["view"]
        assert view.children[0].custom_id == "verification"
        assert "<#300>" in interaction.response.send_message.call_args.args[0]

    @pytest.mark.asyncio
    async def test_defaults_to_current_channel(self, commands):
        interaction = make_interaction()
        interaction.channel.send = AsyncMock()

        await commands["verifypanel"](interaction)

        interaction.channel.send.assert_called_once()


class TestPing:
    """Tests for /ping."""

    @pytest.mark.asyncio
    async def test_ping(self, commands):
        interaction = make_interaction()

        await commands["ping"](interaction)

        assert "50ms" in interaction.response.send_message.call_args.kwargs["embed"].description
