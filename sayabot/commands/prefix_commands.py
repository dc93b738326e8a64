"""
Prefix commands (e.g. ``.help``) and the registry they are looked up in.

The registry is filled once at startup and then frozen into a read-only
name/alias mapping.
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Awaitable, Callable, Dict, List, Mapping, Optional, Tuple

import discord

from ..config import COMMAND_PREFIX, BOT_NAME
from ..utils.message_templates import create_embed
from .user_lookup import build_user_info

CommandHandler = Callable[[discord.Message, List[str], discord.Client], Awaitable[None]]


@dataclass(frozen=True)
class PrefixCommand:
    """A command invoked by a message starting with the prefix."""
    name: str
    handler: CommandHandler
    description: str = ""
    aliases: Tuple[str, ...] = field(default_factory=tuple)


class CommandRegistry:
    """Name and alias lookup table for prefix commands."""

    def __init__(self) -> None:
        self._commands: Dict[str, PrefixCommand] = {}
        self._frozen: Optional[Mapping[str, PrefixCommand]] = None

    def register(self, command: PrefixCommand) -> None:
        """Register a command under its name and every alias.

        Raises:
            RuntimeError: If the registry is already frozen.
            ValueError: If a name or alias is already taken.
        """
        if self._frozen is not None:
            raise RuntimeError("Command registry is frozen")
        for key in (command.name, *command.aliases):
            key = key.lower()
            if key in self._commands:
                raise ValueError(f"Command name '{key}' is already registered")
            self._commands[key] = command

    def freeze(self) -> "CommandRegistry":
        """Make the registry read-only."""
        if self._frozen is None:
            self._frozen = MappingProxyType(dict(self._commands))
        return self

    @property
    def commands(self) -> Mapping[str, PrefixCommand]:
        return self._frozen if self._frozen is not None else MappingProxyType(self._commands)

    def get(self, name: str) -> Optional[PrefixCommand]:
        """Look up a command by name or alias."""
        return self.commands.get(name.lower())

    def unique_commands(self) -> List[PrefixCommand]:
        """Each command once, in registration order."""
        seen: List[PrefixCommand] = []
        for command in self.commands.values():
            if command not in seen:
                seen.append(command)
        return seen


def _resolve_member(message: discord.Message, args: List[str]) -> Optional[discord.abc.User]:
    if message.mentions:
        return message.mentions[0]
    if args and args[0].isdigit() and message.guild:
        return message.guild.get_member(int(args[0]))
    return message.author


def build_default_registry() -> CommandRegistry:
    """Create the frozen registry of built-in prefix commands."""
    registry = CommandRegistry()

    async def help_command(message: discord.Message, args: List[str], client: discord.Client) -> None:
        lines = []
        for command in registry.unique_commands():
            aliases = f" ({', '.join(command.aliases)})" if command.aliases else ""
            lines.append(f"`{COMMAND_PREFIX}{command.name}`{aliases} - {command.description}")
        await message.reply(embed=create_embed(f"{BOT_NAME} Commands", "\n".join(lines), "accent"))

    async def ping_command(message: discord.Message, args: List[str], client: discord.Client) -> None:
        latency_ms = round(client.latency * 1000)
        await message.reply(embed=create_embed("Pong! 🏓", f"Latency: **{latency_ms}ms**", "accent"))

    async def userinfo_command(message: discord.Message, args: List[str], client: discord.Client) -> None:
        user = _resolve_member(message, args)
        if user is None:
            await message.reply(embed=create_embed("User Not Found", "This user is not on the server.", "error"))
            return
        embed, view = build_user_info(user)
        await message.reply(embed=embed, view=view)

    registry.register(PrefixCommand("help", help_command, "Show this list", ("h", "commands")))
    registry.register(PrefixCommand("ping", ping_command, "Show the gateway latency"))
    registry.register(PrefixCommand("userinfo", userinfo_command, "Show a member's info card", ("ui", "user")))
    return registry.freeze()
