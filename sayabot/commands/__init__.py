"""
Discord commands and event routing for the Saya bot.
"""

from .dispatcher import setup_interaction_listener, setup_message_listener
from .slash_commands import setup_slash_commands

__all__ = [
    "setup_interaction_listener",
    "setup_message_listener",
    "setup_slash_commands",
]
