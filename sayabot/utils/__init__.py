"""
Utility modules for the Saya verification bot.
"""

from .logging import get_logger, RequestLogCollector
from .text_utils import truncate_text, normalize_reason
from .guild_config import GuildConfig, GuildConfigStore, get_config_store
from .custom_ids import DecisionAction, DecisionPayload, RejectionModalPayload, UserLookupPayload
from .message_templates import MessageTemplates, create_embed
from .verification_registry import VerificationRegistry, get_verification_registry

__all__ = [
    "get_logger",
    "RequestLogCollector",
    "truncate_text",
    "normalize_reason",
    "GuildConfig",
    "GuildConfigStore",
    "get_config_store",
    "DecisionAction",
    "DecisionPayload",
    "RejectionModalPayload",
    "UserLookupPayload",
    "MessageTemplates",
    "create_embed",
    "VerificationRegistry",
    "get_verification_registry",
]
