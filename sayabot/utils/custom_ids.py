"""
Typed payloads carried in component custom IDs.

Custom IDs on the wire keep their fixed grammar
(``approve_verification_<id>``, ``rejection_reason_modal_<id>``, ...), but
they are parsed in one place into validated payload objects instead of being
split on ``_`` at each call site.
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Optional


VERIFICATION_BUTTON_ID = "verification"
REJECTION_REASON_INPUT_ID = "rejection_reason"
REJECTION_MODAL_PREFIX = "rejection_reason_modal_"

_DECISION_PATTERN = re.compile(r"^(?P<action>approve|deny)_verification_(?P<user_id>\d+)$")
_REJECTION_MODAL_PATTERN = re.compile(r"^rejection_reason_modal_(?P<user_id>\d+)$")
_USER_LOOKUP_PATTERN = re.compile(r"^(?P<action>avatar|banner|permissions)_(?P<user_id>\d+)$")


class DecisionAction(Enum):
    """Moderator decision on a verification request."""
    APPROVE = "approve"
    DENY = "deny"


class UserLookupAction(Enum):
    """User-info lookups offered as buttons."""
    AVATAR = "avatar"
    BANNER = "banner"
    PERMISSIONS = "permissions"


@dataclass(frozen=True)
class DecisionPayload:
    """Payload of an approve/deny button."""
    action: DecisionAction
    requester_id: int

    @property
    def custom_id(self) -> str:
        return f"{self.action.value}_verification_{self.requester_id}"

    @classmethod
    def parse(cls, custom_id: Optional[str]) -> Optional["DecisionPayload"]:
        """Parse a decision custom ID, returning None if it does not match."""
        match = _DECISION_PATTERN.match(custom_id or "")
        if match is None:
            return None
        return cls(DecisionAction(match["action"]), int(match["user_id"]))


@dataclass(frozen=True)
class RejectionModalPayload:
    """Payload of the rejection-reason modal."""
    requester_id: int

    @property
    def custom_id(self) -> str:
        return f"{REJECTION_MODAL_PREFIX}{self.requester_id}"

    @classmethod
    def parse(cls, custom_id: Optional[str]) -> Optional["RejectionModalPayload"]:
        """Parse a rejection modal custom ID, returning None if it does not match."""
        match = _REJECTION_MODAL_PATTERN.match(custom_id or "")
        if match is None:
            return None
        return cls(int(match["user_id"]))


@dataclass(frozen=True)
class UserLookupPayload:
    """Payload of an avatar/banner/permissions button."""
    action: UserLookupAction
    user_id: int

    @property
    def custom_id(self) -> str:
        return f"{self.action.value}_{self.user_id}"

    @classmethod
    def parse(cls, custom_id: Optional[str]) -> Optional["UserLookupPayload"]:
        """Parse a user lookup custom ID, returning None if it does not match."""
        match = _USER_LOOKUP_PATTERN.match(custom_id or "")
        if match is None:
            return None
        return cls(UserLookupAction(match["action"]), int(match["user_id"]))
