"""
Registry of in-flight verification requests.

Tracks each requester's request state so that a decision can only be taken
once, and remembers where the moderator notification was posted so it can be
resolved without guessing.

State machine per request::

    PENDING -> IN_PROGRESS -> RESOLVED
    PENDING -> DENY_PENDING -> IN_PROGRESS -> RESOLVED

A failed decision returns the request from IN_PROGRESS to PENDING.
"""

import asyncio
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum
from typing import Dict, Optional, Tuple

from .logging import logger, RequestLogCollector


class VerificationState(Enum):
    """Lifecycle state of a verification request."""
    PENDING = "pending"
    DENY_PENDING = "deny_pending"
    IN_PROGRESS = "in_progress"
    RESOLVED = "resolved"


class VerificationOutcome(Enum):
    """Final outcome of a resolved request."""
    APPROVED = "approved"
    DENIED = "denied"


@dataclass
class VerificationRequest:
    """A member's verification request awaiting or past a moderator decision."""

    guild_id: int
    user_id: int
    state: VerificationState = VerificationState.PENDING
    outcome: Optional[VerificationOutcome] = None
    channel_id: Optional[int] = None
    message_id: Optional[int] = None
    moderator_id: Optional[int] = None
    created_at: datetime = field(default_factory=datetime.now)
    updated_at: datetime = field(default_factory=datetime.now)
    log: RequestLogCollector = field(default=None, repr=False)

    def __post_init__(self) -> None:
        if self.log is None:
            self.log = RequestLogCollector(self.user_id)

    @property
    def is_active(self) -> bool:
        """Whether the request still awaits a final decision."""
        return self.state is not VerificationState.RESOLVED

    @property
    def is_claimable(self) -> bool:
        """Whether a moderator may start a decision on this request."""
        return self.state in (VerificationState.PENDING, VerificationState.DENY_PENDING)

    def transition(self, state: VerificationState) -> None:
        """Move to a new state and record it in the audit trail."""
        self.log.info(f"{self.state.value} -> {state.value}")
        self.state = state
        self.updated_at = datetime.now()

    def is_expired(self, retention_minutes: int) -> bool:
        """Check if a request has gone unchanged long enough to forget.

        Applies to active requests too, so one whose notification was
        deleted or whose deny form was abandoned does not block the
        requester forever.
        """
        return datetime.now() > self.updated_at + timedelta(minutes=retention_minutes)


class VerificationRegistry:
    """In-memory map from (guild, requester) to verification request."""

    def __init__(self, retention_minutes: int = 1440):
        """Initialize the registry.

        Args:
            retention_minutes: How long a request is kept after its last
                change. Resolved requests stay this long so late clicks on
                stale buttons are recognized as already handled; active ones
                are replaced or dropped after it.
        """
        self.retention_minutes = retention_minutes
        self._requests: Dict[Tuple[int, int], VerificationRequest] = {}
        self._lock = asyncio.Lock()
        self._cleanup_task: Optional[asyncio.Task] = None

    def _get_key(self, guild_id: int, user_id: int) -> Tuple[int, int]:
        return (guild_id, user_id)

    async def open_request(self, guild_id: int, user_id: int) -> Tuple[VerificationRequest, bool]:
        """Open a request for a member, unless one is already active.

        An active request past the retention window is replaced.

        Args:
            guild_id: Discord guild ID.
            user_id: Discord user ID of the requester.

        Returns:
            Tuple of (request, created). ``created`` is False when an active
            request already existed and was returned instead.
        """
        async with self._lock:
            key = self._get_key(guild_id, user_id)
            existing = self._requests.get(key)
            if existing is not None and existing.is_active:
                if not existing.is_expired(self.retention_minutes):
                    return existing, False
                existing.log.info(f"Stale {existing.state.value} request replaced")

            request = VerificationRequest(guild_id=guild_id, user_id=user_id)
            self._requests[key] = request
            request.log.info(f"Request opened in guild {guild_id}")
            return request, True

    async def get_request(self, guild_id: int, user_id: int) -> Optional[VerificationRequest]:
        """Get the request for a member, if known."""
        async with self._lock:
            return self._requests.get(self._get_key(guild_id, user_id))

    async def attach_notification(
        self,
        guild_id: int,
        user_id: int,
        channel_id: int,
        message_id: int
    ) -> None:
        """Record where the moderator notification for a request was posted."""
        async with self._lock:
            request = self._requests.get(self._get_key(guild_id, user_id))
            if request is None:
                return
            request.channel_id = channel_id
            request.message_id = message_id
            request.log.info(f"Notification posted as message {message_id} in channel {channel_id}")

    async def discard(self, guild_id: int, user_id: int) -> None:
        """Forget a request whose notification could not be posted."""
        async with self._lock:
            request = self._requests.pop(self._get_key(guild_id, user_id), None)
            if request:
                request.log.info("Request discarded")

    def _get_or_adopt(self, guild_id: int, user_id: int) -> VerificationRequest:
        # Notifications posted before a restart have no entry yet.
        key = self._get_key(guild_id, user_id)
        request = self._requests.get(key)
        if request is None:
            request = VerificationRequest(guild_id=guild_id, user_id=user_id)
            self._requests[key] = request
            request.log.info("Request adopted from an untracked notification")
        return request

    async def claim(
        self,
        guild_id: int,
        user_id: int,
        moderator_id: int
    ) -> Optional[VerificationRequest]:
        """Claim a request for a final decision.

        Returns:
            The request, now IN_PROGRESS, or None if another decision is
            running or the request was already resolved.
        """
        async with self._lock:
            request = self._get_or_adopt(guild_id, user_id)
            if not request.is_claimable:
                request.log.info(f"Claim by moderator {moderator_id} refused ({request.state.value})")
                return None
            request.moderator_id = moderator_id
            request.transition(VerificationState.IN_PROGRESS)
            return request

    async def mark_deny_pending(self, guild_id: int, user_id: int, moderator_id: int) -> bool:
        """Record that a moderator opened the rejection-reason form.

        Returns:
            False if the request is being decided or already resolved.
        """
        async with self._lock:
            request = self._get_or_adopt(guild_id, user_id)
            if not request.is_claimable:
                return False
            request.moderator_id = moderator_id
            if request.state is not VerificationState.DENY_PENDING:
                request.transition(VerificationState.DENY_PENDING)
            return True

    async def release(self, guild_id: int, user_id: int) -> None:
        """Return an in-progress request to PENDING after a failed decision."""
        async with self._lock:
            request = self._requests.get(self._get_key(guild_id, user_id))
            if request and request.state is VerificationState.IN_PROGRESS:
                request.moderator_id = None
                request.transition(VerificationState.PENDING)

    async def resolve(
        self,
        guild_id: int,
        user_id: int,
        outcome: VerificationOutcome
    ) -> Optional[VerificationRequest]:
        """Mark a request as resolved with the given outcome."""
        async with self._lock:
            request = self._requests.get(self._get_key(guild_id, user_id))
            if request is None:
                return None
            request.outcome = outcome
            request.transition(VerificationState.RESOLVED)
            return request

    async def cleanup_expired_requests(self) -> int:
        """Remove requests left unchanged past the retention window.

        Returns:
            Number of requests removed.
        """
        async with self._lock:
            expired_keys = [
                key for key, request in self._requests.items()
                if request.is_expired(self.retention_minutes)
            ]

            for key in expired_keys:
                del self._requests[key]

            if expired_keys:
                logger.info(f"Cleaned up {len(expired_keys)} expired verification requests")

            return len(expired_keys)

    async def start_cleanup_task(self, interval_minutes: int = 30) -> None:
        """Start a background task to periodically forget old requests."""
        async def cleanup_loop():
            while True:
                await asyncio.sleep(interval_minutes * 60)
                await self.cleanup_expired_requests()

        if self._cleanup_task is None or self._cleanup_task.done():
            self._cleanup_task = asyncio.create_task(cleanup_loop())
            logger.info(f"Started verification cleanup task (interval: {interval_minutes} minutes)")

    def stop_cleanup_task(self) -> None:
        """Stop the background cleanup task if it is running."""
        if self._cleanup_task and not self._cleanup_task.done():
            self._cleanup_task.cancel()
            logger.info("Stopped verification cleanup task")

    def get_active_request_count(self) -> int:
        """Get the number of requests still awaiting a decision."""
        return sum(1 for request in self._requests.values() if request.is_active)


_verification_registry: Optional[VerificationRegistry] = None


def get_verification_registry(retention_minutes: int = 1440) -> VerificationRegistry:
    """Get the singleton verification registry.

    Args:
        retention_minutes: Request retention (only used on first call).
    """
    global _verification_registry
    if _verification_registry is None:
        _verification_registry = VerificationRegistry(retention_minutes=retention_minutes)
    return _verification_registry


def reset_verification_registry() -> None:
    """Reset the registry (useful for testing)."""
    global _verification_registry
    if _verification_registry:
        _verification_registry.stop_cleanup_task()
    _verification_registry = None
