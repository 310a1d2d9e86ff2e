"""Arbitration between local pause/resume actions and pushed status echoes.

Last writer wins, with ties going to the local side: a pushed status whose
server time is at or before the last local change is stale and ignored.
Only the two participants of a 1:1 chat can pause it, so nothing stronger
than a timestamp comparison is needed.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime

from litbuddy_chat.application.dto.results import StatusResponse
from litbuddy_chat.application.ports.clock import Clock, SystemClock
from litbuddy_chat.domain.entities.conversation import ConversationStatus
from litbuddy_chat.domain.events.status_changed import StatusChanged
from litbuddy_chat.domain.value_objects.enums import ConversationState

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class LocalSnapshot:
    """State to return to when a local change fails."""

    status: ConversationStatus
    last_local_change: datetime | None


class StatusSynchronizer:
    def __init__(
        self,
        user_id: str,
        clock: Clock | None = None,
        status: ConversationStatus | None = None,
    ) -> None:
        self._user_id = user_id
        self._clock = clock or SystemClock()
        self._status = status or ConversationStatus.active()
        self._last_local_change: datetime | None = None

    @property
    def status(self) -> ConversationStatus:
        return self._status

    @property
    def last_local_change(self) -> datetime | None:
        return self._last_local_change

    def reset(self, status: ConversationStatus) -> None:
        """Adopt the status loaded with the chat history."""
        self._status = status

    def begin_local(self, paused: bool) -> LocalSnapshot:
        """Apply a local change optimistically; returns the snapshot to roll back to."""
        prior = LocalSnapshot(self._status, self._last_local_change)
        now = self._clock.now()
        self._last_local_change = now
        if paused:
            self._status = ConversationStatus.paused(by=self._user_id, at=now)
        else:
            self._status = ConversationStatus.active()
        return prior

    def confirm_local(self, paused: bool, response: StatusResponse) -> None:
        if paused:
            state = ConversationState.PAUSED if response.paused_at else (
                response.state or ConversationState.PAUSED
            )
            self._status = ConversationStatus(
                state=state,
                paused_by=response.paused_by or self._user_id,
                paused_at=response.paused_at or self._status.paused_at,
            )
        else:
            self._status = ConversationStatus(state=response.state or ConversationState.ACTIVE)

    def rollback(self, prior: LocalSnapshot) -> None:
        # A failed change leaves no local timestamp behind.
        self._status = prior.status
        self._last_local_change = prior.last_local_change

    def apply_remote(self, event: StatusChanged) -> bool:
        occurred_at = event.occurred_at
        if (
            self._last_local_change is not None
            and occurred_at is not None
            and occurred_at <= self._last_local_change
        ):
            logger.debug(
                "Ignoring stale status echo for chat %s (%s <= %s)",
                event.chat_id, occurred_at, self._last_local_change,
            )
            return False
        self._status = event.to_status()
        return True
