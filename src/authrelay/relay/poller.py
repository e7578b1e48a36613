# Poll-and-consume delivery of completed sessions.
# Created: 2026-10-19

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum

from authrelay.relay.errors import ClientError, NotFound
from authrelay.relay.models import TokenData
from authrelay.relay.store import SessionStore

logger = logging.getLogger(__name__)


class PollStatus(str, Enum):
    PENDING = "pending"
    COMPLETE = "complete"


@dataclass
class PollResult:
    status: PollStatus
    tokens: TokenData | None = None

    @property
    def pending(self) -> bool:
        return self.status is PollStatus.PENDING


class PollHandler:
    """Hands a completed session's tokens to exactly one poller.

    Unknown, expired and already-consumed keys all raise NotFound; the
    caller cannot tell them apart.
    """

    def __init__(self, store: SessionStore):
        self.store = store

    def poll(self, read_key: str | None) -> PollResult:
        if not read_key:
            raise ClientError("Invalid key")

        session = self.store.consume(read_key)
        if session is None:
            raise NotFound()
        if session.result is None:
            return PollResult(PollStatus.PENDING)

        logger.info("Delivered tokens for session %s…", read_key[:6])
        return PollResult(PollStatus.COMPLETE, session.result)
