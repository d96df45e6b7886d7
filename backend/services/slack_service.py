"""Messaging capability used to push content to team chat.

``SimulatedSlackSender`` keeps a fixed channel directory and an in-process
message history; swap in a real ``MessageSender`` without touching the store.
"""
from __future__ import annotations

import asyncio
import logging
import uuid
from abc import ABC, abstractmethod
from collections import defaultdict, deque
from dataclasses import dataclass
from datetime import datetime, timezone

from fastapi import Request

logger = logging.getLogger(__name__)

SEND_DELAY_SECONDS = 0.5
LIST_DELAY_SECONDS = 0.7
HISTORY_LIMIT = 100  # messages kept per channel


class ChannelNotFoundError(LookupError):
    """Raised when a message targets a channel the sender does not know."""


@dataclass(frozen=True)
class SlackChannel:
    id: str
    name: str
    members: int


@dataclass(frozen=True)
class SentMessage:
    message_id: str
    channel: str
    channel_name: str
    text: str
    timestamp: str


SIMULATED_CHANNELS: tuple[SlackChannel, ...] = (
    SlackChannel(id="C01234ABCDE", name="general", members=32),
    SlackChannel(id="C098765FGHI", name="team-real-estate", members=15),
    SlackChannel(id="C111222JKLM", name="leads", members=8),
    SlackChannel(id="C333444NOPQ", name="property-listings", members=12),
    SlackChannel(id="C555666RSTU", name="client-success", members=6),
)


class MessageSender(ABC):
    @abstractmethod
    async def send_message(self, channel: str, text: str) -> SentMessage:
        ...

    @abstractmethod
    async def list_channels(self) -> list[SlackChannel]:
        ...


class SimulatedSlackSender(MessageSender):
    def __init__(
        self,
        latency_scale: float = 1.0,
        channels: tuple[SlackChannel, ...] = SIMULATED_CHANNELS,
        history_limit: int = HISTORY_LIMIT,
    ):
        self.latency_scale = max(float(latency_scale), 0.0)
        self._channels = channels
        self.history: dict[str, deque[SentMessage]] = defaultdict(lambda: deque(maxlen=history_limit))

    def _resolve(self, channel: str) -> SlackChannel:
        wanted = (channel or "").strip().lstrip("#")
        for candidate in self._channels:
            if wanted in (candidate.id, candidate.name):
                return candidate
        raise ChannelNotFoundError(f"Channel {channel} not found")

    async def send_message(self, channel: str, text: str) -> SentMessage:
        await asyncio.sleep(SEND_DELAY_SECONDS * self.latency_scale)
        target = self._resolve(channel)
        message = SentMessage(
            message_id=f"msg_{uuid.uuid4().hex[:12]}",
            channel=target.id,
            channel_name=target.name,
            text=text,
            timestamp=datetime.now(timezone.utc).isoformat(),
        )
        self.history[target.id].append(message)
        preview = text[:50] + ("..." if len(text) > 50 else "")
        logger.info("Simulated message sent to #%s: %s", target.name, preview)
        return message

    async def list_channels(self) -> list[SlackChannel]:
        await asyncio.sleep(LIST_DELAY_SECONDS * self.latency_scale)
        return list(self._channels)


def get_message_sender(request: Request) -> MessageSender:
    return request.app.state.message_sender
