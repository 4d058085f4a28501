"""
Message Bus Module

Transient user notifications. Each message is shown oldest-first and
removes itself after a fixed time-to-live on its own timer.
"""

import asyncio
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Callable, Dict, List, Optional, Tuple

from .logging_config import get_logger

DEFAULT_TTL_SECONDS = 5.0


class Severity(Enum):
    INFO = "info"
    SUCCESS = "success"
    ERROR = "error"


@dataclass(frozen=True)
class Message:
    text: str
    severity: Severity
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


ChangeListener = Callable[[Tuple[Message, ...]], None]


class MessageBus:
    """Ordered notification area with per-message expiry"""

    def __init__(self, ttl_seconds: float = DEFAULT_TTL_SECONDS,
                 loop: Optional[asyncio.AbstractEventLoop] = None):
        self.ttl_seconds = ttl_seconds
        self._loop = loop
        self._messages: List[Message] = []
        self._timers: Dict[str, asyncio.TimerHandle] = {}
        self._listeners: List[ChangeListener] = []
        self.logger = get_logger("banking_client.messages")

    def add_listener(self, listener: ChangeListener) -> None:
        self._listeners.append(listener)

    def post(self, text: str, severity: Severity = Severity.INFO) -> Message:
        """Show a message now and schedule its removal. Must run inside the event loop."""
        loop = self._loop or asyncio.get_running_loop()
        message = Message(text=text, severity=severity)
        self._messages.append(message)
        self._timers[message.id] = loop.call_later(self.ttl_seconds, self._expire, message.id)
        self.logger.debug(f"Posted {severity.value} message {message.id}")
        self._notify()
        return message

    def visible(self) -> Tuple[Message, ...]:
        return tuple(self._messages)

    def clear(self) -> None:
        """Drop all messages and cancel their timers"""
        for timer in self._timers.values():
            timer.cancel()
        self._timers.clear()
        self._messages.clear()

    def _expire(self, message_id: str) -> None:
        self._timers.pop(message_id, None)
        remaining = [m for m in self._messages if m.id != message_id]
        if len(remaining) == len(self._messages):
            return
        self._messages = remaining
        self._notify()

    def _notify(self) -> None:
        snapshot = self.visible()
        for listener in self._listeners:
            try:
                listener(snapshot)
            except Exception as e:
                self.logger.error(f"Error in message listener {getattr(listener, '__name__', repr(listener))}: {e}")
