"""
Health Monitor Module

Polls the API liveness endpoint at startup and then on a fixed interval.
"""

import asyncio
from enum import Enum
from typing import Callable, List, Optional, Set

from .errors import HttpError, NetworkError
from .gateway import ApiGateway
from .logging_config import get_logger

DEFAULT_POLL_INTERVAL_SECONDS = 30.0


class HealthStatus(Enum):
    UNKNOWN = "unknown"
    ONLINE = "online"
    OFFLINE = "offline"

    @property
    def label(self) -> str:
        return {
            HealthStatus.UNKNOWN: "Checking...",
            HealthStatus.ONLINE: "✅ Online",
            HealthStatus.OFFLINE: "❌ Offline",
        }[self]


StatusListener = Callable[[HealthStatus], None]


class HealthMonitor:
    """Passive API status indicator, independent of the session"""

    def __init__(self, gateway: ApiGateway, interval_seconds: float = DEFAULT_POLL_INTERVAL_SECONDS):
        self.gateway = gateway
        self.interval_seconds = interval_seconds
        self.status = HealthStatus.UNKNOWN
        self._listeners: List[StatusListener] = []
        self._ticker: Optional[asyncio.Task] = None
        self._polls: Set[asyncio.Task] = set()
        self.logger = get_logger("banking_client.health")

    def add_listener(self, listener: StatusListener) -> None:
        self._listeners.append(listener)

    async def poll(self) -> HealthStatus:
        """Any success is Online, any HTTP or transport failure is Offline"""
        try:
            await self.gateway.check_health()
            status = HealthStatus.ONLINE
        except (HttpError, NetworkError) as e:
            self.logger.warning(f"Health check failed: {e}")
            status = HealthStatus.OFFLINE

        if status != self.status:
            self.logger.info(f"API status {self.status.value} -> {status.value}")
        self.status = status
        for listener in self._listeners:
            listener(status)
        return status

    def start(self) -> None:
        """Poll now and every interval until stop(); a no-op if already running"""
        if self._ticker is None or self._ticker.done():
            self._ticker = asyncio.get_running_loop().create_task(self._run())

    async def stop(self) -> None:
        tasks = list(self._polls)
        if self._ticker is not None:
            tasks.append(self._ticker)
            self._ticker = None
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        self._polls.clear()

    @property
    def running(self) -> bool:
        return self._ticker is not None and not self._ticker.done()

    async def _run(self) -> None:
        # Each tick gets its own task; a slow poll never delays the next one
        while True:
            task = asyncio.get_running_loop().create_task(self.poll())
            self._polls.add(task)
            task.add_done_callback(self._polls.discard)
            await asyncio.sleep(self.interval_seconds)
