"""
Health Monitor
Periodic advisory probe of the remote generation service
FILE: quizgen/services/health_monitor.py
"""
import asyncio
import logging
from datetime import datetime, timezone
from typing import Optional

from quizgen.models.generation import HealthStatus
from quizgen.services.generation_client import GenerationServiceClient, GenerationServiceError
from quizgen.services.status_indicator import StatusIndicator

logger = logging.getLogger(__name__)


OFFLINE_NOTICE_KEY = "service-offline"
OFFLINE_TITLE = "🤖 AI服务离线"
OFFLINE_MESSAGE = "AI生成服务未运行，题目生成将使用备用方案"


class HealthMonitor:
    """
    Polls the service health-check endpoint in the background.

    The resulting HealthStatus only drives the offline notice; generation
    never waits on or consults it.
    """

    def __init__(
        self,
        client: GenerationServiceClient,
        indicator: StatusIndicator,
        interval: float = 30.0
    ):
        self.client = client
        self.indicator = indicator
        self.interval = interval
        self.status = HealthStatus()
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def probe(self) -> HealthStatus:
        """
        Run one health check and update the offline notice

        Returns:
            The new HealthStatus
        """
        message = None
        try:
            data = await self.client.check_health()
            available = bool(data.get("success"))
            message = data.get("message")
        except GenerationServiceError as e:
            available = False
            message = str(e)

        self.status = HealthStatus(
            available=available,
            last_checked_at=datetime.now(timezone.utc),
            message=message,
        )

        if available:
            if self.indicator.clear(OFFLINE_NOTICE_KEY):
                logger.info("✅ Generation service is back online")
        else:
            if self.indicator.show(OFFLINE_NOTICE_KEY, OFFLINE_TITLE, OFFLINE_MESSAGE):
                logger.warning(f"⚠️ Generation service offline: {message}")

        return self.status

    async def _run(self):
        while True:
            try:
                await self.probe()
            except Exception:
                logger.exception("❌ Health probe crashed")
            await asyncio.sleep(self.interval)

    def start(self, interval: Optional[float] = None) -> None:
        """
        Start probing every `interval` seconds (first probe runs immediately)

        Must be called from within a running event loop. Calling start()
        while already running is a no-op.
        """
        if interval is not None:
            self.interval = interval

        if self.running:
            return

        self._task = asyncio.create_task(self._run())
        logger.info(f"🩺 Health monitor started (every {self.interval:.0f}s)")

    async def stop(self) -> None:
        """Stop the probe loop and wait for it to finish"""
        if self._task is None:
            return

        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        logger.info("🛑 Health monitor stopped")
