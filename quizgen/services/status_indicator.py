"""
Status Indicator
Keyed, persistent status notices shown to the UI (e.g. the offline banner)
"""
import logging
from datetime import datetime, timezone
from typing import Dict, List, Optional

from pydantic import BaseModel

logger = logging.getLogger(__name__)


class StatusNotice(BaseModel):
    key: str
    level: str = "error"
    title: str
    message: str
    shown_at: datetime


class StatusIndicator:
    """
    Holds at most one notice per key.

    show() and clear() are idempotent: showing a key that is already
    displayed keeps the original notice, clearing a missing key is a no-op.
    """

    def __init__(self):
        self._notices: Dict[str, StatusNotice] = {}

    def show(self, key: str, title: str, message: str, level: str = "error") -> bool:
        """
        Display a notice under `key`

        Returns:
            True if a new notice was added, False if one was already shown
        """
        if key in self._notices:
            return False

        self._notices[key] = StatusNotice(
            key=key,
            level=level,
            title=title,
            message=message,
            shown_at=datetime.now(timezone.utc),
        )
        logger.info(f"📢 Status notice shown: {key}")
        return True

    def clear(self, key: str) -> bool:
        """Remove the notice under `key`; returns True if one was removed"""
        if self._notices.pop(key, None) is None:
            return False
        logger.info(f"🧹 Status notice cleared: {key}")
        return True

    def is_shown(self, key: str) -> bool:
        return key in self._notices

    def get(self, key: str) -> Optional[StatusNotice]:
        return self._notices.get(key)

    def active(self) -> List[StatusNotice]:
        return list(self._notices.values())
