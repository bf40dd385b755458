"""Transient user-facing notices ("toasts") raised by host screens."""

import logging
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

logger = logging.getLogger(__name__)

MAX_NOTICES = 20


class NoticeLevel(str, Enum):
    SUCCESS = "success"
    INFO = "info"
    ERROR = "error"


@dataclass
class Notice:
    level: NoticeLevel
    message: str
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    dismissed: bool = False


class Notifier:
    """Bounded queue of non-blocking notices for the renderer to display."""

    def __init__(self, max_notices: int = MAX_NOTICES) -> None:
        self._notices: deque[Notice] = deque(maxlen=max_notices)

    def _push(self, level: NoticeLevel, message: str) -> Notice:
        notice = Notice(level=level, message=message)
        self._notices.append(notice)
        return notice

    def success(self, message: str) -> Notice:
        logger.info("Notice: %s", message)
        return self._push(NoticeLevel.SUCCESS, message)

    def info(self, message: str) -> Notice:
        logger.info("Notice: %s", message)
        return self._push(NoticeLevel.INFO, message)

    def error(self, message: str, detail: Optional[str] = None) -> Notice:
        if detail:
            logger.warning("Error notice: %s (%s)", message, detail)
        else:
            logger.warning("Error notice: %s", message)
        return self._push(NoticeLevel.ERROR, message)

    def active(self) -> list[Notice]:
        return [n for n in self._notices if not n.dismissed]

    def errors(self) -> list[Notice]:
        return [n for n in self.active() if n.level == NoticeLevel.ERROR]

    def dismiss(self, notice: Notice) -> None:
        notice.dismissed = True

    def dismiss_all(self) -> None:
        for notice in self._notices:
            notice.dismissed = True
