"""Runner for work scheduled after the HTTP response has been sent"""

from collections import deque
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Deque, List

import structlog
from pydantic import BaseModel

logger = structlog.get_logger()


class FailedTask(BaseModel):
    name: str
    error: str
    failed_at: datetime


class DeferredRunner:
    """
    Executes deferred tasks and keeps their failures.

    Routes hand `run` to FastAPI's BackgroundTasks. Nothing raised here can
    reach the client, whose response has already gone out, so failures are
    logged and kept in a bounded dead-letter list instead.
    """

    def __init__(self, max_dead_letters: int = 100):
        self._dead_letters: Deque[FailedTask] = deque(maxlen=max_dead_letters)

    @property
    def dead_letters(self) -> List[FailedTask]:
        return list(self._dead_letters)

    async def run(self, name: str, func: Callable[..., Awaitable[Any]], *args, **kwargs) -> None:
        logger.info("deferred_task_started", task=name)
        try:
            await func(*args, **kwargs)
        except Exception as e:
            logger.error("deferred_task_failed", task=name, error=str(e), exc_info=True)
            self._dead_letters.append(FailedTask(
                name=name,
                error=str(e),
                failed_at=datetime.now(timezone.utc)
            ))
            return
        logger.info("deferred_task_finished", task=name)


# Global runner instance
deferred_runner = DeferredRunner()
