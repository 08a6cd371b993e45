"""Bounded polling for externally produced files"""

import asyncio
import logging
from pathlib import Path
from typing import Awaitable, Callable, Optional

from ..api.exceptions import SignalWaitExhaustedError
from ..constants import DEFAULT_SIGNAL_MAX_ATTEMPTS, DEFAULT_SIGNAL_POLL_INTERVAL

logger = logging.getLogger(__name__)

Sleep = Callable[[float], Awaitable[None]]


class BoundedWait:
    """Poll a condition at a fixed interval for a bounded number of attempts"""

    def __init__(self,
                 poll_interval: float = DEFAULT_SIGNAL_POLL_INTERVAL,
                 max_attempts: int = DEFAULT_SIGNAL_MAX_ATTEMPTS,
                 sleep: Optional[Sleep] = None):
        """
        Initialize wait

        Args:
            poll_interval: Seconds slept before each check
            max_attempts: Number of checks before giving up
            sleep: Async sleep function, asyncio.sleep by default
        """
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self.poll_interval = max(0.0, poll_interval)
        self.max_attempts = max_attempts
        self._sleep = sleep or asyncio.sleep

    async def until(self, predicate: Callable[[], bool]) -> int:
        """
        Wait until ``predicate`` holds

        Returns:
            Attempt number on which the predicate held, 0 if it never did
        """
        for attempt in range(1, self.max_attempts + 1):
            await self._sleep(self.poll_interval)
            if predicate():
                return attempt
        return 0

    async def for_file(self, path: Path, strict: bool = False) -> bool:
        """
        Wait for a file to appear

        Args:
            path: File to wait for
            strict: Raise instead of returning False when the budget is spent

        Returns:
            True if the file appeared

        Raises:
            SignalWaitExhaustedError: If strict and the file never appeared
        """
        path = Path(path)
        attempt = await self.until(path.exists)
        if attempt:
            logger.info(f"{path.name} appeared after {attempt} attempt(s)")
            return True

        if strict:
            raise SignalWaitExhaustedError(str(path), self.max_attempts)
        logger.debug(f"{path} not found after {self.max_attempts} attempts")
        return False
