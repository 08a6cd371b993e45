# app_packager/services/image_service.py
"""Async image service"""

import asyncio
import concurrent.futures
import logging
from pathlib import Path
from typing import Any, Dict, Iterable, Optional, Union

from ..api.exceptions import OperationTimeoutError
from ..constants import REMOVE_TIMEOUT
from ..core.image_client import ImageClient
from ..core.trusted_registry import TrustedRegistryBootstrapper
from ..models.application import ImageInfo
from ..models.config import PackagerConfig, TimeoutConfig
from ..utils.async_utils import run_cancellable

logger = logging.getLogger(__name__)


class ImageService:
    """Runs image client operations without blocking the event loop

    Cancelling the awaiting task aborts the underlying stream at its next
    progress record.
    """

    def __init__(self,
                 client: ImageClient,
                 timeouts: Optional[TimeoutConfig] = None,
                 executor: Optional[concurrent.futures.Executor] = None):
        """
        Initialize image service

        Args:
            client: Blocking image client
            timeouts: Operation timeouts in minutes
            executor: Executor for blocking calls, the loop default if None
        """
        self.client = client
        self.timeouts = timeouts or TimeoutConfig()
        self.executor = executor

    @classmethod
    def from_config(cls, config: PackagerConfig) -> 'ImageService':
        """Create a service with a docker-backed client"""
        bootstrapper = TrustedRegistryBootstrapper(
            scheme=config.registry.scheme,
            timeout=config.registry.request_timeout,
            verify=config.registry.verify_tls
        )
        client = ImageClient.from_config(config.docker, bootstrapper=bootstrapper)
        return cls(client, config.timeouts)

    async def pull(self, image: str, info: Optional[ImageInfo] = None) -> Dict[str, Any]:
        """Pull an image with the credentials of ``info``"""
        info = info or ImageInfo()
        return await run_cancellable(
            self.client.pull, image, info.hub_user, info.hub_password,
            timeout=self.timeouts.pull,
            executor=self.executor
        )

    async def tag(self, source: str, target: str) -> None:
        """Tag a local image"""
        await run_cancellable(self.client.tag, source, target, executor=self.executor)

    async def push(self,
                   image: str,
                   info: Optional[ImageInfo] = None,
                   trusted: bool = False) -> None:
        """Push an image, bootstrapping the repository first when trusted"""
        info = info or ImageInfo()
        func = self.client.trusted_push if trusted else self.client.push
        await run_cancellable(
            func, image, info.hub_user, info.hub_password,
            timeout=self.timeouts.push,
            executor=self.executor
        )

    async def save(self, images: Iterable[str], destination: Union[str, Path]) -> Path:
        """Save images into one archive"""
        return await run_cancellable(
            self.client.save, list(images), destination,
            timeout=self.timeouts.save,
            executor=self.executor
        )

    async def load(self, tar_path: Union[str, Path]) -> None:
        """Load images from an archive"""
        await run_cancellable(
            self.client.load, tar_path,
            timeout=self.timeouts.load,
            executor=self.executor
        )

    async def inspect(self, image: str) -> Dict[str, Any]:
        """Inspect a local image"""
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(self.executor, self.client.inspect, image)

    async def remove(self, image: str) -> None:
        """Force-remove a local image within the fixed removal timeout"""
        loop = asyncio.get_running_loop()
        timeout = REMOVE_TIMEOUT * 60
        try:
            await asyncio.wait_for(
                loop.run_in_executor(self.executor, self.client.remove, image),
                timeout=timeout
            )
        except asyncio.TimeoutError as e:
            raise OperationTimeoutError(f"remove {image}", timeout) from e
