"""Image transfer client over the Docker Engine API"""

import logging
import os
import tarfile
import tempfile
import threading
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Union

import docker
import docker.errors
import requests

from ..api.exceptions import (
    AuthRequiredError,
    ImageError,
    ImageIOError,
    ImageNotFoundError,
    LocalImageNotFoundError,
    MalformedReferenceError,
    OperationTimeoutError,
    RemoteOperationError,
)
from ..constants import (
    ARCHIVE_FILE_MODE,
    DEFAULT_CHUNK_SIZE,
    DEFAULT_LOAD_TIMEOUT,
    DEFAULT_PULL_TIMEOUT,
    DEFAULT_PUSH_TIMEOUT,
    DEFAULT_SAVE_TIMEOUT,
    MIN_TIMEOUT_MINUTES,
    MSG_NO_PULL_ACCESS,
    MSG_NOT_EXIST,
)
from ..models.config import DockerConfig
from .progress import Deadline, decode_progress
from .reference import parse_any_reference, parse_normalized_named, split_repository_tag
from .trusted_registry import TrustedRegistryBootstrapper

logger = logging.getLogger(__name__)


def clamp_timeout(minutes: Optional[Union[int, float]]) -> int:
    """Clamp a timeout in minutes to the one-minute floor"""
    try:
        minutes = int(minutes or 0)
    except (TypeError, ValueError):
        minutes = 0
    return max(MIN_TIMEOUT_MINUTES, minutes)


def make_auth_config(username: str, password: str) -> Optional[Dict[str, str]]:
    """Build registry auth only when both credentials are present

    A partial credential pair is treated as an anonymous request.
    """
    if username and password:
        return {"username": username, "password": password}
    return None


def _explain(error: docker.errors.APIError) -> str:
    return str(error.explanation or error)


def _discard(path: str) -> None:
    if os.path.exists(path):
        os.unlink(path)


class ImageClient:
    """Pull, push, tag, inspect, save, load and remove images

    All methods block; ``ImageService`` runs them on an executor. Streamed
    operations honour ``cancel_event`` even while the runtime is silent.
    """

    def __init__(self,
                 api: docker.APIClient,
                 bootstrapper: Optional[TrustedRegistryBootstrapper] = None,
                 chunk_size: int = DEFAULT_CHUNK_SIZE):
        """
        Initialize image client

        Args:
            api: Low-level Docker API client
            bootstrapper: Trusted registry bootstrapper used by trusted_push
            chunk_size: Read size for image archive streams
        """
        self.api = api
        self.bootstrapper = bootstrapper or TrustedRegistryBootstrapper()
        self.chunk_size = chunk_size

    @classmethod
    def from_config(cls,
                    config: DockerConfig,
                    bootstrapper: Optional[TrustedRegistryBootstrapper] = None) -> 'ImageClient':
        """Create a client from docker connection settings"""
        if config.base_url:
            api = docker.APIClient(
                base_url=config.base_url,
                version=config.version,
                timeout=config.timeout
            )
        else:
            api = docker.from_env(version=config.version, timeout=config.timeout).api
        return cls(api, bootstrapper=bootstrapper)

    def pull(self,
             image: str,
             username: str = "",
             password: str = "",
             timeout: int = DEFAULT_PULL_TIMEOUT,
             cancel_event: Optional[threading.Event] = None) -> Dict[str, Any]:
        """
        Pull an image and return its inspect data

        Args:
            image: Image reference
            username: Registry username
            password: Registry password
            timeout: Timeout in minutes (at least one)
            cancel_event: Event that aborts the pull when set

        Returns:
            Image inspect dictionary
        """
        timeout = clamp_timeout(timeout)
        auth_config = make_auth_config(username, password)
        reference = parse_any_reference(image)
        if not reference.is_named:
            raise MalformedReferenceError(image, "cannot pull an image by ID")

        deadline = Deadline(f"pull {image}", timeout * 60, cancel_event)
        logger.debug(f"Pulling {reference} (auth: {'yes' if auth_config else 'no'})")

        try:
            stream = self.api.pull(
                reference.name,
                tag=reference.reference,
                stream=True,
                decode=False,
                auth_config=auth_config
            )
            decode_progress(stream, deadline)
        except docker.errors.APIError as e:
            logger.debug(f"image name: {image} pull error: {_explain(e)}")
            raise self._pull_error(image, _explain(e), e.status_code) from e
        except RemoteOperationError as e:
            logger.debug(f"error pulling image {image}: {e}")
            raise self._pull_error(image, str(e)) from e
        except requests.exceptions.RequestException as e:
            raise self._transport_error(f"pull {image}", timeout, e) from e

        logger.info(f"Pulled image {image}")
        return self.inspect(image)

    def tag(self,
            source: str,
            target: str,
            timeout: int = MIN_TIMEOUT_MINUTES,
            cancel_event: Optional[threading.Event] = None) -> None:
        """
        Tag a local image

        Raises:
            LocalImageNotFoundError: If source was never pulled or loaded
        """
        deadline = Deadline(f"tag {source}", clamp_timeout(timeout) * 60, cancel_event)
        try:
            self.inspect(source)
        except LocalImageNotFoundError:
            logger.error(f"image tag: local image {source} not found")
            raise

        repository, tag = split_repository_tag(target)
        deadline.check()
        try:
            tagged = self.api.tag(source, repository, tag=tag)
        except docker.errors.APIError as e:
            logger.debug(f"image tag err: {_explain(e)}")
            raise RemoteOperationError(_explain(e)) from e
        if tagged is False:
            raise RemoteOperationError(f"failed to tag {source} as {target}")

    def push(self,
             image: str,
             username: str = "",
             password: str = "",
             timeout: int = DEFAULT_PUSH_TIMEOUT,
             cancel_event: Optional[threading.Event] = None) -> None:
        """
        Push an image to its registry

        Raises:
            MalformedReferenceError: Before any I/O if the name is invalid
        """
        timeout = clamp_timeout(timeout)
        reference = parse_normalized_named(image)
        auth_config = make_auth_config(username, password)
        deadline = Deadline(f"push {image}", timeout * 60, cancel_event)

        try:
            stream = self.api.push(
                reference.name,
                tag=reference.tag or None,
                stream=True,
                decode=False,
                auth_config=auth_config
            )
            if stream is not None:
                decode_progress(stream, deadline)
        except docker.errors.APIError as e:
            raise self._push_error(image, _explain(e), e.status_code) from e
        except RemoteOperationError as e:
            raise self._push_error(image, str(e)) from e
        except requests.exceptions.RequestException as e:
            raise self._transport_error(f"push {image}", timeout, e) from e

        logger.info(f"Pushed image {image}")

    def trusted_push(self,
                     image: str,
                     username: str = "",
                     password: str = "",
                     timeout: int = DEFAULT_PUSH_TIMEOUT,
                     cancel_event: Optional[threading.Event] = None) -> None:
        """Ensure the repository exists on the trusted registry, then push"""
        self.bootstrapper.ensure_repository(image, username, password)
        self.push(image, username, password, timeout, cancel_event)

    def inspect(self, image: str) -> Dict[str, Any]:
        """
        Inspect a local image

        Raises:
            LocalImageNotFoundError: If the image is not present locally
        """
        try:
            return self.api.inspect_image(image)
        except docker.errors.NotFound as e:
            raise LocalImageNotFoundError(image) from e
        except docker.errors.APIError as e:
            raise RemoteOperationError(_explain(e)) from e

    def save(self,
             images: Iterable[str],
             destination: Union[str, Path],
             timeout: int = DEFAULT_SAVE_TIMEOUT,
             cancel_event: Optional[threading.Event] = None) -> Path:
        """
        Save images into a single tar archive

        The archive is streamed to a temporary file beside ``destination``
        and renamed into place, so ``destination`` never holds a partial
        archive.

        Args:
            images: Image references to export
            destination: Archive path
            timeout: Timeout in minutes (at least one)
            cancel_event: Event that aborts the save when set

        Returns:
            Destination path
        """
        images = list(images)
        destination = Path(destination)
        deadline = Deadline(f"save {destination.name}", clamp_timeout(timeout) * 60, cancel_event)

        try:
            destination.parent.mkdir(parents=True, exist_ok=True)
            fd, temp_path = tempfile.mkstemp(
                prefix=".image_save_", suffix=".tmp", dir=destination.parent
            )
        except OSError as e:
            raise ImageIOError(f"cannot create archive in {destination.parent}: {e}") from e

        try:
            with os.fdopen(fd, "wb") as f:
                if images:
                    for chunk in self._export_stream(images):
                        deadline.check()
                        f.write(chunk)
                else:
                    with tarfile.open(fileobj=f, mode="w"):
                        pass
                f.flush()
                os.fsync(f.fileno())
            os.chmod(temp_path, ARCHIVE_FILE_MODE)
            os.replace(temp_path, destination)
        except ImageError:
            _discard(temp_path)
            raise
        except docker.errors.APIError as e:
            _discard(temp_path)
            raise RemoteOperationError(_explain(e)) from e
        except requests.exceptions.RequestException as e:
            _discard(temp_path)
            raise RemoteOperationError(f"save {images} failed: {e}") from e
        except OSError as e:
            _discard(temp_path)
            raise ImageIOError(f"failed to write {destination}: {e}") from e

        logger.debug(f"Saved {len(images)} image(s) to {destination}")
        return destination

    def load(self,
             tar_path: Union[str, Path],
             timeout: int = DEFAULT_LOAD_TIMEOUT,
             cancel_event: Optional[threading.Event] = None) -> None:
        """Load images from a tar archive into the runtime"""
        tar_path = Path(tar_path)
        deadline = Deadline(f"load {tar_path.name}", clamp_timeout(timeout) * 60, cancel_event)

        try:
            with open(tar_path, "rb") as reader:
                stream = self.api.load_image(reader)
                if stream is not None:
                    decode_progress(stream, deadline)
        except docker.errors.APIError as e:
            raise RemoteOperationError(_explain(e)) from e
        except requests.exceptions.RequestException as e:
            raise self._transport_error(f"load {tar_path.name}", clamp_timeout(timeout), e) from e
        except OSError as e:
            raise ImageIOError(f"cannot read {tar_path}: {e}") from e

        logger.info(f"Loaded images from {tar_path}")

    def remove(self, image: str) -> None:
        """Force-remove a local image; a missing image is not an error"""
        try:
            self.api.remove_image(image, force=True)
        except docker.errors.NotFound:
            logger.debug(f"image {image} already absent")
        except docker.errors.APIError as e:
            raise RemoteOperationError(_explain(e)) from e

    def _export_stream(self, images: List[str]) -> Iterable[bytes]:
        """Open the runtime's image export stream for several images"""
        url = f"{self.api.base_url}/v{self.api.api_version}/images/get"
        response = self.api.get(
            url,
            params={"names": images},
            stream=True,
            timeout=getattr(self.api, "timeout", None)
        )
        try:
            response.raise_for_status()
        except requests.exceptions.HTTPError as e:
            docker.errors.create_api_error_from_http_exception(e)
        return response.iter_content(chunk_size=self.chunk_size)

    @staticmethod
    def _pull_error(image: str, message: str, status_code: Optional[int] = None) -> ImageError:
        if message.rstrip().endswith(MSG_NO_PULL_ACCESS):
            return ImageNotFoundError(f"Image({image}) does not exist or no pull access", image)
        if status_code == 401:
            return AuthRequiredError(image, message)
        return RemoteOperationError(message)

    @staticmethod
    def _push_error(image: str, message: str, status_code: Optional[int] = None) -> ImageError:
        if MSG_NOT_EXIST in message:
            return ImageNotFoundError(f"Image({image}) does not exist", image)
        if status_code == 401:
            return AuthRequiredError(image, message)
        return RemoteOperationError(message)

    @staticmethod
    def _transport_error(operation: str, timeout: int, error: Exception) -> ImageError:
        if isinstance(error, requests.exceptions.Timeout):
            return OperationTimeoutError(operation, timeout * 60)
        return RemoteOperationError(f"{operation} failed: {error}")
