from __future__ import annotations

import json
import tarfile
from pathlib import Path
from types import SimpleNamespace
from typing import Any, Dict, List, Optional

import docker.errors
import pytest

from app_packager.api.exceptions import ImageNotFoundError, LocalImageNotFoundError
from app_packager.core.signal_wait import BoundedWait
from app_packager.models import ApplicationConfig
from app_packager.services.image_service import ImageService


def api_error(message: str, status_code: Optional[int] = None) -> docker.errors.APIError:
    response = None
    if status_code is not None:
        response = SimpleNamespace(status_code=status_code, reason="error", url="http://docker/test")
    return docker.errors.APIError(message, response=response, explanation=message)


class FakeResponse:
    def __init__(self, chunks: List[Any], status_code: int = 200):
        self.chunks = chunks
        self.status_code = status_code

    def raise_for_status(self) -> None:
        return None

    def iter_content(self, chunk_size: int = 1024):
        for chunk in self.chunks:
            if isinstance(chunk, Exception):
                raise chunk
            yield chunk


class FakeAPIClient:
    """In-process stand-in for docker.APIClient"""

    base_url = "http+docker://localhost"
    api_version = "1.41"
    timeout = 60

    def __init__(self) -> None:
        self.calls: List[tuple] = []
        self.pull_stream: List[Any] = [b'{"status": "Pulling"}\n', b'{"status": "Done"}\n']
        self.push_stream: List[Any] = [b'{"status": "Pushed"}\n']
        self.load_stream: List[Any] = [{"stream": "Loaded image: demo:1\n"}]
        self.export_chunks: List[Any] = [b"layer-1", b"layer-2"]
        self.pull_error: Optional[Exception] = None
        self.push_error: Optional[Exception] = None
        self.missing: set = set()

    def pull(self, repository, tag=None, stream=False, decode=False, auth_config=None):
        self.calls.append(("pull", repository, tag, auth_config))
        if self.pull_error:
            raise self.pull_error
        return iter(self.pull_stream)

    def push(self, repository, tag=None, stream=False, decode=False, auth_config=None):
        self.calls.append(("push", repository, tag, auth_config))
        if self.push_error:
            raise self.push_error
        return iter(self.push_stream)

    def tag(self, image, repository, tag=None, force=False):
        self.calls.append(("tag", image, repository, tag))
        return True

    def inspect_image(self, image):
        self.calls.append(("inspect", image))
        if image in self.missing:
            raise docker.errors.ImageNotFound(f"No such image: {image}")
        return {"Id": f"sha256:{'a' * 64}", "RepoTags": [image]}

    def get(self, url, params=None, stream=False, timeout=None):
        self.calls.append(("get", url, params))
        return FakeResponse(self.export_chunks)

    def load_image(self, data):
        self.calls.append(("load", data.read()))
        return iter(self.load_stream)

    def remove_image(self, image, force=False, noprune=False):
        self.calls.append(("remove", image, force))
        if image in self.missing:
            raise docker.errors.ImageNotFound(f"No such image: {image}")


class FakeImageClient:
    """Records image operations; save writes an empty tar

    ``archives`` maps archive file names to the images they hold, so load
    makes those images local the way the runtime does.
    """

    def __init__(self) -> None:
        self.pulled: List[tuple] = []
        self.saved: Dict[str, List[str]] = {}
        self.tagged: List[tuple] = []
        self.pushed: List[tuple] = []
        self.loaded: List[str] = []
        self.trusted: List[str] = []
        self.fail_pull: set = set()
        self.local: set = set()
        self.archives: Dict[str, List[str]] = {}

    def pull(self, image, username="", password="", timeout=30, cancel_event=None):
        if image in self.fail_pull:
            raise ImageNotFoundError(f"Image({image}) does not exist or no pull access", image)
        self.pulled.append((image, username, password))
        self.local.add(image)
        return {"Id": image}

    def save(self, images, destination, timeout=60, cancel_event=None):
        destination = Path(destination)
        with tarfile.open(destination, "w"):
            pass
        self.saved[destination.name] = list(images)
        self.archives[destination.name] = list(images)
        return destination

    def load(self, tar_path, timeout=60, cancel_event=None):
        self.loaded.append(Path(tar_path).name)
        self.local.update(self.archives.get(Path(tar_path).name, []))

    def tag(self, source, target, timeout=1, cancel_event=None):
        if source not in self.local:
            raise LocalImageNotFoundError(source)
        self.tagged.append((source, target))
        self.local.add(target)

    def push(self, image, username="", password="", timeout=30, cancel_event=None):
        self.pushed.append((image, username, password))

    def trusted_push(self, image, username="", password="", timeout=30, cancel_event=None):
        self.trusted.append(image)
        self.push(image, username, password, timeout, cancel_event)

    def inspect(self, image):
        return {"Id": image}

    def remove(self, image):
        self.local.discard(image)


async def no_sleep(seconds: float) -> None:
    return None


@pytest.fixture
def fake_client() -> FakeImageClient:
    return FakeImageClient()


@pytest.fixture
def image_service(fake_client: FakeImageClient) -> ImageService:
    return ImageService(fake_client)


@pytest.fixture
def quick_wait() -> BoundedWait:
    return BoundedWait(poll_interval=0, max_attempts=3, sleep=no_sleep)


DEPLOYMENT = """\
apiVersion: apps/v1
kind: Deployment
metadata:
  name: web
  namespace: production
  resourceVersion: "12345"
  uid: 0b7f3c1e-1111-2222-3333-444455556666
  creationTimestamp: "2023-01-01T00:00:00Z"
  labels:
    app: web
spec:
  replicas: 2
"""

SERVICE = """\
apiVersion: v1
kind: Service
metadata:
  name: web
  namespace: production
spec:
  ports:
  - port: 80
"""


def make_app_dict() -> Dict[str, Any]:
    return {
        "app_name": "demo",
        "app_version": "1.0",
        "annotations": {"version_info": "first release"},
        "components": [
            {
                "service_cname": "web server",
                "service_alias": "web",
                "share_image": "nginx:1.25",
                "memory": 512,
                "app_image": {
                    "hub_url": "hub.example.com",
                    "namespace": "team",
                    "hub_user": "alice",
                    "hub_password": "s3cret",
                },
                "volumes": [
                    {"volume_mount_path": "/etc/nginx/nginx.conf", "file_content": "worker_processes 1;"},
                ],
                "deploy_version": "20230101",
            },
            {
                "service_cname": "worker",
                "service_alias": "worker",
                "share_image": "busybox:1.36",
                "app_image": {"hub_user": "bob", "hub_password": ""},
            },
        ],
        "plugins": [
            {
                "plugin_name": "mesh",
                "share_image": "envoyproxy/envoy:v1.27",
                "plugin_image": {"hub_url": "docker.io", "hub_user": "carol", "hub_password": "pw"},
            },
        ],
        "k8s_resources": [
            {"name": "web", "content": DEPLOYMENT},
            {"name": "web-svc", "content": SERVICE},
            {"name": "web2", "content": DEPLOYMENT.replace("name: web", "name: web2")},
        ],
    }


@pytest.fixture
def app() -> ApplicationConfig:
    return ApplicationConfig.from_dict(make_app_dict())


def read_package_member(package: Path, member: str) -> str:
    with tarfile.open(package, "r:gz") as tar:
        f = tar.extractfile(member)
        assert f is not None
        return f.read().decode("utf-8")


def package_members(package: Path) -> List[str]:
    with tarfile.open(package, "r:gz") as tar:
        return tar.getnames()


def load_metadata(package: Path, root: str) -> Dict[str, Any]:
    return json.loads(read_package_member(package, f"{root}/metadata.json"))
