from __future__ import annotations

from typing import Any, Dict, List

import pytest

from app_packager.api.exceptions import MalformedReferenceError, RegistryError
from app_packager.core.trusted_registry import (
    Repository,
    TrustedRegistryBootstrapper,
    TrustedRegistryClient,
)


class FakeResponse:
    def __init__(self, status_code: int, body: Dict[str, Any] = None, text: str = ""):
        self.status_code = status_code
        self._body = body
        self.text = text

    def json(self) -> Dict[str, Any]:
        if self._body is None:
            raise ValueError("no json body")
        return self._body


class FakeSession:
    def __init__(self, responses: List[FakeResponse]):
        self.responses = list(responses)
        self.requests: List[tuple] = []
        self.auth = None
        self.verify = True

    def request(self, method, url, timeout=None, **kwargs):
        self.requests.append((method, url, kwargs.get("json")))
        return self.responses.pop(0)


def bootstrapper_for(session: FakeSession, servers: List[str] = None) -> TrustedRegistryBootstrapper:
    def factory(server, username, password):
        if servers is not None:
            servers.append(server)
        return TrustedRegistryClient(server, username, password, session=session)

    return TrustedRegistryBootstrapper(client_factory=factory)


def test_existing_repository_is_left_alone() -> None:
    session = FakeSession([FakeResponse(200, {"name": "app", "namespace": "team"})])

    created = bootstrapper_for(session).ensure_repository("hub.example.com/team/app:1")

    assert created is False
    assert session.requests == [("GET", "https://hub.example.com/api/v0/repositories/team/app", None)]


def test_missing_repository_is_created() -> None:
    session = FakeSession([
        FakeResponse(404, text='{"errors": [{"message": "resource does not exist"}]}'),
        FakeResponse(201, {"name": "app", "namespace": "team"}),
    ])

    created = bootstrapper_for(session).ensure_repository("hub.example.com/team/app:1", "alice", "pw")

    assert created is True
    method, url, payload = session.requests[1]
    assert method == "POST"
    assert url == "https://hub.example.com/api/v0/repositories/team"
    assert payload == {
        "name": "app",
        "shortDescription": "hub.example.com/team/app:1",
        "longDescription": "push image for hub.example.com/team/app:1",
        "visibility": "private",
    }
    assert session.auth == ("alice", "pw")


def test_lookup_failure_does_not_create() -> None:
    session = FakeSession([FakeResponse(500, text="internal error")])

    with pytest.raises(RegistryError) as excinfo:
        bootstrapper_for(session).ensure_repository("hub.example.com/team/app:1")

    assert excinfo.value.status_code == 500
    assert [r[0] for r in session.requests] == ["GET"]


def test_creation_failure_is_wrapped() -> None:
    session = FakeSession([FakeResponse(404), FakeResponse(403, text="forbidden")])

    with pytest.raises(RegistryError, match="create repository error"):
        bootstrapper_for(session).ensure_repository("hub.example.com/team/app:1")


def test_single_segment_path_is_rejected() -> None:
    session = FakeSession([])

    with pytest.raises(MalformedReferenceError):
        bootstrapper_for(session).ensure_repository("registry.local:5000/app:1")
    assert session.requests == []


def test_default_registry_host_is_used_for_short_names() -> None:
    servers: List[str] = []
    session = FakeSession([FakeResponse(200, {"name": "app"})])

    bootstrapper_for(session, servers).ensure_repository("team/app:1")

    assert servers == ["docker.io"]


def test_partial_credentials_send_no_auth() -> None:
    session = FakeSession([])

    TrustedRegistryClient("hub.example.com", "alice", "", session=session)

    assert session.auth is None


def test_short_description_is_truncated() -> None:
    payload = Repository(name="app", short_description="x" * 300).to_payload()

    assert len(payload["shortDescription"]) == 140
