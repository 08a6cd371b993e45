"""Trusted registry repository management"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

import requests

from ..api.exceptions import MalformedReferenceError, RegistryError, RepositoryNotFoundError
from ..constants import (
    DEFAULT_REGISTRY_SCHEME,
    DEFAULT_REQUEST_TIMEOUT,
    MAX_SHORT_DESCRIPTION,
    REPOSITORY_VISIBILITY,
)
from .reference import parse_normalized_named, registry_host

logger = logging.getLogger(__name__)


@dataclass
class Repository:
    """Repository record on a trusted registry"""

    name: str
    namespace: str = ""
    short_description: str = ""
    long_description: str = ""
    visibility: str = REPOSITORY_VISIBILITY

    def to_payload(self) -> Dict[str, Any]:
        """Request body for repository creation"""
        return {
            "name": self.name,
            "shortDescription": self.short_description[:MAX_SHORT_DESCRIPTION],
            "longDescription": self.long_description,
            "visibility": self.visibility,
        }

    @classmethod
    def from_payload(cls, data: Dict[str, Any]) -> 'Repository':
        """Create from a registry response body"""
        return cls(
            name=data.get("name", ""),
            namespace=data.get("namespace", ""),
            short_description=data.get("shortDescription", ""),
            long_description=data.get("longDescription", ""),
            visibility=data.get("visibility", REPOSITORY_VISIBILITY),
        )


class TrustedRegistryClient:
    """Minimal client for the trusted registry repository API"""

    def __init__(self,
                 server: str,
                 username: str = "",
                 password: str = "",
                 scheme: str = DEFAULT_REGISTRY_SCHEME,
                 timeout: int = DEFAULT_REQUEST_TIMEOUT,
                 verify: bool = True,
                 session: Optional[requests.Session] = None):
        """
        Initialize registry client

        Args:
            server: Registry host, optionally with port
            username: Basic auth username
            password: Basic auth password
            scheme: URL scheme
            timeout: Request timeout in seconds
            verify: Verify TLS certificates
            session: Session to reuse
        """
        self.base_url = f"{scheme}://{server}/api/v0"
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.verify = verify
        if username and password:
            self.session.auth = (username, password)

    def get_repository(self, namespace: str, name: str) -> Repository:
        """
        Look up a repository

        Raises:
            RepositoryNotFoundError: If the registry reports no such resource
            RegistryError: On any other failure
        """
        url = f"{self.base_url}/repositories/{namespace}/{name}"
        response = self._request("GET", url)
        if response.status_code == 404:
            raise RepositoryNotFoundError(namespace, name)
        self._raise_for_status(response, f"get repository {namespace}/{name}")
        return Repository.from_payload(response.json())

    def create_repository(self, namespace: str, repository: Repository) -> Repository:
        """Create a repository under a namespace"""
        url = f"{self.base_url}/repositories/{namespace}"
        response = self._request("POST", url, json=repository.to_payload())
        self._raise_for_status(response, f"create repository {namespace}/{repository.name}")
        try:
            return Repository.from_payload(response.json())
        except ValueError:
            return repository

    def _request(self, method: str, url: str, **kwargs) -> requests.Response:
        try:
            return self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.exceptions.RequestException as e:
            raise RegistryError(f"{method} {url} failed: {e}") from e

    @staticmethod
    def _raise_for_status(response: requests.Response, action: str) -> None:
        if response.status_code >= 400:
            raise RegistryError(
                f"{action} error, status {response.status_code}: {response.text.strip()}",
                response.status_code
            )


ClientFactory = Callable[[str, str, str], TrustedRegistryClient]


class TrustedRegistryBootstrapper:
    """Make sure the target repository exists before a push"""

    def __init__(self,
                 client_factory: Optional[ClientFactory] = None,
                 scheme: str = DEFAULT_REGISTRY_SCHEME,
                 timeout: int = DEFAULT_REQUEST_TIMEOUT,
                 verify: bool = True):
        """
        Initialize bootstrapper

        Args:
            client_factory: Callable(server, username, password) returning a client
            scheme: URL scheme for the default client
            timeout: Request timeout for the default client
            verify: TLS verification for the default client
        """
        self.scheme = scheme
        self.timeout = timeout
        self.verify = verify
        self._client_factory = client_factory or self._default_client

    def _default_client(self, server: str, username: str, password: str) -> TrustedRegistryClient:
        return TrustedRegistryClient(
            server, username, password,
            scheme=self.scheme,
            timeout=self.timeout,
            verify=self.verify
        )

    def ensure_repository(self, image: str, username: str = "", password: str = "") -> bool:
        """
        Create the repository for ``image`` if it does not exist yet

        Args:
            image: Image reference to be pushed
            username: Registry username
            password: Registry password

        Returns:
            True if the repository was created, False if it already existed

        Raises:
            MalformedReferenceError: If the reference has no namespace/name path
            RegistryError: If lookup or creation fails
        """
        reference = parse_normalized_named(image)
        server = registry_host(reference)

        parts = reference.path.split("/")
        if len(parts) != 2:
            raise MalformedReferenceError(
                image, "trusted registry images need a namespace/repository path"
            )
        namespace, name = parts

        client = self._client_factory(server, username, password)
        try:
            client.get_repository(namespace, name)
            logger.debug(f"repository {namespace}/{name} exists on {server}")
            return False
        except RepositoryNotFoundError:
            pass

        repository = Repository(
            name=name,
            namespace=namespace,
            short_description=image[:MAX_SHORT_DESCRIPTION],
            long_description=f"push image for {image}",
        )
        try:
            client.create_repository(namespace, repository)
        except RegistryError as e:
            raise RegistryError(f"create repository error, {e}", e.status_code) from e

        logger.info(f"Created repository {namespace}/{name} on {server}")
        return True
