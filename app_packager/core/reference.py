"""Canonical image reference parsing

Follows the grammar used by the Docker distribution project so that short
names such as ``nginx`` resolve to ``docker.io/library/nginx`` the same way
the daemon resolves them.
"""

import re
from dataclasses import dataclass
from typing import Optional

from ..api.exceptions import MalformedReferenceError
from ..constants import (
    DEFAULT_DOMAIN,
    DEFAULT_TAG,
    LEGACY_DEFAULT_DOMAIN,
    OFFICIAL_REPO_NAMESPACE,
)
from ..models.application import ImageInfo

NAME_TOTAL_LENGTH_MAX = 255

_ALPHANUMERIC = r"[a-z0-9]+"
_SEPARATOR = r"(?:[._]|__|[-]+)"
_PATH_COMPONENT = rf"{_ALPHANUMERIC}(?:{_SEPARATOR}{_ALPHANUMERIC})*"
_DOMAIN_COMPONENT = r"(?:[a-zA-Z0-9]|[a-zA-Z0-9][a-zA-Z0-9-]*[a-zA-Z0-9])"
_IPV6_ADDRESS = r"\[(?:[a-fA-F0-9:]+)\]"
_DOMAIN_NAME = rf"{_DOMAIN_COMPONENT}(?:\.{_DOMAIN_COMPONENT})*"
_DOMAIN_AND_PORT = rf"(?:{_DOMAIN_NAME}|{_IPV6_ADDRESS})(?::[0-9]+)?"
_TAG = r"[\w][\w.-]{0,127}"
_DIGEST = r"[A-Za-z][A-Za-z0-9]*(?:[-_+.][A-Za-z][A-Za-z0-9]*)*:[0-9a-fA-F]{32,}"
_REMOTE_NAME = rf"{_PATH_COMPONENT}(?:/{_PATH_COMPONENT})*"

REFERENCE_PATTERN = re.compile(
    rf"^(?P<name>(?:(?P<domain>{_DOMAIN_AND_PORT})/)?(?P<path>{_REMOTE_NAME}))"
    rf"(?::(?P<tag>{_TAG}))?"
    rf"(?:@(?P<digest>{_DIGEST}))?$"
)
IDENTIFIER_PATTERN = re.compile(r"^[a-f0-9]{64}$")


@dataclass(frozen=True)
class ImageReference:
    """Parsed image reference"""

    domain: str
    path: str
    tag: str = ""
    digest: str = ""

    @property
    def is_named(self) -> bool:
        """Whether the reference has a repository name"""
        return bool(self.path)

    @property
    def is_name_only(self) -> bool:
        """Whether the reference carries neither tag nor digest"""
        return not self.tag and not self.digest

    @property
    def name(self) -> str:
        """Fully qualified repository name"""
        if not self.is_named:
            return ""
        return f"{self.domain}/{self.path}" if self.domain else self.path

    @property
    def familiar_name(self) -> str:
        """Repository name as shown by the docker CLI"""
        if self.domain != DEFAULT_DOMAIN:
            return self.name
        prefix = f"{OFFICIAL_REPO_NAMESPACE}/"
        if self.path.startswith(prefix) and "/" not in self.path[len(prefix):]:
            return self.path[len(prefix):]
        return self.path

    @property
    def reference(self) -> str:
        """Tag or digest to request, defaulting to latest"""
        return self.digest or self.tag or DEFAULT_TAG

    def __str__(self) -> str:
        value = self.name
        if self.tag:
            value += f":{self.tag}"
        if self.digest:
            value = f"{value}@{self.digest}" if value else self.digest
        return value


def split_docker_domain(name: str):
    """Split a name into registry domain and remainder

    Args:
        name: Image name without normalization

    Returns:
        Tuple of (domain, remainder)
    """
    index = name.find("/")
    first = name[:index] if index != -1 else ""
    if index == -1 or (
        not any(c in first for c in ".:")
        and first != "localhost"
        and first.lower() == first
    ):
        domain, remainder = DEFAULT_DOMAIN, name
    else:
        domain, remainder = first, name[index + 1:]

    if domain == LEGACY_DEFAULT_DOMAIN:
        domain = DEFAULT_DOMAIN
    if domain == DEFAULT_DOMAIN and "/" not in remainder:
        remainder = f"{OFFICIAL_REPO_NAMESPACE}/{remainder}"
    return domain, remainder


def parse(reference: str) -> ImageReference:
    """Parse a fully qualified reference without normalization"""
    match = REFERENCE_PATTERN.match(reference or "")
    if not match:
        raise MalformedReferenceError(reference)
    if len(match.group("name")) > NAME_TOTAL_LENGTH_MAX:
        raise MalformedReferenceError(reference, "repository name must not be more than 255 characters")
    return ImageReference(
        domain=match.group("domain") or "",
        path=match.group("path"),
        tag=match.group("tag") or "",
        digest=match.group("digest") or "",
    )


def parse_normalized_named(reference: str) -> ImageReference:
    """Parse a reference, normalizing the domain and official namespace

    Raises:
        MalformedReferenceError: If the reference is not a valid named reference
    """
    if not reference:
        raise MalformedReferenceError(reference, "empty reference")
    if IDENTIFIER_PATTERN.match(reference):
        raise MalformedReferenceError(
            reference, "invalid repository name, cannot specify 64-byte hexadecimal strings"
        )

    domain, remainder = split_docker_domain(reference)
    remote_name = remainder.split(":", 1)[0]
    if remote_name.lower() != remote_name:
        raise MalformedReferenceError(reference, "repository name must be lowercase")

    parsed = parse(f"{domain}/{remainder}")
    if parsed.domain != domain:
        raise MalformedReferenceError(reference)
    return parsed


def parse_any_reference(reference: str) -> ImageReference:
    """Parse a named reference or a bare 64-hex image identifier"""
    if reference and IDENTIFIER_PATTERN.match(reference):
        return ImageReference(domain="", path="", digest=f"sha256:{reference}")
    return parse_normalized_named(reference)


def split_repository_tag(reference: str) -> tuple:
    """Split a reference into (repository, tag) for tag requests"""
    parsed = parse_normalized_named(reference)
    return parsed.name, parsed.tag or DEFAULT_TAG


def derive_export_name(source: str, hub: ImageInfo) -> str:
    """Rewrite an image reference onto another hub

    Only the trailing ``name[:tag]`` segment of ``source`` is kept.

    Args:
        source: Original image reference
        hub: Target hub coordinates

    Returns:
        New image reference
    """
    name_tag = source.rsplit("/", 1)[-1]
    hub_url = hub.hub_url.rstrip("/")
    if hub.namespace:
        return f"{hub_url}/{hub.namespace}/{name_tag}"
    return f"{hub_url}/{name_tag}"


def registry_host(reference: Optional[ImageReference]) -> str:
    """Registry host of a normalized reference"""
    if reference is None or not reference.domain:
        return DEFAULT_DOMAIN
    return reference.domain
