from __future__ import annotations

import pytest
import yaml

from app_packager.api.exceptions import ManifestError
from app_packager.core.normalizer import normalize_resource

from conftest import DEPLOYMENT


def test_server_assigned_fields_are_removed() -> None:
    kind, text = normalize_resource(DEPLOYMENT)

    assert kind == "Deployment"
    resource = yaml.safe_load(text)
    assert resource["metadata"] == {"name": "web", "labels": {"app": "web"}}
    assert resource["spec"] == {"replicas": 2}


def test_normalizing_twice_is_stable() -> None:
    _, once = normalize_resource(DEPLOYMENT)
    _, twice = normalize_resource(once)

    assert once == twice


def test_keys_are_emitted_in_sorted_order() -> None:
    _, text = normalize_resource("kind: ConfigMap\napiVersion: v1\ndata:\n  b: '2'\n  a: '1'\n")

    assert text.splitlines()[0] == "apiVersion: v1"
    assert text.index("a: '1'") < text.index("b: '2'")


def test_resource_without_metadata_is_accepted() -> None:
    kind, text = normalize_resource("apiVersion: v1\nkind: Namespace\n")

    assert kind == "Namespace"
    assert "metadata" not in text


@pytest.mark.parametrize("content", [
    "",
    "- just\n- a list\n",
    "apiVersion: v1\n",
    "kind: ../etc\n",
    "kind: [Deployment]\n",
    "kind: [Deployment\n",
])
def test_unusable_resources_are_rejected(content: str) -> None:
    with pytest.raises(ManifestError):
        normalize_resource(content)
