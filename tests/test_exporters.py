from __future__ import annotations

import asyncio
import shutil
from pathlib import Path

import pytest
import yaml

from app_packager.api.exceptions import (
    ExportError,
    ExternalToolError,
    ImageNotFoundError,
    UnsupportedFormatError,
)
from app_packager.core.signal_wait import BoundedWait
from app_packager.exporters import ExporterFactory, RamExporter
from app_packager.models import ApplicationConfig, ExportFormat, ExportMode, ExportState

from conftest import load_metadata, package_members, read_package_member

needs_tar = pytest.mark.skipif(shutil.which("tar") is None, reason="tar not installed")


def documents(text: str) -> list:
    return [doc for doc in yaml.safe_load_all(text) if doc]


def test_unknown_format_is_rejected(app, image_service, tmp_path: Path) -> None:
    with pytest.raises(UnsupportedFormatError):
        ExporterFactory.create("slug", app, image_service, tmp_path)


def test_supported_formats() -> None:
    assert set(ExporterFactory.get_supported_formats()) == {"ram", "docker-compose", "yaml", "helm-chart"}
    assert ExporterFactory.is_supported("RAM")
    assert not ExporterFactory.is_supported("slug")


def test_online_mode_falls_back_for_manifest_formats(app, image_service, tmp_path: Path) -> None:
    exporter = ExporterFactory.create("yaml", app, image_service, tmp_path, mode="online")

    assert exporter.job.mode is ExportMode.OFFLINE


@needs_tar
def test_ram_export_packages_images_and_metadata(app, image_service, fake_client, tmp_path: Path) -> None:
    exporter = ExporterFactory.create("ram", app, image_service, tmp_path)

    result = asyncio.run(exporter.export())

    assert exporter.job.state is ExportState.DONE
    assert result.package_name == "demo-1.0-ram.tar.gz"
    assert Path(result.package_path) == tmp_path.resolve() / "demo-1.0-ram.tar.gz"
    assert result.images == ("nginx:1.25", "busybox:1.36", "envoyproxy/envoy:v1.27")

    assert fake_client.pulled == [
        ("nginx:1.25", "alice", "s3cret"),
        ("busybox:1.36", "bob", ""),
        ("envoyproxy/envoy:v1.27", "carol", "pw"),
    ]
    assert fake_client.saved == {
        "component-images.tar": ["nginx:1.25", "busybox:1.36"],
        "plugin-images.tar": ["envoyproxy/envoy:v1.27"],
    }

    members = package_members(Path(result.package_path))
    assert "demo-1.0-ram/component-images.tar" in members
    assert "demo-1.0-ram/plugin-images.tar" in members
    assert "demo-1.0-ram/metadata.json" in members


@needs_tar
def test_offline_metadata_drops_credentials_only_from_the_copy(app, image_service, tmp_path: Path) -> None:
    result = asyncio.run(ExporterFactory.create("ram", app, image_service, tmp_path).export())

    metadata = load_metadata(Path(result.package_path), "demo-1.0-ram")
    empty = {"hub_url": "", "namespace": "", "hub_user": "", "hub_password": ""}
    assert metadata["components"][0]["app_image"] == empty
    assert metadata["plugins"][0]["plugin_image"] == empty
    assert metadata["components"][0]["deploy_version"] == "20230101"

    assert app.components[0].app_image.hub_password == "s3cret"
    assert app.plugins[0].plugin_image.hub_user == "carol"


@needs_tar
def test_online_ram_export_skips_images(app, image_service, fake_client, tmp_path: Path) -> None:
    result = asyncio.run(ExporterFactory.create("ram", app, image_service, tmp_path, mode="online").export())

    assert fake_client.pulled == []
    assert fake_client.saved == {}
    members = package_members(Path(result.package_path))
    assert "demo-1.0-ram/component-images.tar" not in members
    metadata = load_metadata(Path(result.package_path), "demo-1.0-ram")
    assert metadata["components"][0]["app_image"]["hub_user"] == "alice"


@needs_tar
def test_empty_application_still_produces_archives(image_service, fake_client, tmp_path: Path) -> None:
    app = ApplicationConfig(app_name="empty", app_version="0.1")

    result = asyncio.run(ExporterFactory.create("ram", app, image_service, tmp_path).export())

    assert fake_client.saved == {"component-images.tar": [], "plugin-images.tar": []}
    assert load_metadata(Path(result.package_path), "empty-0.1-ram")["components"] == []


def test_pull_failure_fails_the_materializing_stage(app, image_service, fake_client, tmp_path: Path) -> None:
    fake_client.fail_pull.add("busybox:1.36")
    exporter = ExporterFactory.create("ram", app, image_service, tmp_path)

    with pytest.raises(ExportError) as excinfo:
        asyncio.run(exporter.export())

    assert excinfo.value.stage == "materializing_images"
    assert isinstance(excinfo.value.cause, ImageNotFoundError)
    assert exporter.job.state is ExportState.FAILED
    assert "component-images.tar" not in fake_client.saved
    assert not (tmp_path / "demo-1.0-ram.tar.gz").exists()


def test_missing_tar_tool_fails_packaging(app, image_service, tmp_path: Path) -> None:
    exporter = ExporterFactory.create(
        "ram", app, image_service, tmp_path, tar_command="no-such-tar-binary-here"
    )

    with pytest.raises(ExportError) as excinfo:
        asyncio.run(exporter.export())

    assert excinfo.value.stage == "packaging"
    assert isinstance(excinfo.value.cause, ExternalToolError)


@needs_tar
def test_yaml_export_without_signal_continues(app, image_service, fake_client, quick_wait,
                                              tmp_path: Path) -> None:
    exporter = ExporterFactory.create("yaml", app, image_service, tmp_path, signal_wait=quick_wait)

    result = asyncio.run(exporter.export())

    assert exporter.job.signal_received is False
    assert result.package_name == "demo-1.0-yaml.tar.gz"
    package = Path(result.package_path)
    deployments = documents(read_package_member(package, "demo-1.0-yaml/demo/Deployment.yaml"))
    assert [d["metadata"]["name"] for d in deployments] == ["web", "web2"]
    assert all("namespace" not in d["metadata"] for d in deployments)
    assert all("uid" not in d["metadata"] for d in deployments)
    services = documents(read_package_member(package, "demo-1.0-yaml/demo/Service.yaml"))
    assert services[0]["spec"] == {"ports": [{"port": 80}]}
    assert fake_client.saved["component-images.tar"] == ["nginx:1.25", "busybox:1.36"]


@needs_tar
def test_yaml_export_materializes_dependent_images(app, image_service, fake_client, tmp_path: Path) -> None:
    exporter = None
    sleeps = []

    async def companion_writes_signal(seconds: float) -> None:
        sleeps.append(seconds)
        if len(sleeps) == 2:
            signal = exporter.manifest_path / "dependent_image.txt"
            signal.write_text("redis:7\nnginx:1.25\n\nredis:7\n")

    wait = BoundedWait(poll_interval=0, max_attempts=5, sleep=companion_writes_signal)
    exporter = ExporterFactory.create("yaml", app, image_service, tmp_path, signal_wait=wait)

    result = asyncio.run(exporter.export())

    assert exporter.job.signal_received is True
    assert exporter.job.dependent_images == ["redis:7", "nginx:1.25"]
    assert ("redis:7", "", "") in fake_client.pulled
    assert [p[0] for p in fake_client.pulled].count("nginx:1.25") == 1
    assert fake_client.saved["component-images.tar"] == ["nginx:1.25", "busybox:1.36", "redis:7"]
    assert "redis:7" in result.images
    assert "demo-1.0-yaml/demo/dependent_image.txt" in package_members(Path(result.package_path))


@needs_tar
def test_helm_export_writes_chart(app, image_service, quick_wait, tmp_path: Path) -> None:
    result = asyncio.run(
        ExporterFactory.create("helm-chart", app, image_service, tmp_path, signal_wait=quick_wait).export()
    )

    package = Path(result.package_path)
    assert result.package_name == "demo-1.0-helm.tar.gz"
    chart = documents(read_package_member(package, "demo-1.0-helm/demo/Chart.yaml"))[0]
    assert chart == {
        "apiVersion": "v2",
        "appVersion": "1.0",
        "description": "first release",
        "name": "demo",
        "type": "application",
        "version": "1.0",
    }
    templates = documents(read_package_member(package, "demo-1.0-helm/demo/templates/Deployment.yaml"))
    assert len(templates) == 2
    assert "demo-1.0-helm/demo/templates/Service.yaml" in package_members(package)


@needs_tar
def test_helm_chart_omits_missing_description(app, image_service, quick_wait, tmp_path: Path) -> None:
    app.annotations = {}

    result = asyncio.run(
        ExporterFactory.create("helm-chart", app, image_service, tmp_path, signal_wait=quick_wait).export()
    )

    chart = documents(read_package_member(Path(result.package_path), "demo-1.0-helm/demo/Chart.yaml"))[0]
    assert "description" not in chart


@needs_tar
def test_compose_export_writes_services_and_volumes(app, image_service, tmp_path: Path) -> None:
    result = asyncio.run(ExporterFactory.create("docker-compose", app, image_service, tmp_path).export())

    package = Path(result.package_path)
    assert result.package_name == "demo-1.0-dockercompose.tar.gz"
    compose = yaml.safe_load(read_package_member(package, "demo-1.0-dockercompose/docker-compose.yaml"))
    assert compose["version"] == "2.1"
    assert compose["services"]["web"] == {
        "image": "nginx:1.25",
        "container_name": "web",
        "restart": "always",
        "labels": {"memory_type": "medium"},
        "volumes": ["./web/etc/nginx/nginx.conf:/etc/nginx/nginx.conf"],
    }
    assert compose["services"]["worker"]["labels"] == {"memory_type": "small"}
    assert "volumes" not in compose["services"]["worker"]
    volume = read_package_member(package, "demo-1.0-dockercompose/web/etc/nginx/nginx.conf")
    assert volume == "worker_processes 1;"


def test_compose_service_name_from_display_name(app, image_service, tmp_path: Path) -> None:
    app.components[1].service_alias = ""
    app.components[1].service_cname = "batch worker"
    exporter = ExporterFactory.create("docker-compose", app, image_service, tmp_path)

    document = exporter.build_document()

    assert list(document["services"]) == ["web", "batch_worker"]


def test_compose_relative_mount_path_matches_written_file(app, image_service, tmp_path: Path) -> None:
    app.components[0].volumes[0].volume_mount_path = "etc/x"
    exporter = ExporterFactory.create("docker-compose", app, image_service, tmp_path)

    document = exporter.build_document()

    assert document["services"]["web"]["volumes"] == ["./web/etc/x:/etc/x"]
    assert (exporter.export_path / "web" / "etc" / "x").read_text() == "worker_processes 1;"


def test_registered_backend_is_created(app, image_service, tmp_path: Path, monkeypatch) -> None:
    class CustomRamExporter(RamExporter):
        pass

    monkeypatch.setitem(ExporterFactory._backends, ExportFormat.RAM, ExporterFactory._backends[ExportFormat.RAM])
    ExporterFactory.register_backend(ExportFormat.RAM, CustomRamExporter)

    assert isinstance(ExporterFactory.create("ram", app, image_service, tmp_path), CustomRamExporter)
