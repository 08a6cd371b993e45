from __future__ import annotations

import shutil
from pathlib import Path

import pytest

from app_packager import Exporter, Importer, ImageInfo, PackagerConfig
from app_packager.api.exceptions import UnsupportedFormatError
from app_packager.exporters import RamExporter

from conftest import load_metadata, make_app_dict


@pytest.fixture
def config(tmp_path: Path) -> PackagerConfig:
    return PackagerConfig(home_path=tmp_path / "configured")


def test_create_accepts_dicts_and_overrides_home(config, image_service, tmp_path: Path) -> None:
    exporter = Exporter(config=config, image_service=image_service)

    created = exporter.create(make_app_dict(), "ram", home_path=tmp_path / "override", mode="online")

    assert isinstance(created, RamExporter)
    assert created.job.home_path == (tmp_path / "override").resolve()
    assert created.offline is False
    assert config.home_path == tmp_path / "configured"


def test_create_rejects_unknown_format(config, image_service) -> None:
    with pytest.raises(UnsupportedFormatError):
        Exporter(config=config, image_service=image_service).create(make_app_dict(), "slug")


@pytest.mark.skipif(shutil.which("tar") is None, reason="tar not installed")
def test_export_then_import(config, image_service, fake_client, tmp_path: Path) -> None:
    result = Exporter(config=config, image_service=image_service).export(make_app_dict(), "ram")

    package = Path(result.package_path)
    assert package.parent == (tmp_path / "configured").resolve()
    assert load_metadata(package, "demo-1.0-ram")["app_name"] == "demo"

    hub = ImageInfo(hub_url="hub.example.com", namespace="apps")
    imported = Importer(config=config, image_service=image_service).import_archive(
        package, hub, home_path=tmp_path / "imports"
    )

    assert imported.app.components[0].share_image == "hub.example.com/apps/nginx:1.25"
    assert fake_client.loaded == ["component-images.tar", "plugin-images.tar"]
