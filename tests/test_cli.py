from __future__ import annotations

import json
from pathlib import Path

import pytest
from click.testing import CliRunner

from app_packager.api.exceptions import ExportError, ImageNotFoundError
from app_packager.cli.main import cli
from app_packager.models import ExportResult

from conftest import make_app_dict


class RecordingExporter:
    calls = []
    error = None

    def __init__(self, config=None, image_service=None):
        self.config = config

    def export(self, app, export_format, home_path=None, mode=None):
        RecordingExporter.calls.append((Path(app).name, export_format, home_path, mode))
        if RecordingExporter.error:
            raise RecordingExporter.error
        return ExportResult(
            package_path=str(Path("demo-1.0-ram.tar.gz").resolve()),
            package_name="demo-1.0-ram.tar.gz",
            package_format=export_format,
            images=("nginx:1.25",),
        )


@pytest.fixture
def app_file(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("APP_PACKAGER_CONFIG", raising=False)
    monkeypatch.setattr("app_packager.cli.commands.export.Exporter", RecordingExporter)
    RecordingExporter.calls = []
    RecordingExporter.error = None
    path = tmp_path / "app.json"
    path.write_text(json.dumps(make_app_dict()))
    return path


def test_export_success(app_file: Path) -> None:
    result = CliRunner().invoke(cli, ["export", str(app_file), "-f", "helm-chart", "-m", "offline"])

    assert result.exit_code == 0, result.output
    assert RecordingExporter.calls == [("app.json", "helm-chart", None, "offline")]
    assert "Package created successfully" in result.output


def test_export_failure_exits_non_zero(app_file: Path) -> None:
    RecordingExporter.error = ExportError("materializing_images", ImageNotFoundError("Image(x) does not exist"))

    result = CliRunner().invoke(cli, ["export", str(app_file)])

    assert result.exit_code == 1
    assert "materializing_images" in result.output


def test_export_rejects_unknown_format(app_file: Path) -> None:
    result = CliRunner().invoke(cli, ["export", str(app_file), "-f", "slug"])

    assert result.exit_code == 2
    assert RecordingExporter.calls == []


def test_invalid_settings_file_is_reported(app_file: Path, tmp_path: Path) -> None:
    settings = tmp_path / "bad.yaml"
    settings.write_text("- not\n- a mapping\n")

    result = CliRunner().invoke(cli, ["-c", str(settings), "export", str(app_file)])

    assert result.exit_code == 1
    assert RecordingExporter.calls == []


def test_import_requires_hub_url(tmp_path: Path) -> None:
    archive = tmp_path / "demo-1.0-ram.tar.gz"
    archive.write_bytes(b"")

    result = CliRunner().invoke(cli, ["import", str(archive)])

    assert result.exit_code == 2
    assert "--hub-url" in result.output
