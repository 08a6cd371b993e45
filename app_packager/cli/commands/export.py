"""Export command implementation"""

from pathlib import Path

import click

from ..utils.output import console, format_export_result, format_failure
from ...api.exceptions import AppPackagerError
from ...api.exporter import Exporter
from ...constants import EMOJI_PACKAGE
from ...exporters import ExporterFactory
from ...models import ExportMode


@click.command()
@click.argument('app_file', type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    '--format', '-f', 'export_format',
    type=click.Choice(ExporterFactory.get_supported_formats()),
    default='ram',
    show_default=True,
    help='Export format'
)
@click.option(
    '--home', '-H',
    type=click.Path(file_okay=False, path_type=Path),
    help='Directory the export and package are created in'
)
@click.option(
    '--mode', '-m',
    type=click.Choice([m.value for m in ExportMode]),
    help='offline packs images, online (ram only) packs metadata only'
)
@click.pass_context
def export(ctx, app_file, export_format, home, mode):
    """Export an application to a deployable package

    APP_FILE is a JSON or YAML application description.

    Examples:
        app-packager export app.json
        app-packager export app.yaml --format helm-chart --home /tmp/export
        app-packager export app.json -f ram -m online
    """
    try:
        exporter = Exporter(config=ctx.obj.config)
        with console.status(f"{EMOJI_PACKAGE} Exporting {app_file.name} as {export_format}..."):
            result = exporter.export(app_file, export_format, home_path=home, mode=mode)
    except AppPackagerError as e:
        format_failure("Export Error", e)
        ctx.exit(1)

    format_export_result(result)
