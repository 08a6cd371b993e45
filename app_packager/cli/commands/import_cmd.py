"""Import command implementation"""

from pathlib import Path

import click

from ..utils.output import console, format_failure, format_import_result
from ...api.exceptions import AppPackagerError
from ...api.importer import Importer
from ...models import ImageInfo


@click.command(name='import')
@click.argument('archive', type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option('--hub-url', required=True, help='Target image hub, e.g. registry.example.com')
@click.option('--namespace', '-n', default='', help='Namespace on the target hub')
@click.option('--hub-user', '-u', default='', help='Hub username')
@click.option(
    '--hub-password', '-p',
    default='',
    envvar='APP_PACKAGER_HUB_PASSWORD',
    help='Hub password (or APP_PACKAGER_HUB_PASSWORD)'
)
@click.option(
    '--home', '-H',
    type=click.Path(file_okay=False, path_type=Path),
    help='Directory the archive is extracted under'
)
@click.pass_context
def import_app(ctx, archive, hub_url, namespace, hub_user, hub_password, home):
    """Import an offline (ram) archive into an image hub

    Images are loaded, retagged onto the hub and pushed.

    Examples:
        app-packager import demo-1.0-ram.tar.gz --hub-url registry.example.com -n apps
    """
    hub = ImageInfo(
        hub_url=hub_url,
        namespace=namespace,
        hub_user=hub_user,
        hub_password=hub_password
    )

    try:
        importer = Importer(config=ctx.obj.config)
        with console.status(f"Importing {archive.name}..."):
            result = importer.import_archive(archive, hub, home_path=home)
    except AppPackagerError as e:
        format_failure("Import Error", e)
        ctx.exit(1)

    format_import_result(result)
