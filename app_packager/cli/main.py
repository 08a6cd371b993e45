# app_packager/cli/main.py
"""Main CLI entry point for app-packager"""

import sys
import logging
from pathlib import Path
from typing import Optional

import click
from rich.logging import RichHandler

from ..__version__ import __version__
from ..constants import APP_NAME, LOG_FORMAT
from ..models.config import PackagerConfig
from ..services.config_service import ConfigService
from .utils.output import console

# Import all commands
from .commands import export, import_cmd


def setup_logging(verbose: bool = False, debug: bool = False) -> None:
    """Setup logging configuration

    Args:
        verbose: Enable verbose output (INFO level)
        debug: Enable debug output (DEBUG level)
    """
    if debug:
        level = logging.DEBUG
    elif verbose:
        level = logging.INFO
    else:
        level = logging.WARNING

    # Configure rich handler
    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        handlers=[
            RichHandler(
                console=console,
                show_time=debug,
                show_path=debug,
                rich_tracebacks=True,
                tracebacks_suppress=[click]
            )
        ],
        force=True
    )

    # Adjust third-party loggers
    for name in ("asyncio", "aiofiles", "docker", "urllib3"):
        logging.getLogger(name).setLevel(logging.WARNING)


class Context:
    """CLI context object with lazy configuration loading"""

    def __init__(self, config_path: Optional[Path] = None):
        """Initialize CLI context

        Args:
            config_path: Settings file given on the command line
        """
        self.config_path = config_path
        self.verbose: bool = False
        self.debug: bool = False
        self._config: Optional[PackagerConfig] = None

    @property
    def config(self) -> PackagerConfig:
        """Packager configuration (lazy loading)

        Raises:
            ConfigError: If the settings file is invalid
        """
        if self._config is None:
            self._config = ConfigService(self.config_path).load_config()
            if not (self.verbose or self.debug):
                logging.getLogger().setLevel(self._config.log_level)
            if self.debug:
                console.print(f"[dim]Home: {self._config.home_path}[/dim]")
        return self._config


@click.group(name=APP_NAME)
@click.version_option(__version__, prog_name=APP_NAME)
@click.option(
    '-c', '--config', 'config_path',
    type=click.Path(dir_okay=False, path_type=Path),
    help='Settings file (default: ./.app-packager.yaml)'
)
@click.option('-v', '--verbose', is_flag=True, help='Enable verbose output')
@click.option('-d', '--debug', is_flag=True, help='Enable debug output')
@click.option('-q', '--quiet', is_flag=True, help='Suppress all output except errors')
@click.pass_context
def cli(ctx, config_path, verbose, debug, quiet):
    """App Packager - Export applications to deployable packages

    Packages an application's images and manifests as an offline archive,
    a Docker Compose bundle, raw Kubernetes YAML or a Helm chart, and
    imports offline archives into an image hub.
    """
    # Setup logging
    if quiet:
        logging.disable(logging.CRITICAL)
    else:
        setup_logging(verbose=verbose, debug=debug)

    ctx.obj = Context(config_path)
    ctx.obj.verbose = verbose
    ctx.obj.debug = debug


# Register commands
cli.add_command(export.export)
cli.add_command(import_cmd.import_app)


def main():
    """Main entry point for the CLI application

    This function handles:
    - Keyboard interrupts
    - Unexpected exceptions with proper error display
    """
    try:
        cli(prog_name=APP_NAME)

    except KeyboardInterrupt:
        console.print("\n[yellow]Operation cancelled by user[/yellow]")
        sys.exit(130)

    except Exception as e:
        console.print(f"[red]Unexpected error: {e}[/red]")
        if '--debug' in sys.argv or '-d' in sys.argv:
            console.print_exception()
        sys.exit(1)


if __name__ == "__main__":
    main()
