# app_packager/cli/utils/output.py
"""Output formatting utilities"""

from pathlib import Path

from rich.console import Console
from rich.panel import Panel

from ...api.exceptions import AppPackagerError, ExportError
from ...constants import EMOJI_ERROR, EMOJI_SUCCESS
from ...models import ExportResult, ImportResult
from ...utils.file_utils import format_size, get_file_size

console = Console()


def format_export_result(result: ExportResult) -> None:
    """Format and display export result"""
    lines = [
        f"[green]{EMOJI_SUCCESS}[/green] Package created successfully!",
        "",
        f"[bold]Format:[/bold] {result.package_format}",
        f"[bold]Package:[/bold] {result.package_path}",
    ]

    package = Path(result.package_path)
    if package.exists():
        lines.append(f"[bold]Size:[/bold] {format_size(get_file_size(package))}")

    if result.images:
        lines.append("")
        lines.append(f"[bold]Images ({len(result.images)}):[/bold]")
        for image in result.images:
            lines.append(f"  • {image}")

    console.print(Panel("\n".join(lines), title="Export Result", border_style="green"))


def format_import_result(result: ImportResult) -> None:
    """Format and display import result"""
    lines = [
        f"[green]{EMOJI_SUCCESS}[/green] Import completed successfully!",
        "",
        f"[bold]Application:[/bold] {result.app.app_name}",
        f"[bold]Version:[/bold] {result.app.app_version}",
        f"[bold]Extracted to:[/bold] {result.extract_path}",
    ]

    if result.images:
        lines.append("")
        lines.append("[bold]Pushed:[/bold]")
        for image in result.images:
            lines.append(f"  • {image}")

    console.print(Panel("\n".join(lines), title="Import Result", border_style="green"))


def format_failure(title: str, error: AppPackagerError) -> None:
    """Display a failed operation"""
    lines = [f"[red]{EMOJI_ERROR} {error}[/red]"]
    if isinstance(error, ExportError):
        lines.append(f"[bold]Stage:[/bold] {error.stage}")
    if error.error_code:
        lines.append(f"[dim]Error code: {error.error_code}[/dim]")
    console.print(Panel("\n".join(lines), title=title, border_style="red"))

