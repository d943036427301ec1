"""
Command-line interface for the respack converter.
"""

import sys
import os
import time
from pathlib import Path
from typing import Optional
import typer
from rich.console import Console
from rich.table import Table

from . import __version__
from .config import ConverterConfig, ENV_OVERRIDES, ENV_PREFIX
from .pipeline import ConversionPipeline, PipelineState
from .providers.base import ProviderError
from .processing.router import TARGET_FILENAMES
from .utils.image import DecodeError

# Initialize typer app and rich consoles
app = typer.Typer(
    name="pt-respack",
    help="Convert PT resource packs into the target game's resource pack layout",
    add_completion=False,
    rich_markup_mode="rich",
    epilog="""
[bold]Examples:[/bold]
  [cyan]pt-respack convert https://example.com/pack.json[/cyan]   Convert a pack
  [cyan]pt-respack inspect https://example.com/pack.json[/cyan]   Show classified resources
  [cyan]pt-respack config --env-vars[/cyan]                       List environment overrides
    """
)
console = Console()
err_console = Console(stderr=True)

CONVERSION_ERRORS = (ProviderError, DecodeError, OSError)


@app.command()
def convert(
    url: Optional[str] = typer.Argument(None, help="Manifest URL of the PT resource pack"),
    config_file: Optional[Path] = typer.Option(None, "--config", "-c", help="Configuration file path"),
    output_dir: Optional[Path] = typer.Option(None, "--output", "-o", help="Output root directory"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Only fetch and classify the manifest"),
    show_summary: bool = typer.Option(True, "--summary/--no-summary", help="Show execution summary")
):
    """Download a PT resource pack and convert it."""
    config = _load_config(config_file)
    if output_dir is not None:
        config.output_root = str(output_dir)
    url = _resolve_url(url, config)

    try:
        pipeline = ConversionPipeline(config)
        if dry_run:
            state = pipeline.inspect(url)
            _display_classification(state)
            return

        state = pipeline.run(url)
    except CONVERSION_ERRORS as e:
        err_console.print(f"[red]Conversion failed:[/red] {e}")
        raise typer.Exit(1)
    except Exception as e:
        err_console.print(f"[red]Unexpected error:[/red] {e}")
        raise typer.Exit(1)

    console.print(f"[green]✓[/green] Converted pack written to {state.output_dir}")
    if show_summary:
        _display_pipeline_summary(state)


@app.command()
def inspect(
    url: Optional[str] = typer.Argument(None, help="Manifest URL of the PT resource pack"),
    config_file: Optional[Path] = typer.Option(None, "--config", "-c", help="Configuration file path")
):
    """Fetch a manifest and show how its resources are classified."""
    config = _load_config(config_file)
    url = _resolve_url(url, config)

    try:
        state = ConversionPipeline(config).inspect(url)
    except CONVERSION_ERRORS as e:
        err_console.print(f"[red]Inspection failed:[/red] {e}")
        raise typer.Exit(1)
    except Exception as e:
        err_console.print(f"[red]Unexpected error:[/red] {e}")
        raise typer.Exit(1)

    _display_classification(state)


@app.command()
def config(
    show: bool = typer.Option(False, "--show", help="Show current configuration"),
    validate_config: bool = typer.Option(False, "--validate", help="Validate configuration file"),
    config_file: Optional[Path] = typer.Option(None, "--config", "-c", help="Configuration file path"),
    env_vars: bool = typer.Option(False, "--env-vars", help="Show available environment variables")
):
    """Manage converter configuration."""
    if env_vars:
        _display_env_vars()
        return

    if not (show or validate_config):
        console.print("Use --show to display configuration, --validate to check it, or --env-vars to see environment variables.")
        return

    loaded = _load_config(config_file)

    if show:
        _display_config(loaded)

    if validate_config:
        errors = loaded.validate()
        if errors:
            err_console.print("[red]Configuration validation errors:[/red]")
            for error in errors:
                err_console.print(f"  • {error}")
            raise typer.Exit(1)
        console.print("[green]✓ Configuration is valid[/green]")


@app.command()
def version():
    """Show converter version information."""
    console.print("[bold]PT Respack Converter[/bold]")
    console.print(f"Version: {__version__}")
    console.print("Python: " + sys.version.split()[0])


def _resolve_url(url: Optional[str], config: ConverterConfig) -> str:
    if url:
        return url
    err_console.print(f"[yellow]Warning:[/yellow] no URL given, using example pack {config.manifest_url}")
    return config.manifest_url


def _load_config(config_file: Optional[Path]) -> ConverterConfig:
    """Load configuration from file or use defaults with environment variable support."""
    config = None

    try:
        if config_file:
            if not config_file.exists():
                err_console.print(f"[red]Configuration file not found:[/red] {config_file}")
                raise typer.Exit(1)
            config = ConverterConfig.from_file(config_file)
            console.print(f"[dim]Using configuration: {config_file}[/dim]")
        else:
            for config_path in (Path("respack_converter.toml"), Path("respack_converter.json")):
                if config_path.exists():
                    console.print(f"[dim]Using configuration: {config_path}[/dim]")
                    config = ConverterConfig.from_file(config_path)
                    break
    except ValueError as e:
        err_console.print(f"[red]Invalid configuration:[/red] {e}")
        raise typer.Exit(1)

    if config is None:
        config = ConverterConfig()

    try:
        config = ConverterConfig._apply_env_overrides(config)
    except ValueError as e:
        err_console.print(f"[red]Invalid configuration:[/red] {e}")
        raise typer.Exit(1)

    env_vars_used = [key for key in os.environ if key.startswith(ENV_PREFIX)]
    if env_vars_used:
        console.print(f"[dim]Environment overrides applied: {len(env_vars_used)} variables[/dim]")

    return config


def _display_classification(state: PipelineState) -> None:
    """Show manifest metadata and the role each resource maps to."""
    manifest = state.manifest
    console.print(f"[bold]{manifest.name}[/bold] by {manifest.author}")

    table = Table(title="Classified resources")
    table.add_column("Role", style="cyan")
    table.add_column("Target", style="green")
    table.add_column("URL")

    for role, url in state.classified.items():
        target = TARGET_FILENAMES.get(role, "(hold component)")
        table.add_row(role.label, target, url)

    console.print(table)

    if state.unrecognized:
        console.print(f"[yellow]Ignored {len(state.unrecognized)} unsupported resources:[/yellow] "
                      + ", ".join(state.unrecognized))


def _display_pipeline_summary(state: PipelineState) -> None:
    """Display pipeline execution summary."""
    total_duration = time.time() - state.start_time if state.start_time else 0

    console.print("\n[bold]Conversion Summary[/bold]")

    table = Table(show_header=False, box=None)
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="green")

    table.add_row("Total execution time", f"{total_duration:.2f}s")
    table.add_row("Resources classified", str(len(state.classified)))
    table.add_row("Resources ignored", str(len(state.unrecognized)))
    table.add_row("Files written", str(len(state.written_files)))
    console.print(table)

    steps = Table(title="Steps")
    steps.add_column("Step", style="cyan")
    steps.add_column("Duration", style="green")
    for step, result in state.step_results.items():
        steps.add_row(step.value, f"{result.duration:.2f}s")
    console.print(steps)

    for path in state.written_files:
        console.print(f"  [green]✓[/green] {path.name}")


def _display_config(config: ConverterConfig) -> None:
    """Display configuration in a formatted table."""
    table = Table(title="Converter Configuration")
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="green")

    for name, value in vars(config).items():
        table.add_row(name, str(value))

    console.print(table)


def _display_env_vars() -> None:
    """Display available environment variables."""
    table = Table(title="Environment Variables")
    table.add_column("Variable", style="cyan")
    table.add_column("Setting", style="green")

    for env_name, (attribute, _) in ENV_OVERRIDES.items():
        table.add_row(env_name, attribute)

    console.print(table)


if __name__ == "__main__":
    app()
