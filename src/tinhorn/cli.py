"""tinhorn CLI interface.

Commands:
- render: Render a template with YAML or JSON data
- check: Compile a template and report syntax errors
- init: Initialize tinhorn configuration

Global options:
- --config: Path to configuration file
- --verbose: Enable verbose output with timestamps
- --quiet: Suppress info messages
- --ci: JSON log output
- --version: Show version and exit
"""

from pathlib import Path
from typing import Annotated, Any

import typer
import yaml

from tinhorn import __version__
from tinhorn.config import TinhornConfig, create_default_config, load_config
from tinhorn.errors import TinhornError
from tinhorn.template import Template
from tinhorn.utils.logging import configure_from_cli, get_logger

app = typer.Typer(
    name="tinhorn",
    help="Render logic-less Mustache-style templates",
    add_completion=False,
    no_args_is_help=True,
)

# Global state
_config: TinhornConfig = TinhornConfig()
_logger = get_logger()


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"tinhorn {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    config: Annotated[
        Path | None,
        typer.Option(
            "--config",
            "-c",
            help="Path to configuration file",
            exists=True,
            dir_okay=False,
        ),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Enable verbose output with timestamps"),
    ] = False,
    quiet: Annotated[
        bool,
        typer.Option("--quiet", "-q", help="Suppress info messages (warnings and errors only)"),
    ] = False,
    ci: Annotated[
        bool,
        typer.Option("--ci", help="Enable CI mode with JSON log output"),
    ] = False,
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            callback=version_callback,
            is_eager=True,
            help="Show version and exit",
        ),
    ] = False,
) -> None:
    """tinhorn - logic-less template rendering."""
    global _config

    configure_from_cli(verbose=verbose, quiet=quiet, ci=ci)

    try:
        _config = load_config(config_path=config)
    except FileNotFoundError as e:
        _logger.error(str(e))
        raise typer.Exit(1)
    except (ValueError, yaml.YAMLError) as e:
        _logger.error("Failed to load config: %s", e)
        raise typer.Exit(1)


def load_data(path: Path | None, encoding: str = "utf-8") -> Any:
    """Load render data from a YAML or JSON file.

    Args:
        path: Data file (None means no data)
        encoding: File encoding

    Returns:
        Parsed data, an empty mapping when no file is given
    """
    if path is None:
        return {}
    with open(path, encoding=encoding) as f:
        data = yaml.safe_load(f)
    return {} if data is None else data


@app.command()
def render(
    template: Annotated[
        Path,
        typer.Argument(help="Template file to render", exists=True, dir_okay=False),
    ],
    data: Annotated[
        Path | None,
        typer.Option(
            "--data",
            "-d",
            help="YAML or JSON file with the render data",
            exists=True,
            dir_okay=False,
        ),
    ] = None,
    output: Annotated[
        Path | None,
        typer.Option("--output", "-o", help="Output file (default: config or stdout)"),
    ] = None,
) -> None:
    """Render a template with data and write the result."""
    encoding = _config.output.encoding
    extensions = tuple(_config.markdown.extensions)
    output_path = output or (Path(_config.output.path) if _config.output.path else None)

    try:
        compiled = Template.from_file(template, encoding=encoding)
        values = load_data(data, encoding=encoding)
    except TinhornError as e:
        _logger.error("Template error in %s: %s", template, e)
        raise typer.Exit(1)
    except (OSError, yaml.YAMLError) as e:
        _logger.error("Failed to load input: %s", e)
        raise typer.Exit(1)

    try:
        if output_path is None:
            typer.echo(compiled.render(values, markdown_extensions=extensions), nl=False)
        else:
            compiled.render_to_file(
                values,
                output_path,
                encoding=encoding,
                markdown_extensions=extensions,
            )
    except (TinhornError, OSError) as e:
        _logger.error("Rendering failed: %s", e)
        raise typer.Exit(1)


@app.command()
def check(
    template: Annotated[
        Path,
        typer.Argument(help="Template file to validate", exists=True, dir_okay=False),
    ],
) -> None:
    """Validate a template.

    Compiles the template and reports the first syntax error.
    """
    _logger.info("Validating template: %s", template)

    try:
        compiled = Template.from_file(template, encoding=_config.output.encoding)
    except TinhornError as e:
        typer.echo(f"Template error: {e}")
        raise typer.Exit(1)

    typer.echo(f"Template is valid: {template} ({len(compiled.blocks)} blocks)")


@app.command()
def init(
    force: Annotated[
        bool,
        typer.Option("--force", help="Overwrite existing config"),
    ] = False,
) -> None:
    """Initialize tinhorn configuration.

    Creates .tinhorn/config.yaml with default settings.
    """
    config_path = Path(".tinhorn") / "config.yaml"

    if config_path.exists() and not force:
        _logger.error("Config already exists: %s (use --force to overwrite)", config_path)
        raise typer.Exit(1)

    config_path.parent.mkdir(exist_ok=True)
    config_path.write_text(create_default_config())
    typer.echo(f"Created {config_path}")


if __name__ == "__main__":
    app()
