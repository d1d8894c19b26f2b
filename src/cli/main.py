"""Main CLI entry point for confluence-xml command.

This module provides the Typer application that serves as the entry point
for the confluence-xml command-line tool. It uses options on the main command
rather than subcommands for a simpler user experience.
"""

import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional

import typer

from src.cli.inspect_command import InspectCommand
from src.cli.models import ExitCode
from src.cli.output import OutputHandler
from src.confluence_xml.config import ConfigLoader
from src.confluence_xml.errors import ConfigError, PackageSourceError

VERSION = "0.1.0"

# Create Typer app - no_args_is_help=False allows running without args
app = typer.Typer(
    name="confluence-xml",
    help="""Read and index a Confluence XML space or site export.

QUICK START:
  confluence-xml export.zip                 # Summarize the export
  confluence-xml ./export                   # Read an unpacked export
  confluence-xml export.zip --space TEAM    # List the pages of one space""",
    add_completion=False,
    rich_markup_mode=None,  # Disable Rich markup to avoid compatibility issues
    no_args_is_help=False,
)

# Module logger
logger = logging.getLogger(__name__)

# Help message for when no arguments provided
GETTING_STARTED_MESSAGE = """confluence-xml <package>                  # Summarize an export

<package> [--space KEY]                   # List the pages of a space
<package> --config confluence-xml.yaml    # Read with custom settings
--help                                    # Show all options

Example:
  confluence-xml Confluence-space-export-TEAM.xml.zip --space TEAM"""


def _configure_logging(verbosity: int, logdir: Optional[str] = None) -> None:
    """Configure logging based on verbosity level.

    Configures only the 'src' namespace logger to avoid affecting third-party
    libraries. The root logger is left unchanged.

    Args:
        verbosity: Verbosity level (0=WARNING, 1=INFO, 2=DEBUG)
        logdir: Optional directory for log files (creates timestamped log file)
    """
    if verbosity == 0:
        level = logging.WARNING
    elif verbosity == 1:
        level = logging.INFO
    else:  # verbosity >= 2
        level = logging.DEBUG

    app_logger = logging.getLogger("src")
    app_logger.setLevel(level)

    log_format = "%(asctime)s [%(levelname)8s] %(message)s"
    date_format = "%Y-%m-%d %H:%M:%S"
    formatter = logging.Formatter(log_format, datefmt=date_format)

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    app_logger.addHandler(console_handler)

    if logdir:
        log_path = Path(logdir)
        log_path.mkdir(parents=True, exist_ok=True)

        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        log_file = log_path / f"confluence-xml_{timestamp}.log"

        file_format = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        file_formatter = logging.Formatter(file_format, datefmt=date_format)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(level)
        file_handler.setFormatter(file_formatter)
        app_logger.addHandler(file_handler)

        logger.info(f"Logging to file: {log_file}")


@app.command()
def main_command(
    package: Optional[str] = typer.Argument(
        None,
        help="Export to read: directory, zip file or file: URL",
    ),
    space: Optional[str] = typer.Option(
        None,
        "--space",
        help="List the current pages of the space with this key",
        metavar="KEY",
    ),
    config_path: Optional[str] = typer.Option(
        None,
        "--config",
        help="YAML configuration file (defaults to CONFLUENCE_XML_* environment variables)",
        metavar="FILE",
    ),
    logdir: Optional[str] = typer.Option(
        None,
        "--logdir",
        help="Directory for log files (creates timestamped log file)",
    ),
    verbosity: int = typer.Option(
        0,
        "--verbosity",
        "-v",
        help="Verbosity level: 0=summary, 1=info, 2=debug",
    ),
    no_color: bool = typer.Option(
        False,
        "--no-color",
        help="Disable colored output",
    ),
    version: bool = typer.Option(
        False,
        "--version",
        "-V",
        help="Show version and exit",
    ),
) -> None:
    """Read and index a Confluence XML space or site export.

    \b
    QUICK START:
      confluence-xml export.zip                 # Summarize the export
      confluence-xml ./export                   # Read an unpacked export
      confluence-xml export.zip --space TEAM    # List the pages of one space

    \b
    CONFIGURATION:
      CONFLUENCE_XML_TEMP_DIR         # Where packages are extracted and indexed
      CONFLUENCE_XML_LIST_DELIMITER   # Delimiter of list values (empty to disable)
    """
    if version:
        typer.echo(f"confluence-xml version {VERSION}")
        raise typer.Exit()

    if package is None:
        typer.echo(GETTING_STARTED_MESSAGE)
        raise typer.Exit()

    _configure_logging(verbosity, logdir)

    output = OutputHandler(verbosity=verbosity, no_color=no_color)

    try:
        if config_path:
            config = ConfigLoader.load(config_path)
        else:
            config = ConfigLoader.from_env()
    except (ConfigError, PackageSourceError) as e:
        logger.error(f"Failed to load config: {e}")
        output.error(f"Failed to load config: {e}")
        raise typer.Exit(ExitCode.GENERAL_ERROR)

    output.info(f"Reading package {package}")

    command = InspectCommand(output_handler=output, config=config)
    exit_code = command.run(package, space_key=space)

    raise typer.Exit(exit_code)


def main() -> None:
    """Main entry point for the CLI application.

    This function is called when the module is executed directly or
    when the console script is invoked.
    """
    app()


# Allow running as: python -m src.cli.main
if __name__ == "__main__":
    main()
