"""Command line interface for inspecting Confluence XML packages."""

from .errors import CLIError, SpaceNotFoundError
from .inspect_command import InspectCommand
from .models import ExitCode, PackageSummary, SpaceSummary
from .output import OutputHandler

__all__ = [
    "CLIError",
    "ExitCode",
    "InspectCommand",
    "OutputHandler",
    "PackageSummary",
    "SpaceNotFoundError",
    "SpaceSummary",
]
