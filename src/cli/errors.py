"""Typed exception hierarchy for CLI-related errors.

All exceptions inherit from CLIError, itself a ConfluenceXMLError, so the
CLI can report any application failure the same way.
"""

from src.confluence_xml.errors import ConfluenceXMLError


class CLIError(ConfluenceXMLError):
    """Base exception for all CLI-related errors."""
    pass


class SpaceNotFoundError(CLIError):
    """Raised when a requested space key is not part of the package."""

    def __init__(self, space_key: str):
        super().__init__(f"Space '{space_key}' not found in package")
        self.space_key = space_key
