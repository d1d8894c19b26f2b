"""Typed exception hierarchy for Confluence XML package errors.

This module defines all custom exceptions raised while materializing,
indexing and reading a Confluence XML export. All exceptions inherit from
ConfluenceXMLError so callers can catch any package failure in one place,
and each one carries the context (path, operation) needed for debugging.
"""

from typing import Optional


class ConfluenceXMLError(Exception):
    """Base exception for all confluence-xml errors."""
    pass


class PackageSourceError(ConfluenceXMLError):
    """Raised when the package source cannot be resolved or extracted."""

    def __init__(self, source: str, reason: Optional[str] = None):
        message = f"Failed to read Confluence package from {source}"
        if reason:
            message += f": {reason}"
        super().__init__(message)
        self.source = source
        self.reason = reason


class PropertiesError(ConfluenceXMLError):
    """Raised when a properties backing file cannot be read or written."""

    def __init__(self, file_path: str, operation: str, reason: Optional[str] = None):
        message = f"Properties operation '{operation}' failed for {file_path}"
        if reason:
            message += f": {reason}"
        super().__init__(message)
        self.file_path = file_path
        self.operation = operation
        self.reason = reason


class MalformedStreamError(ConfluenceXMLError):
    """Raised when the entity stream has an unexpected structure."""

    def __init__(self, message: str, file_path: Optional[str] = None):
        if file_path:
            full_message = f"Malformed entity stream {file_path}: {message}"
        else:
            full_message = f"Malformed entity stream: {message}"
        super().__init__(full_message)
        self.file_path = file_path
        self.original_message = message


class ConfigError(ConfluenceXMLError):
    """Raised when configuration validation fails."""

    def __init__(self, message: str, config_field: Optional[str] = None):
        if config_field:
            full_message = f"Configuration error in field '{config_field}': {message}"
        else:
            full_message = f"Configuration error: {message}"
        super().__init__(full_message)
        self.config_field = config_field
        self.original_message = message


class DateParseError(ConfluenceXMLError, ValueError):
    """Raised when a property value does not match the export date format."""

    def __init__(self, value: str, key: Optional[str] = None):
        if key:
            message = f"Invalid date '{value}' in property '{key}'"
        else:
            message = f"Invalid date '{value}'"
        super().__init__(message)
        self.value = value
        self.key = key


class AttachmentNotFoundError(ConfluenceXMLError, FileNotFoundError):
    """Raised when no binary file exists for an attachment."""

    def __init__(self, file_path: str):
        super().__init__(f"Attachment file not found: {file_path}")
        self.file_path = file_path
