"""Confluence XML export ingestion and indexing.

This package reads the entities.xml object stream of a Confluence XML export
in a single pass and materializes a disk-backed, random-access index of the
pages, spaces, attachments, users, groups and permissions it contains.
"""

from .config import ConfigLoader, PackageConfig
from .errors import (
    AttachmentNotFoundError,
    ConfigError,
    ConfluenceXMLError,
    DateParseError,
    MalformedStreamError,
    PackageSourceError,
    PropertiesError,
)
from .models import EntityKind
from .package import ConfluenceXMLPackage
from .properties import ConfluenceProperties, PropertyValue, ValueKind, parse_date
from .reader import ObjectStreamReader, StreamObject, fix_cdata
from .resolver import RelationshipResolver
from .tree import EntityIndex

__all__ = [
    "AttachmentNotFoundError",
    "ConfigError",
    "ConfigLoader",
    "ConfluenceProperties",
    "ConfluenceXMLError",
    "ConfluenceXMLPackage",
    "DateParseError",
    "EntityIndex",
    "EntityKind",
    "MalformedStreamError",
    "ObjectStreamReader",
    "PackageConfig",
    "PackageSourceError",
    "PropertiesError",
    "PropertyValue",
    "RelationshipResolver",
    "StreamObject",
    "ValueKind",
    "fix_cdata",
    "parse_date",
]
