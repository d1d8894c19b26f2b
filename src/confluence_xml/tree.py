"""On-disk entity index.

The index stores one property bag per entity under a path derived from its
namespace and identifier:

    <root>/pages/<pageId>/properties
    <root>/spaces/<spaceId>/properties
    <root>/attachments/<pageId>/<attachmentId>/properties
    <root>/permissions/<spaceId>/<permissionId>/properties
    <root>/internalusers/<userId>/properties
    <root>/userimpls/<userKey>/properties
    <root>/groups/<groupId>/properties
    <root>/objects/<objectId>/properties

Writes are last-writer-wins per key: saving a bag merges its keys over the
stored ones. Callers that need to accumulate values use upsert().
"""

import logging
import os
from pathlib import Path
from typing import Callable, List, Optional, Union

from .errors import PropertiesError
from .properties import DEFAULT_LIST_DELIMITER, ConfluenceProperties

logger = logging.getLogger(__name__)

PROPERTIES_FILENAME = "properties"

FOLDER_PAGES = "pages"
FOLDER_SPACES = "spaces"
FOLDER_ATTACHMENTS = "attachments"
FOLDER_PERMISSIONS = "permissions"
FOLDER_INTERNALUSER = "internalusers"
FOLDER_USERIMPL = "userimpls"
FOLDER_GROUP = "groups"
FOLDER_OBJECTS = "objects"

EntityId = Union[int, str]


def attachments_namespace(page_id: int) -> str:
    """Namespace holding the attachments of one page."""
    return f"{FOLDER_ATTACHMENTS}/{page_id}"


def permissions_namespace(space_id: int) -> str:
    """Namespace holding the permissions of one space."""
    return f"{FOLDER_PERMISSIONS}/{space_id}"


class EntityIndex:
    """Maps (namespace, id) pairs to property files below a root directory.

    Example:
        >>> index = EntityIndex("/tmp/tree")
        >>> props = ConfluenceProperties()
        >>> props.set("title", "Home")
        >>> index.save("pages", 10, props)
        >>> index.load("pages", 10).get_string("title")
        'Home'
    """

    def __init__(self, root: Union[str, Path], list_delimiter: Optional[str] = DEFAULT_LIST_DELIMITER):
        self.root = Path(root)
        self.list_delimiter = list_delimiter

    def folder(self, namespace: str) -> Path:
        return self.root.joinpath(*namespace.split("/"))

    def properties_path(self, namespace: str, entity_id: EntityId) -> Path:
        """Path of the properties file for an entity.

        Raises:
            PropertiesError: If a string id would escape its namespace folder
        """
        name = str(entity_id)
        if not name or name in (".", "..") or "/" in name or os.sep in name:
            raise PropertiesError(
                f"{namespace}/{name}",
                "resolve",
                "Identifier cannot be used as a folder name"
            )
        return self.folder(namespace) / name / PROPERTIES_FILENAME

    def exists(self, namespace: str, entity_id: EntityId) -> bool:
        return self.properties_path(namespace, entity_id).exists()

    def load(
        self,
        namespace: str,
        entity_id: Optional[EntityId],
        create: bool = False,
    ) -> Optional[ConfluenceProperties]:
        """Load the bag of an entity.

        Args:
            namespace: Namespace folder (see module docstring)
            entity_id: Identifier, None always yields None
            create: Return an empty bag bound to the path when nothing is stored

        Returns:
            The stored bag, an empty bag when create is set, otherwise None

        Raises:
            PropertiesError: If the stored file cannot be read
        """
        if entity_id is None:
            return None

        file_path = self.properties_path(namespace, entity_id)
        if not create and not file_path.exists():
            return None

        return ConfluenceProperties.create(file_path, self.list_delimiter)

    def save(self, namespace: str, entity_id: EntityId, properties: ConfluenceProperties) -> None:
        """Merge properties over the stored bag of an entity and write it."""
        stored = self.load(namespace, entity_id, create=True)
        stored.copy(properties)
        stored.save()

    def upsert(
        self,
        namespace: str,
        entity_id: EntityId,
        mutate: Callable[[ConfluenceProperties], None],
    ) -> ConfluenceProperties:
        """Load or create the bag of an entity, apply mutate, write it back.

        Returns:
            The bag as written
        """
        stored = self.load(namespace, entity_id, create=True)
        mutate(stored)
        stored.save()
        return stored

    def ids(self, namespace: str, numeric: bool = True) -> List[EntityId]:
        """Enumerate the ids stored in a namespace in ascending order.

        Numeric namespaces skip folders whose name is not an integer.
        """
        folder = self.folder(namespace)
        if not folder.is_dir():
            return []

        names = [entry.name for entry in folder.iterdir() if entry.is_dir()]
        if not numeric:
            return sorted(names)

        ids = []
        for name in names:
            try:
                ids.append(int(name))
            except ValueError:
                logger.debug(f"Ignoring non numeric entry '{name}' in {folder}")
        return sorted(ids)
