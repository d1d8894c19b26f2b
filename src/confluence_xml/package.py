"""Confluence XML package: ingestion entry point and read API.

ConfluenceXMLPackage materializes a package source, reads entities.xml once
to build the on-disk entity index, then answers lookups against that index.
Lookups for entities that were never stored return None rather than
raising.

Example:
    >>> with ConfluenceXMLPackage() as package:
    ...     package.read("export.zip")
    ...     for space_id, page_ids in package.pages.items():
    ...         print(package.get_space_key(space_id), page_ids)
"""

import logging
import shutil
import tempfile
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional

from .archive import PackageSource, WorkingDirectory, materialize
from .config import PackageConfig
from .errors import AttachmentNotFoundError, ConfluenceXMLError, PropertiesError
from .models import (
    FILE_DESCRIPTOR,
    FILE_ENTITIES,
    KEY_ATTACHMENT_ATTACHMENTVERSION,
    KEY_ATTACHMENT_NAME,
    KEY_ATTACHMENT_ORIGINALVERSION,
    KEY_ATTACHMENT_ORIGINALVERSIONID,
    KEY_ATTACHMENT_TITLE,
    KEY_ATTACHMENT_VERSION,
    KEY_CONTENT_PROPERTY_DATE,
    KEY_CONTENT_PROPERTY_LONG,
    KEY_CONTENT_PROPERTY_NAME,
    KEY_CONTENT_PROPERTY_STRING,
    KEY_LABEL_NAME,
    KEY_LABELLING_LABEL,
    KEY_PAGE_BODY,
    KEY_PAGE_BODY_TYPE,
    KEY_SPACE_KEY,
    KEY_SPACE_NAME,
)
from .properties import ConfluenceProperties
from .reader import ObjectStreamReader
from .resolver import RelationshipResolver, get_long, get_long_list
from .tree import (
    FOLDER_GROUP,
    FOLDER_INTERNALUSER,
    FOLDER_OBJECTS,
    FOLDER_PAGES,
    FOLDER_SPACES,
    FOLDER_USERIMPL,
    EntityIndex,
    attachments_namespace,
    permissions_namespace,
)

logger = logging.getLogger(__name__)

TREE_PREFIX = "confluencexml-tree"

# Body type reported for comments whose content cannot be found
UNKNOWN_BODY_TYPE = -1


class ConfluenceXMLPackage:
    """Indexed view of a Confluence XML export.

    Attributes:
        config: Reading configuration
        directory: Working directory holding the raw export
        tree: Directory of the entity index
        pages: Space id to ordered ids of its current pages
        spaces_by_key: Space key to space id
    """

    def __init__(self, config: Optional[PackageConfig] = None):
        self.config = config or PackageConfig()
        self.directory: Optional[Path] = None
        self.tree: Optional[Path] = None
        self.pages: Dict[Optional[int], List[int]] = {}
        self.spaces_by_key: Dict[str, int] = {}
        self._temporary_directory = False
        self._index: Optional[EntityIndex] = None

    def __enter__(self) -> "ConfluenceXMLPackage":
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.close()

    # Ingestion

    def read(self, source: PackageSource) -> None:
        """Materialize source and build the entity index from its entities.xml.

        Args:
            source: Directory, zip file path, file URL or binary zip stream

        Raises:
            PackageSourceError: If the source cannot be read or extracted
            MalformedStreamError: If entities.xml is structurally invalid
            PropertiesError: If the index cannot be written
        """
        self.close()
        self.pages = {}
        self.spaces_by_key = {}
        self._index = None

        working_directory: WorkingDirectory = materialize(source, self.config.temporary_directory)
        self.directory = working_directory.path
        self._temporary_directory = working_directory.temporary

        if self._temporary_directory:
            self.tree = self.directory / "tree"
            self.tree.mkdir(exist_ok=True)
        else:
            self.tree = Path(tempfile.mkdtemp(prefix=TREE_PREFIX, dir=self.config.temporary_directory))

        self._index = EntityIndex(self.tree, self.config.delimiter)
        resolver = RelationshipResolver(self._index)

        logger.info(f"Indexing {self.entities_file}")
        reader = ObjectStreamReader(self.entities_file, self.config.delimiter)
        count = 0
        for stream_object in reader.read():
            resolver.handle(stream_object)
            count += 1

        self.pages = resolver.pages
        self.spaces_by_key = resolver.spaces_by_key
        logger.info(f"Indexed {count} object(s) in {len(resolver.spaces_by_key)} space(s)")

    def close(self) -> None:
        """Delete the index tree and, if it was extracted, the working directory."""
        if self.tree is not None and self.tree.exists():
            shutil.rmtree(self.tree, ignore_errors=True)
        self.tree = None

        if self._temporary_directory and self.directory is not None and self.directory.exists():
            shutil.rmtree(self.directory, ignore_errors=True)
        self._temporary_directory = False

    # Files

    @property
    def entities_file(self) -> Path:
        """Main object stream of the package."""
        return self._require_directory() / FILE_ENTITIES

    @property
    def descriptor_file(self) -> Path:
        """Properties file describing the exporting instance."""
        return self._require_directory() / FILE_DESCRIPTOR

    def _require_directory(self) -> Path:
        if self.directory is None:
            raise ConfluenceXMLError("Package has not been read")
        return self.directory

    @property
    def index(self) -> EntityIndex:
        if self._index is None:
            raise ConfluenceXMLError("Package has not been read")
        return self._index

    def get_attachment_file(self, page_id: int, attachment_id: int, version: int) -> Path:
        """Locate the binary of an attachment version.

        Old exports name the file after the version, recent ones always use 1.

        Raises:
            AttachmentNotFoundError: If neither file exists
        """
        folder = self._require_directory() / "attachments" / str(page_id) / str(attachment_id)

        file_path = folder / str(version)
        if file_path.exists():
            return file_path

        file_path = folder / "1"
        if file_path.exists():
            return file_path

        raise AttachmentNotFoundError(str(file_path.absolute()))

    # Property helpers

    @staticmethod
    def get_date(properties: ConfluenceProperties, key: str) -> Optional[datetime]:
        """Parse a date property; None if absent.

        Raises:
            DateParseError: If the value does not match the export format
        """
        return properties.get_date(key)

    @staticmethod
    def get_long(properties: ConfluenceProperties, key: str, default: Optional[int] = None) -> Optional[int]:
        return get_long(properties, key, default)

    @staticmethod
    def get_long_list(
        properties: ConfluenceProperties,
        key: str,
        default: Optional[List[int]] = None,
    ) -> Optional[List[int]]:
        return get_long_list(properties, key, default)

    def get_content_properties(
        self,
        properties: ConfluenceProperties,
        key: str,
    ) -> Optional[ConfluenceProperties]:
        """Resolve the ContentProperty objects referenced by a list property.

        Each referenced object contributes name -> value, where the value is
        its longValue (as an integer), else its dateValue, else its stringValue.

        Returns:
            A bag of the resolved values, None if the property is absent
        """
        elements = get_long_list(properties, key)
        if elements is None:
            return None

        content_properties = ConfluenceProperties()
        for element in elements:
            content_property = self.get_object_properties(element)
            if content_property is None:
                continue

            name = content_property.get_string(KEY_CONTENT_PROPERTY_NAME)
            if name is None:
                continue

            if content_property.get_string(KEY_CONTENT_PROPERTY_LONG):
                value = get_long(content_property, KEY_CONTENT_PROPERTY_LONG)
            else:
                value = (content_property.get_string(KEY_CONTENT_PROPERTY_DATE)
                         or content_property.get_string(KEY_CONTENT_PROPERTY_STRING))

            content_properties.set(name, value)

        return content_properties

    # Spaces

    def get_space_properties(self, space_id: int) -> Optional[ConfluenceProperties]:
        return self.index.load(FOLDER_SPACES, space_id)

    def get_space_name(self, space_id: int) -> Optional[str]:
        """Name of a space, falling back to its key."""
        space_properties = self.get_space_properties(space_id)
        return self.space_name(space_properties) if space_properties is not None else None

    def get_space_key(self, space_id: int) -> Optional[str]:
        """Key of a space, falling back to its name."""
        space_properties = self.get_space_properties(space_id)
        return self.space_key(space_properties) if space_properties is not None else None

    @staticmethod
    def space_name(space_properties: ConfluenceProperties) -> Optional[str]:
        name = space_properties.get_string(KEY_SPACE_NAME)
        return name if name is not None else space_properties.get_string(KEY_SPACE_KEY)

    @staticmethod
    def space_key(space_properties: ConfluenceProperties) -> Optional[str]:
        key = space_properties.get_string(KEY_SPACE_KEY)
        return key if key is not None else space_properties.get_string(KEY_SPACE_NAME)

    def get_space_permissions(self, space_id: int) -> List[int]:
        return self.index.ids(permissions_namespace(space_id))

    def get_space_permission_properties(self, space_id: int, permission_id: int) -> Optional[ConfluenceProperties]:
        return self.index.load(permissions_namespace(space_id), permission_id)

    # Pages

    def get_page_properties(self, page_id: int, create: bool = False) -> Optional[ConfluenceProperties]:
        """Properties of a page (including its merged body content).

        Args:
            page_id: Page identifier
            create: Return an empty bag instead of None when the page is unknown
        """
        return self.index.load(FOLDER_PAGES, page_id, create)

    def get_comment_text(self, comment_id: int) -> str:
        """Body of a comment, its id as text when it cannot be found."""
        comment_text = str(comment_id)
        try:
            # Body contents are merged into page properties under the content id
            comment_content = self.get_page_properties(comment_id)
        except PropertiesError as e:
            logger.warning(f"Unable to get comment text, using id instead: {e}")
            return comment_text

        if comment_content is None:
            logger.warning(f"Unable to get comment {comment_id} text, using id instead")
            return comment_text

        return comment_content.get_string(KEY_PAGE_BODY, comment_text)

    def get_comment_body_type(self, comment_id: int) -> int:
        """Body type of a comment, -1 when it cannot be found."""
        try:
            comment_content = self.get_page_properties(comment_id)
        except PropertiesError as e:
            logger.warning(f"Unable to get comment body type: {e}")
            return UNKNOWN_BODY_TYPE

        if comment_content is None:
            logger.warning(f"Unable to get comment {comment_id} body type")
            return UNKNOWN_BODY_TYPE

        return get_long(comment_content, KEY_PAGE_BODY_TYPE, UNKNOWN_BODY_TYPE)

    # Attachments

    def get_attachments(self, page_id: int) -> List[int]:
        """Ids of the attachments of a page, ascending."""
        return self.index.ids(attachments_namespace(page_id))

    def get_attachment_properties(self, page_id: int, attachment_id: int) -> Optional[ConfluenceProperties]:
        return self.index.load(attachments_namespace(page_id), attachment_id)

    @staticmethod
    def get_attachment_name(attachment_properties: ConfluenceProperties) -> Optional[str]:
        """Attachment file name, from title or the legacy fileName."""
        name = attachment_properties.get_string(KEY_ATTACHMENT_TITLE)
        if name is None:
            name = attachment_properties.get_string(KEY_ATTACHMENT_NAME)
        return name

    @staticmethod
    def get_attachment_version(attachment_properties: ConfluenceProperties) -> Optional[int]:
        """Attachment version, from version or the legacy attachmentVersion."""
        version = get_long(attachment_properties, KEY_ATTACHMENT_VERSION)
        if version is None:
            version = get_long(attachment_properties, KEY_ATTACHMENT_ATTACHMENTVERSION)
        return version

    @staticmethod
    def get_attachment_original_version_id(attachment_properties: ConfluenceProperties, default: int) -> int:
        original_version_id = get_long(attachment_properties, KEY_ATTACHMENT_ORIGINALVERSIONID)
        if original_version_id is not None:
            return original_version_id
        return get_long(attachment_properties, KEY_ATTACHMENT_ORIGINALVERSION, default)

    # Labels

    def get_tag_name(self, labelling_properties: ConfluenceProperties) -> Optional[str]:
        """Name of the label a labelling points to, the label id if it is missing."""
        tag_id = get_long(labelling_properties, KEY_LABELLING_LABEL)
        if tag_id is None:
            return None

        tag_name = str(tag_id)
        try:
            label_properties = self.get_object_properties(tag_id)
        except PropertiesError as e:
            logger.warning(f"Unable to get tag name, using id instead: {e}")
            return tag_name

        if label_properties is None or label_properties.get_string(KEY_LABEL_NAME) is None:
            logger.warning(f"Unable to get tag {tag_id} name, using id instead")
            return tag_name

        return label_properties.get_string(KEY_LABEL_NAME)

    # Users and groups

    def get_internal_user_properties(self, user_id: Optional[int]) -> Optional[ConfluenceProperties]:
        return self.index.load(FOLDER_INTERNALUSER, user_id)

    def get_user_impl_properties(self, user_key: Optional[str]) -> Optional[ConfluenceProperties]:
        try:
            return self.index.load(FOLDER_USERIMPL, user_key)
        except PropertiesError as e:
            logger.warning(f"Invalid user key {user_key!r}: {e}")
            return None

    def get_user_properties(self, user_id_or_key: str) -> Optional[ConfluenceProperties]:
        """Properties of a user, looked up by key first and then by numeric id."""
        properties = self.get_user_impl_properties(user_id_or_key)

        if properties is None:
            try:
                user_id = int(user_id_or_key)
            except (TypeError, ValueError):
                return None
            properties = self.get_internal_user_properties(user_id)

        return properties

    def get_internal_users(self) -> List[int]:
        """Ids of users stored with class InternalUser."""
        return self.index.ids(FOLDER_INTERNALUSER)

    def get_users_impl(self) -> List[str]:
        """Keys of users stored with class ConfluenceUserImpl."""
        return self.index.ids(FOLDER_USERIMPL, numeric=False)

    def get_groups(self) -> List[int]:
        return self.index.ids(FOLDER_GROUP)

    def get_group_properties(self, group_id: Optional[int]) -> Optional[ConfluenceProperties]:
        return self.index.load(FOLDER_GROUP, group_id)

    # Other objects

    def get_object_properties(self, object_id: Optional[int]) -> Optional[ConfluenceProperties]:
        """Properties of an object stored without a dedicated namespace (labels, comments...)."""
        return self.index.load(FOLDER_OBJECTS, object_id)
