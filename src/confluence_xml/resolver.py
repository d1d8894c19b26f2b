"""Cross-entity logic applied while the object stream is read.

RelationshipResolver receives every StreamObject in stream order and decides
where (and whether) it is stored in the EntityIndex:

- pages are listed under their space unless they are historical versions;
- spaces get a page list slot and are indexed by key;
- space descriptions are stored as home pages;
- body contents are merged into the page they belong to;
- attachments and space permissions are stored under their parent and
  dropped when the parent cannot be resolved;
- memberships are never stored, they are accumulated into their group.
"""

import logging
from typing import Callable, Dict, List, Optional

from .models import (
    KEY_ATTACHMENT_CONTAINERCONTENT,
    KEY_ATTACHMENT_CONTENT,
    KEY_BODY_CONTENT,
    KEY_GROUP_MEMBERGROUPS,
    KEY_GROUP_MEMBERUSERS,
    KEY_MEMBERSHIP_GROUP_MEMBER,
    KEY_MEMBERSHIP_PARENT_GROUP,
    KEY_MEMBERSHIP_USER_MEMBER,
    KEY_PAGE_HOMEPAGE,
    KEY_PAGE_ORIGINAL_VERSION,
    KEY_PAGE_SPACE,
    KEY_PERMISSION_SPACE,
    KEY_SPACE_KEY,
    EntityKind,
)
from .properties import ConfluenceProperties
from .reader import StreamObject
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


def get_long(properties: ConfluenceProperties, key: str, default: Optional[int] = None) -> Optional[int]:
    """Read an integer property, returning default when it is absent or malformed."""
    try:
        return properties.get_long(key, default)
    except ValueError:
        logger.warning(f"Property '{key}' is not a number: {properties.get(key)!r}")
        return default


def get_long_list(
    properties: ConfluenceProperties,
    key: str,
    default: Optional[List[int]] = None,
) -> Optional[List[int]]:
    """Read a list property as integers, skipping elements that are not numbers."""
    elements = properties.get_list(key)
    if elements is None:
        return default

    values = []
    for element in elements:
        try:
            values.append(int(element))
        except (TypeError, ValueError):
            logger.warning(f"Ignoring non numeric element {element!r} in property '{key}'")
    return values


class RelationshipResolver:
    """Stores stream objects in an EntityIndex and links them together.

    Attributes:
        index: Target entity index
        pages: Space id to ordered list of current page ids. Pages without a
            space are kept under the None key.
        spaces_by_key: Space key to space id

    Example:
        >>> resolver = RelationshipResolver(EntityIndex("/tmp/tree"))
        >>> for stream_object in ObjectStreamReader("entities.xml").read():
        ...     resolver.handle(stream_object)
        >>> resolver.pages[1]
        [10]
    """

    def __init__(self, index: EntityIndex):
        self.index = index
        self.pages: Dict[Optional[int], List[int]] = {}
        self.spaces_by_key: Dict[str, int] = {}

        self._handlers: Dict[EntityKind, Callable[[StreamObject], None]] = {
            EntityKind.PAGE: self._handle_page,
            EntityKind.SPACE: self._handle_space,
            EntityKind.SPACE_DESCRIPTION: self._handle_space_description,
            EntityKind.SPACE_PERMISSION: self._handle_space_permission,
            EntityKind.BODY_CONTENT: self._handle_body_content,
            EntityKind.ATTACHMENT: self._handle_attachment,
            EntityKind.INTERNAL_USER: self._handle_internal_user,
            EntityKind.USER_IMPL: self._handle_user_impl,
            EntityKind.INTERNAL_GROUP: self._handle_group,
            EntityKind.MEMBERSHIP: self._handle_membership,
            EntityKind.OTHER: self._handle_other,
        }

    def handle(self, stream_object: StreamObject) -> None:
        """Dispatch one stream object to the handler of its kind."""
        self._handlers[stream_object.kind](stream_object)

    def _handle_page(self, stream_object: StreamObject) -> None:
        page_id = stream_object.identifier
        if page_id is None:
            logger.debug("Dropping page without id")
            return

        properties = stream_object.properties
        self.index.save(FOLDER_PAGES, page_id, properties)

        # Historical versions are reached through their current page
        if KEY_PAGE_ORIGINAL_VERSION not in properties:
            space_id = get_long(properties, KEY_PAGE_SPACE)
            space_pages = self.pages.setdefault(space_id, [])
            if page_id not in space_pages:
                space_pages.append(page_id)

    def _handle_space(self, stream_object: StreamObject) -> None:
        space_id = stream_object.identifier
        if space_id is None:
            logger.debug("Dropping space without id")
            return

        properties = stream_object.properties
        self.index.save(FOLDER_SPACES, space_id, properties)

        self.pages.setdefault(space_id, [])

        space_key = properties.get_string(KEY_SPACE_KEY)
        if space_key is not None:
            self.spaces_by_key[space_key] = space_id

    def _handle_space_description(self, stream_object: StreamObject) -> None:
        description_id = stream_object.identifier
        if description_id is None:
            logger.debug("Dropping space description without id")
            return

        stream_object.properties.set(KEY_PAGE_HOMEPAGE, True)
        self.index.save(FOLDER_PAGES, description_id, stream_object.properties)

    def _handle_space_permission(self, stream_object: StreamObject) -> None:
        space_id = get_long(stream_object.properties, KEY_PERMISSION_SPACE)
        if space_id is None or stream_object.identifier is None:
            logger.debug(f"Dropping space permission {stream_object.identifier} without space")
            return

        self.index.save(permissions_namespace(space_id), stream_object.identifier, stream_object.properties)

    def _handle_body_content(self, stream_object: StreamObject) -> None:
        page_id = get_long(stream_object.properties, KEY_BODY_CONTENT)
        if page_id is None:
            logger.debug(f"Dropping body content {stream_object.identifier} without content")
            return

        self.index.save(FOLDER_PAGES, page_id, stream_object.properties)

    def _handle_attachment(self, stream_object: StreamObject) -> None:
        properties = stream_object.properties

        page_id = get_long(properties, KEY_ATTACHMENT_CONTAINERCONTENT)
        if page_id is None:
            page_id = get_long(properties, KEY_ATTACHMENT_CONTENT)

        # Unreachable without a page
        if page_id is None or stream_object.identifier is None:
            logger.debug(f"Dropping attachment {stream_object.identifier} without page")
            return

        self.index.save(attachments_namespace(page_id), stream_object.identifier, properties)

    def _handle_internal_user(self, stream_object: StreamObject) -> None:
        self._save_identified(FOLDER_INTERNALUSER, stream_object)

    def _handle_user_impl(self, stream_object: StreamObject) -> None:
        self._save_identified(FOLDER_USERIMPL, stream_object)

    def _handle_group(self, stream_object: StreamObject) -> None:
        self._save_identified(FOLDER_GROUP, stream_object)

    def _handle_other(self, stream_object: StreamObject) -> None:
        self._save_identified(FOLDER_OBJECTS, stream_object)

    def _save_identified(self, namespace: str, stream_object: StreamObject) -> None:
        if stream_object.identifier is None:
            logger.debug(f"Dropping {stream_object.class_name} object without id")
            return

        self.index.save(namespace, stream_object.identifier, stream_object.properties)

    def _handle_membership(self, stream_object: StreamObject) -> None:
        properties = stream_object.properties

        parent_group = get_long(properties, KEY_MEMBERSHIP_PARENT_GROUP)
        if parent_group is None:
            logger.debug(f"Dropping membership {stream_object.identifier} without parent group")
            return

        user_member = get_long(properties, KEY_MEMBERSHIP_USER_MEMBER)
        group_member = get_long(properties, KEY_MEMBERSHIP_GROUP_MEMBER)

        self.index.upsert(
            FOLDER_GROUP,
            parent_group,
            lambda group: add_group_members(group, user_member, group_member),
        )


def add_group_members(
    group: ConfluenceProperties,
    user_member: Optional[int] = None,
    group_member: Optional[int] = None,
) -> None:
    """Append members to the member lists of a group bag."""
    if user_member is not None:
        users = get_long_list(group, KEY_GROUP_MEMBERUSERS, [])
        users.append(user_member)
        group.set(KEY_GROUP_MEMBERUSERS, users)

    if group_member is not None:
        groups = get_long_list(group, KEY_GROUP_MEMBERGROUPS, [])
        groups.append(group_member)
        group.set(KEY_GROUP_MEMBERGROUPS, groups)
