"""Entity kinds and property key names of a Confluence XML export.

The export identifies every object by a ``class`` attribute. EntityKind is
the closed set of classes the index models, with OTHER as the fallback for
any other object that carries an id.
"""

from enum import Enum
from typing import Optional

# Main package files, relative to the package root
FILE_ENTITIES = "entities.xml"
FILE_DESCRIPTOR = "exportDescriptor.properties"

# Date format of the export (2012-03-07 17:16:48.158), always UTC
DATE_FORMAT = "%Y-%m-%d %H:%M:%S.%f"

# Space
KEY_SPACE_NAME = "name"
KEY_SPACE_KEY = "key"
KEY_SPACE_DESCRIPTION = "description"
KEY_SPACE_HOMEPAGE = "homePage"

# Page
KEY_PAGE_HOMEPAGE = "homepage"
KEY_PAGE_PARENT = "parent"
KEY_PAGE_SPACE = "space"
KEY_PAGE_TITLE = "title"
KEY_PAGE_CONTENTS = "bodyContents"
KEY_PAGE_CREATION_AUTHOR = "creatorName"
KEY_PAGE_CREATION_AUTHOR_KEY = "creator"
KEY_PAGE_CREATION_DATE = "creationDate"
KEY_PAGE_REVISION = "version"
KEY_PAGE_REVISION_AUTHOR_KEY = "lastModifier"
KEY_PAGE_REVISION_AUTHOR = "lastModifierName"
KEY_PAGE_REVISION_DATE = "lastModificationDate"
KEY_PAGE_REVISION_COMMENT = "versionComment"
KEY_PAGE_REVISIONS = "historicalVersions"
KEY_PAGE_ORIGINAL_VERSION = "originalVersion"
KEY_PAGE_CONTENT_STATUS = "contentStatus"
KEY_PAGE_BODY = "body"
KEY_PAGE_BODY_TYPE = "bodyType"
KEY_PAGE_LABELLINGS = "labellings"
KEY_PAGE_COMMENTS = "comments"
KEY_PAGE_ATTACHMENTS = "attachments"

# BodyContent
KEY_BODY_CONTENT = "content"

# Attachment; the short names are the legacy spellings
KEY_ATTACHMENT_NAME = "fileName"
KEY_ATTACHMENT_TITLE = "title"
KEY_ATTACHMENT_CONTENT = "content"
KEY_ATTACHMENT_CONTAINERCONTENT = "containerContent"
KEY_ATTACHMENT_CONTENT_SIZE = "fileSize"
KEY_ATTACHMENT_CONTENTTYPE = "contentType"
KEY_ATTACHMENT_CONTENTPROPERTIES = "contentProperties"
KEY_ATTACHMENT_CONTENTSTATUS = "contentStatus"
KEY_ATTACHMENT_CONTENT_MINOR_EDIT = "MINOR_EDIT"
KEY_ATTACHMENT_CONTENT_FILESIZE = "FILESIZE"
KEY_ATTACHMENT_CONTENT_MEDIA_TYPE = "MEDIA_TYPE"
KEY_ATTACHMENT_CREATION_AUTHOR = "creatorName"
KEY_ATTACHMENT_CREATION_AUTHOR_KEY = "creator"
KEY_ATTACHMENT_CREATION_DATE = "creationDate"
KEY_ATTACHMENT_REVISION_AUTHOR = "lastModifierName"
KEY_ATTACHMENT_REVISION_AUTHOR_KEY = "lastModifier"
KEY_ATTACHMENT_REVISION_DATE = "lastModificationDate"
KEY_ATTACHMENT_REVISION_COMMENT = "comment"
KEY_ATTACHMENT_ATTACHMENTVERSION = "attachmentVersion"
KEY_ATTACHMENT_HISTORICALVERSIONS = "historicalVersions"
KEY_ATTACHMENT_VERSION = "version"
KEY_ATTACHMENT_ORIGINALVERSION = "originalVersion"
KEY_ATTACHMENT_ORIGINALVERSIONID = "originalVersionId"
KEY_ATTACHMENT_DTO = "imageDetailsDTO"

# Labels
KEY_LABEL_NAME = "name"
KEY_LABELLING_LABEL = "label"

# ContentProperty
KEY_CONTENT_PROPERTY_NAME = "name"
KEY_CONTENT_PROPERTY_LONG = "longValue"
KEY_CONTENT_PROPERTY_DATE = "dateValue"
KEY_CONTENT_PROPERTY_STRING = "stringValue"

# SpacePermission
KEY_PERMISSION_SPACE = "space"
KEY_PERMISSION_TYPE = "type"

# Group
KEY_GROUP_NAME = "name"
KEY_GROUP_ACTIVE = "active"
KEY_GROUP_LOCAL = "local"
KEY_GROUP_CREATION_DATE = "createdDate"
KEY_GROUP_REVISION_DATE = "updatedDate"
KEY_GROUP_DESCRIPTION = "description"
KEY_GROUP_MEMBERUSERS = "memberusers"
KEY_GROUP_MEMBERGROUPS = "membergroups"

# HibernateMembership
KEY_MEMBERSHIP_PARENT_GROUP = "parentGroup"
KEY_MEMBERSHIP_USER_MEMBER = "userMember"
KEY_MEMBERSHIP_GROUP_MEMBER = "groupMember"

# User
KEY_USER_NAME = "name"
KEY_USER_ACTIVE = "active"
KEY_USER_CREATION_DATE = "createdDate"
KEY_USER_REVISION_DATE = "updatedDate"
KEY_USER_FIRSTNAME = "firstName"
KEY_USER_LASTNAME = "lastName"
KEY_USER_DISPLAYNAME = "displayName"
KEY_USER_EMAIL = "emailAddress"
KEY_USER_PASSWORD = "credential"

# Id element names
ID_NAME_NUMERIC = "id"
ID_NAME_KEY = "key"

# Classes read as references when they appear as property values
REFERENCE_CLASSES = frozenset({
    "Page",
    "Space",
    "BodyContent",
    "Attachment",
    "SpaceDescription",
    "Labelling",
    "Label",
    "SpacePermission",
    "InternalGroup",
    "InternalUser",
    "Comment",
    "ContentProperty",
})
KEY_REFERENCE_CLASS = "ConfluenceUserImpl"

LIST_CLASSES = frozenset({"java.util.List", "java.util.Collection"})
SET_CLASS = "java.util.Set"


class EntityKind(Enum):
    """Object classes handled by the index.

    Each member's value is the ``class`` attribute used in entities.xml.
    OTHER stands for every class without a dedicated handler.
    """
    PAGE = "Page"
    SPACE = "Space"
    SPACE_DESCRIPTION = "SpaceDescription"
    SPACE_PERMISSION = "SpacePermission"
    BODY_CONTENT = "BodyContent"
    ATTACHMENT = "Attachment"
    INTERNAL_USER = "InternalUser"
    USER_IMPL = "ConfluenceUserImpl"
    INTERNAL_GROUP = "InternalGroup"
    MEMBERSHIP = "HibernateMembership"
    OTHER = "*"

    @classmethod
    def from_class(cls, class_name: Optional[str]) -> "EntityKind":
        """Map a ``class`` attribute to its kind, OTHER when unknown."""
        for kind in cls:
            if kind.value == class_name and kind is not cls.OTHER:
                return kind
        return cls.OTHER

    @property
    def id_name(self) -> str:
        """Name attribute of the primary id element for this kind."""
        if self is EntityKind.USER_IMPL:
            return ID_NAME_KEY
        return ID_NAME_NUMERIC

    @property
    def splits_lists(self) -> bool:
        """Whether string values of this kind may be split on the list delimiter.

        Body contents embed commas all the time, so they never are.
        """
        return self is not EntityKind.BODY_CONTENT
