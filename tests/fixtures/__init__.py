"""Test fixtures for Confluence XML package tests.

This module provides test fixtures for:
- entities.xml object, property, reference and collection snippets
- Package directory and zip archive writers
- The sample space export used by integration tests
"""

from .sample_packages import (
    SAMPLE_BROKEN_CDATA_BODY,
    SAMPLE_DESCRIPTOR,
    SAMPLE_REPAIRED_CDATA_BODY,
    attachment_object,
    body_content_object,
    collection,
    entities_xml,
    get_sample_space_objects,
    group_object,
    internal_user_object,
    membership_object,
    obj,
    page_object,
    permission_object,
    prop,
    ref,
    space_object,
    user_impl_object,
    user_ref,
    write_attachment_file,
    write_package,
    zip_package,
)

__all__ = [
    "SAMPLE_BROKEN_CDATA_BODY",
    "SAMPLE_DESCRIPTOR",
    "SAMPLE_REPAIRED_CDATA_BODY",
    "attachment_object",
    "body_content_object",
    "collection",
    "entities_xml",
    "get_sample_space_objects",
    "group_object",
    "internal_user_object",
    "membership_object",
    "obj",
    "page_object",
    "permission_object",
    "prop",
    "ref",
    "space_object",
    "user_impl_object",
    "user_ref",
    "write_attachment_file",
    "write_package",
    "zip_package",
]
