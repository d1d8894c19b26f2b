"""Unit tests for confluence_xml.reader module."""

import pytest

from src.confluence_xml.errors import MalformedStreamError, PackageSourceError
from src.confluence_xml.models import EntityKind
from src.confluence_xml.properties import ValueKind
from src.confluence_xml.reader import ObjectStreamReader, fix_cdata
from tests.fixtures.sample_packages import (
    SAMPLE_BROKEN_CDATA_BODY,
    SAMPLE_REPAIRED_CDATA_BODY,
    body_content_object,
    collection,
    entities_xml,
    obj,
    page_object,
    prop,
    ref,
    user_impl_object,
    user_ref,
)


def read_objects(tmp_path, objects, list_delimiter=","):
    entities_file = tmp_path / "entities.xml"
    entities_file.write_text(entities_xml(objects), encoding="utf-8")
    return list(ObjectStreamReader(entities_file, list_delimiter).read())


class TestFixCdata:
    """Test cases for fix_cdata()."""

    def test_removes_space_after_cdata_end(self):
        """The space Confluence inserts after an inner "]]" is removed."""
        assert fix_cdata(SAMPLE_BROKEN_CDATA_BODY) == SAMPLE_REPAIRED_CDATA_BODY

    def test_removes_every_trailing_space(self):
        """Several spaces after "]]" are all removed."""
        assert fix_cdata("a]]   b") == "a]]b"

    def test_is_idempotent(self):
        """Repairing twice gives the same result as repairing once."""
        for text in (SAMPLE_BROKEN_CDATA_BODY, "a]] ]] b", "]]  ", "plain", ""):
            once = fix_cdata(text)
            assert fix_cdata(once) == once

    def test_text_without_marker_is_unchanged(self):
        """Text without "]]" followed by a space is left alone."""
        assert fix_cdata("[[y]]\n] ]") == "[[y]]\n] ]"

    def test_none_passes_through(self):
        assert fix_cdata(None) is None


class TestObjectStreamReader:
    """Test cases for ObjectStreamReader.read()."""

    def test_reads_objects_in_stream_order(self, tmp_path):
        """Objects are yielded once each, in document order."""
        objects = read_objects(tmp_path, [
            obj("Space", 1, prop("key", "TS")),
            page_object(10, "Home", 1),
            obj("Label", 50, prop("name", "tag")),
        ])

        assert [o.kind for o in objects] == [EntityKind.SPACE, EntityKind.PAGE, EntityKind.OTHER]
        assert [o.identifier for o in objects] == [1, 10, 50]
        assert objects[2].class_name == "Label"

    def test_primary_id_is_stored_as_property(self, tmp_path):
        """The primary id is available both as identifier and as "id"."""
        [page] = read_objects(tmp_path, [page_object(10, "Home", 1)])

        assert page.properties.get_long("id") == 10

    def test_reference_property_is_read_as_long(self, tmp_path):
        """References keep only the id of the referenced object."""
        [page] = read_objects(tmp_path, [page_object(10, "Home", 1, None, ref("parent", "Page", 9))])

        assert page.properties.get_value("space").kind is ValueKind.LONG
        assert page.properties.get_long("space") == 1
        assert page.properties.get_long("parent") == 9

    def test_user_key_reference_is_read_as_string(self, tmp_path):
        """ConfluenceUserImpl references keep their key."""
        [page] = read_objects(tmp_path, [obj("Page", 10, user_ref("creator", "ff80abc"))])

        assert page.properties.get_value("creator").kind is ValueKind.STRING
        assert page.properties.get_string("creator") == "ff80abc"

    def test_user_impl_identified_by_key(self, tmp_path):
        """ConfluenceUserImpl objects are identified by their key element."""
        [user] = read_objects(tmp_path, [user_impl_object("ff80abc", "admin")])

        assert user.kind is EntityKind.USER_IMPL
        assert user.identifier == "ff80abc"

    def test_collection_is_read_as_list(self, tmp_path):
        """Collections hold the ids of their elements in order."""
        [page] = read_objects(tmp_path, [
            obj("Page", 10, collection("bodyContents", [("BodyContent", 31), ("BodyContent", 30)])),
        ])

        assert page.properties.get_value("bodyContents").kind is ValueKind.LIST
        assert page.properties.get_list("bodyContents") == [31, 30]

    def test_set_collection_is_read_as_set(self, tmp_path):
        """Collections of class java.util.Set become sets."""
        [page] = read_objects(tmp_path, [
            obj("Page", 10, collection("labellings", [("Labelling", 1), ("Labelling", 1)], "java.util.Set")),
        ])

        assert page.properties.get_value("labellings").kind is ValueKind.SET
        assert page.properties.get_list("labellings") == [1]

    def test_text_is_cdata_repaired(self, tmp_path):
        """Property text has its CDATA damage undone."""
        [body] = read_objects(tmp_path, [body_content_object(30, 10, SAMPLE_BROKEN_CDATA_BODY)])

        assert body.properties.get_string("body") == SAMPLE_REPAIRED_CDATA_BODY

    def test_body_content_never_splits_lists(self, tmp_path):
        """Body text containing the delimiter is not split into a list."""
        [body] = read_objects(tmp_path, [body_content_object(30, 10, "a,b")])

        assert body.properties.get_list("body") == ["a,b"]

    def test_other_objects_split_lists(self, tmp_path):
        """Other kinds split string values on the configured delimiter."""
        [page] = read_objects(tmp_path, [obj("Page", 10, prop("labels", "a;b"))], list_delimiter=";")

        assert page.properties.get_list("labels") == ["a", "b"]

    def test_unknown_property_class_is_skipped(self, tmp_path):
        """Values of unsupported classes are not stored."""
        [page] = read_objects(tmp_path, [
            obj("Page", 10, '<property name="details" class="ImageDetails"><id name="id">1</id></property>'),
        ])

        assert "details" not in page.properties

    def test_nested_property_without_class_is_skipped(self, tmp_path):
        """A property with child elements but no class is not understood."""
        [page] = read_objects(tmp_path, [
            obj("Page", 10, '<property name="weird"><child>1</child></property>', prop("title", "Home")),
        ])

        assert "weird" not in page.properties
        assert page.properties.get_string("title") == "Home"

    def test_object_without_class_is_skipped(self, tmp_path):
        """Objects without class attribute are not yielded."""
        objects = read_objects(tmp_path, [obj(None, 1), page_object(10, "Home")])

        assert [o.identifier for o in objects] == [10]

    def test_object_without_id_has_none_identifier(self, tmp_path):
        """Objects may lack an id element."""
        [page] = read_objects(tmp_path, [obj("Page", None, prop("title", "Home"))])

        assert page.identifier is None

    def test_invalid_numeric_id_logs_warning(self, tmp_path, caplog):
        """A primary id that is not a number is logged and left unset."""
        [page] = read_objects(tmp_path, [obj("Page", "abc", prop("title", "Home"))])

        assert page.identifier is None
        assert "Invalid object id 'abc'" in caplog.text

    def test_secondary_id_element_is_ignored(self, tmp_path):
        """Only the id element named after the kind's id is read."""
        [page] = read_objects(tmp_path, [
            obj("Page", 10, '<id name="other">99</id>'),
        ])

        assert page.identifier == 10
        assert page.properties.get_long("id") == 10

    def test_reference_without_id_raises(self, tmp_path):
        """A reference whose first child is not an id element is fatal."""
        with pytest.raises(MalformedStreamError) as exc_info:
            read_objects(tmp_path, [
                obj("Page", 10, '<property name="space" class="Space"><name>TS</name></property>'),
            ])

        assert "Was expecting id element but found [name]" in str(exc_info.value)

    def test_empty_reference_raises(self, tmp_path):
        """A reference with no child at all is fatal."""
        with pytest.raises(MalformedStreamError):
            read_objects(tmp_path, [obj("Page", 10, '<property name="space" class="Space"></property>')])

    def test_invalid_xml_raises(self, tmp_path):
        """XML syntax errors surface as MalformedStreamError."""
        entities_file = tmp_path / "entities.xml"
        entities_file.write_text('<hibernate-generic><object class="Page"><id name="id">1</id>')

        with pytest.raises(MalformedStreamError) as exc_info:
            list(ObjectStreamReader(entities_file).read())

        assert exc_info.value.file_path == str(entities_file)

    def test_missing_file_raises(self, tmp_path):
        """A missing stream file is a package source error."""
        with pytest.raises(PackageSourceError):
            list(ObjectStreamReader(tmp_path / "entities.xml").read())

    def test_objects_are_released_after_reading(self, tmp_path, mocker):
        """Each object element is cleared once it has been yielded."""
        # Arrange
        entities_file = tmp_path / "entities.xml"
        entities_file.write_text(entities_xml([page_object(i, f"Page {i}") for i in range(1, 4)]))
        reader = ObjectStreamReader(entities_file)
        read_object = mocker.spy(reader, "_read_object")

        # Act
        for _ in reader.read():
            pass

        # Assert
        assert read_object.call_count == 3
        for call in read_object.call_args_list:
            element = call.args[0]
            assert len(element) == 0
