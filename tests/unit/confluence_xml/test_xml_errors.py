"""Unit tests for confluence_xml.errors module."""

import pytest

from src.confluence_xml.errors import (
    AttachmentNotFoundError,
    ConfigError,
    ConfluenceXMLError,
    DateParseError,
    MalformedStreamError,
    PackageSourceError,
    PropertiesError,
)


class TestConfluenceXMLError:
    """Test cases for ConfluenceXMLError base exception."""

    def test_is_exception(self):
        """ConfluenceXMLError should inherit from Exception."""
        assert issubclass(ConfluenceXMLError, Exception)

    @pytest.mark.parametrize("error_class", [
        PackageSourceError,
        PropertiesError,
        MalformedStreamError,
        ConfigError,
        DateParseError,
        AttachmentNotFoundError,
    ])
    def test_subclasses_inherit_from_base(self, error_class):
        """Every package error can be caught as ConfluenceXMLError."""
        assert issubclass(error_class, ConfluenceXMLError)


class TestPackageSourceError:
    """Test cases for PackageSourceError."""

    def test_message_with_reason(self):
        error = PackageSourceError("/tmp/export.zip", "Not a valid zip archive")

        assert str(error) == "Failed to read Confluence package from /tmp/export.zip: Not a valid zip archive"
        assert error.source == "/tmp/export.zip"
        assert error.reason == "Not a valid zip archive"

    def test_message_without_reason(self):
        error = PackageSourceError("/tmp/export.zip")

        assert str(error) == "Failed to read Confluence package from /tmp/export.zip"


class TestPropertiesError:
    """Test cases for PropertiesError."""

    def test_stores_path_and_operation(self):
        error = PropertiesError("/tree/pages/10/properties", "save", "disk full")

        assert "Properties operation 'save' failed for /tree/pages/10/properties: disk full" == str(error)
        assert error.file_path == "/tree/pages/10/properties"
        assert error.operation == "save"


class TestMalformedStreamError:
    """Test cases for MalformedStreamError."""

    def test_message_with_file(self):
        error = MalformedStreamError("unexpected end", "/export/entities.xml")

        assert str(error) == "Malformed entity stream /export/entities.xml: unexpected end"
        assert error.original_message == "unexpected end"

    def test_message_without_file(self):
        assert str(MalformedStreamError("unexpected end")) == "Malformed entity stream: unexpected end"


class TestConfigError:
    """Test cases for ConfigError."""

    def test_message_with_field(self):
        error = ConfigError("must be a single character", "list_delimiter")

        assert str(error) == "Configuration error in field 'list_delimiter': must be a single character"
        assert error.config_field == "list_delimiter"

    def test_message_without_field(self):
        assert str(ConfigError("bad")) == "Configuration error: bad"


class TestStandardErrorCompatibility:
    """Errors that also behave as builtin exceptions."""

    def test_date_parse_error_is_value_error(self):
        error = DateParseError("yesterday", "creationDate")

        assert isinstance(error, ValueError)
        assert str(error) == "Invalid date 'yesterday' in property 'creationDate'"

    def test_attachment_not_found_is_file_not_found(self):
        with pytest.raises(FileNotFoundError) as exc_info:
            raise AttachmentNotFoundError("/export/attachments/10/5/1")

        assert exc_info.value.file_path == "/export/attachments/10/5/1"
        assert "Attachment file not found" in str(exc_info.value)
