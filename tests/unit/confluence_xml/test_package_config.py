"""Unit tests for confluence_xml.config module."""

import tempfile

import pytest

from src.confluence_xml.config import ConfigLoader, PackageConfig
from src.confluence_xml.errors import ConfigError, PackageSourceError


class TestPackageConfig:
    """Test cases for PackageConfig defaults."""

    def test_defaults(self):
        config = PackageConfig()

        assert config.temporary_directory == tempfile.gettempdir()
        assert config.delimiter == ","

    def test_empty_delimiter_disables_splitting(self):
        config = PackageConfig(list_delimiter="")

        assert config.delimiter is None


class TestConfigLoaderLoad:
    """Test cases for ConfigLoader.load() method."""

    def test_load_valid_config(self, tmp_path):
        """Load configuration with all fields specified."""
        config_file = tmp_path / "confluence-xml.yaml"
        config_file.write_text(f"temp_dir: {tmp_path}\nlist_delimiter: ';'\n")

        result = ConfigLoader.load(str(config_file))

        assert result.temp_dir == str(tmp_path)
        assert result.list_delimiter == ";"

    def test_load_empty_file_gives_defaults(self, tmp_path):
        config_file = tmp_path / "confluence-xml.yaml"
        config_file.write_text("")

        assert ConfigLoader.load(str(config_file)) == PackageConfig()

    def test_load_missing_file_raises(self, tmp_path):
        with pytest.raises(PackageSourceError) as exc_info:
            ConfigLoader.load(str(tmp_path / "missing.yaml"))

        assert "Configuration file not found" in str(exc_info.value)

    def test_load_invalid_yaml_raises(self, tmp_path):
        config_file = tmp_path / "confluence-xml.yaml"
        config_file.write_text("temp_dir: [unclosed\n")

        with pytest.raises(ConfigError) as exc_info:
            ConfigLoader.load(str(config_file))

        assert "Invalid YAML syntax" in str(exc_info.value)

    def test_load_non_dictionary_raises(self, tmp_path):
        config_file = tmp_path / "confluence-xml.yaml"
        config_file.write_text("- temp_dir\n")

        with pytest.raises(ConfigError) as exc_info:
            ConfigLoader.load(str(config_file))

        assert "must be a YAML dictionary, got list" in str(exc_info.value)

    def test_unknown_fields_raise(self, tmp_path):
        config_file = tmp_path / "confluence-xml.yaml"
        config_file.write_text("page_limit: 10\n")

        with pytest.raises(ConfigError) as exc_info:
            ConfigLoader.load(str(config_file))

        assert "Unknown fields: page_limit" in str(exc_info.value)

    def test_missing_temp_dir_raises(self, tmp_path):
        config_file = tmp_path / "confluence-xml.yaml"
        config_file.write_text(f"temp_dir: {tmp_path / 'missing'}\n")

        with pytest.raises(ConfigError) as exc_info:
            ConfigLoader.load(str(config_file))

        assert exc_info.value.config_field == "temp_dir"

    def test_long_delimiter_raises(self, tmp_path):
        config_file = tmp_path / "confluence-xml.yaml"
        config_file.write_text("list_delimiter: ';;'\n")

        with pytest.raises(ConfigError) as exc_info:
            ConfigLoader.load(str(config_file))

        assert exc_info.value.config_field == "list_delimiter"

    def test_null_delimiter_disables_splitting(self, tmp_path):
        config_file = tmp_path / "confluence-xml.yaml"
        config_file.write_text("list_delimiter: null\n")

        result = ConfigLoader.load(str(config_file))

        assert result.delimiter is None


class TestConfigLoaderFromEnv:
    """Test cases for ConfigLoader.from_env() method."""

    def test_from_env_reads_variables(self, tmp_path, monkeypatch, mocker):
        """CONFLUENCE_XML_* variables override the defaults."""
        mocker.patch("src.confluence_xml.config.load_dotenv")
        monkeypatch.setenv("CONFLUENCE_XML_TEMP_DIR", str(tmp_path))
        monkeypatch.setenv("CONFLUENCE_XML_LIST_DELIMITER", "|")

        result = ConfigLoader.from_env()

        assert result.temp_dir == str(tmp_path)
        assert result.list_delimiter == "|"

    def test_from_env_without_variables(self, monkeypatch, mocker):
        mocker.patch("src.confluence_xml.config.load_dotenv")
        monkeypatch.delenv("CONFLUENCE_XML_TEMP_DIR", raising=False)
        monkeypatch.delenv("CONFLUENCE_XML_LIST_DELIMITER", raising=False)

        assert ConfigLoader.from_env() == PackageConfig()

    def test_from_env_loads_dotenv(self, monkeypatch, mocker):
        """The .env file is loaded before reading variables."""
        load_dotenv = mocker.patch("src.confluence_xml.config.load_dotenv")
        monkeypatch.delenv("CONFLUENCE_XML_TEMP_DIR", raising=False)
        monkeypatch.delenv("CONFLUENCE_XML_LIST_DELIMITER", raising=False)

        ConfigLoader.from_env()

        load_dotenv.assert_called_once_with()
