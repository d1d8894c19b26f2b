"""Root pytest configuration for all tests.

This conftest applies to all test types (unit, integration).
"""

import logging

import pytest

from src.confluence_xml.config import PackageConfig
from src.confluence_xml.tree import EntityIndex

# Parsing logs every skipped object at DEBUG level, keep test output readable
logging.getLogger("src.confluence_xml").setLevel(logging.INFO)


@pytest.fixture
def package_config(tmp_path):
    """Configuration extracting and indexing below the test directory."""
    temp_dir = tmp_path / "temp"
    temp_dir.mkdir()
    return PackageConfig(temp_dir=str(temp_dir))


@pytest.fixture
def entity_index(tmp_path):
    """Empty entity index rooted in the test directory."""
    return EntityIndex(tmp_path / "tree")
