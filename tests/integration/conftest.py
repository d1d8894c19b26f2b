"""Pytest configuration and fixtures for integration tests.

Provides sample packages written to the filesystem, unpacked and zipped,
for tests reading them end to end through ConfluenceXMLPackage.
"""

from pathlib import Path

import pytest

from tests.fixtures.sample_packages import (
    get_sample_space_objects,
    write_attachment_file,
    write_package,
    zip_package,
)


@pytest.fixture
def sample_package_dir(tmp_path) -> Path:
    """Unpacked sample space export with one attachment binary.

    Returns:
        Path of the package directory
    """
    package_dir = write_package(tmp_path / "export", get_sample_space_objects())
    write_attachment_file(package_dir, 10, 5, 1, b"\x89PNG sample")
    return package_dir


@pytest.fixture
def sample_package_zip(tmp_path, sample_package_dir) -> Path:
    """Sample space export zipped like a Confluence backup.

    Returns:
        Path of the zip file
    """
    return zip_package(sample_package_dir, tmp_path / "Confluence-space-export-TS.xml.zip")
