"""Materializes a package source as a working directory.

A package source is a directory holding an unpacked export, a zip file, a
``file:`` URL pointing at either, or an open binary stream of a zip file.
Zip content is extracted into a private temporary directory which the
caller must remove once done (WorkingDirectory.temporary tells whether it
has to).
"""

import logging
import os
import shutil
import tempfile
import zipfile
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO, Union
from urllib.parse import urlparse
from urllib.request import url2pathname

from .errors import PackageSourceError

logger = logging.getLogger(__name__)

PackageSource = Union[str, os.PathLike, BinaryIO]

TEMP_PREFIX = "confluencexml"


@dataclass
class WorkingDirectory:
    """Directory holding the raw export tree.

    Attributes:
        path: Root of the export (contains entities.xml)
        temporary: True when the directory was created by the extraction
    """
    path: Path
    temporary: bool


def materialize(source: PackageSource, temp_dir: str) -> WorkingDirectory:
    """Resolve a package source to a working directory.

    Args:
        source: Directory, zip file path, file URL or binary zip stream
        temp_dir: Parent of the extraction directory

    Returns:
        The working directory

    Raises:
        PackageSourceError: If the source is unsupported, missing or not a
            valid zip archive
    """
    if hasattr(source, "read"):
        return _from_stream(source, temp_dir, "<stream>")

    path = _to_path(source)

    if path.is_dir():
        logger.debug(f"Reading package directory {path}")
        return WorkingDirectory(path=path, temporary=False)

    try:
        stream = open(path, "rb")
    except OSError as e:
        raise PackageSourceError(str(path), str(e))

    with stream:
        return _from_stream(stream, temp_dir, str(path))


def _to_path(source: Union[str, os.PathLike]) -> Path:
    if isinstance(source, str) and ("://" in source or source.startswith("file:")):
        parsed = urlparse(source)
        if parsed.scheme != "file":
            raise PackageSourceError(str(source), f"Unsupported URL scheme '{parsed.scheme}'")
        return Path(url2pathname(parsed.path))

    return Path(source)


def _from_stream(stream: BinaryIO, temp_dir: str, source_name: str) -> WorkingDirectory:
    directory = Path(tempfile.mkdtemp(prefix=TEMP_PREFIX, dir=temp_dir))
    logger.debug(f"Extracting {source_name} to {directory}")

    try:
        extract_zip(stream, directory, source_name)
    except BaseException:
        shutil.rmtree(directory, ignore_errors=True)
        raise

    return WorkingDirectory(path=directory, temporary=True)


def extract_zip(stream: BinaryIO, directory: Path, source_name: str = "<stream>") -> int:
    """Extract every file entry of a zip stream below directory.

    Entry relative paths are preserved, directory entries are skipped.

    Returns:
        Number of extracted files

    Raises:
        PackageSourceError: If the stream is not a zip archive or an entry
            would be written outside directory
    """
    seekable = getattr(stream, "seekable", None)
    if seekable is None or not seekable():
        with tempfile.TemporaryFile() as spool:
            shutil.copyfileobj(stream, spool)
            spool.seek(0)
            return extract_zip(spool, directory, source_name)

    real_base = os.path.realpath(directory)
    count = 0

    try:
        with zipfile.ZipFile(stream) as archive:
            for entry in archive.infolist():
                if entry.is_dir():
                    continue

                target = os.path.realpath(os.path.join(real_base, entry.filename))
                if not target.startswith(real_base + os.sep):
                    raise PackageSourceError(
                        source_name,
                        f"Path traversal detected in archive entry '{entry.filename}'"
                    )

                os.makedirs(os.path.dirname(target), exist_ok=True)
                with archive.open(entry) as source, open(target, "wb") as destination:
                    shutil.copyfileobj(source, destination)
                count += 1
    except zipfile.BadZipFile as e:
        raise PackageSourceError(source_name, f"Not a valid zip archive: {e}")
    except OSError as e:
        raise PackageSourceError(source_name, f"Extraction failed: {e}")

    logger.info(f"Extracted {count} file(s) from {source_name}")
    return count
