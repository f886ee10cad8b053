"""File existence checks and reading and writing single members of zip archives."""

from __future__ import annotations

import os
import zipfile

PathLike = str | os.PathLike


def file_exists(path: PathLike) -> bool:
    """True when ``path`` can be opened for reading."""
    try:
        with open(path, "rb"):
            return True
    except OSError:
        return False


def read_from_zip(zip_path: PathLike, member: str) -> bytes:
    """Return the contents of ``member`` inside the archive at ``zip_path``."""
    try:
        archive = zipfile.ZipFile(zip_path)
    except (OSError, zipfile.BadZipFile) as error:
        raise RuntimeError("Cannot open zip file.") from error
    with archive:
        try:
            return archive.read(member)
        except (KeyError, zipfile.BadZipFile) as error:
            raise RuntimeError("Cannot open file in zip.") from error


def write_into_zip(zip_path: PathLike, member: str, content: bytes | str) -> bool:
    """Add ``member`` to the archive, creating the archive if needed.

    A member that already exists is left untouched; returns whether it was added.
    """
    data = content.encode("utf-8") if isinstance(content, str) else bytes(content)
    try:
        archive = zipfile.ZipFile(zip_path, "a", compression=zipfile.ZIP_DEFLATED)
    except (OSError, zipfile.BadZipFile) as error:
        raise RuntimeError("Cannot open zip file.") from error
    with archive:
        if member in archive.namelist():
            return False
        archive.writestr(member, data)
    return True