"""Source resolution: plain files and ``container//internal`` archive locators.

Relative paths resolve against the directory of the config file that
referenced them. Archive entries are read through an ``ArchiveReader``; the
bundled reader handles zip containers.
"""

from __future__ import annotations

import logging
import zipfile
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from swfpatcher.exceptions import ArchiveError, PatchIOError, SourceError

logger = logging.getLogger(__name__)

LOCATOR_SEPARATOR = "//"


def is_archive_locator(path: str) -> bool:
    return LOCATOR_SEPARATOR in path


@dataclass(frozen=True)
class ArchiveLocator:
    container: str
    internal: str

    @classmethod
    def parse(cls, locator: str) -> ArchiveLocator:
        if not is_archive_locator(locator):
            raise ArchiveError(f"Not an archive locator: {locator!r}")
        container, internal = locator.split(LOCATOR_SEPARATOR, 1)
        if not container or not internal:
            raise ArchiveError(f"Incomplete archive locator: {locator!r}")
        return cls(container=container, internal=internal)

    def __str__(self) -> str:
        return f"{self.container}{LOCATOR_SEPARATOR}{self.internal}"


class ArchiveReader(Protocol):
    def read(self, container: Path, internal: str) -> bytes: ...


class ZipArchiveReader:
    """Reads entries from zip containers. Entry names match case-insensitively as a fallback."""

    def read(self, container: Path, internal: str) -> bytes:
        name = internal.replace("\\", "/").lstrip("/")
        try:
            with zipfile.ZipFile(container) as zf:
                try:
                    return zf.read(name)
                except KeyError:
                    pass
                lowered = name.lower()
                for entry in zf.namelist():
                    if entry.lower() == lowered:
                        return zf.read(entry)
        except zipfile.BadZipFile as e:
            raise ArchiveError(f"Not a readable archive: {container} ({e})") from e
        except OSError as e:
            raise PatchIOError(str(container), f"Failed to open archive ({e})") from e
        raise ArchiveError(f"Entry {internal!r} not found in {container}")


class SourceResolver:
    """Resolves config-relative paths and locators to bytes or text."""

    def __init__(self, base_dir: Path | str = ".", archive_reader: ArchiveReader | None = None) -> None:
        self.base_dir = Path(base_dir)
        self.archive_reader = archive_reader or ZipArchiveReader()

    def resolve_path(self, path: str | Path) -> Path:
        p = Path(path)
        return p if p.is_absolute() else self.base_dir / p

    def read_bytes(self, source: str) -> bytes:
        if is_archive_locator(source):
            locator = ArchiveLocator.parse(source)
            container = self.resolve_path(locator.container)
            logger.debug("Reading %s from archive %s", locator.internal, container)
            return self.archive_reader.read(container, locator.internal)

        path = self.resolve_path(source)
        try:
            return path.read_bytes()
        except OSError as e:
            raise PatchIOError(str(path), f"Failed to read source ({e.strerror or e})") from e

    def read_text(self, source: str) -> str:
        data = self.read_bytes(source)
        try:
            return data.decode("utf-8-sig")
        except UnicodeDecodeError as e:
            raise SourceError(f"Source {source!r} is not valid UTF-8: {e}") from e
