"""
Web archive accessor.

Exposes the entries of a WAR file, its deployment descriptor and a classpath
view spanning WEB-INF/classes and the jars under WEB-INF/lib.

Entry paths handed out by this module start with '/', matching the way the
servlet container exposes them to clients.
"""

from __future__ import annotations

import io
import logging
import zipfile
from pathlib import Path
from typing import BinaryIO, Dict, List, Optional, Union

from ..faults import ArchiveFault, ClasspathConsistencyFault
from .descriptor import DeploymentDescriptor

logger = logging.getLogger("warmap.archive")

DESCRIPTOR_ENTRY = "WEB-INF/web.xml"
CLASSES_DIR = "WEB-INF/classes/"
LIB_DIR = "WEB-INF/lib/"
JAR_MANIFEST = "META-INF/MANIFEST.MF"
PRIVATE_DIRS = ("/WEB-INF/", "/META-INF/")


class WarArchive:
    """
    Read-only view of a packaged web application.

    Usage:
        ```python
        with WarArchive("app.war") as war:
            for mapping in war.descriptor.servlet_mappings():
                ...
        ```

    Args:
        path: Location of the WAR file

    Raises:
        ArchiveFault: The file is missing, not a zip archive, or has no
            readable WEB-INF/web.xml
    """

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)
        if not self.path.is_file():
            raise ArchiveFault("ARCHIVE_NOT_FOUND", f"No such file: {self.path}", path=str(self.path))

        try:
            self._zip = zipfile.ZipFile(self.path)
        except (zipfile.BadZipFile, OSError) as e:
            raise ArchiveFault("ARCHIVE_UNREADABLE", f"Not a readable archive: {self.path} ({e})", path=str(self.path)) from e

        self._jars: Dict[str, zipfile.ZipFile] = {}
        self._classpath: Optional[Dict[str, str]] = None

        try:
            self.descriptor = DeploymentDescriptor(self._read_descriptor(), source="/" + DESCRIPTOR_ENTRY)
        except Exception:
            self.close()
            raise

    def _read_descriptor(self) -> bytes:
        try:
            return self._zip.read(DESCRIPTOR_ENTRY)
        except KeyError:
            raise ArchiveFault(
                "DESCRIPTOR_MISSING",
                f"{self.path} has no {DESCRIPTOR_ENTRY}; not a web application archive",
                path=str(self.path),
            ) from None

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def close(self) -> None:
        """Release the archive and any opened nested jars."""
        for jar in self._jars.values():
            jar.close()
        self._jars.clear()
        self._zip.close()

    def __enter__(self) -> "WarArchive":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Entries
    # ------------------------------------------------------------------

    def list_all_entries(self) -> List[str]:
        """Every non-directory entry, as '/'-prefixed paths."""
        return ["/" + info.filename for info in self._zip.infolist() if not info.is_dir()]

    def public_files(self) -> List[str]:
        """Entries a client may request directly (outside WEB-INF and META-INF)."""
        return [p for p in self.list_all_entries() if not p.startswith(PRIVATE_DIRS)]

    def private_files(self) -> List[str]:
        return [p for p in self.list_all_entries() if p.startswith(PRIVATE_DIRS)]

    def open_entry(self, path: str) -> Optional[BinaryIO]:
        """Open an archive entry by path, or None if it does not exist."""
        data = self.read_entry(path)
        return None if data is None else io.BytesIO(data)

    def read_entry(self, path: str) -> Optional[bytes]:
        try:
            return self._zip.read(path.lstrip("/"))
        except KeyError:
            return None

    # ------------------------------------------------------------------
    # Classpath
    # ------------------------------------------------------------------

    def classpath_index(self) -> Dict[str, str]:
        """
        Map of classpath-relative file names to their containing location.

        The location is "" for WEB-INF/classes, else the jar's entry path.
        When two locations provide the same name the first one wins.
        """
        if self._classpath is None:
            self._classpath = self._build_classpath_index()
        return self._classpath

    def _build_classpath_index(self) -> Dict[str, str]:
        index: Dict[str, str] = {}

        for info in self._zip.infolist():
            if info.is_dir() or not info.filename.startswith(CLASSES_DIR):
                continue
            self._index_entry(index, info.filename[len(CLASSES_DIR):], "")

        for info in self._zip.infolist():
            name = info.filename
            if info.is_dir() or not name.startswith(LIB_DIR):
                continue
            if not name.lower().endswith((".jar", ".zip")):
                logger.warning(f"Ignoring non-archive library file /{name}")
                continue
            jar = self._open_jar(name)
            if jar is None:
                continue
            for jar_info in jar.infolist():
                if not jar_info.is_dir() and jar_info.filename != JAR_MANIFEST:
                    self._index_entry(index, jar_info.filename, name)

        logger.debug(f"Classpath index built: {len(index)} entries")
        return index

    @staticmethod
    def _index_entry(index: Dict[str, str], name: str, location: str) -> None:
        if name in index:
            logger.warning(
                f"Duplicate classpath entry {name} in {location or '/WEB-INF/classes'}; "
                f"keeping {index[name] or '/WEB-INF/classes'}"
            )
            return
        index[name] = location

    def _open_jar(self, location: str) -> Optional[zipfile.ZipFile]:
        jar = self._jars.get(location)
        if jar is not None:
            return jar
        try:
            jar = zipfile.ZipFile(io.BytesIO(self._zip.read(location)))
        except (zipfile.BadZipFile, KeyError, OSError) as e:
            logger.warning(f"Cannot read library /{location}: {e}")
            return None
        self._jars[location] = jar
        return jar

    def read_classpath_file(self, name: str) -> Optional[bytes]:
        """
        Read a classpath file by its classpath-relative name.

        Returns:
            The file contents, or None when the name is not on the classpath

        Raises:
            ClasspathConsistencyFault: The index names a location that does
                not hold the entry
        """
        location = self.classpath_index().get(name)
        if location is None:
            logger.warning(f"Classpath file not found: {name}")
            return None

        try:
            if location == "":
                return self._zip.read(CLASSES_DIR + name)
            jar = self._open_jar(location)
            if jar is None:
                raise KeyError(name)
            return jar.read(name)
        except KeyError:
            raise ClasspathConsistencyFault(name, location) from None

    def open_classpath_file(self, name: str) -> Optional[BinaryIO]:
        """Stream variant of read_classpath_file."""
        data = self.read_classpath_file(name)
        return None if data is None else io.BytesIO(data)

    def has_classpath_file(self, name: str) -> bool:
        return name in self.classpath_index()

    def __repr__(self) -> str:
        return f"WarArchive({str(self.path)!r})"
