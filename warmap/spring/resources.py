"""
Resource resolution for Spring context locations.

Three reference forms are understood:
- "classpath:" / "classpath*:" prefixed: a file on the archive's classpath
- "file:" prefixed: a file on the local filesystem
- scheme-less: an entry of the archive, relative to its root
"""

from __future__ import annotations

import logging
import posixpath
import re
from pathlib import Path
from typing import List, Optional, Tuple

logger = logging.getLogger("warmap.spring.resources")

CLASSPATH_ALL_PREFIX = "classpath*:"
CLASSPATH_PREFIX = "classpath:"
FILE_PREFIX = "file:"

_LOCATION_SEPARATORS = re.compile(r"[,;\s]+")


def split_scheme(reference: str) -> Tuple[str, str]:
    """Split a reference into (scheme prefix, path)."""
    for prefix in (CLASSPATH_ALL_PREFIX, CLASSPATH_PREFIX, FILE_PREFIX):
        if reference.startswith(prefix):
            return prefix, reference[len(prefix):]
    return "", reference


class ResourceResolver:
    """
    Opens context resources against a web archive.

    Args:
        archive: The archive scheme-less and classpath references resolve in
    """

    def __init__(self, archive):
        self.archive = archive

    @staticmethod
    def decompose(locations: Optional[str]) -> List[str]:
        """Split a multi-location string on commas, semicolons and whitespace."""
        if not locations:
            return []
        return [part for part in _LOCATION_SEPARATORS.split(locations) if part]

    def open(self, reference: str, base_dir: str = "") -> Optional[bytes]:
        """
        Read the resource a reference names.

        Args:
            reference: Location, optionally scheme-prefixed
            base_dir: Directory scheme-less references resolve against

        Returns:
            The resource contents, or None when it does not exist
        """
        scheme, path = split_scheme(reference.strip())

        if scheme in (CLASSPATH_PREFIX, CLASSPATH_ALL_PREFIX):
            name = posixpath.normpath(path.lstrip("/"))
            if not self.archive.has_classpath_file(name):
                return None
            return self.archive.read_classpath_file(name)

        if scheme == FILE_PREFIX:
            local = Path(path)
            if not local.is_file():
                return None
            return local.read_bytes()

        if base_dir:
            path = posixpath.join(base_dir, path.lstrip("/"))
        return self.archive.read_entry(posixpath.normpath("/" + path.lstrip("/")))

    def rebase(self, reference: str, resource: str) -> str:
        """
        Reference of an imported resource, relative to the importing document.

        Imports carrying their own scheme are taken as they are. A leading '/'
        on a scheme-less import is ignored: imports always resolve against the
        importing document's directory.
        """
        resource = resource.strip()
        scheme, path = split_scheme(resource)
        if scheme:
            return resource

        if path.startswith("/"):
            logger.warning(f"Import '{resource}' in {reference} is absolute; resolving it relative to {reference}")
            path = path.lstrip("/")

        base_scheme, base_path = split_scheme(reference)
        directory = base_path[:base_path.rfind("/") + 1]
        combined = posixpath.normpath(directory + path) if directory + path else path
        if directory.startswith("/") and not combined.startswith("/"):
            combined = "/" + combined
        return base_scheme + combined
