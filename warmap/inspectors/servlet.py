"""
Servlet inspector - routes declared by the deployment descriptor and the
files a client can request directly.
"""

from __future__ import annotations

import logging

from ..archive import WarArchive
from ..routing import FileDestination, FileKind, RouteTable, ServletDestination

logger = logging.getLogger("warmap.inspectors.servlet")


class ServletInspector:
    """
    Seeds the route table with:
    - one ALL entry per servlet mapping
    - one ALL entry per public file, keyed by its lowercased path
      (JSP, HTML or other static content)
    """

    def inspect(self, archive: WarArchive, table: RouteTable) -> None:
        mappings = archive.descriptor.servlet_mappings()
        for mapping in mappings:
            table.put(
                mapping.url_pattern,
                ServletDestination(mapping.servlet_name, mapping.servlet_class),
            )
        logger.debug(f"{len(mappings)} servlet mappings")

        files = archive.public_files()
        for path in files:
            table.put(path.lower(), FileDestination(path, FileKind.for_path(path)))
        logger.debug(f"{len(files)} public files")
