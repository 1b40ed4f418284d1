"""
Route mapper - runs the inspectors over one archive.

Usage:
    ```python
    with RouteMapper.from_path("app.war") as mapper:
        table = mapper.run()
    ```
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional, Union

from .archive import WarArchive
from .classfile import AnnotationDecoder
from .config import WarmapConfig
from .inspectors import ServletInspector, SpringInspector
from .routing import RouteTable

logger = logging.getLogger("warmap.engine")


class RouteMapper:
    """
    Builds the route table of one archive.

    Each instance owns its decoder cache and table; independent archives
    need independent mappers.

    Args:
        archive: Open archive to analyze
        config: Run configuration
    """

    def __init__(self, archive: WarArchive, config: Optional[WarmapConfig] = None):
        self.archive = archive
        self.config = config or WarmapConfig()
        self.decoder = AnnotationDecoder(archive)
        self.inspectors = [
            ServletInspector(),
            SpringInspector(self.decoder, self.config.spring),
        ]

    @classmethod
    @contextmanager
    def from_path(
        cls,
        path: Union[str, Path],
        config: Optional[WarmapConfig] = None,
    ) -> Iterator["RouteMapper"]:
        """Open an archive, yield a mapper for it, and close it afterwards."""
        with WarArchive(path) as archive:
            yield cls(archive, config)

    def run(self) -> RouteTable:
        """
        Run every inspector in order.

        Raises:
            Fault: The archive or one of its contexts is invalid
        """
        table = RouteTable()
        for inspector in self.inspectors:
            logger.debug(f"Running {inspector.__class__.__name__}")
            inspector.inspect(self.archive, table)
        logger.info(f"{self.archive.path}: {len(table)} URLs")
        return table


def map_routes(path: Union[str, Path], config: Optional[WarmapConfig] = None) -> RouteTable:
    """Build the route table of the archive at path."""
    with RouteMapper.from_path(path, config) as mapper:
        return mapper.run()
