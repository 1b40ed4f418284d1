"""
Inspectors - the two passes that populate a route table from an archive.
"""

from .servlet import ServletInspector
from .spring import SpringInspector, url_prefix

__all__ = ["ServletInspector", "SpringInspector", "url_prefix"]
