"""
db.store - One storage connection plus the facts learned about it.

CatalogStore wraps an Engine (whose pool is shared by the concurrent
flush tasks) and owns the detected linkage scheme for that engine.
Detection runs at most once per store; reset_detection() drops it.
"""

from __future__ import annotations

import logging
import threading

from sqlalchemy.engine import Engine

from db.catalog import CatalogTables, catalog_tables
from db.linkage import LinkageScheme, detect_linkage

logger = logging.getLogger(__name__)


class CatalogStore:

    def __init__(self, engine: Engine, linkage: LinkageScheme | None = None):
        self.engine = engine
        self._pinned = linkage
        self._linkage: LinkageScheme | None = linkage
        self._lock = threading.Lock()

    @property
    def dialect(self) -> str:
        return self.engine.dialect.name

    @property
    def linkage(self) -> LinkageScheme:
        scheme = self._linkage
        if scheme is not None:
            return scheme
        with self._lock:
            if self._linkage is None:
                self._linkage = detect_linkage(self.engine)
                logger.info(f"Detected {self._linkage.value} linkage "
                            f"on {self.engine.url.render_as_string(hide_password=True)}")
            return self._linkage

    @property
    def tables(self) -> CatalogTables:
        """Table set for the active scheme (raises on UNKNOWN)."""
        return catalog_tables(self.linkage)

    def reset_detection(self) -> None:
        """Forget the detected scheme; the next access re-detects."""
        with self._lock:
            self._linkage = self._pinned

    def dispose(self) -> None:
        self.engine.dispose()
