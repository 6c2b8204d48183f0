"""
import_engine.errors - Run-aborting failures.

Row-level problems never raise; they become warning strings on the
result.  Everything here stops the run and reaches the caller.
"""

from __future__ import annotations


class ImportFailed(Exception):
    """Base class for fatal import errors."""


class MissingColumnError(ImportFailed):
    """The CSV lacks a mandatory column."""


class MetadataError(ImportFailed):
    """Attribute metadata could not be loaded."""


class SchemaDetectionError(ImportFailed):
    """The store's linkage scheme could not be determined."""


class EntityCreationError(ImportFailed):
    """A batch of new product entities could not be created."""


class FlushError(ImportFailed):
    """
    One or more flush tasks failed.

    ``errors`` holds every task failure as (destination, exception), in
    completion order; the first one names the error.  ``counts`` holds
    row counts of the destinations that were written in full.
    """

    def __init__(self, errors: list[tuple[str, BaseException]], counts: dict[str, int]):
        self.errors = errors
        self.counts = counts
        dest, exc = errors[0]
        msg = f"{dest}: {exc}"
        if len(errors) > 1:
            msg += f" (+{len(errors) - 1} more failed destinations)"
        super().__init__(msg)


class StockWriteError(ImportFailed):
    """Stock rows from a JSON import could not be written."""
