"""
import_engine.csv_parser - Low-level CSV reading and cleaning.

Responsibilities:
  • BOM removal (UTF-8 / UTF-8-SIG)
  • Header whitespace stripping
  • Returns the header plus positional rows aligned to it
"""

from __future__ import annotations

import csv
import io
from typing import IO

from import_engine.errors import ImportFailed


def read_records(raw: str | bytes | IO) -> tuple[list[str], list[list[str]]]:
    """
    Accept raw file content (bytes, str, or a file object), clean it,
    and return (headers, rows).  Raises ImportFailed if there is no header.
    """
    if hasattr(raw, "read"):
        raw = raw.read()
    text = _decode(raw)
    if not text or not text.strip():
        raise ImportFailed("read CSV header: CSV has no header row or is empty")

    reader = csv.reader(io.StringIO(text))
    try:
        headers = next(reader)
    except StopIteration:
        raise ImportFailed("read CSV header: CSV has no header row or is empty") from None
    except csv.Error as exc:
        raise ImportFailed(f"read CSV header: {exc}") from exc

    # Strip whitespace from every header
    headers = [h.strip() for h in headers]

    try:
        rows = [row for row in reader if row]
    except csv.Error as exc:
        raise ImportFailed(f"read CSV rows: line {reader.line_num}: {exc}") from exc
    return headers, rows


def cell(row: list[str], idx: int | None) -> str:
    """Trimmed value at *idx*, or '' when the column is absent/short."""
    if idx is None or idx >= len(row):
        return ""
    return row[idx].strip()


def _decode(raw: str | bytes) -> str:
    if isinstance(raw, bytes):
        # Strip UTF-8 BOM
        if raw.startswith(b"\xef\xbb\xbf"):
            raw = raw[3:]
        return raw.decode("utf-8", errors="replace")
    if raw.startswith("\ufeff"):
        return raw[1:]
    return raw
