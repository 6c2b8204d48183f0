import io

import pytest

from import_engine.csv_parser import cell, read_records
from import_engine.errors import ImportFailed


def test_reads_bytes_str_and_files():
    for source in (b"sku,name\nA,Alpha\n", "sku,name\nA,Alpha\n",
                   io.BytesIO(b"sku,name\nA,Alpha\n"), io.StringIO("sku,name\nA,Alpha\n")):
        headers, rows = read_records(source)
        assert headers == ["sku", "name"]
        assert rows == [["A", "Alpha"]]


def test_strips_bom_and_header_whitespace():
    headers, _ = read_records(b"\xef\xbb\xbf sku ,\tname\nA,B\n")
    assert headers == ["sku", "name"]


def test_blank_lines_are_dropped():
    _, rows = read_records("sku\nA\n\nB\n")
    assert rows == [["A"], ["B"]]


def test_quoted_fields():
    _, rows = read_records('sku,description\nA,"one, two\nthree"\n')
    assert rows == [["A", "one, two\nthree"]]


@pytest.mark.parametrize("source", [b"", "   \n", io.BytesIO(b"")])
def test_empty_input_is_fatal(source):
    with pytest.raises(ImportFailed, match="no header row"):
        read_records(source)


def test_cell_trims_and_tolerates_short_rows():
    row = [" A ", "x"]
    assert cell(row, 0) == "A"
    assert cell(row, 5) == ""
    assert cell(row, None) == ""
