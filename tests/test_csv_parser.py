import io

import pytest

from import_engine.csv_parser import SourceError, open_source, read_header, read_rows


def _rows(data: bytes, **kw):
    return list(read_rows(open_source(data), **kw))


def test_blank_rows_are_skipped():
    data = b"title,body\n\nFoo,X\n,\n\nBar,Y\n"
    rows = _rows(data)
    # ",\n" is two empty cells, not a blank row
    assert rows == [["title", "body"], ["Foo", "X"], ["", ""], ["Bar", "Y"]]


def test_bom_is_stripped_from_first_header():
    rows = read_rows(open_source("\ufefftitle,body\nFoo,X\n".encode("utf-8")))
    assert read_header(rows) == ["title", "body"]
    assert list(rows) == [["Foo", "X"]]


def test_header_cells_are_trimmed():
    rows = read_rows(open_source(b" title ,body\t\nFoo,X\n"))
    assert read_header(rows) == ["title", "body"]


def test_tab_delimiter_and_custom_quote():
    data = b"title\tbody\n'Foo\tBar'\tX\n"
    assert _rows(data, delimiter="\t", quotechar="'") == [["title", "body"], ["Foo\tBar", "X"]]


def test_quoted_multiline_cell():
    data = b'title,images\nFoo,"a.jpg\nb.jpg"\n'
    assert _rows(data)[1] == ["Foo", "a.jpg\nb.jpg"]


def test_reads_binary_stream_and_path(tmp_path):
    path = tmp_path / "in.csv"
    path.write_bytes(b"title\nFoo\n")
    assert _rows(path) == [["title"], ["Foo"]]
    assert list(read_rows(open_source(io.BytesIO(b"title\nFoo\n")))) == [["title"], ["Foo"]]


def test_rows_are_lazy():
    rows = read_rows(open_source(b"title\nFoo\nBar\n"))
    assert next(rows) == ["title"]
    assert next(rows) == ["Foo"]


def test_missing_file_raises_source_error(tmp_path):
    with pytest.raises(SourceError):
        open_source(tmp_path / "missing.csv")


def test_invalid_utf8_raises_source_error():
    with pytest.raises(SourceError):
        _rows(b"title\n\xff\xfe\xfa\n")


def test_empty_source_has_no_header():
    assert read_header(read_rows(open_source(b"\n\n"))) is None
