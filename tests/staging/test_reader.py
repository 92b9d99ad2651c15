"""Tests for the CSV reader."""

import pytest

from tabular_uploads.core.errors import MalformedCsvError
from tabular_uploads.staging.reader import file_size_mb, open_csv


class TestOpenCsv:
    """Tests for open_csv."""

    def test_header_and_rows(self, write_csv):
        path = write_csv("a,b\n1,2\n3,4\n")
        with open_csv(path) as (header, rows):
            assert header == ["a", "b"]
            assert list(rows) == [["1", "2"], ["3", "4"]]

    def test_byte_order_mark_removed(self, write_csv):
        path = write_csv("name,qty\nx,1\n", encoding="utf-8-sig")
        with open_csv(path) as (header, _):
            assert header == ["name", "qty"]

    def test_quoted_values(self, write_csv):
        path = write_csv('a,b\n"1,000","say ""hi"""\n')
        with open_csv(path) as (_, rows):
            assert list(rows) == [["1,000", 'say "hi"']]

    def test_values_kept_as_written(self, write_csv):
        """Nothing is typed or reformatted on the way in."""
        path = write_csv("qty,day\n007,2022-01-05\n")
        with open_csv(path) as (_, rows):
            assert list(rows) == [["007", "2022-01-05"]]

    def test_duplicate_and_blank_header_names_kept(self, write_csv):
        path = write_csv("a,a,,b\n1,2,3,4\n")
        with open_csv(path) as (header, _):
            assert header == ["a", "a", "", "b"]

    def test_short_rows_padded(self, write_csv):
        path = write_csv("a,b,c\n1,2,3\n4\n")
        with open_csv(path) as (_, rows):
            assert list(rows) == [["1", "2", "3"], ["4", None, None]]

    def test_rows_fetched_in_batches(self, write_csv):
        path = write_csv("n\n" + "".join(f"{i}\n" for i in range(5)))
        with open_csv(path, batch_size=2) as (_, rows):
            assert [row[0] for row in rows] == ["0", "1", "2", "3", "4"]

    def test_empty_file(self, write_csv):
        path = write_csv("")
        with open_csv(path) as (header, rows):
            assert header == []
            assert list(rows) == []

    def test_unreadable_file(self, tmp_path):
        path = tmp_path / "upload.csv"
        path.write_bytes(b"a,b\n\xff\xfe,1\n")
        with pytest.raises(MalformedCsvError):
            with open_csv(path) as (_, rows):
                list(rows)

    def test_file_size(self, write_csv):
        path = write_csv("a" * 1048576)
        assert file_size_mb(path) == 1.0
