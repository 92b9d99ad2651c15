"""Tests for schema detection and column name normalization."""

import pytest

from tabular_uploads.schema.detection import (
    AUTO_PK_COLUMN_NAME,
    detect_schema,
    normalize_column_name,
    uniquify_names,
    without_auto_pk_columns,
)
from tabular_uploads.typing.lattice import UploadType


class TestNormalizeColumnName:
    """Tests for header name normalization."""

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("Name", "name"),
            ("  First Name ", "first_name"),
            ("Café Owner", "cafe_owner"),
            ("price ($)", "price____"),
            ("_mb_row_id", "_mb_row_id"),
        ],
    )
    def test_slugified(self, raw, expected):
        assert normalize_column_name(raw) == expected

    @pytest.mark.parametrize("raw", [None, "", "   "])
    def test_blank_is_unnamed(self, raw):
        assert normalize_column_name(raw) == "unnamed_column"

    def test_non_ascii_only_is_unnamed(self):
        assert normalize_column_name("日本") == "unnamed_column"

    def test_idempotent(self):
        names = ["first_name", "unnamed_column", "a_2"]
        assert [normalize_column_name(n) for n in names] == names


class TestUniquifyNames:
    """Tests for making normalized names unique."""

    def test_repeats_get_suffixes(self):
        assert uniquify_names(["a", "a", "a"]) == ["a", "a_2", "a_3"]

    def test_suffix_skips_taken_names(self):
        assert uniquify_names(["a", "a", "a_2"]) == ["a", "a_3", "a_2"]

    def test_unique_names_unchanged(self):
        assert uniquify_names(["a", "b"]) == ["a", "b"]


class TestWithoutAutoPkColumns:
    """Tests for dropping columns that collide with the generated key."""

    def test_removed_from_header_and_rows(self):
        header, rows = without_auto_pk_columns(
            ["_MB_ROW_ID", "name"], [["1", "Ann"], ["2", "Bob"]]
        )
        assert header == ["name"]
        assert list(rows) == [["Ann"], ["Bob"]]

    def test_no_collision_keeps_everything(self):
        header, rows = without_auto_pk_columns(["id", "name"], [["1", "Ann"]])
        assert header == ["id", "name"]
        assert list(rows) == [["1", "Ann"]]


class TestDetectSchema:
    """Tests for detect_schema."""

    def test_types_and_generated_pk(self, parsing_settings):
        schema = detect_schema(
            parsing_settings,
            ["Name", "Age", "Score"],
            [["Ann", "31", "1.5"], ["Bob", "42", "2"]],
        )
        assert schema.extant_columns == {
            "name": UploadType.VARCHAR_255,
            "age": UploadType.INT,
            "score": UploadType.FLOAT,
        }
        assert schema.generated_columns == {
            AUTO_PK_COLUMN_NAME: UploadType.AUTO_INCREMENTING_INT_PK
        }

    def test_all_columns_puts_pk_first(self, parsing_settings):
        schema = detect_schema(parsing_settings, ["a"], [["1"]])
        assert list(schema.all_columns) == [AUTO_PK_COLUMN_NAME, "a"]

    def test_duplicate_names_made_unique(self, parsing_settings):
        schema = detect_schema(parsing_settings, ["Name", "name", ""], [])
        assert list(schema.extant_columns) == ["name", "name_2", "unnamed_column"]

    def test_empty_columns_are_text(self, parsing_settings):
        schema = detect_schema(parsing_settings, ["a", "b"], [["1"], ["2", ""]])
        assert schema.extant_columns == {"a": UploadType.INT, "b": UploadType.TEXT}

    def test_preserves_header_order(self, parsing_settings):
        schema = detect_schema(parsing_settings, ["z", "a", "m"], [])
        assert list(schema.extant_columns) == ["z", "a", "m"]
