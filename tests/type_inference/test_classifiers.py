"""Tests for value classifiers."""

import pytest

from tabular_uploads.core.errors import InternalConsistencyError
from tabular_uploads.typing import classifiers
from tabular_uploads.typing.classifiers import is_valid, type_checks
from tabular_uploads.typing.lattice import NON_INFERABLE_TYPES, VALUE_TYPES, UploadType
from tabular_uploads.typing.parsing import NumberSeparators, ParsingSettings, upload_type_parser


def _settings(separators: NumberSeparators) -> ParsingSettings:
    return ParsingSettings(number_separators=separators)


class TestTypeChecks:
    """Tests for the classifier table."""

    def test_every_inferable_type_has_a_check(self, parsing_settings):
        checks = type_checks(parsing_settings)
        for upload_type in VALUE_TYPES:
            if upload_type not in NON_INFERABLE_TYPES:
                assert upload_type in checks

    def test_generated_pk_is_never_valid(self, parsing_settings):
        assert not is_valid(parsing_settings, UploadType.AUTO_INCREMENTING_INT_PK, "1")

    def test_table_is_cached_per_settings(self, parsing_settings):
        assert type_checks(parsing_settings) is type_checks(parsing_settings)

    def test_missing_check_is_an_internal_error(self, parsing_settings, monkeypatch):
        monkeypatch.setattr(classifiers, "NON_INFERABLE_TYPES", frozenset())
        type_checks.cache_clear()
        try:
            with pytest.raises(InternalConsistencyError, match="auto-incrementing-int-pk"):
                type_checks(parsing_settings)
        finally:
            type_checks.cache_clear()


class TestNumbers:
    """Tests for int and float classification."""

    @pytest.mark.parametrize(
        ("separators", "value"),
        [
            (NumberSeparators.DOT_COMMA, "1,000"),
            (NumberSeparators.COMMA_DOT, "1.000"),
            (NumberSeparators.COMMA_SPACE, "1 000"),
            (NumberSeparators.COMMA_SPACE, "1\u00a0000"),
            (NumberSeparators.DOT_APOSTROPHE, "1’000"),
        ],
    )
    def test_grouped_ints(self, separators, value):
        assert is_valid(_settings(separators), UploadType.INT, value)

    @pytest.mark.parametrize(
        ("separators", "value"),
        [
            (NumberSeparators.DOT_COMMA, "1,000.5"),
            (NumberSeparators.COMMA_DOT, "1.000,5"),
            (NumberSeparators.COMMA_SPACE, "1 000,5"),
            (NumberSeparators.DOT_APOSTROPHE, "1’000.5"),
        ],
    )
    def test_floats(self, separators, value):
        settings = _settings(separators)
        assert is_valid(settings, UploadType.FLOAT, value)
        assert not is_valid(settings, UploadType.INT, value)

    @pytest.mark.parametrize("value", ["$2", "-$2", "$-2", "2€", "(2)", "($1,000)", "¥ 30"])
    def test_currency_and_parens(self, parsing_settings, value):
        assert is_valid(parsing_settings, UploadType.INT, value)

    def test_float_accepts_whole_numbers(self, parsing_settings):
        assert is_valid(parsing_settings, UploadType.FLOAT, "3")

    def test_grouping_after_decimal_rejected(self, parsing_settings):
        assert not is_valid(parsing_settings, UploadType.FLOAT, "1.5,2")

    @pytest.mark.parametrize("value", ["abc", "1-2", "$", "2..5"])
    def test_not_numbers(self, parsing_settings, value):
        assert not is_valid(parsing_settings, UploadType.INT, value)
        assert not is_valid(parsing_settings, UploadType.FLOAT, value)


class TestOtherTypes:
    """Tests for boolean, temporal and string classification."""

    def test_boolean_or_int_only_zero_and_one(self, parsing_settings):
        assert is_valid(parsing_settings, UploadType.BOOLEAN_OR_INT, "0")
        assert is_valid(parsing_settings, UploadType.BOOLEAN_OR_INT, "1")
        assert not is_valid(parsing_settings, UploadType.BOOLEAN_OR_INT, "true")
        assert not is_valid(parsing_settings, UploadType.BOOLEAN_OR_INT, "2")

    def test_boolean_case_insensitive(self, parsing_settings):
        assert is_valid(parsing_settings, UploadType.BOOLEAN, "YES")
        assert not is_valid(parsing_settings, UploadType.BOOLEAN, "yep")

    def test_temporal(self, parsing_settings):
        assert is_valid(parsing_settings, UploadType.DATE, "2022-01-05")
        assert is_valid(parsing_settings, UploadType.DATETIME, "2022-01-05 10:00")
        assert is_valid(parsing_settings, UploadType.DATETIME, "2022-01-05")
        assert is_valid(parsing_settings, UploadType.OFFSET_DATETIME, "2022-01-05T10:00Z")
        assert not is_valid(parsing_settings, UploadType.DATE, "2022-01-05 10:00")

    def test_varchar_limit(self, parsing_settings):
        assert is_valid(parsing_settings, UploadType.VARCHAR_255, "x" * 255)
        assert not is_valid(parsing_settings, UploadType.VARCHAR_255, "x" * 256)
        assert is_valid(parsing_settings, UploadType.TEXT, "x" * 256)


class TestClassifiersAgreeWithParsers:
    """A value accepted by a classifier must parse under that type."""

    @pytest.mark.parametrize(
        "value",
        ["0", "1", "42", "-$1,234", "(3.5)", "2.5", "yes", "2022-01-05", "Jan 5, 2022",
         "2022-01-05 10:00:00", "2022-01-05T10:00:00+01:00", "hello"],
    )
    def test_accepted_values_parse(self, parsing_settings, value):
        checks = type_checks(parsing_settings)
        for upload_type, check in checks.items():
            if check(value):
                upload_type_parser(upload_type, parsing_settings)(value)
