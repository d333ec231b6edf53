from datetime import datetime, timedelta, timezone

from expense_tracker.core.date_range import END_OF_DAY, normalize_date_range
from expense_tracker.models.transaction_filter import TransactionFilter

UTC = timezone.utc


class TestNormalizeDateRange:
    """Tests for whole-day expansion of filter bounds"""

    def test_no_bounds_unchanged(self):
        assert normalize_date_range(None, None) == (None, None)

    def test_single_day_start_without_end(self):
        """A midnight start with no end selects that calendar day"""
        start = datetime(2024, 1, 5, tzinfo=UTC)

        result_start, result_end = normalize_date_range(start, None)

        assert result_start == start
        assert result_end == datetime(2024, 1, 5, 23, 59, 59, 999999, tzinfo=UTC)

    def test_midnight_end_extended_to_end_of_day(self):
        start = datetime(2024, 1, 1, tzinfo=UTC)
        end = datetime(2024, 1, 31, tzinfo=UTC)

        result_start, result_end = normalize_date_range(start, end)

        assert result_start == start
        assert result_end == datetime(2024, 1, 31, 23, 59, 59, 999999, tzinfo=UTC)

    def test_start_with_time_used_as_given(self):
        """A start carrying a time-of-day is an exact instant and gets no end"""
        start = datetime(2024, 1, 5, 14, 30, tzinfo=UTC)

        assert normalize_date_range(start, None) == (start, None)

    def test_end_with_time_used_as_given(self):
        end = datetime(2024, 1, 5, 9, 15, tzinfo=UTC)

        assert normalize_date_range(None, end) == (None, end)

    def test_end_only_midnight(self):
        end = datetime(2024, 2, 29, tzinfo=UTC)

        _, result_end = normalize_date_range(None, end)

        assert result_end.date() == end.date()
        assert result_end.time() == END_OF_DAY

    def test_timezone_preserved(self):
        """Day boundaries are computed in the timezone the bound was given in"""
        almaty = timezone(timedelta(hours=5))
        start = datetime(2024, 3, 10, tzinfo=almaty)

        _, result_end = normalize_date_range(start, None)

        assert result_end.tzinfo == almaty
        assert result_end == datetime(2024, 3, 10, 23, 59, 59, 999999, tzinfo=almaty)

    def test_midnight_with_fraction_snapped_to_start_of_day(self):
        start = datetime(2024, 1, 5, 0, 0, 0, 500, tzinfo=UTC)

        result_start, result_end = normalize_date_range(start, None)

        assert result_start == datetime(2024, 1, 5, tzinfo=UTC)
        assert result_end.date() == start.date()


class TestTransactionFilter:
    """Tests for the immutable filter value"""

    def test_empty_filter_has_no_constraints(self):
        spec = TransactionFilter()
        assert spec.normalized() == spec
        assert not spec.has_type_constraint

    def test_normalized_returns_new_value(self):
        spec = TransactionFilter(start_date=datetime(2024, 1, 5, tzinfo=UTC))

        normalized = spec.normalized()

        assert spec.end_date is None
        assert normalized.end_date == datetime(2024, 1, 5, 23, 59, 59, 999999, tzinfo=UTC)

    def test_normalized_is_idempotent(self):
        spec = TransactionFilter(
            start_date=datetime(2024, 1, 1, tzinfo=UTC),
            end_date=datetime(2024, 1, 31, tzinfo=UTC),
        )
        assert spec.normalized().normalized() == spec.normalized()

    def test_for_owner_overrides_user(self):
        spec = TransactionFilter(user_id=1, category="food")

        scoped = spec.for_owner(7)

        assert scoped.user_id == 7
        assert scoped.category == "food"
        assert spec.user_id == 1


class TestParseDatetime:
    """Tests for query-string date parsing"""

    def test_date_only_taken_as_utc(self):
        from expense_tracker.schemas.filter_schemas import parse_datetime

        assert parse_datetime("start_date", "2024-01-05") == datetime(2024, 1, 5, tzinfo=UTC)

    def test_offset_kept_for_whole_day_expansion(self):
        from expense_tracker.schemas.filter_schemas import parse_datetime

        plus_five = timezone(timedelta(hours=5))

        parsed = parse_datetime("start_date", "2024-01-05T00:00:00+05:00")
        _, end = normalize_date_range(parsed, None)

        assert parsed.utcoffset() == timedelta(hours=5)
        assert end == datetime(2024, 1, 5, 23, 59, 59, 999999, tzinfo=plus_five)
