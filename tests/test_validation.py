"""Tests for raw form parsing."""

from decimal import Decimal

import pytest

from timecard.models import FlatRateInput, TimedInput
from timecard.validation import EntryFormParser, ValidationError


@pytest.fixture
def parser():
    return EntryFormParser(default_hourly_rate=Decimal("18"))


class TestEntryFormParser:
    def test_timed_with_default_rate(self, parser):
        parsed = parser.parse(category="Class Time", minutes="45")
        assert isinstance(parsed, TimedInput)
        assert parsed.minutes == Decimal("45")
        assert parsed.hourly_rate == Decimal("18")
        assert parsed.date is None

    def test_timed_with_explicit_rate_and_date(self, parser):
        parsed = parser.parse(
            category=" Mentoring ", minutes=" 30.5 ", hourly_rate="22", date="2024-03-02"
        )
        assert parsed.category == "Mentoring"
        assert parsed.minutes == Decimal("30.5")
        assert parsed.hourly_rate == Decimal("22")
        assert parsed.date == "2024-03-02"

    def test_rate_amount_selects_flat_rate(self, parser):
        parsed = parser.parse(category="Design", minutes="30", rate_amount="500")
        assert isinstance(parsed, FlatRateInput)
        assert parsed.rate_amount == Decimal("500")

    def test_nothing_billable(self, parser):
        with pytest.raises(ValidationError) as excinfo:
            parser.parse(category="Design")
        assert excinfo.value.fields == {"billing"}

    def test_reports_every_issue(self, parser):
        with pytest.raises(ValidationError) as excinfo:
            parser.parse(category="  ", minutes="ten", hourly_rate="-3")
        assert excinfo.value.fields == {"category", "minutes", "hourly_rate"}

    @pytest.mark.parametrize(
        "minutes, issue_type",
        [("abc", "not_a_number"), ("0", "not_positive"), ("-10", "not_positive"),
         ("NaN", "not_finite"), ("Infinity", "not_finite")],
    )
    def test_bad_minutes(self, parser, minutes, issue_type):
        with pytest.raises(ValidationError) as excinfo:
            parser.parse(category="A", minutes=minutes)
        assert [issue.issue_type for issue in excinfo.value.issues] == [issue_type]

    def test_bad_flat_amount(self, parser):
        with pytest.raises(ValidationError) as excinfo:
            parser.parse(category="Design", rate_amount="free")
        assert excinfo.value.fields == {"rate_amount"}

    def test_error_message_lists_issues(self, parser):
        with pytest.raises(ValidationError, match="Category is required"):
            parser.parse(category="", rate_amount="5")


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
