from datetime import date, datetime

import pandas as pd
import pytest

from ferias.utils.date_utils import (
    add_years,
    end_date_for,
    format_date,
    in_recurring_window,
    is_friday_or_saturday,
    parse_date,
    parse_day_month,
)


class TestParseDate:
    @pytest.mark.parametrize("value", [
        date(2026, 12, 1),
        datetime(2026, 12, 1, 23, 59),
        pd.Timestamp("2026-12-01 00:30"),
        "2026-12-01",
        "01/12/2026",
        "2026-12-01T03:00:00.000Z",
    ])
    def test_accepted_formats(self, value):
        assert parse_date(value) == date(2026, 12, 1)

    @pytest.mark.parametrize("value", [None, "", "   ", float("nan"), pd.NaT])
    def test_empty_values(self, value):
        assert parse_date(value) is None

    @pytest.mark.parametrize("value", ["31/02/2026", "amanhã", 12])
    def test_invalid_values(self, value):
        with pytest.raises(ValueError):
            parse_date(value)


class TestArithmetic:
    def test_end_date_is_inclusive(self):
        assert end_date_for(date(2026, 12, 20), 17) == date(2027, 1, 5)
        assert end_date_for(date(2026, 11, 30), 1) == date(2026, 11, 30)

    def test_add_years_clamps_leap_day(self):
        assert add_years(date(2028, 2, 29), 1) == date(2029, 2, 28)
        assert add_years(date(2026, 3, 1), 1) == date(2027, 3, 1)

    def test_friday_and_saturday(self):
        assert is_friday_or_saturday(date(2026, 11, 27))
        assert is_friday_or_saturday(date(2026, 11, 28))
        assert not is_friday_or_saturday(date(2026, 11, 29))

    def test_format_date(self):
        assert format_date(date(2027, 1, 5)) == "05/01/2027"
        assert format_date(None) == ""


class TestRecurringWindow:
    def test_plain_window(self):
        assert in_recurring_window(date(2027, 2, 1), "01/02", "31/10")
        assert in_recurring_window(date(2027, 10, 31), "01/02", "31/10")
        assert not in_recurring_window(date(2027, 1, 31), "01/02", "31/10")
        assert not in_recurring_window(date(2026, 11, 1), "01/02", "31/10")

    def test_window_wrapping_new_year(self):
        assert in_recurring_window(date(2026, 12, 15), "01/11", "31/01")
        assert in_recurring_window(date(2027, 1, 10), "01/11", "31/01")
        assert not in_recurring_window(date(2027, 3, 1), "01/11", "31/01")

    @pytest.mark.parametrize("text", ["1-2", "32/01", "10/13", ""])
    def test_invalid_day_month(self, text):
        with pytest.raises(ValueError):
            parse_day_month(text)
