from datetime import date, datetime

import pytest

from app.services.analytics import resolve_range
from app.services.sms import SmsConfig, SmsError, normalize_bd_phone, send_sms
from app.utils.dates import day_key, local_day_bounds, parse_day, parse_moment
from app.utils.metrics import mean_rounded, percent, round_half_up
from app.utils.pagination import clamp_paging


@pytest.mark.parametrize("value, expected", [(0.5, 1), (1.5, 2), (2.5, 3), (66.4, 66), (-0.5, 0)])
def test_round_half_up_matches_math_round(value, expected):
    assert round_half_up(value) == expected


def test_percent_with_zero_denominator():
    assert percent(5, 0) == 0
    assert percent(1, 8) == 13  # 12.5


def test_mean_rounded_of_empty_is_zero():
    assert mean_rounded([]) == 0
    assert mean_rounded([50, 67]) == 59


def test_day_key_uses_local_timezone():
    # 18:30 UTC là 00:30 ngày hôm sau ở Asia/Dhaka.
    assert day_key(datetime(2026, 3, 1, 18, 30)) == "2026-03-02"
    assert day_key(datetime(2026, 3, 1, 17, 59)) == "2026-03-01"


def test_local_day_bounds_are_half_open():
    start, end = local_day_bounds(date(2026, 3, 2))

    assert start == datetime(2026, 3, 1, 18, 0)
    assert end == datetime(2026, 3, 2, 18, 0)


def test_parse_helpers():
    assert parse_day("2026-03-02") == date(2026, 3, 2)
    assert parse_day("02/03/2026") is None
    assert parse_moment("2026-03-02T10:00:00+00:00") == datetime(2026, 3, 2, 10, 0)
    assert parse_moment("garbage") is None


def test_resolve_range_defaults_to_trailing_thirty_days():
    now = datetime(2026, 3, 10, 12, 0)

    date_range = resolve_range(now=now)

    assert date_range.end == datetime(2026, 3, 10, 18, 0)
    assert date_range.start == datetime(2026, 2, 8, 18, 0)
    assert (date_range.end - date_range.start).days == 30


def test_resolve_range_keeps_explicit_bounds_and_flags_invalid():
    date_range = resolve_range("2026-03-01T00:00:00Z", "2026-03-05T00:00:00Z")
    assert date_range.start == datetime(2026, 3, 1)
    assert date_range.is_valid

    assert not resolve_range("soon", None).is_valid


def test_clamp_paging():
    assert clamp_paging("0", "500") == (1, 100)
    assert clamp_paging("x", None) == (1, 20)


@pytest.mark.parametrize("raw, expected", [
    ("01711-000000", "8801711000000"),
    ("+880 1711 000000", "8801711000000"),
    ("1711000000", "8801711000000"),
])
def test_normalize_bd_phone(raw, expected):
    assert normalize_bd_phone(raw) == expected


def test_send_sms_rejects_unknown_provider():
    config = SmsConfig(provider="twilio", api_key="k", sender_id="", feedback_url="")

    with pytest.raises(SmsError):
        send_sms("8801711000000", "hello", config)
