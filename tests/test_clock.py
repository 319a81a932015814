"""Tests for clock.py"""

from datetime import datetime, timedelta, timezone

import pytest

from adaptive_engine.clock import as_utc, days_between, from_iso, resolve_now, to_iso


@pytest.mark.parametrize("raw", [
    "2024-03-01T12:00:00",
    "2024-03-01T12:00:00Z",
    "2024-03-01T12:00:00.000Z",
    "2024-03-01T12:00:00+00:00",
    "2024-03-01T07:00:00-05:00",
])
def test_from_iso_reads_common_forms_as_utc(now, raw):
    value = from_iso(raw)
    assert value == now
    assert value.tzinfo == timezone.utc


def test_from_iso_passes_through_missing_values_and_datetimes(now):
    assert from_iso(None) is None
    assert from_iso(datetime(2024, 3, 1, 12, 0)) == now
    assert from_iso(to_iso(now)) == now


def test_days_between_mixes_naive_and_aware(now):
    assert days_between(datetime(2024, 2, 27, 12, 0), now) == 3
    assert days_between(now, datetime(2024, 3, 2, 11, 0)) == 0
    assert days_between(now, now - timedelta(hours=1)) == -1


def test_resolve_now(now):
    assert resolve_now(datetime(2024, 3, 1, 12, 0)) == now
    assert resolve_now(now) == now
    assert as_utc(datetime(2024, 3, 1, 7, 0, tzinfo=timezone(timedelta(hours=-5)))) == now
    assert resolve_now().tzinfo == timezone.utc
