"""
Donor availability policy tests
"""
from datetime import datetime, timedelta, timezone

from bloodlink.core.dates import add_months
from bloodlink.services.availability import (
    check_and_update_donor_availability,
    compute_availability,
    next_eligible_date,
    refresh_all_donor_availability,
)


def test_never_donated_is_available(now):
    assert compute_availability(None, now) is True


def test_two_months_ago_is_not_available(now):
    assert compute_availability(add_months(now, -2), now) is False


def test_three_months_and_a_day_ago_is_available(now):
    assert compute_availability(add_months(now, -3) - timedelta(days=1), now) is True


def test_exactly_three_calendar_months_is_available(now):
    assert compute_availability(add_months(now, -3), now) is True
    assert compute_availability(add_months(now, -3) + timedelta(seconds=1), now) is False


def test_cooldown_uses_calendar_months_not_days():
    last = datetime(2025, 11, 30, 9, 0, tzinfo=timezone.utc)
    # Nov 30 + 3 months clamps to the end of February
    assert next_eligible_date(last) == datetime(2026, 2, 28, 9, 0, tzinfo=timezone.utc)
    assert compute_availability(last, datetime(2026, 2, 27, 23, 59, tzinfo=timezone.utc)) is False
    assert compute_availability(last, datetime(2026, 2, 28, 9, 0, tzinfo=timezone.utc)) is True


def test_naive_datetimes_are_treated_as_utc(now):
    naive_last = (now - timedelta(days=10)).replace(tzinfo=None)
    assert compute_availability(naive_last, now) is False


def test_next_eligible_date_for_new_donor():
    assert next_eligible_date(None) is None


def test_check_and_update_persists_change(repository, make_donor, now):
    donor = make_donor(last_donation_date=now - timedelta(days=10), is_available=True)

    updated = check_and_update_donor_availability(repository, donor.id, now)

    assert updated.is_available is False
    assert repository.donors.get_by_id(donor.id).is_available is False
    assert updated.version == donor.version + 1


def test_check_and_update_skips_redundant_write(repository, make_donor, now):
    donor = make_donor(last_donation_date=None, is_available=True)

    result = check_and_update_donor_availability(repository, donor.id, now)

    assert result.is_available is True
    assert repository.donors.get_by_id(donor.id).version == donor.version


def test_donor_becomes_available_again_after_cooldown(repository, make_donor, now):
    donor = make_donor(last_donation_date=add_months(now, -4), is_available=False)

    assert check_and_update_donor_availability(repository, donor.id, now).is_available is True


def test_refresh_all_donor_availability(repository, make_donor, now):
    stale = make_donor(last_donation_date=now - timedelta(days=5), is_available=True)
    fresh = make_donor(is_available=True)

    donors = {d.id: d for d in refresh_all_donor_availability(repository, now)}

    assert donors[stale.id].is_available is False
    assert donors[fresh.id].is_available is True
    assert repository.donors.get_by_id(fresh.id).version == fresh.version
