"""
Matching and ranking tests
"""
from datetime import timedelta

import pytest

from bloodlink.core.dates import add_months
from bloodlink.core.errors import NotFoundError
from bloodlink.services.matching import (
    get_all_matches,
    get_compatible_donors,
    get_compatible_recipients,
    urgency_rank,
)
from bloodlink.services.referrals import create_referral, update_referral_status
from bloodlink.database.schemas import Urgency


def test_urgency_rank_buckets():
    assert urgency_rank(Urgency.CRITICAL) > urgency_rank(Urgency.URGENT) > urgency_rank(Urgency.NORMAL)
    assert urgency_rank(Urgency.NORMAL) == urgency_rank(Urgency.LOW)


def test_compatible_recipients_filters_by_blood_type(repository, make_recipient, now):
    a_pos = make_recipient("A+")
    ab_pos = make_recipient("AB+")
    make_recipient("B+")
    make_recipient("O-")

    result = get_compatible_recipients(repository, "A+", now)

    assert {r.id for r in result} == {a_pos.id, ab_pos.id}


def test_compatible_recipients_ordering(repository, make_recipient, now):
    normal_b = make_recipient("A+", name="Bea", urgency="normal")
    normal_a = make_recipient("A+", name="Abe", urgency="normal")
    critical = make_recipient("AB+", name="Zed", urgency="critical")
    urgent = make_recipient("A+", name="Yan", urgency="urgent")
    low_exact = make_recipient("A+", name="Cal", urgency="low")
    normal_inexact = make_recipient("AB+", name="Aaron", urgency="normal")

    result = get_compatible_recipients(repository, "A+", now)

    # urgency first; inside the same bucket exact matches score higher, then name
    assert [r.id for r in result] == [
        critical.id, urgent.id, normal_a.id, normal_b.id, low_exact.id, normal_inexact.id,
    ]


def test_completed_recipients_are_excluded(repository, make_donor, make_recipient, hospital, now):
    donor = make_donor("O-")
    served = make_recipient("AB+", name="Served")
    pending = make_recipient("AB+", name="Pending")
    cancelled = make_recipient("AB+", name="Cancelled")

    done = create_referral(repository, donor.id, served.id, hospital.id, now=now)
    update_referral_status(repository, done.id, "completed", now=now)
    create_referral(repository, donor.id, pending.id, hospital.id, now=now)
    dropped = create_referral(repository, donor.id, cancelled.id, hospital.id, now=now)
    update_referral_status(repository, dropped.id, "cancelled", now=now)

    ids = [r.id for r in get_compatible_recipients(repository, "O-", now)]

    assert served.id not in ids
    assert pending.id in ids
    assert cancelled.id in ids


def test_compatible_recipients_rejects_unknown_type(repository):
    with pytest.raises(ValueError):
        get_compatible_recipients(repository, "C+")


def test_compatible_donors_only_available_and_compatible(repository, make_donor, make_recipient, now):
    recipient = make_recipient("A+")
    exact = make_donor("A+", name="Exact")
    universal = make_donor("O-", name="Universal")
    make_donor("B+", name="Wrong type")
    make_donor("O+", name="Resting", last_donation_date=now - timedelta(days=20))

    result = get_compatible_donors(repository, recipient.id, now)

    assert [d.id for d in result] == [exact.id, universal.id]


def test_compatible_donors_refreshes_stale_flag(repository, make_donor, make_recipient, now):
    recipient = make_recipient("O+")
    rested = make_donor("O+", last_donation_date=add_months(now, -4), is_available=False)

    result = get_compatible_donors(repository, recipient.id, now)

    assert [d.id for d in result] == [rested.id]
    assert repository.donors.get_by_id(rested.id).is_available is True


def test_compatible_donors_unknown_recipient(repository):
    with pytest.raises(NotFoundError):
        get_compatible_donors(repository, "missing")


def test_all_matches_pairs_and_scores(repository, make_donor, make_recipient, now):
    o_neg = make_donor("O-", name="Olga")
    a_pos = make_donor("A+", name="Adam")
    make_donor("B-", name="Resting", last_donation_date=now - timedelta(days=10))
    critical = make_recipient("AB+", name="Chris", urgency="critical")
    a_rec = make_recipient("A+", name="Alex")

    matches = get_all_matches(repository, now)

    pairs = [(m.donor.id, m.recipient.id, m.compatibility_score) for m in matches]
    assert pairs == [
        (a_pos.id, critical.id, 95),
        (o_neg.id, critical.id, 95),
        (a_pos.id, a_rec.id, 85),
        (o_neg.id, a_rec.id, 70),
    ]
    assert all(m.status == "pending" for m in matches)


def test_all_matches_keeps_completed_recipients(repository, make_donor, make_recipient, hospital, now):
    donor = make_donor("O-")
    other = make_donor("O+")
    served = make_recipient("O+")
    referral = create_referral(repository, donor.id, served.id, hospital.id, now=now)
    update_referral_status(repository, referral.id, "completed", now=now)

    matches = get_all_matches(repository, now)

    # the donor who just gave is resting; the served recipient still appears
    assert [(m.donor.id, m.recipient.id) for m in matches] == [(other.id, served.id)]


def test_all_matches_empty(repository):
    assert get_all_matches(repository) == []


def test_name_tie_break_ignores_case(repository, make_donor, make_recipient, now):
    bob = make_recipient("A+", name="Bob")
    alice = make_recipient("A+", name="alice")
    recipient = make_recipient("A+", name="Target")
    zoe = make_donor("A+", name="Zoe")
    adam = make_donor("A+", name="adam")

    assert [r.id for r in get_compatible_recipients(repository, "A+", now)][:2] == [alice.id, bob.id]
    assert [d.id for d in get_compatible_donors(repository, recipient.id, now)] == [adam.id, zoe.id]
    assert [m.donor.id for m in get_all_matches(repository, now)][:2] == [adam.id, adam.id]
