"""
Shared fixtures: an in-memory repository, a fixed clock and entity factories
"""
from datetime import datetime, timezone

import pytest

from bloodlink.database.storage import Repository


NOW = datetime(2026, 6, 15, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def repository():
    return Repository.in_memory()


@pytest.fixture
def make_donor(repository):
    counter = {"n": 0}

    def _make_donor(blood_type="O-", name=None, **fields):
        counter["n"] += 1
        data = {
            "user_id": f"donor-user-{counter['n']}",
            "name": name or f"Donor {counter['n']}",
            "age": 30,
            "blood_type": blood_type,
            "phone": "555-0100",
            "is_available": True,
        }
        data.update(fields)
        return repository.donors.create(data)

    return _make_donor


@pytest.fixture
def make_recipient(repository):
    counter = {"n": 0}

    def _make_recipient(blood_type="AB+", name=None, urgency="normal", **fields):
        counter["n"] += 1
        data = {
            "user_id": f"recipient-user-{counter['n']}",
            "name": name or f"Recipient {counter['n']}",
            "blood_type": blood_type,
            "urgency": urgency,
            "phone": "555-0200",
        }
        data.update(fields)
        return repository.recipients.create(data)

    return _make_recipient


@pytest.fixture
def hospital(repository):
    return repository.hospitals.create({
        "name": "City General Hospital",
        "location": "Downtown",
        "phone": "777-888-9999",
        "blood_types": ["A+", "B+", "O-", "AB+"],
    })
