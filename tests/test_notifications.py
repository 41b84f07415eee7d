"""
Notification tests
"""
from datetime import timedelta

import pytest

from bloodlink.core.errors import NotFoundError
from bloodlink.services.notifications import (
    add_notification,
    get_notifications,
    mark_notification_as_read,
    unread_count,
)


def test_notifications_newest_first(repository, now):
    old = add_notification(repository, "user-1", "first", now=now)
    new = add_notification(repository, "user-1", "second", now=now + timedelta(minutes=1))
    add_notification(repository, "user-2", "someone else", now=now)

    assert [n.id for n in get_notifications(repository, "user-1")] == [new.id, old.id]


def test_mark_as_read(repository, now):
    note = add_notification(repository, "user-1", "hello", type="info", now=now)
    assert unread_count(repository, "user-1") == 1

    read = mark_notification_as_read(repository, "user-1", note.id)

    assert read.read is True
    assert unread_count(repository, "user-1") == 0
    assert get_notifications(repository, "user-1", unread_only=True) == []

    again = mark_notification_as_read(repository, "user-1", note.id)
    assert again.version == read.version


def test_cannot_read_other_users_notification(repository, now):
    note = add_notification(repository, "user-1", "private", now=now)

    with pytest.raises(NotFoundError):
        mark_notification_as_read(repository, "user-2", note.id)

    assert repository.notifications.get_by_id(note.id).read is False


def test_mark_unknown_notification(repository):
    with pytest.raises(NotFoundError):
        mark_notification_as_read(repository, "user-1", "missing")
