"""
Appointment booking tests
"""
from datetime import date

import pytest
from pydantic import ValidationError

from bloodlink.core.errors import ConflictError, InvalidTransitionError, NotFoundError
from bloodlink.database.schemas import AppointmentCreate, AppointmentStatus
from bloodlink.services.appointments import create_appointment, list_appointments, update_appointment_status


DAY = date(2026, 7, 1)


def test_book_slot(repository, hospital):
    appointment = create_appointment(repository, "user-1", hospital.id, DAY, " 10:00 AM ")

    assert appointment.status == AppointmentStatus.SCHEDULED
    assert appointment.time_slot == "10:00 AM"
    assert appointment.date == DAY
    assert repository.appointments.count() == 1


def test_double_booking_conflicts(repository, hospital):
    create_appointment(repository, "user-1", hospital.id, DAY, "10:00 AM")

    with pytest.raises(ConflictError):
        create_appointment(repository, "user-2", hospital.id, DAY, "10:00 AM")

    assert repository.appointments.count() == 1


def test_other_slots_stay_free(repository, hospital):
    create_appointment(repository, "user-1", hospital.id, DAY, "10:00 AM")
    create_appointment(repository, "user-2", hospital.id, DAY, "11:00 AM")
    create_appointment(repository, "user-3", hospital.id, date(2026, 7, 2), "10:00 AM")

    assert repository.appointments.count() == 3


def test_cancelled_slot_can_be_rebooked(repository, hospital):
    first = create_appointment(repository, "user-1", hospital.id, DAY, "10:00 AM")
    update_appointment_status(repository, first.id, "cancelled")

    second = create_appointment(repository, "user-2", hospital.id, DAY, "10:00 AM")

    assert second.user_id == "user-2"


def test_unknown_hospital(repository):
    with pytest.raises(NotFoundError):
        create_appointment(repository, "user-1", "nowhere", DAY, "10:00 AM")


@pytest.mark.parametrize("terminal", ["completed", "cancelled"])
def test_terminal_appointments_cannot_change(repository, hospital, terminal):
    appointment = create_appointment(repository, "user-1", hospital.id, DAY, "10:00 AM")
    update_appointment_status(repository, appointment.id, terminal)

    with pytest.raises(InvalidTransitionError):
        update_appointment_status(repository, appointment.id, "scheduled")

    assert repository.appointments.get_by_id(appointment.id).status.value == terminal


def test_unknown_appointment_status(repository, hospital):
    appointment = create_appointment(repository, "user-1", hospital.id, DAY, "10:00 AM")

    with pytest.raises(InvalidTransitionError):
        update_appointment_status(repository, appointment.id, "no-show")


def test_list_appointments_sorted_and_filtered(repository, hospital):
    late = create_appointment(repository, "user-1", hospital.id, date(2026, 7, 3), "09:00 AM")
    early = create_appointment(repository, "user-1", hospital.id, DAY, "11:00 AM")
    other = create_appointment(repository, "user-2", hospital.id, DAY, "09:00 AM")

    assert [a.id for a in list_appointments(repository)] == [other.id, early.id, late.id]
    assert [a.id for a in list_appointments(repository, user_id="user-1")] == [early.id, late.id]
    assert list_appointments(repository, hospital_id="elsewhere") == []


def test_blank_time_slot_is_rejected(repository, hospital):
    with pytest.raises(ValidationError):
        create_appointment(repository, "user-1", hospital.id, DAY, "   ")

    assert repository.appointments.count() == 0


def test_booking_form_strips_time_slot():
    form = AppointmentCreate(hospital_id="h1", date="2026-07-01", time_slot=" 10:00 AM ")
    assert form.time_slot == "10:00 AM"

    with pytest.raises(ValidationError):
        AppointmentCreate(hospital_id="h1", date="2026-07-01", time_slot="   ")
