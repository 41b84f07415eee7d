"""
Donation appointments at hospitals

A hospital slot (hospital, date, time slot) holds at most one appointment
that is not cancelled.
"""
import logging
from datetime import date
from typing import List, Optional, Union

from bloodlink.core.errors import ConflictError, InvalidTransitionError
from bloodlink.database.schemas import Appointment, AppointmentStatus
from bloodlink.database.storage import Repository

logger = logging.getLogger(__name__)

TERMINAL_APPOINTMENT_STATUSES = frozenset({AppointmentStatus.COMPLETED, AppointmentStatus.CANCELLED})


def _slot_taken(repository: Repository, hospital_id: str, day: date, time_slot: str) -> bool:
    return any(
        appointment.status != AppointmentStatus.CANCELLED
        for appointment in repository.appointments.filter(hospital_id=hospital_id, date=day, time_slot=time_slot)
    )


def create_appointment(repository: Repository, user_id: str, hospital_id: str,
                       day: date, time_slot: str) -> Appointment:
    """
    Book a hospital slot for a donor

    Raises:
        NotFoundError: hospital does not exist
        ConflictError: slot already booked by a non-cancelled appointment
    """
    hospital = repository.hospitals.get_by_id(hospital_id)
    time_slot = time_slot.strip()

    if _slot_taken(repository, hospital.id, day, time_slot):
        logger.warning("Slot %s %s at hospital %s is already booked", day.isoformat(), time_slot, hospital.id)
        raise ConflictError(
            f"{hospital.name} already has an appointment on {day.isoformat()} at {time_slot}"
        )

    appointment = repository.appointments.create({
        "user_id": user_id,
        "hospital_id": hospital.id,
        "date": day,
        "time_slot": time_slot,
        "status": AppointmentStatus.SCHEDULED,
    })
    logger.info("Appointment %s booked for user %s at hospital %s", appointment.id, user_id, hospital.id)
    return appointment


def update_appointment_status(repository: Repository, appointment_id: str,
                              new_status: Union[AppointmentStatus, str]) -> Appointment:
    """
    Complete or cancel a scheduled appointment

    Raises:
        NotFoundError: appointment does not exist
        InvalidTransitionError: appointment already completed/cancelled, or unknown status
    """
    appointment = repository.appointments.get_by_id(appointment_id)
    try:
        status = AppointmentStatus(new_status)
    except ValueError:
        raise InvalidTransitionError(
            appointment.status.value, str(new_status),
            reason=f"Unknown appointment status: {new_status!r}",
        )

    if appointment.status in TERMINAL_APPOINTMENT_STATUSES:
        raise InvalidTransitionError(
            appointment.status.value, status.value,
            reason=f"Appointment {appointment.id} is already {appointment.status.value}",
        )

    updated = repository.appointments.update(appointment.id, {"status": status}, expected_version=appointment.version)
    logger.info("Appointment %s status changed: %s -> %s", appointment.id, appointment.status.value, status.value)
    return updated


def list_appointments(repository: Repository, user_id: Optional[str] = None,
                      hospital_id: Optional[str] = None) -> List[Appointment]:
    """
    Appointments ordered by date and time slot, optionally for one user or hospital
    """
    filters = {}
    if user_id is not None:
        filters["user_id"] = user_id
    if hospital_id is not None:
        filters["hospital_id"] = hospital_id
    appointments = repository.appointments.filter(**filters)
    appointments.sort(key=lambda a: (a.date, a.time_slot))
    return appointments
