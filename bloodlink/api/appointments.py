"""
Appointment booking endpoints
"""
from typing import List, Optional

from fastapi import APIRouter, Depends, Request

from bloodlink.database.schemas import Appointment, AppointmentCreate, AppointmentStatusUpdate
from bloodlink.database.storage import Repository
from bloodlink.api.utils import get_repository, get_user_id
from bloodlink.services.appointments import create_appointment, list_appointments, update_appointment_status

router = APIRouter()


@router.post("/appointments", response_model=Appointment)
async def book_appointment(payload: AppointmentCreate, request: Request,
                           repository: Repository = Depends(get_repository)):
    """
    Book a donation slot for the calling user

    Returns 409 if the hospital slot is already taken.
    """
    user_id = get_user_id(request)
    return create_appointment(repository, user_id, payload.hospital_id, payload.date, payload.time_slot)


@router.get("/appointments", response_model=List[Appointment])
async def get_appointments(user_id: Optional[str] = None, hospital_id: Optional[str] = None,
                           repository: Repository = Depends(get_repository)):
    return list_appointments(repository, user_id=user_id, hospital_id=hospital_id)


@router.patch("/appointments/{appointment_id}/status", response_model=Appointment)
async def change_appointment_status(appointment_id: str, payload: AppointmentStatusUpdate,
                                    repository: Repository = Depends(get_repository)):
    return update_appointment_status(repository, appointment_id, payload.status)
