"""
Hospital management endpoints
"""
from typing import List

from fastapi import APIRouter, Depends

from bloodlink.database.schemas import Hospital, HospitalInput, HospitalUpdate
from bloodlink.database.storage import Repository
from bloodlink.api.utils import get_repository

router = APIRouter()


@router.post("/hospitals", response_model=Hospital)
async def create_hospital(hospital: HospitalInput, repository: Repository = Depends(get_repository)):
    return repository.hospitals.create(hospital.model_dump())


@router.get("/hospitals", response_model=List[Hospital])
async def list_hospitals(repository: Repository = Depends(get_repository)):
    hospitals = repository.hospitals.list()
    hospitals.sort(key=lambda h: h.name.casefold())
    return hospitals


@router.get("/hospitals/{hospital_id}", response_model=Hospital)
async def get_hospital(hospital_id: str, repository: Repository = Depends(get_repository)):
    return repository.hospitals.get_by_id(hospital_id)


@router.patch("/hospitals/{hospital_id}", response_model=Hospital)
async def update_hospital(hospital_id: str, changes: HospitalUpdate,
                          repository: Repository = Depends(get_repository)):
    hospital = repository.hospitals.get_by_id(hospital_id)
    updates = changes.model_dump(exclude_unset=True)
    if not updates:
        return hospital
    return repository.hospitals.update(hospital.id, updates, expected_version=hospital.version)
