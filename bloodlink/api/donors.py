"""
Donor profile endpoints

Every donor read refreshes the cached availability flag first.
"""
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Request

from bloodlink.database.schemas import Donor, DonorForm, DonorInput, DonorUpdate, Recipient
from bloodlink.database.storage import Repository
from bloodlink.api.utils import get_repository, get_user_id
from bloodlink.services.availability import check_and_update_donor_availability, refresh_all_donor_availability
from bloodlink.services.matching import get_compatible_recipients
from bloodlink.services.profiles import create_donor_profile, get_donor_by_user_id, update_donor_profile

router = APIRouter()


@router.post("/donors", response_model=Donor)
async def create_donor(form: DonorForm, request: Request, repository: Repository = Depends(get_repository)):
    """
    Complete the donor profile of the calling user (X-User-ID header)

    Returns 409 if the user already has a donor profile.
    """
    donor = DonorInput(user_id=get_user_id(request), **form.model_dump())
    return create_donor_profile(repository, donor)


@router.get("/donors", response_model=List[Donor])
async def list_donors(available_only: bool = False, repository: Repository = Depends(get_repository)):
    donors = refresh_all_donor_availability(repository)
    if available_only:
        donors = [donor for donor in donors if donor.is_available]
    return donors


@router.get("/donors/me", response_model=Donor)
async def get_my_donor_profile(request: Request, repository: Repository = Depends(get_repository)):
    """
    Donor profile of the calling user (X-User-ID header)
    """
    user_id = get_user_id(request)
    donor = get_donor_by_user_id(repository, user_id)
    if not donor:
        raise HTTPException(status_code=404, detail=f"No donor profile found for user {user_id}")
    return check_and_update_donor_availability(repository, donor.id)


@router.get("/donors/{donor_id}", response_model=Donor)
async def get_donor(donor_id: str, repository: Repository = Depends(get_repository)):
    return check_and_update_donor_availability(repository, donor_id)


@router.patch("/donors/{donor_id}", response_model=Donor)
async def update_donor(donor_id: str, changes: DonorUpdate, repository: Repository = Depends(get_repository)):
    """
    Edit donor contact details (blood type and availability are not editable)
    """
    return update_donor_profile(repository, donor_id, changes)


@router.post("/donors/{donor_id}/availability/refresh", response_model=Donor)
async def refresh_donor_availability(donor_id: str, repository: Repository = Depends(get_repository)):
    return check_and_update_donor_availability(repository, donor_id)


@router.get("/donors/{donor_id}/compatible-recipients", response_model=List[Recipient])
async def list_compatible_recipients(donor_id: str, repository: Repository = Depends(get_repository)):
    """
    Recipients this donor can give to, most urgent first
    """
    donor = check_and_update_donor_availability(repository, donor_id)
    return get_compatible_recipients(repository, donor.blood_type)
