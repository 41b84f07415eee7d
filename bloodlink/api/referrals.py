"""
Referral endpoints

Thin wrappers around the referral lifecycle engine. Domain errors are turned
into HTTP responses by the exception handlers registered in main.py.
"""
from typing import List, Optional

from fastapi import APIRouter, Depends, Request

from bloodlink.database.schemas import (
    Referral,
    ReferralCreate,
    ReferralStatus,
    ReferralStatusUpdate,
    TransfusionDetails,
)
from bloodlink.database.storage import Repository
from bloodlink.api.utils import enforce_rate_limit, get_repository, get_user_id
from bloodlink.services.referrals import (
    create_referral,
    list_referrals,
    list_referrals_for_user,
    schedule_transfusion,
    update_referral_status,
)

router = APIRouter()


@router.post("/referrals", response_model=Referral)
async def create_referral_endpoint(payload: ReferralCreate, request: Request,
                                   repository: Repository = Depends(get_repository)):
    """
    Create a pending referral between a donor and a compatible recipient

    Throttled per calling user (X-User-ID). Returns 404 if the donor,
    recipient or hospital is unknown and 422 if the blood types are incompatible.
    """
    enforce_rate_limit(request, "create_referral")
    return create_referral(
        repository,
        payload.donor_id,
        payload.recipient_id,
        payload.hospital_id,
        transfusion_details=payload.transfusion_details,
    )


@router.get("/referrals", response_model=List[Referral])
async def list_referrals_endpoint(status: Optional[ReferralStatus] = None,
                                  repository: Repository = Depends(get_repository)):
    return list_referrals(repository, status)


@router.get("/referrals/mine", response_model=List[Referral])
async def list_my_referrals(request: Request, repository: Repository = Depends(get_repository)):
    """
    Referrals where the calling user is the donor or the recipient
    """
    return list_referrals_for_user(repository, get_user_id(request))


@router.get("/referrals/{referral_id}", response_model=Referral)
async def get_referral(referral_id: str, repository: Repository = Depends(get_repository)):
    return repository.referrals.get_by_id(referral_id)


@router.patch("/referrals/{referral_id}/status", response_model=Referral)
async def update_referral_status_endpoint(referral_id: str, payload: ReferralStatusUpdate,
                                          repository: Repository = Depends(get_repository)):
    """
    Change referral status; completed and cancelled referrals cannot change (409)
    """
    return update_referral_status(repository, referral_id, payload.status)


@router.post("/referrals/{referral_id}/schedule", response_model=Referral)
async def schedule_referral(referral_id: str, details: TransfusionDetails,
                            repository: Repository = Depends(get_repository)):
    return schedule_transfusion(repository, referral_id, details)
