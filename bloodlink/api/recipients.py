"""
Recipient profile endpoints
"""
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Request

from bloodlink.database.schemas import Donor, Recipient, RecipientForm, RecipientInput, RecipientUpdate
from bloodlink.database.storage import Repository
from bloodlink.api.utils import get_repository, get_user_id
from bloodlink.services.matching import get_compatible_donors
from bloodlink.services.profiles import create_recipient_profile, get_recipient_by_user_id, update_recipient_profile

router = APIRouter()


@router.post("/recipients", response_model=Recipient)
async def create_recipient(form: RecipientForm, request: Request,
                           repository: Repository = Depends(get_repository)):
    """
    Complete the recipient profile of the calling user (X-User-ID header)

    Returns 409 if the user already has a recipient profile.
    """
    recipient = RecipientInput(user_id=get_user_id(request), **form.model_dump())
    return create_recipient_profile(repository, recipient)


@router.get("/recipients", response_model=List[Recipient])
async def list_recipients(repository: Repository = Depends(get_repository)):
    return repository.recipients.list()


@router.get("/recipients/me", response_model=Recipient)
async def get_my_recipient_profile(request: Request, repository: Repository = Depends(get_repository)):
    user_id = get_user_id(request)
    recipient = get_recipient_by_user_id(repository, user_id)
    if not recipient:
        raise HTTPException(status_code=404, detail=f"No recipient profile found for user {user_id}")
    return recipient


@router.get("/recipients/{recipient_id}", response_model=Recipient)
async def get_recipient(recipient_id: str, repository: Repository = Depends(get_repository)):
    return repository.recipients.get_by_id(recipient_id)


@router.patch("/recipients/{recipient_id}", response_model=Recipient)
async def update_recipient(recipient_id: str, changes: RecipientUpdate,
                           repository: Repository = Depends(get_repository)):
    return update_recipient_profile(repository, recipient_id, changes)


@router.get("/recipients/{recipient_id}/compatible-donors", response_model=List[Donor])
async def list_compatible_donors(recipient_id: str, repository: Repository = Depends(get_repository)):
    """
    Available donors who can give to this recipient, best score first
    """
    return get_compatible_donors(repository, recipient_id)
