"""
Donor and recipient profiles

One donor profile and one recipient profile per user account at most.
"""
import logging
from datetime import datetime
from typing import Optional

from bloodlink.core.errors import DuplicateProfileError
from bloodlink.database.schemas import (
    Donor,
    DonorInput,
    DonorUpdate,
    Recipient,
    RecipientInput,
    RecipientUpdate,
)
from bloodlink.database.storage import Repository
from bloodlink.services.availability import check_and_update_donor_availability, compute_availability

logger = logging.getLogger(__name__)


def _mark_profile_completed(repository: Repository, user_id: str):
    user = repository.users.find(user_id)
    if user is not None and not user.has_completed_profile:
        repository.users.update(user.id, {"has_completed_profile": True}, expected_version=user.version)


def get_donor_by_user_id(repository: Repository, user_id: str) -> Optional[Donor]:
    donors = repository.donors.filter(user_id=user_id)
    return donors[0] if donors else None


def get_recipient_by_user_id(repository: Repository, user_id: str) -> Optional[Recipient]:
    recipients = repository.recipients.filter(user_id=user_id)
    return recipients[0] if recipients else None


def create_donor_profile(repository: Repository, data: DonorInput, now: Optional[datetime] = None) -> Donor:
    """
    Register a donor profile for a user

    Raises DuplicateProfileError if the user already has one.
    """
    if get_donor_by_user_id(repository, data.user_id) is not None:
        raise DuplicateProfileError("donor", data.user_id)

    payload = data.model_dump()
    payload["is_available"] = compute_availability(data.last_donation_date, now)
    donor = repository.donors.create(payload)
    _mark_profile_completed(repository, data.user_id)

    logger.info("Donor profile %s created for user %s (%s)", donor.id, data.user_id, donor.blood_type.value)
    return donor


def create_recipient_profile(repository: Repository, data: RecipientInput) -> Recipient:
    """
    Register a recipient profile for a user

    Raises DuplicateProfileError if the user already has one.
    """
    if get_recipient_by_user_id(repository, data.user_id) is not None:
        raise DuplicateProfileError("recipient", data.user_id)

    recipient = repository.recipients.create(data.model_dump())
    _mark_profile_completed(repository, data.user_id)

    logger.info("Recipient profile %s created for user %s (%s)", recipient.id, data.user_id, recipient.blood_type.value)
    return recipient


def update_donor_profile(repository: Repository, donor_id: str, changes: DonorUpdate) -> Donor:
    donor = repository.donors.get_by_id(donor_id)
    updates = changes.model_dump(exclude_unset=True)
    if updates:
        repository.donors.update(donor.id, updates, expected_version=donor.version)
    return check_and_update_donor_availability(repository, donor.id)


def update_recipient_profile(repository: Repository, recipient_id: str, changes: RecipientUpdate) -> Recipient:
    recipient = repository.recipients.get_by_id(recipient_id)
    updates = changes.model_dump(exclude_unset=True)
    if not updates:
        return recipient
    return repository.recipients.update(recipient.id, updates, expected_version=recipient.version)
