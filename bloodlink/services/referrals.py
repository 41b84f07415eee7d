"""
Referral lifecycle engine

pending -> matched | scheduled -> completed | cancelled

completed and cancelled are terminal. All checks run before the first write,
so a rejected operation leaves referrals, donors and notifications untouched.
"""
import logging
from datetime import datetime
from typing import List, Optional, Union

from bloodlink.core.dates import ensure_utc, utcnow
from bloodlink.core.errors import IncompatibilityError, InvalidTransitionError
from bloodlink.database.schemas import (
    Referral,
    ReferralStatus,
    TERMINAL_REFERRAL_STATUSES,
    TransfusionDetails,
)
from bloodlink.database.storage import Repository
from bloodlink.services.availability import check_and_update_donor_availability
from bloodlink.services.compatibility import is_compatible
from bloodlink.services.notifications import (
    REFERRAL_COMPLETED,
    REFERRAL_CREATED,
    REFERRAL_SCHEDULED,
    add_notification,
)

logger = logging.getLogger(__name__)


def _parse_status(referral: Referral, status: Union[ReferralStatus, str]) -> ReferralStatus:
    try:
        return ReferralStatus(status)
    except ValueError:
        raise InvalidTransitionError(
            referral.status.value, str(status),
            reason=f"Unknown referral status: {status!r}",
        )


def _ensure_not_terminal(referral: Referral, requested: ReferralStatus):
    if referral.status in TERMINAL_REFERRAL_STATUSES:
        logger.warning(
            "Rejected transition of referral %s from terminal status %s to %s",
            referral.id, referral.status.value, requested.value,
        )
        raise InvalidTransitionError(
            referral.status.value, requested.value,
            reason=f"Referral {referral.id} is already {referral.status.value}",
        )


def create_referral(repository: Repository, donor_id: str, recipient_id: str, hospital_id: str,
                    transfusion_details: Optional[TransfusionDetails] = None,
                    now: Optional[datetime] = None) -> Referral:
    """
    Create a pending referral between a compatible donor and recipient

    Raises:
        NotFoundError: donor, recipient or hospital does not exist
        IncompatibilityError: donor blood type cannot supply the recipient
    """
    now = ensure_utc(now) if now else utcnow()

    donor = repository.donors.get_by_id(donor_id)
    recipient = repository.recipients.get_by_id(recipient_id)
    hospital = repository.hospitals.get_by_id(hospital_id)

    if not is_compatible(donor.blood_type, recipient.blood_type):
        logger.warning(
            "Rejected referral: donor %s (%s) is incompatible with recipient %s (%s)",
            donor.id, donor.blood_type.value, recipient.id, recipient.blood_type.value,
        )
        raise IncompatibilityError(donor.blood_type.value, recipient.blood_type.value)

    referral = repository.referrals.create({
        "donor_id": donor.id,
        "recipient_id": recipient.id,
        "hospital_id": hospital.id,
        "status": ReferralStatus.PENDING,
        "donor_name": donor.name,
        "donor_blood_type": donor.blood_type,
        "recipient_name": recipient.name,
        "hospital_name": hospital.name,
        "transfusion_details": transfusion_details,
        "created_at": now,
    })
    logger.info(
        "Referral %s created: donor %s -> recipient %s at hospital %s",
        referral.id, donor.id, recipient.id, hospital.id,
    )

    metadata = {"referral_id": referral.id, "hospital_id": hospital.id}
    add_notification(
        repository, donor.user_id,
        f"New blood donation referral created with recipient {recipient.name} at {hospital.name}",
        type=REFERRAL_CREATED, metadata={**metadata, "recipient_id": recipient.id}, now=now,
    )
    add_notification(
        repository, recipient.user_id,
        f"New blood donation referral created with donor {donor.name} at {hospital.name}",
        type=REFERRAL_CREATED, metadata={**metadata, "donor_id": donor.id}, now=now,
    )
    return referral


def update_referral_status(repository: Repository, referral_id: str,
                           new_status: Union[ReferralStatus, str],
                           now: Optional[datetime] = None) -> Referral:
    """
    Move a referral to a new status

    Completing a referral records the donation on the donor (last donation
    date, availability) and notifies both parties.

    Raises:
        NotFoundError: referral (or, on completion, its donor/recipient) does not exist
        InvalidTransitionError: referral is terminal, or new_status is unknown
    """
    now = ensure_utc(now) if now else utcnow()

    referral = repository.referrals.get_by_id(referral_id)
    status = _parse_status(referral, new_status)
    _ensure_not_terminal(referral, status)

    donor = recipient = None
    if status == ReferralStatus.COMPLETED:
        donor = repository.donors.get_by_id(referral.donor_id)
        recipient = repository.recipients.get_by_id(referral.recipient_id)

    changes = {"updated_at": now}
    if status == ReferralStatus.COMPLETED:
        changes["completed_at"] = now
    updated = repository.referrals.update_status(
        referral.id, status, expected_version=referral.version, **changes
    )
    logger.info("Referral %s status changed: %s -> %s", referral.id, referral.status.value, status.value)

    if status == ReferralStatus.COMPLETED:
        repository.donors.update(donor.id, {"last_donation_date": now}, expected_version=donor.version)
        check_and_update_donor_availability(repository, donor.id, now)

        metadata = {"referral_id": referral.id, "hospital_id": referral.hospital_id}
        add_notification(
            repository, donor.user_id,
            f"Thank you for your donation! Your donation to {recipient.name} "
            f"at {referral.hospital_name} has been completed.",
            type=REFERRAL_COMPLETED, metadata={**metadata, "recipient_id": recipient.id}, now=now,
        )
        add_notification(
            repository, recipient.user_id,
            f"Your blood transfusion from donor {donor.name} at {referral.hospital_name} is complete.",
            type=REFERRAL_COMPLETED, metadata={**metadata, "donor_id": donor.id}, now=now,
        )

    return updated


def schedule_transfusion(repository: Repository, referral_id: str, details: TransfusionDetails,
                         now: Optional[datetime] = None) -> Referral:
    """
    Attach scheduling details and move the referral to scheduled
    """
    now = ensure_utc(now) if now else utcnow()

    referral = repository.referrals.get_by_id(referral_id)
    _ensure_not_terminal(referral, ReferralStatus.SCHEDULED)
    donor = repository.donors.get_by_id(referral.donor_id)
    recipient = repository.recipients.get_by_id(referral.recipient_id)

    updated = repository.referrals.update_status(
        referral.id, ReferralStatus.SCHEDULED, expected_version=referral.version,
        transfusion_details=details, updated_at=now,
    )
    logger.info(
        "Referral %s scheduled for %s at %s",
        referral.id, details.appointment_date.isoformat(), details.time_slot,
    )

    when = f"{details.appointment_date.isoformat()} at {details.time_slot}"
    metadata = {"referral_id": referral.id, "hospital_id": referral.hospital_id}
    add_notification(
        repository, donor.user_id,
        f"Your donation for {recipient.name} is scheduled at {referral.hospital_name} on {when}",
        type=REFERRAL_SCHEDULED, metadata=metadata, now=now,
    )
    add_notification(
        repository, recipient.user_id,
        f"Your transfusion from {donor.name} is scheduled at {referral.hospital_name} on {when}",
        type=REFERRAL_SCHEDULED, metadata=metadata, now=now,
    )
    return updated


def list_referrals(repository: Repository, status: Optional[Union[ReferralStatus, str]] = None) -> List[Referral]:
    """
    All referrals, newest first, optionally filtered by status
    """
    referrals = repository.referrals.list()
    if status is not None:
        referrals = [r for r in referrals if r.status == ReferralStatus(status)]
    referrals.sort(key=lambda r: r.created_at, reverse=True)
    return referrals


def list_referrals_for_user(repository: Repository, user_id: str) -> List[Referral]:
    """
    Referrals where the user is the donor or the recipient, newest first
    """
    donor_ids = {d.id for d in repository.donors.filter(user_id=user_id)}
    recipient_ids = {r.id for r in repository.recipients.filter(user_id=user_id)}
    referrals = [
        r for r in repository.referrals.list()
        if r.donor_id in donor_ids or r.recipient_id in recipient_ids
    ]
    referrals.sort(key=lambda r: r.created_at, reverse=True)
    return referrals
