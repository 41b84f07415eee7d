"""
Matching / ranking service

Ranks compatible counterparts using the compatibility rules and the
availability policy. Read-only apart from the availability refresh.
"""
import logging
from datetime import datetime
from typing import List, Optional, Set, Union

from bloodlink.core.dates import ensure_utc, utcnow
from bloodlink.database.schemas import (
    BloodType,
    Donor,
    MatchCandidate,
    Recipient,
    ReferralStatus,
    Urgency,
)
from bloodlink.database.storage import Repository
from bloodlink.services.availability import refresh_all_donor_availability
from bloodlink.services.compatibility import compatibility_score, is_compatible

logger = logging.getLogger(__name__)

# Ranking buckets: critical > urgent > normal/low
URGENCY_RANK = {
    Urgency.CRITICAL: 3,
    Urgency.URGENT: 2,
    Urgency.NORMAL: 1,
    Urgency.LOW: 1,
}


def urgency_rank(urgency: Urgency) -> int:
    return URGENCY_RANK.get(urgency, 1)


def _recipients_with_completed_referral(repository: Repository) -> Set[str]:
    return {
        referral.recipient_id
        for referral in repository.referrals.list()
        if referral.status == ReferralStatus.COMPLETED
    }


def _reference_donor(blood_type: BloodType) -> Donor:
    # Scores only depend on blood type and donation history; a donor who has
    # never donated is the neutral reference when only a type is known
    return Donor(id="", user_id="", name="", age=18, phone="", blood_type=blood_type)


def get_compatible_recipients(repository: Repository, donor_blood_type: Union[BloodType, str],
                              now: Optional[datetime] = None) -> List[Recipient]:
    """
    Recipients the donor type can supply, excluding anyone who already
    received a completed transfusion

    Ordered by urgency (desc), score (desc), then name (asc).
    """
    now = ensure_utc(now) if now else utcnow()
    donor_type = BloodType(donor_blood_type)
    reference = _reference_donor(donor_type)
    already_served = _recipients_with_completed_referral(repository)

    ranked = []
    for recipient in repository.recipients.list():
        if recipient.id in already_served:
            continue
        if not is_compatible(donor_type, recipient.blood_type):
            continue
        score = compatibility_score(reference, recipient, now)
        ranked.append((recipient, score))

    ranked.sort(key=lambda item: (-urgency_rank(item[0].urgency), -item[1], item[0].name.casefold()))
    logger.debug("Found %d compatible recipients for donor type %s", len(ranked), donor_type.value)
    return [recipient for recipient, _ in ranked]


def get_compatible_donors(repository: Repository, recipient_id: str,
                          now: Optional[datetime] = None) -> List[Donor]:
    """
    Available donors who can supply the recipient, best score first
    (ties broken by name)

    Raises NotFoundError if the recipient does not exist.
    """
    now = ensure_utc(now) if now else utcnow()
    recipient = repository.recipients.get_by_id(recipient_id)

    ranked = []
    for donor in refresh_all_donor_availability(repository, now):
        if not donor.is_available:
            continue
        if not is_compatible(donor.blood_type, recipient.blood_type):
            continue
        ranked.append((donor, compatibility_score(donor, recipient, now)))

    ranked.sort(key=lambda item: (-item[1], item[0].name.casefold()))
    return [donor for donor, _ in ranked]


def get_all_matches(repository: Repository, now: Optional[datetime] = None) -> List[MatchCandidate]:
    """
    Admin candidate list: every available donor x every compatible recipient

    Unlike get_compatible_recipients, recipients with completed referrals
    are kept; administrators see the full picture.
    Sorted by compatibility score (desc), then donor and recipient name.
    """
    now = ensure_utc(now) if now else utcnow()
    donors = [donor for donor in refresh_all_donor_availability(repository, now) if donor.is_available]
    recipients = repository.recipients.list()

    matches = []
    for donor in donors:
        for recipient in recipients:
            if not is_compatible(donor.blood_type, recipient.blood_type):
                continue
            matches.append(MatchCandidate(
                donor=donor,
                recipient=recipient,
                compatibility_score=compatibility_score(donor, recipient, now),
            ))

    matches.sort(key=lambda m: (-m.compatibility_score, m.donor.name.casefold(), m.recipient.name.casefold()))
    logger.info("Generated %d match candidates from %d available donors", len(matches), len(donors))
    return matches
