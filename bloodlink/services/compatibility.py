"""
Blood type compatibility rules

Determines which donor blood types can donate to which recipient blood types,
and scores compatible pairs for ranking. Pure functions, no storage access.
"""
from datetime import datetime
from typing import Dict, FrozenSet, List, Optional, Union

from bloodlink.core.dates import add_months, ensure_utc, utcnow
from bloodlink.database.schemas import BloodType, Donor, Recipient, Urgency

# Donor type -> recipient types it can supply (ABO/Rh red cell compatibility)
COMPATIBILITY: Dict[BloodType, FrozenSet[BloodType]] = {
    BloodType.O_NEG: frozenset(BloodType),  # Universal donor
    BloodType.O_POS: frozenset({BloodType.O_POS, BloodType.A_POS, BloodType.B_POS, BloodType.AB_POS}),
    BloodType.A_NEG: frozenset({BloodType.A_NEG, BloodType.A_POS, BloodType.AB_NEG, BloodType.AB_POS}),
    BloodType.A_POS: frozenset({BloodType.A_POS, BloodType.AB_POS}),
    BloodType.B_NEG: frozenset({BloodType.B_NEG, BloodType.B_POS, BloodType.AB_NEG, BloodType.AB_POS}),
    BloodType.B_POS: frozenset({BloodType.B_POS, BloodType.AB_POS}),
    BloodType.AB_NEG: frozenset({BloodType.AB_NEG, BloodType.AB_POS}),
    BloodType.AB_POS: frozenset({BloodType.AB_POS}),  # Universal recipient
}

BASE_SCORE = 70
EXACT_MATCH_BONUS = 15
URGENCY_BONUS = {
    Urgency.CRITICAL: 25,
    Urgency.URGENT: 15,
}
RECENT_DONATION_PENALTY = 10
RECENT_DONATION_MONTHS = 3


def _as_blood_type(value: Union[BloodType, str]) -> Optional[BloodType]:
    try:
        return BloodType(value)
    except ValueError:
        return None


def is_compatible(donor_type: Union[BloodType, str], recipient_type: Union[BloodType, str]) -> bool:
    """
    Check if donor blood type can be given to the recipient blood type

    Args:
        donor_type: Donor's blood type (e.g., 'O-')
        recipient_type: Recipient's blood type (e.g., 'AB+')

    Returns:
        True if compatible, False otherwise (including unrecognized types)
    """
    donor = _as_blood_type(donor_type)
    recipient = _as_blood_type(recipient_type)
    if donor is None or recipient is None:
        return False
    return recipient in COMPATIBILITY[donor]


def compatible_recipient_types(donor_type: Union[BloodType, str]) -> List[BloodType]:
    """
    Blood types that can receive from the donor type
    """
    donor = _as_blood_type(donor_type)
    if donor is None:
        return []
    return [blood_type for blood_type in BloodType if blood_type in COMPATIBILITY[donor]]


def compatible_donor_types(recipient_type: Union[BloodType, str]) -> List[BloodType]:
    """
    Blood types that can donate to the recipient type
    """
    recipient = _as_blood_type(recipient_type)
    if recipient is None:
        return []
    return [donor for donor in BloodType if recipient in COMPATIBILITY[donor]]


def compatibility_score(donor: Donor, recipient: Recipient, now: Optional[datetime] = None) -> int:
    """
    Ranking heuristic for a donor/recipient pair, 0-100

    Starts at 70; +15 for an exact blood type match; +25 for a critical
    recipient, +15 for an urgent one; -10 when the donor gave blood within
    the last three months. Compatibility itself is checked separately.
    """
    now = ensure_utc(now) if now else utcnow()
    score = BASE_SCORE

    if donor.blood_type == recipient.blood_type:
        score += EXACT_MATCH_BONUS

    score += URGENCY_BONUS.get(recipient.urgency, 0)

    if donor.last_donation_date is not None:
        if now < add_months(ensure_utc(donor.last_donation_date), RECENT_DONATION_MONTHS):
            score -= RECENT_DONATION_PENALTY

    return max(0, min(100, score))
