"""
Donor availability policy

A donor is available when they have never donated, or when the cooldown
(three calendar months by default) has passed since their last donation.
The stored Donor.is_available flag is only a cache of this computation.
"""
import logging
from datetime import datetime
from typing import List, Optional

from bloodlink.core.config import DONATION_COOLDOWN_MONTHS
from bloodlink.core.dates import add_months, ensure_utc, utcnow
from bloodlink.database.schemas import Donor
from bloodlink.database.storage import Repository

logger = logging.getLogger(__name__)


def next_eligible_date(last_donation_date: Optional[datetime],
                       cooldown_months: int = DONATION_COOLDOWN_MONTHS) -> Optional[datetime]:
    """
    First moment the donor may donate again, None if they never donated
    """
    if last_donation_date is None:
        return None
    return add_months(ensure_utc(last_donation_date), cooldown_months)


def compute_availability(last_donation_date: Optional[datetime], now: Optional[datetime] = None,
                         cooldown_months: int = DONATION_COOLDOWN_MONTHS) -> bool:
    """
    Whether a donor with this last donation date may donate at `now`

    Uses calendar months (same day N months later, clamped to month end),
    not a fixed number of days.
    """
    if last_donation_date is None:
        return True
    now = ensure_utc(now) if now else utcnow()
    return now >= next_eligible_date(last_donation_date, cooldown_months)


def check_and_update_donor_availability(repository: Repository, donor_id: str,
                                        now: Optional[datetime] = None) -> Donor:
    """
    Recompute a donor's availability and persist it only if it changed

    Raises NotFoundError if the donor does not exist.
    """
    donor = repository.donors.get_by_id(donor_id)
    available = compute_availability(donor.last_donation_date, now)
    if available == donor.is_available:
        return donor

    logger.info("Donor %s availability changed: %s -> %s", donor_id, donor.is_available, available)
    return repository.donors.update(
        donor_id,
        {"is_available": available},
        expected_version=donor.version,
    )


def refresh_all_donor_availability(repository: Repository, now: Optional[datetime] = None) -> List[Donor]:
    """
    Bring every donor's cached flag in line with the policy

    Returns the donors as they are after the refresh.
    """
    now = ensure_utc(now) if now else utcnow()
    refreshed = []
    for donor in repository.donors.list():
        available = compute_availability(donor.last_donation_date, now)
        if available != donor.is_available:
            logger.info("Donor %s availability changed: %s -> %s", donor.id, donor.is_available, available)
            donor = repository.donors.update(donor.id, {"is_available": available}, expected_version=donor.version)
        refreshed.append(donor)
    return refreshed
