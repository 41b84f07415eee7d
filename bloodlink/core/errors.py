"""
Domain errors

Every rejected operation raises one of these. Nothing is persisted and no
notification is emitted when they are raised. The API layer maps them to
HTTP status codes in main.py.
"""
from typing import Optional


class BloodLinkError(Exception):
    """Base class for all rejected operations"""
    kind = "error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(BloodLinkError):
    """Referenced donor/recipient/hospital/referral/appointment/notification does not exist"""
    kind = "not_found"

    def __init__(self, entity: str, entity_id: str):
        super().__init__(f"{entity} not found: {entity_id}")
        self.entity = entity
        self.entity_id = entity_id


class IncompatibilityError(BloodLinkError):
    """Donor blood type cannot supply the recipient blood type"""
    kind = "incompatible"

    def __init__(self, donor_type: str, recipient_type: str):
        super().__init__(
            f"Donor blood type {donor_type} is not compatible with recipient blood type {recipient_type}"
        )
        self.donor_type = donor_type
        self.recipient_type = recipient_type


class InvalidTransitionError(BloodLinkError):
    """Status change out of a terminal state, or to an unknown status"""
    kind = "invalid_transition"

    def __init__(self, current: Optional[str], requested: str, reason: Optional[str] = None):
        message = reason or f"Cannot change status from {current} to {requested}"
        super().__init__(message)
        self.current = current
        self.requested = requested


class ConflictError(BloodLinkError):
    """Booking collision, or a write based on a stale version of a record"""
    kind = "conflict"


class DuplicateProfileError(BloodLinkError):
    """User already has a donor (or recipient) profile"""
    kind = "duplicate_profile"

    def __init__(self, profile_type: str, user_id: str):
        super().__init__(f"User {user_id} already has a {profile_type} profile")
        self.profile_type = profile_type
        self.user_id = user_id


class RateLimitedError(BloodLinkError):
    """Too many attempts for the same key inside the rate limit window"""
    kind = "rate_limited"

    def __init__(self, key: str):
        super().__init__(f"Too many attempts for {key}, try again later")
        self.key = key
