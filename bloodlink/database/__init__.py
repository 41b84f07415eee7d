"""
Database module

Contains both data models (schemas) and storage operations.
"""

# Export schemas
from bloodlink.database.schemas import (
    BloodType,
    Urgency,
    ReferralStatus,
    AppointmentStatus,
    UserRole,
    User,
    UserInput,
    Donor,
    Recipient,
    Hospital,
    Referral,
    TransfusionDetails,
    Appointment,
    Notification,
    MatchCandidate,
)

# Export storage
from bloodlink.database.storage import (
    read_json,
    write_json,
    EntityStore,
    ReferralStore,
    MemoryBackend,
    JsonFileBackend,
    Repository,
)

__all__ = [
    # Schemas
    "BloodType",
    "Urgency",
    "ReferralStatus",
    "AppointmentStatus",
    "UserRole",
    "User",
    "UserInput",
    "Donor",
    "Recipient",
    "Hospital",
    "Referral",
    "TransfusionDetails",
    "Appointment",
    "Notification",
    "MatchCandidate",
    # Storage
    "read_json",
    "write_json",
    "EntityStore",
    "ReferralStore",
    "MemoryBackend",
    "JsonFileBackend",
    "Repository",
]
