"""
Data models

- Pydantic models are the typed entities stored by the repository
- Persisted JSON is decoded through these models at the storage boundary
- Input models validate what callers may set (ids, timestamps and derived
  fields are owned by the repository and the services)
"""
import datetime as dt
from datetime import date, datetime
from enum import Enum
from typing import Annotated, Any, Dict, List, Literal, Optional

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, field_validator

from bloodlink.core.dates import ensure_utc, utcnow


UtcDatetime = Annotated[datetime, AfterValidator(ensure_utc)]


class BloodType(str, Enum):
    A_POS = "A+"
    A_NEG = "A-"
    B_POS = "B+"
    B_NEG = "B-"
    AB_POS = "AB+"
    AB_NEG = "AB-"
    O_POS = "O+"
    O_NEG = "O-"


class Urgency(str, Enum):
    """
    Canonical urgency scale: low < normal < urgent < critical

    Legacy values are accepted on input: medium -> normal, high -> urgent.
    """
    LOW = "low"
    NORMAL = "normal"
    URGENT = "urgent"
    CRITICAL = "critical"


URGENCY_ALIASES = {
    "medium": Urgency.NORMAL.value,
    "high": Urgency.URGENT.value,
}


def normalize_urgency(value: Any) -> Any:
    if isinstance(value, str):
        lowered = value.strip().lower()
        return URGENCY_ALIASES.get(lowered, lowered)
    return value


class ReferralStatus(str, Enum):
    PENDING = "pending"
    MATCHED = "matched"
    SCHEDULED = "scheduled"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


TERMINAL_REFERRAL_STATUSES = frozenset({ReferralStatus.COMPLETED, ReferralStatus.CANCELLED})


class AppointmentStatus(str, Enum):
    SCHEDULED = "scheduled"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class UserRole(str, Enum):
    DONOR = "donor"
    RECIPIENT = "recipient"
    HOSPITAL = "hospital"
    ADMIN = "admin"


class Record(BaseModel):
    """
    Fields every stored entity carries
    """
    model_config = ConfigDict(extra="ignore")
    id: str                           = Field(...,  description="Unique identifier (generated by the repository)")
    created_at: UtcDatetime           = Field(default_factory=utcnow, description="Creation timestamp (UTC)")
    updated_at: UtcDatetime           = Field(default_factory=utcnow, description="Last modification timestamp (UTC)")
    version: int                      = Field(1,    description="Incremented on every write, used for optimistic concurrency")


class User(Record):
    """
    Account record; identity itself is owned by the external provider
    """
    email: str                        = Field(...,  description="Email address")
    name: str                         = Field(...,  description="Display name")
    role: UserRole                    = Field(...,  description="Account role")
    has_completed_profile: bool       = Field(False, description="Whether the donor/recipient profile has been filled in")


class Donor(Record):
    """
    Donor profile, one per user account

    is_available is a cached copy of the availability policy applied to
    last_donation_date; services recompute it on read.
    """
    user_id: str                              = Field(...,  description="Owning user account")
    name: str                                 = Field(...,  description="Donor full name")
    age: int                                  = Field(...,  description="Age in years at registration")
    blood_type: BloodType                     = Field(...,  description="ABO/Rh blood type (immutable)")
    phone: str                                = Field(...,  description="Phone number")
    email: Optional[str]                      = Field(None, description="Email address")
    address: Optional[str]                    = Field(None, description="Postal address")
    last_donation_date: Optional[UtcDatetime] = Field(None, description="Last completed donation, None if never donated")
    is_available: bool                        = Field(True, description="Cached eligibility flag")


class Recipient(Record):
    """
    Recipient profile, one per user account
    """
    user_id: str                        = Field(...,  description="Owning user account")
    name: str                           = Field(...,  description="Recipient full name")
    blood_type: BloodType               = Field(...,  description="ABO/Rh blood type (immutable)")
    urgency: Urgency                    = Field(Urgency.NORMAL, description="Clinical urgency")
    phone: str                          = Field(...,  description="Phone number")
    email: Optional[str]                = Field(None, description="Email address")
    preferred_hospital: Optional[str]   = Field(None, description="Preferred hospital (id or name)")
    medical_condition: Optional[str]    = Field(None, description="Short description of the condition")

    @field_validator("urgency", mode="before")
    @classmethod
    def validate_urgency(cls, value: Any) -> Any:
        return normalize_urgency(value)


class Hospital(Record):
    name: str                         = Field(...,  description="Hospital name")
    location: str                     = Field(...,  description="Location / area")
    phone: str                        = Field(...,  description="Phone number")
    blood_types: List[BloodType]      = Field(default_factory=list, description="Blood types the hospital stocks or serves")


class TransfusionDetails(BaseModel):
    """
    Scheduling sub-record of a referral
    """
    model_config = ConfigDict(str_strip_whitespace=True)
    appointment_date: date            = Field(...,  description="Day of the transfusion")
    time_slot: str                    = Field(...,  min_length=1, description="Time slot label, e.g. '09:00 AM'")
    notes: Optional[str]              = Field(None, description="Additional notes for both parties")


class Referral(Record):
    """
    Donor -> recipient referral at a hospital

    Name and blood type fields are snapshots taken when the referral was
    created so the referral still reads correctly if profiles change.
    """
    donor_id: str                                    = Field(...,  description="Donor profile id")
    recipient_id: str                                = Field(...,  description="Recipient profile id")
    hospital_id: str                                 = Field(...,  description="Hospital id")
    status: ReferralStatus                           = Field(ReferralStatus.PENDING, description="Lifecycle status")
    donor_name: str                                  = Field(...,  description="Donor name at creation")
    donor_blood_type: BloodType                      = Field(...,  description="Donor blood type at creation")
    recipient_name: str                              = Field(...,  description="Recipient name at creation")
    hospital_name: str                               = Field(...,  description="Hospital name at creation")
    transfusion_details: Optional[TransfusionDetails] = Field(None, description="Scheduling details, once scheduled")
    completed_at: Optional[UtcDatetime]              = Field(None, description="When the referral reached completed")


class Appointment(Record):
    user_id: str                      = Field(...,  description="Donor user account")
    hospital_id: str                  = Field(...,  description="Hospital id")
    date: dt.date                     = Field(...,  description="Appointment day")
    time_slot: str                    = Field(...,  min_length=1, description="Time slot label")
    status: AppointmentStatus         = Field(AppointmentStatus.SCHEDULED, description="Appointment status")


class Notification(Record):
    """
    In-app notification; append-only apart from the read flag
    """
    user_id: str                      = Field(...,  description="Target user account")
    message: str                      = Field(...,  description="Notification text")
    read: bool                        = Field(False, description="Whether the user has read it")
    type: Optional[str]               = Field(None, description="Notification kind, e.g. 'referral_created'")
    metadata: Dict[str, str]          = Field(default_factory=dict, description="Referenced entity ids")


class MatchCandidate(BaseModel):
    """
    Admin-facing donor/recipient pairing proposal
    """
    donor: Donor
    recipient: Recipient
    compatibility_score: int          = Field(..., ge=0, le=100)
    status: Literal["pending"]        = "pending"


# ---------------------------------------------------------------------------
# Input models
# ---------------------------------------------------------------------------

class UserInput(BaseModel):
    """
    Account registration; the id comes from the identity provider (X-User-ID)
    """
    email: str                        = Field(..., min_length=3, description="Email address")
    name: str                         = Field(..., min_length=1, description="Display name")
    role: UserRole                    = Field(..., description="Account role")


class DonorForm(BaseModel):
    """
    Donor profile completion form, as submitted by the donor
    """
    name: str                                  = Field(...,  min_length=1, description="Donor full name")
    age: int                                   = Field(...,  ge=18, le=65, description="Age in years (18-65)")
    blood_type: BloodType                      = Field(...,  description="ABO/Rh blood type")
    phone: str                                 = Field(...,  min_length=1, description="Phone number")
    email: Optional[str]                       = Field(None, description="Email address")
    address: Optional[str]                     = Field(None, description="Postal address")
    last_donation_date: Optional[UtcDatetime]  = Field(None, description="Last donation before registering, if any")


class DonorInput(DonorForm):
    """
    Donor profile bound to the owning user account
    """
    user_id: str                               = Field(...,  description="Owning user account")


class DonorUpdate(BaseModel):
    """
    Donor profile edit (blood type and availability are not editable)
    """
    model_config = ConfigDict(extra="forbid")
    name: Optional[str]               = Field(None, min_length=1)
    age: Optional[int]                = Field(None, ge=18, le=65)
    phone: Optional[str]              = Field(None, min_length=1)
    email: Optional[str]              = None
    address: Optional[str]            = None


class RecipientForm(BaseModel):
    """
    Recipient profile completion form, as submitted by the recipient
    """
    name: str                           = Field(...,  min_length=1, description="Recipient full name")
    blood_type: BloodType               = Field(...,  description="ABO/Rh blood type")
    urgency: Urgency                    = Field(Urgency.NORMAL, description="Clinical urgency")
    phone: str                          = Field(...,  min_length=1, description="Phone number")
    email: Optional[str]                = Field(None, description="Email address")
    preferred_hospital: Optional[str]   = Field(None, description="Preferred hospital (id or name)")
    medical_condition: Optional[str]    = Field(None, description="Short description of the condition")

    @field_validator("urgency", mode="before")
    @classmethod
    def validate_urgency(cls, value: Any) -> Any:
        return normalize_urgency(value)


class RecipientInput(RecipientForm):
    """
    Recipient profile bound to the owning user account
    """
    user_id: str                        = Field(...,  description="Owning user account")


class RecipientUpdate(BaseModel):
    """
    Recipient profile edit (blood type is not editable)
    """
    model_config = ConfigDict(extra="forbid")
    name: Optional[str]                 = Field(None, min_length=1)
    urgency: Optional[Urgency]          = None
    phone: Optional[str]                = Field(None, min_length=1)
    email: Optional[str]                = None
    preferred_hospital: Optional[str]   = None
    medical_condition: Optional[str]    = None

    @field_validator("urgency", mode="before")
    @classmethod
    def validate_urgency(cls, value: Any) -> Any:
        return normalize_urgency(value)


class HospitalInput(BaseModel):
    name: str                         = Field(..., min_length=1)
    location: str                     = Field(..., min_length=1)
    phone: str                        = Field(..., min_length=1)
    blood_types: List[BloodType]      = Field(default_factory=list)


class HospitalUpdate(BaseModel):
    model_config = ConfigDict(extra="forbid")
    name: Optional[str]               = Field(None, min_length=1)
    location: Optional[str]           = Field(None, min_length=1)
    phone: Optional[str]              = Field(None, min_length=1)
    blood_types: Optional[List[BloodType]] = None


class ReferralCreate(BaseModel):
    donor_id: str
    recipient_id: str
    hospital_id: str
    transfusion_details: Optional[TransfusionDetails] = None


class ReferralStatusUpdate(BaseModel):
    # Plain string so unknown values reach the lifecycle engine and are
    # rejected as invalid transitions
    status: str


class AppointmentCreate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)
    hospital_id: str
    date: dt.date
    time_slot: str                    = Field(..., min_length=1)


class AppointmentStatusUpdate(BaseModel):
    status: str
