from datetime import UTC, datetime
from typing import Literal
from uuid import UUID, uuid4

from pydantic import BaseModel, Field

# --- Enums / Literals ---
UserRole = Literal["member", "admin"]
MemberStatus = Literal["pending", "approved", "rejected", "expired"]
MembershipLevel = Literal["Full", "Student", "Associate", "Corporate", "Honorary"]
DiscussionCategory = Literal[
    "aircraft_shares",
    "instructor_availability",
    "gear_for_sale",
    "flying_at_ytz",
    "general_aviation",
    "training_safety_proficiency",
    "wanted",
    "other",
]
PaymentMethod = Literal["stripe", "paypal", "cash", "wire"]
PaymentStatus = Literal["pending", "completed", "failed", "refunded"]

MEMBERSHIP_LEVELS: tuple[MembershipLevel, ...] = (
    "Full",
    "Student",
    "Associate",
    "Corporate",
    "Honorary",
)


def _utcnow() -> datetime:
    return datetime.now(UTC)


# --- Members ---

class Member(BaseModel):
    id: UUID = Field(default_factory=uuid4)
    email: str
    full_name: str | None = None
    role: UserRole = "member"
    status: MemberStatus = "pending"
    membership_level: MembershipLevel = "Full"
    membership_expires_at: datetime | None = None
    stripe_subscription_id: str | None = None
    stripe_customer_id: str | None = None
    paypal_subscription_id: str | None = None
    subscription_cancel_at_period_end: bool = False
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"

    @property
    def has_stripe_subscription(self) -> bool:
        return bool(self.stripe_subscription_id)

# --- Forum ---

class Thread(BaseModel):
    id: UUID = Field(default_factory=uuid4)
    title: str
    content: str
    category: DiscussionCategory = "other"
    created_by: UUID | None = None  # author may have been deleted
    author_email: str | None = None
    image_urls: list[str] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)

class ThreadWithData(Thread):
    comment_count: int = 0
    latest_comment_at: datetime | None = None

class Comment(BaseModel):
    id: UUID = Field(default_factory=uuid4)
    thread_id: UUID
    content: str
    created_by: UUID | None = None
    author_email: str | None = None
    created_at: datetime = Field(default_factory=_utcnow)

# --- Billing ---

class Payment(BaseModel):
    id: UUID = Field(default_factory=uuid4)
    user_id: UUID
    payment_method: PaymentMethod
    amount: float
    currency: str = "CAD"
    payment_date: datetime = Field(default_factory=_utcnow)
    membership_expires_at: datetime
    stripe_subscription_id: str | None = None
    paypal_subscription_id: str | None = None
    recorded_by: UUID | None = None
    notes: str | None = None
    status: PaymentStatus = "completed"
    created_at: datetime = Field(default_factory=_utcnow)

# --- Config ---

class SettingEntry(BaseModel):
    key: str
    value: str
    updated_at: datetime = Field(default_factory=_utcnow)
