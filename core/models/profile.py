# =============================================================================
# core/models/profile.py - User Profile Schemas
# =============================================================================
# A profile is one-to-one with a user and lives in the `profiles` table,
# keyed by `user_id`. Nested settings (preferences, stats, social links,
# privacy, account) are stored as JSON objects with snake_case keys and
# returned to clients in camelCase.
#
# Lifecycle: Absent -> Default (auto-created on first access) -> Customized
#
# Models:
# - Preferences / Stats / SocialLinks / Privacy / Account: nested settings
#   with their defaults
# - ProfileUpdate (+ nested *Update models): partial input for PUT /me
# - AvatarUpdate / PreferencesRequest: inputs for the narrow endpoints
# - ProfileResponse / PublicProfileResponse: what clients see
# =============================================================================

import math
import re
from datetime import datetime
from enum import Enum
from typing import Annotated, Any, Literal

from pydantic import (
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    HttpUrl,
    TypeAdapter,
    ValidationError,
    computed_field,
)
from pydantic.alias_generators import to_camel

_http_url = TypeAdapter(HttpUrl)
_PHONE_PATTERN = re.compile(r"^\+?[0-9\s\-().]{7,20}$")
PHONE_MIN_DIGITS = 7


class ProfileVisibility(str, Enum):
    """
    Who may read a profile through GET /api/profile/{userId}.

    - public: any authenticated user
    - friends: reserved; there is no friendship model, so only the owner
    - private: only the owner
    """
    PUBLIC = "public"
    FRIENDS = "friends"
    PRIVATE = "private"


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# =============================================================================
# Stored Settings (with defaults)
# =============================================================================

class Preferences(_CamelModel):
    theme: Literal["light", "dark", "auto"] = "auto"
    language: str = "en"
    timezone: str = "UTC"
    email_notifications: bool = True
    push_notifications: bool = True
    todo_reminders: bool = True


class Stats(_CamelModel):
    total_todos: int = 0
    completed_todos: int = 0
    streak_days: int = 0
    last_active: datetime | None = None


class SocialLinks(_CamelModel):
    github: str | None = None
    linkedin: str | None = None
    twitter: str | None = None
    instagram: str | None = None


class Privacy(_CamelModel):
    profile_visibility: ProfileVisibility = ProfileVisibility.PRIVATE
    show_stats: bool = False
    allow_messages: bool = False


class Account(_CamelModel):
    email_verified: bool = False
    two_factor_enabled: bool = False
    last_password_change: datetime | None = None
    account_created: datetime | None = None


# =============================================================================
# Field Checks
# =============================================================================
# Each check runs before type coercion so that wrong types get a readable
# message instead of being silently converted.

def _text(label: str, limit: int, trim: bool = False):
    def check(value: Any) -> str | None:
        if value is None:
            return None
        if not isinstance(value, str):
            raise ValueError(f"{label} must be a string")
        if trim:
            value = value.strip()
        if len(value) > limit:
            raise ValueError(f"{label} cannot exceed {limit} characters")
        return value
    return check


def _check_url(label: str, value: Any, required: bool = False) -> str | None:
    if value is None or (isinstance(value, str) and not value.strip()):
        if required:
            raise ValueError(f"{label} is required")
        return value.strip() if isinstance(value, str) else None
    if not isinstance(value, str):
        raise ValueError(f"{label} must be a string")
    value = value.strip()
    try:
        _http_url.validate_python(value)
    except ValidationError:
        raise ValueError(f"{label} must be a valid URL") from None
    return value


def _check_phone(value: Any) -> str | None:
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValueError("Phone must be a string")
    value = value.strip()
    if not value:
        return value
    digits = sum(ch.isdigit() for ch in value)
    if not _PHONE_PATTERN.match(value) or digits < PHONE_MIN_DIGITS:
        raise ValueError("Phone must be a valid phone number")
    return value


def _strict_bool(label: str):
    def check(value: Any) -> bool:
        if not isinstance(value, bool):
            raise ValueError(f"{label} must be a boolean value")
        return value
    return check


def _object(message: str):
    def check(value: Any) -> Any:
        if not isinstance(value, dict):
            raise ValueError(message)
        return value
    return check


FirstName = Annotated[str | None, BeforeValidator(_text("First name", 50, trim=True))]
LastName = Annotated[str | None, BeforeValidator(_text("Last name", 50, trim=True))]
DisplayName = Annotated[str | None, BeforeValidator(_text("Display name", 100, trim=True))]
Bio = Annotated[str | None, BeforeValidator(_text("Bio", 500))]
Location = Annotated[str | None, BeforeValidator(_text("Location", 100, trim=True))]
Phone = Annotated[str | None, BeforeValidator(_check_phone)]
Website = Annotated[str | None, BeforeValidator(lambda v: _check_url("Website", v))]
SocialLink = Annotated[str | None, BeforeValidator(_text("Social link", 200, trim=True))]
NotificationFlag = Annotated[bool | None, BeforeValidator(_strict_bool("Notification setting"))]
PrivacyFlag = Annotated[bool | None, BeforeValidator(_strict_bool("Privacy setting"))]


# =============================================================================
# Update Inputs
# =============================================================================

class _UpdateModel(_CamelModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="forbid",
    )


class PreferencesUpdate(_UpdateModel):
    theme: Literal["light", "dark", "auto"] | None = None
    language: Annotated[str | None, BeforeValidator(_text("Language", 10, trim=True))] = None
    timezone: Annotated[str | None, BeforeValidator(_text("Timezone", 50, trim=True))] = None
    email_notifications: NotificationFlag = None
    push_notifications: NotificationFlag = None
    todo_reminders: NotificationFlag = None


class SocialLinksUpdate(_UpdateModel):
    github: SocialLink = None
    linkedin: SocialLink = None
    twitter: SocialLink = None
    instagram: SocialLink = None


class PrivacyUpdate(_UpdateModel):
    profile_visibility: ProfileVisibility | None = None
    show_stats: PrivacyFlag = None
    allow_messages: PrivacyFlag = None


class ProfileUpdate(_UpdateModel):
    """
    Partial update for PUT /api/profile/me.

    Every field is optional. Nested objects are merged into the stored
    values key by key, so {"preferences": {"theme": "dark"}} leaves the
    other preferences as they were.

    Example:
        {"bio": "hi", "preferences": {"theme": "dark"}}
    """

    first_name: FirstName = None
    last_name: LastName = None
    display_name: DisplayName = None
    bio: Bio = None
    phone: Phone = None
    location: Location = None
    website: Website = None
    preferences: Annotated[
        PreferencesUpdate | None, BeforeValidator(_object("Preferences must be an object"))
    ] = None
    social_links: Annotated[
        SocialLinksUpdate | None, BeforeValidator(_object("Social links must be an object"))
    ] = None
    privacy: Annotated[
        PrivacyUpdate | None, BeforeValidator(_object("Privacy must be an object"))
    ] = None


class AvatarUpdate(_UpdateModel):
    """Input for PUT /api/profile/avatar."""

    avatar_url: Annotated[
        str, BeforeValidator(lambda v: _check_url("Avatar URL", v, required=True))
    ] = Field(default=None, validate_default=True)


class PreferencesRequest(_UpdateModel):
    """Input for PUT /api/profile/preferences."""

    preferences: Annotated[
        PreferencesUpdate, BeforeValidator(_object("Preferences object is required"))
    ]



# =============================================================================
# Responses
# =============================================================================

class ProfileResponse(_CamelModel):
    """The owner's full view of their profile."""

    id: str | None = None
    user: str
    first_name: str | None = None
    last_name: str | None = None
    display_name: str | None = None
    bio: str | None = None
    avatar: str | None = None
    phone: str | None = None
    location: str | None = None
    website: str | None = None
    preferences: Preferences = Field(default_factory=Preferences)
    stats: Stats = Field(default_factory=Stats)
    social_links: SocialLinks = Field(default_factory=SocialLinks)
    privacy: Privacy = Field(default_factory=Privacy)
    account: Account = Field(default_factory=Account)
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @computed_field(alias="fullName")
    @property
    def full_name(self) -> str:
        return full_name(self.first_name, self.last_name, self.display_name)

    @computed_field(alias="completionRate")
    @property
    def completion_rate(self) -> int:
        return completion_rate(self.stats.total_todos, self.stats.completed_todos)

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "ProfileResponse":
        return cls(
            id=row.get("id"),
            user=row["user_id"],
            first_name=row.get("first_name"),
            last_name=row.get("last_name"),
            display_name=row.get("display_name"),
            bio=row.get("bio"),
            avatar=row.get("avatar"),
            phone=row.get("phone"),
            location=row.get("location"),
            website=row.get("website"),
            preferences=Preferences(**(row.get("preferences") or {})),
            stats=Stats(**(row.get("stats") or {})),
            social_links=SocialLinks(**(row.get("social_links") or {})),
            privacy=Privacy(**(row.get("privacy") or {})),
            account=Account(**(row.get("account") or {})),
            created_at=row.get("created_at"),
            updated_at=row.get("updated_at"),
        )


class PublicProfileResponse(_CamelModel):
    """What other users may see. No privacy, account, phone or email."""

    user: str
    display_name: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    full_name: str
    bio: str | None = None
    avatar: str | None = None
    location: str | None = None
    website: str | None = None
    social_links: SocialLinks = Field(default_factory=SocialLinks)
    stats: Stats | None = None

    @classmethod
    def from_profile(cls, profile: ProfileResponse) -> "PublicProfileResponse":
        return cls(
            user=profile.user,
            display_name=profile.display_name,
            first_name=profile.first_name,
            last_name=profile.last_name,
            full_name=profile.full_name,
            bio=profile.bio,
            avatar=profile.avatar,
            location=profile.location,
            website=profile.website,
            social_links=profile.social_links,
            stats=profile.stats if profile.privacy.show_stats else None,
        )


# =============================================================================
# Derived Values
# =============================================================================

def full_name(first: str | None, last: str | None, display: str | None) -> str:
    if first and last:
        return f"{first} {last}"
    return display or "Anonymous"


def completion_rate(total: int, completed: int) -> int:
    if total <= 0:
        return 0
    # Halves round up
    return math.floor(completed * 100 / total + 0.5)


class StatsSummary(_CamelModel):
    """Aggregated todo statistics returned by GET /api/profile/stats."""

    total_todos: int = 0
    completed_todos: int = 0
    pending_todos: int = 0
    completion_rate: int = 0
    streak_days: int = 0
    last_active: datetime | None = None
