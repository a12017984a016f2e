"""
Pydantic Schemas - Request/Response Validation

All API request and response schemas in one file for simplicity.
Documents are stored snake_case; the wire format is camelCase.
"""

import re
from datetime import datetime, timezone
from enum import Enum
from typing import Annotated, List, Optional

from pydantic import AfterValidator, BaseModel, ConfigDict, EmailStr, Field, HttpUrl, field_validator
from pydantic.alias_generators import to_camel


# ============================================================
# ENUMS
# ============================================================

class UserRole(str, Enum):
    user = "user"
    employer = "employer"
    admin = "admin"


class JobType(str, Enum):
    full_time = "Full-time"
    part_time = "Part-time"
    contract = "Contract"
    freelance = "Freelance"
    internship = "Internship"


class JobStatus(str, Enum):
    active = "active"
    closed = "closed"
    draft = "draft"


class ApplicationStatus(str, Enum):
    pending = "pending"
    reviewed = "reviewed"
    accepted = "accepted"
    rejected = "rejected"


class ConnectionStatus(str, Enum):
    pending = "pending"
    accepted = "accepted"
    rejected = "rejected"


class ConnectionDirection(str, Enum):
    incoming = "incoming"
    outgoing = "outgoing"


class PostVisibility(str, Enum):
    public = "public"
    connections = "connections"
    private = "private"


# ============================================================
# FIELD RULES
# ============================================================

WALLET_ADDRESS_RE = re.compile(r"^0x[a-fA-F0-9]{40}$")
LINKEDIN_URL_RE = re.compile(r"^https?://(www\.)?linkedin\.com/in/[\w-]+/?$")


def check_length(value: Optional[str], min_length: int, max_length: int, message: str) -> Optional[str]:
    """Trim ``value`` and enforce its length. None passes through (partial updates)."""
    if value is None:
        return value
    value = value.strip()
    if not min_length <= len(value) <= max_length:
        raise ValueError(message)
    return value


def clean_skills(skills: Optional[List[str]]) -> Optional[List[str]]:
    if skills is None:
        return skills
    return [skill.strip() for skill in skills if skill and skill.strip()]


def check_wallet_address(value: Optional[str]) -> Optional[str]:
    if value and not WALLET_ADDRESS_RE.match(value):
        raise ValueError("Please enter a valid Ethereum wallet address")
    return value or None


def to_naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    """MongoDB hands back naive UTC datetimes; store the same shape."""
    if value is not None and value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def as_utc(value: datetime) -> datetime:
    """Stored datetimes are naive UTC; mark them so JSON carries the offset."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value


UtcDatetime = Annotated[datetime, AfterValidator(as_utc)]


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        use_enum_values=True,
        validate_default=True
    )


# ============================================================
# AUTH SCHEMAS
# ============================================================

class RegisterRequest(CamelModel):
    name: str
    email: EmailStr
    password: str
    role: UserRole = UserRole.user
    wallet_address: Optional[str] = None

    @field_validator("name")
    @classmethod
    def check_name(cls, v):
        return check_length(v, 2, 100, "Name must be between 2 and 100 characters")

    @field_validator("password")
    @classmethod
    def check_password(cls, v):
        if len(v) < 6:
            raise ValueError("Password must be at least 6 characters")
        return v

    @field_validator("role")
    @classmethod
    def check_role(cls, v):
        if v in (UserRole.admin, UserRole.admin.value):
            raise ValueError("Role must be user or employer")
        return v

    @field_validator("wallet_address")
    @classmethod
    def check_wallet(cls, v):
        return check_wallet_address(v)


class LoginRequest(CamelModel):
    email: EmailStr
    password: str


# ============================================================
# USER SCHEMAS
# ============================================================

class ProfileUpdate(CamelModel):
    name: Optional[str] = None
    bio: Optional[str] = None
    location: Optional[str] = None
    linked_in: Optional[str] = Field(None, alias="linkedIn")
    skills: Optional[List[str]] = None
    wallet_address: Optional[str] = None
    avatar: Optional[HttpUrl] = None

    @field_validator("name")
    @classmethod
    def check_name(cls, v):
        return check_length(v, 2, 100, "Name must be between 2 and 100 characters")

    @field_validator("bio")
    @classmethod
    def check_bio(cls, v):
        return check_length(v, 0, 500, "Bio cannot exceed 500 characters")

    @field_validator("location")
    @classmethod
    def check_location(cls, v):
        return check_length(v, 0, 100, "Location cannot exceed 100 characters")

    @field_validator("linked_in")
    @classmethod
    def check_linked_in(cls, v):
        if v and not LINKEDIN_URL_RE.match(v.strip()):
            raise ValueError("Please enter a valid LinkedIn URL")
        return v.strip() if v else v

    @field_validator("skills")
    @classmethod
    def check_skills(cls, v):
        return clean_skills(v)

    @field_validator("wallet_address")
    @classmethod
    def check_wallet(cls, v):
        return check_wallet_address(v)


class ConnectionRespond(CamelModel):
    status: ConnectionStatus

    @field_validator("status")
    @classmethod
    def check_status(cls, v):
        if v in (ConnectionStatus.pending, ConnectionStatus.pending.value):
            raise ValueError("Status must be accepted or rejected")
        return v


class UserSummary(CamelModel):
    id: str
    name: Optional[str] = None
    avatar: Optional[str] = None


class ConnectionResponse(CamelModel):
    user: UserSummary
    status: ConnectionStatus
    direction: Optional[ConnectionDirection] = None
    created_at: Optional[UtcDatetime] = None
    responded_at: Optional[UtcDatetime] = None


class UserPublic(CamelModel):
    id: str
    name: str
    avatar: Optional[str] = None
    bio: Optional[str] = None
    location: Optional[str] = None
    linked_in: Optional[str] = Field(None, alias="linkedIn")
    skills: List[str] = []
    role: Optional[UserRole] = None
    is_verified: bool = False
    profile_views: int = 0
    connections: List[ConnectionResponse] = []


class UserPrivate(UserPublic):
    email: str
    wallet_address: Optional[str] = None
    created_at: Optional[UtcDatetime] = None


class AuthResponse(CamelModel):
    success: bool = True
    token: str
    user: UserPrivate


class TokenRefreshResponse(CamelModel):
    success: bool = True
    token: str


class CurrentUserResponse(CamelModel):
    user: UserPrivate


class ProfileUpdateResponse(CamelModel):
    success: bool = True
    user: UserPrivate


class UserProfileResponse(CamelModel):
    user: UserPublic


class ConnectionRequestsResponse(CamelModel):
    incoming: List[ConnectionResponse]
    outgoing: List[ConnectionResponse]


# ============================================================
# PAGINATION
# ============================================================

class Pagination(CamelModel):
    current: int
    pages: int
    total: int


class UserSearchResponse(CamelModel):
    users: List[UserPublic]
    pagination: Pagination


# ============================================================
# JOB SCHEMAS
# ============================================================

class JobCreate(CamelModel):
    title: str
    company: str
    location: str
    type: JobType
    salary: str
    description: str
    requirements: str
    skills: List[str]

    @field_validator("title")
    @classmethod
    def check_title(cls, v):
        return check_length(v, 5, 200, "Title must be between 5 and 200 characters")

    @field_validator("company")
    @classmethod
    def check_company(cls, v):
        return check_length(v, 2, 100, "Company name must be between 2 and 100 characters")

    @field_validator("location")
    @classmethod
    def check_location(cls, v):
        return check_length(v, 2, 100, "Location must be between 2 and 100 characters")

    @field_validator("salary")
    @classmethod
    def check_salary(cls, v):
        return check_length(v, 1, 100, "Salary is required")

    @field_validator("description")
    @classmethod
    def check_description(cls, v):
        return check_length(v, 50, 2000, "Description must be between 50 and 2000 characters")

    @field_validator("requirements")
    @classmethod
    def check_requirements(cls, v):
        return check_length(v, 20, 1500, "Requirements must be between 20 and 1500 characters")

    @field_validator("skills")
    @classmethod
    def check_skills(cls, v):
        skills = clean_skills(v)
        if not skills:
            raise ValueError("At least one skill is required")
        return skills


class JobUpdate(JobCreate):
    """Partial update. Every field optional, same rules when present."""
    title: Optional[str] = None
    company: Optional[str] = None
    location: Optional[str] = None
    type: Optional[JobType] = None
    salary: Optional[str] = None
    description: Optional[str] = None
    requirements: Optional[str] = None
    skills: Optional[List[str]] = None
    status: Optional[JobStatus] = None
    featured: Optional[bool] = None
    expires_at: Optional[datetime] = None

    @field_validator("skills")
    @classmethod
    def check_skills(cls, v):
        if v is None:
            return v
        skills = clean_skills(v)
        if not skills:
            raise ValueError("At least one skill is required")
        return skills

    @field_validator("expires_at")
    @classmethod
    def check_expires_at(cls, v):
        return to_naive_utc(v)


class ApplicationCreate(CamelModel):
    cover_letter: Optional[str] = ""

    @field_validator("cover_letter")
    @classmethod
    def check_cover_letter(cls, v):
        return check_length(v, 0, 1000, "Cover letter cannot exceed 1000 characters") or ""


class ApplicationStatusUpdate(CamelModel):
    status: ApplicationStatus


class ApplicationResponse(CamelModel):
    user: UserSummary
    status: ApplicationStatus
    applied_at: Optional[UtcDatetime] = None
    updated_at: Optional[UtcDatetime] = None
    cover_letter: Optional[str] = ""


class JobResponse(CamelModel):
    id: str
    title: str
    company: str
    location: str
    type: JobType
    salary: str
    description: str
    requirements: str
    skills: List[str] = []
    posted_by: UserSummary
    applications: List[ApplicationResponse] = []
    status: JobStatus
    views: int = 0
    featured: bool = False
    expires_at: Optional[UtcDatetime] = None
    created_at: Optional[UtcDatetime] = None
    updated_at: Optional[UtcDatetime] = None


class JobListResponse(CamelModel):
    jobs: List[JobResponse]
    pagination: Pagination


class JobDetailResponse(CamelModel):
    job: JobResponse


class JobMutationResponse(CamelModel):
    success: bool = True
    job: JobResponse


class ApplicationStatusResponse(CamelModel):
    success: bool = True
    application: ApplicationResponse


# ============================================================
# POST SCHEMAS
# ============================================================

class PostCreate(CamelModel):
    content: str
    image: Optional[HttpUrl] = None
    visibility: PostVisibility = PostVisibility.public

    @field_validator("content")
    @classmethod
    def check_content(cls, v):
        return check_length(v, 1, 1000, "Content must be between 1 and 1000 characters")


class CommentCreate(CamelModel):
    content: str

    @field_validator("content")
    @classmethod
    def check_content(cls, v):
        return check_length(v, 1, 500, "Comment must be between 1 and 500 characters")


class LikeResponse(CamelModel):
    user: str
    created_at: Optional[UtcDatetime] = None


class CommentResponse(CamelModel):
    id: str
    user: UserSummary
    content: str
    created_at: Optional[UtcDatetime] = None


class PostResponse(CamelModel):
    id: str
    author: UserSummary
    content: str
    image: Optional[str] = None
    visibility: PostVisibility
    likes: List[LikeResponse] = []
    comments: List[CommentResponse] = []
    created_at: Optional[UtcDatetime] = None
    updated_at: Optional[UtcDatetime] = None


class PostListResponse(CamelModel):
    posts: List[PostResponse]
    pagination: Pagination


class PostMutationResponse(CamelModel):
    success: bool = True
    post: PostResponse


class LikeToggleResponse(CamelModel):
    success: bool = True
    liked: bool
    like_count: int


class CommentAddedResponse(CamelModel):
    success: bool = True
    comment: CommentResponse
    comment_count: int


# ============================================================
# GENERIC SCHEMAS
# ============================================================

class MessageResponse(CamelModel):
    message: str
    success: bool = True


class ValidationErrorItem(CamelModel):
    field: str
    message: str


class ValidationErrorResponse(CamelModel):
    errors: List[ValidationErrorItem]


class ErrorResponse(CamelModel):
    message: str
