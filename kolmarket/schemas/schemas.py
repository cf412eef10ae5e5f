"""
Pydantic Schemas - Request/Response Validation

All API request and response schemas in one file for simplicity.
Request bodies use the camelCase keys the web client sends (userId, campaignId, ...).
Required-field checks live in the routes so a missing field is a 400, not a 422.
"""

from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, List, Any
from datetime import datetime
from enum import Enum


# ============================================================
# ENUMS
# ============================================================

class UserRole(str, Enum):
    business = "business"
    kol = "kol"
    admin = "admin"


class CampaignStatus(str, Enum):
    draft = "draft"
    active = "active"
    paused = "paused"
    completed = "completed"
    cancelled = "cancelled"


class ApplicationStatus(str, Enum):
    applied = "applied"
    invited = "invited"
    accepted = "accepted"
    declined = "declined"
    completed = "completed"


class ContactRequestStatus(str, Enum):
    in_progress = "in_progress"
    withdrawn = "withdrawn"


class VerificationStatus(str, Enum):
    pending = "pending"
    verified = "verified"
    rejected = "rejected"


class WireModel(BaseModel):
    """Accepts both alias and field names; numeric ids arrive as strings."""
    model_config = ConfigDict(populate_by_name=True, coerce_numbers_to_str=True)


# ============================================================
# CONTACT REQUEST SCHEMAS
# ============================================================

class KolDescriptor(WireModel):
    id: Optional[str] = None
    handle: Optional[str] = None
    display_name: Optional[str] = None

class ContactRequestCreate(WireModel):
    user_id: Optional[str] = Field(None, alias="userId")
    campaign_id: Optional[str] = Field(None, alias="campaignId")
    campaign_title: Optional[str] = Field(None, alias="campaignTitle")
    kol: Optional[KolDescriptor] = None

class ContactRequestResponse(BaseModel):
    id: str
    campaign_id: str
    campaign_title: Optional[str] = None
    requester_id: str
    kol_id: str
    kol_handle: Optional[str] = None
    kol_display_name: Optional[str] = None
    status: ContactRequestStatus
    requested_at: datetime
    withdrawn_at: Optional[datetime] = None

class ContactRequestListResponse(BaseModel):
    success: bool = True
    data: List[ContactRequestResponse] = []


# ============================================================
# CAMPAIGN SCHEMAS
# ============================================================

class CampaignCreate(WireModel):
    user_id: Optional[str] = Field(None, alias="userId")
    title: Optional[str] = None
    description: Optional[str] = None
    budget: Optional[float] = Field(None, ge=0)
    requirements: Optional[Any] = None

class CampaignResponse(BaseModel):
    id: str
    business_id: str
    title: str
    description: Optional[str] = None
    budget: Optional[float] = None
    requirements: Optional[Any] = None
    status: CampaignStatus
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

class CampaignListResponse(BaseModel):
    success: bool = True
    data: List[CampaignResponse] = []

class CampaignDetailResponse(BaseModel):
    success: bool = True
    data: CampaignResponse


# ============================================================
# APPLICATION SCHEMAS
# ============================================================

class ApplicationCreate(WireModel):
    user_id: Optional[str] = Field(None, alias="userId")
    message: Optional[str] = None

class ApplicationResponse(BaseModel):
    id: str
    campaign_id: str
    kol_id: str
    status: ApplicationStatus
    message: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

class ApplicationDetailResponse(BaseModel):
    success: bool = True
    data: ApplicationResponse

class WithdrawalRequest(WireModel):
    user_id: Optional[str] = Field(None, alias="userId")
    reason: Optional[str] = None


# ============================================================
# PROFILE SCHEMAS
# ============================================================

class ProfileUpdate(WireModel):
    user_id: Optional[str] = Field(None, alias="userId")
    display_name: Optional[str] = None
    bio: Optional[str] = None
    youtube_url: Optional[str] = Field(None, alias="youtubeUrl")
    twitter_handle: Optional[str] = Field(None, alias="twitterHandle")
    language: Optional[str] = None

class KolSummary(BaseModel):
    id: str
    display_name: Optional[str] = None
    bio: Optional[str] = None
    categories: List[Any] = []
    audience_metrics: Optional[Any] = None
    social_links: List[Any] = []


# ============================================================
# GENERIC SCHEMAS
# ============================================================

class MessageResponse(BaseModel):
    message: str
    success: bool = True

class DataResponse(BaseModel):
    success: bool = True
    data: Any = None

class ErrorResponse(BaseModel):
    error: str
