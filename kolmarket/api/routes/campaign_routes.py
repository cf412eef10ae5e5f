"""
Campaign Routes

GET /campaigns - Active campaigns, or a business's own (role=business&userId=...)
POST /campaigns/create - Create a campaign
GET /campaigns/{id} - Get campaign details
POST /campaigns/{id} - Apply to a campaign (KOL)
GET /campaigns/{id}/applications - Applicants with profile/analytics, filterable
"""

import logging
from uuid import uuid4

from fastapi import APIRouter, HTTPException, Query
from sqlalchemy import text
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from typing import Optional

from kolmarket.db.postgres import get_db_session, execute_raw_sql
from kolmarket.services.application_service import (
    list_campaign_applications, enrich_applications, filter_applications
)
from kolmarket.schemas.schemas import (
    CampaignCreate, CampaignListResponse, CampaignDetailResponse,
    ApplicationCreate, ApplicationDetailResponse, ApplicationStatus,
    CampaignStatus, DataResponse, UserRole
)
from kolmarket.utils.clock import utc_now
from kolmarket.utils.json_columns import encode_json, decode_row

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/campaigns", tags=["Campaigns"])

CAMPAIGN_COLUMNS = "id, business_id, title, description, budget, requirements, status, created_at, updated_at"


def fetch_campaign(campaign_id: str) -> Optional[dict]:
    rows = execute_raw_sql(f"SELECT {CAMPAIGN_COLUMNS} FROM campaigns WHERE id = :id", {"id": campaign_id})
    return decode_row(rows[0], ["requirements"]) if rows else None


@router.get("", response_model=CampaignListResponse)
async def list_campaigns(
    role: Optional[str] = Query(None),
    user_id: Optional[str] = Query(None, alias="userId")
):
    """
    Businesses see their own campaigns (everything but cancelled).
    Everyone else browses active campaigns.
    """
    if role == UserRole.business.value and user_id:
        sql = f"SELECT {CAMPAIGN_COLUMNS} FROM campaigns WHERE business_id = :uid AND status != :status"
        params = {"uid": user_id, "status": CampaignStatus.cancelled.value}
    else:
        sql = f"SELECT {CAMPAIGN_COLUMNS} FROM campaigns WHERE status = :status"
        params = {"status": CampaignStatus.active.value}
    sql += " ORDER BY created_at DESC"

    try:
        results = execute_raw_sql(sql, params)
    except SQLAlchemyError as e:
        logger.error("Campaigns fetch error: %s", e)
        raise HTTPException(status_code=500, detail="Failed to fetch campaigns")

    return CampaignListResponse(data=[decode_row(r, ["requirements"]) for r in results])


@router.post("/create", response_model=CampaignListResponse)
async def create_campaign(data: CampaignCreate):
    """Create an active campaign owned by userId."""
    if not data.user_id or not data.title:
        raise HTTPException(status_code=400, detail="User ID and title required")

    campaign_id = str(uuid4())
    now = utc_now()
    try:
        with get_db_session() as db:
            db.execute(
                text("""
                    INSERT INTO campaigns (id, business_id, title, description, budget, requirements,
                        status, created_at, updated_at)
                    VALUES (:id, :business_id, :title, :description, :budget, :requirements,
                        :status, :now, :now)
                """),
                {
                    "id": campaign_id, "business_id": data.user_id, "title": data.title,
                    "description": data.description, "budget": data.budget,
                    "requirements": encode_json(data.requirements),
                    "status": CampaignStatus.active.value, "now": now
                }
            )
        campaign = fetch_campaign(campaign_id)
    except SQLAlchemyError as e:
        logger.error("Campaign creation error: %s", e)
        raise HTTPException(status_code=500, detail="Failed to create campaign")

    logger.info("Campaign %s created by %s", campaign_id, data.user_id)
    return CampaignListResponse(data=[campaign])


@router.get("/{campaign_id}", response_model=CampaignDetailResponse)
async def get_campaign(campaign_id: str):
    """Get details of a specific campaign."""
    try:
        campaign = fetch_campaign(campaign_id)
    except SQLAlchemyError as e:
        logger.error("Campaign fetch error: %s", e)
        raise HTTPException(status_code=500, detail="Failed to fetch campaign")

    if not campaign:
        raise HTTPException(status_code=404, detail="Campaign not found")
    return CampaignDetailResponse(data=campaign)


@router.post("/{campaign_id}", response_model=ApplicationDetailResponse)
async def apply_to_campaign(campaign_id: str, data: ApplicationCreate):
    """KOL applies to a campaign. One application per KOL per campaign."""
    if not data.user_id:
        raise HTTPException(status_code=400, detail="User ID is required")

    application_id = str(uuid4())
    now = utc_now()
    try:
        with get_db_session() as db:
            if not db.execute(text("SELECT id FROM campaigns WHERE id = :id"), {"id": campaign_id}).fetchone():
                raise HTTPException(status_code=404, detail="Campaign not found")

            if not db.execute(text("SELECT id FROM users WHERE id = :id"), {"id": data.user_id}).fetchone():
                raise HTTPException(status_code=400, detail="User not found")

            existing = db.execute(
                text("SELECT id FROM campaign_kols WHERE campaign_id = :cid AND kol_id = :kid"),
                {"cid": campaign_id, "kid": data.user_id}
            )
            if existing.fetchone():
                raise HTTPException(status_code=400, detail="You have already applied to this campaign")

            db.execute(
                text("""
                    INSERT INTO campaign_kols (id, campaign_id, kol_id, status, message, created_at, updated_at)
                    VALUES (:id, :cid, :kid, :status, :message, :now, :now)
                """),
                {
                    "id": application_id, "cid": campaign_id, "kid": data.user_id,
                    "status": ApplicationStatus.applied.value, "message": data.message, "now": now
                }
            )
    except IntegrityError:
        # lost a race with a concurrent application from the same KOL
        raise HTTPException(status_code=400, detail="You have already applied to this campaign")
    except SQLAlchemyError as e:
        logger.error("Application creation error: %s", e)
        raise HTTPException(status_code=500, detail="Failed to submit application")

    logger.info("KOL %s applied to campaign %s", data.user_id, campaign_id)
    return ApplicationDetailResponse(data={
        "id": application_id, "campaign_id": campaign_id, "kol_id": data.user_id,
        "status": ApplicationStatus.applied.value, "message": data.message,
        "created_at": now, "updated_at": now
    })


@router.get("/{campaign_id}/applications", response_model=DataResponse)
async def get_campaign_applications(
    campaign_id: str,
    status: Optional[str] = Query(None),
    platform: Optional[str] = Query(None),
    min_followers: Optional[int] = Query(None, alias="minFollowers", ge=0),
    max_followers: Optional[int] = Query(None, alias="maxFollowers", ge=0)
):
    """Applicants for a campaign with users / kol_profiles / kol_analytics attached."""
    try:
        applications = list_campaign_applications(campaign_id, status)
        enriched = enrich_applications(applications)
    except SQLAlchemyError as e:
        logger.error("Applications fetch error: %s", e)
        raise HTTPException(status_code=500, detail="Failed to fetch applications")

    return DataResponse(data=filter_applications(
        enriched, platform=platform, min_followers=min_followers, max_followers=max_followers
    ))
