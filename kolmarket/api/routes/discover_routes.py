"""
Discover Routes

POST /discover/request-contact - Ask us to contact a KOL about a campaign
GET /discover/contact-requests - List open contact requests (userId / campaignId filters)
POST /discover/contact-requests/{id}/withdraw - Withdraw a contact request
GET /discover/kols - List verified KOLs

Contact request writes never fail the caller on a storage error while
degrade_on_storage_error is on: the error is logged and success is reported.
"""

import logging

from fastapi import APIRouter, HTTPException, Depends, Query
from sqlalchemy.exc import SQLAlchemyError
from typing import Optional

from kolmarket.core.config import get_settings
from kolmarket.db.postgres import execute_raw_sql
from kolmarket.services.contact_request_service import (
    ContactRequestService, ContactRequestKey, KEY_DELIMITER, get_contact_request_service
)
from kolmarket.schemas.schemas import (
    ContactRequestCreate, ContactRequestListResponse, MessageResponse,
    DataResponse, KolSummary, UserRole, VerificationStatus
)
from kolmarket.utils.clock import utc_now
from kolmarket.utils.json_columns import decode_json

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/discover", tags=["Discover"])

REQUEST_RECEIVED = "Request received. We will contact this KOL. Status: in progress."
REQUEST_WITHDRAWN = "Contact request withdrawn."


@router.post("/request-contact", response_model=MessageResponse)
async def request_contact(
    data: ContactRequestCreate,
    service: ContactRequestService = Depends(get_contact_request_service)
):
    """Record (or refresh) a contact request. Always resets status to in_progress."""
    kol_id = data.kol.id if data.kol else None
    if not data.user_id or not data.campaign_id or not kol_id:
        raise HTTPException(status_code=400, detail="Missing required fields")
    if KEY_DELIMITER in data.campaign_id:
        raise HTTPException(status_code=400, detail=f"campaignId must not contain '{KEY_DELIMITER}'")

    try:
        service.upsert({
            "campaign_id": data.campaign_id,
            "kol_id": kol_id,
            "campaign_title": data.campaign_title,
            "requester_id": data.user_id,
            "kol_handle": data.kol.handle,
            "kol_display_name": data.kol.display_name,
            "requested_at": utc_now(),
        })
    except SQLAlchemyError as e:
        if not get_settings().degrade_on_storage_error:
            logger.error("Request contact storage error: %s", e)
            raise HTTPException(status_code=500, detail="Failed to record request")
        logger.warning("kol_contact_requests unavailable, simulating success: %s", e)
    except Exception:
        logger.exception("Request contact error")
        raise HTTPException(status_code=500, detail="Failed to record request")

    return MessageResponse(message=REQUEST_RECEIVED)


@router.get("/contact-requests", response_model=ContactRequestListResponse)
async def list_contact_requests(
    user_id: Optional[str] = Query(None, alias="userId"),
    campaign_id: Optional[str] = Query(None, alias="campaignId"),
    service: ContactRequestService = Depends(get_contact_request_service)
):
    """Open (non-withdrawn) contact requests, newest first."""
    try:
        rows = service.list_by_filter(requester_id=user_id, campaign_id=campaign_id)
    except SQLAlchemyError as e:
        if not get_settings().degrade_on_storage_error:
            logger.error("contact-requests GET storage error: %s", e)
            raise HTTPException(status_code=500, detail="Failed to fetch contact requests")
        logger.warning("contact-requests GET warning: %s", e)
        return ContactRequestListResponse(data=[])
    except Exception:
        logger.exception("contact-requests GET error")
        raise HTTPException(status_code=500, detail="Failed to fetch contact requests")

    return ContactRequestListResponse(data=rows)


@router.post("/contact-requests/{request_id:path}/withdraw", response_model=MessageResponse)
async def withdraw_contact_request(
    request_id: str,
    service: ContactRequestService = Depends(get_contact_request_service)
):
    """
    Withdraw a contact request by its "campaignId:kolId" id.
    No existence check: unknown ids report success too.
    """
    if not request_id.strip():
        raise HTTPException(status_code=400, detail="Missing id")

    key = ContactRequestKey.parse(request_id)
    try:
        if key is None:
            logger.info("withdraw: %r names no contact request", request_id)
        elif not service.update_status_to_withdrawn(key):
            logger.info("withdraw: %s unknown or already withdrawn", request_id)
    except SQLAlchemyError as e:
        if not get_settings().degrade_on_storage_error:
            logger.error("withdraw contact request storage error: %s", e)
            raise HTTPException(status_code=500, detail="Failed to withdraw request")
        logger.warning("withdraw contact request warning: %s", e)
    except Exception:
        logger.exception("withdraw contact request error")
        raise HTTPException(status_code=500, detail="Failed to withdraw request")

    return MessageResponse(message=REQUEST_WITHDRAWN)


@router.get("/kols", response_model=DataResponse)
async def discover_kols():
    """Verified KOL profiles."""
    try:
        results = execute_raw_sql("""
            SELECT p.user_id, p.display_name, p.bio, p.categories, p.audience_metrics, p.social_links
            FROM kol_profiles p JOIN users u ON u.id = p.user_id
            WHERE u.role = :role AND p.verification_status = :verified
            ORDER BY p.display_name
        """, {"role": UserRole.kol.value, "verified": VerificationStatus.verified.value})
    except SQLAlchemyError as e:
        logger.error("KOLs fetch error: %s", e)
        raise HTTPException(status_code=500, detail="Failed to fetch KOLs")

    kols = [
        KolSummary(
            id=r["user_id"], display_name=r["display_name"], bio=r["bio"],
            categories=decode_json(r["categories"], []) or [],
            audience_metrics=decode_json(r["audience_metrics"]),
            social_links=decode_json(r["social_links"], []) or []
        ) for r in results
    ]
    return DataResponse(data=kols)
