"""
Withdrawal Routes

POST /withdrawals/application/{id} - KOL withdraws an application (applied/invited only)
POST /withdrawals/campaign/{id} - Business cancels a campaign (active/draft only)

The acting user comes from the request body (userId); ownership is checked
against it before anything changes.
"""

import logging

from fastapi import APIRouter, HTTPException
from sqlalchemy import bindparam, text
from sqlalchemy.exc import SQLAlchemyError

from kolmarket.db.postgres import get_db_session
from kolmarket.schemas.schemas import (
    WithdrawalRequest, MessageResponse, ApplicationStatus, CampaignStatus
)
from kolmarket.utils.clock import utc_now

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/withdrawals", tags=["Withdrawals"])

WITHDRAWABLE_APPLICATION = (ApplicationStatus.applied.value, ApplicationStatus.invited.value)
CANCELLABLE_CAMPAIGN = (CampaignStatus.active.value, CampaignStatus.draft.value)


@router.post("/application/{application_id}", response_model=MessageResponse)
async def withdraw_application(application_id: str, data: WithdrawalRequest):
    """Withdraw an application. Stored as declined."""
    if not data.user_id:
        raise HTTPException(status_code=400, detail="User ID required")

    try:
        with get_db_session() as db:
            row = db.execute(
                text("""
                    SELECT ck.status, c.title FROM campaign_kols ck
                    LEFT JOIN campaigns c ON c.id = ck.campaign_id
                    WHERE ck.id = :aid AND ck.kol_id = :uid
                """),
                {"aid": application_id, "uid": data.user_id}
            ).fetchone()
            if not row:
                raise HTTPException(status_code=404, detail="Application not found")

            status, title = row[0], row[1]
            if status not in WITHDRAWABLE_APPLICATION:
                raise HTTPException(status_code=400, detail="Application cannot be withdrawn at this stage")

            db.execute(
                text("UPDATE campaign_kols SET status = :status, updated_at = :now WHERE id = :aid"),
                {"status": ApplicationStatus.declined.value, "now": utc_now(), "aid": application_id}
            )
    except SQLAlchemyError as e:
        logger.error("Application withdrawal error: %s", e)
        raise HTTPException(status_code=500, detail="Failed to withdraw application")

    logger.info("Application %s withdrawn by %s (reason: %s)", application_id, data.user_id, data.reason)
    return MessageResponse(message=f'Application for "{title}" has been withdrawn successfully.')


@router.post("/campaign/{campaign_id}", response_model=MessageResponse)
async def cancel_campaign(campaign_id: str, data: WithdrawalRequest):
    """Cancel a campaign and decline every application still pending on it."""
    if not data.user_id:
        raise HTTPException(status_code=400, detail="User ID required")

    now = utc_now()
    try:
        with get_db_session() as db:
            row = db.execute(
                text("SELECT status, title FROM campaigns WHERE id = :cid AND business_id = :uid"),
                {"cid": campaign_id, "uid": data.user_id}
            ).fetchone()
            if not row:
                raise HTTPException(status_code=404, detail="Campaign not found")

            status, title = row[0], row[1]
            if status not in CANCELLABLE_CAMPAIGN:
                raise HTTPException(status_code=400, detail="Campaign cannot be cancelled at this stage")

            db.execute(
                text("UPDATE campaigns SET status = :status, updated_at = :now WHERE id = :cid"),
                {"status": CampaignStatus.cancelled.value, "now": now, "cid": campaign_id}
            )
            result = db.execute(
                text("""
                    UPDATE campaign_kols SET status = :declined, updated_at = :now
                    WHERE campaign_id = :cid AND status IN :pending
                """).bindparams(bindparam("pending", expanding=True)),
                {
                    "declined": ApplicationStatus.declined.value, "now": now,
                    "cid": campaign_id, "pending": list(WITHDRAWABLE_APPLICATION)
                }
            )
            declined = result.rowcount
    except SQLAlchemyError as e:
        logger.error("Campaign cancellation error: %s", e)
        raise HTTPException(status_code=500, detail="Failed to cancel campaign")

    logger.info("Campaign %s cancelled by %s, %d pending applications declined",
                campaign_id, data.user_id, declined)
    return MessageResponse(message=f'Campaign "{title}" has been cancelled successfully.')
