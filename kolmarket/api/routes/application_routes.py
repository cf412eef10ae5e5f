"""
Application Routes

GET /my-applications - Campaigns a KOL has applied to (declined ones hidden)
"""

import logging

from fastapi import APIRouter, HTTPException, Query
from sqlalchemy.exc import SQLAlchemyError
from typing import Optional

from kolmarket.db.postgres import execute_raw_sql
from kolmarket.schemas.schemas import ApplicationStatus, DataResponse
from kolmarket.utils.json_columns import decode_json

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Applications"])


@router.get("/my-applications", response_model=DataResponse)
async def get_my_applications(user_id: Optional[str] = Query(None, alias="userId")):
    """A KOL's applications with the campaign nested under "campaigns"."""
    if not user_id:
        raise HTTPException(status_code=400, detail="User ID is required")

    try:
        results = execute_raw_sql("""
            SELECT ck.id, ck.status, ck.created_at,
                   c.id AS c_id, c.title AS c_title, c.description AS c_description,
                   c.budget AS c_budget, c.status AS c_status, c.requirements AS c_requirements,
                   c.created_at AS c_created_at, c.business_id AS c_business_id
            FROM campaign_kols ck
            LEFT JOIN campaigns c ON c.id = ck.campaign_id
            WHERE ck.kol_id = :uid AND ck.status != :declined
            ORDER BY ck.created_at DESC
        """, {"uid": user_id, "declined": ApplicationStatus.declined.value})
    except SQLAlchemyError as e:
        logger.error("Applications fetch error: %s", e)
        raise HTTPException(status_code=500, detail="Failed to fetch applications")

    return DataResponse(data=[
        {
            "id": r["id"],
            "status": r["status"],
            "created_at": r["created_at"],
            "campaigns": {
                "id": r["c_id"],
                "title": r["c_title"],
                "description": r["c_description"],
                "budget": float(r["c_budget"]) if r["c_budget"] is not None else None,
                "status": r["c_status"],
                "requirements": decode_json(r["c_requirements"]),
                "created_at": r["c_created_at"],
                "business_id": r["c_business_id"],
            } if r["c_id"] else None,
        } for r in results
    ])
