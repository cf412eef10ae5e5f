"""
Profile Routes

GET /profile/{user_id} - Get a KOL profile ({} when none exists yet)
POST /profile/update - Update or create a KOL profile
"""

import logging

from fastapi import APIRouter, HTTPException
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from kolmarket.db.postgres import get_db_session, execute_raw_sql
from kolmarket.schemas.schemas import ProfileUpdate, DataResponse
from kolmarket.utils.clock import utc_now
from kolmarket.utils.json_columns import encode_json, decode_row

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/profile", tags=["Profiles"])

PROFILE_COLUMNS = (
    "user_id, display_name, bio, avatar, categories, social_links, audience_metrics, "
    "content_style, verification_status, updated_at"
)
JSON_FIELDS = ("categories", "social_links", "audience_metrics", "content_style")


def fetch_profile(user_id: str):
    rows = execute_raw_sql(f"SELECT {PROFILE_COLUMNS} FROM kol_profiles WHERE user_id = :uid", {"uid": user_id})
    return decode_row(rows[0], JSON_FIELDS) if rows else None


def build_social_links(data: ProfileUpdate) -> list:
    links = []
    if data.youtube_url:
        links.append({"platform": "youtube", "url": data.youtube_url})
    if data.twitter_handle:
        links.append({"platform": "twitter", "handle": data.twitter_handle})
    return links


@router.post("/update", response_model=DataResponse)
async def update_profile(data: ProfileUpdate):
    """
    Update the caller's profile, inserting it on first save.
    social_links is rebuilt from youtubeUrl / twitterHandle every time.
    """
    if not data.user_id:
        raise HTTPException(status_code=400, detail="User ID required")

    params = {
        "uid": data.user_id,
        "display_name": data.display_name,
        "bio": data.bio,
        "social_links": encode_json(build_social_links(data)),
        "content_style": encode_json({"language": data.language}),
        "now": utc_now()
    }
    try:
        with get_db_session() as db:
            result = db.execute(
                text("""
                    UPDATE kol_profiles SET display_name = :display_name, bio = :bio,
                        social_links = :social_links, content_style = :content_style, updated_at = :now
                    WHERE user_id = :uid
                """),
                params
            )
            if result.rowcount == 0:
                db.execute(
                    text("""
                        INSERT INTO kol_profiles (user_id, display_name, bio, social_links, content_style, updated_at)
                        VALUES (:uid, :display_name, :bio, :social_links, :content_style, :now)
                    """),
                    params
                )
                logger.info("Created profile for %s", data.user_id)
        profile = fetch_profile(data.user_id)
    except SQLAlchemyError as e:
        logger.error("Profile update error: %s", e)
        raise HTTPException(status_code=500, detail="Failed to update profile")

    return DataResponse(data=[profile])


@router.get("/{user_id}", response_model=DataResponse)
async def get_profile(user_id: str):
    """Get a user's KOL profile."""
    try:
        profile = fetch_profile(user_id)
    except SQLAlchemyError as e:
        logger.error("Profile fetch error: %s", e)
        raise HTTPException(status_code=500, detail="Failed to fetch profile")

    return DataResponse(data=profile or {})
