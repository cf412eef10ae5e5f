"""
Application Service - campaign applicants with KOL details.

The business-side applicants view needs, per application:
- users row (id, email, role)
- kol_profiles (list of 0 or 1 profile)
- kol_analytics (one row per platform)

Follower and platform filters run in Python after enrichment because they
depend on the per-platform analytics, not on the application row.
"""

from typing import Optional, List, Dict

from sqlalchemy import bindparam, text

from kolmarket.db.postgres import get_db_session, execute_raw_sql
from kolmarket.utils.json_columns import decode_row

PROFILE_JSON_FIELDS = ("categories", "social_links", "audience_metrics")


def _rows_for_kols(sql: str, kol_ids: List[str]) -> List[dict]:
    stmt = text(sql).bindparams(bindparam("ids", expanding=True))
    with get_db_session() as db:
        result = db.execute(stmt, {"ids": kol_ids})
        columns = list(result.keys())
        return [dict(zip(columns, row)) for row in result.fetchall()]


def list_campaign_applications(campaign_id: str, status: Optional[str] = None) -> List[dict]:
    """Applications for a campaign, newest first. status='all' means no filter."""
    sql = """
        SELECT id, status, created_at, kol_id
        FROM campaign_kols
        WHERE campaign_id = :cid
    """
    params = {"cid": campaign_id}

    if status and status != "all":
        sql += " AND status = :status"
        params["status"] = status

    sql += " ORDER BY created_at DESC"
    return execute_raw_sql(sql, params)


def enrich_applications(applications: List[dict]) -> List[dict]:
    """Attach users, kol_profiles and kol_analytics to each application."""
    if not applications:
        return []

    kol_ids = list({a["kol_id"] for a in applications})

    users = _rows_for_kols("SELECT id, email, role FROM users WHERE id IN :ids", kol_ids)
    profiles = _rows_for_kols("""
        SELECT user_id, display_name, bio, avatar, categories, social_links,
               audience_metrics, verification_status
        FROM kol_profiles WHERE user_id IN :ids
    """, kol_ids)
    analytics = _rows_for_kols("""
        SELECT kol_id, platform, followers, engagement_rate, average_views
        FROM kol_analytics WHERE kol_id IN :ids
    """, kol_ids)

    users_by_id = {u["id"]: u for u in users}
    profiles_by_id = {p["user_id"]: decode_row(p, PROFILE_JSON_FIELDS) for p in profiles}
    analytics_by_id: Dict[str, List[dict]] = {}
    for row in analytics:
        if row["engagement_rate"] is not None:
            row["engagement_rate"] = float(row["engagement_rate"])
        analytics_by_id.setdefault(row["kol_id"], []).append(row)

    enriched = []
    for application in applications:
        kol_id = application["kol_id"]
        profile = profiles_by_id.get(kol_id)
        enriched.append({
            **application,
            "users": users_by_id.get(kol_id),
            "kol_profiles": [profile] if profile else [],
            "kol_analytics": analytics_by_id.get(kol_id, []),
        })
    return enriched


def filter_applications(applications: List[dict],
                        platform: Optional[str] = None,
                        min_followers: Optional[int] = None,
                        max_followers: Optional[int] = None) -> List[dict]:
    """
    Apply the applicant filters to enriched applications.

    - platform ('all' = any): applicant must have analytics for that platform
    - min/max followers: compared against the largest follower count among the
      applicant's analytics (only that platform's when one is given); an
      applicant with no such analytics never passes a follower bound
    """
    by_platform = bool(platform) and platform != "all"
    by_followers = min_followers is not None or max_followers is not None

    if not by_platform and not by_followers:
        return applications

    kept = []
    for application in applications:
        app_analytics = application.get("kol_analytics") or []

        if by_platform:
            app_analytics = [a for a in app_analytics if a.get("platform") == platform]
            if not app_analytics:
                continue

        if by_followers:
            if not app_analytics:
                continue
            top = max(a.get("followers") or 0 for a in app_analytics)
            if min_followers is not None and top < min_followers:
                continue
            if max_followers is not None and top > max_followers:
                continue

        kept.append(application)
    return kept
