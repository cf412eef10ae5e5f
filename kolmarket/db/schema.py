"""
Schema Utility - table definitions for the marketplace store.

Tables:
- users:               accounts provisioned by the auth layer (business / kol / admin)
- campaigns:           business-created engagement offers
- campaign_kols:       KOL applications to campaigns
- kol_profiles:        public KOL profile, one per user
- kol_analytics:       per-platform audience numbers for a KOL
- kol_contact_requests: business asks us to reach a KOL about a campaign

WHY plain DDL instead of migrations?
- The same statements run on PostgreSQL and on SQLite (tests)
- JSON-valued columns are TEXT holding JSON, no jsonb-only operators needed
- Timestamps are written as ISO-8601 UTC strings, which sort correctly as text
"""

import logging

from sqlalchemy import inspect, text

from kolmarket.db.postgres import engine, get_db_session

logger = logging.getLogger(__name__)

# Table name constants (avoid typos)
TABLES = {
    "users": "users",
    "campaigns": "campaigns",
    "applications": "campaign_kols",
    "profiles": "kol_profiles",
    "analytics": "kol_analytics",
    "contact_requests": "kol_contact_requests",
}

SCHEMA_STATEMENTS = [
    """
    CREATE TABLE IF NOT EXISTS users (
        id TEXT PRIMARY KEY,
        email TEXT NOT NULL UNIQUE,
        role TEXT NOT NULL,
        created_at TIMESTAMPTZ
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS campaigns (
        id TEXT PRIMARY KEY,
        business_id TEXT NOT NULL,
        title TEXT NOT NULL,
        description TEXT,
        budget NUMERIC,
        requirements TEXT,
        status TEXT NOT NULL DEFAULT 'active',
        created_at TIMESTAMPTZ,
        updated_at TIMESTAMPTZ
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS campaign_kols (
        id TEXT PRIMARY KEY,
        campaign_id TEXT NOT NULL,
        kol_id TEXT NOT NULL,
        status TEXT NOT NULL DEFAULT 'applied',
        message TEXT,
        created_at TIMESTAMPTZ,
        updated_at TIMESTAMPTZ,
        UNIQUE (campaign_id, kol_id)
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS kol_profiles (
        user_id TEXT PRIMARY KEY,
        display_name TEXT,
        bio TEXT,
        avatar TEXT,
        categories TEXT,
        social_links TEXT,
        audience_metrics TEXT,
        content_style TEXT,
        verification_status TEXT NOT NULL DEFAULT 'pending',
        updated_at TIMESTAMPTZ
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS kol_analytics (
        kol_id TEXT NOT NULL,
        platform TEXT NOT NULL,
        followers INTEGER,
        engagement_rate NUMERIC,
        average_views INTEGER,
        PRIMARY KEY (kol_id, platform)
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS kol_contact_requests (
        campaign_id TEXT NOT NULL,
        kol_id TEXT NOT NULL,
        campaign_title TEXT,
        requester_id TEXT NOT NULL,
        kol_handle TEXT,
        kol_display_name TEXT,
        status TEXT NOT NULL DEFAULT 'in_progress',
        requested_at TIMESTAMPTZ NOT NULL,
        withdrawn_at TIMESTAMPTZ,
        PRIMARY KEY (campaign_id, kol_id)
    )
    """,
    "CREATE INDEX IF NOT EXISTS ix_campaigns_business_id ON campaigns (business_id)",
    "CREATE INDEX IF NOT EXISTS ix_campaign_kols_kol_id ON campaign_kols (kol_id)",
    "CREATE INDEX IF NOT EXISTS ix_contact_requests_requester ON kol_contact_requests (requester_id)",
]


def init_schema() -> None:
    """
    Create all tables and indexes if missing.
    Call this once during app startup.
    """
    with get_db_session() as db:
        for statement in SCHEMA_STATEMENTS:
            db.execute(text(statement))
    logger.info("Database schema ready (%d tables)", len(TABLES))


def drop_schema() -> None:
    """Drop every table. Used by tests and the seed script's --reset."""
    with get_db_session() as db:
        for name in TABLES.values():
            db.execute(text(f"DROP TABLE IF EXISTS {name}"))


def missing_tables() -> list:
    """Names from TABLES that the connected database does not have."""
    existing = set(inspect(engine).get_table_names())
    return [name for name in TABLES.values() if name not in existing]
