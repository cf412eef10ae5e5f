#!/usr/bin/env python3
"""
Seed Script

Loads demo users, campaigns, KOL profiles and analytics so the API has
something to show. Safe to re-run: rows are keyed on fixed ids.

Usage:
    python scripts/seed_data.py          # create schema if needed, upsert demo rows
    python scripts/seed_data.py --reset  # drop every table first
"""
import argparse
import sys
sys.path.insert(0, '.')

from sqlalchemy import text

from kolmarket.db.postgres import get_db_session
from kolmarket.db.schema import init_schema, drop_schema
from kolmarket.utils.clock import utc_now
from kolmarket.utils.json_columns import encode_json

USERS = [
    {"id": "biz-1", "email": "brand@fitfuel.example", "role": "business"},
    {"id": "kol-1", "email": "mia@creators.example", "role": "kol"},
    {"id": "kol-2", "email": "leo@creators.example", "role": "kol"},
]

CAMPAIGNS = [
    {
        "id": "camp-protein", "business_id": "biz-1", "title": "Protein Bar Launch",
        "description": "Unboxing and taste-test videos for our new protein bar.",
        "budget": 5000, "requirements": ["fitness audience", "1 video", "2 stories"],
        "status": "active",
    },
    {
        "id": "camp-summer", "business_id": "biz-1", "title": "Summer Hydration",
        "description": "Short-form content around outdoor training.",
        "budget": 2500, "requirements": ["outdoor content"], "status": "draft",
    },
]

PROFILES = [
    {
        "user_id": "kol-1", "display_name": "Mia Moves", "bio": "Home workouts and meal prep.",
        "categories": ["fitness", "food"], "verification_status": "verified",
        "social_links": [{"platform": "youtube", "url": "https://youtube.com/@miamoves"}],
        "audience_metrics": {"age_18_34": 0.71},
    },
    {
        "user_id": "kol-2", "display_name": "Leo Lifts", "bio": "Strength training.",
        "categories": ["fitness"], "verification_status": "pending",
        "social_links": [{"platform": "twitter", "handle": "@leolifts"}],
        "audience_metrics": None,
    },
]

ANALYTICS = [
    {"kol_id": "kol-1", "platform": "youtube", "followers": 120000, "engagement_rate": 4.2, "average_views": 35000},
    {"kol_id": "kol-1", "platform": "instagram", "followers": 48000, "engagement_rate": 3.1, "average_views": 9000},
    {"kol_id": "kol-2", "platform": "twitter", "followers": 8000, "engagement_rate": 1.9, "average_views": 1200},
]


def seed():
    now = utc_now()
    with get_db_session() as db:
        for u in USERS:
            db.execute(
                text("""
                    INSERT INTO users (id, email, role, created_at) VALUES (:id, :email, :role, :now)
                    ON CONFLICT (id) DO NOTHING
                """),
                {**u, "now": now}
            )
        for c in CAMPAIGNS:
            db.execute(
                text("""
                    INSERT INTO campaigns (id, business_id, title, description, budget, requirements,
                        status, created_at, updated_at)
                    VALUES (:id, :business_id, :title, :description, :budget, :requirements, :status, :now, :now)
                    ON CONFLICT (id) DO NOTHING
                """),
                {**c, "requirements": encode_json(c["requirements"]), "now": now}
            )
        for p in PROFILES:
            db.execute(
                text("""
                    INSERT INTO kol_profiles (user_id, display_name, bio, categories, social_links,
                        audience_metrics, verification_status, updated_at)
                    VALUES (:user_id, :display_name, :bio, :categories, :social_links,
                        :audience_metrics, :verification_status, :now)
                    ON CONFLICT (user_id) DO NOTHING
                """),
                {
                    **p, "now": now,
                    "categories": encode_json(p["categories"]),
                    "social_links": encode_json(p["social_links"]),
                    "audience_metrics": encode_json(p["audience_metrics"]),
                }
            )
        for a in ANALYTICS:
            db.execute(
                text("""
                    INSERT INTO kol_analytics (kol_id, platform, followers, engagement_rate, average_views)
                    VALUES (:kol_id, :platform, :followers, :engagement_rate, :average_views)
                    ON CONFLICT (kol_id, platform) DO NOTHING
                """),
                a
            )


def main():
    parser = argparse.ArgumentParser(description="Load demo marketplace data")
    parser.add_argument("--reset", action="store_true", help="drop all tables before seeding")
    args = parser.parse_args()

    if args.reset:
        print("Dropping tables...")
        drop_schema()
    init_schema()
    seed()
    print(f"✅ Seeded {len(USERS)} users, {len(CAMPAIGNS)} campaigns, "
          f"{len(PROFILES)} profiles, {len(ANALYTICS)} analytics rows")


if __name__ == "__main__":
    main()
