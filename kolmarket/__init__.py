"""
KOL Marketplace
Connects businesses running campaigns with influencers (KOLs).

Architecture:
- PostgreSQL: every entity (users, campaigns, applications, profiles, contact requests)
- FastAPI: JSON API under /api
"""

__version__ = "1.0.0"
