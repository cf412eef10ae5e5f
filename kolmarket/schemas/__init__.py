"""
Schemas module - Request/Response schemas for API endpoints.

Everything lives in kolmarket.schemas.schemas; routes import from there directly.
"""
