"""
api/models.py -- Pydantic response models for the JSON endpoints.

The app is mostly server-rendered HTML; the health probe is the only JSON
surface.
"""

from __future__ import annotations

from pydantic import BaseModel


class HealthResponse(BaseModel):
    """GET /api/v1/health body."""

    status: str = "healthy"
    version: str
    provider: str
