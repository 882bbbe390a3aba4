"""Health report schemas for the pricing audit."""

from typing import Any

from pydantic import BaseModel


class HealthCheck(BaseModel):
    """Outcome of a single check."""

    status: bool
    level: str  # success | warning | critical
    message: str
    data: dict[str, Any] = {}
    recommendations: list[str] = []


class HealthReport(BaseModel):
    overall_status: str = "healthy"  # healthy | warning | critical
    checks: dict[str, HealthCheck] = {}
    errors: list[str] = []
    warnings: list[str] = []
    recommendations: list[str] = []
