"""
Pydantic schemas for the tournament backend.
"""

from __future__ import annotations

from typing import Any, Literal, Optional

from pydantic import BaseModel


class SaveTournamentPayload(BaseModel):
    tournamentId: Optional[str] = None
    adminToken: Optional[str] = None
    data: Optional[Any] = None


class TournamentResponse(BaseModel):
    tournament: Any
    updatedAt: str


class SaveTournamentResponse(BaseModel):
    success: bool
    updatedAt: str


class SuccessResponse(BaseModel):
    success: bool


class HealthResponse(BaseModel):
    status: Literal["ok"]


class ErrorResponse(BaseModel):
    error: str
