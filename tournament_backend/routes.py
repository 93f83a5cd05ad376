"""
HTTP routes for the tournament backend API.
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Header, Query, Request, Response
from fastapi.concurrency import run_in_threadpool

from tournament_backend.dependencies import get_tournament_service
from tournament_backend.errors import NotFound
from tournament_backend.schemas import (
    ErrorResponse,
    HealthResponse,
    SaveTournamentPayload,
    SaveTournamentResponse,
    SuccessResponse,
    TournamentResponse,
)
from tournament_backend.service import TournamentService
from tournament_backend.tokens import bearer_token, parse_json_body, resolve_admin_token

router = APIRouter()

ERROR_RESPONSES = {
    400: {"model": ErrorResponse},
    401: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
}


@router.get("/health", response_model=HealthResponse)
def health():
    return HealthResponse(status="ok")


@router.get("/load", response_model=TournamentResponse, responses=ERROR_RESPONSES)
def load_tournament(
    id: Optional[str] = Query(None, description="Tournament UUID"),
    service: TournamentService = Depends(get_tournament_service),
):
    return TournamentResponse(**service.load(id))


@router.post(
    "/save", response_model=SaveTournamentResponse, responses=ERROR_RESPONSES
)
def save_tournament(
    payload: SaveTournamentPayload,
    authorization: Optional[str] = Header(None),
    service: TournamentService = Depends(get_tournament_service),
):
    """
    Create a tournament or overwrite it. Overwrites need the creating token.
    """
    token = bearer_token(authorization) or payload.adminToken
    updated_at = service.save(payload.tournamentId, token, payload.data)
    return SaveTournamentResponse(success=True, updatedAt=updated_at)


@router.delete(
    "/tournament/{tournament_id}",
    response_model=SuccessResponse,
    responses=ERROR_RESPONSES,
)
async def delete_tournament(
    tournament_id: str,
    request: Request,
    authorization: Optional[str] = Header(None),
    service: TournamentService = Depends(get_tournament_service),
):
    # The token may come from the header or a JSON body; an unreadable body means no token.
    body = parse_json_body(await request.body())
    token = resolve_admin_token(authorization, body)
    await run_in_threadpool(service.delete, tournament_id, token)
    return SuccessResponse(success=True)


@router.head("/tournament/{tournament_id}", responses=ERROR_RESPONSES)
def tournament_exists(
    tournament_id: str,
    service: TournamentService = Depends(get_tournament_service),
):
    if not service.exists(tournament_id):
        raise NotFound()
    return Response(status_code=200)
