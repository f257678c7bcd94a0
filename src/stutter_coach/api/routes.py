"""REST API routes for users, challenges, coaching and voice repair."""

import os
import shutil
import tempfile
from pathlib import Path
from typing import BinaryIO

import structlog
from fastapi import APIRouter, Depends, File, Form, Request, Response, UploadFile
from fastapi.concurrency import run_in_threadpool

from stutter_coach.errors import UpstreamFailure, ValidationError
from stutter_coach.models.challenge import TickResult
from stutter_coach.models.coaching import CoachResponse
from stutter_coach.models.requests import (
    ChallengeStartRequest,
    ChallengeTickRequest,
    CoachRequest,
    CredentialsRequest,
)
from stutter_coach.models.user_profile import UserProfile
from stutter_coach.services import Services

logger = structlog.get_logger()
router = APIRouter()


def get_services(request: Request) -> Services:
    return request.app.state.services


@router.get("/")
async def liveness() -> dict:
    """Liveness check."""
    return {"status": "ok", "message": "Stutter Coach backend running"}


# --- users ---


@router.get("/users")
async def list_users(services: Services = Depends(get_services)) -> dict:
    return {"users": await services.users.list_usernames()}


@router.get("/user/{username}", response_model=UserProfile)
async def get_user(username: str, services: Services = Depends(get_services)) -> UserProfile:
    return await services.users.get_profile(username)


@router.post("/users")
async def create_user(
    body: CredentialsRequest, services: Services = Depends(get_services)
) -> dict:
    profile = await services.users.register(body.username, body.password)
    return {"success": True, "username": profile.username}


@router.post("/login")
async def login(body: CredentialsRequest, services: Services = Depends(get_services)) -> dict:
    await services.users.login(body.username, body.password)
    return {"success": True}


# --- challenge ---


@router.post("/challenge/start")
async def start_challenge(
    body: ChallengeStartRequest, services: Services = Depends(get_services)
) -> dict:
    if not body.user_id:
        raise ValidationError("User ID required")
    await services.challenges.start(body.user_id)
    return {"status": "started"}


@router.post("/challenge/tick", response_model=TickResult, response_model_exclude_none=True)
async def tick_challenge(
    body: ChallengeTickRequest, services: Services = Depends(get_services)
) -> TickResult:
    if not body.user_id:
        raise ValidationError("User ID required")
    return await services.challenges.tick(body.user_id, body.transcript)


@router.post("/challenge/stop")
async def stop_challenge(
    body: ChallengeStartRequest, services: Services = Depends(get_services)
) -> dict:
    if not body.user_id:
        raise ValidationError("User ID required")
    elapsed_ms = await services.challenges.stop(body.user_id)
    return {"status": "stopped", "elapsedMs": round(elapsed_ms)}


# --- coaching ---


@router.post("/coach", response_model=CoachResponse)
async def coach(body: CoachRequest, services: Services = Depends(get_services)) -> CoachResponse:
    return await services.orchestrator.coach(
        user_id=body.user_id,
        transcript=body.transcript,
        mode=body.mode,
        duration_seconds=body.duration,
        language=body.language,
    )


@router.get("/sessions/{user_id}")
async def list_sessions(user_id: str, services: Services = Depends(get_services)) -> dict:
    """Coaching sessions for a user, newest first."""
    sessions = await services.ledger.for_user(user_id)
    return {"sessions": [s.model_dump(mode="json", by_alias=True) for s in sessions]}


# --- voice repair ---


def _save_upload(source: BinaryIO, fd: int) -> None:
    with os.fdopen(fd, "wb") as out:
        shutil.copyfileobj(source, out)


@router.post("/repair")
async def repair(
    audio: UploadFile | None = File(default=None),
    fluent_text: str | None = Form(default=None, alias="fluentText"),
    services: Services = Depends(get_services),
) -> Response:
    """Re-speak ``fluentText`` in the voice of the uploaded sample."""
    repairer = services.voice_repairer
    if repairer is None:
        logger.error("voice_repair_not_configured")
        raise UpstreamFailure("Server missing ElevenLabs API Key")
    if audio is None or not fluent_text:
        raise ValidationError("Missing audio/text")

    suffix = Path(audio.filename or "").suffix
    fd, name = tempfile.mkstemp(dir=services.settings.uploads_dir, suffix=suffix)
    upload_path = Path(name)
    try:
        await run_in_threadpool(_save_upload, audio.file, fd)
        content = await repairer.repair(upload_path, fluent_text)
    finally:
        upload_path.unlink(missing_ok=True)

    return Response(content=content, media_type=repairer.media_type)
