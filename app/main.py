"""
Live Match Tracker - Main FastAPI Application
Admin routes drive match state; viewers read snapshots or hold a stream open.
All data lives in memory for the lifetime of the process.
"""
import logging

from fastapi import APIRouter, Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, StreamingResponse

from app.live_match import MatchError, MatchService, Subscriber, get_match_service
from app.schemas import CardRequest, CreateMatchRequest, EventRequest, FoulRequest, GoalRequest
from config.settings import settings

logging.basicConfig(level=settings.log_level)
logger = logging.getLogger("main")

# Version tracking
APP_VERSION = "v0.1.0"
APP_NAME = "Live Match Tracker"

app = FastAPI(
    title=APP_NAME,
    description="Live football match tracking with server-sent event streams",
    version=APP_VERSION
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

router = APIRouter(prefix=settings.api_prefix)

STREAM_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
}


@app.exception_handler(MatchError)
async def match_error_handler(request: Request, exc: MatchError):
    """Map core error kinds onto HTTP status codes."""
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.get("/health")
def health_check():
    """Health check endpoint."""
    return {"status": "ok", "message": "Server is running"}


@app.get("/version")
def version_info():
    """Version information endpoint."""
    return {
        "name": APP_NAME,
        "version": APP_VERSION,
        "full": f"{APP_NAME} {APP_VERSION}"
    }


# =============================================================================
# ADMIN API
# =============================================================================

@router.post("/admin/create", status_code=201)
async def create_match(body: CreateMatchRequest, service: MatchService = Depends(get_match_service)):
    match = service.create_match(body.teamA, body.teamB, body.venue, body.competition)
    return match.to_dict()


@router.post("/admin/{match_id}/start")
async def start_match(match_id: str, service: MatchService = Depends(get_match_service)):
    return service.start_match(match_id).to_dict()


@router.post("/admin/{match_id}/end")
async def end_match(match_id: str, service: MatchService = Depends(get_match_service)):
    return service.end_match(match_id).to_dict()


@router.post("/admin/{match_id}/goal")
async def add_goal(match_id: str, body: GoalRequest, service: MatchService = Depends(get_match_service)):
    service.record_goal(match_id, body.team, body.player, body.description)
    return service.get_match(match_id).to_dict()


@router.post("/admin/{match_id}/card")
async def add_card(match_id: str, body: CardRequest, service: MatchService = Depends(get_match_service)):
    service.record_card(match_id, body.team, body.cardType, body.player, body.description)
    return service.get_match(match_id).to_dict()


@router.post("/admin/{match_id}/foul")
async def add_foul(match_id: str, body: FoulRequest, service: MatchService = Depends(get_match_service)):
    service.record_foul(match_id, body.team, body.player, body.description)
    return service.get_match(match_id).to_dict()


@router.post("/admin/{match_id}/events")
async def add_event(match_id: str, body: EventRequest, service: MatchService = Depends(get_match_service)):
    """Record any event kind, including substitutions and penalties."""
    service.record_event(match_id, body.type, body.team, body.player, body.description)
    return service.get_match(match_id).to_dict()


@router.delete("/admin/{match_id}")
async def delete_match(match_id: str, service: MatchService = Depends(get_match_service)):
    service.delete_match(match_id)
    return {"message": "Match deleted successfully"}


# =============================================================================
# STREAMS
# =============================================================================

async def stream_messages(service: MatchService, subscriber: Subscriber):
    """
    Yield framed notifications until the subscriber is closed.

    A client disconnect cancels this generator; the finally block detaches
    the subscriber either way.
    """
    try:
        async for message in subscriber:
            yield message
    finally:
        service.close_stream(subscriber)


@router.get("/stream/list")
async def stream_match_list(service: MatchService = Depends(get_match_service)):
    subscriber = service.open_list_stream()
    logger.info(f"List stream opened: {subscriber.client_id}")
    return StreamingResponse(
        stream_messages(service, subscriber),
        media_type="text/event-stream",
        headers=STREAM_HEADERS,
    )


@router.get("/{match_id}/stream")
async def stream_match_details(match_id: str, service: MatchService = Depends(get_match_service)):
    subscriber = service.open_match_stream(match_id)
    logger.info(f"Match stream opened for {match_id}: {subscriber.client_id}")
    return StreamingResponse(
        stream_messages(service, subscriber),
        media_type="text/event-stream",
        headers=STREAM_HEADERS,
    )


# =============================================================================
# VIEWER API
# =============================================================================

@router.get("")
async def get_matches(service: MatchService = Depends(get_match_service)):
    return [m.to_dict() for m in service.list_matches()]


@router.get("/{match_id}")
async def get_match_details(match_id: str, service: MatchService = Depends(get_match_service)):
    return service.get_match(match_id).to_dict()


app.include_router(router)
