"""
FastAPI shell for Trilines.
Local, single-process presentation backend: matches live in memory only.

Run with `python -m trilines.api.main` or `uvicorn trilines.api.main:app`.
Set TRILINES_ENV=production when serving players: invariant violations are then
logged and skipped instead of raised (TRILINES_STRICT_INVARIANTS overrides either way).
"""

import logging
import random
import string
import traceback
from typing import Any

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from trilines import config
from trilines.engine.ai_runner import run_ai_turn
from trilines.engine.board import BOARD_BUILDERS, BoardGraph, build_board
from trilines.engine.errors import BoardError
from trilines.engine.session import MatchSession, OperationResult

logging.basicConfig(level=config.LOG_LEVEL)
logger = logging.getLogger(__name__)
logger.info("Trilines API starting (%s, strict invariants %s)", config.ENV, config.STRICT_INVARIANTS)

app = FastAPI(
    title="Trilines API",
    description="Backend API for Trilines - a dice-driven triangle claiming game",
    version="1.0.0",
)

# CORS configuration for frontend
CORS_ORIGINS = ["http://localhost:5173", "http://localhost:5174", "http://localhost:3000"]
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["*"],
)


@app.middleware("http")
async def log_requests(request, call_next):
    """Log method and path so 500s can be traced to the failing endpoint."""
    method = getattr(request, "method", "?")
    url = getattr(request, "url", None)
    path = url.path if url else "?"
    try:
        response = await call_next(request)
        if response.status_code >= 500:
            logger.error("[500] %s %s", method, path)
        return response
    except Exception:
        logger.error("[500] %s %s (exception)", method, path)
        raise


@app.exception_handler(Exception)
async def unhandled_exception_handler(request, exc):
    """Return 500 with CORS headers and full traceback so the frontend can read the error."""
    tb = traceback.format_exc()
    logger.exception("Unhandled error")
    origin = request.headers.get("origin")
    allow_origin = origin if origin in CORS_ORIGINS else CORS_ORIGINS[0]
    return JSONResponse(
        status_code=500,
        content={"detail": str(exc), "traceback": tb},
        headers={
            "Access-Control-Allow-Origin": allow_origin,
            "Access-Control-Allow-Credentials": "true",
        },
    )


# In-memory matches; gone when the process stops
matches: dict[str, MatchSession] = {}

MATCH_CODE_CHARS = string.ascii_uppercase + string.digits
MATCH_CODE_LENGTH = 4


# ===== Pydantic Models =====

class PlayerSpec(BaseModel):
    id: str
    name: str | None = None
    color: str = "#888888"
    is_ai: bool = False


def _default_players() -> list[PlayerSpec]:
    return [
        PlayerSpec(id="human", name="You", color="#3b82f6", is_ai=False),
        PlayerSpec(id="ai", name="Computer", color="#ef4444", is_ai=True),
    ]


class CreateMatchRequest(BaseModel):
    match_id: str | None = None
    board: str | None = None  # stock board name; ignored when board_data is given
    board_data: dict[str, Any] | None = None  # {"dots": [{"id", "x", "y", "neighbors"}, ...]}
    players: list[PlayerSpec] = Field(default_factory=_default_players)
    bonus_turn_on_claim: bool = False
    seed: int | None = None


class MoveRequest(BaseModel):
    a: int
    b: int


class AiTurnRequest(BaseModel):
    delay: float = 0.0


# ===== Helpers =====

def generate_match_code() -> str:
    """Generate a unique short match code."""
    for _ in range(100):
        code = "".join(random.choices(MATCH_CODE_CHARS, k=MATCH_CODE_LENGTH))
        if code not in matches:
            return code
    raise HTTPException(status_code=503, detail="Could not allocate a match code")


def get_match(match_id: str) -> MatchSession:
    session = matches.get(match_id)
    if session is None:
        raise HTTPException(status_code=404, detail=f"Match {match_id} not found")
    return session


def require_human_turn(session: MatchSession) -> None:
    """Raise 403 if the seat to move is played by the AI; only /ai-turn acts for it."""
    current = session.state.current_player
    if current is not None and current.is_ai:
        raise HTTPException(status_code=403, detail="Not your turn")


def result_response(session: MatchSession, result: OperationResult) -> dict[str, Any]:
    """Raise 400 for rejected operations; otherwise return result plus fresh state."""
    if not result.ok:
        raise HTTPException(status_code=400, detail={"error": result.error, "reason": result.reason})
    return {
        "result": result.to_dict(),
        "state": session.snapshot(),
    }


# ===== API Endpoints =====

@app.get("/")
def root():
    return {"message": "Trilines API", "version": "1.0.0"}


@app.get("/boards")
def list_boards():
    return {"boards": sorted(BOARD_BUILDERS), "default": config.DEFAULT_BOARD}


@app.post("/matches")
def create_match(request: CreateMatchRequest):
    """Create a match on a stock or supplied board and start it."""
    match_id = request.match_id or generate_match_code()
    if match_id in matches:
        raise HTTPException(status_code=400, detail=f"Match {match_id} already exists")
    try:
        if request.board_data is not None:
            board = BoardGraph.from_dict(request.board_data)
        else:
            board = build_board(request.board or config.DEFAULT_BOARD)
    except BoardError as e:
        raise HTTPException(status_code=400, detail=str(e))

    rng = random.Random(request.seed) if request.seed is not None else random.Random()
    session = MatchSession(board, rng=rng)
    result = session.start_match(
        [p.model_dump() for p in request.players],
        bonus_turn_on_claim=request.bonus_turn_on_claim,
    )
    if not result.ok:
        raise HTTPException(status_code=400, detail={"error": result.error, "reason": result.reason})
    matches[match_id] = session
    logger.info("Created match %s (%d dots)", match_id, len(board))
    return {
        "match_id": match_id,
        "result": result.to_dict(),
        "state": session.snapshot(include_board=True),
    }


@app.get("/matches/{match_id}")
def get_match_state(match_id: str, include_board: bool = False):
    session = get_match(match_id)
    return {"match_id": match_id, "state": session.snapshot(include_board=include_board)}


@app.get("/matches/{match_id}/legal-moves")
def get_legal_moves(match_id: str):
    session = get_match(match_id)
    return {"moves": session.legal_moves()}


@app.post("/matches/{match_id}/roll")
def do_roll(match_id: str):
    session = get_match(match_id)
    require_human_turn(session)
    return result_response(session, session.roll_dice())


@app.post("/matches/{match_id}/move")
def do_move(match_id: str, request: MoveRequest):
    session = get_match(match_id)
    require_human_turn(session)
    return result_response(session, session.attempt_move(request.a, request.b))


@app.post("/matches/{match_id}/ai-turn")
async def do_ai_turn(match_id: str, request: AiTurnRequest | None = None):
    """Play the AI's whole turn. Fails if it is not an AI player's turn."""
    session = get_match(match_id)
    current = session.state.current_player
    if current is None or not current.is_ai or session.state.phase != "playing":
        raise HTTPException(status_code=400, detail="It is not an AI player's turn")
    delay = request.delay if request is not None else 0.0
    results = await run_ai_turn(session, delay=delay)
    return {
        "results": [r.to_dict() for r in results],
        "state": session.snapshot(),
    }


@app.post("/matches/{match_id}/reset")
def do_reset(match_id: str):
    session = get_match(match_id)
    return result_response(session, session.reset_match())


@app.delete("/matches/{match_id}")
def delete_match(match_id: str):
    get_match(match_id)
    del matches[match_id]
    return {"deleted": match_id}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
