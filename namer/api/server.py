"""
FastAPI server for the naming assistant.

Routes are served at the root and again under /api/v1.

Usage:
    python -m namer.api.server
    # or
    uvicorn namer.api.server:app --reload --port 8000
"""
import hashlib
import json
import re
import traceback
from datetime import datetime, timezone
from functools import lru_cache
from pathlib import Path
from typing import Optional

from fastapi import APIRouter, Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

import namer
from namer.api.models import (
    ChatRequest,
    ChatResponse,
    GenerateNamesRequest,
    GenerateNamesResponse,
    HealthResponse,
    ErrorResponse,
)
from namer.core.config import get_config
from namer.core.controller import ChatController, ChatTurnResult
from namer.core.errors import MissingParameterError, NamerError
from namer.core.generator import NameGenerator
from namer.llm.client import ModelClient
from namer.utils.logger import get_logger, log_event, setup_logging

logger = get_logger("api.server")

INTERNAL_ERROR_MESSAGE = "服务器内部错误"
MISSING_PARAMETER_MESSAGE = "缺少必要参数"
SESSION_ID_PATTERN = re.compile(r"[A-Za-z0-9_-]{1,128}")


def session_log_path(log_dir: str, session_id: Optional[str]) -> Optional[Path]:
    """
    Map a client-supplied session id to a file inside log_dir.

    Ids outside [A-Za-z0-9_-]{1,128} are replaced by their SHA-256 digest,
    so the id never contributes path separators. Returns None if the
    resolved path would still fall outside log_dir.
    """
    session_id = session_id or "anonymous"
    if not SESSION_ID_PATTERN.fullmatch(session_id):
        session_id = hashlib.sha256(session_id.encode("utf-8")).hexdigest()

    root = Path(log_dir).resolve()
    path = (root / f"{session_id}.jsonl").resolve()
    if path.parent != root:
        logger.warning(f"Refusing conversation log path outside {root}: {path}")
        return None
    return path


def log_conversation(session_id: str, user_message: Optional[str], result: ChatTurnResult) -> None:
    """Log a chat turn to stdout and, if configured, to a per-session JSONL file."""
    log_entry = {
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "user_message": user_message,
        "response_message": result.chat_content,
        "slots": result.slots.model_dump() if result.slots else None,
        "missing_slots": result.missing_slots,
        "can_generate": result.can_generate,
        "recommendations_count": len(result.recommendations),
        "variant": result.variant,
        "degraded": result.degraded,
    }

    log_dir = get_config().conversation_log_dir
    session_log_file = session_log_path(log_dir, session_id) if log_dir else None
    if session_log_file:
        try:
            session_log_file.parent.mkdir(parents=True, exist_ok=True)
            with open(session_log_file, "a", encoding="utf-8") as f:
                f.write(json.dumps(log_entry, ensure_ascii=False) + "\n")
        except OSError as e:
            logger.error(f"Failed to write conversation log: {e}")

    log_event(logger, f"CONVERSATION [{session_id}]:", log_entry)


# ---------------------------------------------------------------------------
# Collaborators: built once, overridable in tests via app.dependency_overrides
# ---------------------------------------------------------------------------

@lru_cache(maxsize=1)
def get_model_client() -> ModelClient:
    return ModelClient.from_config(get_config())


def get_chat_controller(client=Depends(get_model_client)) -> ChatController:
    return _cached_controller(client)


def get_name_generator(client=Depends(get_model_client)) -> NameGenerator:
    return _cached_generator(client)


@lru_cache(maxsize=4)
def _cached_controller(client) -> ChatController:
    return ChatController(client, config=get_config())


@lru_cache(maxsize=4)
def _cached_generator(client) -> NameGenerator:
    return NameGenerator(client, config=get_config())


# Initialize FastAPI app
app = FastAPI(
    title="English Namer API",
    description="Conversational English-name assistant with slot filling",
    version=namer.__version__,
)

# Enable CORS for frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.on_event("startup")
async def startup_event():
    config = get_config()
    setup_logging(config.log_level)
    logger.info(
        f"Server starting: version={namer.__version__}, chat_model={config.chat_model}, "
        f"generate_model={config.generate_model}, analytics={'on' if config.analytics_id else 'off'}"
    )


@app.exception_handler(NamerError)
async def namer_error_handler(request: Request, exc: NamerError):
    return JSONResponse(status_code=exc.status_code, content=ErrorResponse(error=str(exc)).model_dump())


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    logger.warning(f"Invalid request body for {request.url.path}: {exc.errors()}")
    return JSONResponse(status_code=400, content=ErrorResponse(error=MISSING_PARAMETER_MESSAGE).model_dump())


@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled error in {request.url.path}: {exc}\n{traceback.format_exc()}")
    return JSONResponse(status_code=500, content=ErrorResponse(error=INTERNAL_ERROR_MESSAGE).model_dump())


router = APIRouter()


@router.get("/healthz", response_model=HealthResponse)
def healthz():
    """Health check endpoint."""
    return HealthResponse(version=namer.__version__, status="ok")


@router.post("/chat", response_model=ChatResponse, responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}})
def chat(request: ChatRequest, controller: ChatController = Depends(get_chat_controller)):
    """
    Main conversation endpoint.

    Empty history returns a randomized opening; otherwise the model is
    called with the full history and the slot state is recomputed.
    """
    session_id = request.session_id or ""
    logger.info(f"sessionId: {session_id}, chatContent: {request.chat_content}")

    try:
        result = controller.process_turn(
            chat_content=request.chat_content,
            chat_history=request.chat_history,
            session_id=session_id,
        )
    except NamerError:
        raise
    except Exception as e:
        logger.error(f"Error in /chat: {e}\n{traceback.format_exc()}")
        return JSONResponse(status_code=500, content=ErrorResponse(error=INTERNAL_ERROR_MESSAGE).model_dump())

    log_conversation(session_id, request.chat_content, result)

    response = ChatResponse(
        chat_content=result.chat_content,
        quick_replies=result.quick_replies,
        slots=result.slots,
        missing_slots=result.missing_slots,
        can_generate=result.can_generate,
        session_id=result.session_id,
        recommendations=result.recommendations,
        has_recommendations=result.has_recommendations,
        variant=result.variant,
        is_reset=True if result.is_reset else None,
    )
    return JSONResponse(content=response.to_wire())


@router.post("/generate-names", response_model=GenerateNamesResponse, responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}})
def generate_names(request: GenerateNamesRequest, generator: NameGenerator = Depends(get_name_generator)):
    """Generate five detailed name recommendations from a slot snapshot."""
    if not request.session_id or request.slots is None:
        raise MissingParameterError(MISSING_PARAMETER_MESSAGE)

    try:
        recommendations = generator.generate(request.session_id, request.slots)
    except NamerError:
        raise
    except Exception as e:
        logger.error(f"Error in /generate-names: {e}\n{traceback.format_exc()}")
        return JSONResponse(status_code=500, content=ErrorResponse(error=INTERNAL_ERROR_MESSAGE).model_dump())

    return GenerateNamesResponse(recommendations=recommendations)


app.include_router(router)
app.include_router(router, prefix="/api/v1")


if __name__ == "__main__":
    import uvicorn

    print("=" * 60)
    print("English Namer API Server")
    print("=" * 60)
    print("API Documentation: http://localhost:8000/docs")
    print("Health endpoint:   http://localhost:8000/healthz")
    print("")
    print("Environment variables:")
    print("  OPENAI_API_KEY        - Model API credential")
    print("  OPENAI_MODEL          - Override the model for both call sites")
    print("  CONVERSATION_LOG_DIR  - Write per-session JSONL turn logs")
    print("=" * 60)

    uvicorn.run(app, host="0.0.0.0", port=8000)
