"""FastAPI web server exposing chat sessions and the streaming model relay."""

from __future__ import annotations

import logging
import time
from typing import Any, Callable, Dict, List, Optional

import httpx
from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse, StreamingResponse
from pydantic import BaseModel

from .clients import ChatStreamClient, ChatStreamError, team_from_wire
from .config import load_settings
from .models import Team
from .parsers import export_team, parse_team
from .relay import AnthropicStreamRelay, UsageLog, build_anthropic_request, relay_stream
from .session import ChatSession, PendingActionError, SessionLimitError, SessionRegistry

logger = logging.getLogger("poke_chat.web")

app = FastAPI(
    title="Poke-Chat Web API",
    description="Streaming team-building chat with reviewable team edits",
    version="0.1.0",
)

_SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "X-Accel-Buffering": "no",
    "Connection": "keep-alive",
}

_settings = load_settings()


def _make_session(session_id: Optional[str]) -> ChatSession:
    return ChatSession(
        ChatStreamClient(settings=_settings),
        session_id=session_id,
        team=Team(format=_settings.format),
        history_limit=_settings.history_limit,
        debug_logger=logger.debug,
    )


_registry = SessionRegistry(
    _make_session,
    max_sessions=_settings.max_sessions,
    ttl=_settings.session_ttl,
    debug_logger=logger.info,
)


def _upstream_client() -> httpx.AsyncClient:
    return httpx.AsyncClient(timeout=_settings.timeout)


class RateLimiter:
    """Fixed-window request counter keyed by client address."""

    def __init__(
        self,
        *,
        max_requests: int = 10,
        window: float = 60.0,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.max_requests = max_requests
        self.window = window
        self._clock = clock
        self._windows: Dict[str, tuple[int, float]] = {}

    def is_limited(self, key: str) -> bool:
        now = self._clock()
        self._windows = {k: v for k, v in self._windows.items() if now <= v[1]}
        count, reset_at = self._windows.get(key, (0, now + self.window))
        count += 1
        self._windows[key] = (count, reset_at)
        return count > self.max_requests


_rate_limiter = RateLimiter()


# Pydantic models for request/response
class TeamTextRequest(BaseModel):
    """Request model for Showdown team text."""

    team_text: str


class CreateSessionRequest(BaseModel):
    team_text: Optional[str] = None


class MessageRequest(BaseModel):
    message: str


class SessionResponse(BaseModel):
    """Snapshot of a session: team, pending action and history."""

    result: Dict[str, Any]


class StreamChatRequest(BaseModel):
    message: str = ""
    team: List[Optional[Dict[str, Any]]] = []
    format: str = "gen9ou"
    mode: str = "singles"
    enableThinking: bool = False
    personality: Optional[str] = None
    chatHistory: List[Dict[str, Any]] = []


def _get_session(session_id: str) -> ChatSession:
    try:
        return _registry.get(session_id)
    except KeyError:
        raise HTTPException(status_code=404, detail=f"Unknown session: {session_id}")


def _session_payload(session: ChatSession) -> Dict[str, Any]:
    team = session.team
    pending = session.pending
    return {
        "session_id": session.id,
        "team": team.to_dict(),
        "team_text": export_team(team),
        "state": session.controller.state.value,
        "pending": pending.to_dict() if pending else None,
        "queued": len(session.controller.queued),
        "history": [
            {
                "id": entry.id,
                "label": entry.label,
                "origin": entry.origin,
                "timestamp": entry.timestamp.isoformat(),
            }
            for entry in session.history.entries
        ],
    }


def _parse_or_400(team_text: str) -> Team:
    try:
        return parse_team(team_text, format_hint=_settings.format)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=f"Failed to parse team: {exc}")


@app.post("/api/sessions", response_model=SessionResponse)
async def create_session(request: CreateSessionRequest) -> SessionResponse:
    """Start a new chat session, optionally seeded with a Showdown team."""
    team = _parse_or_400(request.team_text) if request.team_text else None
    try:
        session = _registry.create()
    except SessionLimitError as exc:
        raise HTTPException(status_code=503, detail=str(exc))
    if team is not None:
        session.import_team(team)
    return SessionResponse(result=_session_payload(session))


@app.get("/api/sessions/{session_id}", response_model=SessionResponse)
async def get_session(session_id: str) -> SessionResponse:
    return SessionResponse(result=_session_payload(_get_session(session_id)))


@app.delete("/api/sessions/{session_id}")
async def delete_session(session_id: str) -> Dict[str, Any]:
    if not _registry.destroy(session_id):
        raise HTTPException(status_code=404, detail=f"Unknown session: {session_id}")
    return {"deleted": session_id}


@app.put("/api/sessions/{session_id}/team", response_model=SessionResponse)
async def import_team(session_id: str, request: TeamTextRequest) -> SessionResponse:
    """Replace the session's team with a parsed Showdown export."""
    session = _get_session(session_id)
    session.import_team(_parse_or_400(request.team_text))
    return SessionResponse(result=_session_payload(session))


@app.post("/api/sessions/{session_id}/messages", response_model=SessionResponse)
async def send_message(session_id: str, request: MessageRequest) -> SessionResponse:
    """Stream one assistant reply and surface its first suggested change."""
    session = _get_session(session_id)
    try:
        result = await session.send(request.message)
    except ChatStreamError as exc:
        raise HTTPException(status_code=502, detail=f"Chat stream failed: {exc}")
    payload = _session_payload(session)
    payload["content"] = result.content if result else None
    payload["thinking"] = result.thinking if result else None
    return SessionResponse(result=payload)


@app.post("/api/sessions/{session_id}/apply", response_model=SessionResponse)
async def apply_action(session_id: str) -> SessionResponse:
    session = _get_session(session_id)
    try:
        session.apply()
    except PendingActionError as exc:
        raise HTTPException(status_code=409, detail=str(exc))
    return SessionResponse(result=_session_payload(session))


@app.post("/api/sessions/{session_id}/dismiss", response_model=SessionResponse)
async def dismiss_action(session_id: str) -> SessionResponse:
    session = _get_session(session_id)
    try:
        session.dismiss()
    except PendingActionError as exc:
        raise HTTPException(status_code=409, detail=str(exc))
    return SessionResponse(result=_session_payload(session))


@app.post("/api/sessions/{session_id}/retry", response_model=SessionResponse)
async def retry_message(session_id: str) -> SessionResponse:
    session = _get_session(session_id)
    try:
        result = await session.retry()
    except PendingActionError as exc:
        raise HTTPException(status_code=409, detail=str(exc))
    except ChatStreamError as exc:
        raise HTTPException(status_code=502, detail=f"Chat stream failed: {exc}")
    payload = _session_payload(session)
    payload["content"] = result.content if result else None
    return SessionResponse(result=payload)


def _client_ip(request: Request) -> str:
    forwarded = request.headers.get("x-forwarded-for", "").split(",")[0].strip()
    return (
        request.headers.get("cf-connecting-ip")
        or forwarded
        or (request.client.host if request.client else "")
        or "unknown"
    )


@app.post("/api/ai/claude/stream")
async def claude_stream(payload: StreamChatRequest, request: Request):
    """Relay a streamed Claude reply in the simplified chat wire format."""
    if _rate_limiter.is_limited(_client_ip(request)):
        return JSONResponse(
            {"error": "Too many requests. Please wait a minute before trying again."},
            status_code=429,
            headers={"Retry-After": "60"},
        )
    if not payload.message:
        return JSONResponse({"error": "Message is required"}, status_code=400)
    if not _settings.anthropic_api_key:
        return JSONResponse({"error": "Claude API key not configured"}, status_code=503)

    try:
        team = team_from_wire(payload.team, payload.format)
    except ValueError as exc:
        return JSONResponse({"error": str(exc)}, status_code=400)
    body = build_anthropic_request(
        payload.message,
        team,
        model=_settings.anthropic_model,
        mode=payload.mode,
        enable_thinking=payload.enableThinking,
        chat_history=payload.chatHistory,
    )
    usage = UsageLog(
        format=payload.format,
        personality=payload.personality or "",
        mode=payload.mode,
        team_size=len(team.pokemon),
        thinking_enabled=payload.enableThinking,
    )

    client = _upstream_client()
    upstream_request = client.build_request(
        "POST",
        _settings.anthropic_url,
        json=body,
        headers={
            "x-api-key": _settings.anthropic_api_key,
            "anthropic-version": "2023-06-01",
            "anthropic-beta": "prompt-caching-2024-07-31",
        },
    )
    try:
        upstream = await client.send(upstream_request, stream=True)
    except httpx.HTTPError as exc:
        await client.aclose()
        logger.error("Claude streaming error: %s", exc)
        return JSONResponse({"error": "Failed to process Claude request"}, status_code=500)

    if upstream.status_code >= 400:
        error_text = (await upstream.aread()).decode("utf-8", errors="replace")
        await upstream.aclose()
        await client.aclose()
        logger.error("Claude API error: %s %s", upstream.status_code, error_text)
        return JSONResponse({"error": "Claude API request failed"}, status_code=upstream.status_code)

    async def event_generator():
        relay = AnthropicStreamRelay(usage=usage, debug_logger=logger.info)
        try:
            async for line in relay_stream(upstream.aiter_bytes(), relay):
                yield line
        finally:
            await upstream.aclose()
            await client.aclose()

    return StreamingResponse(event_generator(), media_type="text/event-stream", headers=_SSE_HEADERS)


def run(host: str = "127.0.0.1", port: int = 8000) -> None:
    """Entry point for running the web server."""
    import uvicorn

    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s %(message)s")
    print(f"[poke-chat-web] Starting web server at http://{host}:{port}")
    print("[poke-chat-web] Press Ctrl+C to stop.")
    uvicorn.run(app, host=host, port=port)


if __name__ == "__main__":
    run()
