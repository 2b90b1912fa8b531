"""FastAPI application exposing the birthday assistant over HTTP.

``POST /`` is the strict JSON-RPC (A2A ``message/send``) entry point; the
``/api/*`` routes offer the same operations as structured JSON endpoints.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from app.config import get_agent_card_path, get_agent_name, get_reminder_webhook_url
from app.main import build_orchestrator
from core.agent_card import AgentCardLoader, AgentCardNotFound
from core.birthday_calendar import birthdays_on, upcoming_birthdays
from core.envelope import (
    INVALID_PARAMS,
    INVALID_REQUEST,
    METHOD_NOT_FOUND,
    PARSE_ERROR,
    extract_jsonrpc_text,
    jsonrpc_error,
)
from core.orchestrator import Orchestrator
from core.parser_utils import InvalidDateError
from core.reminders import WebhookNotifier, run_daily_check
from core.wish_generator import generate_with_fallback

logger = logging.getLogger(__name__)

MESSAGE_SEND_METHOD = "message/send"


class AddBirthdayRequest(BaseModel):
    name: str
    date: str


class WishRequest(BaseModel):
    name: str = ""
    age: int = 0


class WebhookEvent(BaseModel):
    event: str = ""
    data: Any = None


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


def _parse_age(raw: Optional[str]) -> int:
    if not raw:
        return 0
    try:
        value = int(raw)
    except ValueError:
        return 0
    return value if value > 0 else 0


async def _read_json_body(request: Request) -> Any:
    raw = await request.body()
    return json.loads(raw.decode("utf-8"))


def create_app(
    orchestrator: Optional[Orchestrator] = None,
    *,
    agent_card_loader: Optional[AgentCardLoader] = None,
    notifier: Optional[WebhookNotifier] = None,
    agent_name: Optional[str] = None,
) -> FastAPI:
    """Build the FastAPI app around ``orchestrator`` (tests pass their own collaborators)."""
    orch = orchestrator or build_orchestrator()
    card_path = get_agent_card_path()
    card_loader = agent_card_loader or AgentCardLoader([card_path] if card_path else None)
    card_loader.check()
    if notifier is None:
        webhook_url = get_reminder_webhook_url()
        notifier = WebhookNotifier(webhook_url) if webhook_url else None

    app = FastAPI(title="Birthday Assistant API", version="1.0.0")
    app.state.orchestrator = orch
    app.state.agent_card_loader = card_loader
    app.state.notifier = notifier
    app.state.agent_name = agent_name or get_agent_name()

    @app.exception_handler(RequestValidationError)
    async def invalid_body(request: Request, exc: RequestValidationError) -> JSONResponse:
        logger.info("Rejected request body on %s: %s", request.url.path, exc.errors())
        return _error(400, "Invalid request body")

    async def _reply(payload: Dict[str, Any]) -> Dict[str, Any]:
        return await run_in_threadpool(app.state.orchestrator.reply, payload)

    # -- A2A / JSON-RPC ----------------------------------------------------------
    @app.post("/")
    async def telex_a2a(request: Request) -> Any:
        try:
            payload = await _read_json_body(request)
        except (UnicodeDecodeError, json.JSONDecodeError):
            return JSONResponse(status_code=400, content=jsonrpc_error(PARSE_ERROR, "Parse error"))

        if not isinstance(payload, dict) or payload.get("jsonrpc") != "2.0":
            return JSONResponse(status_code=400, content=jsonrpc_error(INVALID_REQUEST, "Invalid Request"))

        request_id = payload.get("id")
        method = payload.get("method")
        if not isinstance(method, str):
            return JSONResponse(
                status_code=400,
                content=jsonrpc_error(INVALID_REQUEST, "Invalid Request - missing method", request_id),
            )
        logger.info("A2A method %s (id=%s)", method, request_id)
        if method != MESSAGE_SEND_METHOD:
            return JSONResponse(status_code=400, content=jsonrpc_error(METHOD_NOT_FOUND, "Method not found", request_id))

        text = extract_jsonrpc_text(payload)
        if not text:
            return JSONResponse(
                status_code=400,
                content=jsonrpc_error(INVALID_PARAMS, "Invalid params - no text content found", request_id),
            )
        return await _reply(payload)

    @app.post("/api/a2a/message")
    async def a2a_message(request: Request) -> Any:
        try:
            payload = await _read_json_body(request)
        except (UnicodeDecodeError, json.JSONDecodeError):
            return _error(400, "Invalid A2A message")
        if not isinstance(payload, dict):
            return _error(400, "Invalid A2A message")

        if payload.get("jsonrpc") == "2.0":
            method = payload.get("method")
            if not isinstance(method, str):
                return _error(400, "Missing JSONRPC method")
            if method != MESSAGE_SEND_METHOD:
                logger.info("Unsupported JSONRPC method: %s", method)
                return JSONResponse(
                    status_code=400,
                    content=jsonrpc_error(METHOD_NOT_FOUND, "Method not found", payload.get("id")),
                )
        return await _reply(payload)

    # -- Service metadata --------------------------------------------------------
    @app.get("/health")
    def health() -> Dict[str, Any]:
        return {"status": "healthy", "agent": app.state.agent_name}

    @app.get("/.well-known/agent.json")
    def agent_card() -> Any:
        try:
            return app.state.agent_card_loader.load()
        except AgentCardNotFound as exc:
            return _error(404, str(exc))

    # -- Birthdays ---------------------------------------------------------------
    @app.post("/api/birthdays", status_code=201)
    def add_birthday(payload: AddBirthdayRequest) -> Any:
        try:
            record_id = app.state.orchestrator.store.add_birthday(payload.name, payload.date)
        except InvalidDateError as exc:
            return _error(400, f"Failed to add birthday: {exc}")
        return {
            "message": "Birthday added successfully",
            "name": payload.name,
            "date": payload.date,
            "id": record_id,
        }

    @app.get("/api/birthdays")
    def list_birthdays() -> Dict[str, Any]:
        records = app.state.orchestrator.store.list()
        return {"birthdays": [record.to_dict() for record in records], "total": len(records)}

    @app.get("/api/birthdays/today")
    def todays_birthdays() -> Dict[str, Any]:
        orch = app.state.orchestrator
        today = birthdays_on(orch.store.list(), orch.now().date())
        return {"birthdays": [record.to_dict() for record in today], "count": len(today)}

    @app.get("/api/birthdays/upcoming")
    def upcoming() -> Dict[str, Any]:
        orch = app.state.orchestrator
        items = upcoming_birthdays(orch.store.list(), orch.now(), orch.window_days)
        return {"birthdays": [item.to_dict() for item in items], "count": len(items)}

    # -- Wishes ------------------------------------------------------------------
    def _wish_response(name: str, age: int, **extra: Any) -> Dict[str, Any]:
        wish, source = generate_with_fallback(app.state.orchestrator.wish_generator, name, age or None)
        body: Dict[str, Any] = {**extra, "name": name, "wish": wish, "source": source}
        if age > 0:
            body["age"] = age
        return body

    @app.post("/api/wishes/generate")
    def generate_wish(payload: WishRequest) -> Any:
        name = payload.name.strip()
        if not name:
            return _error(400, "Name is required")
        return _wish_response(name, max(payload.age, 0))

    @app.get("/api/wishes/person/{person_id}")
    def wish_for_person(person_id: str) -> Any:
        record = app.state.orchestrator.store.get(person_id)
        if record is None:
            return _error(404, "Person not found")
        return _wish_response(record.name, 0, id=record.id)

    @app.get("/api/wishes/simple")
    def simple_wish(name: str = "", age: Optional[str] = None) -> Any:
        clean = name.strip()
        if not clean:
            return _error(400, "Name parameter is required")
        return _wish_response(clean, _parse_age(age))

    # -- Webhooks ----------------------------------------------------------------
    @app.post("/api/telex/webhook")
    def telex_webhook(payload: WebhookEvent) -> Dict[str, Any]:
        logger.info("Received webhook event: %s", payload.event)
        if payload.event == "daily_check":
            orch = app.state.orchestrator
            summary = run_daily_check(
                orch.store,
                orch.now(),
                wish_generator=orch.wish_generator,
                notifier=app.state.notifier,
            )
            return {
                "status": "ok",
                "event": payload.event,
                "today": len(summary["today"]),
                "tomorrow": len(summary["tomorrow"]),
                "dispatched": summary["dispatched"],
                "failed": summary["failed"],
            }
        logger.warning("Unknown webhook event: %s", payload.event)
        return {"status": "ok", "event": payload.event}

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    from app.config import configure_logging, get_host, get_port

    configure_logging()
    uvicorn.run(
        "app.web_api:app",
        host=get_host(),
        port=get_port(),
        reload=False,
    )
