"""HTTP endpoint for injecting messages into registered chats.

Meant to sit behind a private network (e.g. Tailscale serve). Injected
messages are stored exactly like inbound channel messages, so the normal
message loop picks them up.
"""

from __future__ import annotations

import hmac
import json
import secrets
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable

from aiohttp import web

from hostbus.groups.types import RegisteredGroup
from hostbus.infrastructure.config import INJECT_MAX_BODY_BYTES
from hostbus.infrastructure.logger import logger
from hostbus.messaging.repository import MessageRepository
from hostbus.messaging.types import NewMessage


@dataclass
class InjectDeps:
    secret: str
    registered_groups: Callable[[], dict[str, RegisteredGroup]]
    message_repo: MessageRepository


deps_key = web.AppKey("deps", InjectDeps)


def _error(status: int, message: str) -> web.Response:
    return web.json_response({"error": message}, status=status)


def _authorized(request: web.Request, secret: str) -> bool:
    header = request.headers.get("Authorization", "")
    return hmac.compare_digest(header.encode(), f"Bearer {secret}".encode())


async def _handle(request: web.Request) -> web.Response:
    if request.method != "POST" or request.path != "/inject":
        return _error(404, "not found")

    deps = request.app[deps_key]
    if not _authorized(request, deps.secret):
        logger.warning("Inject: unauthorized request", ip=request.remote)
        return _error(401, "unauthorized")

    # Raises HTTPRequestEntityTooLarge (413) past client_max_size
    body = await request.read()
    try:
        data = json.loads(body)
    except (json.JSONDecodeError, UnicodeDecodeError):
        return _error(400, "invalid JSON")
    if not isinstance(data, dict):
        return _error(400, "invalid JSON")

    chat_jid = data.get("chatJid")
    text = data.get("text")
    sender_name = data.get("senderName") or "inject"

    if not chat_jid or not isinstance(chat_jid, str):
        return _error(400, "chatJid is required")
    if not text or not isinstance(text, str):
        return _error(400, "text is required")
    if not isinstance(sender_name, str):
        return _error(400, "senderName must be a string")

    # Only registered groups, so the endpoint can't reach arbitrary chats
    if chat_jid not in deps.registered_groups():
        return _error(403, f"chatJid {chat_jid} is not registered")

    timestamp = datetime.now(timezone.utc).isoformat()
    message_id = f"inject-{secrets.token_hex(6)}"

    deps.message_repo.upsert_chat(chat_jid, timestamp)
    deps.message_repo.store_message(NewMessage(
        id=message_id,
        chat_jid=chat_jid,
        sender="inject",
        sender_name=sender_name,
        content=text,
        timestamp=timestamp,
        is_from_me=False,
    ))

    logger.info("Inject: message queued", chat_jid=chat_jid, sender_name=sender_name, message_id=message_id)
    return web.json_response({"ok": True, "messageId": message_id})


def create_inject_app(deps: InjectDeps) -> web.Application:
    app = web.Application(client_max_size=INJECT_MAX_BODY_BYTES)
    app[deps_key] = deps
    app.router.add_route("*", "/{tail:.*}", _handle)
    return app


async def start_inject_server(host: str, port: int, deps: InjectDeps) -> web.AppRunner:
    """Create, start, and return the inject server runner."""
    runner = web.AppRunner(create_inject_app(deps))
    await runner.setup()
    site = web.TCPSite(runner, host, port)
    await site.start()
    logger.info("Inject server listening", host=host, port=port)
    return runner
