"""HTTP query layer over FeedService (aiohttp.web).

Routes:
    GET  /feed?topic=...      ranked feed
    POST /feed {"topic": ...}  ranked feed
    GET  /health
"""

from __future__ import annotations

import logging
from typing import Any

from aiohttp import web

from signalfeed.errors import InvalidTopicError, RateLimitExceeded
from signalfeed.guards.rate_limiter import client_identifier
from signalfeed.pipeline.service import FeedService
from signalfeed.validation import sanitize_topic, validate_topic

logger = logging.getLogger(__name__)

SERVICE_KEY = web.AppKey("service", FeedService)


def _error(status: int, payload: dict[str, Any], headers: dict[str, str] | None = None) -> web.Response:
    return web.json_response({"error": payload}, status=status, headers=headers)


async def _read_topic(request: web.Request) -> str:
    if request.method == "POST":
        try:
            body = await request.json()
        except ValueError:
            raise InvalidTopicError("Request body must be JSON")
        topic = body.get("topic") if isinstance(body, dict) else None
    else:
        topic = request.query.get("topic")
    if not isinstance(topic, str):
        raise InvalidTopicError("Please enter a topic to search for")
    return sanitize_topic(validate_topic(topic))


async def handle_feed(request: web.Request) -> web.Response:
    service = request.app[SERVICE_KEY]
    identifier = client_identifier(request.headers, request.remote)
    try:
        topic = await _read_topic(request)
        items = await service.get_ranked_feed(topic, identifier=identifier)
    except InvalidTopicError as e:
        return _error(400, e.to_dict())
    except RateLimitExceeded as e:
        logger.info("Rate limit exceeded for %s, retry after %ss", identifier, e.retry_after_seconds)
        return _error(429, e.to_dict(), headers={"Retry-After": str(e.retry_after_seconds)})
    return web.json_response({"topic": topic, "items": [it.to_dict() for it in items]})


async def handle_health(request: web.Request) -> web.Response:
    return web.json_response({"status": "ok"})


def create_app(service: FeedService) -> web.Application:
    app = web.Application()
    app[SERVICE_KEY] = service
    app.router.add_get("/feed", handle_feed)
    app.router.add_post("/feed", handle_feed)
    app.router.add_get("/health", handle_health)

    async def _start_guards(app: web.Application) -> None:
        if service.rate_limiter is not None:
            service.rate_limiter.start()

    async def _stop_guards(app: web.Application) -> None:
        if service.rate_limiter is not None:
            await service.rate_limiter.close()

    app.on_startup.append(_start_guards)
    app.on_cleanup.append(_stop_guards)
    return app
