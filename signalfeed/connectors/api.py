"""Shared HTTP plumbing for JSON API connectors: aiohttp + tenacity retry."""

from __future__ import annotations

import logging
import os
import re
from typing import Any, Dict, Optional

import aiohttp
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from signalfeed.connectors.base import BaseConnector

logger = logging.getLogger(__name__)

DEFAULT_USER_AGENT = "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
DEFAULT_HTTP_TIMEOUT = 15

_ENV_PATTERN = re.compile(r"\$\{(\w+)\}")


def resolve_headers(headers: Dict[str, Any]) -> Dict[str, str]:
    """Resolve ${ENV_VAR} in header values. Headers that resolve to nothing (missing token) are dropped."""
    out: Dict[str, str] = {}
    for k, v in headers.items():
        s = _ENV_PATTERN.sub(lambda m: os.environ.get(m.group(1), ""), str(v)).strip()
        if not s or (k.lower() == "authorization" and s.lower() == "bearer"):
            continue
        out[k] = s
    if "User-Agent" not in out:
        out["User-Agent"] = DEFAULT_USER_AGENT
    return out


class APIConnector(BaseConnector):
    """Connector backed by a JSON HTTP API.

    ``request_json`` returns the decoded body, or None when the platform
    answers 401/403 (missing or rejected credentials); other HTTP errors
    are retried and finally raised.
    """

    base_url: str = ""

    def __init__(self, config: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(config)
        self.url: str = self.config.get("url") or self.base_url
        self.headers = resolve_headers(self.config.get("headers") or {})
        self.http_timeout = float(self.config.get("http_timeout_seconds", DEFAULT_HTTP_TIMEOUT))

    @retry(
        retry=retry_if_exception_type((aiohttp.ClientError, OSError, ConnectionError)),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=60),
        reraise=True,
    )
    async def request_json(
        self,
        url: str,
        params: Optional[Dict[str, Any]] = None,
        method: str = "GET",
        json_body: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> Any:
        merged = {**self.headers, **(headers or {})}
        timeout = aiohttp.ClientTimeout(total=self.http_timeout)
        async with aiohttp.ClientSession(timeout=timeout) as session:
            async with session.request(
                method, url, params=params, json=json_body, headers=merged
            ) as resp:
                if resp.status in (401, 403):
                    logger.warning(
                        "Source %s returned %s (auth/rate limit). Set a token in the environment if required.",
                        self.source_id, resp.status,
                    )
                    return None
                resp.raise_for_status()
                return await resp.json(content_type=None)
