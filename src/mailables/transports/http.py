# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Shared request handling for HTTP API providers (aiohttp)."""

from __future__ import annotations

import base64
from typing import Any

import aiohttp

from ..errors import TransportError
from .base import MailTransport


class HttpMailTransport(MailTransport):
    """Base for providers reached over an authenticated HTTPS API.

    A session is opened per request; adapters hold no connection state, so
    ``close()`` has nothing to release.
    """

    timeout: float = 30.0

    def _auth(self) -> aiohttp.BasicAuth | None:
        return None

    def _headers(self) -> dict[str, str]:
        return {}

    async def _request(self, method: str, url: str, **kwargs: Any) -> Any:
        """Perform one request and return the decoded JSON body.

        Raises:
            TransportError: If the provider answers with a non-2xx status.
            aiohttp.ClientError: On connection failures.
        """
        self.logger.debug("%s %s %s", self.provider, method, url)
        async with aiohttp.ClientSession(timeout=aiohttp.ClientTimeout(total=self.timeout)) as session, session.request(
            method,
            url,
            auth=self._auth(),
            headers=self._headers() or None,
            **kwargs,
        ) as resp:
            if resp.status >= 400:
                body = await resp.text()
                raise TransportError(self.provider, f"HTTP {resp.status}: {body}")
            if resp.content_type == "application/json":
                return await resp.json()
            return await resp.text()

    async def _probe(self, url: str) -> bool:
        try:
            await self._request("GET", url)
        except Exception as exc:
            self.logger.warning("%s verification failed: %s", self.provider, exc)
            return False
        return True


def b64(data: bytes) -> str:
    return base64.b64encode(data).decode("ascii")


__all__ = ["HttpMailTransport", "b64"]
