# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Asyncio-friendly SMTP connection pool.

Connections are keyed by asyncio task, so concurrent sends never share a
client while sequential sends from one task reuse the same session. A
pooled connection is handed out again only if it was opened with the same
parameters, is younger than the TTL and answers a NOOP; otherwise it is
closed and replaced. When the owning task finishes its connection is
dropped from the pool and quit in the background, so short-lived tasks (one
per request in a web host) do not accumulate open sessions.

Example:
    Reusing connections across sends::

        pool = SMTPPool(ttl=300)
        smtp = await pool.get_connection(
            "smtp.example.com", 465, "mailer", "secret", use_tls=True, start_tls=False
        )
        await smtp.send_message(message)
        await pool.cleanup()
"""

from __future__ import annotations

import asyncio
import time

import aiosmtplib

from ..logger import get_logger

logger = get_logger("mailables.transports.smtp")

ConnectionParams = tuple[str, int, str | None, str | None, bool, bool | None]


class SMTPPool:
    """Per-task SMTP connection pool.

    Attributes:
        ttl: Maximum age in seconds of a reusable connection.
        timeout: Connect/login timeout in seconds.
        pool: Task id to ``(client, last_used, params)``.
        lock: Guards ``pool``.
    """

    def __init__(self, ttl: int = 300, timeout: float = 10.0):
        self.ttl = ttl
        self.timeout = timeout
        self.pool: dict[int, tuple[aiosmtplib.SMTP, float, ConnectionParams]] = {}
        self.lock = asyncio.Lock()
        self._watched: set[int] = set()
        self._closing: set[asyncio.Task] = set()

    async def _connect(
        self,
        host: str,
        port: int,
        user: str | None,
        password: str | None,
        use_tls: bool,
        start_tls: bool | None,
    ) -> aiosmtplib.SMTP:
        """Open and authenticate a new client.

        ``use_tls`` selects implicit TLS. ``start_tls`` is passed through to
        aiosmtplib: ``None`` upgrades when the server offers STARTTLS,
        ``False`` never upgrades.

        Raises:
            asyncio.TimeoutError: If connecting takes longer than ``timeout``.
            aiosmtplib.SMTPException: If connection or authentication fails.
        """
        smtp = aiosmtplib.SMTP(
            hostname=host,
            port=port,
            use_tls=use_tls,
            start_tls=False if use_tls else start_tls,
            timeout=self.timeout,
        )

        async def _do_connect():
            await smtp.connect()
            if user and password:
                await smtp.login(user, password)

        await asyncio.wait_for(_do_connect(), timeout=self.timeout + 5.0)
        logger.debug("Opened SMTP connection to %s:%s", host, port)
        return smtp

    async def _is_alive(self, smtp: aiosmtplib.SMTP) -> bool:
        """Return True if the connection answers NOOP with 250."""
        try:
            code, _ = await asyncio.wait_for(smtp.noop(), timeout=5.0)
            return code == 250
        except Exception as exc:
            logger.debug("SMTP connection failed liveness check: %s", exc)
            return False

    async def _quit(self, smtp: aiosmtplib.SMTP) -> None:
        try:
            await smtp.quit()
        except Exception as exc:
            logger.debug("Error closing SMTP connection: %s", exc)

    async def get_connection(
        self,
        host: str,
        port: int,
        user: str | None,
        password: str | None,
        *,
        use_tls: bool,
        start_tls: bool | None = None,
    ) -> aiosmtplib.SMTP:
        """Return a live connection for the current task, opening one if needed.

        Raises:
            asyncio.TimeoutError: If connection establishment times out.
            aiosmtplib.SMTPException: If connection or authentication fails.
        """
        task = asyncio.current_task()
        task_id = id(task)
        params: ConnectionParams = (host, port, user, password, use_tls, start_tls)

        async with self.lock:
            entry = self.pool.get(task_id)

        if entry:
            smtp, last_used, pooled_params = entry
            if pooled_params == params and (time.time() - last_used) < self.ttl:
                if await self._is_alive(smtp):
                    async with self.lock:
                        self.pool[task_id] = (smtp, time.time(), params)
                    return smtp
            async with self.lock:
                self.pool.pop(task_id, None)
            await self._quit(smtp)

        smtp = await self._connect(host, port, user, password, use_tls, start_tls)
        async with self.lock:
            self.pool[task_id] = (smtp, time.time(), params)
        self._watch(task_id, task)
        return smtp

    def _watch(self, task_id: int, task: asyncio.Task | None) -> None:
        if task is None or task_id in self._watched:
            return
        self._watched.add(task_id)
        task.add_done_callback(lambda _task: self._release(task_id))

    def _release(self, task_id: int) -> None:
        """Drop the finished task's connection and quit it in the background.

        Runs as a task done callback, on the loop thread, so it cannot await
        the lock; a plain dict pop is safe there.
        """
        self._watched.discard(task_id)
        entry = self.pool.pop(task_id, None)
        if entry is None:
            return
        closer = asyncio.ensure_future(self._quit(entry[0]))
        self._closing.add(closer)
        closer.add_done_callback(self._closing.discard)

    async def cleanup(self) -> None:
        """Close and drop connections that expired or fail the liveness check."""
        now = time.time()
        async with self.lock:
            items = list(self.pool.items())

        expired: list[tuple[int, aiosmtplib.SMTP]] = []
        for task_id, (smtp, last_used, _params) in items:
            if (now - last_used) > self.ttl or not await self._is_alive(smtp):
                expired.append((task_id, smtp))

        for task_id, _smtp in expired:
            async with self.lock:
                entry = self.pool.pop(task_id, None)
            if entry:
                await self._quit(entry[0])

    async def close_all(self) -> None:
        """Close every pooled connection."""
        async with self.lock:
            entries = list(self.pool.values())
            self.pool.clear()
        for smtp, _last_used, _params in entries:
            await self._quit(smtp)
        if self._closing:
            await asyncio.gather(*self._closing)


__all__ = ["SMTPPool"]
