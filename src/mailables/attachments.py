# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Attachment declarations and their resolution to loaded payloads.

Attachments are declared with :class:`AttachmentSource` in one of three
lifecycles and resolved exactly once, during assembly, into
:class:`~mailables.models.Attachment` values carrying bytes:

- path: a filesystem path (absolute, or relative to the working directory);
  the filename defaults to the path's base name.
- storage: a path relative to the configured storage root; resolution is
  confined to that root (path traversal protection).
- data: bytes or text supplied inline, or a zero-argument callable
  returning them; a filename is required.

Example:
    Declaring and resolving attachments::

        sources = [
            AttachmentSource.from_path("./invoices/42.pdf").named("Invoice.pdf"),
            AttachmentSource.from_storage("reports/q3.csv").with_mime("text/csv"),
            AttachmentSource.from_data(b"ABC", "f.txt"),
        ]
        attachments = await AttachmentResolver(storage_dir="/srv/storage").resolve(sources)
"""

from __future__ import annotations

import asyncio
import mimetypes
from collections.abc import Callable, Iterable
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Union

from .errors import AttachmentError
from .logger import get_logger
from .models import Attachment

logger = get_logger("mailables.attachments")

AttachmentData = Union[bytes, str, Callable[[], Union[bytes, str]]]


@dataclass(frozen=True)
class AttachmentSource:
    """Declaration of one attachment, prior to resolution.

    Exactly one of ``path``, ``storage`` or ``data`` is set.

    Attributes:
        path: Filesystem path.
        storage: Path relative to the storage root.
        data: Inline payload or a callable producing it.
        filename: Presented filename (``as`` override for path sources).
        mime: Explicit MIME type.
    """

    path: str | None = None
    storage: str | None = None
    data: AttachmentData | None = None
    filename: str | None = None
    mime: str | None = None

    @classmethod
    def from_path(cls, path: str | Path) -> AttachmentSource:
        return cls(path=str(path))

    @classmethod
    def from_storage(cls, storage_path: str) -> AttachmentSource:
        return cls(storage=storage_path)

    @classmethod
    def from_data(cls, data: AttachmentData, filename: str) -> AttachmentSource:
        if not filename:
            raise ValueError("A filename is required for data attachments")
        return cls(data=data, filename=filename)

    def named(self, filename: str) -> AttachmentSource:
        """Return a copy presented under ``filename``."""
        return replace(self, filename=filename)

    def with_mime(self, mime: str) -> AttachmentSource:
        """Return a copy with an explicit MIME type."""
        return replace(self, mime=mime)

    @property
    def kind(self) -> str:
        if self.path is not None:
            return "path"
        if self.storage is not None:
            return "storage"
        if self.data is not None:
            return "data"
        return "empty"

    @property
    def display_name(self) -> str:
        return self.filename or self.path or self.storage or "attachment"


class FilesystemFetcher:
    """Fetcher for local filesystem attachments.

    Supports absolute paths and paths relative to ``base_dir``. When a base
    directory is configured, every path must resolve inside it.

    Attributes:
        _base_dir: Base directory for relative paths and security boundary.
    """

    def __init__(self, base_dir: str | Path | None = None):
        """Initialize the filesystem fetcher.

        Args:
            base_dir: Base directory for relative paths. If provided, all
                paths (including absolute) must resolve within it. If None,
                relative paths resolve against the working directory and no
                boundary is enforced.
        """
        self._base_dir: Path | None = None
        if base_dir:
            self._base_dir = Path(base_dir).resolve()

    async def fetch(self, path: str) -> bytes:
        """Read file content from the filesystem.

        Raises:
            ValueError: If path traversal is detected or path is invalid.
            FileNotFoundError: If the file does not exist.
            PermissionError: If the file cannot be read.
        """
        if not path:
            raise ValueError("Empty path provided")

        resolved_path = self._resolve_and_validate(path)
        return await asyncio.to_thread(resolved_path.read_bytes)

    def _resolve_and_validate(self, path: str) -> Path:
        path_obj = Path(path)

        if path_obj.is_absolute():
            resolved = path_obj.resolve()
        elif self._base_dir:
            resolved = (self._base_dir / path_obj).resolve()
        else:
            resolved = path_obj.resolve()

        if self._base_dir:
            try:
                resolved.relative_to(self._base_dir)
            except ValueError:
                raise ValueError(
                    f"Path traversal detected: '{path}' resolves outside base directory"
                ) from None

        if not resolved.exists():
            raise FileNotFoundError(f"File not found: {resolved}")

        if not resolved.is_file():
            raise ValueError(f"Not a regular file: {resolved}")

        return resolved

    @property
    def base_dir(self) -> Path | None:
        """The configured base directory."""
        return self._base_dir


class AttachmentResolver:
    """Resolve attachment declarations into loaded :class:`Attachment` values."""

    def __init__(self, storage_dir: str | Path | None = None):
        """Create a resolver.

        Args:
            storage_dir: Root for storage attachments. Defaults to
                ``<cwd>/storage``, evaluated at construction time.
        """
        self._path_fetcher = FilesystemFetcher()
        self._storage_fetcher = FilesystemFetcher(base_dir=storage_dir or Path.cwd() / "storage")

    async def resolve(self, sources: Iterable[AttachmentSource]) -> list[Attachment]:
        """Load every declaration, preserving declaration order.

        Raises:
            AttachmentError: If any source cannot be read. Nothing is skipped.
        """
        sources = list(sources)
        results = await asyncio.gather(
            *[self._resolve_one(source) for source in sources],
            return_exceptions=True,
        )
        attachments: list[Attachment] = []
        for source, result in zip(sources, results, strict=True):
            if isinstance(result, AttachmentError):
                raise result
            if isinstance(result, BaseException):
                logger.error("Failed to load attachment %s: %s", source.display_name, result)
                raise AttachmentError(
                    source.filename, source.path or source.storage, str(result)
                ) from result
            attachments.append(result)
        return attachments

    async def _resolve_one(self, source: AttachmentSource) -> Attachment:
        if source.path is not None:
            content = await self._path_fetcher.fetch(source.path)
            filename = source.filename or Path(source.path).name
        elif source.storage is not None:
            content = await self._storage_fetcher.fetch(source.storage)
            filename = source.filename or Path(source.storage).name
        elif source.data is not None:
            data = source.data() if callable(source.data) else source.data
            content = data.encode("utf-8") if isinstance(data, str) else bytes(data)
            filename = source.filename or "attachment"
        else:
            raise AttachmentError(source.filename, None, "no path, storage or data declared")
        return Attachment(filename=filename, content=content, content_type=source.mime)


def guess_mime(filename: str) -> tuple[str, str]:
    """Determine the MIME type for a filename based on its extension."""
    mt, _ = mimetypes.guess_type(filename)
    if not mt:
        return ("application", "octet-stream")
    return tuple(mt.split("/", 1))  # type: ignore[return-value]


def split_mime(attachment: Attachment) -> tuple[str, str]:
    """Return ``(maintype, subtype)`` for an attachment."""
    if attachment.content_type and "/" in attachment.content_type:
        maintype, subtype = attachment.content_type.split("/", 1)
        return maintype, subtype
    return guess_mime(attachment.filename)


__all__ = [
    "AttachmentResolver",
    "AttachmentSource",
    "FilesystemFetcher",
    "guess_mime",
    "split_mime",
]
