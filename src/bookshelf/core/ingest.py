"""Validate, encode and preview uploaded cover and document files."""

from __future__ import annotations

import asyncio
import base64
import binascii
import mimetypes
import uuid
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from pathlib import Path

import structlog

from .errors import InvalidState, IOFailure

log = structlog.get_logger()

COVER_MEDIA_TYPES = frozenset({"image/jpeg", "image/jpg", "image/png", "image/webp"})
DOCUMENT_MEDIA_TYPES = frozenset({"application/pdf"})
MAX_COVER_BYTES = 5 * 1024 * 1024
MAX_DOCUMENT_BYTES = 50 * 1024 * 1024

# data:<media type>;base64,<payload>
EncodedContent = str


@dataclass(frozen=True)
class FileHandle:
    """A picked or dropped file: metadata up front, content read on demand."""

    name: str
    media_type: str
    size: int
    reader: Callable[[], Awaitable[bytes]]

    async def read(self) -> bytes:
        return await self.reader()

    @classmethod
    def from_bytes(cls, name: str, media_type: str, content: bytes) -> FileHandle:
        async def _read() -> bytes:
            return content

        return cls(name=name, media_type=media_type, size=len(content), reader=_read)

    @classmethod
    def from_path(cls, path: Path, media_type: str | None = None) -> FileHandle:
        """Wrap a local file. Raises ``IOFailure`` if it cannot be stat'ed."""
        if media_type is None:
            media_type = mimetypes.guess_type(path.name)[0] or "application/octet-stream"
        try:
            size = path.stat().st_size
        except OSError as e:
            raise IOFailure(f"cannot read {path}: {e}") from e

        async def _read() -> bytes:
            return await asyncio.to_thread(path.read_bytes)

        return cls(name=path.name, media_type=media_type, size=size, reader=_read)


def validate_cover_candidate(file: FileHandle) -> bool:
    return file.media_type in COVER_MEDIA_TYPES and file.size <= MAX_COVER_BYTES


def validate_document_candidate(file: FileHandle) -> bool:
    return file.media_type in DOCUMENT_MEDIA_TYPES and file.size <= MAX_DOCUMENT_BYTES


async def encode_to_embeddable(file: FileHandle) -> EncodedContent:
    """Read the whole file and return it as a base64 data URL.

    Any failure of the underlying read is raised as ``IOFailure``.
    """
    try:
        content = await file.read()
    except IOFailure:
        raise
    except OSError as e:
        log.warning("file_read_failed", name=file.name, error=str(e))
        raise IOFailure(f"cannot read {file.name}: {e}") from e

    payload = base64.b64encode(content).decode("ascii")
    log.debug("file_encoded", name=file.name, media_type=file.media_type, bytes=len(content))
    return f"data:{file.media_type};base64,{payload}"


def decode_embedded(content: EncodedContent) -> tuple[str, bytes]:
    """Split a data URL produced by ``encode_to_embeddable`` into (media type, bytes)."""
    if not content.startswith("data:"):
        raise ValueError("embedded content is not a data URL")
    header, sep, payload = content[len("data:"):].partition(",")
    if not sep or not header.endswith(";base64"):
        raise ValueError("embedded content is not base64-encoded")
    try:
        data = base64.b64decode(payload, validate=True)
    except binascii.Error as e:
        raise ValueError(f"invalid base64 payload: {e}") from e
    return header[: -len(";base64")], data


@dataclass(frozen=True)
class PreviewHandle:
    url: str
    file: FileHandle


class PreviewRegistry:
    """Tracks short-lived cover previews until their owner releases them."""

    def __init__(self) -> None:
        self._live: dict[str, PreviewHandle] = {}

    @property
    def live(self) -> int:
        return len(self._live)

    def create_ephemeral_preview(self, file: FileHandle) -> PreviewHandle:
        handle = PreviewHandle(url=f"preview:{uuid.uuid4().hex}", file=file)
        self._live[handle.url] = handle
        log.debug("preview_created", url=handle.url, name=file.name)
        return handle

    def release_preview(self, handle: PreviewHandle) -> None:
        if self._live.pop(handle.url, None) is None:
            raise InvalidState(f"preview {handle.url} is not live")
        log.debug("preview_released", url=handle.url)

    def get(self, url: str) -> PreviewHandle | None:
        return self._live.get(url)

    def close(self) -> None:
        """Release every remaining preview; each one is a leak and gets logged."""
        for handle in list(self._live.values()):
            log.warning("preview_leaked", url=handle.url, name=handle.file.name)
            self.release_preview(handle)
