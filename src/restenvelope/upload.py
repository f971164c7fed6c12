"""Chunked upload protocol: negotiate, transfer chunks, complete.

1. POST the target endpoint with the caller's params plus ``filename``,
   ``size``, ``type`` and ``lastModified``; the envelope data names the
   transfer URL (``PUT``), the completion endpoint (``Complete``) and an
   optional ``Blocksize``.
2. PUT each ``Blocksize`` slice to the transfer URL, in order, with
   ``Content-Range: bytes {start}-{end}/*``.
3. POST the completion endpoint; its envelope is the upload result.
"""

from __future__ import annotations

import inspect
import os
import time
from collections.abc import Awaitable, Callable, Mapping
from typing import IO, TYPE_CHECKING, Any, cast

from pydantic import BaseModel, ConfigDict, Field

from .errors import UploadFailedError
from .methods import HTTPMethod
from .response import RestResponse
from .utils import mime_type_for_path

if TYPE_CHECKING:
    from ._core import _BaseRestClient

ProgressCallback = Callable[[float], None] | Callable[[float], Awaitable[None]]


class UploadNegotiation(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    put_url: str = Field(alias="PUT")
    complete: str = Field(alias="Complete")
    block_size: int | None = Field(default=None, alias="Blocksize")


def plan_chunks(size: int, block_size: int) -> list[tuple[int, int]]:
    """Split ``[0, size)`` into consecutive ``(start, end_inclusive)`` ranges."""
    if block_size <= 0:
        raise UploadFailedError(f"Invalid block size {block_size}")
    return [
        (start, min(start + block_size, size) - 1)
        for start in range(0, size, block_size)
    ]


async def _emit_progress(
    callback: ProgressCallback | None,
    value: float,
    *,
    await_callback: bool,
) -> None:
    if callback is None:
        return

    result = callback(value)
    if await_callback and inspect.isawaitable(result):
        await cast(Awaitable[None], result)


class _BytesSource:
    def __init__(self, data: bytes) -> None:
        self._view = memoryview(data)

    def read(self, start: int, length: int) -> bytes:
        return bytes(self._view[start : start + length])


class _FileSource:
    def __init__(self, fh: IO[bytes]) -> None:
        self._fh = fh

    def read(self, start: int, length: int) -> bytes:
        try:
            self._fh.seek(start)
            return self._fh.read(length)
        except OSError as exc:
            raise UploadFailedError(f"Failed to read chunk at offset {start}") from exc


async def _transfer(
    client: _BaseRestClient,
    endpoint: str,
    source: _BytesSource | _FileSource,
    *,
    size: int,
    filename: str,
    mime_type: str,
    last_modified_ms: int,
    params: Mapping[str, Any] | None,
    progress: ProgressCallback | None,
    await_progress: bool,
) -> RestResponse:
    negotiate_params = dict(params or {})
    negotiate_params["filename"] = filename
    negotiate_params["size"] = size
    negotiate_params["type"] = mime_type
    negotiate_params["lastModified"] = last_modified_ms

    negotiated = await client._perform_request(endpoint, HTTPMethod.POST, negotiate_params)
    negotiation = negotiated.decode(UploadNegotiation)

    chunks = plan_chunks(size, negotiation.block_size or size)
    total = len(chunks)
    for index, (start, end) in enumerate(chunks):
        data = source.read(start, end - start + 1)
        if len(data) != end - start + 1:
            raise UploadFailedError(f"Failed to read chunk at offset {start}")
        await client._put_chunk(negotiation.put_url, data, start, end, mime_type)
        await _emit_progress(progress, (index + 1) / total, await_callback=await_progress)

    return await client._perform_request(negotiation.complete, HTTPMethod.POST, {})


async def upload_data(
    client: _BaseRestClient,
    endpoint: str,
    data: bytes,
    *,
    filename: str,
    mime_type: str,
    params: Mapping[str, Any] | None = None,
    progress: ProgressCallback | None = None,
    await_progress: bool = True,
) -> RestResponse:
    if not data:
        raise UploadFailedError("Invalid file size")
    return await _transfer(
        client,
        endpoint,
        _BytesSource(bytes(data)),
        size=len(data),
        filename=filename,
        mime_type=mime_type,
        last_modified_ms=int(time.time() * 1000),
        params=params,
        progress=progress,
        await_progress=await_progress,
    )


async def upload_file(
    client: _BaseRestClient,
    endpoint: str,
    path: str | os.PathLike[str],
    *,
    params: Mapping[str, Any] | None = None,
    progress: ProgressCallback | None = None,
    await_progress: bool = True,
) -> RestResponse:
    try:
        stat = os.stat(path)
        fh = open(path, "rb")
    except OSError as exc:
        raise UploadFailedError(f"Cannot read {os.fspath(path)}: {exc.strerror}") from exc

    with fh:
        if stat.st_size <= 0:
            raise UploadFailedError("Invalid file size")
        return await _transfer(
            client,
            endpoint,
            _FileSource(fh),
            size=stat.st_size,
            filename=os.path.basename(os.fspath(path)),
            mime_type=mime_type_for_path(path),
            last_modified_ms=int(stat.st_mtime * 1000),
            params=params,
            progress=progress,
            await_progress=await_progress,
        )


__all__ = [
    "ProgressCallback",
    "UploadNegotiation",
    "plan_chunks",
    "upload_data",
    "upload_file",
]
