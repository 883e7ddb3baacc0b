"""
Chunk transport service.

Sends one chunk per request to the upload endpoint.
"""
from typing import AsyncIterator, Callable, Dict, Optional
import asyncio
import time

import aiohttp

from ...exceptions import ChunkTransportError, UploadConflictError
from ...logging import get_logger
from ..cancellation import CancellationToken, run_cancellable
from ..models import ChunkInfo, WireContract

ChunkProgressCallback = Callable[[int], None]


class ChunkTransport:
    """
    Uploads chunks to the remote store.
    
    Reuses one HTTP session for all chunks of an upload.
    
    Responsibilities:
    - Stream the chunk body and report bytes handed to the connection
    - Map response statuses to transport errors
    - Abort the request in flight when the token is cancelled
    """
    
    DEFAULT_BLOCK_SIZE = 64 * 1024  # Progress granularity
    
    def __init__(
        self,
        session: aiohttp.ClientSession,
        wire: Optional[WireContract] = None,
        block_size: int = DEFAULT_BLOCK_SIZE
    ):
        """
        Initialize chunk transport.
        
        Args:
            session: HTTP session shared by every request of the upload
            wire: Wire contract of the upload endpoint
            block_size: Size of the body slices written to the connection
        """
        self._session = session
        self._wire = wire or WireContract()
        self._block_size = block_size
        self._logger = get_logger('chunkpy.upload.chunk')
    
    async def send_chunk(
        self,
        url: str,
        data: bytes,
        chunk: ChunkInfo,
        headers: Dict[str, str],
        token: CancellationToken,
        on_progress: Optional[ChunkProgressCallback] = None
    ) -> Optional[str]:
        """
        Upload a single chunk.
        
        Args:
            url: Upload URL
            data: Chunk content
            chunk: Chunk descriptor
            headers: Request headers (Range included when needed)
            token: Cancellation token of the upload call
            on_progress: Called with the bytes of this chunk sent so far
            
        Returns:
            Value of the digest response header, if the server sent one
            
        Raises:
            ChunkTransportError: On a non-2xx status or a network error
            UploadConflictError: If a creation-only upload hit existing content
            UploadAbortedError: If the token fired before or during the request
        """
        if len(data) != chunk.length:
            raise ChunkTransportError(
                f"Chunk {chunk.index} has {len(data)} bytes, expected {chunk.length}",
                chunk_index=chunk.index
            )
        
        return await run_cancellable(
            self._request(url, data, chunk, headers, on_progress),
            token,
            f"chunk {chunk.index}"
        )
    
    async def _request(
        self,
        url: str,
        data: bytes,
        chunk: ChunkInfo,
        headers: Dict[str, str],
        on_progress: Optional[ChunkProgressCallback]
    ) -> Optional[str]:
        chunk_size_kb = chunk.length / 1024
        request_headers = dict(headers)
        request_headers['Content-Length'] = str(chunk.length)
        
        upload_start = time.time()
        self._logger.debug(
            f"Uploading chunk {chunk.index} [{chunk.start}, {chunk.end}) ({chunk_size_kb:.1f} KB)"
        )
        
        try:
            async with self._session.request(
                self._wire.upload_method,
                url,
                data=self._body(data, on_progress),
                headers=request_headers
            ) as response:
                await response.read()
                self._check_status(response.status, chunk)
                
                if on_progress is not None:
                    on_progress(chunk.length)
                
                upload_time = time.time() - upload_start
                speed_kbps = (chunk_size_kb / upload_time) if upload_time > 0 else 0
                self._logger.debug(
                    f"Chunk {chunk.index} uploaded in {upload_time:.2f}s ({speed_kbps:.1f} KB/s)"
                )
                
                if self._wire.digest_header:
                    return response.headers.get(self._wire.digest_header)
                return None
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            upload_time = time.time() - upload_start
            self._logger.error(f"Chunk {chunk.index} upload failed after {upload_time:.2f}s: {e!r}")
            raise ChunkTransportError(
                f"Network error during upload of chunk {chunk.index}: {e!r}",
                chunk_index=chunk.index
            ) from e
    
    async def _body(
        self,
        data: bytes,
        on_progress: Optional[ChunkProgressCallback]
    ) -> AsyncIterator[bytes]:
        """Yield the chunk in slices, reporting each slice once it was written."""
        view = memoryview(data)
        sent = 0
        while sent < len(data):
            block = bytes(view[sent:sent + self._block_size])
            yield block
            sent += len(block)
            if on_progress is not None:
                on_progress(sent)
    
    def _check_status(self, status: int, chunk: ChunkInfo) -> None:
        """
        Raise for unsuccessful statuses.
        
        Raises:
            UploadConflictError: For the configured conflict statuses
            ChunkTransportError: For any other non-2xx status
        """
        if 200 <= status < 300:
            return
        
        self._logger.error(f"Server returned status {status} for chunk {chunk.index}")
        if status in self._wire.conflict_statuses:
            raise UploadConflictError(
                f"Upload target already exists (status {status}) at chunk {chunk.index}",
                chunk_index=chunk.index,
                status=status
            )
        raise ChunkTransportError(
            f"Chunk {chunk.index} upload failed with status {status}",
            chunk_index=chunk.index,
            status=status
        )
