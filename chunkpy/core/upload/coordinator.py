"""
Upload coordinator.

Drives one upload call through Initializing -> Uploading -> Finishing -> Done,
or to Error on any failure or abort.
"""
import asyncio
import inspect
import time
from pathlib import Path
from typing import Optional, List, Tuple, Union
from urllib.parse import quote, urlsplit, urlunsplit, parse_qsl, urlencode

import aiohttp

from .cancellation import CancellationToken
from .models import (
    WHOLE_FILE,
    UPLOAD_ID_PLACEHOLDER,
    ChunkInfo,
    ProgressState,
    UploadConfig,
    UploadResult,
    UploadState,
)
from .protocols import ChunkingStrategy, ChecksumStrategy, FileReaderProtocol, LoggerProtocol
from .services import (
    FileValidator,
    AsyncFileReader,
    ProgressAggregator,
    ChunkTransport,
    FinalizationVerifier,
)
from .strategies import FixedSizeChunkingStrategy, ChecksumEngine
from ..exceptions import (
    ChecksumError,
    ChunkTransportError,
    ConfigurationError,
    FinalizeHookError,
    UploadAbortedError,
    UploadError,
    UploadInProgressError,
)
from ..logging import get_logger


class UploadCoordinator:
    """
    Coordinates the chunked upload of a file.
    
    Uses dependency injection for its collaborators, so tests can swap
    the checksum strategy, file reader or chunk planning.
    
    One upload runs at a time per coordinator. abort() may be called at
    any moment, including from another task while upload() is pending.
    """
    
    def __init__(
        self,
        config: UploadConfig,
        session: Optional[aiohttp.ClientSession] = None,
        checksum_strategy: Optional[ChecksumStrategy] = None,
        chunking_strategy: Optional[ChunkingStrategy] = None,
        file_reader: Optional[FileReaderProtocol] = None,
        logger: Optional[LoggerProtocol] = None,
        progress: Optional[ProgressAggregator] = None
    ):
        """
        Initialize upload coordinator.
        
        Args:
            config: Client configuration
            session: Optional shared HTTP session (one is created per upload otherwise)
            checksum_strategy: Checksum implementation
            chunking_strategy: Fixed chunk planning overriding the per-call chunk size
            file_reader: File reader implementation
            logger: Logger instance
            progress: Progress aggregator
        """
        self._config = config
        self._session = session
        self._file_reader = file_reader or AsyncFileReader()
        self._checksum = checksum_strategy or ChecksumEngine(
            config.algorithm,
            config.wire.hash_encoding,
            file_reader=AsyncFileReader()
        )
        self._chunking = chunking_strategy
        self._validator = FileValidator()
        self._logger = logger or get_logger('chunkpy.upload.coordinator')
        self.progress = progress or ProgressAggregator(config.throttle)
        
        self._token: Optional[CancellationToken] = None
        self._running = False
    
    @property
    def config(self) -> UploadConfig:
        return self._config
    
    @property
    def is_running(self) -> bool:
        return self._running
    
    @property
    def session(self) -> Optional[aiohttp.ClientSession]:
        """Shared HTTP session, if one is set."""
        return self._session
    
    def abort(self) -> None:
        """
        Abort the current upload.
        
        Cancels the request in flight and reports an Error snapshot with
        the last known byte counts. Never raises; the pending upload()
        call fails with UploadAbortedError.
        """
        if self._token is not None and self._token.cancel():
            self._logger.info("Upload aborted")
        
        snapshot = self.progress.snapshot
        self.progress.report(
            ProgressState(
                uploaded=snapshot.uploaded,
                total=snapshot.total,
                state=UploadState.ERROR
            ),
            force=True
        )
    
    async def upload(
        self,
        file_path: Union[str, Path],
        chunk_size: int = WHOLE_FILE,
        overwrite: bool = False
    ) -> UploadResult:
        """
        Execute the complete upload process.
        
        Args:
            file_path: Path to the file to upload
            chunk_size: Chunk size in bytes, or WHOLE_FILE for a single request
            overwrite: Allow replacing existing content at the upload id
            
        Returns:
            Verified upload result
            
        Raises:
            UploadInProgressError: If another upload is running
            ConfigurationError: If the chunk size is invalid
            UploadError: Subclass describing the failure
        """
        if self._running:
            raise UploadInProgressError("An upload is already in progress")
        
        self._running = True
        token = CancellationToken()
        self._token = token
        try:
            return await self._run(file_path, chunk_size, overwrite, token)
        finally:
            self._running = False
    
    async def _run(
        self,
        file_path: Union[str, Path],
        chunk_size: int,
        overwrite: bool,
        token: CancellationToken
    ) -> UploadResult:
        self.progress.start(0)
        self._report(UploadState.INITIALIZING)
        
        try:
            chunking = self._chunking or FixedSizeChunkingStrategy(chunk_size)
        except ValueError as e:
            self._logger.error(f"Invalid chunk size {chunk_size}: {e}")
            self._report(UploadState.ERROR)
            raise ConfigurationError(f"Invalid chunk size {chunk_size}: {e}") from e
        
        try:
            path, total = self._validator.validate(file_path)
        except (OSError, ValueError) as e:
            self._logger.error(f"Cannot upload {file_path}: {e}")
            self._report(UploadState.ERROR)
            raise ChecksumError(f"Failed to read file: {e}") from e
        
        chunks = chunking.calculate_chunks(total)
        
        self.progress.start(total, len(chunks))
        self._report(UploadState.INITIALIZING)
        self._logger.info(f"Starting upload: {path.name} ({total / (1024 * 1024):.2f} MB)")
        
        session, owns_session = await self._acquire_session()
        try:
            checksum = await self._checksum.compute(path, token)
            token.raise_if_cancelled()
            
            upload_id = checksum
            upload_url, finish_url = self.build_urls(upload_id, overwrite)
            self._logger.debug(f"Upload id {upload_id}, {len(chunks)} chunk(s)")
            
            self._report(UploadState.UPLOADING)
            digest = await self._upload_chunks(session, path, chunks, upload_url, token)
            token.raise_if_cancelled()
            
            self._report(UploadState.FINISHING, uploaded=total)
            verifier = FinalizationVerifier(
                session,
                algorithm=self._checksum.algorithm,
                wire=self._config.wire,
                headers=self._config.wire_headers()
            )
            if len(chunks) == 1 and digest:
                self._logger.debug(f"Using {self._config.wire.digest_header} from upload response")
                verifier.verify_digest_header(digest, checksum, total)
            else:
                await verifier.finish(finish_url, checksum, total, token)
            
            await self._run_finalize_hook(upload_id)
            token.raise_if_cancelled()
            
            self._report(UploadState.DONE, uploaded=total)
            self._logger.info(f"Upload complete: {path.name} ({len(chunks)} chunk(s))")
            return UploadResult(
                upload_id=upload_id,
                checksum=checksum,
                file_size=total,
                chunks=len(chunks),
                algorithm=self._checksum.algorithm
            )
        except UploadError as e:
            self._report(UploadState.ERROR)
            if token.cancelled and not isinstance(e, UploadAbortedError):
                raise UploadAbortedError(f"Upload aborted: {e}") from e
            if not isinstance(e, UploadAbortedError):
                self._logger.error(f"Upload failed: {e}")
            raise
        except (Exception, asyncio.CancelledError):
            self._report(UploadState.ERROR)
            raise
        finally:
            if owns_session:
                await session.close()
    
    async def _upload_chunks(
        self,
        session: aiohttp.ClientSession,
        file_path: Path,
        chunks: List[ChunkInfo],
        upload_url: str,
        token: CancellationToken
    ) -> Optional[str]:
        """
        Upload chunks strictly one after the other.
        
        Returns:
            Digest header of the last response, if any
        """
        transport = ChunkTransport(session, self._config.wire)
        base_headers = self._config.wire_headers()
        base_headers['Content-Type'] = self._validator.content_type(file_path)
        digest = None
        
        has_file_management = hasattr(self._file_reader, 'open_file') and hasattr(self._file_reader, 'close_file')
        try:
            if has_file_management and chunks:
                await self._file_reader.open_file(file_path)
            
            for chunk in chunks:
                token.raise_if_cancelled()
                chunk_start_time = time.time()
                
                data = await self._file_reader.read_chunk(file_path, chunk.start, chunk.end)
                if data is None or len(data) != chunk.length:
                    raise ChunkTransportError(
                        f"Failed to read chunk {chunk.index}",
                        chunk_index=chunk.index
                    )
                
                headers = dict(base_headers)
                if len(chunks) > 1:
                    headers['Range'] = self._config.wire.range_header(chunk)
                
                def on_progress(sent: int, chunk: ChunkInfo = chunk) -> None:
                    if not token.cancelled:
                        self.progress.record_chunk_progress(chunk, sent)
                
                digest = await transport.send_chunk(
                    upload_url, data, chunk, headers, token, on_progress
                )
                del data
                
                elapsed = time.time() - chunk_start_time
                self._logger.debug(f"Chunk {chunk.index + 1}/{len(chunks)} done in {elapsed:.2f}s")
        finally:
            if has_file_management:
                await self._file_reader.close_file()
        
        return digest
    
    async def _run_finalize_hook(self, upload_id: str) -> None:
        hook = self._config.on_finalize
        if hook is None:
            return
        try:
            result = hook(upload_id)
            if inspect.isawaitable(result):
                await result
        except Exception as e:
            self._logger.error(f"Finalize hook failed for {upload_id}: {e}")
            raise FinalizeHookError(f"Finalize hook failed: {e}", upload_id) from e
    
    def build_urls(self, upload_id: str, overwrite: bool = False) -> Tuple[str, str]:
        """
        Substitute the upload id into both endpoint templates.
        
        Without ``overwrite`` the upload URL carries the creation-only
        query marker.
        
        Returns:
            Tuple of (upload URL, finish URL)
        """
        quoted = quote(upload_id, safe='')
        upload_url = self._config.endpoints.upload.replace(UPLOAD_ID_PLACEHOLDER, quoted)
        finish_url = self._config.endpoints.finish.replace(UPLOAD_ID_PLACEHOLDER, quoted)
        
        if not overwrite:
            name, value = self._config.wire.create_param
            parts = urlsplit(upload_url)
            query = [(k, v) for k, v in parse_qsl(parts.query, keep_blank_values=True) if k != name]
            query.append((name, value))
            upload_url = urlunsplit(parts._replace(query=urlencode(query)))
        
        return upload_url, finish_url
    
    def _report(self, state: UploadState, uploaded: Optional[int] = None) -> None:
        """Force-report a boundary state."""
        snapshot = self.progress.snapshot
        self.progress.report(
            ProgressState(
                uploaded=snapshot.uploaded if uploaded is None else uploaded,
                total=snapshot.total,
                state=state
            ),
            force=True
        )
    
    async def _acquire_session(self) -> Tuple[aiohttp.ClientSession, bool]:
        """Return the shared session, or a new one owned by this call."""
        if self._session is not None and not self._session.closed:
            return self._session, False
        return self.create_session(), True
    
    def create_session(self) -> aiohttp.ClientSession:
        """Create an HTTP session from the client configuration."""
        http = self._config.http
        cookie_jar = aiohttp.CookieJar() if self._config.with_credentials else aiohttp.DummyCookieJar()
        return aiohttp.ClientSession(
            connector=aiohttp.TCPConnector(**http.get_connector_kwargs()),
            cookie_jar=cookie_jar,
            **http.get_session_kwargs()
        )
    
    def use_session(self, session: Optional[aiohttp.ClientSession]) -> None:
        """Set (or clear) the shared HTTP session."""
        self._session = session
