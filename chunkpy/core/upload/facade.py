"""
Upload facade.

Provides a simplified interface for chunked uploads.
Follows Facade Pattern - hides complexity of the upload subsystem.
"""
from pathlib import Path
from typing import Callable, Dict, Optional, Union
import logging

import aiohttp

from .coordinator import UploadCoordinator
from .models import (
    WHOLE_FILE,
    Endpoints,
    ProgressState,
    ThrottleConfig,
    UploadConfig,
    UploadResult,
    WireContract,
)
from .models.upload_models import FinalizeHook


class ChunkedUploaderClient:
    """
    Simplified interface for chunked uploads.
    
    This is the main entry point for uploading files.
    Hides the complexity of checksums, chunking and verification.
    
    Example:
        >>> client = ChunkedUploaderClient.from_endpoints(
        ...     upload="https://store.example/upload/{upload_id}",
        ...     finish="https://store.example/finish/{upload_id}",
        ... )
        >>> unsubscribe = client.on_progress(lambda p: print(p.state, p.uploaded))
        >>> upload_id = await client.upload("video.mp4", 5 * 1024 * 1024)
    """
    
    def __init__(
        self,
        config: UploadConfig,
        session: Optional[aiohttp.ClientSession] = None,
        log_level: Optional[int] = None
    ):
        """
        Initialize uploader client.
        
        Args:
            config: Upload configuration
            session: Optional shared HTTP session (not closed by the client)
            log_level: Optional level for the 'chunkpy.upload' logger
        """
        self._logger = logging.getLogger('chunkpy.upload')
        if log_level is not None:
            self._logger.setLevel(log_level)
        
        self._coordinator = UploadCoordinator(config, session=session)
        self._owns_session = False
    
    @classmethod
    def from_endpoints(
        cls,
        upload: str,
        finish: str,
        headers: Optional[Dict[str, str]] = None,
        algorithm: str = 'sha-256',
        on_finalize: Optional[FinalizeHook] = None,
        throttle: Optional[ThrottleConfig] = None,
        wire: Optional[WireContract] = None,
        **kwargs
    ) -> 'ChunkedUploaderClient':
        """Create a client from endpoint templates."""
        config = UploadConfig(
            endpoints=Endpoints(upload=upload, finish=finish),
            headers=headers or {},
            algorithm=algorithm,
            on_finalize=on_finalize,
            throttle=throttle or ThrottleConfig(),
            wire=wire or WireContract()
        )
        return cls(config, **kwargs)
    
    @property
    def config(self) -> UploadConfig:
        return self._coordinator.config
    
    @property
    def progress(self) -> ProgressState:
        """Latest progress snapshot."""
        return self._coordinator.progress.snapshot
    
    def on_progress(self, callback: Callable[[ProgressState], None]) -> Callable[[], None]:
        """
        Register the progress observer.
        
        The callback is called immediately with the current snapshot, then
        on every (throttled) change. Registering another callback replaces
        this one.
        
        Returns:
            Function unregistering the callback
        """
        return self._coordinator.progress.subscribe(callback)
    
    async def upload(
        self,
        file_path: Union[str, Path],
        chunk_size: int = WHOLE_FILE,
        overwrite: bool = False
    ) -> str:
        """
        Upload a file in chunks.
        
        Args:
            file_path: Path to file to upload
            chunk_size: Size of each chunk, WHOLE_FILE for a single request
            overwrite: Replace existing content instead of requiring creation
            
        Returns:
            The verified upload id
            
        Raises:
            ConfigurationError: If the chunk size is invalid
            UploadError: Subclass describing the failure
        """
        result = await self._coordinator.upload(file_path, chunk_size, overwrite)
        return result.upload_id
    
    async def upload_with_result(
        self,
        file_path: Union[str, Path],
        chunk_size: int = WHOLE_FILE,
        overwrite: bool = False
    ) -> UploadResult:
        """Upload a file and return the full verification result."""
        return await self._coordinator.upload(file_path, chunk_size, overwrite)
    
    def abort(self) -> None:
        """Abort the running upload. Safe to call at any time."""
        self._coordinator.abort()
    
    async def __aenter__(self) -> 'ChunkedUploaderClient':
        """Open a session shared by all uploads inside the context."""
        if self._coordinator.session is None:
            self._coordinator.use_session(self._coordinator.create_session())
            self._owns_session = True
        return self
    
    async def __aexit__(self, exc_type, exc_val, exc_tb):
        if self._coordinator.is_running:
            self.abort()
        if self._owns_session and self._coordinator.session is not None:
            await self._coordinator.session.close()
            self._coordinator.use_session(None)
            self._owns_session = False
