"""
chunkpy - Async Python client for chunked, checksum-verified uploads.

Usage:
    >>> from chunkpy import ChunkedUploaderClient
    >>> 
    >>> client = ChunkedUploaderClient.from_endpoints(
    ...     upload="https://store.example/upload/{upload_id}",
    ...     finish="https://store.example/finish/{upload_id}",
    ... )
    >>> upload_id = await client.upload("backup.tar", 8 * 1024 * 1024)
"""
import logging

from .core.upload import (
    ChunkedUploaderClient,
    UploadCoordinator,
    CancellationToken,
    WHOLE_FILE,
    UploadState,
    ProgressState,
    ChunkInfo,
    Endpoints,
    ThrottleConfig,
    WireContract,
    UploadConfig,
    UploadResult,
)
from .core.http import HTTPConfig, SSLConfig, TimeoutConfig
from .core.exceptions import (
    ChunkpyException,
    ConfigurationError,
    UploadError,
    UploadInProgressError,
    ChecksumError,
    UploadAbortedError,
    ChunkTransportError,
    UploadConflictError,
    FinalizeRequestError,
    FinalizeDataError,
    ChecksumMismatchError,
    LengthMismatchError,
    FinalizeHookError,
)

__version__ = '1.0.0'


def setup_logging(level=logging.INFO):
    """
    Configure logging for chunkpy modules.
    
    Args:
        level: Logging level (default: logging.INFO)
    """
    loggers = [
        'chunkpy',
        'chunkpy.upload',
        'chunkpy.upload.coordinator',
        'chunkpy.upload.checksum',
        'chunkpy.upload.chunk',
        'chunkpy.upload.finish',
        'chunkpy.upload.progress',
        'chunkpy.upload.file',
        'chunkpy.upload.cancellation',
    ]
    
    for logger_name in loggers:
        logger = logging.getLogger(logger_name)
        logger.setLevel(level)
        logger.propagate = True


__all__ = [
    'ChunkedUploaderClient',
    'UploadCoordinator',
    'CancellationToken',
    'WHOLE_FILE',
    'UploadState',
    'ProgressState',
    'ChunkInfo',
    'Endpoints',
    'ThrottleConfig',
    'WireContract',
    'UploadConfig',
    'UploadResult',
    'HTTPConfig',
    'SSLConfig',
    'TimeoutConfig',
    'ChunkpyException',
    'ConfigurationError',
    'UploadError',
    'UploadInProgressError',
    'ChecksumError',
    'UploadAbortedError',
    'ChunkTransportError',
    'UploadConflictError',
    'FinalizeRequestError',
    'FinalizeDataError',
    'ChecksumMismatchError',
    'LengthMismatchError',
    'FinalizeHookError',
    'setup_logging',
]
