"""
Upload module for chunked, checksum-verified uploads.

Splits a file into sequential byte-range chunks, reports throttled
progress and verifies the stored content against a whole-file checksum.
"""
from .facade import ChunkedUploaderClient
from .coordinator import UploadCoordinator
from .cancellation import CancellationToken
from .models import (
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
from .protocols import (
    ChunkingStrategy,
    ChecksumStrategy,
    FileReaderProtocol,
    ChunkTransportProtocol,
)

__all__ = [
    # Main classes
    'ChunkedUploaderClient',
    'UploadCoordinator',
    'CancellationToken',
    
    # Models
    'WHOLE_FILE',
    'UploadState',
    'ProgressState',
    'ChunkInfo',
    'Endpoints',
    'ThrottleConfig',
    'WireContract',
    'UploadConfig',
    'UploadResult',
    
    # Protocols
    'ChunkingStrategy',
    'ChecksumStrategy',
    'FileReaderProtocol',
    'ChunkTransportProtocol',
]
