"""Upload models."""
from .upload_models import (
    WHOLE_FILE,
    UPLOAD_ID_PLACEHOLDER,
    UploadState,
    ProgressState,
    ChunkInfo,
    Endpoints,
    ThrottleConfig,
    WireContract,
    UploadConfig,
    UploadResult,
)

__all__ = [
    'WHOLE_FILE',
    'UPLOAD_ID_PLACEHOLDER',
    'UploadState',
    'ProgressState',
    'ChunkInfo',
    'Endpoints',
    'ThrottleConfig',
    'WireContract',
    'UploadConfig',
    'UploadResult',
]
