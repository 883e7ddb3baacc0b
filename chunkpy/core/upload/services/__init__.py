"""Upload services module."""
from .file_service import FileValidator, AsyncFileReader
from .progress_service import ProgressAggregator
from .chunk_service import ChunkTransport
from .finish_service import FinalizationVerifier, VerifiedResult, format_hash_from_api

__all__ = [
    'FileValidator',
    'AsyncFileReader',
    'ProgressAggregator',
    'ChunkTransport',
    'FinalizationVerifier',
    'VerifiedResult',
    'format_hash_from_api',
]
