"""Upload strategies module."""
from .chunking import BaseChunkingStrategy, FixedSizeChunkingStrategy, plan_chunks
from .checksum import (
    ChecksumEngine,
    normalize_algorithm,
    encode_digest,
)

__all__ = [
    'BaseChunkingStrategy',
    'FixedSizeChunkingStrategy',
    'plan_chunks',
    'ChecksumEngine',
    'normalize_algorithm',
    'encode_digest',
]
