"""
Chunking strategies for file uploads.

Implements Strategy Pattern for chunk planning.
Planning is pure: it never touches the file or the network.
"""
from abc import ABC, abstractmethod
from typing import List

from ..models import ChunkInfo, WHOLE_FILE


class BaseChunkingStrategy(ABC):
    """Abstract base class for chunking strategies."""
    
    @abstractmethod
    def calculate_chunks(self, file_size: int) -> List[ChunkInfo]:
        """Calculate chunk boundaries."""
        pass


class FixedSizeChunkingStrategy(BaseChunkingStrategy):
    """
    Fixed-size chunking strategy.
    
    Every chunk has ``chunk_size`` bytes except the last one, which holds
    the remainder. ``WHOLE_FILE`` (or any size covering the whole file)
    yields a single chunk.
    """
    
    DEFAULT_CHUNK_SIZE = 5 * 1024 * 1024  # 5MB
    
    def __init__(self, chunk_size: int = DEFAULT_CHUNK_SIZE):
        """
        Initialize with chunk size.
        
        Args:
            chunk_size: Size of each chunk in bytes, or WHOLE_FILE
        """
        if chunk_size != WHOLE_FILE and chunk_size <= 0:
            raise ValueError("Chunk size must be positive or WHOLE_FILE")
        self.chunk_size = chunk_size
    
    def is_single_chunk(self, file_size: int) -> bool:
        """Returns True if the file is sent in one request."""
        return self.chunk_size == WHOLE_FILE or self.chunk_size >= file_size
    
    def calculate_chunks(self, file_size: int) -> List[ChunkInfo]:
        """
        Calculate fixed-size chunk boundaries.
        
        Args:
            file_size: Total file size in bytes
            
        Returns:
            Ordered list of chunks partitioning [0, file_size)
        """
        if file_size < 0:
            raise ValueError("File size must not be negative")
        if file_size == 0:
            return []
        
        if self.is_single_chunk(file_size):
            return [ChunkInfo(index=0, start=0, end=file_size)]
        
        chunks = []
        position = 0
        
        while position < file_size:
            end = min(position + self.chunk_size, file_size)
            chunks.append(ChunkInfo(index=len(chunks), start=position, end=end))
            position = end
        
        return chunks


def plan_chunks(file_size: int, chunk_size: int) -> List[ChunkInfo]:
    """Plan the chunks of a file of ``file_size`` bytes."""
    return FixedSizeChunkingStrategy(chunk_size).calculate_chunks(file_size)
