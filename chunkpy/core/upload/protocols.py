"""
Protocol definitions for upload module.

Defines interfaces (protocols) for dependency injection and strategy pattern.
"""
from typing import Protocol, Dict, List, Optional, Callable
from pathlib import Path

from .cancellation import CancellationToken
from .models import ChunkInfo


class ChunkingStrategy(Protocol):
    """
    Protocol for file chunking strategies.
    
    Allows different chunking algorithms to be plugged in.
    """
    
    def calculate_chunks(self, file_size: int) -> List[ChunkInfo]:
        """
        Calculate chunk boundaries for a file.
        
        Args:
            file_size: Total file size in bytes
            
        Returns:
            Ordered chunks partitioning [0, file_size)
        """
        ...


class ChecksumStrategy(Protocol):
    """Protocol for whole-file checksum computation."""
    
    algorithm: str
    
    async def compute(
        self,
        file_path: Path,
        token: Optional[CancellationToken] = None
    ) -> str:
        """
        Compute the encoded checksum of a file.
        
        Args:
            file_path: Path to the file
            token: Optional cancellation token
            
        Returns:
            Encoded digest
        """
        ...


class FileReaderProtocol(Protocol):
    """Protocol for file reading operations."""
    
    async def read_chunk(
        self, 
        file_path: Path, 
        start: int, 
        end: int
    ) -> Optional[bytes]:
        """
        Read a chunk from a file.
        
        Args:
            file_path: Path to the file
            start: Start position in bytes
            end: End position in bytes
            
        Returns:
            Chunk data or None if reading failed
        """
        ...


class ChunkTransportProtocol(Protocol):
    """Protocol for chunk upload operations."""
    
    async def send_chunk(
        self,
        url: str,
        data: bytes,
        chunk: ChunkInfo,
        headers: Dict[str, str],
        token: CancellationToken,
        on_progress: Optional[Callable[[int], None]] = None
    ) -> Optional[str]:
        """
        Upload a single chunk.
        
        Returns:
            Digest header of the response, if any
        """
        ...


class LoggerProtocol(Protocol):
    """Protocol for logger objects."""
    
    def debug(self, msg: str) -> None: ...
    def info(self, msg: str) -> None: ...
    def warning(self, msg: str) -> None: ...
    def error(self, msg: str) -> None: ...
