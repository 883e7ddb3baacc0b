"""
File validation and reading services.

Single Responsibility: Each class handles one specific task.
"""
from pathlib import Path
from typing import AsyncIterator, Tuple, Optional, Union
import mimetypes

import aiofiles

from ...logging import get_logger


class FileValidator:
    """
    Validates files before upload.
    
    Responsibilities:
    - Check file existence
    - Verify file is not a directory
    - Get file size
    """
    
    def validate(self, file_path: Union[str, Path]) -> Tuple[Path, int]:
        """
        Validate a file for upload.
        
        Args:
            file_path: Path to the file
            
        Returns:
            Tuple of (validated Path, file size in bytes)
            
        Raises:
            FileNotFoundError: If file doesn't exist
            ValueError: If path is not a regular file
        """
        path = Path(file_path) if isinstance(file_path, str) else file_path
        
        if not path.exists():
            raise FileNotFoundError(f"File not found: {path}")
        
        if not path.is_file():
            raise ValueError(f"Path is not a file: {path}")
        
        file_size = path.stat().st_size
        
        return path, file_size
    
    def content_type(self, file_path: Path) -> str:
        """Guess the Content-Type sent with each chunk."""
        guessed, _ = mimetypes.guess_type(file_path.name)
        return guessed or 'application/octet-stream'


class AsyncFileReader:
    """
    Asynchronous file reader for chunk-based reading.
    
    Uses aiofiles for non-blocking I/O operations.
    Keeps the file handle open during an upload to avoid repeated open/close.
    """
    
    def __init__(self):
        """Initialize file reader."""
        self._logger = get_logger('chunkpy.upload.file')
        self._file_handle = None
        self._current_file_path: Optional[Path] = None
    
    async def open_file(self, file_path: Path) -> None:
        """
        Open file for reading. Call this before reading chunks.
        
        Args:
            file_path: Path to the file to open
        """
        if self._file_handle is not None and self._current_file_path == file_path:
            return
        
        if self._file_handle is not None:
            await self.close_file()
        
        self._file_handle = await aiofiles.open(file_path, 'rb')
        self._current_file_path = file_path
    
    async def close_file(self) -> None:
        """Close the currently open file."""
        if self._file_handle is not None:
            await self._file_handle.close()
            self._file_handle = None
            self._current_file_path = None
    
    async def read_chunk(
        self,
        file_path: Path,
        start: int,
        end: int
    ) -> Optional[bytes]:
        """
        Read a chunk from a file.
        
        Reuses the open handle if there is one, otherwise opens and
        closes the file for this read.
        
        Args:
            file_path: Path to the file
            start: Start position in bytes
            end: End position in bytes (exclusive)
            
        Returns:
            Chunk data or None if reading failed
        """
        try:
            chunk_size = end - start
            
            if self._file_handle is not None and self._current_file_path == file_path:
                await self._file_handle.seek(start)
                data = await self._file_handle.read(chunk_size)
            else:
                async with aiofiles.open(file_path, 'rb') as f:
                    await f.seek(start)
                    data = await f.read(chunk_size)
            
            if data:
                self._logger.debug(f"Read chunk: {start}-{end} ({len(data)} bytes)")
            return data if data else None
        except (IOError, OSError) as e:
            self._logger.error(f"Failed to read chunk {start}-{end}: {e}")
            return None
    
    async def iter_blocks(
        self,
        file_path: Path,
        block_size: int
    ) -> AsyncIterator[bytes]:
        """
        Iterate over the whole file in blocks.
        
        Unlike read_chunk(), read errors propagate to the caller.
        
        Args:
            file_path: Path to the file
            block_size: Maximum size of each block
            
        Yields:
            Consecutive blocks of file content
        """
        async with aiofiles.open(file_path, 'rb') as f:
            while True:
                block = await f.read(block_size)
                if not block:
                    break
                yield block
