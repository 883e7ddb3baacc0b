"""
Whole-file checksum computation.

The checksum is computed before any chunk is sent: it is both the upload
identifier and the value the server hash is verified against.
"""
import base64
import re
import time
from pathlib import Path
from typing import Dict, Optional, Any

from Crypto.Hash import MD5, SHA1, SHA224, SHA256, SHA384, SHA512, SHA3_256, SHA3_512

from ...exceptions import ChecksumError, ConfigurationError
from ...logging import get_logger
from ..cancellation import CancellationToken
from ..services.file_service import AsyncFileReader

logger = get_logger('chunkpy.upload.checksum')

_HASH_MODULES: Dict[str, Any] = {
    'md5': MD5,
    'sha-1': SHA1,
    'sha-224': SHA224,
    'sha-256': SHA256,
    'sha-384': SHA384,
    'sha-512': SHA512,
    'sha3-256': SHA3_256,
    'sha3-512': SHA3_512,
}

_SHA2_NAME = re.compile(r'^sha-?(1|224|256|384|512)$')
_SHA3_NAME = re.compile(r'^sha3-?(256|512)$')


def normalize_algorithm(name: str) -> str:
    """
    Normalize a digest algorithm name.
    
    Accepts the usual spellings ('SHA-256', 'sha256', 'sha_256') and
    returns the lowercase dashed form used as hash prefix ('sha-256').
    
    Raises:
        ConfigurationError: If the algorithm is not supported
    """
    candidate = name.strip().lower().replace('_', '-')
    match = _SHA2_NAME.match(candidate)
    if match:
        candidate = f"sha-{match.group(1)}"
    else:
        match = _SHA3_NAME.match(candidate)
        if match:
            candidate = f"sha3-{match.group(1)}"
    if candidate not in _HASH_MODULES:
        raise ConfigurationError(f"Unsupported digest algorithm: {name}")
    return candidate


def encode_digest(digest: bytes, encoding: str) -> str:
    """Encode raw digest bytes as 'hex' or 'base64'."""
    if encoding == 'hex':
        return digest.hex()
    if encoding == 'base64':
        return base64.b64encode(digest).decode('ascii')
    raise ConfigurationError(f"Unsupported hash encoding: {encoding}")


class ChecksumEngine:
    """
    Computes the content checksum of a file.
    
    Reads the file once, block by block, and feeds a pycryptodome hash.
    """
    
    DEFAULT_BLOCK_SIZE = 1024 * 1024  # 1MB
    
    def __init__(
        self,
        algorithm: str = 'sha-256',
        encoding: str = 'base64',
        file_reader: Optional[AsyncFileReader] = None,
        block_size: int = DEFAULT_BLOCK_SIZE
    ):
        """
        Initialize checksum engine.
        
        Args:
            algorithm: Digest algorithm name
            encoding: 'base64' or 'hex', must match the server's hash encoding
            file_reader: File reader implementation
            block_size: Read size per block in bytes
        """
        self.algorithm = normalize_algorithm(algorithm)
        encode_digest(b'', encoding)  # validate early
        self.encoding = encoding
        self._reader = file_reader or AsyncFileReader()
        self._block_size = block_size
    
    def digest(self, data: bytes) -> bytes:
        """Digest in-memory data."""
        return _HASH_MODULES[self.algorithm].new(data).digest()
    
    def encode(self, digest: bytes) -> str:
        return encode_digest(digest, self.encoding)
    
    async def compute(
        self,
        file_path: Path,
        token: Optional[CancellationToken] = None
    ) -> str:
        """
        Compute the encoded checksum of a file.
        
        Args:
            file_path: Path to the file
            token: Optional cancellation token checked between blocks
            
        Returns:
            Encoded digest
            
        Raises:
            ChecksumError: If the file cannot be read or digested
            UploadAbortedError: If the token is cancelled meanwhile
        """
        started = time.time()
        hasher = _HASH_MODULES[self.algorithm].new()
        size = 0
        
        try:
            async for block in self._reader.iter_blocks(file_path, self._block_size):
                if token is not None:
                    token.raise_if_cancelled()
                hasher.update(block)
                size += len(block)
        except (IOError, OSError) as e:
            logger.error(f"Failed to read file for checksum: {e}")
            raise ChecksumError(f"Failed to read file: {e}") from e
        except (TypeError, ValueError) as e:
            logger.error(f"Failed to calculate checksum: {e}")
            raise ChecksumError(f"Failed to calculate checksum: {e}") from e
        
        checksum = self.encode(hasher.digest())
        elapsed = time.time() - started
        logger.debug(f"Checksum {self.algorithm} of {size} bytes computed in {elapsed:.2f}s")
        return checksum
