"""
Finalization service.

Calls the finish endpoint and verifies the stored content against the
locally computed checksum.
"""
from dataclasses import dataclass
from typing import Any, Dict, Optional
import asyncio

import aiohttp

from ...exceptions import (
    ChecksumMismatchError,
    FinalizeDataError,
    FinalizeRequestError,
    LengthMismatchError,
)
from ...logging import get_logger
from ..cancellation import CancellationToken, run_cancellable
from ..models import WireContract


def format_hash_from_api(value: str, algorithm: str) -> str:
    """
    Strip a matching ``<algorithm>=`` prefix from a server hash.
    
    Structured-field digests (``sha-256=:<base64>:``) also lose the
    surrounding colons. Hashes with another prefix are returned as-is.
    """
    value = value.strip()
    prefix = f"{algorithm}="
    if value.lower().startswith(prefix):
        value = value[len(prefix):]
        if len(value) >= 2 and value.startswith(':') and value.endswith(':'):
            value = value[1:-1]
    return value


@dataclass(frozen=True)
class VerifiedResult:
    """Server-side hash (prefix stripped) and length after verification."""
    hash: str
    length: int


class FinalizationVerifier:
    """
    Issues the finish request and cross-checks its verification payload.
    
    Hash and length mismatches are reported as distinct errors.
    """
    
    def __init__(
        self,
        session: aiohttp.ClientSession,
        algorithm: str = 'sha-256',
        wire: Optional[WireContract] = None,
        headers: Optional[Dict[str, str]] = None
    ):
        """
        Initialize verifier.
        
        Args:
            session: HTTP session of the upload
            algorithm: Normalized digest algorithm, used to strip hash prefixes
            wire: Wire contract of the finish endpoint
            headers: Static headers sent with the finish request
        """
        self._session = session
        self._algorithm = algorithm
        self._wire = wire or WireContract()
        self._headers = headers or {}
        self._logger = get_logger('chunkpy.upload.finish')
    
    async def finish(
        self,
        url: str,
        expected_checksum: str,
        expected_length: int,
        token: Optional[CancellationToken] = None
    ) -> VerifiedResult:
        """
        Call the finish endpoint and verify its payload.
        
        Args:
            url: Finish URL
            expected_checksum: Locally computed checksum
            expected_length: File size in bytes
            token: Cancellation token of the upload call
            
        Returns:
            Verified server hash and length
            
        Raises:
            FinalizeRequestError: If the request fails or the status is not a success
            FinalizeDataError: If the payload lacks the hash or the length
            LengthMismatchError: If the stored length differs from the file size
            ChecksumMismatchError: If the server hash differs from the checksum
        """
        token = token or CancellationToken()
        payload = await run_cancellable(self._request(url), token, "finish request")
        
        if not isinstance(payload, dict):
            raise FinalizeDataError("No hash returned from server", payload)
        
        server_hash = payload.get(self._wire.hash_field)
        server_length = payload.get(self._wire.length_field)
        if not server_hash or server_length is None:
            self._logger.error(f"Finish response lacks hash or length: {payload}")
            raise FinalizeDataError("No hash returned from server", payload)
        
        return self.verify(str(server_hash), server_length, expected_checksum, expected_length)
    
    def verify(
        self,
        server_hash: str,
        server_length: Any,
        expected_checksum: str,
        expected_length: int
    ) -> VerifiedResult:
        """
        Compare server-reported values with the local ones.
        
        Raises:
            LengthMismatchError: If the lengths differ
            ChecksumMismatchError: If the hashes differ
        """
        if isinstance(server_length, bool) or server_length != expected_length:
            self._logger.error(f"Length mismatch: expected {expected_length}, got {server_length}")
            raise LengthMismatchError(expected_length, server_length)
        
        normalized = format_hash_from_api(server_hash, self._algorithm)
        if normalized != expected_checksum:
            self._logger.error(f"Checksum mismatch: expected {expected_checksum}, got {normalized}")
            raise ChecksumMismatchError(expected_checksum, normalized)
        
        self._logger.debug(f"Upload verified: {normalized} ({expected_length} bytes)")
        return VerifiedResult(hash=normalized, length=expected_length)
    
    def verify_digest_header(
        self,
        digest: str,
        expected_checksum: str,
        expected_length: int
    ) -> VerifiedResult:
        """
        Verify the digest header returned by a single-chunk upload.
        
        The server already holds every byte of the request, so the length
        check is against the bytes sent.
        """
        return self.verify(digest, expected_length, expected_checksum, expected_length)
    
    async def _request(self, url: str) -> Any:
        method = self._wire.finish_method.upper()
        kwargs: Dict[str, Any] = {'headers': self._headers}
        if method != 'GET' and self._wire.finish_body is not None:
            kwargs['json'] = self._wire.finish_body
        
        self._logger.debug(f"Finishing upload: {method} {url}")
        try:
            async with self._session.request(method, url, **kwargs) as response:
                if response.status not in self._wire.finish_success_statuses:
                    body = await response.text()
                    self._logger.error(f"Finish request failed with status {response.status}: {body[:200]}")
                    raise FinalizeRequestError(
                        f"Failed to finish upload. Server answered with status {response.status}",
                        status=response.status
                    )
                try:
                    return await response.json(content_type=None)
                except ValueError as e:
                    raise FinalizeDataError(f"Invalid finish response: {e}") from e
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            self._logger.error(f"Finish request failed: {e!r}")
            raise FinalizeRequestError(f"Failed to finish upload: {e!r}") from e
