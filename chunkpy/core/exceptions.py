"""
Custom exceptions for chunked upload operations.

Every failure of an upload call is surfaced as an UploadError subclass so
callers can tell an explicit abort apart from a transport failure or a
failed integrity check.
"""
from typing import Optional, Any


class ChunkpyException(Exception):
    """Base exception for all chunkpy errors."""
    
    def __init__(self, message: str, error_code: Optional[int] = None) -> None:
        """
        Initialize the exception.
        
        Args:
            message: Error message
            error_code: Numeric error code (HTTP status, if available)
        """
        self.error_code = error_code
        super().__init__(message)


class ConfigurationError(ChunkpyException):
    """Exception raised for invalid client configuration."""
    pass


class UploadError(ChunkpyException):
    """Base exception for failures of an upload call."""
    pass


class UploadInProgressError(UploadError):
    """Raised when upload() is called while another upload is running."""
    pass


class ChecksumError(UploadError):
    """Raised when the file cannot be read or digested."""
    pass


class UploadAbortedError(UploadError):
    """Raised when the upload was cancelled through abort()."""
    
    def __init__(self, message: str = "Upload aborted") -> None:
        super().__init__(message)


class ChunkTransportError(UploadError):
    """Exception raised when a single chunk could not be transferred."""
    
    def __init__(
        self,
        message: str,
        chunk_index: Optional[int] = None,
        status: Optional[int] = None
    ) -> None:
        """
        Initialize the exception.
        
        Args:
            message: Error message
            chunk_index: Index of the failed chunk
            status: HTTP status returned by the server (None for network errors)
        """
        self.chunk_index = chunk_index
        self.status = status
        super().__init__(message, status)


class UploadConflictError(ChunkTransportError):
    """Raised when a creation-only upload hits existing content."""
    pass


class FinalizeRequestError(UploadError):
    """Raised when the finish endpoint is unreachable or answers with an error."""
    
    def __init__(self, message: str, status: Optional[int] = None) -> None:
        self.status = status
        super().__init__(message, status)


class FinalizeDataError(UploadError):
    """Raised when the finish response lacks the hash or the length."""
    
    def __init__(self, message: str, payload: Any = None) -> None:
        self.payload = payload
        super().__init__(message)


class ChecksumMismatchError(UploadError):
    """Raised when the server hash differs from the local checksum."""
    
    def __init__(self, expected: str, actual: str) -> None:
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Checksum mismatch after upload. Expected {expected}, got {actual}"
        )


class LengthMismatchError(UploadError):
    """Raised when the stored length differs from the file size."""
    
    def __init__(self, expected: int, actual: Any) -> None:
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Uploaded length mismatch after upload. Expected {expected}, got {actual}"
        )


class FinalizeHookError(UploadError):
    """Raised when the caller-supplied finalize hook fails."""
    
    def __init__(self, message: str, upload_id: Optional[str] = None) -> None:
        self.upload_id = upload_id
        super().__init__(message)
