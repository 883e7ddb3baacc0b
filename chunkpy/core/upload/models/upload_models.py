"""
Data models for upload module.

Uses dataclasses for immutable, type-safe data structures.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Any, Optional, Tuple, Callable, Awaitable, Union

from ...exceptions import ConfigurationError
from ...http import HTTPConfig

# Requested chunk size meaning "send the whole file in one request"
WHOLE_FILE = -1

UPLOAD_ID_PLACEHOLDER = '{upload_id}'

FinalizeHook = Callable[[str], Union[Awaitable[None], None]]


class UploadState(str, Enum):
    """Lifecycle states of one upload call."""
    INITIALIZING = 'initializing'
    UPLOADING = 'uploading'
    FINISHING = 'finishing'
    ERROR = 'error'
    DONE = 'done'
    
    @property
    def is_boundary(self) -> bool:
        """Boundary states always reach the observer, regardless of throttling."""
        return self is not UploadState.UPLOADING
    
    @property
    def is_terminal(self) -> bool:
        return self in (UploadState.DONE, UploadState.ERROR)


@dataclass(frozen=True)
class ProgressState:
    """
    Snapshot of upload progress handed to observers.
    
    Attributes:
        uploaded: Bytes confirmed sent so far
        total: File size in bytes
        state: Current lifecycle state
        current_chunk_size: Size of the chunk in flight (Uploading only)
    """
    uploaded: int
    total: int
    state: UploadState
    current_chunk_size: Optional[int] = None
    
    @property
    def percentage(self) -> float:
        """Returns upload progress as percentage."""
        if self.total == 0:
            return 100.0 if self.state is UploadState.DONE else 0.0
        return (self.uploaded / self.total) * 100
    
    @property
    def is_complete(self) -> bool:
        return self.state is UploadState.DONE


@dataclass(frozen=True)
class ChunkInfo:
    """
    Information about a file chunk.
    
    Attributes:
        index: Chunk index
        start: Start position in bytes (inclusive)
        end: End position in bytes (exclusive)
    """
    index: int
    start: int
    end: int
    
    @property
    def length(self) -> int:
        """Returns chunk length."""
        return self.end - self.start


@dataclass(frozen=True)
class Endpoints:
    """
    Endpoint URL templates.
    
    Both templates must contain the ``{upload_id}`` placeholder, which is
    replaced with the content-derived upload identifier.
    """
    upload: str
    finish: str
    
    def __post_init__(self):
        for name in ('upload', 'finish'):
            if UPLOAD_ID_PLACEHOLDER not in getattr(self, name):
                raise ConfigurationError(
                    f"Invalid endpoint configuration: '{name}' must contain {UPLOAD_ID_PLACEHOLDER}"
                )


@dataclass(frozen=True)
class ThrottleConfig:
    """
    Progress notification throttling.
    
    Attributes:
        interval: Minimum seconds between two in-progress notifications
        min_bytes: Byte delta that triggers a notification before the interval
    """
    interval: float = 1.0
    min_bytes: int = 1_000_000
    
    def __post_init__(self):
        if self.interval < 0 or self.min_bytes < 0:
            raise ConfigurationError("Throttle interval and byte threshold must be non-negative")


@dataclass(frozen=True)
class WireContract:
    """
    Wire details of the upload and finish endpoints.
    
    Servers disagree on the finish method, its success status and the
    hash encoding, so all of them are configurable.
    """
    upload_method: str = 'PUT'
    finish_method: str = 'GET'
    finish_success_statuses: Tuple[int, ...] = (200,)
    finish_body: Optional[Dict[str, Any]] = None
    hash_encoding: str = 'base64'
    hash_field: str = 'hash'
    length_field: str = 'length'
    create_param: Tuple[str, str] = ('create', '1')
    range_end_inclusive: bool = False
    digest_header: Optional[str] = 'Content-Digest'
    conflict_statuses: Tuple[int, ...] = (409, 412)
    
    def __post_init__(self):
        if self.hash_encoding not in ('base64', 'hex'):
            raise ConfigurationError(
                f"Unsupported hash encoding: {self.hash_encoding} (expected 'base64' or 'hex')"
            )
    
    def range_header(self, chunk: ChunkInfo) -> str:
        """Build the Range header value for a chunk."""
        end = chunk.end - 1 if self.range_end_inclusive else chunk.end
        return f"bytes={chunk.start}-{end}"


@dataclass(frozen=True)
class UploadConfig:
    """
    Configuration for a chunked uploader client.
    
    Immutable for the lifetime of the client.
    
    Attributes:
        endpoints: Upload and finish URL templates
        headers: Static headers sent with every request. A ``credentials``
            entry is a directive, not a header: ``include`` keeps cookies
        algorithm: Digest algorithm name (e.g. 'sha-256')
        on_finalize: Optional hook awaited with the upload id after verification
        throttle: Progress throttling settings
        wire: Wire contract of the endpoints
        http: HTTP session settings
    """
    endpoints: Endpoints
    headers: Dict[str, str] = field(default_factory=dict)
    algorithm: str = 'sha-256'
    on_finalize: Optional[FinalizeHook] = None
    throttle: ThrottleConfig = field(default_factory=ThrottleConfig)
    wire: WireContract = field(default_factory=WireContract)
    http: HTTPConfig = field(default_factory=HTTPConfig)
    
    def __post_init__(self):
        """Validate and normalize config."""
        from ..strategies.checksum import normalize_algorithm
        
        if isinstance(self.endpoints, dict):
            object.__setattr__(self, 'endpoints', Endpoints(**self.endpoints))
        object.__setattr__(self, 'algorithm', normalize_algorithm(self.algorithm))
    
    @property
    def with_credentials(self) -> bool:
        """True if the credentials directive asks to include cookies."""
        for key, value in self.headers.items():
            if key.lower() == 'credentials':
                return value == 'include'
        return False
    
    def wire_headers(self) -> Dict[str, str]:
        """Static headers that are actually sent on the wire."""
        return {
            key: value for key, value in self.headers.items()
            if value and key.lower() not in ('credentials', 'content-type')
        }


@dataclass(frozen=True)
class UploadResult:
    """
    Result of a verified upload.
    
    Attributes:
        upload_id: Content-derived upload identifier
        checksum: Locally computed checksum, equal to the server hash
        file_size: Size of the uploaded file
        chunks: Number of chunks sent
        algorithm: Digest algorithm used
    """
    upload_id: str
    checksum: str
    file_size: int
    chunks: int
    algorithm: str
