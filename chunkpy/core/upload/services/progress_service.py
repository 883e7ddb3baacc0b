"""
Progress aggregation service.

Turns raw per-chunk byte events into throttled observer notifications.
"""
import time
from typing import Callable, List, Optional

from ...logging import get_logger
from ..models import ChunkInfo, ProgressState, ThrottleConfig, UploadState

ProgressCallback = Callable[[ProgressState], None]

logger = get_logger('chunkpy.upload.progress')


class ProgressAggregator:
    """
    Owns the uploaded-byte counter and the notification throttle.
    
    Bytes are tracked per chunk: an entry never decreases, so duplicate or
    out-of-order transport events cannot make progress go backwards. The
    sum of the entries, clamped to the total, is the uploaded value.
    
    A single observer is supported; subscribing again replaces it.
    """
    
    def __init__(
        self,
        throttle: Optional[ThrottleConfig] = None,
        clock: Callable[[], float] = time.monotonic
    ):
        """
        Initialize aggregator.
        
        Args:
            throttle: Throttling settings
            clock: Monotonic clock in seconds (injectable for tests)
        """
        self._throttle = throttle or ThrottleConfig()
        self._clock = clock
        self._callback: Optional[ProgressCallback] = None
        self._snapshot = ProgressState(uploaded=0, total=0, state=UploadState.INITIALIZING)
        self._last_report_time = 0.0
        self._last_reported_uploaded = 0
        self._per_chunk: List[int] = []
    
    @property
    def snapshot(self) -> ProgressState:
        """Latest known progress, whether or not it was notified."""
        return self._snapshot
    
    @property
    def uploaded(self) -> int:
        return self._snapshot.uploaded
    
    @property
    def total(self) -> int:
        return self._snapshot.total
    
    def subscribe(self, callback: ProgressCallback) -> Callable[[], None]:
        """
        Register the progress observer.
        
        The callback is invoked immediately with the current snapshot.
        
        Returns:
            Function unregistering the callback (no-op if it was replaced)
        """
        self._callback = callback
        self._notify(callback, self._snapshot)
        
        def unsubscribe() -> None:
            if self._callback is callback:
                self._callback = None
        
        return unsubscribe
    
    def start(self, total: int, chunk_count: int = 0) -> None:
        """Reset the byte counters for a new upload call."""
        self._per_chunk = [0] * chunk_count
        self._last_reported_uploaded = 0
        self._snapshot = ProgressState(
            uploaded=0,
            total=total,
            state=self._snapshot.state
        )
    
    def record_chunk_progress(self, chunk: ChunkInfo, sent: int) -> None:
        """
        Record bytes of ``chunk`` confirmed sent and report an Uploading tick.
        
        Args:
            chunk: Chunk in flight
            sent: Bytes of this chunk sent so far
        """
        if chunk.index >= len(self._per_chunk):
            self._per_chunk.extend([0] * (chunk.index + 1 - len(self._per_chunk)))
        
        sent = max(0, min(sent, chunk.length))
        if sent > self._per_chunk[chunk.index]:
            self._per_chunk[chunk.index] = sent
        
        total = self._snapshot.total
        uploaded = min(total, sum(self._per_chunk))
        uploaded = max(uploaded, self._snapshot.uploaded)
        
        self.report(ProgressState(
            uploaded=uploaded,
            total=total,
            state=UploadState.UPLOADING,
            current_chunk_size=chunk.length
        ))
    
    def report(self, state: ProgressState, force: bool = False) -> None:
        """
        Record ``state`` and notify the observer unless throttled.
        
        Boundary states (Initializing, Finishing, Done, Error) and forced
        reports always notify.
        
        Args:
            state: New progress snapshot
            force: Bypass the throttle
        """
        self._snapshot = state
        
        callback = self._callback
        if callback is None:
            return
        
        now = self._clock()
        time_since_last = now - self._last_report_time
        bytes_since_last = max(0, state.uploaded - self._last_reported_uploaded)
        
        should_report = (
            force
            or state.state.is_boundary
            or time_since_last >= self._throttle.interval
            or bytes_since_last >= self._throttle.min_bytes
        )
        if not should_report:
            return
        
        self._last_report_time = now
        self._last_reported_uploaded = state.uploaded
        self._notify(callback, state)
    
    def _notify(self, callback: ProgressCallback, state: ProgressState) -> None:
        try:
            callback(state)
        except Exception as e:
            logger.error(f"Progress callback error: {e}")
