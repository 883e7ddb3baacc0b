"""Tests for progress aggregation."""
import logging
from unittest.mock import Mock

import pytest

from chunkpy.core.upload.models import ChunkInfo, ProgressState, ThrottleConfig, UploadState
from chunkpy.core.upload.services import ProgressAggregator


class FakeClock:
    """Manually advanced monotonic clock."""
    
    def __init__(self, now: float = 1000.0):
        self.now = now
    
    def __call__(self) -> float:
        return self.now
    
    def advance(self, seconds: float) -> None:
        self.now += seconds


def uploading(uploaded: int, total: int = 10_000_000) -> ProgressState:
    return ProgressState(uploaded=uploaded, total=total, state=UploadState.UPLOADING)


class TestProgressAggregator:
    """Test suite for ProgressAggregator."""
    
    @pytest.fixture
    def clock(self):
        return FakeClock()
    
    @pytest.fixture
    def aggregator(self, clock):
        return ProgressAggregator(ThrottleConfig(interval=1.0, min_bytes=1_000_000), clock)
    
    def test_subscribe_receives_current_snapshot(self, aggregator):
        """Test late subscribers immediately get the latest state."""
        aggregator.report(uploading(500))
        callback = Mock()
        
        aggregator.subscribe(callback)
        
        callback.assert_called_once_with(uploading(500))
    
    def test_report_without_observer_keeps_snapshot(self, aggregator):
        aggregator.report(uploading(123))
        
        assert aggregator.snapshot == uploading(123)
    
    def test_burst_is_throttled(self, aggregator, clock):
        """Test 10ms ticks with 1-byte deltas notify about once per second."""
        notified = []
        aggregator.subscribe(notified.append)
        notified.clear()
        
        for i in range(300):  # three seconds of ticks
            aggregator.report(uploading(i + 1))
            clock.advance(0.010)
        
        assert 3 <= len(notified) <= 4
        for earlier, later in zip(notified, notified[1:]):
            assert later.uploaded - earlier.uploaded >= 99
    
    def test_byte_threshold_bypasses_interval(self, aggregator, clock):
        notified = []
        aggregator.subscribe(notified.append)
        aggregator.report(uploading(1))
        notified.clear()
        
        clock.advance(0.01)
        aggregator.report(uploading(500_000))
        clock.advance(0.01)
        aggregator.report(uploading(1_000_001))
        
        assert notified == [uploading(1_000_001)]
    
    @pytest.mark.parametrize("state", [
        UploadState.INITIALIZING,
        UploadState.FINISHING,
        UploadState.DONE,
        UploadState.ERROR,
    ])
    def test_boundary_states_always_notify(self, aggregator, state):
        notified = []
        aggregator.subscribe(notified.append)
        aggregator.report(uploading(1))
        notified.clear()
        
        aggregator.report(ProgressState(uploaded=2, total=10, state=state))
        
        assert [s.state for s in notified] == [state]
    
    def test_force_bypasses_throttle(self, aggregator):
        notified = []
        aggregator.subscribe(notified.append)
        aggregator.report(uploading(1))
        notified.clear()
        
        aggregator.report(uploading(2), force=True)
        
        assert notified == [uploading(2)]
    
    def test_callback_errors_are_logged(self, aggregator, caplog):
        """Test a failing observer never breaks reporting."""
        callback = Mock(side_effect=RuntimeError("broken ui"))
        
        with caplog.at_level(logging.ERROR, logger='chunkpy.upload.progress'):
            aggregator.subscribe(callback)
            aggregator.report(uploading(1), force=True)
        
        assert callback.call_count == 2
        assert aggregator.snapshot == uploading(1)
        assert "broken ui" in caplog.text
    
    def test_unsubscribe(self, aggregator):
        callback = Mock()
        unsubscribe = aggregator.subscribe(callback)
        
        unsubscribe()
        aggregator.report(uploading(1), force=True)
        
        callback.assert_called_once()
    
    def test_new_subscriber_replaces_old(self, aggregator):
        """Test stale unsubscribe does not remove the newer observer."""
        first, second = Mock(), Mock()
        unsubscribe_first = aggregator.subscribe(first)
        aggregator.subscribe(second)
        
        unsubscribe_first()
        aggregator.report(uploading(1), force=True)
        
        assert first.call_count == 1
        assert second.call_count == 2


class TestChunkProgress:
    """Test suite for per-chunk progress accounting."""
    
    @pytest.fixture
    def aggregator(self):
        aggregator = ProgressAggregator(ThrottleConfig(interval=0, min_bytes=0))
        aggregator.start(total=250, chunk_count=3)
        return aggregator
    
    def test_sum_of_chunks(self, aggregator):
        aggregator.record_chunk_progress(ChunkInfo(0, 0, 100), 100)
        aggregator.record_chunk_progress(ChunkInfo(1, 100, 200), 40)
        
        snapshot = aggregator.snapshot
        assert snapshot.uploaded == 140
        assert snapshot.state is UploadState.UPLOADING
        assert snapshot.current_chunk_size == 100
    
    def test_out_of_order_events_never_decrease(self, aggregator):
        """Test duplicate or late events do not regress progress."""
        chunk = ChunkInfo(0, 0, 100)
        aggregator.record_chunk_progress(chunk, 80)
        aggregator.record_chunk_progress(chunk, 30)
        
        assert aggregator.uploaded == 80
    
    def test_clamped_to_chunk_and_total(self, aggregator):
        aggregator.record_chunk_progress(ChunkInfo(0, 0, 100), 1000)
        aggregator.record_chunk_progress(ChunkInfo(1, 100, 200), 100)
        aggregator.record_chunk_progress(ChunkInfo(2, 200, 250), 50)
        
        assert aggregator.uploaded == 250
    
    def test_start_resets(self, aggregator):
        aggregator.record_chunk_progress(ChunkInfo(0, 0, 100), 100)
        
        aggregator.start(total=10, chunk_count=1)
        
        assert aggregator.uploaded == 0
        assert aggregator.total == 10
