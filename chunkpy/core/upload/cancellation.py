"""
Cooperative cancellation token.

One token is created per upload call and passed down to every service
that performs I/O. Services register a callback around each request so
an abort actively cancels the request in flight.
"""
import asyncio
import threading
from typing import Awaitable, Callable, List, TypeVar

from ..exceptions import UploadAbortedError
from ..logging import get_logger

logger = get_logger('chunkpy.upload.cancellation')

T = TypeVar('T')


class CancellationToken:
    """
    Cancellation signal shared by reference between a session and its services.
    
    The token transitions to cancelled exactly once. Callbacks registered
    before that moment run once on cancel; callbacks registered afterwards
    run immediately.
    """
    
    def __init__(self):
        self._cancelled = False
        self._callbacks: List[Callable[[], None]] = []
        self._lock = threading.Lock()
    
    @property
    def cancelled(self) -> bool:
        """Returns True once cancel() was called."""
        return self._cancelled
    
    def cancel(self) -> bool:
        """
        Cancel the token.
        
        Returns:
            True on the first call, False if already cancelled
        """
        with self._lock:
            if self._cancelled:
                return False
            self._cancelled = True
            callbacks, self._callbacks = self._callbacks, []
        
        for callback in callbacks:
            try:
                callback()
            except Exception as e:
                logger.error(f"Cancellation callback failed: {e}")
        return True
    
    def register(self, callback: Callable[[], None]) -> Callable[[], None]:
        """
        Register a callback to run on cancel.
        
        Args:
            callback: Zero-argument callable
            
        Returns:
            Function removing the callback again
        """
        with self._lock:
            if not self._cancelled:
                self._callbacks.append(callback)
                
                def unregister() -> None:
                    with self._lock:
                        if callback in self._callbacks:
                            self._callbacks.remove(callback)
                
                return unregister
        
        callback()
        return lambda: None
    
    def raise_if_cancelled(self) -> None:
        """Raise UploadAbortedError if the token was cancelled."""
        if self._cancelled:
            raise UploadAbortedError()


async def run_cancellable(coro: Awaitable[T], token: CancellationToken, what: str) -> T:
    """
    Await ``coro`` as a task that the token can actively cancel.
    
    Args:
        coro: Awaitable performing the request
        token: Cancellation token of the upload call
        what: Short description used in the abort message
        
    Raises:
        UploadAbortedError: If the token fired before or during the await
    """
    if token.cancelled:
        close = getattr(coro, 'close', None)
        if close is not None:
            close()
        raise UploadAbortedError(f"Upload aborted before {what}")
    
    loop = asyncio.get_running_loop()
    task = asyncio.ensure_future(coro)
    unregister = token.register(lambda: loop.call_soon_threadsafe(task.cancel))
    try:
        return await task
    except asyncio.CancelledError:
        if token.cancelled:
            logger.debug(f"Cancelled {what}")
            raise UploadAbortedError(f"Upload aborted during {what}") from None
        raise
    finally:
        unregister()
