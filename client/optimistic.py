import logging
from typing import Awaitable, Callable, Generic, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class OptimisticUpdate(Generic[T]):
    """Show a value immediately, then keep the server's result or roll back."""

    def __init__(self, initial: T, on_success: Optional[Callable[[T], None]] = None,
                 on_error: Optional[Callable[[Exception], None]] = None):
        self.data = initial
        self.error: Optional[Exception] = None
        self.is_loading = False
        self.on_success = on_success
        self.on_error = on_error

    async def execute(self, optimistic: T, operation: Callable[[], Awaitable[T]]) -> Optional[T]:
        previous = self.data
        self.is_loading = True
        self.error = None
        self.data = optimistic
        try:
            result = await operation()
        except Exception as e:
            self.data = previous
            self.error = e
            logger.warning(f"Optimistic update rolled back: {e}")
            if self.on_error:
                self.on_error(e)
            return None
        finally:
            self.is_loading = False

        self.data = result
        if self.on_success:
            self.on_success(result)
        return result
