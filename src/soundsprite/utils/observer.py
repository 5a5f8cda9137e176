"""Generic observer list with thread-safe registration and notification."""

import logging
from threading import Lock
from typing import Any, Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=object)


class ObserverManager(Generic[T]):
    """
    Observer list shared by the pad store, sequencer, recorder and audio engine.

    Type Parameters:
        T: The observer protocol type (e.g., EditObserver, StateObserver)

    Thread Safety:
        All operations are thread-safe. The lock is released before calling
        observer callbacks so observers may query (or re-register with) the
        notifying component.

    Example:
        ```python
        class PadStore:
            def __init__(self):
                self._observers = ObserverManager[EditObserver](observer_type_name="edit")

            def _notify(self, event, indices):
                self._observers.notify("on_edit_event", event, indices)
        ```
    """

    def __init__(self, observer_type_name: str = "observer"):
        """
        Initialize the observer manager.

        Args:
            observer_type_name: Name of the observer type for logging (e.g., "edit", "state")
        """
        self._observers: list[T] = []
        self._lock = Lock()
        self._observer_type_name = observer_type_name

    def register(self, observer: T) -> None:
        """Register an observer (idempotent - won't add duplicates)."""
        with self._lock:
            if observer not in self._observers:
                self._observers.append(observer)
                logger.debug(f"Registered {self._observer_type_name} observer: {observer}")

    def unregister(self, observer: T) -> None:
        """Unregister an observer; unknown observers are ignored with a warning."""
        with self._lock:
            if observer in self._observers:
                self._observers.remove(observer)
                logger.debug(f"Unregistered {self._observer_type_name} observer: {observer}")
            else:
                logger.warning(
                    f"Attempted to unregister unknown {self._observer_type_name} observer: {observer}"
                )

    def notify(self, callback_name: str, *args: Any, **kwargs: Any) -> None:
        """
        Call `callback_name` on every observer.

        Error Handling:
            Exceptions in observer callbacks are logged but don't affect other
            observers or the caller.
        """
        with self._lock:
            observers = list(self._observers)

        for observer in observers:
            try:
                getattr(observer, callback_name)(*args, **kwargs)
            except Exception as e:
                logger.error(
                    f"Error notifying {self._observer_type_name} observer {observer} via {callback_name}: {e}",
                    exc_info=True,
                )

    def clear(self) -> None:
        """Remove all registered observers."""
        with self._lock:
            self._observers.clear()

    def __contains__(self, observer: T) -> bool:
        with self._lock:
            return observer in self._observers

    def __len__(self) -> int:
        with self._lock:
            return len(self._observers)
