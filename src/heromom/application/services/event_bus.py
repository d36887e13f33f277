from collections import defaultdict
import logging
from typing import Callable, DefaultDict, List, NamedTuple, Type


class _Subscription(NamedTuple):
    priority: int
    order: int
    handler: Callable[[object], None]


class EventBus:
    """Synchronous in-process bus; handlers run in (priority, subscription order)."""

    def __init__(self) -> None:
        self._subscribers: DefaultDict[Type[object], List[_Subscription]] = defaultdict(list)
        self._next_order = 0
        self._last_publish_errors: List[Exception] = []
        self._logger = logging.getLogger(__name__)

    def subscribe(self, event_type: Type[object], handler: Callable[[object], None], *, priority: int = 100) -> None:
        rows = self._subscribers[event_type]
        rows.append(_Subscription(int(priority), self._next_order, handler))
        self._next_order += 1
        rows.sort(key=lambda row: (row.priority, row.order))

    def publish(self, event: object) -> List[Exception]:
        errors: List[Exception] = []
        event_type = type(event)
        for row in list(self._subscribers[event_type]):
            try:
                row.handler(event)
            except Exception as exc:
                errors.append(exc)
                handler_name = getattr(row.handler, "__qualname__", getattr(row.handler, "__name__", repr(row.handler)))
                self._logger.exception(
                    "Event handler failed and was isolated",
                    extra={
                        "event_type": event_type.__name__,
                        "handler": handler_name,
                        "priority": row.priority,
                    },
                )
        # Handlers may publish follow-up events; only this publish call owns these errors.
        self._last_publish_errors = errors
        return list(errors)

    def publish_strict(self, event: object) -> None:
        """Publish, then re-raise the first isolated handler failure so the caller can roll back."""
        errors = self.publish(event)
        if errors:
            raise errors[0]

    def last_publish_errors(self) -> List[Exception]:
        return list(self._last_publish_errors)

    def handler_names(self, event_type: Type[object]) -> List[str]:
        return [getattr(row.handler, "__qualname__", repr(row.handler)) for row in self._subscribers.get(event_type, ())]
