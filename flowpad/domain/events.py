"""Domain events for decoupled side effects and integrations."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Dict, List
from uuid import uuid4

logger = logging.getLogger(__name__)


@dataclass
class DomainEvent:
    """Base class for all domain events."""
    event_id: str
    timestamp: datetime
    aggregate_id: str

    def __post_init__(self):
        if not self.event_id:
            object.__setattr__(self, 'event_id', str(uuid4()))
        if not self.timestamp:
            object.__setattr__(self, 'timestamp', datetime.now())

    @classmethod
    def now(cls, aggregate_id: str | int, **fields):
        """Build an event stamped with a fresh id and the current time."""
        return cls(event_id=str(uuid4()), timestamp=datetime.now(), aggregate_id=str(aggregate_id), **fields)


@dataclass
class GraphCreated(DomainEvent):
    """Raised when a new graph is created."""
    owner_id: int
    title: str


@dataclass
class GraphDeleted(DomainEvent):
    """Raised when a graph is deleted."""
    owner_id: int


@dataclass
class GraphShared(DomainEvent):
    """Raised when a share grant is created or its permission changes."""
    email: str
    permission: str


@dataclass
class RealtimeUpdatesApplied(DomainEvent):
    """Raised after a realtime batch was merged into the cached document."""
    applied: int
    skipped: int


@dataclass
class GraphFlushed(DomainEvent):
    """Raised when a dirty cache entry was written back to the store."""
    data_size: int


@dataclass
class CacheCleared(DomainEvent):
    """Raised when the whole graph cache is emptied."""
    entries: int


class DomainEventPublisher:
    """Singleton publisher for domain events."""

    _instance: DomainEventPublisher | None = None
    _subscribers: Dict[type, List[Callable[[DomainEvent], None]]]

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._subscribers = {}
        return cls._instance

    def subscribe(self, event_type: type[DomainEvent], handler: Callable[[DomainEvent], None]) -> None:
        """Subscribe a handler to an event type."""
        if event_type not in self._subscribers:
            self._subscribers[event_type] = []
        self._subscribers[event_type].append(handler)

    def publish(self, event: DomainEvent) -> None:
        """Publish an event to all subscribers."""
        for handler in self._subscribers.get(type(event), []):
            try:
                handler(event)
            except Exception:
                # Handlers never fail the operation that raised the event
                logger.exception(f"Event handler error for {type(event).__name__}")

    def clear_subscribers(self) -> None:
        """Clear all subscribers (useful for testing)."""
        self._subscribers = {}


# Singleton instance
event_publisher = DomainEventPublisher()
