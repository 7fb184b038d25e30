"""Event handlers for domain events."""
from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from flowpad.domain.events import (
        GraphCreated,
        GraphDeleted,
        GraphShared,
        RealtimeUpdatesApplied,
        GraphFlushed,
        CacheCleared,
    )

logger = logging.getLogger(__name__)


class AuditLogHandler:
    """Logs all domain events for audit trail."""

    def handle_graph_created(self, event: GraphCreated) -> None:
        logger.info(f"[AUDIT] Graph created: {event.aggregate_id} by user {event.owner_id} - {event.title}")

    def handle_graph_deleted(self, event: GraphDeleted) -> None:
        logger.info(f"[AUDIT] Graph deleted: {event.aggregate_id} by user {event.owner_id}")

    def handle_graph_shared(self, event: GraphShared) -> None:
        logger.info(f"[AUDIT] Graph {event.aggregate_id} shared with {event.email} as {event.permission}")

    def handle_realtime_applied(self, event: RealtimeUpdatesApplied) -> None:
        logger.debug(
            f"[AUDIT] Realtime batch on graph {event.aggregate_id}: "
            f"{event.applied} applied, {event.skipped} skipped"
        )

    def handle_graph_flushed(self, event: GraphFlushed) -> None:
        logger.info(f"[AUDIT] Graph flushed: {event.aggregate_id} ({event.data_size} bytes)")

    def handle_cache_cleared(self, event: CacheCleared) -> None:
        logger.warning(f"[AUDIT] Graph cache cleared ({event.entries} entries)")


class DesyncWarningHandler:
    """Flags batches where ops were skipped because their ids did not match the server document."""

    def handle_realtime_applied(self, event: RealtimeUpdatesApplied) -> None:
        if event.skipped:
            logger.warning(
                f"[DESYNC] {event.skipped} op(s) on graph {event.aggregate_id} were skipped (unknown or duplicate ids)"
            )


def register_event_handlers():
    """Register all event handlers with the publisher."""
    from flowpad.domain.events import (
        event_publisher,
        GraphCreated,
        GraphDeleted,
        GraphShared,
        RealtimeUpdatesApplied,
        GraphFlushed,
        CacheCleared,
    )

    audit = AuditLogHandler()
    desync = DesyncWarningHandler()

    # Audit handlers (all events)
    event_publisher.subscribe(GraphCreated, audit.handle_graph_created)
    event_publisher.subscribe(GraphDeleted, audit.handle_graph_deleted)
    event_publisher.subscribe(GraphShared, audit.handle_graph_shared)
    event_publisher.subscribe(RealtimeUpdatesApplied, audit.handle_realtime_applied)
    event_publisher.subscribe(GraphFlushed, audit.handle_graph_flushed)
    event_publisher.subscribe(CacheCleared, audit.handle_cache_cleared)

    # Client desync visibility
    event_publisher.subscribe(RealtimeUpdatesApplied, desync.handle_realtime_applied)
