"""Service for graph and share validation logic."""
from __future__ import annotations

import re
from typing import Any, Dict

from flowpad.db.models import Graph, User
from flowpad.db.repositories.shares import ShareRepository
from flowpad.domain.entities import SHARE_PERMISSIONS, empty_graph_data
from flowpad.domain.errors import ConflictError, ValidationError

EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


class GraphValidationService:
    """Validates graph and sharing operations."""

    def __init__(self, shares: ShareRepository) -> None:
        self._shares = shares

    def normalize_title(self, title: str | None) -> str:
        """Blank titles become "Untitled"."""
        if title is None or not title.strip():
            return "Untitled"
        title = title.strip()
        if len(title) > 255:
            raise ValidationError("Graph title must be at most 255 characters")
        return title

    def normalize_data(self, data: Dict[str, Any] | None) -> Dict[str, Any]:
        if data is None:
            return empty_graph_data()
        for key in ("tiles", "connections"):
            if key in data and not isinstance(data[key], list):
                raise ValidationError(f"Graph data field '{key}' must be a list")
        return {**empty_graph_data(), **data}

    def validate_permission(self, permission: str) -> str:
        permission = (permission or "").strip().lower()
        if permission not in SHARE_PERMISSIONS:
            raise ValidationError(f"Permission must be one of: {', '.join(SHARE_PERMISSIONS)}")
        return permission

    def validate_email(self, email: str) -> str:
        email = (email or "").strip().lower()
        if not EMAIL_PATTERN.match(email):
            raise ValidationError("A valid email address is required")
        return email

    def check_can_share(self, graph: Graph, owner: User, email: str) -> None:
        """Reject sharing with yourself or sharing twice with the same address."""
        if email == owner.email.lower():
            raise ValidationError("You already own this graph")
        if self._shares.get_share(graph.id, email):
            raise ConflictError("Already shared with this email")
