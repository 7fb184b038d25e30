"""Tests for application services."""
from __future__ import annotations

import datetime
from unittest.mock import Mock

import jwt
import pytest

from flowpad.application.auth_service import AuthService
from flowpad.application.graph_access_service import GraphAccessService
from flowpad.application.graph_validation_service import GraphValidationService
from flowpad.domain.errors import (
    AccessDeniedError, AuthenticationError, ConflictError, NotFoundError, ValidationError,
)

TEST_CLIENT_ID = "test-client-id"


def make_graph(graph_id=1, user_id=1):
    return Mock(id=graph_id, user_id=user_id)


def make_user(user_id=1, email="owner@example.com"):
    return Mock(id=user_id, email=email)


class TestAuthService:
    """Test Google verification and session tokens."""

    def test_verify_google_credential(self, auth_service):
        identity = auth_service.verify_google_credential("good:sub-1:ada@example.com")

        assert identity == {"google_id": "sub-1", "email": "ada@example.com", "name": "Ada"}

    def test_missing_credential(self, auth_service):
        with pytest.raises(ValidationError, match="Missing idToken"):
            auth_service.verify_google_credential("")

    def test_rejected_credential(self, auth_service):
        with pytest.raises(AuthenticationError):
            auth_service.verify_google_credential("garbage")

    def test_wrong_audience(self):
        verifier = Mock(return_value={"aud": "someone-else", "sub": "1", "email": "a@b.co"})
        service = AuthService("s", TEST_CLIENT_ID, verifier=verifier)

        with pytest.raises(AuthenticationError, match="audience"):
            service.verify_google_credential("token")

    def test_unconfigured_client_id(self):
        verifier = Mock()
        service = AuthService("s", "", verifier=verifier)

        with pytest.raises(AuthenticationError, match="not configured"):
            service.verify_google_credential("good:1:a@b.co")
        verifier.assert_not_called()

    def test_token_round_trip(self, auth_service):
        token = auth_service.create_token(42)

        assert auth_service.decode_token(token) == 42

    def test_token_signed_with_other_secret(self, auth_service):
        token = AuthService("other", TEST_CLIENT_ID).create_token(42)

        with pytest.raises(AuthenticationError, match="Invalid token"):
            auth_service.decode_token(token)

    def test_expired_token(self, auth_service):
        past = datetime.datetime.now(datetime.timezone.utc) - datetime.timedelta(days=1)
        token = jwt.encode({"userId": 1, "exp": past}, "test-secret", algorithm="HS256")

        with pytest.raises(AuthenticationError, match="expired"):
            auth_service.decode_token(token)

    def test_token_without_user_id(self, auth_service):
        token = jwt.encode({"sub": "x"}, "test-secret", algorithm="HS256")

        with pytest.raises(AuthenticationError):
            auth_service.decode_token(token)


class TestGraphAccessService:
    """Test ownership and share checks."""

    def _service(self, graph=None, share=None):
        graphs = Mock()
        graphs.get_graph.return_value = graph
        shares = Mock()
        shares.get_share.return_value = share
        return GraphAccessService(graphs, shares)

    def test_owner_has_full_access(self):
        graph = make_graph(user_id=1)
        service = self._service(graph)
        user = make_user(1)

        assert service.require_read(1, user) is graph
        assert service.require_write(1, user) is graph
        assert service.require_owner(1, user) is graph

    def test_missing_graph(self):
        with pytest.raises(NotFoundError):
            self._service(None).require_read(1, make_user())

    def test_stranger_gets_not_found(self):
        service = self._service(make_graph(user_id=1), share=None)

        with pytest.raises(NotFoundError):
            service.require_read(1, make_user(2, "x@example.com"))
        with pytest.raises(NotFoundError):
            service.require_write(1, make_user(2, "x@example.com"))

    def test_viewer_can_read_not_write(self):
        service = self._service(make_graph(user_id=1), share=Mock(permission="viewer"))
        viewer = make_user(2, "v@example.com")

        service.require_read(1, viewer)
        with pytest.raises(AccessDeniedError):
            service.require_write(1, viewer)

    def test_editor_can_write_not_own(self):
        service = self._service(make_graph(user_id=1), share=Mock(permission="editor"))
        editor = make_user(2, "e@example.com")

        service.require_write(1, editor)
        with pytest.raises(AccessDeniedError):
            service.require_owner(1, editor)


class TestGraphValidationService:
    """Test graph and share validation."""

    def _service(self, existing_share=None):
        shares = Mock()
        shares.get_share.return_value = existing_share
        return GraphValidationService(shares)

    def test_normalize_title(self):
        service = self._service()

        assert service.normalize_title(None) == "Untitled"
        assert service.normalize_title("   ") == "Untitled"
        assert service.normalize_title("  Plan ") == "Plan"

    def test_title_too_long(self):
        with pytest.raises(ValidationError):
            self._service().normalize_title("x" * 256)

    def test_normalize_data_defaults(self):
        service = self._service()

        assert service.normalize_data(None) == {"tiles": [], "connections": []}
        assert service.normalize_data({"tiles": [{"id": "a"}], "zoom": 2}) == {
            "tiles": [{"id": "a"}], "connections": [], "zoom": 2,
        }

    def test_normalize_data_rejects_non_list(self):
        with pytest.raises(ValidationError, match="tiles"):
            self._service().normalize_data({"tiles": "nope"})

    def test_validate_permission(self):
        service = self._service()

        assert service.validate_permission(" Editor ") == "editor"
        with pytest.raises(ValidationError):
            service.validate_permission("admin")

    def test_validate_email(self):
        service = self._service()

        assert service.validate_email(" Ada@Example.com ") == "ada@example.com"
        with pytest.raises(ValidationError):
            service.validate_email("not-an-email")

    def test_cannot_share_with_self(self):
        with pytest.raises(ValidationError):
            self._service().check_can_share(make_graph(), make_user(email="Owner@example.com"), "owner@example.com")

    def test_cannot_share_twice(self):
        service = self._service(existing_share=Mock())

        with pytest.raises(ConflictError, match="Already shared"):
            service.check_can_share(make_graph(), make_user(), "friend@example.com")
