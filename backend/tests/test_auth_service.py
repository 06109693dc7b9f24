"""Tests for the auth use cases."""

import logging
from datetime import timedelta
from unittest.mock import MagicMock, patch

import pytest
from sqlalchemy.exc import OperationalError

from eventhub.models.password_reset_token import PasswordResetToken, ResetTokenState
from eventhub.models.security_audit_log import SecurityAuditLog
from eventhub.models.user import User
from eventhub.services.auth import (
    AuthService,
    ConflictError,
    InternalError,
    InvalidInputError,
    PasswordTooLongError,
    ResetTokenStore,
    UnauthorizedError,
)


@pytest.fixture
def ada(auth_service):
    return auth_service.register("Ada", "Lovelace", "ada@example.com", "secret1")


class TestRegister:
    """Tests for AuthService.register."""

    def test_register_returns_credential_for_new_user(self, auth_service, signer, db):
        result = auth_service.register("Ada", "Lovelace", "ada@example.com", "secret1")

        claims = signer.verify(result.token)
        assert claims.email == "ada@example.com"
        assert claims.user_id == result.user.id
        assert claims.is_admin is False

        user = db.query(User).filter(User.email == "ada@example.com").one()
        assert user.first_name == "Ada"
        assert user.password_hash != "secret1"
        assert user.hosted_events_count == 0

    def test_register_duplicate_email_conflicts(self, auth_service, ada):
        with pytest.raises(ConflictError):
            auth_service.register("Ada", "Byron", "ada@example.com", "other1")

    def test_register_email_match_is_case_sensitive(self, auth_service, ada):
        result = auth_service.register("Ada", "Upper", "ADA@example.com", "secret1")

        assert result.user.email == "ADA@example.com"
        assert result.user.id != ada.user.id

    @pytest.mark.parametrize(
        "fields",
        [
            ("", "Lovelace", "ada@example.com", "secret1"),
            ("Ada", "", "ada@example.com", "secret1"),
            ("Ada", "Lovelace", "", "secret1"),
            ("Ada", "Lovelace", "ada@example.com", ""),
        ],
    )
    def test_register_missing_field_is_invalid(self, auth_service, fields):
        with pytest.raises(InvalidInputError):
            auth_service.register(*fields)

    def test_register_records_audit_event(self, auth_service, db, ada):
        events = db.query(SecurityAuditLog).filter(
            SecurityAuditLog.event_type == "user_registered"
        ).all()

        assert [event.user_id for event in events] == [ada.user.id]

    def test_register_database_failure_is_internal_error(self, db, sender, hasher, signer):
        users = MagicMock()
        users.find_by_email.side_effect = OperationalError("SELECT", {}, Exception("down"))
        service = AuthService(db, sender, hasher=hasher, signer=signer, users=users)

        with pytest.raises(InternalError) as exc_info:
            service.register("Ada", "Lovelace", "ada@example.com", "secret1")

        assert exc_info.value.message == "Internal server error"


class TestLogin:
    """Tests for AuthService.login."""

    def test_login_success(self, auth_service, signer, ada):
        result = auth_service.login("ada@example.com", "secret1")

        assert result.user.id == ada.user.id
        assert signer.verify(result.token).email == "ada@example.com"

    def test_login_wrong_password(self, auth_service, ada):
        with pytest.raises(UnauthorizedError):
            auth_service.login("ada@example.com", "wrong")

    def test_wrong_password_and_unknown_email_fail_identically(self, auth_service, ada):
        with pytest.raises(UnauthorizedError) as wrong_password:
            auth_service.login("ada@example.com", "wrong")
        with pytest.raises(UnauthorizedError) as unknown_email:
            auth_service.login("nobody@example.com", "secret1")

        assert wrong_password.value == unknown_email.value
        assert str(wrong_password.value) == str(unknown_email.value) == "Invalid email or password"

    def test_unknown_email_still_verifies_a_hash(self, auth_service, hasher):
        with patch.object(hasher, "verify", wraps=hasher.verify) as verify:
            with pytest.raises(UnauthorizedError):
                auth_service.login("nobody@example.com", "secret1")

        verify.assert_called_once_with("secret1", hasher.dummy_hash)

    def test_login_email_is_case_sensitive(self, auth_service, ada):
        with pytest.raises(UnauthorizedError):
            auth_service.login("ADA@example.com", "secret1")

    def test_login_records_failure_reasons(self, auth_service, db, ada):
        for email, password in [("ada@example.com", "wrong"), ("nobody@example.com", "x")]:
            with pytest.raises(UnauthorizedError):
                auth_service.login(email, password)

        failures = db.query(SecurityAuditLog).filter(
            SecurityAuditLog.event_type == "login_failed"
        ).all()
        assert sorted(event.details_data["reason"] for event in failures) == [
            "invalid_password",
            "user_not_found",
        ]

    def test_login_database_failure_is_internal_error(self, db, sender, hasher, signer):
        users = MagicMock()
        users.find_by_email.side_effect = OperationalError("SELECT", {}, Exception("down"))
        service = AuthService(db, sender, hasher=hasher, signer=signer, users=users)

        with pytest.raises(InternalError):
            service.login("ada@example.com", "secret1")


class TestRequestPasswordReset:
    """Tests for AuthService.request_password_reset."""

    def test_known_email_creates_one_token_and_sends_link(self, auth_service, db, sender, ada):
        assert auth_service.request_password_reset("ada@example.com") is True

        tokens = db.query(PasswordResetToken).filter(
            PasswordResetToken.user_id == ada.user.id
        ).all()
        assert len(tokens) == 1
        assert tokens[0].used_at is None

        assert len(sender.sent) == 1
        to_address, reset_url = sender.sent[0]
        assert to_address == "ada@example.com"
        assert reset_url.startswith("http://localhost:3000/reset-password?token=")

    def test_unknown_email_gives_same_answer(self, auth_service, db, sender):
        assert auth_service.request_password_reset("nobody@example.com") is True
        assert auth_service.request_password_reset("") is True

        assert db.query(PasswordResetToken).count() == 0
        assert sender.sent == []

    def test_send_failure_is_logged_and_token_kept(self, auth_service, db, sender, ada, caplog):
        sender.fail = True

        with caplog.at_level(logging.ERROR):
            assert auth_service.request_password_reset("ada@example.com") is True

        assert "Password reset request failed" in caplog.text
        assert db.query(PasswordResetToken).count() == 1

    def test_store_failure_is_logged_and_swallowed(self, db, sender, hasher, signer, ada, caplog):
        reset_tokens = MagicMock()
        reset_tokens.create.side_effect = OperationalError("INSERT", {}, Exception("down"))
        service = AuthService(db, sender, hasher=hasher, signer=signer, reset_tokens=reset_tokens)

        with caplog.at_level(logging.ERROR):
            assert service.request_password_reset("ada@example.com") is True

        assert "Password reset request failed" in caplog.text
        assert sender.sent == []

    def test_raw_secret_is_not_logged(self, auth_service, sender, ada, caplog):
        with caplog.at_level(logging.DEBUG):
            auth_service.request_password_reset("ada@example.com")

        assert sender.last_token not in caplog.text

    def test_reset_url_uses_configured_frontend(self, db, sender, hasher, signer):
        from eventhub.config import Settings

        settings = Settings(frontend_url="https://events.example.org/")
        service = AuthService(db, sender, settings, hasher=hasher, signer=signer)

        assert service.build_reset_url("abc") == "https://events.example.org/reset-password?token=abc"


class TestResetPassword:
    """Tests for AuthService.reset_password."""

    def test_reset_password_logs_user_in_with_new_password(self, auth_service, signer, sender, ada):
        auth_service.request_password_reset("ada@example.com")

        result = auth_service.reset_password(sender.last_token, "newpass1")

        assert result.user.id == ada.user.id
        assert signer.verify(result.token).user_id == ada.user.id
        assert auth_service.login("ada@example.com", "newpass1").user.id == ada.user.id
        with pytest.raises(UnauthorizedError):
            auth_service.login("ada@example.com", "secret1")

    def test_reset_token_is_single_use(self, auth_service, sender, ada):
        auth_service.request_password_reset("ada@example.com")
        raw_secret = sender.last_token

        auth_service.reset_password(raw_secret, "newpass1")

        with pytest.raises(UnauthorizedError) as exc_info:
            auth_service.reset_password(raw_secret, "newpass2")
        assert exc_info.value.message == "Invalid or expired reset token"

        # The second attempt did not change the password
        auth_service.login("ada@example.com", "newpass1")

    def test_expired_token_is_rejected(self, auth_service, sender, clock, ada):
        auth_service.request_password_reset("ada@example.com")
        clock.now += timedelta(hours=1, minutes=1)

        with pytest.raises(UnauthorizedError):
            auth_service.reset_password(sender.last_token, "newpass1")

    def test_unknown_token_is_rejected(self, auth_service, ada):
        with pytest.raises(UnauthorizedError):
            auth_service.reset_password("made-up-secret", "newpass1")

    @pytest.mark.parametrize("token,password", [("", "newpass1"), ("abc", ""), ("abc", "short")])
    def test_invalid_input(self, auth_service, token, password):
        with pytest.raises(InvalidInputError):
            auth_service.reset_password(token, password)

    def test_invalid_input_leaves_token_usable(self, db, auth_service, sender, clock, ada):
        auth_service.request_password_reset("ada@example.com")
        raw_secret = sender.last_token

        with pytest.raises(InvalidInputError):
            auth_service.reset_password(raw_secret, "12345")
        with pytest.raises(PasswordTooLongError):
            auth_service.reset_password(raw_secret, "x" * 100)

        assert ResetTokenStore(db, clock=clock).state_of(raw_secret) is ResetTokenState.VALID

    def test_failed_reset_is_audited(self, auth_service, db):
        with pytest.raises(UnauthorizedError):
            auth_service.reset_password("made-up-secret", "newpass1")

        assert db.query(SecurityAuditLog).filter(
            SecurityAuditLog.event_type == "password_reset_failed"
        ).count() == 1

    def test_completed_reset_is_audited(self, auth_service, db, sender, ada):
        auth_service.request_password_reset("ada@example.com")
        auth_service.reset_password(sender.last_token, "newpass1")

        event_types = {event.event_type for event in db.query(SecurityAuditLog).all()}
        assert {"password_reset_requested", "password_reset_completed"} <= event_types
