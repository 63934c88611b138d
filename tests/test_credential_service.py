"""Tests for the first-factor credential gate."""

import pytest

from mfa_bridge.errors import CredentialRejected
from mfa_bridge.services.credential_service import CredentialGate


class TestIdentityStore:
    """Test the seeded in-memory user store."""

    def test_find_by_username(self, identity_store, demo_user):
        assert identity_store.find_by_identity("demo") == demo_user

    def test_find_by_email_is_case_insensitive(self, identity_store, demo_user):
        assert identity_store.find_by_identity("Demo@Example.com") == demo_user

    @pytest.mark.parametrize("identity", ["", "   ", None, "nobody", "DEMO"])
    def test_unknown_identity(self, identity_store, identity):
        assert identity_store.find_by_identity(identity) is None

    def test_check_secret(self, identity_store, demo_user):
        assert identity_store.check_secret(demo_user, "password") is True
        assert identity_store.check_secret(demo_user, "passwor") is False
        assert identity_store.check_secret(demo_user, "") is False
        assert identity_store.check_secret(demo_user, None) is False


class TestCredentialGate:
    """Test acceptance and rejection of first-factor submissions."""

    def test_accepts_seeded_credentials(self, gate, demo_user):
        assert gate.check("demo", "password") == demo_user

    def test_accepts_email_as_identity(self, gate, demo_user):
        assert gate.check("demo@example.com", "password") == demo_user

    @pytest.mark.parametrize(
        "identity,secret",
        [
            ("demo", "wrong"),
            ("demo", ""),
            ("demo", "PASSWORD"),
            ("someone-else", "password"),
            ("", "password"),
        ],
    )
    def test_rejects(self, gate, identity, secret):
        with pytest.raises(CredentialRejected) as exc_info:
            gate.check(identity, secret)
        assert exc_info.value.message == "Invalid credentials"

    def test_unknown_identity_indistinguishable_from_wrong_secret(self, gate):
        with pytest.raises(CredentialRejected) as unknown:
            gate.check("ghost", "password")
        with pytest.raises(CredentialRejected) as wrong:
            gate.check("demo", "wrong")

        assert str(unknown.value) == str(wrong.value)
        assert unknown.value.message == wrong.value.message
        assert unknown.value.code == wrong.value.code
        # Only the internal reason differs
        assert unknown.value.reason == "unknown_identity"
        assert wrong.value.reason == "wrong_secret"

    def test_works_with_any_identity_store(self, demo_user):
        class RecordingStore:
            def __init__(self):
                self.lookups = []

            def find_by_identity(self, identity):
                self.lookups.append(identity)
                return demo_user

            def check_secret(self, user, secret):
                return secret == "s3cret"

        store = RecordingStore()
        gate = CredentialGate(store)

        assert gate.check("anyone", "s3cret") == demo_user
        assert store.lookups == ["anyone"]

    def test_unknown_identity_still_compares_a_secret(self, demo_user):
        class CountingStore:
            def __init__(self):
                self.checked = []

            def find_by_identity(self, identity):
                return demo_user if identity == "demo" else None

            def check_secret(self, user, secret):
                self.checked.append(user.id)
                return False

        store = CountingStore()
        gate = CredentialGate(store)

        for identity in ("demo", "ghost"):
            with pytest.raises(CredentialRejected):
                gate.check(identity, "password")

        # Both paths do one comparison; the unknown one against a stand-in user
        assert store.checked == [demo_user.id, ""]
