"""Tests for the authentication manager."""

import pytest

from auth import DEMO_EMAIL, DEMO_PASSWORD, AuthManager, clean_username, hash_password
from errors import AuthError


def test_initialize_creates_demo_user_once(store):
    auth = AuthManager(store)
    auth.initialize()
    auth.initialize()
    assert store.count_users() == 1
    assert auth.is_initialized
    assert auth.demo_user_id() is not None


def test_requires_initialize(store):
    auth = AuthManager(store)
    with pytest.raises(AuthError, match="not initialized"):
        auth.login(DEMO_EMAIL, DEMO_PASSWORD)


def test_initialize_failure_raises_auth_error(store):
    store.close()
    with pytest.raises(AuthError, match="unavailable"):
        AuthManager(store).initialize()


def test_guest_by_default(auth):
    assert auth.current_user is None
    assert not auth.is_authenticated


def test_login_and_logout(auth):
    user = auth.login(DEMO_EMAIL, DEMO_PASSWORD)
    assert user.username == "admin"
    assert auth.current_user == user
    assert auth.is_authenticated

    auth.logout()
    assert auth.current_user is None


def test_login_wrong_password(auth):
    with pytest.raises(AuthError, match="Invalid email or password"):
        auth.login(DEMO_EMAIL, "nope")
    assert auth.current_user is None


def test_register_normalizes_username(auth):
    user = auth.register("grace@example.com", "Grace H.", "hopper1", "hopper1")
    assert user.username == "graceh"
    assert user.name == "graceh"


@pytest.mark.parametrize("args, message", [
    (("", "u", "secret1", "secret1"), "All fields are required"),
    (("a@b.co", "u", "secret1", "secret2"), "Passwords do not match"),
    (("a@b.co", "u", "short", "short"), "at least 6"),
    (("not-an-email", "u", "secret1", "secret1"), "valid email"),
    (("a@b.co", "!!!", "secret1", "secret1"), "alphanumeric"),
])
def test_register_validation(auth, args, message):
    with pytest.raises(AuthError, match=message):
        auth.register(*args)


def test_register_duplicate(auth):
    auth.register("x@example.com", "x", "secret1", "secret1")
    with pytest.raises(AuthError, match="already exists"):
        auth.register("x@example.com", "y", "secret1", "secret1")


def test_helpers():
    assert clean_username("Foo_Bar-9!") == "foo_bar-9"
    assert hash_password("a") == hash_password("a")
    assert hash_password("a") != hash_password("b")
