import re

import pytest
from zope.interface.verify import verifyObject

from shopinstall.interfaces import IStateTokenManager
from shopinstall.state import StateTokenManager


@pytest.fixture
def manager():
    return StateTokenManager()


def test_implements_interface(manager):
    assert verifyObject(IStateTokenManager, manager)


def test_issue_returns_hex_nonce_and_cookie(manager):
    nonce, cookie = manager.issue()
    assert re.fullmatch(r"[0-9a-f]{32}", nonce)
    assert cookie.name == "shopinstall_state"
    assert cookie.value == nonce
    assert cookie.httponly is True
    assert cookie.samesite == "lax"
    assert cookie.secure is True
    assert cookie.max_age == 300


def test_issue_is_random(manager):
    nonces = {manager.issue()[0] for _ in range(20)}
    assert len(nonces) == 20


def test_cookie_settings_come_from_manager():
    manager = StateTokenManager(cookie_name="oauth", max_age=60, secure=False)
    _, cookie = manager.issue()
    assert (cookie.name, cookie.max_age, cookie.secure) == ("oauth", 60, False)


def test_validate_same_nonce(manager):
    nonce, _ = manager.issue()
    assert manager.validate(nonce, nonce) is True
    assert manager.validate("x", "x") is True


@pytest.mark.parametrize(
    "supplied,cookie",
    [
        ("abc", "abd"),
        ("abc", "abc "),
        ("abc", "ABC"),
        ("abc", None),
        (None, "abc"),
        (None, None),
        ("", ""),
        ("abc", ""),
        ("abc", 123),
    ],
)
def test_validate_rejects(manager, supplied, cookie):
    assert manager.validate(supplied, cookie) is False


def test_clear_expires_cookie(manager):
    cookie = manager.clear()
    assert cookie.name == "shopinstall_state"
    assert cookie.value == ""
    assert cookie.max_age == 0


def test_cleared_cookie_cannot_validate_old_nonce(manager):
    nonce, _ = manager.issue()
    assert manager.validate(nonce, manager.clear().value) is False
