import uuid

import pytest

from ParkLedger.api.session_manager import Principal, TokenStore, load_tokens


def test_put_get_invalidate_roundtrip():
    store = TokenStore()
    token = str(uuid.uuid4())
    user = Principal("alice", role="ADMIN")

    store.put(token, user)
    assert store.get(token) is user

    removed = store.invalidate(token)
    assert removed is user
    assert store.get(token) is None


def test_invalidate_unknown_token_returns_none():
    store = TokenStore()
    token = str(uuid.uuid4())
    assert store.get(token) is None
    assert store.invalidate(token) is None


def test_default_role_is_user():
    assert Principal("bob").role == "USER"


def test_load_tokens_from_config_string():
    store = load_tokens("t1=admin:admin, t2=alice")
    assert store.get("t1").username == "admin"
    assert store.get("t1").role == "ADMIN"
    assert store.get("t2").role == "USER"
    assert load_tokens("").get("t1") is None


def test_load_tokens_rejects_garbage():
    with pytest.raises(ValueError):
        load_tokens("no-username-here")
