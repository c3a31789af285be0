# ParkLedger/api/session_manager.py

import threading
from typing import Dict, Optional


class Principal:

    def __init__(self, username: str, role: str = "USER"):
        self.username = username
        self.role = role


    def __repr__(self):
        return self.username


class TokenStore:
    """
    Token -> Principal map for tokens issued by the identity provider.
    The engine only reads it; issuing tokens happens outside.
    """

    def __init__(self):
        self._tokens: Dict[str, Principal] = {}
        self._lock = threading.Lock()


    def put(self, token: str, principal: Principal) -> None:
        with self._lock:
            self._tokens[token] = principal


    def get(self, token: str) -> Optional[Principal]:
        with self._lock:
            return self._tokens.get(token)


    def invalidate(self, token: str) -> Optional[Principal]:
        """
        Remove a token and return the Principal that was stored, if any.
        """
        with self._lock:
            return self._tokens.pop(token, None)


def load_tokens(raw: str, store: Optional[TokenStore] = None) -> TokenStore:
    """Fill a TokenStore from ``token=username:ROLE`` pairs separated by commas.

    The role part is optional and defaults to USER.
    """
    store = store or TokenStore()
    for entry in (raw or "").split(","):
        entry = entry.strip()
        if not entry:
            continue
        token, _, who = entry.partition("=")
        username, _, role = who.partition(":")
        if not token or not username:
            raise ValueError(f"Malformed token entry: {entry!r}")
        store.put(token.strip(), Principal(username.strip(), role=(role.strip() or "USER").upper()))
    return store
