import logging
import secrets
import time
from typing import Dict, Optional

import bcrypt
from fastapi import HTTPException, Request
from starlette.status import HTTP_401_UNAUTHORIZED

logger = logging.getLogger("app")

TOKEN_TTL = 3600  # seconds


def _normalize_hash(raw: str) -> bytes:
    # PHP-Hashes ($2y$) sind zu $2b$ kompatibel
    if raw.startswith("$2y$"):
        raw = "$2b$" + raw[4:]
    return raw.encode("utf-8")


class AdminGuard:
    """Optionaler Admin-Schutz für die API.

    Ohne ADMIN_PASSWORD_HASH ist der Schutz deaktiviert und jede Anfrage
    wird durchgelassen.
    """

    def __init__(self, password_hash: Optional[str] = None, token_ttl: int = TOKEN_TTL):
        self._hash = _normalize_hash(password_hash) if password_hash else None
        self.token_ttl = token_ttl
        # token -> expiry timestamp
        self._tokens: Dict[str, float] = {}

    @property
    def enabled(self) -> bool:
        return self._hash is not None

    def verify_password(self, password: str) -> bool:
        if not self._hash or not password:
            return False
        try:
            return bool(bcrypt.checkpw(password.encode("utf-8"), self._hash))
        except ValueError:
            logger.error("ADMIN_PASSWORD_HASH ist kein gültiger bcrypt-Hash")
            return False

    def issue_token(self) -> str:
        token = secrets.token_urlsafe(32)
        self._tokens[token] = time.time() + self.token_ttl
        return token

    def _cleanup_expired_tokens(self) -> None:
        now = time.time()
        for token, expiry in list(self._tokens.items()):
            if expiry < now:
                self._tokens.pop(token, None)

    def is_token_active(self, token: Optional[str]) -> bool:
        self._cleanup_expired_tokens()
        return bool(token) and token in self._tokens


def _bearer_token(request: Request) -> Optional[str]:
    header = request.headers.get("authorization") or ""
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer":
        return None
    return token.strip() or None


def require_admin(request: Request) -> None:
    """Dependency: verlangt ein gültiges Bearer-Token, sofern der Schutz aktiv ist."""
    guard: AdminGuard = request.app.state.admin_guard
    if not guard.enabled:
        return
    if not guard.is_token_active(_bearer_token(request)):
        raise HTTPException(status_code=HTTP_401_UNAUTHORIZED, detail="Token de acesso requerido")
