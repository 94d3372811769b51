"""Sesion de autenticacion persistida en disco."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from parametros import AUTH_STORAGE_FILE
from shared.protocol import User

LOGGER = logging.getLogger(__name__)


class AuthSessionStore:
    """Mantiene usuario y token, y los persiste bajo una clave fija."""

    _STORAGE_VERSION = 0

    def __init__(self, storage_path: Path = AUTH_STORAGE_FILE) -> None:
        self._storage_path = storage_path
        self._user: User | None = None
        self._token: str | None = None
        self._is_authenticated = False
        self._load()

    @property
    def user(self) -> User | None:
        return self._user

    @property
    def token(self) -> str | None:
        return self._token

    @property
    def is_authenticated(self) -> bool:
        return self._is_authenticated

    def set_auth(self, user: User, token: str) -> None:
        """Guarda la sesion autenticada y la persiste."""
        self._user = user
        self._token = token
        self._is_authenticated = True
        self._persist()
        LOGGER.info("Sesion iniciada: user_id=%s, role=%s", user.id, user.role)

    def logout(self) -> None:
        """Limpia la sesion en memoria y elimina el archivo persistido."""
        was_authenticated = self._is_authenticated
        self._user = None
        self._token = None
        self._is_authenticated = False
        self._storage_path.unlink(missing_ok=True)
        if was_authenticated:
            LOGGER.info("Sesion cerrada.")

    def _load(self) -> None:
        """Restaura la sesion persistida; un archivo invalido se ignora."""
        if not self._storage_path.exists():
            return

        try:
            data = json.loads(self._storage_path.read_text(encoding="utf-8"))
            state: dict[str, Any] = data["state"]
            token = state.get("token")
            raw_user = state.get("user")
            user = User.from_api(raw_user) if raw_user else None
        except (OSError, ValueError, KeyError, TypeError, AttributeError):
            LOGGER.warning("Sesion persistida invalida, se ignora: %s", self._storage_path)
            return

        if not token or user is None:
            return

        self._user = user
        self._token = str(token)
        self._is_authenticated = bool(state.get("isAuthenticated", True))
        LOGGER.info("Sesion restaurada desde: %s", self._storage_path)

    def _persist(self) -> None:
        data = {
            "state": {
                "user": self._user.to_dict() if self._user else None,
                "token": self._token,
                "isAuthenticated": self._is_authenticated,
            },
            "version": self._STORAGE_VERSION,
        }
        self._storage_path.parent.mkdir(parents=True, exist_ok=True)
        self._storage_path.write_text(
            json.dumps(data, ensure_ascii=False, indent=2) + "\n",
            encoding="utf-8",
        )
