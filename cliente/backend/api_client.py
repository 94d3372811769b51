"""Cliente HTTP de la API remota basado en requests."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

import requests

from parametros import API_URL
from shared.errors import ApiError, ServiceError, UnauthorizedError

from .session_store import AuthSessionStore

LOGGER = logging.getLogger(__name__)


class ApiClient:
    """Agrega el token Bearer a cada peticion y traduce errores HTTP.

    Una respuesta 401 cierra la sesion local e invoca ``on_unauthorized``
    (la app redirige al login) antes de propagar ``UnauthorizedError``.
    """

    def __init__(
        self,
        session_store: AuthSessionStore,
        base_url: str = API_URL,
        on_unauthorized: Callable[[], None] | None = None,
        http_session: requests.Session | None = None,
    ) -> None:
        self._session_store = session_store
        self._base_url = base_url.rstrip("/")
        self._on_unauthorized = on_unauthorized
        self._http = http_session or requests.Session()
        self._http.headers.update({"Accept": "application/json"})

    def set_unauthorized_handler(self, handler: Callable[[], None] | None) -> None:
        self._on_unauthorized = handler

    def get(self, path: str, params: dict[str, Any] | None = None) -> Any:
        return self.request("GET", path, params=params)

    def post(
        self,
        path: str,
        json: Any = None,
        files: list[tuple[str, tuple[Any, ...]]] | None = None,
    ) -> Any:
        return self.request("POST", path, json=json, files=files)

    def delete(self, path: str) -> Any:
        return self.request("DELETE", path)

    def request(self, method: str, path: str, **kwargs: Any) -> Any:
        """Ejecuta la peticion y retorna el JSON decodificado (o None)."""
        url = f"{self._base_url}/{path.lstrip('/')}"
        headers: dict[str, str] = {}
        token = self._session_store.token
        if token:
            headers["Authorization"] = f"Bearer {token}"

        kwargs = {key: value for key, value in kwargs.items() if value is not None}
        try:
            response = self._http.request(method, url, headers=headers, **kwargs)
        except requests.RequestException as exc:
            LOGGER.warning("Fallo de red en %s %s: %s", method, url, exc)
            raise ServiceError("No fue posible conectar con el servidor.") from exc

        if response.status_code == 401:
            LOGGER.warning("API respondio 401 en %s %s; cerrando sesion.", method, url)
            self._session_store.logout()
            # Sin token (ej. login fallido) no hay sesion que expirar.
            if token and self._on_unauthorized is not None:
                self._on_unauthorized()
            raise UnauthorizedError(self._extract_message(response) if not token else None)

        if not response.ok:
            message = self._extract_message(response)
            LOGGER.warning(
                "API respondio %s en %s %s: %s",
                response.status_code,
                method,
                url,
                message,
            )
            raise ApiError(response.status_code, message)

        if response.status_code == 204 or not response.content:
            return None

        try:
            return response.json()
        except ValueError as exc:
            LOGGER.exception("Respuesta no JSON en %s %s", method, url)
            raise ServiceError("El servidor devolvio una respuesta invalida.") from exc

    @staticmethod
    def _extract_message(response: requests.Response) -> str:
        try:
            body = response.json()
        except ValueError:
            body = None

        if isinstance(body, dict) and body.get("message"):
            return str(body["message"])
        return f"Error del servidor ({response.status_code})."
