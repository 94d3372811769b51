"""Excepciones compartidas del proyecto."""

from __future__ import annotations


class ValidationError(Exception):
    """Error de validacion de datos de entrada."""


class ServiceError(Exception):
    """Error en la ejecucion de servicios."""


class ApiError(ServiceError):
    """Respuesta HTTP no exitosa de la API remota."""

    def __init__(self, status_code: int, message: str) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.message = message


class UnauthorizedError(ApiError):
    """La API rechazo el token de la sesion (401)."""

    _DEFAULT_MESSAGE = "La sesion expiro. Ingresa nuevamente."

    def __init__(self, message: str | None = None) -> None:
        super().__init__(401, message or self._DEFAULT_MESSAGE)
