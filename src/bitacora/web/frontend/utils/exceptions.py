from typing import Dict, List, Optional


class APIException(Exception):
    """Error devuelto por /graphql: fallo HTTP, de red o errores GraphQL en la respuesta."""

    def __init__(self, message: str, status_code: Optional[int] = None, codes: Optional[List[str]] = None):
        self.message = message
        self.status_code = status_code
        self.codes = codes or []
        super().__init__(message)

    def __str__(self):
        if self.status_code:
            return f"[API Error {self.status_code}]: {self.message}"
        return self.message


class ValidationException(Exception):
    """Edición rechazada en el cliente antes de enviar la mutación."""

    def __init__(self, message: str, errors: Optional[Dict[str, str]] = None):
        self.message = message
        self.errors = errors or {}
        super().__init__(message)
