# tests/frontend/test_exceptions.py
"""Tests para las excepciones del cliente de la grilla."""

from bitacora.web.frontend.utils.exceptions import APIException, ValidationException


class TestAPIException:
    """Tests para APIException."""

    def test_basic_exception(self):
        exc = APIException("Formulario 9 no encontrado.")

        assert str(exc) == "Formulario 9 no encontrado."
        assert exc.message == "Formulario 9 no encontrado."
        assert exc.status_code is None
        assert exc.codes == []

    def test_exception_with_status_code(self):
        exc = APIException("Conexión BD formularios no disponible.", status_code=503)

        assert exc.status_code == 503
        assert str(exc) == "[API Error 503]: Conexión BD formularios no disponible."

    def test_exception_with_codes(self):
        exc = APIException("a | b", codes=["BAD_USER_INPUT", "NOT_FOUND"])
        assert exc.codes == ["BAD_USER_INPUT", "NOT_FOUND"]

    def test_exception_inheritance(self):
        assert isinstance(APIException("Test"), Exception)


class TestValidationException:
    """Tests para ValidationException."""

    def test_exception_with_errors(self):
        exc = ValidationException("Intervalo inválido", errors={"hora_final": "antes del inicio"})

        assert exc.message == "Intervalo inválido"
        assert exc.errors == {"hora_final": "antes del inicio"}

    def test_exception_without_errors(self):
        assert ValidationException("x").errors == {}
