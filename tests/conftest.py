from unittest.mock import MagicMock, patch

import pytest

# Esta importación es necesaria para que la fixture de configuración funcione.
from bitacora.common.config_loader import ConfigLoader

MOCK_SETTINGS = {
    "PG_FORMULARIOS_HOST": "test-host",
    "PG_FORMULARIOS_PORT": "5432",
    "PG_FORMULARIOS_USER": "test-user",
    "PG_FORMULARIOS_PASSWORD": "test-password",
    "PG_FORMULARIOS_DB_NAME": "formularios_test",
    "PG_REFERENCIAS_HOST": "test-host-ref",
    "PG_REFERENCIAS_USER": "test-user",
    "PG_REFERENCIAS_PASSWORD": "test-password",
    "PG_REFERENCIAS_DB_NAME": "referencias_test",
    "WEB_PORT": "8123",
}


@pytest.fixture(scope="session", autouse=True)
def setup_and_mock_config():
    """
    Se ejecuta una sola vez por sesión para asegurar que la configuración
    esté 'mockeada' antes de que cualquier prueba se ejecute.
    Esto previene que los tests lean archivos .env reales.
    """
    ConfigLoader.initialize_service("bitacora_test_session")

    def mock_get(key, default=None, warning_msg=None):
        return MOCK_SETTINGS.get(key, default)

    patcher = patch("bitacora.common.config_manager.ConfigManager._get_env_with_warning", side_effect=mock_get)
    patcher.start()
    yield
    patcher.stop()


@pytest.fixture
def mock_db_formularios():
    """Mock del DatabaseConnector de la base principal."""
    connector = MagicMock()
    connector.ejecutar_consulta = MagicMock(return_value=[])
    return connector


@pytest.fixture
def mock_db_referencias():
    """Mock del DatabaseConnector de la base de referencias (OPs/SCI y máquinas)."""
    connector = MagicMock()
    connector.ejecutar_consulta = MagicMock(return_value=[])
    return connector


@pytest.fixture
def fila_formulario():
    """Fila tal como la devuelve RealDictCursor."""
    from datetime import date, time
    from decimal import Decimal

    return {
        "id": 42,
        "cc": "1020304050",
        "nombres": "Ana María Pérez",
        "sede": "Sede Principal",
        "no_op": "5001",
        "sci_ref": "110",
        "descripcion_referencia": "Tapa plástica 38mm",
        "fecha_inicio": date(2024, 3, 1),
        "hora_inicio": time(6, 0),
        "fecha_final": date(2024, 3, 1),
        "hora_final": time(14, 0),
        "actividad": "Producción",
        "cantidad": Decimal("120.5"),
        "estado_sci": "En proceso",
        "area": "CT-01",
        "maquina": "INY-07",
        "horario": "Turno 1",
        "observaciones": "Sin novedad",
    }
