# tests/frontend/conftest.py
"""
Fixtures compartidas para tests del frontend.

El cliente de la API se inyecta por contexto, así que los tests trabajan con
un mock de ApiClient en lugar de un servidor real.
"""
from typing import Any, Dict
from unittest.mock import AsyncMock, MagicMock

import pytest

from bitacora.web.frontend.api.api_client import ApiClient


@pytest.fixture
def mock_api_client() -> ApiClient:
    """Mock de ApiClient con respuestas de prueba para la grilla y los modales."""
    mock = MagicMock(spec=ApiClient)

    mock.get_formularios = AsyncMock(
        return_value={
            "items": [
                {"id": "2", "cc": "200", "nombres": "Luis", "cantidad": 5.0},
                {"id": "1", "cc": "100", "nombres": "Ana", "cantidad": 12.5},
            ],
            "count": 2,
            "total": 2,
        }
    )
    mock.update_formulario = AsyncMock(return_value={"id": "1", "nombres": "Ana María"})
    mock.buscar_ops = AsyncMock(return_value=["5001", "5002"])
    mock.buscar_sci_por_op = AsyncMock(return_value=["110", "120"])
    mock.ref_por_op_sci = AsyncMock(return_value={"op": "5001", "sci": "110", "descripcion": "Tapa"})
    mock.get_areas = AsyncMock(return_value=["CT-01", "CT-02"])
    mock.get_maquinas = AsyncMock(return_value=["INY-07"])

    return mock


@pytest.fixture
def mock_app_context(mock_api_client: ApiClient) -> Dict[str, Any]:
    return {"api_client": mock_api_client}


@pytest.fixture
def fila_grilla() -> Dict[str, Any]:
    """Fila tal como llega a la grilla desde /graphql."""
    return {
        "id": "42",
        "cc": "1020304050",
        "nombres": "Ana María Pérez",
        "sede": "SEDE PRINCIPAL",
        "no_op": "5001",
        "sci_ref": "110",
        "descripcion_referencia": "Tapa plástica 38mm",
        "fecha_inicio": "2024-03-01",
        "hora_inicio": "06:00",
        "fecha_final": "2024-03-01",
        "hora_final": "14:00",
        "actividad": "Producción",
        "cantidad": 120.5,
        "estado_sci": "en_proceso",
        "area": "CT-01",
        "maquina": "INY-07",
        "horario": "Turno 1",
        "observaciones": "Sin novedad",
    }
