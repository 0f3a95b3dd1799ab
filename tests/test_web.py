"""Tests para la aplicación FastAPI: /graphql montado junto a la grilla ReactPy."""

import pytest
from fastapi.testclient import TestClient

from bitacora.web.backend.dependencies import db_formularios_provider, db_referencias_provider
from bitacora.web.main import create_app


@pytest.fixture
def client(mock_db_formularios, mock_db_referencias):
    """Cliente de prueba de FastAPI con los dos conectores inyectados, adaptado para Lifespan."""
    app = create_app(db_formularios=mock_db_formularios, db_referencias=mock_db_referencias)
    with TestClient(app) as test_client:
        yield test_client
    db_formularios_provider.set_db_connector(None)
    db_referencias_provider.set_db_connector(None)


class TestGraphQLEndpoint:
    def test_formularios(self, client: TestClient, mock_db_formularios, fila_formulario):
        """Verifica que /graphql resuelve el listado contra la base principal."""
        mock_db_formularios.ejecutar_consulta.side_effect = [[{"total": 1}], [fila_formulario]]

        response = client.post(
            "/graphql",
            json={
                "query": "query($limit: Int) { formularios(limit: $limit) { items { id nombres } total } }",
                "variables": {"limit": 25},
            },
        )

        assert response.status_code == 200
        data = response.json()["data"]["formularios"]
        assert data["total"] == 1
        assert data["items"][0] == {"id": "42", "nombres": "Ana María Pérez"}

    def test_error_con_codigo_en_extensions(self, client: TestClient):
        response = client.post("/graphql", json={"query": "query { formulario { id } }"})

        body = response.json()
        assert body["errors"][0]["extensions"]["code"] == "BAD_USER_INPUT"

    def test_cierre_libera_los_pools(self, mock_db_formularios, mock_db_referencias):
        app = create_app(db_formularios=mock_db_formularios, db_referencias=mock_db_referencias)
        with TestClient(app):
            pass
        mock_db_formularios.cerrar_conexiones_pool.assert_called_once()
        mock_db_referencias.cerrar_conexiones_pool.assert_called_once()
        db_formularios_provider.set_db_connector(None)
        db_referencias_provider.set_db_connector(None)


class TestSinConector:
    def test_graphql_responde_503(self):
        app = create_app(db_formularios=None, db_referencias=None)
        with TestClient(app) as test_client:
            response = test_client.post("/graphql", json={"query": "query { ctpnList }"})

        assert response.status_code == 503
        assert "no disponible" in response.json()["detail"]
