# tests/frontend/test_api_client.py
"""Tests del cliente GraphQL de la grilla con httpx simulado."""

from unittest.mock import AsyncMock

import httpx
import pytest

from bitacora.web.frontend.api.api_client import MUTATION_UPDATE, QUERY_FORMULARIOS, ApiClient, get_api_client
from bitacora.web.frontend.utils.exceptions import APIException


def _respuesta(status_code: int, payload=None, text=None) -> httpx.Response:
    request = httpx.Request("POST", "http://test/graphql")
    if payload is not None:
        return httpx.Response(status_code, json=payload, request=request)
    return httpx.Response(status_code, text=text or "", request=request)


def _cliente_con(respuesta=None, error=None) -> ApiClient:
    api = ApiClient(base_url="http://test", timeout=5)
    http_client = AsyncMock(spec=httpx.AsyncClient)
    http_client.is_closed = False
    if error is not None:
        http_client.post.side_effect = error
    else:
        http_client.post.return_value = respuesta
    api._client = http_client
    return api


@pytest.mark.asyncio
class TestApiClient:
    async def test_get_formularios_envia_las_variables(self):
        api = _cliente_con(
            _respuesta(200, {"data": {"formularios": {"items": [{"id": "1"}], "count": 1, "total": 30}}})
        )

        pagina = await api.get_formularios({"limit": 25, "offset": 0, "q": "ana"})

        assert pagina == {"items": [{"id": "1"}], "count": 1, "total": 30}
        args, kwargs = api._client.post.call_args
        assert args[0] == "/graphql"
        assert kwargs["json"]["query"] == QUERY_FORMULARIOS
        assert kwargs["json"]["variables"] == {"limit": 25, "offset": 0, "q": "ana"}

    async def test_update_formulario_envia_id_como_texto(self):
        api = _cliente_con(_respuesta(200, {"data": {"updateFormulario": {"id": "7", "nombres": "Ana"}}}))

        fila = await api.update_formulario(7, {"nombres": "Ana"})

        assert fila == {"id": "7", "nombres": "Ana"}
        json_enviado = api._client.post.call_args.kwargs["json"]
        assert json_enviado["query"] == MUTATION_UPDATE
        assert json_enviado["variables"] == {"id": "7", "patch": {"nombres": "Ana"}}

    async def test_errores_graphql_se_unen(self):
        api = _cliente_con(
            _respuesta(
                200,
                {
                    "data": None,
                    "errors": [
                        {"message": "Formulario id=9 no encontrado.", "extensions": {"code": "NOT_FOUND"}},
                        {"message": "otro", "extensions": {"code": "BAD_USER_INPUT"}},
                    ],
                },
            )
        )

        with pytest.raises(APIException) as exc_info:
            await api.update_formulario(9, {"nombres": "X"})

        assert exc_info.value.message == "Formulario id=9 no encontrado. | otro"
        assert exc_info.value.codes == ["NOT_FOUND", "BAD_USER_INPUT"]
        assert exc_info.value.status_code is None

    async def test_error_http_con_detalle(self):
        api = _cliente_con(_respuesta(503, {"detail": "Conexión BD formularios no disponible."}))

        with pytest.raises(APIException) as exc_info:
            await api.get_areas()

        assert exc_info.value.status_code == 503
        assert "no disponible" in exc_info.value.message

    async def test_respuesta_no_json(self):
        api = _cliente_con(_respuesta(502, text="Bad Gateway"))

        with pytest.raises(APIException, match="Respuesta inválida"):
            await api.get_areas()

    async def test_error_de_conexion(self):
        api = _cliente_con(error=httpx.ConnectError("Connection refused"))

        with pytest.raises(APIException, match="Error de conexión"):
            await api.buscar_ops("50")

    async def test_referencia_inexistente_es_none(self):
        api = _cliente_con(_respuesta(200, {"data": {"refPorOpSci": None}}))
        assert await api.ref_por_op_sci("5001", "999") is None

    async def test_close_libera_el_cliente(self):
        api = _cliente_con(_respuesta(200, {"data": {}}))
        http_client = api._client

        await api.close()

        http_client.aclose.assert_awaited_once()
        assert api._client is None


class TestSingleton:
    def test_get_api_client_usa_la_configuracion_web(self):
        api = get_api_client()

        assert api is get_api_client()
        assert api.base_url == "http://127.0.0.1:8123"
