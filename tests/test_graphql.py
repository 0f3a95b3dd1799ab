"""Tests del esquema GraphQL ejecutado directamente con `schema.execute`."""

from contextlib import contextmanager
from unittest.mock import MagicMock

import psycopg2
import pytest

from bitacora.web.backend.api import schema


def _db_con_cursor(cursor):
    db = MagicMock()

    @contextmanager
    def obtener_cursor():
        yield cursor

    db.obtener_cursor.side_effect = obtener_cursor
    return db


def _codigo(resultado) -> str:
    assert resultado.errors, "se esperaba un error GraphQL"
    return resultado.errors[0].extensions["code"]


class TestEsquema:
    def test_nombres_de_operaciones_y_argumentos(self):
        sdl = schema.as_str()
        for nombre in (
            "formularios(",
            "buscarOpsExcel(",
            "buscarSciPorOp(",
            "refPorOpSci(",
            "ctpnList",
            "maquinasPorCtpn(",
            "updateFormulario(",
            "updateMultiplesFormularios(",
        ):
            assert nombre in sdl
        assert "dateFrom: String" in sdl
        assert "fecha_inicio: Date" in sdl
        assert "scalar Date" in sdl


@pytest.mark.asyncio
class TestQueries:
    async def test_formularios_serializa_fechas_horas_y_cantidad(
        self, mock_db_formularios, mock_db_referencias, fila_formulario
    ):
        mock_db_formularios.ejecutar_consulta.side_effect = [[{"total": 1}], [fila_formulario]]
        query = """
            query {
              formularios(limit: 10, dateFrom: "2024-03-01", id: "4") {
                items { id fecha_inicio hora_inicio hora_final cantidad actividad }
                count
                total
              }
            }
        """
        resultado = await schema.execute(
            query, context_value={"db_formularios": mock_db_formularios, "db_referencias": mock_db_referencias}
        )

        assert resultado.errors is None
        data = resultado.data["formularios"]
        assert data["total"] == 1
        assert data["count"] == 1
        assert data["items"][0] == {
            "id": "42",
            "fecha_inicio": "2024-03-01",
            "hora_inicio": "06:00",
            "hora_final": "14:00",
            "cantidad": 120.5,
            "actividad": "Producción",
        }

    async def test_fecha_de_filtro_invalida_es_bad_user_input(self, mock_db_formularios, mock_db_referencias):
        query = 'query { formularios(dateTo: "31/03/2024") { total } }'
        resultado = await schema.execute(
            query, context_value={"db_formularios": mock_db_formularios, "db_referencias": mock_db_referencias}
        )
        assert _codigo(resultado) == "BAD_USER_INPUT"
        mock_db_formularios.ejecutar_consulta.assert_not_called()

    async def test_base_no_disponible(self, mock_db_formularios, mock_db_referencias):
        mock_db_formularios.ejecutar_consulta.side_effect = psycopg2.OperationalError("could not connect")
        resultado = await schema.execute(
            "query { formularios { total } }",
            context_value={"db_formularios": mock_db_formularios, "db_referencias": mock_db_referencias},
        )
        assert _codigo(resultado) == "DB_UNAVAILABLE"
        assert "could not connect" not in resultado.errors[0].message
        mock_db_formularios.ejecutar_consulta.assert_called_once()

    async def test_error_inesperado(self, mock_db_formularios, mock_db_referencias):
        mock_db_formularios.ejecutar_consulta.side_effect = KeyError("total")
        resultado = await schema.execute(
            "query { formularios { total } }",
            context_value={"db_formularios": mock_db_formularios, "db_referencias": mock_db_referencias},
        )
        assert _codigo(resultado) == "INTERNAL_SERVER_ERROR"

    async def test_formulario_inexistente_es_null(self, mock_db_formularios, mock_db_referencias):
        resultado = await schema.execute(
            'query { formulario(id: "999") { id } }',
            context_value={"db_formularios": mock_db_formularios, "db_referencias": mock_db_referencias},
        )
        assert resultado.errors is None
        assert resultado.data == {"formulario": None}

    async def test_sugerencias_usan_la_base_de_referencias(self, mock_db_formularios, mock_db_referencias):
        mock_db_referencias.ejecutar_consulta.return_value = [{"op": "5001"}]
        resultado = await schema.execute(
            'query { buscarOpsExcel(prefix: "50", limit: 5) }',
            context_value={"db_formularios": mock_db_formularios, "db_referencias": mock_db_referencias},
        )
        assert resultado.data == {"buscarOpsExcel": ["5001"]}
        mock_db_formularios.ejecutar_consulta.assert_not_called()

    async def test_ref_por_op_sci(self, mock_db_formularios, mock_db_referencias):
        mock_db_referencias.ejecutar_consulta.return_value = [
            {"op": "5001", "sci": "110", "descripcion": "Tapa plástica 38mm"}
        ]
        resultado = await schema.execute(
            'query { refPorOpSci(op: "5001", sci: "110") { op sci descripcion } }',
            context_value={"db_formularios": mock_db_formularios, "db_referencias": mock_db_referencias},
        )
        assert resultado.data["refPorOpSci"]["descripcion"] == "Tapa plástica 38mm"

    async def test_areas_y_maquinas(self, mock_db_formularios, mock_db_referencias):
        mock_db_referencias.ejecutar_consulta.side_effect = [[{"ct_pn": "CT-01"}], [{"maquina": "INY-07"}]]
        contexto = {"db_formularios": mock_db_formularios, "db_referencias": mock_db_referencias}

        areas = await schema.execute("query { ctpnList }", context_value=contexto)
        maquinas = await schema.execute('query { maquinasPorCtpn(ctpn: "CT-01") }', context_value=contexto)

        assert areas.data == {"ctpnList": ["CT-01"]}
        assert maquinas.data == {"maquinasPorCtpn": ["INY-07"]}


@pytest.mark.asyncio
class TestMutations:
    async def test_update_formulario(self, mock_db_referencias, fila_formulario):
        cursor = MagicMock()
        cursor.fetchone.side_effect = [fila_formulario, {**fila_formulario, "observaciones": "Otro"}]
        db = _db_con_cursor(cursor)

        resultado = await schema.execute(
            """
            mutation Update($id: ID!, $patch: FormularioPatch!) {
              updateFormulario(id: $id, patch: $patch) { id observaciones }
            }
            """,
            variable_values={"id": "42", "patch": {"observaciones": "Otro"}},
            context_value={"db_formularios": db, "db_referencias": mock_db_referencias},
        )

        assert resultado.errors is None
        assert resultado.data["updateFormulario"] == {"id": "42", "observaciones": "Otro"}

    async def test_update_formulario_inexistente(self, mock_db_referencias):
        cursor = MagicMock()
        cursor.fetchone.return_value = None
        db = _db_con_cursor(cursor)

        resultado = await schema.execute(
            'mutation { updateFormulario(id: "999", patch: {nombres: "Ana"}) { id } }',
            context_value={"db_formularios": db, "db_referencias": mock_db_referencias},
        )
        assert _codigo(resultado) == "NOT_FOUND"

    async def test_update_intervalo_invalido(self, mock_db_referencias, fila_formulario):
        cursor = MagicMock()
        cursor.fetchone.return_value = fila_formulario
        db = _db_con_cursor(cursor)

        resultado = await schema.execute(
            'mutation { updateFormulario(id: "42", patch: {hora_final: "05:00"}) { id } }',
            context_value={"db_formularios": db, "db_referencias": mock_db_referencias},
        )
        assert _codigo(resultado) == "BAD_USER_INPUT"

    async def test_dato_rechazado_por_la_base(self, mock_db_referencias, fila_formulario):
        cursor = MagicMock()
        cursor.fetchone.return_value = fila_formulario
        cursor.execute.side_effect = [None, psycopg2.DataError("numeric field overflow")]
        db = _db_con_cursor(cursor)

        resultado = await schema.execute(
            'mutation { updateFormulario(id: "42", patch: {cantidad: 1e20}) { id } }',
            context_value={"db_formularios": db, "db_referencias": mock_db_referencias},
        )
        assert _codigo(resultado) == "BAD_USER_INPUT"

    async def test_update_multiples(self, mock_db_referencias, fila_formulario):
        cursor = MagicMock()
        cursor.fetchone.return_value = fila_formulario
        db = _db_con_cursor(cursor)

        resultado = await schema.execute(
            """
            mutation {
              updateMultiplesFormularios(updates: [
                {id: "42", patch: {nombres: "Ana"}},
                {id: "43", patch: {horario: "turno_3"}}
              ])
            }
            """,
            context_value={"db_formularios": db, "db_referencias": mock_db_referencias},
        )
        assert resultado.errors is None
        assert resultado.data == {"updateMultiplesFormularios": True}
