# tests/frontend/test_celdas.py
"""Tests de la máquina de estados de las celdas y de los helpers de edición."""

import pytest

from bitacora.web.frontend.utils.celdas import (
    Celda,
    EstadoCelda,
    TransicionInvalida,
    es_tecla_edicion,
    filtrar_numero,
    limites_picker,
    tipo_editor,
)
from bitacora.web.frontend.utils.input_helpers import texto_celda, valor_para_patch, valor_para_select


class TestCicloDeEdicion:
    def test_guardado_exitoso(self):
        celda = Celda(campo="nombres", valor="Ana").iniciar_edicion()
        assert celda.estado == EstadoCelda.EDITING
        assert celda.borrador == "Ana"

        celda = celda.actualizar_borrador("Ana María").confirmar()
        assert celda.estado == EstadoCelda.SAVING
        # Valor optimista mientras se guarda
        assert celda.valor == "Ana María"
        assert celda.anterior == "Ana"

        celda = celda.guardado("Ana María")
        assert celda.estado == EstadoCelda.SAVED
        assert celda.reposar().estado == EstadoCelda.DISPLAY

    def test_fallo_revierte_al_valor_anterior(self):
        celda = Celda(campo="nombres", valor="Ana").iniciar_edicion().actualizar_borrador("Luis").confirmar()

        celda = celda.fallido("Base de datos no disponible.")

        assert celda.estado == EstadoCelda.ERROR
        assert celda.valor == "Ana"
        assert celda.mensaje == "Base de datos no disponible."
        assert celda.reposar().mensaje is None

    def test_confirmar_sin_cambios_no_guarda(self):
        celda = Celda(campo="nombres", valor="Ana").iniciar_edicion().actualizar_borrador(" Ana ")

        assert celda.hay_cambios is False
        assert celda.confirmar().estado == EstadoCelda.DISPLAY

    def test_cero_es_un_cambio_real(self):
        celda = Celda(campo="cantidad", valor=None).iniciar_edicion().actualizar_borrador(0)
        assert celda.hay_cambios is True

    def test_cancelar_descarta_el_borrador(self):
        celda = Celda(campo="nombres", valor="Ana").iniciar_edicion().actualizar_borrador("X").cancelar()

        assert celda.estado == EstadoCelda.DISPLAY
        assert celda.valor == "Ana"
        assert celda.borrador is None

    def test_marcar_invalida_sigue_en_edicion(self):
        celda = Celda(campo="hora_final", valor="14:00").iniciar_edicion().marcar_invalida("antes del inicio")

        assert celda.estado == EstadoCelda.EDITING
        assert celda.mensaje == "antes del inicio"

    def test_transicion_no_permitida(self):
        with pytest.raises(TransicionInvalida):
            Celda(campo="nombres", valor="Ana").guardado("x")

    def test_reposar_en_display_no_cambia(self):
        celda = Celda(campo="nombres")
        assert celda.reposar() is celda


class TestTipoEditor:
    @pytest.mark.parametrize(
        "campo,esperado",
        [
            ("id", "solo_lectura"),
            ("descripcion_referencia", "solo_lectura"),
            ("no_op", "op_sci"),
            ("maquina", "area_maquina"),
            ("sede", "select"),
            ("observaciones", "select"),
            ("cantidad", "numero"),
            ("fecha_final", "fecha"),
            ("hora_inicio", "hora"),
            ("nombres", "texto"),
        ],
    )
    def test_tipo_por_columna(self, campo, esperado):
        assert tipo_editor(campo) == esperado

    def test_teclas_de_edicion(self):
        assert es_tecla_edicion("F2")
        assert es_tecla_edicion("Enter")
        assert not es_tecla_edicion("a")


class TestFiltrarNumero:
    def test_descarta_letras_y_signo(self):
        assert filtrar_numero("-12abc3") == "123"

    def test_un_solo_separador_y_coma_a_punto(self):
        assert filtrar_numero("12,5.7") == "12.57"

    def test_pegado_vacio(self):
        assert filtrar_numero(None) == ""


class TestLimitesPicker:
    def test_fecha_inicio_acotada_por_fecha_final(self, fila_grilla):
        assert limites_picker("fecha_inicio", fila_grilla) == {"max": "2024-03-01"}

    def test_horas_del_mismo_dia(self, fila_grilla):
        assert limites_picker("hora_final", fila_grilla) == {"min": "06:00"}
        assert limites_picker("hora_inicio", fila_grilla) == {"max": "14:00"}

    def test_horas_en_dias_distintos_no_se_acotan(self, fila_grilla):
        fila = {**fila_grilla, "fecha_final": "2024-03-02"}
        assert limites_picker("hora_final", fila) == {}


class TestInputHelpers:
    def test_select_con_variante_de_escritura(self, fila_grilla):
        assert valor_para_select(fila_grilla["estado_sci"], ("Pendiente", "En proceso")) == "En proceso"

    def test_select_con_valor_desconocido(self):
        assert valor_para_select("Otro turno", ("Turno 1",)) == ""

    def test_texto_celda(self):
        assert texto_celda(None) == ""
        assert texto_celda(120.5) == "120.5"
        assert texto_celda(120.0) == "120"

    def test_valor_para_patch(self):
        assert valor_para_patch("cantidad", "12.5") == 12.5
        assert valor_para_patch("nombres", "  Ana ") == "Ana"
        assert valor_para_patch("nombres", "   ") is None
