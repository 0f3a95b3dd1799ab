# tests/frontend/test_grid_state.py
"""Tests de la paginación y los filtros de la grilla (funciones puras sobre GridState)."""

import pytest

from bitacora.web.frontend.state import grid_state as gs


class TestPaginacion:
    def test_estado_inicial(self):
        state = gs.GridState()

        assert state.page_size == gs.DEFAULT_PAGE_SIZE
        assert gs.query_variables(state) == {"limit": 50, "offset": 0}
        assert gs.page_info(state) == "0–0 de 0"
        assert not gs.can_prev(state)
        assert not gs.can_next(state)

    def test_avanzar_y_retroceder(self):
        state = gs.con_total(gs.GridState(page_size=25), 60)

        state = gs.next_page(state)
        assert state.offset == 25
        assert gs.page_info(state) == "26–50 de 60"

        state = gs.next_page(state)
        assert state.offset == 50
        assert gs.page_info(state) == "51–60 de 60"
        assert not gs.can_next(state)
        assert gs.next_page(state) is state

        assert gs.prev_page(state).offset == 25

    def test_primera_pagina_no_retrocede(self):
        state = gs.con_total(gs.GridState(), 10)
        assert gs.prev_page(state) is state

    def test_total_menor_lleva_a_la_ultima_pagina(self):
        state = gs.GridState(page_size=25, offset=100, total=120)

        state = gs.con_total(state, 60)

        assert state.offset == 50

    def test_total_cero_vuelve_al_inicio(self):
        assert gs.con_total(gs.GridState(offset=50, total=80), 0).offset == 0

    def test_cambiar_tamano_de_pagina(self):
        state = gs.GridState(page_size=25, offset=75, total=200)

        state = gs.set_page_size(state, "100")

        assert state.page_size == 100
        assert state.offset == 0

    def test_tamano_invalido_se_ignora(self):
        state = gs.GridState()
        assert gs.set_page_size(state, "muchos") is state
        assert gs.set_page_size(state, 10_000).page_size == 500


class TestFiltros:
    def test_filtro_vuelve_a_la_primera_pagina(self):
        state = gs.GridState(offset=100, total=300)

        state = gs.set_filter(state, "q", "  ana ")

        assert state.offset == 0
        assert gs.query_variables(state) == {"limit": 50, "offset": 0, "q": "ana"}

    def test_mismo_valor_no_cambia_el_estado(self):
        state = gs.set_filter(gs.GridState(), "no_op", "5001")
        assert gs.set_filter(state, "no_op", "5001 ") is state

    def test_filtro_vacio_no_se_envia(self):
        state = gs.set_filter(gs.GridState(), "dateFrom", "2024-03-01")
        state = gs.set_filter(state, "dateFrom", "")

        assert "dateFrom" not in gs.query_variables(state)

    def test_filtro_desconocido(self):
        with pytest.raises(KeyError):
            gs.set_filter(gs.GridState(), "sede", "Norte")

    def test_limpiar_filtros(self):
        state = gs.set_filter(gs.GridState(), "id", "12")
        state = gs.set_filter(state, "dateTo", "2024-03-31")

        state = gs.clear_filters(state)

        assert state.filters == gs.FILTROS_INICIALES
        assert gs.query_variables(state) == {"limit": 50, "offset": 0}
