"""
Estado explícito de la grilla: paginación y filtros.

Todas las operaciones son funciones puras que devuelven un GridState nuevo,
así la lógica de paginación se prueba sin navegador.
"""

from dataclasses import dataclass, field, replace
from typing import Any, Dict, Optional

PAGE_SIZES = (25, 50, 100, 200)
DEFAULT_PAGE_SIZE = 50

FILTROS_INICIALES: Dict[str, Optional[str]] = {
    "q": None,
    "id": None,
    "no_op": None,
    "dateFrom": None,
    "dateTo": None,
}


@dataclass(frozen=True)
class GridState:
    page_size: int = DEFAULT_PAGE_SIZE
    offset: int = 0
    total: int = 0
    filters: Dict[str, Optional[str]] = field(default_factory=lambda: dict(FILTROS_INICIALES))


def con_total(state: GridState, total: int) -> GridState:
    """Registra el total del servidor; si el offset quedó fuera de rango vuelve a la última página."""
    total = max(0, int(total or 0))
    offset = state.offset
    if total == 0:
        offset = 0
    elif offset >= total:
        offset = ((total - 1) // state.page_size) * state.page_size
    return replace(state, total=total, offset=offset)


def can_prev(state: GridState) -> bool:
    return state.offset > 0


def can_next(state: GridState) -> bool:
    return state.offset + state.page_size < state.total


def next_page(state: GridState) -> GridState:
    if not can_next(state):
        return state
    return replace(state, offset=state.offset + state.page_size)


def prev_page(state: GridState) -> GridState:
    if not can_prev(state):
        return state
    return replace(state, offset=max(0, state.offset - state.page_size))


def set_page_size(state: GridState, page_size: Any) -> GridState:
    try:
        size = int(page_size)
    except (TypeError, ValueError):
        return state
    size = max(1, min(size, 500))
    return replace(state, page_size=size, offset=0)


def set_filter(state: GridState, nombre: str, valor: Optional[str]) -> GridState:
    """Cambiar un filtro siempre vuelve a la primera página."""
    if nombre not in FILTROS_INICIALES:
        raise KeyError(nombre)
    limpio = valor.strip() if isinstance(valor, str) else valor
    if state.filters.get(nombre) == (limpio or None):
        return state
    return replace(state, filters={**state.filters, nombre: limpio or None}, offset=0)


def clear_filters(state: GridState) -> GridState:
    return replace(state, filters=dict(FILTROS_INICIALES), offset=0)


def query_variables(state: GridState) -> Dict[str, Any]:
    """Variables de la consulta `formularios`; los filtros vacíos no se envían."""
    variables: Dict[str, Any] = {"limit": state.page_size, "offset": state.offset}
    variables.update({k: v for k, v in state.filters.items() if v})
    return variables


def page_info(state: GridState) -> str:
    """Texto 'X–Y de total' del paginador."""
    if state.total <= 0:
        return "0–0 de 0"
    desde = state.offset + 1
    hasta = min(state.offset + state.page_size, state.total)
    return f"{desde}–{hasta} de {state.total}"
