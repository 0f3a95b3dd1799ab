from typing import Callable, Dict, Optional

from reactpy import component, html


@component
def FormulariosControls(
    search: str,
    on_search: Callable,
    id_filter: str,
    on_id_filter: Callable,
    op_filter: str,
    on_op_filter: Callable,
    filters: Dict[str, Optional[str]],
    on_date_change: Callable,
    on_clear: Callable,
    is_searching: bool,
):
    """Búsqueda por nombre/cc, filtros por id y O.P., y rango de fechas."""
    return html.div(
        {"class_name": "dashboard-controls"},
        html.div(
            {"class_name": "controls-header"},
            html.h2("Formularios"),
        ),
        html.div(
            {"class_name": "master-controls-grid"},
            html.input(
                {
                    "type": "search",
                    "name": "buscar-formulario",
                    "placeholder": "Buscar por nombre o cc...",
                    "value": search,
                    "on_change": lambda e: on_search(e["target"]["value"]),
                    "aria-busy": str(is_searching).lower(),
                }
            ),
            html.input(
                {
                    "type": "search",
                    "name": "filtro-id",
                    "placeholder": "ID",
                    "value": id_filter,
                    "on_change": lambda e: on_id_filter(e["target"]["value"]),
                }
            ),
            html.input(
                {
                    "type": "search",
                    "name": "filtro-op",
                    "placeholder": "O.P.",
                    "value": op_filter,
                    "on_change": lambda e: on_op_filter(e["target"]["value"]),
                }
            ),
            html.label(
                "Desde",
                html.input(
                    {
                        "type": "date",
                        "name": "filtro-desde",
                        "value": filters.get("dateFrom") or "",
                        "on_change": lambda e: on_date_change("dateFrom", e["target"]["value"]),
                    }
                ),
            ),
            html.label(
                "Hasta",
                html.input(
                    {
                        "type": "date",
                        "name": "filtro-hasta",
                        "value": filters.get("dateTo") or "",
                        "on_change": lambda e: on_date_change("dateTo", e["target"]["value"]),
                    }
                ),
            ),
            html.button(
                {"type": "button", "class_name": "secondary outline", "on_click": lambda e: on_clear()},
                "Limpiar",
            ),
        ),
    )
