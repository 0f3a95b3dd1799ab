"""
Hook de datos de la grilla de formularios.

Mantiene el GridState, carga la página actual y aplica en sitio las filas que
devuelve cada guardado. Sólo la última consulta de listado se aplica: al emitir
una nueva, la tarea anterior se cancela.
"""

import asyncio
import json
from typing import Any, Dict, Optional

from reactpy import use_callback, use_context, use_effect, use_ref, use_state

from ..api.api_client import ApiClient, get_api_client
from ..shared.notifications import NotificationContext
from ..state import grid_state as gs
from ..state.app_context import use_app_context
from ..utils.exceptions import ValidationException
from ..utils.validation import validar_par

PARES_VINCULADOS = (("no_op", "sci_ref"), ("area", "maquina"))


def use_formularios(api_client: Optional[ApiClient] = None) -> Dict[str, Any]:
    app_context = use_app_context()
    notification_ctx = use_context(NotificationContext) or {}
    show_notification = notification_ctx.get("show_notification", lambda *a, **k: None)

    if api_client is None:
        api_client = app_context.get("api_client") or get_api_client()

    grid, set_grid = use_state(gs.GridState())
    items, set_items = use_state([])
    loading, set_loading = use_state(True)
    error, set_error = use_state(None)
    reload_token, set_reload_token = use_state(0)

    list_task = use_ref(None)
    is_mounted = use_ref(True)

    @use_effect(dependencies=[])
    def mount_lifecycle():
        is_mounted.current = True
        return lambda: setattr(is_mounted, "current", False)

    variables = gs.query_variables(grid)
    variables_key = json.dumps(variables, sort_keys=True)

    @use_effect(dependencies=[variables_key, reload_token])
    def load_page():
        previa = list_task.current
        if previa is not None and not previa.done():
            previa.cancel()

        async def fetch():
            set_loading(True)
            set_error(None)
            try:
                data = await api_client.get_formularios(variables)
            except asyncio.CancelledError:
                # Consulta reemplazada por una más nueva: no es un error
                raise
            except Exception as e:
                if is_mounted.current:
                    set_error(str(e))
                    set_loading(False)
                    show_notification(f"Error al cargar formularios: {e}", "error")
                return
            if is_mounted.current:
                set_items(data["items"])
                set_grid(lambda actual: gs.con_total(actual, data["total"]))
                set_loading(False)

        task = asyncio.create_task(fetch())
        list_task.current = task
        return lambda: task.cancel()

    @use_callback
    async def guardar_cambios(formulario_id: Any, patch: Dict[str, Any]) -> Dict[str, Any]:
        """Envía el patch y reemplaza la fila con la versión del servidor. Los errores se propagan."""
        for campo_a, campo_b in PARES_VINCULADOS:
            if campo_a in patch or campo_b in patch:
                resultado = validar_par(campo_a, patch.get(campo_a), campo_b, patch.get(campo_b))
                if not resultado.is_valid:
                    raise ValidationException(f"'{campo_a}' y '{campo_b}' se guardan juntos.", resultado.errors)
        fila = await api_client.update_formulario(formulario_id, patch)
        if fila and is_mounted.current:
            set_items(lambda previas: [fila if str(f.get("id")) == str(fila.get("id")) else f for f in previas])
        return fila

    def refresh(event=None):
        set_reload_token(lambda n: n + 1)

    return {
        "items": items,
        "loading": loading,
        "error": error,
        "grid": grid,
        "page_info": gs.page_info(grid),
        "can_prev": gs.can_prev(grid),
        "can_next": gs.can_next(grid),
        "next_page": lambda event=None: set_grid(gs.next_page),
        "prev_page": lambda event=None: set_grid(gs.prev_page),
        "set_page_size": lambda size: set_grid(lambda g: gs.set_page_size(g, size)),
        "set_filter": lambda nombre, valor: set_grid(lambda g: gs.set_filter(g, nombre, valor)),
        "clear_filters": lambda event=None: set_grid(gs.clear_filters),
        "refresh": refresh,
        "guardar_cambios": guardar_cambios,
    }
