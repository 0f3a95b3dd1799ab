# bitacora/web/frontend/app.py
import uuid

from reactpy import component, html, use_effect, use_state
from reactpy_router import browser_router, route

from .api.api_client import get_api_client
from .features.formularios.controles import FormulariosControls
from .features.formularios.grid import FormulariosGrid
from .features.modals.area_maquina_modal import AreaMaquinaModal
from .features.modals.op_sci_modal import OpSciModal
from .hooks.use_debounced_value_hook import use_debounced_value
from .hooks.use_formularios_hook import use_formularios
from .shared.common_components import ErrorMessage, Paginador, PageWithLayout
from .shared.notifications import NotificationContext, ToastContainer
from .state.app_context import AppContext


def _use_filtro_debounced(state, nombre: str, delay: int = 300):
    """Input de texto cuyo valor llega al filtro `nombre` del GridState tras el debounce."""
    valor, set_valor = use_state(state["grid"].filters.get(nombre) or "")
    debounced = use_debounced_value(valor, delay)

    @use_effect(dependencies=[debounced])
    def sync_filtro():
        state["set_filter"](nombre, debounced)

    return valor, set_valor, debounced != valor


# --- Páginas ---
@component
def FormulariosPage(theme_is_dark: bool, on_theme_toggle):
    """Grilla editable de Formulario2 con filtros, paginación y modales de pares."""
    state = use_formularios()

    search, set_search, buscando_q = _use_filtro_debounced(state, "q")
    id_filter, set_id_filter, buscando_id = _use_filtro_debounced(state, "id")
    op_filter, set_op_filter, buscando_op = _use_filtro_debounced(state, "no_op")

    # {"tipo": "op_sci" | "area_maquina", "fila": {...}}
    modal, set_modal = use_state(None)

    def abrir_modal(tipo: str, fila):
        set_modal({"tipo": tipo, "fila": fila})

    def cerrar_modal(event=None):
        set_modal(None)

    def limpiar_filtros(event=None):
        set_search("")
        set_id_filter("")
        set_op_filter("")
        state["clear_filters"]()

    modal_view = None
    if modal:
        modal_key = f"{modal['tipo']}-{modal['fila']['id']}"
        if modal["tipo"] == "op_sci":
            modal_view = OpSciModal(
                key=modal_key, fila=modal["fila"], on_close=cerrar_modal, on_guardar=state["guardar_cambios"]
            )
        else:
            modal_view = AreaMaquinaModal(
                key=modal_key, fila=modal["fila"], on_close=cerrar_modal, on_guardar=state["guardar_cambios"]
            )

    grid = state["grid"]
    return PageWithLayout(
        theme_is_dark=theme_is_dark,
        on_theme_toggle=on_theme_toggle,
        on_refresh=state["refresh"],
        loading=state["loading"],
        children=html._(
            FormulariosControls(
                search=search,
                on_search=set_search,
                id_filter=id_filter,
                on_id_filter=set_id_filter,
                op_filter=op_filter,
                on_op_filter=set_op_filter,
                filters=grid.filters,
                on_date_change=state["set_filter"],
                on_clear=limpiar_filtros,
                is_searching=buscando_q or buscando_id or buscando_op,
            ),
            ErrorMessage(state["error"]) if state["error"] and state["items"] else None,
            FormulariosGrid(
                items=state["items"],
                loading=state["loading"],
                error=state["error"],
                on_guardar=state["guardar_cambios"],
                on_abrir_modal=abrir_modal,
            ),
            Paginador(
                page_info=state["page_info"],
                can_prev=state["can_prev"],
                can_next=state["can_next"],
                on_prev=state["prev_page"],
                on_next=state["next_page"],
                page_size=grid.page_size,
                on_page_size=state["set_page_size"],
            ),
            modal_view,
        ),
    )


@component
def NotFoundPage(theme_is_dark: bool, on_theme_toggle):
    """Página para rutas no encontradas."""
    return PageWithLayout(
        theme_is_dark=theme_is_dark,
        on_theme_toggle=on_theme_toggle,
        children=html.article(
            html.header(html.h1("Página no encontrada")),
            html.p("La página que buscas no existe."),
            html.a({"href": "/"}, "Volver a los formularios"),
        ),
    )


# --- Estructura Principal de la App ---
@component
def App():
    """Componente raíz: provee el cliente de la API, las notificaciones y el enrutador."""
    notifications, set_notifications = use_state([])
    is_dark, set_is_dark = use_state(True)
    script_to_run, set_script_to_run = use_state(html._())

    @use_effect(dependencies=[is_dark])
    def apply_theme():
        theme = "dark" if is_dark else "light"
        key = f"theme-script-{uuid.uuid4()}"
        js_code = f"document.documentElement.setAttribute('data-theme', '{theme}')"
        set_script_to_run(html.script({"key": key}, js_code))

    def show_notification(message, style="success"):
        new_id = str(uuid.uuid4())
        set_notifications(lambda old: old + [{"id": new_id, "message": message, "style": style}])

    def dismiss_notification(notification_id):
        set_notifications(lambda old: [n for n in old if n["id"] != notification_id])

    notification_context_value = {
        "notifications": notifications,
        "show_notification": show_notification,
        "dismiss_notification": dismiss_notification,
    }

    return AppContext(
        NotificationContext(
            html._(
                script_to_run,
                browser_router(
                    route("/", FormulariosPage(theme_is_dark=is_dark, on_theme_toggle=set_is_dark)),
                    route("*", NotFoundPage(theme_is_dark=is_dark, on_theme_toggle=set_is_dark)),
                ),
                ToastContainer(),
            ),
            value=notification_context_value,
        ),
        value={"api_client": get_api_client()},
    )


# --- Elementos del <head> ---
head = html.head(
    html.title("Bitácora Formulario2"),
    html.meta({"charset": "utf-8"}),
    html.meta({"name": "viewport", "content": "width=device-width, initial-scale=1"}),
    html.link({"rel": "stylesheet", "href": "https://cdn.jsdelivr.net/npm/@picocss/pico@2.1.1/css/pico.min.css"}),
    html.link({"rel": "stylesheet", "href": "https://cdn.jsdelivr.net/npm/@picocss/pico@2.1.1/css/pico.colors.min.css"}),
    html.link({"rel": "stylesheet", "href": "https://fonts.googleapis.com/css2?family=Material+Symbols+Outlined"}),
    html.link({"rel": "stylesheet", "href": "/static/custom.css"}),
)
