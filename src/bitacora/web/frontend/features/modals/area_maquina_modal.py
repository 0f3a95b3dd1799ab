import asyncio
from typing import Any, Callable, Dict

from reactpy import component, event, html, use_context, use_effect, use_state

from ...shared.notifications import NotificationContext
from ...state.app_context import use_app_context
from ...utils.validation import validar_par


@component
def AreaMaquinaModal(fila: Dict[str, Any], on_close: Callable, on_guardar: Callable):
    """Elegir un área recarga las máquinas disponibles; se guardan ambas juntas."""
    api_client = use_app_context()["api_client"]
    notification_ctx = use_context(NotificationContext) or {}
    show_notification = notification_ctx.get("show_notification", lambda *a, **k: None)

    areas, set_areas = use_state([])
    area, set_area = use_state(str(fila.get("area") or ""))
    maquinas, set_maquinas = use_state([])
    maquina, set_maquina = use_state(str(fila.get("maquina") or ""))
    is_loading, set_is_loading = use_state(False)
    is_saving, set_is_saving = use_state(False)
    error, set_error = use_state(None)

    @use_effect(dependencies=[])
    def cargar_areas():
        async def fetch():
            try:
                set_areas(await api_client.get_areas())
            except asyncio.CancelledError:
                raise
            except Exception as e:
                set_error(f"Error cargando áreas: {e}")

        task = asyncio.create_task(fetch())
        return lambda: task.cancel()

    @use_effect(dependencies=[area])
    def cargar_maquinas():
        if not area:
            set_maquinas([])
            return None

        async def fetch():
            set_is_loading(True)
            try:
                lista = await api_client.get_maquinas(area)
                set_maquinas(lista)
                # La máquina elegida debe pertenecer al área nueva
                set_maquina(lambda actual: actual if actual in lista else "")
            except asyncio.CancelledError:
                raise
            except Exception as e:
                set_error(f"Error cargando máquinas: {e}")
            finally:
                set_is_loading(False)

        task = asyncio.create_task(fetch())
        return lambda: task.cancel()

    async def handle_submit(e):
        if is_saving:
            return
        if not validar_par("area", area, "maquina", maquina).is_valid:
            set_error("Seleccione un área y una máquina.")
            return
        set_is_saving(True)
        set_error(None)
        try:
            await on_guardar(fila["id"], {"area": area, "maquina": maquina})
            show_notification(f"Formulario {fila['id']}: área/máquina actualizadas.", "success")
            on_close()
        except Exception as ex:
            set_error(str(ex))
            show_notification(f"No se guardó el área/máquina: {ex}", "error")
        finally:
            set_is_saving(False)

    return html.dialog(
        {"open": True},
        html.article(
            html.header(
                html.button({"aria-label": "Close", "rel": "prev", "on_click": lambda e: on_close()}),
                html.h3(f"Área / máquina del formulario {fila['id']}"),
            ),
            html.form(
                {"on_submit": event(handle_submit, prevent_default=True)},
                html.label(
                    "Área (CT Pn)",
                    html.select(
                        {"name": "area", "value": area, "on_change": lambda e: set_area(e["target"]["value"])},
                        html.option({"value": ""}, "Seleccionar..."),
                        [html.option({"value": a, "key": a}, a) for a in areas],
                    ),
                ),
                html.label(
                    "Máquina",
                    html.select(
                        {
                            "name": "maquina",
                            "value": maquina,
                            "disabled": not area or is_loading,
                            "aria-busy": str(is_loading).lower(),
                            "on_change": lambda e: set_maquina(e["target"]["value"]),
                        },
                        html.option({"value": ""}, "Seleccionar..."),
                        [html.option({"value": m, "key": m}, m) for m in maquinas],
                    ),
                ),
                html.small({"class_name": "error-text"}, error) if error else None,
                html.footer(
                    html.div(
                        {"class_name": "grid"},
                        html.button(
                            {"type": "button", "class_name": "secondary", "on_click": lambda e: on_close()},
                            "Cancelar",
                        ),
                        html.button(
                            {
                                "type": "submit",
                                "disabled": is_saving or not (area and maquina),
                                "aria-busy": str(is_saving).lower(),
                            },
                            "Guardar",
                        ),
                    ),
                ),
            ),
        ),
    )
