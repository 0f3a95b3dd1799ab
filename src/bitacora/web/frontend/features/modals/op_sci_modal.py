import asyncio
from typing import Any, Callable, Dict

from reactpy import component, event, html, use_context, use_effect, use_state

from ...hooks.use_debounced_value_hook import use_debounced_value
from ...shared.notifications import NotificationContext
from ...state.app_context import use_app_context
from ...utils.validation import validar_par

LIMITE_SUGERENCIAS = 15


@component
def OpSciModal(fila: Dict[str, Any], on_close: Callable, on_guardar: Callable):
    """
    Edición del par O.P./SCI: sugerencias de O.P. por prefijo, luego los SCI de esa
    O.P. y la descripción derivada. Guarda los tres campos en una sola mutación.
    """
    api_client = use_app_context()["api_client"]
    notification_ctx = use_context(NotificationContext) or {}
    show_notification = notification_ctx.get("show_notification", lambda *a, **k: None)

    op_input, set_op_input = use_state(str(fila.get("no_op") or ""))
    debounced_op = use_debounced_value(op_input, 300)
    sugerencias, set_sugerencias = use_state([])
    op, set_op = use_state(str(fila.get("no_op") or ""))
    scis, set_scis = use_state([])
    sci, set_sci = use_state(str(fila.get("sci_ref") or ""))
    descripcion, set_descripcion = use_state(fila.get("descripcion_referencia"))
    is_loading, set_is_loading = use_state(False)
    is_saving, set_is_saving = use_state(False)
    error, set_error = use_state(None)

    @use_effect(dependencies=[debounced_op])
    def cargar_sugerencias():
        prefijo = debounced_op.strip()
        if not prefijo or prefijo == op:
            set_sugerencias([])
            return None

        async def fetch():
            try:
                set_sugerencias(await api_client.buscar_ops(prefijo, LIMITE_SUGERENCIAS))
            except asyncio.CancelledError:
                raise
            except Exception as e:
                set_error(f"Error buscando O.P.: {e}")

        task = asyncio.create_task(fetch())
        return lambda: task.cancel()

    @use_effect(dependencies=[op])
    def cargar_scis():
        if not op:
            set_scis([])
            return None

        async def fetch():
            set_is_loading(True)
            try:
                set_scis(await api_client.buscar_sci_por_op(op, None, 100))
            except asyncio.CancelledError:
                raise
            except Exception as e:
                set_error(f"Error cargando SCI: {e}")
            finally:
                set_is_loading(False)

        task = asyncio.create_task(fetch())
        return lambda: task.cancel()

    @use_effect(dependencies=[op, sci])
    def cargar_descripcion():
        if not op or not sci:
            set_descripcion(None)
            return None

        async def fetch():
            try:
                ref = await api_client.ref_por_op_sci(op, sci)
                set_descripcion(ref.get("descripcion") if ref else None)
                if ref is None:
                    set_error(f"La combinación O.P. {op} / SCI {sci} no existe.")
            except asyncio.CancelledError:
                raise
            except Exception as e:
                set_error(f"Error consultando la referencia: {e}")

        task = asyncio.create_task(fetch())
        return lambda: task.cancel()

    def elegir_op(valor: str):
        set_error(None)
        set_op_input(valor)
        set_op(valor)
        set_sci("")
        set_sugerencias([])

    def handle_op_input(e):
        valor = e["target"]["value"]
        set_op_input(valor)
        if valor.strip() != op:
            # Cambiar la O.P. invalida el SCI elegido
            set_op("")
            set_sci("")

    async def handle_submit(e):
        if is_saving:
            return
        resultado = validar_par("no_op", op, "sci_ref", sci)
        if not resultado.is_valid:
            set_error("Seleccione una O.P. y un SCI.")
            return
        set_is_saving(True)
        set_error(None)
        try:
            await on_guardar(fila["id"], {"no_op": op, "sci_ref": sci, "descripcion_referencia": descripcion})
            show_notification(f"Formulario {fila['id']}: O.P./SCI actualizados.", "success")
            on_close()
        except Exception as ex:
            set_error(str(ex))
            show_notification(f"No se guardó la O.P./SCI: {ex}", "error")
        finally:
            set_is_saving(False)

    return html.dialog(
        {"open": True},
        html.article(
            html.header(
                html.button({"aria-label": "Close", "rel": "prev", "on_click": lambda e: on_close()}),
                html.h3(f"O.P. / SCI del formulario {fila['id']}"),
            ),
            html.form(
                {"on_submit": event(handle_submit, prevent_default=True)},
                html.label(
                    "O.P.",
                    html.input(
                        {
                            "type": "search",
                            "name": "op",
                            "placeholder": "Escriba el inicio de la O.P...",
                            "value": op_input,
                            "on_change": handle_op_input,
                            "aria-busy": str(debounced_op != op_input).lower(),
                            "auto_focus": True,
                        }
                    ),
                ),
                html.ul(
                    {"class_name": "suggestions"},
                    [
                        html.li(
                            {"key": s},
                            html.a({"href": "#", "on_click": event(lambda e, s=s: elegir_op(s), prevent_default=True)}, s),
                        )
                        for s in sugerencias
                    ],
                )
                if sugerencias
                else None,
                html.label(
                    "SCI",
                    html.select(
                        {
                            "name": "sci",
                            "value": sci,
                            "disabled": not op or is_loading,
                            "aria-busy": str(is_loading).lower(),
                            "on_change": lambda e: (set_error(None), set_sci(e["target"]["value"])),
                        },
                        html.option({"value": ""}, "Seleccionar..."),
                        [html.option({"value": s, "key": s}, s) for s in scis],
                    ),
                ),
                html.label(
                    "Descripción referencia",
                    html.input({"type": "text", "read_only": True, "value": descripcion or ""}),
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
                            {"type": "submit", "disabled": is_saving or not (op and sci), "aria-busy": str(is_saving).lower()},
                            "Guardar",
                        ),
                    ),
                ),
            ),
        ),
    )
