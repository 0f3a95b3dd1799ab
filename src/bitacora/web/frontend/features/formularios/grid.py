import asyncio
from typing import Any, Callable, Dict, List, Optional

from reactpy import component, event, html, use_context, use_effect, use_ref, use_state

from bitacora.common.catalogos import CATALOGOS_GRILLA

from ...shared.common_components import ErrorMessage, LoadingSpinner
from ...shared.notifications import NotificationContext
from ...utils.celdas import (
    DURACION_INDICACION_SEG,
    Celda,
    EstadoCelda,
    es_tecla_edicion,
    limites_picker,
    tipo_editor,
)
from ...utils.input_helpers import texto_celda, valor_para_patch
from ...utils.validation import CAMPOS_INTERVALO, validar_cantidad_texto, validar_edicion_intervalo
from .editores import EditorFechaHora, EditorNumero, EditorSelect, EditorTexto

COLUMNAS = [
    ("id", "ID"),
    ("cc", "CC"),
    ("nombres", "Nombres"),
    ("sede", "Sede"),
    ("actividad", "Actividad"),
    ("no_op", "O.P."),
    ("sci_ref", "SCI Ref."),
    ("descripcion_referencia", "Descripción"),
    ("fecha_inicio", "Fecha inicio"),
    ("hora_inicio", "Hora inicio"),
    ("fecha_final", "Fecha final"),
    ("hora_final", "Hora final"),
    ("cantidad", "Cantidad"),
    ("estado_sci", "Estado SCI"),
    ("area", "Área"),
    ("maquina", "Máquina"),
    ("horario", "Horario"),
    ("observaciones", "Observaciones"),
]


async def confirmar_edicion(
    actual: Celda,
    fila: Dict[str, Any],
    on_guardar: Callable,
    actualizar: Callable[[Celda], None],
    on_marcas: Callable[[Dict[str, str]], None],
) -> Optional[Dict[str, Any]]:
    """
    Valida el borrador de una celda en edición y, si pasa, lo envía con `on_guardar`.

    Devuelve la fila guardada, o None si la edición no llegó al servidor
    (sin cambios o rechazada por validación). Los errores de `on_guardar` se propagan
    con la celda ya en SAVING.
    """
    campo = actual.campo
    if not actual.hay_cambios:
        actualizar(actual.cancelar())
        return None

    if campo in CAMPOS_INTERVALO:
        resultado = validar_edicion_intervalo(fila, campo, actual.borrador)
        on_marcas(resultado.errors)
        if not resultado.is_valid:
            actualizar(actual.marcar_invalida(next(iter(resultado.errors.values()))))
            return None
    elif campo == "cantidad":
        resultado = validar_cantidad_texto(actual.borrador)
        if not resultado.is_valid:
            actualizar(actual.marcar_invalida(resultado.errors["cantidad"]))
            return None

    pendiente = actual.confirmar()
    actualizar(pendiente)
    return await on_guardar(fila["id"], {campo: valor_para_patch(campo, pendiente.valor)})


@component
def CeldaEditable(
    fila: Dict[str, Any],
    campo: str,
    on_guardar: Callable,
    on_abrir_modal: Callable,
    marca_error: Optional[str],
    on_marcas: Callable,
):
    """Celda con su propia máquina de estados; guarda sola y revierte si el servidor rechaza el cambio."""
    notification_ctx = use_context(NotificationContext) or {}
    show_notification = notification_ctx.get("show_notification", lambda *a, **k: None)

    celda, set_celda = use_state(lambda: Celda(campo=campo, valor=fila.get(campo)))
    celda_ref = use_ref(celda)
    tipo = tipo_editor(campo)

    def actualizar(nueva: Celda):
        celda_ref.current = nueva
        set_celda(nueva)

    valor_servidor = texto_celda(fila.get(campo))

    @use_effect(dependencies=[valor_servidor])
    def sincronizar_con_fila():
        if celda_ref.current.estado == EstadoCelda.DISPLAY:
            actualizar(Celda(campo=campo, valor=fila.get(campo)))

    @use_effect(dependencies=[celda.estado])
    def indicacion_transitoria():
        if celda.estado not in (EstadoCelda.SAVED, EstadoCelda.ERROR):
            return None

        async def reposar():
            await asyncio.sleep(DURACION_INDICACION_SEG)
            actualizar(celda_ref.current.reposar())

        task = asyncio.create_task(reposar())
        return lambda: task.cancel()

    def iniciar_edicion(event=None):
        if tipo == "solo_lectura":
            return
        if tipo in ("op_sci", "area_maquina"):
            on_abrir_modal(tipo, fila)
            return
        if celda_ref.current.estado in (EstadoCelda.DISPLAY, EstadoCelda.SAVED, EstadoCelda.ERROR):
            actualizar(celda_ref.current.iniciar_edicion())

    def cancelar():
        if celda_ref.current.estado == EstadoCelda.EDITING:
            actualizar(celda_ref.current.cancelar())
            if campo in CAMPOS_INTERVALO:
                on_marcas({})

    def cambiar_borrador(valor):
        if celda_ref.current.estado == EstadoCelda.EDITING:
            actualizar(celda_ref.current.actualizar_borrador(valor))

    async def confirmar(valor=None):
        actual = celda_ref.current
        if actual.estado != EstadoCelda.EDITING:
            return
        if valor is not None:
            actual = actual.actualizar_borrador(valor)

        try:
            fila_nueva = await confirmar_edicion(actual, fila, on_guardar, actualizar, on_marcas)
        except Exception as e:
            actualizar(celda_ref.current.fallido(str(e)))
            show_notification(f"No se guardó '{campo}' del formulario {fila['id']}: {e}", "error")
            return
        if fila_nueva is None:
            return
        actualizar(celda_ref.current.guardado(fila_nueva.get(campo)))
        show_notification(f"Formulario {fila['id']}: '{campo}' actualizado.", "success")

    def handle_key_down(event):
        if es_tecla_edicion(event["key"]):
            iniciar_edicion()

    clases = f"cell cell-{celda.estado.value} cell-{tipo}"
    if marca_error:
        clases += " cell-invalid"

    if celda.estado == EstadoCelda.EDITING:
        if tipo == "select":
            editor = EditorSelect(
                valor=celda.borrador, opciones=CATALOGOS_GRILLA[campo], on_commit=confirmar, on_cancel=cancelar
            )
        elif tipo == "numero":
            editor = EditorNumero(
                valor=celda.borrador, on_change=cambiar_borrador, on_commit=confirmar, on_cancel=cancelar
            )
        elif tipo in ("fecha", "hora"):
            editor = EditorFechaHora(
                tipo="date" if tipo == "fecha" else "time",
                valor=celda.borrador,
                limites=limites_picker(campo, fila),
                on_change=cambiar_borrador,
                on_commit=confirmar,
                on_cancel=cancelar,
                error=celda.mensaje or marca_error,
            )
        else:
            editor = EditorTexto(
                valor=celda.borrador, on_change=cambiar_borrador, on_commit=confirmar, on_cancel=cancelar
            )
        contenido = html._(editor, html.small({"class_name": "cell-message"}, celda.mensaje) if celda.mensaje else None)
    else:
        contenido = html.span(texto_celda(celda.valor))

    return html.td(
        {
            "class_name": clases,
            "tab_index": 0 if tipo != "solo_lectura" else -1,
            "title": celda.mensaje or marca_error or "",
            "aria-busy": str(celda.estado == EstadoCelda.SAVING).lower(),
            "on_double_click": event(iniciar_edicion, prevent_default=True),
            "on_key_down": handle_key_down if celda.estado != EstadoCelda.EDITING else None,
        },
        contenido,
    )


@component
def FilaFormulario(fila: Dict[str, Any], on_guardar: Callable, on_abrir_modal: Callable):
    # Marcas de intervalo inválido compartidas por las celdas de fecha/hora de la fila
    marcas, set_marcas = use_state({})

    return html.tr(
        [
            CeldaEditable(
                key=f"{fila['id']}-{campo}",
                fila=fila,
                campo=campo,
                on_guardar=on_guardar,
                on_abrir_modal=on_abrir_modal,
                marca_error=marcas.get(campo),
                on_marcas=set_marcas,
            )
            for campo, _ in COLUMNAS
        ]
    )


@component
def FormulariosGrid(
    items: List[Dict[str, Any]], loading: bool, error: Optional[str], on_guardar: Callable, on_abrir_modal: Callable
):
    if error and not items:
        return ErrorMessage(error)

    return html.div(
        {"class_name": "grid-wrapper", "aria-busy": str(loading).lower()},
        html.table(
            {"class_name": "striped formularios-grid"},
            html.thead(html.tr([html.th({"key": campo, "scope": "col"}, titulo) for campo, titulo in COLUMNAS])),
            html.tbody(
                [
                    FilaFormulario(key=str(fila["id"]), fila=fila, on_guardar=on_guardar, on_abrir_modal=on_abrir_modal)
                    for fila in items
                ]
                if items
                else html.tr(
                    html.td(
                        {"col_span": len(COLUMNAS), "class_name": "empty-state"},
                        LoadingSpinner() if loading else "No hay formularios que coincidan con los filtros.",
                    )
                )
            ),
        ),
    )
