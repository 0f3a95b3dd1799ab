"""Editores en línea de la grilla. Todos reciben el borrador y avisan con on_change/on_commit/on_cancel."""

from typing import Any, Callable, Dict, Optional, Sequence

from reactpy import component, html

from ...utils.celdas import filtrar_numero
from ...utils.input_helpers import texto_celda, valor_para_select


def _manejar_teclas(on_commit: Callable, on_cancel: Callable) -> Callable:
    def handle_key_down(event):
        if event["key"] == "Enter":
            on_commit(event["target"]["value"])
        elif event["key"] == "Escape":
            on_cancel()

    return handle_key_down


@component
def EditorTexto(valor: Any, on_change: Callable, on_commit: Callable, on_cancel: Callable):
    return html.input(
        {
            "type": "text",
            "class_name": "cell-editor",
            "auto_focus": True,
            "value": texto_celda(valor),
            "on_change": lambda e: on_change(e["target"]["value"]),
            "on_key_down": _manejar_teclas(on_commit, on_cancel),
            "on_blur": lambda e: on_commit(e["target"]["value"]),
        }
    )


@component
def EditorSelect(valor: Any, opciones: Sequence[str], on_commit: Callable, on_cancel: Callable):
    """Lista cerrada; un valor guardado que no está en la lista se muestra sin selección."""
    return html.select(
        {
            "class_name": "cell-editor",
            "auto_focus": True,
            "value": valor_para_select(valor, opciones),
            "on_change": lambda e: on_commit(e["target"]["value"]) if e["target"]["value"] else None,
            "on_key_down": lambda e: on_cancel() if e["key"] == "Escape" else None,
            "on_blur": lambda e: on_cancel(),
        },
        html.option({"value": "", "disabled": True}, "Seleccionar..."),
        [html.option({"value": opcion, "key": opcion}, opcion) for opcion in opciones],
    )


@component
def EditorNumero(valor: Any, on_change: Callable, on_commit: Callable, on_cancel: Callable):
    """Cantidad no negativa: cada tecleo o pegado se filtra a dígitos y un separador decimal."""
    return html.input(
        {
            "type": "text",
            "inputmode": "decimal",
            "class_name": "cell-editor",
            "auto_focus": True,
            "value": texto_celda(valor),
            "on_change": lambda e: on_change(filtrar_numero(e["target"]["value"])),
            "on_key_down": _manejar_teclas(lambda v: on_commit(filtrar_numero(v)), on_cancel),
            "on_blur": lambda e: on_commit(filtrar_numero(e["target"]["value"])),
        }
    )


@component
def EditorFechaHora(
    tipo: str,
    valor: Any,
    limites: Dict[str, str],
    on_change: Callable,
    on_commit: Callable,
    on_cancel: Callable,
    error: Optional[str] = None,
):
    """Picker nativo de fecha (`tipo='date'`) u hora (`tipo='time'`) acotado por el otro extremo."""
    attrs = {
        "type": tipo,
        "class_name": "cell-editor",
        "auto_focus": True,
        "value": texto_celda(valor),
        "on_change": lambda e: on_change(e["target"]["value"]),
        "on_key_down": _manejar_teclas(on_commit, on_cancel),
        "on_blur": lambda e: on_commit(e["target"]["value"]),
        **limites,
    }
    if error:
        attrs["aria-invalid"] = "true"
        attrs["title"] = error
    return html.input(attrs)
