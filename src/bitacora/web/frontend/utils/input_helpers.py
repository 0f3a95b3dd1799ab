"""Conversión entre los valores de una fila y lo que muestran/envían los inputs."""

from typing import Any, Sequence

from bitacora.common.catalogos import normalizar_opcion


def trim_text_input(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def valor_para_select(valor: Any, opciones: Sequence[str]) -> str:
    """Valor canónico para preseleccionar; un valor no reconocido queda sin selección ('')."""
    return normalizar_opcion(valor, opciones) or ""


def texto_celda(valor: Any) -> str:
    if valor is None:
        return ""
    if isinstance(valor, float):
        return f"{valor:g}"
    return str(valor)


def valor_para_patch(campo: str, valor: Any) -> Any:
    """Adapta el valor editado al tipo del FormularioPatch."""
    texto = trim_text_input(valor)
    if campo == "cantidad":
        return float(texto) if texto else None
    return texto or None
