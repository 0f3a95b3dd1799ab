from typing import Any, Dict, NamedTuple

from bitacora.common.reglas import parse_cantidad, validar_intervalo

CAMPOS_INTERVALO = ("fecha_inicio", "hora_inicio", "fecha_final", "hora_final")
CAMPOS_FIN_INTERVALO = ("fecha_final", "hora_final")


class ValidationResult(NamedTuple):
    is_valid: bool
    errors: Dict[str, str]


def validar_edicion_intervalo(fila: Dict[str, Any], campo: str, nuevo_valor: Any) -> ValidationResult:
    """
    Revalida el intervalo completo con el valor pendiente de `campo` y los otros
    tres valores mostrados en la fila. Si falla, marca las dos celdas de fin del
    intervalo (fecha_final y hora_final), sea cual sea la celda editada.
    """
    if campo not in CAMPOS_INTERVALO:
        return ValidationResult(True, {})

    valores = {c: (nuevo_valor if c == campo else fila.get(c)) for c in CAMPOS_INTERVALO}
    try:
        resultado = validar_intervalo(**valores)
    except ValueError as e:
        return ValidationResult(False, {campo: str(e)})

    if resultado.es_valido:
        return ValidationResult(True, {})
    return ValidationResult(False, {c: resultado.mensaje for c in CAMPOS_FIN_INTERVALO})


def validar_cantidad_texto(texto: Any) -> ValidationResult:
    if texto is None or str(texto).strip() == "":
        return ValidationResult(False, {"cantidad": "La cantidad es obligatoria."})
    try:
        parse_cantidad(texto)
    except ValueError as e:
        return ValidationResult(False, {"cantidad": str(e)})
    return ValidationResult(True, {})


def validar_par(campo_a: str, valor_a: Any, campo_b: str, valor_b: Any) -> ValidationResult:
    """Los pares OP/SCI y área/máquina se guardan siempre completos."""
    errores = {}
    if not valor_a:
        errores[campo_a] = "Campo requerido."
    if not valor_b:
        errores[campo_b] = "Campo requerido."
    return ValidationResult(not errores, errores)
