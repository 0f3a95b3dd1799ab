"""Reglas de negocio compartidas por la API y la grilla (intervalo del turno y cantidad)."""

from datetime import date, datetime, time, timedelta
from decimal import Decimal, InvalidOperation
from typing import Any, NamedTuple, Optional

MAX_DURACION_TURNO = timedelta(hours=14)

MSG_FIN_ANTES_DE_INICIO = "La fecha/hora final debe ser posterior a la de inicio."
MSG_DURACION_EXCEDIDA = "La duración del turno no puede superar 14 horas."


class ResultadoIntervalo(NamedTuple):
    es_valido: bool
    mensaje: Optional[str] = None


def parse_fecha(valor: Any) -> Optional[date]:
    """
    Acepta date, datetime o texto ISO ('YYYY-MM-DD' o un datetime ISO completo,
    del que se conserva la parte de fecha). Texto vacío equivale a None.
    """
    if valor is None:
        return None
    if isinstance(valor, datetime):
        return valor.date()
    if isinstance(valor, date):
        return valor
    texto = str(valor).strip()
    if not texto:
        return None
    try:
        return date.fromisoformat(texto[:10])
    except ValueError:
        raise ValueError(f"Fecha inválida: '{texto}'. Formato esperado YYYY-MM-DD.") from None


def parse_hora(valor: Any) -> Optional[time]:
    if valor is None:
        return None
    if isinstance(valor, time):
        return valor
    texto = str(valor).strip()
    if not texto:
        return None
    try:
        return time.fromisoformat(texto)
    except ValueError:
        raise ValueError(f"Hora inválida: '{texto}'. Formato esperado HH:MM.") from None


def formatear_hora(valor: Any) -> Optional[str]:
    hora = parse_hora(valor)
    return hora.strftime("%H:%M") if hora else None


def validar_intervalo(fecha_inicio: Any, hora_inicio: Any, fecha_final: Any, hora_final: Any) -> ResultadoIntervalo:
    """
    Valida que el fin sea posterior al inicio y que el turno no supere 14 horas.
    Un intervalo incompleto (falta alguno de los cuatro valores) no se evalúa.
    Lanza ValueError si algún valor no es una fecha/hora legible.
    """
    fi, hi = parse_fecha(fecha_inicio), parse_hora(hora_inicio)
    ff, hf = parse_fecha(fecha_final), parse_hora(hora_final)
    if None in (fi, hi, ff, hf):
        return ResultadoIntervalo(True)

    inicio = datetime.combine(fi, hi)
    fin = datetime.combine(ff, hf)
    if fin <= inicio:
        return ResultadoIntervalo(False, MSG_FIN_ANTES_DE_INICIO)
    if fin - inicio > MAX_DURACION_TURNO:
        return ResultadoIntervalo(False, MSG_DURACION_EXCEDIDA)
    return ResultadoIntervalo(True)


def parse_cantidad(valor: Any) -> Decimal:
    """Convierte la cantidad a Decimal; rechaza texto no numérico y valores negativos."""
    if isinstance(valor, bool):
        raise ValueError("La cantidad debe ser numérica.")
    try:
        cantidad = Decimal(str(valor).strip().replace(",", "."))
    except (InvalidOperation, ValueError):
        raise ValueError(f"La cantidad debe ser numérica (recibido: '{valor}').") from None
    if not cantidad.is_finite():
        raise ValueError("La cantidad debe ser un número finito.")
    if cantidad < 0:
        raise ValueError("La cantidad no puede ser negativa.")
    return cantidad
