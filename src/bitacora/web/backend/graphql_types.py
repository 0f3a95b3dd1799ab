import datetime
from decimal import Decimal
from typing import Any, Dict, List, NewType, Optional

import strawberry

from bitacora.common.reglas import formatear_hora, parse_fecha


def _serializar_fecha(valor: Any) -> Optional[str]:
    fecha = parse_fecha(valor)
    return fecha.isoformat() if fecha else None


Date = strawberry.scalar(
    NewType("Date", datetime.date),
    name="Date",
    description="Fecha en formato YYYY-MM-DD. Acepta también un datetime ISO y conserva sólo la fecha.",
    serialize=_serializar_fecha,
    parse_value=parse_fecha,
)


@strawberry.type
class Formulario:
    id: strawberry.ID
    cc: Optional[str] = None
    nombres: Optional[str] = None
    actividad: Optional[str] = None
    sede: Optional[str] = None
    fecha_inicio: Optional[Date] = None
    fecha_final: Optional[Date] = None
    hora_inicio: Optional[str] = None
    hora_final: Optional[str] = None
    no_op: Optional[str] = None
    sci_ref: Optional[str] = None
    descripcion_referencia: Optional[str] = None
    cantidad: Optional[float] = None
    estado_sci: Optional[str] = None
    area: Optional[str] = None
    maquina: Optional[str] = None
    horario: Optional[str] = None
    observaciones: Optional[str] = None

    @classmethod
    def from_row(cls, fila: Dict[str, Any]) -> "Formulario":
        """Convierte una fila de la base (date/time/Decimal) a los tipos expuestos por GraphQL."""
        cantidad = fila.get("cantidad")
        return cls(
            id=strawberry.ID(str(fila["id"])),
            cc=_texto(fila.get("cc")),
            nombres=fila.get("nombres"),
            actividad=fila.get("actividad"),
            sede=fila.get("sede"),
            fecha_inicio=parse_fecha(fila.get("fecha_inicio")),
            fecha_final=parse_fecha(fila.get("fecha_final")),
            hora_inicio=formatear_hora(fila.get("hora_inicio")),
            hora_final=formatear_hora(fila.get("hora_final")),
            no_op=_texto(fila.get("no_op")),
            sci_ref=_texto(fila.get("sci_ref")),
            descripcion_referencia=fila.get("descripcion_referencia"),
            cantidad=float(cantidad) if isinstance(cantidad, (Decimal, int, float)) else None,
            estado_sci=fila.get("estado_sci"),
            area=_texto(fila.get("area")),
            maquina=_texto(fila.get("maquina")),
            horario=fila.get("horario"),
            observaciones=fila.get("observaciones"),
        )


def _texto(valor: Any) -> Optional[str]:
    return None if valor is None else str(valor)


@strawberry.type
class FormulariosResult:
    items: List[Formulario]
    count: int
    total: int


@strawberry.type
class RefRow:
    op: str
    sci: str
    descripcion: Optional[str] = None


@strawberry.input
class FormularioPatch:
    nombres: Optional[str] = None
    sede: Optional[str] = None
    no_op: Optional[str] = None
    sci_ref: Optional[str] = None
    descripcion_referencia: Optional[str] = None
    fecha_inicio: Optional[Date] = None
    hora_inicio: Optional[str] = None
    fecha_final: Optional[Date] = None
    hora_final: Optional[str] = None
    actividad: Optional[str] = None
    cantidad: Optional[float] = None
    estado_sci: Optional[str] = None
    area: Optional[str] = None
    maquina: Optional[str] = None
    horario: Optional[str] = None
    observaciones: Optional[str] = None

    def a_dict(self) -> Dict[str, Any]:
        """Sólo los campos enviados; los nulos no forman parte del patch."""
        return {campo: valor for campo, valor in vars(self).items() if valor is not None}


@strawberry.input
class UpdateInput:
    id: strawberry.ID
    patch: FormularioPatch
