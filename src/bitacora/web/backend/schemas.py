from datetime import date, time
from decimal import Decimal
from typing import Any, Dict, List, Optional, TypedDict

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from bitacora.common.catalogos import CATALOGOS_POR_CAMPO, normalizar_opcion
from bitacora.common.reglas import parse_cantidad, parse_fecha, parse_hora

from .exceptions import ValidacionError


class CambiosFormulario(BaseModel):
    """
    Patch parcial de un formulario. Los campos en None no se tocan.
    Normaliza categorías, fechas, horas y cantidad antes de llegar al SQL.
    """

    model_config = ConfigDict(extra="ignore", str_strip_whitespace=True)

    nombres: Optional[str] = None
    sede: Optional[str] = None
    no_op: Optional[str] = None
    sci_ref: Optional[str] = None
    descripcion_referencia: Optional[str] = None
    fecha_inicio: Optional[date] = None
    hora_inicio: Optional[time] = None
    fecha_final: Optional[date] = None
    hora_final: Optional[time] = None
    actividad: Optional[str] = None
    cantidad: Optional[Decimal] = None
    estado_sci: Optional[str] = None
    area: Optional[str] = None
    maquina: Optional[str] = None
    horario: Optional[str] = None
    observaciones: Optional[str] = None

    @field_validator("sede", "actividad", "estado_sci", "horario", mode="before")
    @classmethod
    def _categoria_canonica(cls, valor: Any, info) -> Optional[str]:
        if valor is None:
            return None
        opciones = CATALOGOS_POR_CAMPO[info.field_name]
        canonico = normalizar_opcion(valor, opciones)
        if canonico is None:
            raise ValueError(f"'{valor}' no es un valor válido. Opciones: {', '.join(opciones)}")
        return canonico

    @field_validator("fecha_inicio", "fecha_final", mode="before")
    @classmethod
    def _fecha(cls, valor: Any) -> Optional[date]:
        return parse_fecha(valor)

    @field_validator("hora_inicio", "hora_final", mode="before")
    @classmethod
    def _hora(cls, valor: Any) -> Optional[time]:
        return parse_hora(valor)

    @field_validator("cantidad", mode="before")
    @classmethod
    def _cantidad(cls, valor: Any) -> Optional[Decimal]:
        if valor is None:
            return None
        return parse_cantidad(valor)

    @field_validator("no_op", "sci_ref", "area", "maquina", mode="before")
    @classmethod
    def _codigo_como_texto(cls, valor: Any) -> Optional[str]:
        # Los códigos llegan como número desde algunos clientes
        return None if valor is None else str(valor)

    def campos_presentes(self) -> Dict[str, Any]:
        return self.model_dump(exclude_none=True)

    @classmethod
    def desde_patch(cls, patch: Dict[str, Any]) -> "CambiosFormulario":
        """Valida un patch crudo y traduce los errores de pydantic a ValidacionError."""
        try:
            return cls.model_validate(patch or {})
        except ValidationError as e:
            detalles = "; ".join(
                f"{'.'.join(str(p) for p in err['loc'])}: {_mensaje_error(err)}" for err in e.errors()
            )
            raise ValidacionError(detalles) from None


def _mensaje_error(err: Dict[str, Any]) -> str:
    mensaje = err.get("msg", "")
    return mensaje.removeprefix("Value error, ")


class RefRow(TypedDict):
    op: str
    sci: str
    descripcion: Optional[str]


class FormulariosPage(TypedDict):
    items: List[Dict[str, Any]]
    count: int
    total: int
