"""
Máquina de estados de una celda editable de la grilla.

    display -> editing -> saving -> saved | error -> display

`Celda` es inmutable: cada transición devuelve una celda nueva, de modo que el
componente sólo guarda la instancia actual en su estado. Un guardado fallido
restaura el valor previo a la edición (revert del valor optimista).
"""

from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Dict, Optional

from bitacora.common.catalogos import CATALOGOS_GRILLA
from bitacora.common.reglas import parse_fecha, parse_hora


class EstadoCelda(str, Enum):
    DISPLAY = "display"
    EDITING = "editing"
    SAVING = "saving"
    SAVED = "saved"
    ERROR = "error"


TRANSICIONES = {
    EstadoCelda.DISPLAY: {EstadoCelda.EDITING},
    EstadoCelda.EDITING: {EstadoCelda.DISPLAY, EstadoCelda.SAVING},
    EstadoCelda.SAVING: {EstadoCelda.SAVED, EstadoCelda.ERROR},
    EstadoCelda.SAVED: {EstadoCelda.DISPLAY, EstadoCelda.EDITING},
    EstadoCelda.ERROR: {EstadoCelda.DISPLAY, EstadoCelda.EDITING},
}

# Duración de la indicación "guardado"/"error" antes de volver a display
DURACION_INDICACION_SEG = 1.5


class TransicionInvalida(ValueError):
    pass


def _vacio_a_none(valor: Any) -> Any:
    if isinstance(valor, str):
        valor = valor.strip()
    return None if valor == "" else valor


@dataclass(frozen=True)
class Celda:
    campo: str
    valor: Any = None
    estado: EstadoCelda = EstadoCelda.DISPLAY
    borrador: Any = None
    anterior: Any = None
    mensaje: Optional[str] = None

    def _pasar(self, destino: EstadoCelda, **cambios) -> "Celda":
        if destino not in TRANSICIONES[self.estado]:
            raise TransicionInvalida(f"{self.campo}: transición {self.estado.value} -> {destino.value} no permitida")
        return replace(self, estado=destino, **cambios)

    @property
    def hay_cambios(self) -> bool:
        return self.estado == EstadoCelda.EDITING and _vacio_a_none(self.borrador) != _vacio_a_none(self.valor)

    def iniciar_edicion(self) -> "Celda":
        return self._pasar(EstadoCelda.EDITING, borrador=self.valor, mensaje=None)

    def actualizar_borrador(self, valor: Any) -> "Celda":
        if self.estado != EstadoCelda.EDITING:
            raise TransicionInvalida(f"{self.campo}: no está en edición")
        return replace(self, borrador=valor, mensaje=None)

    def marcar_invalida(self, mensaje: str) -> "Celda":
        """Validación local fallida: sigue en edición con el mensaje visible."""
        if self.estado != EstadoCelda.EDITING:
            raise TransicionInvalida(f"{self.campo}: no está en edición")
        return replace(self, mensaje=mensaje)

    def cancelar(self) -> "Celda":
        return self._pasar(EstadoCelda.DISPLAY, borrador=None, mensaje=None)

    def confirmar(self) -> "Celda":
        """Aplica el borrador de forma optimista; sin cambios vuelve directo a display."""
        if not self.hay_cambios:
            return self.cancelar()
        return self._pasar(EstadoCelda.SAVING, anterior=self.valor, valor=self.borrador, borrador=None)

    def guardado(self, valor_servidor: Any) -> "Celda":
        return self._pasar(EstadoCelda.SAVED, valor=valor_servidor, anterior=None, mensaje=None)

    def fallido(self, mensaje: str) -> "Celda":
        return self._pasar(EstadoCelda.ERROR, valor=self.anterior, anterior=None, mensaje=mensaje)

    def reposar(self) -> "Celda":
        if self.estado not in (EstadoCelda.SAVED, EstadoCelda.ERROR):
            return self
        return self._pasar(EstadoCelda.DISPLAY, mensaje=None)


# ------------------------------------------------------------------
# Tipos de editor por columna
# ------------------------------------------------------------------
CAMPOS_SOLO_LECTURA = ("id", "cc", "descripcion_referencia")
CAMPOS_PAR_OP = ("no_op", "sci_ref")
CAMPOS_PAR_AREA = ("area", "maquina")


def tipo_editor(campo: str) -> str:
    if campo in CAMPOS_SOLO_LECTURA:
        return "solo_lectura"
    if campo in CAMPOS_PAR_OP:
        return "op_sci"
    if campo in CAMPOS_PAR_AREA:
        return "area_maquina"
    if campo in CATALOGOS_GRILLA:
        return "select"
    if campo == "cantidad":
        return "numero"
    if campo.startswith("fecha_"):
        return "fecha"
    if campo.startswith("hora_"):
        return "hora"
    return "texto"


def es_tecla_edicion(key: str) -> bool:
    return key in ("F2", "Enter")


def filtrar_numero(texto: Any) -> str:
    """
    Filtro de tecleo/pegado para la cantidad: sólo dígitos y un separador decimal.
    La coma se convierte en punto; el signo menos se descarta.
    """
    if texto is None:
        return ""
    resultado = []
    hay_separador = False
    for caracter in str(texto):
        if caracter.isdigit():
            resultado.append(caracter)
        elif caracter in ".," and not hay_separador:
            hay_separador = True
            resultado.append(".")
    return "".join(resultado)


def limites_picker(campo: str, fila: Dict[str, Any]) -> Dict[str, str]:
    """
    min/max del picker nativo según el extremo opuesto del intervalo.
    Las horas sólo se acotan cuando inicio y fin caen el mismo día.
    """
    limites: Dict[str, str] = {}
    try:
        fi, ff = parse_fecha(fila.get("fecha_inicio")), parse_fecha(fila.get("fecha_final"))
        hi, hf = parse_hora(fila.get("hora_inicio")), parse_hora(fila.get("hora_final"))
    except ValueError:
        return limites

    if campo == "fecha_inicio" and ff:
        limites["max"] = ff.isoformat()
    elif campo == "fecha_final" and fi:
        limites["min"] = fi.isoformat()
    elif fi and ff and fi == ff:
        if campo == "hora_inicio" and hf:
            limites["max"] = hf.strftime("%H:%M")
        elif campo == "hora_final" and hi:
            limites["min"] = hi.strftime("%H:%M")
    return limites
