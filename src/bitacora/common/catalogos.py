"""
Listas canónicas de los campos categóricos del formulario.

Los registros vienen de una carga masiva y traen variantes de escritura
("PRODUCCION", "turno_1", "en proceso"...). `normalizar_opcion` las resuelve
contra la lista canónica ignorando tildes, guiones bajos y mayúsculas.
"""

import unicodedata
from typing import Dict, Optional, Sequence, Tuple

SEDES: Tuple[str, ...] = ("Sede Principal", "Sede Norte", "Sede Sur")

ACTIVIDADES: Tuple[str, ...] = (
    "Producción",
    "Alistamiento",
    "Mantenimiento",
    "Limpieza",
    "Reproceso",
    "Capacitación",
    "Parada",
)

ESTADOS_SCI: Tuple[str, ...] = ("Pendiente", "En proceso", "Terminado", "Suspendido")

HORARIOS: Tuple[str, ...] = ("Turno 1", "Turno 2", "Turno 3", "Administrativo")

MOTIVOS_OBSERVACION: Tuple[str, ...] = (
    "Sin novedad",
    "Falta de material",
    "Daño de máquina",
    "Cambio de referencia",
    "Falta de personal",
    "Otro",
)

# Campos validados contra su lista en el servidor. `observaciones` es texto
# libre para la API; la lista de motivos sólo la ofrece la grilla.
CATALOGOS_POR_CAMPO: Dict[str, Tuple[str, ...]] = {
    "sede": SEDES,
    "actividad": ACTIVIDADES,
    "estado_sci": ESTADOS_SCI,
    "horario": HORARIOS,
}

CATALOGOS_GRILLA: Dict[str, Tuple[str, ...]] = {**CATALOGOS_POR_CAMPO, "observaciones": MOTIVOS_OBSERVACION}


def clave_comparacion(valor: str) -> str:
    """Forma plegada de un texto: sin tildes, sin '_', espacios colapsados y en minúsculas."""
    sin_tildes = "".join(
        c for c in unicodedata.normalize("NFKD", valor) if not unicodedata.combining(c)
    )
    return " ".join(sin_tildes.replace("_", " ").split()).casefold()


def normalizar_opcion(valor: Optional[str], opciones: Sequence[str]) -> Optional[str]:
    """
    Devuelve el valor canónico de `opciones` equivalente a `valor`,
    o None si no hay coincidencia (el valor se trata como "sin selección").
    """
    if valor is None:
        return None
    buscado = clave_comparacion(str(valor))
    if not buscado:
        return None
    for opcion in opciones:
        if clave_comparacion(opcion) == buscado:
            return opcion
    return None
