import logging
from typing import Any, Dict, List, Optional, Sequence, Tuple

from bitacora.common.database import DatabaseConnector
from bitacora.common.reglas import parse_fecha, validar_intervalo

from .exceptions import FormularioNoEncontradoError, ValidacionError
from .schemas import CambiosFormulario, FormulariosPage, RefRow

logger = logging.getLogger(__name__)

TABLA_FORMULARIOS = 'public."T_Dim_Formulario2"'
TABLA_OPS = 'tablas_servicios."T_Ctrol_OP"'
TABLA_MAQUINAS = 'public."T_Dim_Maquinas"'

COLUMNAS_FORMULARIO = (
    "id",
    "cc",
    "nombres",
    "sede",
    "no_op",
    "sci_ref",
    "descripcion_referencia",
    "fecha_inicio",
    "hora_inicio",
    "fecha_final",
    "hora_final",
    "actividad",
    "cantidad",
    "estado_sci",
    "area",
    "maquina",
    "horario",
    "observaciones",
)
SELECT_FORMULARIO = ", ".join(f'"{c}"' for c in COLUMNAS_FORMULARIO)

# Columna -> cast del placeholder. El orden fija el orden del SET.
CAMPOS_ACTUALIZABLES: Dict[str, str] = {
    "nombres": "",
    "sede": "",
    "no_op": "",
    "sci_ref": "",
    "descripcion_referencia": "",
    "fecha_inicio": "::date",
    "hora_inicio": "::time",
    "fecha_final": "::date",
    "hora_final": "::time",
    "actividad": "",
    "cantidad": "::numeric",
    "estado_sci": "",
    "area": "",
    "maquina": "",
    "horario": "",
    "observaciones": "",
}
CAMPOS_INTERVALO = ("fecha_inicio", "hora_inicio", "fecha_final", "hora_final")

LIMITE_MAXIMO_LISTADO = 500
LIMITE_MAXIMO_SUGERENCIAS = 100


def _clamp(valor: Optional[int], minimo: int, maximo: Optional[int], defecto: int) -> int:
    try:
        numero = int(valor) if valor is not None else defecto
    except (TypeError, ValueError):
        numero = defecto
    numero = max(minimo, numero)
    return min(numero, maximo) if maximo is not None else numero


def _escapar_like(texto: str) -> str:
    """Escapa los comodines de LIKE para que la búsqueda sea literal."""
    return texto.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _parse_id(valor: Any) -> int:
    try:
        return int(str(valor).strip())
    except (TypeError, ValueError):
        raise ValidacionError(f"Id de formulario inválido: '{valor}'.") from None


# ------------------------------------------------------------------
# Listado
# ------------------------------------------------------------------
def construir_filtros(
    q: Optional[str] = None,
    date_from: Optional[str] = None,
    date_to: Optional[str] = None,
    id_filtro: Optional[str] = None,
    no_op: Optional[str] = None,
) -> Tuple[str, List[Any]]:
    """Devuelve la cláusula WHERE (o '') y sus parámetros para el listado."""
    conditions: List[str] = []
    params: List[Any] = []

    if id_filtro and id_filtro.strip():
        conditions.append('"id"::text ILIKE %s')
        params.append(f"%{_escapar_like(id_filtro.strip())}%")

    if no_op and no_op.strip():
        conditions.append('"no_op"::text ILIKE %s')
        params.append(f"%{_escapar_like(no_op.strip())}%")

    if q and q.strip():
        termino = q.strip()
        palabras = termino.split()
        por_nombre = " AND ".join('"nombres" ILIKE %s' for _ in palabras)
        conditions.append(f'(({por_nombre}) OR "cc"::text ILIKE %s)')
        params.extend(f"%{_escapar_like(p)}%" for p in palabras)
        params.append(f"%{_escapar_like(termino)}%")

    try:
        desde = parse_fecha(date_from)
        hasta = parse_fecha(date_to)
    except ValueError as e:
        raise ValidacionError(str(e)) from None

    if desde and hasta:
        if desde > hasta:
            desde, hasta = hasta, desde
        conditions.append('"fecha_inicio"::date >= %s AND "fecha_final"::date <= %s')
        params.extend([desde, hasta])
    elif desde:
        conditions.append('"fecha_inicio"::date >= %s')
        params.append(desde)
    elif hasta:
        conditions.append('"fecha_final"::date <= %s')
        params.append(hasta)

    where_clause = " WHERE " + " AND ".join(conditions) if conditions else ""
    return where_clause, params


def get_formularios(
    db: DatabaseConnector,
    limit: Optional[int] = 50,
    offset: Optional[int] = 0,
    q: Optional[str] = None,
    date_from: Optional[str] = None,
    date_to: Optional[str] = None,
    id_filtro: Optional[str] = None,
    no_op: Optional[str] = None,
) -> FormulariosPage:
    limit = _clamp(limit, 1, LIMITE_MAXIMO_LISTADO, 50)
    offset = _clamp(offset, 0, None, 0)
    where_clause, params = construir_filtros(q, date_from, date_to, id_filtro, no_op)

    count_query = f"SELECT COUNT(*)::int AS total FROM {TABLA_FORMULARIOS}{where_clause}"
    total_result = db.ejecutar_consulta(count_query, tuple(params), es_select=True)
    total = total_result[0]["total"] if total_result else 0

    main_query = f"""
        SELECT {SELECT_FORMULARIO}
        FROM {TABLA_FORMULARIOS}{where_clause}
        ORDER BY "id" DESC
        LIMIT %s OFFSET %s
    """
    items = db.ejecutar_consulta(main_query, tuple(params + [limit, offset]), es_select=True) or []
    return {"items": items, "count": len(items), "total": total}


def get_formulario(db: DatabaseConnector, id: Any = None, cc: Optional[str] = None) -> Optional[Dict]:
    if id is not None:
        query = f'SELECT {SELECT_FORMULARIO} FROM {TABLA_FORMULARIOS} WHERE "id" = %s'
        params: tuple = (_parse_id(id),)
    elif cc is not None and str(cc).strip():
        query = f'SELECT {SELECT_FORMULARIO} FROM {TABLA_FORMULARIOS} WHERE "cc"::text = %s ORDER BY "id" DESC LIMIT 1'
        params = (str(cc).strip(),)
    else:
        raise ValidacionError("Se requiere 'id' o 'cc' para buscar un formulario.")
    filas = db.ejecutar_consulta(query, params, es_select=True)
    return filas[0] if filas else None


# ------------------------------------------------------------------
# Referencias (base secundaria)
# ------------------------------------------------------------------
def buscar_ops(db_ref: DatabaseConnector, prefix: str, limit: Optional[int] = 10) -> List[str]:
    limit = _clamp(limit, 1, LIMITE_MAXIMO_SUGERENCIAS, 10)
    query = f"""
        SELECT DISTINCT "O.P."::text AS op
        FROM {TABLA_OPS}
        WHERE "O.P." IS NOT NULL AND "O.P."::text ILIKE %s
        ORDER BY op ASC
        LIMIT %s
    """
    filas = db_ref.ejecutar_consulta(query, (f"{_escapar_like((prefix or '').strip())}%", limit), es_select=True)
    return [f["op"] for f in filas or []]


def buscar_sci_por_op(
    db_ref: DatabaseConnector, op: str, prefix: Optional[str] = None, limit: Optional[int] = 10
) -> List[str]:
    limit = _clamp(limit, 1, LIMITE_MAXIMO_SUGERENCIAS, 10)
    conditions = ['"O.P."::text = %s', '"SCI Ref." IS NOT NULL']
    params: List[Any] = [str(op).strip()]
    if prefix and prefix.strip():
        conditions.append('CAST("SCI Ref." AS TEXT) ILIKE %s')
        params.append(f"{_escapar_like(prefix.strip())}%")
    query = f"""
        SELECT CAST("SCI Ref." AS TEXT) AS sci
        FROM {TABLA_OPS}
        WHERE {" AND ".join(conditions)}
        GROUP BY "SCI Ref."
        ORDER BY "SCI Ref." ASC
        LIMIT %s
    """
    params.append(limit)
    filas = db_ref.ejecutar_consulta(query, tuple(params), es_select=True)
    return [f["sci"] for f in filas or []]


def get_referencia(db_ref: DatabaseConnector, op: str, sci: str) -> Optional[RefRow]:
    query = f"""
        SELECT "O.P."::text AS op, CAST("SCI Ref." AS TEXT) AS sci, "Descripción Referencia" AS descripcion
        FROM {TABLA_OPS}
        WHERE "O.P."::text = %s AND CAST("SCI Ref." AS TEXT) = %s
        LIMIT 1
    """
    filas = db_ref.ejecutar_consulta(query, (str(op).strip(), str(sci).strip()), es_select=True)
    return filas[0] if filas else None


def get_areas(db_ref: DatabaseConnector) -> List[str]:
    query = f"""
        SELECT DISTINCT "ct_pn"::text AS ct_pn
        FROM {TABLA_MAQUINAS}
        WHERE "ct_pn" IS NOT NULL
        ORDER BY ct_pn ASC
    """
    return [f["ct_pn"] for f in db_ref.ejecutar_consulta(query, es_select=True) or []]


def get_maquinas_por_area(db_ref: DatabaseConnector, area: str) -> List[str]:
    query = f"""
        SELECT DISTINCT "maquina"::text AS maquina
        FROM {TABLA_MAQUINAS}
        WHERE "ct_pn"::text = %s AND "maquina" IS NOT NULL
        ORDER BY maquina ASC
    """
    return [f["maquina"] for f in db_ref.ejecutar_consulta(query, (str(area).strip(),), es_select=True) or []]


# ------------------------------------------------------------------
# Actualización
# ------------------------------------------------------------------
def preparar_cambios(db_ref: DatabaseConnector, patch: Dict[str, Any]) -> Dict[str, Any]:
    """
    Valida un patch y devuelve los cambios listos para el UPDATE, en el orden de
    CAMPOS_ACTUALIZABLES. Los pares OP/SCI y área/máquina se verifican contra la
    base de referencias; la descripción siempre sale de la tabla de OPs.
    No escribe nada.
    """
    cambios = CambiosFormulario.desde_patch(patch).campos_presentes()

    if "no_op" in cambios or "sci_ref" in cambios:
        no_op, sci_ref = cambios.get("no_op"), cambios.get("sci_ref")
        if not no_op or not sci_ref:
            raise ValidacionError("'no_op' y 'sci_ref' deben enviarse juntos.")
        referencia = get_referencia(db_ref, no_op, sci_ref)
        if referencia is None:
            raise ValidacionError(f"La combinación OP '{no_op}' / SCI '{sci_ref}' no existe en la tabla de referencias.")
        cambios["no_op"] = referencia["op"]
        cambios["sci_ref"] = referencia["sci"]
        cambios["descripcion_referencia"] = referencia["descripcion"]
    elif "descripcion_referencia" in cambios:
        logger.warning("Se descarta 'descripcion_referencia' enviada sin el par OP/SCI.")
        del cambios["descripcion_referencia"]

    if "area" in cambios or "maquina" in cambios:
        area, maquina = cambios.get("area"), cambios.get("maquina")
        if not area or not maquina:
            raise ValidacionError("'area' y 'maquina' deben enviarse juntos.")
        if maquina not in get_maquinas_por_area(db_ref, area):
            raise ValidacionError(f"La máquina '{maquina}' no pertenece al área '{area}'.")

    return {campo: cambios[campo] for campo in CAMPOS_ACTUALIZABLES if campo in cambios}


def construir_update(cambios: Dict[str, Any], id_formulario: int) -> Tuple[str, tuple]:
    """Arma `UPDATE ... SET "col" = %s[::cast], ... WHERE "id" = %s RETURNING ...` sólo con columnas conocidas."""
    set_clauses: List[str] = []
    params: List[Any] = []
    for campo, valor in cambios.items():
        cast = CAMPOS_ACTUALIZABLES.get(campo)
        if cast is None:
            raise ValidacionError(f"Campo no actualizable: '{campo}'.")
        set_clauses.append(f'"{campo}" = %s{cast}')
        params.append(valor)
    if not set_clauses:
        raise ValidacionError("No hay campos para actualizar.")

    query = (
        f"UPDATE {TABLA_FORMULARIOS} SET {', '.join(set_clauses)} "
        f'WHERE "id" = %s RETURNING {SELECT_FORMULARIO}'
    )
    params.append(id_formulario)
    return query, tuple(params)


def _validar_intervalo(cambios: Dict[str, Any], fila_actual: Dict[str, Any]):
    if not any(campo in cambios for campo in CAMPOS_INTERVALO):
        return
    valores = {campo: cambios.get(campo, fila_actual.get(campo)) for campo in CAMPOS_INTERVALO}
    try:
        resultado = validar_intervalo(**valores)
    except ValueError as e:
        raise ValidacionError(str(e)) from None
    if not resultado.es_valido:
        raise ValidacionError(resultado.mensaje)


def _bloquear_fila(cursor, id_formulario: Optional[int] = None, cc: Optional[str] = None) -> Dict[str, Any]:
    """Lee la fila objetivo con FOR UPDATE dentro de la transacción en curso."""
    if id_formulario is not None:
        cursor.execute(
            f'SELECT {SELECT_FORMULARIO} FROM {TABLA_FORMULARIOS} WHERE "id" = %s FOR UPDATE', (id_formulario,)
        )
        clave = f"id={id_formulario}"
    else:
        cursor.execute(
            f'SELECT {SELECT_FORMULARIO} FROM {TABLA_FORMULARIOS} WHERE "cc"::text = %s '
            'ORDER BY "id" DESC LIMIT 1 FOR UPDATE',
            (cc,),
        )
        clave = f"cc={cc}"
    fila = cursor.fetchone()
    if not fila:
        raise FormularioNoEncontradoError(clave)
    return dict(fila)


def _aplicar_cambios(cursor, fila_actual: Dict[str, Any], cambios: Dict[str, Any]) -> Dict[str, Any]:
    if not cambios:
        return fila_actual
    _validar_intervalo(cambios, fila_actual)
    query, params = construir_update(cambios, fila_actual["id"])
    cursor.execute(query, params)
    return dict(cursor.fetchone())


def actualizar_formulario(
    db: DatabaseConnector,
    db_ref: DatabaseConnector,
    patch: Dict[str, Any],
    id: Any = None,
    cc: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Aplica un patch parcial al formulario `id` (o al más reciente con ese `cc`).
    Sin campos reconocidos no escribe y devuelve la fila actual.
    """
    if id is None and (cc is None or not str(cc).strip()):
        raise ValidacionError("Se requiere 'id' o 'cc' para actualizar un formulario.")
    id_formulario = _parse_id(id) if id is not None else None
    cambios = preparar_cambios(db_ref, patch)

    with db.obtener_cursor() as cursor:
        fila = _bloquear_fila(cursor, id_formulario, None if id_formulario is not None else str(cc).strip())
        actualizada = _aplicar_cambios(cursor, fila, cambios)

    if cambios:
        logger.info(f"Formulario {actualizada['id']} actualizado. Campos: {', '.join(cambios)}")
    return actualizada


def actualizar_multiples_formularios(
    db: DatabaseConnector, db_ref: DatabaseConnector, updates: Sequence[Tuple[Any, Dict[str, Any]]]
) -> bool:
    """
    Aplica varios patches en una sola transacción: o se confirman todos o ninguno.
    Todos los patches se validan antes de abrir la transacción.
    """
    preparados = [(_parse_id(id_formulario), preparar_cambios(db_ref, patch)) for id_formulario, patch in updates]
    if not preparados:
        return True

    try:
        with db.obtener_cursor() as cursor:
            for id_formulario, cambios in preparados:
                fila = _bloquear_fila(cursor, id_formulario)
                _aplicar_cambios(cursor, fila, cambios)
    except Exception as e:
        logger.error(f"Lote de {len(preparados)} actualizaciones revertido: {e}")
        raise

    logger.info(f"Lote de {len(preparados)} actualizaciones confirmado.")
    return True
