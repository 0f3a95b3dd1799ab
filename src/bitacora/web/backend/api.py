import asyncio
import logging
from typing import Annotated, Any, Dict, List, NoReturn, Optional

import psycopg2
import strawberry
from fastapi import Depends
from graphql import GraphQLError
from psycopg2 import pool
from strawberry.fastapi import GraphQLRouter
from strawberry.schema.config import StrawberryConfig
from strawberry.types import Info

from bitacora.common.database import DatabaseConnector

from . import database as db_service
from .dependencies import get_db_formularios, get_db_referencias
from .exceptions import FormularioNoEncontradoError
from .graphql_types import Formulario, FormularioPatch, FormulariosResult, RefRow, UpdateInput

logger = logging.getLogger(__name__)


# ------------------------------------------------------------------
# Mapeo centralizado de errores
# ------------------------------------------------------------------
def _manejar_error(operacion: str, e: Exception) -> NoReturn:
    """
    Traduce cualquier excepción de un resolver a un GraphQLError con `extensions.code`.
    Los errores del cliente se registran como WARNING; el resto con traceback.
    """
    if isinstance(e, GraphQLError):
        raise e

    if isinstance(e, FormularioNoEncontradoError):
        logger.warning("%s: %s -> NOT_FOUND", operacion, e)
        raise GraphQLError(str(e), extensions={"code": "NOT_FOUND"})

    if isinstance(e, ValueError):
        logger.warning("%s: validación rechazada -> BAD_USER_INPUT: %s", operacion, e)
        raise GraphQLError(str(e), extensions={"code": "BAD_USER_INPUT"})

    if isinstance(e, (psycopg2.DataError, psycopg2.IntegrityError)):
        detalle = str(e).strip().splitlines()[0] if str(e).strip() else type(e).__name__
        logger.warning("%s: dato rechazado por la BD -> BAD_USER_INPUT: %s", operacion, detalle)
        raise GraphQLError(f"Dato rechazado por la base de datos: {detalle}", extensions={"code": "BAD_USER_INPUT"})

    if isinstance(e, (psycopg2.OperationalError, psycopg2.InterfaceError, pool.PoolError)):
        logger.error("%s: base de datos no disponible -> DB_UNAVAILABLE: %s", operacion, e)
        raise GraphQLError("Base de datos no disponible.", extensions={"code": "DB_UNAVAILABLE"})

    logger.error("%s: error inesperado -> INTERNAL_SERVER_ERROR: %s", operacion, e, exc_info=True)
    raise GraphQLError("Error interno del servidor.", extensions={"code": "INTERNAL_SERVER_ERROR"})


def _db(info: Info) -> DatabaseConnector:
    return info.context["db_formularios"]


def _db_ref(info: Info) -> DatabaseConnector:
    return info.context["db_referencias"]


# ------------------------------------------------------------------
# Query
# ------------------------------------------------------------------
@strawberry.type
class Query:
    @strawberry.field(description="Listado paginado de formularios, del más reciente al más antiguo.")
    async def formularios(
        self,
        info: Info,
        limit: Optional[int] = 50,
        offset: Optional[int] = 0,
        q: Optional[str] = None,
        date_from: Annotated[Optional[str], strawberry.argument(name="dateFrom")] = None,
        date_to: Annotated[Optional[str], strawberry.argument(name="dateTo")] = None,
        id_filtro: Annotated[Optional[str], strawberry.argument(name="id")] = None,
        no_op: Optional[str] = None,
    ) -> FormulariosResult:
        try:
            pagina = await asyncio.to_thread(
                db_service.get_formularios, _db(info), limit, offset, q, date_from, date_to, id_filtro, no_op
            )
        except Exception as e:
            _manejar_error("formularios", e)
        return FormulariosResult(
            items=[Formulario.from_row(f) for f in pagina["items"]], count=pagina["count"], total=pagina["total"]
        )

    @strawberry.field
    async def formulario(
        self, info: Info, id: Optional[strawberry.ID] = None, cc: Optional[str] = None
    ) -> Optional[Formulario]:
        try:
            fila = await asyncio.to_thread(db_service.get_formulario, _db(info), id, cc)
        except Exception as e:
            _manejar_error("formulario", e)
        return Formulario.from_row(fila) if fila else None

    @strawberry.field(name="buscarOpsExcel")
    async def buscar_ops_excel(self, info: Info, prefix: str, limit: Optional[int] = 10) -> List[str]:
        try:
            return await asyncio.to_thread(db_service.buscar_ops, _db_ref(info), prefix, limit)
        except Exception as e:
            _manejar_error("buscarOpsExcel", e)

    @strawberry.field(name="buscarSciPorOp")
    async def buscar_sci_por_op(
        self, info: Info, op: str, prefix: Optional[str] = None, limit: Optional[int] = 10
    ) -> List[str]:
        try:
            return await asyncio.to_thread(db_service.buscar_sci_por_op, _db_ref(info), op, prefix, limit)
        except Exception as e:
            _manejar_error("buscarSciPorOp", e)

    @strawberry.field(name="refPorOpSci")
    async def ref_por_op_sci(self, info: Info, op: str, sci: str) -> Optional[RefRow]:
        try:
            ref = await asyncio.to_thread(db_service.get_referencia, _db_ref(info), op, sci)
        except Exception as e:
            _manejar_error("refPorOpSci", e)
        return RefRow(op=ref["op"], sci=ref["sci"], descripcion=ref.get("descripcion")) if ref else None

    @strawberry.field(name="ctpnList")
    async def ctpn_list(self, info: Info) -> List[str]:
        try:
            return await asyncio.to_thread(db_service.get_areas, _db_ref(info))
        except Exception as e:
            _manejar_error("ctpnList", e)

    @strawberry.field(name="maquinasPorCtpn")
    async def maquinas_por_ctpn(self, info: Info, ctpn: str) -> List[str]:
        try:
            return await asyncio.to_thread(db_service.get_maquinas_por_area, _db_ref(info), ctpn)
        except Exception as e:
            _manejar_error("maquinasPorCtpn", e)


# ------------------------------------------------------------------
# Mutation
# ------------------------------------------------------------------
@strawberry.type
class Mutation:
    @strawberry.mutation(name="updateFormulario")
    async def update_formulario(
        self,
        info: Info,
        patch: FormularioPatch,
        id: Optional[strawberry.ID] = None,
        cc: Optional[str] = None,
    ) -> Optional[Formulario]:
        try:
            fila = await asyncio.to_thread(
                db_service.actualizar_formulario, _db(info), _db_ref(info), patch.a_dict(), id, cc
            )
        except Exception as e:
            _manejar_error("updateFormulario", e)
        return Formulario.from_row(fila)

    @strawberry.mutation(name="updateMultiplesFormularios")
    async def update_multiples_formularios(self, info: Info, updates: List[UpdateInput]) -> bool:
        lote = [(u.id, u.patch.a_dict()) for u in updates]
        try:
            return await asyncio.to_thread(db_service.actualizar_multiples_formularios, _db(info), _db_ref(info), lote)
        except Exception as e:
            _manejar_error("updateMultiplesFormularios", e)


schema = strawberry.Schema(query=Query, mutation=Mutation, config=StrawberryConfig(auto_camel_case=False))


async def get_context(
    db_formularios: DatabaseConnector = Depends(get_db_formularios),
    db_referencias: DatabaseConnector = Depends(get_db_referencias),
) -> Dict[str, Any]:
    return {"db_formularios": db_formularios, "db_referencias": db_referencias}


router = GraphQLRouter(schema, context_getter=get_context)
