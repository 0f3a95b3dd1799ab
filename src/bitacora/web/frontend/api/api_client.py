from typing import Any, Dict, List, Optional

import httpx

from bitacora.common.config_manager import ConfigManager

from ..utils.exceptions import APIException

CAMPOS_FORMULARIO = """
    id cc nombres actividad sede fecha_inicio fecha_final hora_inicio hora_final
    no_op sci_ref descripcion_referencia cantidad estado_sci area maquina horario observaciones
"""

QUERY_FORMULARIOS = f"""
query Formularios($limit: Int, $offset: Int, $q: String, $dateFrom: String, $dateTo: String,
                  $id: String, $no_op: String) {{
  formularios(limit: $limit, offset: $offset, q: $q, dateFrom: $dateFrom, dateTo: $dateTo,
              id: $id, no_op: $no_op) {{
    items {{ {CAMPOS_FORMULARIO} }}
    count
    total
  }}
}}
"""

QUERY_BUSCAR_OPS = """
query BuscarOps($prefix: String!, $limit: Int) { buscarOpsExcel(prefix: $prefix, limit: $limit) }
"""

QUERY_BUSCAR_SCI = """
query BuscarSci($op: String!, $prefix: String, $limit: Int) {
  buscarSciPorOp(op: $op, prefix: $prefix, limit: $limit)
}
"""

QUERY_REF = """
query Ref($op: String!, $sci: String!) { refPorOpSci(op: $op, sci: $sci) { op sci descripcion } }
"""

QUERY_AREAS = "query Areas { ctpnList }"

QUERY_MAQUINAS = "query Maquinas($ctpn: String!) { maquinasPorCtpn(ctpn: $ctpn) }"

MUTATION_UPDATE = f"""
mutation Update($id: ID!, $patch: FormularioPatch!) {{
  updateFormulario(id: $id, patch: $patch) {{ {CAMPOS_FORMULARIO} }}
}}
"""


class ApiClient:
    """
    Cliente de la grilla contra /graphql del mismo servicio.
    No reintenta: un fallo se informa al usuario y la celda se revierte.
    """

    def __init__(self, base_url: Optional[str] = None, timeout: Optional[float] = None):
        web_config = ConfigManager.get_interfaz_web_config()
        self.base_url = base_url or web_config["api_base_url"]
        self.timeout = timeout or web_config["api_timeout_seg"]
        self._client: Optional[httpx.AsyncClient] = None

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.base_url, timeout=self.timeout, headers={"Content-Type": "application/json"}
            )
        return self._client

    async def _request(self, query: str, variables: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """Envía una operación GraphQL y devuelve `data`; los errores GraphQL se unen con ' | '."""
        client = self._get_client()
        try:
            response = await client.post("/graphql", json={"query": query, "variables": variables or {}})
        except httpx.RequestError as e:
            raise APIException(f"Error de conexión: {e}") from e

        try:
            payload = response.json()
        except ValueError:
            payload = None

        if not isinstance(payload, dict):
            detalle = response.text[:200] if response.text else f"Error HTTP {response.status_code}"
            raise APIException(f"Respuesta inválida del servidor: {detalle}", status_code=response.status_code)

        errores = payload.get("errors") or []
        if errores:
            mensajes = " | ".join(e.get("message", "Error desconocido") for e in errores)
            codigos = [(e.get("extensions") or {}).get("code", "") for e in errores]
            raise APIException(mensajes, status_code=response.status_code if response.status_code >= 400 else None, codes=codigos)

        if response.status_code >= 400:
            detalle = payload.get("detail", f"Error HTTP {response.status_code}")
            raise APIException(str(detalle), status_code=response.status_code)

        return payload.get("data") or {}

    # Formularios
    async def get_formularios(self, variables: Dict[str, Any]) -> Dict[str, Any]:
        data = await self._request(QUERY_FORMULARIOS, variables)
        resultado = data.get("formularios") or {}
        return {
            "items": resultado.get("items", []),
            "count": resultado.get("count", 0),
            "total": resultado.get("total", 0),
        }

    async def update_formulario(self, formulario_id: Any, patch: Dict[str, Any]) -> Dict[str, Any]:
        data = await self._request(MUTATION_UPDATE, {"id": str(formulario_id), "patch": patch})
        return data.get("updateFormulario") or {}

    # Referencias
    async def buscar_ops(self, prefix: str, limit: int = 10) -> List[str]:
        data = await self._request(QUERY_BUSCAR_OPS, {"prefix": prefix, "limit": limit})
        return data.get("buscarOpsExcel") or []

    async def buscar_sci_por_op(self, op: str, prefix: Optional[str] = None, limit: int = 10) -> List[str]:
        data = await self._request(QUERY_BUSCAR_SCI, {"op": op, "prefix": prefix, "limit": limit})
        return data.get("buscarSciPorOp") or []

    async def ref_por_op_sci(self, op: str, sci: str) -> Optional[Dict[str, Any]]:
        data = await self._request(QUERY_REF, {"op": op, "sci": sci})
        return data.get("refPorOpSci")

    async def get_areas(self) -> List[str]:
        data = await self._request(QUERY_AREAS)
        return data.get("ctpnList") or []

    async def get_maquinas(self, area: str) -> List[str]:
        data = await self._request(QUERY_MAQUINAS, {"ctpn": area})
        return data.get("maquinasPorCtpn") or []

    async def close(self):
        if self._client:
            await self._client.aclose()
            self._client = None


_api_client_instance: Optional[ApiClient] = None


def get_api_client() -> ApiClient:
    """Instancia compartida del cliente para toda la aplicación."""
    global _api_client_instance
    if _api_client_instance is None:
        _api_client_instance = ApiClient()
    return _api_client_instance
