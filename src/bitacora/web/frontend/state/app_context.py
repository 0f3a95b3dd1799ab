"""
Contexto global de la grilla: comparte el cliente de la API con hooks y modales.

    return AppContext(children, value={"api_client": get_api_client()})
    ...
    api_client = use_app_context()["api_client"]
"""

from typing import Any, Dict

from reactpy import create_context, use_context

AppContext = create_context({})


def use_app_context() -> Dict[str, Any]:
    return use_context(AppContext) or {}
