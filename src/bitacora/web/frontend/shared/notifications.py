import asyncio
from typing import Callable

from reactpy import component, create_context, event, html, use_context, use_effect, use_state

NotificationContext = create_context(None)

DURACION_TOAST_SEG = 5

ESTILOS_TOAST = {
    "success": {"class_name": "toast-success", "icon": "✓", "aria_label": "Mensaje de éxito"},
    "error": {"class_name": "toast-error", "icon": "✕", "aria_label": "Mensaje de error"},
    "warning": {"class_name": "toast-warning", "icon": "⚠", "aria_label": "Mensaje de advertencia"},
    "info": {"class_name": "toast-info", "icon": "ℹ", "aria_label": "Mensaje informativo"},
}


@component
def Toast(message: str, style: str, on_dismiss: Callable):
    """Notificación transitoria; se descarta sola a los pocos segundos."""
    is_visible, set_is_visible = use_state(False)

    @use_effect(dependencies=[])
    def animate_in():
        set_is_visible(True)

    @use_effect(dependencies=[])
    def setup_auto_dismiss():
        dismiss_task = asyncio.create_task(dismiss_after_delay(on_dismiss))
        return lambda: dismiss_task.cancel()

    config = ESTILOS_TOAST.get(style, ESTILOS_TOAST["info"])
    class_name = f"toast {config['class_name']}" + (" show" if is_visible else "")

    attributes = {"class_name": class_name, "role": "alert", "aria-label": config["aria_label"]}
    if style == "error":
        attributes["aria-invalid"] = "true"

    return html.article(
        attributes,
        html.div(
            {"class_name": "toast-content"},
            html.span({"class_name": "toast-icon"}, config["icon"]),
            html.span({"class_name": "toast-text"}, message),
            html.button(
                {
                    "class_name": "toast-close",
                    "aria-label": "Cerrar notificación",
                    "on_click": event(lambda e: on_dismiss(), prevent_default=True),
                },
                "×",
            ),
        ),
    )


async def dismiss_after_delay(on_dismiss_callback: Callable, delay: float = DURACION_TOAST_SEG):
    await asyncio.sleep(delay)
    on_dismiss_callback()


@component
def ToastContainer():
    notification_ctx = use_context(NotificationContext)
    if not notification_ctx:
        return None

    dismiss_notification = notification_ctx["dismiss_notification"]
    return html.div(
        {"class_name": "toast-container"},
        [
            Toast(
                key=n["id"],
                message=n["message"],
                style=n["style"],
                on_dismiss=lambda nid=n["id"]: dismiss_notification(nid),
            )
            for n in notification_ctx["notifications"]
        ],
    )
