from typing import Callable, Optional, Sequence

from reactpy import component, html

from ..state.grid_state import PAGE_SIZES


@component
def Paginador(
    page_info: str,
    can_prev: bool,
    can_next: bool,
    on_prev: Callable,
    on_next: Callable,
    page_size: int,
    on_page_size: Callable,
    page_sizes: Sequence[int] = PAGE_SIZES,
):
    """Anterior/siguiente por offset, resumen 'X–Y de total' y tamaño de página."""
    return html.nav(
        {"class_name": "pagination-container", "aria-label": "Paginación"},
        html.span({"class_name": "pagination-summary"}, page_info),
        html.div(
            {"role": "group", "class_name": "pagination-controls"},
            html.button(
                {
                    "class_name": "secondary outline",
                    "aria-label": "Página anterior",
                    "disabled": not can_prev,
                    "on_click": lambda e: on_prev(),
                },
                "‹ Anterior",
            ),
            html.button(
                {
                    "class_name": "secondary outline",
                    "aria-label": "Página siguiente",
                    "disabled": not can_next,
                    "on_click": lambda e: on_next(),
                },
                "Siguiente ›",
            ),
        ),
        html.select(
            {
                "aria-label": "Filas por página",
                "value": str(page_size),
                "on_change": lambda e: on_page_size(e["target"]["value"]),
            },
            [html.option({"value": str(size), "key": str(size)}, f"{size} / página") for size in page_sizes],
        ),
    )


@component
def LoadingSpinner(size: str = "medium"):
    style = {}
    if size == "small":
        style = {"width": "1.5rem", "height": "1.5rem"}
    elif size == "large":
        style = {"width": "3rem", "height": "3rem"}
    # PicoCSS dibuja el spinner con aria-busy
    return html.span({"aria-busy": "true", "style": style})


@component
def ErrorMessage(error: Optional[str]):
    if not error:
        return None
    return html.article(
        {"class_name": "error-banner", "role": "alert"},
        html.strong("Error: "),
        str(error),
    )


@component
def ThemeSwitcher(is_dark: bool, on_toggle: Callable):
    def handle_change(event):
        on_toggle(bool(event["target"]["checked"]))

    return html.label(
        {"htmlFor": "theme-switcher", "class_name": "theme-switcher"},
        html.span({"class_name": "material-symbols-outlined"}, "light_mode"),
        html.input(
            {
                "type": "checkbox",
                "id": "theme-switcher",
                "role": "switch",
                "checked": is_dark,
                "on_change": handle_change,
            }
        ),
        html.span({"class_name": "material-symbols-outlined"}, "dark_mode"),
    )


@component
def HeaderNav(theme_is_dark: bool, on_theme_toggle: Callable, on_refresh: Optional[Callable] = None, loading=False):
    return html.header(
        {"class_name": "sticky-header"},
        html.div(
            {"class_name": "container-fluid"},
            html.nav(
                html.ul(html.li(html.strong("Bitácora Formulario2"))),
                html.ul(
                    html.li(
                        html.button(
                            {
                                "class_name": "outline",
                                "on_click": lambda e: on_refresh(),
                                "disabled": loading,
                                "aria-busy": str(bool(loading)).lower(),
                                "data-tooltip": "Recargar",
                                "data-placement": "bottom",
                            },
                            html.span({"class_name": "material-symbols-outlined"}, "refresh"),
                        )
                    )
                    if on_refresh
                    else None,
                    html.li(ThemeSwitcher(is_dark=theme_is_dark, on_toggle=on_theme_toggle)),
                ),
            ),
        ),
    )


@component
def PageWithLayout(theme_is_dark: bool, on_theme_toggle: Callable, children, on_refresh=None, loading=False):
    return html._(
        HeaderNav(theme_is_dark=theme_is_dark, on_theme_toggle=on_theme_toggle, on_refresh=on_refresh, loading=loading),
        html.main({"class_name": "container-fluid"}, children),
    )
