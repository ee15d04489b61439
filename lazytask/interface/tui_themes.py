"""Dashboard colour themes."""

from typing import Dict

from prompt_toolkit.styles import Style


THEMES: Dict[str, Dict[str, str]] = {
    "dark-olive": {
        "": "#d7dfe6",
        "text": "#d7dfe6",
        "text.dim": "#97a0a9",
        "dim": "#5c6168",
        "header": "#ffb347 bold",
        "footer": "#97a0a9",
        "title": "#e5c07b bold",
        "border": "#4b525a",
        "border.focused": "#9ad974 bold",
        "border.modal": "#c678dd bold",
        "selected": "bg:#3b3b3b #d7dfe6 bold",
        "marked": "#61afef bold",
        "status.todo": "#97a0a9",
        "status.active": "#e5c07b bold",
        "status.done": "#9ad974 bold",
        "priority.low": "#7a7f85",
        "priority.medium": "#61afef",
        "priority.high": "#e5c07b bold",
        "priority.critical": "#e06c75 bold",
        "overdue": "#ff5156 bold",
        "message.info": "#9ad974",
        "message.error": "#ff5156 bold",
        "input": "#ffffff bold",
    },
    "dark-contrast": {
        "": "#e8eaec",
        "text": "#e8eaec",
        "text.dim": "#a7b0ba",
        "dim": "#6f757d",
        "header": "#ffb347 bold",
        "footer": "#a7b0ba",
        "title": "#f0c674 bold",
        "border": "#5a6169",
        "border.focused": "#b8f171 bold",
        "border.modal": "#d19aff bold",
        "selected": "bg:#3d4047 #e8eaec bold",
        "marked": "#7cc4ff bold",
        "status.todo": "#a7b0ba",
        "status.active": "#f0c674 bold",
        "status.done": "#b8f171 bold",
        "priority.low": "#8a9097",
        "priority.medium": "#7cc4ff",
        "priority.high": "#f0c674 bold",
        "priority.critical": "#ff6b6b bold",
        "overdue": "#ff5156 bold",
        "message.info": "#b8f171",
        "message.error": "#ff6b6b bold",
        "input": "#ffffff bold",
    },
}

DEFAULT_THEME = "dark-olive"


def get_theme_palette(theme: str) -> Dict[str, str]:
    """Get theme palette, falling back to default if theme not found."""
    base = THEMES.get(theme)
    if not base:
        base = THEMES[DEFAULT_THEME]
    return dict(base)


def build_style(theme: str) -> Style:
    return Style.from_dict(get_theme_palette(theme))
