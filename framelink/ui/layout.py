"""Shared look and form state for the NiceGUI pages."""

from enum import Enum

from nicegui import ui

CUSTOM_CSS = """
<link href="https://fonts.googleapis.com/css2?family=Inter:wght@400;500;600&display=swap"
      rel="stylesheet">
<style>
    * { font-family: 'Inter', sans-serif; }

    body { background: #f5f5f5; min-height: 100vh; }

    .app-container {
        background: white;
        border-radius: 12px;
        box-shadow: 0 2px 8px rgba(0, 0, 0, 0.1);
        overflow: hidden;
    }

    .header { background: linear-gradient(135deg, #667eea 0%, #764ba2 100%); }

    .message-user {
        background: linear-gradient(135deg, #667eea 0%, #764ba2 100%);
        color: white;
        border-radius: 18px 18px 4px 18px;
    }

    .message-assistant {
        background: #f3f4f6;
        color: #1f2937;
        border-radius: 18px 18px 18px 4px;
    }

    .primary-btn { background: linear-gradient(135deg, #667eea 0%, #764ba2 100%) !important; }
</style>
"""

NAV_LINKS = (
    ("Home", "/"),
    ("Contact", "/contact"),
    ("Upload", "/upload"),
    ("About", "/about"),
)


class FormState(str, Enum):
    """Lifecycle of a form submission: idle -> submitting -> success | error."""

    IDLE = "idle"
    SUBMITTING = "submitting"
    SUCCESS = "success"
    ERROR = "error"


def page_header(title: str, icon: str = "support_agent") -> None:
    """Render the gradient header bar with navigation links."""
    ui.add_head_html(CUSTOM_CSS)
    with ui.row().classes("w-full header px-5 py-4 items-center justify-between"):
        with ui.row().classes("items-center gap-3"):
            ui.icon(icon).classes("text-white text-3xl")
            ui.label(title).classes("text-lg font-semibold text-white")
        with ui.row().classes("items-center gap-4"):
            for label, href in NAV_LINKS:
                ui.link(label, href).classes("text-white/90 text-sm no-underline")


def status_banner(state: FormState, message: str) -> None:
    """Render the outcome message of the last submission."""
    if state not in (FormState.SUCCESS, FormState.ERROR) or not message:
        return
    success = state is FormState.SUCCESS
    color = "bg-green-100 text-green-700" if success else "bg-red-100 text-red-700"
    ui.label(message).classes(f"w-full p-3 rounded-md {color}")
