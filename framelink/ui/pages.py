"""Home and about pages."""

from urllib.parse import urlencode

from nicegui import ui

from framelink.ui.layout import page_header


@ui.page("/")
def home_page() -> None:
    """Landing page. The optional name is carried to the contact page."""
    with ui.column().classes("w-full max-w-3xl mx-auto app-container mt-6"):
        page_header("FrameLink Support")
        with ui.column().classes("w-full p-6 gap-4"):
            ui.label("Welcome to FrameLink Support").classes("text-2xl font-semibold")
            ui.label(
                "Ask our assistant a question or upload documents it can use to answer."
            ).classes("text-gray-600")

            name = ui.input(label="Your name (optional)").props("outlined").classes("w-full")

            def open_contact() -> None:
                username = (name.value or "").strip()
                query = f"?{urlencode({'username': username})}" if username else ""
                ui.navigate.to(f"/contact{query}")

            with ui.row().classes("gap-3"):
                ui.button("Ask a question", on_click=open_contact).props(
                    "unelevated text-color=white"
                ).classes("primary-btn")
                ui.button("Upload documents", on_click=lambda: ui.navigate.to("/upload")).props(
                    "outline"
                )


@ui.page("/about")
def about_page() -> None:
    with ui.column().classes("w-full max-w-3xl mx-auto app-container mt-6"):
        page_header("About", icon="info")
        with ui.column().classes("w-full p-6 gap-4"):
            ui.label("About This App").classes("text-2xl font-semibold")
            ui.label(
                "FrameLink Support answers questions for Centro Médico de Algés using an "
                "AI assistant grounded in the documents uploaded by the clinic."
            ).classes("text-gray-600")
            with ui.row().classes("w-full gap-6"):
                with ui.card().classes("flex-1"):
                    ui.label("Technologies Used").classes("font-semibold")
                    for item in ("FastAPI", "NiceGUI", "OpenAI Assistants", "MongoDB"):
                        ui.label(f"• {item}").classes("text-sm")
                with ui.card().classes("flex-1"):
                    ui.label("Features").classes("font-semibold")
                    for item in (
                        "Streamed answers with sources",
                        "Document upload and removal",
                        "Fallback answers when the assistant is unavailable",
                    ):
                        ui.label(f"• {item}").classes("text-sm")
            ui.link("← Back to Home", "/")
