"""NiceGUI upload page: send documents to the assistant and manage them."""

from nicegui import events, ui

from framelink.models.schemas import UploadedFileSummary
from framelink.ui.api_client import ApiError, delete_document, list_documents, upload_document
from framelink.ui.layout import FormState, page_header, status_banner
from framelink.uploads.validation import ALLOWED_CONTENT_TYPES


@ui.page("/upload")
async def upload_page() -> None:
    """Upload form plus the list of uploaded files."""
    state = {"form": FormState.IDLE, "message": ""}
    files: list[UploadedFileSummary] = []

    @ui.refreshable
    def render_status() -> None:
        status_banner(state["form"], state["message"])

    @ui.refreshable
    def render_files() -> None:
        if not files:
            ui.label("No files uploaded yet.").classes("text-gray-400")
            return
        for item in files:
            cache = item.metadata_cache
            with ui.row().classes("w-full items-center justify-between border-b py-2"):
                with ui.column().classes("gap-0"):
                    ui.label(cache.display_name if cache else item.original_filename).classes(
                        "text-sm font-medium"
                    )
                    details = [item.openai_file_id, item.uploaded_at.strftime("%Y-%m-%d %H:%M")]
                    if cache:
                        details[:0] = [cache.type_display, cache.size_formatted]
                    ui.label(" · ".join(details)).classes("text-xs text-gray-500")
                ui.button(
                    icon="delete",
                    on_click=lambda _, f=item: remove(f),
                ).props("flat round color=negative")

    async def refresh_files() -> None:
        try:
            listing = await list_documents()
        except ApiError as e:
            ui.notify(f"Could not load files: {e.detail}", type="warning")
            return
        files[:] = listing.files
        render_files.refresh()

    def set_state(form: FormState, message: str) -> None:
        state["form"] = form
        state["message"] = message
        render_status.refresh()

    async def handle_upload(e: events.UploadEventArguments) -> None:
        set_state(FormState.SUBMITTING, "")
        try:
            content = await e.file.read()
            result = await upload_document(e.file.name, content, e.file.content_type)
        except ApiError as err:
            set_state(FormState.ERROR, f"Error: {err.detail}")
            return
        finally:
            uploader.reset()
        set_state(
            FormState.SUCCESS,
            f"File uploaded successfully! OpenAI File ID: {result.file_id}",
        )
        await refresh_files()

    async def remove(item: UploadedFileSummary) -> None:
        try:
            await delete_document(item.id, item.openai_file_id)
        except ApiError as err:
            ui.notify(f"Delete failed: {err.detail}", type="negative")
            return
        ui.notify(f"Deleted {item.original_filename}", type="positive")
        await refresh_files()

    # === UI Layout ===
    with ui.column().classes("w-full max-w-4xl mx-auto app-container mt-6"):
        page_header("Upload Documents", icon="upload_file")
        with ui.column().classes("w-full p-5 gap-4"):
            ui.label(
                "Documents uploaded here are searched by the assistant when it answers "
                "contact questions."
            ).classes("text-sm text-gray-600")
            uploader = (
                ui.upload(label="Choose a file", on_upload=handle_upload, auto_upload=True)
                .props(f'accept="{",".join(ALLOWED_CONTENT_TYPES)}"')
                .classes("w-full")
            )
            render_status()
            ui.label("Uploaded Files").classes("text-lg font-semibold mt-4")
            with ui.column().classes("w-full gap-0"):
                render_files()

    await refresh_files()
