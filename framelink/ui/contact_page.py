"""NiceGUI contact page with streamed answers."""

import uuid
from datetime import datetime

from nicegui import ui

from framelink.models.schemas import Citation
from framelink.ui.api_client import ask_question
from framelink.ui.layout import FormState, page_header, status_banner


class Conversation:
    """Question/answer history for one visitor session."""

    def __init__(self, username: str = "") -> None:
        self.username = username
        self.items: list[dict] = []
        self.state = FormState.IDLE
        self.message = ""
        self.current_question = ""
        self.current_answer = ""

    def add(self, question: str, answer: str, citations: list[Citation]) -> None:
        self.items.append({
            "id": str(uuid.uuid4()),
            "question": question,
            "answer": answer,
            "citations": citations,
            "time": datetime.now().strftime("%I:%M %p"),
        })


def citation_label(index: int, citation: Citation) -> str:
    source = citation.display_name or citation.file_id
    excerpt = citation.quote or citation.text
    return f"[{index}] {source} - {excerpt}" if excerpt else f"[{index}] {source}"


@ui.page("/contact")
def contact_page(username: str = "") -> None:
    """Support Q&A page. ``username`` comes from the home page link."""
    conversation = Conversation(username)

    input_field: ui.textarea
    submit_btn: ui.button

    def render_exchange(question: str, answer: str, citations: list[Citation]) -> None:
        with ui.row().classes("w-full justify-end"):
            with ui.element("div").classes("max-w-[75%] px-4 py-3 message-user"):
                ui.label("You").classes("text-xs font-medium opacity-80")
                ui.label(question).classes("text-sm whitespace-pre-wrap")
        with ui.row().classes("w-full justify-start"):
            with ui.element("div").classes("max-w-[75%] px-4 py-3 message-assistant"):
                ui.label("FrameLink Assistant").classes("text-xs font-medium text-indigo-600")
                ui.markdown(answer).classes("text-sm")
                if citations:
                    ui.separator()
                    ui.label("Sources:").classes("text-xs font-semibold text-gray-600")
                    for i, citation in enumerate(citations, start=1):
                        ui.label(citation_label(i, citation)).classes("text-xs text-gray-500")

    @ui.refreshable
    def render_conversation() -> None:
        if not conversation.items and conversation.state is not FormState.SUBMITTING:
            with ui.column().classes("w-full h-64 items-center justify-center gap-3"):
                ui.icon("forum").classes("text-5xl text-gray-300")
                ui.label(
                    "Ask a question above and the conversation will appear here."
                ).classes("text-gray-400")
            return

        for item in conversation.items:
            render_exchange(item["question"], item["answer"], item["citations"])

        if conversation.state is FormState.SUBMITTING:
            with ui.row().classes("w-full justify-end"):
                with ui.element("div").classes("max-w-[75%] px-4 py-3 message-user"):
                    ui.label(conversation.current_question).classes("text-sm whitespace-pre-wrap")
            with ui.row().classes("w-full justify-start"):
                with ui.element("div").classes("max-w-[75%] px-4 py-3 message-assistant"):
                    if conversation.current_answer:
                        ui.markdown(conversation.current_answer).classes("text-sm")
                    else:
                        with ui.row().classes("items-center gap-2"):
                            ui.spinner(size="sm")
                            ui.label("Generating answer...").classes("text-sm text-gray-500 italic")

    @ui.refreshable
    def render_status() -> None:
        status_banner(conversation.state, conversation.message)

    def finish(state: FormState, message: str) -> None:
        conversation.state = state
        conversation.message = message
        conversation.current_question = ""
        conversation.current_answer = ""
        submit_btn.enable()
        render_conversation.refresh()
        render_status.refresh()

    async def submit() -> None:
        question = (input_field.value or "").strip()
        if not question or conversation.state is FormState.SUBMITTING:
            return

        input_field.value = ""
        submit_btn.disable()
        conversation.state = FormState.SUBMITTING
        conversation.message = ""
        conversation.current_question = question
        conversation.current_answer = ""
        render_conversation.refresh()
        render_status.refresh()

        def on_delta(content: str) -> None:
            conversation.current_answer += content
            render_conversation.refresh()

        def on_done(answer: str, citations: list[Citation]) -> None:
            conversation.add(question, answer, citations)
            finish(FormState.SUCCESS, "Your question has been answered!")

        def on_error(error: str) -> None:
            finish(FormState.ERROR, f"Error: {error}")
            ui.notify(error, type="negative")

        await ask_question(question, conversation.username or None, on_delta, on_done, on_error)

    # === UI Layout ===
    with ui.column().classes("w-full max-w-4xl mx-auto app-container mt-6"):
        page_header("FrameLink Support - Centro Médico de Algés")
        with ui.column().classes("w-full p-5 gap-4"):
            if username:
                ui.label(f"Welcome {username}!").classes("text-xl font-semibold text-gray-800")

            with ui.row().classes("w-full gap-4 items-end no-wrap"):
                input_field = (
                    ui.textarea(label="Question", placeholder="Enter your question")
                    .props("outlined autogrow rows=3")
                    .classes("flex-grow")
                )
                submit_btn = (
                    ui.button("Submit", on_click=submit)
                    .props("unelevated color=white text-color=white")
                    .classes("primary-btn")
                )

            ui.label("Conversation").classes("text-sm font-medium text-gray-700")
            with ui.scroll_area().classes("w-full h-[600px] bg-gray-50 rounded-md border"):
                with ui.column().classes("w-full p-4 gap-4"):
                    render_conversation()

            render_status()
