"""NiceGUI analysis chat page with live streaming updates."""

import html
import logging

from nicegui import events, ui

from born_analyst.agent.analyst import AnalystService
from born_analyst.agent.conversation import export_filename
from born_analyst.agent.prompts import (
    INITIAL_SUGGESTIONS,
    MISSING_KEY_NOTICE,
    SESSION_FAILED_NOTICE,
    UPDATE_ACTION,
)
from born_analyst.errors import AttachmentError, NotConfiguredError, SessionUnavailableError
from born_analyst.models.schemas import Role, Turn
from born_analyst.parsing.attachments import read_context_text
from born_analyst.parsing.markup import BlockKind, InlineSpan, RenderBlock, render_markup

logger = logging.getLogger(__name__)

APP_TITLE = "Hotel The Born AI"
CONTEXT_ACCEPT = ".csv,.txt,.json,.pdf"
UPDATE_ACCEPT = ".csv,.txt,.json,.pdf,.png,.jpg,.jpeg,.xlsx,.docx"

HEADING_CLASSES = {
    1: "text-3xl md:text-4xl font-black text-white mt-8 mb-6",
    2: "text-2xl md:text-3xl font-extrabold text-white mt-8 mb-4 border-b border-slate-700 pb-2",
    3: "text-xl md:text-2xl font-bold text-yellow-400 mt-6 mb-3 tracking-tight",
}
LIST_ITEM_CLASSES = "ml-4 list-disc text-slate-300 text-lg leading-relaxed my-2 font-medium"
ORDERED_ITEM_CLASSES = "ml-4 text-slate-300 text-lg leading-relaxed my-2 flex gap-3 font-medium"
PARAGRAPH_CLASSES = "text-slate-300 text-lg leading-relaxed mb-3 font-medium"
BOLD_CLASSES = "font-extrabold text-yellow-300 mx-1"


def spans_to_html(spans: tuple[InlineSpan, ...]) -> str:
    """Render inline spans as escaped HTML."""
    parts = []
    for span in spans:
        text = html.escape(span.text)
        if span.bold:
            parts.append(f'<strong class="{BOLD_CLASSES}">{text}</strong>')
        else:
            parts.append(text)
    return "".join(parts)


def block_to_html(block: RenderBlock) -> str:
    inner = spans_to_html(block.spans)
    match block.kind:
        case BlockKind.HEADING:
            level = block.level or 1
            return f'<h{level} class="{HEADING_CLASSES[level]}">{inner}</h{level}>'
        case BlockKind.LIST_ITEM:
            return f'<li class="{LIST_ITEM_CLASSES}">{inner}</li>'
        case BlockKind.ORDERED_ITEM:
            label = html.escape(block.label or "")
            return (
                f'<div class="{ORDERED_ITEM_CLASSES}">'
                f'<span class="font-bold text-yellow-500/80">{label}</span>'
                f"<span>{inner}</span></div>"
            )
        case BlockKind.SPACER:
            return '<div class="h-3"></div>'
        case _:
            return f'<p class="{PARAGRAPH_CLASSES}">{inner}</p>'


def markup_to_html(content: str) -> str:
    """Convert model turn content to HTML for chat display."""
    return '<div class="w-full">' + "".join(block_to_html(b) for b in render_markup(content)) + "</div>"


def user_text_to_html(content: str) -> str:
    return html.escape(content).replace("\n", "<br>")


CUSTOM_CSS = """
<link href="https://fonts.googleapis.com/css2?family=Noto+Sans+KR:wght@400;500;700;900&display=swap"
      rel="stylesheet">
<style>
    * { font-family: 'Noto Sans KR', sans-serif; }

    body { background: #0f172a; min-height: 100vh; }

    .landing {
        background: linear-gradient(135deg, #1e1b4b 0%, #0f172a 60%, #0f172a 100%);
    }

    .glass-card {
        background: rgba(255, 255, 255, 0.08);
        border: 1px solid rgba(255, 255, 255, 0.2);
        border-radius: 24px;
        backdrop-filter: blur(16px);
    }

    .message-user {
        background: #4f46e5;
        color: white;
        border-radius: 24px 24px 4px 24px;
    }

    .message-model {
        background: rgba(30, 41, 59, 0.8);
        border: 1px solid #334155;
        color: #e2e8f0;
        border-radius: 24px 24px 24px 4px;
    }

    .typing-dot {
        width: 8px; height: 8px;
        background: #818cf8;
        border-radius: 50%;
        animation: bounce 1.4s infinite ease-in-out;
    }
    .typing-dot:nth-child(2) { animation-delay: 0.15s; }
    .typing-dot:nth-child(3) { animation-delay: 0.3s; }

    @keyframes bounce {
        0%, 60%, 100% { transform: translateY(0); }
        30% { transform: translateY(-6px); }
    }

    .accent-btn { background: #facc15 !important; color: #0f172a !important; }
</style>
"""


class PageState:
    """Landing-form and navigation state for one browser client."""

    def __init__(self, api_key: str) -> None:
        self.api_key: str = api_key
        self.has_started: bool = False
        self.is_initializing: bool = False
        self.context_name: str | None = None
        self.context_text: str = ""


@ui.page("/")
async def chat_page() -> None:
    """Landing form and analysis chat."""
    ui.add_head_html(CUSTOM_CSS)
    analyst = AnalystService()
    state = PageState(analyst.config.api_key or "")
    bubbles: dict[str, ui.html] = {}

    messages_container: ui.column
    scroll_area: ui.scroll_area
    input_field: ui.input
    update_upload: ui.upload

    def show_alert(message: str) -> None:
        with ui.dialog() as dialog, ui.card().classes("bg-slate-800 text-white p-6"):
            ui.label(message).classes("text-lg font-medium")
            ui.button("확인", on_click=dialog.close).classes("accent-btn self-end")
        dialog.open()

    def render_message(turn: Turn) -> None:
        is_user = turn.role == Role.USER
        align = "justify-end" if is_user else "justify-start"
        bubble = "message-user" if is_user else "message-model"

        with ui.row().classes(f"w-full {align}"):
            with ui.element("div").classes(f"max-w-[90%] md:max-w-[75%] p-6 shadow-xl {bubble}"):
                if is_user:
                    ui.html(user_text_to_html(turn.content), sanitize=False).classes(
                        "leading-relaxed text-lg font-medium"
                    )
                else:
                    bubbles[turn.id] = ui.html(markup_to_html(turn.content), sanitize=False)

    def refresh_messages() -> None:
        messages_container.clear()
        bubbles.clear()
        with messages_container:
            for turn in analyst.store.turns:
                render_message(turn)
        scroll_area.scroll_to(percent=1.0)

    def on_turn_change(event: str, turn: Turn) -> None:
        if event == "updated" and turn.id in bubbles:
            bubbles[turn.id].set_content(markup_to_html(turn.content))
            scroll_area.scroll_to(percent=1.0)
        else:
            refresh_messages()

    unsubscribe = analyst.store.subscribe(on_turn_change)
    ui.context.client.on_disconnect(unsubscribe)

    def report_session_error(error: SessionUnavailableError) -> None:
        logger.warning(f"Session unavailable: {error}")
        show_alert(MISSING_KEY_NOTICE if isinstance(error, NotConfiguredError) else SESSION_FAILED_NOTICE)

    async def send_message(suggestion: str | None = None) -> None:
        text = suggestion if suggestion is not None else (input_field.value or "")
        if not text.strip() or analyst.is_busy:
            return
        if suggestion is None:
            input_field.value = ""
        try:
            await analyst.send(text)
        except SessionUnavailableError as e:
            report_session_error(e)

    async def handle_context_upload(e: events.UploadEventArguments) -> None:
        content = await e.file.read()
        try:
            state.context_text = read_context_text(e.file.name, content)
        except AttachmentError as err:
            logger.warning(f"Context upload rejected: {err}")
            ui.notify(str(err), type="negative")
            return
        state.context_name = e.file.name
        ui.notify(f"{e.file.name} ({len(content) / 1024:.1f} KB)", type="positive")

    async def handle_update_upload(e: events.UploadEventArguments) -> None:
        try:
            content = await e.file.read()
            await analyst.send_file_update(e.file.name, content, e.file.content_type)
        except SessionUnavailableError as err:
            report_session_error(err)
        finally:
            update_upload.reset()

    async def start_analysis() -> None:
        if not state.api_key.strip():
            show_alert(MISSING_KEY_NOTICE)
            return

        state.is_initializing = True
        try:
            await analyst.start_analysis(state.api_key, state.context_text)
            state.has_started = True
        except SessionUnavailableError as e:
            logger.error(f"Failed to start session: {e}")
            show_alert(SESSION_FAILED_NOTICE)
        finally:
            state.is_initializing = False

    def export_chat() -> None:
        if not len(analyst.store):
            return
        ui.download.content(analyst.store.export_text().encode("utf-8"), export_filename())

    async def run_suggestion(suggestion: str) -> None:
        if suggestion == UPDATE_ACTION:
            update_upload.run_method("pickFiles")
        else:
            await send_message(suggestion)

    # === Landing ===
    with (
        ui.element("div")
        .classes("landing w-full min-h-screen flex items-center justify-center p-6")
        .bind_visibility_from(state, "has_started", backward=lambda started: not started),
        ui.column().classes("glass-card max-w-lg w-full p-10 gap-8 text-white"),
    ):
        with ui.column().classes("w-full items-center gap-2"):
            ui.html(
                '<span class="text-white">Hotel </span><span class="text-yellow-400">The Born</span>',
                sanitize=False,
            ).classes("text-5xl font-extrabold tracking-tight")
            ui.label("AI Management Analysis System").classes("text-indigo-200 text-xl font-bold")

        with ui.column().classes("w-full gap-2"):
            ui.label("Gemini API Key").classes("text-xl font-bold")
            ui.input(placeholder="Enter your Gemini API Key", password=True).bind_value(
                state, "api_key"
            ).props("dark outlined").classes("w-full")
            ui.label("🔒 API Key는 현재 세션에서만 사용되며 저장되지 않습니다.").classes(
                "text-sm text-slate-300"
            )

        with ui.column().classes("w-full gap-2"):
            ui.label("Upload Analysis Data").classes("text-xl font-bold")
            ui.upload(on_upload=handle_context_upload, auto_upload=True, max_files=1).props(
                f"accept={CONTEXT_ACCEPT} dark flat bordered"
            ).classes("w-full")
            ui.label("CSV/TXT/JSON/PDF, Max size 5MB").classes("text-sm text-slate-300")

        ui.button("START ANALYSIS", on_click=start_analysis).classes(
            "accent-btn w-full py-4 text-2xl font-extrabold rounded-2xl"
        ).bind_enabled_from(
            state, "is_initializing", backward=lambda busy: not busy
        )

        ui.label("Powered by Google Gemini").classes("w-full text-center text-xs text-slate-400")

    # === Chat ===
    with (
        ui.row()
        .classes("w-full h-screen no-wrap gap-0 bg-slate-900 text-slate-100")
        .bind_visibility_from(state, "has_started"),
    ):
        update_upload = (
            ui.upload(on_upload=handle_update_upload, auto_upload=True, max_files=1)
            .props(f"accept={UPDATE_ACCEPT}")
            .classes("hidden")
        )

        # Sidebar
        with ui.column().classes("w-80 h-full bg-slate-950 border-r border-slate-800 p-6 gap-6"):
            with ui.column().classes("gap-1"):
                ui.html(
                    'Hotel <span class="text-yellow-400">The Born</span>', sanitize=False
                ).classes("text-2xl font-extrabold text-white")
                ui.label("Management Analysis AI").classes("text-sm font-bold text-indigo-400")

            ui.label("Quick Actions").classes(
                "text-sm font-bold text-yellow-400 uppercase tracking-widest"
            )
            for suggestion in INITIAL_SUGGESTIONS:
                button = ui.button(
                    suggestion,
                    on_click=lambda s=suggestion: run_suggestion(s),
                ).props("no-caps align=left").classes("w-full")
                if suggestion == UPDATE_ACTION:
                    button.classes("accent-btn")
                else:
                    button.props("outline color=grey-4")
                button.bind_enabled_from(analyst, "is_busy", backward=lambda busy: not busy)

            with ui.column().classes("w-full p-4 bg-slate-900 rounded-2xl gap-1"):
                ui.label("📊 Data Context").classes("text-base font-bold text-white")
                ui.label("• 시스템 기본 데이터 로드됨").classes("text-sm text-slate-400")
                ui.label().bind_text_from(
                    state, "context_name", backward=lambda name: f"• {name} 분석 중" if name else ""
                ).classes("text-sm font-bold text-indigo-400")
                ui.label("• 2022-2025 재무제표").classes("text-sm text-slate-400")
                ui.label("• 경쟁사 현황 분석").classes("text-sm text-slate-400")

            ui.button("대화 내용 저장 (Export)", icon="download", on_click=export_chat).props(
                "outline color=grey-4 no-caps"
            ).classes("w-full")

        # Messages and input
        with ui.column().classes("flex-grow h-full gap-0"):
            with ui.scroll_area().classes("flex-grow w-full p-4 md:p-8") as scroll_area:
                messages_container = ui.column().classes("w-full gap-8")
                with (
                    ui.row()
                    .classes("w-full justify-start pt-8")
                    .bind_visibility_from(analyst, "is_busy"),
                    ui.element("div").classes("message-model px-5 py-4"),
                    ui.row().classes("gap-1 items-center"),
                ):
                    for _ in range(3):
                        ui.element("div").classes("typing-dot")

            with ui.column().classes("w-full p-6 bg-slate-950 border-t border-slate-800 gap-2"):
                with ui.row().classes("w-full items-center gap-4 no-wrap"):
                    input_field = (
                        ui.input(placeholder="경영 분석, 가격 책정, 전략에 대해 질문하세요...")
                        .props("dark outlined")
                        .classes("flex-grow text-lg")
                        .on("keydown.enter", lambda: send_message())
                        .bind_enabled_from(analyst, "is_busy", backward=lambda busy: not busy)
                    )
                    ui.button(icon="send", on_click=lambda: send_message()).props(
                        "round unelevated size=lg"
                    ).classes("accent-btn").bind_enabled_from(
                        analyst, "is_busy", backward=lambda busy: not busy
                    )
                ui.label(
                    "AI는 실수를 할 수 있습니다. 중요한 경영 의사결정 시 실제 데이터를 다시 확인하세요."
                ).classes("w-full text-center text-xs font-semibold text-slate-600")

    refresh_messages()

    if await analyst.auto_start():
        state.has_started = True


def main() -> None:
    ui.run(title=APP_TITLE, port=8080, reload=False)


if __name__ == "__main__":
    main()
