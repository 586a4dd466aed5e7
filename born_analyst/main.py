"""Main application entry point.

Runs FastAPI (port 8000) with the NiceGUI analysis chat mounted on it.
Environment variables are loaded from .env file.
"""

import logging
import os
import sys

from dotenv import load_dotenv

# Load environment variables before any other imports that might need them
load_dotenv()

# Configure logging
logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[logging.StreamHandler(sys.stdout)],
)
logger = logging.getLogger(__name__)


def run_integrated() -> None:
    """Run FastAPI with NiceGUI mounted on the same server.

    FastAPI handles the API routes, NiceGUI handles the UI.
    Both accessible on port 8000.
    """
    import uvicorn
    from nicegui import ui

    from born_analyst.api.app import create_app
    from born_analyst.ui.chat_page import APP_TITLE, chat_page  # noqa: F401 - Registers the page

    app = create_app()

    ui.run_with(
        app,
        title=APP_TITLE,
        favicon="🏨",
        storage_secret=os.getenv("NICEGUI_STORAGE_SECRET", "born-analyst-secret"),
    )

    port = int(os.getenv("PORT", "8000"))
    logger.info(f"Starting integrated server on http://localhost:{port}")
    logger.info(f"API docs available at http://localhost:{port}/docs")
    logger.info(f"Chat UI available at http://localhost:{port}/")

    uvicorn.run(
        app,
        host=os.getenv("HOST", "0.0.0.0"),
        port=port,
        log_level=os.getenv("LOG_LEVEL", "info").lower(),
    )


def run_ui_only() -> None:
    """Run only the NiceGUI chat on port 8080, without the HTTP API."""
    from born_analyst.ui.chat_page import main as run_chat_page

    logger.info("Starting NiceGUI on http://localhost:8080")
    run_chat_page()


def main() -> None:
    """Application entry point.

    Set RUN_MODE=ui to run the chat page alone.
    Default is integrated mode (API and UI on port 8000).
    """
    mode = os.getenv("RUN_MODE", "integrated").lower()

    logger.info(f"Starting Hotel The Born AI in {mode} mode")

    if mode == "ui":
        run_ui_only()
    else:
        run_integrated()


if __name__ == "__main__":
    main()
