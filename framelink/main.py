"""Main application entry point.

Runs FastAPI (port 8000) with the NiceGUI pages mounted on the same server.
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

APP_TITLE = "FrameLink Support"


def register_pages() -> None:
    """Import the page modules and install the error pages on the NiceGUI app."""
    from nicegui import app as nicegui_app

    from framelink.api.errors import register_exception_handlers
    from framelink.ui import contact_page, pages, upload_page  # noqa: F401 - Registers the pages

    register_exception_handlers(nicegui_app)


def run_integrated() -> None:
    """Run FastAPI with NiceGUI mounted on the same server.

    FastAPI handles /api routes, NiceGUI handles the pages.
    Both accessible on port 8000.
    """
    import uvicorn
    from nicegui import ui

    from framelink.api.app import create_app

    app = create_app()
    register_pages()

    # Mount NiceGUI onto FastAPI
    ui.run_with(
        app,
        title=APP_TITLE,
        storage_secret=os.getenv("NICEGUI_STORAGE_SECRET", "framelink-support-secret"),
    )

    logger.info("Starting integrated server on http://localhost:8000")
    logger.info("API docs available at http://localhost:8000/docs")

    uvicorn.run(
        app,
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "8000")),
        log_level=os.getenv("LOG_LEVEL", "info").lower(),
    )


def run_ui() -> None:
    """Run only the NiceGUI pages on port 8080, talking to API_BASE_URL."""
    from nicegui import ui

    register_pages()
    ui.run(
        title=APP_TITLE,
        port=int(os.getenv("UI_PORT", "8080")),
        reload=False,
        storage_secret=os.getenv("NICEGUI_STORAGE_SECRET", "framelink-support-secret"),
    )


def run_separate() -> None:
    """Run FastAPI and NiceGUI as separate servers.

    FastAPI on port 8000, NiceGUI on port 8080.
    Useful for development or when you need separate scaling.
    """
    import asyncio
    import subprocess

    async def run_servers() -> None:
        logger.info("Starting FastAPI on http://localhost:8000")
        logger.info("Starting NiceGUI on http://localhost:8080")

        fastapi_proc = subprocess.Popen(
            [
                sys.executable,
                "-m",
                "uvicorn",
                "framelink.api.app:app",
                "--host",
                os.getenv("HOST", "0.0.0.0"),
                "--port",
                "8000",
                "--reload",
            ]
        )

        nicegui_proc = subprocess.Popen(
            [sys.executable, "-m", "framelink.main"],
            env={**os.environ, "RUN_MODE": "ui"},
        )

        try:
            while True:
                await asyncio.sleep(1)
                if fastapi_proc.poll() is not None or nicegui_proc.poll() is not None:
                    break
        except KeyboardInterrupt:
            logger.info("Shutting down servers...")
        finally:
            fastapi_proc.terminate()
            nicegui_proc.terminate()
            fastapi_proc.wait()
            nicegui_proc.wait()

    asyncio.run(run_servers())


def main() -> None:
    """Application entry point.

    RUN_MODE selects the layout: "integrated" (default, one server on port
    8000), "separate" (API on 8000, pages on 8080) or "ui" (pages only).
    """
    mode = os.getenv("RUN_MODE", "integrated").lower()

    logger.info(f"Starting FrameLink Support in {mode} mode")

    if mode == "separate":
        run_separate()
    elif mode == "ui":
        run_ui()
    else:
        run_integrated()


if __name__ == "__main__":
    main()
