"""
Diff Editor Backend - FastAPI Application Entry Point
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from routers import config, edit, files
from services.config_manager import ConfigManager

logger = logging.getLogger("diff_editor")


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager - startup and shutdown logic"""
    config_manager = ConfigManager.get_instance()
    settings = config_manager.get_config()
    configure_logging(settings.get("logging", {}).get("level", "INFO"))
    logger.info("Starting Diff Editor Backend (config: %s)", config_manager.config_file)
    logger.info("Workspace root: %s", settings["workspace"]["root"])

    yield
    logger.info("Shutting down Diff Editor Backend")


app = FastAPI(
    title="Diff Editor Backend",
    description="Search/replace edit engine for AI-generated code changes",
    version="1.0.0",
    lifespan=lifespan,
)

# Workspace UI is served from a different origin
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(edit.router, prefix="/api/edit", tags=["edit"])
app.include_router(files.router, prefix="/api/files", tags=["files"])
app.include_router(config.router, prefix="/api/config", tags=["config"])


@app.get("/health")
async def health_check():
    """Health check endpoint"""
    return {"status": "healthy", "service": "diff-editor-backend"}


def run() -> None:
    """Console entry point"""
    import uvicorn

    server = ConfigManager.get_instance().get_config().get("server", {})
    uvicorn.run(app, host=server.get("host", "0.0.0.0"), port=int(server.get("port", 8000)))


if __name__ == "__main__":
    run()
