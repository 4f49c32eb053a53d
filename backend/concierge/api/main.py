"""FastAPI application factory."""
import logging
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from concierge import __version__
from concierge.api.routes import router
from concierge.config import Settings, configure_logging
from concierge.core.orchestrator import AgentOrchestrator

logger = logging.getLogger(__name__)


def create_app(
    settings: Optional[Settings] = None,
    orchestrator: Optional[AgentOrchestrator] = None,
) -> FastAPI:
    """Build the API app around an explicitly constructed orchestrator"""
    settings = settings or Settings()
    app = FastAPI(title="Advisor Concierge", version=__version__)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.state.settings = settings
    app.state.orchestrator = orchestrator or AgentOrchestrator.from_settings(settings)
    app.include_router(router)

    logger.info(f"🚀 API ready (v{__version__})")
    return app


def main():
    import uvicorn

    settings = Settings()
    configure_logging(settings.log_level)
    uvicorn.run(create_app(settings), host=settings.api_host, port=settings.api_port)


if __name__ == "__main__":
    main()
