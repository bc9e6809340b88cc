"""FastAPI application entry point."""

from dotenv import load_dotenv
from fastapi import FastAPI

from common.config import PipelineConfig, get_config, set_config
from feed_db.connection import configure, init_db
from news_api.errors import register_error_handlers
from news_api.routers import articles, cron, health, sources, topics

load_dotenv()


def create_app(config: PipelineConfig | None = None) -> FastAPI:
    """Build the app, binding config and the database engine once."""
    if config is not None:
        set_config(config)
    config = get_config()
    configure(config.database)
    init_db()

    app = FastAPI(
        title="PulseReader API",
        description="Personalized news feed built from RSS sources",
        version="1.0.0",
    )

    register_error_handlers(app)

    app.include_router(health.router)
    app.include_router(articles.router)
    app.include_router(topics.router)
    app.include_router(sources.router)
    app.include_router(cron.router)

    @app.get("/")
    def root():
        """API root - returns basic info."""
        return {
            "name": "PulseReader API",
            "version": "1.0.0",
            "docs": "/docs",
        }

    return app


def main():
    """Run the API server."""
    import uvicorn

    config = get_config()
    uvicorn.run(
        "news_api.main:create_app",
        factory=True,
        host=config.api.host,
        port=config.api.port,
    )


if __name__ == "__main__":
    main()
