import logging

import uvicorn
from fastapi import Depends, FastAPI, Request, Response
from fastapi.responses import PlainTextResponse, RedirectResponse

from redditrss.config import Settings, get_settings, settings
from redditrss.errors import FeedError
from redditrss.logging_config import configure_logging
from redditrss.routes.feeds import router as feeds_router

logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    configure_logging(settings.log_level)
    if settings.reddit_username and not settings.oauth_client_id:
        logger.warning("Login credentials provided without oauth client. This will be ignored.")
    elif settings.oauth_client_id:
        logger.info("Reddit OAuth login enabled for %s", settings.reddit_username)

    app = FastAPI(title="reddit-rss", version="1.4.0")

    @app.exception_handler(FeedError)
    async def feed_error_handler(request: Request, exc: FeedError):
        return PlainTextResponse(exc.message, status_code=exc.status_code)

    @app.get("/")
    async def home(config: Settings = Depends(get_settings)):
        return RedirectResponse(config.home_redirect_url, status_code=301)

    @app.get("/favicon.ico")
    async def favicon():
        return Response(status_code=204)

    @app.get("/info/ping")
    async def ping():
        return PlainTextResponse("OK")

    # Catch-all listing route goes last.
    app.include_router(feeds_router)

    return app


app = create_app()


def main() -> None:
    uvicorn.run(app, host=settings.host, port=settings.port)
