from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import PlainTextResponse
from sqlalchemy.engine import Engine
from starlette.exceptions import HTTPException as StarletteHTTPException

from article_service import config
from article_service.api import create_router
from article_service.db import make_engine, wait_for_db
from article_service.repository import ArticleRepository


async def plain_text_http_error(request: Request, exc: StarletteHTTPException):
    return PlainTextResponse(
        str(exc.detail),
        status_code=exc.status_code,
        headers=getattr(exc, "headers", None),
    )


def create_app(
    database_url: Optional[str] = None,
    engine: Optional[Engine] = None,
    prefix: Optional[str] = None,
    strict_not_found: Optional[bool] = None,
    wait: bool = False,
) -> FastAPI:
    """Assemble the article service.

    Configuration is validated here: a missing database URL or a schema that
    cannot be created raises ``ConfigurationError`` and no app is returned.
    Explicit arguments win over the environment.
    """
    if engine is None:
        engine = make_engine(database_url or config.DATABASE_URL)
    if wait:
        wait_for_db(engine, max_attempts=config.DB_WAIT_ATTEMPTS)
    if prefix is None:
        prefix = config.API_PREFIX
    if strict_not_found is None:
        strict_not_found = config.STRICT_NOT_FOUND

    repository = ArticleRepository(engine)
    repository.prepare()

    app = FastAPI(title="Article Service")
    app.add_exception_handler(StarletteHTTPException, plain_text_http_error)
    app.include_router(
        create_router(repository, strict_not_found=strict_not_found),
        prefix=prefix.rstrip("/"),
    )
    app.state.repository = repository
    return app
