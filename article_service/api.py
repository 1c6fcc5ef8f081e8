import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Request, Response
from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError

from article_service.repository import ArticleDecodeError, ArticleRepository
from article_service.schemas import ArticleCreate, ArticleOut

logger = logging.getLogger(__name__)

JSON_MEDIA_TYPE = "application/json"
SKIPPED_ROWS_HEADER = "X-Skipped-Rows"


async def read_article_body(request: Request) -> ArticleCreate:
    """Decode a POSTed article, insisting on a JSON content type."""
    media_type = request.headers.get("content-type", "").split(";")[0].strip().lower()
    if media_type != JSON_MEDIA_TYPE:
        logger.warning("Rejected article body with content type %r", media_type)
        raise HTTPException(status_code=400, detail="bad request")
    try:
        payload = await request.json()
    except ValueError as e:
        raise HTTPException(status_code=400, detail=f"could not decode json: {e}")
    try:
        return ArticleCreate.model_validate(payload)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=f"could not decode json: {e}")


def _require_id(article_id: str) -> None:
    if not article_id.strip():
        raise HTTPException(status_code=400, detail="bad request")


def create_router(repository: ArticleRepository, strict_not_found: bool = True) -> APIRouter:
    """Build the article routes bound to ``repository``.

    Every call returns a fresh router, so routes are registered exactly once
    per router. With ``strict_not_found`` off, a missing article is answered
    with an all-empty article instead of 404.
    """
    router = APIRouter()

    @router.get("/list", response_model=List[ArticleOut])
    def list_articles(response: Response):
        try:
            result = repository.list()
        except SQLAlchemyError as e:
            logger.error("Listing articles failed: %s", e)
            raise HTTPException(status_code=500, detail="could not read data")
        if result.skipped:
            response.headers[SKIPPED_ROWS_HEADER] = str(result.skipped)
        return result.articles

    @router.post("/article", status_code=201)
    def create_article(article: ArticleCreate = Depends(read_article_body)):
        try:
            created = repository.create(article)
        except SQLAlchemyError as e:
            logger.error("Creating article failed: %s", e)
            raise HTTPException(status_code=500, detail=f"fail to create: {e}")
        logger.info("Created article id=%s", created.id)
        return Response(status_code=201)

    @router.get("/article/{article_id}", response_model=ArticleOut)
    def get_article(article_id: str):
        _require_id(article_id)
        try:
            article = repository.get(article_id)
        except (SQLAlchemyError, ArticleDecodeError) as e:
            logger.error("Reading article %s failed: %s", article_id, e)
            raise HTTPException(status_code=500, detail=f"could not read id: {e}")
        if article is None:
            if strict_not_found:
                raise HTTPException(status_code=404, detail="article not found")
            return ArticleOut.empty()
        return article

    @router.delete("/article/{article_id}")
    def delete_article(article_id: str):
        _require_id(article_id)
        try:
            repository.delete(article_id)
        except SQLAlchemyError as e:
            logger.error("Deleting article %s failed: %s", article_id, e)
            raise HTTPException(status_code=500, detail="error")
        return Response(status_code=200)

    return router
