import logging
from typing import Optional

from pydantic import ValidationError
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from article_service.db import ConfigurationError, make_session_factory
from article_service.models import Article, Base
from article_service.schemas import ArticleCreate, ArticleListResult, ArticleOut

logger = logging.getLogger(__name__)


class ArticleDecodeError(ValueError):
    """A stored row could not be turned into an article."""


class ArticleRepository:
    """Stores articles in the ``articles`` table.

    Every call opens its own session and commits its own write; nothing
    spans more than one operation.
    """

    def __init__(self, engine: Optional[Engine]):
        if engine is None:
            raise ConfigurationError("no existing database")
        self.engine = engine
        self.SessionLocal = make_session_factory(engine)

    def prepare(self) -> None:
        """Create the articles table if it is absent."""
        try:
            Base.metadata.create_all(bind=self.engine)
        except SQLAlchemyError as e:
            raise ConfigurationError(f"could not prepare schema: {e}") from e

    def create(self, article: ArticleCreate) -> ArticleOut:
        db = self.SessionLocal()
        try:
            db_article = Article(
                title=article.title,
                description=article.description,
                content=article.content,
            )
            db.add(db_article)
            db.commit()
            db.refresh(db_article)
            return ArticleOut.model_validate(db_article)
        finally:
            db.close()

    def get(self, article_id: str) -> Optional[ArticleOut]:
        db = self.SessionLocal()
        try:
            db_article = db.query(Article).filter(Article.id == article_id).first()
            if db_article is None:
                return None
            try:
                return ArticleOut.model_validate(db_article)
            except ValidationError as e:
                raise ArticleDecodeError(
                    f"article {article_id} has undecodable fields: {e.error_count()} error(s)"
                ) from e
        finally:
            db.close()

    def list(self) -> ArticleListResult:
        db = self.SessionLocal()
        try:
            rows = db.query(Article).order_by(Article.id).all()
        finally:
            db.close()

        result = ArticleListResult()
        for row in rows:
            try:
                result.articles.append(ArticleOut.model_validate(row))
            except ValidationError as e:
                result.skipped += 1
                logger.warning("Skipping undecodable article row id=%s: %s", row.id, e)
        return result

    def delete(self, article_id: str) -> None:
        # no existence check: deleting a missing id is a no-op
        db = self.SessionLocal()
        try:
            db.query(Article).filter(Article.id == article_id).delete(
                synchronize_session=False
            )
            db.commit()
        finally:
            db.close()
