from typing import List

from pydantic import BaseModel, ConfigDict, StrictStr, field_validator


class ArticleCreate(BaseModel):
    # unknown keys, including a client supplied id, are dropped
    title: StrictStr = ""
    description: StrictStr = ""
    content: StrictStr = ""


class ArticleOut(BaseModel):
    id: str
    title: StrictStr
    description: StrictStr
    content: StrictStr

    model_config = ConfigDict(from_attributes=True)

    @field_validator("id", mode="before")
    @classmethod
    def render_id(cls, value):
        if value is None:
            return value
        return str(value)

    @classmethod
    def empty(cls) -> "ArticleOut":
        return cls(id="", title="", description="", content="")


class ArticleListResult(BaseModel):
    """Outcome of a best-effort list: decoded articles plus how many rows were dropped."""

    articles: List[ArticleOut] = []
    skipped: int = 0
