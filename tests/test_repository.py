from concurrent.futures import ThreadPoolExecutor

import pytest
from sqlalchemy import text
from sqlalchemy.exc import OperationalError

from article_service.db import ConfigurationError, make_engine
from article_service.repository import ArticleDecodeError, ArticleRepository
from article_service.schemas import ArticleCreate


@pytest.fixture
def repo(database_url):
    repository = ArticleRepository(make_engine(database_url))
    repository.prepare()
    return repository


def test_repository_requires_engine():
    with pytest.raises(ConfigurationError):
        ArticleRepository(None)


def test_prepare_is_idempotent(repo):
    repo.prepare()
    assert repo.list().articles == []


def test_prepare_failure_is_configuration_error(tmp_path):
    unreachable = make_engine(f"sqlite:///{tmp_path / 'missing' / 'articles.db'}")
    with pytest.raises(ConfigurationError):
        ArticleRepository(unreachable).prepare()


def test_create_assigns_id(repo):
    first = repo.create(ArticleCreate(title="a", description="b", content="c"))
    second = repo.create(ArticleCreate(title="x"))
    assert first.id and second.id
    assert first.id != second.id
    assert isinstance(first.id, str)
    assert second.description == ""


def test_get_found_and_missing(repo):
    created = repo.create(ArticleCreate(title="a", description="b", content="c"))
    assert repo.get(created.id) == created
    assert repo.get("9999") is None


def test_get_undecodable_row(repo):
    with repo.engine.begin() as conn:
        conn.execute(text("INSERT INTO articles (title) VALUES ('no body')"))
    with pytest.raises(ArticleDecodeError):
        repo.get("1")


def test_list_reports_skipped_rows(repo):
    repo.create(ArticleCreate(title="one"))
    with repo.engine.begin() as conn:
        conn.execute(text("INSERT INTO articles (title, description) VALUES ('two', 'd')"))
    repo.create(ArticleCreate(title="three"))

    result = repo.list()
    assert [a.title for a in result.articles] == ["one", "three"]
    assert result.skipped == 1


def test_delete_existing_and_missing(repo):
    created = repo.create(ArticleCreate(title="gone"))
    repo.delete(created.id)
    assert repo.get(created.id) is None
    repo.delete(created.id)
    repo.delete("does-not-exist")


def test_create_propagates_storage_error(repo):
    with repo.engine.begin() as conn:
        conn.execute(text("DROP TABLE articles"))
    with pytest.raises(OperationalError):
        repo.create(ArticleCreate(title="t"))


def test_concurrent_creates_are_all_listed(repo):
    n = 20
    with ThreadPoolExecutor(max_workers=8) as pool:
        created = list(
            pool.map(
                lambda i: repo.create(
                    ArticleCreate(title=f"title {i}", description="d", content="c")
                ),
                range(n),
            )
        )

    result = repo.list()
    assert len(result.articles) == n
    assert len({a.id for a in result.articles}) == n
    assert {a.title for a in result.articles} == {f"title {i}" for i in range(n)}
    assert {a.id for a in created} == {a.id for a in result.articles}
