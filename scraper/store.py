"""Record store interface and its SQLAlchemy implementation."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Callable, Mapping, Protocol, Sequence

from sqlalchemy import create_engine, select
from sqlalchemy.engine import make_url
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from models import Base, Category, News, Source

LOGGER = logging.getLogger(__name__)

SessionFactory = Callable[[], Session]


class NewsStoreError(RuntimeError):
    """Raised when the record store fails to read or write."""


class RecordStore(Protocol):
    def find_by_slug(self, slug: str) -> News | None: ...

    def create(self, fields: Mapping[str, Any]) -> News: ...

    def find_category_by_name(self, name: str) -> Category | None: ...

    def create_category(self, fields: Mapping[str, Any]) -> Category: ...

    def list_active_sources(self) -> Sequence[Source]: ...

    def mark_source_scraped(self, source_id: Any, when: datetime) -> None: ...


class SqlAlchemyNewsStore:
    """Short-lived session per call; every failure surfaces as :class:`NewsStoreError`."""

    def __init__(self, session_factory: SessionFactory) -> None:
        self._session_factory = session_factory

    def find_by_slug(self, slug: str) -> News | None:
        try:
            with self._session_factory() as session:
                return session.scalars(select(News).where(News.slug == slug)).one_or_none()
        except Exception as exc:
            raise NewsStoreError(str(exc)) from exc

    def create(self, fields: Mapping[str, Any]) -> News:
        try:
            with self._session_factory() as session:
                news = News(**fields)
                session.add(news)
                session.flush()
                session.refresh(news)
                session.commit()
                return news
        except Exception as exc:
            raise NewsStoreError(str(exc)) from exc

    def find_category_by_name(self, name: str) -> Category | None:
        try:
            with self._session_factory() as session:
                return session.scalars(select(Category).where(Category.name == name)).one_or_none()
        except Exception as exc:
            raise NewsStoreError(str(exc)) from exc

    def create_category(self, fields: Mapping[str, Any]) -> Category:
        try:
            with self._session_factory() as session:
                category = Category(**fields)
                session.add(category)
                session.flush()
                session.refresh(category)
                session.commit()
                return category
        except Exception as exc:
            raise NewsStoreError(str(exc)) from exc

    def list_active_sources(self) -> list[Source]:
        try:
            with self._session_factory() as session:
                stmt = select(Source).where(Source.is_active.is_(True)).order_by(Source.created_at, Source.name)
                return list(session.scalars(stmt))
        except Exception as exc:
            raise NewsStoreError(str(exc)) from exc

    def mark_source_scraped(self, source_id: Any, when: datetime) -> None:
        try:
            with self._session_factory() as session:
                source = session.get(Source, source_id)
                if source is None:
                    return
                source.last_scraped_at = when
                session.commit()
        except Exception as exc:
            raise NewsStoreError(str(exc)) from exc


def find_or_create_category(
    store: RecordStore,
    name: str,
    slug: str,
    description: str | None = None,
) -> Category:
    category = store.find_category_by_name(name)
    if category is not None:
        return category
    LOGGER.info("Creating category %s", name)
    return store.create_category({"name": name, "slug": slug, "description": description})


def create_session_factory(db_url: str) -> sessionmaker:
    """Build a session factory; SQLite engines are made safe for worker threads."""

    url = make_url(db_url)
    kwargs: dict[str, Any] = {}
    if url.get_backend_name() == "sqlite":
        kwargs["connect_args"] = {"check_same_thread": False}
        if url.database in (None, "", ":memory:"):
            kwargs["poolclass"] = StaticPool
    engine = create_engine(db_url, **kwargs)
    return sessionmaker(bind=engine, expire_on_commit=False)


def init_schema(session_factory: sessionmaker) -> None:
    Base.metadata.create_all(session_factory.kw["bind"])


__all__ = [
    "NewsStoreError",
    "RecordStore",
    "SqlAlchemyNewsStore",
    "create_session_factory",
    "find_or_create_category",
    "init_schema",
]
