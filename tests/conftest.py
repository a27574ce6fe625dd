"""Shared fixtures: an in-memory story bible and its repositories."""

import os

# Must be set before storyloom.config.get_settings() is first called
os.environ.setdefault("LOG_FILE", "")
os.environ.setdefault("DATABASE_URL", "sqlite://")

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from storyloom.context import ChapterContextBuilder, ContextBuilderDeps, GlobalContextBuilder
from storyloom.database import init_db


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db(engine):
    factory = sessionmaker(bind=engine, class_=Session, expire_on_commit=False, autoflush=False)
    with factory() as session:
        yield session


@pytest.fixture
def deps(db):
    return ContextBuilderDeps.from_session(db)


@pytest.fixture
def chapter_builder(deps):
    return ChapterContextBuilder(deps)


@pytest.fixture
def global_builder(deps):
    return GlobalContextBuilder(deps)
