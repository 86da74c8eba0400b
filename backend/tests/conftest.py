from __future__ import annotations
import os

# Must be set before latam_jobs.db.database builds its engine.
os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite:///:memory:")

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from latam_jobs.db.database import Base
from latam_jobs.models import Job, JobSource, RunRecord  # noqa: F401


@pytest.fixture
def session_factory():
    engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        future=True,
    )
    Base.metadata.create_all(bind=engine)
    yield sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)
    engine.dispose()


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def add_source(db):
    def _add(name, provider_type="ashby", provider_config=None, is_enabled=True):
        source = JobSource(
            name=name,
            provider_type=provider_type,
            provider_config={"jobBoardName": name.lower()} if provider_config is None else provider_config,
            is_enabled=is_enabled,
        )
        db.add(source)
        db.commit()
        return source.id

    return _add


@pytest.fixture
def ashby_postings():
    return [
        {
            "id": "a-1",
            "title": "Senior Backend Engineer",
            "jobUrl": "https://jobs.ashbyhq.com/acme/a-1",
            "location": "São Paulo, Brazil",
            "isListed": True,
            "isRemote": True,
            "employmentType": "FullTime",
            "descriptionHtml": "<p>Python and Postgres</p>",
            "publishedAt": "2024-05-01T12:00:00.000+00:00",
        },
        {
            "id": "a-2",
            "title": "Data Engineer",
            "jobUrl": "https://jobs.ashbyhq.com/acme/a-2",
            "location": "Bogotá, Colombia",
            "isListed": True,
            "isRemote": True,
            "employmentType": "Contract",
        },
        {
            "id": "a-3",
            "title": "Product Designer",
            "jobUrl": "https://jobs.ashbyhq.com/acme/a-3",
            "location": "Remote",
            "isListed": True,
            "isRemote": True,
        },
        {
            "id": "a-4",
            "title": "Support Specialist",
            "jobUrl": "https://jobs.ashbyhq.com/acme/a-4",
            "location": "Remote",
            "isListed": False,
            "isRemote": True,
        },
    ]
