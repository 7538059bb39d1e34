import os
import tempfile
from datetime import datetime

# Settings are read at import time
_upload_dir = tempfile.mkdtemp(prefix="cineverse-uploads-")
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["UPLOAD_DIR"] = _upload_dir

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from cineverse.database import Base, get_db
from cineverse.dependencies import get_current_user_optional
from cineverse.models import (
    Group, GroupMember, GroupMemberStatus, Post, PostStatus, Role, User, Visibility,
)
from main import app

engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db():
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def upload_dir():
    return _upload_dir


@pytest.fixture
def make_user(db):
    counter = {"n": 0}

    def _make(role=Role.USER, name=None):
        counter["n"] += 1
        n = counter["n"]
        user = User(
            username=f"user{n}",
            email=f"user{n}@example.com",
            name=name if name is not None else f"User {n}",
            role=role.value,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _make


@pytest.fixture
def user(make_user):
    return make_user()


@pytest.fixture
def user_admin(make_user):
    return make_user(Role.USER_ADMIN)


@pytest.fixture
def super_admin(make_user):
    return make_user(Role.SUPER_ADMIN)


@pytest.fixture
def make_group(db):
    def _make(name="Film club", members=(), status=GroupMemberStatus.ACTIVE):
        group = Group(name=name)
        db.add(group)
        db.commit()
        for member in members:
            db.add(GroupMember(group_id=group.id, user_id=member.id, status=status.value))
        db.commit()
        db.refresh(group)
        return group

    return _make


@pytest.fixture
def make_post(db):
    def _make(author, title="Arrival", status=PostStatus.PUBLISHED, visibility=Visibility.PUBLIC,
              group=None, genres="Drama,Sci-Fi", year=2016, imdb_rating=7.9,
              created_at=None, updated_at=None, **extra):
        now = datetime.utcnow()
        post = Post(
            title=title,
            author_id=author.id,
            status=status.value,
            visibility=visibility.value,
            group_id=group.id if group is not None else None,
            genres=genres,
            year=year,
            imdb_rating=imdb_rating,
            created_at=created_at or now,
            updated_at=updated_at or created_at or now,
            **extra,
        )
        db.add(post)
        db.commit()
        db.refresh(post)
        return post

    return _make


class SessionUser:
    """Who the test client is signed in as."""

    def __init__(self):
        self.user = None


@pytest.fixture
def session_user():
    return SessionUser()


@pytest.fixture
def client(db, session_user):
    def override_get_db():
        yield db

    async def override_current_user():
        return session_user.user

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_current_user_optional] = override_current_user
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
