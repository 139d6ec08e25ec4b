"""Shared builders for tests: in-memory SQLite context, accounts, posts and an API client."""

from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from blogai.core.config import Settings
from blogai.core.context import AppContext
from blogai.main import create_app
from blogai.models import Base, Collection, Post, User
from blogai.schemas.auth import SubjectIdentity
from blogai.services.posts import count_words, make_excerpt

TEST_SECRET = "test-signing-secret"
TEST_PASSWORD = "correct-horse"


def make_settings(**overrides: object) -> Settings:
    values: dict[str, object] = {
        "APP_ENV": "dev",
        "DATABASE_URL": "sqlite://",
        "JWT_SECRET": TEST_SECRET,
        "GEMINI_API_KEY": None,
        "RESEND_API_KEY": None,
        "BOOTSTRAP_ADMIN_EMAIL": None,
        "BOOTSTRAP_ADMIN_PASSWORD": None,
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


def make_context(**overrides: object) -> AppContext:
    """Fresh in-memory store with all tables; bcrypt at minimum cost for speed."""
    context = AppContext.build(make_settings(**overrides), bcrypt_rounds=4)
    Base.metadata.create_all(context.engine)
    return context


def add_user(
    db: Session,
    context: AppContext,
    email: str,
    *,
    role: str = "user",
    password: str = TEST_PASSWORD,
    subscription: str = "free",
    generations_left: int = 20,
    generations_total: int = 20,
) -> User:
    user = User(
        email=email,
        name=email.split("@")[0],
        password_hash=context.issuer.hash_secret(password),
        role=role,
        subscription=subscription,
        generations_left=generations_left,
        generations_total=generations_total,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def add_post(
    db: Session,
    author: User,
    title: str = "A post",
    content: str = "Some words for the body",
    status: str = "draft",
    **kwargs: object,
) -> Post:
    post = Post(
        author_id=author.id,
        title=title,
        content=content,
        excerpt=make_excerpt(content),
        word_count=count_words(content),
        status=status,
        likes=0,
        **kwargs,
    )
    db.add(post)
    db.commit()
    db.refresh(post)
    return post


def add_collection(db: Session, owner: User, name: str = "Favorites") -> Collection:
    collection = Collection(owner_id=owner.id, name=name, description=f"{name} description")
    db.add(collection)
    db.commit()
    db.refresh(collection)
    return collection


def subject(user: User) -> SubjectIdentity:
    return SubjectIdentity(id=user.id, role=user.role, email=user.email)


def open_client(test_case, context: AppContext, **client_kwargs: object) -> TestClient:
    """Start the app (lifespan included) for the duration of test_case."""
    client = TestClient(create_app(context=context), **client_kwargs)
    client.__enter__()
    test_case.addCleanup(client.__exit__, None, None, None)
    return client


def bearer(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}
