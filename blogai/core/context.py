"""Process-wide application context, built once at startup and passed to handlers."""

import logging
from collections.abc import Generator
from dataclasses import dataclass
from typing import Annotated

from fastapi import Depends, Request
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from blogai.core.config import Settings
from blogai.core.database import build_engine, build_session_factory
from blogai.core.security import BCRYPT_ROUNDS, TokenSigner
from blogai.services.credentials import CredentialIssuer
from blogai.services.generation import TextGenerator
from blogai.services.mailer import Mailer
from blogai.services.sessions import SessionVerifier

logger = logging.getLogger(__name__)


@dataclass
class AppContext:
    settings: Settings
    engine: Engine
    session_factory: sessionmaker[Session]
    issuer: CredentialIssuer
    verifier: SessionVerifier
    generator: TextGenerator
    mailer: Mailer

    @classmethod
    def build(
        cls,
        settings: Settings,
        *,
        engine: Engine | None = None,
        bcrypt_rounds: int = BCRYPT_ROUNDS,
    ) -> "AppContext":
        engine = engine or build_engine(settings)
        signer = TokenSigner(
            settings.JWT_SECRET.get_secret_value(),
            algorithm=settings.JWT_ALGORITHM,
        )
        return cls(
            settings=settings,
            engine=engine,
            session_factory=build_session_factory(engine),
            issuer=CredentialIssuer(
                signer,
                free_generations=settings.FREE_GENERATIONS,
                bcrypt_rounds=bcrypt_rounds,
            ),
            verifier=SessionVerifier(signer),
            generator=TextGenerator.from_settings(settings),
            mailer=Mailer.from_settings(settings),
        )

    def close(self) -> None:
        self.engine.dispose()
        logger.info("Application context closed")


def get_context(request: Request) -> AppContext:
    """Dependency: the AppContext stored on app.state at startup."""
    context = getattr(request.app.state, "context", None)
    if context is None:
        raise RuntimeError("Application context is not initialized")
    return context


def get_db(
    context: Annotated[AppContext, Depends(get_context)],
) -> Generator[Session, None, None]:
    """Dependency that yields a DB session and closes it when done."""
    db = context.session_factory()
    try:
        yield db
    finally:
        db.close()
