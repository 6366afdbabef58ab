"""
Engine e sessões do SQLAlchemy.

Sem DATABASE_URL configurada o backend usa um arquivo SQLite local. URLs
``postgresql://`` são direcionadas ao driver psycopg.
"""

from typing import Iterator

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from ..infrastructure.config import DATABASE_URL
from ..infrastructure.logger import get_logger

logger = get_logger(__name__)


class Base(DeclarativeBase):
    pass


def normalizar_database_url(url: str) -> str:
    """Troca o esquema postgres/postgresql pelo dialeto com psycopg 3."""
    for prefixo in ("postgres://", "postgresql://"):
        if url.startswith(prefixo):
            return "postgresql+psycopg://" + url[len(prefixo):]
    return url


def criar_engine(url: str = DATABASE_URL) -> Engine:
    url = normalizar_database_url(url)
    connect_args = {"check_same_thread": False} if url.startswith("sqlite") else {}
    return create_engine(url, connect_args=connect_args, pool_pre_ping=True)


engine = criar_engine()
SessionLocal = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


def init_db(bind: Engine = None) -> None:
    """Cria as tabelas que ainda não existem."""
    from . import models  # noqa: F401  (registra os modelos no metadata)

    Base.metadata.create_all(bind=bind or engine)
    logger.info("Tabelas do banco de dados verificadas")


def get_db() -> Iterator[Session]:
    """Dependência do FastAPI: abre uma sessão por requisição."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
