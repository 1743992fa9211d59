"""SQLAlchemy engine, session factory and schema helpers."""

from collections.abc import Iterator

from fastapi import Request
from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker
from sqlalchemy.pool import StaticPool


class Base(DeclarativeBase):
    pass


def build_engine(database_url: str, query_timeout: float | None = None) -> Engine:
    """Create an engine whose queries are bounded by ``query_timeout`` seconds."""
    connect_args: dict = {}
    kwargs: dict = {}

    if database_url.startswith("sqlite"):
        connect_args["check_same_thread"] = False
        if query_timeout:
            connect_args["timeout"] = query_timeout
        if database_url in ("sqlite://", "sqlite:///:memory:"):
            # One shared connection, otherwise every session sees an empty database
            kwargs["poolclass"] = StaticPool
    elif database_url.startswith("postgresql") and query_timeout:
        connect_args["options"] = f"-c statement_timeout={int(query_timeout * 1000)}"

    return create_engine(database_url, connect_args=connect_args, **kwargs)


def build_session_factory(engine: Engine) -> sessionmaker[Session]:
    return sessionmaker(bind=engine, expire_on_commit=False)


def setup_db(engine: Engine) -> None:
    """Setup database schema"""
    # Import models so their tables are registered on Base.metadata
    import catalogue.category.category  # noqa: F401
    import catalogue.product.product  # noqa: F401
    import ordering.order.order  # noqa: F401

    Base.metadata.create_all(engine)


def drop_db(engine: Engine) -> None:
    """Drop database schema"""
    Base.metadata.drop_all(engine)


def get_session(request: Request) -> Iterator[Session]:
    """FastAPI dependency yielding a session bound to the application's engine."""
    with request.app.state.session_factory() as session:
        yield session
