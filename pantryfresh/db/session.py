from contextlib import contextmanager
from pathlib import Path
from typing import Union
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker

from ..models import Base


def make_engine(database_url: str) -> Engine:
    # Ensure sqlite file parent directory exists to avoid 'unable to open database file'
    if database_url.startswith("sqlite:///") and ":memory:" not in database_url:
        db_path = database_url.split("sqlite:///")[-1]
        try:
            parent = Path(db_path).expanduser().resolve().parent
            parent.mkdir(parents=True, exist_ok=True)
        except OSError:
            # real error will surface on connect if still invalid
            pass
    return create_engine(database_url, future=True)


def init_db(engine: Engine) -> None:
    Base.metadata.create_all(engine)


def create_session_factory(bind: Union[str, Engine]):
    """Return a ``get_session()`` context manager bound to ``bind``.

    Each ``with get_session() as session:`` block is one transaction:
    committed when the block exits normally, rolled back on any exception.
    """
    engine = make_engine(bind) if isinstance(bind, str) else bind
    SessionLocal = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False, future=True)

    @contextmanager
    def get_session():
        session = SessionLocal()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    get_session.engine = engine
    return get_session
