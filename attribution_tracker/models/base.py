"""Base model and database setup."""
from contextlib import contextmanager
from typing import Iterator, Optional, Tuple

from flask import current_app
from sqlalchemy import create_engine, text
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

# SQLAlchemy base class
Base = declarative_base()


class Database:
    """
    Pooled connection manager.

    Owns the SQLAlchemy engine (and its connection pool) plus the session
    factory. One instance is built per application and handed to every
    handler, so tests can substitute their own.

    Usage:
        database = Database('postgresql://...', sslmode='require')
        with database.session() as db:
            db.execute(text('SELECT 1'))
    """

    def __init__(
        self,
        database_url: str,
        sslmode: Optional[str] = None,
        pool_size: int = 10,
        max_overflow: int = 20,
        echo: bool = False,
    ):
        self.url = database_url

        # SQLite doesn't support pool_size and max_overflow parameters
        if database_url.startswith('sqlite'):
            options = {'connect_args': {'check_same_thread': False}}
            if ':memory:' in database_url or database_url in ('sqlite://', 'sqlite:///'):
                # A single shared connection, otherwise each session sees an empty database
                options['poolclass'] = StaticPool
            self.engine = create_engine(database_url, echo=echo, **options)
        else:
            # PostgreSQL configuration
            connect_args = {'sslmode': sslmode} if sslmode else {}
            self.engine = create_engine(
                database_url,
                pool_pre_ping=True,
                pool_size=pool_size,
                max_overflow=max_overflow,
                connect_args=connect_args,
                echo=echo,
            )

        self.SessionLocal = sessionmaker(
            autocommit=False,
            autoflush=False,
            bind=self.engine
        )

    def __repr__(self) -> str:
        return f"<Database {self.engine.url!r}>"

    @contextmanager
    def session(self) -> Iterator[Session]:
        """
        Provide a session that is rolled back on error and always closed.

        Committing is left to the caller.
        """
        db = self.SessionLocal()
        try:
            yield db
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()

    def check_connection(self) -> Tuple[bool, Optional[str]]:
        """
        Run a trivial query to verify connectivity.

        Returns:
            (True, None) when connected, otherwise (False, error message)
        """
        try:
            with self.engine.connect() as connection:
                connection.execute(text('SELECT 1'))
        except Exception as e:
            return False, str(e)
        return True, None

    def create_all(self) -> None:
        """Create all tables known to the model metadata."""
        Base.metadata.create_all(bind=self.engine)

    def drop_all(self) -> None:
        """Drop all tables known to the model metadata."""
        Base.metadata.drop_all(bind=self.engine)

    def dispose(self) -> None:
        """Close every pooled connection."""
        self.engine.dispose()


def get_database() -> Database:
    """
    Get the database handle bound to the current Flask application.

    Raises:
        RuntimeError: If the application was created without a database
    """
    database = current_app.extensions.get('database')
    if database is None:
        raise RuntimeError("Database not initialized. Pass one to create_app first.")
    return database
