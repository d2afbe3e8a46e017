from sqlalchemy import create_engine
from sqlalchemy.orm import DeclarativeBase, sessionmaker

from aurora_go.config import settings

engine = create_engine(
    settings.database_url,
    connect_args={"check_same_thread": False} if "sqlite" in settings.database_url else {},
    echo=False,
)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


class Base(DeclarativeBase):
    pass


def init_db(bind=None):
    import aurora_go.models.state  # noqa: F401
    import aurora_go.models.summary  # noqa: F401
    Base.metadata.create_all(bind=bind or engine)
