import sqlalchemy as sa
from sqlalchemy.orm import sessionmaker

def make_engine(database_url: str) -> sa.Engine:
    kwargs = {"pool_pre_ping": True}
    if database_url.startswith("sqlite"):
        kwargs["connect_args"] = {"check_same_thread": False}
    return sa.create_engine(database_url, **kwargs)

def make_session_factory(engine: sa.Engine) -> sessionmaker:
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)
