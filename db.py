# db.py
import os
from dotenv import load_dotenv
from sqlmodel import SQLModel, create_engine, Session

load_dotenv()

DATABASE_URL = os.getenv("DATABASE_URL", "").strip()
if not DATABASE_URL:
  raise RuntimeError("DATABASE_URL is not set in dashboard .env")

# handlers run in the threadpool, so sqlite connections cross threads
connect_args = {"check_same_thread": False} if DATABASE_URL.startswith("sqlite") else {}
engine = create_engine(DATABASE_URL, echo=False, pool_pre_ping=True, connect_args=connect_args)

def init_db() -> None:
  import models  # noqa: F401  registers the tables
  SQLModel.metadata.create_all(engine)

def get_session():
  with Session(engine) as session:
    yield session
