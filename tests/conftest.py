import os

os.environ.setdefault("DATABASE_URL", "sqlite://")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

from auth import hash_password
from cache import PageCache, get_page_cache
from db import get_session
from main import app
from models import Customer, Invoice, User

PASSWORD = "123456"


@pytest.fixture
def engine():
  eng = create_engine("sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool)
  SQLModel.metadata.create_all(eng)
  yield eng
  eng.dispose()


@pytest.fixture
def session(engine):
  with Session(engine) as s:
    yield s


@pytest.fixture
def customers(session):
  rows = [
    Customer(id="c1", name="Alicia Keys", email="alicia@keys.com"),
    Customer(id="c2", name="Bob Jones", email="bob@kalimba.com"),
    Customer(id="c3", name="Carol White", email="carol@example.com"),
  ]
  session.add_all(rows)
  session.commit()
  return rows


@pytest.fixture
def invoices(session, customers):
  rows = [
    Invoice(id="i1", customer_id="c1", amount=15795, status="pending", date="2023-01-10"),
    Invoice(id="i2", customer_id="c1", amount=2000, status="paid", date="2023-02-10"),
    Invoice(id="i3", customer_id="c2", amount=44800, status="paid", date="2023-03-10"),
  ]
  session.add_all(rows)
  session.commit()
  return rows


@pytest.fixture
def user(session):
  u = User(id="u1", name="User", email="user@nextmail.com", password=hash_password(PASSWORD))
  session.add(u)
  session.commit()
  return u


@pytest.fixture
def page_cache(tmp_path):
  cache = PageCache(tmp_path / "pages")
  yield cache
  cache.close()


@pytest.fixture
def client(engine, page_cache):
  def _get_session():
    with Session(engine) as s:
      yield s

  app.dependency_overrides[get_session] = _get_session
  app.dependency_overrides[get_page_cache] = lambda: page_cache
  yield TestClient(app)
  app.dependency_overrides.clear()


@pytest.fixture
def logged_in(client, user):
  r = client.post("/login", data={"email": user.email, "password": PASSWORD}, follow_redirects=False)
  assert r.status_code == 303
  return client
