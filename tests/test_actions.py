from datetime import datetime, timezone

import pytest
from sqlalchemy.exc import OperationalError
from sqlmodel import select

from actions import Committed, Failed, Redirected, create_invoice, delete_invoice, update_invoice
from models import Invoice


class Recorder:
  def __init__(self):
    self.paths = []

  def __call__(self, path):
    self.paths.append(path)


@pytest.fixture
def revalidate():
  return Recorder()


def _boom(*args, **kwargs):
  raise OperationalError("INSERT", {}, Exception("database is gone"))


def _all(session):
  session.expire_all()
  return session.exec(select(Invoice)).all()


def test_create_inserts_cents_and_redirects(session, customers, revalidate):
  result = create_invoice(session, {"customerId": "c1", "amount": "49.99", "status": "pending"}, revalidate)

  assert result == Redirected(path="/dashboard/invoices")
  assert revalidate.paths == ["/dashboard/invoices"]
  [inv] = _all(session)
  assert inv.customer_id == "c1"
  assert inv.amount == 4999
  assert inv.status == "pending"
  assert inv.date == datetime.now(timezone.utc).date().isoformat()


def test_create_uses_given_date(session, customers, revalidate):
  create_invoice(session, {"customerId": "c2", "amount": "10", "status": "paid"}, revalidate, today="2024-05-01")
  [inv] = _all(session)
  assert inv.date == "2024-05-01"
  assert inv.amount == 1000


def test_create_with_empty_customer_writes_nothing(session, customers, revalidate):
  result = create_invoice(session, {"customerId": "", "amount": "10", "status": "pending"}, revalidate)

  assert isinstance(result, Failed)
  assert result.kind == "validation"
  assert result.message == "Missing fields. Failed to create the invoice"
  assert result.errors["customerId"]
  assert revalidate.paths == []
  assert _all(session) == []


@pytest.mark.parametrize("amount", ["0", "-1", "-0.5", "1e17", "1e307"])
def test_create_rejects_out_of_range_amount(session, customers, revalidate, amount):
  result = create_invoice(session, {"customerId": "c1", "amount": amount, "status": "pending"}, revalidate)
  assert isinstance(result, Failed)
  assert "amount" in result.errors
  assert _all(session) == []


def test_create_db_error_is_returned_not_raised(session, customers, revalidate, monkeypatch):
  monkeypatch.setattr(session, "commit", _boom)
  result = create_invoice(session, {"customerId": "c1", "amount": "10", "status": "paid"}, revalidate)

  assert result == Failed(kind="persistence", message="DB Error: Creating invoice")
  assert revalidate.paths == []


def test_update_rewrites_row(session, invoices, revalidate):
  result = update_invoice(session, "i1", {"customerId": "c3", "amount": "12.34", "status": "paid"}, revalidate)

  assert result == Redirected(path="/dashboard/invoices")
  assert revalidate.paths == ["/dashboard/invoices"]
  session.expire_all()
  inv = session.get(Invoice, "i1")
  assert (inv.customer_id, inv.amount, inv.status) == ("c3", 1234, "paid")
  assert inv.date == "2023-01-10"


def test_update_unknown_id_still_redirects(session, invoices, revalidate):
  result = update_invoice(session, "missing", {"customerId": "c1", "amount": "1", "status": "paid"}, revalidate)
  assert result == Redirected(path="/dashboard/invoices")
  assert len(_all(session)) == 3


def test_update_validation_failure_leaves_row(session, invoices, revalidate):
  result = update_invoice(session, "i1", {"customerId": "c1", "amount": "1", "status": "overdue"}, revalidate)

  assert isinstance(result, Failed)
  assert result.message == "Missing fields. Failed to update the invoice"
  assert list(result.errors) == ["status"]
  session.expire_all()
  assert session.get(Invoice, "i1").status == "pending"


def test_update_db_error_names_invoice(session, invoices, revalidate, monkeypatch):
  monkeypatch.setattr(session, "commit", _boom)
  result = update_invoice(session, "i2", {"customerId": "c1", "amount": "1", "status": "paid"}, revalidate)
  assert result == Failed(kind="persistence", message="DB Error: Updating invoice i2")


def test_delete_twice_reports_success_both_times(session, invoices, revalidate):
  first = delete_invoice(session, "i1", revalidate)
  second = delete_invoice(session, "i1", revalidate)

  assert first == Committed(message="Deleted invoice i1")
  assert second == Committed(message="Deleted invoice i1")
  assert revalidate.paths == ["/dashboard/invoices", "/dashboard/invoices"]
  assert sorted(inv.id for inv in _all(session)) == ["i2", "i3"]


def test_delete_db_error_names_invoice(session, invoices, revalidate, monkeypatch):
  monkeypatch.setattr(session, "commit", _boom)
  result = delete_invoice(session, "i3", revalidate)
  assert result == Failed(kind="persistence", message="DB Error: Deleting invoice i3")
  assert revalidate.paths == []


def test_update_rejects_huge_amount(session, invoices, revalidate):
  result = update_invoice(session, "i1", {"customerId": "c1", "amount": "1e307", "status": "paid"}, revalidate)
  assert isinstance(result, Failed)
  assert result.kind == "validation"
  assert list(result.errors) == ["amount"]
  session.expire_all()
  assert session.get(Invoice, "i1").amount == 15795
