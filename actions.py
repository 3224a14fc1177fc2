# actions.py
"""Form actions for invoices.

Each action validates the submitted fields, writes through the given
session, invalidates the invoice listing and returns a result value.
Database errors are rolled back and reported as Failed, never raised.
"""
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Literal, Mapping, Optional, Union
from pydantic import BaseModel, Field
from sqlalchemy import delete, update
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, col

from logs import logger
from models import Invoice
from schemas import validate_invoice_form

LOG = logger(__file__)

INVOICES_PATH = "/dashboard/invoices"

Revalidate = Callable[[str], None]

class Redirected(BaseModel):
  path: str

class Committed(BaseModel):
  message: str

class Failed(BaseModel):
  kind: Literal["validation", "persistence"]
  message: str
  errors: Dict[str, List[str]] = Field(default_factory=dict)

ActionResult = Union[Redirected, Committed, Failed]

def _today() -> str:
  return datetime.now(timezone.utc).date().isoformat()

def create_invoice(
  session: Session,
  form: Mapping[str, Any],
  revalidate: Revalidate,
  today: Optional[str] = None,
) -> ActionResult:
  data, errors = validate_invoice_form(form)
  if data is None:
    return Failed(kind="validation", message="Missing fields. Failed to create the invoice", errors=errors)

  inv = Invoice(customer_id=data.customer_id, amount=data.cents(), status=data.status, date=today or _today())
  try:
    session.add(inv)
    session.commit()
    session.refresh(inv)
  except SQLAlchemyError:
    session.rollback()
    LOG.exception("insert failed for customer %s", data.customer_id)
    return Failed(kind="persistence", message="DB Error: Creating invoice")

  LOG.info("created invoice %s (%d cents, %s)", inv.id, inv.amount, inv.status)
  revalidate(INVOICES_PATH)
  return Redirected(path=INVOICES_PATH)

def update_invoice(
  session: Session,
  invoice_id: str,
  form: Mapping[str, Any],
  revalidate: Revalidate,
) -> ActionResult:
  data, errors = validate_invoice_form(form)
  if data is None:
    return Failed(kind="validation", message="Missing fields. Failed to update the invoice", errors=errors)

  # zero matched rows is not distinguished from success
  stmt = (
    update(Invoice)
    .where(col(Invoice.id) == invoice_id)
    .values(customer_id=data.customer_id, amount=data.cents(), status=data.status)
  )
  try:
    session.exec(stmt)
    session.commit()
  except SQLAlchemyError:
    session.rollback()
    LOG.exception("update failed for invoice %s", invoice_id)
    return Failed(kind="persistence", message=f"DB Error: Updating invoice {invoice_id}")

  LOG.info("updated invoice %s", invoice_id)
  revalidate(INVOICES_PATH)
  return Redirected(path=INVOICES_PATH)

def delete_invoice(session: Session, invoice_id: str, revalidate: Revalidate) -> ActionResult:
  try:
    session.exec(delete(Invoice).where(col(Invoice.id) == invoice_id))
    session.commit()
  except SQLAlchemyError:
    session.rollback()
    LOG.exception("delete failed for invoice %s", invoice_id)
    return Failed(kind="persistence", message=f"DB Error: Deleting invoice {invoice_id}")

  LOG.info("deleted invoice %s", invoice_id)
  revalidate(INVOICES_PATH)
  return Committed(message=f"Deleted invoice {invoice_id}")
