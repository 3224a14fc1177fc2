# data.py
import math
from typing import List, Optional
from sqlalchemy import String, case, cast, func, or_
from sqlmodel import Session, col, select

from models import CardData, Customer, CustomerField, CustomerRow, Invoice, InvoiceFormData, InvoiceRow

ITEMS_PER_PAGE = 6
LATEST_INVOICES = 5

def _sum_status(status: str):
  return func.coalesce(func.sum(case((col(Invoice.status) == status, Invoice.amount), else_=0)), 0)

def _invoice_columns():
  return (
    Invoice.id, Invoice.customer_id, Invoice.amount, Invoice.status, Invoice.date,
    Customer.name, Customer.email, Customer.image_url,
  )

def _invoice_filter(query: str):
  # autoescape keeps % and _ in the query literal
  return or_(
    col(Customer.name).icontains(query, autoescape=True),
    col(Customer.email).icontains(query, autoescape=True),
    cast(Invoice.amount, String).icontains(query, autoescape=True),
    col(Invoice.date).icontains(query, autoescape=True),
    col(Invoice.status).icontains(query, autoescape=True),
  )

def fetch_filtered_customers(session: Session, query: str = "") -> List[CustomerRow]:
  stmt = (
    select(
      Customer.id, Customer.name, Customer.email, Customer.image_url,
      func.count(col(Invoice.id)).label("total_invoices"),
      _sum_status("pending").label("total_pending"),
      _sum_status("paid").label("total_paid"),
    )
    .join(Invoice, col(Invoice.customer_id) == Customer.id, isouter=True)
    .where(or_(
      col(Customer.name).icontains(query, autoescape=True),
      col(Customer.email).icontains(query, autoescape=True),
    ))
    .group_by(Customer.id, Customer.name, Customer.email, Customer.image_url)
    .order_by(col(Customer.name).asc())
  )
  return [CustomerRow(**row._mapping) for row in session.exec(stmt).all()]

def fetch_customers(session: Session) -> List[CustomerField]:
  stmt = select(Customer.id, Customer.name).order_by(col(Customer.name).asc())
  return [CustomerField(**row._mapping) for row in session.exec(stmt).all()]

def fetch_filtered_invoices(session: Session, query: str = "", page: int = 1) -> List[InvoiceRow]:
  offset = (max(page, 1) - 1) * ITEMS_PER_PAGE
  stmt = (
    select(*_invoice_columns())
    .join(Customer, col(Invoice.customer_id) == Customer.id)
    .where(_invoice_filter(query))
    .order_by(col(Invoice.date).desc(), col(Invoice.id).asc())
    .limit(ITEMS_PER_PAGE)
    .offset(offset)
  )
  return [InvoiceRow(**row._mapping) for row in session.exec(stmt).all()]

def fetch_invoices_pages(session: Session, query: str = "") -> int:
  stmt = (
    select(func.count())
    .select_from(Invoice)
    .join(Customer, col(Invoice.customer_id) == Customer.id)
    .where(_invoice_filter(query))
  )
  count = session.exec(stmt).one()
  return math.ceil(count / ITEMS_PER_PAGE)

def fetch_invoice_by_id(session: Session, invoice_id: str) -> Optional[InvoiceFormData]:
  inv = session.get(Invoice, invoice_id)
  if not inv:
    return None
  return InvoiceFormData(id=inv.id, customer_id=inv.customer_id, amount=inv.amount / 100, status=inv.status)

def fetch_latest_invoices(session: Session) -> List[InvoiceRow]:
  stmt = (
    select(*_invoice_columns())
    .join(Customer, col(Invoice.customer_id) == Customer.id)
    .order_by(col(Invoice.date).desc(), col(Invoice.id).asc())
    .limit(LATEST_INVOICES)
  )
  return [InvoiceRow(**row._mapping) for row in session.exec(stmt).all()]

def fetch_card_data(session: Session) -> CardData:
  invoices = session.exec(select(func.count()).select_from(Invoice)).one()
  customers = session.exec(select(func.count()).select_from(Customer)).one()
  paid, pending = session.exec(
    select(_sum_status("paid"), _sum_status("pending")).select_from(Invoice)
  ).one()
  return CardData(
    number_of_invoices=invoices,
    number_of_customers=customers,
    total_paid_invoices=paid,
    total_pending_invoices=pending,
  )
