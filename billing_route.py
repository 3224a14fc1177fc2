# billing_route.py
from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session, select

from auth import hash_password
from data import fetch_filtered_customers, fetch_filtered_invoices, fetch_invoice_by_id, fetch_invoices_pages
from db import get_session
from logs import logger
from models import Customer, CustomerRow, Invoice, InvoiceFormData, InvoicePage, User

LOG = logger(__file__)

router = APIRouter(prefix="/api", tags=["billing"])

@router.get("/customers", response_model=List[CustomerRow])
def list_customers(q: Optional[str] = None, session: Session = Depends(get_session)):
  return fetch_filtered_customers(session, q or "")

@router.get("/invoices", response_model=InvoicePage)
def list_invoices(q: Optional[str] = None, page: int = 1, session: Session = Depends(get_session)):
  query = q or ""
  return InvoicePage(
    query=query,
    page=page,
    total_pages=fetch_invoices_pages(session, query),
    invoices=fetch_filtered_invoices(session, query, page),
  )

@router.get("/invoices/{invoice_id}", response_model=InvoiceFormData)
def get_invoice(invoice_id: str, session: Session = Depends(get_session)):
  inv = fetch_invoice_by_id(session, invoice_id)
  if not inv:
    raise HTTPException(status_code=404, detail="Invoice not found")
  return inv

@router.post("/seed")
def seed_if_empty(session: Session = Depends(get_session)):
  # Seed only if DB is empty
  any_customer = session.exec(select(Customer)).first()
  if any_customer:
    return {"ok": True, "seeded": False}

  session.add(User(name="User", email="user@nextmail.com", password=hash_password("123456")))

  customers = [
    Customer(name="Evil Rabbit", email="evil@rabbit.com"),
    Customer(name="Delba de Oliveira", email="delba@oliveira.com"),
    Customer(name="Lee Robinson", email="lee@robinson.com"),
    Customer(name="Michael Novotny", email="michael@novotny.com"),
    Customer(name="Amy Burns", email="amy@burns.com"),
    Customer(name="Balazs Orban", email="balazs@orban.com"),
  ]
  session.add_all(customers)
  evil, delba, lee, michael, amy, balazs = customers

  session.add_all([
    Invoice(customer_id=evil.id, amount=15795, status="pending", date="2022-12-06"),
    Invoice(customer_id=delba.id, amount=20348, status="pending", date="2022-11-14"),
    Invoice(customer_id=amy.id, amount=3040, status="paid", date="2022-10-29"),
    Invoice(customer_id=michael.id, amount=44800, status="paid", date="2023-09-10"),
    Invoice(customer_id=balazs.id, amount=34577, status="pending", date="2023-08-05"),
    Invoice(customer_id=lee.id, amount=54246, status="pending", date="2023-07-16"),
    Invoice(customer_id=evil.id, amount=666, status="pending", date="2023-06-27"),
    Invoice(customer_id=michael.id, amount=32545, status="paid", date="2023-06-09"),
    Invoice(customer_id=amy.id, amount=1250, status="paid", date="2023-06-17"),
    Invoice(customer_id=balazs.id, amount=8546, status="paid", date="2023-06-07"),
    Invoice(customer_id=delba.id, amount=500, status="paid", date="2023-08-19"),
    Invoice(customer_id=balazs.id, amount=8945, status="paid", date="2023-06-03"),
    Invoice(customer_id=lee.id, amount=1000, status="paid", date="2022-06-05"),
  ])

  session.commit()
  LOG.info("seeded demo data")
  return {"ok": True, "seeded": True}
