# models.py
from typing import List
from uuid import uuid4
from sqlmodel import SQLModel, Field

def _uuid() -> str:
  return str(uuid4())

class User(SQLModel, table=True):
  __tablename__ = "users"

  id: str = Field(default_factory=_uuid, primary_key=True)
  name: str
  email: str = Field(unique=True, index=True)
  password: str  # argon2 hash

class Customer(SQLModel, table=True):
  __tablename__ = "customers"

  id: str = Field(default_factory=_uuid, primary_key=True)
  name: str = Field(index=True)
  email: str
  image_url: str = ""

class Invoice(SQLModel, table=True):
  __tablename__ = "invoices"

  id: str = Field(default_factory=_uuid, primary_key=True)
  customer_id: str = Field(foreign_key="customers.id", index=True)
  amount: int  # cents
  status: str  # pending|paid
  date: str  # YYYY-MM-DD

# Read models built by data.py; not tables.

class CustomerField(SQLModel):
  id: str
  name: str

class CustomerRow(SQLModel):
  id: str
  name: str
  email: str
  image_url: str
  total_invoices: int = 0
  total_pending: int = 0  # cents
  total_paid: int = 0  # cents

class InvoiceRow(SQLModel):
  id: str
  customer_id: str
  amount: int
  status: str
  date: str
  name: str
  email: str
  image_url: str

class InvoiceFormData(SQLModel):
  id: str
  customer_id: str
  amount: float  # dollars, for the edit form
  status: str

class CardData(SQLModel):
  number_of_invoices: int
  number_of_customers: int
  total_paid_invoices: int  # cents
  total_pending_invoices: int  # cents

class InvoicePage(SQLModel):
  query: str = ""
  page: int = 1
  total_pages: int = 0
  invoices: List[InvoiceRow] = Field(default_factory=list)
