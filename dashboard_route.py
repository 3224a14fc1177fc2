# dashboard_route.py
from pathlib import Path
from typing import Any, Dict, Optional
from fastapi import APIRouter, Depends, Form, HTTPException, Request
from fastapi.responses import HTMLResponse, RedirectResponse
from fastapi.templating import Jinja2Templates
from sqlmodel import Session

from actions import Committed, Failed, Redirected, create_invoice, delete_invoice, update_invoice
from auth import SESSION_USER_KEY, authenticate, safe_callback
from cache import PageCache, get_page_cache
from data import (
  fetch_card_data,
  fetch_customers,
  fetch_filtered_customers,
  fetch_filtered_invoices,
  fetch_invoice_by_id,
  fetch_invoices_pages,
  fetch_latest_invoices,
)
from db import get_session
from logs import logger
from schemas import INVOICE_STATUSES, parse_login_form
from utils import format_currency, format_date

LOG = logger(__file__)

templates = Jinja2Templates(directory=str(Path(__file__).parent / "templates"))
templates.env.filters["currency"] = format_currency
templates.env.filters["localdate"] = format_date

router = APIRouter(tags=["dashboard"])

def _page(request: Request, name: str, title: str, **context: Any) -> HTMLResponse:
  return templates.TemplateResponse(request, name, {"title": title, **context})

def _invoice_fields(customerId: Optional[str], amount: Optional[str], status: Optional[str]) -> Dict[str, str]:
  fields = {"customerId": customerId, "amount": amount, "status": status}
  return {k: v for k, v in fields.items() if v is not None}

def _invoice_form(request: Request, session: Session, title: str, action: str, values: Dict[str, Any], result: Optional[Failed] = None) -> HTMLResponse:
  return _page(
    request,
    "invoice_form.html",
    title,
    action=action,
    customers=fetch_customers(session),
    statuses=INVOICE_STATUSES,
    values=values,
    errors=result.errors if result else {},
    message=result.message if result else None,
  )

def _render_invoices(request: Request, session: Session, query: str, page: int, message: Optional[str] = None) -> str:
  template = templates.get_template("invoices.html")
  return template.render(
    request=request,
    title="Invoices",
    query=query,
    page=page,
    total_pages=fetch_invoices_pages(session, query),
    invoices=fetch_filtered_invoices(session, query, page),
    message=message,
  )

@router.get("/", response_class=HTMLResponse)
def home(request: Request):
  return _page(request, "home.html", "Acme Dashboard")

@router.get("/login", response_class=HTMLResponse)
def login_page(request: Request, callbackUrl: Optional[str] = None):
  return _page(request, "login.html", "Login", callback_url=callbackUrl or "", error=None)

@router.post("/login", response_class=HTMLResponse)
def login(
  request: Request,
  email: Optional[str] = Form(None),
  password: Optional[str] = Form(None),
  callbackUrl: Optional[str] = Form(None),
  session: Session = Depends(get_session),
):
  creds = parse_login_form({"email": email, "password": password})
  user = authenticate(session, creds.email, creds.password) if creds else None
  if not user:
    LOG.info("failed login for %s", email)
    return _page(request, "login.html", "Login", callback_url=callbackUrl or "", error="Invalid credentials.")

  request.session[SESSION_USER_KEY] = user.id
  LOG.info("user %s signed in", user.id)
  return RedirectResponse(safe_callback(callbackUrl), status_code=303)

@router.post("/dashboard/logout")
def logout(request: Request):
  request.session.clear()
  return RedirectResponse("/", status_code=303)

@router.get("/dashboard", response_class=HTMLResponse)
def dashboard(request: Request, session: Session = Depends(get_session)):
  return _page(
    request,
    "dashboard.html",
    "Dashboard",
    cards=fetch_card_data(session),
    latest=fetch_latest_invoices(session),
  )

@router.get("/dashboard/invoices", response_class=HTMLResponse)
def invoices(
  request: Request,
  query: str = "",
  page: int = 1,
  session: Session = Depends(get_session),
  cache: PageCache = Depends(get_page_cache),
):
  url = request.url.path + (f"?{request.url.query}" if request.url.query else "")
  html = cache.get_or_render(url, lambda: _render_invoices(request, session, query, page))
  return HTMLResponse(html)

@router.get("/dashboard/invoices/create", response_class=HTMLResponse)
def create_invoice_page(request: Request, session: Session = Depends(get_session)):
  return _invoice_form(request, session, "Create Invoice", "/dashboard/invoices/create", {})

@router.post("/dashboard/invoices/create", response_class=HTMLResponse)
def create_invoice_submit(
  request: Request,
  customerId: Optional[str] = Form(None),
  amount: Optional[str] = Form(None),
  status: Optional[str] = Form(None),
  session: Session = Depends(get_session),
  cache: PageCache = Depends(get_page_cache),
):
  fields = _invoice_fields(customerId, amount, status)
  result = create_invoice(session, fields, cache.revalidate_path)
  if isinstance(result, Redirected):
    return RedirectResponse(result.path, status_code=303)
  return _invoice_form(request, session, "Create Invoice", "/dashboard/invoices/create", fields, result)

@router.get("/dashboard/invoices/{invoice_id}/edit", response_class=HTMLResponse)
def edit_invoice_page(invoice_id: str, request: Request, session: Session = Depends(get_session)):
  inv = fetch_invoice_by_id(session, invoice_id)
  if not inv:
    raise HTTPException(status_code=404, detail="Invoice not found")
  values = {"customerId": inv.customer_id, "amount": f"{inv.amount:.2f}", "status": inv.status}
  return _invoice_form(request, session, "Edit Invoice", f"/dashboard/invoices/{invoice_id}/edit", values)

@router.post("/dashboard/invoices/{invoice_id}/edit", response_class=HTMLResponse)
def edit_invoice_submit(
  invoice_id: str,
  request: Request,
  customerId: Optional[str] = Form(None),
  amount: Optional[str] = Form(None),
  status: Optional[str] = Form(None),
  session: Session = Depends(get_session),
  cache: PageCache = Depends(get_page_cache),
):
  fields = _invoice_fields(customerId, amount, status)
  result = update_invoice(session, invoice_id, fields, cache.revalidate_path)
  if isinstance(result, Redirected):
    return RedirectResponse(result.path, status_code=303)
  return _invoice_form(request, session, "Edit Invoice", f"/dashboard/invoices/{invoice_id}/edit", fields, result)

@router.post("/dashboard/invoices/{invoice_id}/delete", response_class=HTMLResponse)
def delete_invoice_submit(
  invoice_id: str,
  request: Request,
  session: Session = Depends(get_session),
  cache: PageCache = Depends(get_page_cache),
):
  result = delete_invoice(session, invoice_id, cache.revalidate_path)
  message = result.message if isinstance(result, (Committed, Failed)) else None
  return HTMLResponse(_render_invoices(request, session, "", 1, message=message))

@router.get("/dashboard/customers", response_class=HTMLResponse)
def customers(request: Request, query: str = "", session: Session = Depends(get_session)):
  return _page(
    request,
    "customers.html",
    "Customers",
    query=query,
    customers=fetch_filtered_customers(session, query),
  )
