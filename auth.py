# auth.py
from typing import Literal, Optional
from urllib.parse import urlencode
from passlib.context import CryptContext
from pydantic import BaseModel
from sqlmodel import Session, select

from models import User

PROTECTED_PATHS = ["/dashboard", "/customers", "/invoices"]
DASHBOARD_PATH = "/dashboard"
LOGIN_PATH = "/login"
SESSION_USER_KEY = "user_id"

# requests the gate never sees
UNGATED_PREFIXES = ("/api/", "/static/")

pwd_context = CryptContext(schemes=["argon2"], deprecated="auto")

class GateDecision(BaseModel):
  action: Literal["allow", "deny", "redirect"]
  location: Optional[str] = None

def is_protected(path: str) -> bool:
  return any(path.startswith(p) for p in PROTECTED_PATHS)

def authorized(is_logged_in: bool, path: str) -> GateDecision:
  if is_protected(path):
    if is_logged_in:
      return GateDecision(action="allow")
    return GateDecision(action="deny")  # sent to the login page
  elif is_logged_in:
    # keeps signed-in users off public pages such as /login
    return GateDecision(action="redirect", location=DASHBOARD_PATH)
  return GateDecision(action="allow")

def is_gated(path: str) -> bool:
  if path == "/api" or path.startswith(UNGATED_PREFIXES):
    return False
  return not path.endswith(".png")

def login_url(callback: str) -> str:
  return f"{LOGIN_PATH}?{urlencode({'callbackUrl': callback})}"

def safe_callback(url: Optional[str]) -> str:
  # local paths only
  if not url or not url.startswith("/") or url.startswith("//"):
    return DASHBOARD_PATH
  return url

def hash_password(plain: str) -> str:
  return pwd_context.hash(plain)

def verify_password(plain: str, hashed: str) -> bool:
  return pwd_context.verify(plain, hashed)

def authenticate(session: Session, email: str, password: str) -> Optional[User]:
  user = session.exec(select(User).where(User.email == email.lower())).first()
  if not user or not verify_password(password, user.password):
    return None
  return user
