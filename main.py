import os
from contextlib import asynccontextmanager
from pathlib import Path

from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import RedirectResponse
from fastapi.staticfiles import StaticFiles
from starlette.middleware.sessions import SessionMiddleware

import billing_route
import dashboard_route
from auth import SESSION_USER_KEY, authorized, is_gated, login_url
from cache import get_page_cache
from db import init_db
from logs import logger

load_dotenv()

LOG = logger(__file__)

AUTH_SECRET = os.getenv("AUTH_SECRET", "dev-secret-change-me").strip()
CORS_ORIGINS = [
  x.strip()
  for x in os.getenv("CORS_ORIGINS", "http://127.0.0.1:5173,http://localhost:5173").split(",")
  if x.strip()
]

@asynccontextmanager
async def lifespan(app: FastAPI):
  init_db()
  LOG.info("database ready")
  yield
  get_page_cache().close()

app = FastAPI(title="Acme Dashboard", version="1.0.0", lifespan=lifespan)

@app.middleware("http")
async def auth_gate(request: Request, call_next):
  path = request.url.path
  if not is_gated(path):
    return await call_next(request)

  decision = authorized(bool(request.session.get(SESSION_USER_KEY)), path)
  LOG.debug("gate %s -> %s", path, decision.action)
  if decision.action == "deny":
    callback = path + (f"?{request.url.query}" if request.url.query else "")
    return RedirectResponse(login_url(callback), status_code=302)
  if decision.action == "redirect":
    return RedirectResponse(decision.location, status_code=302)
  return await call_next(request)

# added after the gate so the session is decoded before the gate runs
app.add_middleware(SessionMiddleware, secret_key=AUTH_SECRET, same_site="lax")
app.add_middleware(
  CORSMiddleware,
  allow_origins=CORS_ORIGINS,
  allow_credentials=True,
  allow_methods=["*"],
  allow_headers=["*"],
)

app.mount("/static", StaticFiles(directory=str(Path(__file__).parent / "static")), name="static")
app.include_router(billing_route.router)
app.include_router(dashboard_route.router)


@app.get("/api/health")
def health():
  return {"ok": True}
