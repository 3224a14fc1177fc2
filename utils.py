# utils.py
from datetime import date

def format_currency(cents: int) -> str:
  return f"${cents / 100:,.2f}"

def format_date(iso: str) -> str:
  # "2026-10-09" -> "Oct 9, 2026"
  try:
    d = date.fromisoformat(iso)
  except ValueError:
    return iso
  return f"{d:%b} {d.day}, {d.year}"
