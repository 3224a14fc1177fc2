# schemas.py
from typing import Any, Dict, List, Literal, Mapping, Optional, Tuple
from pydantic import BaseModel, ConfigDict, Field, ValidationError

INVOICE_STATUSES = ("pending", "paid")

# invoices.amount is a 32-bit INTEGER of cents
MAX_AMOUNT = 21_474_836.47

# One message per field, whatever rule failed (missing, coercion, range).
FIELD_MESSAGES = {
  "customerId": "Please select a customer.",
  "amount": "Please enter an amount greater than $0.",
  "status": "Please select an invoice status.",
}

class InvoiceForm(BaseModel):
  model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True, extra="ignore")

  customer_id: str = Field(alias="customerId", min_length=1)
  amount: float = Field(gt=0, le=MAX_AMOUNT, allow_inf_nan=False)
  status: Literal["pending", "paid"]

  def cents(self) -> int:
    return int(round(self.amount * 100))

class LoginForm(BaseModel):
  model_config = ConfigDict(str_strip_whitespace=True, extra="ignore")

  email: str = Field(pattern=r"^[^@\s]+@[^@\s]+$")
  password: str = Field(min_length=6)

FieldErrors = Dict[str, List[str]]

def _flatten(e: ValidationError, messages: Mapping[str, str]) -> FieldErrors:
  errors: FieldErrors = {}
  for err in e.errors():
    field = str(err["loc"][0]) if err["loc"] else "form"
    message = messages.get(field, err["msg"])
    bucket = errors.setdefault(field, [])
    if message not in bucket:
      bucket.append(message)
  return errors

def _pick(form: Mapping[str, Any], fields) -> Dict[str, Any]:
  # absent keys stay absent so pydantic reports them as missing
  return {k: form.get(k) for k in fields if form.get(k) is not None}

def validate_invoice_form(form: Mapping[str, Any]) -> Tuple[Optional[InvoiceForm], FieldErrors]:
  try:
    return InvoiceForm.model_validate(_pick(form, FIELD_MESSAGES)), {}
  except ValidationError as e:
    return None, _flatten(e, FIELD_MESSAGES)

def parse_login_form(form: Mapping[str, Any]) -> Optional[LoginForm]:
  try:
    return LoginForm.model_validate(_pick(form, ("email", "password")))
  except ValidationError:
    return None
