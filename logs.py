# logs.py
import logging
import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").strip().upper()


def logger(name: str) -> logging.Logger:
  # accepts __file__ as well as a dotted name
  if "/" in name or "\\" in name:
    name = Path(name).stem

  log = logging.getLogger(name)
  if not log.handlers:
    log.setLevel(getattr(logging, LOG_LEVEL, logging.INFO))
    handler = logging.StreamHandler()
    handler.setFormatter(
      logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
      )
    )
    log.addHandler(handler)
  return log
