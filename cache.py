# cache.py
import os
from functools import lru_cache
from pathlib import Path
from typing import Callable, Optional
from urllib.parse import urlsplit

import diskcache
from dotenv import load_dotenv

from logs import logger

load_dotenv()

LOG = logger(__file__)

PAGE_CACHE_DIR = os.getenv("PAGE_CACHE_DIR", ".cache/pages").strip()
PAGE_CACHE_SIZE_LIMIT = int(os.getenv("PAGE_CACHE_SIZE_LIMIT", str(64 * 1024 * 1024)))

def _generation_key(path: str) -> str:
  return f"generation:{path}"

class PageCache:
  """Rendered pages keyed by URL (path plus query string).

  Backed by diskcache so every worker process sees the same renders and the
  same invalidations. Each render is tagged with its URL path;
  revalidate_path() evicts the tag and bumps the path's generation, so a
  render that started before the write is never stored.
  """

  def __init__(self, directory: str | Path, size_limit: int = PAGE_CACHE_SIZE_LIMIT) -> None:
    self.directory = Path(directory)
    self._cache = diskcache.Cache(str(self.directory), size_limit=size_limit, tag_index=True)

  def get(self, url: str) -> Optional[str]:
    return self._cache.get(url, default=None)

  def get_or_render(self, url: str, render: Callable[[], str]) -> str:
    html = self.get(url)
    if html is not None:
      return html

    path = urlsplit(url).path
    generation = self._cache.get(_generation_key(path), default=0)
    html = render()
    with self._cache.transact():
      if self._cache.get(_generation_key(path), default=0) == generation:
        self._cache.set(url, html, tag=path)
      else:
        LOG.debug("dropped render of %s, invalidated while rendering", url)
    return html

  def revalidate_path(self, path: str) -> None:
    with self._cache.transact():
      self._cache.incr(_generation_key(path))
      dropped = self._cache.evict(path)
    LOG.debug("revalidated %s (%d cached renders dropped)", path, dropped)

  def close(self) -> None:
    self._cache.close()

@lru_cache
def get_page_cache() -> PageCache:
  return PageCache(PAGE_CACHE_DIR)
