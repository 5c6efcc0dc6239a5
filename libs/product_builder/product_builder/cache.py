"""
Cache à durée de vie pour le catalogue (et tout chargement coûteux côté DB).

Horloge et TTL injectés : pas d'état global au niveau du module.
"""
import logging
import threading
import time
from typing import Callable, Generic, Optional, TypeVar

from .errors import CatalogUnavailable

log = logging.getLogger(__name__)

T = TypeVar("T")


class TTLCache(Generic[T]):
    def __init__(self, loader: Callable[[], T], ttl: float = 300,
                 clock: Callable[[], float] = time.monotonic):
        self._loader = loader
        self._ttl = ttl
        self._clock = clock
        self._value: Optional[T] = None
        self._loaded_at: Optional[float] = None
        self._lock = threading.Lock()

    @property
    def fresh(self) -> bool:
        return self._loaded_at is not None and self._clock() - self._loaded_at < self._ttl

    def get(self) -> T:
        with self._lock:
            if not self.fresh:
                self._load()
            return self._value

    def refresh(self) -> T:
        with self._lock:
            self._load()
            return self._value

    def purge(self) -> None:
        with self._lock:
            self._value = None
            self._loaded_at = None
        log.info("Cache purgé")

    def _load(self) -> None:
        try:
            value = self._loader()
        except CatalogUnavailable:
            raise
        except Exception as e:
            raise CatalogUnavailable(f"Chargement impossible : {e}") from e
        self._value = value
        self._loaded_at = self._clock()
