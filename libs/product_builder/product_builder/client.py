"""
Client HTTP du calcul de prix distant (POST /api/calculate-price).

Utilisé pour les quantités libres : l'UI relance un calcul à chaque frappe. Chaque appel
reçoit un numéro ; une réponse arrivée après celle d'un appel plus récent est ignorée
(dernier appel gagnant). Pas de retry : un échec remonte en PricingUnavailable.
"""
import logging
import os
import threading
from typing import Any, Dict, List, Optional

import requests

from .errors import PricingUnavailable
from .selection import Selection

log = logging.getLogger(__name__)

_DEFAULT_TIMEOUT = 10


class PriceClient:
    def __init__(self, base_url: Optional[str] = None, session: Optional[requests.Session] = None,
                 timeout: float = _DEFAULT_TIMEOUT):
        base_url = base_url or os.getenv("PRICE_API_URL", "http://localhost:8001")
        self.url = base_url.rstrip("/") + "/api/calculate-price"
        self.session = session or requests.Session()
        self.timeout = timeout
        self.latest: Optional[Dict[str, Any]] = None
        self._issued = 0
        self._applied = 0
        self._lock = threading.Lock()

    def calculate(
        self,
        selection: Selection,
        qty: int,
        product_type: str = "flyer",
        product_id: Optional[int] = None,
        schema: Optional[dict] = None,
        all_qtys: Optional[List[int]] = None,
    ) -> Optional[Dict[str, Any]]:
        """
        Retourne {selected, byQty} — ou None si un appel plus récent a déjà répondu.
        """
        payload: Dict[str, Any] = {
            "customer":    selection.model_dump(by_alias=True, mode="json"),
            "qty":         qty,
            "productType": product_type,
        }
        if product_id is not None:
            payload["productId"] = product_id
        if schema is not None:
            payload["schema"] = schema
        if all_qtys:
            payload["allQtys"] = list(all_qtys)

        with self._lock:
            self._issued += 1
            ticket = self._issued

        try:
            resp = self.session.post(self.url, json=payload, timeout=self.timeout)
            resp.raise_for_status()
            data = resp.json()
        except (requests.RequestException, ValueError) as e:
            log.error("Calcul de prix distant en échec (qty=%s) : %s", qty, e)
            raise PricingUnavailable(f"Calcul de prix indisponible : {e}") from e

        with self._lock:
            if ticket < self._applied:
                log.debug("Réponse #%d ignorée (déjà remplacée par #%d)", ticket, self._applied)
                return None
            self._applied = ticket
            self.latest = data
        return data
