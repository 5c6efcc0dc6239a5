"""
Scheduler APScheduler — tâches périodiques PRINT_BUILDER.

Jobs actifs :
- refresh_catalog : toutes les CATALOG_REFRESH_MINUTES (15 par défaut) — recharge le catalogue
                    d'options depuis la DB pour que les tarifs modifiés soient pris en compte
"""
import logging, os
from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.interval import IntervalTrigger

from product_builder import CatalogUnavailable

log = logging.getLogger(__name__)

_scheduler: BackgroundScheduler | None = None


def start_scheduler():
    """Démarre le scheduler et enregistre les jobs. Idempotent."""
    global _scheduler
    if _scheduler and _scheduler.running:
        return

    _scheduler = BackgroundScheduler(timezone="UTC")

    minutes = int(os.getenv("CATALOG_REFRESH_MINUTES", "15"))
    _scheduler.add_job(
        _job_refresh_catalog,
        trigger=IntervalTrigger(minutes=minutes),
        id="refresh_catalog",
        replace_existing=True,
        misfire_grace_time=60,
    )

    _scheduler.start()
    log.info("Scheduler démarré — %d job(s)", len(_scheduler.get_jobs()))


def stop_scheduler():
    """Arrête proprement le scheduler (appelé au shutdown)."""
    global _scheduler
    if _scheduler and _scheduler.running:
        _scheduler.shutdown(wait=False)
        log.info("Scheduler arrêté")


def scheduler_status() -> list[dict]:
    """État des jobs pour GET /api/scheduler."""
    if not _scheduler:
        return [{"id": "—", "next_run": "non démarré", "trigger": "—"}]
    jobs = []
    for j in _scheduler.get_jobs():
        next_run = str(j.next_run_time) if j.next_run_time else "—"
        jobs.append({"id": j.id, "next_run": next_run, "trigger": str(j.trigger)})
    return jobs or [{"id": "—", "next_run": "aucun job", "trigger": "—"}]


# ── Implémentation des jobs ────────────────────────────────────────────────

def _job_refresh_catalog():
    """Recharge le cache catalogue ; en cas d'échec l'ancien catalogue reste en place."""
    from .database import catalog_cache
    try:
        catalog = catalog_cache.refresh()
        log.info("Catalogue rechargé — %d papiers", len(catalog.papers))
    except CatalogUnavailable as e:
        log.error("_job_refresh_catalog : %s", e.message)
