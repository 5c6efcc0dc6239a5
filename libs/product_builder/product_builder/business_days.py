"""
Jours ouvrés — date de sortie estimée par option de livraison.

Week-ends + jours fériés coréens ; après 14h la commande part du jour ouvré suivant.
`now` est toujours injecté par l'appelant (pas d'horloge globale).
"""
from datetime import date, datetime, timedelta
from typing import Iterable, Optional, Set

CUTOFF_HOUR = 14
_WEEKDAYS_KR = ["월", "화", "수", "목", "금", "토", "일"]

# à mettre à jour en début d'année
HOLIDAYS: Set[str] = {
    # 2025
    "2025-01-01", "2025-01-28", "2025-01-29", "2025-01-30", "2025-03-01",
    "2025-05-05", "2025-05-06", "2025-06-06", "2025-08-15", "2025-10-03",
    "2025-10-05", "2025-10-06", "2025-10-07", "2025-10-08", "2025-10-09",
    "2025-12-25",
    # 2026
    "2026-01-01", "2026-02-16", "2026-02-17", "2026-02-18", "2026-03-01",
    "2026-03-02", "2026-05-05", "2026-05-24", "2026-05-25", "2026-06-06",
    "2026-08-15", "2026-08-17", "2026-09-24", "2026-09-25", "2026-09-26",
    "2026-10-03", "2026-10-05", "2026-10-09", "2026-12-25",
}


def is_business_day(day: date, holidays: Optional[Iterable[str]] = None) -> bool:
    holidays = HOLIDAYS if holidays is None else set(holidays)
    return day.weekday() < 5 and day.isoformat() not in holidays


def business_date(business_days: int, now: datetime,
                  holidays: Optional[Iterable[str]] = None) -> date:
    """Date de sortie pour N jours ouvrés (0 = jour même)."""
    holidays = HOLIDAYS if holidays is None else set(holidays)
    day = now.date()
    if now.hour >= CUTOFF_HOUR or not is_business_day(day, holidays):
        day += timedelta(days=1)
        while not is_business_day(day, holidays):
            day += timedelta(days=1)

    count = 0
    while count < business_days:
        day += timedelta(days=1)
        if is_business_day(day, holidays):
            count += 1
    return day


def format_business_date(day: date) -> str:
    """3/5(목)"""
    return f"{day.month}/{day.day}({_WEEKDAYS_KR[day.weekday()]})"
