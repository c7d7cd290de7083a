"""
Filament-Ledger

Bucht verbrauchtes Filamentgewicht auf den `used_weight`-Zähler eines Filaments:
- consume: Gewicht addieren (keine Obergrenze, Überverbrauch bleibt sichtbar)
- refund: Gewicht abziehen, nie unter 0

Beide Funktionen committen nicht; der Aufrufer bestimmt die Transaktion.
"""
import logging
from datetime import datetime
from typing import Optional

from sqlmodel import Session

from printqueue.models.filament import Filament

logger = logging.getLogger("ledger")


def find_filament(session: Session, filament_id: Optional[int]) -> Optional[Filament]:
    if not filament_id:
        return None
    return session.get(Filament, filament_id)


def consume(session: Session, filament_id: Optional[int], weight: float) -> Optional[Filament]:
    filament = find_filament(session, filament_id)
    if filament is None:
        logger.debug("[LEDGER] consume übersprungen, Filament %s existiert nicht", filament_id)
        return None
    filament.used_weight = (filament.used_weight or 0) + weight
    filament.updated_at = datetime.utcnow()
    session.add(filament)
    logger.info("[LEDGER] Filament %s: +%.2f g (verbraucht=%.2f g)", filament.id, weight, filament.used_weight)
    return filament


def refund(session: Session, filament_id: Optional[int], weight: float) -> Optional[Filament]:
    filament = find_filament(session, filament_id)
    if filament is None:
        logger.debug("[LEDGER] refund übersprungen, Filament %s existiert nicht", filament_id)
        return None
    filament.used_weight = max(0.0, (filament.used_weight or 0) - weight)
    filament.updated_at = datetime.utcnow()
    session.add(filament)
    logger.info("[LEDGER] Filament %s: -%.2f g (verbraucht=%.2f g)", filament.id, weight, filament.used_weight)
    return filament


def remaining_weight(filament: Filament) -> float:
    return max(0.0, (filament.total_weight or 0) - (filament.used_weight or 0))


def remaining_percent(filament: Filament) -> Optional[float]:
    """Restkapazität in Prozent, bezogen auf Spulengewicht × Spulenanzahl."""
    capacity = (filament.spool_weight or filament.total_weight or 0) * (filament.spool_count or 1)
    if capacity <= 0:
        return None
    percent = remaining_weight(filament) / capacity * 100.0
    return round(max(0.0, min(100.0, percent)), 1)
