"""
Versioned metabolic profile snapshots.

The profile store keeps every fitted model; exactly one per athlete is
marked current. Promotion is computed here as a pure function over the
history so the persistence layer can apply it in a single transaction.
"""

import logging
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Any, Dict, Iterable, Optional, Tuple

from .metrics.metabolic import MetabolicModel
from .metrics.zones import Zone

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MetabolicSnapshot:
    """One saved metabolic profile for an athlete."""

    athlete_id: str
    version: int
    model: MetabolicModel
    zones: Dict[str, Zone] = field(default_factory=dict)
    created_at: Optional[datetime] = None
    is_current: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "athlete_id": self.athlete_id,
            "version": self.version,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "is_current": self.is_current,
            "model": self.model.to_dict(),
            "zones": {key: zone.to_dict() for key, zone in self.zones.items()},
        }


def promote_snapshot(
    history: Iterable[MetabolicSnapshot],
    athlete_id: str,
    model: MetabolicModel,
    zones: Optional[Dict[str, Zone]] = None,
    created_at: Optional[datetime] = None,
) -> Tuple[MetabolicSnapshot, ...]:
    """
    Append a new current snapshot for an athlete.

    The athlete's previous snapshots are kept but demoted; snapshots of
    other athletes are returned unchanged.

    Args:
        history: Existing snapshots (any athletes)
        athlete_id: Athlete the new model belongs to
        model: Newly fitted model
        zones: Zone table saved with the model (see build_zone_table)
        created_at: Timestamp supplied by the caller

    Returns:
        New history tuple ending with the promoted snapshot
    """
    updated = []
    latest_version = 0
    for snapshot in history:
        if snapshot.athlete_id == athlete_id:
            latest_version = max(latest_version, snapshot.version)
            if snapshot.is_current:
                snapshot = replace(snapshot, is_current=False)
        updated.append(snapshot)

    promoted = MetabolicSnapshot(
        athlete_id=athlete_id,
        version=latest_version + 1,
        model=model,
        zones=dict(zones or {}),
        created_at=created_at,
        is_current=True,
    )
    logger.debug(f"Promoting metabolic profile v{promoted.version} for athlete {athlete_id}")
    updated.append(promoted)
    return tuple(updated)


def current_snapshot(
    history: Iterable[MetabolicSnapshot],
    athlete_id: str,
) -> Optional[MetabolicSnapshot]:
    """Return the athlete's current snapshot, or None if none was promoted."""
    for snapshot in history:
        if snapshot.athlete_id == athlete_id and snapshot.is_current:
            return snapshot
    return None
