"""
Blocker Lifecycle Manager

Owns the persisted Blocker rows for one tournament:
- rescan(): replace every unresolved blocker with fresh detector output;
  resolved blockers are kept as history
- resolve(): Active -> Resolved (terminal); unknown ids are a no-op
- add_manual(): insert a blocker raised by another collaborator
- remove(): delete a blocker row, resolved or not

Identity: each rescan creates new rows (new id, new created_at) even for a
violation that persists. Consumers needing a stable key use `fingerprint`.
A resolved blocker is never reactivated; re-detection creates a new row.
"""
import logging
from typing import Iterable, List, Optional, Sequence

from sqlmodel import Session, select

from tournament_scheduler.models.blocker import Blocker, BlockerSeverity, BlockerSource, BlockerType
from tournament_scheduler.models.match import Match
from tournament_scheduler.models.tournament import Tournament, utcnow
from tournament_scheduler.services.conflict_detector import (
    BlockerCheck,
    DetectedBlocker,
    blocker_fingerprint,
    detect_blockers,
)
from tournament_scheduler.services.entity_store import EntityNotFoundError, load_snapshot

logger = logging.getLogger(__name__)


def _detached_copy(b: Blocker, affected_match_ids: List[int]) -> Blocker:
    """Unsaved copy of a blocker row; String columns come back as enum members."""
    return Blocker(
        id=b.id,
        tournament_id=b.tournament_id,
        blocker_type=BlockerType(b.blocker_type),
        severity=BlockerSeverity(b.severity),
        description=b.description,
        affected_match_ids=affected_match_ids,
        suggested_resolution=b.suggested_resolution,
        source=BlockerSource(b.source),
        fingerprint=b.fingerprint,
        is_resolved=b.is_resolved,
        created_at=b.created_at,
        resolved_at=b.resolved_at,
    )


class BlockerLifecycleManager:
    """Merges detector output with blocker history for a tournament."""

    def __init__(self, session: Session, tournament_id: int):
        if not session.get(Tournament, tournament_id):
            raise EntityNotFoundError(f"Tournament {tournament_id} not found")
        self.session = session
        self.tournament_id = tournament_id

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def _query(self, resolved: Optional[bool] = None):
        query = select(Blocker).where(Blocker.tournament_id == self.tournament_id)
        if resolved is not None:
            query = query.where(Blocker.is_resolved == resolved)
        return query.order_by(Blocker.id)

    def _existing_match_ids(self) -> set:
        return set(self.session.exec(select(Match.id).where(Match.tournament_id == self.tournament_id)).all())

    def _drop_stale_matches(self, blockers: Iterable[Blocker]) -> List[Blocker]:
        """
        Filter affected_match_ids down to matches that still exist.

        The returned objects are unsaved copies so the stored history is not
        rewritten by a read.
        """
        existing = self._existing_match_ids()
        result = []
        for b in blockers:
            live_ids = [mid for mid in (b.affected_match_ids or []) if mid in existing]
            if len(live_ids) != len(b.affected_match_ids or []):
                logger.debug("Blocker %s references deleted match(es); filtering", b.id)
                b = _detached_copy(b, live_ids)
            result.append(b)
        return result

    def list_blockers(self, include_resolved: bool = True) -> List[Blocker]:
        """Resolved history first, then unresolved, each in id order."""
        resolved = list(self.session.exec(self._query(resolved=True)).all()) if include_resolved else []
        active = list(self.session.exec(self._query(resolved=False)).all())
        return self._drop_stale_matches(resolved + active)

    def get(self, blocker_id: int) -> Optional[Blocker]:
        blocker = self.session.get(Blocker, blocker_id)
        if blocker is None or blocker.tournament_id != self.tournament_id:
            return None
        return blocker

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def _persist(self, detected: DetectedBlocker) -> Blocker:
        blocker = Blocker(
            tournament_id=self.tournament_id,
            blocker_type=detected.blocker_type,
            severity=detected.severity,
            description=detected.description,
            affected_match_ids=list(detected.affected_match_ids),
            suggested_resolution=detected.suggested_resolution,
            source=BlockerSource.detector,
            fingerprint=detected.fingerprint,
            is_resolved=False,
            created_at=utcnow(),
        )
        self.session.add(blocker)
        return blocker

    def rescan(self, extra_checks: Sequence[BlockerCheck] = ()) -> List[Blocker]:
        """
        Run detection and replace the unresolved set.

        final = previously resolved ++ newly detected

        Raises:
            ParseError if a stored match time is malformed (nothing is changed)
        """
        snapshot = load_snapshot(self.session, self.tournament_id)
        detected = detect_blockers(snapshot, extra_checks=extra_checks)

        stale = self.session.exec(self._query(resolved=False)).all()
        for b in stale:
            self.session.delete(b)

        fresh = [self._persist(d) for d in detected]
        self.session.commit()
        for b in fresh:
            self.session.refresh(b)

        logger.info(
            "Rescan for tournament %d: replaced %d unresolved blocker(s) with %d",
            self.tournament_id,
            len(stale),
            len(fresh),
        )
        return self.list_blockers(include_resolved=True)

    def resolve(self, blocker_id: int) -> Optional[Blocker]:
        """Mark a blocker resolved. Unknown or foreign ids are silently ignored."""
        blocker = self.get(blocker_id)
        if blocker is None:
            logger.debug("Resolve ignored: blocker %s not found in tournament %d", blocker_id, self.tournament_id)
            return None
        if blocker.is_resolved:
            return blocker

        blocker.is_resolved = True
        blocker.resolved_at = utcnow()
        self.session.add(blocker)
        self.session.commit()
        self.session.refresh(blocker)
        logger.info("Blocker %d resolved (%s)", blocker.id, blocker.blocker_type)
        return blocker

    def add_manual(
        self,
        blocker_type: BlockerType,
        severity: BlockerSeverity,
        description: str,
        affected_match_ids: Iterable[int] = (),
        suggested_resolution: Optional[str] = None,
    ) -> Blocker:
        """Insert an externally raised blocker; id is allocated by the database."""
        ids = list(affected_match_ids)
        blocker = Blocker(
            tournament_id=self.tournament_id,
            blocker_type=BlockerType(blocker_type),
            severity=BlockerSeverity(severity),
            description=description,
            affected_match_ids=ids,
            suggested_resolution=suggested_resolution,
            source=BlockerSource.manual,
            fingerprint=blocker_fingerprint(blocker_type, ids),
            is_resolved=False,
            created_at=utcnow(),
        )
        self.session.add(blocker)
        self.session.commit()
        self.session.refresh(blocker)
        logger.info(
            "Manual %s blocker %d added for tournament %d", blocker.blocker_type, blocker.id, self.tournament_id
        )
        return blocker

    def remove(self, blocker_id: int) -> bool:
        """Delete a blocker row outright (history included). False if not in this tournament."""
        blocker = self.get(blocker_id)
        if blocker is None:
            return False
        self.session.delete(blocker)
        self.session.commit()
        logger.info("Blocker %d removed from tournament %d", blocker_id, self.tournament_id)
        return True
