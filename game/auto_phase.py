"""
Auto-Phase Trigger for Whispers.

Sweeps every game with auto-phase enabled and advances the ones whose
phase timer ran out. Each game is advanced on its own through the game
manager; one failing game never stops the sweep.
"""

import logging
from datetime import datetime, timedelta
from typing import Optional

from utils.helpers import as_utc, utcnow
from .errors import GameError, PhaseNotDueError
from .models import AutoPhaseEntry, AutoPhaseReport

logger = logging.getLogger(__name__)

def phase_deadline(phase_started_at: datetime, duration_hours: float) -> datetime:
    """When a phase that started at ``phase_started_at`` runs out."""
    return as_utc(phase_started_at) + timedelta(hours=duration_hours)

def time_remaining_ms(phase_started_at: datetime, duration_hours: float,
                      now: Optional[datetime] = None) -> int:
    """Milliseconds left in the phase, never below zero."""
    now = as_utc(now) if now else utcnow()
    remaining = phase_deadline(phase_started_at, duration_hours) - now
    return max(0, int(remaining.total_seconds() * 1000))

class AutoPhaseScheduler:
    """
    Periodic trigger for automatic phase advancement.

    ``check_and_advance_all`` does one sweep and can be called from an HTTP
    route or a cron job. ``start`` runs sweeps on a Socket.IO background
    task every ``interval_seconds``.
    """

    def __init__(self, game_manager):
        self.game_manager = game_manager
        self._running = False

    @property
    def running(self) -> bool:
        return self._running

    def check_and_advance_all(self, now: Optional[datetime] = None) -> AutoPhaseReport:
        """
        Advance every auto-phase game whose timer has elapsed.

        Args:
            now: Reference time for the sweep (current UTC time if None)

        Returns:
            AutoPhaseReport with one entry per checked game
        """
        now = as_utc(now) if now else utcnow()
        candidates = self.game_manager.get_auto_phase_candidates()
        report = AutoPhaseReport(games_checked=len(candidates))

        for game in candidates:
            game_id = game['id']
            game_code = game['code']

            remaining = time_remaining_ms(game['phase_started_at'], game['phase_duration_hours'], now)
            if remaining > 0:
                report.results.append(AutoPhaseEntry(
                    game_id=game_id,
                    game_code=game_code,
                    action='no_action',
                    time_remaining_ms=remaining
                ))
                continue

            try:
                outcome = self.game_manager.advance_phase(game_id, trigger='auto', now=now)
                report.results.append(AutoPhaseEntry(
                    game_id=game_id,
                    game_code=game_code,
                    action='phase_advanced',
                    outcome=outcome
                ))
                logger.info(f"Auto-advanced game {game_code} to {outcome.next_phase.value} {outcome.next_day}")
            except PhaseNotDueError as e:
                # Changed since the candidate scan
                logger.info(f"Skipping auto-phase for game {game_code}: {e.message}")
                report.results.append(AutoPhaseEntry(
                    game_id=game_id,
                    game_code=game_code,
                    action='no_action',
                    time_remaining_ms=e.time_remaining_ms
                ))
            except GameError as e:
                logger.warning(f"Auto-phase failed for game {game_code}: {e.message}")
                report.results.append(AutoPhaseEntry(
                    game_id=game_id, game_code=game_code, action='error', error=e.message
                ))
            except Exception as e:
                logger.exception(f"Unexpected auto-phase error for game {game_code}")
                report.results.append(AutoPhaseEntry(
                    game_id=game_id, game_code=game_code, action='error', error=str(e)
                ))

        logger.info(f"Auto-phase sweep: {report.games_checked} checked, "
                    f"{len(report.advanced)} advanced, {len(report.errors)} errors")
        return report

    def start(self, socketio, interval_seconds: int):
        """Run a sweep every ``interval_seconds`` on a background task."""
        if self._running:
            logger.warning("Auto-phase scheduler already running")
            return
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")

        self._running = True
        socketio.start_background_task(self._run, socketio, interval_seconds)
        logger.info(f"Auto-phase scheduler started, sweeping every {interval_seconds}s")

    def stop(self):
        """Stop after the current sleep ends."""
        self._running = False
        logger.info("Auto-phase scheduler stopped")

    def _run(self, socketio, interval_seconds: int):
        while self._running:
            socketio.sleep(interval_seconds)
            if not self._running:
                break
            try:
                self.check_and_advance_all()
            except Exception:
                logger.exception("Auto-phase sweep failed")
