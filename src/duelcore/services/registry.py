"""In-process bookkeeping for a transport that hosts many matches.

The registry pairs sessions two at a time, routes each action to the
session's match and hands back the per-viewer snapshots the transport
should deliver. It owns no sockets; it is created and injected by whatever
server process wraps it.
"""

from __future__ import annotations

import dataclasses
import logging
import threading
from dataclasses import dataclass, field
from typing import Callable

from duelcore.engine.actions import Action
from duelcore.engine.engine import MatchEngine

from .telemetry import TelemetryService

logger = logging.getLogger(__name__)

EngineFactory = Callable[[str, str], MatchEngine]


@dataclass
class Dispatch:
    """Outcome of a registry call.

    `snapshots` maps each session that must be updated to its own view of the
    match; it is empty when nothing needs broadcasting. A failed action only
    carries the error for the offending session. `notify` names a session
    that lost its opponent.
    """

    ok: bool
    snapshots: dict[str, dict[str, object]] = field(default_factory=dict)
    error: str | None = None
    code: str | None = None
    notify: str | None = None


@dataclass
class _Entry:
    engine: MatchEngine
    lock: threading.Lock = field(default_factory=threading.Lock)


def _broadcast(engine: MatchEngine) -> dict[str, dict[str, object]]:
    return {pid: engine.get_game_state(pid) for pid in engine.player_ids}


class MatchRegistry:
    def __init__(
        self,
        engine_factory: EngineFactory | None = None,
        telemetry: TelemetryService | None = None,
    ) -> None:
        self._factory: EngineFactory = engine_factory or MatchEngine
        self._telemetry = telemetry
        self._lock = threading.Lock()  # guards the maps below, never held during engine calls
        self._sessions: set[str] = set()
        self._waiting: list[str] = []
        self._matches: dict[str, _Entry] = {}

    def _record(self, event_type: str, payload: dict[str, object]) -> None:
        if self._telemetry is not None:
            self._telemetry.log(event_type, payload)

    def _pair_waiting(self) -> _Entry | None:
        # Caller holds self._lock.
        if len(self._waiting) < 2:
            return None
        p1, p2 = self._waiting.pop(0), self._waiting.pop(0)
        entry = _Entry(engine=self._factory(p1, p2))
        self._matches[p1] = entry
        self._matches[p2] = entry
        return entry

    def _announce(self, entry: _Entry) -> dict[str, dict[str, object]]:
        p1, p2 = entry.engine.player_ids
        logger.info("Paired %s and %s", p1, p2)
        self._record("match_started", {"players": [p1, p2], "seed": entry.engine.state.seed})
        with entry.lock:
            return _broadcast(entry.engine)

    def connect(self, session_id: str) -> Dispatch:
        with self._lock:
            if session_id in self._sessions:
                raise ValueError(f"Session already connected: {session_id}")
            self._sessions.add(session_id)
            self._waiting.append(session_id)
            entry = self._pair_waiting()

        if entry is None:
            logger.info("Session %s waiting for an opponent", session_id)
            return Dispatch(ok=True)
        return Dispatch(ok=True, snapshots=self._announce(entry))

    def match_for(self, session_id: str) -> MatchEngine | None:
        with self._lock:
            entry = self._matches.get(session_id)
        return entry.engine if entry is not None else None

    def submit(self, session_id: str, action: Action) -> Dispatch:
        """Apply `action` on behalf of `session_id`.

        The actor is always the submitting session, whatever player the
        action names.
        """
        with self._lock:
            entry = self._matches.get(session_id)
        if entry is None:
            return Dispatch(ok=False, error="No match for this session.", code="no_match")

        action = dataclasses.replace(action, player=session_id)
        with entry.lock:
            result = entry.engine.apply(action)
            if not result.ok:
                return Dispatch(ok=False, error=result.error, code=result.code)
            snapshots = _broadcast(entry.engine)
            winner = entry.engine.winner_id
            ended = any(e.get("type") == "GAME_ENDED" for e in result.events)

        if ended:
            self._record(
                "match_ended",
                {"players": list(entry.engine.player_ids), "winner": winner},
            )
        return Dispatch(ok=True, snapshots=snapshots)

    def disconnect(self, session_id: str) -> Dispatch:
        """Drop a session and discard its match.

        `notify` names the opponent to tell about the lost session, if there
        was a match. The opponent stays connected and goes back to waiting;
        when someone else is already waiting the two are paired at once and
        the new match's snapshots come back with the dispatch.
        """
        with self._lock:
            self._sessions.discard(session_id)
            if session_id in self._waiting:
                self._waiting.remove(session_id)
            entry = self._matches.pop(session_id, None)
            if entry is None:
                logger.info("Session %s disconnected", session_id)
                return Dispatch(ok=True)
            opponent = entry.engine.get_opponent_id(session_id)
            self._matches.pop(opponent, None)
            self._waiting.append(opponent)
            paired = self._pair_waiting()

        logger.info("Session %s disconnected, match with %s discarded", session_id, opponent)
        self._record("session_lost", {"session": session_id, "opponent": opponent})
        if paired is None:
            return Dispatch(ok=True, notify=opponent)
        return Dispatch(ok=True, snapshots=self._announce(paired), notify=opponent)

    @property
    def waiting(self) -> list[str]:
        with self._lock:
            return list(self._waiting)

    def __len__(self) -> int:
        with self._lock:
            return len({id(e) for e in self._matches.values()})
