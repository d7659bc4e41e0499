"""Shared dataclasses and constants for outbreak parameter states and traces.

Cases are addressed by ids on the 1..N scale everywhere outside this module's
storage. Internally ``alpha`` holds 0-based indices into the contiguous case
arrays, with ``NO_ANCESTOR`` marking an index (root) case. ``to_index`` and
``to_case_id`` are the only places where the two scales meet.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence

import numpy as np

# Internal sentinel for "no ancestor" (root case).
NO_ANCESTOR = -1

# Mapping of move names to compact integer identifiers used in traces.
MOVE_IDS = {
    "mu": 0,
    "t_inf": 1,
    "alpha": 2,
}


def to_index(case_id: int, n_cases: int) -> int:
    """Convert a 1..N case id into a 0-based storage index."""

    case_id = int(case_id)
    if not 1 <= case_id <= n_cases:
        raise IndexError(f"case id {case_id} outside 1..{n_cases}")
    return case_id - 1


def to_case_id(index: int, n_cases: int) -> int:
    """Convert a 0-based storage index into a 1..N case id."""

    index = int(index)
    if not 0 <= index < n_cases:
        raise IndexError(f"case index {index} outside 0..{n_cases - 1}")
    return index + 1


@dataclass
class ParamState:
    """One MCMC state: mutation rate, infection times and ancestries."""

    mu: float
    t_inf: np.ndarray  # (N,)
    alpha: np.ndarray  # (N,) 0-based, NO_ANCESTOR for roots

    def __post_init__(self):
        self.mu = float(self.mu)
        self.t_inf = np.asarray(self.t_inf)
        self.alpha = np.asarray(self.alpha, dtype=np.int64)
        if self.t_inf.ndim != 1 or self.alpha.shape != self.t_inf.shape:
            raise ValueError(
                f"t_inf and alpha must be 1-D of equal length, got "
                f"{self.t_inf.shape} and {self.alpha.shape}"
            )
        bad = (self.alpha != NO_ANCESTOR) & (
            (self.alpha < 0) | (self.alpha >= self.t_inf.size)
        )
        if bad.any():
            raise ValueError(f"ancestor indices out of range: {self.alpha[bad]}")

    @property
    def n_cases(self) -> int:
        return int(self.t_inf.size)

    @classmethod
    def from_ids(
        cls, mu: float, t_inf: Sequence, alpha_ids: Sequence[Optional[int]]
    ) -> "ParamState":
        """Build a state from ancestors given as 1..N ids (``None`` for roots)."""

        n = len(alpha_ids)
        alpha = np.array(
            [NO_ANCESTOR if a is None else to_index(a, n) for a in alpha_ids],
            dtype=np.int64,
        )
        return cls(mu=mu, t_inf=np.array(t_inf, copy=True), alpha=alpha)

    def alpha_ids(self) -> List[Optional[int]]:
        return [None if a == NO_ANCESTOR else int(a) + 1 for a in self.alpha]

    def ancestor_of(self, case_id: int) -> Optional[int]:
        a = self.alpha[to_index(case_id, self.n_cases)]
        return None if a == NO_ANCESTOR else int(a) + 1

    def copy(self) -> "ParamState":
        return ParamState(
            mu=self.mu,
            t_inf=np.array(self.t_inf, copy=True),
            alpha=np.array(self.alpha, copy=True),
        )


def check_ancestry(state: ParamState) -> List[int]:
    """Return the case ids whose ancestor is not infected strictly before them."""

    has_anc = state.alpha != NO_ANCESTOR
    anc = np.where(has_anc, state.alpha, 0)
    bad = has_anc & ~(state.t_inf[anc] < state.t_inf)
    return [int(i) + 1 for i in np.flatnonzero(bad)]


@dataclass
class MoveEvent:
    """Metropolis–Hastings proposal record."""

    move_type: str
    move_id: int  # as in MOVE_IDS
    case: Optional[int]  # 1..N id; None for the mutation rate
    accepted: bool
    old_ll: float
    new_ll: float


@dataclass
class EventLog:
    """Container for MH proposal records."""

    mh_events: List[MoveEvent] = field(default_factory=list)

    def record(self, move_type, case, accepted, old_ll, new_ll):
        self.mh_events.append(
            MoveEvent(
                move_type=move_type,
                move_id=MOVE_IDS[move_type],
                case=case,
                accepted=bool(accepted),
                old_ll=float(old_ll),
                new_ll=float(new_ll),
            )
        )

    def move_ids(self) -> np.ndarray:
        """Compact per-proposal move identifiers, in proposal order."""

        return np.array([ev.move_id for ev in self.mh_events], dtype=np.int32)

    def counts(self, move_type: str) -> tuple[int, int]:
        """Return ``(n_accepted, n_proposed)`` for one move type."""

        sel = [ev.accepted for ev in self.mh_events if ev.move_type == move_type]
        return int(sum(sel)), len(sel)

    def acceptance_rate(self, move_type: str) -> float:
        n_acc, n_prop = self.counts(move_type)
        return n_acc / n_prop if n_prop else float("nan")


@dataclass
class ChainTrace:
    """Sampled chain states, kept in memory."""

    step: List[int] = field(default_factory=list)
    loglik: List[float] = field(default_factory=list)
    mu: List[float] = field(default_factory=list)
    t_inf: List[np.ndarray] = field(default_factory=list)
    alpha: List[List[Optional[int]]] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.step)

    def record(self, step: int, state: ParamState, loglik: float):
        self.step.append(int(step))
        self.loglik.append(float(loglik))
        self.mu.append(state.mu)
        self.t_inf.append(state.t_inf.copy())
        self.alpha.append(state.alpha_ids())

    def to_arrays(self) -> Dict[str, np.ndarray]:
        """Stack the trace; roots appear as 0 in the ``alpha`` array."""

        alpha = [[0 if a is None else a for a in row] for row in self.alpha]
        return {
            "step": np.asarray(self.step, dtype=np.int64),
            "loglik": np.asarray(self.loglik, dtype=np.float64),
            "mu": np.asarray(self.mu, dtype=np.float64),
            "t_inf": np.stack(self.t_inf) if self.t_inf else np.empty((0, 0)),
            "alpha": np.asarray(alpha, dtype=np.int64) if alpha else np.empty((0, 0), dtype=np.int64),
        }


__all__ = [name for name in globals() if not name.startswith("_")]
