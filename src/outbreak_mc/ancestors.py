"""Candidate-ancestor sampling and tree helpers."""

from __future__ import annotations

from typing import List

import numpy as np

from .states import to_case_id, to_index


class EmptyCandidatePoolError(RuntimeError):
    """No case is infected strictly before the case needing an ancestor."""


def candidate_ancestors(t_inf: np.ndarray, case_id: int) -> np.ndarray:
    """0-based indices of the cases infected strictly before ``case_id``."""

    t_inf = np.asarray(t_inf)
    i = to_index(case_id, t_inf.size)
    return np.flatnonzero(t_inf < t_inf[i])


def has_candidates(t_inf: np.ndarray, case_id: int) -> bool:
    t_inf = np.asarray(t_inf)
    i = to_index(case_id, t_inf.size)
    return bool(np.any(t_inf < t_inf[i]))


def pick_ancestor(rng: np.random.Generator, t_inf: np.ndarray, case_id: int) -> int:
    """Uniformly pick a 1..N id among the cases infected before ``case_id``.

    Consumes exactly one ``rng.integers`` draw.
    """

    pool = candidate_ancestors(t_inf, case_id)
    if pool.size == 0:
        raise EmptyCandidatePoolError(
            f"case {case_id} has no candidate ancestor (t_inf={np.asarray(t_inf)[case_id - 1]})"
        )
    j = int(rng.integers(pool.size))
    return to_case_id(pool[j], len(t_inf))


def find_children(alpha: np.ndarray, case_id: int) -> List[int]:
    """1..N ids of the cases whose ancestor is ``case_id``."""

    alpha = np.asarray(alpha)
    i = to_index(case_id, alpha.size)
    return [int(j) + 1 for j in np.flatnonzero(alpha == i)]


__all__ = [name for name in globals() if not name.startswith("_")]
