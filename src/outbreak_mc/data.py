"""Case data consumed by the likelihood and the moves."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import numpy as np


@dataclass(frozen=True)
class OutbreakData:
    """Observed outbreak data; the moves themselves only read ``N``."""

    N: int
    dates: np.ndarray  # (N,) integer sampling dates
    w_dens: np.ndarray  # generation time pmf, entry k <=> delay k+1
    f_dens: np.ndarray  # incubation pmf, entry k <=> delay k+1
    log_w_dens: np.ndarray
    log_f_dens: np.ndarray
    dna_dist: Optional[np.ndarray] = None  # (N, N) SNP distances
    n_sites: int = 0

    @property
    def has_dna(self) -> bool:
        return self.dna_dist is not None


def _as_pmf(dens, name: str) -> np.ndarray:
    dens = np.asarray(dens, dtype=np.float64)
    if dens.ndim != 1 or dens.size == 0:
        raise ValueError(f"{name} must be a non-empty 1-D array")
    if np.any(dens < 0) or not np.all(np.isfinite(dens)):
        raise ValueError(f"{name} must be finite and non-negative")
    total = dens.sum()
    if total <= 0:
        raise ValueError(f"{name} has no probability mass")
    return dens / total


def _as_day_offsets(dates) -> np.ndarray:
    dates = np.asarray(dates)
    if np.issubdtype(dates.dtype, np.datetime64):
        days = dates.astype("datetime64[D]")
        return (days - days.min()).astype(np.int64)
    if not np.all(np.equal(np.mod(dates, 1), 0)):
        raise ValueError("dates must be integer valued")
    return dates.astype(np.int64)


def pairwise_snp_distances(dna) -> np.ndarray:
    """Number of differing sites between every pair of aligned sequences."""

    dna = np.asarray(dna)
    if dna.ndim != 2:
        raise ValueError(f"dna must be an (N, L) alignment, got shape {dna.shape}")
    return (dna[:, None, :] != dna[None, :, :]).sum(axis=-1).astype(np.int64)


def make_data(
    dates,
    w_dens,
    f_dens=None,
    dna=None,
    dna_dist=None,
    n_sites: Optional[int] = None,
) -> OutbreakData:
    """Validate and assemble :class:`OutbreakData`.

    ``dna`` is an (N, L) alignment; alternatively pass a precomputed
    ``dna_dist`` together with ``n_sites``. When ``f_dens`` is omitted the
    generation time distribution is reused for the incubation period.
    """

    dates = _as_day_offsets(dates)
    if dates.ndim != 1 or dates.size == 0:
        raise ValueError("dates must be a non-empty 1-D array")
    N = int(dates.size)

    w = _as_pmf(w_dens, "w_dens")
    f = w.copy() if f_dens is None else _as_pmf(f_dens, "f_dens")

    if dna is not None and dna_dist is not None:
        raise ValueError("pass either dna or dna_dist, not both")
    if dna is not None:
        dna = np.asarray(dna)
        dna_dist = pairwise_snp_distances(dna)
        n_sites = int(dna.shape[1])
    elif dna_dist is not None:
        if n_sites is None:
            raise ValueError("n_sites is required with dna_dist")
        dna_dist = np.asarray(dna_dist, dtype=np.int64)
        if np.any(dna_dist < 0) or np.any(dna_dist > n_sites):
            raise ValueError("dna_dist entries must lie in [0, n_sites]")
    if dna_dist is not None and dna_dist.shape != (N, N):
        raise ValueError(f"dna_dist must have shape {(N, N)}, got {dna_dist.shape}")

    with np.errstate(divide="ignore"):
        log_w = np.log(w)
        log_f = np.log(f)

    return OutbreakData(
        N=N,
        dates=dates,
        w_dens=w,
        f_dens=f,
        log_w_dens=log_w,
        log_f_dens=log_f,
        dna_dist=dna_dist,
        n_sites=int(n_sites or 0),
    )


__all__ = [name for name in globals() if not name.startswith("_")]
