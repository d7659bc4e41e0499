"""Reference log-likelihood oracle for the outbreak model.

Every entry point has the signature ``fn(data, state, cases=None) -> float``.
``cases`` selects which per-case contributions are summed: ``None`` for the
whole population, a single 1..N case id, or a sequence of ids. Invalid
states score ``-inf`` rather than raising, so the moves simply reject them.

Per-case contributions are computed by JIT-compiled JAX kernels:

- genetic: ``d log(mu) + (L - d) log(1 - mu)`` for the SNP distance ``d``
  between a case and its ancestor over ``L`` sites,
- infection timing: ``log w(t_inf[i] - t_inf[alpha[i]])``,
- sampling timing: ``log f(dates[i] - t_inf[i])``.

Root cases contribute nothing to the genetic and infection terms.
"""

from __future__ import annotations

from typing import Iterable, Optional, Union

import jax
import jax.numpy as jnp
import numpy as np
from jax.scipy.special import xlogy

from .data import OutbreakData
from .states import NO_ANCESTOR, ParamState, to_index

jax.config.update("jax_enable_x64", True)

CaseSelector = Optional[Union[int, Iterable[int]]]


def _delay_terms(delay: jnp.ndarray, log_dens: jnp.ndarray) -> jnp.ndarray:
    # log_dens[k] is the log mass of whole delay k+1; anything else is impossible
    n = log_dens.shape[0]
    ok = (delay >= 1) & (delay <= n) & (delay == jnp.floor(delay))
    idx = jnp.clip(delay - 1, 0, n - 1).astype(jnp.int32)
    return jnp.where(ok, log_dens[idx], -jnp.inf)


@jax.jit
def _genetic_terms(mu, alpha, dna_dist, n_sites):
    has_anc = alpha != NO_ANCESTOR
    anc = jnp.where(has_anc, alpha, 0)
    d = dna_dist[jnp.arange(alpha.shape[0]), anc]
    terms = xlogy(d, mu) + xlogy(n_sites - d, 1.0 - mu)
    return jnp.where(has_anc, terms, 0.0)


@jax.jit
def _infection_terms(t_inf, alpha, log_w_dens):
    has_anc = alpha != NO_ANCESTOR
    anc = jnp.where(has_anc, alpha, 0)
    terms = _delay_terms(t_inf - t_inf[anc], log_w_dens)
    return jnp.where(has_anc, terms, 0.0)


@jax.jit
def _sampling_terms(t_inf, dates, log_f_dens):
    return _delay_terms(dates - t_inf, log_f_dens)


def _sum_terms(terms, cases: CaseSelector, n_cases: int) -> float:
    terms = np.asarray(terms, dtype=np.float64)
    if cases is None:
        return float(terms.sum())
    if isinstance(cases, (int, np.integer)):
        return float(terms[to_index(cases, n_cases)])
    idx = [to_index(c, n_cases) for c in cases]
    return float(terms[idx].sum())


def genetic_loglik(data: OutbreakData, state: ParamState, cases: CaseSelector = None) -> float:
    """Genetic log-likelihood; 0 without sequence data, -inf for mu outside [0, 1]."""

    if not data.has_dna:
        return 0.0
    if not 0.0 <= state.mu <= 1.0:
        return -np.inf
    terms = _genetic_terms(
        state.mu, jnp.asarray(state.alpha), jnp.asarray(data.dna_dist), data.n_sites
    )
    return _sum_terms(terms, cases, data.N)


def timing_infections_loglik(
    data: OutbreakData, state: ParamState, cases: CaseSelector = None
) -> float:
    terms = _infection_terms(
        jnp.asarray(state.t_inf), jnp.asarray(state.alpha), jnp.asarray(data.log_w_dens)
    )
    return _sum_terms(terms, cases, data.N)


def timing_sampling_loglik(
    data: OutbreakData, state: ParamState, cases: CaseSelector = None
) -> float:
    terms = _sampling_terms(
        jnp.asarray(state.t_inf), jnp.asarray(data.dates), jnp.asarray(data.log_f_dens)
    )
    return _sum_terms(terms, cases, data.N)


def timing_loglik(data: OutbreakData, state: ParamState, cases: CaseSelector = None) -> float:
    return timing_infections_loglik(data, state, cases) + timing_sampling_loglik(
        data, state, cases
    )


def composite_loglik(data: OutbreakData, state: ParamState, cases: CaseSelector = None) -> float:
    """Genetic plus timing log-likelihood."""

    return genetic_loglik(data, state, cases) + timing_loglik(data, state, cases)


__all__ = [name for name in globals() if not name.startswith("_")]
