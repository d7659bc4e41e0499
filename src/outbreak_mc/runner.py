from __future__ import annotations

import logging
from typing import Callable, Optional, Tuple

import numpy as np
from tqdm.auto import tqdm

from .ancestors import has_candidates, pick_ancestor
from .config import MoveConfig
from .data import OutbreakData
from .likelihoods import composite_loglik, genetic_loglik, timing_loglik
from .mh_moves import move_alpha, move_mu, move_t_inf
from .states import NO_ANCESTOR, ChainTrace, EventLog, ParamState, to_index

logger = logging.getLogger(__name__)


def init_state(
    rng: np.random.Generator, data: OutbreakData, config: MoveConfig
) -> ParamState:
    """Starting point: most likely incubation before each sampling date.

    ``config.init_tree`` picks the starting tree: ``"star"`` hangs every later
    case off the earliest infection, ``"random"`` draws an ancestor uniformly
    among earlier cases. Cases with no earlier case are roots.
    """

    t_inf = data.dates - (int(np.argmax(data.f_dens)) + 1)
    alpha = np.full(data.N, NO_ANCESTOR, dtype=np.int64)

    if config.init_tree == "star":
        root = int(np.argmin(t_inf))
        alpha[t_inf > t_inf[root]] = root
    else:
        for i in range(data.N):
            if has_candidates(t_inf, i + 1):
                alpha[i] = to_index(pick_ancestor(rng, t_inf, i + 1), data.N)

    return ParamState(mu=config.init_mu, t_inf=t_inf, alpha=alpha)


def run_mcmc(
    data: OutbreakData,
    config: MoveConfig,
    *,
    rng: Optional[np.random.Generator] = None,
    init: Optional[ParamState] = None,
    genetic_fn: Callable[..., float] = genetic_loglik,
    timing_fn: Callable[..., float] = timing_loglik,
    composite_fn: Callable[..., float] = composite_loglik,
    progress: bool = True,
) -> Tuple[ParamState, ChainTrace, EventLog]:
    """
    Chain driver:
     - One iteration applies the enabled moves in the order mu -> t_inf -> alpha.
     - The state is recorded at iteration 0 and every ``sample_every`` iterations.
     - Every proposal is logged in the returned EventLog.
    """

    if rng is None:
        rng = np.random.default_rng(config.seed)

    # clone inputs
    state = init_state(rng, data, config) if init is None else init.copy()
    if state.n_cases != data.N:
        raise ValueError(f"initial state holds {state.n_cases} cases, data has N={data.N}")

    trace = ChainTrace()
    events = EventLog()

    ll = composite_fn(data, state)
    if not np.isfinite(ll):
        logger.warning("initial state has non-finite log-likelihood (%s)", ll)
    trace.record(0, state, ll)

    logger.info(
        "running %d iterations on %d cases (sample every %d)",
        config.n_iter,
        data.N,
        config.sample_every,
    )

    # main loop
    for step in tqdm(
        range(1, config.n_iter + 1), desc="outbreak MCMC", unit="iter", disable=not progress
    ):
        if config.move_mu:
            state = move_mu(rng, data, state, config, loglik_fn=genetic_fn, event_log=events)
        if config.move_t_inf:
            state = move_t_inf(
                rng,
                data,
                state,
                loglik_fn=timing_fn,
                local=config.local_loglik,
                event_log=events,
            )
        if config.move_alpha:
            state = move_alpha(
                rng,
                data,
                state,
                loglik_fn=composite_fn,
                local=config.local_loglik,
                event_log=events,
            )

        if step % config.sample_every == 0:
            ll = composite_fn(data, state)
            trace.record(step, state, ll)
            logger.debug("step %d: loglik=%.6g mu=%.6g", step, ll, state.mu)

    for move_type in ("mu", "t_inf", "alpha"):
        n_acc, n_prop = events.counts(move_type)
        if n_prop:
            logger.info("%s: accepted %d / %d proposals", move_type, n_acc, n_prop)

    return state, trace, events
