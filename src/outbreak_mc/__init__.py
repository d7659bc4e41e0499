"""OUTBREAK-MC: Metropolis–Hastings moves for transmission tree reconstruction."""

from .states import *
from .data import *
from .config import *
from .likelihoods import *
from .ancestors import *
from .mh_moves import *
from .runner import init_state, run_mcmc

__all__ = [name for name in globals() if not name.startswith("_")]
