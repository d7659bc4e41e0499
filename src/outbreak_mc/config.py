"""Run and proposal configuration."""

from __future__ import annotations

import math
from dataclasses import dataclass, fields
from numbers import Real
from typing import Any, Mapping, Optional

INIT_TREES = ("star", "random")


class ConfigError(ValueError):
    """Raised for missing or malformed configuration values."""


def _check_real(name: str, value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, Real):
        raise ConfigError(f"{name} must be a real number, got {value!r}")
    value = float(value)
    if not math.isfinite(value):
        raise ConfigError(f"{name} must be finite, got {value!r}")
    return value


def _check_sd_mu(value: Any) -> float:
    sd_mu = _check_real("sd_mu", value)
    if sd_mu < 0.0:
        raise ConfigError(f"sd_mu must be non-negative, got {sd_mu}")
    return sd_mu


@dataclass(frozen=True)
class MoveConfig:
    # proposal sd of the mutation rate random walk
    sd_mu: float = 1e-4
    init_mu: float = 1e-4
    init_tree: str = "star"
    n_iter: int = 10_000
    sample_every: int = 50
    move_mu: bool = True
    move_t_inf: bool = True
    move_alpha: bool = True
    # restrict likelihood evaluations to the terms a proposal touches
    local_loglik: bool = False
    seed: Optional[int] = None

    def __post_init__(self):
        _check_sd_mu(self.sd_mu)
        init_mu = _check_real("init_mu", self.init_mu)
        if not 0.0 <= init_mu <= 1.0:
            raise ConfigError(f"init_mu must lie in [0, 1], got {init_mu}")
        if self.init_tree not in INIT_TREES:
            raise ConfigError(
                f"init_tree must be one of {INIT_TREES}, got {self.init_tree!r}"
            )
        if self.seed is not None and (
            isinstance(self.seed, bool) or not isinstance(self.seed, int) or self.seed < 0
        ):
            raise ConfigError(f"seed must be None or a non-negative integer, got {self.seed!r}")
        for name in ("n_iter", "sample_every"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int) or value < 1:
                raise ConfigError(f"{name} must be a positive integer, got {value!r}")

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Any]) -> "MoveConfig":
        """Build from a plain mapping; ``sd.mu`` style keys are accepted."""

        known = {f.name for f in fields(cls)}
        kwargs = {}
        for key, value in mapping.items():
            name = key.replace(".", "_")
            if name not in known:
                raise ConfigError(f"unknown configuration key {key!r}")
            kwargs[name] = value
        return cls(**kwargs)


def resolve_sd_mu(config) -> float:
    """Return the validated mutation-rate proposal sd from ``config``."""

    if isinstance(config, MoveConfig):
        return float(config.sd_mu)
    if not isinstance(config, Mapping):
        raise ConfigError(f"config must be a MoveConfig or a mapping, got {type(config)}")
    for key in ("sd_mu", "sd.mu"):
        if key in config:
            return _check_sd_mu(config[key])
    raise ConfigError("config is missing sd_mu")


__all__ = [name for name in globals() if not name.startswith("_")]
