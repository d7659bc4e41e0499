import numpy as np
import pytest

from outbreak_mc import ParamState, make_data


class ScriptedRng:
    """Replays fixed draws; ``uniform`` is used once the scripted list runs out."""

    def __init__(self, uniforms=(), normals=(), integers=(), uniform=None):
        self.uniforms = list(uniforms)
        self.normals = list(normals)
        self.ints = list(integers)
        self.uniform = uniform
        self.calls = []

    def random(self):
        self.calls.append("random")
        if self.uniforms:
            return self.uniforms.pop(0)
        assert self.uniform is not None, "ran out of scripted uniforms"
        return self.uniform

    def normal(self, loc=0.0, scale=1.0):
        self.calls.append("normal")
        return loc + scale * self.normals.pop(0)

    def integers(self, low, high=None):
        self.calls.append("integers")
        return self.ints.pop(0)


@pytest.fixture
def small_data():
    # dates 3,4,6,7; most likely incubation is 2 days
    seqs = np.array(
        [
            list("ACGTACGTACGTACGTACGT"),
            list("ACGTACGTACGTACGTACGA"),
            list("ACGTACGTACGTACCTACGA"),
            list("TCGTACGTACGTACGTACGA"),
        ]
    )
    return make_data(
        dates=[3, 4, 6, 7],
        w_dens=[0.1, 0.3, 0.3, 0.2, 0.1],
        f_dens=[0.2, 0.5, 0.2, 0.1],
        dna=seqs,
    )


@pytest.fixture
def small_state():
    # valid under small_data: every delay within the density supports
    return ParamState.from_ids(mu=0.05, t_inf=[1, 2, 4, 5], alpha_ids=[None, 1, 2, 2])
