import numpy as np
import pytest

from outbreak_mc import make_data, pairwise_snp_distances


def test_densities_are_normalised():
    data = make_data(dates=[0, 2], w_dens=[1, 3], f_dens=[2, 2, 0])
    np.testing.assert_allclose(data.w_dens, [0.25, 0.75])
    np.testing.assert_allclose(data.f_dens, [0.5, 0.5, 0.0])
    assert data.log_f_dens[2] == -np.inf
    assert data.N == 2
    assert not data.has_dna


def test_incubation_defaults_to_generation_time():
    data = make_data(dates=[0, 1, 2], w_dens=[0.5, 0.5])
    np.testing.assert_array_equal(data.f_dens, data.w_dens)


def test_datetime_dates_become_day_offsets():
    dates = np.array(["2024-03-05", "2024-03-01", "2024-03-10"], dtype="datetime64[D]")
    data = make_data(dates=dates, w_dens=[1.0])
    np.testing.assert_array_equal(data.dates, [4, 0, 9])


def test_pairwise_snp_distances():
    dna = np.array([list("AACG"), list("AACT"), list("TACT")])
    np.testing.assert_array_equal(
        pairwise_snp_distances(dna), [[0, 1, 2], [1, 0, 1], [2, 1, 0]]
    )


def test_alignment_and_distance_inputs():
    dna = np.array([list("AACG"), list("AACT")])
    data = make_data(dates=[0, 1], w_dens=[1.0], dna=dna)
    assert data.n_sites == 4
    np.testing.assert_array_equal(data.dna_dist, [[0, 1], [1, 0]])

    data = make_data(dates=[0, 1], w_dens=[1.0], dna_dist=[[0, 3], [3, 0]], n_sites=100)
    assert data.has_dna
    assert data.n_sites == 100


@pytest.mark.parametrize(
    "kwargs",
    [
        {"dates": [], "w_dens": [1.0]},
        {"dates": [0.5, 1], "w_dens": [1.0]},
        {"dates": [0, 1], "w_dens": [0.0, 0.0]},
        {"dates": [0, 1], "w_dens": [-0.5, 1.0]},
        {"dates": [0, 1], "w_dens": [[1.0]]},
        {"dates": [0, 1], "w_dens": [1.0], "dna_dist": [[0, 1], [1, 0]]},
        {"dates": [0, 1], "w_dens": [1.0], "dna_dist": [[0]], "n_sites": 5},
        {"dates": [0, 1, 2], "w_dens": [1.0], "dna": np.array([list("AC"), list("AG")])},
    ],
)
def test_malformed_data(kwargs):
    with pytest.raises(ValueError):
        make_data(**kwargs)
