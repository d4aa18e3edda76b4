import numpy as np
import pytest

from revnet_sim.sampling import SeededSampler, sampler_trial


def test_same_seed_same_stream():
    a, b = SeededSampler(11), SeededSampler(11)

    draws_a = [a.poisson(5.0) for _ in range(50)] + [a.lognormal(0.0, 1.5) for _ in range(50)]
    draws_b = [b.poisson(5.0) for _ in range(50)] + [b.lognormal(0.0, 1.5) for _ in range(50)]

    assert draws_a == draws_b


def test_uniform_range():
    s = SeededSampler(1)
    draws = [s.random() for _ in range(1000)]
    assert min(draws) >= 0.0 and max(draws) < 1.0


def test_poisson_mean_close_to_rate():
    s = SeededSampler(3)
    for lam in (0.5, 5.0, 80.0):
        draws = np.array([s.poisson(lam) for _ in range(4000)])
        assert draws.mean() == pytest.approx(lam, rel=0.08)


def test_poisson_zero_rate_is_zero():
    s = SeededSampler(3)
    assert all(s.poisson(0.0) == 0 for _ in range(20))
    with pytest.raises(ValueError):
        s.poisson(-1.0)


def test_lognormal_median_and_positivity():
    s = SeededSampler(5)
    draws = np.array([s.lognormal(1.0, 0.5) for _ in range(5000)])
    assert (draws > 0).all()
    assert np.median(draws) == pytest.approx(np.e, rel=0.05)


def test_bernoulli_extremes():
    s = SeededSampler(9)
    assert not any(s.bernoulli(0.0) for _ in range(100))
    assert all(s.bernoulli(1.0) for _ in range(100))


def test_sampler_trial_table_shape():
    df = sampler_trial(SeededSampler(0), n=20)
    assert list(df.columns) == [
        "index", "poisson", "normal", "lognormal_1_1", "lognormal_0_1", "lognormal_0_15",
    ]
    assert len(df) == 20
    assert df.loc[0, "poisson"] == 0


def test_lognormal_extreme_sigma_does_not_raise():
    s = SeededSampler(0)
    draws = [s.lognormal(0.0, 1000.0) for _ in range(20)]
    assert all(d >= 0.0 for d in draws)


def test_draws_follow_numpy_generator():
    s = SeededSampler(21)
    rng = np.random.default_rng(21)

    assert s.poisson(1e6) == rng.poisson(1e6)
    assert s.normal() == rng.normal()
    assert s.lognormal(0.5, 2.0) == rng.lognormal(0.5, 2.0)
