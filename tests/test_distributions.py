import numpy as np
import pytest
from pydantic import ValidationError

from core.config import DistributionType, MonteCarloConfig, ReturnSequenceConfig
from distributions import (
    LcgUniformSource,
    ReturnSequenceSampler,
    bootstrap_returns,
    generate_random_returns,
    generate_return_sequence,
    generate_return_sequences,
    replay_historical,
    sequence_statistics,
)


@pytest.mark.parametrize("years", [1, 2, 7, 30, 101])
def test_sequence_has_exactly_requested_years(years):
    seq = generate_random_returns(ReturnSequenceConfig(years=years, seed=3))
    assert len(seq) == years


def test_unseeded_sequence_has_requested_length():
    assert len(generate_random_returns(ReturnSequenceConfig(years=9))) == 9


def test_zero_years_gives_empty_sequence():
    assert generate_random_returns(ReturnSequenceConfig(years=0, seed=1)) == []


def test_same_seed_reproduces_sequence():
    config = ReturnSequenceConfig(mean_return=6, volatility=12, years=40, seed=2024)
    assert generate_random_returns(config) == generate_random_returns(config)


def test_different_seeds_differ():
    a = generate_random_returns(ReturnSequenceConfig(years=10, seed=1))
    b = generate_random_returns(ReturnSequenceConfig(years=10, seed=2))
    assert a != b


def test_variance_scales_with_volatility():
    low = generate_random_returns(ReturnSequenceConfig(volatility=5, years=1000, seed=12345))
    high = generate_random_returns(ReturnSequenceConfig(volatility=20, years=1000, seed=12345))
    assert np.var(high) > 3 * np.var(low)


def test_sample_mean_near_configured_mean():
    seq = generate_random_returns(ReturnSequenceConfig(mean_return=7, volatility=15, years=1000, seed=99))
    assert np.mean(seq) == pytest.approx(7.0, abs=2.5)


def test_zero_volatility_returns_the_mean():
    seq = generate_random_returns(ReturnSequenceConfig(mean_return=4, volatility=0, years=5, seed=8))
    assert seq == [4.0] * 5


def test_lcg_first_draw():
    assert LcgUniformSource(0).random() == 1013904223 / 2 ** 32


def test_lcg_stays_in_unit_interval():
    src = LcgUniformSource(7)
    draws = [src.random() for _ in range(1000)]
    assert all(0.0 <= u < 1.0 for u in draws)


def test_deterministic_run_seeds_default_base():
    config = MonteCarloConfig(num_simulations=3, return_sequence_config=ReturnSequenceConfig(years=5))
    assert ReturnSequenceSampler(config).run_seeds() == [42, 43, 44]


def test_deterministic_run_uses_base_seed_plus_index():
    rsc = ReturnSequenceConfig(years=12, seed=100)
    config = MonteCarloConfig(num_simulations=4, return_sequence_config=rsc)
    sequences = generate_return_sequences(config)
    assert len(sequences) == 4
    for i, seq in enumerate(sequences):
        assert seq == generate_random_returns(rsc.model_copy(update={"seed": 100 + i}))


def test_non_deterministic_runs_are_independent():
    config = MonteCarloConfig(
        num_simulations=5,
        deterministic=False,
        return_sequence_config=ReturnSequenceConfig(years=20, seed=1),
    )
    sampled = ReturnSequenceSampler(config).sample()
    assert sampled.seeds == [None] * 5
    assert all(len(s) == 20 for s in sampled.sequences)
    assert len({tuple(s) for s in sampled.sequences}) == 5


def test_sampled_sequences_frames():
    config = MonteCarloConfig(num_simulations=3, return_sequence_config=ReturnSequenceConfig(years=4, seed=5))
    sampled = ReturnSequenceSampler(config).sample()
    long = sampled.to_dataframe()
    assert len(long) == 12
    assert list(long.columns) == ["run_id", "year", "return_pct"]
    assert list(sampled.summary()["Variable"]) == ["Mean Return", "Volatility"]


def test_historical_replay_wraps_around():
    config = ReturnSequenceConfig(
        distribution=DistributionType.HISTORICAL, years=5, historical_returns=(1.0, 2.0, 3.0)
    )
    assert replay_historical(config, offset=2) == [3.0, 1.0, 2.0, 3.0, 1.0]
    assert generate_return_sequence(config, offset=0) == [1.0, 2.0, 3.0, 1.0, 2.0]


def test_historical_runs_start_at_rolling_offsets():
    rsc = ReturnSequenceConfig(
        distribution=DistributionType.HISTORICAL, years=2, historical_returns=(10.0, -5.0, 3.0)
    )
    sequences = generate_return_sequences(MonteCarloConfig(num_simulations=3, return_sequence_config=rsc))
    assert sequences == [[10.0, -5.0], [-5.0, 3.0], [3.0, 10.0]]


def test_bootstrap_draws_from_history():
    history = (-20.0, 5.0, 30.0)
    config = ReturnSequenceConfig(
        distribution=DistributionType.BOOTSTRAP, years=50, seed=11, historical_returns=history
    )
    seq = bootstrap_returns(config, LcgUniformSource(11))
    assert len(seq) == 50
    assert set(seq) <= set(history)
    assert generate_return_sequence(config) == seq


def test_non_random_distribution_requires_history():
    with pytest.raises(ValidationError):
        ReturnSequenceConfig(distribution=DistributionType.BOOTSTRAP, years=5)


def test_negative_years_rejected():
    with pytest.raises(ValidationError):
        ReturnSequenceConfig(years=-1)


def test_sequence_statistics():
    stats = sequence_statistics([10.0, -10.0, 30.0])
    assert stats.mean == pytest.approx(10.0)
    assert stats.volatility == pytest.approx(np.std([10.0, -10.0, 30.0]))
    assert (stats.minimum, stats.maximum, stats.years) == (-10.0, 30.0, 3)


def test_sequence_statistics_empty():
    stats = sequence_statistics([])
    assert (stats.mean, stats.volatility, stats.years) == (0.0, 0.0, 0)
