"""
Distributions package — produce the yearly return sequences Monte Carlo runs on.

  1. random_source.py — pluggable uniform sources (seeded LCG, numpy Generator)
  2. sampler.py       — Box-Muller normal returns and per-run sequence sampling
  3. historical.py    — historical replay, bootstrap resampling, sequence stats
"""

from .historical import SequenceStatistics, bootstrap_returns, replay_historical, sequence_statistics
from .random_source import LcgUniformSource, NumpyUniformSource, UniformSource, make_uniform_source
from .sampler import (
    ReturnSequenceSampler,
    SampledSequences,
    generate_random_returns,
    generate_return_sequence,
    generate_return_sequences,
)

__all__ = [
    "SequenceStatistics",
    "bootstrap_returns",
    "replay_historical",
    "sequence_statistics",
    "LcgUniformSource",
    "NumpyUniformSource",
    "UniformSource",
    "make_uniform_source",
    "ReturnSequenceSampler",
    "SampledSequences",
    "generate_random_returns",
    "generate_return_sequence",
    "generate_return_sequences",
]
