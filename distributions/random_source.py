"""
Uniform random sources behind the return generators.

The generators only ever ask for "the next uniform in [0, 1)", so any source
honouring that contract can be swapped in:

  LcgUniformSource    — tiny linear congruential generator. Chosen for
                        reproducibility across platforms, not statistical
                        quality.
  NumpyUniformSource  — wraps a numpy Generator (PCG64 by default). Use this
                        when quality matters more than matching old seeds.
"""

from __future__ import annotations

from typing import Optional

import numpy as np

LCG_MULTIPLIER = 1664525
LCG_INCREMENT = 1013904223
LCG_MODULUS = 2 ** 32


class UniformSource:
    """Interface: produce uniforms in [0, 1)."""

    def random(self) -> float:
        raise NotImplementedError


class LcgUniformSource(UniformSource):
    def __init__(self, seed: int):
        self._state = int(seed) % LCG_MODULUS

    def random(self) -> float:
        self._state = (self._state * LCG_MULTIPLIER + LCG_INCREMENT) % LCG_MODULUS
        return self._state / LCG_MODULUS


class NumpyUniformSource(UniformSource):
    def __init__(self, rng: Optional[np.random.Generator] = None):
        # default_rng() with no seed pulls fresh OS entropy
        self.rng = rng if rng is not None else np.random.default_rng()

    def random(self) -> float:
        return float(self.rng.random())


def make_uniform_source(seed: Optional[int]) -> UniformSource:
    """Seeded LCG when a seed is given, otherwise a non-deterministic numpy source."""
    if seed is not None:
        return LcgUniformSource(seed)
    return NumpyUniformSource()
