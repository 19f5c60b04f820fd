"""
Tests for NumpyRandomSource and the RandomSource protocol.
"""

import numpy as np
import pytest

from pyprobability import NumpyRandomSource, RandomSource
from pyprobability.core.exceptions import InvalidParameterError


class TestNumpyRandomSource:
    """Seeded uniform stream on PCG64."""

    def test_satisfies_protocol(self):
        assert isinstance(NumpyRandomSource(1), RandomSource)

    def test_same_seed_same_stream(self):
        a = NumpyRandomSource(7)
        b = NumpyRandomSource(7)
        assert a.uniform() == b.uniform()
        np.testing.assert_array_equal(a.uniforms(50), b.uniforms(50))

    def test_different_seeds_differ(self):
        assert not np.array_equal(
            NumpyRandomSource(1).uniforms(10),
            NumpyRandomSource(2).uniforms(10),
        )

    def test_open_interval(self):
        u = NumpyRandomSource(3).uniforms(10_000)
        assert u.shape == (10_000,)
        assert np.all(u > 0.0)
        assert np.all(u < 1.0)

    def test_uniform_is_python_float(self):
        assert isinstance(NumpyRandomSource(3).uniform(), float)

    def test_zero_length(self):
        assert NumpyRandomSource(3).uniforms(0).shape == (0,)

    def test_negative_length_rejected(self):
        with pytest.raises(InvalidParameterError):
            NumpyRandomSource(3).uniforms(-1)


class TestSpawn:
    """Child streams are independent and reproducible."""

    def test_children_differ(self):
        left, right = NumpyRandomSource(11).spawn(2)
        assert not np.array_equal(left.uniforms(20), right.uniforms(20))

    def test_children_reproducible(self):
        first = NumpyRandomSource(11).spawn(3)
        second = NumpyRandomSource(11).spawn(3)
        for a, b in zip(first, second):
            np.testing.assert_array_equal(a.uniforms(5), b.uniforms(5))

    def test_accepts_seed_sequence(self):
        seq = np.random.SeedSequence(5)
        assert NumpyRandomSource(seq).seed_sequence is seq
