"""
Tests for RunningStats, SampleSet and the draw() entry points.

Validates:
    - Welford/Chan accumulation equals one-pass statistics
    - Chunked sampling merged with SampleSet.merge()
    - describe(), histogram() and convergence() on known data
    - Multivariate normal draws
    - Entry point validation
"""

import math

import numpy as np
import pytest

from pyprobability import NumpyRandomSource
from pyprobability.core.exceptions import InvalidParameterError
from pyprobability.sampling import (
    RunningStats,
    draw,
    draw_multivariate_normal,
    equal_width_histogram,
)


def _fixed(values, source):
    """SampleSet whose draws are exactly `values`, via the custom sampler."""
    it = iter(values)
    return draw('custom', len(values), source, fn=lambda src: next(it))


# ═══════════════════════════════════════════════════════════════════════
# RunningStats
# ═══════════════════════════════════════════════════════════════════════


class TestRunningStats:
    """Streaming statistics agree with numpy."""

    def test_from_values(self, rng):
        x = rng.standard_normal(1000)
        stats = RunningStats.from_values(x)
        assert stats.count == 1000
        assert stats.mean == pytest.approx(x.mean(), rel=1e-12)
        assert stats.variance == pytest.approx(x.var(), rel=1e-12)
        assert stats.sample_variance == pytest.approx(x.var(ddof=1), rel=1e-12)
        assert stats.min == x.min()
        assert stats.max == x.max()

    def test_push_matches_batch(self, rng):
        x = rng.exponential(size=500)
        streamed = RunningStats()
        for v in x:
            streamed.push(v)
        batch = RunningStats.from_values(x)
        assert streamed.mean == pytest.approx(batch.mean, rel=1e-12)
        assert streamed.m2 == pytest.approx(batch.m2, rel=1e-10)
        assert isinstance(streamed.mean, float)

    def test_merge_equals_single_pass(self, rng):
        x = rng.gamma(2.0, size=3000)
        left = RunningStats.from_values(x[:1234])
        right = RunningStats.from_values(x[1234:])
        merged = left.merge(right)
        assert merged.count == 3000
        assert merged.mean == pytest.approx(x.mean(), rel=1e-12)
        assert merged.variance == pytest.approx(x.var(), rel=1e-10)
        assert merged.min == x.min()
        assert merged.max == x.max()

    def test_merge_does_not_modify_inputs(self):
        left = RunningStats.from_values([1.0, 2.0])
        right = RunningStats.from_values([3.0])
        left.merge(right)
        assert left.count == 2
        assert right.count == 1

    def test_merge_with_empty(self):
        stats = RunningStats.from_values([1.0, 3.0])
        assert stats.merge(RunningStats()).mean == 2.0
        assert RunningStats().merge(stats).variance == 1.0

    def test_empty(self):
        stats = RunningStats()
        assert math.isnan(stats.variance)
        assert math.isnan(RunningStats.from_values([1.0]).sample_variance)

    def test_vector_observations(self, rng):
        X = rng.standard_normal((400, 3))
        stats = RunningStats.from_values(X[:100])
        stats.extend(X[100:])
        np.testing.assert_allclose(stats.mean, X.mean(axis=0), rtol=1e-12)
        np.testing.assert_allclose(stats.variance, X.var(axis=0), rtol=1e-10)
        np.testing.assert_array_equal(stats.max, X.max(axis=0))


# ═══════════════════════════════════════════════════════════════════════
# SampleSet
# ═══════════════════════════════════════════════════════════════════════


class TestSampleSet:
    """draw() results and their metadata."""

    def test_metadata(self, source):
        s = draw('normal', 100, source, mean=2.0)
        assert s.count == 100
        assert s.sampler == 'normal'
        assert s.params == {'mean': 2.0}
        assert s.backend_name == 'cpu_sampling'
        assert s.info == {'sampler': 'normal', 'n': 100, 'batches': 1}
        assert {'total_seconds', 'draws', 'statistics'} <= set(s.timing)
        assert not s.discrete
        assert not s.is_multivariate

    def test_streaming_stats_match_draws(self, source):
        s = draw('exponential', 1000, source, rate=3.0)
        assert s.mean == pytest.approx(s.draws.mean(), rel=1e-12)
        assert s.variance == pytest.approx(s.draws.var(), rel=1e-10)

    def test_zero_draws(self, source):
        s = draw('uniform', 0, source)
        assert s.count == 0
        assert s.summary() == "uniform sample (n = 0)"
        with pytest.raises(InvalidParameterError):
            s.describe()

    def test_callable_sampler(self, source):
        def coin(*, source):
            return 1.0 if source.uniform() < 0.5 else 0.0

        s = draw(coin, 50, source)
        assert s.sampler == 'coin'
        assert set(np.unique(s.draws)) <= {0.0, 1.0}

    def test_merge_chunks(self):
        parent = NumpyRandomSource(2024)
        first, second = parent.spawn(2)
        a = draw('gamma', 600, first, shape=2.0)
        b = draw('gamma', 400, second, shape=2.0)
        merged = a.merge(b)
        all_draws = np.concatenate([a.draws, b.draws])
        assert merged.count == 1000
        np.testing.assert_array_equal(merged.draws, all_draws)
        assert merged.mean == pytest.approx(all_draws.mean(), rel=1e-12)
        assert merged.variance == pytest.approx(all_draws.var(), rel=1e-10)
        assert merged.info['batches'] == 2
        assert merged.info['n'] == 1000

    def test_merge_different_samplers(self, source):
        with pytest.raises(InvalidParameterError):
            draw('normal', 5, source).merge(draw('uniform', 5, source))

    def test_summary_and_repr(self, source):
        s = draw('normal', 10, source)
        assert s.summary().startswith("normal sample (n = 10)")
        assert "variance:" in s.summary()
        assert repr(s) == "SampleSet(sampler='normal', n=10)"


class TestDescribe:
    """Descriptive statistics on a known sample."""

    def test_one_to_eight(self, source):
        d = _fixed([5.0, 1.0, 8.0, 3.0, 2.0, 7.0, 4.0, 6.0], source).describe()
        assert d.count == 8
        assert d.mean == 4.5
        assert d.median == 4.5
        assert d.variance == pytest.approx(5.25)
        assert d.std_dev == pytest.approx(math.sqrt(5.25))
        assert d.skewness == pytest.approx(0.0, abs=1e-12)
        assert d.min == 1.0 and d.max == 8.0 and d.range == 7.0
        assert d.q1 == 3.0
        assert d.q3 == 7.0
        assert d.iqr == 4.0

    def test_odd_count_median(self, source):
        assert _fixed([3.0, 1.0, 2.0], source).describe().median == 2.0

    def test_constant_sample(self, source):
        d = _fixed([2.0, 2.0, 2.0], source).describe()
        assert d.variance == 0.0
        assert d.skewness == 0.0
        assert d.kurtosis == 0.0

    def test_excess_kurtosis_of_normal(self, source):
        d = draw('normal', 20_000, source).describe()
        assert d.kurtosis == pytest.approx(0.0, abs=0.2)
        assert d.skewness == pytest.approx(0.0, abs=0.1)


class TestHistogram:
    """Discrete tables and equal-width bins."""

    def test_discrete_table(self, source):
        s = draw('discrete_uniform', 600, source, low=1, high=6)
        h = s.histogram()
        assert h.discrete
        assert h.edges is None
        np.testing.assert_array_equal(h.values, [1, 2, 3, 4, 5, 6])
        assert h.counts.sum() == 600
        assert h.relative_frequency.sum() == pytest.approx(1.0)

    def test_default_bin_count(self, source):
        h = draw('normal', 400, source).histogram()
        assert not h.discrete
        assert len(h.counts) == 20
        assert len(h.edges) == 21
        assert h.counts.sum() == 400

    def test_maximum_in_last_bin(self, source):
        h = _fixed([0.0, 1.0, 2.0, 3.0, 4.0], source).histogram(bins=4)
        np.testing.assert_array_equal(h.counts, [1, 1, 1, 2])
        assert h.bin_width == 1.0
        np.testing.assert_allclose(h.values, [0.5, 1.5, 2.5, 3.5])

    def test_discrete_with_explicit_bins(self, source):
        h = draw('poisson', 300, source, lam=4.0).histogram(bins=5)
        assert not h.discrete
        assert len(h.counts) == 5

    def test_constant_sample(self):
        h = equal_width_histogram(np.full(10, 3.0), 4)
        np.testing.assert_array_equal(h.counts, [10, 0, 0, 0])

    def test_invalid_bins(self, source):
        with pytest.raises(InvalidParameterError):
            draw('normal', 10, source).histogram(bins=0)


class TestConvergence:
    """Running estimates at the standard checkpoints."""

    def test_checkpoints(self, source):
        points = draw('uniform', 1000, source).convergence()
        assert [p.n for p in points] == [10, 50, 100, 500, 1000]
        assert points[0].mean_error is None

    def test_last_point_matches_sample(self, source):
        s = draw('exponential', 5000, source)
        last = s.convergence()[-1]
        assert last.n == 5000
        assert last.mean == pytest.approx(s.mean, rel=1e-12)
        assert last.variance == pytest.approx(s.variance, rel=1e-10)

    def test_relative_errors(self, source):
        s = draw('exponential', 10_000, source, rate=2.0)
        points = s.convergence(theoretical_mean=0.5, theoretical_variance=0.25)
        last = points[-1]
        assert last.mean_error == pytest.approx(abs(last.mean - 0.5) / 0.5)
        assert last.mean_error < 0.05
        assert last.variance_error < 0.15

    def test_zero_reference_uses_absolute_error(self, source):
        points = draw('normal', 100, source).convergence(theoretical_mean=0.0)
        assert points[-1].mean_error == pytest.approx(abs(points[-1].mean))


# ═══════════════════════════════════════════════════════════════════════
# Multivariate normal
# ═══════════════════════════════════════════════════════════════════════


class TestMultivariateNormalDraws:
    """Correlated draws via a single Cholesky factor."""

    def test_moments(self, source):
        mean = np.array([1.0, -1.0])
        cov = np.array([[2.0, 0.6], [0.6, 1.0]])
        s = draw_multivariate_normal(5000, source, mean, cov)
        assert s.draws.shape == (5000, 2)
        assert s.is_multivariate
        np.testing.assert_allclose(s.mean, mean, atol=0.1)
        np.testing.assert_allclose(np.cov(s.draws.T), cov, atol=0.2)
        np.testing.assert_allclose(s.params['cov'], cov, atol=1e-12)

    def test_routed_through_draw(self, source):
        s = draw('multivariate_normal', 10, source, mean=[0.0, 0.0, 0.0], cov=np.eye(3))
        assert s.draws.shape == (10, 3)
        assert s.sampler == 'multivariate_normal'

    def test_describe_rejected(self, source):
        s = draw_multivariate_normal(10, source, [0.0, 0.0], np.eye(2))
        with pytest.raises(InvalidParameterError):
            s.describe()

    def test_not_positive_definite(self, source):
        with pytest.raises(InvalidParameterError, match="positive definite"):
            draw_multivariate_normal(10, source, [0.0, 0.0], [[1.0, 2.0], [2.0, 1.0]])

    def test_shape_mismatch(self, source):
        with pytest.raises(InvalidParameterError):
            draw_multivariate_normal(10, source, [0.0, 0.0], np.eye(3))


class TestEntryPointValidation:
    """draw() argument checks."""

    def test_unknown_sampler(self, source):
        with pytest.raises(InvalidParameterError, match="Unknown sampler"):
            draw('zipf', 10, source)

    def test_negative_n(self, source):
        with pytest.raises(InvalidParameterError):
            draw('normal', -1, source)

    def test_not_a_source(self):
        with pytest.raises(InvalidParameterError, match="RandomSource"):
            draw('normal', 10, object())
