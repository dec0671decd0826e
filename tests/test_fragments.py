"""Tests for reference weighting and fragment selection."""

import numpy as np
import pytest

from lrsim.simulate.readsim.distributions import IdentityModel, LengthModel
from lrsim.simulate.readsim.fragments import (
    FragmentSelector,
    ReferenceSet,
    expected_fragment_bases,
    fragment_is_possible,
)
from lrsim.simulate.readsim.models import JunkOrigin, RandomOrigin, RealOrigin, Reference, Strand
from lrsim.simulate.readsim.seq_utils import random_seq, reverse_complement


def _reference(ref_id, length, depth=1.0, circular=False, seed=0):
    return Reference(ref_id, random_seq(length, np.random.default_rng(seed)), depth, circular)


def _selector(references, length=(500, 0), **kwargs):
    return FragmentSelector(
        ReferenceSet(references),
        LengthModel(*length),
        IdentityModel(90, 95, 3),
        **kwargs,
    )


class TestReferenceSet:
    """Test ReferenceSet construction and selection."""

    def test_empty(self):
        """Test an empty reference list."""
        with pytest.raises(ValueError):
            ReferenceSet([])

    def test_duplicate_ids(self):
        """Test duplicate reference ids."""
        with pytest.raises(ValueError, match="Duplicate"):
            ReferenceSet([_reference("a", 100), _reference("a", 200)])

    def test_weights_follow_depth_and_length(self):
        """Test weights are depth times length."""
        refs = ReferenceSet([_reference("a", 100, depth=2.0), _reference("b", 300)])
        assert list(refs.weights) == [200.0, 300.0]
        assert refs.total_length == 400

    def test_zero_depth_never_chosen(self):
        """Test zero depth references are never chosen."""
        refs = ReferenceSet([_reference("a", 100, depth=0.0), _reference("b", 100)])
        rng = np.random.default_rng(1)
        chosen = {refs.choose(rng)[0] for _ in range(500)}
        assert chosen == {1}

    def test_both_strands(self):
        """Test both strands are drawn."""
        refs = ReferenceSet([_reference("a", 100)])
        rng = np.random.default_rng(2)
        strands = {refs.choose(rng)[1] for _ in range(100)}
        assert strands == {Strand.FORWARD, Strand.REVERSE}

    def test_extract_linear_reverse(self):
        """Test reverse strand extraction."""
        ref = _reference("a", 100)
        refs = ReferenceSet([ref])
        origin = RealOrigin("a", Strand.REVERSE, 10, 30, 20)
        assert refs.extract(origin) == reverse_complement(ref.seq[10:30])

    def test_extract_circular_wrap(self):
        """Test circular extraction across the origin."""
        ref = _reference("c", 100, circular=True)
        refs = ReferenceSet([ref])
        origin = RealOrigin("c", Strand.FORWARD, 90, 10, 20)
        assert refs.extract(origin) == ref.seq[90:] + ref.seq[:10]

    def test_invalid_weights(self):
        """Test all-zero weights are rejected."""
        refs = ReferenceSet([_reference("a", 100)])
        with pytest.raises(ValueError):
            refs.set_weights(np.array([0.0]))


class TestAdjustDepth:
    """Test Monte-Carlo depth adjustment."""

    def test_expected_bases_linear(self):
        """Test expected bases on a linear reference."""
        ref = _reference("a", 1000)
        lengths = np.array([100.0, 2000.0])
        assert expected_fragment_bases(lengths, ref) == pytest.approx(95.05 / 2)

    def test_expected_bases_circular(self):
        """Test expected bases on a circular reference."""
        ref = _reference("c", 50, circular=True)
        assert expected_fragment_bases(np.array([100.0, 300.0]), ref) == pytest.approx(200.0)

    def test_adjusted_weights(self):
        """Test adjusted weights."""
        refs = ReferenceSet([
            _reference("lin", 1000),
            _reference("circ", 500, depth=2.0, circular=True),
        ])
        weights = refs.adjust_depth(LengthModel(100, 0), np.random.default_rng(3), n_samples=100)

        assert weights[0] == pytest.approx(1000 * 100 / 95.05)
        assert weights[1] == pytest.approx(1000.0)

    def test_short_linear_reference_gets_zero(self):
        """Test a too-short linear reference gets weight 0."""
        refs = ReferenceSet([_reference("short", 50), _reference("long", 5000)])
        weights = refs.adjust_depth(LengthModel(100, 0), np.random.default_rng(4), n_samples=10)
        assert weights[0] == 0.0
        assert weights[1] > 0

    def test_no_reference_can_host(self):
        """Test no usable reference is an error."""
        refs = ReferenceSet([_reference("short", 50)])
        with pytest.raises(ValueError):
            refs.adjust_depth(LengthModel(100, 0), np.random.default_rng(5), n_samples=10)


class TestFragmentSelector:
    """Test fragment selection."""

    def test_invalid_rate(self):
        """Test an out-of-range rate."""
        with pytest.raises(ValueError):
            _selector([_reference("a", 1000)], junk_rate=1.5)

    def test_fragment_is_possible(self):
        """Test fragment compatibility."""
        assert fragment_is_possible(99, _reference("a", 100))
        assert not fragment_is_possible(100, _reference("a", 100))
        assert fragment_is_possible(1000, _reference("c", 100, circular=True))

    def test_junk_reads(self):
        """Test junk reads."""
        selector = _selector([_reference("a", 1000)], junk_rate=1.0)
        rng = np.random.default_rng(1)
        for _ in range(20):
            assert isinstance(selector.generate_fragment(rng), JunkOrigin)

    def test_random_reads(self):
        """Test random reads."""
        selector = _selector([_reference("a", 1000)], random_rate=1.0)
        rng = np.random.default_rng(2)
        for _ in range(20):
            assert isinstance(selector.generate_fragment(rng), RandomOrigin)

    def test_chimeras(self):
        """Test chimeric descriptions."""
        selector = _selector([_reference("a", 5000)], chimera_rate=1.0)
        rng = np.random.default_rng(3)
        desc = selector.describe(rng)
        assert desc.is_chimera
        assert desc.length == desc.origin.length + desc.chimera.length

    def test_linear_fragment_within_reference(self):
        """Test linear fragments stay within the reference."""
        selector = _selector([_reference("a", 2000)])
        rng = np.random.default_rng(4)
        for _ in range(200):
            origin = selector.generate_fragment(rng)
            assert 0 <= origin.start < origin.end <= 2000
            assert origin.end - origin.start == origin.length
            assert origin.length <= 500

    def test_circular_fragment_wraps(self):
        """Test circular fragments wrap."""
        ref = _reference("c", 100, circular=True)
        selector = _selector([ref], length=(250, 0))
        rng = np.random.default_rng(5)
        origin = selector.generate_fragment(rng)

        assert origin.length == 250
        assert origin.end == (origin.start + 250) % 100
        assert len(selector.references.extract(origin)) == 250

    def test_rejects_too_short_linear_reference(self):
        """Test too-short linear references are re-drawn."""
        selector = _selector([_reference("short", 50), _reference("long", 10000, seed=1)])
        rng = np.random.default_rng(6)
        for _ in range(100):
            assert selector.generate_fragment(rng).ref_id == "long"

    def test_attempt_cap_clips(self):
        """Test the attempt cap clips the last draw."""
        selector = _selector([_reference("short", 50)], length=(100, 0), max_attempts=5)
        rng = np.random.default_rng(7)
        origin = selector.generate_fragment(rng)
        assert origin.end == 50
        assert origin.length == 50 - origin.start

    def test_identity_percent(self):
        """Test target identity is a percentage."""
        selector = _selector([_reference("a", 1000)])
        desc = selector.describe(np.random.default_rng(8))
        assert 0 < desc.identity <= 95.0


class TestIterWork:
    """Test the (description, seed) work stream."""

    def test_reaches_target(self):
        """Test work stops once the target is reached."""
        selector = _selector([_reference("a", 10000)])
        work = list(selector.iter_work(5000, np.random.default_rng(1)))
        lengths = [desc.length for desc, _ in work]

        assert sum(lengths) >= 5000
        assert sum(lengths[:-1]) < 5000
        assert all(isinstance(seed, int) for _, seed in work)

    def test_reproducible(self):
        """Test work items are reproducible."""
        selector = _selector([_reference("a", 10000)], chimera_rate=0.3)
        first = list(selector.iter_work(20000, np.random.default_rng(2)))
        second = list(selector.iter_work(20000, np.random.default_rng(2)))
        assert first == second

    def test_zero_target(self):
        """Test a zero target yields nothing."""
        selector = _selector([_reference("a", 1000)])
        assert list(selector.iter_work(0, np.random.default_rng(3))) == []


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
