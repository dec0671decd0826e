"""Tests for sequence helpers, statistical models and read records."""

import numpy as np
import pytest

from lrsim.simulate.readsim.alignment import edit_distance
from lrsim.simulate.readsim.distributions import AdapterModel, IdentityModel, LengthModel
from lrsim.simulate.readsim.models import (
    Description,
    JunkOrigin,
    RandomOrigin,
    ReadType,
    RealOrigin,
    SimulatedRead,
    Strand,
)
from lrsim.simulate.readsim.seq_utils import (
    extract_circular_region,
    junk_seq,
    random_point_edit,
    random_seq,
    reverse_complement,
)


class TestSeqUtils:
    """Test sequence helper functions."""

    def test_reverse_complement(self):
        """Test reverse complement."""
        assert reverse_complement("AACGTN") == "NACGTT"

    def test_extract_circular_no_wrap(self):
        """Test circular extraction without wrapping."""
        assert extract_circular_region("ACGTACGTAA", 2, 4) == "GTAC"

    def test_extract_circular_wrap(self):
        """Test circular extraction with one wrap."""
        assert extract_circular_region("ACGTACGTAA", 8, 4) == "AAAC"

    def test_extract_circular_multiple_turns(self):
        """Test circular extraction over several turns."""
        assert extract_circular_region("ACG", 1, 8) == "CGACGACG"

    def test_random_seq(self):
        """Test random sequences."""
        rng = np.random.default_rng(1)
        seq = random_seq(100, rng)
        assert len(seq) == 100
        assert set(seq) <= set("ACGT")
        assert random_seq(0, rng) == ""

    def test_junk_seq_is_periodic(self):
        """Test junk sequences repeat a short motif."""
        rng = np.random.default_rng(2)
        for _ in range(20):
            seq = junk_seq(50, rng)
            assert len(seq) == 50
            assert any(seq == (seq[:p] * 50)[:50] for p in range(1, 6))

    def test_random_point_edit(self):
        """Test random point edits."""
        rng = np.random.default_rng(3)
        for _ in range(100):
            assert edit_distance("ACGTACG", random_point_edit("ACGTACG", rng)) == 1


class TestLengthModel:
    """Test the Gamma fragment length model."""

    def test_constant(self):
        """Test a zero stdev gives a constant length."""
        model = LengthModel(100, 0)
        rng = np.random.default_rng(1)
        assert {model.sample(rng) for _ in range(10)} == {100}
        assert list(model.sample_array(rng, 3)) == [100, 100, 100]

    def test_mean(self):
        """Test the sampled mean."""
        model = LengthModel(1000, 100)
        rng = np.random.default_rng(2)
        lengths = model.sample_array(rng, 5000)
        assert lengths.min() >= 1
        assert lengths.mean() == pytest.approx(1000, rel=0.05)

    @pytest.mark.parametrize("mean,stdev", [(0, 10), (-5, 10), (100, -1)])
    def test_invalid(self, mean, stdev):
        """Test invalid length parameters."""
        with pytest.raises(ValueError):
            LengthModel(mean, stdev)


class TestIdentityModel:
    """Test the Beta identity model."""

    def test_constant_when_mean_equals_max(self):
        """Test mean equal to max gives a constant."""
        model = IdentityModel(95, 95, 5)
        assert model.sample(np.random.default_rng(1)) == pytest.approx(0.95)

    def test_bounds_and_mean(self):
        """Test sampled bounds and mean."""
        model = IdentityModel(85, 95, 5)
        rng = np.random.default_rng(2)
        values = np.array([model.sample(rng) for _ in range(5000)])
        assert values.min() >= 0
        assert values.max() <= 0.95
        assert values.mean() == pytest.approx(0.85, abs=0.01)

    @pytest.mark.parametrize(
        "mean,max_identity,stdev",
        [(0, 95, 5), (85, 95, 0), (96, 95, 5), (85, 101, 5), (85, 95, 40)],
    )
    def test_invalid(self, mean, max_identity, stdev):
        """Test invalid identity parameters."""
        with pytest.raises(ValueError):
            IdentityModel(mean, max_identity, stdev)


class TestAdapterModel:
    """Test adapter sampling."""

    def test_zero_rate(self):
        """Test a zero rate gives no adapter."""
        model = AdapterModel(start_rate=0, end_rate=0)
        rng = np.random.default_rng(1)
        assert model.start(rng) == ""
        assert model.end(rng) == ""

    def test_full_adapter(self):
        """Test full adapters."""
        model = AdapterModel("AAAACCCC", "GGGGTTTT", 100, 100, 100, 100)
        rng = np.random.default_rng(2)
        assert model.start(rng) == "AAAACCCC"
        assert model.end(rng) == "GGGGTTTT"

    def test_prefix(self):
        """Test adapters are prefixes."""
        model = AdapterModel(start_rate=100, start_amount=50)
        rng = np.random.default_rng(3)
        for _ in range(50):
            adapter = model.start(rng)
            assert model.start_seq.startswith(adapter)

    def test_invalid_rate(self):
        """Test an out-of-range rate."""
        with pytest.raises(ValueError):
            AdapterModel(start_rate=120)


class TestDescription:
    """Test read descriptions and FASTQ records."""

    def test_real_origin(self):
        """Test real origin formatting."""
        origin = RealOrigin("chr1", Strand.REVERSE, 100, 400, 300)
        assert str(origin) == "chr1,-strand,100-400"
        assert origin.read_type is ReadType.REAL

    def test_header_format(self):
        """Test the FASTQ description format."""
        desc = Description(
            origin=RealOrigin("chr1", Strand.FORWARD, 100, 400, 300),
            length=300,
            identity=91.234,
            read_length=310,
        )
        assert str(desc) == (
            "chr1,+strand,100-400 length=310 error-free_length=300 read_identity=91.23%"
        )

    def test_chimera_header(self):
        """Test chimera description format."""
        desc = Description(
            origin=JunkOrigin(100),
            chimera=RandomOrigin(50),
            length=150,
            identity=90.0,
            read_length=149,
        )
        assert desc.is_chimera
        assert str(desc).startswith("junk_seq chimera random_seq length=149")

    def test_to_dict(self):
        """Test the summary row."""
        desc = Description(origin=RandomOrigin(10), length=10)
        d = desc.to_dict()
        assert d["read_type"] == "random"
        assert d["chimera"] == ""
        assert d["ref_id"] == ""

    def test_to_fastq(self):
        """Test FASTQ record formatting."""
        desc = Description(origin=RandomOrigin(4), length=4, read_length=4)
        read = SimulatedRead("r1", desc, "ACGT", "IIII")
        lines = read.to_fastq().splitlines()
        assert lines[0].startswith("@r1 random_seq")
        assert lines[1:] == ["ACGT", "+", "IIII"]


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
