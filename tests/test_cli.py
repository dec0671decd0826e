"""Tests for the lrsim command line interface and the simulation runner."""

import os
import shutil
import tempfile

import numpy as np
import pandas as pd
import pytest
from click.testing import CliRunner

from lrsim import __version__
from lrsim.cli import main
from lrsim.simulate import run_simulation
from lrsim.simulate.readsim.config import SimConfig
from lrsim.simulate.readsim.io_utils import iter_fastq
from lrsim.simulate.readsim.seq_utils import random_seq


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test files."""
    tmpdir = tempfile.mkdtemp()
    yield tmpdir
    shutil.rmtree(tmpdir)


@pytest.fixture
def reference(temp_dir):
    """Two linear chromosomes and a circular plasmid."""
    rng = np.random.default_rng(2024)
    path = os.path.join(temp_dir, "ref.fa")
    with open(path, "w") as f:
        f.write(f">chr1\n{random_seq(3000, rng)}\n")
        f.write(f">chr2 depth=2\n{random_seq(2000, rng)}\n")
        f.write(f">plasmid depth=5 circular=true\n{random_seq(400, rng)}\n")
    return path


def _simulate_args(reference, output, *extra):
    return [
        "simulate",
        "-r", reference,
        "-o", output,
        "-q", "20000",
        "--length", "800,200",
        "--identity", "90,95,3",
        "--glitches", "1000,10,10",
        "--junk_reads", "5",
        "--random_reads", "5",
        "--chimera", "10",
        "--qscore_model", "ideal",
        "--seed", "42",
        *extra,
    ]


def _read_file(path):
    with open(path) as f:
        return f.read()


class TestCLIHelp:
    """Test CLI help and version output."""

    def test_main_help(self):
        """Test lrsim --help."""
        result = CliRunner().invoke(main, ["--help"])
        assert result.exit_code == 0
        assert "simulate" in result.output
        assert "init-config" in result.output

    def test_simulate_help(self):
        """Test lrsim simulate --help."""
        result = CliRunner().invoke(main, ["simulate", "--help"])
        assert result.exit_code == 0
        assert "--reference" in result.output
        assert "--glitches" in result.output

    def test_version(self):
        """Test lrsim --version."""
        result = CliRunner().invoke(main, ["--version"])
        assert __version__ in result.output


class TestInitConfig:
    """Test the init-config command."""

    @pytest.mark.parametrize("preset", ["default", "hifi"])
    def test_write_yaml(self, temp_dir, preset):
        """Test writing preset YAML configs."""
        path = os.path.join(temp_dir, "config.yaml")
        result = CliRunner().invoke(main, ["init-config", "-o", path, "--preset", preset])
        assert result.exit_code == 0
        assert SimConfig.from_file(path).validate() == []

    def test_write_json(self, temp_dir):
        """Test writing a JSON config."""
        path = os.path.join(temp_dir, "config.json")
        result = CliRunner().invoke(main, ["init-config", "-o", path])
        assert result.exit_code == 0
        assert SimConfig.from_file(path).length.mean == 15000.0


class TestSimulateCommand:
    """End-to-end simulation through the CLI."""

    def test_simulate(self, temp_dir, reference):
        """Test basic simulate functionality."""
        output = os.path.join(temp_dir, "reads.fastq")
        summary = os.path.join(temp_dir, "summary.tsv")
        result = CliRunner().invoke(main, _simulate_args(reference, output, "--summary", summary))
        assert result.exit_code == 0, result.output

        records = list(iter_fastq(output))
        assert len(records) > 0
        for read_id, comment, seq, qual in records:
            assert len(seq) == len(qual)
            assert "read_identity=" in comment
            assert f"length={len(seq)} " in comment

        assert os.path.exists(output + ".config.yaml")
        df = pd.read_csv(summary, sep="\t", keep_default_na=False)
        assert len(df) == len(records)
        assert df["error_free_length"].sum() >= 20000

    def test_same_seed_same_output(self, temp_dir, reference):
        """Test the same seed gives the same FASTQ."""
        first = os.path.join(temp_dir, "first.fastq")
        second = os.path.join(temp_dir, "second.fastq")
        runner = CliRunner()
        assert runner.invoke(main, _simulate_args(reference, first)).exit_code == 0
        assert runner.invoke(main, _simulate_args(reference, second)).exit_code == 0
        assert _read_file(first) == _read_file(second)

    @pytest.mark.slow
    def test_threads_same_output(self, temp_dir, reference):
        """Test thread count does not change the FASTQ."""
        single = os.path.join(temp_dir, "single.fastq")
        multi = os.path.join(temp_dir, "multi.fastq")
        runner = CliRunner()
        assert runner.invoke(main, _simulate_args(reference, single)).exit_code == 0
        result = runner.invoke(
            main,
            _simulate_args(reference, multi, "-t", "2", "--number_base_store", "5000"),
        )
        assert result.exit_code == 0, result.output
        assert _read_file(single) == _read_file(multi)

    def test_compressed_output(self, temp_dir, reference):
        """Test gzip output."""
        output = os.path.join(temp_dir, "reads.fastq")
        result = CliRunner().invoke(main, _simulate_args(reference, output, "--compress"))
        assert result.exit_code == 0, result.output
        assert len(list(iter_fastq(output + ".gz"))) > 0

    def test_config_file_with_override(self, temp_dir, reference):
        """Test command line values override the config file."""
        config_path = os.path.join(temp_dir, "config.yaml")
        CliRunner().invoke(main, ["init-config", "-o", config_path, "--preset", "hifi"])
        output = os.path.join(temp_dir, "reads.fastq")

        result = CliRunner().invoke(main, [
            "simulate", "-r", reference, "-o", output,
            "--config", config_path, "-q", "5000", "--length", "500,100", "--seed", "1",
        ])
        assert result.exit_code == 0, result.output

        used = SimConfig.from_file(output + ".config.yaml")
        assert used.identity.mean == 99.0
        assert used.length.mean == 500.0
        assert used.seed == 1

    def test_bad_number_list(self, temp_dir, reference):
        """Test a malformed number list is a usage error."""
        output = os.path.join(temp_dir, "reads.fastq")
        result = CliRunner().invoke(main, [
            "simulate", "-r", reference, "-o", output, "--identity", "90,95",
        ])
        assert result.exit_code == 2

    def test_invalid_model_parameter(self, temp_dir, reference):
        """Test invalid model parameters are reported."""
        output = os.path.join(temp_dir, "reads.fastq")
        result = CliRunner().invoke(main, [
            "simulate", "-r", reference, "-o", output, "--length", "0,100",
        ])
        assert result.exit_code == 1
        assert "Length mean" in result.output

    def test_missing_reference(self, temp_dir):
        """Test a missing reference is reported."""
        result = CliRunner().invoke(main, [
            "simulate", "-r", os.path.join(temp_dir, "missing.fa"), "-o",
            os.path.join(temp_dir, "reads.fastq"),
        ])
        assert result.exit_code == 1
        assert "not found" in result.output


class TestRunSimulation:
    """Test run_simulation called directly."""

    def test_returns_summary(self, temp_dir, reference):
        """Test run_simulation returns the read summary."""
        output = os.path.join(temp_dir, "reads.fastq")
        summary = run_simulation(
            reference=reference,
            output=output,
            quantity="2x",
            length=(600, 100),
            identity=(95, 99, 2),
            junk_reads=0,
            random_reads=0,
            chimera=0,
            glitches=(0, 0, 0),
            adjust_depth=True,
            seed=3,
        )

        df = summary.to_dataframe()
        assert (df["read_type"] == "real").all()
        assert df["error_free_length"].sum() >= 2 * 5400
        assert set(df["ref_id"]) <= {"chr1", "chr2", "plasmid"}

    def test_coverage_of_nothing(self, temp_dir, reference):
        """Test a zero quantity is rejected."""
        with pytest.raises(ValueError):
            run_simulation(reference=reference, output=os.path.join(temp_dir, "r.fq"), quantity="0")


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
