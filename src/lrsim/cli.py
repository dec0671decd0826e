"""
lrsim CLI - Command Line Interface for long-read simulation.

Usage:
    lrsim <command> [options]
"""

import logging

import click

from lrsim import __version__


def _number_list(expected: int, minimum=None):
    """Build a click callback that parses 'a,b[,c]' into a tuple of floats."""

    def callback(ctx, param, value):
        if value is None:
            return None
        from lrsim.utils.validation import parse_number_list

        try:
            return tuple(parse_number_list(value, expected, name=f"--{param.name}", minimum=minimum))
        except ValueError as e:
            raise click.BadParameter(str(e)) from e

    return callback


@click.group()
@click.version_option(version=__version__, prog_name="lrsim")
def main():
    """lrsim - A long-read sequencing simulator.

    Use 'lrsim <command> --help' for detailed usage of each command.
    """
    pass


@main.command()
@click.option("-r", "--reference", required=True, help="Reference FASTA (depth=/circular=true header tags)")
@click.option("-o", "--output", required=True, help="Output FASTQ file")
@click.option("-q", "--quantity", help="Output size: 25x, 250M, 1G or a number of bases")
@click.option("--length", callback=_number_list(2, minimum=0),
              help="Fragment length mean,stdev (e.g. 15000,13000)")
@click.option("--identity", callback=_number_list(3, minimum=0),
              help="Read identity mean,max,stdev in percent (e.g. 85,95,5)")
@click.option("--error_model", "--error-model", "error_model",
              help="k-mer error model file or 'random'")
@click.option("--qscore_model", "--qscore-model", "qscore_model",
              help="Quality score model file, 'ideal' or 'random'")
@click.option("--start_adapter", "--start-adapter", "start_adapter",
              callback=_number_list(2, minimum=0), help="Start adapter rate,amount in percent")
@click.option("--end_adapter", "--end-adapter", "end_adapter",
              callback=_number_list(2, minimum=0), help="End adapter rate,amount in percent")
@click.option("--start_adapter_seq", "--start-adapter-seq", "start_adapter_seq",
              help="Start adapter sequence")
@click.option("--end_adapter_seq", "--end-adapter-seq", "end_adapter_seq",
              help="End adapter sequence")
@click.option("--junk_reads", "--junk-reads", "junk_reads", type=float,
              help="Percentage of junk reads")
@click.option("--random_reads", "--random-reads", "random_reads", type=float,
              help="Percentage of random reads")
@click.option("--chimera", type=float, help="Percentage of chimeric reads")
@click.option("--glitches", callback=_number_list(3, minimum=0),
              help="Glitch rate,size,skip (e.g. 10000,25,25)")
@click.option("--number_base_store", "--number-base-store", "number_base_store",
              help="Maximum error-free bases buffered before writing (e.g. 100M)")
@click.option("--adjust_depth", "--adjust-depth", "adjust_depth", is_flag=True,
              help="Re-weight references so output follows depth x length")
@click.option("-t", "--threads", default=1, help="Number of threads (0=auto)")
@click.option("--seed", type=int, help="Random seed")
@click.option("--config", "config_file", help="Config file (YAML/JSON)")
@click.option("--summary", help="Per-read summary TSV")
@click.option("--compress", is_flag=True, help="Compress output (gzip)")
@click.option("--log-file", help="Also write log messages to this file")
@click.option("-v", "--verbose", is_flag=True, help="Verbose output")
def simulate(reference, output, quantity, length, identity, error_model, qscore_model,
             start_adapter, end_adapter, start_adapter_seq, end_adapter_seq,
             junk_reads, random_reads, chimera, glitches, number_base_store,
             adjust_depth, threads, seed, config_file, summary, compress,
             log_file, verbose):
    """Simulate long reads from reference sequences.

    Fragments are drawn from the references (circular references wrap),
    mutated with a k-mer error model plus glitches, and given quality
    scores from a CIGAR-context model. Output is reproducible for a given
    --seed whatever the number of threads.
    """
    from lrsim.utils.logging_utils import setup_logger
    from lrsim.simulate.runner import run_simulation

    setup_logger(level=logging.DEBUG if verbose else logging.INFO, log_file=log_file)

    try:
        run_simulation(
            reference=reference,
            output=output,
            quantity=quantity,
            number_base_store=number_base_store,
            length=length,
            identity=identity,
            error_model=error_model,
            qscore_model=qscore_model,
            start_adapter=start_adapter,
            end_adapter=end_adapter,
            start_adapter_seq=start_adapter_seq,
            end_adapter_seq=end_adapter_seq,
            junk_reads=junk_reads,
            random_reads=random_reads,
            chimera=chimera,
            glitches=glitches,
            adjust_depth=adjust_depth,
            threads=threads,
            seed=seed,
            config_file=config_file,
            summary=summary,
            compress=compress,
        )
    except (ValueError, FileNotFoundError) as e:
        raise click.ClickException(str(e)) from e


@main.command("init-config")
@click.option("-o", "--output", required=True, help="Output config file (.yaml/.yml/.json)")
@click.option("--preset", type=click.Choice(["default", "hifi"]), default="default",
              help="Parameter preset")
def init_config(output, preset):
    """Write a configuration file with preset parameters."""
    from lrsim.simulate.readsim.config import get_default_config, get_hifi_config

    config = get_hifi_config() if preset == "hifi" else get_default_config()
    if output.endswith((".yaml", ".yml")):
        config.to_yaml(output)
    else:
        config.to_json(output)
    click.echo(f"Config written to {output}")


if __name__ == "__main__":
    main()
