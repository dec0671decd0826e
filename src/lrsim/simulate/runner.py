"""
Simulate long reads from reference sequences.

Pipeline:
1. Load configuration (file values, then command line overrides)
2. Load references and build the statistical models
3. Select fragments on the coordinating process, one seed per read
4. Assemble, mutate and score reads in worker processes
5. Stream reads to FASTQ in batches and write a per-read summary
"""

import logging
from pathlib import Path
from typing import Optional, Tuple

import numpy as np

logger = logging.getLogger(__name__)


def run_simulation(
    reference: str,
    output: str,
    # Output scale
    quantity: Optional[str] = None,
    number_base_store: Optional[str] = None,
    # Statistical models
    length: Optional[Tuple[float, float]] = None,
    identity: Optional[Tuple[float, float, float]] = None,
    error_model: Optional[str] = None,
    qscore_model: Optional[str] = None,
    # Adapters
    start_adapter: Optional[Tuple[float, float]] = None,
    end_adapter: Optional[Tuple[float, float]] = None,
    start_adapter_seq: Optional[str] = None,
    end_adapter_seq: Optional[str] = None,
    # Read categories (percent)
    junk_reads: Optional[float] = None,
    random_reads: Optional[float] = None,
    chimera: Optional[float] = None,
    glitches: Optional[Tuple[float, float, float]] = None,
    adjust_depth: bool = False,
    # Parallel processing
    threads: int = 1,
    # Options
    seed: Optional[int] = None,
    config_file: Optional[str] = None,
    summary: Optional[str] = None,
    compress: bool = False,
):
    """
    Simulate long reads from a reference FASTA.

    Args:
        reference: Reference FASTA (``depth=`` and ``circular=true`` header tags honoured)
        output: Output FASTQ path
        quantity: Output size, e.g. ``25x``, ``250M`` or a number of bases
        number_base_store: Maximum error-free bases buffered before a flush
        length: Fragment length (mean, stdev)
        identity: Read identity in percent (mean, max, stdev)
        error_model: k-mer error model file or ``random``
        qscore_model: Quality model file, ``ideal`` or ``random``
        start_adapter: Start adapter (rate, amount) in percent
        end_adapter: End adapter (rate, amount) in percent
        start_adapter_seq: Start adapter sequence
        end_adapter_seq: End adapter sequence
        junk_reads: Percentage of junk reads
        random_reads: Percentage of random reads
        chimera: Percentage of chimeric reads
        glitches: Glitch (rate, size, skip)
        adjust_depth: Re-weight references so output follows depth x length
        threads: Number of worker processes (0=auto, 1=single)
        seed: Random seed
        config_file: YAML/JSON config file (command line values override it)
        summary: Optional per-read summary TSV path
        compress: Compress output (gzip)

    Returns:
        ReadSummary of the generated reads

    Outputs:
        - FASTQ reads
        - <output>.config.yaml: Configuration used for simulation
        - summary TSV (optional)
    """
    from lrsim.utils.logging_utils import log_parameters
    from lrsim.utils.validation import validate_file_exists
    from .readsim.assembler import ReadAssembler
    from .readsim.config import SimConfig, get_default_config
    from .readsim.distributions import AdapterModel, IdentityModel, LengthModel
    from .readsim.error_models import GlitchModel, get_error_model, get_quality_model
    from .readsim.errors import ErrorInjector
    from .readsim.fragments import FragmentSelector, ReferenceSet
    from .readsim.io_utils import FastqWriter, parse_fasta, summarize_references
    from .readsim.parallel import ParallelGenerationDriver, ProgressTracker, get_optimal_workers
    from .readsim.quality import QualityAssigner
    from .readsim.summary import ReadSummary

    logger.info("Long-read simulation")
    logger.info(f"Reference: {reference}")
    logger.info(f"Output: {output}")

    validate_file_exists(reference, "Reference FASTA")

    # Load config
    if config_file:
        validate_file_exists(config_file, "Config file")
        config = SimConfig.from_file(config_file)
    else:
        config = get_default_config()

    # Override with CLI parameters
    if quantity is not None:
        config.output.quantity = quantity
    if number_base_store is not None:
        config.output.number_base_store = number_base_store
    if adjust_depth:
        config.output.adjust_depth = True
    if compress:
        config.output.compress = True
    if length is not None:
        config.length.mean, config.length.stdev = length
    if identity is not None:
        config.identity.mean, config.identity.max, config.identity.stdev = identity
    if error_model is not None:
        config.models.error_model = error_model
    if qscore_model is not None:
        config.models.qscore_model = qscore_model
    if start_adapter is not None:
        config.adapters.start_rate, config.adapters.start_amount = start_adapter
    if end_adapter is not None:
        config.adapters.end_rate, config.adapters.end_amount = end_adapter
    if start_adapter_seq is not None:
        config.adapters.start_seq = start_adapter_seq
    if end_adapter_seq is not None:
        config.adapters.end_seq = end_adapter_seq
    if junk_reads is not None:
        config.read_types.junk = junk_reads
    if random_reads is not None:
        config.read_types.random = random_reads
    if chimera is not None:
        config.read_types.chimera = chimera
    if glitches is not None:
        config.glitches.rate, config.glitches.size, config.glitches.skip = glitches
    if seed is not None:
        config.seed = seed

    for warning in config.validate():
        logger.warning(f"Config: {warning}")

    if config.seed is None:
        config.seed = int(np.random.SeedSequence().entropy % (2 ** 63))
        logger.info(f"No seed given, using {config.seed}")
    log_parameters(logger, config.to_dict())
    rng = np.random.default_rng(config.seed)

    # Build models (configuration errors surface here, before any read is generated)
    length_model = LengthModel(config.length.mean, config.length.stdev)
    identity_model = IdentityModel(config.identity.mean, config.identity.max, config.identity.stdev)
    adapter_model = AdapterModel(
        start_seq=config.adapters.start_seq,
        end_seq=config.adapters.end_seq,
        start_rate=config.adapters.start_rate,
        start_amount=config.adapters.start_amount,
        end_rate=config.adapters.end_rate,
        end_amount=config.adapters.end_amount,
    )
    glitch_model = GlitchModel(config.glitches.rate, config.glitches.size, config.glitches.skip)

    if config.models.error_model != "random":
        validate_file_exists(config.models.error_model, "Error model")
    if config.models.qscore_model not in ("random", "ideal"):
        validate_file_exists(config.models.qscore_model, "Quality model")
    if config.models.error_model == "random":
        kmer_model = get_error_model("random", k=config.models.kmer_size)
    else:
        kmer_model = get_error_model(config.models.error_model)
    quality_model = get_quality_model(config.models.qscore_model)
    logger.info(
        f"Models: error={kmer_model.name} (k={kmer_model.k}), "
        f"qscore={quality_model.name}"
    )

    # Load references
    references = parse_fasta(reference)
    if not references:
        raise ValueError("No reference sequences found in input file")
    logger.info(summarize_references(references))

    reference_set = ReferenceSet(references)
    if config.output.adjust_depth:
        reference_set.adjust_depth(length_model, rng)

    target_bases = config.quantity.number_of_base(reference_set.total_length)
    if target_bases <= 0:
        raise ValueError(f"Quantity {config.output.quantity} gives no bases to simulate")
    logger.info(f"Target bases: {target_bases}")

    selector = FragmentSelector(
        reference_set,
        length_model,
        identity_model,
        junk_rate=config.read_types.junk / 100.0,
        random_rate=config.read_types.random / 100.0,
        chimera_rate=config.read_types.chimera / 100.0,
    )
    assembler = ReadAssembler(
        reference_set,
        adapter_model,
        ErrorInjector(kmer_model, glitch_model),
        QualityAssigner(quality_model),
    )

    output_path = Path(output)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    config_path = output_path.with_name(output_path.name + ".config.yaml")
    config.to_yaml(str(config_path))
    logger.info(f"Config saved to {config_path}")

    num_workers = get_optimal_workers(threads)
    read_summary = ReadSummary()
    progress = ProgressTracker(target_bases, desc="Generating reads")

    with FastqWriter(output_path, compress=config.output.compress) as writer:
        with ParallelGenerationDriver(
            assembler,
            num_workers=num_workers,
            number_base_store=config.number_base_store,
        ) as driver:
            for batch in driver.generate(selector.iter_work(target_bases, rng)):
                writer.write(batch)
                read_summary.add(batch)
                progress.update(sum(r.description.length for r in batch))
    progress.close()

    logger.info(f"Wrote {writer.n_reads} reads to {writer.path}")
    logger.info(read_summary.describe())
    if len(read_summary):
        logger.info(f"Per read type:\n{read_summary.by_read_type().to_string()}")

    if summary:
        read_summary.write(summary)

    return read_summary
