"""
Long-read simulator.

从参考序列出发抽取片段，按 k-mer 错误模型和 glitch 模型注入错误，
再根据 CIGAR 上下文分配质量值。
"""

from .config import SimConfig, Quantity, get_default_config
from .models import Description, Reference, SimulatedRead, Strand
from .changes import Change, ChangeSet
from .errors import ErrorInjector
from .quality import QualityAssigner
from .fragments import FragmentSelector, ReferenceSet
from .assembler import ReadAssembler
from .parallel import ParallelGenerationDriver
from .io_utils import parse_fasta, write_fastq, FastqWriter

__all__ = [
    'SimConfig',
    'Quantity',
    'get_default_config',
    'Description',
    'Reference',
    'SimulatedRead',
    'Strand',
    'Change',
    'ChangeSet',
    'ErrorInjector',
    'QualityAssigner',
    'FragmentSelector',
    'ReferenceSet',
    'ReadAssembler',
    'ParallelGenerationDriver',
    'parse_fasta',
    'write_fastq',
    'FastqWriter',
]
