"""
输入输出工具模块

- FASTA读取（header 中的 depth= / circular= 标记）
- FASTQ写入（分批追加，支持gzip）
- 工具接口：write_fasta / write_fastq / iter_fastq 不在模拟流程中使用，
  供测试和下游脚本生成参考序列、读回FASTQ
"""

import gzip
import logging
import re
from pathlib import Path
from typing import Generator, Iterable, List, Optional, TextIO, Tuple, Union

from .models import Reference, SimulatedRead

logger = logging.getLogger(__name__)

# 有效的DNA碱基
VALID_BASES = set('ACGTN')

_DEPTH_RE = re.compile(r"depth=([\d.eE+-]+)")
_CIRCULAR_RE = re.compile(r"circular=(\w+)")


def validate_sequence(seq: str, seq_id: str) -> str:
    """
    验证并清理序列

    Args:
        seq: 序列字符串
        seq_id: 序列ID（用于警告消息）

    Returns:
        清理后的序列（大写，非法字符替换为 N）
    """
    seq = seq.upper().strip()

    invalid_chars = set(seq) - VALID_BASES
    if invalid_chars:
        logger.warning(
            f"Sequence '{seq_id}' contains non-standard bases: {invalid_chars}. "
            f"These will be converted to 'N'."
        )
        seq = ''.join(c if c in VALID_BASES else 'N' for c in seq)

    return seq


def parse_header(header: str) -> Tuple[str, float, bool]:
    """
    解析FASTA header

    ``>chr1 depth=1.5 circular=true`` -> ("chr1", 1.5, True)

    Raises:
        ValueError: depth 不是合法的非负数
    """
    fields = header.split()
    if not fields:
        raise ValueError("FASTA record with an empty header")
    ref_id = fields[0]

    depth = 1.0
    match = _DEPTH_RE.search(header)
    if match:
        try:
            depth = float(match.group(1))
        except ValueError:
            raise ValueError(f"Invalid depth in FASTA header: '{header}'") from None
        if depth < 0:
            raise ValueError(f"Depth must be >= 0 in FASTA header: '{header}'")

    circular = False
    match = _CIRCULAR_RE.search(header)
    if match:
        circular = match.group(1).lower() == "true"

    return ref_id, depth, circular


def parse_fasta(path: Union[str, Path]) -> List[Reference]:
    """
    解析FASTA文件

    支持.fa, .fasta, .fa.gz, .fasta.gz

    Args:
        path: FASTA文件路径

    Returns:
        Reference列表
    """
    path = Path(path)
    opener = gzip.open if path.suffix == '.gz' else open

    with opener(path, 'rt') as f:
        references = list(iter_fasta_records(f))

    if not references:
        logger.warning(f"No valid sequences found in {path}")

    return references


def iter_fasta_records(handle: Iterable[str]) -> Generator[Reference, None, None]:
    """从文本行迭代 Reference，跳过空序列"""
    header = None
    chunks: List[str] = []

    def build() -> Optional[Reference]:
        ref_id, depth, circular = parse_header(header)
        seq = validate_sequence("".join(chunks), ref_id)
        if not seq:
            logger.warning(f"Skipping empty sequence: {ref_id}")
            return None
        return Reference(id=ref_id, seq=seq, depth=depth, circular=circular)

    for line in handle:
        line = line.strip()
        if not line:
            continue
        if line.startswith('>'):
            if header is not None:
                ref = build()
                if ref is not None:
                    yield ref
            header = line[1:]
            chunks = []
        else:
            chunks.append(line)

    if header is not None:
        ref = build()
        if ref is not None:
            yield ref


def write_fasta(references: List[Reference], path: Union[str, Path], line_width: int = 80):
    """
    写入FASTA文件（保留 depth / circular 标记）

    Args:
        references: Reference列表
        path: 输出路径
        line_width: 每行宽度
    """
    path = Path(path)

    with open(path, 'w') as f:
        for ref in references:
            header = f">{ref.id} depth={ref.depth}"
            if ref.circular:
                header += " circular=true"
            f.write(header + "\n")
            for i in range(0, len(ref.seq), line_width):
                f.write(ref.seq[i:i + line_width] + "\n")


class FastqWriter:
    """
    分批追加写入FASTQ

    路径以 .gz 结尾或 compress=True 时写 gzip。
    """

    def __init__(self, path: Union[str, Path], compress: bool = False):
        path = Path(path)
        if compress and path.suffix != '.gz':
            path = Path(str(path) + '.gz')
        self.path = path
        self.n_reads = 0
        self._handle: Optional[TextIO] = None

    def open(self) -> "FastqWriter":
        self.path.parent.mkdir(parents=True, exist_ok=True)
        if self.path.suffix == '.gz':
            self._handle = gzip.open(self.path, 'wt')
        else:
            self._handle = open(self.path, 'w')
        return self

    def write(self, reads: Iterable[SimulatedRead]) -> int:
        """写入一批 read，返回写入条数"""
        if self._handle is None:
            raise RuntimeError(f"FASTQ writer for {self.path} is not open")
        count = 0
        for read in reads:
            self._handle.write(read.to_fastq())
            count += 1
        self.n_reads += count
        return count

    def close(self):
        if self._handle is not None:
            self._handle.close()
            self._handle = None

    def __enter__(self):
        return self.open()

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()


def write_fastq(
    reads: List[SimulatedRead],
    path: Union[str, Path],
    compress: bool = False
) -> Path:
    """
    一次性写入FASTQ文件

    Args:
        reads: SimulatedRead列表
        path: 输出路径
        compress: 是否gzip压缩

    Returns:
        实际写入的路径
    """
    with FastqWriter(path, compress) as writer:
        writer.write(reads)
    return writer.path


def iter_fastq(path: Union[str, Path]) -> Generator[Tuple[str, str, str, str], None, None]:
    """
    迭代读取FASTQ文件

    Yields:
        (read_id, comment, sequence, quality)
    """
    path = Path(path)
    opener = gzip.open if path.suffix == '.gz' else open

    with opener(path, 'rt') as f:
        while True:
            header = f.readline().strip()
            if not header:
                break
            seq = f.readline().strip()
            f.readline()  # +
            qual = f.readline().strip()

            read_id, _, comment = header[1:].partition(" ")
            yield read_id, comment, seq, qual


def summarize_references(references: List[Reference]) -> str:
    """
    生成参考序列摘要

    Args:
        references: Reference列表

    Returns:
        摘要字符串
    """
    if not references:
        return "No references"

    lengths = [r.length for r in references]
    n_circular = sum(1 for r in references if r.circular)

    return (
        f"References: {len(references)} ({n_circular} circular), "
        f"Length: {min(lengths)}-{max(lengths)}bp, "
        f"Total: {sum(lengths)}bp"
    )
