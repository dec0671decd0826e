"""
序列工具函数
"""

import numpy as np

NUCLEOTIDES = "ACTG"

_COMPLEMENT = str.maketrans(
    "ACGTNacgtnRYSWKMBVDH",
    "TGCANtgcanYRSWMKVBHD",
)

# junk read 由短 motif 重复构成
JUNK_MOTIF_MAX = 5


def reverse_complement(seq: str) -> str:
    """反向互补"""
    return seq.translate(_COMPLEMENT)[::-1]


def random_base(rng: np.random.Generator) -> str:
    """随机碱基"""
    return NUCLEOTIDES[rng.integers(0, 4)]


def random_base_diff(base: str, rng: np.random.Generator) -> str:
    """与给定碱基不同的随机碱基（用于替换错误）"""
    choices = [b for b in NUCLEOTIDES if b != base.upper()]
    if len(choices) == len(NUCLEOTIDES):
        # 非 ACGT 碱基（如 N），任意碱基都算不同
        return random_base(rng)
    return choices[rng.integers(0, len(choices))]


def random_seq(length: int, rng: np.random.Generator) -> str:
    """均匀随机序列"""
    if length <= 0:
        return ""
    idx = rng.integers(0, 4, size=length)
    return "".join(NUCLEOTIDES[i] for i in idx)


def junk_seq(length: int, rng: np.random.Generator) -> str:
    """
    低复杂度 junk 序列：随机短 motif 重复到指定长度

    Args:
        length: 目标长度
        rng: 随机数生成器

    Returns:
        junk 序列
    """
    if length <= 0:
        return ""
    motif = random_seq(int(rng.integers(1, JUNK_MOTIF_MAX + 1)), rng)
    copies = length // len(motif) + 1
    return (motif * copies)[:length]


def random_point_edit(kmer: str, rng: np.random.Generator) -> str:
    """
    在 k-mer 上制造一个随机点错误

    替换 / 插入 / 删除三选一（均匀）。插入的碱基放在选中位置之前。

    Args:
        kmer: 原始 k-mer
        rng: 随机数生成器

    Returns:
        带一个编辑的 k-mer
    """
    if not kmer:
        return random_base(rng)

    pos = int(rng.integers(0, len(kmer)))
    kind = int(rng.integers(0, 3))
    if kind == 0:
        middle = random_base_diff(kmer[pos], rng)
    elif kind == 1:
        middle = random_base(rng) + kmer[pos]
    else:
        middle = ""
    return kmer[:pos] + middle + kmer[pos + 1:]


def extract_circular_region(seq: str, offset: int, length: int) -> str:
    """
    从环状序列提取区域（自动绕环，可绕多圈）

    Args:
        seq: 环状序列
        offset: 起始偏移（0-based）
        length: 提取长度

    Returns:
        提取的序列
    """
    L = len(seq)
    if L == 0 or length <= 0:
        return ""

    offset = offset % L
    if offset + length <= L:
        return seq[offset:offset + length]

    result = seq[offset:]
    remaining = length - len(result)
    result += seq * (remaining // L)
    result += seq[:remaining % L]
    return result
