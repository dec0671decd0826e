"""
基于经验 k-mer 表的错误模型

模型文件每行一条记录，分号分隔若干 ``kmer,prob`` 项，第一项是原始
k-mer（键），其余是测序后可能出现的替代序列。概率和不足 1 时，剩余
概率分配给一个随机点错误。
"""

import gzip
import logging
from pathlib import Path
from typing import Dict, List, Optional, Tuple, Union

import numpy as np

from ..alignment import edit_distance
from ..seq_utils import random_point_edit
from .base import BaseKmerErrorModel

logger = logging.getLogger(__name__)

# 占位：抽中时现场制造一个随机点错误
RANDOM_EDIT = None

# 小于此值的剩余概率视为浮点误差
PROB_TOLERANCE = 1e-9

Alternative = Tuple[Optional[str], int]


class KmerErrorModel(BaseKmerErrorModel):
    """经验 k-mer 替代表"""

    def __init__(self, table: Dict[str, Tuple[List[Alternative], List[float]]]):
        if not table:
            raise ValueError("Error model is empty")

        widths = {len(key) for key in table}
        if len(widths) != 1:
            raise ValueError(f"Error model keys have inconsistent lengths: {sorted(widths)}")
        self._k = widths.pop()
        if self._k == 0:
            raise ValueError("Error model keys must not be empty")

        self._alternatives: Dict[str, List[Alternative]] = {}
        self._cumulative: Dict[str, np.ndarray] = {}
        for key, (alts, weights) in table.items():
            if len(alts) != len(weights):
                raise ValueError(f"Alternatives and weights differ in length for k-mer {key}")
            cum = np.cumsum(np.asarray(weights, dtype=float))
            if len(cum) == 0 or cum[-1] <= 0:
                raise ValueError(f"k-mer {key} has no positive weight")
            self._alternatives[key] = list(alts)
            self._cumulative[key] = cum

    @property
    def k(self) -> int:
        return self._k

    @property
    def name(self) -> str:
        return "kmer_table"

    def __len__(self) -> int:
        return len(self._alternatives)

    def __contains__(self, kmer: str) -> bool:
        return kmer in self._alternatives

    def add_errors(self, kmer: str, rng: np.random.Generator) -> Tuple[str, int]:
        alts = self._alternatives.get(kmer)
        if alts is None:
            return kmer, 0

        cum = self._cumulative[kmer]
        idx = int(np.searchsorted(cum, rng.random() * cum[-1], side="right"))
        alt, dist = alts[min(idx, len(alts) - 1)]
        if alt is RANDOM_EDIT:
            return random_point_edit(kmer, rng), 1
        return alt, dist

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "KmerErrorModel":
        """
        读取 k-mer 错误模型文件（支持 .gz）

        Args:
            path: 模型文件路径

        Returns:
            KmerErrorModel

        Raises:
            ValueError: 记录格式错误
        """
        path = Path(path)
        opener = gzip.open if path.suffix == '.gz' else open

        with opener(path, 'rt') as f:
            table = cls.parse_lines(f)

        logger.info(f"Loaded error model from {path.name}: {len(table)} k-mers")
        return cls(table)

    @staticmethod
    def parse_lines(lines) -> Dict[str, Tuple[List[Alternative], List[float]]]:
        """解析模型记录，返回 {kmer: (alternatives, weights)}"""
        table = {}
        for lineno, line in enumerate(lines, start=1):
            line = line.strip()
            if not line:
                continue

            alts: List[Alternative] = []
            weights: List[float] = []
            for item in line.split(';'):
                if not item:
                    continue
                fields = item.split(',')
                if len(fields) != 2:
                    raise ValueError(f"Malformed error model item at line {lineno}: '{item}'")
                kmer = fields[0].strip().upper()
                try:
                    prob = float(fields[1])
                except ValueError:
                    raise ValueError(
                        f"Malformed probability at line {lineno}: '{fields[1]}'"
                    ) from None

                dist = edit_distance(alts[0][0], kmer) if alts else 0
                alts.append((kmer, dist))
                weights.append(prob)

            if not alts:
                continue

            leftover = 1.0 - sum(weights)
            if leftover > PROB_TOLERANCE:
                alts.append((RANDOM_EDIT, 1))
                weights.append(leftover)

            table[alts[0][0]] = (alts, weights)

        return table


class RandomKmerErrorModel(BaseKmerErrorModel):
    """合成模型：每次查询制造一个随机点错误（替换/插入/删除）"""

    def __init__(self, k: int = 7):
        if k <= 0:
            raise ValueError(f"k must be > 0, got {k}")
        self._k = k

    @property
    def k(self) -> int:
        return self._k

    @property
    def name(self) -> str:
        return "random"

    def add_errors(self, kmer: str, rng: np.random.Generator) -> Tuple[str, int]:
        return random_point_edit(kmer, rng), 1
