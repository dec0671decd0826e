"""
质量值模型

把奇数长度的 CIGAR 上下文映射到质量值分布。模型至少包含 ``=``、``X``、
``I`` 三个单字符键，保证窗口收缩到中心位置时一定能命中。
"""

import logging
from pathlib import Path
from typing import Dict, List, Tuple, Union

import numpy as np
import pandas as pd

logger = logging.getLogger(__name__)

PHRED_OFFSET = 33
REQUIRED_KEYS = ("=", "X", "I")


class QualityModel:
    """CIGAR 上下文 -> (质量值, 权重)"""

    def __init__(self, table: Dict[str, Tuple[List[int], List[float]]], name: str = "custom"):
        missing = [key for key in REQUIRED_KEYS if key not in table]
        if missing:
            raise ValueError(f"Quality model is missing required CIGAR keys: {missing}")

        self.name = name
        self._scores: Dict[str, np.ndarray] = {}
        self._cumulative: Dict[str, np.ndarray] = {}
        for key, (scores, weights) in table.items():
            if len(key) % 2 == 0:
                raise ValueError(f"Quality model CIGAR key must have odd length: '{key}'")
            if len(scores) != len(weights) or not scores:
                raise ValueError(f"Quality model entry '{key}' has mismatched scores/weights")
            cum = np.cumsum(np.asarray(weights, dtype=float))
            if cum[-1] <= 0:
                raise ValueError(f"Quality model entry '{key}' has no positive weight")
            self._scores[key] = np.asarray(scores, dtype=int)
            self._cumulative[key] = cum

        self.max_k = max(len(key) for key in self._scores)

    def __contains__(self, key: str) -> bool:
        return key in self._scores

    def __len__(self) -> int:
        return len(self._scores)

    def sample(self, key: str, rng: np.random.Generator) -> int:
        """按权重抽取一个质量值，返回加上 Phred 偏移后的 ASCII 码"""
        cum = self._cumulative[key]
        scores = self._scores[key]
        idx = int(np.searchsorted(cum, rng.random() * cum[-1], side="right"))
        return int(scores[min(idx, len(scores) - 1)]) + PHRED_OFFSET

    # =========================================================================
    # 构造
    # =========================================================================

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "QualityModel":
        """
        读取质量值模型文件（支持 .gz）

        第一行为汇总记录，跳过；之后每行 ``cigar;count;score:weight,...``。

        Args:
            path: 模型文件路径

        Returns:
            QualityModel

        Raises:
            ValueError: 记录格式错误或缺少必需键
        """
        path = Path(path)
        df = pd.read_csv(
            path,
            sep=";",
            header=None,
            skiprows=1,
            usecols=[0, 1, 2],
            names=["cigar", "count", "scores"],
            dtype=str,
            keep_default_na=False,
        )

        table = {}
        for row in df.itertuples(index=False):
            cigar = row.cigar.strip()
            if not cigar:
                continue
            table[cigar] = cls._parse_scores(cigar, row.scores)

        logger.info(f"Loaded quality model from {path.name}: {len(table)} CIGAR keys")
        return cls(table, name=path.name)

    @staticmethod
    def _parse_scores(cigar: str, field: str) -> Tuple[List[int], List[float]]:
        scores = []
        weights = []
        for item in field.split(","):
            item = item.strip()
            if not item:
                continue
            parts = item.split(":")
            if len(parts) != 2:
                raise ValueError(f"Malformed score entry '{item}' for CIGAR '{cigar}'")
            try:
                scores.append(int(parts[0]))
                weights.append(float(parts[1]))
            except ValueError:
                raise ValueError(f"Malformed score entry '{item}' for CIGAR '{cigar}'") from None
        return scores, weights

    @classmethod
    def random(cls, min_score: int = 1, max_score: int = 40) -> "QualityModel":
        """所有上下文均匀随机的质量值"""
        scores = list(range(min_score, max_score + 1))
        weights = [1.0] * len(scores)
        table = {key: (scores, weights) for key in REQUIRED_KEYS}
        return cls(table, name="random")

    @classmethod
    def ideal(cls, max_score: int = 40, error_score: int = 3, max_k: int = 9) -> "QualityModel":
        """
        理想模型：错误位置低质量，匹配位置的质量随周围无错误的窗口宽度上升
        """
        table = {
            "X": ([error_score], [1.0]),
            "I": ([error_score], [1.0]),
        }
        widths = list(range(1, max_k + 1, 2))
        for rank, width in enumerate(widths, start=1):
            score = error_score + (max_score - error_score) * rank // len(widths)
            table["=" * width] = ([score], [1.0])
        return cls(table, name="ideal")
