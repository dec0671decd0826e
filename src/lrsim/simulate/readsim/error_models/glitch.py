"""
Glitch 模型

glitch 是与点错误独立抽样的大片段事件：跳过一段原始序列，
并在该处插入一段随机序列。
"""

from typing import Optional, Tuple

import numpy as np

from ..seq_utils import random_seq


def _success_probability(mean: float) -> float:
    """几何分布的成功概率，均值不超过 1 时退化为 1"""
    return 1.0 / mean if mean > 1.0 else 1.0


class GlitchModel:
    """
    Glitch 抽样器

    Args:
        rate: 相邻 glitch 之间的平均距离（bp），0 表示关闭
        size: 插入随机序列的平均长度
        skip: 跳过原始序列的平均长度
    """

    def __init__(self, rate: float = 0.0, size: float = 0.0, skip: float = 0.0):
        for label, value in (("rate", rate), ("size", size), ("skip", skip)):
            if value < 0:
                raise ValueError(f"Glitch {label} must be >= 0, got {value}")

        self.rate = rate
        self.size = size
        self.skip = skip
        self._p_distance = _success_probability(rate) if rate > 0 else None
        self._p_size = _success_probability(size)
        self._p_skip = _success_probability(skip)

    @property
    def enabled(self) -> bool:
        return self._p_distance is not None

    def sample(self, rng: np.random.Generator) -> Optional[Tuple[int, int, str]]:
        """
        抽取下一个 glitch

        Returns:
            (距上一个 glitch 的距离, 跳过长度, 插入序列)，模型关闭时为 None
        """
        if self._p_distance is None:
            return None

        gap = int(rng.geometric(self._p_distance))
        skipped = int(rng.geometric(self._p_skip)) - 1
        inserted = random_seq(int(rng.geometric(self._p_size)) - 1, rng)
        return gap, skipped, inserted
