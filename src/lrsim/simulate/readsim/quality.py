"""
质量值分配

对 CIGAR 的每个非 D 位置，取以该位置为中心的窗口（边界处对称截短），
从模型最长键宽开始两端各缩一位，直到命中模型中的键，再按权重抽样。
"""

import numpy as np

from .error_models import QualityModel


class QualityAssigner:
    """根据 CIGAR 上下文生成质量字符串"""

    def __init__(self, model: QualityModel):
        self.model = model
        self.margin = (model.max_k - 1) // 2

    def assign(self, cigar: str, rng: np.random.Generator) -> str:
        """
        Args:
            cigar: 逐列操作串（=XID）
            rng: 随机数生成器

        Returns:
            质量字符串，长度等于 cigar 中非 D 字符数
        """
        model = self.model
        n = len(cigar)
        quals = []

        for i, op in enumerate(cigar):
            if op == "D":
                continue

            half = min(self.margin, i, n - 1 - i)
            while half > 0 and cigar[i - half:i + half + 1] not in model:
                half -= 1
            quals.append(model.sample(cigar[i - half:i + half + 1], rng))

        return bytes(quals).decode("ascii")
