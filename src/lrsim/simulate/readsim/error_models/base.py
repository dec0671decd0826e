"""
k-mer 错误模型基类

定义按 k-mer 窗口引入错误的接口
"""

from abc import ABC, abstractmethod
from typing import Tuple

import numpy as np


class BaseKmerErrorModel(ABC):
    """k-mer 错误模型基类"""

    @property
    @abstractmethod
    def k(self) -> int:
        """k-mer 宽度"""

    @abstractmethod
    def add_errors(self, kmer: str, rng: np.random.Generator) -> Tuple[str, int]:
        """
        为一个 k-mer 抽取替代序列

        Args:
            kmer: 原始 k-mer
            rng: 随机数生成器

        Returns:
            (替代 k-mer, 相对原始 k-mer 的编辑距离)
        """

    @property
    @abstractmethod
    def name(self) -> str:
        """模型名称"""
