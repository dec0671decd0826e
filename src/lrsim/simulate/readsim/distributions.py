"""
读长、一致性和接头模型

三个模型都在构造时检查参数，参数非法时抛出 ValueError，
保证在生成任何 read 之前失败。
"""

import logging
import math

import numpy as np

logger = logging.getLogger(__name__)

DEFAULT_START_ADAPTER = "AATGTACTTCGTTCAGTTACGTATTGCT"
DEFAULT_END_ADAPTER = "GCAATACGTAACTGAACGAAGT"


class LengthModel:
    """
    片段长度：Gamma 分布（k = mean²/sd², θ = sd²/mean），四舍五入为整数

    Args:
        mean: 平均长度
        stdev: 标准差，0 表示固定长度
    """

    def __init__(self, mean: float, stdev: float):
        if mean <= 0:
            raise ValueError(f"Length mean must be > 0, got {mean}")
        if stdev < 0:
            raise ValueError(f"Length stdev must be >= 0, got {stdev}")

        self.mean = mean
        self.stdev = stdev
        if stdev > 0:
            self.shape = mean ** 2 / stdev ** 2
            self.scale = stdev ** 2 / mean
        else:
            self.shape = self.scale = None

    def sample(self, rng: np.random.Generator) -> int:
        """抽取一个长度（至少为 1）"""
        if self.shape is None:
            value = self.mean
        else:
            value = rng.gamma(self.shape, self.scale)
        return max(1, int(round(value)))

    def sample_array(self, rng: np.random.Generator, size: int) -> np.ndarray:
        """批量抽取长度（用于深度校正）"""
        if self.shape is None:
            values = np.full(size, self.mean)
        else:
            values = rng.gamma(self.shape, self.scale, size=size)
        return np.maximum(1, np.rint(values)).astype(np.int64)


class IdentityModel:
    """
    read 一致性：max * Beta(a, b)，参数均为百分比

    Args:
        mean: 平均一致性（%）
        max_identity: 一致性上限（%）
        stdev: 标准差（%）
    """

    def __init__(self, mean: float, max_identity: float, stdev: float):
        if mean <= 0:
            raise ValueError(f"Identity mean must be > 0, got {mean}")
        if stdev <= 0:
            raise ValueError(f"Identity stdev must be > 0, got {stdev}")
        if mean > max_identity:
            raise ValueError(
                f"Identity mean ({mean}) must not exceed max ({max_identity})"
            )
        if max_identity > 100:
            raise ValueError(f"Identity max must be <= 100, got {max_identity}")

        self.mean = mean / 100.0
        self.max = max_identity / 100.0
        self.stdev = stdev / 100.0

        if math.isclose(self.mean, self.max):
            self.alpha = self.beta = None
            return

        mu = self.mean / self.max
        sigma = self.stdev / self.max
        self.alpha = ((1.0 - mu) / sigma ** 2 - 1.0 / mu) * mu ** 2
        self.beta = self.alpha * (1.0 / mu - 1.0)
        if self.alpha <= 0 or self.beta <= 0:
            raise ValueError(
                f"Identity parameters mean={mean}, max={max_identity}, stdev={stdev} "
                f"give an invalid Beta distribution (a={self.alpha:.4g}, b={self.beta:.4g}); "
                "try a smaller stdev"
            )

    def sample(self, rng: np.random.Generator) -> float:
        """抽取一致性（0-1 之间的小数）"""
        if self.alpha is None:
            return self.mean
        return self.max * rng.beta(self.alpha, self.beta)


class AdapterModel:
    """
    接头污染：以 rate 的概率在 read 两端加入接头前缀，
    保留比例服从 Beta(2a, 2-2a)，a = amount

    rate 与 amount 都是百分比。
    """

    def __init__(
        self,
        start_seq: str = DEFAULT_START_ADAPTER,
        end_seq: str = DEFAULT_END_ADAPTER,
        start_rate: float = 90.0,
        start_amount: float = 60.0,
        end_rate: float = 50.0,
        end_amount: float = 20.0,
    ):
        for label, value in (
            ("start rate", start_rate),
            ("start amount", start_amount),
            ("end rate", end_rate),
            ("end amount", end_amount),
        ):
            if not 0 <= value <= 100:
                raise ValueError(f"Adapter {label} must be within [0, 100], got {value}")

        self.start_seq = start_seq.upper()
        self.end_seq = end_seq.upper()
        self.start_rate = start_rate / 100.0
        self.start_amount = start_amount / 100.0
        self.end_rate = end_rate / 100.0
        self.end_amount = end_amount / 100.0

    @staticmethod
    def _sample(seq: str, rate: float, amount: float, rng: np.random.Generator) -> str:
        if not seq or rate <= 0 or amount <= 0:
            return ""
        if rng.random() >= rate:
            return ""
        if amount >= 1.0:
            fraction = 1.0
        else:
            fraction = rng.beta(2.0 * amount, 2.0 - 2.0 * amount)
        return seq[:int(round(len(seq) * fraction))]

    def start(self, rng: np.random.Generator) -> str:
        """起始端接头"""
        return self._sample(self.start_seq, self.start_rate, self.start_amount, rng)

    def end(self, rng: np.random.Generator) -> str:
        """末端接头"""
        return self._sample(self.end_seq, self.end_rate, self.end_amount, rng)
