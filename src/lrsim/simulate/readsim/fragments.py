"""
片段选择

每条 read：
1. 抽取类别：Bernoulli(junk) -> junk；否则 Bernoulli(random) -> random；否则 real
2. 独立抽取 Bernoulli(chimera) 决定是否接第二个片段
3. real 片段按 深度×长度 加权选择参考序列和链方向，
   长度不可能放在线性参考上时重新抽取（参考、链、长度）
"""

import logging
from typing import Dict, Iterator, List, Optional, Tuple

import numpy as np

from .distributions import IdentityModel, LengthModel
from .models import (
    Description,
    JunkOrigin,
    Origin,
    RandomOrigin,
    ReadType,
    RealOrigin,
    Reference,
    Strand,
)
from .seq_utils import extract_circular_region, reverse_complement

logger = logging.getLogger(__name__)

# 拒绝采样的最大次数，超过后在最后一次抽到的参考上截断
MAX_FRAGMENT_ATTEMPTS = 1000


def fragment_is_possible(length: int, reference: Reference) -> bool:
    """线性参考上片段长度必须小于参考长度，环状参考总是可以（绕环）"""
    return reference.circular or length < reference.length


class ReferenceSet:
    """
    参考序列集合，负责加权选择与片段提取

    权重 = 声明深度 × 序列长度，可由 adjust_depth 校正。
    """

    def __init__(self, references: List[Reference]):
        if not references:
            raise ValueError("No reference sequences provided")

        self.references = list(references)
        self._index: Dict[str, int] = {}
        for i, ref in enumerate(self.references):
            if ref.id in self._index:
                raise ValueError(f"Duplicate reference id: {ref.id}")
            self._index[ref.id] = i

        self.set_weights(np.array([r.depth * r.length for r in self.references], dtype=float))

    def __len__(self) -> int:
        return len(self.references)

    def __getitem__(self, idx: int) -> Reference:
        return self.references[idx]

    @property
    def total_length(self) -> int:
        return sum(r.length for r in self.references)

    def get(self, ref_id: str) -> Reference:
        return self.references[self._index[ref_id]]

    def set_weights(self, weights: np.ndarray) -> None:
        weights = np.asarray(weights, dtype=float)
        if weights.shape != (len(self.references),):
            raise ValueError("Reference weights must have one entry per reference")
        if np.any(weights < 0) or weights.sum() <= 0:
            raise ValueError("Reference weights must be non-negative with a positive sum")
        self.weights = weights
        self._cumulative = np.cumsum(weights)

    def choose(self, rng: np.random.Generator) -> Tuple[int, Strand]:
        """加权选择参考序列，链方向均匀"""
        u = rng.random() * self._cumulative[-1]
        idx = int(np.searchsorted(self._cumulative, u, side="right"))
        idx = min(idx, len(self.references) - 1)
        strand = Strand.FORWARD if rng.random() < 0.5 else Strand.REVERSE
        return idx, strand

    def extract(self, origin: RealOrigin) -> str:
        """
        提取片段序列

        环状参考可绕环（两段拼接，长片段可绕多圈），负链取反向互补。
        """
        ref = self.get(origin.ref_id)
        if ref.circular:
            seq = extract_circular_region(ref.seq, origin.start, origin.length)
        else:
            seq = ref.seq[origin.start:origin.start + origin.length]
        if origin.strand is Strand.REVERSE:
            seq = reverse_complement(seq)
        return seq

    def adjust_depth(
        self,
        length_model: LengthModel,
        rng: np.random.Generator,
        n_samples: int = 10000,
    ) -> np.ndarray:
        """
        Monte-Carlo 深度校正

        长度分布会让短线性参考被系统性低估（片段被截断或被拒绝），
        按每次抽中该参考时期望产出的碱基数重新加权，使各参考的产出
        与 深度×长度 成正比。

        Args:
            length_model: 片段长度模型
            rng: 随机数生成器
            n_samples: 抽样长度数

        Returns:
            校正后的权重
        """
        lengths = length_model.sample_array(rng, n_samples).astype(float)
        mean_length = lengths.mean()
        weights = np.zeros(len(self.references))

        for i, ref in enumerate(self.references):
            expected = expected_fragment_bases(lengths, ref)
            if expected <= 0:
                logger.warning(
                    f"Reference {ref.id} ({ref.length}bp) cannot host fragments "
                    f"of the requested length, its weight is set to 0"
                )
                continue
            weights[i] = ref.depth * ref.length * mean_length / expected

        if weights.sum() <= 0:
            raise ValueError(
                "No reference can host fragments of the requested length distribution"
            )

        self.set_weights(weights)
        logger.info(f"Adjusted reference weights for {len(self.references)} references")
        return weights


def expected_fragment_bases(lengths: np.ndarray, reference: Reference) -> float:
    """
    在该参考上一次抽取的期望产出碱基数（拒绝记为 0）

    线性参考上起点均匀，片段截断在参考末端：
    E[min(L, R - b)] = (L(R - L) + L(L + 1)/2) / R
    """
    if reference.circular:
        return float(lengths.mean())

    R = float(reference.length)
    accepted = lengths < R
    L = lengths[accepted]
    clipped = (L * (R - L) + L * (L + 1) / 2.0) / R
    return float(clipped.sum() / len(lengths))


class FragmentSelector:
    """
    片段选择器（在协调进程上运行，使用主随机数生成器）

    Args:
        references: 参考序列集合
        length_model: 长度模型
        identity_model: 一致性模型
        junk_rate: junk read 比例（0-1）
        random_rate: random read 比例（0-1）
        chimera_rate: 嵌合 read 比例（0-1）
        max_attempts: 拒绝采样上限
    """

    def __init__(
        self,
        references: ReferenceSet,
        length_model: LengthModel,
        identity_model: IdentityModel,
        junk_rate: float = 0.0,
        random_rate: float = 0.0,
        chimera_rate: float = 0.0,
        max_attempts: int = MAX_FRAGMENT_ATTEMPTS,
    ):
        for label, value in (
            ("junk_rate", junk_rate),
            ("random_rate", random_rate),
            ("chimera_rate", chimera_rate),
        ):
            if not 0.0 <= value <= 1.0:
                raise ValueError(f"{label} must be within [0, 1], got {value}")

        self.references = references
        self.length_model = length_model
        self.identity_model = identity_model
        self.junk_rate = junk_rate
        self.random_rate = random_rate
        self.chimera_rate = chimera_rate
        self.max_attempts = max_attempts

    def read_type(self, rng: np.random.Generator) -> ReadType:
        if rng.random() < self.junk_rate:
            return ReadType.JUNK
        if rng.random() < self.random_rate:
            return ReadType.RANDOM
        return ReadType.REAL

    def is_chimera(self, rng: np.random.Generator) -> bool:
        return rng.random() < self.chimera_rate

    def generate_fragment(self, rng: np.random.Generator) -> Origin:
        """抽取一个片段的来源"""
        read_type = self.read_type(rng)
        length = self.length_model.sample(rng)

        if read_type is ReadType.JUNK:
            return JunkOrigin(length)
        if read_type is ReadType.RANDOM:
            return RandomOrigin(length)
        return self._real_fragment(length, rng)

    def _real_fragment(self, length: int, rng: np.random.Generator) -> RealOrigin:
        idx, strand = self.references.choose(rng)
        ref = self.references[idx]

        attempts = 1
        while not fragment_is_possible(length, ref):
            if attempts >= self.max_attempts:
                logger.debug(
                    f"Fragment of {length}bp rejected {attempts} times, "
                    f"clipping to {ref.id}"
                )
                break
            length = self.length_model.sample(rng)
            idx, strand = self.references.choose(rng)
            ref = self.references[idx]
            attempts += 1

        begin = int(rng.integers(0, ref.length))
        if begin + length <= ref.length:
            end, realized = begin + length, length
        elif ref.circular:
            end, realized = (begin + length) % ref.length, length
        else:
            end, realized = ref.length, ref.length - begin

        return RealOrigin(ref.id, strand, begin, end, realized)

    def describe(self, rng: np.random.Generator) -> Description:
        """生成一条 read 的元数据（目标一致性以百分比存放）"""
        origin = self.generate_fragment(rng)
        chimera: Optional[Origin] = None
        if self.is_chimera(rng):
            chimera = self.generate_fragment(rng)

        length = origin.length + (chimera.length if chimera is not None else 0)
        identity = self.identity_model.sample(rng) * 100.0
        return Description(origin=origin, chimera=chimera, length=length, identity=identity)

    def iter_work(
        self,
        target_bases: int,
        rng: np.random.Generator,
    ) -> Iterator[Tuple[Description, int]]:
        """
        迭代 (元数据, 种子) 直到累计无错误碱基数达到目标

        种子紧跟元数据之后从同一个主随机数生成器抽取，
        与 worker 数量无关。
        """
        remaining = target_bases
        while remaining > 0:
            description = self.describe(rng)
            seed = int(rng.integers(0, 2 ** 64, dtype=np.uint64))
            remaining -= description.length
            yield description, seed
