"""
read 组装

缓冲区布局：
    k 个随机碱基 + 起始接头 + 片段 [+ 连接处接头 + 嵌合片段] + 末端接头 + k 个随机碱基

两端的随机碱基保证片段边缘也有完整的 k-mer 窗口。整个缓冲区一起
注入错误并分配质量值。
"""

import dataclasses
import logging
import uuid
from typing import Tuple

import numpy as np

from .distributions import AdapterModel
from .errors import ErrorInjector
from .fragments import ReferenceSet
from .models import Description, JunkOrigin, Origin, RandomOrigin, RealOrigin, SimulatedRead
from .quality import QualityAssigner
from .seq_utils import junk_seq, random_seq

logger = logging.getLogger(__name__)

# 质量串长度不足时的填充字符（Phred 0）
QUALITY_PAD = "!"

# 嵌合连接处出现末端/起始接头的概率
JUNCTION_ADAPTER_PROB = 0.5


def read_uuid(rng: np.random.Generator) -> str:
    """由 read 自己的随机数生成器派生 UUID，保证可复现"""
    return str(uuid.UUID(bytes=rng.bytes(16), version=4))


class ReadAssembler:
    """
    组装并测序一条 read

    Args:
        references: 参考序列集合
        adapter_model: 接头模型
        injector: 错误注入器
        quality_assigner: 质量值分配器
    """

    def __init__(
        self,
        references: ReferenceSet,
        adapter_model: AdapterModel,
        injector: ErrorInjector,
        quality_assigner: QualityAssigner,
    ):
        self.references = references
        self.adapter_model = adapter_model
        self.injector = injector
        self.quality_assigner = quality_assigner

    def fragment_sequence(self, origin: Origin, rng: np.random.Generator) -> str:
        """按来源生成无错误片段"""
        if isinstance(origin, RealOrigin):
            return self.references.extract(origin)
        if isinstance(origin, JunkOrigin):
            return junk_seq(origin.length, rng)
        if isinstance(origin, RandomOrigin):
            return random_seq(origin.length, rng)
        raise TypeError(f"Unknown origin type: {type(origin).__name__}")

    def build_buffer(self, description: Description, rng: np.random.Generator) -> str:
        """拼接待测序的无错误缓冲区"""
        k = self.injector.k
        parts = [
            random_seq(k, rng),
            self.adapter_model.start(rng),
            self.fragment_sequence(description.origin, rng),
        ]

        if description.chimera is not None:
            if rng.random() < JUNCTION_ADAPTER_PROB:
                parts.append(self.adapter_model.end(rng))
            if rng.random() < JUNCTION_ADAPTER_PROB:
                parts.append(self.adapter_model.start(rng))
            parts.append(self.fragment_sequence(description.chimera, rng))

        parts.append(self.adapter_model.end(rng))
        parts.append(random_seq(k, rng))
        return "".join(parts)

    def assemble(
        self,
        description: Description,
        rng: np.random.Generator,
    ) -> Tuple[Description, str, str]:
        """
        组装 read，注入错误并分配质量值

        Args:
            description: FragmentSelector 生成的元数据
            rng: 本 read 独享的随机数生成器

        Returns:
            (更新后的元数据, 序列, 质量串)
        """
        buffer = self.build_buffer(description, rng)
        sequence, cigar, identity = self.injector.inject(
            buffer, description.identity / 100.0, rng
        )
        quality = self.quality_assigner.assign(cigar, rng)

        if len(quality) != len(sequence):
            logger.warning(
                f"Quality length ({len(quality)}) differs from sequence length "
                f"({len(sequence)}) for {description.origin}; resizing quality"
            )
            if len(quality) < len(sequence):
                quality += QUALITY_PAD * (len(sequence) - len(quality))
            else:
                quality = quality[:len(sequence)]

        updated = dataclasses.replace(
            description,
            identity=identity * 100.0,
            read_length=len(sequence),
        )
        return updated, sequence, quality

    def simulate(self, description: Description, seed: int) -> SimulatedRead:
        """由 (元数据, 种子) 生成完整的 SimulatedRead"""
        rng = np.random.default_rng(seed)
        read_id = read_uuid(rng)
        updated, sequence, quality = self.assemble(description, rng)
        return SimulatedRead(
            read_id=read_id,
            description=updated,
            sequence=sequence,
            quality=quality,
        )
