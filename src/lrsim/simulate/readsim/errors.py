"""
错误注入

把目标一致性换算成编辑预算，先加入 glitch，再按 k-mer 窗口抽取点错误，
所有编辑汇入同一个 ChangeSet，最后线性化为带错误序列和 CIGAR。
"""

import logging
from dataclasses import dataclass
from typing import Tuple

import numpy as np

from .changes import Change, ChangeSet
from .error_models import BaseKmerErrorModel, GlitchModel

logger = logging.getLogger(__name__)


def number_of_edits(target_identity: float, length: int) -> float:
    """目标一致性对应的编辑数（可为小数）"""
    return (1.0 - target_identity) * length


@dataclass
class InjectionResult:
    """一次错误注入的结果"""
    sequence: str
    cigar: str
    identity: float
    edit_distance: int = 0
    n_changes: int = 0


class ErrorInjector:
    """
    错误注入器

    Args:
        kmer_model: k-mer 错误模型
        glitch_model: glitch 模型
        max_draw_factor: 点错误抽样次数上限 = max_draw_factor * 序列长度，
            模型无法产生编辑时保证终止
    """

    def __init__(
        self,
        kmer_model: BaseKmerErrorModel,
        glitch_model: GlitchModel,
        max_draw_factor: int = 10,
    ):
        self.kmer_model = kmer_model
        self.glitch_model = glitch_model
        self.max_draw_factor = max_draw_factor

    @property
    def k(self) -> int:
        return self.kmer_model.k

    def inject(
        self,
        original: str,
        target_identity: float,
        rng: np.random.Generator,
    ) -> Tuple[str, str, float]:
        """
        注入错误

        Args:
            original: 无错误序列
            target_identity: 目标一致性（0-1）
            rng: 本 read 独享的随机数生成器

        Returns:
            (带错误序列, CIGAR, 实际一致性)
        """
        result = self.run(original, target_identity, rng)
        return result.sequence, result.cigar, result.identity

    def run(
        self,
        original: str,
        target_identity: float,
        rng: np.random.Generator,
    ) -> InjectionResult:
        """同 inject，但返回包含统计信息的 InjectionResult"""
        length = len(original)
        if length == 0:
            return InjectionResult("", "", 1.0)

        target = number_of_edits(target_identity, length)
        changes = ChangeSet()

        self._add_glitches(original, changes, rng)
        self._add_point_errors(original, target, changes, rng)

        sequence, cigar, total = changes.linearize(original)
        identity = 1.0 - total / length
        return InjectionResult(sequence, cigar, identity, total, len(changes))

    def _add_glitches(self, original: str, changes: ChangeSet, rng: np.random.Generator) -> None:
        if not self.glitch_model.enabled:
            return

        length = len(original)
        cursor = 0
        while True:
            gap, skipped, inserted = self.glitch_model.sample(rng)
            cursor += gap
            if cursor + skipped > length:
                break
            changes.add_change(Change(cursor, cursor + skipped, inserted), original)

    def _add_point_errors(
        self,
        original: str,
        target: float,
        changes: ChangeSet,
        rng: np.random.Generator,
    ) -> None:
        length = len(original)
        k = self.k
        if k >= length:
            return

        total = changes.total_edit_distance()
        max_draws = self.max_draw_factor * length
        draws = 0

        while total < target and draws < max_draws:
            unconsumed = length - changes.covered_length(length)
            if unconsumed < target - total:
                break

            draws += 1
            pos = int(rng.integers(0, length - k + 1))
            window = original[pos:pos + k]
            alternative, _ = self.kmer_model.add_errors(window, rng)
            if alternative == window:
                continue

            changes.add_change(Change(pos, pos + k, alternative), original)
            # 合并会改变已有编辑的代价，总数取集合的当前值而不是累加本次编辑
            total = changes.total_edit_distance()

        if draws >= max_draws:
            logger.debug(
                f"Point error sampling stopped after {draws} draws "
                f"({total}/{target:.1f} edits)"
            )
