"""
编辑集合（ChangeSet）

设计原则：
1. 每个 Change 记录原始序列上的一段区间及其替换序列
2. 集合按 begin 排序，相邻编辑在原始坐标和错误坐标上都不重叠
3. 新编辑插入时只与左右邻居比较，合并后只重新比对合并区间
"""

from bisect import bisect_left
from dataclasses import dataclass
from typing import Iterator, List, Tuple

from .alignment import align


def _begin(change: "Change") -> int:
    return change.begin


@dataclass
class Change:
    """
    原始序列上的一次编辑

    ``original[begin:end_raw]`` 在输出中被 ``replacement`` 取代，
    ``cigar`` 是 replacement 相对该区间的比对。
    """
    begin: int
    end_raw: int
    replacement: str
    cigar: str = ""
    edit_distance: int = 0

    def __post_init__(self):
        if self.begin < 0 or self.end_raw < self.begin:
            raise ValueError(
                f"Invalid change span: begin={self.begin}, end_raw={self.end_raw}"
            )

    @classmethod
    def from_original(cls, begin: int, end_raw: int, replacement: str, original: str) -> "Change":
        """创建并立即与原始序列比对"""
        change = cls(begin, end_raw, replacement)
        change.realign(original)
        return change

    @property
    def end_err(self) -> int:
        """错误坐标系中的结束位置"""
        return self.begin + len(self.replacement)

    @property
    def is_noop(self) -> bool:
        return self.begin == self.end_raw and not self.replacement

    def contains(self, other: "Change") -> bool:
        """other 的两个结束位置都不超过 self（要求 self.begin <= other.begin）"""
        return other.end_raw <= self.end_raw and other.end_err <= self.end_err

    def overlaps(self, other: "Change") -> bool:
        """要求 self.begin <= other.begin"""
        if self.contains(other):
            return False
        return other.begin < self.end_err or other.begin < self.end_raw

    def merge(self, other: "Change", original: str) -> None:
        """
        吸收 other（self.begin <= other.begin），并重新比对合并后的区间

        Args:
            other: 与 self 重叠的编辑
            original: 原始序列
        """
        if other.begin < self.end_err:
            ovl = self.end_err - other.begin
            self.replacement += other.replacement[ovl:]
            new_end = self.end_raw + other.end_raw - other.begin - ovl
        else:
            # 仅在原始坐标上重叠
            self.replacement += other.replacement
            new_end = other.begin + len(other.replacement)

        # 合并后的原始区间不收缩
        self.end_raw = max(self.end_raw, new_end)
        self.realign(original)

    def realign(self, original: str) -> None:
        """与 original[begin:end_raw] 比对，越界时只比对可用的尾部"""
        self.edit_distance, self.cigar = align(
            self.replacement, original[self.begin:self.end_raw]
        )


class ChangeSet:
    """有序、互不重叠的编辑集合"""

    def __init__(self):
        self._changes: List[Change] = []
        # 随插入/合并增量维护，避免每次抽样都遍历整个集合
        self._total = 0
        self._covered = 0

    def _track(self, change: Change, sign: int) -> None:
        self._total += sign * change.edit_distance
        self._covered += sign * (change.end_raw - change.begin)

    def __len__(self) -> int:
        return len(self._changes)

    def __iter__(self) -> Iterator[Change]:
        return iter(self._changes)

    def __getitem__(self, idx: int) -> Change:
        return self._changes[idx]

    def add_change(self, change: Change, original: str) -> float:
        """
        插入或合并一个编辑

        Args:
            change: 新编辑（无需预先比对）
            original: 原始序列

        Returns:
            集合总编辑距离的变化量
        """
        if change.is_noop:
            return 0.0

        changes = self._changes
        idx = bisect_left(changes, change.begin, key=_begin)

        # 同一起点：包含则丢弃，否则合并
        if idx < len(changes) and changes[idx].begin == change.begin:
            current = changes[idx]
            if current.contains(change):
                return 0.0
            return self._merge_into(idx, change, original)

        if idx > 0:
            left = changes[idx - 1]
            if left.contains(change):
                return 0.0
            if left.overlaps(change):
                return self._merge_into(idx - 1, change, original)

        # 独立插入；若与右邻居重叠，由新编辑吸收右邻居
        change.realign(original)
        changes.insert(idx, change)
        self._track(change, +1)
        return float(change.edit_distance) + self._absorb_right(idx, original)

    def _merge_into(self, idx: int, change: Change, original: str) -> float:
        current = self._changes[idx]
        before = current.edit_distance
        self._track(current, -1)
        current.merge(change, original)
        self._track(current, +1)
        return float(current.edit_distance - before) + self._absorb_right(idx, original)

    def _absorb_right(self, idx: int, original: str) -> float:
        """级联处理 idx 右侧被包含或重叠的邻居"""
        changes = self._changes
        current = changes[idx]
        delta = 0.0

        while idx + 1 < len(changes):
            neighbor = changes[idx + 1]
            if current.contains(neighbor):
                delta -= neighbor.edit_distance
                self._track(neighbor, -1)
            elif current.overlaps(neighbor):
                before = current.edit_distance + neighbor.edit_distance
                self._track(current, -1)
                self._track(neighbor, -1)
                current.merge(neighbor, original)
                self._track(current, +1)
                delta += current.edit_distance - before
            else:
                break
            del changes[idx + 1]

        return delta

    def total_edit_distance(self) -> int:
        """当前集合的总编辑距离（缓存值）"""
        return self._total

    def covered_length(self, length: int) -> int:
        """被编辑覆盖的原始碱基数（截断到序列长度）"""
        # 有序且不重叠，越过 length 的只可能是末尾几个编辑
        overflow = 0
        for c in reversed(self._changes):
            if c.end_raw <= length:
                break
            overflow += c.end_raw - max(c.begin, length)
        return self._covered - overflow

    def is_consistent(self) -> bool:
        """检查相邻编辑的不重叠不变量"""
        for prev, nxt in zip(self._changes, self._changes[1:]):
            if prev.end_raw > nxt.begin or prev.end_err > nxt.begin:
                return False
        return True

    def linearize(self, original: str) -> Tuple[str, str, int]:
        """
        把编辑集合应用到原始序列

        Args:
            original: 原始序列

        Returns:
            (带错误的序列, CIGAR, 实际使用的总编辑距离)
        """
        seq_parts = []
        cigar_parts = []
        total = 0
        cursor = 0

        for change in self._changes:
            if change.begin < cursor:
                continue

            seq_parts.append(original[cursor:change.begin])
            cigar_parts.append("=" * (change.begin - cursor))
            seq_parts.append(change.replacement)
            cigar_parts.append(change.cigar)
            total += change.edit_distance
            cursor = change.end_raw

        if cursor < len(original):
            seq_parts.append(original[cursor:])
            cigar_parts.append("=" * (len(original) - cursor))

        return "".join(seq_parts), "".join(cigar_parts), total
