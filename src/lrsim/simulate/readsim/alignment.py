"""
全局比对原语

基于 edlib 的 Needleman-Wunsch 全局比对，返回编辑距离和逐列操作串。
操作串字母表为 ``=XID``，``I`` 表示 query 中多出的碱基，``D`` 表示
query 相对 target 缺失的碱基。
"""

import re
from typing import Tuple

import edlib

_CIGAR_RE = re.compile(r"(\d+)([=XIDM])")


def expand_cigar(cigar: str) -> str:
    """
    展开游程编码的扩展 CIGAR

    ``"3=1X2I"`` -> ``"===XII"``。``M`` 按 ``=`` 处理。
    """
    ops = []
    for count, op in _CIGAR_RE.findall(cigar):
        if op == "M":
            op = "="
        ops.append(op * int(count))
    return "".join(ops)


def align(query: str, target: str) -> Tuple[int, str]:
    """
    全局比对 query（带错误序列）与 target（原始序列）

    Args:
        query: 替换后的序列
        target: 原始序列片段

    Returns:
        (编辑距离, 逐列操作串)
    """
    if not query and not target:
        return 0, ""
    if not query:
        return len(target), "D" * len(target)
    if not target:
        return len(query), "I" * len(query)
    if query == target:
        return 0, "=" * len(query)

    result = edlib.align(query, target, mode="NW", task="path")
    ops = expand_cigar(result["cigar"])
    # 以操作串为准重新计数，保证 edit_distance 与 cigar 一致
    distance = len(ops) - ops.count("=")
    return distance, ops


def edit_distance(query: str, target: str) -> int:
    """只计算编辑距离"""
    if not query or not target:
        return max(len(query), len(target))
    return edlib.align(query, target, mode="NW", task="distance")["editDistance"]
