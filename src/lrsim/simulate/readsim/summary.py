"""
运行汇总

逐批收集每条 read 的元数据，输出 TSV 明细和按类别的统计。
"""

import logging
from pathlib import Path
from typing import Iterable, List, Union

import numpy as np
import pandas as pd

from .models import SimulatedRead

logger = logging.getLogger(__name__)

SUMMARY_COLUMNS = [
    "read_id",
    "read_type",
    "origin",
    "chimera",
    "ref_id",
    "strand",
    "error_free_length",
    "read_length",
    "identity",
]


def n50(lengths: Iterable[int]) -> int:
    """N50：按长度降序累加到总长一半时的长度"""
    values = np.sort(np.asarray(list(lengths), dtype=np.int64))[::-1]
    if len(values) == 0:
        return 0
    cumulative = np.cumsum(values)
    idx = int(np.searchsorted(cumulative, cumulative[-1] / 2.0))
    return int(values[idx])


class ReadSummary:
    """read 元数据收集器"""

    def __init__(self):
        self._rows: List[dict] = []

    def __len__(self) -> int:
        return len(self._rows)

    def add(self, reads: Iterable[SimulatedRead]) -> None:
        for read in reads:
            row = read.description.to_dict()
            row["read_id"] = read.read_id
            self._rows.append(row)

    def to_dataframe(self) -> pd.DataFrame:
        return pd.DataFrame(self._rows, columns=SUMMARY_COLUMNS)

    def by_read_type(self) -> pd.DataFrame:
        """按类别统计 read 数、碱基数和平均一致性"""
        df = self.to_dataframe()
        if df.empty:
            return pd.DataFrame(columns=["reads", "bases", "mean_identity"])
        df["is_chimera"] = df["chimera"] != ""
        stats = df.groupby("read_type").agg(
            reads=("read_id", "count"),
            bases=("read_length", "sum"),
            mean_identity=("identity", "mean"),
            chimeras=("is_chimera", "sum"),
        )
        return stats

    def describe(self) -> str:
        """一行文字摘要（用于日志）"""
        df = self.to_dataframe()
        if df.empty:
            return "No reads generated"
        return (
            f"Reads: {len(df)}, "
            f"Bases: {int(df['read_length'].sum())}, "
            f"Mean length: {df['read_length'].mean():.0f}bp, "
            f"N50: {n50(df['read_length'])}bp, "
            f"Mean identity: {df['identity'].mean():.2f}%"
        )

    def write(self, path: Union[str, Path]) -> Path:
        """写出 TSV 明细"""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        self.to_dataframe().to_csv(path, sep="\t", index=False, float_format="%.4f")
        logger.info(f"Summary written to {path}")
        return path
