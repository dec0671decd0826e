"""
核心数据结构定义

设计原则：
1. 来源（Origin）是封闭的三种类型，各自只携带需要的字段
2. 不可变数据用dataclass(frozen=True)
3. read 元数据（Description）在错误注入后只改写一次 identity
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional, Union


class Strand(Enum):
    """链方向"""
    FORWARD = "+"
    REVERSE = "-"


class ReadType(Enum):
    """read 类别"""
    REAL = "real"
    JUNK = "junk"
    RANDOM = "random"


# =============================================================================
# 输入数据结构
# =============================================================================

@dataclass
class Reference:
    """参考序列"""
    id: str
    seq: str
    depth: float = 1.0
    circular: bool = False

    @property
    def length(self) -> int:
        return len(self.seq)


# =============================================================================
# 来源
# =============================================================================

@dataclass(frozen=True)
class RealOrigin:
    """
    来自参考序列的片段

    环状参考上 end 可能小于 start（绕环），length 是实际片段长度，
    绕环多圈时只能由 length 还原片段。
    """
    ref_id: str
    strand: Strand
    start: int
    end: int
    length: int = 0

    @property
    def read_type(self) -> ReadType:
        return ReadType.REAL

    def __str__(self) -> str:
        return f"{self.ref_id},{self.strand.value}strand,{self.start}-{self.end}"


@dataclass(frozen=True)
class JunkOrigin:
    """低复杂度 junk 片段"""
    length: int

    @property
    def read_type(self) -> ReadType:
        return ReadType.JUNK

    def __str__(self) -> str:
        return "junk_seq"


@dataclass(frozen=True)
class RandomOrigin:
    """随机序列片段"""
    length: int

    @property
    def read_type(self) -> ReadType:
        return ReadType.RANDOM

    def __str__(self) -> str:
        return "random_seq"


Origin = Union[RealOrigin, JunkOrigin, RandomOrigin]


# =============================================================================
# read 元数据与输出
# =============================================================================

@dataclass
class Description:
    """
    一条 read 的元数据

    length 是无错误片段的总长度（含嵌合的第二段），identity 为百分比，
    错误注入前是目标值，注入后被改写为实际值。
    """
    origin: Origin
    chimera: Optional[Origin] = None
    length: int = 0
    identity: float = 100.0
    read_length: int = 0

    @property
    def is_chimera(self) -> bool:
        return self.chimera is not None

    def __str__(self) -> str:
        parts = [str(self.origin)]
        if self.chimera is not None:
            parts.append(f"chimera {self.chimera}")
        parts.append(
            f"length={self.read_length} "
            f"error-free_length={self.length} "
            f"read_identity={self.identity:.2f}%"
        )
        return " ".join(parts)

    def to_dict(self) -> Dict[str, Any]:
        """转换为可序列化的dict（用于汇总表）"""
        d = {
            "read_type": self.origin.read_type.value,
            "origin": str(self.origin),
            "chimera": str(self.chimera) if self.chimera is not None else "",
            "error_free_length": self.length,
            "read_length": self.read_length,
            "identity": self.identity,
        }
        if isinstance(self.origin, RealOrigin):
            d["ref_id"] = self.origin.ref_id
            d["strand"] = self.origin.strand.value
        else:
            d["ref_id"] = ""
            d["strand"] = ""
        return d


@dataclass
class SimulatedRead:
    """最终输出的 read"""
    read_id: str
    description: Description
    sequence: str
    quality: str = ""

    def to_fastq(self) -> str:
        """转换为FASTQ格式"""
        qual = self.quality if self.quality else "!" * len(self.sequence)
        return f"@{self.read_id} {self.description}\n{self.sequence}\n+\n{qual}\n"
