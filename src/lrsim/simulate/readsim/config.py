"""
配置模块

参数分组：
A. 读长（2）: mean, stdev
B. 一致性（3）: mean, max, stdev（百分比）
C. 错误模型（3）: error_model, qscore_model, kmer_size
D. 接头（6）: start/end 序列、比例、保留量
E. glitch（3）: rate, size, skip
F. read 类别（3）: junk, random, chimera（百分比）
G. 输出（4）: quantity, number_base_store, adjust_depth, compress
"""

import json
import re
from dataclasses import asdict, dataclass, field
from typing import Optional

import yaml

from .distributions import DEFAULT_END_ADAPTER, DEFAULT_START_ADAPTER

_QUANTITY_RE = re.compile(r"^\s*(\d+(?:\.\d+)?)\s*([KMGkmgxX]?)\s*$")
_SUFFIX_SCALE = {"": 1, "K": 10 ** 3, "M": 10 ** 6, "G": 10 ** 9}


@dataclass(frozen=True)
class Quantity:
    """
    输出规模：碱基数或覆盖度

    ``"250M"`` -> 2.5e8 个碱基，``"25x"`` -> 25 倍基因组长度，
    纯数字表示碱基数。
    """
    value: float
    coverage: bool = False

    @classmethod
    def parse(cls, text: str) -> "Quantity":
        match = _QUANTITY_RE.match(str(text))
        if not match:
            raise ValueError(
                f"Cannot parse quantity '{text}' (expected e.g. 25x, 250M, 1G, 50000)"
            )
        number, suffix = match.groups()
        suffix = suffix.upper()
        if suffix == "X":
            return cls(float(number), coverage=True)
        return cls(float(number) * _SUFFIX_SCALE[suffix], coverage=False)

    def number_of_base(self, genome_length: int) -> int:
        """换算为碱基数"""
        if self.coverage:
            return int(round(self.value * genome_length))
        return int(round(self.value))

    def __str__(self) -> str:
        if self.coverage:
            return f"{self.value:g}x"
        return f"{int(self.value)}"


@dataclass
class LengthParams:
    """片段长度（Gamma）"""
    mean: float = 15000.0
    stdev: float = 13000.0


@dataclass
class IdentityParams:
    """read 一致性（Beta，百分比）"""
    mean: float = 85.0
    max: float = 95.0
    stdev: float = 5.0


@dataclass
class ModelParams:
    """错误/质量模型：文件路径或内置名称"""
    error_model: str = "random"
    qscore_model: str = "random"
    kmer_size: int = 7  # 仅用于 random 错误模型


@dataclass
class AdapterParams:
    """接头（比例与保留量为百分比）"""
    start_seq: str = DEFAULT_START_ADAPTER
    end_seq: str = DEFAULT_END_ADAPTER
    start_rate: float = 90.0
    start_amount: float = 60.0
    end_rate: float = 50.0
    end_amount: float = 20.0


@dataclass
class GlitchParams:
    """glitch：平均间距、插入长度、跳过长度"""
    rate: float = 10000.0
    size: float = 25.0
    skip: float = 25.0


@dataclass
class ReadTypeParams:
    """read 类别比例（百分比）"""
    junk: float = 1.0
    random: float = 1.0
    chimera: float = 1.0


@dataclass
class OutputParams:
    """输出规模与缓冲"""
    quantity: str = "50x"
    number_base_store: Optional[str] = None
    adjust_depth: bool = False
    compress: bool = False


@dataclass
class SimConfig:
    """完整的模拟配置"""
    length: LengthParams = field(default_factory=LengthParams)
    identity: IdentityParams = field(default_factory=IdentityParams)
    models: ModelParams = field(default_factory=ModelParams)
    adapters: AdapterParams = field(default_factory=AdapterParams)
    glitches: GlitchParams = field(default_factory=GlitchParams)
    read_types: ReadTypeParams = field(default_factory=ReadTypeParams)
    output: OutputParams = field(default_factory=OutputParams)
    seed: Optional[int] = None

    _SECTIONS = {
        "length": LengthParams,
        "identity": IdentityParams,
        "models": ModelParams,
        "adapters": AdapterParams,
        "glitches": GlitchParams,
        "read_types": ReadTypeParams,
        "output": OutputParams,
    }

    # =========================================================================
    # 派生量
    # =========================================================================

    @property
    def quantity(self) -> Quantity:
        return Quantity.parse(self.output.quantity)

    @property
    def number_base_store(self) -> Optional[int]:
        """每批缓冲碱基数（不接受覆盖度写法）"""
        if self.output.number_base_store is None:
            return None
        q = Quantity.parse(self.output.number_base_store)
        if q.coverage:
            raise ValueError("number_base_store must be a number of bases, not a coverage")
        return q.number_of_base(0)

    # =========================================================================
    # 序列化
    # =========================================================================

    def to_dict(self) -> dict:
        """转换为字典（支持 round-trip 序列化）"""
        d = {name: asdict(getattr(self, name)) for name in self._SECTIONS}
        d["seed"] = self.seed
        return d

    @classmethod
    def from_dict(cls, d: dict) -> 'SimConfig':
        """从字典创建，未知分组报错"""
        config = cls()
        d = d or {}

        unknown = set(d) - set(cls._SECTIONS) - {"seed"}
        if unknown:
            raise ValueError(f"Unknown config sections: {sorted(unknown)}")

        for name, params_cls in cls._SECTIONS.items():
            if name in d and d[name] is not None:
                try:
                    setattr(config, name, params_cls(**d[name]))
                except TypeError as e:
                    raise ValueError(f"Invalid parameters in section '{name}': {e}") from e
        if "seed" in d:
            config.seed = d["seed"]

        return config

    @classmethod
    def from_yaml(cls, path: str) -> 'SimConfig':
        """从YAML文件加载"""
        with open(path, 'r') as f:
            d = yaml.safe_load(f)
        return cls.from_dict(d)

    def to_yaml(self, path: str):
        """保存为YAML文件"""
        with open(path, 'w') as f:
            yaml.dump(self.to_dict(), f, default_flow_style=False, sort_keys=False)

    @classmethod
    def from_json(cls, path: str) -> 'SimConfig':
        """从JSON文件加载"""
        with open(path, 'r') as f:
            d = json.load(f)
        return cls.from_dict(d)

    def to_json(self, path: str):
        """保存为JSON文件"""
        with open(path, 'w') as f:
            json.dump(self.to_dict(), f, indent=2)

    @classmethod
    def from_file(cls, path: str) -> 'SimConfig':
        """按扩展名选择 YAML 或 JSON"""
        if str(path).endswith(('.yaml', '.yml')):
            return cls.from_yaml(path)
        return cls.from_json(path)

    # =========================================================================
    # 验证
    # =========================================================================

    def validate(self) -> list:
        """验证配置有效性，返回警告列表"""
        warnings = []

        if self.length.mean <= 0:
            warnings.append("length.mean必须>0")
        if self.length.stdev < 0:
            warnings.append("length.stdev不能为负")

        if self.identity.mean <= 0:
            warnings.append("identity.mean必须>0")
        if self.identity.stdev <= 0:
            warnings.append("identity.stdev必须>0")
        if self.identity.mean > self.identity.max:
            warnings.append("identity.mean不能大于identity.max")
        if self.identity.max > 100:
            warnings.append("identity.max不能超过100")

        if self.models.kmer_size <= 0:
            warnings.append("models.kmer_size必须>0")

        for name in ("start_rate", "start_amount", "end_rate", "end_amount"):
            value = getattr(self.adapters, name)
            if not 0 <= value <= 100:
                warnings.append(f"adapters.{name}必须在[0,100]范围内")

        for name in ("rate", "size", "skip"):
            if getattr(self.glitches, name) < 0:
                warnings.append(f"glitches.{name}不能为负")

        for name in ("junk", "random", "chimera"):
            value = getattr(self.read_types, name)
            if not 0 <= value <= 100:
                warnings.append(f"read_types.{name}必须在[0,100]范围内")

        try:
            self.quantity
        except ValueError as e:
            warnings.append(str(e))
        try:
            store = self.number_base_store
            if store is not None and store <= 0:
                warnings.append("output.number_base_store必须>0")
        except ValueError as e:
            warnings.append(str(e))

        return warnings


def get_default_config() -> SimConfig:
    """默认配置（ONT 风格）"""
    return SimConfig()


def get_hifi_config() -> SimConfig:
    """PacBio HiFi 风格：读长短、一致性高、几乎无 glitch"""
    config = SimConfig()
    config.length = LengthParams(mean=15000.0, stdev=4000.0)
    config.identity = IdentityParams(mean=99.0, max=99.9, stdev=0.5)
    config.glitches = GlitchParams(rate=0.0, size=0.0, skip=0.0)
    config.adapters = AdapterParams(start_rate=0.0, end_rate=0.0)
    config.read_types = ReadTypeParams(junk=0.0, random=0.0, chimera=0.1)
    return config
