"""
错误模型模块

k-mer 错误模型、glitch 模型和质量值模型
"""

from .base import BaseKmerErrorModel
from .kmer import KmerErrorModel, RandomKmerErrorModel
from .glitch import GlitchModel
from .quality import QualityModel, PHRED_OFFSET


def get_error_model(name: str, **kwargs) -> BaseKmerErrorModel:
    """
    根据名称或路径获取 k-mer 错误模型

    Args:
        name: ``random`` 或模型文件路径
        **kwargs: 传递给随机模型的参数（如 k）

    Returns:
        错误模型实例
    """
    if name == "random":
        return RandomKmerErrorModel(**kwargs)
    return KmerErrorModel.from_file(name)


def get_quality_model(name: str) -> QualityModel:
    """
    根据名称或路径获取质量值模型

    Args:
        name: ``random``、``ideal`` 或模型文件路径

    Returns:
        质量值模型实例
    """
    builtins = {
        "random": QualityModel.random,
        "ideal": QualityModel.ideal,
    }
    if name in builtins:
        return builtins[name]()
    return QualityModel.from_file(name)


__all__ = [
    'BaseKmerErrorModel',
    'KmerErrorModel',
    'RandomKmerErrorModel',
    'GlitchModel',
    'QualityModel',
    'PHRED_OFFSET',
    'get_error_model',
    'get_quality_model',
]
