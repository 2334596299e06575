"""
物理模型包
包含二维点电荷模型
"""

from .point import (
    PointCharge,
    Sign
)

__all__ = [
    'PointCharge',
    'Sign'
]
