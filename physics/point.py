# physics/point.py
from dataclasses import dataclass, replace
from enum import Enum
from typing import Union, List

import numpy as np

from utils.constants import DISTANCE_SCALE, MIN_MAGNITUDE, MAX_MAGNITUDE


class Sign(Enum):
    """电荷符号，与电荷量大小分开存储"""
    POSITIVE = "positive"
    NEGATIVE = "negative"

    @property
    def factor(self) -> float:
        return 1.0 if self is Sign.POSITIVE else -1.0

    def flipped(self) -> "Sign":
        return Sign.NEGATIVE if self is Sign.POSITIVE else Sign.POSITIVE


@dataclass(frozen=True, eq=False)
class PointCharge:
    """
    二维点电荷模型
    场强：E = m / d² · r̂，其中 d = |r| / 100
    电荷量 magnitude 恒为正，符号由 sign 单独表示
    相等性按对象身份判断：位置是数组，任何修改都会生成新的电荷对象

    Attributes:
        id: 稳定唯一编号（计数器分配，删除后不复用）
        sign: 电荷符号
        magnitude: 电荷量大小，范围 [1, 20]
        position: 画布坐标 [x, y]
        radius: 可视化半径，用于电场线起始点
    """
    id: int
    sign: Sign
    magnitude: float
    position: np.ndarray
    radius: float = 10.0

    def __post_init__(self):
        position = np.array(self.position, dtype=float).flatten()
        if position.shape != (2,):
            raise ValueError(f"电荷位置必须是2D坐标，得到 {self.position}")
        if self.radius <= 0:
            raise ValueError(f"电荷半径必须为正数，得到 {self.radius}")
        if not MIN_MAGNITUDE <= self.magnitude <= MAX_MAGNITUDE:
            raise ValueError(
                f"电荷量超出允许范围 [{MIN_MAGNITUDE}, {MAX_MAGNITUDE}]: {self.magnitude}"
            )
        # frozen dataclass 需要通过 object.__setattr__ 规范化字段
        object.__setattr__(self, 'position', position)
        object.__setattr__(self, 'magnitude', float(self.magnitude))
        object.__setattr__(self, 'radius', float(self.radius))

    @property
    def signed_magnitude(self) -> float:
        """带符号的电荷量"""
        return self.sign.factor * self.magnitude

    def moved(self, delta: Union[List[float], np.ndarray]) -> "PointCharge":
        """返回平移后的新电荷（id不变）"""
        return replace(self, position=self.position + np.asarray(delta, dtype=float))

    def electric_field(self, points: Union[List[float], np.ndarray]) -> np.ndarray:
        """
        计算本电荷单独产生的场矢量

        Args:
            points: 单个点 [x, y] 或点数组 N×2

        Returns:
            场矢量，形状与输入points相同

        Notes:
            与电荷中心重合的点会得到 inf/nan，由追踪器负责终止
        """
        points = np.atleast_2d(np.asarray(points, dtype=float))
        r = points - self.position
        r_mag = np.linalg.norm(r, axis=1, keepdims=True)

        with np.errstate(divide='ignore', invalid='ignore'):
            d = r_mag / DISTANCE_SCALE
            strength = self.magnitude / d ** 2
            E = self.sign.factor * strength * (r / r_mag)

        return E.squeeze()
