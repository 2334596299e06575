# core/field_calculator.py
import numpy as np
from typing import List, Optional, Union

from physics.point import PointCharge
from utils.constants import DISTANCE_SCALE


class FieldCalculator:
    """
    场矢量计算器（多电荷叠加）

    数学原理：
        叠加原理：E_total = Σ E_i
        平方反比：E_i = ±m_i / d_i² · r̂_i，d_i = |P - c_i| / 100

    核心特性：
        - 对电荷集合完全向量化，单点计算无Python循环
        - 不处理 d == 0 的奇点，由追踪器在方向归一化时终止
    """

    def __init__(self, charges: List[PointCharge] = None):
        """
        Args:
            charges: 点电荷列表
        """
        self.charges: List[PointCharge] = list(charges) if charges is not None else []
        self._pack()

    def _pack(self):
        """把电荷属性打包为数组，供向量化计算使用"""
        if self.charges:
            self._positions = np.array([c.position for c in self.charges], dtype=float)
            self._signed = np.array([c.signed_magnitude for c in self.charges], dtype=float)
        else:
            self._positions = np.empty((0, 2), dtype=float)
            self._signed = np.empty(0, dtype=float)

    def electric_field(self, point: Union[List[float], np.ndarray]) -> np.ndarray:
        """
        计算单点处的总场矢量

        Args:
            point: [x, y]

        Returns:
            形状为 (2,) 的场矢量；点与某电荷重合时可能含 inf/nan
        """
        point = np.asarray(point, dtype=float)
        r = point - self._positions  # (n, 2)，由电荷指向观察点
        r_mag = np.sqrt(np.einsum('ij,ij->i', r, r))

        with np.errstate(divide='ignore', invalid='ignore'):
            d = r_mag / DISTANCE_SCALE
            strength = self._signed / d ** 2
            E = np.sum((strength / r_mag)[:, np.newaxis] * r, axis=0)

        return E

    def field_direction(self, point: Union[List[float], np.ndarray]) -> Optional[np.ndarray]:
        """
        获取场的单位方向矢量

        Returns:
            单位矢量；场为零或非有限值时返回None（表示无法继续前进）
        """
        E = self.electric_field(point)
        E_mag = np.hypot(E[0], E[1])

        if not np.isfinite(E_mag) or E_mag == 0.0:
            return None

        return E / E_mag
