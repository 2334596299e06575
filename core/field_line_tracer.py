# core/field_line_tracer.py
from typing import List, Optional, Tuple

import numpy as np
from scipy.spatial import cKDTree

from physics.point import PointCharge, Sign
from core.data_schema import FieldLine
from core.field_calculator import FieldCalculator
from utils.constants import CAPTURE_RADIUS, BOUNDS_FACTOR


class FieldLineTracer:
    """
    电场线追踪器（固定步长欧拉积分）

    物理原理：
        电场线是矢量场E(r)的积分曲线，满足 dr/ds = E(r)/|E(r)|
        正电荷的线顺着场方向走，负电荷的线逆着场方向走

    终止条件（每步按顺序检查）：
        1. 越界：x 或 y 超出 [0, 1.5 × 画布宽/高]
        2. 捕获：进入非起源电荷的固定捕获半径（5个单位）
        3. 场为零或非有限值：无法归一化，视为无法继续前进
        4. 达到最大步数
    """

    def __init__(self, charges: List[PointCharge], width: float, height: float,
                 capture_radius: float = CAPTURE_RADIUS):
        """
        初始化追踪器

        Args:
            charges: 全部电荷（线可以终止于任意其他电荷）
            width: 画布宽度
            height: 画布高度
            capture_radius: 捕获半径，与电荷可视半径无关
        """
        self.charges = list(charges)
        self.bounds: Tuple[float, float] = (BOUNDS_FACTOR * width, BOUNDS_FACTOR * height)
        self.capture_radius = capture_radius

        self.field_calc = FieldCalculator(self.charges)

        # 电荷位置的KD树，用于捕获检测
        self._ids = np.array([c.id for c in self.charges], dtype=int)
        self._tree: Optional[cKDTree] = (
            cKDTree(np.array([c.position for c in self.charges], dtype=float))
            if self.charges else None
        )

    def _out_of_bounds(self, point: np.ndarray) -> bool:
        x_max, y_max = self.bounds
        return not (0.0 <= point[0] <= x_max and 0.0 <= point[1] <= y_max)

    def _captured_by(self, point: np.ndarray, origin_id: int) -> Optional[int]:
        """返回捕获该点的电荷id（按电荷列表顺序取第一个），不含起源电荷"""
        if self._tree is None:
            return None

        indices = self._tree.query_ball_point(point, r=self.capture_radius)
        for idx in sorted(indices):
            charge_id = int(self._ids[idx])
            if charge_id != origin_id:
                return charge_id
        return None

    def trace_line(self, start_point: np.ndarray, origin_id: int, sign: Sign,
                   step_length: float, steps: int) -> FieldLine:
        """
        追踪单条电场线

        Args:
            start_point: 起点（通常位于起源电荷的可视半径上）
            origin_id: 起源电荷id，不参与捕获检测
            sign: 起源电荷符号，负电荷逆场方向前进
            step_length: 每步位移
            steps: 最大迭代次数

        Returns:
            FieldLine，点数不超过 steps + 1
        """
        point = np.array(start_point, dtype=float)
        path = [point]
        terminating_id = None

        for _ in range(steps):
            if self._out_of_bounds(point):
                break

            terminating_id = self._captured_by(point, origin_id)
            if terminating_id is not None:
                break

            direction = self.field_calc.field_direction(point)
            if direction is None:
                break

            if sign is Sign.NEGATIVE:
                direction = -direction

            point = point + step_length * direction
            path.append(point)

        return FieldLine(
            origin_charge_id=origin_id,
            points=np.array(path),
            terminating_charge_id=terminating_id
        )
