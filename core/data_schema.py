# core/data_schema.py
"""
核心数据契约定义模块
本模块定义了场线引擎各组件之间交换的数据格式。

设计原则：
1. 2D画布坐标：所有点均为 (x, y)，单位为画布像素
2. 不可变性：场在每次电荷变化后整体重建，而不是原地修改
3. 以id引用电荷：场线只记录电荷编号，不持有电荷对象引用
"""

from dataclasses import dataclass, field, replace
from typing import TypedDict, Optional, List

import numpy as np
from numpy.typing import NDArray

from physics.point import PointCharge


# ============================================================================ #
# 配置契约
# ============================================================================ #

class FieldSettings(TypedDict):
    """
    新建电荷使用的默认参数

    示例：
    {
        'magnitude': 1.0,
        'radius': 10.0,
        'density': 10,       # 每个电荷发出的场线数
        'steps': 3000,       # 每条线最大积分步数
        'step_length': 2.0   # 每步位移
    }
    """
    magnitude: float
    radius: float
    density: int
    steps: int
    step_length: float


# ============================================================================ #
# 场线与场
# ============================================================================ #

@dataclass(eq=False)
class FieldLine:
    """
    单条电场线

    points 从起点（电荷表面）排列到终点，至少包含起点。
    terminating_charge_id 仅在线进入其他电荷捕获半径时设置，
    永远不等于 origin_charge_id。
    """
    origin_charge_id: int
    points: "NDArray[np.float64]"  # 形状: (N, 2)，N >= 1
    terminating_charge_id: Optional[int] = None

    @property
    def start(self) -> "NDArray[np.float64]":
        return self.points[0]

    @property
    def end(self) -> "NDArray[np.float64]":
        return self.points[-1]

    def __len__(self) -> int:
        return len(self.points)


@dataclass
class ChargeField:
    """
    单个电荷的场：源电荷 + 追踪参数 + 追踪结果
    """
    source: PointCharge
    density: int = 10
    steps: int = 3000
    step_length: float = 2.0
    lines: List[FieldLine] = field(default_factory=list)

    def __post_init__(self):
        if self.density < 1:
            raise ValueError(f"density必须 >= 1，得到 {self.density}")
        if self.steps < 0:
            raise ValueError(f"steps必须 >= 0，得到 {self.steps}")
        if self.step_length <= 0:
            raise ValueError(f"step_length必须为正数，得到 {self.step_length}")

    @property
    def charge_id(self) -> int:
        return self.source.id

    def with_lines(self, lines: List[FieldLine]) -> "ChargeField":
        return replace(self, lines=list(lines))


def create_field(source: PointCharge, settings: FieldSettings) -> ChargeField:
    """按默认参数为电荷创建一个尚未追踪的场"""
    return ChargeField(
        source=source,
        density=int(settings['density']),
        steps=int(settings['steps']),
        step_length=float(settings['step_length'])
    )
