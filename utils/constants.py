# utils/constants.py
"""
场线仿真数值常数模块

这些常数不是物理单位，而是画布坐标系下的归一化参数：
- 距离缩放：屏幕像素距离除以100后再代入平方反比
- 捕获半径：与电荷的可视半径无关，固定为5个单位
"""

# 距离归一化因子（d = |P - c| / 100）
DISTANCE_SCALE: float = 100.0

# 场线终止的捕获半径（单位：画布像素）
CAPTURE_RADIUS: float = 5.0

# 追踪边界 = 1.5 × 画布宽/高
BOUNDS_FACTOR: float = 1.5

# 电荷量范围与调节步长
MIN_MAGNITUDE: float = 1.0
MAX_MAGNITUDE: float = 20.0
MAGNITUDE_STEP: float = 1.0

# 拖拽节流：步长放大倍数与阈值
THROTTLE_FACTOR: int = 3
THROTTLE_THRESHOLD: float = 7.0

# 复制电荷时在x方向额外留出的间隔（偏移 = 2r + 15）
DUPLICATE_GAP: float = 15.0

# ==================== 导出控制 ====================
__all__ = [
    'DISTANCE_SCALE',
    'CAPTURE_RADIUS',
    'BOUNDS_FACTOR',
    'MIN_MAGNITUDE',
    'MAX_MAGNITUDE',
    'MAGNITUDE_STEP',
    'THROTTLE_FACTOR',
    'THROTTLE_THRESHOLD',
    'DUPLICATE_GAP',
]
