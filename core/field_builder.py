# core/field_builder.py
import logging
from typing import List

import numpy as np

from core.data_schema import ChargeField, FieldLine
from core.field_line_tracer import FieldLineTracer
from core.line_resolver import resolve_duplicate_lines
from utils.performance import PerformanceMonitor, default_monitor

logger = logging.getLogger(__name__)


class FieldBuilder:
    """
    场构建器：为每个电荷追踪一束场线，再做重复线消除

    特性：
        - 起始点在电荷可视半径上均匀分布，角度 = 2πi / density
        - 每条线使用该电荷自己的 steps / step_length
        - 每条线都以全部电荷为场源，可以终止于任意其他电荷
        - 总是全量重建，不做增量更新
    """

    def __init__(self, width: float, height: float,
                 monitor: PerformanceMonitor = None):
        """
        Args:
            width: 画布宽度
            height: 画布高度
            monitor: 性能监控器，默认使用进程级共享实例
        """
        if width <= 0 or height <= 0:
            raise ValueError(f"画布尺寸必须为正数，得到 {width}×{height}")
        self.width = float(width)
        self.height = float(height)
        self.monitor = monitor if monitor is not None else default_monitor

    @staticmethod
    def seed_points(field: ChargeField) -> np.ndarray:
        """在电荷可视半径上生成 density 个均匀分布的起始点"""
        charge = field.source
        angles = 2 * np.pi * np.arange(field.density) / field.density
        offsets = charge.radius * np.column_stack((np.cos(angles), np.sin(angles)))
        return charge.position + offsets

    def trace_field(self, field: ChargeField, tracer: FieldLineTracer) -> List[FieldLine]:
        """追踪单个电荷的全部场线"""
        charge = field.source
        return [
            tracer.trace_line(start, charge.id, charge.sign, field.step_length, field.steps)
            for start in self.seed_points(field)
        ]

    def trace_fields(self, fields: List[ChargeField]) -> List[ChargeField]:
        """追踪所有场（不做重复线消除）"""
        tracer = FieldLineTracer([f.source for f in fields], self.width, self.height)
        return [f.with_lines(self.trace_field(f, tracer)) for f in fields]

    def calculate_fields(self, fields: List[ChargeField]) -> List[ChargeField]:
        """
        全量重建（主入口）

        Args:
            fields: 带追踪参数的场列表，已有的 lines 会被丢弃

        Returns:
            经过重复线消除的新场列表
        """
        self.monitor.start_timer('calculate_fields')

        traced = self.trace_fields(fields)
        resolved = resolve_duplicate_lines(traced)

        elapsed = self.monitor.end_timer('calculate_fields')
        n_lines = sum(len(f.lines) for f in resolved)
        n_points = sum(len(line) for f in resolved for line in f.lines)
        logger.debug(
            f"场重建完成: {len(resolved)} 个电荷, {n_lines} 条线, "
            f"{n_points} 个点, 耗时 {elapsed * 1000:.1f} ms"
        )
        return resolved


def calculate_fields(width: float, height: float, fields: List[ChargeField]) -> List[ChargeField]:
    """便捷函数：用一次性构建器执行全量重建"""
    return FieldBuilder(width, height).calculate_fields(fields)
