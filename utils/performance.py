# utils/performance.py
"""
场重建性能监控模块

记录每次全量重建的耗时，供日志和拖拽节流的效果对比使用。
"""

import time
import logging
from typing import Dict, Any

logger = logging.getLogger(__name__)


class PerformanceMonitor:
    """
    性能监控器

    按名称累计计时结果，例如 'calculate_fields'。
    """

    def __init__(self):
        """初始化性能监控器"""
        self.start_times: Dict[str, float] = {}
        self.metrics: Dict[str, Dict[str, Any]] = {}

    def start_timer(self, name: str) -> None:
        """开始计时

        Args:
            name: 计时器名称
        """
        self.start_times[name] = time.perf_counter()

    def end_timer(self, name: str) -> float:
        """结束计时并返回耗时

        Args:
            name: 计时器名称

        Returns:
            执行时间（秒），计时器未启动时返回0
        """
        if name not in self.start_times:
            logger.warning(f"计时器未启动: {name}")
            return 0.0

        elapsed = time.perf_counter() - self.start_times.pop(name)
        entry = self.metrics.setdefault(name, {'times': [], 'count': 0})
        entry['times'].append(elapsed)
        entry['count'] += 1
        return elapsed

    def get_performance_summary(self) -> Dict[str, Any]:
        """获取性能摘要

        Returns:
            每个计时器的平均/最小/最大耗时与次数
        """
        summary = {}

        for name, data in self.metrics.items():
            summary[name] = {
                'avg_time': sum(data['times']) / len(data['times']),
                'min_time': min(data['times']),
                'max_time': max(data['times']),
                'count': data['count']
            }

        return summary

    def clear(self) -> None:
        """清除所有性能数据"""
        self.start_times.clear()
        self.metrics.clear()


# 进程级共享监控器，引擎的每次重建都记录在此
default_monitor = PerformanceMonitor()
