# utils/__init__.py
"""
实用工具模块

包含数值常数和性能监控。
"""

from .performance import (
    PerformanceMonitor,
    default_monitor
)

__all__ = [
    'PerformanceMonitor',
    'default_monitor'
]
