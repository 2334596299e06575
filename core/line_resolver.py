# core/line_resolver.py
"""
重复场线消除

两个电荷的线束互相终止于对方时，两束线在画面上几乎重合。
本模块对每一对电荷只保留一个方向的线束，纯粹用于视觉去重。

规则（A 在场列表中排在 B 之前）：
    n(A→B) > n(B→A)  → 删除 B 中终止于 A 的线
    否则（含相等）    → 删除 A 中终止于 B 的线
"""

import logging
from collections import Counter
from itertools import combinations
from typing import Dict, List, Set

from core.data_schema import ChargeField

logger = logging.getLogger(__name__)


def count_terminations(fields: List[ChargeField]) -> Dict[int, Counter]:
    """
    统计每个场的线终止于各电荷的数量

    Returns:
        {起源电荷id: Counter({终止电荷id: 线数})}
    """
    return {
        f.charge_id: Counter(
            line.terminating_charge_id for line in f.lines
            if line.terminating_charge_id is not None
        )
        for f in fields
    }


def compute_removal_sets(fields: List[ChargeField]) -> Dict[int, Set[int]]:
    """
    计算每个场需要删除的终止电荷id集合

    同一电荷对多个电荷被标记时取并集。
    """
    counts = count_terminations(fields)
    removal: Dict[int, Set[int]] = {f.charge_id: set() for f in fields}

    for field_a, field_b in combinations(fields, 2):
        a, b = field_a.charge_id, field_b.charge_id
        a_to_b = counts[a][b]
        b_to_a = counts[b][a]

        if a_to_b == 0 and b_to_a == 0:
            continue

        if a_to_b > b_to_a:
            removal[b].add(a)
        else:
            removal[a].add(b)

    return removal


def resolve_duplicate_lines(fields: List[ChargeField]) -> List[ChargeField]:
    """
    删除互相终止的冗余线束

    Args:
        fields: 追踪后的原始场列表

    Returns:
        新的场列表，顺序不变；对自身输出再次调用结果不变
    """
    removal = compute_removal_sets(fields)

    resolved = []
    removed_total = 0
    for f in fields:
        drop = removal[f.charge_id]
        kept = [line for line in f.lines if line.terminating_charge_id not in drop]
        removed_total += len(f.lines) - len(kept)
        resolved.append(f.with_lines(kept))

    logger.debug(f"重复场线消除: 删除 {removed_total} 条")
    return resolved
