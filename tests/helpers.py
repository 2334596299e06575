"""
测试辅助函数
"""

import numpy as np

from core.data_schema import ChargeField, FieldLine
from physics.point import PointCharge, Sign


def make_field(charge_id, terminations):
    """
    构造只含终止信息的合成场，用于重复线消除测试

    Args:
        charge_id: 起源电荷id
        terminations: 每条线的终止电荷id（None表示未终止）
    """
    source = PointCharge(id=charge_id, sign=Sign.POSITIVE, magnitude=1.0,
                         position=(100.0 * charge_id, 0.0), radius=10.0)
    lines = [
        FieldLine(origin_charge_id=charge_id,
                  points=np.array([[100.0 * charge_id + 10.0, float(i)]]),
                  terminating_charge_id=term)
        for i, term in enumerate(terminations)
    ]
    return ChargeField(source=source, density=max(1, len(lines)), lines=lines)


def terminations_of(fields):
    """{电荷id: 终止id列表}，便于断言"""
    return {f.charge_id: [line.terminating_charge_id for line in f.lines] for f in fields}
