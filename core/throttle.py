# core/throttle.py
import logging
from dataclasses import replace
from typing import Dict, List, Tuple

from core.data_schema import ChargeField
from utils.constants import THROTTLE_FACTOR, THROTTLE_THRESHOLD

logger = logging.getLogger(__name__)

# 被降级场的原始参数：{电荷id: (steps, step_length)}
OriginalParameters = Dict[int, Tuple[int, float]]


class InteractionThrottle:
    """
    拖拽期间的积分分辨率降级

    拖拽开始：step_length ≤ 阈值的场，步长 ×3、步数 ÷3，总追踪距离基本不变
    拖拽结束：按记录的原始参数精确恢复，然后由引擎做一次全分辨率重建
    """

    def __init__(self, factor: int = THROTTLE_FACTOR, threshold: float = THROTTLE_THRESHOLD):
        self.factor = factor
        self.threshold = threshold

    def coarsen(self, fields: List[ChargeField]) -> Tuple[List[ChargeField], OriginalParameters]:
        """
        降低分辨率

        Returns:
            (新场列表, 被降级场的原始参数)
        """
        coarse = []
        originals: OriginalParameters = {}

        for f in fields:
            if f.step_length <= self.threshold:
                originals[f.charge_id] = (f.steps, f.step_length)
                f = replace(
                    f,
                    steps=int(round(f.steps / self.factor)),
                    step_length=f.step_length * self.factor
                )
            coarse.append(f)

        logger.debug(f"拖拽降级: {len(originals)}/{len(fields)} 个场")
        return coarse, originals

    def restore(self, fields: List[ChargeField], originals: OriginalParameters) -> List[ChargeField]:
        """恢复原始分辨率；拖拽期间被删除的场直接忽略"""
        restored = []
        for f in fields:
            if f.charge_id in originals:
                steps, step_length = originals[f.charge_id]
                f = replace(f, steps=steps, step_length=step_length)
            restored.append(f)
        return restored
