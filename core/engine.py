"""
仿真状态与操作接口

设计目标：
1. 状态是一个整体替换的值：每个操作接收旧状态，返回新状态，不修改输入
2. 电荷以整数id引用，场按插入顺序存放在以id为键的字典中
3. 任何电荷变化后立即同步全量重建所有场（追踪 + 重复线消除）
4. 无效id视为空操作，原样返回输入状态

操作列表：
init_simulation / add_charge / delete_charge / move_charge /
adjust_magnitude / duplicate_charge / begin_drag / end_drag
以及 set_active / toggle_selection / clear_selection /
update_settings / set_field_parameters / remove_all_charges / render_lines
"""

import logging
from dataclasses import dataclass, field, replace
from typing import Dict, FrozenSet, List, Optional, Tuple, Union

import numpy as np

from configs import default_field_settings, validate_field_settings
from core.data_schema import ChargeField, FieldSettings, create_field
from core.field_builder import FieldBuilder
from core.throttle import InteractionThrottle, OriginalParameters
from physics.point import PointCharge, Sign
from utils.constants import MIN_MAGNITUDE, MAX_MAGNITUDE, MAGNITUDE_STEP, DUPLICATE_GAP

logger = logging.getLogger(__name__)

Vector2 = Union[Tuple[float, float], List[float], np.ndarray]


# ============================================================================ #
# 状态定义
# ============================================================================ #

@dataclass(frozen=True)
class SimulationState:
    """
    仿真状态

    Attributes:
        width / height: 画布尺寸，追踪边界为其1.5倍
        fields: {电荷id: 场}，键集合恒等于存活电荷id集合
        next_id: 下一个可分配的id，单调递增，删除后不复用
        active_id: 当前激活的电荷
        selected_ids: 多选集合，复制操作使用
        settings: 新建电荷的默认参数
        dragging: 是否处于拖拽中（节流生效）
        throttled: 拖拽期间被降级场的原始参数
    """
    width: float
    height: float
    fields: Dict[int, ChargeField] = field(default_factory=dict)
    next_id: int = 0
    active_id: Optional[int] = None
    selected_ids: FrozenSet[int] = frozenset()
    settings: FieldSettings = field(default_factory=default_field_settings)
    dragging: bool = False
    throttled: OriginalParameters = field(default_factory=dict)

    @property
    def charges(self) -> List[PointCharge]:
        return [f.source for f in self.fields.values()]

    @property
    def field_list(self) -> List[ChargeField]:
        return list(self.fields.values())

    def get_charge(self, charge_id: int) -> Optional[PointCharge]:
        f = self.fields.get(charge_id)
        return f.source if f is not None else None

    def has_charge(self, charge_id: int) -> bool:
        return charge_id in self.fields


_throttle = InteractionThrottle()


def _rebuild(state: SimulationState, fields: List[ChargeField], **changes) -> SimulationState:
    """全量重建所有场并返回新状态"""
    builder = FieldBuilder(state.width, state.height)
    resolved = builder.calculate_fields(fields)
    return replace(state, fields={f.charge_id: f for f in resolved}, **changes)


def _ignore(state: SimulationState, operation: str, charge_id: int) -> SimulationState:
    logger.debug(f"{operation}: 电荷 {charge_id} 不存在，忽略")
    return state


def _throttle_if_dragging(state: SimulationState, f: ChargeField,
                          throttled: OriginalParameters) -> ChargeField:
    """拖拽期间对全分辨率的场做同样的降级，原始参数写入 throttled"""
    if not state.dragging:
        return f
    coarse, originals = _throttle.coarsen([f])
    throttled.update(originals)
    return coarse[0]


# ============================================================================ #
# 核心操作
# ============================================================================ #

def init_simulation(width: float, height: float,
                    settings: Optional[FieldSettings] = None) -> SimulationState:
    """
    创建初始仿真：竖直排列的一对异号电荷，分别位于高度的1/3和2/3处

    Args:
        width: 画布宽度
        height: 画布高度
        settings: 默认参数，None时从配置文件读取
    """
    if width <= 0 or height <= 0:
        raise ValueError(f"画布尺寸必须为正数，得到 {width}×{height}")

    settings = dict(settings) if settings is not None else default_field_settings()
    state = SimulationState(width=float(width), height=float(height), settings=settings)

    seeds = [
        (Sign.POSITIVE, (width / 2, height / 3)),
        (Sign.NEGATIVE, (width / 2, height * 2 / 3)),
    ]
    fields = []
    for charge_id, (sign, position) in enumerate(seeds):
        charge = PointCharge(
            id=charge_id,
            sign=sign,
            magnitude=settings['magnitude'],
            position=position,
            radius=settings['radius']
        )
        fields.append(create_field(charge, settings))

    logger.info(f"初始化仿真: {width}×{height}, {len(fields)} 个电荷")
    return _rebuild(state, fields, next_id=len(seeds))


def add_charge(state: SimulationState, sign: Sign, position: Vector2) -> SimulationState:
    """用当前默认参数新建电荷，分配新id，并设为激活电荷"""
    charge_id = state.next_id
    charge = PointCharge(
        id=charge_id,
        sign=sign,
        magnitude=state.settings['magnitude'],
        position=position,
        radius=state.settings['radius']
    )

    logger.info(f"添加电荷 {charge_id}: {sign.value} @ {tuple(charge.position)}")
    throttled = dict(state.throttled)
    new_field = _throttle_if_dragging(state, create_field(charge, state.settings), throttled)
    return _rebuild(
        state,
        state.field_list + [new_field],
        next_id=charge_id + 1,
        active_id=charge_id,
        throttled=throttled
    )


def delete_charge(state: SimulationState, charge_id: int) -> SimulationState:
    """删除电荷；激活/选中状态指向它时一并清除"""
    if not state.has_charge(charge_id):
        return _ignore(state, "delete_charge", charge_id)

    remaining = [f for f in state.field_list if f.charge_id != charge_id]
    throttled = {k: v for k, v in state.throttled.items() if k != charge_id}

    logger.info(f"删除电荷 {charge_id}")
    return _rebuild(
        state,
        remaining,
        active_id=None if state.active_id == charge_id else state.active_id,
        selected_ids=state.selected_ids - {charge_id},
        throttled=throttled
    )


def move_charge(state: SimulationState, charge_id: int, delta: Vector2) -> SimulationState:
    """按2D位移平移一个电荷，其他电荷不动"""
    if not state.has_charge(charge_id):
        return _ignore(state, "move_charge", charge_id)

    fields = [
        replace(f, source=f.source.moved(delta), lines=[]) if f.charge_id == charge_id else f
        for f in state.field_list
    ]
    return _rebuild(state, fields)


def next_magnitude(sign: Sign, magnitude: float, direction: int) -> Tuple[Sign, float]:
    """
    在带符号电荷量上加减1

    |新值| < 1 时翻转符号并取1；否则取新值的符号，大小截断到 [1, 20]。
    电荷量始终为正数，符号单独表示。
    """
    if direction not in (1, -1):
        raise ValueError(f"direction必须为 +1 或 -1，得到 {direction}")

    signed = sign.factor * magnitude + direction * MAGNITUDE_STEP

    if abs(signed) < MIN_MAGNITUDE:
        return sign.flipped(), MIN_MAGNITUDE

    new_sign = Sign.POSITIVE if signed > 0 else Sign.NEGATIVE
    return new_sign, min(abs(signed), MAX_MAGNITUDE)


def adjust_magnitude(state: SimulationState, charge_id: int, direction: int) -> SimulationState:
    """增减电荷量（direction = +1 增加，-1 减少），穿过零点时翻转符号"""
    charge = state.get_charge(charge_id)
    if charge is None:
        return _ignore(state, "adjust_magnitude", charge_id)

    sign, magnitude = next_magnitude(charge.sign, charge.magnitude, direction)
    if sign is not charge.sign:
        logger.info(f"电荷 {charge_id} 符号翻转: {charge.sign.value} -> {sign.value}")

    updated = replace(charge, sign=sign, magnitude=magnitude)
    fields = [
        replace(f, source=updated, lines=[]) if f.charge_id == charge_id else f
        for f in state.field_list
    ]
    return _rebuild(state, fields)


def duplicate_charge(state: SimulationState, charge_id: int) -> SimulationState:
    """
    复制电荷

    charge_id 在多选集合中时复制全部选中电荷，否则只复制它自己。
    副本沿x方向偏移 2r + 15，按顺序分配新id；选中集合移到副本上，
    最后一个副本成为激活电荷。
    """
    if not state.has_charge(charge_id):
        return _ignore(state, "duplicate_charge", charge_id)

    if charge_id in state.selected_ids:
        targets = [i for i in state.fields if i in state.selected_ids]
    else:
        targets = [charge_id]

    next_id = state.next_id
    clones = []
    throttled = dict(state.throttled)
    for target in targets:
        original = state.fields[target]
        source = original.source
        clone = replace(
            source.moved((2 * source.radius + DUPLICATE_GAP, 0.0)),
            id=next_id
        )
        clones.append(replace(original, source=clone, lines=[]))
        if target in state.throttled:
            throttled[next_id] = state.throttled[target]
        next_id += 1

    clone_ids = [f.charge_id for f in clones]
    logger.info(f"复制电荷 {targets} -> {clone_ids}")
    return _rebuild(
        state,
        state.field_list + clones,
        next_id=next_id,
        active_id=clone_ids[-1],
        selected_ids=frozenset(clone_ids) if charge_id in state.selected_ids else state.selected_ids,
        throttled=throttled
    )


def begin_drag(state: SimulationState) -> SimulationState:
    """拖拽开始：降低积分分辨率（只改参数，下一次移动时按新参数重建）"""
    if state.dragging:
        return state

    coarse, originals = _throttle.coarsen(state.field_list)
    logger.info("拖拽开始")
    return replace(
        state,
        fields={f.charge_id: f for f in coarse},
        dragging=True,
        throttled=originals
    )


def end_drag(state: SimulationState) -> SimulationState:
    """拖拽结束：恢复原始分辨率并强制一次全分辨率重建"""
    if not state.dragging:
        return state

    restored = _throttle.restore(state.field_list, state.throttled)
    logger.info("拖拽结束，全分辨率重建")
    return _rebuild(state, restored, dragging=False, throttled={})


# ============================================================================ #
# 辅助操作
# ============================================================================ #

def set_active(state: SimulationState, charge_id: Optional[int]) -> SimulationState:
    """设置激活电荷（None表示清除）；不触发重建"""
    if charge_id is not None and not state.has_charge(charge_id):
        return _ignore(state, "set_active", charge_id)
    return replace(state, active_id=charge_id)


def toggle_selection(state: SimulationState, charge_id: int) -> SimulationState:
    """在多选集合中加入/移除电荷"""
    if not state.has_charge(charge_id):
        return _ignore(state, "toggle_selection", charge_id)
    return replace(state, selected_ids=state.selected_ids ^ {charge_id})


def clear_selection(state: SimulationState) -> SimulationState:
    return replace(state, selected_ids=frozenset())


def update_settings(state: SimulationState, **changes) -> SimulationState:
    """
    修改新建电荷的默认参数，已有电荷的场不受影响

    Raises:
        ValueError: 未知参数名
        ConfigValidationError: 参数取值无效（与配置文件使用相同的规则）
    """
    unknown = set(changes) - set(FieldSettings.__annotations__)
    if unknown:
        raise ValueError(f"未知的默认参数: {sorted(unknown)}")

    settings = dict(state.settings)
    settings.update(changes)
    validate_field_settings(settings)
    logger.debug(f"默认参数更新: {changes}")
    return replace(state, settings=settings)


def set_field_parameters(state: SimulationState, charge_id: int,
                         density: Optional[int] = None,
                         steps: Optional[int] = None,
                         step_length: Optional[float] = None) -> SimulationState:
    """
    修改单个电荷的追踪参数并重建

    拖拽期间新参数视为全分辨率参数：记录为原始参数，场本身按节流降级，
    end_drag 时恢复为新参数
    """
    if not state.has_charge(charge_id):
        return _ignore(state, "set_field_parameters", charge_id)

    changes = {
        key: value for key, value in
        (('density', density), ('steps', steps), ('step_length', step_length))
        if value is not None
    }

    target = state.fields[charge_id]
    if charge_id in state.throttled:
        original_steps, original_step_length = state.throttled[charge_id]
        target = replace(target, steps=original_steps, step_length=original_step_length)
    target = replace(target, lines=[], **changes)

    throttled = {k: v for k, v in state.throttled.items() if k != charge_id}
    target = _throttle_if_dragging(state, target, throttled)

    fields = [target if f.charge_id == charge_id else f for f in state.field_list]
    return _rebuild(state, fields, throttled=throttled)


def remove_all_charges(state: SimulationState) -> SimulationState:
    """删除全部电荷，id计数器保留"""
    logger.info(f"清空全部 {len(state.fields)} 个电荷")
    return replace(
        state,
        fields={},
        active_id=None,
        selected_ids=frozenset(),
        throttled={}
    )


def render_lines(state: SimulationState) -> List[Tuple[Sign, np.ndarray]]:
    """把最终场展开为 (源电荷符号, 点序列) 供渲染层使用"""
    return [
        (f.source.sign, line.points)
        for f in state.field_list
        for line in f.lines
    ]
