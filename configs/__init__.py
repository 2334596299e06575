# configs/__init__.py
"""
场线仿真配置加载系统

提供默认参数访问，支持用户配置文件和环境变量覆盖。
优先级：环境变量 > 用户配置 > 默认配置
"""

import os
import yaml
from pathlib import Path
from typing import Dict, Any, Union, Optional
import logging

logger = logging.getLogger(__name__)

# 配置缓存
_CONFIG_CACHE: Optional[Dict[str, Any]] = None

# 配置文件路径
_CONFIG_DIR = Path(__file__).parent
_CONFIG_FILE = _CONFIG_DIR / 'simulation.yaml'

# 用户配置
_USER_CONFIG_DIR = Path.home() / '.chargefield'
_USER_CONFIG_FILE = _USER_CONFIG_DIR / 'config.yaml'

# 环境变量前缀
ENV_PREFIX = "CHARGEFIELD_"


class ConfigValidationError(ValueError):
    """配置验证异常"""
    pass


def load_yaml_config(file_path: Path) -> Dict[str, Any]:
    """
    加载YAML配置文件

    Args:
        file_path: YAML文件路径

    Returns:
        配置字典

    Raises:
        FileNotFoundError: 文件不存在
        yaml.YAMLError: YAML格式错误
    """
    try:
        with open(file_path, 'r', encoding='utf-8') as f:
            config = yaml.safe_load(f)

        if config is None:
            logger.warning(f"配置文件为空: {file_path}")
            return {}

        logger.debug(f"配置已加载: {file_path.name}")
        return config

    except FileNotFoundError:
        logger.error(f"配置文件未找到: {file_path}")
        raise
    except yaml.YAMLError as e:
        logger.error(f"YAML解析错误: {file_path} - {e}")
        raise


def merge_configs(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """
    递归合并配置字典

    用override中的值覆盖base中的值，保留未覆盖的项
    """
    merged = base.copy()

    for key, value in override.items():
        if (key in merged and
                isinstance(merged[key], dict) and
                isinstance(value, dict)):
            merged[key] = merge_configs(merged[key], value)
        else:
            merged[key] = value

    return merged


def get_config(reload: bool = False) -> Dict[str, Any]:
    """
    获取完整配置

    Args:
        reload: 是否强制重新加载（跳过缓存）

    Returns:
        配置字典，包含 'defaults' 与 'simulation' 两节
    """
    global _CONFIG_CACHE

    if not reload and _CONFIG_CACHE is not None:
        return _CONFIG_CACHE

    _ensure_default_config()
    config = load_yaml_config(_CONFIG_FILE)

    # 合并用户自定义配置（如果存在）
    if _USER_CONFIG_FILE.exists():
        try:
            user_config = load_yaml_config(_USER_CONFIG_FILE)
        except yaml.YAMLError as e:
            logger.warning(f"用户配置加载失败，已忽略: {e}")
        else:
            config = merge_configs(config, user_config)
            logger.info(f"合并用户配置: {_USER_CONFIG_FILE}")

    config = _apply_environment_overrides(config)
    _validate_configuration(config)

    _CONFIG_CACHE = config
    return config


def _apply_environment_overrides(config: Dict[str, Any]) -> Dict[str, Any]:
    """
    应用环境变量覆盖

    命名规则：CHARGEFIELD_{SECTION}_{KEY}=value，节名与键名之间的第一个下划线为分隔

    例如：
    - CHARGEFIELD_DEFAULTS_DENSITY=16
    - CHARGEFIELD_DEFAULTS_STEP_LENGTH=3.5
    """
    overrides: Dict[str, Dict[str, Any]] = {}

    for env_key, env_value in os.environ.items():
        if not env_key.startswith(ENV_PREFIX):
            continue

        section, _, key = env_key[len(ENV_PREFIX):].lower().partition('_')
        if not key:
            continue
        overrides.setdefault(section, {})[key] = _parse_environment_value(env_value)

    if overrides:
        config = merge_configs(config, overrides)
        logger.info(f"应用环境变量覆盖: {sorted(overrides)}")

    return config


def _parse_environment_value(value: str) -> Union[str, float, int, bool]:
    """
    转换环境变量字符串到适当类型

    优先级：
    1. bool (true/false/yes/no)
    2. int (纯数字)
    3. float (科学计数法或小数)
    4. str (原始字符串)
    """
    value_lower = value.lower().strip()

    if value_lower in ('true', 'yes'):
        return True
    if value_lower in ('false', 'no'):
        return False

    try:
        return int(value)
    except ValueError:
        pass

    try:
        return float(value)
    except ValueError:
        pass

    return value


def validate_field_settings(settings: Dict[str, Any]) -> None:
    """
    验证新建电荷默认参数（FieldSettings 格式）

    检查：
    - 默认电荷量在 [1, 20] 内
    - 半径、步长为正数
    - density >= 1, steps >= 0

    Raises:
        ConfigValidationError: 参数缺失或取值无效
    """
    required = ['magnitude', 'radius', 'density', 'steps', 'step_length']
    for name in required:
        if name not in settings:
            raise ConfigValidationError(f"缺少必需默认参数: defaults.{name}")
        value = settings[name]
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ConfigValidationError(f"默认参数必须为数值: defaults.{name} = {value!r}")

    if not 1.0 <= settings['magnitude'] <= 20.0:
        raise ConfigValidationError(f"magnitude无效: {settings['magnitude']} (应在1-20之间)")
    if settings['radius'] <= 0:
        raise ConfigValidationError(f"radius必须为正数: {settings['radius']}")
    if settings['step_length'] <= 0:
        raise ConfigValidationError(f"step_length必须为正数: {settings['step_length']}")
    if not isinstance(settings['density'], int) or settings['density'] < 1:
        raise ConfigValidationError(f"density无效: {settings['density']} (应为 >= 1 的整数)")
    if not isinstance(settings['steps'], int) or settings['steps'] < 0:
        raise ConfigValidationError(f"steps无效: {settings['steps']} (应为 >= 0 的整数)")


def _validate_configuration(config: Dict[str, Any]) -> None:
    """
    验证配置有效性

    检查默认参数（见 validate_field_settings）以及画布尺寸为正数
    """
    validate_field_settings(config.get('defaults', {}))

    simulation = config.get('simulation', {})
    for name in ('width', 'height'):
        value = simulation.get(name, 1)
        if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
            raise ConfigValidationError(f"画布尺寸无效: simulation.{name} = {value!r}")


def clear_config_cache() -> None:
    """清除配置缓存"""
    global _CONFIG_CACHE
    _CONFIG_CACHE = None
    logger.debug("配置缓存已清除")


def get_config_value(key_path: str, default: Any = None) -> Any:
    """
    获取配置值

    Args:
        key_path: 键路径，用点号分隔 (如 'defaults.density')
        default: 默认值（如果键不存在）
    """
    current = get_config()

    for key in key_path.split('.'):
        if isinstance(current, dict) and key in current:
            current = current[key]
        else:
            return default

    return current


def default_field_settings() -> Dict[str, Any]:
    """
    新建电荷使用的默认参数（FieldSettings 格式）
    """
    defaults = get_config()['defaults']
    return {
        'magnitude': float(defaults['magnitude']),
        'radius': float(defaults['radius']),
        'density': int(defaults['density']),
        'steps': int(defaults['steps']),
        'step_length': float(defaults['step_length']),
    }


# ============================================================================ #
# 默认配置内容（内嵌，确保文件缺失时仍可运行）
# ============================================================================ #

_DEFAULT_SIMULATION_CONFIG = """# 场线仿真默认配置

defaults:
  magnitude: 1.0      # 新电荷的电荷量 (1-20)
  radius: 10.0        # 可视半径，场线从此圆周出发
  density: 10         # 每个电荷的场线数
  steps: 3000         # 每条线最大积分步数
  step_length: 2.0    # 每步位移

simulation:
  width: 1200
  height: 750
"""


def _ensure_default_config() -> None:
    """确保默认配置文件存在"""
    if _CONFIG_FILE.exists():
        return

    logger.warning(f"默认配置缺失: {_CONFIG_FILE.name}，正在创建...")
    with open(_CONFIG_FILE, 'w', encoding='utf-8') as f:
        f.write(_DEFAULT_SIMULATION_CONFIG)
    logger.info(f"已创建默认配置: {_CONFIG_FILE.name}")
