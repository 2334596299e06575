"""
配置加载系统测试
"""

import pytest
import yaml

import configs
from configs import (
    ConfigValidationError,
    clear_config_cache,
    default_field_settings,
    get_config,
    get_config_value,
    merge_configs,
    _parse_environment_value,
    _validate_configuration,
    validate_field_settings,
)


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """隔离用户配置与缓存"""
    monkeypatch.setattr(configs, '_USER_CONFIG_FILE', tmp_path / 'missing.yaml')
    clear_config_cache()
    yield
    clear_config_cache()


def _valid_config():
    return {
        'defaults': {'magnitude': 1.0, 'radius': 10.0, 'density': 10, 'steps': 3000, 'step_length': 2.0},
        'simulation': {'width': 1200, 'height': 750},
    }


class TestConfigLoading:

    def test_defaults(self):
        settings = default_field_settings()
        assert settings == {
            'magnitude': 1.0,
            'radius': 10.0,
            'density': 10,
            'steps': 3000,
            'step_length': 2.0,
        }

    def test_config_value_access(self):
        assert get_config_value('simulation.width') == 1200
        assert get_config_value('nonexistent.key', 'default') == 'default'

    def test_cached(self):
        assert get_config() is get_config()

    def test_environment_override(self, monkeypatch):
        monkeypatch.setenv('CHARGEFIELD_DEFAULTS_DENSITY', '16')
        monkeypatch.setenv('CHARGEFIELD_DEFAULTS_STEP_LENGTH', '3.5')

        settings = default_field_settings()
        assert settings['density'] == 16
        assert settings['step_length'] == 3.5

    def test_invalid_environment_override(self, monkeypatch):
        monkeypatch.setenv('CHARGEFIELD_DEFAULTS_MAGNITUDE', '50')
        with pytest.raises(ConfigValidationError):
            get_config(reload=True)

    def test_user_config_merged(self, tmp_path, monkeypatch):
        user_file = tmp_path / 'config.yaml'
        user_file.write_text(yaml.dump({'defaults': {'radius': 14.0}}), encoding='utf-8')
        monkeypatch.setattr(configs, '_USER_CONFIG_FILE', user_file)

        settings = default_field_settings()
        assert settings['radius'] == 14.0
        assert settings['density'] == 10


class TestConfigHelpers:

    def test_merge(self):
        merged = merge_configs({'a': {'b': 1, 'c': 2}, 'd': 3}, {'a': {'b': 10}, 'd': 4})
        assert merged == {'a': {'b': 10, 'c': 2}, 'd': 4}

    @pytest.mark.parametrize("raw, expected", [
        ('true', True),
        ('no', False),
        ('42', 42),
        ('2.5', 2.5),
        ('1e3', 1000.0),
        ('coolwarm', 'coolwarm'),
    ])
    def test_parse_environment_value(self, raw, expected):
        assert _parse_environment_value(raw) == expected

    @pytest.mark.parametrize("section, key, value", [
        ('defaults', 'magnitude', 0.5),
        ('defaults', 'radius', 0),
        ('defaults', 'density', 0),
        ('defaults', 'steps', -1),
        ('defaults', 'step_length', 0.0),
        ('defaults', 'density', 'many'),
        ('simulation', 'width', -10),
    ])
    def test_validation_rejects(self, section, key, value):
        config = _valid_config()
        config[section][key] = value
        with pytest.raises(ConfigValidationError):
            _validate_configuration(config)

    def test_validation_missing_key(self):
        config = _valid_config()
        del config['defaults']['steps']
        with pytest.raises(ConfigValidationError, match="steps"):
            _validate_configuration(config)

    def test_validation_accepts_defaults(self):
        _validate_configuration(_valid_config())

    def test_field_settings_validator_shared(self):
        settings = dict(_valid_config()['defaults'])
        validate_field_settings(settings)

        settings['magnitude'] = 50
        with pytest.raises(ValueError, match="magnitude"):
            validate_field_settings(settings)
