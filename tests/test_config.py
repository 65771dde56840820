"""
Configuration Unit Tests

설정 로드/검증 테스트:
- 기본값
- wpi_access 섹션, 알 수 없는 키
- YAML 파일 오류
"""

import pytest
import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from wpi_access.config import WiringConfig, load_config, create_backend
from wpi_access.native import NativeBackend
from wpi_access.simulated import SimulatedBackend
from wpi_access.exceptions import ConfigError, WpiLogicError


class TestWiringConfig:
    """WiringConfig 테스트"""

    def test_defaults(self):
        config = WiringConfig()

        assert config.backend == 'native'
        assert config.scheme == 'wpi'
        assert config.require_setup is True
        assert config.enforce_pin_modes is True
        assert config.serial_timeout == 10.0
        assert config.log_level == 'INFO'

    def test_log_level_normalized(self):
        assert WiringConfig(log_level='debug').log_level == 'DEBUG'

    @pytest.mark.parametrize('kwargs', [
        {'backend': 'gpiozero'},
        {'scheme': 'bcm'},
        {'require_setup': 'yes'},
        {'enforce_pin_modes': 1},
        {'serial_timeout': 0},
        {'serial_timeout': True},
        {'log_level': 'LOUD'},
    ])
    def test_invalid_values(self, kwargs):
        with pytest.raises(ConfigError):
            WiringConfig(**kwargs)

    def test_config_error_is_logic_error(self):
        with pytest.raises(WpiLogicError):
            WiringConfig(backend='unknown')


class TestFromDict:
    """from_dict() 테스트"""

    def test_none_is_default(self):
        assert WiringConfig.from_dict(None) == WiringConfig()

    def test_flat_mapping(self):
        config = WiringConfig.from_dict({'backend': 'simulated', 'scheme': 'gpio'})

        assert config.backend == 'simulated'
        assert config.scheme == 'gpio'

    def test_section(self):
        config = WiringConfig.from_dict({'wpi_access': {'serial_timeout': 2.5}})
        assert config.serial_timeout == 2.5

    def test_empty_section(self):
        assert WiringConfig.from_dict({'wpi_access': None}) == WiringConfig()

    def test_unknown_keys(self):
        with pytest.raises(ConfigError, match='unknown configuration keys: baudrate'):
            WiringConfig.from_dict({'baudrate': 9600})

    def test_not_a_mapping(self):
        with pytest.raises(ConfigError):
            WiringConfig.from_dict(['native'])

    def test_to_dict_round_trip(self):
        config = WiringConfig(backend='simulated', require_setup=False)
        assert WiringConfig.from_dict(config.to_dict()) == config


class TestLoadConfig:
    """load_config() 테스트"""

    def test_load_yaml(self, tmp_path):
        path = tmp_path / 'wpi_access.yaml'
        path.write_text(
            "wpi_access:\n"
            "  backend: simulated\n"
            "  scheme: phys\n"
            "  enforce_pin_modes: false\n"
            "  log_level: debug\n",
            encoding='utf-8'
        )

        config = load_config(path)

        assert config.backend == 'simulated'
        assert config.scheme == 'phys'
        assert config.enforce_pin_modes is False
        assert config.log_level == 'DEBUG'

    def test_empty_file(self, tmp_path):
        path = tmp_path / 'empty.yaml'
        path.write_text('', encoding='utf-8')

        assert load_config(path) == WiringConfig()

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigError, match='cannot read'):
            load_config(tmp_path / 'missing.yaml')

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / 'broken.yaml'
        path.write_text('wpi_access: [unclosed\n', encoding='utf-8')

        with pytest.raises(ConfigError, match='invalid YAML'):
            load_config(str(path))


class TestCreateBackend:
    """create_backend() 테스트"""

    def test_native(self):
        assert isinstance(create_backend(WiringConfig()), NativeBackend)

    def test_simulated(self):
        assert isinstance(create_backend(WiringConfig(backend='simulated')), SimulatedBackend)


if __name__ == '__main__':
    pytest.main([__file__, '-v'])
