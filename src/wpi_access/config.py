"""
Configuration

YAML 설정 파일 로드 및 검증

예 (wpi_access.yaml):
    wpi_access:
      backend: native        # native | simulated
      scheme: wpi            # wpi | gpio | sys | phys
      require_setup: true    # setup() 전 핀 작업을 logic error 로 거부
      enforce_pin_modes: true
      serial_timeout: 10.0
      log_level: INFO
"""

import logging
from dataclasses import dataclass, asdict, fields
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml

from .backend import HardwareBackend
from .constants import Scheme, SERIAL_READ_TIMEOUT
from .exceptions import ConfigError
from .native import NativeBackend
from .simulated import SimulatedBackend

logger = logging.getLogger(__name__)


CONFIG_SECTION = 'wpi_access'

BACKENDS = {
    NativeBackend.name: NativeBackend,
    SimulatedBackend.name: SimulatedBackend,
}

LOG_LEVELS = ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL')


@dataclass
class WiringConfig:
    """접근 계층 설정"""
    backend: str = NativeBackend.name
    scheme: str = Scheme.WPI.value
    require_setup: bool = True       # setup() 전 핀 작업 거부
    enforce_pin_modes: bool = True   # digital_write/gpio_clock_set 모드 검사
    serial_timeout: float = SERIAL_READ_TIMEOUT
    log_level: str = 'INFO'

    def __post_init__(self):
        self.validate()

    def validate(self) -> None:
        """
        설정값 검증

        Raises:
            ConfigError: 잘못된 값
        """
        if self.backend not in BACKENDS:
            raise ConfigError(
                f"unknown backend '{self.backend}', use one of {sorted(BACKENDS)}"
            )
        if self.scheme not in [s.value for s in Scheme]:
            raise ConfigError(f"unknown scheme '{self.scheme}'")
        for name in ('require_setup', 'enforce_pin_modes'):
            if not isinstance(getattr(self, name), bool):
                raise ConfigError(f"{name} must be true or false")
        if isinstance(self.serial_timeout, bool) or \
                not isinstance(self.serial_timeout, (int, float)) or self.serial_timeout <= 0:
            raise ConfigError(f"serial_timeout must be a positive number, got {self.serial_timeout!r}")
        if str(self.log_level).upper() not in LOG_LEVELS:
            raise ConfigError(f"unknown log_level '{self.log_level}'")
        self.log_level = str(self.log_level).upper()

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> 'WiringConfig':
        """
        딕셔너리에서 설정 생성

        최상위에 'wpi_access' 섹션이 있으면 그 아래 값을 사용한다.

        Raises:
            ConfigError: 알 수 없는 키 또는 잘못된 값
        """
        if data is None:
            return cls()
        if not isinstance(data, dict):
            raise ConfigError(f"configuration must be a mapping, got {type(data).__name__}")

        if CONFIG_SECTION in data:
            data = data[CONFIG_SECTION] or {}
            if not isinstance(data, dict):
                raise ConfigError(f"'{CONFIG_SECTION}' section must be a mapping")

        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise ConfigError(f"unknown configuration keys: {', '.join(sorted(unknown))}")

        return cls(**data)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def load_config(path: Union[str, Path]) -> WiringConfig:
    """
    YAML 설정 파일 로드

    Args:
        path: 설정 파일 경로

    Returns:
        WiringConfig

    Raises:
        ConfigError: 파일을 읽을 수 없거나 형식이 잘못된 경우
    """
    path = Path(path)
    try:
        text = path.read_text(encoding='utf-8')
    except OSError as e:
        raise ConfigError(f"cannot read {path}: {e}")

    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid YAML in {path}: {e}")

    config = WiringConfig.from_dict(data)
    logger.debug(f"Loaded configuration from {path}: {config.to_dict()}")
    return config


def create_backend(config: WiringConfig) -> HardwareBackend:
    """설정에 맞는 백엔드 인스턴스 생성"""
    return BACKENDS[config.backend]()
