"""
Wiring Context

백엔드, 설정, 세 매니저(GPIO/SPI/Serial)를 소유하는 컨텍스트
전역 상태 대신 컨텍스트 객체를 사용하므로 독립된 컨텍스트끼리 간섭하지 않는다.
"""

import logging
from pathlib import Path
from typing import Optional, Union

from .backend import HardwareBackend
from .config import WiringConfig, load_config, create_backend
from .exceptions import backend_call
from .gpio import PinStateManager
from .serial_comm import SerialSessionManager
from .spi import SpiSessionManager

logger = logging.getLogger(__name__)


class WiringContext:
    """
    하드웨어 접근 컨텍스트

    사용 예:
        with WiringContext() as ctx:
            ctx.setup('wpi')
            ctx.gpio.pin_mode(0, OUTPUT)
            ctx.gpio.digital_write(0, HIGH)

            fd = ctx.serial.open('/dev/ttyAMA0', 9600)
            ctx.serial.puts(fd, 'hello')

        # 종료 시 열린 SPI/시리얼 디스크립터를 모두 닫는다
    """

    def __init__(
        self,
        backend: Optional[HardwareBackend] = None,
        config: Optional[WiringConfig] = None
    ):
        """
        Args:
            backend: 하드웨어 백엔드 (None이면 config.backend 로 생성)
            config: 설정 (None이면 기본값)
        """
        self.config = config if config is not None else WiringConfig()
        self.backend = backend if backend is not None else create_backend(self.config)

        self.gpio = PinStateManager(
            self.backend,
            require_setup=self.config.require_setup,
            enforce_pin_modes=self.config.enforce_pin_modes
        )
        self.spi = SpiSessionManager(self.backend)
        self.serial = SerialSessionManager(self.backend, timeout=self.config.serial_timeout)

    @classmethod
    def from_config_file(cls, path: Union[str, Path]) -> 'WiringContext':
        """YAML 설정 파일로 컨텍스트 생성"""
        return cls(config=load_config(path))

    def setup(self, scheme: Optional[str] = None) -> int:
        """
        핀 번호 체계 초기화 (None이면 config.scheme)

        Returns:
            백엔드 상태 코드
        """
        return self.gpio.setup(scheme if scheme is not None else self.config.scheme)

    def lib_version(self) -> str:
        """
        네이티브 라이브러리 버전

        Returns:
            'major.minor'

        Raises:
            WpiRuntimeError: 백엔드 사용 불가
        """
        with backend_call('lib_version'):
            major, minor = self.backend.version()
        return f"{major}.{minor}"

    def close(self) -> None:
        """열린 모든 SPI/시리얼 세션 close (실패는 로그만 남김)"""
        logger.debug(
            f"Closing context (spi fds={self.spi.open_fds}, serial fds={self.serial.open_fds})"
        )
        self.spi.close_all()
        self.serial.close_all()

    def __enter__(self) -> 'WiringContext':
        """Context manager entry"""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Context manager exit"""
        self.close()
