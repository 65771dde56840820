"""
WPI Access Library

싱글 보드 컴퓨터용 하드웨어 접근 계층
- GPIO 핀 모드 추적 및 검증
- SPI 채널 디스크립터 수명 관리, 전이중 전송
- 시리얼 장치 세션, 바이트/문자열 I/O (10초 수신 타임아웃)
- 오류 분류: runtime / logic / execution

사용 예:
    from wpi_access import WiringContext, OUTPUT, GPIO_CLOCK, HIGH

    with WiringContext() as ctx:
        ctx.setup('wpi')
        ctx.gpio.pin_mode(0, OUTPUT)
        ctx.gpio.digital_write(0, HIGH)

        ctx.gpio.pin_mode(7, GPIO_CLOCK)
        ctx.gpio.gpio_clock_set(7, 9500000)

        fd = ctx.spi.setup(0, 1000000)
        buf = bytearray(b'\\x01\\x80\\x00')
        ctx.spi.data_rw(0, buf)

        fd = ctx.serial.open('/dev/ttyAMA0', 9600)
        ctx.serial.put_char(fd, 65)
        print(ctx.serial.get_char(fd))
"""

__version__ = '1.0.0'
__author__ = 'CRK'

VERSION = __version__

# Core classes
from .context import WiringContext
from .gpio import PinStateManager, Pin
from .spi import SpiSessionManager, SpiChannel
from .serial_comm import SerialSessionManager, SerialSession, CharResult, CharStatus

# Backends
from .backend import HardwareBackend
from .native import NativeBackend
from .simulated import SimulatedBackend

# Configuration
from .config import WiringConfig, load_config, create_backend

# Constants
from .constants import (
    PinMode, Pull, Scheme,
    INPUT, OUTPUT, PWM_OUTPUT, GPIO_CLOCK,
    SOFT_PWM_OUTPUT, SOFT_TONE_OUTPUT, PWM_TONE_OUTPUT,
    PUD_OFF, PUD_DOWN, PUD_UP,
    LOW, HIGH, NO_DATA, SERIAL_READ_TIMEOUT,
    normalize_level
)

# Exceptions
from .exceptions import (
    ErrorKind,
    WpiError,
    WpiRuntimeError,
    WpiLogicError,
    WpiExecutionError,
    ConfigError,
    classify
)

__all__ = [
    # Version
    '__version__',
    'VERSION',

    # Core
    'WiringContext',
    'PinStateManager',
    'Pin',
    'SpiSessionManager',
    'SpiChannel',
    'SerialSessionManager',
    'SerialSession',
    'CharResult',
    'CharStatus',

    # Backends
    'HardwareBackend',
    'NativeBackend',
    'SimulatedBackend',

    # Configuration
    'WiringConfig',
    'load_config',
    'create_backend',

    # Constants
    'PinMode',
    'Pull',
    'Scheme',
    'INPUT',
    'OUTPUT',
    'PWM_OUTPUT',
    'GPIO_CLOCK',
    'SOFT_PWM_OUTPUT',
    'SOFT_TONE_OUTPUT',
    'PWM_TONE_OUTPUT',
    'PUD_OFF',
    'PUD_DOWN',
    'PUD_UP',
    'LOW',
    'HIGH',
    'NO_DATA',
    'SERIAL_READ_TIMEOUT',
    'normalize_level',

    # Exceptions
    'ErrorKind',
    'WpiError',
    'WpiRuntimeError',
    'WpiLogicError',
    'WpiExecutionError',
    'ConfigError',
    'classify',
]
