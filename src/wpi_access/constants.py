"""
WPI Access Constants

핀 모드 / 풀업·풀다운 / 레벨 / 핀 번호 체계 / SPI·시리얼 한계값
숫자 값은 wiringPi 헤더와 동일
"""

from enum import Enum, IntEnum


class PinMode(IntEnum):
    """핀 모드"""
    UNSET = -1            # pin_mode()가 한 번도 호출되지 않음 (내부 전용)
    INPUT = 0
    OUTPUT = 1
    PWM_OUTPUT = 2
    GPIO_CLOCK = 3
    SOFT_PWM_OUTPUT = 4
    SOFT_TONE_OUTPUT = 5
    PWM_TONE_OUTPUT = 6


class Pull(IntEnum):
    """풀업/풀다운 저항 설정"""
    OFF = 0
    DOWN = 1
    UP = 2


class Scheme(Enum):
    """핀 번호 체계 (setup 인자)"""
    WPI = 'wpi'      # wiringPi 가상 핀 번호 0~63
    GPIO = 'gpio'    # Broadcom GPIO 번호
    SYS = 'sys'      # /sys/class/gpio (비특권 모드)
    PHYS = 'phys'    # 헤더 물리 핀 번호


# Module-level aliases (wiringPi 이름과 동일)
INPUT = PinMode.INPUT
OUTPUT = PinMode.OUTPUT
PWM_OUTPUT = PinMode.PWM_OUTPUT
GPIO_CLOCK = PinMode.GPIO_CLOCK
SOFT_PWM_OUTPUT = PinMode.SOFT_PWM_OUTPUT
SOFT_TONE_OUTPUT = PinMode.SOFT_TONE_OUTPUT
PWM_TONE_OUTPUT = PinMode.PWM_TONE_OUTPUT

PUD_OFF = Pull.OFF
PUD_DOWN = Pull.DOWN
PUD_UP = Pull.UP

LOW = 0
HIGH = 1

# pin_mode()로 설정 가능한 모드
SETTABLE_PIN_MODES = frozenset(m for m in PinMode if m is not PinMode.UNSET)

# Virtual pin range
PIN_MIN = 0
PIN_MAX = 63

# SPI
SPI_CHANNELS = (0, 1)
SPI_MIN_SPEED = 500000      # Hz
SPI_MAX_SPEED = 32000000    # Hz
SPI_MODES = (0, 1, 2, 3)    # bit0 = CPOL, bit1 = CPHA
SPI_DEFAULT_MODE = 0

# Serial
SERIAL_READ_TIMEOUT = 10.0  # seconds (wiringSerial VTIME = 100)
NO_DATA = -1                # get_char() 타임아웃 sentinel


def normalize_level(value: int) -> int:
    """
    digital_write 값 정규화

    0만 LOW이며, 0이 아닌 모든 정수(음수 포함)는 HIGH로 취급한다.
    범위 클램핑이 아니다: 2, 255, -1 모두 HIGH.
    """
    return LOW if value == 0 else HIGH
