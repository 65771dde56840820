"""
Pin State Manager

가상 핀 0~63의 모드 상태를 추적하고 모드 의존 작업을 검증
- setup: 핀 번호 체계 선택 (프로세스당 1회)
- pin_mode / pull_up_dn_control
- digital_write / digital_read
- gpio_clock_set
"""

import logging
from dataclasses import dataclass, replace
from typing import Dict, Optional

from .backend import HardwareBackend
from .constants import (
    PinMode, Pull, Scheme, SETTABLE_PIN_MODES,
    PIN_MIN, PIN_MAX, HIGH, LOW, normalize_level
)
from .exceptions import (
    WpiLogicError, WpiRuntimeError, WpiExecutionError, backend_call
)
from .validation import require_int, require_range, require_member

logger = logging.getLogger(__name__)


@dataclass
class Pin:
    """가상 핀 상태"""
    number: int
    mode: PinMode = PinMode.UNSET
    pull: Pull = Pull.OFF
    level: Optional[int] = None  # 마지막으로 쓴 레벨 (HIGH/LOW)

    def __str__(self) -> str:
        level = '-' if self.level is None else ('HIGH' if self.level else 'LOW')
        return f"Pin {self.number}: {self.mode.name}, pull {self.pull.name}, level {level}"


class PinStateManager:
    """
    핀 상태 관리 클래스

    사용 예:
        gpio = PinStateManager(backend)
        gpio.setup('wpi')
        gpio.pin_mode(0, OUTPUT)
        gpio.digital_write(0, HIGH)

        gpio.pin_mode(7, GPIO_CLOCK)
        gpio.gpio_clock_set(7, 9500000)
    """

    def __init__(
        self,
        backend: HardwareBackend,
        require_setup: bool = True,
        enforce_pin_modes: bool = True
    ):
        """
        Args:
            backend: 하드웨어 백엔드
            require_setup: True면 setup() 전 핀 작업을 logic error 로 거부
            enforce_pin_modes: True면 digital_write 는 OUTPUT,
                               gpio_clock_set 은 GPIO_CLOCK 모드를 요구
        """
        self._backend = backend
        self.require_setup = require_setup
        self.enforce_pin_modes = enforce_pin_modes

        self._pins: Dict[int, Pin] = {}
        self._scheme: Optional[Scheme] = None

    @property
    def is_setup(self) -> bool:
        return self._scheme is not None

    @property
    def scheme(self) -> Optional[Scheme]:
        """선택된 핀 번호 체계 (setup 전에는 None)"""
        return self._scheme

    def setup(self, scheme: str = Scheme.WPI.value) -> int:
        """
        핀 번호 체계 선택 및 백엔드 초기화

        Args:
            scheme: 'wpi', 'gpio', 'sys', 'phys'

        Returns:
            백엔드 상태 코드 (0)

        Raises:
            WpiLogicError: 알 수 없는 scheme 또는 두 번째 호출
            WpiRuntimeError: 백엔드를 초기화할 수 없음 (권한 없음, 바인딩 없음)
            WpiExecutionError: 백엔드가 음수 상태를 반환
        """
        op = 'gpio.setup'
        if isinstance(scheme, Scheme):
            scheme = scheme.value
        if not isinstance(scheme, str):
            raise WpiLogicError("invalid type for mode", op)
        try:
            selected = Scheme(scheme)
        except ValueError:
            raise WpiLogicError(f"invalid value for mode ('{scheme}')", op)

        if self.is_setup:
            raise WpiLogicError(f"already set up with scheme '{self._scheme.value}'", op)

        try:
            with backend_call(op):
                status = self._backend.initialize(selected.value)
        except WpiExecutionError as e:
            if isinstance(e.__cause__, PermissionError):
                raise WpiRuntimeError(f"cannot initialize backend ({e.__cause__})", op) from e.__cause__
            raise

        if status < 0:
            message = "setup fails"
            failure = self._backend.last_failure()
            if failure:
                message += f" ({failure})"
            raise WpiExecutionError(message, op)

        self._scheme = selected
        logger.info(f"GPIO set up with '{selected.value}' numbering (status={status})")
        return status

    def pin_mode(self, pin: int, mode: int) -> None:
        """
        핀 모드 설정

        sys 체계에서는 백엔드가 무시한다 (경고 로그만 남김).

        Raises:
            WpiLogicError: 핀 범위/모드 값 오류
            WpiRuntimeError: 백엔드 호출 불가
        """
        op = 'gpio.pin_mode'
        pin = self._check_pin(pin, op)
        mode = require_member(mode, 'mode', op, SETTABLE_PIN_MODES)
        self._check_ready(op)

        if self._scheme is Scheme.SYS:
            logger.warning(f"pin_mode({pin}) has no effect in 'sys' mode")

        with backend_call(op):
            self._backend.set_pin_mode(pin, mode)

        state = self._pin(pin)
        state.mode = PinMode(mode)
        logger.debug(f"Pin {pin} mode -> {state.mode.name}")

    def pull_up_dn_control(self, pin: int, pud: int) -> None:
        """
        풀업/풀다운 저항 설정

        INPUT 핀에서만 의미가 있다. 제한 모드(sys)에서 효과가 없을 수 있으며
        이 계층은 그것을 보장하지 않는다.
        """
        op = 'gpio.pull_up_dn_control'
        pin = self._check_pin(pin, op)
        pud = require_member(pud, 'pud', op, set(Pull))
        self._check_ready(op)

        state = self._pin(pin)
        if state.mode is not PinMode.INPUT:
            logger.warning(f"Pull control on pin {pin} in {state.mode.name} mode")
        if self._scheme is Scheme.SYS:
            logger.warning(f"pull_up_dn_control({pin}) has no effect in 'sys' mode")

        with backend_call(op):
            self._backend.set_pull(pin, pud)

        state.pull = Pull(pud)

    def digital_write(self, pin: int, value: int) -> None:
        """
        핀 레벨 쓰기

        0만 LOW, 0이 아닌 모든 값은 HIGH (클램핑 아님).

        Raises:
            WpiLogicError: 핀 범위 오류, OUTPUT 모드가 아님
        """
        op = 'gpio.digital_write'
        pin = self._check_pin(pin, op)
        value = require_int(value, 'value', op, allow_bool=True)
        self._check_ready(op)
        self._check_mode(pin, PinMode.OUTPUT, op)

        level = normalize_level(value)
        with backend_call(op):
            self._backend.write_pin(pin, level)

        self._pin(pin).level = level

    def digital_read(self, pin: int) -> int:
        """
        핀 레벨 읽기

        Returns:
            HIGH (1) 또는 LOW (0)
        """
        op = 'gpio.digital_read'
        pin = self._check_pin(pin, op)
        self._check_ready(op)

        with backend_call(op):
            level = self._backend.read_pin(pin)

        return HIGH if level else LOW

    def gpio_clock_set(self, pin: int, frequency: int) -> None:
        """
        GPIO 클럭 주파수 설정

        주의: 주파수의 "안전" 범위는 검사하지 않는다.
        잘못된 주파수는 온보드 인터페이스(SSH 등)를 불안정하게 만들 수 있다.
        9500000 Hz 는 동작 확인됨.

        Raises:
            WpiLogicError: 핀 범위 오류, 0 이하 주파수, GPIO_CLOCK 모드가 아님
        """
        op = 'gpio.gpio_clock_set'
        pin = self._check_pin(pin, op)
        frequency = require_int(frequency, 'frequency', op)
        if frequency <= 0:
            raise WpiLogicError(f"invalid value for frequency ({frequency})", op)
        self._check_ready(op)
        self._check_mode(pin, PinMode.GPIO_CLOCK, op)

        with backend_call(op):
            self._backend.set_clock(pin, frequency)

        logger.debug(f"Pin {pin} clock -> {frequency} Hz")

    def get_pin(self, pin: int) -> Pin:
        """추적 중인 핀 상태 스냅샷"""
        pin = self._check_pin(pin, 'gpio.get_pin')
        return replace(self._pin(pin))

    def _pin(self, pin: int) -> Pin:
        # 처음 참조될 때 생성
        if pin not in self._pins:
            self._pins[pin] = Pin(number=pin)
        return self._pins[pin]

    def _check_pin(self, pin: int, op: str) -> int:
        return require_range(pin, 'pin', op, PIN_MIN, PIN_MAX)

    def _check_ready(self, op: str) -> None:
        if self.require_setup and not self.is_setup:
            raise WpiLogicError("setup() has not been called", op)

    def _check_mode(self, pin: int, required: PinMode, op: str) -> None:
        if not self.enforce_pin_modes:
            return
        current = self._pin(pin).mode
        if current is not required:
            raise WpiLogicError(
                f"pin {pin} is not in {required.name} mode (current: {current.name})", op
            )
