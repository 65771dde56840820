"""
PinStateManager Unit Tests

GPIO 핀 상태 관리 테스트:
- setup (번호 체계, 초기화 실패 분류)
- 핀 범위 검증 (백엔드 위임 없음)
- 모드 게이팅 (digital_write / gpio_clock_set)
- digital_write 의 0 / 0이 아닌 값 처리
"""

import pytest
import sys
import os
from unittest.mock import MagicMock

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from wpi_access.gpio import PinStateManager, Pin
from wpi_access.simulated import SimulatedBackend
from wpi_access.constants import (
    PinMode, Pull, Scheme,
    INPUT, OUTPUT, PWM_OUTPUT, GPIO_CLOCK, PWM_TONE_OUTPUT,
    PUD_OFF, PUD_DOWN, PUD_UP, HIGH, LOW
)
from wpi_access.exceptions import (
    WpiLogicError, WpiRuntimeError, WpiExecutionError, BackendUnavailableError
)


@pytest.fixture
def backend():
    return SimulatedBackend()


@pytest.fixture
def gpio(backend):
    manager = PinStateManager(backend)
    manager.setup('wpi')
    backend.calls.clear()
    return manager


class TestSetup:
    """setup() 테스트"""

    @pytest.mark.parametrize('scheme', ['wpi', 'gpio', 'sys', 'phys'])
    def test_setup_schemes(self, backend, scheme):
        """지원하는 번호 체계"""
        gpio = PinStateManager(backend)

        assert gpio.setup(scheme) == 0
        assert gpio.is_setup is True
        assert gpio.scheme == Scheme(scheme)
        assert backend.calls == [('initialize', scheme)]

    def test_setup_accepts_enum(self, backend):
        """Scheme enum 인자"""
        gpio = PinStateManager(backend)
        gpio.setup(Scheme.GPIO)
        assert gpio.scheme is Scheme.GPIO

    def test_setup_unknown_scheme(self, backend):
        """알 수 없는 번호 체계는 logic error"""
        gpio = PinStateManager(backend)

        with pytest.raises(WpiLogicError):
            gpio.setup('bcm')

        assert backend.calls == []
        assert gpio.is_setup is False

    def test_setup_invalid_type(self, backend):
        """문자열이 아닌 번호 체계"""
        gpio = PinStateManager(backend)
        with pytest.raises(WpiLogicError, match='invalid type for mode'):
            gpio.setup(1)

    def test_setup_twice(self, backend):
        """두 번째 setup 은 logic error"""
        gpio = PinStateManager(backend)
        gpio.setup('wpi')

        with pytest.raises(WpiLogicError, match='already set up'):
            gpio.setup('gpio')
        assert gpio.scheme is Scheme.WPI

    def test_setup_negative_status(self, backend):
        """백엔드 음수 상태는 execution error (실패 메시지 포함)"""
        backend.init_status = -1
        backend.failure_message = 'Unable to open /dev/mem'
        gpio = PinStateManager(backend)

        with pytest.raises(WpiExecutionError) as exc_info:
            gpio.setup('wpi')

        assert 'setup fails' in str(exc_info.value)
        assert 'Unable to open /dev/mem' in str(exc_info.value)
        assert gpio.is_setup is False

    def test_setup_backend_unavailable(self, backend):
        """백엔드 사용 불가는 runtime error"""
        backend.available = False
        gpio = PinStateManager(backend)

        with pytest.raises(WpiRuntimeError):
            gpio.setup('wpi')

    def test_setup_permission_denied(self):
        """권한 부족은 runtime error"""
        backend = MagicMock()
        backend.initialize.side_effect = PermissionError(13, 'Permission denied')
        gpio = PinStateManager(backend)

        with pytest.raises(WpiRuntimeError, match='cannot initialize'):
            gpio.setup('wpi')


class TestPinRange:
    """핀 번호 범위 검증 - 범위 밖이면 logic error, 백엔드 위임 없음"""

    @pytest.mark.parametrize('pin', [-1, 64, 100, -64])
    def test_out_of_range_pins(self, gpio, backend, pin):
        """모든 핀 작업이 logic error"""
        operations = [
            lambda: gpio.pin_mode(pin, OUTPUT),
            lambda: gpio.pull_up_dn_control(pin, PUD_UP),
            lambda: gpio.digital_write(pin, HIGH),
            lambda: gpio.digital_read(pin),
            lambda: gpio.gpio_clock_set(pin, 9500000),
        ]
        for operation in operations:
            with pytest.raises(WpiLogicError, match='invalid value for pin'):
                operation()

        assert backend.calls == []

    @pytest.mark.parametrize('pin', [0, 63])
    def test_boundary_pins(self, gpio, backend, pin):
        """경계값 0, 63 허용"""
        gpio.pin_mode(pin, OUTPUT)
        assert backend.pin_modes[pin] == OUTPUT

    @pytest.mark.parametrize('pin', ['7', 7.0, None, True])
    def test_invalid_pin_type(self, gpio, backend, pin):
        """정수가 아닌 핀 번호"""
        with pytest.raises(WpiLogicError, match='invalid type for pin'):
            gpio.digital_read(pin)
        assert backend.calls == []


class TestPinMode:
    """pin_mode() 테스트"""

    @pytest.mark.parametrize('mode', list(PinMode)[1:])
    def test_all_modes(self, gpio, backend, mode):
        """설정 가능한 모든 모드"""
        gpio.pin_mode(5, mode)

        assert gpio.get_pin(5).mode is mode
        assert backend.calls == [('set_pin_mode', 5, int(mode))]

    @pytest.mark.parametrize('mode', [-1, 7, 99])
    def test_invalid_mode(self, gpio, backend, mode):
        """알 수 없는 모드 (UNSET 포함)"""
        with pytest.raises(WpiLogicError, match='invalid value for mode'):
            gpio.pin_mode(5, mode)
        assert backend.calls == []

    def test_unrestricted_transitions(self, gpio):
        """어떤 모드에서든 다른 모드로 전환 가능"""
        for mode in (INPUT, OUTPUT, PWM_OUTPUT, GPIO_CLOCK, PWM_TONE_OUTPUT, INPUT):
            gpio.pin_mode(3, mode)
            assert gpio.get_pin(3).mode is PinMode(mode)

    def test_state_unchanged_on_backend_failure(self, gpio, backend):
        """백엔드 실패 시 추적 상태 유지"""
        gpio.pin_mode(4, INPUT)
        backend.available = False

        with pytest.raises(WpiRuntimeError):
            gpio.pin_mode(4, OUTPUT)

        assert gpio.get_pin(4).mode is PinMode.INPUT

    def test_unreferenced_pin_is_unset(self, gpio):
        """처음 참조된 핀은 UNSET"""
        pin = gpio.get_pin(42)
        assert pin == Pin(number=42)
        assert pin.mode is PinMode.UNSET
        assert pin.pull is Pull.OFF


class TestPullUpDnControl:
    """pull_up_dn_control() 테스트"""

    @pytest.mark.parametrize('pud', [PUD_OFF, PUD_DOWN, PUD_UP])
    def test_valid_pud(self, gpio, backend, pud):
        gpio.pin_mode(2, INPUT)
        gpio.pull_up_dn_control(2, pud)

        assert backend.pulls[2] == pud
        assert gpio.get_pin(2).pull is Pull(pud)

    @pytest.mark.parametrize('pud', [-1, 3])
    def test_invalid_pud(self, gpio, backend, pud):
        with pytest.raises(WpiLogicError, match='invalid value for pud'):
            gpio.pull_up_dn_control(2, pud)
        assert backend.calls == []

    def test_pull_on_output_pin_is_delegated(self, gpio, backend):
        """INPUT 이 아니어도 위임 (경고만)"""
        gpio.pin_mode(2, OUTPUT)
        gpio.pull_up_dn_control(2, PUD_UP)
        assert backend.pulls[2] == PUD_UP


class TestDigitalWrite:
    """digital_write() 테스트"""

    @pytest.mark.parametrize('value', [1, 2, 255, -1, True])
    def test_nonzero_is_high(self, gpio, backend, value):
        """0이 아닌 모든 값은 HIGH 와 동일한 효과"""
        gpio.pin_mode(0, OUTPUT)
        backend.calls.clear()

        gpio.digital_write(0, value)

        assert backend.calls == [('write_pin', 0, HIGH)]
        assert backend.levels[0] == HIGH
        assert gpio.get_pin(0).level == HIGH

    @pytest.mark.parametrize('value', [0, False])
    def test_zero_is_low(self, gpio, backend, value):
        """정확히 0만 LOW"""
        gpio.pin_mode(0, OUTPUT)
        backend.calls.clear()

        gpio.digital_write(0, value)

        assert backend.calls == [('write_pin', 0, LOW)]
        assert gpio.get_pin(0).level == LOW

    def test_level_in_pin_str(self, gpio):
        """마지막으로 쓴 레벨이 핀 상태 문자열에 표시됨"""
        gpio.pin_mode(0, OUTPUT)
        assert 'level -' in str(gpio.get_pin(0))

        gpio.digital_write(0, 1)
        assert 'level HIGH' in str(gpio.get_pin(0))

        gpio.digital_write(0, 0)
        assert 'level LOW' in str(gpio.get_pin(0))

    def test_requires_output_mode(self, gpio, backend):
        """OUTPUT 모드가 아니면 logic error"""
        gpio.pin_mode(0, INPUT)
        backend.calls.clear()

        with pytest.raises(WpiLogicError, match='not in OUTPUT mode'):
            gpio.digital_write(0, HIGH)
        assert backend.calls == []

    def test_unset_pin_rejected(self, gpio):
        """pin_mode 호출 전 쓰기"""
        with pytest.raises(WpiLogicError, match='current: UNSET'):
            gpio.digital_write(1, HIGH)

    def test_mode_check_disabled(self, backend):
        """enforce_pin_modes=False 면 모드와 관계없이 위임"""
        gpio = PinStateManager(backend, enforce_pin_modes=False)
        gpio.setup('wpi')

        gpio.digital_write(1, HIGH)
        assert backend.levels[1] == HIGH

    def test_invalid_value_type(self, gpio):
        gpio.pin_mode(0, OUTPUT)
        with pytest.raises(WpiLogicError, match='invalid type for value'):
            gpio.digital_write(0, 'HIGH')


class TestDigitalRead:
    """digital_read() 테스트"""

    def test_read_levels(self, gpio, backend):
        gpio.pin_mode(6, INPUT)

        backend.set_input_level(6, 1)
        assert gpio.digital_read(6) == HIGH

        backend.set_input_level(6, 0)
        assert gpio.digital_read(6) == LOW

    def test_read_normalizes_backend_value(self):
        """백엔드가 0/1 이외의 값을 보고해도 0 또는 1"""
        backend = MagicMock()
        backend.initialize.return_value = 0
        backend.read_pin.return_value = 0x10
        gpio = PinStateManager(backend)
        gpio.setup('wpi')

        assert gpio.digital_read(6) == HIGH


class TestGpioClockSet:
    """gpio_clock_set() 테스트"""

    def test_clock_after_pin_mode(self, gpio, backend):
        """pinMode(7, GPIO_CLOCK) 후 9.5 MHz 설정 성공"""
        gpio.pin_mode(7, GPIO_CLOCK)
        gpio.gpio_clock_set(7, 9500000)

        assert backend.clocks[7] == 9500000

    def test_clock_without_pin_mode_is_logic_error(self, gpio, backend):
        """pin_mode 없이 호출하면 logic error (기본 정책)"""
        with pytest.raises(WpiLogicError, match='not in GPIO_CLOCK mode'):
            gpio.gpio_clock_set(7, 9500000)
        assert backend.clocks == {}

    def test_clock_without_pin_mode_delegated_when_not_enforced(self, backend):
        """enforce_pin_modes=False 면 백엔드에 위임"""
        gpio = PinStateManager(backend, enforce_pin_modes=False)
        gpio.setup('wpi')

        gpio.gpio_clock_set(7, 9500000)
        assert backend.clocks[7] == 9500000

    @pytest.mark.parametrize('frequency', [0, -1])
    def test_non_positive_frequency(self, gpio, frequency):
        gpio.pin_mode(7, GPIO_CLOCK)
        with pytest.raises(WpiLogicError, match='invalid value for frequency'):
            gpio.gpio_clock_set(7, frequency)

    def test_no_safe_range_check(self, gpio, backend):
        """안전 범위는 검사하지 않음"""
        gpio.pin_mode(7, GPIO_CLOCK)
        gpio.gpio_clock_set(7, 1)
        gpio.gpio_clock_set(7, 250000000)
        assert backend.clocks[7] == 250000000


class TestBeforeSetup:
    """setup() 전 핀 작업 정책"""

    def test_fail_fast_by_default(self, backend):
        """기본값: logic error, 백엔드 위임 없음"""
        gpio = PinStateManager(backend)

        with pytest.raises(WpiLogicError, match='setup'):
            gpio.pin_mode(0, OUTPUT)
        with pytest.raises(WpiLogicError, match='setup'):
            gpio.digital_read(0)
        assert backend.calls == []

    def test_delegate_when_not_required(self, backend):
        """require_setup=False 면 백엔드에 위임"""
        gpio = PinStateManager(backend, require_setup=False)

        gpio.pin_mode(0, OUTPUT)
        gpio.digital_write(0, HIGH)

        assert backend.levels[0] == HIGH
        assert backend.scheme is None


class TestIndependentManagers:
    """독립 인스턴스는 서로 간섭하지 않음"""

    def test_separate_state(self):
        a = PinStateManager(SimulatedBackend())
        b = PinStateManager(SimulatedBackend())
        a.setup('wpi')
        b.setup('wpi')

        a.pin_mode(0, OUTPUT)

        assert a.get_pin(0).mode is PinMode.OUTPUT
        assert b.get_pin(0).mode is PinMode.UNSET


if __name__ == '__main__':
    pytest.main([__file__, '-v'])
