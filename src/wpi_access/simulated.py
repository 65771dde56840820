"""
Simulated Hardware Backend

하드웨어 없이 테스트/개발하기 위한 메모리 기반 백엔드
- 핀 모드/레벨/풀 설정을 메모리에 유지
- SPI: 기본 루프백 (MOSI -> MISO), responder 로 응답 교체 가능
- Serial: 기본 루프백 (TX -> RX), feed() 로 수신 데이터 주입
- 모든 프리미티브 호출은 calls 리스트에 기록
"""

import errno
import logging
import os
import time
from collections import deque
from typing import Callable, Deque, Dict, Iterable, List, Optional, Set, Tuple

from .backend import HardwareBackend, SERIAL_OPEN_FAILED, SERIAL_BAUD_UNSUPPORTED
from .constants import PinMode, Pull, LOW
from .exceptions import BackendUnavailableError
from .serial_port import SUPPORTED_BAUDRATES

logger = logging.getLogger(__name__)


SIMULATED_VERSION = (2, 70)
DEFAULT_DEVICES = ('/dev/ttyAMA0', '/dev/serial0', '/dev/ttyS0', '/dev/ttyUSB0')
FIRST_FD = 3


class SimulatedBackend(HardwareBackend):
    """
    시뮬레이션 백엔드

    사용 예:
        backend = SimulatedBackend()
        ctx = WiringContext(backend=backend)
        fd = ctx.serial.open('/dev/ttyAMA0', 9600)
        ctx.serial.put_char(fd, 65)
        ctx.serial.get_char(fd)   # 65 (loopback)
    """

    name = 'simulated'

    def __init__(
        self,
        devices: Iterable[str] = DEFAULT_DEVICES,
        loopback: bool = True,
        spi_responder: Optional[Callable[[int, bytes], bytes]] = None,
        sleep: Callable[[float], None] = time.sleep
    ):
        """
        Args:
            devices: open 가능한 시리얼 장치 경로
            loopback: True면 시리얼 송신 바이트가 같은 장치의 수신 버퍼로 들어감
            spi_responder: (channel, tx) -> rx 함수 (None이면 루프백)
            sleep: 수신 타임아웃 대기에 사용할 함수
        """
        self.devices: Set[str] = set(devices)
        self.loopback = loopback
        self.spi_responder = spi_responder
        self._sleep = sleep

        # Fault injection
        self.available = True
        self.init_status = 0
        self.failure_message = ''
        self.spi_open_result: Optional[int] = None
        self.spi_transfer_limit: Optional[int] = None
        self.serial_available_fault: Set[int] = set()

        self.calls: List[Tuple] = []
        self.scheme: Optional[str] = None

        self.pin_modes: Dict[int, int] = {}
        self.pulls: Dict[int, int] = {}
        self.levels: Dict[int, int] = {}
        self.clocks: Dict[int, int] = {}

        self.spi_fds: Dict[int, Tuple[int, int, int]] = {}   # fd -> (channel, speed, mode)
        self.serial_fds: Dict[int, Tuple[str, int]] = {}     # fd -> (device, baudrate)
        self.tx: Dict[int, bytearray] = {}
        self._rx: Dict[int, Deque[int]] = {}
        self._next_fd = FIRST_FD

    def _record(self, *call) -> None:
        if not self.available:
            raise BackendUnavailableError("simulated backend switched off")
        self.calls.append(call)

    def _allocate_fd(self) -> int:
        fd = self._next_fd
        self._next_fd += 1
        return fd

    # ===== Library =====

    def version(self) -> Tuple[int, int]:
        self._record('version')
        return SIMULATED_VERSION

    def initialize(self, scheme: str) -> int:
        self._record('initialize', scheme)
        if self.init_status >= 0:
            self.scheme = scheme
        return self.init_status

    def last_failure(self) -> str:
        return self.failure_message

    # ===== GPIO =====

    def set_pin_mode(self, pin: int, mode: int) -> None:
        self._record('set_pin_mode', pin, mode)
        self.pin_modes[pin] = mode
        logger.debug(f"Simulated: pin {pin} mode {PinMode(mode).name}")

    def set_pull(self, pin: int, pud: int) -> None:
        self._record('set_pull', pin, pud)
        self.pulls[pin] = pud
        if pud == Pull.UP and pin not in self.levels:
            self.levels[pin] = 1

    def write_pin(self, pin: int, level: int) -> None:
        self._record('write_pin', pin, level)
        self.levels[pin] = level

    def read_pin(self, pin: int) -> int:
        self._record('read_pin', pin)
        return self.levels.get(pin, LOW)

    def set_clock(self, pin: int, frequency: int) -> None:
        self._record('set_clock', pin, frequency)
        self.clocks[pin] = frequency

    def set_input_level(self, pin: int, level: int) -> None:
        """입력 핀 레벨 강제 설정 (테스트용)"""
        self.levels[pin] = 1 if level else 0

    # ===== SPI =====

    def spi_open(self, channel: int, speed: int, mode: int) -> int:
        self._record('spi_open', channel, speed, mode)
        if self.spi_open_result is not None and self.spi_open_result < 0:
            return self.spi_open_result
        fd = self._allocate_fd()
        self.spi_fds[fd] = (channel, speed, mode)
        return fd

    def spi_transfer(self, fd: int, buffer: bytearray) -> int:
        self._record('spi_transfer', fd, bytes(buffer))
        if fd not in self.spi_fds:
            raise OSError(9, os.strerror(9))

        channel = self.spi_fds[fd][0]
        tx = bytes(buffer)
        rx = self.spi_responder(channel, tx) if self.spi_responder else tx
        if len(rx) != len(tx):
            # 전이중: 송신 바이트마다 수신 바이트가 하나씩
            raise OSError(errno.EIO, f"responder returned {len(rx)} bytes for {len(tx)}")

        count = len(tx)
        if self.spi_transfer_limit is not None:
            count = min(count, self.spi_transfer_limit)
        buffer[:count] = rx[:count]
        return count

    def spi_close(self, fd: int) -> int:
        self._record('spi_close', fd)
        if fd not in self.spi_fds:
            raise OSError(9, os.strerror(9))
        del self.spi_fds[fd]
        return 0

    # ===== Serial =====

    def serial_open(self, device: str, baudrate: int) -> int:
        self._record('serial_open', device, baudrate)
        if baudrate not in SUPPORTED_BAUDRATES:
            return SERIAL_BAUD_UNSUPPORTED
        if device not in self.devices:
            self.failure_message = f"{device}: No such file or directory"
            return SERIAL_OPEN_FAILED

        fd = self._allocate_fd()
        self.serial_fds[fd] = (device, baudrate)
        self.tx[fd] = bytearray()
        self._rx[fd] = deque()
        return fd

    def serial_close(self, fd: int) -> int:
        self._record('serial_close', fd)
        self._check_serial(fd)
        del self.serial_fds[fd]
        del self._rx[fd]
        del self.tx[fd]
        return 0

    def serial_flush(self, fd: int) -> int:
        self._record('serial_flush', fd)
        self._check_serial(fd)
        self._rx[fd].clear()
        return 0

    def serial_write_byte(self, fd: int, value: int) -> int:
        self._record('serial_write_byte', fd, value)
        return self._transmit(fd, bytes([value]))

    def serial_write_text(self, fd: int, data: bytes) -> int:
        self._record('serial_write_text', fd, data)
        return self._transmit(fd, data)

    def serial_available(self, fd: int) -> int:
        self._record('serial_available', fd)
        self._check_serial(fd)
        if fd in self.serial_available_fault:
            return -1
        return len(self._rx[fd])

    def serial_read_byte(self, fd: int, timeout: float) -> Optional[int]:
        self._record('serial_read_byte', fd, timeout)
        self._check_serial(fd)
        if not self._rx[fd]:
            self._sleep(timeout)
            return None
        return self._rx[fd].popleft()

    def feed(self, fd: int, data: bytes) -> None:
        """수신 버퍼에 데이터 주입 (테스트용)"""
        self._check_serial(fd)
        self._rx[fd].extend(data)

    def _transmit(self, fd: int, data: bytes) -> int:
        self._check_serial(fd)
        self.tx[fd].extend(data)
        if self.loopback:
            self._rx[fd].extend(data)
        return len(data)

    def _check_serial(self, fd: int) -> None:
        if fd not in self.serial_fds:
            raise OSError(9, os.strerror(9))
