"""
Native Hardware Backend

실제 보드용 백엔드
- GPIO / SPI: wiringpi Python 바인딩 (pip install wpi_access[pi])
- Serial: pySerial (SerialPort)

wiringpi 모듈은 처음 사용할 때 import 하며, 없으면
BackendUnavailableError 를 올린다 (매니저에서 runtime error 로 분류).
"""

import logging
import os
from importlib import metadata
from typing import Dict, Optional, Tuple

from .backend import HardwareBackend, SERIAL_BAUD_UNSUPPORTED
from .constants import Scheme
from .exceptions import BackendUnavailableError
from .serial_port import SerialPort, SUPPORTED_BAUDRATES

logger = logging.getLogger(__name__)


# scheme -> wiringpi setup 함수 이름
SETUP_FUNCTIONS = {
    Scheme.WPI.value: 'wiringPiSetup',
    Scheme.GPIO.value: 'wiringPiSetupGpio',
    Scheme.SYS.value: 'wiringPiSetupSys',
    Scheme.PHYS.value: 'wiringPiSetupPhys',
}


class NativeBackend(HardwareBackend):
    """
    wiringpi + pySerial 백엔드

    사용 예:
        backend = NativeBackend()
        ctx = WiringContext(backend=backend)
        ctx.setup('wpi')
    """

    name = 'native'

    def __init__(self):
        self._wpi = None
        self._spi_channels: Dict[int, int] = {}   # fd -> channel
        self._ports: Dict[int, SerialPort] = {}   # fd -> port

    def _wiringpi(self):
        """wiringpi 모듈 (지연 import)"""
        if self._wpi is None:
            try:
                import wiringpi
            except ImportError as e:
                raise BackendUnavailableError(f"wiringpi binding not installed ({e})")
            self._wpi = wiringpi
        return self._wpi

    # ===== Library =====

    def version(self) -> Tuple[int, int]:
        self._wiringpi()
        try:
            text = metadata.version('wiringpi')
        except metadata.PackageNotFoundError as e:
            raise BackendUnavailableError(f"wiringpi distribution metadata missing ({e})")
        major, _, rest = text.partition('.')
        minor = rest.split('.')[0] if rest else '0'
        return int(major), int(minor)

    def initialize(self, scheme: str) -> int:
        wpi = self._wiringpi()
        setup_fn = getattr(wpi, SETUP_FUNCTIONS[scheme])
        return setup_fn()

    # ===== GPIO =====

    def set_pin_mode(self, pin: int, mode: int) -> None:
        self._wiringpi().pinMode(pin, mode)

    def set_pull(self, pin: int, pud: int) -> None:
        self._wiringpi().pullUpDnControl(pin, pud)

    def write_pin(self, pin: int, level: int) -> None:
        self._wiringpi().digitalWrite(pin, level)

    def read_pin(self, pin: int) -> int:
        return self._wiringpi().digitalRead(pin)

    def set_clock(self, pin: int, frequency: int) -> None:
        self._wiringpi().gpioClockSet(pin, frequency)

    # ===== SPI =====

    def spi_open(self, channel: int, speed: int, mode: int) -> int:
        fd = self._wiringpi().wiringPiSPISetupMode(channel, speed, mode)
        if fd >= 0:
            self._spi_channels[fd] = channel
        return fd

    def spi_transfer(self, fd: int, buffer: bytearray) -> int:
        channel = self._spi_channels.get(fd)
        if channel is None:
            raise OSError(9, os.strerror(9))  # EBADF

        count, received = self._wiringpi().wiringPiSPIDataRW(channel, bytes(buffer))
        if count > 0:
            buffer[:count] = received[:count]
        return count

    def spi_close(self, fd: int) -> int:
        os.close(fd)
        self._spi_channels.pop(fd, None)
        return 0

    # ===== Serial =====

    def serial_open(self, device: str, baudrate: int) -> int:
        if baudrate not in SUPPORTED_BAUDRATES:
            return SERIAL_BAUD_UNSUPPORTED

        port = SerialPort(device, baudrate)
        try:
            fd = port.open()
        except ValueError as e:
            logger.warning(f"pySerial rejected {device} settings: {e}")
            return SERIAL_BAUD_UNSUPPORTED

        self._ports[fd] = port
        return fd

    def serial_close(self, fd: int) -> int:
        port = self._port(fd)
        port.close()
        del self._ports[fd]
        return 0

    def serial_flush(self, fd: int) -> int:
        self._port(fd).flush()
        return 0

    def serial_write_byte(self, fd: int, value: int) -> int:
        return self._port(fd).write(bytes([value]))

    def serial_write_text(self, fd: int, data: bytes) -> int:
        return self._port(fd).write(data)

    def serial_available(self, fd: int) -> int:
        return self._port(fd).in_waiting

    def serial_read_byte(self, fd: int, timeout: float) -> Optional[int]:
        return self._port(fd).read_byte(timeout)

    def _port(self, fd: int) -> SerialPort:
        port = self._ports.get(fd)
        if port is None:
            raise OSError(9, os.strerror(9))  # EBADF
        return port
