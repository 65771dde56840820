"""
Serial Port Layer

pySerial 기반 시리얼 포트 래퍼 (NativeBackend 에서 사용)
wiringSerial 설정과 동일: raw 모드, 8N1, 흐름제어 없음, 읽기 타임아웃 10초
"""

import logging
from typing import Optional, List

import serial
import serial.tools.list_ports

from .constants import SERIAL_READ_TIMEOUT

logger = logging.getLogger(__name__)


# Default serial settings (wiringSerial 과 동일)
DEFAULT_BYTESIZE = serial.EIGHTBITS
DEFAULT_PARITY = serial.PARITY_NONE
DEFAULT_STOPBITS = serial.STOPBITS_ONE
DEFAULT_TIMEOUT = SERIAL_READ_TIMEOUT
DEFAULT_WRITE_TIMEOUT = None  # blocking write

# wiringSerial 이 termios 로 설정할 수 있는 보레이트
SUPPORTED_BAUDRATES = (
    50, 75, 110, 134, 150, 200, 300, 600, 1200, 1800, 2400, 4800,
    9600, 19200, 38400, 57600, 115200, 230400,
    460800, 500000, 576000, 921600, 1000000, 1152000, 1500000,
    2000000, 2500000, 3000000, 3500000, 4000000,
)

# 단일 보드 컴퓨터의 UART 장치 우선순위
PREFERRED_PORTS = ('/dev/serial0', '/dev/ttyAMA0', '/dev/ttyS0', '/dev/ttyUSB0')


class SerialPort:
    """
    시리얼 포트 한 개를 감싸는 클래스

    Context manager 지원:
        with SerialPort('/dev/ttyAMA0', 9600) as port:
            port.write(b'A')
            value = port.read_byte()
    """

    def __init__(
        self,
        device: str,
        baudrate: int,
        bytesize: int = DEFAULT_BYTESIZE,
        parity: str = DEFAULT_PARITY,
        stopbits: float = DEFAULT_STOPBITS,
        timeout: float = DEFAULT_TIMEOUT,
        write_timeout: Optional[float] = DEFAULT_WRITE_TIMEOUT
    ):
        """
        Args:
            device: 장치 경로 ('/dev/ttyAMA0', '/dev/ttyUSB0', ...)
            baudrate: 보레이트
            bytesize: 데이터 비트 (기본값: 8)
            parity: 패리티 (기본값: None)
            stopbits: 스톱 비트 (기본값: 1)
            timeout: 읽기 타임아웃 (초, 기본값: 10)
            write_timeout: 쓰기 타임아웃 (None이면 블로킹)
        """
        self.device = device
        self.baudrate = baudrate
        self.bytesize = bytesize
        self.parity = parity
        self.stopbits = stopbits
        self.timeout = timeout
        self.write_timeout = write_timeout

        self._serial: Optional[serial.Serial] = None

    @property
    def is_open(self) -> bool:
        """열림 상태 확인"""
        return self._serial is not None and self._serial.is_open

    def open(self) -> int:
        """
        포트 열기 (raw 모드)

        Returns:
            OS 파일 디스크립터

        Raises:
            serial.SerialException: 장치를 열 수 없을 때
            ValueError: pySerial 이 설정값을 거부할 때
        """
        self._serial = serial.Serial(
            port=self.device,
            baudrate=self.baudrate,
            bytesize=self.bytesize,
            parity=self.parity,
            stopbits=self.stopbits,
            timeout=self.timeout,
            write_timeout=self.write_timeout,
            xonxoff=False,
            rtscts=False,
            dsrdtr=False
        )
        fd = self._serial.fileno()
        logger.info(f"Opened {self.device} at {self.baudrate} baud (fd={fd})")
        return fd

    def close(self) -> None:
        """포트 닫기"""
        if self._serial is None:
            return
        try:
            if self._serial.is_open:
                self._serial.close()
                logger.info(f"Closed {self.device}")
        finally:
            self._serial = None

    def flush(self) -> None:
        """수신 대기 데이터와 송신 대기 데이터를 모두 폐기"""
        self._require_open()
        self._serial.reset_input_buffer()
        self._serial.reset_output_buffer()

    def write(self, data: bytes) -> int:
        """
        데이터 전송

        Returns:
            전송된 바이트 수
        """
        self._require_open()
        written = self._serial.write(data)
        self._serial.flush()
        logger.debug(f"TX {self.device} ({written} bytes): {data.hex(' ').upper()}")
        return written

    @property
    def in_waiting(self) -> int:
        """수신 버퍼의 바이트 수"""
        self._require_open()
        return self._serial.in_waiting

    def read_byte(self, timeout: Optional[float] = None) -> Optional[int]:
        """
        1바이트 수신

        Args:
            timeout: 수신 타임아웃 (None이면 포트 기본값)

        Returns:
            0~255, 타임아웃 시 None
        """
        self._require_open()
        original_timeout = self._serial.timeout
        if timeout is not None:
            self._serial.timeout = timeout

        try:
            data = self._serial.read(1)
        finally:
            self._serial.timeout = original_timeout

        if not data:
            return None

        logger.debug(f"RX {self.device}: {data.hex().upper()}")
        return data[0]

    def _require_open(self) -> None:
        if not self.is_open:
            raise serial.SerialException(f"{self.device} is not open")

    def __enter__(self) -> 'SerialPort':
        """Context manager entry"""
        self.open()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Context manager exit"""
        self.close()

    @staticmethod
    def list_ports() -> List[str]:
        """
        사용 가능한 시리얼 포트 목록 조회

        Returns:
            장치 경로 목록
        """
        ports = serial.tools.list_ports.comports()
        return [port.device for port in ports]

    @staticmethod
    def get_default_port() -> Optional[str]:
        """
        보드 UART 기본 포트 반환

        Returns:
            /dev/serial0, /dev/ttyAMA0, /dev/ttyS0, /dev/ttyUSB0 순서로 우선,
            없으면 첫 번째 포트
        """
        ports = SerialPort.list_ports()

        if not ports:
            return None

        for preferred in PREFERRED_PORTS:
            if preferred in ports:
                return preferred
        return ports[0]
