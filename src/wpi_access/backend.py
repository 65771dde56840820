"""
Hardware Backend Interface

매니저가 위임하는 하드웨어 프리미티브 계약
실제 레지스터/드라이버 구현은 이 계약 뒤에 숨겨진다.

규칙:
- 상태를 반환하는 프리미티브는 실패 시 음수를 반환한다.
- OS 레벨 실패는 OSError / serial.SerialException 으로 올려도 된다.
- 네이티브 계층을 찾지 못하면 BackendUnavailableError 를 올린다.
- serial_read_byte 는 타임아웃 시 None 을 반환한다.
"""

from abc import ABC, abstractmethod
from typing import Optional, Tuple

# serial_open() 실패 코드
SERIAL_OPEN_FAILED = -1
SERIAL_BAUD_UNSUPPORTED = -2


class HardwareBackend(ABC):
    """하드웨어 백엔드 추상 클래스"""

    name = 'abstract'

    # ===== Library =====

    @abstractmethod
    def version(self) -> Tuple[int, int]:
        """네이티브 라이브러리 버전 (major, minor)"""

    @abstractmethod
    def initialize(self, scheme: str) -> int:
        """
        핀 번호 체계 선택 및 초기화

        Args:
            scheme: 'wpi', 'gpio', 'sys', 'phys'

        Returns:
            상태 코드 (0 이상 성공, 음수 실패)
        """

    def last_failure(self) -> str:
        """마지막 실패 메시지 (없으면 빈 문자열)"""
        return ''

    # ===== GPIO =====

    @abstractmethod
    def set_pin_mode(self, pin: int, mode: int) -> None:
        """핀 모드 설정"""

    @abstractmethod
    def set_pull(self, pin: int, pud: int) -> None:
        """풀업/풀다운 설정"""

    @abstractmethod
    def write_pin(self, pin: int, level: int) -> None:
        """핀 레벨 쓰기 (level은 0 또는 1)"""

    @abstractmethod
    def read_pin(self, pin: int) -> int:
        """핀 레벨 읽기"""

    @abstractmethod
    def set_clock(self, pin: int, frequency: int) -> None:
        """GPIO 클럭 주파수 설정 (Hz)"""

    # ===== SPI =====

    @abstractmethod
    def spi_open(self, channel: int, speed: int, mode: int) -> int:
        """SPI 채널 open, 파일 디스크립터 또는 음수 반환"""

    @abstractmethod
    def spi_transfer(self, fd: int, buffer: bytearray) -> int:
        """
        전이중 전송

        buffer 내용을 송신하면서 수신 바이트로 덮어쓴다.

        Returns:
            전송된 바이트 수 (실패 시 음수)
        """

    @abstractmethod
    def spi_close(self, fd: int) -> int:
        """SPI 디스크립터 close, 0 성공"""

    # ===== Serial =====

    @abstractmethod
    def serial_open(self, device: str, baudrate: int) -> int:
        """
        시리얼 장치 open (raw 모드, 8N1)

        Returns:
            파일 디스크립터, 또는 SERIAL_OPEN_FAILED / SERIAL_BAUD_UNSUPPORTED
        """

    @abstractmethod
    def serial_close(self, fd: int) -> int:
        """시리얼 장치 close, 0 성공"""

    @abstractmethod
    def serial_flush(self, fd: int) -> int:
        """입출력 버퍼 폐기, 0 성공"""

    @abstractmethod
    def serial_write_byte(self, fd: int, value: int) -> int:
        """1바이트 송신, 송신 바이트 수 반환"""

    @abstractmethod
    def serial_write_text(self, fd: int, data: bytes) -> int:
        """바이트열 송신, 송신 바이트 수 반환"""

    @abstractmethod
    def serial_available(self, fd: int) -> int:
        """수신 대기 바이트 수 (실패 시 음수)"""

    @abstractmethod
    def serial_read_byte(self, fd: int, timeout: float) -> Optional[int]:
        """
        1바이트 수신 (최대 timeout 초 블로킹)

        Returns:
            0~255, 타임아웃 시 None
        """
