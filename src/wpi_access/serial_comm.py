"""
Serial Session Manager

시리얼 장치 세션(디스크립터) 수명 관리 및 바이트/문자열 I/O
wiringSerial 과 동일: raw 모드, 읽기 타임아웃 10초
"""

import logging
from dataclasses import dataclass, replace
from enum import Enum
from typing import Dict, List, Optional, Union

from .backend import HardwareBackend, SERIAL_BAUD_UNSUPPORTED
from .constants import SERIAL_READ_TIMEOUT, NO_DATA
from .exceptions import (
    WpiError, WpiLogicError, WpiExecutionError, backend_call
)
from .serial_port import SerialPort
from .validation import require_int, require_range

logger = logging.getLogger(__name__)


DEFAULT_ENCODING = 'utf-8'


class CharStatus(Enum):
    """read_char() 결과 상태"""
    RECEIVED = 'RECEIVED'
    TIMEOUT = 'TIMEOUT'
    ERROR = 'ERROR'


@dataclass
class CharResult:
    """
    1바이트 수신 결과

    "데이터 없음"(TIMEOUT)과 "오류"(ERROR)를 구분한다.
    """
    status: CharStatus
    value: Optional[int] = None
    error: Optional[WpiError] = None

    @property
    def received(self) -> bool:
        return self.status is CharStatus.RECEIVED

    def as_int(self) -> int:
        """수신 값, 수신하지 못했으면 NO_DATA (-1)"""
        return self.value if self.status is CharStatus.RECEIVED else NO_DATA


@dataclass
class SerialSession:
    """열린 시리얼 장치 세션"""
    fd: int
    device: str
    baudrate: int

    def __str__(self) -> str:
        return f"{self.device} at {self.baudrate} baud (fd={self.fd})"


class SerialSessionManager:
    """
    시리얼 세션 관리 클래스

    사용 예:
        serial = SerialSessionManager(backend)
        fd = serial.open('/dev/ttyAMA0', 9600)
        serial.put_char(fd, 65)
        value = serial.get_char(fd)     # 65 또는 NO_DATA (10초 타임아웃)
        serial.close(fd)

    get_char() 는 최대 10초 동안 호출 스레드를 블로킹하며 취소할 수 없다.
    """

    def __init__(
        self,
        backend: HardwareBackend,
        timeout: float = SERIAL_READ_TIMEOUT,
        encoding: str = DEFAULT_ENCODING
    ):
        """
        Args:
            backend: 하드웨어 백엔드
            timeout: get_char() 수신 타임아웃 (초, 기본값: 10)
            encoding: puts()/printf() 문자열 인코딩
        """
        self._backend = backend
        self.timeout = timeout
        self.encoding = encoding
        self._sessions: Dict[int, SerialSession] = {}

    @property
    def open_fds(self) -> List[int]:
        """열려 있는 시리얼 디스크립터 목록"""
        return list(self._sessions)

    def is_open(self, fd: int) -> bool:
        return fd in self._sessions

    def get_session(self, fd: int) -> Optional[SerialSession]:
        """세션 스냅샷 (없으면 None)"""
        session = self._sessions.get(fd)
        return replace(session) if session is not None else None

    def open(self, device: str, baudrate: int) -> int:
        """
        시리얼 장치 open

        raw 모드(문자 단위, 변환 없음), 읽기 타임아웃 10초로 설정된다.

        Args:
            device: 장치 경로 (예: '/dev/ttyAMA0')
            baudrate: 보레이트

        Returns:
            파일 디스크립터 (0 이상)

        Raises:
            WpiLogicError: 빈 장치 경로, 0 이하 보레이트
            WpiRuntimeError: 백엔드 사용 불가
            WpiExecutionError: 장치를 열 수 없거나 지원하지 않는 보레이트
        """
        op = 'serial.open'
        if not isinstance(device, str):
            raise WpiLogicError("invalid type of argument device", op)
        if not device:
            raise WpiLogicError("invalid device value", op)
        baudrate = require_int(baudrate, 'baudrate', op)
        if baudrate <= 0:
            raise WpiLogicError(f"invalid baudrate value ({baudrate})", op)

        with backend_call(op):
            fd = self._backend.serial_open(device, baudrate)

        if fd == SERIAL_BAUD_UNSUPPORTED:
            raise WpiExecutionError(f"unsupported baudrate value ({baudrate})", op)
        if fd < 0:
            message = f"cannot open {device}"
            failure = self._backend.last_failure()
            if failure:
                message += f" ({failure})"
            raise WpiExecutionError(message, op)

        session = SerialSession(fd=fd, device=device, baudrate=baudrate)
        self._sessions[fd] = session
        logger.info(f"Opened serial {session}")
        return fd

    def close(self, fd: int) -> None:
        """
        디스크립터 close

        Raises:
            WpiLogicError: 이미 닫혔거나 알 수 없는 디스크립터
            WpiExecutionError: OS close 실패
        """
        op = 'serial.close'
        session = self._session(fd, op)

        with backend_call(op):
            res = self._backend.serial_close(session.fd)
        if res != 0:
            raise WpiExecutionError(f"close returned {res}", op)

        del self._sessions[session.fd]
        logger.info(f"Closed serial {session.device} (fd={session.fd})")

    def close_all(self) -> None:
        """
        열린 모든 세션 close

        실패한 세션은 로그만 남기고 열린 상태로 유지한다.
        """
        for fd in list(self._sessions):
            try:
                self.close(fd)
            except WpiError as e:
                logger.error(f"Error closing serial fd {fd}: {e}")

    def flush(self, fd: int) -> None:
        """수신 대기 데이터와 송신 대기 데이터를 모두 폐기"""
        op = 'serial.flush'
        session = self._session(fd, op)

        with backend_call(op):
            res = self._backend.serial_flush(session.fd)
        if res != 0:
            raise WpiExecutionError(f"flush returned {res}", op)

    def put_char(self, fd: int, character: int) -> None:
        """
        1바이트 송신

        Args:
            fd: 디스크립터
            character: 0~255

        Raises:
            WpiLogicError: 0~255 범위 밖 값, 알 수 없는 디스크립터
            WpiExecutionError: 정확히 1바이트가 송신되지 않음
        """
        op = 'serial.put_char'
        session = self._session(fd, op)
        character = require_range(character, 'character', op, 0, 255)

        with backend_call(op):
            res = self._backend.serial_write_byte(session.fd, character)
        if res != 1:
            raise WpiExecutionError(f"write returns {res} (expect 1)", op)

    def puts(self, fd: int, data: Union[str, bytes]) -> int:
        """
        문자열 송신

        NUL 종료 문자열로 취급하여 첫 '\\0' 이후는 송신하지 않는다.

        Returns:
            송신된 바이트 수
        """
        return self._send_text('serial.puts', fd, data)

    def printf(self, fd: int, fmt: Union[str, bytes], *args) -> int:
        """
        포맷 문자열 송신

        args 가 있으면 fmt % args 를 적용한 뒤 송신, 없으면 fmt 를 그대로 송신.

        Returns:
            송신된 바이트 수
        """
        op = 'serial.printf'
        if args:
            try:
                fmt = fmt % args
            except (TypeError, ValueError) as e:
                raise WpiLogicError(f"invalid format arguments ({e})", op)
        return self._send_text(op, fd, fmt)

    def _send_text(self, op: str, fd: int, data: Union[str, bytes]) -> int:
        session = self._session(fd, op)
        if isinstance(data, str):
            payload = data.split('\0', 1)[0].encode(self.encoding)
        elif isinstance(data, (bytes, bytearray)):
            payload = bytes(data).split(b'\0', 1)[0]
        else:
            raise WpiLogicError("invalid type for data", op)

        with backend_call(op):
            count = self._backend.serial_write_text(session.fd, payload)
        if count < 0:
            raise WpiExecutionError(f"write returns {count}", op)
        if count != len(payload):
            logger.warning(f"Short write on {session.device}: {count}/{len(payload)} bytes")
        return count

    def data_avail(self, fd: int) -> int:
        """
        수신 대기 바이트 수

        Returns:
            0 이상 (데이터 없으면 0)

        Raises:
            WpiExecutionError: 디스크립터/백엔드 오류 (0 과 구분됨)
        """
        op = 'serial.data_avail'
        session = self._session(fd, op)

        with backend_call(op):
            count = self._backend.serial_available(session.fd)
        if count < 0:
            raise WpiExecutionError(f"data available query returns {count}", op)
        return count

    def read_char(self, fd: int, timeout: Optional[float] = None) -> CharResult:
        """
        1바이트 수신 (최대 timeout 초 블로킹)

        Args:
            fd: 디스크립터
            timeout: 수신 타임아웃 (None이면 self.timeout, 기본 10초)

        Returns:
            CharResult (RECEIVED / TIMEOUT / ERROR)

        Raises:
            WpiLogicError: 알 수 없는 디스크립터, 잘못된 타임아웃
            WpiRuntimeError: 백엔드 사용 불가
        """
        op = 'serial.read_char'
        session = self._session(fd, op)
        if timeout is None:
            timeout = self.timeout
        if isinstance(timeout, bool) or not isinstance(timeout, (int, float)) or timeout <= 0:
            raise WpiLogicError(f"invalid timeout value ({timeout!r})", op)

        try:
            with backend_call(op):
                value = self._backend.serial_read_byte(session.fd, timeout)
        except WpiExecutionError as e:
            logger.error(f"Read failed on {session.device}: {e}")
            return CharResult(CharStatus.ERROR, error=e)

        if value is None:
            logger.debug(f"No data on {session.device} within {timeout}s")
            return CharResult(CharStatus.TIMEOUT)
        if not 0 <= value <= 255:
            return CharResult(
                CharStatus.ERROR,
                error=WpiExecutionError(f"read returns {value}", op)
            )
        return CharResult(CharStatus.RECEIVED, value=value)

    def get_char(self, fd: int) -> int:
        """
        1바이트 수신 (최대 10초 블로킹)

        Returns:
            0~255, 타임아웃 시 NO_DATA (-1) (오류가 아님)

        Raises:
            WpiExecutionError: 수신 중 백엔드 오류
        """
        result = self.read_char(fd, self.timeout)
        if result.status is CharStatus.ERROR:
            raise result.error
        return result.as_int()

    def _session(self, fd: int, op: str) -> SerialSession:
        fd = require_int(fd, 'fd', op)
        session = self._sessions.get(fd)
        if session is None:
            raise WpiLogicError(f"invalid fd value ({fd}), not an open serial descriptor", op)
        return session

    @staticmethod
    def list_devices() -> List[str]:
        """사용 가능한 시리얼 장치 목록"""
        return SerialPort.list_ports()
