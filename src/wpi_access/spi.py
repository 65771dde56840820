"""
SPI Session Manager

채널(0/1)별 파일 디스크립터 수명 관리 및 전이중 전송
- setup / setup_mode: 채널 open (재호출 시 새 디스크립터를 얻은 뒤 기존 디스크립터를 닫음)
- get_fd: 채널 디스크립터 조회
- data_rw: 전이중 전송 (버퍼가 수신 데이터로 덮어써짐)
- close: 디스크립터 close (두 번째 close 는 logic error)
"""

import logging
from dataclasses import dataclass, replace
from typing import Dict, List, Optional

from .backend import HardwareBackend
from .constants import (
    SPI_CHANNELS, SPI_MIN_SPEED, SPI_MAX_SPEED, SPI_MODES, SPI_DEFAULT_MODE
)
from .exceptions import WpiError, WpiLogicError, WpiExecutionError, backend_call
from .validation import require_int, require_range, require_member

logger = logging.getLogger(__name__)


@dataclass
class SpiChannel:
    """SPI 채널 세션"""
    channel: int
    speed: int
    mode: int
    fd: int

    @property
    def cpol(self) -> int:
        """클럭 극성 (mode bit 0)"""
        return self.mode & 0x01

    @property
    def cpha(self) -> int:
        """클럭 위상 (mode bit 1)"""
        return (self.mode >> 1) & 0x01

    def __str__(self) -> str:
        return (
            f"SPI{self.channel}: {self.speed} Hz, mode {self.mode} "
            f"(CPOL={self.cpol}, CPHA={self.cpha}), fd={self.fd}"
        )


class SpiSessionManager:
    """
    SPI 세션 관리 클래스

    사용 예:
        spi = SpiSessionManager(backend)
        fd = spi.setup_mode(0, 1000000, 3)

        buf = bytearray([0x9F, 0x00, 0x00, 0x00])
        spi.data_rw(0, buf)   # buf 가 수신 데이터로 바뀜

        spi.close(fd)
    """

    def __init__(self, backend: HardwareBackend):
        """
        Args:
            backend: 하드웨어 백엔드
        """
        self._backend = backend
        self._channels: Dict[int, SpiChannel] = {}

    @property
    def open_fds(self) -> List[int]:
        """열려 있는 SPI 디스크립터 목록"""
        return [session.fd for session in self._channels.values()]

    def setup(self, channel: int, speed: int) -> int:
        """
        SPI 채널 초기화 (CPOL=0, CPHA=0)

        Returns:
            파일 디스크립터
        """
        return self._open('spi.setup', channel, speed, SPI_DEFAULT_MODE)

    def setup_mode(self, channel: int, speed: int, mode: int) -> int:
        """
        SPI 채널 초기화 (동작 모드 지정)

        Args:
            channel: 0 또는 1
            speed: 500000 ~ 32000000 Hz
            mode: 0~3 (bit0 = CPOL, bit1 = CPHA)

        Returns:
            파일 디스크립터

        Raises:
            WpiLogicError: 잘못된 채널/속도/모드
            WpiRuntimeError: 백엔드 사용 불가
            WpiExecutionError: 디스크립터를 얻지 못함
        """
        return self._open('spi.setup_mode', channel, speed, mode)

    def _open(self, op: str, channel: int, speed: int, mode: int) -> int:
        channel = self._check_channel(channel, op)
        speed = require_range(speed, 'speed', op, SPI_MIN_SPEED, SPI_MAX_SPEED)
        mode = require_member(mode, 'mode', op, SPI_MODES)

        with backend_call(op):
            fd = self._backend.spi_open(channel, speed, mode)

        if fd < 0:
            message = "Cannot get file descriptor for spi device"
            failure = self._backend.last_failure()
            if failure:
                message += f" ({failure})"
            raise WpiExecutionError(message, op)

        # 새 디스크립터를 얻은 뒤에만 기존 세션을 교체
        previous = self._channels.get(channel)
        if previous is not None:
            logger.info(f"Reopening SPI{channel}, closing fd {previous.fd}")
            try:
                self._close_session(previous, op)
            except WpiError:
                self._discard_fd(fd, op)
                raise

        session = SpiChannel(channel=channel, speed=speed, mode=mode, fd=fd)
        self._channels[channel] = session
        logger.info(f"Opened {session}")
        return fd

    def get_fd(self, channel: int) -> int:
        """
        채널의 파일 디스크립터 조회

        Raises:
            WpiLogicError: 잘못된 채널 또는 setup 되지 않은 채널
        """
        op = 'spi.get_fd'
        return self._session(self._check_channel(channel, op), op).fd

    def get_channel(self, channel: int) -> Optional[SpiChannel]:
        """채널 세션 스냅샷 (setup 전이면 None)"""
        channel = self._check_channel(channel, 'spi.get_channel')
        session = self._channels.get(channel)
        return replace(session) if session is not None else None

    def data_rw(self, channel: int, buffer: bytearray) -> int:
        """
        전이중 전송

        buffer 의 바이트를 송신하면서 같은 자리에 수신 바이트를 덮어쓴다.

        Args:
            channel: 0 또는 1
            buffer: 송수신 버퍼 (bytearray, 비어 있으면 안 됨)

        Returns:
            전송된 바이트 수 (항상 len(buffer))

        Raises:
            WpiLogicError: 잘못된 채널/버퍼, setup 되지 않은 채널
            WpiExecutionError: 전송 실패 또는 짧은 전송
        """
        op = 'spi.data_rw'
        channel = self._check_channel(channel, op)
        if not isinstance(buffer, (bytearray, memoryview)) or \
                (isinstance(buffer, memoryview) and buffer.readonly):
            raise WpiLogicError("invalid type of argument data (mutable buffer required)", op)
        length = len(buffer)
        if length <= 0:
            raise WpiLogicError("invalid length of data", op)
        session = self._session(channel, op)

        logger.debug(f"SPI{channel} TX ({length} bytes): {bytes(buffer).hex(' ').upper()}")
        with backend_call(op):
            count = self._backend.spi_transfer(session.fd, buffer)

        if count < 0:
            raise WpiExecutionError(f"transfer failed ({count})", op)
        if count != length:
            logger.warning(f"SPI{channel} short transfer: {count}/{length} bytes")
            raise WpiExecutionError(f"short transfer ({count} of {length} bytes)", op)

        logger.debug(f"SPI{channel} RX ({count} bytes): {bytes(buffer).hex(' ').upper()}")
        return count

    def close(self, fd: int) -> None:
        """
        SPI 디스크립터 close

        Raises:
            WpiLogicError: 현재 열린 SPI 디스크립터가 아님 (이중 close 포함)
            WpiExecutionError: OS close 실패
        """
        op = 'spi.close'
        fd = require_int(fd, 'fd', op)
        for session in self._channels.values():
            if session.fd == fd:
                self._close_session(session, op)
                return
        raise WpiLogicError(f"invalid value for fd ({fd}), not an open SPI descriptor", op)

    def close_all(self) -> None:
        """
        열린 모든 채널 close

        실패한 채널은 로그만 남기고 나머지를 계속 닫는다.
        실패한 세션은 열린 상태로 유지된다.
        """
        for session in list(self._channels.values()):
            try:
                self._close_session(session, 'spi.close')
            except WpiError as e:
                logger.error(f"Error closing SPI{session.channel} fd {session.fd}: {e}")

    def _discard_fd(self, fd: int, op: str) -> None:
        # 세션에 등록되지 않은 디스크립터 정리
        try:
            with backend_call(op):
                self._backend.spi_close(fd)
        except WpiError as e:
            logger.error(f"Error closing unused SPI fd {fd}: {e}")

    def _close_session(self, session: SpiChannel, op: str) -> None:
        with backend_call(op):
            res = self._backend.spi_close(session.fd)
        if res != 0:
            raise WpiExecutionError(f"close returned {res}", op)

        del self._channels[session.channel]
        logger.info(f"Closed SPI{session.channel} (fd={session.fd})")

    def _session(self, channel: int, op: str) -> SpiChannel:
        session = self._channels.get(channel)
        if session is None:
            raise WpiLogicError(f"SPI channel {channel} is not set up", op)
        return session

    def _check_channel(self, channel: int, op: str) -> int:
        channel = require_int(channel, 'channel', op)
        if channel not in SPI_CHANNELS:
            raise WpiLogicError("invalid channel value, use 0 or 1", op)
        return channel
