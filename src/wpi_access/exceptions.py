"""
WPI Access Exceptions

오류 분류기 (Error Classifier)
- Runtime error: 백엔드/네이티브 계층 자체를 사용할 수 없음
- Logic error: 호출자의 전제조건 위반 (잘못된 핀/채널/디스크립터, 범위 초과)
- Execution error: 올바른 요청이었지만 실행 중 실패 (OS 레벨 open 실패, 짧은 전송)
"""

from contextlib import contextmanager
from enum import Enum
from typing import Iterator, Optional

import serial


class ErrorKind(Enum):
    """오류 종류"""
    RUNTIME = 'runtime'
    LOGIC = 'logic'
    EXECUTION = 'execution'


class WpiError(Exception):
    """WPI Access 기본 예외"""

    kind: ErrorKind = ErrorKind.RUNTIME
    code: str = 'ERR_WPI'

    def __init__(self, detail: str = '', operation: Optional[str] = None):
        self.detail = detail
        self.operation = operation
        super().__init__(self._format())

    def _format(self) -> str:
        parts = [p for p in (self.operation, self.detail) if p]
        if not parts:
            return f"{self.kind.value} error"
        return f"{self.kind.value} error ({', '.join(parts)})"


class WpiRuntimeError(WpiError):
    """백엔드를 사용할 수 없거나 초기화 실패"""
    kind = ErrorKind.RUNTIME
    code = 'ERR_WPI_RUNTIME'


class WpiLogicError(WpiError):
    """호출자 전제조건 위반"""
    kind = ErrorKind.LOGIC
    code = 'ERR_WPI_LOGICERROR'


class WpiExecutionError(WpiError):
    """실행 시점 하드웨어/OS 실패"""
    kind = ErrorKind.EXECUTION
    code = 'ERR_WPI_EXECUTIONERROR'


class ConfigError(WpiLogicError):
    """설정 파일/값 오류"""
    pass


class BackendUnavailableError(Exception):
    """
    백엔드 구현이 네이티브 계층을 찾지 못했을 때 발생

    백엔드 내부에서만 사용하며, 매니저에 도달하기 전에
    WpiRuntimeError로 분류된다.
    """
    pass


def classify(exc: BaseException, operation: Optional[str] = None) -> WpiError:
    """
    백엔드 예외를 오류 분류 체계로 변환

    Args:
        exc: 백엔드에서 발생한 예외
        operation: 실패한 작업 이름 (예: 'spi.setup')

    Returns:
        분류된 WpiError 인스턴스 (이미 분류된 예외는 그대로 반환)
    """
    if isinstance(exc, WpiError):
        if exc.operation is None and operation is not None:
            exc.operation = operation
            exc.args = (exc._format(),)
        return exc

    if isinstance(exc, (BackendUnavailableError, ImportError)):
        return WpiRuntimeError(f"backend unavailable: {exc}", operation)

    if isinstance(exc, serial.SerialTimeoutException):
        return WpiExecutionError(f"write timeout: {exc}", operation)

    if isinstance(exc, (serial.SerialException, OSError)):
        errno = getattr(exc, 'errno', None)
        if errno is not None:
            return WpiExecutionError(f"IOError {errno} ({exc.strerror})", operation)
        return WpiExecutionError(f"IOError ({exc})", operation)

    return WpiRuntimeError(f"{type(exc).__name__}: {exc}", operation)


@contextmanager
def backend_call(operation: str) -> Iterator[None]:
    """
    백엔드 위임 구간을 감싸 예외를 분류

    사용 예:
        with backend_call('gpio.pin_mode'):
            self._backend.set_pin_mode(pin, mode)
    """
    try:
        yield
    except WpiError as e:
        raise classify(e, operation)
    except Exception as e:
        raise classify(e, operation) from e
