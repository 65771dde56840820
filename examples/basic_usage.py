"""
WPI Access Basic Usage Example

하드웨어 접근 계층 기본 사용 예제
--simulated 옵션을 주면 보드 없이 실행할 수 있다.
"""

import logging

# 로깅 설정
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def make_context(simulated: bool):
    from wpi_access import WiringContext, WiringConfig

    config = WiringConfig(backend='simulated' if simulated else 'native')
    return WiringContext(config=config)


def example_with_context_manager(simulated: bool):
    """
    Context Manager를 사용한 예제 (권장)

    종료 시 열린 SPI/시리얼 디스크립터를 자동으로 닫습니다.
    """
    from wpi_access import OUTPUT, INPUT, PUD_UP, HIGH, NO_DATA

    print(f"\n{'='*50}")
    print("WPI Access Basic Usage Example")
    print(f"{'='*50}\n")

    with make_context(simulated) as ctx:
        # ===== 라이브러리 =====
        print("[Library]")
        print(f"  Version: {ctx.lib_version()}")
        ctx.setup('wpi')

        # ===== GPIO =====
        print("\n[GPIO]")
        ctx.gpio.pin_mode(0, OUTPUT)
        ctx.gpio.digital_write(0, HIGH)
        print(f"  {ctx.gpio.get_pin(0)}")

        ctx.gpio.pin_mode(2, INPUT)
        ctx.gpio.pull_up_dn_control(2, PUD_UP)
        print(f"  Pin 2 level: {ctx.gpio.digital_read(2)}")

        # ===== SPI =====
        print("\n[SPI]")
        fd = ctx.spi.setup_mode(0, 1000000, 0)
        buf = bytearray([0x01, 0x80, 0x00])
        count = ctx.spi.data_rw(0, buf)
        print(f"  {ctx.spi.get_channel(0)}")
        print(f"  {count} bytes, RX: {buf.hex(' ').upper()}")
        ctx.spi.close(fd)

        # ===== Serial =====
        print("\n[Serial]")
        fd = ctx.serial.open('/dev/ttyAMA0', 9600)
        ctx.serial.printf(fd, 'T=%d.%d\r\n', 23, 5)
        print(f"  Available: {ctx.serial.data_avail(fd)}")

        while True:
            value = ctx.serial.get_char(fd)
            if value == NO_DATA:
                break
            print(f"  RX: 0x{value:02X}")

    print("\n[Done] Descriptors closed automatically")


def example_error_handling(simulated: bool):
    """
    에러 처리 예제
    """
    from wpi_access import (
        OUTPUT, HIGH,
        WpiError, WpiRuntimeError, WpiLogicError, WpiExecutionError
    )

    try:
        with make_context(simulated) as ctx:
            ctx.setup('wpi')
            ctx.gpio.pin_mode(0, OUTPUT)
            ctx.gpio.digital_write(0, HIGH)

            # 존재하지 않는 장치
            ctx.serial.open('/dev/ttyXYZ', 9600)

    except WpiRuntimeError as e:
        print(f"Backend unavailable: {e}")
        print("Install the wiringpi binding or use --simulated")

    except WpiLogicError as e:
        print(f"Invalid call: {e}")

    except WpiExecutionError as e:
        print(f"Hardware/OS failure: {e}")

    except WpiError as e:
        print(f"{e.code}: {e}")


def example_read_char(simulated: bool):
    """
    수신 결과를 tri-state 로 구분하는 예제

    get_char 의 NO_DATA 대신 RECEIVED / TIMEOUT / ERROR 를 구분합니다.
    """
    from wpi_access import CharStatus

    with make_context(simulated) as ctx:
        fd = ctx.serial.open('/dev/ttyAMA0', 115200)
        ctx.serial.puts(fd, 'AT\r\n')

        while True:
            result = ctx.serial.read_char(fd, timeout=0.5)
            if result.status is CharStatus.RECEIVED:
                print(f"RX: {result.value!r}")
            elif result.status is CharStatus.TIMEOUT:
                print("Timeout")
                break
            else:
                print(f"Read failed: {result.error}")
                break


def example_list_ports():
    """
    사용 가능한 시리얼 포트 목록 조회
    """
    from wpi_access import SerialSessionManager

    ports = SerialSessionManager.list_devices()

    print("\nAvailable Serial Ports:")
    if ports:
        for port in ports:
            print(f"  - {port}")
    else:
        print("  No serial ports found")


if __name__ == '__main__':
    import argparse

    parser = argparse.ArgumentParser(description='WPI Access Usage Examples')
    parser.add_argument(
        '--example',
        choices=['basic', 'error', 'read', 'ports'],
        default='ports',
        help='Example to run (default: ports)'
    )
    parser.add_argument('--simulated', action='store_true', help='Use the simulated backend')

    args = parser.parse_args()

    if args.example == 'basic':
        example_with_context_manager(args.simulated)
    elif args.example == 'error':
        example_error_handling(args.simulated)
    elif args.example == 'read':
        example_read_char(args.simulated)
    elif args.example == 'ports':
        example_list_ports()
