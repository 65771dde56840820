"""
Hardware Diagnostics

보드 하드웨어 점검 CLI (wpi-access-check)
- 라이브러리 버전
- GPIO setup
- SPI 전송
- 시리얼 루프백 ('A' 송신 -> 65 수신)
"""

import argparse
import logging
import sys
from typing import List, Optional

from .config import WiringConfig, load_config
from .constants import SPI_MIN_SPEED, NO_DATA
from .context import WiringContext
from .exceptions import WpiError, WpiRuntimeError
from .serial_port import SerialPort
from .simulated import SimulatedBackend

logger = logging.getLogger(__name__)


LOOPBACK_CHAR = 0x41  # 'A'


def check_spi(ctx: WiringContext, channel: int, speed: int, verbose: bool = False) -> bool:
    """SPI 채널 open, 4바이트 전송, close"""
    print(f"\n[TEST] SPI{channel} transfer at {speed} Hz")
    fd = ctx.spi.setup(channel, speed)
    print(f"  [OK] fd = {fd}")

    buf = bytearray([0x01, 0x80, 0x00, 0x00])
    count = ctx.spi.data_rw(channel, buf)
    print(f"  [OK] {count} bytes transferred")
    if verbose:
        print(f"    RX: {bytes(buf).hex(' ').upper()}")

    ctx.spi.close(fd)
    return True


def check_serial(ctx: WiringContext, device: str, baudrate: int) -> bool:
    """
    시리얼 루프백 점검

    TX 와 RX 가 연결되어 있어야 한다. 최대 serial_timeout 초 블로킹.
    """
    print(f"\n[TEST] Serial loopback on {device} at {baudrate} baud")
    fd = ctx.serial.open(device, baudrate)
    try:
        ctx.serial.flush(fd)
        ctx.serial.put_char(fd, LOOPBACK_CHAR)
        value = ctx.serial.get_char(fd)

        if value == NO_DATA:
            print("  [FAIL] No data received (check TX/RX loopback wiring)")
            return False
        if value != LOOPBACK_CHAR:
            print(f"  [FAIL] Expected 0x{LOOPBACK_CHAR:02X}, got 0x{value:02X}")
            return False

        print(f"  [OK] Received 0x{value:02X}")
        return True
    finally:
        ctx.serial.close(fd)


def run_checks(ctx: WiringContext, args: argparse.Namespace) -> bool:
    """설정된 점검 실행"""
    print(f"\n{'='*60}")
    print("WPI Access Hardware Check")
    print(f"{'='*60}")
    print(f"Backend: {ctx.backend.name}")
    print(f"{'='*60}")

    success = True

    try:
        print("\n[TEST] Library version")
        print(f"  [OK] {ctx.lib_version()}")

        print(f"\n[TEST] GPIO setup ('{args.scheme or ctx.config.scheme}')")
        status = ctx.setup(args.scheme)
        print(f"  [OK] status = {status}")

        if args.spi_channel is not None:
            success &= check_spi(ctx, args.spi_channel, args.spi_speed, args.verbose)

        if args.serial:
            success &= check_serial(ctx, args.serial, args.baud)

    except WpiRuntimeError as e:
        print(f"\n[FAIL] Backend unavailable: {e}")
        print("\nPossible causes:")
        print("  - wiringpi binding not installed (pip install wpi_access[pi])")
        print("  - Not running on a supported board")
        print("  - Missing privileges (GPIO setup needs root unless 'sys' scheme)")
        return False

    except WpiError as e:
        print(f"\n[FAIL] {e.code}: {e}")
        return False

    print(f"\n{'='*60}")
    print("[SUCCESS] All checks passed!" if success else "[FAIL] Some checks failed")
    print(f"{'='*60}\n")
    return success


def list_ports() -> None:
    """사용 가능한 포트 목록 출력"""
    ports = SerialPort.list_ports()

    print("\nAvailable Serial Ports:")
    print("-" * 30)

    if ports:
        for port in ports:
            print(f"  {port}")
    else:
        print("  (No serial ports found)")

    print()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='wpi-access-check',
        description='WPI Access Hardware Check',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s --serial /dev/ttyAMA0          # Serial loopback on ttyAMA0
  %(prog)s --spi-channel 0 -v             # SPI transfer on channel 0
  %(prog)s --simulated --serial /dev/ttyAMA0
  %(prog)s --list                         # List available ports
        """
    )

    parser.add_argument('--config', '-c', type=str, help='YAML configuration file')
    parser.add_argument('--simulated', action='store_true', help='Use the simulated backend')
    parser.add_argument('--scheme', type=str, help="Pin numbering scheme (wpi, gpio, sys, phys)")
    parser.add_argument('--serial', '-s', type=str, help='Serial device for loopback test')
    parser.add_argument('--baud', '-b', type=int, default=9600, help='Serial baud rate (default: 9600)')
    parser.add_argument('--spi-channel', type=int, choices=(0, 1), help='SPI channel to test')
    parser.add_argument(
        '--spi-speed', type=int, default=SPI_MIN_SPEED * 2,
        help='SPI clock in Hz (default: 1000000)'
    )
    parser.add_argument('--list', '-l', action='store_true', help='List available serial ports')
    parser.add_argument('--verbose', '-v', action='store_true', help='Enable verbose output')
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """메인 함수"""
    args = build_parser().parse_args(argv)

    if args.list:
        list_ports()
        return 0

    try:
        config = load_config(args.config) if args.config else WiringConfig()
    except WpiError as e:
        print(f"Error: {e}")
        return 1

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else getattr(logging, config.log_level),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    backend = SimulatedBackend() if args.simulated else None
    with WiringContext(backend=backend, config=config) as ctx:
        success = run_checks(ctx, args)

    return 0 if success else 1


if __name__ == '__main__':
    sys.exit(main())
