#!/usr/bin/env python3
"""
Hardware Check Launcher Script

소스 트리에서 바로 하드웨어 점검 실행

Usage:
    python scripts/check_hardware.py --serial /dev/ttyAMA0
    python scripts/check_hardware.py --simulated --serial /dev/ttyAMA0 --spi-channel 0
"""

import sys
import os

# Add src to path for development
src_path = os.path.join(os.path.dirname(__file__), '..', 'src')
if src_path not in sys.path:
    sys.path.insert(0, src_path)

from wpi_access.diagnostics import main

if __name__ == '__main__':
    sys.exit(main())
