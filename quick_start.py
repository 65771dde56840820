from wpi_access import WiringContext, OUTPUT, GPIO_CLOCK, HIGH

# Context manager 사용 (권장)
with WiringContext() as ctx:
    ctx.setup('wpi')

    # GPIO
    ctx.gpio.pin_mode(0, OUTPUT)
    ctx.gpio.digital_write(0, HIGH)

    ctx.gpio.pin_mode(7, GPIO_CLOCK)
    ctx.gpio.gpio_clock_set(7, 9500000)

    # SPI (수신 데이터가 buf 를 덮어씀)
    ctx.spi.setup(0, 1000000)
    buf = bytearray([0x01, 0x80, 0x00])
    ctx.spi.data_rw(0, buf)
    print(f"SPI RX: {buf.hex(' ')}")

    # Serial (TX-RX 루프백)
    fd = ctx.serial.open('/dev/ttyAMA0', 9600)
    ctx.serial.put_char(fd, 65)
    print(f"Serial RX: {ctx.serial.get_char(fd)}")
