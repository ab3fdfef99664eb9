import struct

import pytest

from unipager.gpio import Direction, Gpio, MemGpioPin, SysFsGpioPin


def register(base, index):
    return struct.unpack_from("<I", base, index * 4)[0]


def store(base, index, value):
    struct.pack_into("<I", base, index * 4, value)


def test_set_high_and_low_delegate_to_set():
    base = bytearray(0x1000)
    pin = MemGpioPin(base, 6, Direction.OUTPUT)
    pin.set_high()
    assert register(base, 7) == 1 << 6
    assert register(base, 10) == 0
    pin.set_low()
    assert register(base, 10) == 1 << 6


def test_mem_output_configures_function_select():
    base = bytearray(0x1000)
    MemGpioPin(base, 17, Direction.OUTPUT)
    value = register(base, 1)
    assert (value >> 21) & 0b111 == 0b001
    assert value & ~(0b111 << 21) == 0


def test_mem_direction_preserves_other_pins():
    base = bytearray(0x1000)
    store(base, 1, 0xFFFFFFFF)
    MemGpioPin(base, 17, Direction.INPUT)
    value = register(base, 1)
    assert value & (0b111 << 21) == 0
    assert value | (0b111 << 21) == 0xFFFFFFFF


def test_mem_set_writes_set_and_clear_registers():
    base = bytearray(0x1000)
    pin = MemGpioPin(base, 4, Direction.OUTPUT)
    pin.set(True)
    assert register(base, 7) == 1 << 4
    assert register(base, 10) == 0
    pin.set(False)
    assert register(base, 10) == 1 << 4


def test_mem_read_level_register():
    base = bytearray(0x1000)
    pin = MemGpioPin(base, 5, Direction.INPUT)
    assert pin.read() is False
    store(base, 13, 1 << 5)
    assert pin.read() is True


def test_mem_wrong_direction_raises():
    base = bytearray(0x1000)
    with pytest.raises(RuntimeError):
        MemGpioPin(base, 5, Direction.OUTPUT).read()
    with pytest.raises(RuntimeError):
        MemGpioPin(base, 6, Direction.INPUT).set(True)


def test_mem_close_drives_low_and_releases():
    base = bytearray(0x1000)
    pin = MemGpioPin(base, 3, Direction.OUTPUT)
    pin.close()
    assert pin.direction is Direction.INPUT
    assert register(base, 10) == 1 << 3
    assert (register(base, 0) >> 9) & 0b111 == 0


def test_gpio_pin_uses_mapping():
    gpio = Gpio(pin_mapping=[17, 18], base=bytearray(0x1000))
    assert gpio.pin(0, Direction.OUTPUT).number == 17
    assert gpio.pin(1, Direction.OUTPUT).number == 18
    assert gpio.pin(5, Direction.OUTPUT).number == 5


def test_sysfs_pin_writes_direction_and_value(tmp_path):
    (tmp_path / "gpio4").mkdir()
    pin = Gpio(sysfs_root=tmp_path).pin(4, Direction.OUTPUT)
    assert isinstance(pin, SysFsGpioPin)
    assert (tmp_path / "gpio4" / "direction").read_text() == "out"
    pin.set(True)
    assert (tmp_path / "gpio4" / "value").read_text() == "1"
    pin.set_low()
    assert (tmp_path / "gpio4" / "value").read_text() == "0"


def test_sysfs_pin_read(tmp_path):
    (tmp_path / "gpio9").mkdir()
    pin = SysFsGpioPin(9, Direction.INPUT, tmp_path)
    assert pin.read() is False
    (tmp_path / "gpio9" / "value").write_text("1\n")
    assert pin.read() is True
    with pytest.raises(RuntimeError):
        pin.set(True)


def test_sysfs_exports_missing_pin(tmp_path):
    (tmp_path / "export").write_text("")
    with pytest.raises(OSError):
        SysFsGpioPin(12, Direction.OUTPUT, tmp_path)
    assert (tmp_path / "export").read_text() == "12"