"""Core enums and constants: memory tables, function codes, exception codes."""

from enum import Enum, IntEnum

from pymodbus.constants import ModbusStatus


class ModbusTable(str, Enum):
    """The four independently addressed memory regions of a slave device."""

    COIL = "coil"
    DISCRETE_INPUT = "discrete_input"
    INPUT_REGISTER = "input_register"
    HOLDING_REGISTER = "holding_register"

    @property
    def is_bit(self) -> bool:
        return self in (ModbusTable.COIL, ModbusTable.DISCRETE_INPUT)


class FunctionCode(IntEnum):
    """Function codes handled by ModbusSlave. Any other code is rejected."""

    READ_COILS = 0x01
    READ_DISCRETE_INPUTS = 0x02
    READ_HOLDING_REGISTERS = 0x03
    READ_INPUT_REGISTERS = 0x04
    WRITE_SINGLE_COIL = 0x05
    WRITE_SINGLE_REGISTER = 0x06
    DIAGNOSTICS = 0x08
    WRITE_MULTIPLE_COILS = 0x0F
    WRITE_MULTIPLE_REGISTERS = 0x10
    READ_WRITE_MULTIPLE_REGISTERS = 0x17


class ExceptionCode(IntEnum):
    """Protocol exception codes a listening loop reports for a failed request."""

    ILLEGAL_FUNCTION = 0x01
    ILLEGAL_DATA_ADDRESS = 0x02
    ILLEGAL_DATA_VALUE = 0x03
    SLAVE_DEVICE_FAILURE = 0x04


# Encoded value of a single-coil write; anything other than COIL_ON is "off".
COIL_ON = int(ModbusStatus.ON)
COIL_OFF = 0x0000

MAX_REGISTER_VALUE = 0xFFFF
EXCEPTION_OFFSET = 0x80
