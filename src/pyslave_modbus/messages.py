"""Decoded request and response value objects, one frozen dataclass per function."""

from dataclasses import dataclass, field
from typing import Any

from .errors import PySlaveModbusError
from .types import COIL_ON, EXCEPTION_OFFSET, ExceptionCode, FunctionCode


def _as_tuple(obj: Any, name: str) -> None:
    # Frozen dataclasses need object.__setattr__ to normalize fields
    object.__setattr__(obj, name, tuple(getattr(obj, name)))


# ----------------------------------------------------------------------------
# Requests
# ----------------------------------------------------------------------------


@dataclass(frozen=True, kw_only=True)
class ModbusRequest:
    """
    Base of every request. On its own it describes a request whose function code
    has no dedicated variant (the slave rejects it).
    """

    function_code: int
    unit_id: int = 1

    def __str__(self) -> str:
        return f"Request with function code {self.function_code} for unit {self.unit_id}."


@dataclass(frozen=True, kw_only=True)
class ReadRequest(ModbusRequest):
    """Shared shape of the four read functions: a start address and a point count."""

    start_address: int
    count: int


@dataclass(frozen=True, kw_only=True)
class ReadCoilsRequest(ReadRequest):
    function_code: int = FunctionCode.READ_COILS

    def __str__(self) -> str:
        return f"Read {self.count} coils starting at address {self.start_address}."


@dataclass(frozen=True, kw_only=True)
class ReadDiscreteInputsRequest(ReadRequest):
    function_code: int = FunctionCode.READ_DISCRETE_INPUTS

    def __str__(self) -> str:
        return f"Read {self.count} discrete inputs starting at address {self.start_address}."


@dataclass(frozen=True, kw_only=True)
class ReadHoldingRegistersRequest(ReadRequest):
    function_code: int = FunctionCode.READ_HOLDING_REGISTERS

    def __str__(self) -> str:
        return f"Read {self.count} holding registers starting at address {self.start_address}."


@dataclass(frozen=True, kw_only=True)
class ReadInputRegistersRequest(ReadRequest):
    function_code: int = FunctionCode.READ_INPUT_REGISTERS

    def __str__(self) -> str:
        return f"Read {self.count} input registers starting at address {self.start_address}."


@dataclass(frozen=True, kw_only=True)
class WriteSingleCoilRequest(ModbusRequest):
    """Single coil write. `data[0]` is the encoded state: COIL_ON or anything else for off."""

    function_code: int = FunctionCode.WRITE_SINGLE_COIL
    start_address: int
    data: tuple[int, ...] = ()

    def __post_init__(self) -> None:
        _as_tuple(self, "data")

    @classmethod
    def from_bool(cls, start_address: int, value: bool, unit_id: int = 1) -> "WriteSingleCoilRequest":
        return cls(unit_id=unit_id, start_address=start_address, data=(COIL_ON if value else 0,))

    @property
    def value(self) -> bool:
        return bool(self.data) and self.data[0] == COIL_ON

    def __str__(self) -> str:
        state = "on" if self.value else "off"
        return f"Write single coil {state} at address {self.start_address}."


@dataclass(frozen=True, kw_only=True)
class WriteSingleRegisterRequest(ModbusRequest):
    function_code: int = FunctionCode.WRITE_SINGLE_REGISTER
    start_address: int
    data: tuple[int, ...] = ()

    def __post_init__(self) -> None:
        _as_tuple(self, "data")

    @classmethod
    def from_value(cls, start_address: int, value: int, unit_id: int = 1) -> "WriteSingleRegisterRequest":
        return cls(unit_id=unit_id, start_address=start_address, data=(value,))

    @property
    def value(self) -> int | None:
        return self.data[0] if self.data else None

    def __str__(self) -> str:
        return f"Write single holding register {self.value} at address {self.start_address}."


@dataclass(frozen=True, kw_only=True)
class DiagnosticsRequest(ModbusRequest):
    """Diagnostics query; the slave echoes it back unchanged."""

    function_code: int = FunctionCode.DIAGNOSTICS
    sub_function: int = 0
    data: tuple[int, ...] = ()

    def __post_init__(self) -> None:
        _as_tuple(self, "data")

    def __str__(self) -> str:
        return f"Diagnostics sub-function {self.sub_function} with {len(self.data)} data words."


@dataclass(frozen=True, kw_only=True)
class WriteMultipleCoilsRequest(ModbusRequest):
    function_code: int = FunctionCode.WRITE_MULTIPLE_COILS
    start_address: int
    values: tuple[bool, ...] = ()

    def __post_init__(self) -> None:
        _as_tuple(self, "values")

    @property
    def count(self) -> int:
        return len(self.values)

    def __str__(self) -> str:
        return f"Write {self.count} coils starting at address {self.start_address}."


@dataclass(frozen=True, kw_only=True)
class WriteMultipleRegistersRequest(ModbusRequest):
    function_code: int = FunctionCode.WRITE_MULTIPLE_REGISTERS
    start_address: int
    values: tuple[int, ...] = ()

    def __post_init__(self) -> None:
        _as_tuple(self, "values")

    @property
    def count(self) -> int:
        return len(self.values)

    def __str__(self) -> str:
        return f"Write {self.count} holding registers starting at address {self.start_address}."


@dataclass(frozen=True, kw_only=True)
class ReadWriteMultipleRegistersRequest(ModbusRequest):
    """
    Combined holding-register read and write. The read half is performed first,
    so its result never reflects the write half.
    """

    function_code: int = FunctionCode.READ_WRITE_MULTIPLE_REGISTERS
    read_request: ReadHoldingRegistersRequest
    write_request: WriteMultipleRegistersRequest

    @classmethod
    def build(
        cls,
        read_start: int,
        read_count: int,
        write_start: int,
        values: list[int] | tuple[int, ...],
        unit_id: int = 1,
    ) -> "ReadWriteMultipleRegistersRequest":
        return cls(
            unit_id=unit_id,
            read_request=ReadHoldingRegistersRequest(unit_id=unit_id, start_address=read_start, count=read_count),
            write_request=WriteMultipleRegistersRequest(unit_id=unit_id, start_address=write_start, values=values),
        )

    def __str__(self) -> str:
        return f"{self.read_request} {self.write_request}"


# ----------------------------------------------------------------------------
# Responses
# ----------------------------------------------------------------------------


@dataclass(frozen=True, kw_only=True)
class ModbusResponse:
    function_code: int
    unit_id: int = 1


@dataclass(frozen=True, kw_only=True)
class ReadBitsResponse(ModbusResponse):
    """Coil or discrete input values, packed eight per byte on the wire."""

    data: tuple[bool, ...] = field(default=())

    def __post_init__(self) -> None:
        _as_tuple(self, "data")

    @property
    def byte_count(self) -> int:
        return (len(self.data) + 7) // 8

    def __str__(self) -> str:
        return f"Read {len(self.data)} bits ({self.byte_count} bytes): {list(self.data)}"


@dataclass(frozen=True, kw_only=True)
class ReadRegistersResponse(ModbusResponse):
    data: tuple[int, ...] = field(default=())

    def __post_init__(self) -> None:
        _as_tuple(self, "data")

    @property
    def byte_count(self) -> int:
        return len(self.data) * 2

    def __str__(self) -> str:
        return f"Read {len(self.data)} registers: {list(self.data)}"


@dataclass(frozen=True, kw_only=True)
class WriteMultipleResponse(ModbusResponse):
    """Echo of a multiple write: where it started and how many points were written."""

    start_address: int
    count: int

    def __str__(self) -> str:
        return f"Wrote {self.count} points starting at address {self.start_address}."


@dataclass(frozen=True, kw_only=True)
class ExceptionResponse(ModbusResponse):
    exception_code: ExceptionCode

    def __str__(self) -> str:
        return f"Exception {self.exception_code.name} for function code {self.function_code & ~EXCEPTION_OFFSET}."


def exception_response(request: ModbusRequest, error: BaseException) -> ExceptionResponse:
    """
    Build the protocol exception response for a request that failed with `error`.
    Errors outside this package map to SLAVE_DEVICE_FAILURE.

    The reply code is the request code with bit 0x80 set. Request codes that
    already have that bit (0x80-0xFF, e.g. 0x99) are not valid functions and come
    back unchanged; on the wire any reply code >= 0x80 is read as an exception, and
    in-process the ExceptionResponse type marks it. Non-integer codes report as 0x80.
    """
    if isinstance(error, PySlaveModbusError):
        code = error.exception_code
    else:
        code = ExceptionCode.SLAVE_DEVICE_FAILURE
    request_code = request.function_code if isinstance(request.function_code, int) else 0
    return ExceptionResponse(
        function_code=(request_code & 0xFF) | EXCEPTION_OFFSET,
        unit_id=request.unit_id,
        exception_code=code,
    )
