"""Exceptions raised while applying a request: bad addresses, unknown functions, mismatched requests."""

from typing import Any

from .types import ExceptionCode


class PySlaveModbusError(Exception):
    """Base exception for pyslave-modbus."""

    exception_code = ExceptionCode.SLAVE_DEVICE_FAILURE


class AddressRangeError(PySlaveModbusError):
    """Raised when a read or write falls outside a region's bounds."""

    exception_code = ExceptionCode.ILLEGAL_DATA_ADDRESS

    def __init__(
        self,
        message: str | None = None,
        *,
        table: str | None = None,
        start_address: int | None = None,
        count: int | None = None,
        size: int | None = None,
    ) -> None:
        self.table = table
        self.start_address = start_address
        self.count = count
        self.size = size
        super().__init__(
            message
            or f"Address range [{start_address}, {start_address}+{count}) outside {table} of size {size}"
        )


def format_function_code(function_code: Any) -> str:
    """Hex form for integer codes, repr for anything else."""
    if isinstance(function_code, int):
        return f"{function_code:#04x}"
    return repr(function_code)


class UnsupportedFunctionError(PySlaveModbusError):
    """Raised when a request carries a function code the slave does not implement."""

    exception_code = ExceptionCode.ILLEGAL_FUNCTION

    def __init__(self, function_code: Any, message: str | None = None) -> None:
        self.function_code = function_code
        super().__init__(message or f"Unsupported function code {format_function_code(function_code)}")


class InvalidRequestTypeError(PySlaveModbusError):
    """Raised when a request object does not match the variant its function code names."""

    exception_code = ExceptionCode.ILLEGAL_DATA_VALUE

    def __init__(self, request: Any, message: str | None = None) -> None:
        self.request = request
        self.function_code = getattr(request, "function_code", None)
        super().__init__(
            message
            or f"{type(request).__name__} is not a valid request for function code {self.function_code}"
        )
