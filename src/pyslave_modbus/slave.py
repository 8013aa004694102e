"""ModbusSlave: applies decoded requests to a DataStore and builds the matching response."""

import logging
from typing import Any, Callable

from .errors import InvalidRequestTypeError, UnsupportedFunctionError, format_function_code
from .messages import (
    DiagnosticsRequest,
    ModbusRequest,
    ModbusResponse,
    ReadBitsResponse,
    ReadCoilsRequest,
    ReadDiscreteInputsRequest,
    ReadHoldingRegistersRequest,
    ReadInputRegistersRequest,
    ReadRegistersResponse,
    ReadRequest,
    ReadWriteMultipleRegistersRequest,
    WriteMultipleCoilsRequest,
    WriteMultipleRegistersRequest,
    WriteMultipleResponse,
    WriteSingleCoilRequest,
    WriteSingleRegisterRequest,
)
from .store import DataStore, create_default_data_store
from .types import FunctionCode, ModbusTable

logger = logging.getLogger(__name__)

RequestListener = Callable[["ModbusSlave", ModbusRequest], Any]


def read_discretes(request: ReadRequest, store: DataStore, table: ModbusTable) -> ReadBitsResponse:
    """Read coils or discrete inputs into a bit response."""
    data = store.read(table, request.start_address, request.count)
    return ReadBitsResponse(function_code=request.function_code, unit_id=request.unit_id, data=data)


def read_registers(request: ReadRequest, store: DataStore, table: ModbusTable) -> ReadRegistersResponse:
    """Read holding or input registers into a register response."""
    data = store.read(table, request.start_address, request.count)
    return ReadRegistersResponse(function_code=request.function_code, unit_id=request.unit_id, data=data)


def write_single_coil(request: WriteSingleCoilRequest, store: DataStore) -> WriteSingleCoilRequest:
    """Write one coil from its encoded on/off value; the request is the response."""
    store.write(ModbusTable.COIL, request.start_address, [request.value])
    return request


def write_single_register(request: WriteSingleRegisterRequest, store: DataStore) -> WriteSingleRegisterRequest:
    """Write one holding register; the request is the response."""
    store.write(ModbusTable.HOLDING_REGISTER, request.start_address, request.data[:1])
    return request


def write_multiple_coils(request: WriteMultipleCoilsRequest, store: DataStore) -> WriteMultipleResponse:
    """Write consecutive coils and echo address and count."""
    store.write(ModbusTable.COIL, request.start_address, request.values)
    return WriteMultipleResponse(
        function_code=request.function_code,
        unit_id=request.unit_id,
        start_address=request.start_address,
        count=request.count,
    )


def write_multiple_registers(request: WriteMultipleRegistersRequest, store: DataStore) -> WriteMultipleResponse:
    """Write consecutive holding registers and echo address and count."""
    store.write(ModbusTable.HOLDING_REGISTER, request.start_address, request.values)
    return WriteMultipleResponse(
        function_code=request.function_code,
        unit_id=request.unit_id,
        start_address=request.start_address,
        count=request.count,
    )


def read_write_multiple_registers(
    request: ReadWriteMultipleRegistersRequest, store: DataStore
) -> ReadRegistersResponse:
    """Read, then write, holding registers under the store lock. Only the read is returned."""
    with store.sync_root:
        response = read_registers(request.read_request, store, ModbusTable.HOLDING_REGISTER)
        write_multiple_registers(request.write_request, store)
    return ReadRegistersResponse(function_code=request.function_code, unit_id=request.unit_id, data=response.data)


# Function code -> (request variant it must arrive as, handler)
_DISPATCH: dict[FunctionCode, tuple[type, Callable[[Any, DataStore], ModbusResponse | ModbusRequest]]] = {
    FunctionCode.READ_COILS: (
        ReadCoilsRequest,
        lambda r, s: read_discretes(r, s, ModbusTable.COIL),
    ),
    FunctionCode.READ_DISCRETE_INPUTS: (
        ReadDiscreteInputsRequest,
        lambda r, s: read_discretes(r, s, ModbusTable.DISCRETE_INPUT),
    ),
    FunctionCode.READ_HOLDING_REGISTERS: (
        ReadHoldingRegistersRequest,
        lambda r, s: read_registers(r, s, ModbusTable.HOLDING_REGISTER),
    ),
    FunctionCode.READ_INPUT_REGISTERS: (
        ReadInputRegistersRequest,
        lambda r, s: read_registers(r, s, ModbusTable.INPUT_REGISTER),
    ),
    FunctionCode.DIAGNOSTICS: (DiagnosticsRequest, lambda r, s: r),
    FunctionCode.WRITE_SINGLE_COIL: (WriteSingleCoilRequest, write_single_coil),
    FunctionCode.WRITE_SINGLE_REGISTER: (WriteSingleRegisterRequest, write_single_register),
    FunctionCode.WRITE_MULTIPLE_COILS: (WriteMultipleCoilsRequest, write_multiple_coils),
    FunctionCode.WRITE_MULTIPLE_REGISTERS: (WriteMultipleRegistersRequest, write_multiple_registers),
    FunctionCode.READ_WRITE_MULTIPLE_REGISTERS: (ReadWriteMultipleRegistersRequest, read_write_multiple_registers),
}

SUPPORTED_FUNCTION_CODES: tuple[FunctionCode, ...] = tuple(_DISPATCH)


class ModbusSlave:
    """
    Responding side of the protocol for one unit ID. Holds no per-request state:
    each apply_request notifies listeners, dispatches on the function code and
    returns the response. Errors from the store propagate unchanged.
    """

    def __init__(
        self,
        unit_id: int = 1,
        data_store: DataStore | None = None,
        log: logging.Logger | None = None,
    ) -> None:
        self.unit_id = unit_id
        self.data_store = data_store if data_store is not None else create_default_data_store()
        self._log = log if log is not None else logger
        self._listeners: list[RequestListener] = []

    def add_request_listener(self, listener: RequestListener) -> None:
        """Register `listener(slave, request)`; called for every request before it is applied."""
        self._listeners.append(listener)

    def remove_request_listener(self, listener: RequestListener) -> None:
        self._listeners.remove(listener)

    def _fire_request_received(self, request: ModbusRequest) -> None:
        for listener in list(self._listeners):
            try:
                listener(self, request)
            except Exception:
                self._log.exception("Request listener %r failed", listener)

    def apply_request(self, request: ModbusRequest) -> ModbusResponse | ModbusRequest:
        """
        Apply one decoded request to the data store.

        Returns the response object; single writes and diagnostics are echoed as the
        request itself. Raises UnsupportedFunctionError for unknown function codes,
        InvalidRequestTypeError for a request that does not fit its function code,
        and AddressRangeError for out-of-range addresses.
        """
        self._log.info("%s", request)
        self._fire_request_received(request)

        try:
            code = FunctionCode(request.function_code)
        except (ValueError, TypeError):
            self._log.error("Unsupported function code %s", format_function_code(request.function_code))
            raise UnsupportedFunctionError(request.function_code) from None

        expected_type, handler = _DISPATCH[code]
        if not isinstance(request, expected_type):
            raise InvalidRequestTypeError(request)
        if code in (FunctionCode.WRITE_SINGLE_COIL, FunctionCode.WRITE_SINGLE_REGISTER) and not request.data:
            raise InvalidRequestTypeError(request, f"{code.name} request carries no data")
        if code == FunctionCode.READ_WRITE_MULTIPLE_REGISTERS and not (
            isinstance(request.read_request, ReadHoldingRegistersRequest)
            and isinstance(request.write_request, WriteMultipleRegistersRequest)
        ):
            raise InvalidRequestTypeError(
                request, "READ_WRITE_MULTIPLE_REGISTERS halves must both target holding registers"
            )
        return handler(request, self.data_store)
