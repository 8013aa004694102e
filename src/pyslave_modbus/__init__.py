"""pyslave-modbus: the responding side of Modbus, applying decoded requests to an in-memory data store."""

__version__ = "0.1.0"

from .errors import AddressRangeError, InvalidRequestTypeError, PySlaveModbusError, UnsupportedFunctionError
from .layout import StoreLayout, build_store, dump_store, load_store
from .messages import (
    DiagnosticsRequest,
    ExceptionResponse,
    ModbusRequest,
    ModbusResponse,
    ReadBitsResponse,
    ReadCoilsRequest,
    ReadDiscreteInputsRequest,
    ReadHoldingRegistersRequest,
    ReadInputRegistersRequest,
    ReadRegistersResponse,
    ReadWriteMultipleRegistersRequest,
    WriteMultipleCoilsRequest,
    WriteMultipleRegistersRequest,
    WriteMultipleResponse,
    WriteSingleCoilRequest,
    WriteSingleRegisterRequest,
    exception_response,
)
from .slave import SUPPORTED_FUNCTION_CODES, ModbusSlave
from .store import DataStore, create_default_data_store
from .types import COIL_ON, ExceptionCode, FunctionCode, ModbusTable

__all__ = [
    "__version__",
    "AddressRangeError",
    "InvalidRequestTypeError",
    "PySlaveModbusError",
    "UnsupportedFunctionError",
    "StoreLayout",
    "build_store",
    "dump_store",
    "load_store",
    "DiagnosticsRequest",
    "ExceptionResponse",
    "ModbusRequest",
    "ModbusResponse",
    "ReadBitsResponse",
    "ReadCoilsRequest",
    "ReadDiscreteInputsRequest",
    "ReadHoldingRegistersRequest",
    "ReadInputRegistersRequest",
    "ReadRegistersResponse",
    "ReadWriteMultipleRegistersRequest",
    "WriteMultipleCoilsRequest",
    "WriteMultipleRegistersRequest",
    "WriteMultipleResponse",
    "WriteSingleCoilRequest",
    "WriteSingleRegisterRequest",
    "exception_response",
    "SUPPORTED_FUNCTION_CODES",
    "ModbusSlave",
    "DataStore",
    "create_default_data_store",
    "COIL_ON",
    "ExceptionCode",
    "FunctionCode",
    "ModbusTable",
]
