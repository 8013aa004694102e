"""Tests for request/response value objects and exception responses."""

import dataclasses

import pytest

from pyslave_modbus import (
    COIL_ON,
    AddressRangeError,
    ExceptionCode,
    ExceptionResponse,
    FunctionCode,
    InvalidRequestTypeError,
    ModbusRequest,
    ReadBitsResponse,
    ReadCoilsRequest,
    ReadRegistersResponse,
    ReadWriteMultipleRegistersRequest,
    UnsupportedFunctionError,
    WriteMultipleCoilsRequest,
    WriteSingleCoilRequest,
    WriteSingleRegisterRequest,
    exception_response,
)


def test_variants_carry_their_function_code() -> None:
    assert ReadCoilsRequest(start_address=0, count=1).function_code == FunctionCode.READ_COILS
    assert WriteSingleCoilRequest(start_address=0).function_code == FunctionCode.WRITE_SINGLE_COIL
    rw = ReadWriteMultipleRegistersRequest.build(0, 1, 0, [1])
    assert rw.function_code == FunctionCode.READ_WRITE_MULTIPLE_REGISTERS
    assert rw.read_request.function_code == FunctionCode.READ_HOLDING_REGISTERS
    assert rw.write_request.function_code == FunctionCode.WRITE_MULTIPLE_REGISTERS


def test_requests_are_immutable() -> None:
    request = ReadCoilsRequest(start_address=0, count=1)
    with pytest.raises(dataclasses.FrozenInstanceError):
        request.count = 5  # type: ignore[misc]


def test_payloads_are_normalized_to_tuples() -> None:
    values = [True, False]
    request = WriteMultipleCoilsRequest(start_address=3, values=values)
    values.append(True)
    assert request.values == (True, False)
    assert request.count == 2


def test_single_coil_from_bool() -> None:
    assert WriteSingleCoilRequest.from_bool(1, True).data == (COIL_ON,)
    assert WriteSingleCoilRequest.from_bool(1, False).data == (0,)
    assert COIL_ON == 0xFF00


def test_single_coil_value_without_data_is_off() -> None:
    assert WriteSingleCoilRequest(start_address=0).value is False


def test_single_register_value() -> None:
    assert WriteSingleRegisterRequest.from_value(4, 42).value == 42
    assert WriteSingleRegisterRequest(start_address=4).value is None


@pytest.mark.parametrize(
    ("count", "expected"),
    [(1, 1), (8, 1), (9, 2), (16, 2), (17, 3)],
)
def test_bit_response_byte_count(count: int, expected: int) -> None:
    response = ReadBitsResponse(function_code=FunctionCode.READ_COILS, data=[False] * count)
    assert response.byte_count == expected


def test_register_response_byte_count() -> None:
    response = ReadRegistersResponse(function_code=FunctionCode.READ_HOLDING_REGISTERS, data=[1, 2, 3])
    assert response.byte_count == 6


def test_request_string_forms() -> None:
    assert str(ReadCoilsRequest(start_address=2, count=3)) == "Read 3 coils starting at address 2."
    assert str(WriteSingleCoilRequest.from_bool(4, True)) == "Write single coil on at address 4."
    assert "153" in str(ModbusRequest(function_code=0x99))


@pytest.mark.parametrize(
    ("error", "code"),
    [
        (UnsupportedFunctionError(0x99), ExceptionCode.ILLEGAL_FUNCTION),
        (AddressRangeError(table="coil", start_address=0, count=2, size=1), ExceptionCode.ILLEGAL_DATA_ADDRESS),
        (InvalidRequestTypeError(object()), ExceptionCode.ILLEGAL_DATA_VALUE),
        (RuntimeError("disk on fire"), ExceptionCode.SLAVE_DEVICE_FAILURE),
    ],
)
def test_exception_response_codes(error: BaseException, code: ExceptionCode) -> None:
    request = ReadCoilsRequest(unit_id=3, start_address=0, count=2)
    response = exception_response(request, error)
    assert response.exception_code == code
    assert response.function_code == 0x81
    assert response.unit_id == 3


def test_exception_response_for_unknown_code() -> None:
    response = exception_response(ModbusRequest(function_code=0x42), UnsupportedFunctionError(0x42))
    assert response.function_code == 0xC2
    assert "ILLEGAL_FUNCTION" in str(response)


def test_exception_response_keeps_high_bit_codes() -> None:
    # Codes that already have the exception bit set come back unchanged
    response = exception_response(ModbusRequest(function_code=0x99), UnsupportedFunctionError(0x99))
    assert isinstance(response, ExceptionResponse)
    assert response.function_code == 0x99
    assert response.exception_code == ExceptionCode.ILLEGAL_FUNCTION


def test_exception_response_for_non_integer_code() -> None:
    response = exception_response(ModbusRequest(function_code=None), UnsupportedFunctionError(None))
    assert response.function_code == 0x80
    assert response.exception_code == ExceptionCode.ILLEGAL_FUNCTION
    assert str(UnsupportedFunctionError(None)) == "Unsupported function code None"
