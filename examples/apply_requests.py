#!/usr/bin/env python3
"""Example: apply a few decoded requests to a slave and turn failures into exception responses."""

import logging

from pyslave_modbus import (
    AddressRangeError,
    ModbusRequest,
    ModbusSlave,
    ReadCoilsRequest,
    ReadHoldingRegistersRequest,
    ReadWriteMultipleRegistersRequest,
    WriteMultipleCoilsRequest,
    WriteSingleRegisterRequest,
    exception_response,
    load_store,
)
from pyslave_modbus.errors import PySlaveModbusError


def print_request(slave: ModbusSlave, request: ModbusRequest) -> None:
    print(f"unit {slave.unit_id} <- {request}")


def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    slave = ModbusSlave(unit_id=1, data_store=load_store(profile="small"))
    slave.add_request_listener(print_request)

    requests = [
        WriteMultipleCoilsRequest(start_address=0, values=[True, False, True]),
        ReadCoilsRequest(start_address=0, count=3),
        WriteSingleRegisterRequest.from_value(4, 42),
        ReadWriteMultipleRegistersRequest.build(3, 3, 4, [7]),
        ReadHoldingRegistersRequest(start_address=8, count=5),  # out of range
        ModbusRequest(function_code=0x99),  # unsupported
    ]
    for request in requests:
        try:
            response = slave.apply_request(request)
        except AddressRangeError as e:
            print(f"  address error: {e}")
            response = exception_response(request, e)
        except PySlaveModbusError as e:
            response = exception_response(request, e)
        print(f"  -> {response}")


if __name__ == "__main__":
    main()
