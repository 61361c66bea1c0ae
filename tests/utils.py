from eth_abi import encode

from nethermind.calldata_decoder.decoding import FunctionSchema


def encode_calldata(schema: FunctionSchema, args: tuple) -> str:
    """Builds 0x-prefixed calldata for a schema from its argument values"""
    return schema.selector_hex + encode(schema.input_types, args).hex()
