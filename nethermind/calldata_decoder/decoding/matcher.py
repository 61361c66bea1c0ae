import logging
from typing import Iterable

from nethermind.calldata_decoder.types.decoding import DecodeAttempt, DecodeResult

from .function_decoders import try_decode_function
from .schema import FunctionSchema
from .utils import parse_calldata

root_logger = logging.getLogger("nethermind")
logger = root_logger.getChild("calldata_decoder").getChild("decoding")


def decode_calldata(schemas: Iterable[FunctionSchema], calldata: str | bytes | bytearray) -> DecodeResult | None:
    """
    Finds the function schema that decodes the calldata, and returns the decoded arguments.

    Every schema is attempted in the order supplied.  Failed attempts are skipped, and each successful
    attempt replaces the previous one, so when several schemas decode the same calldata, the schema listed
    last is returned.

    :param schemas: Candidate function schemas.  Order is preserved
    :param calldata: 0x-prefixed hexstring or raw calldata bytes, including the 4 byte selector
    :return: DecodeResult, or None if no schema decodes the calldata
    """
    calldata_bytes = parse_calldata(calldata)
    if calldata_bytes is None:
        return None

    last_success: DecodeAttempt | None = None
    for schema in schemas:
        attempt = try_decode_function(schema, calldata_bytes)
        if not attempt.success:
            continue

        if last_success is not None:
            logger.debug(f"{schema.signature} also decodes calldata, replacing {last_success.schema.signature}")
        last_success = attempt

    if last_success is None or last_success.decoded is None:
        logger.debug(f"No function schema decodes calldata 0x{calldata_bytes[:4].hex()}")
        return None

    return DecodeResult(
        decoded=last_success.decoded,
        schema=last_success.schema,
        selector=last_success.schema.selector_hex,
    )
