import logging
import traceback
from typing import Any, Callable, Sequence

from eth_abi import decode as eth_abi_decode
from eth_abi.exceptions import DecodingError as EthAbiDecodingError
from eth_abi.exceptions import InsufficientDataBytes, NonEmptyPaddingBytes, ParseError
from eth_abi.grammar import ABIType, TupleType, parse
from eth_utils import to_checksum_address

from nethermind.calldata_decoder.types.decoding import DecodeAttempt

from .schema import FunctionSchema

root_logger = logging.getLogger("nethermind")
logger = root_logger.getChild("calldata_decoder").getChild("decoding")

SELECTOR_LENGTH = 4


class EVMFunctionDecoder:
    """
    Decodes calldata for a single EVM function schema.  Parses input types up front so the same decoder can
    be applied to many calldata payloads
    """

    schema: FunctionSchema

    _input_types: list[str]
    _parsed_types: list[ABIType]

    _formatters: dict[str, Callable[[Any], Any]] = {}

    def __init__(self, schema: FunctionSchema):
        self.schema = schema

        self._input_types = schema.input_types
        self._parsed_types = [parse(typ) for typ in self._input_types]

        self._formatters = {"address": to_checksum_address}

    def decode(self, calldata: bytes) -> DecodeAttempt:
        """
        Decodes calldata against the schema.  Never raises, failures are returned as unsuccessful attempts.

        :param calldata: Calldata bytes including the 4 byte function selector
        :return: DecodeAttempt
        """
        if len(calldata) < SELECTOR_LENGTH:
            return DecodeAttempt.failed(self.schema, f"Calldata is shorter than {SELECTOR_LENGTH} byte selector")

        if calldata[:SELECTOR_LENGTH] != self.schema.selector:
            return DecodeAttempt.failed(
                self.schema,
                f"Selector 0x{calldata[:SELECTOR_LENGTH].hex()} does not match {self.schema.signature} "
                f"({self.schema.selector_hex})",
            )

        decoded_input, error = self.decode_abi_from_types(calldata[SELECTOR_LENGTH:])
        if decoded_input is None:
            logger.debug(f"Error Decoding {self.schema.signature}: {error}")
            return DecodeAttempt.failed(self.schema, error or "Unknown decoding error")

        return DecodeAttempt.ok(self.schema, self.apply_formatters(decoded_input))

    def decode_abi_from_types(self, data: bytes) -> tuple[tuple[Any, ...] | None, str | None]:
        """
        Decodes ABI data against the schema's input types.  Properly Handles various decoding errors by logging and
        returning the error message instead of the decoded values.

        :param data: Argument bytes, excluding the function selector
        :return: (decoded_values, error_message)
        """
        try:
            return tuple(eth_abi_decode(self._input_types, data)), None
        except InsufficientDataBytes as e:
            logger.debug(f"Insufficient data bytes while decoding {data.hex()} for types {self._input_types}")
            return None, f"Insufficient data bytes: {e}"
        except NonEmptyPaddingBytes as e:
            logger.debug(f"Non-empty padding bytes while decoding {data.hex()} for types {self._input_types}")
            return None, f"Non-empty padding bytes: {e}"
        except (EthAbiDecodingError, OverflowError, UnicodeDecodeError) as e:
            logger.debug(f"{e.__class__.__name__} while decoding {data.hex()} for types {self._input_types}")
            return None, f"{e.__class__.__name__}: {e}"
        except Exception as e:  # pylint: disable=broad-exception-caught
            logger.error(
                f"Unknown error while decoding {data.hex()} for types {self._input_types}: "
                f"{traceback.format_exception(type(e), e, e.__traceback__)}"
            )
            return None, f"{e.__class__.__name__}: {e}"

    def apply_formatters(self, decoding_result: Sequence[Any]) -> tuple[Any, ...]:
        """
        Applies currently loaded formatters to decoding result.  Formatters are applied to array items
        and tuple components as well as top level values.

        :param decoding_result: List of values returned from ABI Decoding
        """
        return tuple(
            self._format_value(value, abi_type)
            for value, abi_type in zip(decoding_result, self._parsed_types, strict=True)
        )

    def _format_value(self, value: Any, abi_type: ABIType) -> Any:
        if abi_type.is_array:
            return tuple(self._format_value(item, abi_type.item_type) for item in value)

        if isinstance(abi_type, TupleType):
            return tuple(
                self._format_value(item, component)
                for item, component in zip(value, abi_type.components, strict=True)
            )

        formatter = self._formatters.get(abi_type.to_type_str())
        if formatter is not None:
            return formatter(value)
        return value


def try_decode_function(schema: FunctionSchema, calldata: bytes) -> DecodeAttempt:
    """Decodes calldata against a single schema, returning a failed attempt if the schema types are unparseable"""
    try:
        decoder = EVMFunctionDecoder(schema)
    except ParseError as e:
        logger.debug(f"Cannot parse input types {schema.input_types} of {schema.name}: {e}")
        return DecodeAttempt.failed(schema, f"Invalid input types: {e}")

    return decoder.decode(calldata)
