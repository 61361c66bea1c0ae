import logging
import string
from typing import Any

from eth_typing import ABI, ABIFunction

root_logger = logging.getLogger("nethermind")
logger = root_logger.getChild("calldata_decoder").getChild("decoding")

_HEX_CHARS = set(string.hexdigits)


def collapse_if_tuple(abi_params: dict[str, Any]) -> str:
    """
    Converts a tuple from a dict to a parenthesized list of its types.

    >>> from nethermind.calldata_decoder.decoding.utils import collapse_if_tuple
    >>> collapse_if_tuple(
    ...     {
    ...         'components': [
    ...             {'name': 'anAddress', 'type': 'address'},
    ...             {'name': 'anInt', 'type': 'uint256'},
    ...             {'name': 'someBytes', 'type': 'bytes'},
    ...         ],
    ...         'type': 'tuple',
    ...     }
    ... )
    '(address,uint256,bytes)'
    """

    typ = abi_params["type"]
    if not isinstance(typ, str):
        raise TypeError(f"The 'type' must be a string, but got {typ} of type {type(typ)}")

    if not typ.startswith("tuple"):
        return typ

    delimited = ",".join(collapse_if_tuple(c) for c in abi_params["components"])
    # Whatever comes after "tuple" is the array dims.  The ABI spec states that
    # this will have the form "", "[]", or "[k]".
    array_dim = typ[5:]
    collapsed = f"({delimited}){array_dim}"

    return collapsed


def filter_functions(contract_abi: ABI) -> list[ABIFunction]:
    """
    Filters out all non-function ABIs.  Entries without a type are functions according to the
    Solidity ABI specification
    """
    return [abi for abi in contract_abi if abi.get("type", "function") == "function"]  # type: ignore[misc]


def find_closing_paren(text: str, open_index: int) -> int:
    """
    Returns the index of the parenthesis closing the one at ``open_index``, or -1 if it is never closed

    >>> find_closing_paren("f((a,b),c)", 1)
    9
    """
    depth = 0
    for index in range(open_index, len(text)):
        if text[index] == "(":
            depth += 1
        elif text[index] == ")":
            depth -= 1
            if depth == 0:
                return index
    return -1


def split_top_level(text: str, separator: str = ",") -> list[str]:
    """
    Splits text on a separator, ignoring separators nested within parentheses

    >>> split_top_level("(uint256,address)[] path, bool flag")
    ['(uint256,address)[] path', ' bool flag']
    >>> split_top_level("")
    []
    """
    if not text.strip():
        return []

    parts, depth, current = [], 0, ""
    for char in text:
        if char == "(":
            depth += 1
        elif char == ")":
            depth -= 1
        if char == separator and depth == 0:
            parts.append(current)
            current = ""
            continue
        current += char
    parts.append(current)
    return parts


def parse_calldata(calldata: str | bytes | bytearray) -> bytes | None:
    """
    Converts calldata into bytes.  Hexstrings may carry a 0x prefix.  Returns None if the calldata
    is not valid hex

    >>> parse_calldata("0x313ce567")
    b'1<\\xe5g'
    >>> parse_calldata("0xzz") is None
    True
    """
    if isinstance(calldata, (bytes, bytearray)):
        return bytes(calldata)

    if not isinstance(calldata, str):
        logger.debug(f"Cannot parse calldata of type {type(calldata)}")
        return None

    hex_str = calldata[2:] if calldata[:2] in ("0x", "0X") else calldata
    if len(hex_str) % 2 != 0 or not set(hex_str) <= _HEX_CHARS:
        logger.debug(f"Calldata {calldata[:74]} is not a valid hexstring")
        return None

    return bytes.fromhex(hex_str)
