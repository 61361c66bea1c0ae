import json
import logging
from typing import Any, Iterable, Sequence

from nethermind.calldata_decoder.exceptions import SchemaError
from nethermind.calldata_decoder.types.decoding import DecodeResult

from .matcher import decode_calldata
from .schema import FunctionSchema
from .utils import filter_functions

root_logger = logging.getLogger("nethermind")
logger = root_logger.getChild("calldata_decoder").getChild("decoding")


class ContractInterface:
    """

    Ordered collection of function schemas for a contract.  Calldata is matched by attempting every function
    in declaration order, so interfaces with missing or overlapping functions can still be decoded.

    """

    name: str
    """ Human readable name of the interface, used for logging """

    functions: tuple[FunctionSchema, ...]
    """ Function schemas in declaration order """

    def __init__(self, functions: Iterable[FunctionSchema], name: str = ""):
        self.name = name
        self.functions = tuple(functions)

    @classmethod
    def from_abi(cls, abi_data: Sequence[dict[str, Any]] | str, name: str = "") -> "ContractInterface":
        """
        Loads function schemas from ABI JSON.  Constructor, event, error, fallback & receive entries are skipped.

        :param abi_data: ABI as a JSON string, or a list of ABI entries
        :param name: Name of the interface
        """
        if isinstance(abi_data, str):
            try:
                abi_data = json.loads(abi_data)
            except json.JSONDecodeError as e:
                raise SchemaError(f"ABI for {name or 'interface'} is not valid JSON: {e}") from e

        if not isinstance(abi_data, list) or not all(isinstance(entry, dict) for entry in abi_data):
            raise SchemaError(f"ABI for {name or 'interface'} must be a list of ABI entries")

        abi_functions = filter_functions(abi_data)  # type: ignore[arg-type]
        skipped = len(abi_data) - len(abi_functions)
        if skipped:
            logger.debug(f"Skipping {skipped} non-function entries in ABI {name}")

        functions = [FunctionSchema.from_abi(func) for func in abi_functions]
        logger.info(f"Loaded {len(functions)} functions from ABI {name}")

        return cls(functions, name)

    @classmethod
    def from_signatures(cls, signatures: Iterable[str], name: str = "") -> "ContractInterface":
        """Builds an interface from human-readable function signatures"""
        return cls([FunctionSchema.from_signature(sig) for sig in signatures], name)

    def __len__(self) -> int:
        return len(self.functions)

    def __add__(self, other: "ContractInterface") -> "ContractInterface":
        return ContractInterface((*self.functions, *other.functions), self.name or other.name)

    def decode_calldata(self, calldata: str | bytes | bytearray) -> DecodeResult | None:
        """Decodes calldata against every function of the interface.  Returns None if no function matches"""
        return decode_calldata(self.functions, calldata)

    def get_function(self, name_or_signature: str) -> FunctionSchema:
        """
        Returns the function with the given name or canonical signature.

        :raises SchemaError: if no function matches, or if a bare name matches overloaded functions
        """
        if "(" in name_or_signature:
            signature = FunctionSchema.from_signature(name_or_signature).signature
            matches = [f for f in self.functions if f.signature == signature]
        else:
            matches = [f for f in self.functions if f.name == name_or_signature]

        if not matches:
            raise SchemaError(f"Function {name_or_signature} not found in interface {self.name}")
        if len({f.signature for f in matches}) > 1:
            raise SchemaError(
                f"Multiple functions match {name_or_signature} in interface {self.name}: "
                f"{', '.join(f.signature for f in matches)}"
            )
        return matches[0]

    def get_selector(self, name_or_signature: str) -> str:
        """Returns the 0x-prefixed 4 byte selector of a function"""
        return self.get_function(name_or_signature).selector_hex
