from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from nethermind.calldata_decoder.decoding.schema import FunctionSchema


@dataclass(frozen=True)
class DecodeAttempt:
    """Outcome of decoding calldata against a single function schema"""

    schema: "FunctionSchema"

    decoded: tuple[Any, ...] | None = None
    error: str | None = None

    @property
    def success(self) -> bool:
        """True if the calldata decoded against the schema"""
        return self.decoded is not None

    @classmethod
    def ok(cls, schema: "FunctionSchema", decoded: tuple[Any, ...]) -> "DecodeAttempt":
        return cls(schema=schema, decoded=decoded)

    @classmethod
    def failed(cls, schema: "FunctionSchema", error: str) -> "DecodeAttempt":
        return cls(schema=schema, error=error)


@dataclass(frozen=True)
class DecodeResult:
    """Matched Function and its Decoded Arguments"""

    decoded: tuple[Any, ...]
    """ Decoded argument values, in the order of the schema's parameters """

    schema: "FunctionSchema"
    """ Function schema that decoded the calldata """

    selector: str
    """ 0x-prefixed 4 byte selector of the schema """

    @property
    def name(self) -> str:
        return self.schema.name

    @property
    def signature(self) -> str:
        return self.schema.signature

    @property
    def inputs(self) -> dict[str, Any]:
        """
        Maps parameter names to decoded values.  Unnamed parameters are keyed by their position,
        ie ``arg0``, ``arg1``.  Keys are taken from ``FunctionSchema.input_keys``, so every value is kept
        """
        return dict(zip(self.schema.input_keys, self.decoded, strict=True))

    def to_json_dict(self) -> dict[str, Any]:
        """Renders the result with JSON safe values.  Bytes are rendered as 0x-prefixed hexstrings"""
        return {
            "function": self.name,
            "signature": self.signature,
            "selector": self.selector,
            "inputs": {name: _json_value(value) for name, value in self.inputs.items()},
        }


def _json_value(value: Any) -> Any:
    if isinstance(value, (bytes, bytearray)):
        return "0x" + value.hex()
    if isinstance(value, (tuple, list)):
        return [_json_value(v) for v in value]
    return value
