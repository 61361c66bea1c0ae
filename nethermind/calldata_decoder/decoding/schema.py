import re
from dataclasses import dataclass, field
from functools import cached_property
from typing import Any

from eth_abi import is_encodable_type
from eth_abi.grammar import normalize
from eth_typing import ABIFunction
from eth_utils.abi import function_signature_to_4byte_selector

from nethermind.calldata_decoder.exceptions import SchemaError

from .utils import collapse_if_tuple, find_closing_paren, split_top_level

_IDENTIFIER_RE = re.compile(r"^[A-Za-z_$][A-Za-z0-9_$]*$")
_ARRAY_DIMS_RE = re.compile(r"^(\[\d*\])+$")

DATA_LOCATIONS = frozenset(("memory", "calldata", "storage"))
STATE_MUTABILITIES = frozenset(("pure", "view", "nonpayable", "payable"))
VISIBILITIES = frozenset(("external", "public"))

NON_FUNCTION_TYPES = frozenset(("constructor", "event", "error", "fallback", "receive"))


@dataclass(frozen=True)
class AbiParameter:
    """Single input or output parameter of a function"""

    name: str
    type: str
    components: tuple["AbiParameter", ...] = ()

    @classmethod
    def from_abi(cls, abi_param: Any) -> "AbiParameter":
        """Builds a parameter from an ABI JSON parameter dict"""
        if not isinstance(abi_param, dict) or not isinstance(abi_param.get("type"), str):
            raise SchemaError(f"Invalid ABI parameter: {abi_param}")

        typ = abi_param["type"]
        components = abi_param.get("components", [])
        if typ.startswith("tuple") and not isinstance(components, list):
            raise SchemaError(f"Tuple parameter {abi_param.get('name', '')} requires a list of components")

        return cls(
            name=abi_param.get("name") or "",
            type=typ,
            components=tuple(cls.from_abi(c) for c in components) if typ.startswith("tuple") else (),
        )

    @classmethod
    def from_signature_fragment(cls, fragment: str) -> "AbiParameter":
        """
        Parses a single parameter of a human-readable signature.

        >>> AbiParameter.from_signature_fragment("uint256 amount")
        AbiParameter(name='amount', type='uint256', components=())
        >>> AbiParameter.from_signature_fragment("(address,uint24)[] path").canonical_type
        '(address,uint24)[]'
        """
        text = fragment.strip()
        if not text:
            raise SchemaError("Empty parameter in signature")

        components: tuple[AbiParameter, ...] = ()
        if text.startswith("tuple("):
            text = text[len("tuple") :]

        if text.startswith("("):
            close = find_closing_paren(text, 0)
            if close == -1:
                raise SchemaError(f"Unbalanced parentheses in parameter '{fragment}'")
            components = tuple(cls.from_signature_fragment(c) for c in split_top_level(text[1:close]))
            words = text[close + 1 :].split()
            array_dims = ""
            if words and words[0].startswith("["):
                array_dims = words.pop(0)
                if not _ARRAY_DIMS_RE.match(array_dims):
                    raise SchemaError(f"Invalid array dimensions '{array_dims}' in parameter '{fragment}'")
            typ = "tuple" + array_dims
        else:
            words = text.split()
            typ = words.pop(0)
            if typ == "address" and words and words[0] == "payable":
                words.pop(0)

        words = [w for w in words if w not in DATA_LOCATIONS]
        if len(words) > 1:
            raise SchemaError(f"Cannot parse parameter '{fragment}'")

        return cls(name=words[0] if words else "", type=typ, components=components)

    @cached_property
    def canonical_type(self) -> str:
        """Type string used for signatures and eth_abi decoding, ie ``(address,uint256)[]``"""
        return normalize(collapse_if_tuple(self.to_abi()))

    def validate(self):
        """Raises SchemaError if eth_abi cannot decode this parameter's type"""
        if not is_encodable_type(self.canonical_type):
            raise SchemaError(f"Invalid ABI type '{self.canonical_type}' for parameter '{self.name}'")

    def to_abi(self) -> dict[str, Any]:
        abi_param: dict[str, Any] = {"name": self.name, "type": self.type}
        if self.type.startswith("tuple"):
            abi_param["components"] = [c.to_abi() for c in self.components]
        return abi_param


@dataclass(frozen=True)
class FunctionSchema:
    """
    Immutable description of a single contract function.  Computes the canonical signature and
    4 byte selector used to match calldata.
    """

    name: str
    inputs: tuple[AbiParameter, ...] = ()
    outputs: tuple[AbiParameter, ...] = ()
    state_mutability: str | None = field(default=None, compare=False)

    @classmethod
    def from_abi(cls, abi_function: ABIFunction | dict[str, Any]) -> "FunctionSchema":
        """
        Builds a FunctionSchema from an ABI JSON function entry.  Constructors, events, errors, and
        fallback functions are rejected.
        """
        if not isinstance(abi_function, dict):
            raise SchemaError(f"ABI entry must be a dict, got {type(abi_function)}")

        abi_type = abi_function.get("type", "function")
        if abi_type in NON_FUNCTION_TYPES:
            raise SchemaError(f"Cannot decode calldata with {abi_type} ABI entries")
        if abi_type != "function":
            raise SchemaError(f"Unknown ABI entry type: {abi_type}")

        name = abi_function.get("name")
        if not isinstance(name, str) or not _IDENTIFIER_RE.match(name):
            raise SchemaError(f"Invalid function name: {name}")

        inputs, outputs = abi_function.get("inputs", []), abi_function.get("outputs") or []
        if not isinstance(inputs, list) or not isinstance(outputs, list):
            raise SchemaError(f"Inputs and outputs of {name} must be lists")

        schema = cls(
            name=name,
            inputs=tuple(AbiParameter.from_abi(i) for i in inputs),
            outputs=tuple(AbiParameter.from_abi(o) for o in outputs),
            state_mutability=abi_function.get("stateMutability"),
        )
        schema.validate()
        return schema

    @classmethod
    def from_signature(cls, signature: str) -> "FunctionSchema":
        """
        Parses human-readable function signatures.

        >>> FunctionSchema.from_signature("transfer(address,uint256)").signature
        'transfer(address,uint256)'
        >>> FunctionSchema.from_signature(
        ...     "function balanceOf(address owner) external view returns (uint256)"
        ... ).selector_hex
        '0x70a08231'
        """
        text = signature.strip()
        if text.startswith("function "):
            text = text[len("function ") :].lstrip()

        open_index = text.find("(")
        if open_index == -1:
            raise SchemaError(f"Missing parameter list in signature '{signature}'")

        name = text[:open_index].strip()
        if not _IDENTIFIER_RE.match(name):
            raise SchemaError(f"Invalid function name '{name}' in signature '{signature}'")

        close_index = find_closing_paren(text, open_index)
        if close_index == -1:
            raise SchemaError(f"Unbalanced parentheses in signature '{signature}'")

        inputs = tuple(
            AbiParameter.from_signature_fragment(p) for p in split_top_level(text[open_index + 1 : close_index])
        )

        outputs: tuple[AbiParameter, ...] = ()
        state_mutability = None
        remainder = text[close_index + 1 :]
        returns_index = remainder.find("returns")
        if returns_index != -1:
            returns_text = remainder[returns_index + len("returns") :].strip()
            returns_close = find_closing_paren(returns_text, 0) if returns_text.startswith("(") else -1
            if returns_close == -1:
                raise SchemaError(f"Invalid returns clause in signature '{signature}'")
            if returns_text[returns_close + 1 :].strip():
                raise SchemaError(f"Unexpected text after returns clause in signature '{signature}'")
            outputs = tuple(
                AbiParameter.from_signature_fragment(p) for p in split_top_level(returns_text[1:returns_close])
            )
            remainder = remainder[:returns_index]

        for modifier in remainder.split():
            if modifier in STATE_MUTABILITIES:
                state_mutability = modifier
            elif modifier not in VISIBILITIES:
                raise SchemaError(f"Unknown modifier '{modifier}' in signature '{signature}'")

        schema = cls(name=name, inputs=inputs, outputs=outputs, state_mutability=state_mutability)
        schema.validate()
        return schema

    def validate(self):
        for param in (*self.inputs, *self.outputs):
            param.validate()

        named_inputs = [name for name in self.input_names if name]
        if len(named_inputs) != len(set(named_inputs)):
            raise SchemaError(f"Duplicate parameter names in function {self.name}: {named_inputs}")

    @cached_property
    def input_types(self) -> list[str]:
        return [param.canonical_type for param in self.inputs]

    @cached_property
    def input_names(self) -> list[str]:
        return [param.name for param in self.inputs]

    @cached_property
    def input_keys(self) -> list[str]:
        """
        Unique keys for the decoded inputs.  Unnamed parameters are keyed by position, ie ``arg0``, and are
        prefixed with underscores until they no longer clash with another key
        """
        named = {name for name in self.input_names if name}
        keys: list[str] = []
        for index, name in enumerate(self.input_names):
            key = name or f"arg{index}"
            while key in keys or (not name and key in named):
                key = f"_{key}"
            keys.append(key)
        return keys

    @cached_property
    def signature(self) -> str:
        """Canonical signature, ie ``transfer(address,uint256)``"""
        return f"{self.name}({','.join(self.input_types)})"

    @cached_property
    def selector(self) -> bytes:
        """First 4 bytes of the keccak hash of the canonical signature"""
        return function_signature_to_4byte_selector(self.signature)

    @property
    def selector_hex(self) -> str:
        return "0x" + self.selector.hex()

    def id_str(self, full_signature: bool = True) -> str:
        """
        Returns ID string for function.  If full_signature is True, returns the function name & parameter types.
        If full_signature is false, returns function name
        """
        if full_signature:
            return self.signature
        return self.name

    def to_abi(self) -> dict[str, Any]:
        """Renders the schema as an ABI JSON function entry"""
        abi_function: dict[str, Any] = {
            "type": "function",
            "name": self.name,
            "inputs": [i.to_abi() for i in self.inputs],
            "outputs": [o.to_abi() for o in self.outputs],
        }
        if self.state_mutability:
            abi_function["stateMutability"] = self.state_mutability
        return abi_function
