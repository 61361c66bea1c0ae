import json

import pytest

from nethermind.calldata_decoder.decoding import AbiParameter, FunctionSchema
from nethermind.calldata_decoder.decoding.utils import filter_functions
from nethermind.calldata_decoder.exceptions import SchemaError
from tests.resources.ABI import ERC20_ABI_JSON, SWAP_ROUTER_ABI_JSON

ERC20_ABI = json.loads(ERC20_ABI_JSON)
SWAP_ROUTER_ABI = json.loads(SWAP_ROUTER_ABI_JSON)


def test_erc20_schemas_from_abi():
    schemas = {f["name"]: FunctionSchema.from_abi(f) for f in filter_functions(ERC20_ABI)}

    assert schemas["transfer"].signature == "transfer(address,uint256)"
    assert schemas["transfer"].selector_hex == "0xa9059cbb"
    assert schemas["transfer"].input_names == ["recipient", "amount"]
    assert schemas["transfer"].state_mutability == "nonpayable"

    assert schemas["transferFrom"].selector_hex == "0x23b872dd"
    assert schemas["approve"].selector_hex == "0x095ea7b3"
    assert schemas["balanceOf"].selector == bytes.fromhex("70a08231")
    assert schemas["decimals"].selector == b"1<\xe5g"
    assert schemas["decimals"].input_types == []


def test_tuple_schema_from_abi():
    exact_input_single = FunctionSchema.from_abi(SWAP_ROUTER_ABI[0])

    assert exact_input_single.signature == (
        "exactInputSingle((address,address,uint24,address,uint256,uint256,uint256,uint160))"
    )
    assert exact_input_single.selector_hex == "0x414bf389"
    assert exact_input_single.inputs[0].type == "tuple"
    assert [c.name for c in exact_input_single.inputs[0].components][:3] == ["tokenIn", "tokenOut", "fee"]

    multicall = FunctionSchema.from_abi(SWAP_ROUTER_ABI[1])
    assert multicall.signature == "multicall(bytes[])"
    assert multicall.selector_hex == "0xac9650d8"


def test_abi_entry_without_type_is_function():
    schema = FunctionSchema.from_abi({"name": "totalSupply", "inputs": [], "outputs": []})
    assert schema.selector_hex == "0x18160ddd"


@pytest.mark.parametrize("entry_type", ["constructor", "event", "error", "fallback", "receive"])
def test_non_function_abi_entries_rejected(entry_type):
    with pytest.raises(SchemaError, match=entry_type):
        FunctionSchema.from_abi({"type": entry_type, "name": "Transfer", "inputs": []})


@pytest.mark.parametrize(
    "abi_entry",
    [
        {"type": "function", "inputs": []},
        {"type": "function", "name": "bad name", "inputs": []},
        {"type": "function", "name": "f", "inputs": {"type": "uint256"}},
        {"type": "function", "name": "f", "inputs": [{"name": "x"}]},
        {"type": "function", "name": "f", "inputs": [{"name": "x", "type": "uint7"}]},
        {"type": "function", "name": "f", "inputs": [{"name": "x", "type": "notatype"}]},
        {"type": "function", "name": "f", "inputs": [{"name": "x", "type": "tuple", "components": {}}]},
        {"type": "getter", "name": "f", "inputs": []},
    ],
)
def test_invalid_abi_entries(abi_entry):
    with pytest.raises(SchemaError):
        FunctionSchema.from_abi(abi_entry)


def test_schema_from_human_readable_signature():
    schema = FunctionSchema.from_signature(
        "function transferFrom(address from, address to, uint256 amount) external returns (bool success)"
    )

    assert schema.signature == "transferFrom(address,address,uint256)"
    assert schema.input_names == ["from", "to", "amount"]
    assert schema.outputs == (AbiParameter(name="success", type="bool"),)
    assert schema.state_mutability is None


def test_signature_state_mutability():
    schema = FunctionSchema.from_signature("balanceOf(address owner) external view returns (uint256)")

    assert schema.state_mutability == "view"
    assert schema.selector_hex == "0x70a08231"


def test_signature_type_aliases_are_normalized():
    schema = FunctionSchema.from_signature("foo(uint a, int[] b, uint[2][] c)")

    assert schema.signature == "foo(uint256,int256[],uint256[2][])"
    assert schema.inputs[0].type == "uint"


def test_signature_tuples():
    schema = FunctionSchema.from_signature("swap((address,uint24)[] path, tuple(uint256 amount, bool exact) cfg)")

    assert schema.signature == "swap((address,uint24)[],(uint256,bool))"
    assert schema.input_names == ["path", "cfg"]
    assert schema.inputs[0].type == "tuple[]"
    assert [c.name for c in schema.inputs[1].components] == ["amount", "exact"]


def test_signature_data_locations_are_dropped():
    schema = FunctionSchema.from_signature("setMetadata(string memory name, bytes calldata data)")

    assert schema.signature == "setMetadata(string,bytes)"
    assert schema.input_names == ["name", "data"]


@pytest.mark.parametrize(
    "signature",
    [
        "transfer",
        "transfer(address,uint256",
        "(address,uint256)",
        "1transfer(address)",
        "transfer(address to from)",
        "transfer(address,)",
        "transfer(uint7)",
        "swap((address,uint24)[x] path)",
        "balanceOf(address) returns uint256",
        "transfer(address,uint256) junk",
        "balanceOf(address) view returns (uint256) extra",
        "transfer(address to, uint256 to)",
    ],
)
def test_invalid_signatures(signature):
    with pytest.raises(SchemaError):
        FunctionSchema.from_signature(signature)


def test_abi_round_trip():
    for abi_function in [*filter_functions(ERC20_ABI), *filter_functions(SWAP_ROUTER_ABI)]:
        schema = FunctionSchema.from_abi(abi_function)
        assert FunctionSchema.from_abi(schema.to_abi()) == schema


def test_id_str():
    schema = FunctionSchema.from_signature("approve(address spender, uint256 amount)")

    assert schema.id_str() == "approve(address,uint256)"
    assert schema.id_str(full_signature=False) == "approve"


def test_schemas_are_hashable():
    first = FunctionSchema.from_signature("approve(address spender, uint256 amount)")
    second = FunctionSchema.from_signature("approve(address spender, uint256 amount)")

    assert {first, second} == {first}


def test_signature_address_payable():
    schema = FunctionSchema.from_signature("withdraw(address payable to, uint256 amount) external")

    assert schema.signature == "withdraw(address,uint256)"
    assert schema.input_names == ["to", "amount"]
    assert FunctionSchema.from_signature("withdraw(address payable)").signature == "withdraw(address)"


def test_duplicate_abi_parameter_names_rejected():
    abi_function = {
        "type": "function",
        "name": "f",
        "inputs": [{"name": "x", "type": "uint256"}, {"name": "x", "type": "uint256"}],
    }

    with pytest.raises(SchemaError, match="Duplicate parameter names"):
        FunctionSchema.from_abi(abi_function)


def test_input_keys_do_not_collide():
    schema = FunctionSchema.from_signature("f(uint256, uint256 arg0, bool)")

    assert schema.input_keys == ["_arg0", "arg0", "arg2"]
