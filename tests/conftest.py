import json
import random

import pytest
from eth_utils import to_checksum_address

from nethermind.calldata_decoder.decoding import ContractInterface
from tests.resources.ABI import ERC20_ABI_JSON, SWAP_ROUTER_ABI_JSON


@pytest.fixture(name="random_address")
def fixture_random_address():
    def _generate_random_address():
        return to_checksum_address(random.randbytes(20).hex())

    return _generate_random_address


@pytest.fixture(name="erc20_interface")
def fixture_erc20_interface() -> ContractInterface:
    return ContractInterface.from_abi(json.loads(ERC20_ABI_JSON), "ERC20")


@pytest.fixture(name="router_interface")
def fixture_router_interface() -> ContractInterface:
    return ContractInterface.from_abi(SWAP_ROUTER_ABI_JSON, "SwapRouter")
