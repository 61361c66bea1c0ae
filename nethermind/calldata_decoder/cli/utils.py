import os
from logging import Logger
from typing import Sequence

import click
from rich.console import Console
from rich.logging import RichHandler

from nethermind.calldata_decoder.decoding import ContractInterface
from nethermind.calldata_decoder.decoding.utils import parse_calldata


def cli_logger_config(instrument_logger: Logger, log_level: str = "WARNING") -> Console:
    rich_console = Console()
    instrument_logger.handlers.clear()

    instrument_logger.addHandler(RichHandler(show_path=False, console=rich_console))
    instrument_logger.setLevel(log_level.upper())
    return rich_console


def group_options(*options):
    """Decorator to group multiple click options together"""

    def wrapper(function):
        for option in reversed(options):
            function = option(function)
        return function

    return wrapper


def calldata_callback(ctx, param, value: str) -> bytes:  # pylint: disable=unused-argument
    """Click callback converting a hexstring argument into calldata bytes"""
    calldata = parse_calldata(value)
    if calldata is None:
        raise click.BadParameter(f"'{value}' is not a valid hexstring")
    return calldata


def load_interface(abi_path: str | None, signatures: Sequence[str]) -> ContractInterface:
    """
    Builds the interface used for decoding.  Functions from the ABI file are listed first, followed by
    the --signature functions in the order they were passed

    :raises SchemaError: if the ABI or a signature cannot be parsed
    """
    if abi_path is None and not signatures:
        raise click.UsageError("Provide an ABI file with --abi, or function signatures with --signature")

    interface = ContractInterface([], name="cli")
    if abi_path:
        with open(abi_path, "r", encoding="utf-8") as abi_file:
            interface += ContractInterface.from_abi(abi_file.read(), name=os.path.basename(abi_path))

    if signatures:
        interface += ContractInterface.from_signatures(signatures)

    return interface


# -------------------------------------------------------
#    CLI Configurations
# -------------------------------------------------------
abi_option = click.option(
    "--abi",
    "-a",
    "abi_path",
    default=os.environ.get("ABI_JSON"),
    type=click.Path(exists=True, dir_okay=False),
    help="Path to contract ABI JSON.  If not provided, will use the ABI_JSON environment variable",
)
signature_option = click.option(
    "--signature",
    "-s",
    "signatures",
    type=str,
    multiple=True,
    help="Human-readable function signature, ie 'transfer(address,uint256)'.  Can be input multiple times.  "
    "Signatures are attempted after the functions of --abi",
)
log_level_option = click.option(
    "--log-level",
    "log_level",
    default=os.environ.get("LOG_LEVEL", "WARNING"),
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    show_default=True,
    help="Logging level.  If not provided, will use the LOG_LEVEL environment variable",
)
