import logging

import click

from nethermind.calldata_decoder.cli.utils import (
    abi_option,
    calldata_callback,
    group_options,
    log_level_option,
    signature_option,
)

# isort: skip_file
# pylint: disable=too-many-arguments,import-outside-toplevel

root_logger = logging.getLogger("nethermind")
logger = root_logger.getChild("calldata_decoder").getChild("cli")


@click.command("decode")
@group_options(abi_option, signature_option, log_level_option)
@click.argument("calldata", callback=calldata_callback)
@click.option("--json", "json_output", is_flag=True, default=False, help="Print the decoded result as JSON")
@click.pass_context
def decode_command(ctx, abi_path, signatures, log_level, calldata: bytes, json_output: bool):
    """Finds the function that produced CALLDATA, and prints its decoded arguments"""
    import json
    from rich.table import Table
    from nethermind.calldata_decoder.cli.utils import cli_logger_config, load_interface
    from nethermind.calldata_decoder.exceptions import SchemaError

    console = cli_logger_config(root_logger, log_level)

    try:
        interface = load_interface(abi_path, signatures)
    except SchemaError as e:
        logger.error(e)
        ctx.exit(1)

    result = interface.decode_calldata(calldata)
    if result is None:
        console.print(f"[red]Could not decode calldata with any of {len(interface)} functions")
        ctx.exit(1)

    json_result = result.to_json_dict()
    if json_output:
        click.echo(json.dumps(json_result, indent=2))
        return

    console.print(f"[green]{result.signature}[/green]  selector: [bold]{result.selector}")

    table = Table(box=None)
    table.add_column("Parameter", style="bold")
    table.add_column("Type")
    table.add_column("Value", overflow="fold")
    for param, key in zip(result.schema.inputs, result.schema.input_keys, strict=True):
        value = json_result["inputs"][key]
        table.add_row(key, param.canonical_type, json.dumps(value) if isinstance(value, list) else str(value))

    console.print(table)


@click.command("list-functions")
@group_options(abi_option, signature_option, log_level_option)
@click.option("--full-signatures/--names", default=True, help="Show full signatures, or only function names")
@click.pass_context
def list_functions(ctx, abi_path, signatures, log_level, full_signatures: bool):
    """Lists the functions that calldata is matched against, in the order they are attempted"""
    from rich.table import Table
    from nethermind.calldata_decoder.cli.utils import cli_logger_config, load_interface
    from nethermind.calldata_decoder.exceptions import SchemaError

    console = cli_logger_config(root_logger, log_level)

    try:
        interface = load_interface(abi_path, signatures)
    except SchemaError as e:
        logger.error(e)
        ctx.exit(1)

    table = Table(box=None)
    table.add_column("Selector", style="bold")
    table.add_column("Function")
    table.add_column("Mutability")
    for func in interface.functions:
        table.add_row(func.selector_hex, func.id_str(full_signatures), func.state_mutability or "")

    console.print(table)


@click.command("selector")
@click.argument("signature")
def selector_command(signature: str):
    """Prints the 4 byte selector for a function SIGNATURE"""
    from nethermind.calldata_decoder.decoding import FunctionSchema
    from nethermind.calldata_decoder.exceptions import SchemaError

    try:
        schema = FunctionSchema.from_signature(signature)
    except SchemaError as e:
        raise click.BadParameter(str(e), param_hint="SIGNATURE") from e

    click.echo(schema.selector_hex)
