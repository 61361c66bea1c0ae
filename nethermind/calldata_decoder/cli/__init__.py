import click

from nethermind.calldata_decoder.cli.decode import (
    decode_command,
    list_functions,
    selector_command,
)


@click.group()
def calldata_cli():
    """Command Line Interface for Matching Calldata against Contract ABIs"""


# Adding Commands
calldata_cli.add_command(decode_command, name="decode")
calldata_cli.add_command(list_functions, name="list-functions")
calldata_cli.add_command(selector_command, name="selector")
