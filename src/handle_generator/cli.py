"""Command-line interface for the Handle Generator."""

import logging
import sys

import click

from . import __version__
from .config import ConversionOptions
from .error_handler import ErrorHandler
from .record_transformer import RecordTransformer
from .templates import COMMAND_NAMES, load_command_set
from .types import ConversionError, TemplateError


EXIT_CONVERSION_ERROR = 1
EXIT_TEMPLATE_ERROR = 3


def _configure_logging(verbose: bool):
    # stdout carries the batch, so logs go to stderr
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr
    )


def _report(error, exit_code: int):
    response = ErrorHandler().handle_conversion_error(error)
    click.echo(f"❌ Error: {response.message}", err=True)
    click.echo(f"   • {response.suggested_action}", err=True)
    sys.exit(exit_code)


@click.group()
@click.version_option(version=__version__)
def main():
    """Handle Generator - Turn a blog export into a Handle batch file."""
    pass


@main.command()
@click.option('--prefix', '-p', help='Handle prefix, e.g. 20.500.12345 (or HANDLE_PREFIX)')
@click.option('--guid', '-g', 'use_guid', is_flag=True, help='Use the item guid instead of its link as URL')
@click.option('--delete', '-d', 'add_delete', is_flag=True, help='Emit a DELETE command before each CREATE')
@click.option('--filter', '-f', 'handle_filter', help='Only emit handles fully matching this regular expression')
@click.option('--input', '-i', 'input_file', type=click.File('rb'), default='-',
              help='Export XML file (default: stdin)')
@click.option('--output', '-o', 'output_file', type=click.File('wb'), default='-',
              help='Batch file to write (default: stdout)')
@click.option('--commands', 'commands_file', type=click.Path(exists=True, dir_okay=False),
              help='Alternative command template file')
@click.option('--max-items', type=click.IntRange(min=1), help='Fail if the export holds more handle items')
@click.option('--max-input-size', 'max_input_bytes', type=click.IntRange(min=1),
              help='Fail if the export is larger than this many bytes')
@click.option('--verbose', '-v', is_flag=True, help='Enable verbose output')
def generate(prefix, use_guid, add_delete, handle_filter, input_file, output_file,
             commands_file, max_items, max_input_bytes, verbose):
    """Generate Handle batch commands from a blog export."""
    _configure_logging(verbose)

    try:
        options = ConversionOptions.from_env(
            prefix=prefix,
            use_guid=use_guid or None,
            add_delete=add_delete or None,
            filter=handle_filter,
            commands_file=commands_file,
            max_items=max_items,
            max_input_bytes=max_input_bytes
        )
    except ValueError as e:
        raise click.UsageError(str(e))

    if not options.prefix:
        raise click.UsageError("Missing option '--prefix' / '-p' (or HANDLE_PREFIX).")

    try:
        transformer = RecordTransformer(options)
        result = transformer.transform(input_file, output_file)
    except TemplateError as e:
        _report(e, EXIT_TEMPLATE_ERROR)
    except ConversionError as e:
        _report(e, EXIT_CONVERSION_ERROR)
    else:
        if verbose:
            click.echo(f"✅ {result.items_emitted} handles written "
                       f"({result.items_filtered} filtered, {result.items_skipped} without value)",
                       err=True)


@main.command('check-templates')
@click.option('--commands', 'commands_file', type=click.Path(dir_okay=False),
              help='Command template file (default: packaged templates)')
def check_templates(commands_file):
    """Validate a command template file and show its commands."""
    try:
        command_set = load_command_set(commands_file)
    except TemplateError as e:
        _report(e, EXIT_TEMPLATE_ERROR)

    click.echo(f"✅ Command templates in {command_set.source} are valid:")
    templates = command_set.as_dict()
    for name in COMMAND_NAMES:
        click.echo(f"   command.{name} = {templates[name]}")


if __name__ == '__main__':
    main()
