import json
import logging
from pathlib import Path

import click

from .cli_utils import format_diagnostic, reconstruct_command_line
from .pipeline import DocumentGenerator, MarkdownRenderer, OptionalEncoding, ResolutionFailed, ResolverConfig, TypeSchemaError


@click.command()
@click.option("--config", "-c", default=None, type=click.Path(exists=True, resolve_path=True))
@click.option("--format", "-f", "output_format", default="json", type=click.Choice(["json", "markdown"]))
@click.option("--title", "-t", default=None, type=str, help="Document title (defaults to the input file name)")
@click.option(
    "--nullable",
    is_flag=True,
    default=False,
    help="Encode optional fields as required and nullable instead of not required",
)
@click.option("--verbose", "-v", is_flag=True, default=False, help="Log resolution details")
@click.argument("path", default=None, type=click.Path(exists=True, resolve_path=True))
@click.argument("output", default=None, type=click.Path(resolve_path=True))
def type_to_schema(config, output_format, title, nullable, verbose, path, output):
    logging.basicConfig(level=logging.DEBUG if verbose else logging.WARNING, format="%(levelname)s %(name)s: %(message)s")

    with open(path) as f:
        description = json.load(f)

    if config is not None:
        with open(config) as f:
            try:
                config = ResolverConfig.from_dict(json.load(f))
            except ValueError as e:
                raise click.BadParameter(str(e), param_hint="--config") from e
    else:
        config = ResolverConfig()

    # CLI flags override the config file
    if nullable:
        config.optional_encoding = OptionalEncoding.NULLABLE
    if title is not None:
        config.title = title
    elif config.title == ResolverConfig.title:
        config.title = Path(path).stem

    comment = None
    if config.add_generation_comment:
        comment = f"Generated by: {reconstruct_command_line(type_to_schema)}"

    try:
        generator = DocumentGenerator(description, config, comment=comment)
        document = generator.generate()
    except ResolutionFailed as e:
        for diagnostic in e.diagnostics:
            click.echo(format_diagnostic(diagnostic), err=True)
        raise click.ClickException(str(e)) from e
    except TypeSchemaError as e:
        raise click.ClickException(str(e)) from e

    for diagnostic in generator.diagnostics:
        click.echo(format_diagnostic(diagnostic), err=True)

    if output_format == "markdown":
        out = MarkdownRenderer().render(document)
    else:
        out = json.dumps(document, indent=2) + "\n"

    with open(output, "w") as f:
        f.write(out)
