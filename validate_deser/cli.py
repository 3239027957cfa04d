import json
import logging
from pathlib import Path

import click
from pydantic import ValidationError

from . import __version__
from .cli_utils import load_module, reconstruct_command_line
from .decorator import decode_validated
from .pipeline import AtomicWriter, GeneratorConfig, PipelineGenerator
from .pipeline.formatters import RuffFormatter

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"


def validated_classes(module) -> list[type]:
    """Classes declared in ``module`` with ``@validate_deser``, in definition order."""
    return [
        member
        for member in vars(module).values()
        if isinstance(member, type) and member.__module__ == module.__name__ and "__validated_decode__" in vars(member)
    ]


def generation_comment(command: click.Command) -> str:
    return f"# Generated by validate_deser v{__version__} : {reconstruct_command_line(command)}"


@click.group()
@click.version_option(__version__, prog_name="validate_deser")
@click.option("--verbose", "-v", is_flag=True, default=False, help="Log pipeline phases to stderr")
def cli(verbose):
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format=LOG_FORMAT)


@cli.command()
@click.option("--name", "-n", default=None, type=str, help="Only expand this class")
@click.option("--config", "-c", default=None, type=click.Path(exists=True, resolve_path=True))
@click.option("--format", "format_code", is_flag=True, default=False, help="Format the output with ruff")
@click.argument("path", type=click.Path(exists=True, dir_okay=False, resolve_path=True))
@click.argument("output", required=False, default=None, type=click.Path(resolve_path=True))
def expand(name, config, format_code, path, output):
    """Print or write the code generated for the validated classes in PATH."""
    if config is not None:
        with open(config) as f:
            config = GeneratorConfig.from_dict(json.load(f))
    else:
        config = GeneratorConfig()

    if format_code:
        config.formatter.enabled = True

    module = load_module(path)
    classes = validated_classes(module)
    if name is not None:
        classes = [cls for cls in classes if cls.__name__ == name]
    if not classes:
        raise click.ClickException(f"no @validate_deser class{f' named {name}' if name else ''} in {Path(path).name}")

    generator = PipelineGenerator(config)
    reserved = set(vars(module))
    units = [generator.generate(cls, reserved) for cls in classes]
    out = generator.render_module(units, generation_comment(expand))

    if config.formatter.enabled:
        out = RuffFormatter().format(out, config.formatter)

    if output is None:
        click.echo(out, nl=False)
    else:
        AtomicWriter().write(Path(output), out)
        logger.info("Expanded %d class(es) from %s", len(units), path)


@cli.command()
@click.argument("path", type=click.Path(exists=True, dir_okay=False, resolve_path=True))
@click.argument("class_name")
@click.argument("input", type=click.Path(exists=True, dir_okay=False, resolve_path=True))
def check(path, class_name, input):
    """Decode the JSON file INPUT as CLASS_NAME from PATH."""
    module = load_module(path)
    cls = getattr(module, class_name, None)
    if cls is None or "__validated_decode__" not in vars(cls):
        raise click.ClickException(f"{class_name} is not a @validate_deser class of {Path(path).name}")

    try:
        value = decode_validated(cls, Path(input).read_bytes())
    except ValidationError as e:
        for error in e.errors():
            location = ".".join(str(part) for part in error["loc"]) or "<root>"
            click.echo(f"{location}: {error['msg']}", err=True)
        raise SystemExit(1) from e

    click.echo(repr(value))
