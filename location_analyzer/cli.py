"""
Command-line interface for the Repository Location Analyzer.

Provides commands for analyzing repository locations into catalog
entities and inspecting the configured providers.
"""

import json
import sys
from pathlib import Path

import click
from dotenv import load_dotenv

from location_analyzer import __version__
from location_analyzer.core.config import Config
from location_analyzer.core.exceptions import ConfigurationError
from location_analyzer.location.models import AnalyzeLocationRequest
from location_analyzer.utils.logging_config import get_logger, setup_logging

logger = get_logger(__name__)


@click.group()
@click.version_option(version=__version__)
@click.option(
    "--verbose", "-v",
    is_flag=True,
    help="Enable verbose output"
)
@click.option(
    "--log-file",
    type=click.Path(),
    help="Path to log file"
)
@click.option(
    "--config", "-c",
    "config_path",
    type=click.Path(exists=True, dir_okay=False),
    help="Path to a JSON configuration file"
)
@click.pass_context
def cli(ctx, verbose, log_file, config_path):
    """
    Repository Location Analyzer

    Resolve hosted git repository URLs into catalog Component entities.
    """
    load_dotenv()
    ctx.ensure_object(dict)

    try:
        if config_path:
            Config.load_from_file(config_path)
        config = Config.load_from_env(skip_file=bool(config_path))
    except (ConfigurationError, FileNotFoundError) as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(2)

    verbose = verbose or config.verbose
    ctx.obj["verbose"] = verbose
    ctx.obj["config"] = config

    setup_logging(verbose=verbose, log_file=Path(log_file) if log_file else None)


@cli.command()
@click.argument("targets", nargs=-1, required=True)
@click.option(
    "--output", "-o",
    type=click.Path(),
    help="Write results to this file instead of stdout"
)
@click.option(
    "--format", "-f",
    type=click.Choice(["json", "text"]),
    default="json",
    help="Output format (default: json, one record per line)"
)
@click.option(
    "--workers", "-w",
    type=click.IntRange(min=1),
    help="Number of locations analyzed concurrently"
)
@click.option(
    "--timeout", "-t",
    type=click.FloatRange(min=0, min_open=True),
    help="Deadline per location in seconds"
)
@click.pass_context
def analyze(ctx, targets, output, format, workers, timeout):
    """
    Analyze one or more repository locations.

    Each TARGET is a repository URL.

    Examples:

        location-analyzer analyze https://github.com/org/repo

        location-analyzer analyze https://github.com/a/b git@ghe.example.com:c/d.git -f text
    """
    from location_analyzer.analyzer import LocationAnalyzer

    config = ctx.obj["config"]
    analyzer = LocationAnalyzer.from_config(config)

    batch = [AnalyzeLocationRequest.for_url(t) for t in targets]
    outcomes = analyzer.analyze_batch(batch, max_workers=workers, timeout=timeout)

    if format == "json":
        lines = [json.dumps(o.to_dict(), ensure_ascii=False) for o in outcomes]
    else:
        lines = [_format_text(o) for o in outcomes]

    text = "\n".join(lines) + "\n"
    if output:
        output_path = Path(output)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(text, encoding="utf-8")
        click.echo(f"Results saved to: {output}", err=True)
    else:
        click.echo(text, nl=False)

    failed = [o for o in outcomes if not o.ok]
    if failed:
        logger.debug(f"{len(failed)} of {len(outcomes)} location(s) failed")
        sys.exit(1)


def _format_text(outcome) -> str:
    if not outcome.ok:
        return f"FAIL {outcome.target} [{outcome.error_kind.value}] {outcome.error}"

    entity = outcome.response.entities[0].to_dict()
    metadata = entity["metadata"]
    parts = [f"OK   {outcome.target} -> {metadata['name']}"]
    for key, value in metadata["annotations"].items():
        parts.append(f"{key}={value}")
    if "tags" in metadata:
        parts.append(f"tags={','.join(metadata['tags'])}")
    if "description" in metadata:
        parts.append(f"description={metadata['description']!r}")
    return " ".join(parts)


@cli.command()
@click.pass_context
def providers(ctx):
    """
    List the configured hosting providers.

    Tokens are never printed, only whether one is configured.
    """
    config = ctx.obj["config"]
    if not config.providers:
        click.echo("No providers configured; all locations use the public endpoint.")
        return

    for provider in config.providers:
        auth = "token" if provider.is_authenticated else "anonymous"
        click.echo(f"{provider.host_match}\t{provider.api_base_url}\t{auth}")


def main():
    """Main entry point."""
    cli(obj={})


if __name__ == "__main__":
    main()
