"""Command-line interface for readmill."""

from __future__ import annotations

import json
from pathlib import Path
from typing import IO, Any, Dict, Optional

import click
import structlog

from readmill import __version__
from readmill.config import Config, find_config_file
from readmill.errors import ConfigurationError
from readmill.extractor import ContentExtractor
from readmill.observability import configure_logging

logger = structlog.get_logger(__name__)


@click.group()
@click.version_option(version=__version__)
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Configuration file path",
)
@click.option(
    "--log-level",
    default=None,
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"]),
    help="Logging level (overrides the configuration file)",
)
@click.pass_context
def cli(ctx: click.Context, config_path: Optional[Path], log_level: Optional[str]) -> None:
    """readmill - reduce web pages to their readable content."""
    ctx.ensure_object(dict)
    config_path = config_path or find_config_file()
    try:
        config = Config.from_yaml(config_path) if config_path else Config()
    except ConfigurationError as e:
        raise click.ClickException(str(e)) from e

    if log_level:
        config.monitoring.log_level = log_level
    configure_logging(config.monitoring)
    ctx.obj["config"] = config


@cli.command()
@click.argument("source", type=click.File("r", encoding="utf-8"))
@click.option("--url", default=None, help="Page URL used to resolve relative links and images")
@click.option("--text-only", is_flag=True, help="Print plain text instead of HTML")
@click.option("--json", "as_json", is_flag=True, help="Print title, content and statistics as JSON")
@click.pass_context
def extract(ctx: click.Context, source: IO[str], url: Optional[str], text_only: bool, as_json: bool) -> None:
    """Extract the article from an HTML file (use - for stdin)."""
    html = source.read()
    extractor = ContentExtractor(html, url=url, settings=ctx.obj["config"])
    content = extractor.extract_content(text_only=text_only)
    title = extractor.extract_title()

    if as_json:
        timing = extractor.timing_info
        payload: Dict[str, Any] = {
            "title": title,
            "content": content,
            "images": extractor.image_urls,
            "text_direction": extractor.text_direction,
            "metadata": extractor.metadata,
            "statistics": {"word_count": extractor.statistics_info.word_count},
            "timing": {
                "markup_parsing_time": timing.markup_parsing_time,
                "document_construction_time": timing.document_construction_time,
                "article_processing_time": timing.article_processing_time,
                "formatting_time": timing.formatting_time,
            },
        }
        click.echo(json.dumps(payload, indent=2, ensure_ascii=False))
        return

    if title:
        click.echo(title)
        click.echo()
    click.echo(content)


def main() -> None:
    cli(obj={})


if __name__ == "__main__":
    main()
