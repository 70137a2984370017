from __future__ import annotations

import os
from datetime import datetime
from pathlib import Path
from typing import Optional

import typer

from newsrank.core.config import load_config_file, load_env, merge_config
from newsrank.core.errors import UnknownSourceError
from newsrank.core.utils import now_stamp
from newsrank.infra.logging import init_logging
from newsrank.services.crawling import crawl as svc_crawl
from newsrank.services.crawling import format_summary
from newsrank.services.runs import save_ranking_json
from newsrank.sources.registry import get_adapter

app = typer.Typer(help="News article crawler for Vietnamese news sites")


@app.callback()
def main(
    log_level: Optional[str] = typer.Option(None, "--log-level", help="TRACE/DEBUG/INFO/WARN/ERROR"),
) -> None:
    if log_level:
        os.environ["NR_LOG_LEVEL"] = log_level
    init_logging(force=True)


@app.command()
def crawl(
    source: str = typer.Option("vnexpress", "--type", "-t", help="Type of crawler ('vnexpress' or 'tuoitre')"),
    start: Optional[datetime] = typer.Option(
        None, "--start", "-s", formats=["%Y-%m-%d"], help="Start date for crawling (YYYY-MM-DD)"
    ),
    end: Optional[datetime] = typer.Option(
        None, "--end", "-e", formats=["%Y-%m-%d"], help="End date for crawling (YYYY-MM-DD)"
    ),
    top: Optional[int] = typer.Option(None, "--top", min=1, help="How many articles to print"),
    max_partitions: Optional[int] = typer.Option(None, "--max-partitions", min=1),
    max_pages: Optional[int] = typer.Option(None, "--max-pages", min=1),
    max_articles: Optional[int] = typer.Option(None, "--max-articles", min=1),
    max_comment_pages: Optional[int] = typer.Option(
        None, "--max-comment-pages", min=1, help="Ceiling for page-numbered comment APIs"
    ),
    timeout: Optional[int] = typer.Option(None, "--timeout", min=1),
    save: bool = typer.Option(False, "--save/--no-save", help="Write runs/<stamp>/ranking.json"),
    config: Optional[Path] = typer.Option(None, "--config", exists=True, dir_okay=False, readable=True),
) -> None:
    """Crawl articles from the given news source and print the most liked ones."""
    try:
        get_adapter(source)
    except UnknownSourceError as e:
        typer.secho(str(e), fg=typer.colors.RED, err=True)
        raise typer.Exit(code=2)

    try:
        conf = merge_config(
            load_config_file(config),
            load_env(),
            {
                "top_n": top,
                "max_partitions": max_partitions,
                "max_pages": max_pages,
                "max_articles": max_articles,
                "max_comment_pages": max_comment_pages,
                "timeout": timeout,
            },
        )
        summary = svc_crawl(
            source,
            start.date() if start else None,
            end.date() if end else None,
            conf,
        )
    except ValueError as e:
        typer.secho(str(e), fg=typer.colors.RED, err=True)
        raise typer.Exit(code=2)

    for line in format_summary(summary):
        typer.echo(line)

    if save:
        path = save_ranking_json(summary, now_stamp())
        typer.echo(f"Saved ranking JSON: {path}")


if __name__ == "__main__":
    app()
