from __future__ import annotations

from pathlib import Path
from typing import Iterable, List, Optional

import typer

from url_query_cleaner.cleaner import ParseError, filter_query
from url_query_cleaner.config import DEFAULT_CONFIG_PATH, load_config
from url_query_cleaner.models import CleanResult
from url_query_cleaner.policy import TRACKING_CATEGORIES
from url_query_cleaner.reporting import log_event, summarize_removed
from url_query_cleaner.utils import parse_names_csv

app = typer.Typer(help="Remove tracking and other unwanted query parameters from URLs.")

URLS_ARGUMENT = typer.Argument(
    None, help="URLs to clean. Read from stdin, one per line, when omitted."
)
LOG_PATH_OPTION = typer.Option(
    None, "--log-path", help="Append JSON-lines events to this file."
)
VERBOSE_OPTION = typer.Option(
    False, "--verbose", help="Log an event for every URL processed."
)


@app.callback()
def main() -> None:
    """URL query cleaner CLI."""
    return None


@app.command("untrack")
def untrack_command(
    urls: Optional[List[str]] = URLS_ARGUMENT,
    allow: Optional[List[str]] = typer.Option(
        None,
        "--allow",
        "-a",
        help="Tracking category to keep, e.g. utm or gclid. Repeatable.",
    ),
    remove: Optional[List[str]] = typer.Option(
        None,
        "--remove",
        "-r",
        help="Extra parameter name to strip. Repeatable or comma-separated.",
    ),
    config: Path = typer.Option(
        DEFAULT_CONFIG_PATH, "--config", help="Path to the YAML config file."
    ),
    log_path: Optional[Path] = LOG_PATH_OPTION,
    verbose: bool = VERBOSE_OPTION,
) -> None:
    """Strip tracking parameters, keeping the categories allowed by --allow or the config."""
    try:
        config_data = load_config(config).with_overrides(
            allow=parse_names_csv(allow),
            remove=parse_names_csv(remove),
            log_path=log_path,
        )
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc

    _clean_all(urls, config_data.blocklist(), config_data.log_path, verbose)


@app.command("clean")
def clean_command(
    remove: List[str] = typer.Option(
        ...,
        "--remove",
        "-r",
        help="Parameter name to strip. Repeatable or comma-separated.",
    ),
    urls: Optional[List[str]] = URLS_ARGUMENT,
    log_path: Optional[Path] = LOG_PATH_OPTION,
    verbose: bool = VERBOSE_OPTION,
) -> None:
    """Strip only the named parameters; no tracking policy is applied."""
    _clean_all(urls, frozenset(parse_names_csv(remove)), log_path, verbose)


@app.command("categories")
def categories_command() -> None:
    """List the tracking categories and the parameters each one covers."""
    for category, names in TRACKING_CATEGORIES.items():
        typer.echo(f"{category}: {', '.join(sorted(names))}")


def _read_urls(urls: Optional[List[str]]) -> Iterable[str]:
    if urls:
        return urls
    stdin = typer.get_text_stream("stdin")
    return [line.strip() for line in stdin if line.strip()]


def _clean_all(
    urls: Optional[List[str]],
    blocklist: frozenset[str],
    log_path: Optional[Path],
    verbose: bool,
) -> None:
    log_enabled = verbose or log_path is not None
    results: list[CleanResult] = []
    invalid = 0

    for url in _read_urls(urls):
        try:
            result = filter_query(url, blocklist)
        except ParseError as exc:
            invalid += 1
            typer.secho(f"Warning: {exc}", fg=typer.colors.YELLOW, err=True)
            if log_enabled:
                log_event("url_invalid", {"url": url, "reason": exc.reason}, log_path)
            continue

        results.append(result)
        typer.echo(result.url)
        if verbose:
            log_event(
                "url_cleaned",
                {"url": url, "cleaned": result.url, "removed": result.removed_names},
                log_path,
            )

    if log_enabled:
        log_event(
            "run_summary",
            {
                "cleaned": len(results),
                "changed": sum(1 for result in results if result.changed),
                "invalid": invalid,
                "removed": summarize_removed(results),
            },
            log_path,
        )

    if invalid:
        raise typer.Exit(code=1)


if __name__ == "__main__":
    app()
