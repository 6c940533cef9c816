"""CLI interface for dreamdup."""

import json
import sys
from pathlib import Path
from typing import Optional

import click
import yaml

from dreamdup.cli.formatters import OutputFormatter
from dreamdup.core.checker import DuplicateChecker
from dreamdup.core.config import SCORER_CHOICES, Config
from dreamdup.core.detector import SimilarityDetector
from dreamdup.core.distance import edit_distance
from dreamdup.core.errors import DreamDupError
from dreamdup.core.logging import configure_logging
from dreamdup.core.normalize import normalize
from dreamdup.core.scorer_factory import create_scorer
from dreamdup.core.similarity import similarity
from dreamdup.core.slug import suggest_slug
from dreamdup.core.store import SupabaseKeywordStore, create_store

EXIT_DUPLICATES = 2


def _common_options(func):
    """Options shared by the commands that run a duplicate check."""
    options = [
        click.option(
            "--corpus",
            "-c",
            "corpus_file",
            type=click.Path(exists=True, dir_okay=False),
            default=None,
            help="JSON or YAML file with existing {id, keyword, slug} records",
        ),
        click.option(
            "--supabase",
            is_flag=True,
            default=False,
            help="Fetch records from Supabase (SUPABASE_URL / SUPABASE_KEY)",
        ),
        click.option(
            "--table",
            default=None,
            help="Table holding the keyword records (default: dreams)",
        ),
        click.option(
            "--scorer",
            "-s",
            type=click.Choice(list(SCORER_CHOICES), case_sensitive=False),
            default=None,
            help="Similarity strategy (default: levenshtein)",
        ),
        click.option(
            "--threshold",
            "-t",
            type=float,
            default=None,
            help="Minimum similarity 0.0-1.0 to report (default: 0.9)",
        ),
        click.option(
            "--format",
            "-f",
            "output_format",
            type=click.Choice(["table", "json", "yaml"], case_sensitive=False),
            default="table",
            help="Output format (default: table)",
        ),
        click.option(
            "--config",
            type=click.Path(exists=True),
            default=None,
            help="Configuration file (YAML or JSON)",
        ),
        click.option(
            "--log-level",
            type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"], case_sensitive=False),
            default="WARNING",
            help="Logging level (default: WARNING)",
        ),
        click.option(
            "--log-file",
            type=click.Path(),
            default=None,
            help="Also write logs to this file",
        ),
        click.option(
            "--json-logging",
            is_flag=True,
            default=False,
            help="Emit JSON-formatted logs",
        ),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def _build_checker(
    corpus_file: Optional[str],
    supabase: bool,
    table: Optional[str],
    scorer: Optional[str],
    threshold: Optional[float],
    config: Optional[str],
) -> DuplicateChecker:
    cli_config = {
        "corpus_file": corpus_file,
        "table": table,
        "scorer": scorer,
        "threshold": threshold,
    }
    cli_config = {k: v for k, v in cli_config.items() if v is not None}

    config_obj = Config.load(cli_config)
    if config:
        config_obj._load_file(Path(config), config_obj)
        # Explicit CLI flags still win over the file
        for key, value in cli_config.items():
            setattr(config_obj, key, value)
    config_obj.validate()

    if supabase:
        store = SupabaseKeywordStore(
            url=config_obj.supabase_url,
            api_key=config_obj.supabase_key,
            table=config_obj.table,
            timeout=float(config_obj.request_timeout),
        )
    else:
        store = create_store(config_obj)

    detector = SimilarityDetector(
        scorer=create_scorer(config_obj.scorer, config_obj),
        threshold=config_obj.threshold,
    )
    return DuplicateChecker(store, detector=detector)


@click.group()
@click.version_option(package_name="dreamdup")
def main():
    """
    dreamdup - find near-duplicate dream keywords before they are saved.

    Keywords are compared after normalization (case, spaces, hyphens and
    middle dots are ignored) and flagged at 90% similarity or more.

    Keyword sources:
      - a JSON/YAML export (--corpus FILE)
      - the Supabase content store (--supabase, needs SUPABASE_URL and SUPABASE_KEY)
    """
    pass


@main.command()
@click.argument("keyword")
@click.option(
    "--exclude-id",
    "-x",
    default=None,
    help="Id of the entry being edited, so it does not match itself",
)
@_common_options
def check(
    keyword: str,
    exclude_id: Optional[str],
    corpus_file: Optional[str],
    supabase: bool,
    table: Optional[str],
    scorer: Optional[str],
    threshold: Optional[float],
    output_format: str,
    config: Optional[str],
    log_level: str,
    log_file: Optional[str],
    json_logging: bool,
):
    """
    Check KEYWORD against existing entries.

    Exits with status 2 when similar keywords exist, 0 otherwise (including
    when the check had to be skipped).

    Examples:

      # Check against an exported corpus
      dreamdup check "돼지 꿈" --corpus dreams.json

      # Check an edited entry against Supabase, ignoring itself
      dreamdup check "뱀꿈" --supabase --exclude-id 42
    """
    configure_logging(level=log_level, json_output=json_logging, log_file=log_file)
    formatter = OutputFormatter()

    try:
        checker = _build_checker(corpus_file, supabase, table, scorer, threshold, config)
    except (DreamDupError, ValueError) as e:
        formatter.print_error(str(e))
        sys.exit(1)

    report = checker.check(keyword, exclude_id=exclude_id)
    formatter.print_report(report, output_format=output_format.lower())

    if report.has_duplicates:
        sys.exit(EXIT_DUPLICATES)


@main.command("check-file")
@click.argument("keywords_file", type=click.Path(exists=True, dir_okay=False))
@_common_options
def check_file(
    keywords_file: str,
    corpus_file: Optional[str],
    supabase: bool,
    table: Optional[str],
    scorer: Optional[str],
    threshold: Optional[float],
    output_format: str,
    config: Optional[str],
    log_level: str,
    log_file: Optional[str],
    json_logging: bool,
):
    """
    Check every keyword in KEYWORDS_FILE (one per line).

    Exits with status 2 when any keyword has similar entries.
    """
    configure_logging(level=log_level, json_output=json_logging, log_file=log_file)
    formatter = OutputFormatter()

    try:
        checker = _build_checker(corpus_file, supabase, table, scorer, threshold, config)
    except (DreamDupError, ValueError) as e:
        formatter.print_error(str(e))
        sys.exit(1)

    keywords = [
        line.strip()
        for line in Path(keywords_file).read_text(encoding="utf-8").splitlines()
        if line.strip()
    ]
    reports = checker.check_many(keywords)

    output_format = output_format.lower()
    if output_format in ("json", "yaml"):
        data = [report.model_dump(mode="json") for report in reports]
        if output_format == "json":
            click.echo(formatter.format_json(data))
        else:
            click.echo(formatter.format_yaml(data), nl=False)
    else:
        for report in reports:
            formatter.print_report(report)
        formatter.print_stats(
            {
                "keywords": len(reports),
                "with_duplicates": sum(1 for r in reports if r.has_duplicates),
                "skipped": sum(1 for r in reports if r.skipped),
            }
        )

    if any(report.has_duplicates for report in reports):
        sys.exit(EXIT_DUPLICATES)


@main.command()
@click.argument("first")
@click.argument("second")
def compare(first: str, second: str):
    """Show normalized forms, edit distance and similarity of two keywords."""
    na = normalize(first)
    nb = normalize(second)
    score = similarity(first, second)

    formatter = OutputFormatter()
    formatter.print_stats(
        {
            "first": na,
            "second": nb,
            "edit_distance": edit_distance(na, nb),
            "similarity": f"{round(score * 100)}%",
        }
    )


@main.command("normalize")
@click.argument("text")
def normalize_command(text: str):
    """Print the comparison form of TEXT."""
    click.echo(normalize(text))


@main.command()
@click.argument("keyword")
def slug(keyword: str):
    """Print the URL slug suggested for KEYWORD."""
    click.echo(suggest_slug(keyword))


@main.group()
def config():
    """Configuration management commands."""
    pass


@config.command("export")
@click.option(
    "--output",
    "-o",
    type=click.Path(),
    default=None,
    help="Output file path (default: stdout)",
)
@click.option(
    "--format",
    "-f",
    type=click.Choice(["yaml", "json"], case_sensitive=False),
    default="yaml",
    help="Output format (default: yaml)",
)
def config_export(output: Optional[str], format: str):
    """Export current configuration to file."""
    config_obj = Config.load()

    if output:
        output_path = Path(output)
        config_obj.save(output_path, format=format)
        click.echo(f"Configuration exported to: {output_path}")
    else:
        if format == "yaml":
            content = yaml.dump(
                config_obj.to_dict(), default_flow_style=False, sort_keys=False, allow_unicode=True
            )
        else:
            content = json.dumps(config_obj.to_dict(), indent=2, ensure_ascii=False)
        click.echo(content)


@config.command("import")
@click.argument("config_file", type=click.Path(exists=True))
def config_import(config_file: str):
    """Import configuration from file into ~/.dreamdup/config.yaml."""
    config_path = Path(config_file)
    config_obj = Config()
    config_obj._load_file(config_path, config_obj)

    user_config_path = Path.home() / ".dreamdup" / "config.yaml"
    config_obj.save(user_config_path, format="yaml")
    click.echo(f"Configuration imported and saved to: {user_config_path}")


if __name__ == "__main__":
    main()
