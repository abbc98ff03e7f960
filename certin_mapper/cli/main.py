"""Command line interface for certin-mapper.

Options fall back to environment variables, so the same invocation works
locally and in CI:

    certin-mapper enrich sbom.cdx.json -o enriched.cdx.json
    GITHUB_TOKEN=... certin-mapper enrich sbom.cdx.json
"""

import sys
from typing import Any, Optional

import click
import sentry_sdk

from certin_mapper import __version__
from certin_mapper.config import Config, load_config
from certin_mapper.console import console, print_enrichment_summary, print_final_failure, print_final_success
from certin_mapper.enrichment import enrich_sbom_file
from certin_mapper.exceptions import (
    CertInMapperError,
    ConfigurationError,
    FileProcessingError,
    SBOMValidationError,
)
from certin_mapper.logging_config import logger, set_log_level

CONTEXT_SETTINGS = {"help_option_names": ["-h", "--help"]}


def build_config(**overrides: Any) -> Config:
    """
    Build configuration from environment variables and CLI options.

    CLI options take precedence; options left as None keep the environment
    value (or the default).

    Raises:
        ConfigurationError: If the combined configuration is invalid
    """
    config = load_config()
    for name, value in overrides.items():
        if value is not None:
            setattr(config, name, value)
    config.validate()
    return config


def initialize_sentry(dsn: Optional[str]) -> None:
    """Initialize Sentry for error tracking when a DSN is configured."""
    if not dsn:
        return

    def before_send(event, hint):
        """
        Filter events before sending to Sentry.
        Don't send user input validation errors - these are expected user errors.
        """
        if "exc_info" in hint:
            exc_type, exc_value, tb = hint["exc_info"]
            if isinstance(exc_value, (SBOMValidationError, ConfigurationError)):
                return None
        return event

    sentry_sdk.init(
        dsn=dsn,
        send_default_pii=False,
        traces_sample_rate=0.0,
        before_send=before_send,
    )


@click.group(context_settings=CONTEXT_SETTINGS)
@click.version_option(__version__, "--version", "-V", prog_name="certin-mapper", message="%(prog)s %(version)s")
def cli() -> None:
    """Enrich CycloneDX SBOM components with CERT-In properties."""


@cli.command(context_settings=CONTEXT_SETTINGS)
@click.argument("input_file", type=click.Path(dir_okay=False))
@click.option(
    "-o",
    "--output-file",
    type=click.Path(dir_okay=False),
    default=None,
    help="Where to write the enriched SBOM. Defaults to overwriting INPUT_FILE.",
)
@click.option("--github-token", envvar="GITHUB_TOKEN", default=None, help="GitHub API token. [env: GITHUB_TOKEN]")
@click.option(
    "--eol-overrides",
    envvar="EOL_OVERRIDES",
    default=None,
    help="Path or http(s) URL of a JSON end-of-life override table. [env: EOL_OVERRIDES]",
)
@click.option("--http-timeout", type=float, default=None, help="Per-request timeout in seconds. [env: HTTP_TIMEOUT]")
@click.option(
    "--github-retry-delay",
    type=float,
    default=None,
    help="Delay in seconds before retrying a rate-limited GitHub call. [env: GITHUB_RETRY_DELAY]",
)
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default=None,
    help="Logging verbosity. [env: LOG_LEVEL]",
)
def enrich(
    input_file: str,
    output_file: Optional[str],
    github_token: Optional[str],
    eol_overrides: Optional[str],
    http_timeout: Optional[float],
    github_retry_delay: Optional[float],
    log_level: Optional[str],
) -> None:
    """Enrich every component of a CycloneDX JSON SBOM."""
    try:
        config = build_config(
            github_token=github_token,
            eol_overrides=eol_overrides,
            http_timeout=http_timeout,
            github_retry_delay=github_retry_delay,
            log_level=log_level,
        )
    except ConfigurationError as e:
        print_final_failure(f"Configuration error: {e}")
        sys.exit(1)

    set_log_level(config.log_level)
    initialize_sentry(config.sentry_dsn)

    if not config.github_token:
        logger.info("No GitHub token configured, repository metadata will be skipped")

    output_file = output_file or input_file
    try:
        property_sets = enrich_sbom_file(input_file, output_file, config)
    except (SBOMValidationError, FileProcessingError) as e:
        print_final_failure(str(e))
        sys.exit(1)
    except CertInMapperError as e:
        logger.error(f"Enrichment failed: {e}")
        print_final_failure(str(e))
        sys.exit(1)

    console.print()
    print_enrichment_summary(property_sets)
    print_final_success(output_file)


def main() -> None:
    """Console script entry point."""
    cli()


if __name__ == "__main__":
    main()
