# Copyright (c) 2025-2026 Gowtham Adamane Rao. All Rights Reserved.
#
# Licensed under the Prosperity Public License 3.0.0 (the "License").
# You may not use this file except in compliance with the License.
# You may obtain a copy of the License in the LICENSE file at the root
# of this repository, or at: https://prosperitylicense.com/versions/3.0.0
#
# Commercial use beyond a 30-day trial requires a separate license.


"""
Command-line interface for the py-sdmx-schema application.

This module uses Typer to expose schema extraction, availability extraction,
key construction and schema/availability comparison. Every SOURCE argument
accepts a file path, a URL, or inline SDMX-ML.
"""

import json
import logging
from typing import Any, Dict, List, Optional

import httpx
import typer

from .availability import extract_availability, format_availability_summary
from .codelists import extract_codelists
from .config import AppSettings
from .dataflow import (
    extract_dataflow_schema,
    get_codelist_columns,
    get_dimension_order,
    get_optional_columns,
    get_required_columns,
)
from .diagnostics import Diagnostics
from .exceptions import SdmxError, SdmxValidationError
from .fetcher import Fetcher
from .models import DataflowSchema
from .navigator import XmlNavigator, load_document
from .query import construct_data_url
from .reconcile import compare_schema_availability, construct_sdmx_key

logger = logging.getLogger(__name__)

# Create a Typer application
app = typer.Typer(
    name="py-sdmx-schema",
    help="A CLI tool to inspect SDMX dataflow schemas and data availability.",
    add_completion=False,
)

JSON_OPTION = typer.Option(False, "--json", help="Print machine-readable JSON.")
FILTER_OPTION = typer.Option(
    None,
    "--filter",
    "-f",
    help="Dimension filter as DIM=VALUE. Use DIM=A+B or repeat a dimension to select several codes.",
)


class _Context:
    """Settings, navigator and fetcher shared by one CLI invocation."""

    def __init__(self) -> None:
        # Instantiate settings here to ensure env vars are loaded correctly
        self.settings = AppSettings()
        self.navigator = XmlNavigator.from_settings(self.settings.sdmx)
        self.diagnostics = Diagnostics(logger)
        self._fetcher: Optional[Fetcher] = None

    @property
    def fetcher(self) -> Fetcher:
        if self._fetcher is None:
            self._fetcher = Fetcher(self.settings)
        return self._fetcher

    def close(self) -> None:
        if self._fetcher is not None:
            self._fetcher.close()

    def load_schema(self, source: str) -> DataflowSchema:
        return extract_dataflow_schema(
            source,
            navigator=self.navigator,
            diagnostics=self.diagnostics,
            fetcher=self.fetcher,
        )


def _setup_logging(settings: AppSettings) -> None:
    log_format = "%(asctime)s - %(levelname)s - %(name)s - %(message)s"
    logging.basicConfig(level=settings.log.level.upper(), format=log_format)


def _parse_filters(raw_filters: Optional[List[str]]) -> Dict[str, Any]:
    filters: Dict[str, List[str]] = {}
    for item in raw_filters or []:
        dim, sep, value = item.partition("=")
        if not sep or not dim.strip() or not value.strip():
            raise SdmxValidationError(
                f"Invalid filter '{item}'. Expected the form DIM=VALUE."
            )
        # DIM=A+B selects several codes, like a repeated DIM=A DIM=B.
        codes = [code.strip() for code in value.split("+")]
        filters.setdefault(dim.strip(), []).extend(codes)
    return {dim: values[0] if len(values) == 1 else values for dim, values in filters.items()}


def _echo_json(payload: Any) -> None:
    typer.echo(json.dumps(payload, indent=2, default=str))


def _report_diagnostics(ctx: _Context) -> None:
    for warning in ctx.diagnostics.warnings:
        typer.secho(f"Warning: {warning.message}", fg=typer.colors.YELLOW, err=True)


def _run(command):
    """Runs a command body, turning known failures into exit code 1."""
    ctx = _Context()
    _setup_logging(ctx.settings)
    try:
        command(ctx)
    except SdmxError as e:
        logger.debug("Command failed", exc_info=True)
        typer.secho(f"Error: {e}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)
    except httpx.HTTPError as e:
        typer.secho(f"Download failed: {e}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)
    finally:
        ctx.close()
        _report_diagnostics(ctx)


@app.command()
def schema(
    source: str = typer.Argument(..., help="Structure document with the dataflow and its DSD."),
    as_json: bool = JSON_OPTION,
) -> None:
    """
    Show the dimensions, attributes and measures of a dataflow.
    """

    def command(ctx: _Context) -> None:
        result = ctx.load_schema(source)
        codelists = {
            comp_id: ref.codelist_id
            for comp_id, ref in get_codelist_columns(result).items()
        }
        if as_json:
            payload = result.model_dump(mode="json")
            payload["dimension_order"] = get_dimension_order(result)
            payload["required_columns"] = get_required_columns(result)
            payload["optional_columns"] = get_optional_columns(result)
            payload["codelists"] = codelists
            _echo_json(payload)
            return

        info = result.dataflow_info
        typer.echo(f"Dataflow: {info.agency}:{info.id} ({info.version})")
        if info.name:
            typer.echo(f"  Name: {info.name}")
        typer.echo(f"  DSD: {info.dsd_id}")
        typer.echo(f"Key order: {'.'.join(get_dimension_order(result))}")
        typer.echo(f"Required columns: {', '.join(get_required_columns(result))}")
        typer.echo(f"Optional columns: {', '.join(get_optional_columns(result))}")
        for comp_id, codelist_id in codelists.items():
            typer.echo(f"  {comp_id} -> {codelist_id}")

    _run(command)


@app.command()
def availability(
    source: str = typer.Argument(..., help="Availability constraint document."),
    as_json: bool = JSON_OPTION,
) -> None:
    """
    Show which dimension values actually have data.
    """

    def command(ctx: _Context) -> None:
        result = extract_availability(
            source,
            navigator=ctx.navigator,
            diagnostics=ctx.diagnostics,
            fetcher=ctx.fetcher,
            settings=ctx.settings.sdmx,
        )
        if as_json:
            _echo_json(result.model_dump(mode="json"))
        else:
            typer.echo(format_availability_summary(result))

    _run(command)


@app.command()
def key(
    source: str = typer.Argument(..., help="Structure document with the dataflow and its DSD."),
    filters: Optional[List[str]] = FILTER_OPTION,
) -> None:
    """
    Build the dot-separated SDMX key for a set of dimension filters.
    """

    def command(ctx: _Context) -> None:
        result = ctx.load_schema(source)
        typer.echo(construct_sdmx_key(result, _parse_filters(filters)))

    _run(command)


@app.command()
def compare(
    schema_source: str = typer.Argument(..., help="Structure document with the dataflow and its DSD."),
    availability_source: str = typer.Argument(..., help="Availability constraint document."),
    as_json: bool = JSON_OPTION,
) -> None:
    """
    Compare a dataflow schema with its availability constraint.

    Codelists present in the structure document are used to report missing
    codes and coverage ratios.
    """

    def command(ctx: _Context) -> None:
        root = load_document(schema_source, fetcher=ctx.fetcher)
        schema_result = extract_dataflow_schema(
            root, navigator=ctx.navigator, diagnostics=ctx.diagnostics
        )
        codelists = extract_codelists(root, navigator=ctx.navigator)
        availability_result = extract_availability(
            availability_source,
            navigator=ctx.navigator,
            diagnostics=ctx.diagnostics,
            fetcher=ctx.fetcher,
            settings=ctx.settings.sdmx,
        )
        comparison = compare_schema_availability(
            schema_result, availability_result, codelists
        )
        if as_json:
            _echo_json(comparison.model_dump(mode="json"))
            return

        match = "yes" if comparison.dataflow_match else "NO"
        typer.echo(f"Dataflow: {comparison.dataflow_id} (constraint match: {match})")
        typer.echo(f"Total observations: {comparison.total_observations}")
        for dim_id, coverage in comparison.coverage_by_dimension.items():
            line = f"  {dim_id}: {coverage.available_count} available"
            if coverage.coverage_ratio is not None:
                line += f", {coverage.coverage_ratio:.0%} of codelist"
            if coverage.missing_values:
                line += f", missing {', '.join(coverage.missing_values)}"
            if not coverage.in_schema:
                line += " (not in schema)"
            typer.echo(line)
        if comparison.time_coverage is not None:
            time = comparison.time_coverage
            typer.echo(f"Time coverage: {time.start} to {time.end}")

    _run(command)


@app.command()
def url(
    base_url: str = typer.Argument(..., help="SDMX REST endpoint, e.g. https://stats.example.org/rest."),
    schema_source: str = typer.Argument(..., help="Structure document with the dataflow and its DSD."),
    filters: Optional[List[str]] = FILTER_OPTION,
    start_period: Optional[str] = typer.Option(None, "--start-period", help="First period to request."),
    end_period: Optional[str] = typer.Option(None, "--end-period", help="Last period to request."),
) -> None:
    """
    Build a data query URL for the dataflow in SCHEMA_SOURCE.
    """

    def command(ctx: _Context) -> None:
        result = ctx.load_schema(schema_source)
        info = result.dataflow_info
        typer.echo(
            construct_data_url(
                base_url,
                info.agency or "all",
                info.id,
                info.version or "latest",
                schema=result,
                dimension_filters=_parse_filters(filters),
                start_period=start_period,
                end_period=end_period,
            )
        )

    _run(command)


if __name__ == "__main__":
    app()
