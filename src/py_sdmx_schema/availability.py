# Copyright (c) 2025-2026 Gowtham Adamane Rao. All Rights Reserved.
#
# Licensed under the Prosperity Public License 3.0.0 (the "License").
# You may not use this file except in compliance with the License.
# You may obtain a copy of the License in the LICENSE file at the root
# of this repository, or at: https://prosperitylicense.com/versions/3.0.0
#
# Commercial use beyond a 30-day trial requires a separate license.


"""
Availability constraint extraction.

A dataflow schema says which values a dimension may take; an availability
constraint (SDMX ContentConstraint, typically from the 'availableconstraint'
REST endpoint) says which values actually have observations. This module
turns such a constraint into an AvailabilityConstraint and offers a few
read-only views over it.
"""

import logging
import re
import xml.etree.ElementTree as ET
from datetime import date
from typing import List, Optional, Tuple, Union

import pandas as pd

from .config import SdmxSettings
from .diagnostics import Diagnostics
from .exceptions import MissingContentConstraintError
from .fetcher import Fetcher
from .models import (
    AvailabilityConstraint,
    DataflowRef,
    DimensionAvailability,
    TimeAvailability,
    TimeFormat,
    ValueType,
)
from .navigator import DocumentSource, XmlNavigator, load_document

logger = logging.getLogger(__name__)

ISO_DATE_RE = re.compile(r"^[0-9]{4}-[0-9]{2}-[0-9]{2}")
COUNT_RE = re.compile(r"^[0-9]+$")
SUMMARY_COLUMNS = ["dimension_id", "available_values", "sample_values", "value_type"]


def _find_constraint(root: ET.Element, navigator: XmlNavigator) -> ET.Element:
    constraint = navigator.find(root, "ContentConstraint", include_self=True)
    if constraint is None:
        sample = navigator.element_names(root)
        # Providers often answer with an error message instead of a constraint.
        raise MissingContentConstraintError(
            "No ContentConstraint found in the document. "
            f"Available elements: {', '.join(sample)}",
            element="ContentConstraint",
            found_elements=sample,
        )
    return constraint


def _parse_obs_count(
    constraint: ET.Element,
    navigator: XmlNavigator,
    annotation_id: str,
    diagnostics: Diagnostics,
) -> int:
    for annotation in navigator.find_all(constraint, "common:Annotation"):
        if annotation.get("id") != annotation_id:
            continue
        title = navigator.find(annotation, "common:AnnotationTitle")
        content = navigator.text(title) or ""
        if COUNT_RE.match(content):
            return int(content)
        diagnostics.warn(
            "invalid_obs_count",
            f"Invalid observation count format: '{content}', defaulting to 0",
            raw_value=content,
        )
        return 0
    return 0


def _parse_dataflow_ref(constraint: ET.Element, navigator: XmlNavigator) -> DataflowRef:
    ref = navigator.find(constraint, "Dataflow/Ref")
    if ref is None:
        return DataflowRef()
    return DataflowRef(
        id=ref.get("id", "unknown"),
        agency=ref.get("agencyID", "unknown"),
        version=ref.get("version", "1.0"),
    )


def _dimension_values(key_value: ET.Element, navigator: XmlNavigator) -> List[str]:
    values = set()
    for node in navigator.find_all(key_value, "common:Value"):
        text = navigator.text(node)
        if text is not None:
            values.add(text)
    return sorted(values)


def _parse_period_bound(
    raw: str, bound: str, diagnostics: Diagnostics
) -> Union[date, str]:
    if len(raw) >= 10 and ISO_DATE_RE.match(raw):
        try:
            return date.fromisoformat(raw[:10])
        except ValueError:
            pass
    if raw:
        diagnostics.warn(
            "unparsed_period_bound",
            f"Time range {bound} '{raw}' is not an ISO date; keeping the raw value",
            bound=bound,
            raw_value=raw,
        )
    return raw


def _time_range_bounds(
    key_value: ET.Element, navigator: XmlNavigator
) -> Optional[Tuple[str, str]]:
    time_range = navigator.find(key_value, "common:TimeRange")
    if time_range is None:
        return None
    start = navigator.text(navigator.find(time_range, "common:StartPeriod")) or ""
    end = navigator.text(navigator.find(time_range, "common:EndPeriod")) or ""
    return start, end


def extract_time_availability(
    key_value: ET.Element,
    navigator: Optional[XmlNavigator] = None,
    diagnostics: Optional[Diagnostics] = None,
) -> TimeAvailability:
    """
    Builds the time coverage from a TIME_PERIOD KeyValue.

    A TimeRange gives calendar bounds; total_periods is then the inclusive
    year span. Without a TimeRange, the listed values are discrete periods.
    Gaps are never inferred here.
    """
    navigator = navigator or XmlNavigator.from_settings(SdmxSettings())
    diagnostics = diagnostics if diagnostics is not None else Diagnostics(logger)

    bounds = _time_range_bounds(key_value, navigator)
    if bounds is not None:
        start = _parse_period_bound(bounds[0], "start", diagnostics)
        end = _parse_period_bound(bounds[1], "end", diagnostics)
        if isinstance(start, date) and isinstance(end, date):
            total_periods = end.year - start.year + 1
        else:
            total_periods = 1
        return TimeAvailability(
            start=start,
            end=end,
            format=TimeFormat.DATE,
            total_periods=max(total_periods, 0),
        )

    values = _dimension_values(key_value, navigator)
    return TimeAvailability(
        start=values[0] if values else "",
        end=values[-1] if values else "",
        format=TimeFormat.DISCRETE,
        total_periods=len(values),
    )


def _time_period_values(key_value: ET.Element, navigator: XmlNavigator) -> List[str]:
    bounds = _time_range_bounds(key_value, navigator)
    if bounds is not None and bounds[0] and bounds[1]:
        # Ranges are listed as a single year span, e.g. '2020-2023'.
        return [f"{bounds[0][:4]}-{bounds[1][:4]}"]
    return _dimension_values(key_value, navigator)


def extract_availability(
    source: DocumentSource,
    *,
    navigator: Optional[XmlNavigator] = None,
    diagnostics: Optional[Diagnostics] = None,
    fetcher: Optional[Fetcher] = None,
    settings: Optional[SdmxSettings] = None,
) -> AvailabilityConstraint:
    """
    Extracts availability information from an SDMX ContentConstraint.

    Args:
        source: XML content, file path, URL, or a parsed element.
        navigator: Optional navigator with custom query strategies.
        diagnostics: Optional collector for degraded-data warnings.
        fetcher: Optional fetcher used when `source` is a URL.
        settings: Optional SDMX settings (time dimension and annotation ids).

    Returns:
        A frozen AvailabilityConstraint.

    Raises:
        MissingContentConstraintError: If the document has no ContentConstraint.
    """
    settings = settings or SdmxSettings()
    navigator = navigator or XmlNavigator.from_settings(settings)
    diagnostics = diagnostics if diagnostics is not None else Diagnostics(logger)
    root = load_document(source, fetcher=fetcher)

    constraint = _find_constraint(root, navigator)
    constraint_id = constraint.get("id", "unknown")
    logger.info(f"Extracting availability from constraint '{constraint_id}'")

    dimensions: List[DimensionAvailability] = []
    time_coverage: Optional[TimeAvailability] = None

    cube_region = navigator.find(constraint, "CubeRegion")
    if cube_region is None:
        logger.info(f"Constraint '{constraint_id}' has no CubeRegion")
    else:
        for key_value in navigator.find_all(cube_region, "common:KeyValue"):
            dim_id = key_value.get("id")
            if dim_id is None:
                continue
            if dim_id == settings.time_dimension_id:
                time_coverage = extract_time_availability(
                    key_value, navigator, diagnostics
                )
                values = _time_period_values(key_value, navigator)
                value_type = ValueType.TIME
            else:
                values = _dimension_values(key_value, navigator)
                value_type = ValueType.CODELIST
            dimensions.append(
                DimensionAvailability(
                    dimension_id=dim_id,
                    available_values=tuple(values),
                    total_count=len(values),
                    value_type=value_type,
                )
            )

    availability = AvailabilityConstraint(
        constraint_id=constraint_id,
        constraint_name=navigator.localized_text(constraint, "common:Name"),
        agency_id=constraint.get("agencyID", "unknown"),
        version=constraint.get("version", "1.0"),
        dataflow_ref=_parse_dataflow_ref(constraint, navigator),
        total_observations=_parse_obs_count(
            constraint, navigator, settings.obs_count_annotation_id, diagnostics
        ),
        dimensions=tuple(dimensions),
        time_coverage=time_coverage,
    )
    logger.info(
        f"Extracted availability for {len(dimensions)} dimensions, "
        f"{availability.total_observations} observations"
    )
    return availability


def get_available_values(
    availability: AvailabilityConstraint, dimension_id: str
) -> Tuple[str, ...]:
    """
    Returns the values of `dimension_id` that have data, or an empty tuple
    when the constraint does not mention the dimension.
    """
    for dim in availability.dimensions:
        if dim.dimension_id == dimension_id:
            return dim.available_values
    return ()


def get_time_coverage(availability: AvailabilityConstraint) -> Optional[TimeAvailability]:
    return availability.time_coverage


def get_data_coverage_summary(availability: AvailabilityConstraint) -> pd.DataFrame:
    """
    Summarizes coverage by dimension, one row per dimension plus a final
    TOTAL_OBSERVATIONS row.
    """
    rows = [
        {
            "dimension_id": dim.dimension_id,
            "available_values": dim.total_count,
            "sample_values": ", ".join(dim.available_values[:5]),
            "value_type": dim.value_type.value,
        }
        for dim in availability.dimensions
    ]
    rows.append(
        {
            "dimension_id": "TOTAL_OBSERVATIONS",
            "available_values": availability.total_observations,
            "sample_values": "N/A",
            "value_type": "count",
        }
    )
    return pd.DataFrame(rows, columns=SUMMARY_COLUMNS)


def format_availability_summary(availability: AvailabilityConstraint) -> str:
    """Renders a short human-readable description of the constraint."""
    ref = availability.dataflow_ref
    lines = [
        "=== SDMX Availability Summary ===",
        f"Constraint: {availability.constraint_name or availability.constraint_id}",
        f"Dataflow: {ref.agency}:{ref.id}",
        f"Total Observations: {availability.total_observations}",
    ]
    if availability.time_coverage is not None:
        coverage = availability.time_coverage
        lines.append(f"Time Coverage: {coverage.start} to {coverage.end}")

    lines.append("")
    lines.append("Dimension Coverage:")
    for dim in availability.dimensions:
        sample = ", ".join(dim.available_values[:3])
        extra = dim.total_count - 3
        more = f" (and {extra} more)" if extra > 0 else ""
        lines.append(f"  {dim.dimension_id}: {dim.total_count} values - {sample}{more}")

    lines.append(f"Extracted: {availability.extraction_timestamp.isoformat()}")
    return "\n".join(lines)
