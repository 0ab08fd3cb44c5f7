# Copyright (c) 2025-2026 Gowtham Adamane Rao. All Rights Reserved.
#
# Licensed under the Prosperity Public License 3.0.0 (the "License").
# You may not use this file except in compliance with the License.
# You may obtain a copy of the License in the LICENSE file at the root
# of this repository, or at: https://prosperitylicense.com/versions/3.0.0
#
# Commercial use beyond a 30-day trial requires a separate license.


"""
Reconciliation between a dataflow schema and its availability constraint.

- construct_sdmx_key: builds the dot-separated key used in SDMX data queries.
- compare_schema_availability: reports per-dimension coverage.
- find_data_gaps: lists expected values that have no data.
"""

import logging
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Union

from .availability import get_available_values
from .dataflow import get_codelist_columns, get_dimension_order
from .exceptions import SdmxValidationError, UnknownDimensionError
from .models import (
    AvailabilityConstraint,
    Codelist,
    DataflowSchema,
    DimensionCoverage,
    SchemaAvailabilityComparison,
)

logger = logging.getLogger(__name__)

FilterValue = Union[str, Sequence[str]]

CODELIST_FETCH_NOTE = "Full schema comparison requires codelist fetch"
# Segment and OR separators of an SDMX key
KEY_SEPARATORS = (".", "+")


def _key_segment(dimension_id: str, value: FilterValue) -> str:
    if isinstance(value, str):
        codes = [value]
    elif isinstance(value, (list, tuple)):
        codes = list(value)
    elif isinstance(value, (set, frozenset)):
        codes = sorted(value, key=str)
    else:
        raise SdmxValidationError(
            f"Filter value for dimension '{dimension_id}' must be a string or "
            f"a sequence of strings, got {type(value).__name__}"
        )

    for code in codes:
        if not isinstance(code, str):
            raise SdmxValidationError(
                f"Filter values for dimension '{dimension_id}' must be strings"
            )
        if any(sep in code for sep in KEY_SEPARATORS):
            raise SdmxValidationError(
                f"Filter value '{code}' for dimension '{dimension_id}' must not "
                "contain '.' or '+'"
            )
        if not code and len(codes) > 1:
            raise SdmxValidationError(
                f"Empty code in the filter values for dimension '{dimension_id}'"
            )
    # SDMX REST uses '+' for OR within one key position.
    return "+".join(codes)


def construct_sdmx_key(
    schema: DataflowSchema, filters: Mapping[str, FilterValue]
) -> str:
    """
    Constructs an SDMX key using the schema to determine dimension order.

    Segment i of the result always corresponds to get_dimension_order(schema)[i];
    dimensions absent from `filters` contribute an empty segment, meaning
    "all values". Filter insertion order has no effect.

    Args:
        schema: The dataflow schema providing dimension order.
        filters: Maps dimension IDs to one code, or a sequence of codes
            which are joined with '+'.

    Returns:
        The key, e.g. "A.FJ." for FREQ=A, GEO_PICT=FJ and an unfiltered
        TIME_PERIOD.

    Raises:
        UnknownDimensionError: If a filter names a dimension not in the schema.
        SdmxValidationError: If a filter value is not a string or a sequence of
            strings, or a code contains a key separator.
    """
    dimension_order = get_dimension_order(schema)
    known = set(dimension_order)
    for dimension_id in filters:
        if dimension_id not in known:
            raise UnknownDimensionError(dimension_id, dimension_order)

    segments = [
        _key_segment(dim, filters[dim]) if dim in filters else ""
        for dim in dimension_order
    ]
    key = ".".join(segments)
    logger.debug(f"Constructed SDMX key '{key}' for {schema.dataflow_info.id}")
    return key


def compare_schema_availability(
    schema: DataflowSchema,
    availability: AvailabilityConstraint,
    codelists: Optional[Mapping[str, Codelist]] = None,
) -> SchemaAvailabilityComparison:
    """
    Compares theoretical schema possibilities with actual data availability.

    Only locally knowable facts are reported: the available values of each
    constrained dimension, the codelist the schema assigns it, and whether
    the constraint targets this dataflow. When `codelists` holds the
    referenced codelist, missing codes and the coverage ratio are filled in
    as well.

    Args:
        schema: The dataflow schema.
        availability: The availability constraint for the same dataflow.
        codelists: Optional mapping from codelist ID to a fetched Codelist.
    """
    codelists = codelists or {}
    schema_codelists = get_codelist_columns(schema)
    schema_dimensions = set(get_dimension_order(schema))

    dataflow_match = availability.dataflow_ref.id == schema.dataflow_info.id
    agency_match = availability.dataflow_ref.agency == schema.dataflow_info.agency
    if not dataflow_match:
        logger.warning(
            f"Constraint targets dataflow '{availability.dataflow_ref.id}', "
            f"not '{schema.dataflow_info.id}'"
        )
    elif not agency_match:
        logger.warning(
            f"Constraint agency '{availability.dataflow_ref.agency}' differs from "
            f"dataflow agency '{schema.dataflow_info.agency}'"
        )

    coverage: Dict[str, DimensionCoverage] = {}
    for dim in availability.dimensions:
        codelist_ref = schema_codelists.get(dim.dimension_id)
        missing_values = None
        coverage_ratio = None
        note = None
        if codelist_ref is not None:
            codelist = codelists.get(codelist_ref.codelist_id)
            if codelist is None:
                note = CODELIST_FETCH_NOTE
            else:
                expected = set(codelist.codes)
                missing_values = tuple(sorted(expected - set(dim.available_values)))
                if expected:
                    covered = len(expected & set(dim.available_values))
                    coverage_ratio = covered / len(expected)

        coverage[dim.dimension_id] = DimensionCoverage(
            dimension_id=dim.dimension_id,
            available_count=len(dim.available_values),
            available_values=dim.available_values,
            value_type=dim.value_type,
            in_schema=dim.dimension_id in schema_dimensions,
            codelist=codelist_ref,
            missing_values=missing_values,
            coverage_ratio=coverage_ratio,
            note=note,
        )

    return SchemaAvailabilityComparison(
        dataflow_id=schema.dataflow_info.id,
        constraint_dataflow_id=availability.dataflow_ref.id,
        dataflow_match=dataflow_match,
        agency_match=agency_match,
        total_observations=availability.total_observations,
        coverage_by_dimension=coverage,
        time_coverage=availability.time_coverage,
    )


def find_data_gaps(
    availability: AvailabilityConstraint, expected: Mapping[str, Iterable[str]]
) -> Dict[str, List[str]]:
    """
    Identifies expected values that have no data.

    Args:
        availability: The availability constraint.
        expected: Maps dimension IDs to the full list of values they should
            cover (e.g. the codes of a fetched codelist).

    Returns:
        Maps dimension IDs to sorted missing values. Dimensions with nothing
        missing are omitted.
    """
    gaps: Dict[str, List[str]] = {}
    for dimension_id, expected_values in expected.items():
        available = set(get_available_values(availability, dimension_id))
        missing = set(expected_values) - available
        if missing:
            gaps[dimension_id] = sorted(missing)
    return gaps
