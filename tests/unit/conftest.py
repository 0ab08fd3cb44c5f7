# Copyright (c) 2025-2026 Gowtham Adamane Rao. All Rights Reserved.
#
# Licensed under the Prosperity Public License 3.0.0 (the "License").
# You may not use this file except in compliance with the License.
# You may obtain a copy of the License in the LICENSE file at the root
# of this repository, or at: https://prosperitylicense.com/versions/3.0.0
#
# Commercial use beyond a 30-day trial requires a separate license.


import pytest

from py_sdmx_schema.models import (
    AssignmentStatus,
    Attribute,
    AttributeRelationship,
    AvailabilityConstraint,
    DataflowInfo,
    DataflowRef,
    DataflowSchema,
    Dimension,
    DimensionAvailability,
    Measure,
    ValueType,
)


@pytest.fixture
def sample_schema():
    """A small SPC-style schema: FREQ, GEO_PICT and a trailing TIME_PERIOD."""
    return DataflowSchema(
        dataflow_info=DataflowInfo(
            id="DF_BP50", agency="SPC", version="1.0", name="Balance of Payments", dsd_id="DSD_BP50"
        ),
        dimensions=(
            Dimension(id="FREQ", position=1, codelist_id="CL_FREQ"),
            Dimension(id="GEO_PICT", position=2, codelist_id="CL_GEO_PICT", codelist_agency="SPC"),
        ),
        time_dimension=Dimension(id="TIME_PERIOD", position=3, is_time_dimension=True),
        attributes=(
            Attribute(
                id="UNIT_MEASURE",
                assignment_status=AssignmentStatus.MANDATORY,
                codelist_id="CL_UNIT_MEASURE",
            ),
            Attribute(
                id="OBS_STATUS",
                assignment_status=AssignmentStatus.CONDITIONAL,
                relationship=AttributeRelationship.OBSERVATION,
            ),
        ),
        measures=(Measure(id="OBS_VALUE"),),
    )


@pytest.fixture
def sample_availability():
    """Availability for DF_BP50 covering two countries and a year range."""
    return AvailabilityConstraint(
        constraint_id="CC_DF_BP50",
        agency_id="SPC",
        dataflow_ref=DataflowRef(id="DF_BP50", agency="SPC", version="1.0"),
        total_observations=100,
        dimensions=(
            DimensionAvailability(
                dimension_id="FREQ", available_values=("A",), total_count=1
            ),
            DimensionAvailability(
                dimension_id="GEO_PICT", available_values=("FJ", "TO"), total_count=2
            ),
            DimensionAvailability(
                dimension_id="TIME_PERIOD",
                available_values=("2000-2022",),
                total_count=1,
                value_type=ValueType.TIME,
            ),
        ),
    )
