# Copyright (c) 2025-2026 Gowtham Adamane Rao. All Rights Reserved.
#
# Licensed under the Prosperity Public License 3.0.0 (the "License").
# You may not use this file except in compliance with the License.
# You may obtain a copy of the License in the LICENSE file at the root
# of this repository, or at: https://prosperitylicense.com/versions/3.0.0
#
# Commercial use beyond a 30-day trial requires a separate license.


from datetime import date

import pytest

from py_sdmx_schema.availability import (
    extract_availability,
    extract_time_availability,
    format_availability_summary,
    get_available_values,
    get_data_coverage_summary,
    get_time_coverage,
)
from py_sdmx_schema.config import SdmxSettings
from py_sdmx_schema.diagnostics import Diagnostics
from py_sdmx_schema.exceptions import MissingContentConstraintError, SdmxStructureError
from py_sdmx_schema.models import TimeFormat, ValueType
from py_sdmx_schema.navigator import parse_xml

S = "http://www.sdmx.org/resources/sdmxml/schemas/v2_1/structure"
C = "http://www.sdmx.org/resources/sdmxml/schemas/v2_1/common"


def _key_value(body: str):
    return parse_xml(f'<c:KeyValue xmlns:c="{C}" id="TIME_PERIOD">{body}</c:KeyValue>')


def test_extract_availability_from_spc_constraint(availability_xml):
    availability = extract_availability(availability_xml)

    assert availability.constraint_id == "CC_DF_BP50"
    assert availability.constraint_name == "Availability for DF_BP50"
    assert availability.agency_id == "SPC"
    assert availability.version == "1.0"
    assert availability.total_observations == 1234
    assert availability.dataflow_ref.id == "DF_BP50"
    assert availability.dataflow_ref.agency == "SPC"
    assert availability.dataflow_ref.version == "1.0"

    dims = {d.dimension_id: d for d in availability.dimensions}
    assert list(dims) == ["FREQ", "GEO_PICT", "TIME_PERIOD"]
    assert dims["FREQ"].available_values == ("A",)
    # Deduplicated and sorted
    assert dims["GEO_PICT"].available_values == ("FJ", "PG", "TO")
    assert dims["GEO_PICT"].total_count == 3
    assert dims["GEO_PICT"].value_type == ValueType.CODELIST
    assert dims["TIME_PERIOD"].available_values == ("2000-2022",)
    assert dims["TIME_PERIOD"].value_type == ValueType.TIME


def test_time_range_becomes_date_coverage(availability_xml):
    availability = extract_availability(availability_xml)
    coverage = get_time_coverage(availability)

    assert coverage.start == date(2000, 1, 1)
    assert coverage.end == date(2022, 12, 31)
    assert coverage.format == TimeFormat.DATE
    assert coverage.total_periods == 23
    assert coverage.gaps == ()


def test_time_range_year_span_counts_inclusive_years():
    key_value = _key_value(
        "<c:TimeRange>"
        "<c:StartPeriod>2020-01-01</c:StartPeriod>"
        "<c:EndPeriod>2023-12-31</c:EndPeriod>"
        "</c:TimeRange>"
    )
    coverage = extract_time_availability(key_value)
    assert coverage.total_periods == 4
    assert coverage.format == TimeFormat.DATE


def test_non_iso_time_bounds_are_kept_raw():
    key_value = _key_value(
        "<c:TimeRange>"
        "<c:StartPeriod>2020-Q1</c:StartPeriod>"
        "<c:EndPeriod>2021-Q4</c:EndPeriod>"
        "</c:TimeRange>"
    )
    diagnostics = Diagnostics()
    coverage = extract_time_availability(key_value, diagnostics=diagnostics)

    assert coverage.start == "2020-Q1"
    assert coverage.end == "2021-Q4"
    assert coverage.total_periods == 1
    assert diagnostics.codes() == ["unparsed_period_bound", "unparsed_period_bound"]


def test_discrete_time_values(fixtures_dir):
    availability = extract_availability(fixtures_dir / "availability_discrete_time.xml")
    coverage = availability.time_coverage

    assert coverage.format == TimeFormat.DISCRETE
    assert coverage.start == "2020-Q4"
    assert coverage.end == "2021-Q2"
    assert coverage.total_periods == 3
    assert get_available_values(availability, "TIME_PERIOD") == (
        "2020-Q4",
        "2021-Q1",
        "2021-Q2",
    )
    # Constraint as the document root, without an obs_count annotation
    assert availability.constraint_id == "CC_DISCRETE"
    assert availability.total_observations == 0
    assert availability.constraint_name is None


def test_alternative_prefixes_are_supported(fixtures_dir):
    availability = extract_availability(fixtures_dir / "availability_str_prefix.xml")

    assert availability.constraint_id == "CC_STR"
    assert availability.total_observations == 42
    # com:Ref is resolved by local name
    assert availability.dataflow_ref.id == "EXR"
    assert availability.dataflow_ref.agency == "ECB"
    assert get_available_values(availability, "CURRENCY") == ("JPY", "USD")
    assert availability.time_coverage is None


def test_unqualified_document_with_invalid_count(fixtures_dir):
    diagnostics = Diagnostics()
    availability = extract_availability(
        fixtures_dir / "availability_unqualified.xml", diagnostics=diagnostics
    )

    assert availability.total_observations == 0
    assert "invalid_obs_count" in diagnostics.codes()
    assert availability.dataflow_ref.id == "DF_PLAIN"
    assert availability.dataflow_ref.version == "2.0"
    assert get_available_values(availability, "REF_AREA") == ("DE", "FR")
    coverage = availability.time_coverage
    assert coverage.start == "2015"
    assert coverage.end == "2019"
    assert coverage.format == TimeFormat.DATE
    assert get_available_values(availability, "TIME_PERIOD") == ("2015-2019",)


def test_custom_time_dimension_id():
    xml = f"""<s:ContentConstraint xmlns:s="{S}" xmlns:c="{C}" id="CC">
  <s:CubeRegion>
    <c:KeyValue id="TIME">
      <c:Value>2020</c:Value>
      <c:Value>2021</c:Value>
    </c:KeyValue>
  </s:CubeRegion>
</s:ContentConstraint>"""
    default = extract_availability(xml)
    assert default.time_coverage is None

    custom = extract_availability(xml, settings=SdmxSettings(time_dimension_id="TIME"))
    assert custom.time_coverage.total_periods == 2
    assert custom.dimensions[0].value_type == ValueType.TIME


def test_unprefixed_env_vars_do_not_change_time_dimension(availability_xml, monkeypatch):
    monkeypatch.setenv("TIME_DIMENSION_ID", "SOMETHING_ELSE")

    availability = extract_availability(availability_xml)

    assert availability.time_coverage is not None
    assert availability.time_coverage.total_periods == 23


def test_constraint_without_cube_region_has_no_dimensions():
    xml = f'<s:ContentConstraint xmlns:s="{S}" id="EMPTY"/>'
    availability = extract_availability(xml)

    assert availability.dimensions == ()
    assert availability.total_observations == 0
    assert availability.dataflow_ref.id == "unknown"
    assert availability.agency_id == "unknown"


def test_missing_constraint_raises(fixtures_dir):
    with pytest.raises(MissingContentConstraintError) as excinfo:
        extract_availability(fixtures_dir / "error_response.xml")

    assert isinstance(excinfo.value, SdmxStructureError)
    assert "ContentConstraint" in str(excinfo.value)
    assert "ErrorMessage" in excinfo.value.found_elements


def test_get_available_values_for_unknown_dimension(sample_availability):
    assert get_available_values(sample_availability, "GEO_PICT") == ("FJ", "TO")
    assert get_available_values(sample_availability, "NOPE") == ()


def test_data_coverage_summary(sample_availability):
    summary = get_data_coverage_summary(sample_availability)

    assert list(summary.columns) == [
        "dimension_id",
        "available_values",
        "sample_values",
        "value_type",
    ]
    assert summary["dimension_id"].tolist() == [
        "FREQ",
        "GEO_PICT",
        "TIME_PERIOD",
        "TOTAL_OBSERVATIONS",
    ]
    total = summary.iloc[-1]
    assert total["available_values"] == 100
    assert total["value_type"] == "count"
    assert summary.iloc[1]["sample_values"] == "FJ, TO"


def test_format_availability_summary(availability_xml):
    text = format_availability_summary(extract_availability(availability_xml))

    assert "Constraint: Availability for DF_BP50" in text
    assert "Dataflow: SPC:DF_BP50" in text
    assert "Total Observations: 1234" in text
    assert "Time Coverage: 2000-01-01 to 2022-12-31" in text
    assert "GEO_PICT: 3 values - FJ, PG, TO" in text
