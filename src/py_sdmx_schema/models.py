# Copyright (c) 2025-2026 Gowtham Adamane Rao. All Rights Reserved.
#
# Licensed under the Prosperity Public License 3.0.0 (the "License").
# You may not use this file except in compliance with the License.
# You may obtain a copy of the License in the LICENSE file at the root
# of this repository, or at: https://prosperitylicense.com/versions/3.0.0
#
# Commercial use beyond a 30-day trial requires a separate license.


"""
Core data models for the py-sdmx-schema package.

This module defines Pydantic models that represent the domain objects
extracted from SDMX-ML documents: the dataflow schema (dimensions,
attributes, measures), the availability constraint, codelists, and the
reconciliation reports built from them. All models are frozen; once an
extraction returns, nothing downstream can change what it found.
"""

from datetime import date, datetime, timezone
from enum import Enum
from typing import Dict, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator


class FrozenModel(BaseModel):
    model_config = ConfigDict(frozen=True)


# === SDMX Metadata Models ===


class CodelistRef(FrozenModel):
    """Reference to an enumerated representation (a codelist)."""

    codelist_id: str = Field(description="The codelist ID (e.g., 'CL_FREQ').")
    agency: Optional[str] = Field(
        default=None, description="The maintenance agency of the codelist."
    )
    version: Optional[str] = Field(
        default=None, description="The version of the codelist."
    )


class DataflowInfo(FrozenModel):
    """Identity and labels of one dataflow version."""

    id: str = Field(description="The dataflow ID (e.g., 'DF_BP50').")
    agency: Optional[str] = Field(default=None, description="The owning agency.")
    version: Optional[str] = Field(default=None, description="The dataflow version.")
    name: Optional[str] = Field(
        default=None, description="The human-readable name, preferably in English."
    )
    description: Optional[str] = Field(
        default=None, description="The human-readable description, if published."
    )
    dsd_id: str = Field(description="The ID of the Data Structure Definition.")


class _Component(FrozenModel):
    id: str = Field(description="The component ID as used in data and keys.")
    concept_id: Optional[str] = Field(
        default=None, description="The ID of the concept this component represents."
    )
    concept_scheme: Optional[str] = Field(
        default=None, description="The concept scheme that owns the concept."
    )
    concept_name: Optional[str] = Field(
        default=None,
        description="The concept's name, when the concept is defined in the document.",
    )


class _CodedComponent(_Component):
    codelist_id: Optional[str] = Field(
        default=None, description="The codelist ID for enumerated components."
    )
    codelist_agency: Optional[str] = Field(
        default=None, description="The agency maintaining the codelist."
    )
    codelist_version: Optional[str] = Field(
        default=None, description="The version of the codelist."
    )
    data_type: Optional[str] = Field(
        default=None,
        description="The SDMX text type for non-enumerated components (e.g., 'String').",
    )

    @property
    def codelist(self) -> Optional[CodelistRef]:
        if self.codelist_id is None:
            return None
        return CodelistRef(
            codelist_id=self.codelist_id,
            agency=self.codelist_agency,
            version=self.codelist_version,
        )


class Dimension(_CodedComponent):
    """Represents a dimension in an SDMX Data Structure Definition (DSD)."""

    position: int = Field(description="The 1-based order of the dimension in the key.")
    is_time_dimension: bool = Field(
        default=False, description="True for the DSD's TimeDimension."
    )


class AssignmentStatus(str, Enum):
    """Whether an attribute must be reported."""

    MANDATORY = "Mandatory"
    CONDITIONAL = "Conditional"


class AttributeRelationship(str, Enum):
    """The level an attribute is attached to."""

    DATASET = "Dataset"
    OBSERVATION = "Observation"
    DIMENSION = "Dimension"


class Attribute(_CodedComponent):
    """Represents an attribute in an SDMX Data Structure Definition (DSD)."""

    assignment_status: AssignmentStatus = Field(
        default=AssignmentStatus.MANDATORY,
        description="Mandatory attributes become required columns.",
    )
    relationship: AttributeRelationship = Field(
        default=AttributeRelationship.DATASET,
        description="What the attribute attaches to.",
    )
    related_dimensions: Tuple[str, ...] = Field(
        default=(),
        description="Dimension IDs listed under a dimension relationship.",
    )


class Measure(_Component):
    """Represents a measure in an SDMX Data Structure Definition (DSD)."""

    data_type: str = Field(
        default="Double", description="The SDMX data type of the measure."
    )


class DataflowSchema(FrozenModel):
    """The complete structure of one dataflow: its DSD as seen through it."""

    dataflow_info: DataflowInfo
    dimensions: Tuple[Dimension, ...] = Field(
        description="Ordinary dimensions, in document order (time excluded)."
    )
    time_dimension: Optional[Dimension] = Field(
        default=None, description="The time dimension, if the DSD declares one."
    )
    attributes: Tuple[Attribute, ...] = ()
    measures: Tuple[Measure, ...] = ()

    @model_validator(mode="after")
    def _check_positions(self) -> "DataflowSchema":
        positions = [d.position for d in self.dimensions]
        if self.time_dimension is not None:
            positions.append(self.time_dimension.position)
        duplicates = sorted({p for p in positions if positions.count(p) > 1})
        if duplicates:
            raise ValueError(f"Duplicate dimension positions: {duplicates}")
        return self


class Code(FrozenModel):
    """Represents a single code in an SDMX Code List."""

    id: str = Field(description="The unique identifier for the code (e.g., 'FJ').")
    name: Optional[str] = Field(
        default=None, description="The human-readable name of the code (e.g., 'Fiji')."
    )
    description: Optional[str] = Field(
        default=None, description="An optional detailed description of the code."
    )
    parent_id: Optional[str] = Field(
        default=None,
        description="The ID of the parent code in a hierarchical code list.",
    )


class Codelist(FrozenModel):
    """Represents an SDMX Codelist, a collection of codes for a dimension."""

    id: str = Field(description="The unique identifier for the codelist.")
    agency: Optional[str] = Field(default=None, description="The maintenance agency.")
    version: Optional[str] = Field(default=None, description="The codelist version.")
    name: Optional[str] = Field(default=None, description="The codelist name.")
    codes: Dict[str, Code] = Field(
        default_factory=dict, description="A mapping from code IDs to Code objects."
    )


# === Availability Models ===


class TimeFormat(str, Enum):
    """How the bounds of a TimeAvailability were expressed."""

    DATE = "date"
    DISCRETE = "discrete"
    YEAR = "year"
    QUARTER = "quarter"
    MONTH = "month"


class ValueType(str, Enum):
    """The kind of values a dimension's availability lists."""

    CODELIST = "codelist"
    TIME = "time"
    FREE_TEXT = "free_text"


class DataflowRef(FrozenModel):
    """The dataflow a constraint applies to."""

    id: str = "unknown"
    agency: str = "unknown"
    version: str = "1.0"


class TimeAvailability(FrozenModel):
    """
    The time periods that actually have observations.

    `start` and `end` are calendar dates when the constraint used ISO-8601
    date bounds, and the raw period strings otherwise (e.g. '2020-Q1').
    """

    start: Union[date, str]
    end: Union[date, str]
    format: TimeFormat
    total_periods: int = Field(ge=0)
    gaps: Tuple[str, ...] = Field(
        default=(), description="Missing periods within the range, when known."
    )


class DimensionAvailability(FrozenModel):
    """The values of one dimension that have published data."""

    dimension_id: str
    available_values: Tuple[str, ...] = Field(
        description="Sorted and deduplicated values."
    )
    total_count: int = Field(ge=0)
    value_type: ValueType = ValueType.CODELIST


class AvailabilityConstraint(FrozenModel):
    """The observed-data envelope of one dataflow."""

    constraint_id: str = "unknown"
    constraint_name: Optional[str] = None
    agency_id: str = "unknown"
    version: str = "1.0"
    dataflow_ref: DataflowRef = Field(default_factory=DataflowRef)
    total_observations: int = Field(default=0, ge=0)
    dimensions: Tuple[DimensionAvailability, ...] = ()
    time_coverage: Optional[TimeAvailability] = None
    extraction_timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="When the constraint was extracted (UTC).",
    )


# === Reconciliation Models ===


class DimensionCoverage(FrozenModel):
    """What is locally knowable about one constrained dimension."""

    dimension_id: str
    available_count: int
    available_values: Tuple[str, ...]
    value_type: ValueType
    in_schema: bool = Field(description="Whether the schema defines this dimension.")
    codelist: Optional[CodelistRef] = Field(
        default=None, description="The schema's codelist for this dimension."
    )
    missing_values: Optional[Tuple[str, ...]] = Field(
        default=None,
        description="Codes without data; only set when the codelist was supplied.",
    )
    coverage_ratio: Optional[float] = Field(
        default=None,
        description="available / codelist size; only set when the codelist was supplied.",
    )
    note: Optional[str] = None


class SchemaAvailabilityComparison(FrozenModel):
    """Result of comparing a DataflowSchema with an AvailabilityConstraint."""

    dataflow_id: str
    constraint_dataflow_id: str
    dataflow_match: bool = Field(description="Dataflow IDs are equal.")
    agency_match: bool = Field(description="Dataflow agencies are equal.")
    total_observations: int
    coverage_by_dimension: Dict[str, DimensionCoverage]
    time_coverage: Optional[TimeAvailability] = None
