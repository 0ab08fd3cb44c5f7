"""
py-sdmx-schema: dataflow schema and availability extraction for SDMX-ML.
"""

from .availability import (
    extract_availability,
    extract_time_availability,
    format_availability_summary,
    get_available_values,
    get_data_coverage_summary,
    get_time_coverage,
)
from .codelists import extract_codelists
from .concepts import extract_concepts
from .config import AppSettings, HttpSettings, LoggingSettings, SdmxSettings
from .dataflow import (
    extract_dataflow_schema,
    get_codelist_columns,
    get_dimension_order,
    get_optional_columns,
    get_required_columns,
)
from .diagnostics import DiagnosticWarning, Diagnostics
from .exceptions import (
    MissingContentConstraintError,
    MissingDataflowError,
    MissingDataStructureError,
    SdmxError,
    SdmxFetchError,
    SdmxParseError,
    SdmxStructureError,
    SdmxValidationError,
    UnknownDimensionError,
)
from .fetcher import Fetcher, is_url, normalize_sdmx_url
from .models import (
    AssignmentStatus,
    Attribute,
    AttributeRelationship,
    AvailabilityConstraint,
    Code,
    Codelist,
    CodelistRef,
    DataflowInfo,
    DataflowRef,
    DataflowSchema,
    Dimension,
    DimensionAvailability,
    DimensionCoverage,
    Measure,
    SchemaAvailabilityComparison,
    TimeAvailability,
    TimeFormat,
    ValueType,
)
from .navigator import XmlNavigator, load_document, parse_xml
from .query import construct_data_url
from .reconcile import compare_schema_availability, construct_sdmx_key, find_data_gaps

__version__ = "0.1.0"

__all__ = [
    "AppSettings",
    "AssignmentStatus",
    "Attribute",
    "AttributeRelationship",
    "AvailabilityConstraint",
    "Code",
    "Codelist",
    "CodelistRef",
    "DataflowInfo",
    "DataflowRef",
    "DataflowSchema",
    "DiagnosticWarning",
    "Diagnostics",
    "Dimension",
    "DimensionAvailability",
    "DimensionCoverage",
    "Fetcher",
    "HttpSettings",
    "LoggingSettings",
    "Measure",
    "MissingContentConstraintError",
    "MissingDataStructureError",
    "MissingDataflowError",
    "SchemaAvailabilityComparison",
    "SdmxError",
    "SdmxFetchError",
    "SdmxParseError",
    "SdmxSettings",
    "SdmxStructureError",
    "SdmxValidationError",
    "TimeAvailability",
    "TimeFormat",
    "UnknownDimensionError",
    "ValueType",
    "XmlNavigator",
    "compare_schema_availability",
    "construct_data_url",
    "construct_sdmx_key",
    "extract_availability",
    "extract_codelists",
    "extract_concepts",
    "extract_dataflow_schema",
    "extract_time_availability",
    "find_data_gaps",
    "format_availability_summary",
    "get_available_values",
    "get_codelist_columns",
    "get_data_coverage_summary",
    "get_dimension_order",
    "get_optional_columns",
    "get_required_columns",
    "get_time_coverage",
    "is_url",
    "load_document",
    "normalize_sdmx_url",
    "parse_xml",
]
