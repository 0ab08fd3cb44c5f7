"""
Builds SDMX REST data query URLs.

The path layout follows the SDMX 2.1 REST convention:
    {base}/data/{agency},{dataflow},{version}/{key}?{params}
"""

import logging
from typing import Mapping, Optional
from urllib.parse import urlencode

from .exceptions import SdmxValidationError
from .models import DataflowSchema
from .reconcile import FilterValue, construct_sdmx_key

logger = logging.getLogger(__name__)


def construct_data_url(
    base_url: str,
    agency_id: str,
    dataflow_id: str,
    version: str = "latest",
    *,
    schema: Optional[DataflowSchema] = None,
    key: str = "",
    dimension_filters: Optional[Mapping[str, FilterValue]] = None,
    start_period: Optional[str] = None,
    end_period: Optional[str] = None,
    dimension_at_observation: str = "AllDimensions",
) -> str:
    """
    Constructs a data query URL for a dataflow.

    An explicit `key` is used as-is. Otherwise, when `dimension_filters` are
    given, the key is built from the schema so that every value lands at its
    dimension's position.

    Raises:
        SdmxValidationError: If filters are given without a schema.
        UnknownDimensionError: If a filter names a dimension not in the schema.
    """
    if not key and dimension_filters:
        if schema is None:
            raise SdmxValidationError(
                "A dataflow schema is required to build a key from dimension filters"
            )
        key = construct_sdmx_key(schema, dimension_filters)

    params = {}
    if start_period:
        params["startPeriod"] = start_period
    if end_period:
        params["endPeriod"] = end_period
    if dimension_at_observation:
        params["dimensionAtObservation"] = dimension_at_observation

    url = f"{base_url.rstrip('/')}/data/{agency_id},{dataflow_id},{version}/{key}"
    if params:
        url = f"{url}?{urlencode(params)}"
    logger.debug(f"Constructed data URL {url}")
    return url
