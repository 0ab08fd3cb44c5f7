# Copyright (c) 2025-2026 Gowtham Adamane Rao. All Rights Reserved.
#
# Licensed under the Prosperity Public License 3.0.0 (the "License").
# You may not use this file except in compliance with the License.
# You may obtain a copy of the License in the LICENSE file at the root
# of this repository, or at: https://prosperitylicense.com/versions/3.0.0
#
# Commercial use beyond a 30-day trial requires a separate license.


"""
Dataflow schema extraction.

Reads a Dataflow and the Data Structure Definition it references from an
SDMX-ML structure document and returns a DataflowSchema. The derived queries
at the bottom of the module (required/optional/codelist columns, dimension
order) operate on an already-built schema and never touch XML.
"""

import logging
import xml.etree.ElementTree as ET
from typing import Any, Dict, List, Optional, Tuple

from .concepts import concept_names
from .config import SdmxSettings
from .diagnostics import Diagnostics
from .exceptions import (
    MissingDataflowError,
    MissingDataStructureError,
    SdmxStructureError,
)
from .fetcher import Fetcher
from .models import (
    AssignmentStatus,
    Attribute,
    AttributeRelationship,
    CodelistRef,
    DataflowInfo,
    DataflowSchema,
    Dimension,
    Measure,
)
from .navigator import DocumentSource, XmlNavigator, load_document, local_name

logger = logging.getLogger(__name__)

# Element names allowed in a DimensionList. MeasureDimension takes part in the
# key like any other dimension.
_DIMENSION_ELEMENTS = ("Dimension", "MeasureDimension", "TimeDimension")

ConceptIndex = Dict[Tuple[Optional[str], str], Optional[str]]


def _concept_fields(
    node: ET.Element, navigator: XmlNavigator, concepts: ConceptIndex
) -> Dict[str, Any]:
    concept_ref = navigator.find(node, "ConceptIdentity/Ref")
    concept_id = navigator.attr(concept_ref, "id")
    concept_scheme = navigator.attr(concept_ref, "maintainableParentID")
    concept_name = None
    if concept_id is not None:
        concept_name = concepts.get(
            (concept_scheme, concept_id), concepts.get((None, concept_id))
        )
    return {
        "concept_id": concept_id,
        "concept_scheme": concept_scheme,
        "concept_name": concept_name,
    }


def _representation_fields(node: ET.Element, navigator: XmlNavigator) -> Dict[str, Any]:
    codelist_ref = navigator.find(node, "LocalRepresentation/Enumeration/Ref")
    text_format = navigator.find(node, "LocalRepresentation/TextFormat")
    return {
        "codelist_id": navigator.attr(codelist_ref, "id"),
        "codelist_agency": navigator.attr(codelist_ref, "agencyID"),
        "codelist_version": navigator.attr(codelist_ref, "version"),
        "data_type": navigator.attr(text_format, "textType"),
    }


def _component_id(node: ET.Element, dsd_node: ET.Element) -> str:
    component_id = node.get("id")
    if not component_id:
        element = local_name(node)
        dsd_id = dsd_node.get("id")
        raise SdmxStructureError(
            f"{element} in Data Structure Definition '{dsd_id}' has no id",
            element=element,
            identifier=dsd_id,
        )
    return component_id


def _parse_position(
    node: ET.Element, document_order: int, diagnostics: Diagnostics
) -> int:
    raw = node.get("position")
    if raw is not None and raw.strip().isdigit():
        return int(raw)
    dim_id = node.get("id", "?")
    diagnostics.warn(
        "invalid_position",
        f"Dimension '{dim_id}' has no valid position ({raw!r}); "
        f"using document order {document_order}",
        dimension_id=dim_id,
        raw_value=str(raw),
    )
    return document_order


def _extract_dimensions(
    dsd_node: ET.Element,
    navigator: XmlNavigator,
    concepts: ConceptIndex,
    diagnostics: Diagnostics,
) -> Tuple[List[Dimension], Optional[Dimension]]:
    dimension_list = navigator.find(dsd_node, "DimensionList")
    if dimension_list is None:
        logger.warning(f"DSD '{dsd_node.get('id')}' has no DimensionList")
        return [], None

    nodes: List[ET.Element] = []
    for element in _DIMENSION_ELEMENTS:
        nodes.extend(navigator.find_all(dimension_list, element, descendant=False))
    document_order = list(dimension_list)
    nodes.sort(key=document_order.index)

    dimensions: List[Dimension] = []
    time_dimensions: List[Dimension] = []
    for order, node in enumerate(nodes, start=1):
        dimension = Dimension(
            id=_component_id(node, dsd_node),
            position=_parse_position(node, order, diagnostics),
            is_time_dimension=local_name(node) == "TimeDimension",
            **_concept_fields(node, navigator, concepts),
            **_representation_fields(node, navigator),
        )
        if dimension.is_time_dimension:
            time_dimensions.append(dimension)
        else:
            dimensions.append(dimension)

    if len(time_dimensions) > 1:
        ids = [d.id for d in time_dimensions]
        raise SdmxStructureError(
            f"Expected at most one TimeDimension, found {len(ids)}: {', '.join(ids)}",
            element="TimeDimension",
            found_elements=ids,
        )

    positions = [d.position for d in dimensions + time_dimensions]
    duplicates = sorted({p for p in positions if positions.count(p) > 1})
    if duplicates:
        raise SdmxStructureError(
            f"Dimension positions must be unique; duplicated: {duplicates}",
            element="DimensionList",
            identifier=dsd_node.get("id"),
        )

    return dimensions, (time_dimensions[0] if time_dimensions else None)


def _parse_assignment_status(node: ET.Element, diagnostics: Diagnostics) -> AssignmentStatus:
    raw = node.get("assignmentStatus")
    if raw is None:
        # Unspecified means mandatory by SDMX convention.
        return AssignmentStatus.MANDATORY
    try:
        return AssignmentStatus(raw)
    except ValueError:
        attr_id = node.get("id", "?")
        diagnostics.warn(
            "invalid_assignment_status",
            f"Attribute '{attr_id}' has unknown assignmentStatus {raw!r}; "
            "treating it as Mandatory",
            attribute_id=attr_id,
            raw_value=raw,
        )
        return AssignmentStatus.MANDATORY


def _extract_attributes(
    dsd_node: ET.Element,
    navigator: XmlNavigator,
    concepts: ConceptIndex,
    diagnostics: Diagnostics,
) -> List[Attribute]:
    attributes = []
    for node in navigator.find_all(dsd_node, "AttributeList/Attribute"):
        relationship = AttributeRelationship.DATASET
        related: Tuple[str, ...] = ()
        if navigator.find(node, "AttributeRelationship/PrimaryMeasure") is not None:
            relationship = AttributeRelationship.OBSERVATION
        else:
            dim_refs = navigator.find_all(node, "AttributeRelationship/Dimension/Ref")
            if navigator.find(node, "AttributeRelationship/Dimension") is not None:
                relationship = AttributeRelationship.DIMENSION
                related = tuple(ref.get("id") for ref in dim_refs if ref.get("id"))

        attributes.append(
            Attribute(
                id=_component_id(node, dsd_node),
                assignment_status=_parse_assignment_status(node, diagnostics),
                relationship=relationship,
                related_dimensions=related,
                **_concept_fields(node, navigator, concepts),
                **_representation_fields(node, navigator),
            )
        )
    return attributes


def _extract_measures(
    dsd_node: ET.Element, navigator: XmlNavigator, concepts: ConceptIndex
) -> List[Measure]:
    nodes = navigator.find_all(dsd_node, "MeasureList/PrimaryMeasure")
    if not nodes:
        # SDMX 3.0 renamed PrimaryMeasure to Measure.
        nodes = navigator.find_all(dsd_node, "MeasureList/Measure")

    measures = []
    for node in nodes:
        text_format = navigator.find(node, "LocalRepresentation/TextFormat")
        measures.append(
            Measure(
                id=_component_id(node, dsd_node),
                data_type=navigator.attr(text_format, "textType") or "Double",
                **_concept_fields(node, navigator, concepts),
            )
        )
    return measures


def _find_dataflow(root: ET.Element, navigator: XmlNavigator) -> ET.Element:
    # Constraint attachments also contain Dataflow elements, but only as
    # references without an id of their own.
    for node in navigator.find_all(root, "Dataflow", include_self=True):
        if node.get("id"):
            return node
    raise MissingDataflowError(
        "No dataflow found in document. "
        f"Elements present: {', '.join(navigator.element_names(root))}",
        element="Dataflow",
        found_elements=navigator.element_names(root),
    )


def _find_dsd(root: ET.Element, navigator: XmlNavigator, dsd_id: str) -> ET.Element:
    for node in navigator.find_all(root, "DataStructure"):
        if node.get("id") == dsd_id:
            return node
    available = [
        node.get("id") for node in navigator.find_all(root, "DataStructure") if node.get("id")
    ]
    raise MissingDataStructureError(
        f"Data Structure Definition '{dsd_id}' not found. "
        f"DSDs present: {', '.join(available) or 'none'}",
        element="DataStructure",
        identifier=dsd_id,
        found_elements=available,
    )


def extract_dataflow_schema(
    source: DocumentSource,
    *,
    navigator: Optional[XmlNavigator] = None,
    diagnostics: Optional[Diagnostics] = None,
    fetcher: Optional[Fetcher] = None,
    settings: Optional[SdmxSettings] = None,
) -> DataflowSchema:
    """
    Extracts the complete schema of a dataflow from an SDMX structure document.

    Args:
        source: XML content, file path, URL, or a parsed element. The document
            must contain the Dataflow and the DataStructure it references
            (e.g. a dataflow query with references=all).
        navigator: Optional navigator with custom query strategies.
        diagnostics: Optional collector for degraded-data warnings.
        fetcher: Optional fetcher used when `source` is a URL.
        settings: Optional SDMX settings used to build the default navigator.

    Returns:
        A frozen DataflowSchema.

    Raises:
        MissingDataflowError: If the document has no Dataflow.
        MissingDataStructureError: If the referenced DSD is not in the document.
        SdmxStructureError: If the DimensionList is inconsistent.
    """
    navigator = navigator or XmlNavigator.from_settings(settings or SdmxSettings())
    diagnostics = diagnostics if diagnostics is not None else Diagnostics(logger)
    root = load_document(source, fetcher=fetcher)

    dataflow_node = _find_dataflow(root, navigator)
    dataflow_id = dataflow_node.get("id")
    dsd_id = navigator.attr(navigator.find(dataflow_node, "Structure/Ref"), "id")
    if dsd_id is None:
        raise MissingDataStructureError(
            f"Dataflow '{dataflow_id}' does not reference a Data Structure Definition",
            element="Structure",
            identifier=dataflow_id,
        )

    dataflow_info = DataflowInfo(
        id=dataflow_id,
        agency=dataflow_node.get("agencyID"),
        version=dataflow_node.get("version"),
        name=navigator.localized_text(dataflow_node, "common:Name"),
        description=navigator.localized_text(dataflow_node, "common:Description"),
        dsd_id=dsd_id,
    )
    logger.info(
        f"Extracting schema for dataflow {dataflow_info.agency}:{dataflow_id} "
        f"(DSD {dsd_id})"
    )

    dsd_node = _find_dsd(root, navigator, dsd_id)
    concepts = concept_names(root, navigator)

    dimensions, time_dimension = _extract_dimensions(
        dsd_node, navigator, concepts, diagnostics
    )
    schema = DataflowSchema(
        dataflow_info=dataflow_info,
        dimensions=tuple(dimensions),
        time_dimension=time_dimension,
        attributes=tuple(_extract_attributes(dsd_node, navigator, concepts, diagnostics)),
        measures=tuple(_extract_measures(dsd_node, navigator, concepts)),
    )
    logger.info(
        f"Extracted {len(schema.dimensions)} dimensions, "
        f"{len(schema.attributes)} attributes, {len(schema.measures)} measures"
    )
    return schema


# === Derived queries ===


def get_dimension_order(schema: DataflowSchema) -> List[str]:
    """
    Returns dimension IDs in SDMX key order.

    Dimensions are sorted by position. The time dimension goes after the last
    dimension whose position does not exceed its own, which puts it at the
    end in the usual case where it has the highest position.
    """
    ordered = sorted(schema.dimensions, key=lambda d: d.position)
    dimension_ids = [d.id for d in ordered]

    time_dim = schema.time_dimension
    if time_dim is not None:
        insert_at = 0
        for i, dim in enumerate(ordered):
            if dim.position <= time_dim.position:
                insert_at = i + 1
        dimension_ids.insert(insert_at, time_dim.id)

    return dimension_ids


def get_required_columns(schema: DataflowSchema) -> List[str]:
    """
    Columns that must be present in SDMX-CSV output: every dimension
    (including time), every measure, and every mandatory attribute.
    """
    required = get_dimension_order(schema)
    required.extend(m.id for m in schema.measures)
    required.extend(
        a.id
        for a in schema.attributes
        if a.assignment_status == AssignmentStatus.MANDATORY
    )
    return list(dict.fromkeys(required))


def get_optional_columns(schema: DataflowSchema) -> List[str]:
    """Conditional attributes, which may be omitted from SDMX-CSV output."""
    required = set(get_required_columns(schema))
    return [
        a.id
        for a in schema.attributes
        if a.assignment_status == AssignmentStatus.CONDITIONAL and a.id not in required
    ]


def get_codelist_columns(schema: DataflowSchema) -> Dict[str, CodelistRef]:
    """Maps each enumerated dimension or attribute to its codelist reference."""
    components = list(schema.dimensions)
    if schema.time_dimension is not None:
        components.append(schema.time_dimension)
    components.extend(schema.attributes)

    return {c.id: c.codelist for c in components if c.codelist is not None}
