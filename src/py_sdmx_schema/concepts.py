"""
Concept extraction for SDMX structure documents.

Concepts give the human meaning behind component IDs. The schema extractor
uses `concept_names` to label dimensions, attributes and measures; callers
profiling a dataflow can use `extract_concepts` for a tabular overview.
"""

import logging
import xml.etree.ElementTree as ET
from typing import Dict, Optional, Tuple

import pandas as pd

from .config import SdmxSettings
from .fetcher import Fetcher
from .navigator import DocumentSource, XmlNavigator, load_document

logger = logging.getLogger(__name__)

CONCEPT_COLUMNS = ["concept_id", "description", "variable", "role"]

# (component path, role) in the order rows are emitted
_COMPONENT_ROLES = (
    ("Dimension", "dimension"),
    ("Attribute", "attribute"),
    ("PrimaryMeasure", "measure"),
    ("TimeDimension", "time_dimension"),
)


def concept_names(
    root: ET.Element, navigator: XmlNavigator
) -> Dict[Tuple[Optional[str], str], Optional[str]]:
    """
    Maps (concept scheme ID, concept ID) to the concept's name.

    Each concept is also registered under (None, concept ID) so references
    without a maintainableParentID still resolve. When two schemes define the
    same concept ID, the first one in the document wins for that fallback key.
    """
    names: Dict[Tuple[Optional[str], str], Optional[str]] = {}
    for scheme in navigator.find_all(root, "ConceptScheme"):
        scheme_id = navigator.attr(scheme, "id")
        for concept in navigator.find_all(scheme, "Concept", descendant=False):
            concept_id = navigator.attr(concept, "id")
            if concept_id is None:
                continue
            name = navigator.localized_text(concept, "common:Name")
            names[(scheme_id, concept_id)] = name
            names.setdefault((None, concept_id), name)
    logger.debug(f"Indexed {len(names)} concept keys")
    return names


def extract_concepts(
    source: DocumentSource,
    *,
    navigator: Optional[XmlNavigator] = None,
    fetcher: Optional[Fetcher] = None,
    settings: Optional[SdmxSettings] = None,
) -> pd.DataFrame:
    """
    Lists every component of every DSD in the document with its concept.

    Args:
        source: XML content, file path, URL, or a parsed element.
        navigator: Optional navigator with custom query strategies.
        fetcher: Optional fetcher used when `source` is a URL.
        settings: Optional SDMX settings used to build the default navigator.

    Returns:
        A DataFrame with columns: concept_id, description, variable, role.
        Components without a concept reference are skipped.
    """
    navigator = navigator or XmlNavigator.from_settings(settings or SdmxSettings())
    root = load_document(source, fetcher=fetcher)
    names = concept_names(root, navigator)

    rows = []
    for path, role in _COMPONENT_ROLES:
        for node in navigator.find_all(root, path):
            concept_ref = navigator.find(node, "ConceptIdentity/Ref")
            concept_id = navigator.attr(concept_ref, "id")
            if concept_id is None:
                continue
            scheme_id = navigator.attr(concept_ref, "maintainableParentID")
            description = names.get((scheme_id, concept_id), names.get((None, concept_id)))
            rows.append(
                {
                    "concept_id": concept_id,
                    "description": description,
                    "variable": navigator.attr(node, "id"),
                    "role": role,
                }
            )
    logger.info(f"Extracted {len(rows)} concept mappings")
    return pd.DataFrame(rows, columns=CONCEPT_COLUMNS)
