"""
Codelist extraction for SDMX structure documents.

A fetched codelist is what turns an availability constraint into a gap
report: the codelist says which codes could exist, the constraint says which
have data.
"""

import logging
from typing import Dict, Optional

from .config import SdmxSettings
from .fetcher import Fetcher
from .models import Code, Codelist
from .navigator import DocumentSource, XmlNavigator, load_document

logger = logging.getLogger(__name__)


def extract_codelists(
    source: DocumentSource,
    *,
    navigator: Optional[XmlNavigator] = None,
    fetcher: Optional[Fetcher] = None,
    settings: Optional[SdmxSettings] = None,
) -> Dict[str, Codelist]:
    """
    Parses every Codelist in an SDMX structure document.

    Returns:
        A mapping from codelist ID to Codelist. Codes keep document order.
    """
    navigator = navigator or XmlNavigator.from_settings(settings or SdmxSettings())
    root = load_document(source, fetcher=fetcher)

    codelists: Dict[str, Codelist] = {}
    for cl_node in navigator.find_all(root, "Codelist", include_self=True):
        codelist_id = navigator.attr(cl_node, "id")
        if codelist_id is None:
            # A reference, not a definition
            continue

        codes: Dict[str, Code] = {}
        for code_node in navigator.find_all(cl_node, "Code", descendant=False):
            code_id = navigator.attr(code_node, "id")
            if code_id is None:
                continue
            parent_id = navigator.attr(navigator.find(code_node, "Parent/Ref"), "id")
            codes[code_id] = Code(
                id=code_id,
                name=navigator.localized_text(code_node, "common:Name"),
                description=navigator.localized_text(code_node, "common:Description"),
                parent_id=parent_id or navigator.attr(code_node, "parentCode"),
            )

        codelists[codelist_id] = Codelist(
            id=codelist_id,
            agency=navigator.attr(cl_node, "agencyID"),
            version=navigator.attr(cl_node, "version"),
            name=navigator.localized_text(cl_node, "common:Name"),
            codes=codes,
        )
        logger.debug(f"Parsed codelist {codelist_id} with {len(codes)} codes")

    logger.info(f"Extracted {len(codelists)} codelists")
    return codelists
