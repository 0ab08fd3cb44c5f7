# Copyright (c) 2025-2026 Gowtham Adamane Rao. All Rights Reserved.
#
# Licensed under the Prosperity Public License 3.0.0 (the "License").
# You may not use this file except in compliance with the License.
# You may obtain a copy of the License in the LICENSE file at the root
# of this repository, or at: https://prosperitylicense.com/versions/3.0.0
#
# Commercial use beyond a 30-day trial requires a separate license.


"""
Namespace-tolerant navigation of parsed SDMX-ML documents.

Agencies publish SDMX-ML under different namespace versions and prefixes, and
some omit namespaces entirely. Rather than hard-coding one dialect, every
lookup is expressed as a logical path (e.g. "ConceptIdentity/Ref") and handed
to an ordered list of query strategies. The first strategy that yields a
non-empty result wins. Absence is never an error here; callers decide whether
a missing element is fatal.
"""

import logging
import re
import xml.etree.ElementTree as ET
from abc import ABC, abstractmethod
from pathlib import Path
from typing import List, Mapping, NamedTuple, Optional, Sequence, Union

from .config import (
    SDMX21_COMMON_NS,
    SDMX21_STRUCTURE_NS,
    SDMX30_COMMON_NS,
    SDMX30_STRUCTURE_NS,
    AppSettings,
    SdmxSettings,
)
from .exceptions import SdmxParseError
from .fetcher import Fetcher, is_url

logger = logging.getLogger(__name__)

XML_LANG = "{http://www.w3.org/XML/1998/namespace}lang"
DEFAULT_PREFIX = "structure"
# SDMX 2.1 declares reference elements without a namespace.
UNQUALIFIED_ELEMENTS = frozenset({"Ref", "URN"})

_STEP_RE = re.compile(r"^(?:(?P<prefix>[A-Za-z_][\w.-]*):)?(?P<name>[A-Za-z_][\w.-]*)$")
# "dataflow.xml" also reads as a bare domain; such names are local files.
_LOCAL_FILE_RE = re.compile(r"^[^/:]+\.xml(?:$|/)", re.IGNORECASE)

DocumentSource = Union[ET.Element, ET.ElementTree, bytes, str, Path]


class PathStep(NamedTuple):
    """One step of a logical path, e.g. 'common:Name'."""

    prefix: Optional[str]
    name: str


def parse_path(path: str) -> List[PathStep]:
    """Splits a logical path like 'Structure/Ref' into validated steps."""
    steps = []
    for raw in path.strip("/").split("/"):
        match = _STEP_RE.match(raw)
        if not match:
            raise ValueError(f"Invalid path step '{raw}' in '{path}'")
        steps.append(PathStep(match.group("prefix"), match.group("name")))
    return steps


def local_name(tag: Union[str, ET.Element]) -> str:
    """Returns the tag name without its '{namespace}' part."""
    if not isinstance(tag, str):
        tag = tag.tag
    return tag.rsplit("}", 1)[-1]


class QueryStrategy(ABC):
    """Translates a logical path step into an ElementTree tag expression."""

    name = "abstract"

    @abstractmethod
    def compile_step(self, step: PathStep) -> Optional[str]:
        """
        Returns the tag expression for a step, or None if this strategy
        cannot express it (e.g. an unknown prefix).
        """

    def compile(self, steps: Sequence[PathStep], descendant: bool = True) -> Optional[str]:
        parts = []
        for step in steps:
            compiled = self.compile_step(step)
            if compiled is None:
                return None
            parts.append(compiled)
        return (".//" if descendant else "./") + "/".join(parts)

    def matches(self, node: ET.Element, step: PathStep) -> bool:
        compiled = self.compile_step(step)
        if compiled is None:
            return False
        if compiled.startswith("{*}"):
            return local_name(node) == step.name
        return node.tag == compiled

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name!r})"


class NamespacedStrategy(QueryStrategy):
    """
    Resolves prefixes against a fixed prefix-to-URI mapping.

    Unprefixed steps use the 'structure' prefix, except reference elements
    which SDMX leaves unqualified.
    """

    def __init__(self, namespaces: Mapping[str, str], name: Optional[str] = None):
        self.namespaces = dict(namespaces)
        self.name = name or self.namespaces.get(DEFAULT_PREFIX, "namespaced")

    def compile_step(self, step: PathStep) -> Optional[str]:
        prefix = step.prefix
        if prefix is None:
            if step.name in UNQUALIFIED_ELEMENTS:
                return step.name
            prefix = DEFAULT_PREFIX
        uri = self.namespaces.get(prefix)
        if uri is None:
            return None
        return f"{{{uri}}}{step.name}"


class UnqualifiedStrategy(QueryStrategy):
    """Matches elements that carry no namespace at all."""

    name = "unqualified"

    def compile_step(self, step: PathStep) -> Optional[str]:
        return step.name


class LocalNameStrategy(QueryStrategy):
    """Matches on local name only, whatever namespace the element is in."""

    name = "local-name"

    def compile_step(self, step: PathStep) -> Optional[str]:
        return f"{{*}}{step.name}"


def default_strategies() -> List[QueryStrategy]:
    return [
        NamespacedStrategy(
            {"structure": SDMX21_STRUCTURE_NS, "common": SDMX21_COMMON_NS},
            name="sdmx-2.1",
        ),
        NamespacedStrategy(
            {"structure": SDMX30_STRUCTURE_NS, "common": SDMX30_COMMON_NS},
            name="sdmx-3.0",
        ),
        UnqualifiedStrategy(),
        LocalNameStrategy(),
    ]


class XmlNavigator:
    """
    Resolves logical paths against parsed XML using ordered query strategies.
    """

    def __init__(
        self,
        strategies: Optional[Sequence[QueryStrategy]] = None,
        preferred_lang: str = "en",
    ):
        self.strategies: List[QueryStrategy] = (
            list(strategies) if strategies is not None else default_strategies()
        )
        if not self.strategies:
            raise ValueError("At least one query strategy is required.")
        self.preferred_lang = preferred_lang

    @classmethod
    def from_settings(cls, settings: SdmxSettings) -> "XmlNavigator":
        """
        Builds one namespaced strategy per configured (structure, common)
        namespace pair, followed by the unqualified and local-name fallbacks.
        """
        strategies: List[QueryStrategy] = []
        for i, structure_ns in enumerate(settings.structure_namespaces):
            namespaces = {"structure": structure_ns}
            if i < len(settings.common_namespaces):
                namespaces["common"] = settings.common_namespaces[i]
            strategies.append(NamespacedStrategy(namespaces))
        strategies.extend([UnqualifiedStrategy(), LocalNameStrategy()])
        return cls(strategies, preferred_lang=settings.preferred_lang)

    def find_all(
        self,
        node: ET.Element,
        path: str,
        *,
        descendant: bool = True,
        include_self: bool = False,
    ) -> List[ET.Element]:
        """
        Returns all nodes matching `path` using the first strategy that finds
        anything. With `include_self`, a single-step path may also match
        `node` itself (documents whose root is the element being sought).
        """
        steps = parse_path(path)
        for strategy in self.strategies:
            query = strategy.compile(steps, descendant=descendant)
            if query is None:
                continue
            found = node.findall(query)
            if include_self and len(steps) == 1 and strategy.matches(node, steps[0]):
                found.insert(0, node)
            if found:
                logger.debug(f"Resolved '{path}' with strategy {strategy!r}")
                return found
        return []

    def find(
        self,
        node: ET.Element,
        path: str,
        *,
        descendant: bool = True,
        include_self: bool = False,
    ) -> Optional[ET.Element]:
        found = self.find_all(
            node, path, descendant=descendant, include_self=include_self
        )
        return found[0] if found else None

    @staticmethod
    def attr(node: Optional[ET.Element], name: str) -> Optional[str]:
        """Attribute value, or None when the node or the attribute is absent."""
        if node is None:
            return None
        return node.get(name)

    @staticmethod
    def text(node: Optional[ET.Element]) -> Optional[str]:
        """Stripped text content, or None when absent or blank."""
        if node is None:
            return None
        content = "".join(node.itertext()).strip()
        return content or None

    def localized_text(
        self, node: ET.Element, path: str, lang: Optional[str] = None
    ) -> Optional[str]:
        """
        Text of the direct child matching `path` in the preferred language,
        falling back to the first variant when that language is missing.
        """
        candidates = self.find_all(node, path, descendant=False)
        if not candidates:
            return None
        lang = lang or self.preferred_lang
        for candidate in candidates:
            if candidate.get(XML_LANG) == lang:
                return self.text(candidate)
        return self.text(candidates[0])

    @staticmethod
    def element_names(root: ET.Element, limit: int = 10) -> List[str]:
        """Local names of the first `limit` elements in document order."""
        names = []
        for element in root.iter():
            if not isinstance(element.tag, str):
                # Comments and processing instructions
                continue
            names.append(local_name(element))
            if len(names) >= limit:
                break
        return names


def parse_xml(content: Union[str, bytes]) -> ET.Element:
    """Parses XML text, converting parser failures into SdmxParseError."""
    try:
        return ET.fromstring(content)
    except ET.ParseError as e:
        text = content.decode("utf-8", "replace") if isinstance(content, bytes) else content
        raise SdmxParseError(
            f"Failed to parse SDMX document: {e}. It may be empty or malformed.",
            xml_content=text,
        ) from e


def load_document(
    source: DocumentSource, fetcher: Optional[Fetcher] = None
) -> ET.Element:
    """
    Returns the root element for any supported input.

    Accepts an already-parsed element or tree, raw XML as bytes or text, a
    path to a file, or a URL. URLs are resolved through `fetcher`; a default
    Fetcher is created when none is given.
    A name like "dataflow.xml" that is not an existing file raises instead of
    being fetched as a bare domain.
    """
    if isinstance(source, ET.ElementTree):
        return source.getroot()
    if ET.iselement(source):
        return source
    if isinstance(source, Path):
        logger.info(f"Reading SDMX document from {source}")
        return parse_xml(source.read_bytes())
    if isinstance(source, bytes):
        return parse_xml(source)
    if isinstance(source, str):
        stripped = source.strip()
        if not stripped:
            raise SdmxParseError("Input cannot be empty.")
        if stripped.startswith("<"):
            return parse_xml(stripped)
        path = Path(stripped)
        if path.is_file():
            logger.info(f"Reading SDMX document from {path}")
            return parse_xml(path.read_bytes())
        if _LOCAL_FILE_RE.match(stripped) and not stripped.lower().startswith("www."):
            raise SdmxParseError(f"File not found: {stripped}")

        if is_url(stripped):
            if fetcher is None:
                fetcher = Fetcher(AppSettings())
            return parse_xml(fetcher.fetch_sdmx_xml(stripped))
        raise SdmxParseError(
            "Input is neither XML content, an existing file, nor a URL.",
            xml_content=stripped,
        )
    raise TypeError(f"Unsupported document source type: {type(source).__name__}")
