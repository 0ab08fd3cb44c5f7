# Copyright (c) 2025-2026 Gowtham Adamane Rao. All Rights Reserved.
#
# Licensed under the Prosperity Public License 3.0.0 (the "License").
# You may not use this file except in compliance with the License.
# You may obtain a copy of the License in the LICENSE file at the root
# of this repository, or at: https://prosperitylicense.com/versions/3.0.0
#
# Commercial use beyond a 30-day trial requires a separate license.


"""
Custom exceptions for the py-sdmx-schema package.

Structural errors mean the document cannot describe what was asked for and
abort the call. Validation errors mean the caller passed bad input. Degraded
data is never raised; it is recorded in a Diagnostics collector instead.
"""

from typing import Optional, Sequence


class SdmxError(Exception):
    """Base exception for all SDMX extraction related errors."""


class SdmxParseError(SdmxError, ValueError):
    """Raised when a document is not well-formed XML."""

    def __init__(self, message: str, xml_content: Optional[str] = None):
        super().__init__(message)
        # First 500 characters are enough to recognise an HTML error page.
        if xml_content and len(xml_content) > 500:
            xml_content = xml_content[:500] + "..."
        self.xml_content = xml_content


class SdmxStructureError(SdmxError, LookupError):
    """Raised when an element the extraction depends on is missing."""

    def __init__(
        self,
        message: str,
        element: str,
        identifier: Optional[str] = None,
        found_elements: Sequence[str] = (),
    ):
        """
        Args:
            message: Error description.
            element: Local name of the missing element (e.g. 'Dataflow').
            identifier: The id that was looked up, if the lookup was by id.
            found_elements: A sample of element names present in the document.
        """
        super().__init__(message)
        self.element = element
        self.identifier = identifier
        self.found_elements = list(found_elements)


class MissingDataflowError(SdmxStructureError):
    """The structure document contains no Dataflow."""


class MissingDataStructureError(SdmxStructureError):
    """The Dataflow references a DataStructure absent from the document."""


class MissingContentConstraintError(SdmxStructureError):
    """The availability document contains no ContentConstraint."""


class SdmxValidationError(SdmxError, ValueError):
    """Raised when caller-supplied input does not fit the schema."""


class UnknownDimensionError(SdmxValidationError):
    """A filter names a dimension the dataflow does not have."""

    def __init__(self, dimension: str, valid_dimensions: Sequence[str]):
        self.dimension = dimension
        self.valid_dimensions = list(valid_dimensions)
        super().__init__(
            f"Dimension '{dimension}' not found in dataflow schema. "
            f"Available dimensions: {', '.join(self.valid_dimensions)}"
        )


class SdmxFetchError(SdmxError):
    """Raised when a remote resource does not yield usable XML."""
