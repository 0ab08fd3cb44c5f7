# Copyright (c) 2025-2026 Gowtham Adamane Rao. All Rights Reserved.
#
# Licensed under the Prosperity Public License 3.0.0 (the "License").
# You may not use this file except in compliance with the License.
# You may obtain a copy of the License in the LICENSE file at the root
# of this repository, or at: https://prosperitylicense.com/versions/3.0.0
#
# Commercial use beyond a 30-day trial requires a separate license.


"""
Configuration module for the py-sdmx-schema package.

This module uses pydantic-settings to manage application configuration,
allowing settings to be loaded from environment variables or a .env file.
"""

from typing import List

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

SDMX21_STRUCTURE_NS = "http://www.sdmx.org/resources/sdmxml/schemas/v2_1/structure"
SDMX21_COMMON_NS = "http://www.sdmx.org/resources/sdmxml/schemas/v2_1/common"
SDMX30_STRUCTURE_NS = "http://www.sdmx.org/resources/sdmxml/schemas/v3_0/structure"
SDMX30_COMMON_NS = "http://www.sdmx.org/resources/sdmxml/schemas/v3_0/common"


class SdmxSettings(BaseSettings):
    """
    Defines how SDMX-ML documents are navigated.

    The namespace lists are tried in order. Each (structure, common) pair is
    turned into one namespace-prefixed query strategy, so support for a new
    provider dialect is a configuration change rather than a code change.
    """

    model_config = SettingsConfigDict(env_prefix="PY_SDMX_SCHEMA_SDMX__")

    structure_namespaces: List[str] = Field(
        default_factory=lambda: [SDMX21_STRUCTURE_NS, SDMX30_STRUCTURE_NS],
        description="Namespace URIs bound to the 'structure' prefix, in order.",
    )
    common_namespaces: List[str] = Field(
        default_factory=lambda: [SDMX21_COMMON_NS, SDMX30_COMMON_NS],
        description="Namespace URIs bound to the 'common' prefix, in order.",
    )
    preferred_lang: str = Field(
        default="en",
        description="The xml:lang preferred for names and descriptions.",
    )
    time_dimension_id: str = Field(
        default="TIME_PERIOD",
        description="The KeyValue id treated as the time dimension in constraints.",
    )
    obs_count_annotation_id: str = Field(
        default="obs_count",
        description="The annotation id carrying the observation count.",
    )


class HttpSettings(BaseSettings):
    """Defines how remote SDMX documents are fetched."""

    model_config = SettingsConfigDict(env_prefix="PY_SDMX_SCHEMA_HTTP__")

    timeout: float = Field(default=60.0, description="Request timeout in seconds.")
    user_agent: str = Field(
        default="py-sdmx-schema/1.0", description="User-Agent header value."
    )
    max_attempts: int = Field(
        default=5, ge=1, description="Maximum number of attempts per request."
    )
    backoff_min: float = Field(
        default=4.0, description="Minimum wait between retries, in seconds."
    )
    backoff_max: float = Field(
        default=60.0, description="Maximum wait between retries, in seconds."
    )


class LoggingSettings(BaseSettings):
    """Defines the logging configuration."""

    model_config = SettingsConfigDict(env_prefix="PY_SDMX_SCHEMA_LOG__")

    level: str = Field(
        default="INFO",
        description="The logging level, e.g., DEBUG, INFO, WARNING, ERROR.",
    )


class AppSettings(BaseSettings):
    """
    The main application settings model.
    """

    model_config = SettingsConfigDict(
        env_prefix="PY_SDMX_SCHEMA_",
        env_nested_delimiter="__",
        env_file=".env",
        env_file_encoding="utf-8",
    )
    sdmx: SdmxSettings = Field(default_factory=SdmxSettings)
    http: HttpSettings = Field(default_factory=HttpSettings)
    log: LoggingSettings = Field(default_factory=LoggingSettings)
