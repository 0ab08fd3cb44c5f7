from pathlib import Path

from py_sdmx_schema.config import (
    SDMX21_STRUCTURE_NS,
    SDMX30_STRUCTURE_NS,
    AppSettings,
    HttpSettings,
    LoggingSettings,
    SdmxSettings,
)


def test_default_settings():
    settings = AppSettings(_env_file=None)

    assert settings.sdmx.structure_namespaces == [SDMX21_STRUCTURE_NS, SDMX30_STRUCTURE_NS]
    assert settings.sdmx.preferred_lang == "en"
    assert settings.sdmx.time_dimension_id == "TIME_PERIOD"
    assert settings.http.max_attempts == 5
    assert settings.log.level == "INFO"


def test_settings_load_from_env_file(tmp_path: Path, monkeypatch):
    """
    Verify that settings are correctly loaded from a .env file.
    """
    # 1. Create a dummy .env file in a temporary directory
    env_content = (
        'PY_SDMX_SCHEMA_SDMX__PREFERRED_LANG="fr"\n'
        'PY_SDMX_SCHEMA_HTTP__TIMEOUT="5"\n'
        'PY_SDMX_SCHEMA_LOG__LEVEL="DEBUG"\n'
    )
    env_file = tmp_path / ".env"
    env_file.write_text(env_content)

    # 2. Instantiate the settings object, passing the path to the .env file directly.
    settings = AppSettings(_env_file=env_file)

    # 3. Assert that the values were loaded correctly
    assert settings.sdmx.preferred_lang == "fr"
    assert settings.http.timeout == 5.0
    assert settings.log.level == "DEBUG"


def test_settings_env_vars_override_env_file(tmp_path: Path, monkeypatch):
    """
    Verify that environment variables take precedence over .env file settings.
    """
    env_file = tmp_path / ".env"
    env_file.write_text('PY_SDMX_SCHEMA_SDMX__TIME_DIMENSION_ID="TIME"\n')

    monkeypatch.setenv("PY_SDMX_SCHEMA_SDMX__TIME_DIMENSION_ID", "PERIOD")

    settings = AppSettings(_env_file=env_file)

    assert settings.sdmx.time_dimension_id == "PERIOD"



def test_section_settings_ignore_unprefixed_env_vars(monkeypatch):
    """
    Verify that generic variable names in the environment are not picked up.
    """
    monkeypatch.setenv("TIME_DIMENSION_ID", "SOMETHING_ELSE")
    monkeypatch.setenv("PREFERRED_LANG", "de")
    monkeypatch.setenv("TIMEOUT", "1")
    monkeypatch.setenv("LEVEL", "ERROR")

    assert SdmxSettings().time_dimension_id == "TIME_PERIOD"
    assert SdmxSettings().preferred_lang == "en"
    assert HttpSettings().timeout == 60.0
    assert LoggingSettings().level == "INFO"
    assert AppSettings(_env_file=None).sdmx.time_dimension_id == "TIME_PERIOD"


def test_section_settings_read_their_prefixed_env_vars(monkeypatch):
    monkeypatch.setenv("PY_SDMX_SCHEMA_SDMX__TIME_DIMENSION_ID", "PERIOD")
    monkeypatch.setenv("PY_SDMX_SCHEMA_HTTP__MAX_ATTEMPTS", "2")

    assert SdmxSettings().time_dimension_id == "PERIOD"
    assert HttpSettings().max_attempts == 2
