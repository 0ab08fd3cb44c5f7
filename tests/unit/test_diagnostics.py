import logging

from py_sdmx_schema.diagnostics import Diagnostics


def test_warn_records_and_logs(caplog):
    diagnostics = Diagnostics(logging.getLogger("py_sdmx_schema.test"))

    with caplog.at_level(logging.WARNING):
        warning = diagnostics.warn("invalid_obs_count", "Bad count 'N/A'", raw_value="N/A")

    assert warning.code == "invalid_obs_count"
    assert warning.context == {"raw_value": "N/A"}
    assert diagnostics.codes() == ["invalid_obs_count"]
    assert len(diagnostics) == 1
    assert "Bad count 'N/A'" in caplog.text


def test_empty_collector_has_no_warnings():
    diagnostics = Diagnostics()
    assert len(diagnostics) == 0
    assert diagnostics.warnings == []
