"""
Unit tests for the logging configuration.
"""

import logging

import pytest

from authgate.logging_config import HealthCheckFilter, get_logging_config


def access_record(method, path, name="uvicorn.access"):
    return logging.LogRecord(
        name, logging.INFO, __file__, 1,
        '%s - "%s %s HTTP/%s" %d',
        ("127.0.0.1:5000", method, path, "1.1", 200),
        None,
    )


@pytest.mark.parametrize("path", ["/health", "/healthz", "/healthz?probe=1"])
def test_liveness_gets_are_suppressed(path):
    """Test GETs on either health endpoint are dropped from access logs."""
    assert HealthCheckFilter().filter(access_record("GET", path)) is False


@pytest.mark.parametrize(
    "method,path",
    [
        ("GET", "/secure"),
        ("GET", "/healthcheck"),
        ("GET", "/secure?next=/health"),
        ("POST", "/health"),
        ("POST", "/auth/login"),
    ],
)
def test_other_requests_are_logged(method, path):
    """Test only exact health paths are filtered."""
    assert HealthCheckFilter().filter(access_record(method, path)) is True


def test_other_loggers_pass_through():
    """Test the filter leaves non-access loggers alone."""
    record = access_record("GET", "/health", name="authgate")

    assert HealthCheckFilter().filter(record) is True


def test_logging_config_levels():
    """Test the level applies to authgate and the audit logger stays separate."""
    config = get_logging_config("debug")

    assert config["loggers"]["authgate"]["level"] == "DEBUG"
    assert config["root"]["level"] == "DEBUG"
    assert config["loggers"]["authgate.audit"]["handlers"] == ["audit"]
    assert config["loggers"]["authgate.audit"]["propagate"] is False
    assert config["handlers"]["access"]["filters"] == ["health_check_filter"]
