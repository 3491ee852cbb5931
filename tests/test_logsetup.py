import json
import logging
import re

import pytest

from critscore.logsetup import (
    Env,
    UnknownEnvError,
    lookup_env,
    new_logger,
    new_logger_from_config,
    parse_env,
)


@pytest.mark.parametrize(
    "text, expected",
    [("dev", Env.DEV), ("gcp", Env.GCP), ("unknown", Env.UNKNOWN), ("", Env.UNKNOWN)],
)
def test_lookup_env(text, expected):
    assert lookup_env(text) is expected


@pytest.mark.parametrize(
    "env, expected", [(Env.DEV, "dev"), (Env.GCP, "gcp"), (Env.UNKNOWN, "unknown")]
)
def test_env_string(env, expected):
    assert str(env) == expected


def test_parse_env_unknown_raises():
    with pytest.raises(UnknownEnvError):
        parse_env("unknown")


def test_parse_env_dev():
    assert str(parse_env("dev")) == "dev"


def test_dev_logger_format(capsys):
    logger = new_logger(Env.DEV, "info")
    assert logger.level == logging.INFO
    logger.info("hello world")
    err = capsys.readouterr().err
    assert re.match(r"^\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2}\.\d{3}\tINFO\thello world$", err.strip())


def test_level_filters_lower_records(capsys):
    logger = new_logger(Env.DEV, "warn")
    logger.info("quiet")
    logger.warning("loud")
    err = capsys.readouterr().err
    assert "quiet" not in err
    assert "loud" in err


def test_gcp_logger_outputs_json(capsys):
    logger = new_logger(Env.GCP, logging.INFO)
    logger.error("went wrong")
    entry = json.loads(capsys.readouterr().err.strip())
    assert entry["severity"] == "ERROR"
    assert entry["message"] == "went wrong"


def test_new_logger_numeric_level():
    logger = new_logger(Env.DEV, "debug")
    assert logger.level == logging.DEBUG


def test_invalid_level_raises():
    with pytest.raises(ValueError):
        new_logger(Env.DEV, "loudest")


def test_from_config_uses_defaults():
    logger = new_logger_from_config(Env.DEV, logging.ERROR, {})
    assert logger.level == logging.ERROR


def test_from_config_overrides(capsys):
    logger = new_logger_from_config(
        Env.DEV, logging.ERROR, {"log-env": "gcp", "log-level": "debug"}
    )
    assert logger.level == logging.DEBUG
    logger.debug("detail")
    entry = json.loads(capsys.readouterr().err.strip())
    assert entry["severity"] == "DEBUG"


def test_from_config_empty_values_use_defaults():
    logger = new_logger_from_config(Env.DEV, logging.WARNING, {"log-env": "", "log-level": ""})
    assert logger.level == logging.WARNING


def test_from_config_bad_env():
    with pytest.raises(UnknownEnvError):
        new_logger_from_config(Env.DEV, logging.INFO, {"log-env": "mars"})


def test_from_config_bad_level():
    with pytest.raises(ValueError):
        new_logger_from_config(Env.DEV, logging.INFO, {"log-level": "nope"})