import logging

import pytest

from utils.logging import ROOT_LOGGER, get_logger, setup_logger


def test_setup_logger_is_idempotent():
    logger = setup_logger("ticksim.test_idempotent", "debug")
    setup_logger("ticksim.test_idempotent", logging.INFO)
    assert logger.level == logging.INFO
    assert len([h for h in logger.handlers if isinstance(h, logging.StreamHandler)]) == 1
    assert logger.propagate is False


def test_setup_logger_rejects_unknown_level():
    with pytest.raises(ValueError):
        setup_logger("ticksim.test_bad_level", "LOUD")


def test_module_loggers_live_under_root():
    assert get_logger("runner").name == f"{ROOT_LOGGER}.runner"
