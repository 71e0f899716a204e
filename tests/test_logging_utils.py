import logging

import numpy as np
import pytest

from scaffold_planner.logging_utils import apply_debug_logging, debug_log_call

logger = logging.getLogger("scaffold_planner.tests.logging")


def test_debug_log_call_logs_entry_and_result(caplog):
    @debug_log_call(logger)
    def add(a, b):
        return a + b

    with caplog.at_level(logging.DEBUG, logger=logger.name):
        assert add(1, b=np.zeros((2, 3))).shape == (2, 3)

    messages = [record.getMessage() for record in caplog.records]
    assert any("Entering" in m and "ndarray(shape=(2, 3)" in m for m in messages)
    assert any("Exiting" in m for m in messages)


def test_debug_log_call_reraises(caplog):
    @debug_log_call(logger)
    def boom():
        raise KeyError("missing")

    with caplog.at_level(logging.DEBUG, logger=logger.name):
        with pytest.raises(KeyError):
            boom()

    assert any("Exception in" in record.getMessage() for record in caplog.records)


def test_apply_debug_logging_wraps_functions_once():
    namespace = {"__name__": __name__}

    def helper():
        return 1
    namespace["helper"] = helper

    apply_debug_logging(namespace, logger=logger)
    wrapped = namespace["helper"]
    apply_debug_logging(namespace, logger=logger)

    assert wrapped is not helper
    assert namespace["helper"] is wrapped
    assert wrapped() == 1


class _Counter:
    def __init__(self):
        self.total = 0

    def bump(self, amount):
        self.total += amount
        return self.total

    @classmethod
    def starting_at(cls, value):
        counter = cls()
        counter.total = value
        return counter


def test_apply_debug_logging_wraps_methods_and_classmethods(caplog):
    namespace = {"__name__": __name__, "_Counter": _Counter}
    apply_debug_logging(namespace, logger=logger)

    with caplog.at_level(logging.DEBUG, logger=logger.name):
        counter = _Counter.starting_at(2)
        assert counter.bump(3) == 5

    messages = [record.getMessage() for record in caplog.records]
    assert any("Entering _Counter.starting_at" in m for m in messages)
    assert any("Exiting _Counter.bump -> 5" in m for m in messages)
