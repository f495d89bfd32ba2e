"""
conftest.py
===========
Session-level pytest configuration for the test suite.

Custom marks
------------
regression
    Applied to the worked scenarios that pin the exact output string of a
    complete analysis.  Select them alone with ``-m regression``.

    Registration here suppresses PytestUnknownMarkWarning and makes the mark
    visible in ``pytest --markers``.

Logger state
------------
The command-line entry point sets the level of the ``exsub`` package logger.
The autouse fixture below restores it after every test so that one CLI test
cannot change what later tests see in ``caplog``.
"""

import logging

import pytest


def pytest_configure(config):
    """
    Configure pytest before test collection begins.
    """
    config.addinivalue_line(
        "markers",
        "regression: end-to-end scenarios with a pinned output tree",
    )


@pytest.fixture(autouse=True)
def _restore_exsub_logger():
    logger = logging.getLogger("exsub")
    original_level = logger.level
    yield
    logger.setLevel(original_level)
