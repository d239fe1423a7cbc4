"""conftest.py
Integrate project logging with pytest and provide shared fixtures.
"""

import pytest
from src.logging import LoggerFactory
from src.parse_classes.document_processing_framework import DocumentProcessingFramework
from src.storage.document_storage import DocumentStorage
from src.test_helpers.documents import TickingClock

# --------------------------------------------------------------
# SETUP TEST LOGGING
# --------------------------------------------------------------

# Integrate logger with pytest
logger = LoggerFactory().get_logger(
    name="pytest_logger",
    logger_type="pytest",
    console=True
)
current_class = None
outcome_counts = {"PASSED": 0, "FAILED": 0, "SKIPPED": 0}

@pytest.hookimpl(tryfirst=True)
def pytest_sessionstart(session):
    """Session start header."""
    logger.info(f"==== PYTEST SESSION START: rootdir={session.config.rootpath} ====")

@pytest.hookimpl(tryfirst=True)
def pytest_runtest_logstart(nodeid, location):
    """Called at the start of each test."""
    global current_class
    class_name = location[0]
    if class_name != current_class:
        current_class = class_name
        logger.info(f"\n---- TestClass: {current_class} ----")

@pytest.hookimpl(tryfirst=True)
def pytest_runtest_logreport(report):
    """Called at the end of each test phase (setup/call/teardown)."""
    if report.when != "call":
        return  # only care about the main call, not setup/teardown

    status = report.outcome.upper()  # PASSED / FAILED / SKIPPED
    outcome_counts[status] = outcome_counts.get(status, 0) + 1
    if status == "PASSED":
        logger.info(f"PASSED: {report.nodeid} ({report.duration:.3f}s)")
    elif status == "FAILED":
        logger.error(f"FAILED: {report.nodeid}\n{report.longreprtext}")
    elif status == "SKIPPED":
        logger.warning(f"SKIPPED: {report.nodeid}\n{report.longreprtext}")

@pytest.hookimpl(tryfirst=True)
def pytest_sessionfinish(session, exitstatus):
    """Session finish footer."""
    summary = ", ".join(f"{count} {status.lower()}" for status, count in outcome_counts.items())
    logger.info(f"==== PYTEST SESSION END: exitstatus={exitstatus} ({summary}) ====")


# --------------------------------------------------------------
# SHARED FIXTURES
# --------------------------------------------------------------
@pytest.fixture
def clock():
    """Deterministic clock advancing one second per call."""
    return TickingClock()


@pytest.fixture
def storage(clock):
    """
    Fresh DocumentStorage per test, driven by the deterministic clock so
    timestamps are strictly increasing.
    """
    return DocumentStorage(clock=clock)


@pytest.fixture
def framework():
    """Single-threaded DocumentProcessingFramework."""
    return DocumentProcessingFramework(max_threads=1)
