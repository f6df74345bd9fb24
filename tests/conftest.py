"""
Pytest configuration for the runcompare test suite.

Provides:
- Loguru -> standard logging bridge so ``caplog`` sees package log output
- Hypothesis profile registration (property tests are skipped without it)
- Shared sample tables used across test modules
"""

import contextlib
import importlib.util
import logging
import sys
from pathlib import Path
from typing import List

src_path = str(Path(__file__).parent.parent / "src")
if src_path not in sys.path:
    sys.path.insert(0, src_path)

import pytest
from loguru import logger

HYPOTHESIS_AVAILABLE = importlib.util.find_spec("hypothesis") is not None

collect_ignore: List[str] = []

if HYPOTHESIS_AVAILABLE:
    from hypothesis import settings

    settings.register_profile("runcompare", max_examples=100, deadline=None)
    settings.load_profile("runcompare")
else:  # pragma: no cover - exercised when Hypothesis is absent
    collect_ignore.append("runcompare/test_properties.py")


SCENARIO_CSV = (
    "experiment_id,metric_name,step,value\n"
    "E1,loss,0,1.0\n"
    "E1,loss,1,0.5\n"
    "E2,loss,1,0.7\n"
    "E2,loss,2,0.4\n"
)


@pytest.fixture(autouse=True, scope="function")
def capture_loguru_logs_globally(caplog):
    """Forward Loguru records into pytest's ``caplog``."""

    class PropagateHandler(logging.Handler):
        def emit(self, record):
            logging.getLogger(record.name).handle(record)

    caplog.set_level(logging.DEBUG)
    handler_id = logger.add(
        PropagateHandler(),
        format="{message}",
        level="DEBUG",
        enqueue=False,
    )

    yield

    with contextlib.suppress(ValueError):
        logger.remove(handler_id)


@pytest.fixture
def scenario_csv() -> str:
    """Two experiments with partially overlapping ``loss`` steps."""
    return SCENARIO_CSV


@pytest.fixture
def scenario_file(tmp_path, scenario_csv) -> Path:
    path = tmp_path / "runs.csv"
    path.write_text(scenario_csv, encoding="utf-8")
    return path


@pytest.fixture
def mixed_csv() -> str:
    """
    Realistic export: reordered columns, blank lines, an extra column,
    a duplicate triple and malformed numeric cells.
    """
    return (
        "step,value,metric_name,experiment_id,wall_time\n"
        "0,2.30,loss,baseline,1000\n"
        "\n"
        "0,0.10,accuracy,baseline,1000\n"
        "1,1.90,loss,baseline,1010\n"
        "0,2.10,loss,warmup-lr,1000\n"
        "2,1.50,loss,warmup-lr,1020\n"
        "x,0.90,accuracy,broken,1030\n"
        "1,1.85,loss,baseline,1040\n"
        "1,,accuracy,baseline,1050\n"
        "   \n"
        "3,0.00,accuracy,warmup-lr,1060\n"
    )
