import matplotlib

matplotlib.use("Agg")

import pytest
from common.models import Task


@pytest.fixture
def make_tasks():
    """Build tasks from (name, arrival_time, priority, burst_time) tuples."""
    def _make(*rows):
        return [Task(name, arrival, priority, burst) for name, arrival, priority, burst in rows]
    return _make


@pytest.fixture
def task_file(tmp_path):
    def _write(lines, name="tasks.txt"):
        path = tmp_path / name
        path.write_text("\n".join(lines) + "\n")
        return path
    return _write
