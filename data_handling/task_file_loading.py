import re
import sys
from pathlib import Path
from common.models import Task


EXPECTED_FORMAT = "TaskName, arrivalTime, priority, burstTime"

TASK_LINE = re.compile(r"^([^,]*),\s*([+-]?\d+)\s*,\s*([+-]?\d+)\s*,\s*([+-]?\d+)$")


class MalformedTaskLine(ValueError):
    """Raised when a line of a task file does not describe a valid task."""

    def __init__(self, line, reason):
        super().__init__(f"{reason}: {line!r}")
        self.line = line
        self.reason = reason


def parse_task_line(line):
    """
    Parse one task description such as:
      TaskA, 0, 3, 5

    Surrounding spaces and tabs are trimmed. Raw bytes must decode as UTF-8.
    Returns a Task, or raises MalformedTaskLine.
    """
    if isinstance(line, bytes):
        try:
            line = line.decode('utf-8')
        except UnicodeDecodeError:
            raise MalformedTaskLine(line.decode('utf-8', errors='replace').strip(" \t\r\n"),
                                    "line is not valid UTF-8")

    stripped = line.strip(" \t\r\n")

    match = TASK_LINE.match(stripped)
    if match is None:
        raise MalformedTaskLine(stripped, "expected four comma separated fields")

    name = match.group(1).strip()
    if not name:
        raise MalformedTaskLine(stripped, "task name is empty")

    arrival_time, priority, burst_time = (int(match.group(i)) for i in (2, 3, 4))
    if arrival_time < 0:
        raise MalformedTaskLine(stripped, "arrival time must not be negative")
    if burst_time <= 0:
        raise MalformedTaskLine(stripped, "burst time must be positive")

    return Task(name, arrival_time, priority, burst_time)


class TaskRegistry:
    """Ordered collection of the tasks for one simulation run."""

    def __init__(self):
        self.tasks = []
        self.skipped = []  # (line_number, line, reason) for every rejected record

    def load(self, records):
        """
        Build one Task per well-formed record, in order.
        Malformed records are reported on stderr and skipped, they never abort the load.
        """
        loaded = []
        for line_number, record in enumerate(records, start=1):
            try:
                task = parse_task_line(record)
            except MalformedTaskLine as e:
                self.skipped.append((line_number, e.line, e.reason))
                print(f"Warning: Skipping malformed line {line_number}: {e.line} ({e.reason})", file=sys.stderr)
                print(f"Expected format: {EXPECTED_FORMAT}", file=sys.stderr)
                continue
            loaded.append(task)

        self.tasks.extend(loaded)
        return loaded

    def load_file(self, task_file):
        task_path = Path(task_file)
        if not task_path.exists():
            raise FileNotFoundError(f"Task file not found: {task_file}")

        # Lines are decoded one at a time so a bad byte only costs its own line
        with open(task_path, 'rb') as f:
            return self.load(f.read().splitlines())

    def reset(self):
        self.tasks = []
        self.skipped = []

    def __len__(self):
        return len(self.tasks)

    def __iter__(self):
        return iter(self.tasks)


def load_config(config_file="config.txt"):
    """Load configuration from config file"""
    config = {}
    # Try to find config file in multiple locations
    config_paths = [
        config_file,  # Current directory
        Path(__file__).parent.parent / config_file,  # Repository root
    ]

    config_path = None
    for path in config_paths:
        if Path(path).exists():
            config_path = path
            break

    if config_path is None:
        raise FileNotFoundError(f"Config file '{config_file}' not found in any of: {config_paths}")

    with open(config_path, 'r') as f:
        for line in f:
            line = line.strip()
            if not line or line.startswith('#'):
                continue
            if '=' in line:
                key, value = line.split('=', 1)
                config[key.strip()] = value.strip()
    return config
