"""End to end tests for the command line runner."""

import pandas as pd
import pytest

from data_handling.task_file_loading import TaskRegistry
from priority_scheduler.reports import format_gantt_chart, format_stats, format_task_listing
from priority_scheduler.run_simulation import additional_task_files, main, run_simulation


def test_reports_follow_registry_order(make_tasks):
    tasks = make_tasks(("B", 1, 2, 3), ("A", 0, 1, 4))
    tasks[0].start_time, tasks[0].end_time = 1, 4
    tasks[1].start_time, tasks[1].end_time = 0, 7

    assert format_task_listing(tasks) == (
        "Tasks loaded successfully:\n"
        "Task: B, Arrival Time: 1, Priority: 2, Burst Time: 3\n"
        "Task: A, Arrival Time: 0, Priority: 1, Burst Time: 4"
    )
    assert format_gantt_chart(tasks) == (
        "Gantt Chart:\n"
        "Task: B, Start: 1, End: 4\n"
        "Task: A, Start: 0, End: 7"
    )


def test_format_stats():
    assert format_stats({'completed': 2, 'busy_ticks': 1500}) == "Simulation complete:\ncompleted: 2\nbusy_ticks: 1,500"


def test_main_prints_both_reports(task_file, capsys):
    path = task_file(["A, 0, 1, 4", "Bad,,1", "B, 1, 2, 3"])
    assert main([str(path)]) == 0

    captured = capsys.readouterr()
    assert "Task: A, Arrival Time: 0, Priority: 1, Burst Time: 4" in captured.out
    assert "Task: A, Start: 0, End: 7" in captured.out
    assert "Task: B, Start: 1, End: 4" in captured.out
    assert captured.out.index("Tasks loaded successfully:") < captured.out.index("Gantt Chart:")
    assert "Skipping malformed line 2: Bad,,1" in captured.err


@pytest.mark.parametrize("argv", [[], ["one.txt", "two.txt"]])
def test_wrong_argument_count_is_usage_error(argv, capsys):
    with pytest.raises(SystemExit) as excinfo:
        main(argv)
    assert excinfo.value.code != 0
    assert "usage:" in capsys.readouterr().err


def test_missing_task_file_exits_non_zero(tmp_path, capsys):
    assert main([str(tmp_path / "missing.txt")]) == 1
    assert "Task file not found" in capsys.readouterr().err


def test_missing_config_exits_non_zero(task_file, tmp_path, capsys):
    path = task_file(["A, 0, 1, 1"])
    assert main([str(path), "--config", str(tmp_path / "nope.txt")]) == 1
    assert "not found" in capsys.readouterr().err


def test_empty_task_file_finishes(task_file, capsys):
    path = task_file(["garbage"])
    registry, scheduler = run_simulation(path)
    assert len(registry) == 0
    assert scheduler.current_time == 0


def test_run_simulation_resets_passed_registry(task_file):
    registry = TaskRegistry()
    run_simulation(task_file(["A, 0, 1, 1"], name="first.txt"), registry=registry)
    registry, _ = run_simulation(task_file(["B, 0, 1, 1"], name="second.txt"), registry=registry)
    assert [task.name for task in registry] == ["B"]


def test_additional_task_files():
    assert additional_task_files({}) == []
    assert additional_task_files({'additional_task_files': ' a.txt, ,b.txt '}) == ["a.txt", "b.txt"]


def test_outputs_written_with_config(task_file, tmp_path, capsys):
    path = task_file(["A, 0, 1, 4", "B, 1, 2, 3"])
    output_directory = tmp_path / "out"
    config_file = tmp_path / "config.txt"
    config_file.write_text(
        f"output_directory = {output_directory}\n"
        "gantt_plot = gantt.png\n"
        "gantt_html = gantt.html\n"
    )

    assert main([str(path), "--config", str(config_file)]) == 0

    tasks_df = pd.read_parquet(output_directory / "simulation_tasks.parquet")
    assert list(tasks_df['name']) == ["A", "B"]
    assert list(tasks_df['end_time']) == [7, 4]

    events_df = pd.read_parquet(output_directory / "simulation_events.parquet")
    runs = events_df[events_df['action'] == 'run']
    assert list(runs['task']) == ["A", "B", "B", "B", "A", "A", "A"]

    log_lines = (output_directory / "simulation.log").read_text().splitlines()
    assert "[PREEMPT] t=1: Task A preempted by Task B" in log_lines
    assert (output_directory / "gantt.png").exists()
    assert (output_directory / "gantt.html").exists()


def test_additional_runs_are_independent(task_file, tmp_path, capsys):
    main_file = task_file(["A, 0, 1, 4", "B, 1, 2, 3"])
    extra_file = task_file(["X, 0, 5, 1"], name="extra.txt")
    output_directory = tmp_path / "out"
    config_file = tmp_path / "config.txt"
    config_file.write_text(
        f"output_directory = {output_directory}\n"
        f"additional_task_files = {extra_file}\n"
    )

    assert main([str(main_file), "--config", str(config_file)]) == 0

    out = capsys.readouterr().out
    assert "Running additional test case 1" in out
    assert "Task: X, Start: 0, End: 1" in out

    extra_df = pd.read_parquet(output_directory / "extra_simulation_tasks.parquet")
    assert list(extra_df['name']) == ["X"]
    main_df = pd.read_parquet(output_directory / "simulation_tasks.parquet")
    assert list(main_df['name']) == ["A", "B"]

    main_log = (output_directory / "simulation.log").read_text()
    extra_log = (output_directory / "extra_simulation.log").read_text()
    assert "Task X" not in main_log
    assert "[COMPLETE] t=7: Task A" in main_log
    assert extra_log.splitlines()[-1] == "[COMPLETE] t=1: Task X"
    assert "Task A" not in extra_log


def test_undecodable_line_is_skipped(tmp_path, capsys):
    path = tmp_path / "tasks.txt"
    path.write_bytes(b"A, 0, 1, 4\nB\xe9ad, 1, 2, 3\nC, 1, 2, 3\n")

    assert main([str(path)]) == 0

    captured = capsys.readouterr()
    assert "Task: A, Start: 0, End: 7" in captured.out
    assert "Task: C, Start: 1, End: 4" in captured.out
    assert "Skipping malformed line 2" in captured.err
    assert "line is not valid UTF-8" in captured.err
