import argparse
import sys
import pyarrow as pa
import pyarrow.parquet as pq
from pathlib import Path
from data_handling.task_file_loading import TaskRegistry, load_config
from priority_scheduler.priority_scheduler import PriorityScheduler
from priority_scheduler.reports import format_task_listing, format_gantt_chart, format_stats
from analysis.analyse_results import (tasks_to_dataframe, events_to_dataframe, execution_slices,
                                      plot_gantt, write_interactive_gantt)


def config_flag(config, key, default='false'):
    return config.get(key, default).lower() == 'true'


def additional_task_files(config):
    value = config.get('additional_task_files', '')
    return [part.strip() for part in value.split(',') if part.strip()]


def output_file(output_path, name, prefix=''):
    return output_path / f"{prefix}{name}"


def write_outputs(scheduler, output_path, config, prefix=''):
    """Write the event log and final task table as parquet, plus any configured Gantt charts"""
    output_events = output_file(output_path, config.get('output_events', 'simulation_events.parquet'), prefix)
    output_tasks = output_file(output_path, config.get('output_tasks', 'simulation_tasks.parquet'), prefix)

    events_df = events_to_dataframe(scheduler.events)
    tasks_df = tasks_to_dataframe(scheduler.tasks)

    events_table = pa.Table.from_pandas(events_df)
    tasks_table = pa.Table.from_pandas(tasks_df)

    pq.write_table(events_table, output_events)
    pq.write_table(tasks_table, output_tasks)
    print(f"Events written to: {output_events}")
    print(f"Tasks written to: {output_tasks}")

    gantt_plot = config.get('gantt_plot')
    gantt_html = config.get('gantt_html')
    if gantt_plot or gantt_html:
        slices = execution_slices(events_df)
        if gantt_plot:
            plot_file = output_file(output_path, gantt_plot, prefix)
            plot_gantt(slices, output_file=plot_file)
            print(f"Gantt chart written to: {plot_file}")
        if gantt_html:
            html_file = output_file(output_path, gantt_html, prefix)
            write_interactive_gantt(slices, html_file)
            print(f"Interactive Gantt chart written to: {html_file}")


def run_simulation(task_file, config=None, registry=None, output_prefix=''):
    """
    Run one independent simulation of the tasks in task_file. Returns (registry, scheduler).
    A passed in registry is reset first, so tasks from a previous run never leak into this one.
    """
    config = config or {}

    if registry is None:
        registry = TaskRegistry()
    else:
        registry.reset()

    registry.load_file(task_file)
    print(format_task_listing(registry.tasks))

    output_path = None
    log_file = None
    if config.get('output_directory'):
        output_path = Path(config['output_directory'])
        output_path.mkdir(parents=True, exist_ok=True)
        log_file = str(output_file(output_path, config.get('output_log', 'simulation.log'), output_prefix))

    scheduler = PriorityScheduler(registry.tasks, log_file=log_file, verbose=config_flag(config, 'verbose'))
    scheduler.run()

    print()
    print(format_gantt_chart(registry.tasks))

    if output_path is not None:
        write_outputs(scheduler, output_path, config, output_prefix)

    return registry, scheduler


def build_parser():
    parser = argparse.ArgumentParser(description="Preemptive priority CPU scheduling simulator")
    parser.add_argument('task_file', help='Task file, one "TaskName, arrivalTime, priority, burstTime" per line')
    parser.add_argument('--config', help='Optional key = value configuration file')
    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)

    try:
        config = load_config(args.config) if args.config else {}
    except FileNotFoundError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    task_files = [args.task_file] + additional_task_files(config)
    registry = TaskRegistry()

    for run_number, task_file in enumerate(task_files):
        output_prefix = ''
        if run_number > 0:
            output_prefix = f"{Path(task_file).stem}_"
            print(f"\nRunning additional test case {run_number}: {task_file}\n")
        try:
            _, scheduler = run_simulation(task_file, config, registry, output_prefix)
        except FileNotFoundError as e:
            print(f"Error: {e}", file=sys.stderr)
            return 1

        print()
        print(format_stats(scheduler.get_stats()))

    return 0


if __name__ == "__main__":
    sys.exit(main())
