import pandas as pd
import matplotlib.pyplot as plt
import numpy as np
import plotly.express as px
from pathlib import Path
from data_handling.task_file_loading import load_config


def tasks_to_dataframe(tasks):
    return pd.DataFrame([task.as_record() for task in tasks],
                        columns=['name', 'arrival_time', 'priority', 'burst_time',
                                 'remaining_time', 'start_time', 'end_time'])


def events_to_dataframe(events):
    return pd.DataFrame([event.as_record() for event in events],
                        columns=['time', 'action', 'task', 'detail'])


def execution_slices(events_df):
    """
    Collapse per-tick 'run' and 'idle' events into contiguous slices, e.g.
      A@0, B@1, B@2, B@3, A@4
    becomes:
      A [0, 1), B [1, 4), A [4, 5)

    Idle slices have task None.
    """
    ticks = events_df[events_df['action'].isin(['run', 'idle'])].sort_values('time')

    slices = []
    for _, row in ticks.iterrows():
        task = row['task'] if row['action'] == 'run' else None
        time = int(row['time'])
        if slices and slices[-1]['task'] == task and slices[-1]['end'] == time:
            slices[-1]['end'] = time + 1
        else:
            slices.append({'task': task, 'start': time, 'end': time + 1})

    # object dtype keeps None for idle slices, a str column would turn them into NaN
    return pd.DataFrame({
        'task': pd.Series([s['task'] for s in slices], dtype=object),
        'start': pd.Series([s['start'] for s in slices], dtype='int64'),
        'end': pd.Series([s['end'] for s in slices], dtype='int64'),
    })


def summarise_tasks(tasks_df):
    """
    Per-task timing metrics. start_time is the admission tick, so response_delay is
    the admission delay (always 0 for a completed run), not the delay until first dispatch.
    """
    summary = tasks_df.copy()
    summary['turnaround_time'] = summary['end_time'] - summary['arrival_time']
    summary['waiting_time'] = summary['turnaround_time'] - summary['burst_time']
    summary['response_delay'] = summary['start_time'] - summary['arrival_time']
    return summary


def first_dispatch_times(events_df):
    """Tick at which each task first occupied the processor."""
    dispatches = events_df[events_df['action'] == 'dispatch']
    return dispatches.groupby('task')['time'].min()


def plot_gantt(slices, output_file=None, title="Gantt chart"):
    busy = slices[slices['task'].notna()]
    task_names = list(dict.fromkeys(busy['task']))
    y_positions = np.arange(len(task_names))
    lookup = dict(zip(task_names, y_positions))

    fig, ax = plt.subplots(figsize=(12, max(2, 0.6 * len(task_names) + 1)))
    cmap = plt.get_cmap('tab10')
    for _, row in busy.iterrows():
        y = lookup[row['task']]
        ax.barh(y, row['end'] - row['start'], left=row['start'], color=cmap(y % 10), edgecolor='black')

    ax.set_yticks(y_positions)
    ax.set_yticklabels(task_names)
    ax.invert_yaxis()
    ax.set_xlabel("Time")
    ax.set_ylabel("Task")
    ax.set_title(title)
    ax.grid(True, axis='x', alpha=0.3)
    plt.tight_layout()

    if output_file:
        fig.savefig(output_file)
        plt.close(fig)
    else:
        plt.show()
    return fig


def write_interactive_gantt(slices, output_file, title="Gantt chart"):
    busy = slices[slices['task'].notna()].copy()
    busy['duration'] = busy['end'] - busy['start']
    fig = px.bar(busy, x='duration', y='task', base='start', color='task',
                 orientation='h', title=title, hover_data=['start', 'end'])
    fig.update_yaxes(autorange='reversed')
    fig.update_layout(xaxis_title="Time", yaxis_title="Task")
    fig.write_html(output_file)
    return fig


if __name__ == "__main__":
    config = load_config("config.txt")
    output_directory = Path(config.get('output_directory', 'output'))
    events_file = output_directory / config.get('output_events', 'simulation_events.parquet')
    tasks_file = output_directory / config.get('output_tasks', 'simulation_tasks.parquet')

    if not events_file.exists() or not tasks_file.exists():
        raise FileNotFoundError(f"Simulation outputs not found:\n  Events: {events_file}\n  Tasks: {tasks_file}")

    events_df = pd.read_parquet(events_file)
    tasks_df = pd.read_parquet(tasks_file)
    print(f"Event data shape: {events_df.shape}")
    print(f"Task data shape: {tasks_df.shape}")

    summary = summarise_tasks(tasks_df)
    summary = summary.join(first_dispatch_times(events_df).rename('first_dispatch'), on='name')

    print("\n" + "="*60)
    print("TASK SUMMARY")
    print("="*60)
    print(summary.to_string(index=False))
    print(f"\nAverage turnaround time: {summary['turnaround_time'].mean():.2f}")
    print(f"Average waiting time:    {summary['waiting_time'].mean():.2f}")
    print("="*60 + "\n")

    plot_gantt(execution_slices(events_df))
