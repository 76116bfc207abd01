"""
Shared data models for the Priority Scheduler Simulator.

This module contains core data classes used across the task loader, the scheduling engine and the analysis scripts.
"""

UNSET = -1


class TaskEvent:
    """Represents an event in a task's lifecycle (admit, dispatch, run, etc.). Idle ticks carry no task."""

    def __init__(self, task, action, time, detail=None):
        self.task = task
        self.action = action
        self.time = time
        self.detail = detail  # Name of the preempting task for 'preempt' events

    @property
    def task_name(self):
        return self.task.name if self.task is not None else None

    def as_record(self):
        return {
            'time': self.time,
            'action': self.action,
            'task': self.task_name,
            'detail': self.detail,
        }

    def __repr__(self):
        return f"TaskEvent({self.action!r}, task={self.task_name!r}, time={self.time})"


class Task:
    """Represents a schedulable task with its static attributes and simulation state."""

    def __init__(self, name, arrival_time, priority, burst_time):
        self.name = name
        self.arrival_time = arrival_time
        self.priority = priority  # Higher value = more important
        self.burst_time = burst_time
        self.remaining_time = burst_time
        self.start_time = UNSET  # Tick the task was admitted to the ready queue
        self.end_time = UNSET  # Tick right after the last unit of work

    def is_admitted(self):
        return self.start_time != UNSET

    def is_complete(self):
        return self.remaining_time == 0

    def as_record(self):
        return {
            'name': self.name,
            'arrival_time': self.arrival_time,
            'priority': self.priority,
            'burst_time': self.burst_time,
            'remaining_time': self.remaining_time,
            'start_time': self.start_time,
            'end_time': self.end_time,
        }

    def __repr__(self):
        return (f"Task({self.name!r}, arrival={self.arrival_time}, priority={self.priority}, "
                f"burst={self.burst_time}, remaining={self.remaining_time})")
