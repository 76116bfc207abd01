"""Text reports printed around a simulation run. Both list tasks in registry (load) order."""


def format_task_listing(tasks):
    lines = ["Tasks loaded successfully:"]
    for task in tasks:
        lines.append(f"Task: {task.name}, Arrival Time: {task.arrival_time}, "
                     f"Priority: {task.priority}, Burst Time: {task.burst_time}")
    return "\n".join(lines)


def format_gantt_chart(tasks):
    lines = ["Gantt Chart:"]
    for task in tasks:
        lines.append(f"Task: {task.name}, Start: {task.start_time}, End: {task.end_time}")
    return "\n".join(lines)


def format_stats(stats):
    lines = ["Simulation complete:"]
    for key, value in stats.items():
        lines.append(f"{key}: {value:,}")
    return "\n".join(lines)
