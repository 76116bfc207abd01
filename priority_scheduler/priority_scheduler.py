import heapq
import itertools
from common.models import TaskEvent


def outranks(candidate, current):
    """Preemption rule: strictly higher priority only, so equal priority never displaces the running task."""
    return candidate.priority > current.priority


def admission_order(tasks):
    """
    Order in which arrivals are scanned: earliest arrival first, higher priority first on arrival ties.
    This is not the ready queue ordering, it only fixes the order tasks enter the ready queue.
    """
    return sorted(tasks, key=lambda task: (task.arrival_time, -task.priority))


class ReadyQueue:
    """
    Ready structure ordered by the live scheduling rule:
    highest priority first, earlier arrival time on priority ties, then insertion order.
    """
    def __init__(self):
        self._heap = []
        self._sequence = itertools.count()

    def push(self, task):
        heapq.heappush(self._heap, (-task.priority, task.arrival_time, next(self._sequence), task))

    def peek(self):
        return self._heap[0][-1]

    def pop(self):
        return heapq.heappop(self._heap)[-1]

    def names(self):
        return [entry[-1].name for entry in sorted(self._heap)]

    def __len__(self):
        return len(self._heap)

    def __bool__(self):
        return bool(self._heap)


class PriorityScheduler:
    """
    Preemptive priority scheduling of tasks on a single processor, one tick per iteration.
    Each run gets its own instance: the clock, ready queue and event log are never shared.
    """
    def __init__(self, tasks, log_file=None, verbose=False):
        self.tasks = list(tasks)
        self.current_time = 0
        self.current_task = None
        self.ready_queue = ReadyQueue()
        self.events = []
        self.stats = {
            'admitted': 0,
            'dispatched': 0,
            'preempted': 0,
            'completed': 0,
            'busy_ticks': 0,
            'idle_ticks': 0
        }
        self.log_file = log_file
        self.verbose = verbose
        self._arrivals = admission_order(self.tasks)
        self._outstanding = sum(1 for task in self.tasks if task.remaining_time > 0)

    def _log(self, message):
        """Write message to log file and print to console when verbose"""
        if self.verbose:
            print(message)
        if self.log_file:
            with open(self.log_file, 'a') as f:
                f.write(message + "\n")

    def _record(self, task, action, detail=None):
        self.events.append(TaskEvent(task, action, self.current_time, detail))

    def admit_arrivals(self):
        """Move every task that has arrived and was never admitted into the ready queue."""
        for task in self._arrivals:
            if task.arrival_time <= self.current_time and task.remaining_time > 0 and not task.is_admitted():
                task.start_time = self.current_time
                self.ready_queue.push(task)
                self.stats['admitted'] += 1
                self._record(task, 'admit')
                self._log(f"[ADMIT] t={self.current_time}: Task {task.name} (priority {task.priority})")

    def select_task(self):
        """Dispatch the best ready task if the processor is free or the running task is outranked."""
        if not self.ready_queue:
            return

        if self.current_task is not None and not outranks(self.ready_queue.peek(), self.current_task):
            return

        previous = self.current_task
        if previous is not None and previous.remaining_time > 0:
            self.ready_queue.push(previous)

        self.current_task = self.ready_queue.pop()
        self.stats['dispatched'] += 1

        if previous is not None:
            self.stats['preempted'] += 1
            self._record(previous, 'preempt', detail=self.current_task.name)
            self._log(f"[PREEMPT] t={self.current_time}: Task {previous.name} preempted by Task {self.current_task.name}")

        self._record(self.current_task, 'dispatch')
        self._log(f"[DISPATCH] t={self.current_time}: Task {self.current_task.name} ({self.current_task.remaining_time} remaining)")

    def execute_tick(self):
        """Run the current task for one unit of time, or idle for one unit."""
        task = self.current_task
        if task is None:
            self._record(None, 'idle')
            self.stats['idle_ticks'] += 1
            self.current_time += 1
            return

        self._record(task, 'run')
        self.stats['busy_ticks'] += 1
        task.remaining_time -= 1
        self.current_time += 1

        if task.remaining_time == 0:
            task.end_time = self.current_time
            self.current_task = None
            self._outstanding -= 1
            self.stats['completed'] += 1
            self._record(task, 'complete')
            self._log(f"[COMPLETE] t={self.current_time}: Task {task.name}")

    def step(self):
        self.admit_arrivals()
        self.select_task()
        self.execute_tick()

    def is_complete(self):
        return self._outstanding == 0

    def run(self):
        """Simulate until every task has finished. Returns the tasks in registry order."""
        while not self.is_complete():
            self.step()
        return self.tasks

    def get_stats(self):
        """Return simulation statistics"""
        return self.stats.copy()

    def get_current_state(self):
        """Return current scheduler state for external logging"""
        return {
            'current_time': self.current_time,
            'current_task': self.current_task.name if self.current_task is not None else None,
            'ready_tasks': self.ready_queue.names(),
            'outstanding_tasks': self._outstanding,
        }
