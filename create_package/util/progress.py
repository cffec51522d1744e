"""
Progress reporting for multi-step operations using rich.
"""

from rich.console import Console


class StepTracker:
    """
    Progress tracker for multi-step operations.

    Prints a numbered line as each step starts and a summary at the end.
    """

    def __init__(self, operation_name: str, console: Console):
        """
        Initialize progress tracker.

        Args:
            operation_name: Name of the operation being tracked
            console: Console to report to
        """
        self.operation_name = operation_name
        self.console = console
        self.steps_started = 0
        self.steps_total = 0

    def start(self, total_steps: int):
        self.steps_total = total_steps
        self.steps_started = 0

    def step(self, step_name: str):
        """
        Record the start of a step.

        Args:
            step_name: Human readable name of the step
        """
        self.steps_started += 1
        self.console.print(
            f"\n[bold blue][{self.steps_started}/{self.steps_total}] {step_name}[/bold blue]"
        )

    def complete(self):
        """Mark operation as complete."""
        self.console.print(
            f"\n[green]✨ {self.operation_name} complete "
            f"({self.steps_started}/{self.steps_total} steps)[/green]"
        )
