"""Tracing module: logs Sudoku solver steps and writes to CSV."""

import csv
from dataclasses import dataclass, asdict
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

Cell = Tuple[int, int]


def format_cell(cell: Optional[Cell]) -> Optional[str]:
    if cell is None:
        return None
    return f"r{cell[0]}c{cell[1]}"


@dataclass
class TraceStep:
    """A single step in the solving process."""

    timestamp: float
    step_number: int
    action_type: str  # 'assign', 'backtrack', 'dead_end', 'validation_failed', 'solution_found', ...
    cell: Optional[str] = None
    value: Optional[int] = None
    candidate_count: Optional[int] = None
    depth: Optional[int] = None  # Number of cells filled by the search so far
    constraint_checked: Optional[str] = None
    is_valid: Optional[bool] = None
    reason: Optional[str] = None


class Tracer:
    """Records solver steps for logging and analysis."""

    def __init__(self, enabled: bool = True):
        self.enabled = enabled
        self.steps: List[TraceStep] = []
        self.start_time = datetime.now().timestamp()
        self.step_counter = 0

    def _get_timestamp(self) -> float:
        """Get elapsed time in seconds since tracer creation."""
        return datetime.now().timestamp() - self.start_time

    def _record(self, action_type: str, **fields: Any) -> None:
        if not self.enabled:
            return
        self.step_counter += 1
        self.steps.append(TraceStep(
            timestamp=self._get_timestamp(),
            step_number=self.step_counter,
            action_type=action_type,
            **fields,
        ))

    def log_assign(self, cell: Cell, value: int, candidate_count: int, depth: int):
        """Log a trial placement."""
        self._record('assign', cell=format_cell(cell), value=value,
                     candidate_count=candidate_count, depth=depth)

    def log_backtrack(self, cell: Cell, reason: str = "No candidate led to a solution"):
        """Log a backtrack event."""
        self._record('backtrack', cell=format_cell(cell), reason=reason)

    def log_dead_end(self, cell: Cell):
        """Log an empty cell left without candidates."""
        self._record('dead_end', cell=format_cell(cell), candidate_count=0,
                     reason="Empty candidate set")

    def log_constraint_check(self, constraint_desc: str, is_valid: bool, cell: Optional[Cell] = None,
                             value: Optional[int] = None):
        """Log a constraint check."""
        self._record('constraint_check', constraint_checked=constraint_desc, is_valid=is_valid,
                     cell=format_cell(cell), value=value)

    def log_validation_failed(self, constraint_desc: str):
        """Log a full grid rejected by a constraint."""
        self._record('validation_failed', constraint_checked=constraint_desc, is_valid=False,
                     reason="Complete grid fails constraint")

    def log_solution_found(self, filled_cells: int):
        """Log when a solution is found."""
        self._record('solution_found', depth=filled_cells)

    def log_step_limit(self, steps: int):
        """Log when the search gives up."""
        self._record('step_limit', reason=f"Stopped after {steps} steps")

    def to_csv(self, filepath: Path) -> None:
        """Write trace to CSV file."""
        if not self.steps:
            print("No trace steps to write")
            return

        filepath = Path(filepath)
        filepath.parent.mkdir(parents=True, exist_ok=True)

        fieldnames = [
            'timestamp', 'step_number', 'action_type', 'cell', 'value',
            'candidate_count', 'depth', 'constraint_checked', 'is_valid', 'reason'
        ]

        with open(filepath, 'w', newline='', encoding='utf-8') as f:
            writer = csv.DictWriter(f, fieldnames=fieldnames)
            writer.writeheader()
            for step in self.steps:
                writer.writerow(asdict(step))

        print(f"Trace written to {filepath} ({len(self.steps)} steps)")

    def summary(self) -> Dict[str, Any]:
        """Get a summary of the trace."""
        action_counts: Dict[str, int] = {}
        for step in self.steps:
            action_counts[step.action_type] = action_counts.get(step.action_type, 0) + 1

        return {
            'total_steps': len(self.steps),
            'elapsed_time_seconds': self._get_timestamp(),
            'action_counts': action_counts,
            'num_assignments': action_counts.get('assign', 0),
            'num_backtracks': action_counts.get('backtrack', 0),
            'num_dead_ends': action_counts.get('dead_end', 0),
        }


# Global tracer instance
_global_tracer: Optional[Tracer] = None


def get_tracer() -> Tracer:
    """Get or create the global tracer."""
    global _global_tracer
    if _global_tracer is None:
        _global_tracer = Tracer(enabled=True)
    return _global_tracer


def reset_tracer() -> None:
    """Reset the global tracer."""
    global _global_tracer
    _global_tracer = None


def enable_tracing(enabled: bool = True) -> None:
    """Enable or disable tracing."""
    get_tracer().enabled = enabled
