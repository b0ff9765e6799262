"""
Calculation Debugger
====================

Records the steps of current-limit and tick calculations so a charging
run can be inspected after the fact: which ceilings were evaluated, with
which inputs, and which one bound the current.
"""

from dataclasses import dataclass
from typing import List, Any, Optional
from datetime import datetime


@dataclass
class CalculationStep:
    """A single calculation step with inputs, formula, and result."""
    category: str           # e.g., "Limit", "Aggregate", "Balancing"
    description: str        # Human-readable description
    formula: str            # Mathematical formula (optional)
    variables: dict         # Input variables with values
    result: Any             # Calculated result
    result_name: str        # Name of the result variable
    result_unit: str        # Unit of the result
    comment: str = ""       # Additional explanation


class CalculationDebugger:
    """
    Traces and records calculation steps.

    Usage:
        debugger = CalculationDebugger()
        set_debugger(debugger)
        pack.calculate_limited_current(625.0)
        set_debugger(None)
        print(debugger.get_report())
    """

    def __init__(self, max_steps: Optional[int] = None):
        """
        Initialize the debugger.

        Parameters:
        ----------
        max_steps : int, optional
            Keep only the most recent steps. Long runs publish seven limit
            steps per tick, so an unbounded debugger grows quickly.
        """
        self.max_steps = max_steps
        self.steps: List[CalculationStep] = []
        self.sections: List[tuple] = []  # (index, section_name)
        self.start_time: Optional[datetime] = None
        self.end_time: Optional[datetime] = None
        self.metadata: dict = {}

    def clear(self):
        """Clear all recorded steps."""
        self.steps = []
        self.sections = []
        self.start_time = None
        self.end_time = None
        self.metadata = {}

    def start(self, **metadata):
        """Start a new debugging session."""
        self.clear()
        self.start_time = datetime.now()
        self.metadata = metadata

    def finish(self):
        """Finish the debugging session."""
        self.end_time = datetime.now()

    def start_section(self, name: str):
        """Start a new section of calculations."""
        self.sections.append((len(self.steps), name))

    def add_step(
        self,
        category: str,
        description: str,
        formula: str,
        variables: dict,
        result: Any,
        result_name: str,
        result_unit: str = "",
        comment: str = ""
    ):
        """Add a calculation step."""
        self.steps.append(CalculationStep(
            category=category,
            description=description,
            formula=formula,
            variables=variables,
            result=result,
            result_name=result_name,
            result_unit=result_unit,
            comment=comment
        ))
        if self.max_steps is not None and len(self.steps) > self.max_steps:
            dropped = len(self.steps) - self.max_steps
            self.steps = self.steps[dropped:]
            self.sections = [
                (idx - dropped, name) for idx, name in self.sections if idx >= dropped
            ]

    def add_input(self, name: str, value: Any, unit: str = "", description: str = ""):
        """Add an input variable (convenience method)."""
        self.add_step(
            category="Input",
            description=description or f"Input parameter: {name}",
            formula="",
            variables={},
            result=value,
            result_name=name,
            result_unit=unit
        )

    def get_report(self, include_sections: bool = True) -> str:
        """
        Generate a formatted text report of all calculations.

        Parameters:
        ----------
        include_sections : bool
            Include section headers in the report

        Returns:
        -------
        str
            Formatted calculation trace
        """
        lines = []

        lines.append("=" * 70)
        lines.append("CHARGING CALCULATION REPORT")
        lines.append("=" * 70)

        if self.start_time:
            lines.append(f"Generated: {self.start_time.strftime('%Y-%m-%d %H:%M:%S')}")

        if self.metadata:
            lines.append("")
            lines.append("Configuration:")
            for key, value in self.metadata.items():
                lines.append(f"  {key}: {value}")

        lines.append("")

        section_indices = {idx: name for idx, name in self.sections}
        current_category = None

        for step_num, step in enumerate(self.steps, start=1):
            if include_sections and (step_num - 1) in section_indices:
                lines.append("")
                lines.append(f">>> {section_indices[step_num - 1]}")
                lines.append("-" * 70)

            if step.category != current_category and step.category != "Input":
                lines.append(f"--- {step.category} ---")
                current_category = step.category

            lines.append(f"[{step_num}] {step.description}")

            if step.variables:
                lines.append(f"    Inputs: {_format_variables(step.variables)}")

            if step.formula:
                lines.append(f"    Formula: {step.formula}")

            lines.append(
                f"    => {step.result_name} = {_format_value(step.result)}"
                + (f" {step.result_unit}" if step.result_unit else "")
            )

            if step.comment:
                lines.append(f"    // {step.comment}")

        lines.append("")
        lines.append("=" * 70)
        lines.append(f"Total Steps: {len(self.steps)}")
        if self.start_time and self.end_time:
            elapsed = (self.end_time - self.start_time).total_seconds()
            lines.append(f"Elapsed Time: {elapsed:.3f} seconds")
        lines.append("=" * 70)

        return "\n".join(lines)

    def get_step_count(self) -> int:
        """Return the number of recorded steps."""
        return len(self.steps)

    def find_steps_by_category(self, category: str) -> List[CalculationStep]:
        """Find all steps in a given category."""
        return [s for s in self.steps if s.category == category]

    def find_step_by_result(self, result_name: str) -> Optional[CalculationStep]:
        """Find the most recent step that produced a specific result."""
        for step in reversed(self.steps):
            if step.result_name == result_name:
                return step
        return None


def _format_value(value: Any) -> str:
    if isinstance(value, float):
        if value == float('inf'):
            return "unbounded"
        return f"{value:.6g}"
    return str(value)


def _format_variables(variables: dict) -> str:
    return ", ".join(f"{name}={_format_value(value)}" for name, value in variables.items())


# Global debugger instance, None when tracing is off
_debugger: Optional[CalculationDebugger] = None


def get_debugger() -> Optional[CalculationDebugger]:
    """Get the active global debugger, if any."""
    return _debugger


def set_debugger(debugger: Optional[CalculationDebugger]):
    """Install (or remove, with None) the global debugger."""
    global _debugger
    _debugger = debugger


def debug_step(
    category: str,
    description: str,
    formula: str,
    variables: dict,
    result: Any,
    result_name: str,
    result_unit: str = "",
    comment: str = ""
):
    """Add a step to the global debugger (if active)."""
    if _debugger is not None:
        _debugger.add_step(
            category=category,
            description=description,
            formula=formula,
            variables=variables,
            result=result,
            result_name=result_name,
            result_unit=result_unit,
            comment=comment
        )
