"""Check and describe command implementations."""

import json
from pathlib import Path

from rich.console import Console
from rich.table import Table

from ..constraints import ConstraintSet, ValidationResult, load_constraint_set


def _load_values(values_path: Path) -> dict:
    data = json.loads(values_path.read_text(encoding="utf-8"))
    if not isinstance(data, dict):
        raise ValueError(f"{values_path} must contain a JSON object of field values")
    return data


def run_check(
    rules_path: Path,
    values_path: Path,
    output_json: bool = False,
    fail_on_unavailable: bool = True,
    constraint_set: ConstraintSet | None = None,
) -> int:
    """Validate a JSON object of field values against a TOML constraint file.

    Args:
        rules_path: TOML file with [settings], [titles] and [[constraints]]
        values_path: JSON object mapping field id -> submitted value
        output_json: Output results as JSON instead of a table
        fail_on_unavailable: Count unreachable remote endpoints as failures
        constraint_set: Preloaded set (skips reading rules_path)

    Returns:
        Exit code (0 = all fields valid, 1 = failures found)
    """
    console = Console(stderr=True)

    if constraint_set is None:
        console.print(f"Loading constraints from {rules_path}...", style="dim")
        constraint_set = load_constraint_set(rules_path)

    values = _load_values(values_path)
    by_field = constraint_set.validate_all(values)

    failures = [
        r
        for results in by_field.values()
        for r in results
        if not r.passed and (fail_on_unavailable or r.error_kind != "remote_unavailable")
    ]

    if output_json:
        _output_json(by_field, failures)
    else:
        _print_human_output(console, by_field, failures)

    return 1 if failures else 0


def _output_json(by_field: dict[str, list[ValidationResult]], failures: list[ValidationResult]) -> None:
    output = {
        "fields": {f: [r.to_dict() for r in results] for f, results in by_field.items()},
        "summary": {
            "fields": len(by_field),
            "failed_fields": len({r.field for r in failures}),
            "failures": len(failures),
        },
    }
    print(json.dumps(output, indent=2, default=str))


def _print_human_output(
    console: Console,
    by_field: dict[str, list[ValidationResult]],
    failures: list[ValidationResult],
) -> None:
    if not failures:
        console.print(f"✓ {len(by_field)} field(s) valid", style="bold green")
        return

    table = Table(title="Validation failures")
    table.add_column("Field", style="bold")
    table.add_column("Constraint")
    table.add_column("Kind", style="dim")
    table.add_column("Message")

    for r in failures:
        style = "yellow" if r.error_kind != "validation_failed" else None
        table.add_row(r.field, r.constraint, r.error_kind or "", r.message or "", style=style)

    console.print(table)
    failed_fields = len({r.field for r in failures})
    console.print(f"\n✗ {failed_fields} of {len(by_field)} field(s) invalid", style="bold red")


def run_describe(rules_path: Path, output_json: bool = False) -> int:
    """Print the client-side hints of every constraint in a TOML file."""
    constraint_set = load_constraint_set(rules_path)
    hints = constraint_set.describe()

    if output_json:
        print(json.dumps(hints, indent=2, default=str))
        return 0

    console = Console()
    for field_id, field_hints in hints.items():
        title = constraint_set.titles.get(field_id)
        console.print(f"{field_id}" + (f" ({title})" if title else ""), style="bold")
        for hint in field_hints:
            params = ", ".join(f"{k}={v!r}" for k, v in hint["params"].items())
            line = f"  {hint['constraint']}"
            if params:
                line += f" [{params}]"
            if hint["message"]:
                line += f' - "{hint["message"]}"'
            console.print(line, markup=False)
    return 0
