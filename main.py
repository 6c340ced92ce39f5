import argparse
import csv
import json
from pathlib import Path
from typing import Any, Callable, Optional

from rules.rules import EMPTY, GRID_SIZE
from solver.errors import FormatError, SudokuError
from solver.solver import solve_table
from solver.types import Table
from solver.utils import format_table_rows
from solver.validation import check_table, validate_table_shape


SOLVE_OPTION_KEYS = ("sort_by_possibilities", "max_steps", "max_seconds")


def run(table: Table, **options: Any) -> Table:
    return solve_table(table, **options)


def run_with_trace(table: Table, **options: Any) -> tuple[Table, list[str]]:
    trace_log: list[str] = []
    result = solve_table(table, trace=True, trace_log=trace_log, **options)
    return result, trace_log


def load_table_from_csv(input_path: str) -> Table:
    path = Path(input_path)
    try:
        with path.open(newline="", encoding="utf-8") as handle:
            rows = [row for row in csv.reader(handle) if row]
    except FileNotFoundError as exc:
        raise FormatError(f"input file not found: {input_path}") from exc
    except (OSError, UnicodeDecodeError) as exc:
        raise FormatError(f"input file could not be read: {input_path}") from exc

    if len(rows) != GRID_SIZE or any(len(row) != GRID_SIZE for row in rows):
        column_count = max((len(row) for row in rows), default=0)
        raise FormatError(
            f"Expected CSV data to be exactly {GRID_SIZE}x{GRID_SIZE}, but is {len(rows)}x{column_count}"
        )

    table: Table = []
    for r, row in enumerate(rows):
        table_row: list[int] = []
        for c, cell in enumerate(row):
            text = cell.strip()
            if not text:
                table_row.append(EMPTY)
                continue
            if not (text.isascii() and text.isdigit()):
                raise FormatError(f"CSV cell ({r}, {c}) is not an unsigned integer: {cell!r}")
            table_row.append(int(text))
        table.append(table_row)

    return table


def save_table_to_csv(output_path: str, table: Table) -> None:
    validate_table_shape(table)
    path = Path(output_path)
    try:
        with path.open("w", newline="", encoding="utf-8") as handle:
            csv.writer(handle).writerows(table)
    except OSError as exc:
        raise FormatError(f"output file could not be written: {output_path}") from exc


def load_puzzle_from_file(input_path: str) -> tuple[Table, dict[str, Any]]:
    """Load a table from a ``.csv`` file, or a table plus solve options from ``.json``."""
    if Path(input_path).suffix.lower() != ".json":
        return load_table_from_csv(input_path), {}

    path = Path(input_path)
    try:
        payload: Any = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError as exc:
        raise FormatError(f"input file not found: {input_path}") from exc
    except json.JSONDecodeError as exc:
        raise FormatError(f"input file is not valid JSON: {input_path}") from exc

    if not isinstance(payload, dict):
        raise FormatError("JSON root must be an object")

    table = payload.get("table")
    if table is None:
        raise FormatError("JSON must include 'table'")

    options = {key: payload[key] for key in SOLVE_OPTION_KEYS if payload.get(key) is not None}
    return table, options


def check_puzzle(table: Any) -> dict[str, Any]:
    conflicts = check_table(table)
    return {"valid": not conflicts, "conflicts": [str(conflict) for conflict in conflicts]}


class ConsoleIO:
    """Prompts used by the interactive mode."""

    def __init__(
        self,
        input_func: Callable[[str], str] = input,
        output_func: Callable[[str], None] = print,
    ) -> None:
        self.input = input_func
        self.output = output_func

    def show_init_message(self) -> None:
        self.output("Welcome to the Sudoku solver.\n")

    def ask_yes_or_no(self, question: str, default_answer: bool = True) -> bool:
        hint = "Y/n" if default_answer else "y/N"
        while True:
            answer = self.input(f"{question} [{hint}] ").strip().lower()
            if not answer:
                return default_answer
            if answer[0] == "y":
                return True
            if answer[0] == "n":
                return False

    def get_non_empty_input(self, message: str) -> str:
        while True:
            answer = self.input(f"{message} ").strip()
            if answer:
                return answer

    def get_input_file_path(self) -> str:
        return self.get_non_empty_input("Please enter the path of the input CSV file (including Sudoku table data):")

    def get_output_file_path(self) -> str:
        return self.get_non_empty_input("Enter the path of the output CSV file:")

    def ask_to_display_table(self) -> bool:
        return self.ask_yes_or_no("Show solved Sudoku table here?", True)

    def ask_to_save(self) -> bool:
        return self.ask_yes_or_no("Would you like to save the results?", True)

    def ask_to_repeat(self) -> bool:
        return self.ask_yes_or_no("Another Sudoku to solve?", False)

    def display_table(self, table: Table) -> None:
        self.output("\n".join(format_table_rows(table)) + "\n")


def run_console(console: Optional[ConsoleIO] = None, **options: Any) -> None:
    console = console or ConsoleIO()
    console.show_init_message()

    while True:
        try:
            table = load_table_from_csv(console.get_input_file_path())
            console.output("Solving Sudoku table... ")
            solution = run(table, **options)
            console.output("Done!")
        except SudokuError as exc:
            console.output(f"Oops, something went wrong: {exc}")
            if console.ask_to_repeat():
                continue
            return

        if console.ask_to_display_table():
            console.display_table(solution)

        if console.ask_to_save():
            while True:
                try:
                    save_table_to_csv(console.get_output_file_path(), solution)
                    break
                except FormatError as exc:
                    console.output(f"Could not save the table: {exc}")

        if not console.ask_to_repeat():
            return


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Solve a 9x9 Sudoku table from a CSV or JSON input file")
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument("--input", help="Path to a 9x9 CSV file (0 or blank for empty cells), or a JSON file with 'table'")
    source.add_argument("--interactive", action="store_true", help="Prompt for input and output files")
    parser.add_argument("--output", help="Write the solved table to this CSV file instead of printing JSON")
    parser.add_argument("--trace", action="store_true", help="Include solver trace output")
    parser.add_argument("--check", action="store_true", help="Only check value ranges and report duplicate digits in the input table")
    parser.add_argument("--sort", action="store_true", help="Try the most constrained empty cells first")
    parser.add_argument("--max-steps", type=int, default=None, help="Give up after this many search steps")
    parser.add_argument("--max-seconds", type=float, default=None, help="Give up after this many seconds")
    return parser


def _options_from_args(args: argparse.Namespace, file_options: dict[str, Any]) -> dict[str, Any]:
    options = dict(file_options)
    if args.sort:
        options["sort_by_possibilities"] = True
    if args.max_steps is not None:
        options["max_steps"] = args.max_steps
    if args.max_seconds is not None:
        options["max_seconds"] = args.max_seconds
    return options


if __name__ == "__main__":
    args = _build_parser().parse_args()

    if args.interactive:
        try:
            run_console(**_options_from_args(args, {}))
        except (KeyboardInterrupt, EOFError):
            print()
        raise SystemExit(0)

    try:
        table, file_options = load_puzzle_from_file(args.input)
        if args.check:
            report = check_puzzle(table)
            print(json.dumps(report, indent=2))
            raise SystemExit(0 if report["valid"] else 1)

        options = _options_from_args(args, file_options)
        if args.trace:
            solution, trace_log = run_with_trace(table, **options)
        else:
            solution, trace_log = run(table, **options), None

        if args.output:
            save_table_to_csv(args.output, solution)
            if trace_log is not None:
                print(json.dumps({"trace": trace_log}, indent=2))
        elif trace_log is not None:
            print(json.dumps({"solution": solution, "trace": trace_log}, indent=2))
        else:
            print(json.dumps({"solution": solution}, indent=2))
    except ValueError as exc:
        raise SystemExit(f"Error: {exc}")
