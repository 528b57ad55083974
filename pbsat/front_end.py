"""Command-line options, input lookup and result reports for the solver front end."""

from __future__ import annotations

import enum
import math
import re
from dataclasses import dataclass
from pathlib import Path
from typing import IO, Sequence

DELIMITERS = "\t"

_UP_HEADER = (
    "***********************************  UP Testing Results  "
    "*************************************"
)
_UP_DASHES = (
    "--------------------------------------------------"
    "-----------------------------------------------###"
)
_UP_FOOTER = (
    "**********************************************************************************************"
)
_SOLVER_HEADER = (
    "***********************************  Solver Results  "
    "****************************************"
)
_SOLVER_DASHES = (
    "-------------------------------------------------"
    "----------------------------------------------###"
)
_SOLVER_FOOTER = (
    "********************************************************************************************"
)

_OPTION_HELP = (
    ("     -c #", "desired clauseset type 0:CNF, 1:PFS, 2:SYMRES, 3:GROUP_BASED"),
    ("     -b #", "symres length bound"),
    ("     -a", "turn off vsids"),
    ("     -e", "random seed"),
    ("     -r", "read branch decisions from user"),
    ("     -d", "run DPLL and don't do any learning"),
    ("     -u", "don't use the structure when in PFS mode"),
    ("     -z", "sample size for UP testing"),
    ("     -s", "number of trials that go by before starting the sample"),
    ("     -t #", "time out"),
    ("     -i <file>", "file to read branch decisions from"),
    ("     -l", "test local search unit propagation"),
    ("     -f #", "local search fix attempts "),
    ("     -m #", "local search map attempts "),
    ("     -o <file>", "file to write branch decisions to"),
)


class Outcome(enum.IntEnum):
    """Final outcome of a solver run."""

    UNSAT = 0
    SAT = 1
    TIME_OUT = 2
    SAMPLE_FINISHED = 3


@dataclass
class TestingParams:
    """Settings read from the command line; ``None`` means not given."""

    __test__ = False

    input_filename: str | None = None
    branching_heuristic_on: bool = True
    dpll: bool = False
    sample_size: int = 0
    seed: int | None = None
    symres_bound: int | None = None
    sample_start_count: int = 0
    time_out: float | None = None
    desired_type: int | None = None
    branch_file_in: str = ""
    branch_file_out: str = ""
    test_local_search_up: bool = False
    use_structure: bool = True
    fix_attempts: int | None = None
    map_attempts: int | None = None
    read_branch_from_user: bool = False


@dataclass
class SolverStats:
    """Counters reported at the end of a run."""

    result: int = 0
    number_branch_decisions: int = 0
    clauses_touched: int = 0
    solution_time: float = 0.0
    queue_pops: int = 0
    literals_touched: int = 0
    prop_from_nogoods: int = 0
    number_backtracks: int = 0


class UsageRequested(Exception):
    """Raised for an unknown option; the message is the usage text."""

    def __init__(self) -> None:
        super().__init__(usage_text())


def get_token(line: str) -> tuple[str, str] | None:
    """Split the first tab-delimited token off ``line``.

    Returns ``(token, rest)`` or ``None`` if the line holds no token.
    """
    start = next((i for i, ch in enumerate(line) if ch not in DELIMITERS), None)
    if start is None:
        return None
    end = next(
        (i for i in range(start + 1, len(line)) if line[i] in DELIMITERS), len(line)
    )
    return line[start:end], line[end:]


def open_input(name: str) -> IO[str]:
    """Open ``name``, else ``name.zap``, else ``name.cnf`` for reading."""
    for candidate in (name, name + ".zap", name + ".cnf"):
        path = Path(candidate)
        if path.is_file():
            return path.open("r")
    raise FileNotFoundError(f"cannot open input file {name}")


def usage_text() -> str:
    """Description of the command-line options."""
    lines = ["Command line arguments are: "]
    lines.extend(f"{flag:<20}{text}" for flag, text in _OPTION_HELP)
    return "\n".join(lines) + "\n"


def _atoi(text: str) -> int:
    match = re.match(r"\s*([+-]?\d+)", text)
    return int(match.group(1)) if match else 0


def _atof(text: str) -> float:
    match = re.match(r"\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)", text)
    return float(match.group(1)) if match else 0.0


_INT_OPTIONS = {
    "z": "sample_size",
    "e": "seed",
    "b": "symres_bound",
    "s": "sample_start_count",
    "c": "desired_type",
    "f": "fix_attempts",
    "m": "map_attempts",
}
_STR_OPTIONS = {"i": "branch_file_in", "o": "branch_file_out"}
# These flags also swallow the argument that follows them.
_SKIPPING_FLAGS = {
    "l": ("test_local_search_up", True),
    "u": ("use_structure", False),
    "r": ("read_branch_from_user", True),
}


def parse_testing_params(argv: Sequence[str]) -> TestingParams:
    """Read the input file name and options; ``argv`` excludes the program name.

    Raises ValueError for a stray argument or a missing option value and
    UsageRequested for an unknown option.
    """
    params = TestingParams()
    if not argv:
        return params
    params.input_filename = argv[0]
    args = iter(argv[1:])
    for arg in args:
        if not arg.startswith("-"):
            raise ValueError(f"Bad command line argument {arg}")
        flag = arg[1:2]
        if flag == "a":
            params.branching_heuristic_on = False
        elif flag == "d":
            params.dpll = True
        elif flag in _SKIPPING_FLAGS:
            next(args, None)
            field, value = _SKIPPING_FLAGS[flag]
            setattr(params, field, value)
        elif flag in _INT_OPTIONS or flag in _STR_OPTIONS or flag == "t":
            value = next(args, None)
            if value is None:
                raise ValueError(f"option -{flag} needs a value")
            if flag == "t":
                params.time_out = _atof(value)
            elif flag in _STR_OPTIONS:
                setattr(params, _STR_OPTIONS[flag], value)
            else:
                setattr(params, _INT_OPTIONS[flag], _atoi(value))
                if flag == "s":
                    params.dpll = True
        else:
            raise UsageRequested()
    return params


def round_time(seconds: float, precision: float = 4.0) -> float:
    """Round to ``precision`` decimals, never below one unit of that precision."""
    factor = 10.0**precision
    min_time = 1 / factor
    if seconds < min_time:
        return min_time
    return math.floor(seconds * factor + 0.5) / factor


def _num(value: float | int) -> str:
    if isinstance(value, float):
        return f"{value:g}"
    return str(value)


def _row(values: Sequence[object]) -> str:
    return "".join(f"{v:<20}" for v in values)


def format_up_stats(
    stats: SolverStats,
    dpll: bool,
    sample_start_count: int,
    trial_count: int,
    elapsed: float,
) -> str:
    """Report on a unit-propagation sample."""
    time = round_time(elapsed)
    rate = stats.clauses_touched / time if time > 0 else 0.0
    lines = [_UP_HEADER]
    if dpll:
        lines.append("Solving with DPLL")
    lines.append(
        _row(("sample start", "sample end", "clauses touched", "sample time", "touch/time"))
    )
    lines.append(_UP_DASHES)
    lines.append(
        _row(
            (
                sample_start_count,
                trial_count,
                stats.clauses_touched,
                _num(time),
                _num(rate),
            )
        )
    )
    lines.append(_UP_FOOTER)
    return "\n".join(lines) + "\n"


def format_solver_stats(stats: SolverStats) -> str:
    """Report on a complete solver run."""
    lines = [
        _SOLVER_HEADER,
        _row(
            (
                "Result code",
                "decisions",
                "clauses touched",
                "time(sec)",
                "queue pops",
                "literals touched",
                "nogoods used",
                "backtracks",
            )
        ),
        _SOLVER_DASHES,
        _row(
            (
                int(stats.result),
                stats.number_branch_decisions,
                stats.clauses_touched,
                _num(round_time(stats.solution_time)),
                stats.queue_pops,
                stats.literals_touched,
                stats.prop_from_nogoods,
                stats.number_backtracks,
            )
        ),
        _SOLVER_FOOTER,
    ]
    return "\n".join(lines) + "\n"


_RESULT_TEXT = {
    Outcome.UNSAT: "Result:  UNSAT",
    Outcome.SAT: "Result:  SAT",
    Outcome.TIME_OUT: "Result: TIME_OUT",
    Outcome.SAMPLE_FINISHED: "Result:  SAMPLE_FINISHED",
}


def format_result(outcome: object) -> str:
    """One line naming the outcome."""
    text = _RESULT_TEXT.get(outcome, "Unknown return value ")  # type: ignore[call-overload]
    return text + "\n"