"""A plain DPLL loop for measuring unit-propagation speed.

Solvers implement the abstract hooks of :class:`UPTestingInterface`; branch
decisions may be replayed from, or recorded to, a text stream so that
different solvers explore identical search trees.
"""

from __future__ import annotations

import abc
import enum
import time
from dataclasses import dataclass
from typing import Callable, Iterable, TextIO

from .clause import Literal
from .front_end import Outcome, SolverStats, format_result, format_up_stats, get_token


class Result(enum.Enum):
    """Outcome of a propagation or preprocessing step."""

    OK = enum.auto()
    CONTRADICTION = enum.auto()


@dataclass(frozen=True)
class BranchLiteral:
    """A literal chosen or implied during search, with an optional reason."""

    literal: Literal
    reason: int | None = None

    @property
    def atom(self) -> int:
        return self.literal.atom

    @property
    def sign(self) -> bool:
        return self.literal.sign


@dataclass
class SampleState:
    """Trial counting and timing for a unit-propagation sample."""

    sample_start_count: int = 0
    sample_size: int = 0
    trial_count: int = 0
    start_time: float = 0.0
    finish_time: float = 0.0
    started: bool = False


def parse_branch(line: str, lookup: Callable[[str], int]) -> BranchLiteral:
    """Read one branch decision: an atom name, negated by a leading ``-``."""
    found = get_token(line.rstrip("\n"))
    if found is None:
        raise ValueError("empty branch line")
    name = found[0]
    sign = True
    if name.startswith("-"):
        sign = False
        name = name[1:]
    return BranchLiteral(Literal(lookup(name), sign))


def format_branch(literal: BranchLiteral, name: str) -> str:
    """One line recording a branch decision."""
    return f"{' ' if literal.sign else '-'}{name}\n"


class UPTestingInterface(abc.ABC):
    """DPLL without learning or backjumping, built on solver-supplied hooks."""

    def __init__(
        self,
        branch_in: Iterable[str] | None = None,
        branch_out: TextIO | None = None,
        sample: SampleState | None = None,
        clock: Callable[[], float] = time.process_time,
    ) -> None:
        self._branch_lines = iter(branch_in) if branch_in is not None else None
        self.branch_out = branch_out
        self.sample = sample if sample is not None else SampleState()
        self.clock = clock
        self.stats = SolverStats()
        self.dpll_mode = True

    @abc.abstractmethod
    def local_select_branch(self) -> BranchLiteral:
        """The solver's own branching choice."""

    @abc.abstractmethod
    def assignment_is_full(self) -> bool:
        """True once every atom has a value."""

    @abc.abstractmethod
    def unit_propagate(self, literal: BranchLiteral) -> Result:
        """Assign ``literal`` and propagate its consequences."""

    @abc.abstractmethod
    def undo_decision(self, literal: BranchLiteral) -> BranchLiteral | None:
        """Backtrack after a contradiction.

        Returns the literal to propagate next, or None when no decision is
        left to flip.
        """

    @abc.abstractmethod
    def preprocess(self) -> Result:
        """Handle unit clauses and other work before search."""

    @abc.abstractmethod
    def atom_for_name(self, name: str) -> int:
        """Atom number for an atom name."""

    @abc.abstractmethod
    def name_for_atom(self, atom: int) -> str:
        """Atom name for an atom number."""

    def _start_sample(self) -> None:
        self.sample.start_time = self.clock()
        self.stats.clauses_touched = 0
        self.stats.literals_touched = 0

    def _end_sample(self) -> None:
        self.sample.finish_time = self.clock()

    def _branch_from_input(self) -> BranchLiteral:
        assert self._branch_lines is not None
        line = next(self._branch_lines, None)
        if line is None:
            raise EOFError("Unexpected end of branch file")
        return parse_branch(line, self.atom_for_name)

    def select_branch(self) -> BranchLiteral:
        """Next branch: replayed from the input stream if given, else the solver's choice."""
        if self._branch_lines is not None:
            branch = self._branch_from_input()
        else:
            branch = self.local_select_branch()
        if self.branch_out is not None:
            self.branch_out.write(format_branch(branch, self.name_for_atom(branch.atom)))
        return branch

    def dpll_inner_loop(self) -> Outcome:
        """Run the search until the assignment is full, refuted or the sample ends."""
        if self.preprocess() is Result.CONTRADICTION:
            return Outcome.UNSAT
        sample = self.sample
        while not self.assignment_is_full():
            if not sample.started and sample.trial_count >= sample.sample_start_count:
                sample.started = True
                self._start_sample()
            if sample.sample_size and sample.trial_count >= (
                sample.sample_start_count + sample.sample_size
            ):
                return Outcome.SAMPLE_FINISHED
            sample.trial_count += 1

            literal: BranchLiteral | None = self.select_branch()
            while self.unit_propagate(literal) is Result.CONTRADICTION:
                literal = self.undo_decision(literal)
                if literal is None:
                    return Outcome.UNSAT
        return Outcome.SAT

    def dpll(self) -> Outcome:
        """Run the search, print the result and sample statistics, return the outcome."""
        result = self.dpll_inner_loop()
        print(format_result(result), end="")
        self._end_sample()
        print(
            format_up_stats(
                self.stats,
                self.dpll_mode,
                self.sample.sample_start_count,
                self.sample.trial_count,
                self.sample.finish_time - self.sample.start_time,
            ),
            end="",
        )
        return result