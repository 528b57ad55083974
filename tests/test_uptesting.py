import io

import pytest

from pbsat.clause import Literal
from pbsat.front_end import Outcome
from pbsat.uptesting import (
    BranchLiteral,
    Result,
    SampleState,
    UPTestingInterface,
    format_branch,
    parse_branch,
)


class TinySolver(UPTestingInterface):
    def __init__(self, clauses, n, **kwargs):
        super().__init__(**kwargs)
        self.clauses = clauses
        self.n = n
        self.values = {}
        self.levels = []
        self.root = []
        self._next_flipped = False

    def _propagate(self, bucket):
        changed = True
        while changed:
            changed = False
            for clause in self.clauses:
                self.stats.clauses_touched += 1
                if any(self.values.get(abs(x)) == (x > 0) for x in clause):
                    continue
                free = [x for x in clause if abs(x) not in self.values]
                if not free:
                    return False
                if len(free) == 1:
                    self.values[abs(free[0])] = free[0] > 0
                    bucket.append(abs(free[0]))
                    changed = True
        return True

    def preprocess(self):
        return Result.OK if self._propagate(self.root) else Result.CONTRADICTION

    def local_select_branch(self):
        atom = min(a for a in range(1, self.n + 1) if a not in self.values)
        return BranchLiteral(Literal(atom, True))

    def assignment_is_full(self):
        return len(self.values) == self.n

    def unit_propagate(self, literal):
        bucket = [literal.atom]
        self.levels.append((literal, self._next_flipped, bucket))
        self._next_flipped = False
        self.values[literal.atom] = literal.sign
        return Result.OK if self._propagate(bucket) else Result.CONTRADICTION

    def undo_decision(self, literal):
        while self.levels:
            lit, flipped, bucket = self.levels.pop()
            for atom in bucket:
                del self.values[atom]
            if not flipped:
                self._next_flipped = True
                return BranchLiteral(lit.literal.negated())
        return None

    def atom_for_name(self, name):
        return int(name)

    def name_for_atom(self, atom):
        return str(atom)


def satisfied(clauses, values):
    return all(any(values[abs(x)] == (x > 0) for x in c) for c in clauses)


def test_parse_branch_negative():
    assert parse_branch("-7\n", int) == BranchLiteral(Literal(7, False))


def test_parse_branch_tab_delimited():
    assert parse_branch("\t3\tjunk", int) == BranchLiteral(Literal(3, True))


def test_parse_branch_empty():
    with pytest.raises(ValueError):
        parse_branch("\n", int)


def test_format_branch_round_trip():
    lit = BranchLiteral(Literal(5, False))
    line = format_branch(lit, "5")
    assert line == "-5\n"
    assert parse_branch(line, int) == lit


def test_branch_literal_properties():
    lit = BranchLiteral(Literal(4, False), reason=2)
    assert (lit.atom, lit.sign, lit.reason) == (4, False, 2)


def test_satisfiable_problem():
    clauses = [[1, 2], [-1, 2], [-2, 3]]
    solver = TinySolver(clauses, 3)
    assert UPTestingInterface.dpll_inner_loop(solver) is Outcome.SAT
    assert satisfied(clauses, solver.values)


def test_needs_backtracking():
    clauses = [[-1, 2], [-1, -2], [1, 3]]
    solver = TinySolver(clauses, 3)
    assert UPTestingInterface.dpll_inner_loop(solver) is Outcome.SAT
    assert solver.values[1] is False
    assert satisfied(clauses, solver.values)


def test_unsatisfiable_problem():
    clauses = [[1, 2], [1, -2], [-1, 2], [-1, -2]]
    solver = TinySolver(clauses, 2)
    assert UPTestingInterface.dpll_inner_loop(solver) is Outcome.UNSAT


def test_preprocess_contradiction():
    solver = TinySolver([[1], [-1]], 1)
    assert UPTestingInterface.dpll_inner_loop(solver) is Outcome.UNSAT
    assert solver.sample.trial_count == 0


def test_sample_finishes():
    sample = SampleState(sample_start_count=0, sample_size=1)
    solver = TinySolver([], 3, sample=sample)
    assert solver.dpll_inner_loop() is Outcome.SAMPLE_FINISHED
    assert sample.trial_count == 1
    assert sample.started is True


def test_record_and_replay_branches():
    clauses = [[-1, 2], [-1, -2], [1, 3], [-3, 4]]
    recorded = io.StringIO()
    first = TinySolver(clauses, 4, branch_out=recorded)
    assert UPTestingInterface.dpll_inner_loop(first) is Outcome.SAT

    replayed = io.StringIO()
    second = TinySolver(
        clauses, 4, branch_in=io.StringIO(recorded.getvalue()), branch_out=replayed
    )
    assert UPTestingInterface.dpll_inner_loop(second) is Outcome.SAT
    assert replayed.getvalue() == recorded.getvalue()
    assert second.values == first.values


def test_replay_uses_given_branches():
    solver = TinySolver([], 2, branch_in=io.StringIO("-1\n-2\n"))
    assert UPTestingInterface.dpll_inner_loop(solver) is Outcome.SAT
    assert solver.values == {1: False, 2: False}


def test_branch_input_exhausted():
    solver = TinySolver([], 2, branch_in=io.StringIO("1\n"))
    with pytest.raises(EOFError):
        UPTestingInterface.dpll_inner_loop(solver)


def test_dpll_prints_report(capsys):
    ticks = iter([1.0, 3.0])
    solver = TinySolver([[1, 2]], 2, clock=lambda: next(ticks))
    assert UPTestingInterface.dpll(solver) is Outcome.SAT
    out = capsys.readouterr().out.splitlines()
    assert out[0] == "Result:  SAT"
    assert "Solving with DPLL" in out
    assert solver.sample.finish_time - solver.sample.start_time == 2.0
    row = out[-2].split()
    assert row[1] == str(solver.sample.trial_count)
    assert row[2] == str(solver.stats.clauses_touched)