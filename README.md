# pbsat

Building blocks for SAT and pseudo-Boolean solvers.

## Modules

- `pbsat.clause`: stored constraints.
  - `Literal(atom, sign=True)` and `PBLiteral(atom, sign=True, weight=1)`,
    both frozen; `negated()` flips the sign.
  - `Clause(literals, required)`: at least `required` of the literals hold.
  - `PBClause(literals, required)`: the weighted sum of true literals is at
    least `required`.
  - `Mod2Clause(literals, sum_mod2)`: the number of true literals has the
    given parity.
  - Every clause supports `len()`, iteration, `mark_unused()` (clears
    `in_use`) and `format(detail)`, which renders the constraint as one line.
    `Clause` and `PBClause` raise `ValueError` for a negative `required`.
  - `Conflict`, `ClauseSetStatistics` and `ClauseSetSettings` are plain
    dataclasses of bookkeeping fields and defaults.
- `pbsat.fastclause`: `FastClause`, a mutable map from atoms to signed
  coefficients plus a right-hand side `required` (and a `mod2` flag for
  parity constraints). Build one with `FastClause(required)` and `add_atom`,
  or with `FastClause.from_clause(clause)` from any of the stored kinds. It
  provides the arithmetic used in pseudo-Boolean learning: `add`, `resolve`,
  `multiply`, `divide_quick`, `divide_smart`, `simplify`, `subsumes`,
  `weaken_to_cardinality` and `strengthen`, plus `favorables` and
  `unfavorables` relative to an assignment given as a mapping from atom to
  truth value.
- `pbsat.front_end`:
  - `parse_testing_params(argv)` reads the input file name and the testing
    options (`-a -d -z -e -b -s -t -c -i -o -l -u -f -m -r`) into a
    `TestingParams`; `argv` excludes the program name. A stray argument or a
    missing option value raises `ValueError`; an unknown option raises
    `UsageRequested`, whose message is `usage_text()`.
  - `open_input(name)` opens `name`, else `name.zap`, else `name.cnf`, and
    raises `FileNotFoundError` if none exists.
  - `get_token(line)` splits the first tab-delimited token off a line.
  - `format_result`, `format_up_stats` and `format_solver_stats` return the
    report text for an `Outcome` and for `SolverStats`; `round_time` rounds
    timings to four decimals by default.
- `pbsat.uptesting`: `UPTestingInterface`, an abstract DPLL loop without
  learning or backjumping, for comparing unit-propagation speed across
  solvers. Branch decisions can be replayed from an iterable of lines
  (`branch_in`) and recorded to a text stream (`branch_out`), so that every
  solver explores the same tree; `SampleState` limits and times the sample.
  `parse_branch` and `format_branch` read and write one decision line.

## Installation

```
pip install .
```

## Example

```python
from pbsat.clause import PBClause, PBLiteral
from pbsat.fastclause import FastClause

# 2a + b + c >= 2
stored = PBClause([PBLiteral(1, True, 2), PBLiteral(2, True, 1), PBLiteral(3, True, 1)], 2)
fc = FastClause.from_clause(stored)
fc.simplify()
print(fc.format())
```

To run a solver through the unit-propagation harness, subclass
`UPTestingInterface` and supply `local_select_branch`,
`assignment_is_full`, `unit_propagate`, `undo_decision` (return the next
literal to propagate, or `None` when nothing is left to flip), `preprocess`,
`atom_for_name` and `name_for_atom`, then call `dpll()`. It prints the result
line and the sample statistics and returns the `Outcome`.

## What it does not do

- It has no solver and no clause set: the search hooks of
  `UPTestingInterface` must come from your own solver.
- It does not parse problem files. `open_input` only locates and opens the
  file; reading its contents into clauses is left to the caller.
- It installs no command-line program; `parse_testing_params` turns an
  argument list into settings for a program you write.

## Tests

```
pip install .[test]
pytest
```