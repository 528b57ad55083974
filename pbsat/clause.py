"""Constraint records: cardinality, pseudo-Boolean and parity clauses."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Iterator

STARTUP_LIT_POOL_SIZE = 0x1000
UP = 1
DOWN = 0

_REMOVED_PREFIX = "\t\t\tremoved constraint"


@dataclass(frozen=True)
class Literal:
    """A propositional atom with a sign; ``sign`` is True for the positive literal."""

    atom: int
    sign: bool = True

    def negated(self) -> Literal:
        """Return the literal of the same atom with the opposite sign."""
        return Literal(self.atom, not self.sign)

    def _format(self, detail: bool) -> str:
        mark = ("+" if detail else "") if self.sign else "-"
        return f" {mark}{self.atom}"


@dataclass(frozen=True)
class PBLiteral(Literal):
    """A literal carrying a coefficient (its weight)."""

    weight: int = 1

    def negated(self) -> PBLiteral:
        """Return the opposite literal, keeping the weight."""
        return PBLiteral(self.atom, not self.sign, self.weight)

    def _format(self, detail: bool) -> str:
        if self.weight == 1 and not detail:
            return super()._format(detail)
        return f" {self.weight}*{super()._format(detail).lstrip()}"


class _ClauseBase:
    """Shared storage and behaviour for every clause kind."""

    __slots__ = ("literals", "in_use")

    def __init__(self, literals: Iterable[Literal]) -> None:
        self.literals: tuple[Literal, ...] = tuple(literals)
        self.in_use = True

    def __len__(self) -> int:
        return len(self.literals)

    def __iter__(self) -> Iterator[Literal]:
        return iter(self.literals)

    def mark_unused(self) -> None:
        """Mark the clause as deleted from its clause set."""
        self.in_use = False

    def _body(self, detail: bool) -> str:
        prefix = "" if self.in_use else _REMOVED_PREFIX
        return prefix + "".join(lit._format(detail) for lit in self.literals)

    def __str__(self) -> str:
        return self.format(False)  # type: ignore[attr-defined]


class Clause(_ClauseBase):
    """A cardinality constraint: at least ``required`` of the literals hold."""

    __slots__ = ("required",)

    def __init__(self, literals: Iterable[Literal], required: int) -> None:
        if required < 0:
            raise ValueError(f"required count must be non-negative, got {required}")
        super().__init__(literals)
        self.required = required

    def __len__(self) -> int:
        return super().__len__()

    def __iter__(self) -> Iterator[Literal]:
        return super().__iter__()

    def mark_unused(self) -> None:
        super().mark_unused()

    def format(self, detail: bool = False) -> str:
        """Render as ``lits >= required`` followed by a newline."""
        return f"{self._body(detail)} >= {self.required}\n"

    def __repr__(self) -> str:
        return f"Clause({list(self.literals)!r}, required={self.required})"


class PBClause(_ClauseBase):
    """A pseudo-Boolean constraint: the weighted sum of true literals is at least ``required``."""

    __slots__ = ("required",)

    def __init__(self, literals: Iterable[PBLiteral], required: int) -> None:
        if required < 0:
            raise ValueError(f"required count must be non-negative, got {required}")
        super().__init__(literals)
        self.required = required

    def __len__(self) -> int:
        return super().__len__()

    def __iter__(self) -> Iterator[PBLiteral]:  # type: ignore[override]
        return super().__iter__()  # type: ignore[return-value]

    def mark_unused(self) -> None:
        super().mark_unused()

    def format(self, detail: bool = False) -> str:
        """Render as ``weighted lits >= required`` followed by a newline."""
        return f"{self._body(detail)} >= {self.required}\n"

    def __repr__(self) -> str:
        return f"PBClause({list(self.literals)!r}, required={self.required})"


class Mod2Clause(_ClauseBase):
    """A parity constraint: the number of true literals is congruent to ``sum_mod2`` mod 2."""

    __slots__ = ("sum_mod2",)

    def __init__(self, literals: Iterable[Literal], sum_mod2: bool) -> None:
        super().__init__(literals)
        self.sum_mod2 = bool(sum_mod2)

    def __len__(self) -> int:
        return super().__len__()

    def __iter__(self) -> Iterator[Literal]:
        return super().__iter__()

    def mark_unused(self) -> None:
        super().mark_unused()

    def format(self, detail: bool = False) -> str:
        """Render as ``( lits )mod2 = parity`` followed by a newline."""
        prefix = "" if self.in_use else _REMOVED_PREFIX
        lits = "".join(lit._format(detail) for lit in self.literals)
        return f"{prefix}( {lits} )mod2 = {int(self.sum_mod2)}\n"

    def __repr__(self) -> str:
        return f"Mod2Clause({list(self.literals)!r}, sum_mod2={self.sum_mod2})"


@dataclass
class Conflict:
    """An atom forced both ways, with the two clauses responsible."""

    atom: int = 0
    reason1: int = 0
    reason2: int = 0


@dataclass
class ClauseSetStatistics:
    """Counters kept by a clause set."""

    literal_count: int = 0
    out_of_memory: bool = False
    out_of_memory_count: int = 0
    initial_clause_count: int = 0
    added_clause_count: int = 0
    deleted_clause_count: int = 0


@dataclass
class ClauseSetSettings:
    """Tunable limits for a clause set."""

    memory_limit: int = 1024 * 1024 * 256
    relevance_bound: int = 20
    length_bound: int = 100
    max_length: int = 5000
    strengthen_on: bool = False