"""A mutable, atom-indexed constraint used for reasoning at the solver level.

A :class:`FastClause` holds an ordered map from atoms to signed coefficients
together with a right-hand side ``required``.  It can stand for a CNF clause,
a cardinality or pseudo-Boolean constraint (``sum >= required``) or a parity
constraint (``mod2`` set, ``required`` holding the parity).
"""

from __future__ import annotations

import math
from fractions import Fraction
from itertools import groupby
from typing import Iterator, Mapping

from .clause import Clause, Mod2Clause, PBClause


def _trunc_divmod(a: int, b: int) -> tuple[int, int]:
    """Quotient rounded toward zero and the matching remainder."""
    q = abs(a) // abs(b)
    if (a < 0) != (b < 0):
        q = -q
    return q, a - q * b


def _is_unsat(assignment: Mapping[int, bool], atom: int, sign: bool) -> bool:
    value = assignment.get(atom)
    return value is not None and bool(value) != sign


class FastClause:
    """Signed coefficients per atom plus a right-hand side.

    A positive coefficient stands for the positive literal of the atom, a
    negative one for its negation.  Atoms keep the order they were added in.
    """

    __hash__ = None  # type: ignore[assignment]

    def __init__(self, required: int = 0) -> None:
        self._values: dict[int, int] = {}
        self.required = required
        self.possible = 0
        self.current = 0
        self.mod2 = False

    # ------------------------------------------------------------ building

    @classmethod
    def from_clause(cls, clause: Clause | PBClause | Mod2Clause) -> FastClause:
        """Build from a stored clause of any kind."""
        if isinstance(clause, Mod2Clause):
            fc = cls(int(clause.sum_mod2))
            for lit in clause:
                fc.add_atom(lit.atom, 1)
            fc.mod2 = True
            return fc
        if isinstance(clause, PBClause):
            fc = cls(clause.required)
            for lit in clause:
                fc.add_atom(lit.atom, lit.weight if lit.sign else -lit.weight)
            return fc
        if isinstance(clause, Clause):
            fc = cls(clause.required)
            for lit in clause:
                fc.add_atom(lit.atom, 1 if lit.sign else -1)
            return fc
        raise TypeError(f"cannot build a FastClause from {type(clause).__name__}")

    def _load(self, values: Mapping[int, int], required: int) -> None:
        self.clear()
        self._values.update(values)
        self.required = required

    # ------------------------------------------------------------ container

    def __len__(self) -> int:
        return len(self._values)

    def __contains__(self, atom: object) -> bool:
        return atom in self._values

    def __iter__(self) -> Iterator[int]:
        return iter(self._values)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, FastClause):
            return NotImplemented
        return (
            self._values == other._values
            and self.required == other.required
            and self.mod2 == other.mod2
        )

    def __repr__(self) -> str:
        return f"FastClause({self._values!r}, required={self.required}, mod2={self.mod2})"

    def value(self, atom: int) -> int:
        """Signed coefficient of ``atom``, or 0 if it does not occur."""
        return self._values.get(atom, 0)

    def add_atom(self, atom: int, value: int) -> None:
        """Append ``atom`` with the signed coefficient ``value``."""
        if atom in self._values:
            raise ValueError(f"atom {atom} already present")
        self._values[atom] = value

    def remove(self, atom: int) -> None:
        """Drop ``atom`` from the constraint; KeyError if absent."""
        del self._values[atom]

    def clear(self) -> None:
        """Remove every atom and reset ``required`` and the parity flag."""
        self._values.clear()
        self.required = 0
        self.mod2 = False

    def copy(self) -> FastClause:
        """Return an independent copy."""
        fc = FastClause(self.required)
        fc._values = dict(self._values)
        fc.possible = self.possible
        fc.current = self.current
        fc.mod2 = self.mod2
        return fc

    # ------------------------------------------------------------ arithmetic

    def sum_coefficients(self) -> int:
        """Sum of the absolute coefficients."""
        return sum(abs(v) for v in self._values.values())

    def multiply(self, factor: int) -> None:
        """Scale every coefficient and ``required`` by a non-negative factor."""
        if factor < 0:
            raise ValueError(f"factor must be non-negative, got {factor}")
        self._values = {a: v * factor for a, v in self._values.items()}
        self.required *= factor

    def divide_quick(self, divisor: int) -> None:
        """Divide coefficients and ``required``, rounding magnitudes up."""
        if divisor <= 0:
            raise ValueError(f"divisor must be positive, got {divisor}")
        new_values = {}
        for atom, val in self._values.items():
            q, r = _trunc_divmod(val, divisor)
            if r:
                q += 1 if val > 0 else -1
            new_values[atom] = q
        self._values = new_values
        q, r = _trunc_divmod(self.required, divisor)
        self.required = q + 1 if r else q

    def divide_smart(self, divisor: int) -> None:
        """Divide with rounding up, spending slack from ``required`` to round
        whole blocks of equal coefficients down instead; zero coefficients are
        dropped."""
        if divisor <= 0:
            raise ValueError(f"divisor must be positive, got {divisor}")
        atoms = list(self._values)
        weights = [abs(self._values[a]) for a in atoms]
        results = [w // divisor for w in weights]
        remainders = [w % divisor for w in weights]
        req_result, req_rem = _trunc_divmod(self.required, divisor)

        if req_rem != 1 and atoms:
            extra = divisor - 1 if req_rem == 0 else req_rem - 1
            blocks = [
                list(group)
                for _, group in groupby(range(len(atoms) - 1, -1, -1), key=weights.__getitem__)
            ]
            # A lone first literal whose weight differs from its neighbour is never reduced.
            if len(atoms) > 1 and len(blocks[-1]) == 1:
                blocks.pop()
            for block in blocks:
                cost = remainders[block[0]] * len(block)
                if cost <= extra:
                    extra -= cost
                    for j in block:
                        remainders[j] = 0
                if extra == 0:
                    break

        new_values = {}
        for atom, res, rem in zip(atoms, results, remainders):
            weight = res + 1 if rem > 0 else res
            if weight:
                new_values[atom] = weight if self._values[atom] >= 0 else -weight
        self._values = new_values
        self.required = req_result + 1 if req_rem > 0 else req_result

    def add(self, other: FastClause) -> None:
        """Add ``other`` into this constraint, cancelling opposite literals
        (x + not x = 1)."""
        self.required += other.required
        for atom, v in list(other._values.items()):
            if not v:
                continue
            cur = self._values.get(atom, 0)
            if not cur:
                self._values[atom] = v
            elif (v < 0) == (cur < 0):
                self._values[atom] = cur + v
            elif -v == cur:
                del self._values[atom]
                self.required -= abs(v)
            else:
                self.required -= min(abs(v), abs(cur))
                self._values[atom] = cur + v

    def resolve(self, other: FastClause, atom: int) -> None:
        """Combine with ``other`` so that ``atom`` cancels out.

        Both constraints are scaled as needed; ``other`` is scaled in place.
        """
        mine = self.value(atom)
        theirs = other.value(atom)
        if mine == 0 or theirs == 0 or (mine > 0) == (theirs > 0):
            raise ValueError(f"constraints are not resolvable on atom {atom}")
        w1, w2 = abs(mine), abs(theirs)
        g = math.gcd(w1, w2)
        w1 //= g
        w2 //= g
        if w2 != 1:
            self.multiply(w2)
        if w1 != 1:
            other.multiply(w1)
        self.add(other)

    def simplify(self) -> None:
        """Shrink coefficients while keeping the constraint logically equivalent."""
        req = self.required
        self._values = {
            a: ((req if v > 0 else -req) if abs(v) >= req else v)
            for a, v in self._values.items()
        }
        if req == 1:
            return

        original = dict(sorted(self._values.items(), key=lambda item: -abs(item[1])))
        found = None
        old_weight = 0
        for v in list(original.values()):
            weight = abs(v)
            if weight == old_weight:
                continue
            old_weight = weight
            self._load(original, req)
            self.divide_smart(weight)
            self.multiply(weight)
            extra = sum(
                max(0, abs(self.value(a)) - abs(ov)) for a, ov in original.items()
            )
            if self.required - extra >= req:
                found = weight
                break

        if found is not None and found != 1:
            self.divide_quick(found)
        else:
            self._load(original, req)

    # ------------------------------------------------------------ reasoning

    def subsumes(self, other: FastClause) -> bool:
        """True if this constraint is shown to imply ``other``."""
        if other.required == 0:
            return True
        rhs = self.required

        for atom, val in self._values.items():
            fval = other.value(atom)
            if fval == 0 or (val > 0) == (fval < 0):
                rhs -= abs(val)
            if rhs <= 0:
                return False

        ratio = Fraction(1)
        max_fval = 0
        shared = []
        for atom, val in self._values.items():
            fval = other.value(atom)
            abs_val = min(abs(val), rhs)
            abs_fval = abs(fval)
            if fval != 0 and (val > 0) == (fval >= 0):
                shared.append((abs_val, abs_fval))
                max_fval = max(max_fval, abs_fval)
                if abs_val > abs_fval:
                    ratio = min(ratio, Fraction(abs_fval, abs_val))

        if ratio != 1:
            return math.ceil(ratio * rhs) >= other.required
        if rhs >= other.required:
            return True

        extra = sum(
            max(0, abs_val * max_fval - abs_fval) for abs_val, abs_fval in shared
        )
        return rhs * max_fval - extra >= other.required

    def weaken_to_cardinality(self, assignment: Mapping[int, bool], special_atom: int) -> None:
        """Weaken to a cardinality constraint relative to ``assignment``
        (atom -> truth value); assumes coefficients sorted by decreasing weight."""
        if not self._values:
            return
        total = self.sum_coefficients()
        extras = 0
        max_coefficient = abs(next(iter(self._values.values())))
        if max_coefficient == 1:
            return
        found_max = False

        for atom, value in list(self._values.items()):
            weight = abs(value)
            sign = value > 0
            unit = 1 if sign else -1
            if total >= self.required:
                if _is_unsat(assignment, atom, sign) or atom == special_atom:
                    if not found_max:
                        found_max = True
                        max_coefficient = weight
                    total -= weight
                    self._values[atom] = unit
                elif not found_max or weight >= max_coefficient:
                    self._values[atom] = unit
                    extras += 1
                else:
                    del self._values[atom]
            elif weight >= max_coefficient:
                self._values[atom] = unit
                extras += 1
            else:
                del self._values[atom]

        self.required = 1 + extras

    def favorables(self, assignment: Mapping[int, bool]) -> dict[int, int]:
        """Literals that are valued and not falsified by ``assignment``, as atom -> ±1."""
        return {
            atom: 1 if v > 0 else -1
            for atom, v in self._values.items()
            if atom in assignment and not _is_unsat(assignment, atom, v > 0)
        }

    def unfavorables(self, assignment: Mapping[int, bool]) -> dict[int, int]:
        """Literals falsified by ``assignment``, as atom -> ±1."""
        return {
            atom: 1 if v > 0 else -1
            for atom, v in self._values.items()
            if _is_unsat(assignment, atom, v > 0)
        }

    def strengthen(self, assumptions: Mapping[int, int]) -> None:
        """Add each assumption literal (atom -> signed value) with weight one
        and raise ``required`` by one."""
        self.required += 1
        amount = 1
        for atom, raw in assumptions.items():
            s = raw > 0
            if atom not in self._values:
                self._values[atom] = amount if s else -amount
                continue
            current = self._values[atom]
            sign = current > 0
            weight = abs(current)
            if sign == s:
                self._values[atom] = current + (amount if sign else -amount)
            elif weight == amount:
                del self._values[atom]
                self.required -= amount
            else:
                self.required -= min(weight, amount)
                self._values[atom] = current - (amount if sign else -amount)

    # ------------------------------------------------------------ output

    def format(self) -> str:
        """Render as ``lits >= required`` (or ``mod2 =``) with a newline."""
        parts = []
        for atom, v in self._values.items():
            lit = f"{'' if v > 0 else '-'}{atom}"
            parts.append(f" {lit}" if abs(v) == 1 else f" {abs(v)}*{lit}")
        op = " mod2 = " if self.mod2 else " >= "
        return f"{''.join(parts)}{op}{self.required}\n"

    def __str__(self) -> str:
        return self.format()