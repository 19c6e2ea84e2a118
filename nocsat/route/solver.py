"""A narrow interface onto constraint optimisation engines.

The routing model is built exclusively through :py:class:`.Solver` so that the
engine used to solve it can be swapped without touching the model builder.
:py:class:`.CpSatSolver` implements the interface using Google OR-Tools'
CP-SAT solver.

Variables and literals are opaque objects handed out by the solver. Linear
expressions are described with :py:class:`.LinearExpr`.
"""

from collections import namedtuple

from enum import IntEnum

from ortools.sat.python import cp_model

from nocsat.utils.docstrings import add_int_enums_to_docstring


@add_int_enums_to_docstring
class SolveStatus(IntEnum):
    """The outcome of a call to :py:meth:`.Solver.solve`."""

    optimal = 0
    """The best possible solution was found and proven."""

    feasible = 1
    """A valid solution was found but not proven optimal."""

    infeasible = 2
    """No valid solution exists."""

    unknown = 3
    """No valid solution was found within the given resources."""

    model_invalid = 4
    """The model handed to the engine was malformed."""

    @property
    def is_feasible(self):
        """True iff a solution is available."""
        return self in (SolveStatus.optimal, SolveStatus.feasible)


class LinearExpr(namedtuple("LinearExpr", "terms constant")):
    """A linear expression `sum(coefficient * variable) + constant`.

    Parameters
    ----------
    terms : ((coefficient, variable), ...)
    constant : int
    """

    def __new__(cls, terms=(), constant=0):
        return super(LinearExpr, cls).__new__(cls, tuple(terms), constant)

    @classmethod
    def sum(cls, variables, constant=0):
        """The sum of some variables (plus a constant)."""
        return cls(((1, v) for v in variables), constant)

    @classmethod
    def weighted_sum(cls, variables, coefficients, constant=0):
        return cls(zip(coefficients, variables), constant)

    def __add__(self, other):
        if isinstance(other, LinearExpr):
            return LinearExpr(self.terms + other.terms,
                              self.constant + other.constant)
        else:
            return LinearExpr(self.terms, self.constant + other)

    __radd__ = __add__

    def __neg__(self):
        return LinearExpr(((-c, v) for c, v in self.terms), -self.constant)

    def __sub__(self, other):
        return self + (-other)

    def __mul__(self, factor):
        return LinearExpr(((c * factor, v) for c, v in self.terms),
                          self.constant * factor)

    __rmul__ = __mul__


class Solver(object):
    """A general API for constraint optimisation engines."""

    def new_bool_var(self, name=""):
        """Create a new boolean variable (which is also a literal)."""
        raise NotImplementedError()

    def new_int_var(self, lower_bound, upper_bound, name=""):
        """Create a new integer variable with an inclusive domain."""
        raise NotImplementedError()

    def negated(self, literal):
        """Get the negation of a literal."""
        raise NotImplementedError()

    def add_bool_or(self, literals):
        """At least one of the literals must be true."""
        raise NotImplementedError()

    def add_at_most_one(self, literals):
        raise NotImplementedError()

    def add_exactly_one(self, literals):
        raise NotImplementedError()

    def add_linear(self, expr, lower_bound=None, upper_bound=None,
                   enforce_if=None):
        """Constrain `lower_bound <= expr <= upper_bound`.

        Parameters
        ----------
        expr : :py:class:`.LinearExpr`
        lower_bound : int or None
            None means unbounded below.
        upper_bound : int or None
            None means unbounded above.
        enforce_if : literal or None
            If given, the constraint only applies when the literal is true.
        """
        raise NotImplementedError()

    def add_max_equality(self, target, exprs):
        """Constrain `target == max(exprs)`.

        Parameters
        ----------
        target : variable
        exprs : [:py:class:`.LinearExpr`, ...]
        """
        raise NotImplementedError()

    def add_circuit(self, arcs):
        """The true arcs must form a single circuit visiting every node which
        is not skipped via a (true) self loop.

        Parameters
        ----------
        arcs : [(tail, head, literal), ...]
            Nodes are non-negative integers.
        """
        raise NotImplementedError()

    def add_hint(self, variable, value):
        """Suggest a value for a variable to start the search from."""
        raise NotImplementedError()

    def clear_hints(self):
        raise NotImplementedError()

    def minimize(self, expr):
        """Set (replacing any previous objective) the expression to
        minimise."""
        raise NotImplementedError()

    def solve(self, time_limit=None, seed=0, num_workers=1,
              log_search_progress=False):
        """Search for a solution.

        Parameters
        ----------
        time_limit : float or None
            Wall-clock budget in seconds. None means no limit. When the budget
            runs out the best solution found so far is kept.
        seed : int
            Random seed for the search.
        num_workers : int or None
            Number of search threads to use. None lets the engine decide.
        log_search_progress : bool
            Ask the engine to log its search progress.

        Returns
        -------
        :py:class:`.SolveStatus`
        """
        raise NotImplementedError()

    def value(self, variable):
        """The value of a variable in the last solution found."""
        raise NotImplementedError()

    def boolean_value(self, literal):
        """The value of a literal in the last solution found."""
        raise NotImplementedError()


_status_map = {
    cp_model.OPTIMAL: SolveStatus.optimal,
    cp_model.FEASIBLE: SolveStatus.feasible,
    cp_model.INFEASIBLE: SolveStatus.infeasible,
    cp_model.UNKNOWN: SolveStatus.unknown,
    cp_model.MODEL_INVALID: SolveStatus.model_invalid,
}


class CpSatSolver(Solver):
    """A :py:class:`.Solver` using OR-Tools' CP-SAT engine.

    Attributes
    ----------
    model : :py:class:`ortools.sat.python.cp_model.CpModel`
        The underlying model being built.
    """

    def __init__(self):
        self.model = cp_model.CpModel()
        self._solver = None

    def _expr(self, expr):
        """Convert a :py:class:`.LinearExpr` into a CP-SAT expression."""
        if not expr.terms:
            return expr.constant
        coefficients, variables = zip(*expr.terms)
        return cp_model.LinearExpr.weighted_sum(
            list(variables), [int(c) for c in coefficients]) + expr.constant

    def new_bool_var(self, name=""):
        return self.model.new_bool_var(name)

    def new_int_var(self, lower_bound, upper_bound, name=""):
        return self.model.new_int_var(lower_bound, upper_bound, name)

    def negated(self, literal):
        return literal.negated()

    def add_bool_or(self, literals):
        return self.model.add_bool_or(list(literals))

    def add_at_most_one(self, literals):
        return self.model.add_at_most_one(list(literals))

    def add_exactly_one(self, literals):
        return self.model.add_exactly_one(list(literals))

    def add_linear(self, expr, lower_bound=None, upper_bound=None,
                   enforce_if=None):
        domain = cp_model.Domain(
            cp_model.INT_MIN if lower_bound is None else lower_bound,
            cp_model.INT_MAX if upper_bound is None else upper_bound)
        constraint = self.model.add_linear_expression_in_domain(
            self._expr(expr), domain)
        if enforce_if is not None:
            constraint.only_enforce_if(enforce_if)
        return constraint

    def add_max_equality(self, target, exprs):
        return self.model.add_max_equality(
            target, [self._expr(e) for e in exprs])

    def add_circuit(self, arcs):
        return self.model.add_circuit(list(arcs))

    def add_hint(self, variable, value):
        self.model.add_hint(variable, value)

    def clear_hints(self):
        self.model.clear_hints()

    def minimize(self, expr):
        self.model.minimize(self._expr(expr))

    def solve(self, time_limit=None, seed=0, num_workers=1,
              log_search_progress=False):
        self._solver = cp_model.CpSolver()
        self._solver.parameters.random_seed = seed
        self._solver.parameters.log_search_progress = log_search_progress
        if time_limit is not None:
            self._solver.parameters.max_time_in_seconds = time_limit
        if num_workers is not None:
            self._solver.parameters.num_workers = num_workers

        return _status_map[self._solver.solve(self.model)]

    def _check_solved(self):
        if self._solver is None:
            raise RuntimeError("solve() has not been called.")

    def value(self, variable):
        self._check_solved()
        return self._solver.value(variable)

    def boolean_value(self, literal):
        self._check_solved()
        return bool(self._solver.boolean_value(literal))
