"""
Tests for the static scope resolver.
"""

from hcl import Resolver
from hcl.tokens import TokenType

from builders import (
    lit, num, var, binary, assign, call, self_, super_,
    expr, print_, let, block, loop, brk, ret, fn, cls,
)


def codes(result):
    return [d.code for d in result.diagnostics]


class TestDistances:
    """Test the distances recorded on the interpreter."""

    def test_globals_left_unresolved(self, session):
        """Test global references get no recorded distance."""
        ref = var("g")
        result = session.resolve([let("g", num(1)), print_(ref)])
        assert not result.has_errors
        assert ref not in session.interpreter.locals

    def test_block_local(self, session):
        """Test block locals resolve to their block depth."""
        near, far = var("a"), var("a")
        session.resolve([
            block(
                let("a", num(1)),
                print_(near),
                block(print_(far)),
            ),
        ])
        assert session.interpreter.locals[near] == 0
        assert session.interpreter.locals[far] == 1

    def test_parameters_and_captures(self, session):
        """Test parameters sit at depth 0 and captures further out."""
        param, captured = var("x"), var("outer")
        session.resolve([
            fn("make", [],
               let("outer", num(1)),
               fn("inner", ["x"], ret(binary(param, TokenType.PLUS, captured))),
               ret(var("inner"))),
        ])
        assert session.interpreter.locals[param] == 0
        assert session.interpreter.locals[captured] == 1

    def test_assignment_target(self, session):
        """Test assignments record the target's distance."""
        target = assign("n", num(2))
        session.resolve([block(let("n", num(1)), block(expr(target)))])
        assert session.interpreter.locals[target] == 1

    def test_self_and_super_distances(self, session):
        """Test self and super sit in the method's enclosing layers."""
        receiver, parent = self_(), super_("go")
        session.resolve([
            cls("Base", fn("go", [])),
            cls("Child", fn("go", [], expr(receiver), expr(call(parent))), superclass="Base"),
        ])
        assert session.interpreter.locals[receiver] == 1
        assert session.interpreter.locals[parent] == 2

    def test_distances_agree_with_runtime_chain(self, session):
        """Every resolved read finds its binding exactly where the distance says."""
        program = [
            let("a", lit("global")),
            block(
                let("a", lit("outer")),
                fn("read", [], ret(var("a"))),
                block(
                    let("a", lit("inner")),
                    print_(var("a")),
                    print_(call(var("read"))),
                ),
            ),
            print_(var("a")),
        ]
        assert session.run(*program)
        assert session.output == "innerouterglobal"


class TestResolveErrors:
    """Test static scoping errors."""

    def test_read_in_own_initializer(self, session):
        """Test a local read in its own initializer is E301."""
        result = session.resolve([block(let("a", var("a", line=3)))])
        assert result.has_errors
        assert codes(result) == ["E301"]
        assert result.diagnostics[0].span.start.line == 3

    def test_global_self_reference_allowed(self, session):
        """Test globals may reference themselves."""
        result = session.resolve([let("a", var("a"))])
        assert not result.has_errors

    def test_top_level_return(self, session):
        """Test return at top level is E302."""
        result = session.resolve([ret(num(1))])
        assert codes(result) == ["E302"]

    def test_return_in_function_allowed(self, session):
        """Test return inside a function resolves cleanly."""
        assert not session.resolve([fn("f", [], ret(num(1)))]).has_errors

    def test_return_value_in_initializer_allowed(self, session):
        """Test initializers may return a value."""
        result = session.resolve([cls("A", fn("_init", [], ret(num(1))))])
        assert not result.has_errors

    def test_self_outside_class(self, session):
        """Test self outside a class is E303."""
        result = session.resolve([fn("f", [], ret(self_()))])
        assert codes(result) == ["E303"]

    def test_self_in_function_nested_in_method(self, session):
        """Test self is visible in functions nested in a method."""
        result = session.resolve([
            cls("A", fn("m", [], fn("helper", [], ret(self_())), ret(var("helper")))),
        ])
        assert not result.has_errors

    def test_super_outside_class(self, session):
        """Test super outside a class is E304."""
        result = session.resolve([expr(super_("m"))])
        assert codes(result) == ["E304"]
        assert "outside of a class" in result.diagnostics[0].message

    def test_super_without_superclass(self, session):
        """Test super in a class without a superclass is E304."""
        result = session.resolve([cls("A", fn("m", [], expr(super_("m"))))])
        assert codes(result) == ["E304"]
        assert "no superclass" in result.diagnostics[0].message

    def test_self_inheritance(self, session):
        """Test a class inheriting from itself is E305."""
        result = session.resolve([cls("Loop", superclass="Loop")])
        assert codes(result) == ["E305"]

    def test_break_outside_loop(self, session):
        """Test break outside a loop is E306."""
        result = session.resolve([brk()])
        assert codes(result) == ["E306"]

    def test_break_inside_loop_allowed(self, session):
        """Test break inside a loop resolves cleanly."""
        assert not session.resolve([loop(brk())]).has_errors

    def test_break_does_not_cross_function_boundary(self, session):
        """Test a function body inside a loop is not in the loop."""
        result = session.resolve([loop(fn("f", [], brk()), brk())])
        assert codes(result) == ["E306"]

    def test_all_errors_collected(self, session):
        """Test one pass reports every error in the batch."""
        result = session.resolve([ret(), brk(), expr(self_())])
        assert codes(result) == ["E302", "E306", "E303"]
        assert not result.stopped_early

    def test_stops_at_max_errors(self, session):
        """Test resolution stops once max_errors are collected."""
        result = Resolver(session.interpreter, max_errors=2).resolve(
            [ret(), brk(), expr(self_())])
        assert codes(result) == ["E302", "E306"]
        assert result.stopped_early

    def test_max_errors_within_one_statement(self, session):
        """Test the limit also applies inside a single statement."""
        result = Resolver(session.interpreter, max_errors=2).resolve(
            [block(ret(), brk(), expr(self_()))])
        assert codes(result) == ["E302", "E306"]
        assert result.stopped_early
