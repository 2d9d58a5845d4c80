"""
Tests for the runtime value model (classification, truthiness, equality,
canonical text).
"""

import math

import pytest

from hcl.errors import InternalError
from hcl.runtime.callables import (
    HclClass, HclFunction, HclInstance, ModuleNamespace, NativeFunction,
)
from hcl.runtime.environment import Environment
from hcl.runtime.values import (
    ValueKind, kind_of, is_truthy, is_equal,
    format_number, stringify, repeat_count,
)

from builders import fn


def make_class(name="Point"):
    metaclass = HclClass(None, f"{name} metaclass", None, {})
    return HclClass(metaclass, name, None, {})


class TestKindOf:
    """Test value classification."""

    def test_primitives(self):
        """Test nil, booleans, numbers and text."""
        assert kind_of(None) is ValueKind.NIL
        assert kind_of(True) is ValueKind.BOOLEAN
        assert kind_of(1.5) is ValueKind.NUMBER
        assert kind_of("hi") is ValueKind.TEXT

    def test_bool_is_not_number(self):
        """bool subclasses int in Python but is its own kind."""
        assert kind_of(False) is ValueKind.BOOLEAN
        assert kind_of(True) is not ValueKind.NUMBER

    def test_native_int_is_number(self):
        """Test ints returned by native code count as numbers."""
        assert kind_of(3) is ValueKind.NUMBER

    def test_objects(self):
        """Test classes, instances, modules and callables."""
        klass = make_class()
        assert kind_of(klass) is ValueKind.CLASS
        assert kind_of(HclInstance(klass)) is ValueKind.INSTANCE
        assert kind_of(ModuleNamespace("Math", {})) is ValueKind.INSTANCE
        assert kind_of(NativeFunction("clock", 0, lambda: 0.0)) is ValueKind.CALLABLE
        assert kind_of(HclFunction(fn("f", []), Environment())) is ValueKind.CALLABLE

    def test_foreign_object_is_internal_error(self):
        """Test an unknown Python object is a runtime defect."""
        with pytest.raises(InternalError, match="unsupported runtime value"):
            kind_of([1, 2])


class TestTruthiness:
    """Only nil and false are falsy."""

    @pytest.mark.parametrize("value", [None, False])
    def test_falsy(self, value):
        """Test nil and false are falsy."""
        assert is_truthy(value) is False

    @pytest.mark.parametrize("value", [True, 0.0, "", "x", -1.0])
    def test_truthy(self, value):
        """Test zero and empty text are truthy."""
        assert is_truthy(value) is True

    def test_objects_truthy(self):
        """Test runtime objects are truthy."""
        assert is_truthy(make_class())


class TestEquality:
    """Test structural and identity equality."""

    def test_nil_equals_nil(self):
        """Test nil equals nil."""
        assert is_equal(None, None)

    def test_different_kinds_unequal(self):
        """Test values of different kinds never compare equal."""
        assert not is_equal(True, 1.0)
        assert not is_equal("1", 1.0)
        assert not is_equal(None, False)

    def test_primitives_by_value(self):
        """Test numbers and text compare by value."""
        assert is_equal(2.0, 2)
        assert is_equal("ab", "a" + "b")
        assert not is_equal(1.0, 2.0)

    def test_nan_not_equal_to_itself(self):
        """Test NaN follows IEEE-754 equality."""
        assert not is_equal(math.nan, math.nan)

    def test_objects_by_identity(self):
        """Test instances compare by identity."""
        klass = make_class()
        a, b = HclInstance(klass), HclInstance(klass)
        assert is_equal(a, a)
        assert not is_equal(a, b)


class TestStringify:
    """Test canonical text."""

    def test_nil_and_booleans(self):
        """Test nil and boolean spelling."""
        assert stringify(None) == "nil"
        assert stringify(True) == "true"
        assert stringify(False) == "false"

    def test_integral_numbers_drop_fraction(self):
        """Test integral numbers print without a fraction."""
        assert stringify(5.0) == "5"
        assert stringify(-3.0) == "-3"
        assert stringify(7) == "7"

    def test_fractional_numbers(self):
        """Test fractional numbers use the shortest round-trip digits."""
        assert stringify(2.5) == "2.5"
        assert stringify(0.1) == "0.1"
        assert stringify(0.001) == "0.001"

    def test_negative_zero(self):
        """Test negative zero keeps its sign."""
        assert format_number(-0.0) == "-0"
        assert format_number(0.0) == "0"

    def test_large_numbers_use_exponent(self):
        """Test magnitudes of 10^7 and above use exponent notation."""
        assert format_number(9999999.0) == "9999999"
        assert format_number(1e7) == "1.0E7"
        assert format_number(12345678.0) == "1.2345678E7"
        assert format_number(1e21) == "1.0E21"
        assert format_number(-2.5e30) == "-2.5E30"

    def test_small_numbers_use_exponent(self):
        """Test magnitudes below 10^-3 use exponent notation."""
        assert format_number(0.0001) == "1.0E-4"
        assert format_number(1.5e-10) == "1.5E-10"

    def test_special_numbers(self):
        """Test infinities and NaN."""
        assert format_number(math.inf) == "Infinity"
        assert format_number(-math.inf) == "-Infinity"
        assert format_number(math.nan) == "NaN"

    def test_text_verbatim(self):
        """Test text prints without quotes."""
        assert stringify("hello world") == "hello world"

    def test_callables(self):
        """Test user and native function text."""
        assert stringify(HclFunction(fn("area", []), Environment())) == "<fn area>"
        assert stringify(NativeFunction("clock", 0, lambda: 0.0)) == "<native fn clock>"

    def test_class_instance_module(self):
        """Test class, instance and module text."""
        klass = make_class("Point")
        assert stringify(klass) == "Point"
        assert stringify(HclInstance(klass)) == "<Point instance>"
        assert stringify(ModuleNamespace("Math", {})) == "<module Math>"


class TestRepeatCount:
    """Test text repetition counts."""

    def test_floors(self):
        """Test counts are floored."""
        assert repeat_count(3.0) == 3
        assert repeat_count(2.7) == 2
        assert repeat_count(0.0) == 0

    @pytest.mark.parametrize("count", [-1.0, math.inf, math.nan])
    def test_invalid(self, count):
        """Test negative and non-finite counts are rejected."""
        assert repeat_count(count) == -1
