"""
Shared fixtures: interpreters with captured output and an isolated module
registry per test.
"""

import io

import pytest

from hcl import Interpreter, ModuleRegistry, Resolver, Settings


class Session:
    """An interpreter whose print output is captured in memory."""

    def __init__(self, interpreter: Interpreter, stdout: io.StringIO):
        self.interpreter = interpreter
        self.stdout = stdout

    @property
    def output(self) -> str:
        return self.stdout.getvalue()

    @property
    def globals(self):
        return self.interpreter.globals

    def resolve(self, statements):
        return Resolver(self.interpreter).resolve(statements)

    def run(self, *statements) -> bool:
        """Resolve then interpret; resolution must succeed."""
        result = self.resolve(statements)
        assert not result.has_errors, [d.format() for d in result.diagnostics]
        return self.interpreter.interpret(statements)

    def evaluate(self, expression) -> str:
        return self.interpreter.evaluate_expression(expression)

    @property
    def errors(self):
        return self.interpreter.diagnostics.diagnostics

    @property
    def last_error(self):
        return self.errors[-1]


@pytest.fixture
def registry():
    return ModuleRegistry()


@pytest.fixture
def settings(tmp_path):
    return Settings(home=tmp_path / "hcl-home")


@pytest.fixture
def make_session(registry, settings, tmp_path):
    """Factory for sessions; register modules before calling it."""
    def factory(loader=None, stdin=None) -> Session:
        stdout = io.StringIO()
        interpreter = Interpreter(
            registry=registry,
            loader=loader,
            settings=settings,
            stdout=stdout,
            stdin=stdin,
            base_dir=tmp_path,
        )
        return Session(interpreter, stdout)
    return factory


@pytest.fixture
def session(make_session):
    return make_session()
