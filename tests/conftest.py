"""
Pytest fixtures for pseudostep tests.
"""

import pytest

from pseudostep import PseudoRuntime


FIBONACCI = """\
x ← 0
y ← 1
counter ← 0
WHILE counter < 10 DO
    OUTPUT "Fibonacci: " + y
    temp ← x + y
    x ← y
    y ← temp
    counter ← counter + 1
ENDWHILE
OUTPUT "Done!"
"""

FACTORIAL = """\
FUNCTION fact(n)
    IF n <= 1 THEN
        RETURN 1
    ELSE
        RETURN n * fact(n - 1)
    ENDIF
ENDFUNCTION
result ← fact(5)
OUTPUT result
"""


class Harness:
    """A runtime plus everything it printed."""

    def __init__(self, source, inputs=None, **kwargs):
        self.outputs = []
        self.prompts = []
        self._inputs = list(inputs) if inputs is not None else None
        provider = self._provide if self._inputs is not None else None
        self.runtime = PseudoRuntime(source, output=self.outputs.append,
                                     input_provider=provider, **kwargs)

    def _provide(self, prompt):
        self.prompts.append(prompt)
        return self._inputs.pop(0) if self._inputs else None

    def run(self, max_steps=10000):
        return self.runtime.run(max_steps=max_steps)


@pytest.fixture
def harness():
    """Factory: harness(source, inputs=None, **runtime_kwargs) -> Harness."""
    return Harness


@pytest.fixture
def fibonacci_source():
    return FIBONACCI


@pytest.fixture
def factorial_source():
    return FACTORIAL
