"""
Tests for user FUNCTION / PROCEDURE calls.
"""

from pseudostep import RETURN_SLOT, PseudoRuntime


class TestFactorial:
    def test_block_form(self, harness, factorial_source):
        h = harness(factorial_source)
        state = h.run()
        assert h.outputs == ["120"]
        assert state.variables["result"] == 120
        assert state.call_stack == ()

    def test_inline_form(self, harness):
        src = """\
FUNCTION fact(n)
    IF n <= 1 THEN RETURN 1 ELSE RETURN n * fact(n - 1)
ENDFUNCTION
OUTPUT fact(5)
"""
        h = harness(src)
        h.run()
        assert h.outputs == ["120"]

    def test_call_completes_within_one_step(self, harness, factorial_source):
        rt = harness(factorial_source).runtime
        rt.step()                       # skips the definition
        state = rt.step()               # result ← fact(5)
        assert state.variables["result"] == 120
        assert state.current_line == 8
        assert rt.call_depth == 0

    def test_definition_is_skipped_on_fall_through(self, harness, factorial_source):
        state = harness(factorial_source).runtime.step()
        assert state.current_line == 7


class TestScoping:
    def test_caller_variables_survive(self, harness, factorial_source):
        h = harness("n ← 99\n" + factorial_source + "OUTPUT n\n")
        h.run()
        assert h.outputs == ["120", "99"]

    def test_callee_cannot_see_caller(self, harness):
        src = """\
FUNCTION peek()
    RETURN secret
ENDFUNCTION
secret ← 1
x ← peek()
"""
        state = harness(src).run()
        assert state.variables["x"] == "secret"

    def test_return_slot(self, harness):
        src = "FUNCTION two()\nRETURN 2\nENDFUNCTION\nx ← two()\n"
        state = harness(src).run()
        assert state.variables["x"] == 2
        assert state.variables[RETURN_SLOT] == 2

    def test_defined_after_use(self, harness):
        h = harness("OUTPUT double(4)\nFUNCTION double(n)\nRETURN n * 2\nENDFUNCTION\n")
        h.run()
        assert h.outputs == ["8"]

    def test_loop_inside_function(self, harness):
        src = """\
FUNCTION sum_to(n)
    total ← 0
    i ← 1
    WHILE i <= n
        total ← total + i
        i ← i + 1
    ENDWHILE
    RETURN total
ENDFUNCTION
FOR k ← 1 TO 3
    OUTPUT sum_to(k)
NEXT k
"""
        h = harness(src)
        state = h.run()
        assert h.outputs == ["1", "3", "6"]
        assert state.call_stack == ()


class TestProcedures:
    def test_call_statement(self, harness):
        src = """\
PROCEDURE greet(name)
    OUTPUT "Hello, " + name
ENDPROCEDURE
CALL greet("Bob")
OUTPUT "end"
"""
        h = harness(src)
        state = h.run()
        assert h.outputs == ["Hello, Bob", "end"]
        assert "name" not in state.variables

    def test_bare_call_without_parens(self, harness):
        src = 'PROCEDURE hello\nOUTPUT "hi"\nENDPROCEDURE\nCALL hello\n'
        h = harness(src)
        h.run()
        assert h.outputs == ["hi"]

    def test_missing_arguments_have_no_value(self, harness):
        src = "PROCEDURE p(a, b)\nOUTPUT b\nENDPROCEDURE\nCALL p(1)\n"
        h = harness(src)
        h.run()
        assert h.outputs == ["undefined"]

    def test_bare_return_ends_procedure(self, harness):
        src = 'PROCEDURE p()\nOUTPUT "a"\nRETURN\nOUTPUT "b"\nENDPROCEDURE\np()\nOUTPUT "c"\n'
        h = harness(src)
        h.run()
        assert h.outputs == ["a", "c"]


class TestEdges:
    def test_return_outside_call_advances(self, harness):
        h = harness("RETURN 5\nOUTPUT 1\n")
        h.run()
        assert h.outputs == ["1"]

    def test_unknown_function_fails_soft(self, harness):
        state = harness("x ← nope(1)\n").run()
        assert state.variables["x"] == "nope(1)"

    def test_depth_limit_fails_soft(self, harness):
        src = """\
FUNCTION f(n)
    RETURN f(n + 1)
ENDFUNCTION
x ← f(0)
OUTPUT "survived"
"""
        h = harness(src, max_call_depth=10)
        state = h.run()
        assert h.outputs == ["survived"]
        assert state.variables["x"] == "f(n + 1)"
        assert state.call_stack == ()
        assert h.runtime.call_depth == 0

    def test_default_depth_limit(self):
        src = "FUNCTION f(n)\nRETURN f(n + 1)\nENDFUNCTION\nx ← f(0)\n"
        state = PseudoRuntime(src).run()
        assert state.finished
        assert state.variables["x"] == "f(n + 1)"


class TestValueArguments:
    def test_callee_cannot_change_caller_list(self, harness):
        src = """\
PROCEDURE clobber(xs)
    xs[0] ← 99
    OUTPUT xs
ENDPROCEDURE
arr ← [1, 2]
CALL clobber(arr)
OUTPUT arr
"""
        h = harness(src)
        h.run()
        assert h.outputs == ["99,2", "1,2"]

    def test_returns_clause_on_header(self, harness):
        src = "FUNCTION twice(x) RETURNS INTEGER\nRETURN x * 2\nENDFUNCTION\nOUTPUT twice(4)\n"
        h = harness(src)
        h.run()
        assert h.outputs == ["8"]
        assert "twice" in h.runtime.functions
