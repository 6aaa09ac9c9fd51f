## keyframe — Copyright © 2025, Alex J. Champandard.  Licensed under AGPLv3; see LICENSE! ⚘

import textwrap

import pytest

from keyframe.runtime import Runtime
from keyframe.lexer import tokenize
from keyframe.interpreter import Interpreter
from keyframe.types import ExecutionResult, Diagnostic, Token
from keyframe.errors import KeyframeRuntimeError


def run(source: str, **kwargs):
    rt = Runtime(**kwargs)
    result = rt.run(textwrap.dedent(source))
    return rt, result


def test_declaration_of_concatenated_string():
    rt, result = run('dec x = "ab" + "cd"')
    assert result.status == ExecutionResult.SUCCESS
    var = rt.get_variable('x')
    assert (var.type, var.value) == (Token.STRING, 'abcd')


def test_declaration_of_boolean_expressions():
    rt, _ = run('dec a = (true and false)\ndec b = (true or false)')
    assert rt.get_variable('a').value == 'false'
    assert rt.get_variable('b').value == 'true'
    assert rt.get_variable('b').type == Token.BOOLEAN


def test_declaration_of_equality():
    rt, _ = run('dec a = (5 == 5)\ndec n = 5\ndec b = (n == 5)\ndec c = ("a" != "b")')
    assert rt.get_variable('a').value == 'true'
    assert rt.get_variable('b').value == 'true'
    assert rt.get_variable('c').value == 'true'


def test_cross_type_comparison_does_not_stop_execution():
    rt, result = run('dec a = ("x" == 5)\ndec b = "ok"')
    assert result.status == ExecutionResult.ERROR
    assert 'compare different types' in result.message
    assert result.line == 1
    assert 'a' not in rt.list_variables()
    assert rt.get_variable('b').value == 'ok'
    [diag] = rt.diagnostics
    assert diag.kind == Diagnostic.TYPE


def test_redeclaration_overwrites():
    rt, _ = run('dec x = 1\ndec y = true\ndec x = "two"')
    assert rt.get_variable('x').type == Token.STRING
    assert rt.get_variable('x').value == 'two'
    assert list(rt.list_variables()) == ['x', 'y']


def test_print_emits_all_value_types():
    rt, _ = run('print("text")\nprint(5)\nprint(true)\ndec v = 2.5\nprint(v)')
    assert rt.lines() == ['text', '5', 'true', '2.5']
    assert [out.line for out in rt.output] == [1, 2, 3, 5]


def test_for_loop_bounds_are_inclusive():
    rt, result = run('for i (1, 3) { print("hi") }')
    assert result.ok
    assert rt.lines() == ['hi', 'hi', 'hi']


def test_for_loop_binds_its_variable():
    rt, _ = run('for i (1, 3) { print(i) }')
    assert rt.lines() == ['1', '2', '3']
    assert rt.get_variable('i').value == '3'


def test_for_loop_with_reversed_bounds_does_nothing():
    rt, result = run('for i (3, 1) { print("x") }')
    assert rt.lines() == []
    assert result.status == ExecutionResult.SUCCESS


def test_for_loop_bounds_must_be_integers():
    rt, result = run('for i (1.5, 3) { print("x") }\nfor j ("a", 2) { print("y") }')
    assert rt.lines() == []
    assert [d.kind for d in rt.diagnostics] == [Diagnostic.TYPE, Diagnostic.TYPE]


def test_errors_inside_a_loop_do_not_stop_it():
    rt, _ = run("""
        for i (1, 2) {
            print(missing)
            print("ok")
        }
    """)
    assert rt.lines() == ['ok', 'ok']
    assert [d.kind for d in rt.diagnostics] == [Diagnostic.NAME, Diagnostic.NAME]
    assert [d.line for d in rt.diagnostics] == [3, 3]


def test_conditional_runs_body_only_when_true():
    rt, _ = run('if (true) { print("yes") }\nif (false) { print("no") }')
    assert rt.lines() == ['yes']


def test_conditional_on_a_non_boolean_is_a_type_error():
    rt, _ = run('if (5) { print("x") }\nprint("after")')
    assert rt.lines() == ['after']
    assert rt.diagnostics[0].kind == Diagnostic.TYPE


def test_nested_blocks_match_outer_brace():
    rt, _ = run('if (true) { if (true) { print("deep") } }\nprint("after")')
    assert rt.lines() == ['deep', 'after']


def test_conditional_body_on_next_line():
    rt, _ = run("""
        dec flag = ("a" == "a")
        if (flag)
        {
            print("flagged")
        }
    """)
    assert rt.lines() == ['flagged']


def test_function_return_value_is_bound():
    rt, _ = run('function f(){ return("done") }\ndec r = f()')
    assert rt.get_variable('r').value == 'done'
    assert rt.list_functions() == ['f']


def test_statements_after_a_call_still_run_in_order():
    rt, _ = run("""
        function greet() {
            print("in")
        }
        print("before")
        greet()
        print("after")
    """)
    assert rt.lines() == ['before', 'in', 'after']


def test_return_inside_a_block_leaves_the_function():
    rt, _ = run("""
        function pick() {
            if (true) { return("early") }
            return("late")
        }
        dec r = pick()
        print(r)
    """)
    assert rt.lines() == ['early']


def test_return_inside_a_loop_stops_it():
    rt, _ = run("""
        function first() {
            for i (1, 5) {
                print(i)
                return("stopped")
            }
        }
        print(first())
    """)
    assert rt.lines() == ['1', 'stopped']


def test_functions_share_the_global_memory():
    rt, _ = run('dec g = "x"\nfunction f() { dec g = "y" }\nf()')
    assert rt.get_variable('g').value == 'y'


def test_recursive_function_with_a_flag():
    rt, _ = run("""
        dec again = true
        function countdown() {
            print("tick")
            if (again) {
                dec again = false
                countdown()
            }
        }
        countdown()
    """)
    assert rt.lines() == ['tick', 'tick']
    assert rt.diagnostics == []


def test_first_declared_function_wins():
    rt, _ = run('function f() { return("first") }\nfunction f() { return("second") }\ndec r = f()')
    assert rt.get_variable('r').value == 'first'


def test_top_level_return_ends_the_program():
    rt, result = run('print("a")\nreturn("x")\nprint("b")')
    assert result.status == ExecutionResult.RETURN
    assert result.value.text == 'x'
    assert rt.lines() == ['a']


def test_empty_return():
    rt, result = run('function f() { return()\nprint("never") }\nf()\nprint("after")')
    assert rt.lines() == ['after']
    assert result.status == ExecutionResult.SUCCESS


def test_function_without_value_cannot_be_assigned():
    rt, result = run('function f() { print("side") }\ndec r = f()')
    assert rt.lines() == ['side']
    assert result.status == ExecutionResult.ERROR
    assert rt.diagnostics[0].kind == Diagnostic.TYPE


def test_unknown_names_are_reported():
    rt, result = run('print(nope)\nnope()\nprint("still")')
    assert rt.lines() == ['still']
    assert [d.kind for d in rt.diagnostics] == [Diagnostic.NAME, Diagnostic.NAME]
    assert [d.line for d in rt.diagnostics] == [1, 2]
    assert result.status == ExecutionResult.ERROR


def test_malformed_statement_is_reported_and_skipped():
    rt, result = run('dec = 5\nprint("still")')
    assert rt.lines() == ['still']
    assert rt.diagnostics[0].kind == Diagnostic.SYNTAX
    assert 'dec' in rt.diagnostics[0].message
    assert result.status == ExecutionResult.ERROR


def test_unterminated_block_runs_to_the_end_and_is_reported():
    rt, _ = run('if (true) { print("x")\nprint("y")')
    assert rt.lines() == ['x', 'y']
    assert [d.kind for d in rt.diagnostics] == [Diagnostic.SYNTAX]


def test_nesting_is_limited():
    rt, result = run('function f() { f() }\nf()\nprint("survived")', max_depth=10)
    assert rt.lines() == ['survived']
    [diag] = rt.diagnostics
    assert diag.kind == Diagnostic.RUNTIME
    assert 'depth' in diag.message


def test_deep_recursion_beyond_the_host_stack_is_reported():
    rt, result = run('function f() {\n f()\n}\nf()\nprint("after")', max_depth=100000)
    assert rt.lines() == ['after']
    assert result.status == ExecutionResult.ERROR
    assert rt.diagnostics and all(d.kind == Diagnostic.RUNTIME for d in rt.diagnostics)
    assert 'depth' in rt.diagnostics[0].message


def test_frames_are_restored_after_errors():
    interp = Interpreter()
    interp.execute(tokenize('function f() { print(missing) }\nf()\nf()'))
    assert interp.frames == []
    assert len(interp.diagnostics) == 2


def test_memory_persists_across_runs():
    rt = Runtime()
    rt.run('dec x = "kept"\nfunction f() { return(x) }')
    rt.run('print(f())')
    assert rt.lines() == ['kept']
    rt.reset()
    assert rt.list_variables() == {} and rt.list_functions() == []


def test_result_reflects_only_the_latest_run():
    rt = Runtime()
    assert not rt.run('print(nope)').ok
    assert rt.run('print("fine")').ok


def test_writer_and_reporter_callbacks():
    printed, reported = [], []
    rt = Runtime(writer=printed.append, reporter=reported.append)
    rt.run('print("a")\nprint(b)')
    assert printed == ['a']
    assert [d.kind for d in reported] == [Diagnostic.NAME]


def test_raise_for_error():
    _, result = run('dec a = ("x" == 5)')
    with pytest.raises(KeyframeRuntimeError):
        result.raise_for_error()
    _, result = run('dec a = 1')
    assert result.raise_for_error() is result


def test_verbose_trace(capsys):
    run('dec x = "a"\nprint(x)', verbosity=2)
    out = capsys.readouterr().out
    assert 'program' in out
    assert '=>' in out
    assert 'a' in out
