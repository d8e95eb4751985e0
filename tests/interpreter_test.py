import io

from errors import Reporter
from interpreter import Interpreter, run


def make_interpreter(**kwargs):
    reporter = Reporter(stream=io.StringIO())
    out = io.StringIO()
    return Interpreter(reporter, out=out, **kwargs)


def run_lox(source, interpreter=None):
    interpreter = interpreter or make_interpreter()
    run(source, interpreter)
    return interpreter.out.getvalue(), interpreter.reporter


def output(source):
    out, reporter = run_lox(source)
    assert not reporter.had_error, reporter.diagnostics
    assert not reporter.had_runtime_error, reporter.diagnostics
    return out.splitlines()


def runtime_error(source):
    _, reporter = run_lox(source)
    assert reporter.had_runtime_error
    return reporter.diagnostics[-1]


# ---------- expressions ----------

def test_arithmetic_precedence():
    assert output("print 1 + 2 * 3; print (1 + 2) * 3; print 10 - 4 - 3; print 8 / 4 / 2;") == [
        "7", "9", "3", "1",
    ]


def test_number_formatting():
    assert output("print 2.5; print 10 / 4; print 0.1 + 0.2; print -3;") == [
        "2.5", "2.5", "0.30000000000000004", "-3",
    ]


def test_division_by_zero_follows_ieee():
    assert output("print 1 / 0; print -1 / 0; print 0 / 0;") == ["Infinity", "-Infinity", "NaN"]


def test_string_concatenation():
    assert output('print "a" + "b";') == ["ab"]


def test_mixed_plus_is_a_runtime_error():
    assert runtime_error('print "a" + 1;') == "Operands must be two numbers or two strings.\n[line 1]"


def test_truthiness():
    assert output('print !nil; print !0; print !""; print !false; print !!"x";') == [
        "true", "false", "false", "true", "true",
    ]


def test_equality_is_type_sensitive_and_never_raises():
    assert output('print 1 == "1"; print nil == nil; print nil == false; print true == 1; print "a" != "a";') == [
        "false", "true", "false", "false", "false",
    ]


def test_comparisons_need_numbers():
    assert output("print 1 < 2; print 2 <= 2; print 3 > 4; print 4 >= 5;") == ["true", "true", "false", "false"]
    assert runtime_error('print 1 < "2";') == "Operands must be numbers.\n[line 1]"


def test_unary_minus_needs_a_number():
    assert runtime_error('print -"x";') == "Operand must be a number.\n[line 1]"


def test_logical_operators_short_circuit_and_return_operands():
    assert output('print nil or "x"; print "y" or boom; print false and boom; print 1 and 2;') == [
        "x", "y", "false", "2",
    ]


# ---------- variables and scope ----------

def test_block_variables_do_not_leak():
    assert output("var a = 1; { var b = 2; print a + b; }") == ["3"]
    assert runtime_error("{ var b = 2; } print b;") == "Undefined variable 'b'.\n[line 1]"


def test_shadowing_only_inside_block():
    source = """
    var a = "outer";
    {
      var a = "inner";
      print a;
    }
    print a;
    """
    assert output(source) == ["inner", "outer"]


def test_assignment_walks_out_but_never_declares():
    assert output("var a = 1; { a = 2; } print a;") == ["2"]
    assert runtime_error("b = 1;") == "Undefined variable 'b'.\n[line 1]"


def test_uninitialized_variable_is_nil():
    assert output("var a; print a;") == ["nil"]


# ---------- control flow ----------

def test_if_else():
    assert output('if (0) print "zero is true"; else print "no";') == ["zero is true"]
    assert output('if (nil) print "yes"; else print "no";') == ["no"]


def test_while_and_for_loops():
    assert output("var i = 0; while (i < 3) { print i; i = i + 1; }") == ["0", "1", "2"]
    assert output("var s = 0; for (var i = 1; i <= 4; i = i + 1) s = s + i; print s;") == ["10"]


def test_for_loop_variable_is_scoped_to_the_loop():
    assert runtime_error("for (var i = 0; i < 1; i = i + 1) {} print i;") == "Undefined variable 'i'.\n[line 1]"


def test_break_leaves_innermost_loop():
    source = """
    for (var i = 0; i < 3; i = i + 1) {
      var j = 0;
      while (true) {
        if (j == i) break;
        j = j + 1;
      }
      print j;
    }
    """
    assert output(source) == ["0", "1", "2"]


# ---------- functions ----------

def test_function_call_and_return():
    source = """
    fun add(a, b) { return a + b; }
    print add(1, 2);
    fun nothing() {}
    print nothing();
    """
    assert output(source) == ["3", "nil"]


def test_return_unwinds_out_of_loops():
    source = """
    fun first(n) {
      for (var i = 0; i < 10; i = i + 1) {
        if (i == n) return i;
      }
      return -1;
    }
    print first(3);
    """
    assert output(source) == ["3"]


def test_recursion():
    source = """
    fun fib(n) { if (n < 2) return n; return fib(n - 1) + fib(n - 2); }
    print fib(15);
    """
    assert output(source) == ["610"]


def test_closures_capture_environment_by_reference():
    source = """
    fun makeCounter() {
      var count = 0;
      fun counter() {
        count = count + 1;
        return count;
      }
      return counter;
    }
    var c = makeCounter();
    c();
    print c();

    fun outer() {
      var x = 1;
      fun get() { return x; }
      x = 2;
      return get;
    }
    print outer()();
    """
    assert output(source) == ["2", "2"]


def test_closure_sees_definition_scope_not_call_site():
    source = """
    fun makeShow() {
      var a = "captured";
      fun show() { print a; }
      return show;
    }
    var show = makeShow();
    {
      var a = "call site";
      show();
    }
    """
    assert output(source) == ["captured"]


def test_arity_mismatch_is_checked_before_arguments_run():
    interpreter = make_interpreter()
    out, reporter = run_lox(
        "var calls = 0; fun bump() { calls = calls + 1; return calls; } fun f(a) {} f(bump(), bump());",
        interpreter,
    )
    assert reporter.diagnostics == ["Expected 1 arguments but got 2.\n[line 1]"]
    out, _ = run_lox("print calls;", interpreter)
    assert out.splitlines() == ["0"]


def test_calling_a_non_callable():
    assert runtime_error('"not a function"();') == "Can only call functions and classes.\n[line 1]"


def test_callable_values_print_their_kind():
    assert output("fun f() {} print f; print clock; class A {} print A; print A();") == [
        "<fn f>", "<native fn>", "A", "A instance",
    ]


def test_clock_returns_seconds():
    assert output("print clock() > 0;") == ["true"]


def test_runaway_recursion_is_a_runtime_error():
    interpreter = make_interpreter(max_call_depth=50)
    _, reporter = run_lox("fun f() { f(); }\nf();", interpreter)
    assert reporter.diagnostics == ["Stack overflow.\n[line 1]"]


# ---------- classes ----------

def test_fields_are_created_on_assignment():
    source = """
    class Box {}
    var b = Box();
    b.value = 3;
    print b.value;
    """
    assert output(source) == ["3"]


def test_methods_bind_this():
    source = """
    class Greeter {
      init(name) { this.name = name; }
      greet() { print "hi " + this.name; }
    }
    var g = Greeter("bob");
    var m = g.greet;
    m();
    """
    assert output(source) == ["hi bob"]


def test_initializer_returns_instance():
    source = """
    class A {
      init() { this.x = 1; return; }
    }
    var a = A();
    print a.init() == a;
    print a.x;
    """
    assert output(source) == ["true", "1"]


def test_class_arity_comes_from_init():
    assert runtime_error("class P { init(x, y) {} } P(1);") == "Expected 2 arguments but got 1.\n[line 1]"
    assert runtime_error("class Q {} Q(1);") == "Expected 0 arguments but got 1.\n[line 1]"


def test_inheritance_and_super():
    source = """
    class A {
      method() { return "A method"; }
      name() { return "A"; }
    }
    class B < A {
      method() { return "B then " + super.method(); }
    }
    class C < B {}
    var c = C();
    print c.method();
    print c.name();
    """
    assert output(source) == ["B then A method", "A"]


def test_super_binds_this_to_the_receiver():
    source = """
    class Base {
      init(x) { this.x = x; }
      describe() { return this.x; }
    }
    class Derived < Base {
      init(x) { super.init(x * 2); }
      describe() { return super.describe() + 1; }
    }
    print Derived(5).describe();
    """
    assert output(source) == ["11"]


def test_fields_shadow_methods():
    source = """
    class A { m() { return "method"; } }
    var a = A();
    a.m = "field";
    print a.m;
    """
    assert output(source) == ["field"]


def test_property_errors():
    assert runtime_error("class A {} print A().nope;") == "Undefined property 'nope'.\n[line 1]"
    assert runtime_error('var s = "str"; print s.length;') == "Only instances have properties.\n[line 1]"
    assert runtime_error('var s = "str"; s.length = 1;') == "Only instances have fields.\n[line 1]"


def test_superclass_must_be_a_class():
    assert runtime_error('var NotAClass = "x";\nclass B < NotAClass {}') == "Superclass must be a class.\n[line 2]"


def test_instances_compare_by_identity():
    assert output("class A {} var a = A(); var b = A(); print a == a; print a == b;") == ["true", "false"]


# ---------- run semantics ----------

def test_runtime_error_aborts_the_rest_of_the_run():
    out, reporter = run_lox('print 1;\nprint -"x";\nprint 2;')
    assert out.splitlines() == ["1"]
    assert reporter.diagnostics == ["Operand must be a number.\n[line 2]"]


def test_syntax_error_suppresses_execution():
    out, reporter = run_lox("print 1;\nprint ;")
    assert out == ""
    assert reporter.had_error
    assert not reporter.had_runtime_error


def test_globals_persist_between_runs_after_a_runtime_error():
    interpreter = make_interpreter()
    run_lox("var a = 1; { var b = 2; print nope; }", interpreter)
    assert interpreter.env is interpreter.globals
    out, _ = run_lox("print a;", interpreter)
    assert out.splitlines() == ["1"]
