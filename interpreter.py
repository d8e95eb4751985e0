import logging
import sys

from ast_nodes import (
    Literal, Grouping, Unary, Binary, Logical, Variable, Assign, Call, Get, Set, This, Super,
    Expression, Print, Var, Block, If, While, Break, Function, Return, Class,
)
from environment import Environment
from errors import LoxRuntimeError, Reporter
from lexer import Lexer, Token
from parser import Parser
from runtime import (
    BREAK, LoxCallable, LoxClass, LoxFunction, LoxInstance, ReturnSignal,
    divide, is_equal, is_number, is_truthy, native_globals, stringify,
)

logger = logging.getLogger("lox.interpreter")
logger.addHandler(logging.NullHandler())


class Interpreter:
    def __init__(self, reporter=None, out=None, max_call_depth: int = 1000):
        self.reporter = reporter if reporter is not None else Reporter()
        self.out = out                    # None -> sys.stdout at print time
        self.max_call_depth = max_call_depth
        self.call_depth = 0

        self.globals = Environment()
        for name, fn in native_globals().items():
            self.globals.define(name, fn)
        self.env = self.globals

    def interpret(self, statements):
        logger.debug("interpreting %d statements", len(statements))
        try:
            for stmt in statements:
                self.execute(stmt)
        except LoxRuntimeError as e:
            logger.debug("runtime error at line %s: %s", e.token.line, e.message)
            self.reporter.runtime_error(e)

    # -------- statements --------
    def execute(self, stmt):
        """Run one statement. Returns None, a ReturnSignal, or BREAK."""
        if isinstance(stmt, Expression):
            self.evaluate(stmt.expression)
            return None

        if isinstance(stmt, Print):
            value = self.evaluate(stmt.expression)
            out = self.out if self.out is not None else sys.stdout
            print(stringify(value), file=out)
            return None

        if isinstance(stmt, Var):
            value = None
            if stmt.initializer is not None:
                value = self.evaluate(stmt.initializer)
            self.env.define(stmt.name.lexeme, value)
            return None

        if isinstance(stmt, Block):
            return self.execute_block(stmt.statements, Environment(self.env))

        if isinstance(stmt, If):
            if is_truthy(self.evaluate(stmt.condition)):
                return self.execute(stmt.then_branch)
            if stmt.else_branch is not None:
                return self.execute(stmt.else_branch)
            return None

        if isinstance(stmt, While):
            while is_truthy(self.evaluate(stmt.condition)):
                signal = self.execute(stmt.body)
                if signal is BREAK:
                    break
                if signal is not None:
                    return signal
            return None

        if isinstance(stmt, Break):
            return BREAK

        if isinstance(stmt, Function):
            self.env.define(stmt.name.lexeme, LoxFunction(stmt, self.env))
            return None

        if isinstance(stmt, Return):
            value = None
            if stmt.value is not None:
                value = self.evaluate(stmt.value)
            return ReturnSignal(value)

        if isinstance(stmt, Class):
            self.execute_class(stmt)
            return None

        raise Exception(f"Unknown statement: {type(stmt).__name__}")

    def execute_block(self, statements, env):
        previous = self.env
        self.env = env
        try:
            for stmt in statements:
                signal = self.execute(stmt)
                if signal is not None:
                    return signal
            return None
        finally:
            self.env = previous

    def execute_class(self, stmt):
        superclass = None
        if stmt.superclass is not None:
            superclass = self.evaluate(stmt.superclass)
            if not isinstance(superclass, LoxClass):
                raise LoxRuntimeError(stmt.superclass.name, "Superclass must be a class.")

        self.env.define(stmt.name.lexeme, None)

        # methods of a subclass close over a scope that binds "super"
        method_env = self.env
        if superclass is not None:
            method_env = Environment(self.env)
            method_env.define("super", superclass)

        methods = {}
        for method in stmt.methods:
            is_init = method.name.lexeme == "init"
            methods[method.name.lexeme] = LoxFunction(method, method_env, is_init)

        klass = LoxClass(stmt.name.lexeme, superclass, methods)
        self.env.assign(stmt.name, klass)

    # -------- expressions --------
    def evaluate(self, expr):
        if isinstance(expr, Literal):
            return expr.value

        if isinstance(expr, Grouping):
            return self.evaluate(expr.expression)

        if isinstance(expr, Unary):
            right = self.evaluate(expr.right)
            if expr.operator.type == "BANG":
                return not is_truthy(right)
            if expr.operator.type == "MINUS":
                self.check_number_operand(expr.operator, right)
                return -right
            raise Exception(f"Unknown unary operator: {expr.operator.type}")

        if isinstance(expr, Binary):
            return self.evaluate_binary(expr)

        if isinstance(expr, Logical):
            left = self.evaluate(expr.left)
            if expr.operator.type == "OR":
                if is_truthy(left):
                    return left
            elif not is_truthy(left):
                return left
            return self.evaluate(expr.right)

        if isinstance(expr, Variable):
            return self.env.get(expr.name)

        if isinstance(expr, Assign):
            value = self.evaluate(expr.value)
            self.env.assign(expr.name, value)
            return value

        if isinstance(expr, Call):
            return self.evaluate_call(expr)

        if isinstance(expr, Get):
            obj = self.evaluate(expr.object)
            if isinstance(obj, LoxInstance):
                return obj.get(expr.name)
            raise LoxRuntimeError(expr.name, "Only instances have properties.")

        if isinstance(expr, Set):
            obj = self.evaluate(expr.object)
            if not isinstance(obj, LoxInstance):
                raise LoxRuntimeError(expr.name, "Only instances have fields.")
            value = self.evaluate(expr.value)
            obj.set(expr.name, value)
            return value

        if isinstance(expr, This):
            return self.env.get(expr.keyword)

        if isinstance(expr, Super):
            return self.evaluate_super(expr)

        raise Exception(f"Unknown expression: {type(expr).__name__}")

    def evaluate_binary(self, expr):
        left = self.evaluate(expr.left)
        right = self.evaluate(expr.right)
        op = expr.operator

        if op.type == "EQEQ":
            return is_equal(left, right)
        if op.type == "NOTEQ":
            return not is_equal(left, right)

        if op.type == "PLUS":
            if is_number(left) and is_number(right):
                return left + right
            if isinstance(left, str) and isinstance(right, str):
                return left + right
            raise LoxRuntimeError(op, "Operands must be two numbers or two strings.")

        self.check_number_operands(op, left, right)
        if op.type == "MINUS":
            return left - right
        if op.type == "STAR":
            return left * right
        if op.type == "SLASH":
            return divide(left, right)
        if op.type == "GT":
            return left > right
        if op.type == "GTE":
            return left >= right
        if op.type == "LT":
            return left < right
        if op.type == "LTE":
            return left <= right

        raise Exception(f"Unknown binary operator: {op.type}")

    def evaluate_call(self, expr):
        callee = self.evaluate(expr.callee)

        if not isinstance(callee, LoxCallable):
            raise LoxRuntimeError(expr.paren, "Can only call functions and classes.")

        # checked before any argument runs
        if len(expr.arguments) != callee.arity():
            raise LoxRuntimeError(
                expr.paren, f"Expected {callee.arity()} arguments but got {len(expr.arguments)}."
            )

        arguments = [self.evaluate(arg) for arg in expr.arguments]

        if self.call_depth >= self.max_call_depth:
            raise LoxRuntimeError(expr.paren, "Stack overflow.")

        logger.debug("call %s with %d args (depth %d)", callee, len(arguments), self.call_depth)
        self.call_depth += 1
        try:
            return callee.call(self, arguments)
        except RecursionError:
            raise LoxRuntimeError(expr.paren, "Stack overflow.") from None
        finally:
            self.call_depth -= 1

    def evaluate_super(self, expr):
        superclass = self.env.get(expr.keyword)
        instance = self.env.get(Token("THIS", "this", None, expr.keyword.line))
        method = superclass.find_method(expr.method.lexeme)
        if method is None:
            raise LoxRuntimeError(expr.method, f"Undefined property '{expr.method.lexeme}'.")
        return method.bind(instance)

    # -------- helpers --------
    def check_number_operand(self, operator, operand):
        if is_number(operand):
            return
        raise LoxRuntimeError(operator, "Operand must be a number.")

    def check_number_operands(self, operator, left, right):
        if is_number(left) and is_number(right):
            return
        raise LoxRuntimeError(operator, "Operands must be numbers.")


def run(source: str, interpreter: Interpreter):
    """Lex, parse and execute source. Nothing runs if the parse reported errors."""
    reporter = interpreter.reporter
    parser = Parser(Lexer(source, reporter), reporter)
    statements = parser.parse()

    if reporter.had_error:
        return None

    interpreter.interpret(statements)
    return statements
