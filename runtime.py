"""Runtime values of the interpreter and the rules that apply to them.

nil, booleans, numbers and strings are plain Python ``None``/``bool``/
``float``/``str``. Everything callable derives from ``LoxCallable``.
"""

import math
import time

from environment import Environment
from errors import LoxRuntimeError


# ---------- control signals ----------
# Statement execution returns None to continue, or one of these to unwind.

class ReturnSignal:
    def __init__(self, value):
        self.value = value

    def __repr__(self):
        return f"ReturnSignal({self.value!r})"


class BreakSignal:
    def __repr__(self):
        return "BREAK"


BREAK = BreakSignal()


# ---------- callables ----------

class LoxCallable:
    def arity(self) -> int:
        raise NotImplementedError

    def call(self, interpreter, arguments):
        raise NotImplementedError


class NativeFunction(LoxCallable):
    def __init__(self, name: str, arity: int, fn):
        self.name = name
        self._arity = arity
        self.fn = fn

    def arity(self) -> int:
        return self._arity

    def call(self, interpreter, arguments):
        return self.fn(*arguments)

    def __str__(self):
        return "<native fn>"


class LoxFunction(LoxCallable):
    def __init__(self, declaration, closure, is_initializer: bool = False):
        self.declaration = declaration
        self.closure = closure
        self.is_initializer = is_initializer

    def bind(self, instance):
        env = Environment(self.closure)
        env.define("this", instance)
        return LoxFunction(self.declaration, env, self.is_initializer)

    def arity(self) -> int:
        return len(self.declaration.params)

    def call(self, interpreter, arguments):
        env = Environment(self.closure)
        for param, arg in zip(self.declaration.params, arguments):
            env.define(param.lexeme, arg)

        signal = interpreter.execute_block(self.declaration.body, env)

        # init() hands back the instance no matter how it exits
        if self.is_initializer:
            return self.closure.values["this"]
        if isinstance(signal, ReturnSignal):
            return signal.value
        return None

    def __str__(self):
        return f"<fn {self.declaration.name.lexeme}>"


class LoxClass(LoxCallable):
    def __init__(self, name: str, superclass, methods):
        self.name = name
        self.superclass = superclass  # LoxClass | None
        self.methods = methods        # dict[str, LoxFunction]

    def find_method(self, name: str):
        klass = self
        while klass is not None:
            if name in klass.methods:
                return klass.methods[name]
            klass = klass.superclass
        return None

    def arity(self) -> int:
        initializer = self.find_method("init")
        if initializer is None:
            return 0
        return initializer.arity()

    def call(self, interpreter, arguments):
        instance = LoxInstance(self)
        initializer = self.find_method("init")
        if initializer is not None:
            initializer.bind(instance).call(interpreter, arguments)
        return instance

    def __str__(self):
        return self.name


class LoxInstance:
    def __init__(self, klass):
        self.klass = klass
        self.fields = {}

    def get(self, name):
        if name.lexeme in self.fields:
            return self.fields[name.lexeme]

        method = self.klass.find_method(name.lexeme)
        if method is not None:
            return method.bind(self)

        raise LoxRuntimeError(name, f"Undefined property '{name.lexeme}'.")

    def set(self, name, value):
        self.fields[name.lexeme] = value

    def __str__(self):
        return f"{self.klass.name} instance"


# ---------- value rules ----------

def is_truthy(value) -> bool:
    # only nil and false are falsy; 0 and "" are true
    if value is None:
        return False
    if isinstance(value, bool):
        return value
    return True


def is_equal(a, b) -> bool:
    if a is None and b is None:
        return True
    if a is None or b is None:
        return False
    # bool is an int subclass in Python; true must never equal 1
    if type(a) is not type(b):
        return False
    if isinstance(a, (bool, float, str)):
        return a == b
    return a is b


def is_number(value) -> bool:
    return isinstance(value, float)


def divide(left: float, right: float) -> float:
    if right != 0:
        return left / right
    # IEEE: x/0 is a signed infinity, 0/0 (or nan/0) is nan
    if left == 0 or math.isnan(left):
        return math.nan
    return math.copysign(math.inf, left) * math.copysign(1.0, right)


def stringify(value) -> str:
    if value is None:
        return "nil"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        if math.isnan(value):
            return "NaN"
        if math.isinf(value):
            return "Infinity" if value > 0 else "-Infinity"
        text = repr(value)
        if text.endswith(".0"):
            text = text[:-2]
        return text
    return str(value)


def native_globals():
    return {
        "clock": NativeFunction("clock", 0, lambda: float(time.time())),
    }
