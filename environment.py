from errors import LoxRuntimeError


class Environment:
    """One lexical scope: a name -> value mapping plus a link to the scope it was created in.

    Blocks, loop bodies and function calls each get a fresh Environment whose
    ``enclosing`` is the scope active where the code was *defined*, so a
    function value holding on to its Environment is a closure.
    """

    def __init__(self, enclosing=None):
        self.values = {}
        self.enclosing = enclosing

    def define(self, name: str, value):
        # declarations always bind in this scope; redeclaring just overwrites
        self.values[name] = value

    def get(self, name):
        env = self
        while env is not None:
            if name.lexeme in env.values:
                return env.values[name.lexeme]
            env = env.enclosing
        raise LoxRuntimeError(name, f"Undefined variable '{name.lexeme}'.")

    def assign(self, name, value):
        env = self
        while env is not None:
            if name.lexeme in env.values:
                env.values[name.lexeme] = value
                return
            env = env.enclosing
        raise LoxRuntimeError(name, f"Undefined variable '{name.lexeme}'.")

    def __contains__(self, name: str):
        env = self
        while env is not None:
            if name in env.values:
                return True
            env = env.enclosing
        return False

    def __repr__(self):
        depth = 0
        env = self.enclosing
        while env is not None:
            depth += 1
            env = env.enclosing
        return f"Environment({sorted(self.values)}, depth={depth})"
