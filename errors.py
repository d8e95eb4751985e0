import sys

from colorama import Fore, Style


class LoxError(Exception):
    pass


class ParseError(LoxError):
    # Unwinds the parser to the nearest declaration so it can synchronize.
    pass


class LoxRuntimeError(LoxError):
    def __init__(self, token, message: str):
        super().__init__(message)
        self.token = token
        self.message = message

    def format(self) -> str:
        return f"{self.message}\n[line {self.token.line}]"

    def __str__(self) -> str:
        return self.format()


class Reporter:
    """Collects diagnostics for one interpreter session.

    Lexer, parser and interpreter all report through the same instance; the
    driver reads ``had_error`` / ``had_runtime_error`` after each run to pick
    an exit code, and calls ``reset()`` between REPL lines.
    """

    def __init__(self, stream=None, color: bool = False):
        self.stream = stream
        self.color = color
        self.had_error = False
        self.had_runtime_error = False
        self.diagnostics = []

    def _write(self, text: str):
        self.diagnostics.append(text)
        if self.color:
            text = f"{Fore.RED}{text}{Style.RESET_ALL}"
        stream = self.stream if self.stream is not None else sys.stderr
        print(text, file=stream)

    def error(self, line: int, message: str, where: str = ""):
        self._write(f"[line {line}] Error{where}: {message}")
        self.had_error = True

    def token_error(self, token, message: str):
        if token.type == "EOF":
            self.error(token.line, message, " at end")
        else:
            self.error(token.line, message, f" at '{token.lexeme}'")

    def runtime_error(self, error: LoxRuntimeError):
        self._write(error.format())
        self.had_runtime_error = True

    def reset(self):
        # REPL: a syntax error on one line must not block the next.
        self.had_error = False
