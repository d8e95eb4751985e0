from dataclasses import dataclass
from typing import Any


KEYWORDS = {
    "and": "AND",
    "break": "BREAK",
    "class": "CLASS",
    "else": "ELSE",
    "false": "FALSE",
    "for": "FOR",
    "fun": "FUN",
    "if": "IF",
    "nil": "NIL",
    "or": "OR",
    "print": "PRINT",
    "return": "RETURN",
    "super": "SUPER",
    "this": "THIS",
    "true": "TRUE",
    "var": "VAR",
    "while": "WHILE",
}

# literal values carried by keyword tokens
KEYWORD_VALUES = {"TRUE": True, "FALSE": False, "NIL": None}

SINGLE_CHAR = {
    "(": "LPAREN",
    ")": "RPAREN",
    "{": "LBRACE",
    "}": "RBRACE",
    ",": "COMMA",
    ".": "DOT",
    "-": "MINUS",
    "+": "PLUS",
    ";": "SEMICOLON",
    "*": "STAR",
}

# char -> (kind alone, kind when followed by '=')
ONE_OR_TWO = {
    "!": ("BANG", "NOTEQ"),
    "=": ("EQUAL", "EQEQ"),
    "<": ("LT", "LTE"),
    ">": ("GT", "GTE"),
}

TOKEN_TYPES = frozenset(
    list(SINGLE_CHAR.values())
    + [kind for pair in ONE_OR_TWO.values() for kind in pair]
    + ["SLASH", "IDENT", "STRING", "NUMBER", "EOF"]
    + list(KEYWORDS.values())
)


# ASCII only: str.isdigit() accepts things like '²' that float() rejects
def is_digit(ch):
    return ch is not None and "0" <= ch <= "9"


def is_alpha(ch):
    return ch is not None and ("a" <= ch <= "z" or "A" <= ch <= "Z" or ch == "_")


def is_alnum(ch):
    return is_alpha(ch) or is_digit(ch)


@dataclass(frozen=True)
class Token:
    type: str
    lexeme: str
    value: Any = None
    line: int = 1

    def __post_init__(self):
        if self.type not in TOKEN_TYPES:
            raise ValueError(f"Unknown token type: {self.type}")

    def __repr__(self):
        if self.value is not None:
            return f"{self.type}({self.value!r})"
        return f"{self.type}"


class Lexer:
    def __init__(self, text, reporter=None):
        self.text = text
        self.reporter = reporter
        self.pos = 0
        self.start = 0
        self.current_char = text[0] if text else None
        self.line = 1

    def advance(self):
        if self.current_char == "\n":
            self.line += 1
        self.pos += 1
        if self.pos >= len(self.text):
            self.current_char = None
        else:
            self.current_char = self.text[self.pos]

    def peek(self):
        nxt = self.pos + 1
        if nxt >= len(self.text):
            return None
        return self.text[nxt]

    def error(self, line, message):
        # Lexical errors never stop the scan; without a reporter they are dropped.
        if self.reporter is not None:
            self.reporter.error(line, message)

    def make_token(self, token_type, value=None, line=None):
        lexeme = self.text[self.start:self.pos]
        return Token(token_type, lexeme, value, self.line if line is None else line)

    def skip_whitespace(self):
        while self.current_char and self.current_char in " \t\r\n":
            self.advance()

    def skip_comment(self):
        while self.current_char and self.current_char != "\n":
            self.advance()

    def read_identifier(self):
        while is_alnum(self.current_char):
            self.advance()
        text = self.text[self.start:self.pos]
        kind = KEYWORDS.get(text)
        if kind is None:
            return self.make_token("IDENT")
        return self.make_token(kind, KEYWORD_VALUES.get(kind))

    def read_number(self):
        while is_digit(self.current_char):
            self.advance()

        # a fractional part needs at least one digit after the dot
        if self.current_char == "." and is_digit(self.peek()):
            self.advance()
            while is_digit(self.current_char):
                self.advance()

        return self.make_token("NUMBER", float(self.text[self.start:self.pos]))

    def read_string(self):
        start_line = self.line
        self.advance()  # opening quote

        while self.current_char is not None and self.current_char != '"':
            self.advance()

        if self.current_char is None:
            self.error(start_line, "Unterminated string.")
            return None

        self.advance()  # closing quote
        value = self.text[self.start + 1:self.pos - 1]
        return self.make_token("STRING", value, line=start_line)

    def get_next_token(self):
        while self.current_char:
            if self.current_char in " \t\r\n":
                self.skip_whitespace()
                continue

            self.start = self.pos
            ch = self.current_char

            if ch == "/" and self.peek() == "/":
                self.skip_comment()
                continue

            if is_alpha(ch):
                return self.read_identifier()

            if is_digit(ch):
                return self.read_number()

            if ch == '"':
                token = self.read_string()
                if token is None:
                    continue
                return token

            if ch in ONE_OR_TWO:
                alone, with_equal = ONE_OR_TWO[ch]
                self.advance()
                if self.current_char == "=":
                    self.advance()
                    return self.make_token(with_equal)
                return self.make_token(alone)

            if ch in SINGLE_CHAR:
                self.advance()
                return self.make_token(SINGLE_CHAR[ch])

            if ch == "/":
                self.advance()
                return self.make_token("SLASH")

            self.error(self.line, "Unexpected character.")
            self.advance()

        self.start = self.pos
        return Token("EOF", "", None, self.line)

    def tokenize(self):
        tokens = []
        while True:
            token = self.get_next_token()
            tokens.append(token)
            if token.type == "EOF":
                return tokens
