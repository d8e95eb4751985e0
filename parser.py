import logging

from ast_nodes import (
    Literal, Grouping, Unary, Binary, Logical, Variable, Assign, Call, Get, Set, This, Super,
    Expression, Print, Var, Block, If, While, Break, Function, Return, Class,
)
from errors import ParseError

logger = logging.getLogger("lox.parser")
logger.addHandler(logging.NullHandler())


MAX_ARGS = 255

# tokens that can start a declaration; synchronize() stops in front of them
STATEMENT_STARTS = ("CLASS", "FUN", "VAR", "FOR", "IF", "WHILE", "PRINT", "RETURN", "BREAK")


class Parser:
    def __init__(self, lexer, reporter=None):
        self.lexer = lexer
        self.reporter = reporter
        self.previous_token = None
        self.current_token = self.lexer.get_next_token()
        self.had_error = False

        # context for the checks a resolver pass would otherwise do
        self.function_type = None  # None | "function" | "method" | "initializer"
        self.class_type = None     # None | "class" | "subclass"
        self.loop_depth = 0

    # ---------- TOKEN HELPERS ----------
    def advance(self):
        self.previous_token = self.current_token
        if self.current_token.type != "EOF":
            self.current_token = self.lexer.get_next_token()
        return self.previous_token

    def check(self, token_type):
        return self.current_token.type == token_type

    def match(self, *token_types):
        if self.current_token.type in token_types:
            self.advance()
            return True
        return False

    # move to next token, but only if it matches what we expect
    def eat(self, token_type, message):
        if self.check(token_type):
            return self.advance()
        raise self.error(self.current_token, message)

    def error(self, token, message):
        """Report a syntax error at token and return (not raise) a ParseError.

        Callers raise the result when the grammar cannot continue; checks that
        leave the parser in a sane state just report and carry on.
        """
        self.had_error = True
        if self.reporter is not None:
            self.reporter.token_error(token, message)
        return ParseError(message)

    def mark(self, node, token):
        node.line = token.line
        return node

    def synchronize(self):
        self.advance()
        while self.current_token.type != "EOF":
            if self.previous_token.type == "SEMICOLON":
                return
            if self.current_token.type in STATEMENT_STARTS:
                return
            self.advance()

    # ---------- TOP LEVEL ----------
    def parse(self):
        statements = []
        while self.current_token.type != "EOF":
            stmt = self.declaration()
            if stmt is not None:
                statements.append(stmt)
        logger.debug("parsed %d top-level statements (errors: %s)", len(statements), self.had_error)
        return statements

    def parse_expression(self):
        # REPL helper: a lone expression followed by end of input, else None
        try:
            expr = self.expression()
        except ParseError:
            return None
        if self.had_error or self.current_token.type != "EOF":
            return None
        return expr

    # ---------- DECLARATIONS ----------
    def declaration(self):
        try:
            if self.match("CLASS"):
                return self.class_declaration()
            if self.match("FUN"):
                return self.function("function")
            if self.match("VAR"):
                return self.var_declaration()
            return self.statement()
        except ParseError:
            self.synchronize()
            return None

    def class_declaration(self):
        name = self.eat("IDENT", "Expect class name.")

        superclass = None
        if self.match("LT"):
            super_name = self.eat("IDENT", "Expect superclass name.")
            if super_name.lexeme == name.lexeme:
                self.error(super_name, "A class can't inherit from itself.")
            superclass = self.mark(Variable(super_name), super_name)

        self.eat("LBRACE", "Expect '{' before class body.")

        enclosing_class = self.class_type
        self.class_type = "subclass" if superclass is not None else "class"
        try:
            methods = []
            while not self.check("RBRACE") and not self.check("EOF"):
                methods.append(self.function("method"))
        finally:
            self.class_type = enclosing_class

        self.eat("RBRACE", "Expect '}' after class body.")
        return self.mark(Class(name, superclass, methods), name)

    def function(self, kind):
        name = self.eat("IDENT", f"Expect {kind} name.")
        self.eat("LPAREN", f"Expect '(' after {kind} name.")

        params = []
        if not self.check("RPAREN"):
            while True:
                if len(params) >= MAX_ARGS:
                    self.error(self.current_token, f"Can't have more than {MAX_ARGS} parameters.")
                params.append(self.eat("IDENT", "Expect parameter name."))
                if not self.match("COMMA"):
                    break
        self.eat("RPAREN", "Expect ')' after parameters.")
        self.eat("LBRACE", f"Expect '{{' before {kind} body.")

        if kind == "method":
            function_type = "initializer" if name.lexeme == "init" else "method"
        else:
            function_type = "function"

        enclosing_function, enclosing_loops = self.function_type, self.loop_depth
        self.function_type = function_type
        self.loop_depth = 0
        try:
            body = self.block()
        finally:
            self.function_type = enclosing_function
            self.loop_depth = enclosing_loops

        return self.mark(Function(name, params, body), name)

    def var_declaration(self):
        name = self.eat("IDENT", "Expect variable name.")
        initializer = None
        if self.match("EQUAL"):
            initializer = self.expression()
        self.eat("SEMICOLON", "Expect ';' after variable declaration.")
        return self.mark(Var(name, initializer), name)

    # ---------- STATEMENTS ----------
    def statement(self):
        if self.match("FOR"):
            return self.for_statement()
        if self.match("IF"):
            return self.if_statement()
        if self.match("PRINT"):
            return self.print_statement()
        if self.match("RETURN"):
            return self.return_statement()
        if self.match("WHILE"):
            return self.while_statement()
        if self.match("BREAK"):
            return self.break_statement()
        if self.match("LBRACE"):
            tok = self.previous_token
            return self.mark(Block(self.block()), tok)
        return self.expression_statement()

    def for_statement(self):
        # for (init; cond; incr) body  ==>  { init; while (cond) { body; incr; } }
        tok = self.previous_token
        self.eat("LPAREN", "Expect '(' after 'for'.")

        if self.match("SEMICOLON"):
            initializer = None
        elif self.match("VAR"):
            initializer = self.var_declaration()
        else:
            initializer = self.expression_statement()

        condition = None
        if not self.check("SEMICOLON"):
            condition = self.expression()
        self.eat("SEMICOLON", "Expect ';' after loop condition.")

        increment = None
        if not self.check("RPAREN"):
            increment = self.expression()
        self.eat("RPAREN", "Expect ')' after for clauses.")

        self.loop_depth += 1
        try:
            body = self.statement()
        finally:
            self.loop_depth -= 1

        if increment is not None:
            body = self.mark(Block([body, self.mark(Expression(increment), tok)]), tok)
        if condition is None:
            condition = self.mark(Literal(True), tok)
        body = self.mark(While(condition, body), tok)
        if initializer is not None:
            body = self.mark(Block([initializer, body]), tok)
        return body

    def if_statement(self):
        # else binds to the nearest if: the inner call consumes it first
        tok = self.previous_token
        self.eat("LPAREN", "Expect '(' after 'if'.")
        condition = self.expression()
        self.eat("RPAREN", "Expect ')' after if condition.")

        then_branch = self.statement()
        else_branch = None
        if self.match("ELSE"):
            else_branch = self.statement()
        return self.mark(If(condition, then_branch, else_branch), tok)

    def print_statement(self):
        tok = self.previous_token
        value = self.expression()
        self.eat("SEMICOLON", "Expect ';' after value.")
        return self.mark(Print(value), tok)

    def return_statement(self):
        keyword = self.previous_token
        if self.function_type is None:
            self.error(keyword, "Can't return from top-level code.")

        value = None
        if not self.check("SEMICOLON"):
            if self.function_type == "initializer":
                self.error(keyword, "Can't return a value from an initializer.")
            value = self.expression()
        self.eat("SEMICOLON", "Expect ';' after return value.")
        return self.mark(Return(keyword, value), keyword)

    def while_statement(self):
        tok = self.previous_token
        self.eat("LPAREN", "Expect '(' after 'while'.")
        condition = self.expression()
        self.eat("RPAREN", "Expect ')' after condition.")

        self.loop_depth += 1
        try:
            body = self.statement()
        finally:
            self.loop_depth -= 1
        return self.mark(While(condition, body), tok)

    def break_statement(self):
        keyword = self.previous_token
        if self.loop_depth == 0:
            self.error(keyword, "Can't use 'break' outside of a loop.")
        self.eat("SEMICOLON", "Expect ';' after 'break'.")
        return self.mark(Break(keyword), keyword)

    def block(self):
        statements = []
        while not self.check("RBRACE") and not self.check("EOF"):
            stmt = self.declaration()
            if stmt is not None:
                statements.append(stmt)
        self.eat("RBRACE", "Expect '}' after block.")
        return statements

    def expression_statement(self):
        tok = self.current_token
        expr = self.expression()
        self.eat("SEMICOLON", "Expect ';' after expression.")
        return self.mark(Expression(expr), tok)

    # ---------- EXPRESSIONS ----------
    # expression -> assignment
    def expression(self):
        return self.assignment()

    # assignment -> (call ".")? IDENT "=" assignment | or_expr
    def assignment(self):
        expr = self.or_expr()

        if self.match("EQUAL"):
            equals = self.previous_token
            value = self.assignment()

            if isinstance(expr, Variable):
                return self.mark(Assign(expr.name, value), equals)
            if isinstance(expr, Get):
                return self.mark(Set(expr.object, expr.name, value), equals)

            # the left side already parsed fine, so no need to synchronize
            self.error(equals, "Invalid assignment target.")

        return expr

    # or_expr -> and_expr (OR and_expr)*
    def or_expr(self):
        expr = self.and_expr()
        while self.match("OR"):
            operator = self.previous_token
            right = self.and_expr()
            expr = self.mark(Logical(expr, operator, right), operator)
        return expr

    # and_expr -> equality (AND equality)*
    def and_expr(self):
        expr = self.equality()
        while self.match("AND"):
            operator = self.previous_token
            right = self.equality()
            expr = self.mark(Logical(expr, operator, right), operator)
        return expr

    # equality -> comparison ((!=|==) comparison)*
    def equality(self):
        return self.binary_level(self.comparison, "NOTEQ", "EQEQ")

    # comparison -> term ((>|>=|<|<=) term)*
    def comparison(self):
        return self.binary_level(self.term, "GT", "GTE", "LT", "LTE")

    # term -> factor ((-|+) factor)*
    def term(self):
        return self.binary_level(self.factor, "MINUS", "PLUS")

    # factor -> unary ((/|*) unary)*
    def factor(self):
        return self.binary_level(self.unary, "SLASH", "STAR")

    def binary_level(self, operand, *operators):
        # one left-associative precedence level
        expr = operand()
        while self.match(*operators):
            operator = self.previous_token
            right = operand()
            expr = self.mark(Binary(expr, operator, right), operator)
        return expr

    # unary -> (! | -) unary | call
    def unary(self):
        if self.match("BANG", "MINUS"):
            operator = self.previous_token
            right = self.unary()
            return self.mark(Unary(operator, right), operator)
        return self.call()

    # call -> primary ( "(" arguments? ")" | "." IDENT )*
    def call(self):
        expr = self.primary()
        while True:
            if self.match("LPAREN"):
                expr = self.finish_call(expr)
            elif self.match("DOT"):
                name = self.eat("IDENT", "Expect property name after '.'.")
                expr = self.mark(Get(expr, name), name)
            else:
                return expr

    def finish_call(self, callee):
        arguments = []
        if not self.check("RPAREN"):
            while True:
                if len(arguments) >= MAX_ARGS:
                    self.error(self.current_token, f"Can't have more than {MAX_ARGS} arguments.")
                arguments.append(self.expression())
                if not self.match("COMMA"):
                    break
        paren = self.eat("RPAREN", "Expect ')' after arguments.")
        return self.mark(Call(callee, paren, arguments), paren)

    # primary -> literal | IDENT | this | super "." IDENT | "(" expression ")"
    def primary(self):
        tok = self.current_token

        if self.match("FALSE", "TRUE", "NIL", "NUMBER", "STRING"):
            return self.mark(Literal(tok.value), tok)

        if self.match("SUPER"):
            if self.class_type is None:
                self.error(tok, "Can't use 'super' outside of a class.")
            elif self.class_type != "subclass":
                self.error(tok, "Can't use 'super' in a class with no superclass.")
            self.eat("DOT", "Expect '.' after 'super'.")
            method = self.eat("IDENT", "Expect superclass method name.")
            return self.mark(Super(tok, method), tok)

        if self.match("THIS"):
            if self.class_type is None:
                self.error(tok, "Can't use 'this' outside of a class.")
            return self.mark(This(tok), tok)

        if self.match("IDENT"):
            return self.mark(Variable(tok), tok)

        if self.match("LPAREN"):
            expr = self.expression()
            self.eat("RPAREN", "Expect ')' after expression.")
            return self.mark(Grouping(expr), tok)

        raise self.error(tok, "Expect expression.")
