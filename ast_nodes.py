class ASTNode:
    # Optional source line (1-based). Parser sets this.
    line: int | None = None

    def __eq__(self, other):
        # structural: same node class, same children (tokens compare by value)
        return type(self) is type(other) and self.__dict__ == other.__dict__

    def __repr__(self):
        fields = ", ".join(f"{k}={v!r}" for k, v in self.__dict__.items() if k != "line")
        return f"{self.__class__.__name__}({fields})"


class Expr(ASTNode):
    pass


class Stmt(ASTNode):
    pass


# ---------- expressions ----------

class Literal(Expr):
    def __init__(self, value):
        self.value = value  # None, bool, float or str


class Grouping(Expr):
    def __init__(self, expression):
        self.expression = expression


class Unary(Expr):
    def __init__(self, operator, right):
        self.operator = operator  # Token: BANG or MINUS
        self.right = right


class Binary(Expr):
    def __init__(self, left, operator, right):
        self.left = left
        self.operator = operator
        self.right = right


class Logical(Expr):
    def __init__(self, left, operator, right):
        self.left = left
        self.operator = operator  # Token: AND or OR
        self.right = right


class Variable(Expr):
    def __init__(self, name):
        self.name = name


class Assign(Expr):
    def __init__(self, name, value):
        self.name = name
        self.value = value


class Call(Expr):
    def __init__(self, callee, paren, arguments):
        self.callee = callee
        self.paren = paren          # closing ')' token, used for error lines
        self.arguments = arguments  # list[Expr]


class Get(Expr):
    def __init__(self, object, name):
        self.object = object
        self.name = name


class Set(Expr):
    def __init__(self, object, name, value):
        self.object = object
        self.name = name
        self.value = value


class This(Expr):
    def __init__(self, keyword):
        self.keyword = keyword


class Super(Expr):
    def __init__(self, keyword, method):
        self.keyword = keyword
        self.method = method


# ---------- statements ----------

class Expression(Stmt):
    def __init__(self, expression):
        self.expression = expression


class Print(Stmt):
    def __init__(self, expression):
        self.expression = expression


class Var(Stmt):
    def __init__(self, name, initializer=None):
        self.name = name
        self.initializer = initializer  # Expr | None


class Block(Stmt):
    def __init__(self, statements):
        self.statements = statements


class If(Stmt):
    def __init__(self, condition, then_branch, else_branch=None):
        self.condition = condition
        self.then_branch = then_branch
        self.else_branch = else_branch


class While(Stmt):
    def __init__(self, condition, body):
        self.condition = condition
        self.body = body


class Break(Stmt):
    def __init__(self, keyword):
        self.keyword = keyword


class Function(Stmt):
    def __init__(self, name, params, body):
        self.name = name
        self.params = params  # list[Token]
        self.body = body      # list[Stmt]


class Return(Stmt):
    def __init__(self, keyword, value=None):
        self.keyword = keyword
        self.value = value


class Class(Stmt):
    def __init__(self, name, superclass, methods):
        self.name = name
        self.superclass = superclass  # Variable | None
        self.methods = methods        # list[Function]
