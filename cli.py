import io
import logging
import sys
import traceback

from colorama import just_fix_windows_console

from ast_nodes import Print
from errors import Reporter
from interpreter import Interpreter, run
from lexer import Lexer, Token
from parser import Parser

# sysexits codes, as the reference jlox driver uses them
EX_USAGE = 64
EX_DATAERR = 65
EX_NOINPUT = 66
EX_SOFTWARE = 70

# one Lox call costs a dozen or so Python frames
RECURSION_LIMIT = 10000

USAGE = """Usage:
  python cli.py [script]
  python cli.py run <file.lox>
  python cli.py parse <file.lox>
  python cli.py tokens <file.lox>
  python cli.py repl
  (optional) --debug to log and show Python tracebacks
  (optional) --no-color to disable colored diagnostics"""


# AST printer (so you can SEE what the parser built)
def ast_to_dict(node):
    if node is None:
        return None
    if isinstance(node, Token):
        return node.lexeme
    if isinstance(node, list):
        return [ast_to_dict(n) for n in node]

    t = node.__class__.__name__
    d = {"type": t}

    if t == "Literal":
        d["value"] = node.value
    elif t == "Grouping":
        d["expression"] = ast_to_dict(node.expression)
    elif t == "Unary":
        d["op"] = node.operator.lexeme
        d["right"] = ast_to_dict(node.right)
    elif t in ("Binary", "Logical"):
        d["op"] = node.operator.lexeme
        d["left"] = ast_to_dict(node.left)
        d["right"] = ast_to_dict(node.right)
    elif t == "Variable":
        d["name"] = node.name.lexeme
    elif t == "Assign":
        d["name"] = node.name.lexeme
        d["value"] = ast_to_dict(node.value)
    elif t == "Call":
        d["callee"] = ast_to_dict(node.callee)
        d["args"] = ast_to_dict(node.arguments)
    elif t == "Get":
        d["object"] = ast_to_dict(node.object)
        d["name"] = node.name.lexeme
    elif t == "Set":
        d["object"] = ast_to_dict(node.object)
        d["name"] = node.name.lexeme
        d["value"] = ast_to_dict(node.value)
    elif t == "This":
        pass
    elif t == "Super":
        d["method"] = node.method.lexeme
    elif t in ("Expression", "Print"):
        d["expression"] = ast_to_dict(node.expression)
    elif t == "Var":
        d["name"] = node.name.lexeme
        d["initializer"] = ast_to_dict(node.initializer)
    elif t == "Block":
        d["statements"] = ast_to_dict(node.statements)
    elif t == "If":
        d["condition"] = ast_to_dict(node.condition)
        d["then"] = ast_to_dict(node.then_branch)
        d["else"] = ast_to_dict(node.else_branch)
    elif t == "While":
        d["condition"] = ast_to_dict(node.condition)
        d["body"] = ast_to_dict(node.body)
    elif t == "Break":
        pass
    elif t == "Function":
        d["name"] = node.name.lexeme
        d["params"] = [p.lexeme for p in node.params]
        d["body"] = ast_to_dict(node.body)
    elif t == "Return":
        d["value"] = ast_to_dict(node.value)
    elif t == "Class":
        d["name"] = node.name.lexeme
        d["superclass"] = ast_to_dict(node.superclass)
        d["methods"] = ast_to_dict(node.methods)
    else:
        d["raw"] = str(node)

    return d


def pretty(obj, indent=0):
    sp = "  " * indent
    if isinstance(obj, dict):
        lines = []
        for k, v in obj.items():
            if isinstance(v, (dict, list)) and v:
                lines.append(f"{sp}{k}:")
                lines.append(pretty(v, indent + 1))
            else:
                lines.append(f"{sp}{k}: {v}")
        return "\n".join(lines)
    if isinstance(obj, list):
        lines = []
        for item in obj:
            lines.append(f"{sp}-")
            lines.append(pretty(item, indent + 1))
        return "\n".join(lines)
    return f"{sp}{obj}"


def read_source(path):
    try:
        with open(path, "r", encoding="utf-8") as f:
            return f.read()
    except OSError as e:
        print(f"Could not read '{path}': {e.strerror}", file=sys.stderr)
        sys.exit(EX_NOINPUT)


def cmd_parse(path, color=False):
    reporter = Reporter(color=color)
    statements = Parser(Lexer(read_source(path), reporter), reporter).parse()
    print(pretty(ast_to_dict(statements)))
    if reporter.had_error:
        sys.exit(EX_DATAERR)


def cmd_tokens(path, color=False):
    reporter = Reporter(color=color)
    for token in Lexer(read_source(path), reporter).tokenize():
        print(f"  {token.line:4d}  {token.type:<10} {token.lexeme!r:<12} {token.value!r}")
    if reporter.had_error:
        sys.exit(EX_DATAERR)


def cmd_run(path, debug: bool = False, color=False):
    source = read_source(path)
    reporter = Reporter(color=color)
    interpreter = Interpreter(reporter)
    try:
        run(source, interpreter)
    except Exception as e:
        if debug:
            traceback.print_exc()
        else:
            print(f"Internal error: {e}", file=sys.stderr)
        sys.exit(EX_SOFTWARE)

    if reporter.had_error:
        sys.exit(EX_DATAERR)
    if reporter.had_runtime_error:
        sys.exit(EX_SOFTWARE)


def _count_braces_delta(line: str) -> int:
    # Minimal brace balancer for REPL multiline input.
    # Ignores braces inside "..." strings and after // comments.
    delta = 0
    in_string = False
    i = 0
    while i < len(line):
        ch = line[i]
        if ch == "/" and not in_string and line[i + 1:i + 2] == "/":
            break
        if ch == '"':
            in_string = not in_string
        elif not in_string:
            if ch == "{":
                delta += 1
            elif ch == "}":
                delta -= 1
        i += 1
    return delta


def run_repl_source(source, interpreter):
    # A bare expression (no trailing ';') is evaluated and its value echoed.
    probe = Reporter(stream=io.StringIO())
    expr = Parser(Lexer(source, probe), probe).parse_expression()
    if expr is not None and not probe.had_error:
        stmt = Print(expr)
        stmt.line = expr.line
        interpreter.interpret([stmt])
        return

    run(source, interpreter)


def cmd_repl(debug: bool = False, color=False):
    reporter = Reporter(color=color)
    interpreter = Interpreter(reporter)

    print("Lox REPL. Type :q to quit.")

    buffer_lines = []
    brace_depth = 0
    while True:
        prompt = "> " if not buffer_lines else "... "
        try:
            line = input(prompt)
        except (EOFError, KeyboardInterrupt):
            print()
            break

        stripped = line.strip()
        if not buffer_lines and stripped in (":q", ":quit", "quit", "exit"):
            break

        if not stripped and not buffer_lines:
            continue

        buffer_lines.append(line)
        brace_depth += _count_braces_delta(line)

        # Wait for block completion if braces aren't balanced yet.
        if brace_depth > 0:
            continue

        source = "\n".join(buffer_lines) + "\n"
        buffer_lines = []
        brace_depth = 0

        try:
            run_repl_source(source, interpreter)
        except Exception as e:
            if debug:
                traceback.print_exc()
            else:
                print(f"Internal error: {e}", file=sys.stderr)
        finally:
            reporter.reset()


def usage():
    print(USAGE, file=sys.stderr)
    sys.exit(EX_USAGE)


def main(argv=None):
    args = list(sys.argv[1:] if argv is None else argv)

    debug = "--debug" in args
    if debug:
        args.remove("--debug")
        logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")

    color = sys.stderr.isatty()
    if "--no-color" in args:
        args.remove("--no-color")
        color = False

    just_fix_windows_console()
    sys.setrecursionlimit(max(sys.getrecursionlimit(), RECURSION_LIMIT))

    if not args:
        cmd_repl(debug=debug, color=color)
        return

    cmd = args[0]

    if cmd == "repl":
        if len(args) != 1:
            usage()
        cmd_repl(debug=debug, color=color)
        return

    if cmd in ("run", "parse", "tokens"):
        if len(args) != 2:
            usage()
        path = args[1]
        if cmd == "run":
            cmd_run(path, debug=debug, color=color)
        elif cmd == "parse":
            cmd_parse(path, color=color)
        else:
            cmd_tokens(path, color=color)
        return

    # plain `cli.py script.lox`, like jlox
    if len(args) == 1 and not cmd.startswith("-"):
        cmd_run(cmd, debug=debug, color=color)
        return

    usage()


if __name__ == "__main__":
    main()
