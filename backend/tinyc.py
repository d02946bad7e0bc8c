#!/usr/bin/env python3
"""
tinyc.py
Single-file compiler pipeline for the tiny calculator language
(lexer → recursive-descent parser → scope check → TAC IR → fixpoint
optimizations → x86-64 assembly → gcc link), plus a TAC executor and an
AST interpreter sharing the same front end.

The language has integers, addition, variable assignment, input and print:

    x = input;
    y = x + 4;
    print (y + 1);
"""

import argparse
import logging
import os
import re
import subprocess
import sys
import tempfile
from collections import namedtuple
from dataclasses import dataclass

log = logging.getLogger("tinyc")

# Toolchain defaults, overridable from the environment.
CC = os.environ.get("TINYC_CC", "gcc")
MAX_ITERATIONS = int(os.environ.get("TINYC_MAX_ITERATIONS", "100"))

INT32_MIN = -(1 << 31)
INT32_MAX = (1 << 31) - 1

# =====================================================
# GLOBAL HELPERS (diagnostics, outcomes, word arithmetic)
# =====================================================
class Diagnostic(namedtuple('Diagnostic', ['kind', 'message', 'lineno'], defaults=[None])):
    """A compiler error tagged with the stage that produced it."""
    __slots__ = ()

    def __str__(self):
        if self.lineno is not None:
            return f"{self.kind} error (line {self.lineno}): {self.message}"
        return f"{self.kind} error: {self.message}"


class Outcome(namedtuple('Outcome', ['value', 'error'])):
    """Result of a stage that may fail: exactly one of value/error is meaningful."""
    __slots__ = ()

    @property
    def ok(self):
        return self.error is None


def success(value):
    return Outcome(value, None)


def failure(kind, msg, lineno=None):
    return Outcome(None, Diagnostic(kind, msg, lineno))


class UndefinedVariableError(LookupError):
    def __init__(self, name):
        super().__init__(f"Variable {name} is not defined.")
        self.name = name


def wrap64(value):
    """Reduce an integer to the signed 64-bit range of a machine word."""
    value &= (1 << 64) - 1
    if value >= (1 << 63):
        value -= 1 << 64
    return value


def fits_imm32(value):
    return INT32_MIN <= value <= INT32_MAX

# =====================================================
# LEXER
# =====================================================
Token = namedtuple('Token', ['type', 'value', 'lineno'])

class Lexer:
    KEYWORDS = {'input', 'print'}
    token_specification = [
        ("COMMENT",   r'//.*'),
        ("NUMBER",    r'-?\d+'),
        ("ID",        r'[A-Za-z_]\w*'),
        ("PLUS",      r'\+'),
        ("ASSIGN",    r'='),
        ("END",       r';'),
        ("LPAREN",    r'\('),
        ("RPAREN",    r'\)'),
        ("SKIP",      r'[ \t\r]+'),
        ("NEWLINE",   r'\n'),
        ("MISMATCH",  r'.'),
    ]
    tok_regex = '|'.join(f'(?P<{n}>{p})' for n, p in token_specification)
    master_re = re.compile(tok_regex)

    def __init__(self, code):
        self.code = code
        self.lineno = 1
        self.tokens = []
        self.errors = []
        self._tokenize()

    def _tokenize(self):
        for mo in self.master_re.finditer(self.code):
            kind = mo.lastgroup
            val = mo.group()
            if kind == "NEWLINE":
                self.lineno += 1
            elif kind == "SKIP" or kind == "COMMENT":
                pass
            elif kind == "MISMATCH":
                self.errors.append(Diagnostic("Lexical", f"Unexpected character {val!r}", self.lineno))
            elif kind == "ID" and val in Lexer.KEYWORDS:
                self.tokens.append(Token(val.upper(), val, self.lineno))
            else:
                self.tokens.append(Token(kind, val, self.lineno))


def tokenize(source):
    lexer = Lexer(source)
    if lexer.errors:
        return Outcome(None, lexer.errors[0])
    return success(lexer.tokens)

# =====================================================
# AST NODES
# =====================================================
class Stmt:
    pass


class Expr:
    pass


@dataclass(frozen=True)
class Program:
    stmts: tuple


@dataclass(frozen=True)
class Assign(Stmt):
    dest: str
    src: Expr


@dataclass(frozen=True)
class Print(Stmt):
    src: Expr


@dataclass(frozen=True)
class Input(Expr):
    pass


@dataclass(frozen=True)
class Num(Expr):
    value: int


@dataclass(frozen=True)
class Plus(Expr):
    left: Expr
    right: Expr


@dataclass(frozen=True)
class Var(Expr):
    id: str

# =====================================================
# PARSER (recursive-descent, LL(1) style)
# =====================================================
class ParseError(Exception):
    def __init__(self, message, lineno=None):
        super().__init__(message)
        self.lineno = lineno


def _describe(tok):
    if tok.type == 'EOF':
        return "end of input"
    return repr(tok.value)


class Parser:
    def __init__(self, tokens):
        self.tokens = tokens
        self.pos = 0

    def peek(self):
        if self.pos < len(self.tokens):
            return self.tokens[self.pos]
        lineno = self.tokens[-1].lineno if self.tokens else None
        return Token('EOF', '', lineno)

    def advance(self):
        tok = self.peek()
        self.pos += 1
        return tok

    def expect(self, ttype, msg):
        tok = self.peek()
        if tok.type == ttype:
            return self.advance()
        raise ParseError(f"{msg}, got {_describe(tok)}", tok.lineno)

    def parse(self):
        stmts = []
        while self.peek().type != 'EOF':
            stmts.append(self.statement())
        return Program(tuple(stmts))

    def statement(self):
        tok = self.peek()
        if tok.type == 'PRINT':
            return self.print_statement()
        if tok.type == 'ID':
            return self.assignment()
        raise ParseError(f"unexpected {_describe(tok)} at start of statement", tok.lineno)

    def print_statement(self):
        self.advance()  # PRINT
        expr = self.expression()
        self.expect('END', "missing semicolon after print")
        return Print(expr)

    def assignment(self):
        idtok = self.advance()
        self.expect('ASSIGN', "expected '=' for assignment")
        expr = self.expression()
        self.expect('END', "missing semicolon after assignment")
        return Assign(idtok.value, expr)

    # Addition is the only operator; it associates to the left.
    def expression(self):
        node = self.primary()
        while self.peek().type == 'PLUS':
            self.advance()
            node = Plus(node, self.primary())
        return node

    def primary(self):
        tok = self.peek()
        if tok.type == 'NUMBER':
            self.advance()
            value = int(tok.value)
            if not fits_imm32(value):
                raise ParseError(f"integer literal {tok.value} out of range", tok.lineno)
            return Num(value)
        if tok.type == 'INPUT':
            self.advance()
            return Input()
        if tok.type == 'ID':
            self.advance()
            return Var(tok.value)
        if tok.type == 'LPAREN':
            self.advance()
            node = self.expression()
            self.expect('RPAREN', "missing closing parenthesis")
            return node
        raise ParseError(f"unexpected {_describe(tok)} in expression", tok.lineno)


def parse_tokens(tokens):
    try:
        return success(Parser(tokens).parse())
    except ParseError as e:
        return failure("Syntax", str(e), e.lineno)


def parse(source):
    lexed = tokenize(source)
    if not lexed.ok:
        return lexed
    return parse_tokens(lexed.value)

# =====================================================
# SCOPE CHECKER
# =====================================================
def undefined_names(expr, defined):
    """Yield, left to right, the variables used in expr that are not in defined."""
    if isinstance(expr, (Input, Num)):
        return
    if isinstance(expr, Plus):
        yield from undefined_names(expr.left, defined)
        yield from undefined_names(expr.right, defined)
    elif isinstance(expr, Var):
        if expr.id not in defined:
            yield expr.id
    else:
        raise TypeError(f"unknown expression node {expr!r}")


def check(program):
    """Check that every variable use follows an assignment to it.

    Returns the set of assigned names on success.
    """
    defined = frozenset()
    for stmt in program.stmts:
        missing = next(undefined_names(stmt.src, defined), None)
        if missing is not None:
            return failure("Scope", f"Variable {missing} used before definition.")
        if isinstance(stmt, Assign):
            defined = defined | {stmt.dest}
    return success(defined)

# =====================================================
# IR (THREE-ADDRESS CODE)
# =====================================================
@dataclass(frozen=True)
class Cell:
    """An abstract storage location; ids are unique within one compilation."""
    id: int

    def __str__(self):
        return f"x{self.id}"


@dataclass(frozen=True)
class Literal:
    value: int

    def __str__(self):
        return str(self.value)


class Instruction:
    """Base of the four TAC instructions.

    `dest` is the cell an instruction defines (None for print) and `sources`
    the operands it reads.
    """

    @property
    def dest(self):
        return None

    @property
    def sources(self):
        return ()

    @property
    def operands(self):
        if self.dest is None:
            return self.sources
        return (self.dest,) + self.sources


@dataclass(frozen=True)
class AddInst(Instruction):
    dst: Cell
    src1: object
    src2: object

    @property
    def dest(self):
        return self.dst

    @property
    def sources(self):
        return (self.src1, self.src2)

    def __str__(self):
        return f"{self.dst} := {self.src1} + {self.src2}"


@dataclass(frozen=True)
class CopyInst(Instruction):
    dst: Cell
    src: object

    @property
    def dest(self):
        return self.dst

    @property
    def sources(self):
        return (self.src,)

    def __str__(self):
        return f"{self.dst} := {self.src}"


@dataclass(frozen=True)
class InputInst(Instruction):
    dst: Cell

    @property
    def dest(self):
        return self.dst

    def __str__(self):
        return f"{self.dst} := input"


@dataclass(frozen=True)
class PrintInst(Instruction):
    src: object

    @property
    def sources(self):
        return (self.src,)

    def __str__(self):
        return f"print {self.src}"


def cell_ids(operands):
    return [op.id for op in operands if isinstance(op, Cell)]

# =====================================================
# IR GENERATION
# =====================================================
class IRGenerator:
    """Translates a checked AST to TAC by post-order traversal.

    One generator serves one compilation: it owns the symbol table (variable
    name to the cell holding its value) and the fresh-cell counter.
    """

    def __init__(self):
        self.symtab = {}
        self.last_id = 0

    def fresh(self):
        self.last_id += 1
        return Cell(self.last_id)

    def translate_expr(self, expr):
        # The last instruction of an expression's code defines its result.
        if isinstance(expr, Input):
            return [InputInst(self.fresh())]
        if isinstance(expr, Num):
            return [CopyInst(self.fresh(), Literal(expr.value))]
        if isinstance(expr, Plus):
            left = self.translate_expr(expr.left)
            right = self.translate_expr(expr.right)
            return left + right + [AddInst(self.fresh(), left[-1].dest, right[-1].dest)]
        if isinstance(expr, Var):
            cell = self.symtab.get(expr.id)
            if cell is None:
                raise UndefinedVariableError(expr.id)
            return [CopyInst(self.fresh(), cell)]
        raise TypeError(f"unknown expression node {expr!r}")

    def translate_stmt(self, stmt):
        code = self.translate_expr(stmt.src)
        if isinstance(stmt, Print):
            return code + [PrintInst(code[-1].dest)]
        if isinstance(stmt, Assign):
            dest = self.symtab.get(stmt.dest)
            if dest is None:
                dest = self.fresh()
                self.symtab[stmt.dest] = dest
            return code + [CopyInst(dest, code[-1].dest)]
        raise TypeError(f"unknown statement node {stmt!r}")

    def translate_program(self, program):
        tac = []
        for stmt in program.stmts:
            tac.extend(self.translate_stmt(stmt))
        return tac


def translate(program):
    return IRGenerator().translate_program(program)

# =====================================================
# OPTIMIZER: Copy Propagation + Constant Folding + Dead Code Elimination
# =====================================================
def constant_fold(tac):
    """Replace additions of two literals by a copy of their sum."""
    folded = []
    for instr in tac:
        if (isinstance(instr, AddInst)
                and isinstance(instr.src1, Literal)
                and isinstance(instr.src2, Literal)):
            total = wrap64(instr.src1.value + instr.src2.value)
            folded.append(CopyInst(instr.dst, Literal(total)))
            continue
        folded.append(instr)
    return folded


def copy_propagate(tac):
    """Use the original source of a value instead of its copies.

    Scanning in order, `status` maps each defined cell id to the operand that
    currently holds its value: the copied operand for copies, the cell itself
    for anything else.
    """
    status = {}
    # canonical cell id -> ids whose status is that cell
    aliases = {}

    def get(operand):
        if isinstance(operand, Literal):
            return operand
        return status.get(operand.id, operand)

    def define(cell, operand):
        old = status.get(cell.id)
        if isinstance(old, Cell):
            aliases.get(old.id, set()).discard(cell.id)
        # Cells whose value was recorded as `cell` still hold the old value.
        for cid in aliases.pop(cell.id, set()):
            status[cid] = Cell(cid)
            aliases.setdefault(cid, set()).add(cid)
        status[cell.id] = operand
        if isinstance(operand, Cell):
            aliases.setdefault(operand.id, set()).add(cell.id)

    result = []
    for instr in tac:
        if isinstance(instr, InputInst):
            define(instr.dst, instr.dst)
            result.append(instr)
        elif isinstance(instr, CopyInst):
            src = get(instr.src)
            define(instr.dst, src)
            result.append(CopyInst(instr.dst, src))
        elif isinstance(instr, AddInst):
            src1, src2 = get(instr.src1), get(instr.src2)
            define(instr.dst, instr.dst)
            result.append(AddInst(instr.dst, src1, src2))
        elif isinstance(instr, PrintInst):
            result.append(PrintInst(get(instr.src)))
        else:
            raise TypeError(f"unknown instruction {instr!r}")
    return result


def dead_code_elimination(tac):
    """Drop instructions whose results never reach an output.

    Prints and inputs are always kept: reading input consumes a token from
    the input stream and shows a prompt.
    """
    used = set()
    result = []
    for instr in reversed(tac):
        dest = instr.dest
        if dest is None or isinstance(instr, InputInst) or dest.id in used:
            used.update(cell_ids(instr.sources))
            result.append(instr)
    result.reverse()
    return result


PIPELINE = [
    ("Copy Prop", copy_propagate),
    ("Constant Fold", constant_fold),
    ("Dead Code", dead_code_elimination),
]


def log_pass(name, tac):
    if log.isEnabledFor(logging.DEBUG):
        log.debug("---- %s ----", name)
        for instr in tac:
            log.debug("  %s", instr)


def pipeline(passes, observer=None):
    """Compose named passes left to right into one function."""
    def run(tac):
        for name, transform in passes:
            tac = transform(tac)
            if observer is not None:
                observer(name, tac)
        return tac
    return run


def fixpoint(value, f, max_iterations=MAX_ITERATIONS):
    """Apply f to its own result until the result stops changing."""
    for _ in range(max_iterations):
        result = f(value)
        if result == value:
            return result
        value = result
    log.warning("no fixpoint after %d iterations, keeping last result", max_iterations)
    return value


def optimize(tac, passes=None, observer=log_pass, max_iterations=MAX_ITERATIONS):
    if passes is None:
        passes = PIPELINE
    return fixpoint(list(tac), pipeline(passes, observer), max_iterations)

# =====================================================
# CODE GENERATION (x86-64, AT&T syntax)
# =====================================================
Target = namedtuple('Target', ['word', 'stack_align', 'label_prefix'])

RUNTIME_INPUT = "tiny_input"
RUNTIME_PRINT = "tiny_print"


def default_target():
    # Mach-O prefixes C symbols with an underscore.
    prefix = "_" if sys.platform == "darwin" else ""
    return Target(word=8, stack_align=16, label_prefix=prefix)


def max_cell(tac):
    """Highest cell id in the code; one stack slot is reserved per id up to it."""
    return max((cid for instr in tac for cid in cell_ids(instr.operands)), default=0)


def frame_size(tac, target=None):
    """Bytes for all cell slots plus saved %rbp and return address, aligned."""
    target = target or default_target()
    raw = (max_cell(tac) + 2) * target.word
    align = target.stack_align
    return (raw + align - 1) // align * align


def _label(name, target):
    return target.label_prefix + name


def _operand(op, target):
    if isinstance(op, Cell):
        return f"-{target.word * op.id}(%rbp)"
    return f"${op.value}"


def _load(op, reg, target):
    if isinstance(op, Literal) and not fits_imm32(op.value):
        return f"    movabsq ${op.value},{reg}"
    return f"    movq {_operand(op, target)},{reg}"


def _emit(instr, target):
    if isinstance(instr, AddInst):
        lines = [_load(instr.src1, "%rax", target)]
        if isinstance(instr.src2, Literal) and not fits_imm32(instr.src2.value):
            lines += [_load(instr.src2, "%rcx", target), "    addq %rcx,%rax"]
        else:
            lines.append(f"    addq {_operand(instr.src2, target)},%rax")
        lines.append(f"    movq %rax,{_operand(instr.dst, target)}")
        return lines
    if isinstance(instr, CopyInst):
        return [_load(instr.src, "%rax", target),
                f"    movq %rax,{_operand(instr.dst, target)}"]
    if isinstance(instr, InputInst):
        return [f"    callq {_label(RUNTIME_INPUT, target)}",
                f"    movq %rax,{_operand(instr.dst, target)}"]
    if isinstance(instr, PrintInst):
        return [_load(instr.src, "%rax", target),
                "    movq %rax,%rdi",
                f"    callq {_label(RUNTIME_PRINT, target)}"]
    raise TypeError(f"unknown instruction {instr!r}")


def generate(tac, target=None):
    """Emit a single `main` procedure with one stack slot per cell."""
    target = target or default_target()
    main = _label("main", target)
    reserve = frame_size(tac, target) - 2 * target.word
    asm = [
        f".globl {main}",
        "",
        f"{main}:",
        "  # SETUP",
        "    pushq %rbp",
        "    movq %rsp,%rbp",
        f"    subq ${reserve},%rsp",
        "",
        "  # BODY",
    ]
    for instr in tac:
        asm.append("")
        asm.append(f"  # {instr}")
        asm.extend(_emit(instr, target))
    asm += [
        "",
        "  # CLEANUP",
        "    movq $0,%rax",
        "    leaveq",
        "    retq",
    ]
    return "\n".join(asm) + "\n"

# =====================================================
# ASSEMBLY AND LINKING (external toolchain)
# =====================================================
RUNTIME_SOURCE = r'''/*
 * Runtime support for tiny calculator compiler.
 */
#include <inttypes.h>
#include <stdint.h>
#include <stdio.h>

int64_t tiny_input() {
  int64_t x = 0;
  printf("Input: ");
  fflush(stdout);
  scanf("%" SCNd64, &x);
  return x;
}

void tiny_print(int64_t x) {
  printf("Output: %" PRIi64 "\n", x);
}
'''


def _run(cmd, step):
    log.debug("%s: %s", step, " ".join(cmd))
    try:
        p = subprocess.run(cmd, stdout=subprocess.PIPE, stderr=subprocess.PIPE, text=True)
    except OSError as e:
        return failure("Link", f"failed to {step}: {e}")
    if p.returncode != 0:
        msg = p.stderr.strip() or p.stdout.strip() or "(no output)"
        return failure("Link", f"failed to {step}: {msg}")
    return success(cmd)


def assemble_and_link(asm, output_path, asm_path=None, cc=None):
    """Link generated assembly with the I/O runtime into an executable.

    The assembly is kept at asm_path when given. Returns the executable path.
    """
    cc = cc or CC
    with tempfile.TemporaryDirectory(prefix="tinyc_") as td:
        runtime_src = os.path.join(td, "runtime.c")
        runtime_obj = os.path.join(td, "runtime.o")
        asm_path = asm_path or os.path.join(td, "out.s")
        try:
            with open(runtime_src, 'w') as f:
                f.write(RUNTIME_SOURCE)
            with open(asm_path, 'w') as f:
                f.write(asm)
        except OSError as e:
            return failure("Link", f"failed to write assembly: {e}")

        built = _run([cc, "-c", "-o", runtime_obj, runtime_src], "build runtime library")
        if not built.ok:
            return built
        linked = _run([cc, "-o", output_path, asm_path, runtime_obj], "link executable")
        if not linked.ok:
            return linked
    return success(output_path)

# =====================================================
# TAC EXECUTOR / AST INTERPRETER
# =====================================================
def _as_int(value):
    # Decimal text or an int; floats and bools are not truncated.
    if isinstance(value, str):
        return int(value.strip(), 10)
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"not an integer: {value!r}")
    return value


def _reader(inputs):
    """Input source: the given values in order, or the terminal when None."""
    if inputs is None:
        return lambda: _as_int(input("Input: "))
    it = iter(inputs)
    return lambda: _as_int(next(it))


def execute_tac(tac, inputs=None):
    """Run TAC directly with 64-bit arithmetic; returns the printed values."""
    read = _reader(inputs)
    mem = {}
    outputs = []

    def get_val(op):
        if isinstance(op, Literal):
            return op.value
        return mem[op.id]

    for instr in tac:
        if isinstance(instr, AddInst):
            mem[instr.dst.id] = wrap64(get_val(instr.src1) + get_val(instr.src2))
        elif isinstance(instr, CopyInst):
            mem[instr.dst.id] = get_val(instr.src)
        elif isinstance(instr, InputInst):
            try:
                mem[instr.dst.id] = wrap64(read())
            except (StopIteration, EOFError):
                return failure("Runtime", "ran out of input")
            except ValueError as e:
                return failure("Runtime", f"bad input: {e}")
        elif isinstance(instr, PrintInst):
            outputs.append(get_val(instr.src))
        else:
            raise TypeError(f"unknown instruction {instr!r}")
    return success(outputs)


def evaluate(expr, env, read):
    if isinstance(expr, Input):
        return wrap64(read())
    if isinstance(expr, Num):
        return expr.value
    if isinstance(expr, Plus):
        return wrap64(evaluate(expr.left, env, read) + evaluate(expr.right, env, read))
    if isinstance(expr, Var):
        if expr.id not in env:
            raise UndefinedVariableError(expr.id)
        return env[expr.id]
    raise TypeError(f"unknown expression node {expr!r}")


def interpret(program, inputs=None):
    """Evaluate the AST directly, without scope checking."""
    read = _reader(inputs)
    env = {}
    outputs = []
    try:
        for stmt in program.stmts:
            if isinstance(stmt, Assign):
                env[stmt.dest] = evaluate(stmt.src, env, read)
            elif isinstance(stmt, Print):
                outputs.append(evaluate(stmt.src, env, read))
            else:
                raise TypeError(f"unknown statement node {stmt!r}")
    except UndefinedVariableError as e:
        return failure("Runtime", str(e))
    except (StopIteration, EOFError):
        return failure("Runtime", "ran out of input")
    except ValueError as e:
        return failure("Runtime", f"bad input: {e}")
    return success(outputs)

# =====================================================
# COMPILER DRIVER
# =====================================================
def compile_source(code, output_path=None, opt=True, inputs=None, observer=log_pass, asm_path=None):
    """Run the whole pipeline, stopping at the first failing stage.

    Links an executable only when output_path is given and runs the
    optimized TAC only when inputs are given.
    """
    result = {
        'tokens': [],
        'ast': None,
        'symbols': [],
        'tac': [],
        'optimized_tac': [],
        'asm': '',
        'output': [],
        'output_file': None,
        'errors': [],
    }

    lexed = tokenize(code)
    if not lexed.ok:
        result['errors'] = [lexed.error]
        return result
    result['tokens'] = lexed.value

    parsed = parse_tokens(lexed.value)
    if not parsed.ok:
        result['errors'] = [parsed.error]
        return result
    ast = parsed.value
    result['ast'] = ast

    checked = check(ast)
    if not checked.ok:
        result['errors'] = [checked.error]
        return result
    result['symbols'] = sorted(checked.value)

    tac = translate(ast)
    result['tac'] = tac

    optimized = optimize(tac, observer=observer) if opt else tac
    result['optimized_tac'] = optimized

    asm = generate(optimized)
    result['asm'] = asm

    if inputs is not None:
        executed = execute_tac(optimized, inputs)
        if not executed.ok:
            result['errors'] = [executed.error]
            return result
        result['output'] = executed.value

    if output_path:
        linked = assemble_and_link(asm, output_path, asm_path=asm_path)
        if not linked.ok:
            result['errors'] = [linked.error]
            return result
        result['output_file'] = linked.value

    return result

# =====================================================
# COMMAND LINE
# =====================================================
def _reject(err):
    print(f"Tiny {err}")
    print("================")
    print("REJECTED")
    return 1


def main(argv=None):
    ap = argparse.ArgumentParser(prog="tinyc", description="Tiny calculator language compiler")
    ap.add_argument("source", nargs="?", default="-", help="Source file ('-' reads stdin)")
    ap.add_argument("-o", dest="output", help="Executable path (default: <source>.bin)")
    ap.add_argument("-S", dest="asm_only", action="store_true", help="Stop after emitting assembly")
    ap.add_argument("--no-opt", action="store_true", help="Disable optimizations")
    ap.add_argument("--interpret", action="store_true", help="Evaluate the program instead of compiling")
    ap.add_argument("-v", "--verbose", action="store_true", help="Log each optimization pass")
    args = ap.parse_args(argv)

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING,
                        format="%(message)s")

    base = "stdin" if args.source == "-" else args.source
    try:
        if args.source == "-":
            code = sys.stdin.read()
        else:
            with open(args.source, 'r') as f:
                code = f.read()
    except OSError as e:
        print(f"Error: cannot read {args.source}: {e}")
        return 1

    if args.interpret:
        parsed = parse(code)
        if not parsed.ok:
            return _reject(parsed.error)
        ran = interpret(parsed.value)
        if not ran.ok:
            return _reject(ran.error)
        for value in ran.value:
            print(f"Output: {value}")
        return 0

    output = None if args.asm_only else (args.output or base + ".bin")
    result = compile_source(code, output_path=output, opt=not args.no_opt,
                            asm_path=base + ".s")

    if result['ast'] is not None:
        print("== AST ===========")
        print(result['ast'])
    if result['tac']:
        print("== IR ===========")
        for instr in result['tac']:
            print(f"  {instr}")
        print("== OPT ===========")
        for instr in result['optimized_tac']:
            print(f"  {instr}")
    if result['asm']:
        print("== ASM ===========")
        print(result['asm'])
    if result['errors']:
        return _reject(result['errors'][0])
    if args.asm_only:
        try:
            with open(base + ".s", 'w') as f:
                f.write(result['asm'])
        except OSError as e:
            print(f"Error: cannot write {base}.s: {e}")
            return 1
    else:
        print("== BIN ===========")
        print(result['output_file'])
    print("================")
    print("ACCEPTED")
    return 0


if __name__ == '__main__':
    raise SystemExit(main())
