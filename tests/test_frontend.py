"""Lexer, parser and scope checker tests."""

from tinyc import (
    Assign,
    Diagnostic,
    Input,
    Lexer,
    Num,
    Plus,
    Print,
    Program,
    Var,
    check,
    parse,
    tokenize,
)


class TestLexer:
    def test_token_types_and_lines(self):
        lexed = tokenize("x = input; // read\nprint (x + 1);\n")
        assert lexed.ok
        types = [t.type for t in lexed.value]
        assert types == [
            'ID', 'ASSIGN', 'INPUT', 'END',
            'PRINT', 'LPAREN', 'ID', 'PLUS', 'NUMBER', 'RPAREN', 'END',
        ]
        assert lexed.value[4].lineno == 2

    def test_keywords_are_case_sensitive(self):
        lexed = tokenize("Print = 1;")
        assert lexed.value[0].type == 'ID'

    def test_unexpected_character(self):
        lexer = Lexer("x = 3 $ 4;")
        assert lexer.errors == [Diagnostic("Lexical", "Unexpected character '$'", 1)]
        assert not tokenize("x = 3 $ 4;").ok


class TestParser:
    def test_statements(self):
        parsed = parse("a = input;\nb = a + 2;\nprint b;")
        assert parsed.ok
        assert parsed.value == Program((
            Assign("a", Input()),
            Assign("b", Plus(Var("a"), Num(2))),
            Print(Var("b")),
        ))

    def test_addition_is_left_associative(self):
        parsed = parse("print 1 + 2 + 3;")
        assert parsed.value.stmts[0] == Print(Plus(Plus(Num(1), Num(2)), Num(3)))

    def test_parentheses_group(self):
        parsed = parse("print 1 + (2 + 3);")
        assert parsed.value.stmts[0] == Print(Plus(Num(1), Plus(Num(2), Num(3))))

    def test_negative_literal(self):
        assert parse("x = -5;").value == Program((Assign("x", Num(-5)),))

    def test_empty_program(self):
        assert parse("// nothing here\n").value == Program(())

    def test_missing_semicolon(self):
        parsed = parse("x = 1")
        assert not parsed.ok
        assert parsed.error.kind == "Syntax"
        assert "missing semicolon after assignment" in parsed.error.message
        assert "end of input" in parsed.error.message

    def test_missing_paren_reports_line(self):
        parsed = parse("x = 1;\nprint (x + 1;")
        assert parsed.error.kind == "Syntax"
        assert parsed.error.lineno == 2
        assert "missing closing parenthesis" in parsed.error.message

    def test_statement_must_start_with_name_or_print(self):
        parsed = parse("5 = x;")
        assert parsed.error.kind == "Syntax"
        assert "start of statement" in parsed.error.message

    def test_literal_out_of_32_bit_range(self):
        assert parse("x = 2147483647;").ok
        assert parse("x = -2147483648;").ok
        parsed = parse("x = 2147483648;")
        assert parsed.error.kind == "Syntax"
        assert "out of range" in parsed.error.message

    def test_lexical_error_passes_through(self):
        assert parse("x = #;").error.kind == "Lexical"


class TestScopeCheck:
    def test_defined_names(self):
        checked = check(parse("x = 1; y = x + x; print y;").value)
        assert checked.ok
        assert checked.value == {"x", "y"}

    def test_use_before_definition(self):
        checked = check(parse("print y;").value)
        assert not checked.ok
        assert checked.error == Diagnostic("Scope", "Variable y used before definition.")

    def test_self_reference_on_first_assignment(self):
        checked = check(parse("x = x + 1;").value)
        assert checked.error.kind == "Scope"

    def test_reports_first_undefined_name(self):
        checked = check(parse("a = 1; print b + c;").value)
        assert "Variable b " in checked.error.message

    def test_diagnostic_rendering(self):
        assert str(Diagnostic("Syntax", "boom", 3)) == "Syntax error (line 3): boom"
        assert str(Diagnostic("Scope", "boom")) == "Scope error: boom"
