import pytest

from cmpler.errors import DuplicateSymbolError, SemanticError, UndefinedVariableError
from cmpler.semantic import SemanticAnalyzer
from cmpler.syntax import Parser
from cmpler.tokens import Span, lex


def analyze(source):
    program = Parser(lex(source)).parse_program()
    SemanticAnalyzer().analyze(program)
    return program


def test_simple_function_ok():
    program = analyze("int main() { int x = 5; return x; }")
    assert len(program.decls) == 1


def test_undefined_variable():
    src = "int main() { return y; }"
    with pytest.raises(UndefinedVariableError) as info:
        analyze(src)
    assert "Undefined variable 'y'" in str(info.value)
    start = src.index("y;")
    assert info.value.span == Span(start, start + 1)


def test_duplicate_global_symbol():
    with pytest.raises(DuplicateSymbolError) as info:
        analyze("int x = 1; int x = 2;")
    assert "Duplicate symbol 'x'" in str(info.value)


def test_duplicate_local_variable():
    with pytest.raises(DuplicateSymbolError) as info:
        analyze("int main() { int x = 1; int x = 2; return 0; }")
    assert info.value.name == "x"


def test_duplicate_function():
    with pytest.raises(SemanticError) as info:
        analyze("int f() {} int f() {}")
    assert "Duplicate symbol 'f'" in str(info.value)


def test_shadowing_is_allowed():
    src = "int main() { int x = 1; { int x = 2; return x; } }"
    program = analyze(src)
    assert program.decls[0].name == "main"


def test_inner_block_variable_not_visible_outside():
    src = "int main() { { int x = 1; } return x; }"
    with pytest.raises(UndefinedVariableError) as info:
        analyze(src)
    assert info.value.name == "x"


def test_for_loop_uses_outer_variable():
    src = "int main() { int x = 0; for (; x < 10; x = x + 1) {} return x; }"
    program = analyze(src)
    assert len(program.decls[0].body) == 3


def test_for_loop_undefined_variable():
    with pytest.raises(UndefinedVariableError) as info:
        analyze("int main() { for (y = 0; y < 10; y = y + 1) {} }")
    assert info.value.name == "y"


def test_global_visible_in_function():
    program = analyze("int g = 3; int main() { return g + 1; }")
    assert [d.name for d in program.decls] == ["g", "main"]


def test_later_global_visible_in_earlier_function():
    program = analyze("int main() { return g; } int g = 1;")
    assert program.decls[1].name == "g"


def test_global_initializer_undefined():
    with pytest.raises(UndefinedVariableError):
        analyze("int x = z;")


def test_if_branches_have_own_scopes():
    src = "int main() { if (1) { int a = 1; } else { int a = 2; } return a; }"
    with pytest.raises(UndefinedVariableError) as info:
        analyze(src)
    assert info.value.name == "a"


def test_while_body_variable_scoped():
    src = "int main() { while (0) { int k = 1; } return k; }"
    with pytest.raises(UndefinedVariableError):
        analyze(src)


def test_local_in_one_function_not_seen_in_another():
    with pytest.raises(UndefinedVariableError):
        analyze("int f() { int q = 1; return q; } int g() { return q; }")