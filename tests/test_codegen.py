import pytest

from tinyc import (
    AddInst,
    Cell,
    CopyInst,
    InputInst,
    Literal,
    PrintInst,
    Target,
    frame_size,
    generate,
    max_cell,
)

LINUX = Target(word=8, stack_align=16, label_prefix="")
MACOS = Target(word=8, stack_align=16, label_prefix="_")


def _slots(n):
    return [CopyInst(Cell(n), Literal(0))] if n else []


def test_max_cell_counts_every_operand():
    tac = [InputInst(Cell(2)), AddInst(Cell(3), Cell(2), Literal(40)), PrintInst(Cell(7))]
    assert max_cell(tac) == 7
    assert max_cell([]) == 0
    assert max_cell([PrintInst(Literal(1))]) == 0


@pytest.mark.parametrize("cells,size", [(0, 16), (1, 32), (2, 32), (3, 48), (4, 48), (5, 64)])
def test_frame_size(cells, size):
    assert frame_size(_slots(cells), LINUX) == size


def test_frame_size_monotone_and_aligned():
    sizes = [frame_size(_slots(n), LINUX) for n in range(0, 64)]
    assert all(s % 16 == 0 for s in sizes)
    assert sizes == sorted(sizes)
    # Room for every slot below the saved frame pointer.
    assert all(s - 16 >= 8 * n for n, s in enumerate(sizes))


def test_sparse_ids_reserve_lower_slots():
    assert frame_size([PrintInst(Cell(5))], LINUX) == frame_size(_slots(5), LINUX)


def test_procedure_layout():
    asm = generate([CopyInst(Cell(1), Literal(5)), PrintInst(Cell(1))], LINUX)
    lines = asm.splitlines()
    assert lines[0] == ".globl main"
    assert "main:" in lines
    assert lines.index("  # SETUP") < lines.index("  # BODY") < lines.index("  # CLEANUP")
    assert "    pushq %rbp" in lines
    assert "    subq $16,%rsp" in lines
    assert lines[-3:] == ["    movq $0,%rax", "    leaveq", "    retq"]


def test_instruction_patterns():
    tac = [
        InputInst(Cell(1)),
        AddInst(Cell(2), Cell(1), Literal(3)),
        CopyInst(Cell(3), Cell(2)),
        PrintInst(Cell(3)),
    ]
    asm = generate(tac, LINUX)
    assert (
        "  # x1 := input\n"
        "    callq tiny_input\n"
        "    movq %rax,-8(%rbp)\n"
    ) in asm
    assert (
        "  # x2 := x1 + 3\n"
        "    movq -8(%rbp),%rax\n"
        "    addq $3,%rax\n"
        "    movq %rax,-16(%rbp)\n"
    ) in asm
    assert (
        "  # x3 := x2\n"
        "    movq -16(%rbp),%rax\n"
        "    movq %rax,-24(%rbp)\n"
    ) in asm
    assert (
        "  # print x3\n"
        "    movq -24(%rbp),%rax\n"
        "    movq %rax,%rdi\n"
        "    callq tiny_print\n"
    ) in asm


def test_print_literal():
    asm = generate([PrintInst(Literal(-7))], LINUX)
    assert "    movq $-7,%rax\n    movq %rax,%rdi\n" in asm


def test_wide_literals_use_movabs():
    big = 2**40
    asm = generate([CopyInst(Cell(1), Literal(big)), AddInst(Cell(2), Cell(1), Literal(big))], LINUX)
    assert f"    movabsq ${big},%rax\n    movq %rax,-8(%rbp)\n" in asm
    assert f"    movabsq ${big},%rcx\n    addq %rcx,%rax\n" in asm


def test_underscore_labels():
    asm = generate([InputInst(Cell(1)), PrintInst(Cell(1))], MACOS)
    assert asm.startswith(".globl _main\n")
    assert "_main:" in asm
    assert "callq _tiny_input" in asm
    assert "callq _tiny_print" in asm
