import pytest

from code_tables import COMP_NO_MEM, COMP_MEM, DESTS, JMPS, uses_memory, lookup_comp, lookup_dest, lookup_jump


def test_table_shapes():
    assert len(COMP_NO_MEM) == 18
    assert len(COMP_MEM) == 10
    for table, width in [(COMP_NO_MEM, 6), (COMP_MEM, 6), (DESTS, 3), (JMPS, 3)]:
        for code in table.values():
            assert len(code) == width
            assert set(code) <= set("01")


def test_memory_comps_mirror_register_comps():
    for mnemonic, code in COMP_MEM.items():
        assert COMP_NO_MEM[mnemonic.replace("M", "A")] == code


@pytest.mark.parametrize("comp,memory,code", [
    ("D+1", False, "011111"),
    ("D+M", True, "000010"),
    ("0", False, "101010"),
    ("!M", True, "110001"),
    ("D|A", False, "010101"),
])
def test_lookup_comp(comp, memory, code):
    assert uses_memory(comp) is memory
    assert lookup_comp(comp, memory) == code


def test_lookup_comp_unknown():
    assert lookup_comp("D+M", False) is None
    assert lookup_comp("A+D", False) is None
    assert lookup_comp("d+1", False) is None


@pytest.mark.parametrize("dest,code", [
    ("", "000"), ("null", "000"), ("M", "001"), ("D", "010"), ("MD", "011"),
    ("A", "100"), ("AM", "101"), ("AD", "110"), ("AMD", "111"),
])
def test_lookup_dest(dest, code):
    assert lookup_dest(dest) == code


@pytest.mark.parametrize("jump,code", [
    ("", "000"), ("null", "000"), ("JGT", "001"), ("JEQ", "010"), ("JGE", "011"),
    ("JLT", "100"), ("JNE", "101"), ("JLE", "110"), ("JMP", "111"),
])
def test_lookup_jump(jump, code):
    assert lookup_jump(jump) == code


def test_lookup_unknown_dest_and_jump():
    assert lookup_dest("DM") is None
    assert lookup_dest("m") is None
    assert lookup_jump("jmp") is None
    assert lookup_jump("JMPX") is None
