import pytest

from symbol_table import SymbolTable, SymbolError, PREDEFINED, FIRST_VARIABLE, MAXRAM


def test_predefined_symbols():
    symbols = SymbolTable()

    assert len(PREDEFINED) == 23
    assert len(symbols) == 23
    for i in range(16):
        assert symbols.lookup(f"R{i}") == i
    assert symbols.lookup("SCREEN") == 16384
    assert symbols.lookup("KBD") == 24576
    assert [symbols.lookup(s) for s in ["SP", "LCL", "ARG", "THIS", "THAT"]] == [0, 1, 2, 3, 4]


def test_lookup_is_case_sensitive():
    symbols = SymbolTable()

    assert symbols.lookup("screen") is None
    assert "SCREEN" in symbols
    assert "screen" not in symbols


def test_bind_label():
    symbols = SymbolTable()
    symbols.bind_label("LOOP", 4)

    assert symbols.lookup("LOOP") == 4
    assert symbols.labels == ["LOOP"]


@pytest.mark.parametrize("name", ["LOOP", "R3", "SCREEN"])
def test_bind_label_first_definition_wins(name):
    symbols = SymbolTable()
    symbols.bind_label("LOOP", 4)
    before = symbols.lookup(name)

    with pytest.raises(SymbolError, match="previously defined"):
        symbols.bind_label(name, 9)

    assert symbols.lookup(name) == before


def test_allocate_variable_in_order():
    symbols = SymbolTable()

    assert symbols.allocate_variable("foo") == FIRST_VARIABLE
    assert symbols.allocate_variable("foo") == FIRST_VARIABLE
    assert symbols.allocate_variable("bar") == FIRST_VARIABLE + 1
    assert symbols.variables == ["foo", "bar"]
    assert symbols.ram == FIRST_VARIABLE + 2


def test_allocate_variable_returns_existing_binding():
    symbols = SymbolTable()
    symbols.bind_label("END", 7)

    assert symbols.allocate_variable("END") == 7
    assert symbols.allocate_variable("KBD") == 24576
    assert symbols.variables == []
    assert symbols.ram == FIRST_VARIABLE


def test_allocate_variable_out_of_ram():
    symbols = SymbolTable()
    symbols.ram = MAXRAM - 1

    assert symbols.allocate_variable("last") == MAXRAM - 1
    with pytest.raises(SymbolError, match="Out of RAM"):
        symbols.allocate_variable("one_too_many")
    assert "one_too_many" not in symbols


def test_similar():
    symbols = SymbolTable()
    symbols.bind_label("LOOP", 0)

    assert symbols.similar("loop") == "LOOP"
    assert symbols.similar("Screen") == "SCREEN"
    assert symbols.similar("LOOP") is None
    assert symbols.similar("other") is None


def test_similar_tracks_new_symbols():
    symbols = SymbolTable()

    assert symbols.similar("Counter") is None
    symbols.allocate_variable("counter")
    symbols.bind_label("Loop", 3)

    assert symbols.similar("Counter") == "counter"
    assert symbols.similar("COUNTER") == "counter"
    assert symbols.similar("LOOP") == "Loop"
    assert symbols.ucase["COUNTER"] == "counter"
