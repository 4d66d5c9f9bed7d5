# coding: utf-8

#---------------------------------------------------------------------------------------
# (C)2023 Robert Woodhead. Creative Commons Attribution License
#---------------------------------------------------------------------------------------

# The assembler's symbol table. Predefined symbols are seeded when the table is
# created, labels are bound during pass 1 and variables are allocated during pass 2.
# Once a name is bound it is never rebound.

from typing import List, Dict, Optional

Values = Dict[str, int]     # Name:Values pairs

FIRST_VARIABLE = 16         # Locations 0-15 are reserved, so 16 is the first available
MAXRAM = 16384              # Limit of ram space (SCREEN starts here)

# Predefined symbols, in the order they are listed.

PREDEFINED: Values = {

    'R0': 0,
    'R1': 1,
    'R2': 2,
    'R3': 3,
    'R4': 4,
    'R5': 5,
    'R6': 6,
    'R7': 7,
    'R8': 8,
    'R9': 9,
    'R10': 10,
    'R11': 11,
    'R12': 12,
    'R13': 13,
    'R14': 14,
    'R15': 15,

    'SP': 0,
    'LCL': 1,
    'ARG': 2,
    'THIS': 3,
    'THAT': 4,

    'SCREEN': 16384,
    'KBD': 24576,

}


class SymbolError(Exception):
    pass


class SymbolTable:

    def __init__(self):

        self.symbols: Values = dict(PREDEFINED)

        # Keep some lists of symbols of particular types. This lets us print
        # a nicely formatted symbol table at the end of assembly.

        self.predefined: List[str] = list(PREDEFINED)
        self.labels: List[str] = []
        self.variables: List[str] = []

        # Upper case name -> first symbol with that spelling, for similar().

        self.ucase: Dict[str, str] = {}
        for s in self.symbols:
            self.ucase.setdefault(s.upper(), s)

        self.ram = FIRST_VARIABLE   # Next free variable address

    def __contains__(self, name: str) -> bool:
        return name in self.symbols

    def __len__(self) -> int:
        return len(self.symbols)

    def lookup(self, name: str) -> Optional[int]:
        return self.symbols.get(name)

    # Bind a (LABEL) to a ROM address. First definition wins, so redefining
    # anything (including a predefined symbol) is an error.

    def bind_label(self, name: str, address: int) -> None:

        if name in self.symbols:
            raise SymbolError(f'Symbol [{name}] previously defined')

        self.symbols[name] = address
        self.labels.append(name)
        self.ucase.setdefault(name.upper(), name)

    # Return the address of a symbol, allocating the next RAM slot for it
    # if it hasn't been seen before.

    def allocate_variable(self, name: str) -> int:

        if name in self.symbols:
            return self.symbols[name]

        if self.ram >= MAXRAM:
            raise SymbolError('Out of RAM (data) memory.')

        self.symbols[name] = self.ram
        self.variables.append(name)
        self.ucase.setdefault(name.upper(), name)
        self.ram += 1

        return self.symbols[name]

    # Find an existing symbol that differs from name only in case. Handy for
    # spotting typos like @loop when (LOOP) was meant.

    def similar(self, name: str) -> Optional[str]:

        twin = self.ucase.get(name.upper())

        return twin if twin != name else None
