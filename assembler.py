# coding: utf-8

#---------------------------------------------------------------------------------------
# (C)2023 Robert Woodhead. Creative Commons Attribution License
#---------------------------------------------------------------------------------------

# Usage: python3 assembler.py [-s] [-d] [-o {hack output file}] {asm input file}
#
# Generates .hack output file of the same name (or the file given with -o); if -s
# switch is used, some handy symbol tables are produced, and -d traces the passes.
#
# Two passes over the source:
#
#   Pass 1 binds each (LABEL) to the address of the next real instruction.
#
#   Pass 2 resolves @symbols, allocating RAM from address 16 for any symbol it
#   hasn't seen before (in the order they are first used), and generates the code.
#
# // starts a comment; a single / does not, so it ends up in a mnemonic and is an
# error. Whitespace around @, (, ), =, ;, and the ALU operators is ignored, but
# whitespace inside a number, symbol or mnemonic (@12 34, (LO OP)) is an error.
#
# Assembly is all or nothing. Every error is reported with its line number, and if
# there are any, no .hack file is written.

import os
import sys
import shutil
import logging
import argparse
from typing import List, Dict, Tuple, Any, Iterable, Optional

from code_tables import uses_memory, lookup_comp, lookup_dest, lookup_jump
from symbol_table import SymbolTable, SymbolError, Values, MAXRAM

Operation = Dict[str, Any]  # An assembler operation, one per non-comment line.
Line = Tuple[int, str, str] # Line number, line, original (unmunged) line

MAXROM = 32768              # Limit of rom space
MAXADDRESS = 32767          # Largest value an @-instruction can hold (15 bits)

# Various sets used in parsing.

SYMBOLCHARS = set('abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789_.$:')
DECIMALCHARS = set('0123456789')
SIGNS = set('+-')
SEPARATORS = '@()=;+-&|!'

# C instruction prefix.

CINSTR = '111'


class AssemblyError(Exception):

    # Raised when any operation has an error. Carries all the operations so
    # that the caller can report every error and warning, not just the first.

    def __init__(self, ops: List[Operation]):
        self.ops = ops
        super().__init__(f'{len(self.errors)} error(s) in assembly')

    @property
    def errors(self) -> List[Operation]:
        return [o for o in self.ops if 'error' in o]

    @property
    def warnings(self) -> List[Operation]:
        return [o for o in self.ops if 'warning' in o]


# Determine if a string meets the criteria for a symbol.

def is_symbol(s: str) -> bool:

    if s == '':
        return False
    elif s[0] in DECIMALCHARS:
        return False
    else:
        for c in s:
            if c not in SYMBOLCHARS:
                return False

    return True

# Determine if a string is a decimal constant. A sign is allowed so that
# negative numbers are caught by the range check rather than treated as symbols.

def is_constant(s: str) -> bool:

    if s != '' and s[0] in SIGNS:
        s = s[1:]

    return s != '' and all(c in DECIMALCHARS for c in s)

# Kill the comment and the whitespace around separators. Whitespace left inside
# a token makes it fail to parse later, rather than gluing two tokens together.

def clean(line: str) -> str:

    line = line.split('//')[0].strip()

    for c in SEPARATORS:
        line = c.join(p.strip() for p in line.split(c))

    return line

# Read the source into (line number, line, original line) tuples, dropping the
# lines that are blank once cleaned. Both passes run over this list, so the
# source only needs to be iterable once.

def read_lines(source: Iterable[str]) -> List[Line]:

    lines = [(i+1, clean(l), l.rstrip('\r\n')) for i, l in enumerate(source)]

    return [l for l in lines if l[1] != '']

# Parse a line into an Operation dictionary.
#
# Operation cTypes are: A=Aop, C=Cop, L=Label.

def operation(line: Line) -> Operation:

    o = line[1]

    if o[0] == '@':             # @-op
        o = o[1:]
        if o == '':
            return {'cType': 'A', 'line': line, 'error': 'Missing value after @'}
        elif is_constant(o):
            return {'cType': 'A', 'constant': o, 'line': line}
        elif is_symbol(o):
            return {'cType': 'A', 'symbol': o, 'line': line}
        else:
            return {'cType': 'A', 'line': line, 'error': f'@ value [{o}] is not a symbol or constant'}
    elif o[0] == '(':           # (LABEL)
        if not o.endswith(')'):
            return {'cType': 'L', 'line': line, 'error': 'Label definition does not end in )'}
        sym = o[1:-1]
        if sym == '':
            return {'cType': 'L', 'line': line, 'error': 'Empty symbol'}
        elif not is_symbol(sym):
            return {'cType': 'L', 'line': line, 'error': f'Badly formed symbol [{sym}]'}
        else:
            return {'cType': 'L', 'symbol': sym, 'line': line}
    else:                       # C-operation
        olist = o.split(';')
        if len(olist) > 2:
            return {'cType': 'C', 'line': line, 'error': "Multiple ;'s in operation"}
        elif len(olist) == 2:
            jmp = olist[1]
            if jmp == '':
                return {'cType': 'C', 'line': line, 'error': 'Missing jump after ;'}
        else:
            jmp = ''

        olist = olist[0].split('=')
        if len(olist) == 1:
            return {'cType': 'C', 'dest': '', 'comp': olist[0], 'jump': jmp, 'line': line}
        elif len(olist) == 2:
            if olist[0] == '':
                return {'cType': 'C', 'line': line, 'error': 'Missing destination before ='}
            return {'cType': 'C', 'dest': olist[0], 'comp': olist[1], 'jump': jmp, 'line': line}
        else:
            return {'cType': 'C', 'line': line, 'error': "Multiple ='s in operation"}

# Pass 1: bind the labels. A label gets the address of the next real instruction,
# which is the number of A and C operations that come before it. Returns the
# program length.

def pass1(ops: List[Operation], symbols: SymbolTable) -> int:

    pc = 0  # Program counter

    for o in ops:
        ct = o['cType']
        if ct == 'L':
            if 'error' not in o:
                try:
                    symbols.bind_label(o['symbol'], pc)
                    logging.debug('label %s = %d', o['symbol'], pc)
                except SymbolError as oops:
                    o['error'] = str(oops)
        else:
            pc += 1

    if pc > MAXROM:
        ops[-1]['error'] = 'Program too large!'

    return pc

# Generate the code for an Operation, add it to the operation, and return the
# modified object. Called in source order during pass 2, which is what makes
# variables get allocated in the order they are first used.

def codegen(o: Operation, symbols: SymbolTable) -> Operation:

    if 'error' in o:
        return o

    match o['cType']:

        case 'A':   # @-Instruction
            if 'constant' in o:
                av = int(o['constant'])
            else:
                sym = o['symbol']
                av = symbols.lookup(sym)
                if av is None:
                    twin = symbols.similar(sym)
                    try:
                        av = symbols.allocate_variable(sym)
                    except SymbolError as oops:
                        o['error'] = str(oops)
                        return o
                    logging.debug('variable %s = %d', sym, av)
                    if twin is not None:
                        o['warning'] = f'Variable [{sym}] differs only in case from [{twin}]'
            if (av < 0) or (MAXADDRESS < av):
                o['error'] = f'@ value {av} out of 0..{MAXADDRESS} range'
                return o
            o['address'] = av
            o['code'] = '0' + f'{av:015b}'

        case 'C':   # C-Instruction
            oc = o['comp']
            od = o['dest']
            oj = o['jump']
            if oc == '':
                o['error'] = 'Missing alu operation'
                return o
            a = uses_memory(oc)
            c = lookup_comp(oc, a)
            if c is None:
                o['error'] = 'Unknown alu operation ' + oc
                return o
            d = lookup_dest(od)
            if d is None:
                o['error'] = 'Unknown destination ' + od
                return o
            j = lookup_jump(oj)
            if j is None:
                o['error'] = 'Unknown jump ' + oj
                return o
            o['code'] = CINSTR + ('1' if a else '0') + c + d + j

    return o

# Run both passes over the source. Returns the list of operations, each real
# instruction carrying its 'code'; raises AssemblyError if anything went wrong.
# Pass in a SymbolTable if you want to look at it afterwards.

def translate(source: Iterable[str], symbols: Optional[SymbolTable] = None) -> List[Operation]:

    if symbols is None:
        symbols = SymbolTable()

    ops = [operation(l) for l in read_lines(source)]

    logging.debug('Pass 1')

    pass1(ops, symbols)

    # Labels must all be good before pass 2 uses the table.

    if any('error' in o for o in ops):
        raise AssemblyError(ops)

    logging.debug('Pass 2')

    ops = [codegen(o, symbols) for o in ops]

    for o in ops:
        logging.debug('%s', o)

    if any('error' in o for o in ops):
        raise AssemblyError(ops)

    return ops

# Just the binary, one 16 character string per instruction.

def assemble(source: Iterable[str], symbols: Optional[SymbolTable] = None) -> List[str]:
    return [o['code'] for o in translate(source, symbols) if 'code' in o]

def write_hack(oname: str, prog: List[str]) -> None:

    with open(oname, 'w', encoding='utf-8') as hackfile:
        hackfile.write(''.join(p + '\n' for p in prog))

# Format a segment of the symbol table in a nicely formatted way, in as many
# columns as will fit in width characters. Returns the lines to print.

def format_symbols(symbols: Values, valid: List[str], title: str, byname: bool, width: int = 80) -> List[str]:

    valid_symbols = [s for s in valid if s in symbols]

    if not valid_symbols:
        return []

    # Sort by name (case-insensitive) or by value.

    if byname:
        valid_symbols.sort(key=lambda s: s.upper())
    else:
        valid_symbols.sort(key=lambda s: symbols[s])

    num_symbols = len(valid_symbols)
    max_width = max(len(s) for s in valid_symbols)

    ruler = '-'*max_width + ' -----'
    separator = ' | '

    # Fit as many columns as we can (at least one), then even out the rows so
    # that the last column isn't the only short one.

    num_cols = max(1, min((width - len(separator)) // (len(ruler) + len(separator)), num_symbols))
    num_rows = (num_symbols + num_cols - 1) // num_cols
    num_cols = (num_symbols + num_rows - 1) // num_rows

    formatted_symbols = [f'{s:{max_width}} {symbols[s]:5}' for s in valid_symbols]

    out = [title + (' (by name)' if byname else ' (by value)'),
           separator.join([ruler] * num_cols)]

    # Symbols are ordered column-first, which is easier to read.

    for row in range(0, num_rows):
        out.append(separator.join([formatted_symbols[num_rows * col + row] for col in range(0, num_cols)
                                   if num_rows * col + row < num_symbols]))

    return out + ['']

def print_symbol_tables(symbols: SymbolTable) -> None:

    width = shutil.get_terminal_size().columns

    print()
    for valid, title, byname in [(symbols.predefined, 'Predefined Symbols', True),
                                 (symbols.labels, 'Branch Addresses', True),
                                 (symbols.labels, 'Branch Addresses', False),
                                 (symbols.variables, 'Variables', True),
                                 (symbols.variables, 'Variables', False)]:
        for l in format_symbols(symbols.symbols, valid, title, byname, width):
            print(l)

def print_problems(ops: List[Operation], kind: str) -> None:

    for o in ops:
        if kind in o:
            print(f'{kind.capitalize()} in line {o["line"][0]}: {o[kind]}')
            print('\t' + o['line'][2])

# The actual assembler! Reads the file, assembles it, reports, and writes the
# .hack file if everything worked. Returns the exit status.

def avengers_assemble(fname: str, oname: str, print_symbol_table: bool) -> int:

    try:
        with open(fname, encoding='utf-8-sig') as asmfile:
            source = asmfile.readlines()
    except (OSError, UnicodeDecodeError) as oops:
        print(f'Error: Cannot read input file [{fname}]: {oops}')
        return 1

    symbols = SymbolTable()

    try:
        ops = translate(source, symbols)
    except AssemblyError as oops:
        print_problems(oops.ops, 'error')
        print_problems(oops.ops, 'warning')
        print(f'Assembly aborted -- {len(oops.errors)} error(s) and {len(oops.warnings)} warning(s) detected.')
        return 1

    print_problems(ops, 'warning')

    prog = [o['code'] for o in ops if 'code' in o]

    if print_symbol_table:
        print_symbol_tables(symbols)

    try:
        write_hack(oname, prog)
    except OSError as oops:
        print(f'Error: Cannot write output file [{oname}]: {oops}')
        return 1

    pc = len(prog)
    ram = symbols.ram

    print(f'Program length: {pc} (of {MAXROM}, {int(pc*100/MAXROM)}%), RAM usage: {ram} (of {MAXRAM}, {int(ram*100/MAXRAM)}%)')
    print('Assembly successful - results written to ' + oname)

    return 0

# Main level.

def main(argv: Optional[List[str]] = None) -> int:

    parser = argparse.ArgumentParser(
                    prog = 'hack-assembler',
                    description = 'Assembles HACK programs',
                    epilog = 'Unless -o is used, results are stored in a .hack file with the same name as the .asm file')

    parser.add_argument('filename', help='The HACK .asm file to be assembled')
    parser.add_argument('-o', '--output', help='where to write the .hack file')
    parser.add_argument('-s', '--symbols', action='store_true', required=False, help='prints helpful symbol tables')
    parser.add_argument('-d', '--debug', action='store_true', required=False, help='traces the assembler passes')

    args = parser.parse_args(argv)

    if args.debug:
        logging.basicConfig(level=logging.DEBUG, format='%(levelname)s: %(message)s')

    fname = args.filename

    if args.output:
        oname = args.output
    elif fname.endswith('.asm'):
        oname = fname[:-4] + '.hack'
    else:
        print('Error: Input filename must end in .asm (or use -o)')
        return 1

    if not os.path.isfile(fname):
        print(f'Error: Input file [{fname}] does not exist')
        return 1

    return avengers_assemble(fname, oname, args.symbols)


if __name__ == '__main__':
    sys.exit(main())
