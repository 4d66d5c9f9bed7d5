# coding: utf-8

#---------------------------------------------------------------------------------------
# (C)2023 Robert Woodhead. Creative Commons Attribution License
#---------------------------------------------------------------------------------------

# Bit codes for the fields of a C-instruction:
#
#   111 a cccccc ddd jjj
#
# The a bit selects between the A register (a=0) and memory (a=1) as the ALU's
# second operand, so the comp codes are split into two tables keyed by mnemonic.

from typing import Dict, Optional

Codes = Dict[str, str]      # Mnemonic:bit string pairs

# Comps that use the A register (a=0).

COMP_NO_MEM: Codes = {

    '0':    '101010',
    '1':    '111111',
    '-1':   '111010',
    'D':    '001100',
    'A':    '110000',
    '!D':   '001101',
    '!A':   '110001',
    '-D':   '001111',
    '-A':   '110011',
    'D+1':  '011111',
    'A+1':  '110111',
    'D-1':  '001110',
    'A-1':  '110010',
    'D+A':  '000010',
    'D-A':  '010011',
    'A-D':  '000111',
    'D&A':  '000000',
    'D|A':  '010101',

}

# Comps that use memory (a=1). Same ALU settings as the A versions.

COMP_MEM: Codes = {

    'M':    '110000',
    '!M':   '110001',
    '-M':   '110011',
    'M+1':  '110111',
    'M-1':  '110010',
    'D+M':  '000010',
    'D-M':  '010011',
    'M-D':  '000111',
    'D&M':  '000000',
    'D|M':  '010101',

}

# Destinations. No destination at all is the same as null.

DESTS: Codes = {

    '':     '000',
    'null': '000',
    'M':    '001',
    'D':    '010',
    'MD':   '011',
    'A':    '100',
    'AM':   '101',
    'AD':   '110',
    'AMD':  '111',

}

# Jumps.

JMPS: Codes = {

    '':     '000',
    'null': '000',
    'JGT':  '001',
    'JEQ':  '010',
    'JGE':  '011',
    'JLT':  '100',
    'JNE':  '101',
    'JLE':  '110',
    'JMP':  '111',

}


def uses_memory(comp: str) -> bool:
    return 'M' in comp


def lookup_comp(comp: str, memory: bool) -> Optional[str]:
    return (COMP_MEM if memory else COMP_NO_MEM).get(comp)


def lookup_dest(dest: str) -> Optional[str]:
    return DESTS.get(dest)


def lookup_jump(jump: str) -> Optional[str]:
    return JMPS.get(jump)
