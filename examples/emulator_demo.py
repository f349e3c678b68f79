#!/usr/bin/env python3
"""
M6800 Assembler and Emulator Demo
=================================

This script demonstrates how to use the M6800 SDK to:
1. Assemble a program from source text
2. Load the assembler output into the emulator
3. Single-step and inspect registers
4. Run to completion and read the trace
5. Stop a runaway loop with the step ceiling

Usage:
    python examples/emulator_demo.py
"""

from m6800_sdk.assembler import Assembler
from m6800_sdk.emulator import Emulator, EmulatorConfig


SOURCE = """\
        ORG $C000
START   LDAA #5
        ADDA #3
        STAA $40
        LDAB #2
LOOP    DECB
        BNE LOOP
"""


def main():
    # ==========================================================================
    # 1. Assemble
    # ==========================================================================
    asm = Assembler()
    output = asm.assemble_string(SOURCE)

    print("Assembler output:")
    for number, (source, encoded) in enumerate(zip(SOURCE.splitlines(), output), 1):
        print(f"  {number:3d}  {source:<24s}  {encoded}")
    print(f"  Symbols: {asm.get_symbols()}")

    if asm.has_errors():
        print(asm.get_error_report())
        return

    # ==========================================================================
    # 2. Load into the emulator
    # ==========================================================================
    # The emulator places the first output line at the load address
    # ($C000 by default), matching the ORG above so JMP targets line up.
    emu = Emulator()
    emu.load(asm.get_object_text())

    # ==========================================================================
    # 3. Single-step
    # ==========================================================================
    print("\nStepping:")
    for _ in range(3):
        print(f"  {emu.step()}")
    print(f"  Registers: {emu.registers}")

    # ==========================================================================
    # 4. Run to completion
    # ==========================================================================
    print("\nRunning:")
    for entry in emu.run():
        print(f"  {entry}")
    print(f"  Status: {emu.status.name} after {emu.step_count} steps")
    print(f"  Memory: {{{', '.join(f'${a:04X}: {v}' for a, v in emu.memory.items())}}}")

    # ==========================================================================
    # 5. Runaway loop
    # ==========================================================================
    asm.assemble_string("HERE BRA HERE")
    emu = Emulator(EmulatorConfig(max_steps=20))
    emu.load(asm.get_object_text())
    entries = emu.run()
    print(f"\nRunaway loop: {entries[-1]}")
    print(f"  Status: {emu.status.name}")


if __name__ == "__main__":
    main()
