"""
M6800 CPU Emulator
==================

Instruction-level model of the CPU subset the assembler targets.

Registers:
- 8-bit accumulators: A, B
- 16-bit registers: X (index), PC (program counter)
- Carry bit: set by SEC, cleared by CLC, shifted through by the
  shift/rotate group

This is not a cycle-accurate model and the condition codes are reduced to
the carry bit. Branch conditions are taken from the registers directly:

| Branch | Taken when        |
|--------|-------------------|
| BRA    | always            |
| BSR    | always            |
| BEQ    | B == 0            |
| BNE    | B != 0            |
| BMI    | bit 7 of A set    |
| BPL    | bit 7 of A clear  |

There is no stack. JSR and BSR transfer control without saving a return
address, and RTS simply moves on to the next instruction.
"""

from dataclasses import dataclass
from typing import Optional

from m6800_sdk.cpu import AddressingMode, InstructionInfo, decode_opcode
from .memory import Memory


@dataclass
class CPUState:
    """
    Complete CPU state.

    All values stored as Python ints but represent:
    - A, B: 8-bit unsigned (0-255)
    - X, PC: 16-bit unsigned (0-65535)
    - carry: carry bit
    """
    a: int = 0
    b: int = 0
    x: int = 0
    pc: int = 0
    carry: bool = False


@dataclass(frozen=True)
class ExecutionResult:
    """
    Outcome of executing one instruction.

    Attributes:
        mnemonic: Decoded mnemonic
        message: Effect description, e.g. "A = 5" or "[$0040] = 5"
        transferred: True when the instruction set PC to a target address
                     (taken branch, jump, subroutine call)
        branch_taken: For conditional and unconditional branches, whether
                      the branch was taken; None for other instructions
    """
    mnemonic: str
    message: str
    transferred: bool = False
    branch_taken: Optional[bool] = None


class M6800:
    """
    M6800 CPU model.

    The CPU executes one decoded instruction at a time from an opcode and
    its operand bytes; fetching lines and following control transfers is
    left to the Emulator session.

    Example:
        >>> cpu = M6800(Memory())
        >>> cpu.pc = 0xC000
        >>> cpu.execute(0x86, [0x05]).message
        'A = 5'
        >>> f"${cpu.pc:04X}"
        '$C002'
    """

    def __init__(self, memory: Memory):
        """
        Initialize CPU with memory.

        Args:
            memory: Sparse memory used by loads and stores
        """
        self.memory = memory
        self.state = CPUState()

    # ========================================
    # Register Properties
    # ========================================

    @property
    def a(self) -> int:
        """Accumulator A (8-bit)."""
        return self.state.a

    @a.setter
    def a(self, value: int) -> None:
        self.state.a = value & 0xFF

    @property
    def b(self) -> int:
        """Accumulator B (8-bit)."""
        return self.state.b

    @b.setter
    def b(self, value: int) -> None:
        self.state.b = value & 0xFF

    @property
    def x(self) -> int:
        """Index register X (16-bit)."""
        return self.state.x

    @x.setter
    def x(self, value: int) -> None:
        self.state.x = value & 0xFFFF

    @property
    def pc(self) -> int:
        """Program counter (16-bit)."""
        return self.state.pc

    @pc.setter
    def pc(self, value: int) -> None:
        self.state.pc = value & 0xFFFF

    @property
    def carry(self) -> bool:
        """Carry bit."""
        return self.state.carry

    @carry.setter
    def carry(self, value: bool) -> None:
        self.state.carry = bool(value)

    def reset(self, pc: int = 0) -> None:
        """Clear all registers and set PC."""
        self.state = CPUState()
        self.pc = pc

    def get_registers(self) -> dict:
        """Get all register values as a dictionary."""
        return {
            "a": self.a,
            "b": self.b,
            "x": self.x,
            "pc": self.pc,
            "carry": self.carry,
        }

    # ========================================
    # Shift Operations
    # ========================================

    def _asl8(self, value: int) -> int:
        """Arithmetic shift left, bit 7 into carry."""
        self.carry = (value & 0x80) != 0
        return (value << 1) & 0xFF

    def _lsr8(self, value: int) -> int:
        """Logical shift right, bit 0 into carry."""
        self.carry = (value & 0x01) != 0
        return value >> 1

    def _asr8(self, value: int) -> int:
        """Arithmetic shift right (preserve sign), bit 0 into carry."""
        self.carry = (value & 0x01) != 0
        return (value >> 1) | (value & 0x80)

    def _rol8(self, value: int) -> int:
        """Rotate left through carry."""
        carry_in = 1 if self.carry else 0
        self.carry = (value & 0x80) != 0
        return ((value << 1) | carry_in) & 0xFF

    def _ror8(self, value: int) -> int:
        """Rotate right through carry."""
        carry_in = 0x80 if self.carry else 0
        self.carry = (value & 0x01) != 0
        return (value >> 1) | carry_in

    # ========================================
    # Operand Access
    # ========================================

    def _effective_address(self, info: InstructionInfo, operands: list[int]) -> int:
        """Compute the memory address of a direct, indexed or extended operand."""
        if info.mode == AddressingMode.DIRECT:
            return operands[0]
        if info.mode == AddressingMode.INDEXED:
            return (self.x + operands[0]) & 0xFFFF
        return (operands[0] << 8) | operands[1]

    def _operand_value(self, info: InstructionInfo, operands: list[int]) -> int:
        """Fetch the 8-bit operand of an immediate or memory instruction."""
        if info.mode == AddressingMode.IMMEDIATE:
            return operands[0]
        return self.memory.read(self._effective_address(info, operands))

    # ========================================
    # Execution
    # ========================================

    def execute(self, opcode: int, operand_bytes: list[int]) -> Optional[ExecutionResult]:
        """
        Execute a single instruction.

        PC must hold the address of the instruction. Afterwards PC holds
        either the address of the next instruction or the transfer target.

        Args:
            opcode: The opcode byte
            operand_bytes: Bytes following the opcode; missing bytes read as 0

        Returns:
            The execution result, or None for an unknown opcode (PC and
            registers are left untouched)
        """
        decoded = decode_opcode(opcode)
        if decoded is None:
            return None
        mnemonic, info = decoded

        operands = list(operand_bytes[:info.operand_size])
        operands += [0] * (info.operand_size - len(operands))
        operands = [value & 0xFF for value in operands]

        if info.mode == AddressingMode.RELATIVE:
            return self._execute_branch(mnemonic, info, operands[0])

        message = self._execute_op(mnemonic, info, operands)
        if message is None:
            # Control transfer already set PC
            target = (operands[0] << 8) | operands[1]
            return ExecutionResult(mnemonic, f"PC = ${target:04X}", transferred=True)

        self.pc += info.size
        return ExecutionResult(mnemonic, message)

    def _execute_branch(self, mnemonic: str, info: InstructionInfo, offset: int) -> ExecutionResult:
        """Execute a relative branch."""
        match mnemonic:
            case "BRA" | "BSR":
                taken = True
            case "BEQ":
                taken = self.b == 0
            case "BNE":
                taken = self.b != 0
            case "BMI":
                taken = (self.a & 0x80) != 0
            case "BPL":
                taken = (self.a & 0x80) == 0
            case _:
                raise NotImplementedError(f"no branch condition defined for {mnemonic}")

        if not taken:
            self.pc += info.size
            return ExecutionResult(mnemonic, "not taken", branch_taken=False)

        displacement = offset - 0x100 if offset & 0x80 else offset
        self.pc = self.pc + info.size + displacement
        return ExecutionResult(
            mnemonic, f"taken, PC = ${self.pc:04X}", transferred=True, branch_taken=True
        )

    def _execute_op(self, mnemonic: str, info: InstructionInfo, operands: list[int]) -> Optional[str]:
        """
        Execute a non-branch instruction.

        Returns:
            Effect message, or None after a jump (PC already set)
        """
        match mnemonic:
            # Loads and stores
            case "LDAA":
                self.a = self._operand_value(info, operands)
                return f"A = {self.a}"
            case "LDAB":
                self.b = self._operand_value(info, operands)
                return f"B = {self.b}"
            case "STAA":
                address = self._effective_address(info, operands)
                self.memory.write(address, self.a)
                return f"[${address:04X}] = {self.a}"
            case "STAB":
                address = self._effective_address(info, operands)
                self.memory.write(address, self.b)
                return f"[${address:04X}] = {self.b}"
            case "LDX":
                if info.mode == AddressingMode.IMMEDIATE16:
                    self.x = (operands[0] << 8) | operands[1]
                else:
                    self.x = self.memory.read_word(self._effective_address(info, operands))
                return f"X = ${self.x:04X}"
            case "STX":
                address = self._effective_address(info, operands)
                self.memory.write_word(address, self.x)
                return f"[${address:04X}] = ${self.x:04X}"

            # Arithmetic and logic
            case "ADDA":
                self.a = self.a + self._operand_value(info, operands)
                return f"A = {self.a}"
            case "ADDB":
                self.b = self.b + self._operand_value(info, operands)
                return f"B = {self.b}"
            case "SUBA":
                self.a = self.a - self._operand_value(info, operands)
                return f"A = {self.a}"
            case "SUBB":
                self.b = self.b - self._operand_value(info, operands)
                return f"B = {self.b}"
            case "ANDA":
                self.a = self.a & self._operand_value(info, operands)
                return f"A = {self.a}"
            case "ABA":
                self.a = self.a + self.b
                return f"A = {self.a}"
            case "SBA":
                self.a = self.a - self.b
                return f"A = {self.a}"

            # Compares report the difference only
            case "CMPA":
                return f"A - M = {self.a - self._operand_value(info, operands)}"
            case "CMPB":
                return f"B - M = {self.b - self._operand_value(info, operands)}"
            case "CBA":
                return f"A - B = {self.a - self.b}"

            # Increment, decrement, clear
            case "INCA":
                self.a = self.a + 1
                return f"A = {self.a}"
            case "DECA":
                self.a = self.a - 1
                return f"A = {self.a}"
            case "INCB":
                self.b = self.b + 1
                return f"B = {self.b}"
            case "DECB":
                self.b = self.b - 1
                return f"B = {self.b}"
            case "CLRA":
                self.a = 0
                return "A = 0"
            case "CLRB":
                self.b = 0
                return "B = 0"
            case "INX":
                self.x = self.x + 1
                return f"X = ${self.x:04X}"
            case "DEX":
                self.x = self.x - 1
                return f"X = ${self.x:04X}"

            # Transfers
            case "TAB":
                self.b = self.a
                return f"B = {self.b}"
            case "TBA":
                self.a = self.b
                return f"A = {self.a}"

            # Carry
            case "SEC":
                self.carry = True
                return "C = 1"
            case "CLC":
                self.carry = False
                return "C = 0"

            # Shift & rotate
            case "ASLA":
                self.a = self._asl8(self.a)
                return f"A = {self.a}"
            case "ASLB":
                self.b = self._asl8(self.b)
                return f"B = {self.b}"
            case "LSRA":
                self.a = self._lsr8(self.a)
                return f"A = {self.a}"
            case "LSRB":
                self.b = self._lsr8(self.b)
                return f"B = {self.b}"
            case "ASRA":
                self.a = self._asr8(self.a)
                return f"A = {self.a}"
            case "ASRB":
                self.b = self._asr8(self.b)
                return f"B = {self.b}"
            case "ROLA":
                self.a = self._rol8(self.a)
                return f"A = {self.a}"
            case "ROLB":
                self.b = self._rol8(self.b)
                return f"B = {self.b}"
            case "RORA":
                self.a = self._ror8(self.a)
                return f"A = {self.a}"
            case "RORB":
                self.b = self._ror8(self.b)
                return f"B = {self.b}"

            # Control
            case "JMP" | "JSR":
                self.pc = (operands[0] << 8) | operands[1]
                return None
            case "RTS":
                return "return"
            case "NOP":
                return "no operation"
            case _:
                raise NotImplementedError(f"no behaviour defined for {mnemonic}")
