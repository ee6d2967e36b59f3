HALT = 0    # stop
SET  = 1    # R1 <- V2
PUSH = 2    # V1 -> [stack]
POP  = 3    # [stack] -> R1
EQ   = 4    # R1 <- V2 == V3
GT   = 5    # R1 <- V2 > V3
JMP  = 6    # IP <- V1
JT   = 7    # if V1 != 0 IP <- V2
JF   = 8    # if V1 == 0 IP <- V2
ADD  = 9    # R1 <- V2 + V3
MULT = 10   # R1 <- V2 * V3
MOD  = 11   # R1 <- V2 % V3
AND  = 12   # R1 <- V2 & V3
OR   = 13   # R1 <- V2 | V3
NOT  = 14   # R1 <- ~V2
RMEM = 15   # R1 <- M[V2]
WMEM = 16   # M[V1] <- V2
CALL = 17   # push IP; IP <- V1
RET  = 18   # IP <- [stack]
OUT  = 19   # terminal <- V1
IN   = 20   # R1 <- terminal
NOOP = 21

# Opcode -> (mnemonic, operand count)
OPCODES = {
    HALT: ('halt', 0),
    SET: ('set', 2),
    PUSH: ('push', 1),
    POP: ('pop', 1),
    EQ: ('eq', 3),
    GT: ('gt', 3),
    JMP: ('jmp', 1),
    JT: ('jt', 2),
    JF: ('jf', 2),
    ADD: ('add', 3),
    MULT: ('mult', 3),
    MOD: ('mod', 3),
    AND: ('and', 3),
    OR: ('or', 3),
    NOT: ('not', 2),
    RMEM: ('rmem', 2),
    WMEM: ('wmem', 2),
    CALL: ('call', 1),
    RET: ('ret', 0),
    OUT: ('out', 1),
    IN: ('in', 1),
    NOOP: ('noop', 0),
}


def name(op: int) -> str:
    return OPCODES[op][0]


def operand_count(op: int) -> int:
    return OPCODES[op][1]
