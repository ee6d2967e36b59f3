MEMORY_SIZE      = 0x8000                               # words
GP_REGS          = 8
WORD_SIZE        = 2                                    # bytes per word in memory and images
WORD_FMT         = '<H'                                 # little-endian unsigned 16-bit

MODULUS          = 0x8000                               # arithmetic is 15-bit
VALUE_MASK       = MODULUS - 1
REG_BASE         = MODULUS                              # first register reference
REG_LIMIT        = REG_BASE + GP_REGS                   # first invalid operand word

CHAR_MASK        = 0xFF                                 # terminal carries 8-bit codes
EOF_SENTINEL     = 0
