EMPTY = 0
MIN_VALUE = 1
MAX_VALUE = 9

GRID_SIZE = 9
BOX_SIZE = 3

# Block families, in the order duplicates are reported.
BLOCK_KINDS = ("row", "column", "square")
