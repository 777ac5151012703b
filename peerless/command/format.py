SEPARATOR_WIDTH = 80
BYTES_PER_KB = 1024
SIZE_UNITS = ("KB", "MB", "GB", "TB", "PB")


def format_size(size: int) -> str:
    if size < BYTES_PER_KB:
        return f"{size} B"
    divisor = BYTES_PER_KB
    exponent = 0
    remaining = size // BYTES_PER_KB
    while remaining >= BYTES_PER_KB and exponent < len(SIZE_UNITS) - 1:
        divisor *= BYTES_PER_KB
        exponent += 1
        remaining //= BYTES_PER_KB
    return f"{size / divisor:.2f} {SIZE_UNITS[exponent]}"


def separator(char: str = "-") -> str:
    return char * SEPARATOR_WIDTH
