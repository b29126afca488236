"""
Fixed-width integer arithmetic.

Python ints never overflow, so the widths of the ledger (u64 amounts) and of
the invariant / oracle accumulators (u128) are enforced here explicitly. Every
helper is checked: a result outside the target width, a negative result, or a
division by zero raises `MathOverflow` instead of wrapping.

Rounding is always floor (Python `//` on non-negative operands).
"""

from __future__ import annotations

from ...errors import MathOverflow


U64_MAX = (1 << 64) - 1
U128_MAX = (1 << 128) - 1

# Q64.64 fixed point: value = raw / 2**64.
Q64_SHIFT = 64


def _require_int(name: str, value: int) -> None:
    if not isinstance(value, int) or isinstance(value, bool):
        raise TypeError(f"{name} must be an int")


def _bounded(value: int, limit: int, op: str) -> int:
    if value < 0 or value > limit:
        raise MathOverflow(f"{op} result out of range: {value}")
    return value


def require_u64(name: str, value: int) -> int:
    """Validate that `value` is a u64 and return it."""
    _require_int(name, value)
    if not (0 <= value <= U64_MAX):
        raise MathOverflow(f"{name} must fit in u64: {value}")
    return value


def require_u128(name: str, value: int) -> int:
    """Validate that `value` is a u128 and return it."""
    _require_int(name, value)
    if not (0 <= value <= U128_MAX):
        raise MathOverflow(f"{name} must fit in u128: {value}")
    return value


def checked_add(a: int, b: int, *, limit: int = U128_MAX) -> int:
    return _bounded(a + b, limit, "add")


def checked_sub(a: int, b: int, *, limit: int = U128_MAX) -> int:
    return _bounded(a - b, limit, "sub")


def checked_mul(a: int, b: int, *, limit: int = U128_MAX) -> int:
    return _bounded(a * b, limit, "mul")


def checked_div(a: int, b: int, *, limit: int = U128_MAX) -> int:
    if b == 0:
        raise MathOverflow("division by zero")
    if a < 0 or b < 0:
        raise MathOverflow(f"div operands must be non-negative: ({a}, {b})")
    return _bounded(a // b, limit, "div")


def to_u64(value: int) -> int:
    """Narrow a u128 intermediate to u64 (fails instead of truncating)."""
    return _bounded(value, U64_MAX, "u64 narrowing")


def integer_sqrt(n: int) -> int:
    """
    floor(sqrt(n)) for a u128 `n`, returned as a u64.

    Newton's method from x0 = n, x1 = ceil(n / 2), iterating
    x_{k+1} = (x_k + n // x_k) // 2 until the sequence stops decreasing.
    The sequence is strictly decreasing until it reaches the floor root, so the
    loop runs O(log n) times (about 64 iterations worst case for 128-bit n).

    Raises:
        MathOverflow: if `n` is not a u128 or the root does not fit in u64.
    """
    require_u128("n", n)
    if n == 0:
        return 0

    x = n
    # (n + 1) // 2 without leaving the u128 range.
    y = (n >> 1) + (n & 1)
    while y < x:
        x = y
        y = (x + n // x) >> 1

    if x > U64_MAX:
        raise MathOverflow(f"sqrt result does not fit in u64: {x}")
    return x


def sqrt_of_product(a: int, b: int) -> int:
    """floor(sqrt(a * b)) for u64 operands, widened to u128 before multiplying."""
    require_u64("a", a)
    require_u64("b", b)
    return integer_sqrt(checked_mul(a, b))


def q64_ratio(numerator: int, denominator: int) -> int:
    """(numerator << 64) // denominator as an unsigned Q64.64 value (u128)."""
    require_u64("numerator", numerator)
    require_u64("denominator", denominator)
    return checked_div(numerator << Q64_SHIFT, denominator)
