"""
Production Python kernels.

These modules are designed to be:
- deterministic (integer-only, floor rounding everywhere),
- width-faithful (u64 amounts, u128 intermediates, checked at every step),
- small surface-area (pure functions, typed results).
"""
