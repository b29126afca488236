"""
Kernel layer.

`cpamm/kernels/python/` contains the integer-only pricing and accounting
kernels. They operate on plain ints with explicit fixed-width bounds and know
nothing about pools, ledgers or persistence.
"""
