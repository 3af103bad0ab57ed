"""
FuelEU Kernel - compliance accounting core

A ledger for ship-year greenhouse-gas compliance balances with:
- Deterministic CB calculation against regulatory intensity targets
- Append-only banking of surplus with FIFO consumption
- All-or-nothing pooling under solvency and exit-condition rules
- Typed errors and structured JSON logging
"""

__version__ = "0.1.0"
