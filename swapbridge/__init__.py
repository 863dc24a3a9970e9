"""SwapBridge Application Package — Loki <-> Binance Chain token bridge.

Invariants:
    - Package root contains no executable code (import side-effects prohibited)
"""

__version__ = "1.0.0"
