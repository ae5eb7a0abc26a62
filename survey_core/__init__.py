"""Core (UI-agnostic) survey table logic.

This package contains:
- the table builder (XLSX question sheets -> long-format CSV)
- display labels for demographic codes
- dashboard filter normalization
- panel compute functions (JSON-serializable payloads)
- chart helpers (Altair -> Vega-Lite spec dict)
"""

__version__ = "0.1.0"
