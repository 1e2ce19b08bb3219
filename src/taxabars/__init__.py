from __future__ import annotations

"""
Taxabars: taxonomic view projection for stacked abundance bar plots.
"""

__version__ = "0.3.0"
