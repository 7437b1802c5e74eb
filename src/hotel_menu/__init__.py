"""Hotel menu catalog: category tree, items, variants and CSV bulk import."""

__version__ = "0.1.0"
