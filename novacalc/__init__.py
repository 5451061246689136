"""NovaCalc: themeable calculator with a flat left-to-right expression engine."""

__version__ = "1.0.0"
