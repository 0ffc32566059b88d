"""namereg - Two-phase name registration against a Namecoin daemon."""

__version__ = "0.1.0"
