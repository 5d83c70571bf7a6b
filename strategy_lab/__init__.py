"""
Strategy lab: walk-forward evaluation of stock selection strategies.

Pipeline: bars -> indicators -> candidates -> signals -> trades -> metrics -> scorecard.
"""

__version__ = "0.1.0"
