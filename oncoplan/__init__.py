"""
OncoPlan — breast-cancer regimen decision and dosage-lock engine.
"""
__version__ = "1.0.0"
