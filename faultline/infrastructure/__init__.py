"""
Infrastructure layer package.

Adapters for external systems. Faults raised here are either
AppErrors or the driver's own exceptions, which the central error
handler classifies.
"""
