"""
Distribution evaluation backends.

cpu: CPUDistributionBackend with per-distribution operation tables.
"""
