"""
Process simulation backends.

cpu: CPUProcessBackend dispatching to the walk, diffusion and Monte Carlo
simulators.
"""
