from .poisson import IterativeSolver, SolverMethod, ConvergenceResult

__all__ = ["IterativeSolver", "SolverMethod", "ConvergenceResult"]
