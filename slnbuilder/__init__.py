"""slnbuilder - Generate Visual Studio solutions from a project's reference closure."""

__version__ = "0.1.0"

from slnbuilder.pipeline import generate_solution, run_pipeline  # noqa: E402

__all__ = ["generate_solution", "run_pipeline", "__version__"]
