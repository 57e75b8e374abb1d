"""Background discovery of candidate paths."""

from .crawler import batched, list_repositories, run_external_program

__all__ = [
    "batched",
    "list_repositories",
    "run_external_program",
]
