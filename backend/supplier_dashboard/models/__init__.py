from .snapshot import PayloadSnapshot

__all__ = [
    "PayloadSnapshot"
]
