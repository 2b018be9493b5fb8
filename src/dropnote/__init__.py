"""DropNote — in-memory note search with ranked previews and highlights."""

__version__ = "0.1.0"
