"""Release resource models, status conditions and admission webhook logic."""

__version__ = "0.1.0"

__all__ = ["admission", "author", "conditions", "meta", "release", "resources", "validation"]