__all__ = ["cssmin", "rewrite", "sass"]
