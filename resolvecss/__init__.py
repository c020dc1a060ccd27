__version__ = "0.1.0"

from .value import (  # noqa: E402
    Capabilities,
    Options,
    make_transformer,
    tokenize,
    value_processor,
)

__all__ = ["Capabilities", "Options", "make_transformer", "tokenize", "value_processor"]
