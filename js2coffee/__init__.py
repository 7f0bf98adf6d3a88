"""js2coffee — translate JavaScript into CoffeeScript."""

from .api import (  # noqa: F401
    build,
    build_tree,
    generate,
    js2coffee,
    parse_js,
    transform,
)
from .build_types import BuildOptions, BuildResult, BuildStats  # noqa: F401
from .errors import (  # noqa: F401
    CompileError,
    ParseError,
    UnknownNodeError,
    UnsupportedConstructError,
)
