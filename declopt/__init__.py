__title__ = 'declopt'
__license__ = 'MIT'
# Placeholder, modified by dynamic-versioning.
__version__ = "0.0.0"

import logging

from .converters import MAX_VALUE_LENGTH
from .faults import *
from .fields import *
from .parser import *
from .schema import *
from .usage import *

VersionInfo = __import__("collections").namedtuple("VersionInfo", (
    "major",
    "minor",
    "micro",
    "releaselevel",
    "serial",
    "metadata"
))

# Placeholder, modified by dynamic-versioning.
version_info = VersionInfo(0, 0, 0, "final", 0, "")

# Library logging: silent unless the host configures handlers.
logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = (
    "__title__",
    "__license__",
    "__version__",
    "version_info",
    "MAX_VALUE_LENGTH",
)

# Load the exposed API of every public module (schema/usage are shadowed by their
# homonymous functions, so the modules are looked up by name).
for _module in ("faults", "fields", "schema", "parser", "usage"):
    __all__ += __import__("importlib").import_module("." + _module, __name__).__all__
del _module
