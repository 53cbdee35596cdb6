"""fileiter Core - Shared constants, errors and validation.

Import specific functions from submodules:
    from fileiter.core import constants
    from fileiter.core import datemath
    from fileiter.core import errors
    from fileiter.core import validators
"""

from fileiter.core import constants, datemath, errors, validators

__all__ = [
    "constants",
    "datemath",
    "errors",
    "validators",
]
