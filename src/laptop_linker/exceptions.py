"""Exception types raised across the laptop_linker boundary.

Data-quality problems (unparseable titles, missing detail fields, junk prices)
never raise; they degrade to empty sentinels. Only configuration and input-file
problems surface as exceptions.
"""


class LaptopLinkerError(Exception):
    """Base class for all laptop_linker errors."""


class VocabularyError(LaptopLinkerError):
    """The vocabulary file is missing, unreadable or structurally invalid."""


class InputError(LaptopLinkerError):
    """An input listing file is not a JSON array of objects."""
