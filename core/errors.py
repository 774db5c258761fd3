# core/errors.py

"""Exceptions raised by the PACK reader and writer."""


class PackError(Exception):
    """Base class for every PACK archive error."""
    pass


class OpenFailure(PackError):
    """The archive (or an output path) could not be opened or created."""
    pass


class FormatError(PackError):
    """The file is not a PACK archive: bad magic, revision or short header."""
    pass


class TruncatedTable(FormatError):
    """The file table ended early or declared a malformed name."""
    pass


class DecodeFailure(PackError):
    """An entry's payload could not be turned back into its original bytes."""
    pass


class UnsupportedEntry(DecodeFailure):
    """The entry is empty or stored uncompressed; neither can be read."""
    pass


class EntryNotFound(PackError, KeyError):
    """No entry with the requested name exists in the table."""
    pass


class NameTooLong(PackError, ValueError):
    """An entry name does not fit in the per-entry name budget."""
    pass


class DuplicateEntry(PackError, ValueError):
    """The same entry name was added to a writer twice."""
    pass


class IOFailure(PackError):
    """Reading an input, writing the archive or compressing failed."""
    pass


class CommitOverflow(PackError):
    """The encoded table is larger than the region reserved for it."""
    pass


class WriterStateError(PackError):
    """The writer was used in a state that does not allow the operation."""
    pass
