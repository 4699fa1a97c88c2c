"""
Exceptions for heirbox
Everything raised on purpose derives from HeirboxError so callers have a single catch
"""


class HeirboxError(Exception):
    # general container for errors
    pass


class ConfigurationError(HeirboxError):
    # raised when the project file is missing, malformed or holds invalid values
    pass


class UnsupportedKDFError(ConfigurationError):
    # raised when the kdf selector is not one of the known variants
    pass


class StorageError(HeirboxError):
    # raised if a filesystem operation on content or dist fails
    pass


class ContentScanError(StorageError):
    # raised when the content root or one of its subdirectories can't be listed
    pass


class InvalidPathError(StorageError):
    # raised when a configured path is unusable (e.g. dist overlapping content)
    pass


class StreamEncryptionError(HeirboxError):
    # raised when reading plaintext or writing ciphertext fails mid-stream
    pass


class IncompleteContentError(HeirboxError):
    # raised when the index is requested over records missing dist/tag
    pass
