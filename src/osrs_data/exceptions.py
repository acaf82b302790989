"""
Custom exceptions for the OSRS wiki mirror.

Provides specific error types for the failure modes of a sync or extraction
run so callers can decide which ones skip a page and which ones abort.
"""


class OsrsDataError(Exception):
    pass


class ConfigurationError(OsrsDataError):
    pass


class WikiError(OsrsDataError):
    pass


class StorageError(OsrsDataError):
    pass


class TemplateParseError(OsrsDataError):
    def __init__(self, page_id: int, title: str, reason: str):
        self.page_id = page_id
        self.title = title
        super().__init__(f"Page {page_id} ({title}): {reason}")


class ResolutionError(OsrsDataError):
    def __init__(self, name: str):
        self.name = name
        super().__init__(f"No item matches '{name}'")
