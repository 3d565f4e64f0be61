"""Exception types raised by faqrag."""


class FAQRagError(Exception):
    """Base class for all faqrag errors."""


class ConfigError(FAQRagError, ValueError):
    """A required setting is missing or invalid."""


class NotFoundError(FAQRagError, FileNotFoundError):
    """A required file (the document or the persisted index) does not exist."""


class IndexIOError(FAQRagError, OSError):
    """The vector index could not be written."""


class ProviderError(FAQRagError):
    """An embedding or completion provider call failed."""


class EvaluationParseError(FAQRagError, ValueError):
    """The evaluator response did not contain a parseable JSON object."""


class LogIOError(FAQRagError, OSError):
    """The query log could not be read or written."""
