"""fileiter - file discovery and archive-aware file resolution for ingestion pipelines."""

from fileiter.core.constants import FILEITER_VERSION

__version__ = FILEITER_VERSION
