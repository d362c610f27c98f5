"""Shared caches: persistent git clones and downloaded files."""

from depsmith.core.cache.downloads import DownloadCache
from depsmith.core.cache.git import GitClient
from depsmith.core.cache.git_cache import Checkout, GitCacheManager

__all__ = ["Checkout", "DownloadCache", "GitCacheManager", "GitClient"]
