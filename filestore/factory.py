"""Store factory for URI-based store resolution and instantiation.

This module creates FileStore instances from URI strings and lets callers
register factories for additional schemes, so new backends can be wired in
without changing code that only knows the FileStore interface.

Supported URI Schemes:
    - file:///abs/root - LocalFileStore rooted at an absolute path
    - file://rel/root - LocalFileStore rooted relative to the working directory
    - file:// - LocalFileStore rooted at the working directory

Query parameters configure the local store: ``file_perm`` and ``dir_perm``
(octal), ``durable`` and ``strict_paths`` (booleans).

Example:
    >>> from filestore.factory import resolve_store
    >>> store = resolve_store("file:///data/files?file_perm=0640&dir_perm=0750")
    >>> store.config.file_perm == 0o640
    True

"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Callable
from urllib.parse import parse_qs, unquote, urlparse

from .config import LocalConfig

if TYPE_CHECKING:
    from typing import TypeAlias

    from .interfaces import FileStore

    # Type alias for store factory functions
    StoreFactoryFunc: TypeAlias = Callable[[str, dict[str, str]], FileStore]


class StoreFactory:
    """Factory for creating stores from URI strings."""

    def __init__(self) -> None:
        """Initialize the factory with built-in URI scheme handlers."""
        self._factories: dict[str, Callable[[str, dict[str, str]], Any]] = {
            "file": self._create_local_store,
        }

    @property
    def schemes(self) -> list[str]:
        """Registered URI schemes in sorted order."""
        return sorted(self._factories)

    def parse_uri(self, uri: str) -> tuple[str, str, dict[str, str]]:
        """Parse a URI into scheme, path, and query parameters.

        Args:
            uri: URI string to parse

        Returns:
            Tuple of (scheme, path, params) where params is a dict of query parameters

        Raises:
            ValueError: If URI format is invalid

        """
        parsed = urlparse(uri)

        if not parsed.scheme:
            msg = f"Invalid URI: missing scheme in '{uri}'"
            raise ValueError(msg)

        # file://host/path keeps the host as the first relative segment
        if parsed.netloc:
            path = parsed.netloc + (parsed.path or "")
        else:
            path = parsed.path
        path = unquote(path)

        params: dict[str, str] = {}
        if parsed.query:
            parsed_params = parse_qs(parsed.query, keep_blank_values=True)
            params = {k: v[0] for k, v in parsed_params.items()}

        return parsed.scheme, path, params

    def resolve(self, uri: str) -> FileStore:
        """Create a store instance from a URI string.

        Raises:
            ValueError: If URI scheme is unsupported
            ConfigurationError: If store creation fails

        """
        scheme, path, params = self.parse_uri(uri)

        if scheme not in self._factories:
            supported = ", ".join(self.schemes)
            msg = (
                f"Unsupported URI scheme: '{scheme}'. "
                f"Supported schemes: {supported}"
            )
            raise ValueError(msg)

        factory_func = self._factories[scheme]
        return factory_func(path, params)

    def register(
        self,
        scheme: str,
        factory_func: Callable[[str, dict[str, str]], Any],
    ) -> None:
        """Register a custom store factory for a URI scheme.

        Args:
            scheme: URI scheme to register (e.g., "s3", "azure")
            factory_func: Callable that takes (path, params) and returns a FileStore

        """
        if not callable(factory_func):
            msg = "factory_func must be callable"
            raise TypeError(msg)
        self._factories[scheme] = factory_func

    def _create_local_store(
        self,
        path: str,
        params: dict[str, str],
    ) -> FileStore:
        """Create a LocalFileStore from URI components."""
        from .local import LocalFileStore

        config = LocalConfig.from_params(path or None, params)
        return LocalFileStore.from_config(config)


# Global default factory instance
_default_factory = StoreFactory()


def resolve_store(uri: str) -> FileStore:
    """Resolve a store from a URI using the default factory.

    Example:
        >>> store = resolve_store("file:///data/files")
        >>> store = resolve_store("file:///data/files?strict_paths=true")

    """
    return _default_factory.resolve(uri)


def register_store_factory(
    scheme: str,
    factory_func: Callable[[str, dict[str, str]], Any],
) -> None:
    """Register a custom store factory for a URI scheme.

    Example:
        >>> def my_s3_factory(path: str, params: dict) -> FileStore:
        ...     return S3Store(bucket=path, **params)
        >>> register_store_factory("s3", my_s3_factory)

    """
    _default_factory.register(scheme, factory_func)
