"""Abstract base class for ShortURL data access objects (DAOs).

This class establishes a consistent contract for all ShortURL DAO implementations,
regardless of the underlying storage mechanism (e.g., Redis or an in-process dict).

Responsibilities:
    - Provide an interface for checking, conditionally inserting and retrieving
      ShortURLModel objects.
    - Standardize error handling across multiple data store implementations.

Example:
    Typical usage with a datastore-specific implementation:

        >>> from shortlinks.models import ShortURLModel
        >>> from shortlinks.dao.redis import ShortURLRedisDAO

        >>> dao = ShortURLRedisDAO(...)

        >>> short_url = ShortURLModel(target='https://example.com/blog/article-123', shortcode='a1b2c3d4')
        >>> dao.set_if_absent(short_url, ttl_seconds=3600)
        True
        >>> dao.set_if_absent(short_url, ttl_seconds=3600)
        False

        >>> dao.get('a1b2c3d4').target
        'https://example.com/blog/article-123'
"""

from abc import ABC, abstractmethod

from shortlinks.models import ShortURLModel


class ShortURLBaseDAO(ABC):
    """Interface for ShortURL data access objects (DAOs).

    Methods:
        exists(shortcode: str, **kwargs) -> bool:
            Check whether a short code currently maps to a URL.
            Raises DataStoreError on connection or read failure.

        set_if_absent(short_url: ShortURLModel, ttl_seconds: int, **kwargs) -> bool:
            Atomically store the mapping only if the short code is free.
            Returns False when the short code is taken.
            Raises DataStoreError on connection or write failure.

        get(shortcode: str, **kwargs) -> ShortURLModel:
            Retrieve a ShortURLModel from the data store by short code.
            Raises ShortURLNotFoundError if the entry does not exist or expired.
            Raises DataStoreError on connection or read failure.

        ping(**kwargs) -> bool:
            Check data store connectivity.

    NOTE:
        - Mappings expire automatically. The DAO does not provide an interface
          to delete or update entries.
    """

    @abstractmethod
    def exists(self, shortcode: str, **kwargs) -> bool:
        """Check whether a short code is currently taken.

        Args:
            shortcode (str):
                The short code to look up.

            **kwargs:
                Additional keyword arguments, used by data store.

        Returns:
            bool: True if the short code maps to an unexpired URL.

        Raises:
            DataStoreError:
                If there is an error in the data store.
        """
        pass

    @abstractmethod
    def set_if_absent(self, short_url: ShortURLModel, ttl_seconds: int, **kwargs) -> bool:
        """Store a short URL mapping only if its short code is free.

        The existence check and the write must happen as one atomic operation
        in the data store, so two concurrent writers can never both succeed
        for the same short code.

        Args:
            short_url (ShortURLModel):
                The mapping to store.

            ttl_seconds (int):
                Time-to-live of the mapping, in seconds.

            **kwargs:
                Additional keyword arguments, used by data store.

        Returns:
            bool: True if the mapping was written, False if the short code was taken.

        Raises:
            DataStoreError:
                If there is an error in the data store. The write must be
                treated as failed, not as successful.
        """
        pass

    @abstractmethod
    def get(self, shortcode: str, **kwargs) -> ShortURLModel:
        """Retrieve a ShortURLModel from the data store by its short code.

        Args:
            shortcode (str):
                The short code of the ShortURLModel to be retrieved.

            **kwargs:
                Additional keyword arguments, used by data store.

        Returns:
            ShortURLModel: The stored mapping.

        Raises:
            ShortURLNotFoundError:
                If no mapping with the given short code exists (or it expired).

            DataStoreError:
                If there is an error in the data store.
        """
        pass

    @abstractmethod
    def ping(self, **kwargs) -> bool:
        """Check connectivity with the data store.

        Returns:
            bool: True if the data store answered.

        Raises:
            DataStoreError:
                If the data store is unreachable.
        """
        pass
