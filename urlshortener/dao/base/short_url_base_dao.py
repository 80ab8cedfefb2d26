"""Abstract base class for ShortURL data access objects (DAOs).

This class establishes a consistent contract for all ShortURL DAO implementations,
regardless of the underlying storage mechanism (e.g., Redis, Cloud Datastore, DynamoDB).

Responsibilities:
    - Provide an interface to insert, retrieve, update and delete ShortURLModel objects.
    - Provide the existence lookup used by the short ID generator.
    - Standardize error handling across multiple data store implementations.

Example:
    Typical usage with a datastore-specific implementation:

        >>> from urlshortener.models import ShortURLModel
        >>> from urlshortener.dao.redis import ShortURLRedisDAO

        >>> dao = ShortURLRedisDAO(...)
        >>> dao.exists('a1B2c')
        False

        >>> dao.insert(ShortURLModel(target='https://example.com/blog/article-123', shortcode='a1B2c'))
        >>> dao.get('a1B2c').target
        'https://example.com/blog/article-123'

        >>> dao.update('a1B2c', 'https://example.com/blog/article-124')
        >>> dao.delete('a1B2c')
"""

from abc import ABC, abstractmethod

from urlshortener.models import ShortURLModel


class ShortURLBaseDAO(ABC):
    """Interface for ShortURL data access objects (DAOs).

    Methods:
        insert(short_url: ShortURLModel, **kwargs) -> ShortURLBaseDAO:
            Insert a new ShortURLModel into the data store.
            Raises ShortURLAlreadyExistsError if the shortcode already exists.
            Raises DataStoreError on connection or write failure.

        get(shortcode: str, **kwargs) -> ShortURLModel:
            Retrieve a ShortURLModel from the data store by shortcode.
            Raises ShortURLNotFoundError if the entry does not exist.
            Raises DataStoreError on connection or read failure.

        exists(shortcode: str, **kwargs) -> bool:
            Check whether a shortcode is taken.
            Raises DataStoreError on connection or read failure.

        update(shortcode: str, target: str, **kwargs) -> ShortURLBaseDAO:
            Point an existing shortcode at a new target URL.
            Raises ShortURLNotFoundError if the entry does not exist.

        delete(shortcode: str, **kwargs) -> ShortURLBaseDAO:
            Remove a shortcode.
            Raises ShortURLNotFoundError if the entry does not exist.

    Subclassing:
        Datastore-specific implementations (e.g., ShortURLRedisDAO) must
        extend this class and implement all abstract methods.
    """

    @abstractmethod
    def insert(self, short_url: ShortURLModel, **kwargs) -> 'ShortURLBaseDAO':
        """Insert a new ShortURLModel into the data store.

        Args:
            short_url (ShortURLModel):
                The ShortURLModel instance to be inserted.

            **kwargs:
                Additional keyword arguments, used by data store.

        Returns:
            ShortURLBaseDAO: self (for method chaining)

        Raises:
            ShortURLAlreadyExistsError:
                If a ShortURLModel with the same shortcode already exists

            DataStoreError:
                If there is an error in the data store.
        """
        pass

    @abstractmethod
    def get(self, shortcode: str, **kwargs) -> ShortURLModel:
        """Retrieve a ShortURLModel from the data store by its shortcode.

        Args:
            shortcode (str):
                The shortcode of the ShortURLModel to be retrieved.

            **kwargs:
                Additional keyword arguments, used by data store.

        Returns:
            ShortURLModel: The ShortURLModel instance.

        Raises:
            ShortURLNotFoundError:
                If no ShortURLModel with the given shortcode exists.

            DataStoreError:
                If there is an error in the data store.
        """
        pass

    @abstractmethod
    def exists(self, shortcode: str, **kwargs) -> bool:
        """Check whether a shortcode is already taken.

        Args:
            shortcode (str):
                Shortcode to look up.

            **kwargs:
                Additional keyword arguments, used by data store.

        Returns:
            bool: True if the shortcode exists, False otherwise.

        Raises:
            DataStoreError:
                If there is an error in the data store.
        """
        pass

    @abstractmethod
    def update(self, shortcode: str, target: str, **kwargs) -> 'ShortURLBaseDAO':
        """Point an existing shortcode at a new target URL.

        Args:
            shortcode (str):
                Shortcode of the mapping to update.

            target (str):
                New target URL.

            **kwargs:
                Additional keyword arguments, used by data store.

        Returns:
            ShortURLBaseDAO: self (for method chaining)

        Raises:
            ShortURLNotFoundError:
                If no ShortURLModel with the given shortcode exists.

            DataStoreError:
                If there is an error in the data store.
        """
        pass

    @abstractmethod
    def delete(self, shortcode: str, **kwargs) -> 'ShortURLBaseDAO':
        """Delete a shortcode mapping.

        Args:
            shortcode (str):
                Shortcode of the mapping to delete.

            **kwargs:
                Additional keyword arguments, used by data store.

        Returns:
            ShortURLBaseDAO: self (for method chaining)

        Raises:
            ShortURLNotFoundError:
                If no ShortURLModel with the given shortcode exists.

            DataStoreError:
                If there is an error in the data store.
        """
        pass
