# Standardized Cosmos DB client implementation

import os
import time
import logging
import backoff
from functools import lru_cache
from typing import Optional, List, Dict, Any
from azure.cosmos import CosmosClient, exceptions
from azure.cosmos.container import ContainerProxy
from launchos.specs.common.errors import ConfigurationError


class RetryableCosmosError(Exception):
    """Indicates a Cosmos DB operation that should be retried"""
    pass


def _raise_if_retryable(exc: exceptions.CosmosHttpResponseError, action: str) -> None:
    if exc.status_code in (429, 503):  # Too Many Requests or Service Unavailable
        error_msg = f"Retryable error {action}: {exc}"
        logging.warning(error_msg)
        raise RetryableCosmosError(error_msg) from exc


class CosmosDBClient:
    # Max retries and timeout configuration
    MAX_RETRIES = 3
    OPERATION_TIMEOUT = 10.0    # 10s

    def __init__(self):
        """Initialize the Cosmos DB client with connection settings and retry policy"""
        self.connection_string = os.environ.get("COSMOS_DB_CONNECTION_STRING")
        self.database_name = os.environ.get("COSMOS_DB_NAME")

        if not self.connection_string or not self.database_name:
            raise ConfigurationError("Missing Cosmos DB connection string or database name")

        self.client = CosmosClient.from_connection_string(
            self.connection_string,
            retry_total=self.MAX_RETRIES
        )
        self.database = self.client.get_database_client(self.database_name)

    def get_container(self, container_name: str) -> ContainerProxy:
        """
        Get a container by name with environment variable override

        COSMOS_DB_CONTAINER_<NAME> replaces the logical name, e.g.
        COSMOS_DB_CONTAINER_PROJECTS=launch-projects.
        """
        env_container_name = os.environ.get(f"COSMOS_DB_CONTAINER_{container_name.upper()}")
        actual_name = env_container_name or container_name
        return self.database.get_container_client(actual_name)

    @backoff.on_exception(
        backoff.expo,
        RetryableCosmosError,
        max_tries=MAX_RETRIES,
        max_time=OPERATION_TIMEOUT
    )
    def get_item(
        self,
        container_name: str,
        item_id: str,
        partition_key: Optional[str] = None
    ) -> Optional[Dict[str, Any]]:
        """
        Get an item by ID

        Args:
            container_name: Name of the container
            item_id: ID of the item to retrieve
            partition_key: Optional partition key (defaults to item_id)

        Returns:
            The item if found, None if not found

        Raises:
            RetryableCosmosError: If operation should be retried
        """
        container = self.get_container(container_name)

        try:
            # Query first so containers partitioned on another path still resolve
            logging.debug(f"Querying for item '{item_id}' in container '{container_name}'")
            items = list(container.query_items(
                query="SELECT * FROM c WHERE c.id = @id",
                parameters=[{"name": "@id", "value": item_id}],
                enable_cross_partition_query=True
            ))
            if items:
                return items[0]

            logging.debug("No items found via query, attempting direct read")
            return container.read_item(
                item=item_id,
                partition_key=partition_key or item_id
            )

        except exceptions.CosmosResourceNotFoundError:
            logging.debug(f"Item not found: {item_id}")
            return None
        except exceptions.CosmosHttpResponseError as e:
            _raise_if_retryable(e, f"reading item '{item_id}'")
            logging.error(
                "Unexpected error reading item",
                extra={
                    "container": container_name,
                    "itemId": item_id,
                    "error": str(e),
                    "databaseName": self.database_name,
                }
            )
            raise

    @backoff.on_exception(
        backoff.expo,
        RetryableCosmosError,
        max_tries=MAX_RETRIES,
        max_time=OPERATION_TIMEOUT
    )
    def query_items(
        self,
        container_name: str,
        query: str,
        parameters: Optional[List[Dict[str, Any]]] = None
    ) -> List[Dict[str, Any]]:
        """
        Query items with parameterized queries for safety

        Args:
            container_name: Name of the container
            query: The query to execute (use @param syntax for parameters)
            parameters: List of parameter dictionaries with 'name' and 'value'

        Returns:
            List of matching items
        """
        container = self.get_container(container_name)
        try:
            return list(container.query_items(
                query=query,
                parameters=parameters or [],
                enable_cross_partition_query=True
            ))
        except exceptions.CosmosHttpResponseError as e:
            _raise_if_retryable(e, f"querying '{container_name}'")
            raise

    @backoff.on_exception(
        backoff.expo,
        RetryableCosmosError,
        max_tries=MAX_RETRIES,
        max_time=OPERATION_TIMEOUT
    )
    def upsert_item(
        self,
        container_name: str,
        item: Dict[str, Any]
    ) -> Dict[str, Any]:
        """
        Create or update an item (whole-document overwrite)

        Args:
            container_name: Name of the container
            item: The item to upsert

        Returns:
            The created/updated item
        """
        container = self.get_container(container_name)
        try:
            return container.upsert_item(body=item)
        except exceptions.CosmosHttpResponseError as e:
            _raise_if_retryable(e, f"upserting item '{item.get('id')}'")
            raise

    @backoff.on_exception(
        backoff.expo,
        RetryableCosmosError,
        max_tries=MAX_RETRIES,
        max_time=OPERATION_TIMEOUT
    )
    def delete_item(
        self,
        container_name: str,
        item_id: str,
        partition_key: Optional[str] = None
    ) -> None:
        """
        Delete an item by ID with retries

        Args:
            container_name: Name of the container
            item_id: ID of the item to delete
            partition_key: Optional partition key (defaults to item_id)

        Raises:
            RetryableCosmosError: If operation should be retried
        """
        start_time = time.time()
        container = self.get_container(container_name)

        try:
            container.delete_item(item=item_id, partition_key=partition_key or item_id)
            logging.debug(f"Successfully deleted item '{item_id}' in {time.time() - start_time:.2f}s")

        except exceptions.CosmosResourceNotFoundError:
            # Item doesn't exist, treat as success but log for tracking
            logging.info(f"Item '{item_id}' not found during delete - already deleted")

        except exceptions.CosmosHttpResponseError as e:
            _raise_if_retryable(e, f"deleting item '{item_id}'")
            logging.error(f"Error deleting item '{item_id}': {e}")
            raise


# Singleton instance with caching
@lru_cache(maxsize=1)
def get_cosmos_client() -> CosmosDBClient:
    """Get or create the singleton CosmosDBClient instance"""
    return CosmosDBClient()
