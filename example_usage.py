"""
Example usage of the search builder against a local Redis Stack server.

Seeds a few hashes, creates an index over them and runs two aggregations.
"""

import os

from dotenv import load_dotenv
from redis import Redis

from search_builder import (
    AggregateQuery,
    Reducer,
    SearchClient,
    SearchIndex,
    SearchSettings,
    Structure,
    configure_logging,
)

load_dotenv()

DEFAULT_REDIS_URL = os.getenv("REDIS_URL", "redis://localhost:6379/0")
DEFAULT_INDEX_NAME = os.getenv("EXAMPLE_INDEX_NAME", "example-documents")
DEFAULT_RECORD_PREFIX = os.getenv("EXAMPLE_RECORD_PREFIX", "example-document")


def seed_documents(redis_client: Redis):
    """Store five demo hashes with scores 1..5."""
    for score in range(1, 6):
        redis_client.hset(
            f"{DEFAULT_RECORD_PREFIX}:{score}",
            mapping={"score": score, "documentType": "demo"},
        )


def example_1_create_index(client: SearchClient):
    """
    Example 1: Index definition

    Tests:
    - Hash structure
    - Key prefix
    - Schema with a numeric and a text field
    """
    print("\n" + "=" * 80)
    print("EXAMPLE 1: Create index")
    print("=" * 80)

    definition = (
        SearchIndex.on(Structure.HASH)
        .for_keys_with_prefix(f"{DEFAULT_RECORD_PREFIX}:")
        .with_schema(
            lambda f: f.numeric("score", sortable=True),
            lambda f: f.text("documentType"),
        )
        .build()
    )

    print(f"\n{definition.render(DEFAULT_INDEX_NAME)}")
    print(f"Reply: {client.create_index(DEFAULT_INDEX_NAME, definition)}")


def example_2_sum_by_document_type(client: SearchClient):
    """
    Example 2: GROUPBY with a SUM reducer

    Tests:
    - LOAD of a property
    - GROUPBY with an aliased reducer
    - Decoding records
    """
    print("\n" + "=" * 80)
    print("EXAMPLE 2: Total score per document type")
    print("=" * 80)

    aggregation = (
        AggregateQuery.on(DEFAULT_INDEX_NAME)
        .query("*")
        .load("@score")
        .group_by("@documentType", reducers=[Reducer.sum("@score").as_("total")])
        .build()
    )

    print(f"\n{aggregation.render()}")
    result = client.aggregate(aggregation)

    print(f"\nRecords: {result.record_count}")
    for record in result:
        print(f"  {record['documentType']}: {int(record['total'])}")


def example_3_pipeline(client: SearchClient):
    """
    Example 3: Multi-stage pipeline

    Tests:
    - APPLY computed property
    - FILTER on the computed property
    - SORTBY with MAX
    - LIMIT
    """
    print("\n" + "=" * 80)
    print("EXAMPLE 3: Apply, filter, sort and limit")
    print("=" * 80)

    aggregation = (
        AggregateQuery.on(DEFAULT_INDEX_NAME)
        .load("@score", "@documentType")
        .apply("@score * 10", "scaled")
        .filter("@scaled > 20")
        .sort_by(("@scaled", "DESC"), max=3)
        .limit(0, 3)
        .build()
    )

    print(f"\n{aggregation.render()}")
    result = client.aggregate(aggregation)

    for i, record in enumerate(result, 1):
        print(f"  {i}. {record.to_dict()}")


if __name__ == "__main__":
    redis_client = Redis.from_url(DEFAULT_REDIS_URL, decode_responses=True)
    seed_documents(redis_client)

    settings = SearchSettings.from_env()
    configure_logging(settings.log_level)
    client = SearchClient.from_redis(DEFAULT_REDIS_URL, settings=settings)

    example_1_create_index(client)
    example_2_sum_by_document_type(client)
    example_3_pipeline(client)
