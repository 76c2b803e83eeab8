"""
Example usage of the dbsampler public API against the mock adapter.
"""

from pathlib import Path

from dbsampler import Database, Sampler
from dbsampler_mock import MockAdapter


def example_usage(output_dir: Path = Path(".")):
    """
    Samples the synthetic users table in eager and streaming modes.
    """
    print("dbsampler Public API Example")
    print("=" * 30)

    with Database(MockAdapter()) as database:
        sampler = Sampler(database)

        print("\n1. Sampling rows into memory:")
        for row in sampler.sample_table("users", limit=3):
            print(f"   {row['name']} <{row['email']}> active={row['active']}")

        print("\n2. Eager export:")
        count = sampler.export_table("users", output_dir / "users.ndjson", limit=10)
        print(f"   Wrote {count} rows")

        print("\n3. Streaming export:")
        result = sampler.export_table_stream(
            "users", output_dir / "users_stream.ndjson", limit=1_000, max_chunk_rows=250
        )
        print(f"   Wrote {result.row_count} rows (committed={result.committed})")

        print("\n4. Consuming a stream inside your own transaction:")
        with database.transaction_scope() as tx:
            active = sum(1 for row in sampler.stream_table(tx, "users", limit=30) if row["active"])
        print(f"   {active} of 30 users are active")


if __name__ == "__main__":
    example_usage()
