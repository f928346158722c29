"""Ingestion service entrypoint.

Polls the device through the configured reading source every
POLL_INTERVAL_SEC and persists one reading per minute at most.

Usage: python -m climate.ingest
"""

from climate.ingest.polling import main

if __name__ == "__main__":
    main()
