#!/usr/bin/env python3
"""Run the external person lookup once, outside Celery.

Usage:
    python scripts/run_person_lookup.py [--url URL] [--dry-run]
"""

import argparse
import logging
import sys

from dotenv import load_dotenv


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Fetch new people from the external directory and save them")
    parser.add_argument("--url", default=None, help="Directory URL (default: PERSON_LOOKUP_URL)")
    parser.add_argument("--dry-run", action="store_true", help="Fetch and print, do not write into DB")
    return parser.parse_args()


def main() -> int:
    load_dotenv()
    args = parse_args()

    from app.directory_client import DirectoryClient
    from app.errors import TransportError
    from app.logging_setup import configure_logging
    from app.services.people import PersonService

    configure_logging()
    logger = logging.getLogger("people.lookup")

    client = DirectoryClient(url=args.url)
    try:
        if args.dry_run:
            people = client.fetch_people()
            for person in people:
                print(person.model_dump_json())
            logger.info("dry run: fetched %s people", len(people))
            return 0

        saved = PersonService(directory_client=client).lookup_and_save_new_person()
        logger.info("saved %s people", len(saved))
        return 0
    except TransportError as e:
        logger.error("lookup failed: %s", e)
        return 2
    finally:
        client.close()


if __name__ == "__main__":
    sys.exit(main())
