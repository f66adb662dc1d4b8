#!/usr/bin/env python3
"""
Cleanup script to remove seeded images from a local image store.

Run:
    IMAGE_STORE_ROOT=./data python seed/cleanup_images.py --tag seed
"""

import argparse

from aws_lambda_powertools import Logger

from core.models.config import StoreConfig
from core.models.image import ImageQuery
from core.services.factory import build_image_service
from core.utils.constants import MAX_PAGE_SIZE

logger = Logger(service="cleanup")


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Delete seeded images from the local image store")

    parser.add_argument(
        "--tag",
        default="seed",
        help="Delete every image carrying this tag",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Only report what would be deleted",
    )

    return parser.parse_args()


def cleanup_images() -> None:
    args = parse_args()
    service = build_image_service(StoreConfig.from_env())

    logger.info("Starting cleanup process", extra={"tag": args.tag, "dry_run": args.dry_run})

    # collect first: deleting while paging would shift page boundaries
    image_ids: list[str] = []
    page = 1
    while True:
        result = service.list_images(ImageQuery(tags=[args.tag], page=page, page_size=MAX_PAGE_SIZE))
        image_ids.extend(record.image_id for record in result.images)
        if not result.pagination.has_more:
            break
        page += 1

    if not image_ids:
        logger.info("No images found for cleanup")
        return

    for image_id in image_ids:
        if args.dry_run:
            logger.info("Would delete image", extra={"image_id": image_id})
            continue

        service.delete_image(image_id)
        logger.info("Deleted image", extra={"image_id": image_id})

    logger.info("Cleanup completed", extra={"matched": len(image_ids)})


if __name__ == "__main__":
    cleanup_images()
