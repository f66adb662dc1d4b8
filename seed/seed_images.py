#!/usr/bin/env python3
"""
Seed script to populate a local image store with owner-less images.

Seeded images are administrative uploads: they carry no owner and never
touch the quota ledger.

Run:
    IMAGE_STORE_ROOT=./data python seed/seed_images.py \
      --images-dir ./seed/images \
      --tags seed,sample
"""

import argparse
import sys
from pathlib import Path

from aws_lambda_powertools import Logger

from core.models.config import StoreConfig
from core.models.errors import ImageServiceError
from core.services.factory import build_image_service
from core.utils.mime import detect_mime_type

logger = Logger(service="seed")


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Seed images into the local image store")

    parser.add_argument(
        "--images-dir",
        type=Path,
        default=Path(__file__).parent / "images",
        help="Directory containing image files to upload",
    )
    parser.add_argument(
        "--tags",
        default="seed",
        help="Comma-separated tags attached to every seeded image",
    )
    parser.add_argument(
        "--limit",
        type=int,
        default=None,
        help="Maximum number of images to seed",
    )

    return parser.parse_args()


def seed_images() -> None:
    args = parse_args()

    if not args.images_dir.is_dir():
        logger.error("Images directory not found", extra={"path": str(args.images_dir)})
        sys.exit(1)

    service = build_image_service(StoreConfig.from_env())
    tags = [t.strip() for t in args.tags.split(",") if t.strip()]

    paths = sorted(p for p in args.images_dir.iterdir() if p.is_file())[: args.limit]

    logger.info(
        "Starting seeding process",
        extra={"images_dir": str(args.images_dir), "candidates": len(paths)},
    )

    seeded = 0
    for image_path in paths:
        image_bytes = image_path.read_bytes()

        try:
            mime_type = detect_mime_type(image_bytes)
        except ValueError:
            logger.warning("Skipping non-image file", extra={"path": str(image_path)})
            continue

        try:
            result = service.upload_image(
                file_data=image_bytes,
                mime_type=mime_type,
                original_name=image_path.name,
                privileged=True,
                description=f"Seeded from {image_path.name}",
                tags=tags,
            )
        except ImageServiceError as exc:
            logger.error(
                "Failed to seed image",
                extra={"image": image_path.name, "error": exc.error_code, "message": exc.message},
            )
            continue

        seeded += 1
        logger.info(
            "Seeded image",
            extra={
                "image": image_path.name,
                "image_id": result.image.image_id,
                "short_url": result.short_url,
            },
        )

    logger.info("Seeding completed", extra={"seeded": seeded})


if __name__ == "__main__":
    seed_images()
