import argparse
import asyncio
import logging
import sys
from pathlib import Path

from sqlalchemy import select

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from infrastructure.database.database import SessionLocal, create_tables, drop_tables, engine  # noqa: E402
from infrastructure.database.models.products import Product  # noqa: E402
from infrastructure.image_store import CloudinaryImageStore, ImageStoreError  # noqa: E402

logger = logging.getLogger("reset_state")


async def purge_product_images() -> None:
    """Best-effort removal of every stored product image before the tables go."""
    store = CloudinaryImageStore()
    if not store.configured:
        logger.info("Cloudinary credentials not configured; skipping image purge.")
        return

    try:
        async with SessionLocal() as session:
            result = await session.execute(select(Product.images))
            urls = [url for images in result.scalars().all() for url in images or []]
    except Exception as exc:
        # Tables may not exist yet on a fresh database.
        logger.info("Could not read product images (%s); skipping image purge.", exc)
        return

    public_ids = [pid for pid in (store.extract_public_id(url) for url in urls) if pid]
    logger.info("Deleting %d stored image(s)...", len(public_ids))
    for public_id in public_ids:
        try:
            await store.destroy(public_id)
        except ImageStoreError as exc:
            logger.warning("Failed to delete image %s: %s", public_id, exc)


async def reset_database() -> None:
    logger.info("Dropping database tables...")
    await drop_tables()

    logger.info("Recreating database tables...")
    await create_tables()


async def main(purge_images: bool) -> None:
    try:
        if purge_images:
            await purge_product_images()
        await reset_database()
        logger.info("State reset complete.")
    finally:
        await engine.dispose()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Drop and recreate the catalog tables.")
    parser.add_argument(
        "--purge-images",
        action="store_true",
        help="Also delete every product image from the hosted image store first.",
    )
    args = parser.parse_args()
    logging.basicConfig(level=logging.INFO, format="%(levelname)s:%(name)s:%(message)s")
    asyncio.run(main(args.purge_images))
