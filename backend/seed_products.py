"""
Load catalog products from a CSV file.

Usage: python seed_products.py [path/to/products.csv]

Columns: productName, price, and optionally productId, oldPrice, plataform, imagemUrl.
Rows whose productId already exists, or repeats an earlier row, are skipped.
Rows without a productId get the next id from the database.
"""

import logging
import sys
from pathlib import Path
import pandas as pd
from sqlalchemy import text
from sqlalchemy.orm import Session
from app.core.database import Base, SessionLocal, engine
from app.core.logging_config import setup_logging
from app.models.product import Product

logger = logging.getLogger(__name__)

DEFAULT_CSV = Path(__file__).parent / "data" / "products.csv"

# CSV header -> Product column
COLUMN_MAP = {
    "productId": "id",
    "productName": "name",
    "oldPrice": "old_price",
    "price": "price",
    "plataform": "platform",
    "imagemUrl": "image_url",
}
REQUIRED_COLUMNS = {"productName", "price"}


def read_products(csv_path: Path) -> pd.DataFrame:
    """Read the CSV and rename its columns to Product attributes"""
    df = pd.read_csv(csv_path)
    missing = REQUIRED_COLUMNS - set(df.columns)
    if missing:
        raise ValueError(f"Missing columns in {csv_path}: {', '.join(sorted(missing))}")

    df = df[[col for col in COLUMN_MAP if col in df.columns]].rename(columns=COLUMN_MAP)
    # Empty cells become NULL instead of NaN
    return df.astype(object).where(pd.notna(df), None)


def _advance_id_sequence(db: Session) -> None:
    """Move the PostgreSQL id sequence past explicitly inserted ids"""
    if db.get_bind().dialect.name != "postgresql":
        return
    db.execute(text(
        "SELECT setval(pg_get_serial_sequence('products', 'id'), "
        "COALESCE((SELECT MAX(id) FROM products), 1))"
    ))


def seed_products(db: Session, csv_path: Path = DEFAULT_CSV) -> int:
    """
    Insert the products from csv_path; returns how many rows were added.

    Rows with a productId go in first, skipping ids already stored or repeated
    in the file. Rows without one are numbered by the database afterwards.
    """
    df = read_products(csv_path)

    records = df.to_dict(orient="records")
    explicit = [record for record in records if record.get("id") is not None]
    implicit = [record for record in records if record.get("id") is None]

    added = 0
    seen: set[int] = set()
    for record in explicit:
        record["id"] = int(record["id"])
        if record["id"] in seen or db.get(Product, record["id"]) is not None:
            logger.info(f"Skipping product {record['id']}: id already taken")
            continue
        seen.add(record["id"])
        db.add(Product(**record))
        added += 1

    if seen:
        db.flush()
        _advance_id_sequence(db)

    for record in implicit:
        record.pop("id", None)
        db.add(Product(**record))
        added += 1

    db.commit()
    return added


def main() -> None:
    setup_logging()
    csv_path = Path(sys.argv[1]) if len(sys.argv) > 1 else DEFAULT_CSV

    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        added = seed_products(db, csv_path)
    finally:
        db.close()
    logger.info(f"Seeded {added} products from {csv_path}")


if __name__ == "__main__":
    main()
