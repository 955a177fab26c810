import os
import sys
import argparse
from decimal import Decimal

import pandas as pd
from sqlalchemy.orm import Session

# Add 'backend' folder to Python path
sys.path.append(os.path.abspath(os.path.dirname(__file__)))

from models.product import Product
from database import SessionLocal, init_db

# Configuration
DATA_DIR = os.path.join(os.path.dirname(__file__), "data_source")
DEFAULT_CSV = os.path.join(DATA_DIR, "products.csv")

# Used when no CSV file is available
SAMPLE_PRODUCTS = [
    ("Widget", "9.99"),
    ("Camiseta básica", "12.50"),
    ("Taza de cerámica", "7.25"),
]
# End Configuration


def read_products_csv(path: str) -> pd.DataFrame:
    """Reads a catalog CSV with 'nombre' and 'precio' columns and cleans it."""
    df = pd.read_csv(path)
    missing = {"nombre", "precio"} - set(df.columns)
    if missing:
        raise ValueError(f"Missing columns in {path}: {', '.join(sorted(missing))}")

    df = df[["nombre", "precio"]].copy()
    df["nombre"] = df["nombre"].astype(str).str.strip()
    df["precio"] = pd.to_numeric(df["precio"], errors="coerce")
    # Drop unnamed, unpriced or negatively priced rows
    df = df[(df["nombre"] != "") & df["precio"].notna() & (df["precio"] >= 0)]
    return df.drop_duplicates(subset=["nombre"])


def load_products(session: Session, csv_path: str | None = DEFAULT_CSV, replace: bool = False) -> int:
    """Seeds the catalog. Returns the number of inserted products."""
    if session.query(Product).count() and not replace:
        print("Catalog is not empty, skipping. Use --replace to overwrite.")
        return 0

    if csv_path and os.path.exists(csv_path):
        df = read_products_csv(csv_path)
        rows = [(r.nombre, str(r.precio)) for r in df.itertuples(index=False)]
    else:
        print(f"No CSV file at {csv_path}, using sample products.")
        rows = SAMPLE_PRODUCTS

    if replace:
        session.query(Product).delete()

    for name, price in rows:
        session.add(Product(name=name, price=Decimal(price).quantize(Decimal("0.01"))))
    session.commit()
    print(f"Inserted {len(rows)} products.")
    return len(rows)


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Seed the product catalog")
    parser.add_argument("--csv", default=DEFAULT_CSV, help="CSV file with nombre,precio columns")
    parser.add_argument("--replace", action="store_true", help="Delete existing products first")
    args = parser.parse_args()

    init_db()
    session = SessionLocal()
    try:
        load_products(session, args.csv, replace=args.replace)
    finally:
        session.close()
