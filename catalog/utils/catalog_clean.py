"""Clean a raw catalog CSV export before ``manage.py import_catalog``.

    python -m catalog.utils.catalog_clean --category psu --csv psu.csv

Renames aliased columns to catalog field names, coerces numeric columns
("850W" -> 850), splits a leading brand off the name when the export has no
brand column, adds slugs and drops duplicates.
"""
import argparse
import re

import pandas as pd

from catalog.schema import (
    CATEGORIES,
    FLOAT_FIELDS,
    INT_FIELDS,
    LIST_FIELDS,
    canonical_field,
    cast_number,
    split_list,
)


# -----------------------------
# Slug helpers
# -----------------------------
def slugify(text: str) -> str:
    return re.sub(r"[^a-z0-9]+", "-", str(text).lower()).strip("-")


def build_slug(category: str, brand, name) -> str:
    parts = [category]
    for value in (brand, name):
        if isinstance(value, str) and value.strip():
            parts.append(slugify(value))
    return "-".join(p for p in parts if p)


def split_brand(full_name):
    if not isinstance(full_name, str) or not full_name.strip():
        return None, None
    tokens = full_name.strip().split(" ", 1)
    if len(tokens) == 1:
        return tokens[0], ""
    return tokens[0], tokens[1]


# -----------------------------
# Pipeline
# -----------------------------
def clean_frame(df: pd.DataFrame, category: str, require_price=False) -> pd.DataFrame:
    df = df.rename(columns=lambda c: canonical_field(category, str(c).strip()))
    # Two source columns can map to one field; keep the first.
    df = df.loc[:, ~df.columns.duplicated()]

    for column in df.columns:
        if column in INT_FIELDS or column in FLOAT_FIELDS:
            df[column] = df[column].apply(lambda v, c=column: cast_number(c, v))
        elif column in LIST_FIELDS:
            df[column] = df[column].apply(
                lambda v: ", ".join(split_list(v)) or None if isinstance(v, str) else None
            )

    if "name" in df.columns:
        df = df[df["name"].notna() & (df["name"].astype(str).str.strip() != "")].copy()
        if "brand" not in df.columns:
            df[["brand", "name"]] = df["name"].apply(lambda x: pd.Series(split_brand(x)))

    if require_price and "price" in df.columns:
        df = df[pd.to_numeric(df["price"], errors="coerce").fillna(0) > 0].copy()

    if "slug" not in df.columns or df["slug"].isna().all():
        df["slug"] = df.apply(
            lambda r: build_slug(category, r.get("brand"), r.get("name")),
            axis=1,
        )
    df = df.drop_duplicates(subset=["slug"], keep="first")
    return df.reset_index(drop=True)


def run_pipeline(category, input_file, output_file, require_price=False, debug=False):
    df = pd.read_csv(input_file)
    before = len(df)
    df = clean_frame(df, category, require_price=require_price)
    df.to_csv(output_file, index=False)

    print(f"\n=== {category.upper()} Cleaning Summary ===")
    print(f"Rows in input: {before}")
    print(f"Rows kept: {len(df)} (dropped {before - len(df)})")
    print(f"Cleaned CSV written to {output_file}")
    if debug:
        print("Sample cleaned rows:\n", df.head(5))


# -----------------------------
# CLI
# -----------------------------
def main():
    parser = argparse.ArgumentParser(
        description="Catalog pipeline: canonical columns, numeric coercion, slugs"
    )
    parser.add_argument("--category", required=True, choices=CATEGORIES)
    parser.add_argument("--csv", required=True, help="Path to the raw CSV export")
    parser.add_argument("--output", required=False, help="Path to output CSV")
    parser.add_argument("--require-price", action="store_true")
    parser.add_argument("--debug", action="store_true", help="Print sample rows")
    args = parser.parse_args()

    output_file = args.output or args.csv.replace(".csv", "_cleaned.csv")
    run_pipeline(
        args.category,
        args.csv,
        output_file,
        require_price=args.require_price,
        debug=args.debug,
    )


if __name__ == "__main__":
    main()
