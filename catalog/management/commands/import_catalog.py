import csv
import logging

from django.core.management.base import BaseCommand, CommandError
from tqdm import tqdm

from catalog.schema import CATEGORIES, InvalidComponent, component_from_record
from catalog.services import ensure_slug, model_fields_from_record, model_for

logger = logging.getLogger(__name__)


def has_price(data):
    price = data.get("price")
    return price is not None and float(price) > 0


class Command(BaseCommand):
    help = "Import catalog components of one category from a CSV file"

    def add_arguments(self, parser):
        parser.add_argument("--category", required=True, choices=CATEGORIES)
        parser.add_argument("--csv", required=True)
        parser.add_argument("--dry-run", action="store_true")
        parser.add_argument("--require-price", action="store_true")

    def handle(self, *args, **options):
        category = options["category"]
        csv_path = options["csv"]
        dry_run = options["dry_run"]
        require_price = options["require_price"]

        Model = model_for(category)
        valid_fields = {f.name for f in Model._meta.fields} - {"id"}

        try:
            with open(csv_path, newline="", encoding="utf-8") as f:
                rows = list(csv.DictReader(f))
        except OSError as e:
            raise CommandError(f"Cannot read {csv_path}: {e}")

        count = created = updated = skipped = 0
        for row_idx, row in enumerate(
            tqdm(rows, desc=f"Importing {category}", disable=options["verbosity"] < 1),
            start=1,
        ):
            data = model_fields_from_record(category, row, valid_fields)
            ensure_slug(category, data)

            if not data.get("name"):
                skipped += 1
                logger.info("Row %s skipped: missing name", row_idx)
                continue
            if require_price and not has_price(data):
                skipped += 1
                logger.info("Row %s skipped: missing/zero price", row_idx)
                continue
            try:
                # Rows must survive the schema before they reach the catalog.
                component_from_record(category, data, component_id=data["slug"])
            except InvalidComponent as e:
                skipped += 1
                logger.warning("Row %s skipped: %s", row_idx, e)
                continue

            if dry_run:
                self.stdout.write(f"[DRY-RUN] Row {row_idx} normalized: {data}")
            else:
                _, created_flag = Model.objects.update_or_create(
                    slug=data["slug"], defaults=data
                )
                if created_flag:
                    created += 1
                else:
                    updated += 1
            count += 1

        summary = (
            f"Processed {count} rows for {category}: {created} created, "
            f"{updated} updated, {skipped} skipped"
        )
        if dry_run:
            self.stdout.write(self.style.WARNING("[DRY-RUN] " + summary))
        else:
            self.stdout.write(self.style.SUCCESS(summary))
