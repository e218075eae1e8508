import logging

import requests
from django.conf import settings
from django.core.management.base import BaseCommand, CommandError
from tqdm import tqdm

from catalog.schema import CATEGORIES, InvalidComponent, component_from_record
from catalog.services import ensure_slug, model_fields_from_record, model_for

logger = logging.getLogger(__name__)

API_URL = "https://cdn.contentful.com/spaces/{space}/environments/{environment}/entries"

CONTENT_TYPES = {
    "case": "pcCase",
    "motherboard": "pcMotherboard",
    "cpu": "pcCpu",
    "gpu": "pcGpu",
    "ram": "pcRam",
    "storage": "pcStorage",
    "psu": "pcPsu",
    "cooling": "pcCooling",
}

PAGE_SIZE = 100


def fetch_entries(session, url, token, content_type, page_size=PAGE_SIZE):
    """Yield every entry of ``content_type``, following skip/limit paging."""
    skip = 0
    while True:
        resp = session.get(
            url,
            params={
                "access_token": token,
                "content_type": content_type,
                "limit": page_size,
                "skip": skip,
            },
            timeout=15,
        )
        resp.raise_for_status()
        data = resp.json()
        items = data.get("items", [])
        yield from items
        skip += len(items)
        if not items or skip >= data.get("total", 0):
            return


class Command(BaseCommand):
    help = "Pull catalog components from the Contentful delivery API"

    def add_arguments(self, parser):
        parser.add_argument(
            "--category",
            choices=CATEGORIES,
            action="append",
            help="Only sync this category (repeatable)",
        )
        parser.add_argument("--dry-run", action="store_true")

    def handle(self, *args, **options):
        space = getattr(settings, "CONTENTFUL_SPACE_ID", "")
        token = getattr(settings, "CONTENTFUL_ACCESS_TOKEN", "")
        environment = getattr(settings, "CONTENTFUL_ENVIRONMENT", "master")
        if not space or not token:
            raise CommandError(
                "CONTENTFUL_SPACE_ID and CONTENTFUL_ACCESS_TOKEN must be set"
            )
        url = API_URL.format(space=space, environment=environment)
        categories = options["category"] or list(CONTENT_TYPES)
        dry_run = options["dry_run"]

        totals = {"created": 0, "updated": 0, "skipped": 0}
        with requests.Session() as session:
            for category in categories:
                try:
                    entries = list(
                        fetch_entries(session, url, token, CONTENT_TYPES[category])
                    )
                except requests.RequestException as e:
                    raise CommandError(f"Contentful request for {category} failed: {e}")
                self._sync_category(category, entries, dry_run, totals)

        summary = "Contentful sync: {created} created, {updated} updated, {skipped} skipped".format(
            **totals
        )
        if dry_run:
            self.stdout.write(self.style.WARNING("[DRY-RUN] " + summary))
        else:
            self.stdout.write(self.style.SUCCESS(summary))

    def _sync_category(self, category, entries, dry_run, totals):
        Model = model_for(category)
        valid_fields = {f.name for f in Model._meta.fields} - {"id"}
        for entry in tqdm(entries, desc=f"Syncing {category}", disable=not entries):
            entry_id = (entry.get("sys") or {}).get("id")
            data = model_fields_from_record(
                category, entry.get("fields") or {}, valid_fields
            )
            ensure_slug(category, data)
            if not entry_id or not data.get("name"):
                totals["skipped"] += 1
                logger.info("Skipping %s entry %s: no id or name", category, entry_id)
                continue
            try:
                component_from_record(category, data, component_id=entry_id)
            except InvalidComponent as e:
                totals["skipped"] += 1
                logger.warning("Skipping %s entry %s: %s", category, entry_id, e)
                continue
            data["contentful_id"] = entry_id
            if dry_run:
                self.stdout.write(f"[DRY-RUN] {category} {entry_id}: {data}")
                continue
            _, created = Model.objects.update_or_create(
                contentful_id=entry_id, defaults=data
            )
            totals["created" if created else "updated"] += 1
