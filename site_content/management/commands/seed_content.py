import logging

from django.core.management.base import BaseCommand, CommandError

from site_content.errors import AllTiersExhausted
from site_content.schema import merge, synthesize_default
from site_content.store import build_content_store

logger = logging.getLogger(__name__)

UNSPLASH = "https://images.unsplash.com/{}?q=80&w=800&auto=format&fit=crop"

STARTER_CATEGORIES = [
    {"id": "hot-drinks", "name": "Hot Drinks", "description": "Our signature hot coffee beverages"},
    {"id": "cold-drinks", "name": "Cold Drinks", "description": "Refreshing cold coffee drinks"},
    {"id": "savory-crepes", "name": "Savory Crepes", "description": "Delicious savory crepe options"},
    {"id": "sweet-crepes", "name": "Sweet Crepes", "description": "Sweet and decadent crepe varieties"},
    {"id": "smoothies", "name": "Smoothies", "description": "Fresh and healthy smoothie options"},
    {"id": "breakfast-sandwich", "name": "Breakfast Sandwich", "description": "Breakfast sandwich options"},
]


def _sized(*prices):
    return [{"size": size, "price": price} for size, price in zip(("12oz", "16oz", "20oz"), prices)]


STARTER_PRODUCTS = [
    {
        "id": "cafe-au-lait",
        "name": "Cafe Au Lait",
        "description": "Rich coffee and steamed milk in perfect harmony",
        "category": "hot-drinks",
        "image": UNSPLASH.format("photo-1541167760496-1628856ab772"),
        "sizes": _sized("4.50", "4.75", "5.25"),
    },
    {
        "id": "coffee",
        "name": "Coffee",
        "description": "Fresh brewed coffee",
        "category": "hot-drinks",
        "image": UNSPLASH.format("photo-1497935586351-b67a49e012bf"),
        "sizes": _sized("3.25", "3.75", "4.25"),
    },
    {
        "id": "espresso",
        "name": "Espresso",
        "description": "Rich, intense shot with perfect crema",
        "category": "hot-drinks",
        "image": UNSPLASH.format("photo-1579992357154-faf4bde95b3d"),
        "price": "3.00",
    },
    {
        "id": "latte",
        "name": "Latte",
        "description": "Velvety steamed milk poured over espresso",
        "category": "hot-drinks",
        "image": UNSPLASH.format("photo-1655012735888-fd03a5c31c53"),
        "sizes": _sized("4.75", "5.25", "5.75"),
    },
    {
        "id": "chai-latte",
        "name": "Chai Latte",
        "description": "Spiced chai tea with steamed milk",
        "category": "hot-drinks",
        "image": UNSPLASH.format("photo-1578662996442-48f60103fc96"),
        "sizes": _sized("4.25", "4.75", "5.50"),
    },
    {
        "id": "cold-brew",
        "name": "Cold Brew",
        "description": "Slow-steeped for 20 hours for smooth, bold flavor",
        "category": "cold-drinks",
        "image": UNSPLASH.format("photo-1461023058943-07fcbe16d735"),
        "sizes": [{"size": "16oz", "price": "5.00"}, {"size": "20oz", "price": "5.75"}],
    },
    {
        "id": "ham-cheese-crepe",
        "name": "Ham & Cheese Crepe",
        "description": "Smoked ham, gruyere and bechamel",
        "category": "savory-crepes",
        "image": "",
        "price": "9.50",
    },
    {
        "id": "nutella-banana-crepe",
        "name": "Nutella Banana Crepe",
        "description": "Hazelnut spread with fresh banana",
        "category": "sweet-crepes",
        "image": "",
        "price": "8.25",
    },
]

STARTER_CONTENT = {
    "hero": {
        "title": "A Taste of Liquid Gold",
        "subtitle": "Experience coffee that transcends the ordinary. Crafted with passion, brewed to perfection.",
        "cta": "Explore Our Menu",
    },
    "about": {
        "title": "About Au Lait",
        "content": "We are passionate about delivering the finest coffee experience to our customers.",
    },
    "contact": {
        "address": "123 Coffee Street, Bean City",
        "phone": "+1 (555) 123-4567",
        "email": "info@aulait.com",
        "hours": "Mon-Fri: 7AM-8PM, Sat-Sun: 8AM-6PM",
    },
    "categories": STARTER_CATEGORIES,
    "products": STARTER_PRODUCTS,
}


class Command(BaseCommand):
    help = "Write the Au Lait starter menu and copy through the content store."

    def add_arguments(self, parser):
        parser.add_argument(
            "--force",
            action="store_true",
            help="Overwrite content that is already stored.",
        )

    def handle(self, *args, **options):
        store = build_content_store()
        current = store.read()
        if current.initialized and not options["force"]:
            self.stdout.write(f"Content already stored in {current.tier} tier; use --force to overwrite.")
            return

        document = merge(synthesize_default(), STARTER_CONTENT)
        try:
            report = store.write(document)
        except AllTiersExhausted as e:
            raise CommandError(f"Seeding failed, no tier accepted the write ({', '.join(e.tiers_attempted)})")

        if report.degraded:
            where = "local cache" if report.stored_in == ["local"] else ", ".join(report.stored_in)
            self.stdout.write(self.style.WARNING(
                f"Seeded into {where} only; primary tier {report.primary_tier} is unavailable."
            ))
        else:
            self.stdout.write(self.style.SUCCESS(f"Seeded content into: {', '.join(report.stored_in)}"))
