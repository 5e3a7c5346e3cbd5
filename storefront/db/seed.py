"""Demo catalog loaded into an empty database."""

SEED_PRODUCTS: list[dict] = [
    {
        "slug": "farm-fresh-yellow-kernels",
        "title": "Farm-fresh Yellow Kernels",
        "subtitle": "Classic movie-night perfection",
        "price": "5.99",
        "rating": 4.5,
        "rating_count": 214,
        "tags": ["Best Seller"],
        "images": ["https://upload.wikimedia.org/wikipedia/commons/d/d6/Popcorn_-_Studio_-_2011.jpg"],
        "description": (
            "Bright, fluffy farm-fresh yellow kernels, packaged at peak freshness "
            "for the perfect bowl every time."
        ),
        "badges": ["Non-GMO", "Gluten-Free", "Small-Batch"],
    },
    {
        "slug": "white-butterfly-popcorn",
        "title": "White Butterfly Popcorn",
        "subtitle": "Tender & light for extra crunch",
        "price": "6.49",
        "rating": 4.0,
        "rating_count": 134,
        "tags": ["New"],
        "images": [],
        "description": "A delicate pop with big personality, perfect for seasonings and sweet coatings.",
        "badges": ["Vegan", "Air-pop friendly"],
    },
    {
        "slug": "caramel-drizzle-pack",
        "title": "Caramel Drizzle Pack",
        "subtitle": "Sweet, glossy, irresistible",
        "price": "12.99",
        "rating": 4.5,
        "rating_count": 89,
        "tags": ["Limited"],
        "images": [],
        "description": "Everything you need for a quick caramel upgrade at home.",
    },
    {
        "slug": "sea-salt-seasoning",
        "title": "Sea Salt Seasoning",
        "subtitle": "Fine-flake finishing salt",
        "price": "3.25",
        "rating": 4.8,
        "rating_count": 302,
        "tags": ["Seasonings"],
        "images": [],
        "description": "Fine flakes that cling to every kernel.",
    },
]
