"""Product catalog service: JSON API and HTML listing over the `product` table."""

__version__ = "1.0.0"
