"""PantryFresh grocery storefront: cart, checkout and order lifecycle."""

__version__ = "0.1.0"
