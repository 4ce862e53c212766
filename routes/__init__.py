"""HTTP routers of the book review API."""
