"""roxiler_stats package.

Serves month-filtered sales statistics over a collection of product
transactions seeded from a remote JSON dump.

Architecture:
- Seed dump -> validated documents -> MongoDB collection (replaced as a unit)
- `store` wraps the collection behind typed predicates
- `aggregate` builds listings, totals, the price histogram and the category
  distribution on top of the store
- `api` exposes the reports over HTTP (FastAPI), `cli` over the command line
"""

__all__ = ["__version__"]
__version__ = "0.1.0"
