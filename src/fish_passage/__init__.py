"""Fish Passage - long-term adult fish counts at Columbia basin dams.

Architecture::

    datasources/   DART reporting tool (site catalog, query URLs, batch fetch)
    store.py       Tiered data store (reference → historical → derived)
    analysis/      Consolidation, tidy reshape, pure aggregations
    renderers/     Pure data → Plotly figures and HTML pages
    flows/         Prefect orchestration (fetch writes checkpoint, build renders site)
    services/      Shared utilities (HTTP client with retry)

Data flow: catalog → query targets → fetch → consolidate → checkpoint CSV
→ tidy → aggregate → renderers → derived/site/
"""

__version__ = "0.1.0"

from fish_passage.config import Settings
from fish_passage.schemas import FilterState, QueryTarget, Site

__all__ = ["FilterState", "QueryTarget", "Settings", "Site", "__version__"]
