"""
Prefect flows for the data pipeline.

Flows:
- fetch: DART catalog → query targets → batch fetch → consolidated checkpoint CSV
- build: checkpoint → tidy observations → Plotly report site

Usage (local):
    python -m fish_passage.flows.fetch
    python -m fish_passage.flows.build

Usage (Prefect):
    prefect server start  # Optional, for dashboard
    prefect deployment run 'fetch-data/default'
"""
