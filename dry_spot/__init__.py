"""
Dry Spot Finder

Finds, within a radius of a place, the nearby point most likely to have dry
weather today.

Architecture:
    geo.py        - Coordinates and candidate generation (origin + 8 compass points)
    evaluation.py - Dryness score per forecast, best-site ranking
    search.py     - Concurrent fetch/evaluate/rank orchestration, sessions
    providers/    - External collaborators:
                    * geocoding.py - Open-Meteo place name lookup
                    * wttr.py      - wttr.in day-one forecast (default)
                    * open_meteo.py - Open-Meteo day-one forecast
    transport.py  - httpx fetch with timeout, proxy rewriting, retries
    resilience.py - Retry/backoff and error categorisation
    report.py     - Console rendering

Entry Point:
    main.py - python main.py "Berlin" --radius 10
"""

__version__ = "1.0.0"
