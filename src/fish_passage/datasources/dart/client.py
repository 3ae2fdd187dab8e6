"""DART (Columbia Basin Research) URLs and source-format constants.

DART's adult passage reports are plain HTML pages, one per (year, project)
query.  Column names below are the normalized forms produced by
``analysis.tidy.normalize_column_name``.

Reports: https://www.cbr.washington.edu/dart/query/adult_daily
"""

CATALOG_URL = "https://www.cbr.washington.edu/dart/query/adult_daily"

# ``{year}`` and ``{site}`` are substituted; the rest is fixed: HTML output,
# full calendar year (Jan 1 - Dec 31), no run filter.
QUERY_TEMPLATE = (
    "https://www.cbr.washington.edu/dart/cs/php/rpt/adult_daily.php"
    "?sc=1&outputFormat=html&year={year}&proj={site}&span=no"
    "&startdate=1%2F1&enddate=12%2F31&run="
)

# Bonneville counts start in 1938; the first full year is 1939.
FIRST_YEAR = 1939
LAST_YEAR = 2021

# Columns shared by every species row after the wide -> long reshape
PROJECT_COLUMN = "project"
DATE_COLUMN = "date"
TEMP_COLUMN = "temp_c"
RUN_COLUMN = "run"
ID_COLUMNS = (PROJECT_COLUMN, DATE_COLUMN, TEMP_COLUMN, RUN_COLUMN)

# Recognized species columns, in report order
SPECIES_COLUMNS = (
    "chinook",
    "jack_chinook",
    "steelhead",
    "wild_steelhead",
    "sockeye",
    "coho",
    "jack_coho",
    "shad",
    "lamprey",
    "chum",
    "pink",
)

# Abbreviated or legacy headers seen in DART reports -> normalized name
COLUMN_ALIASES = {
    "proj": "project",
    "chin": "chinook",
    "jchin": "jack_chinook",
    "jchinook": "jack_chinook",
    "stlhd": "steelhead",
    "wstlhd": "wild_steelhead",
    "wildsteelhead": "wild_steelhead",
    "sock": "sockeye",
    "jcoho": "jack_coho",
    "lmpry": "lamprey",
    "tempc": "temp_c",
    "temp": "temp_c",
    "temperature": "temp_c",
    "temperature_c": "temp_c",
    "run_type": "run",
    "run_name": "run",
}

# Values in the date column that mark non-data rows (compared lowercased)
SENTINEL_LABELS = frozenset({"", "date", "project", "total", "totals"})
