# gpi/config.py
import logging
import os

DATA_FILES = {
    "scores": os.environ.get("GPI_DATA_CSV", "data.csv"),
    "boundaries": os.environ.get(
        "GPI_GEOJSON",
        "https://raw.githubusercontent.com/nvkelso/natural-earth-vector/master/geojson/"
        "ne_110m_admin_0_countries.geojson",
    ),
}

# Feature property holding the country name (Natural Earth uses NAME)
BOUNDARY_NAME_KEY = os.environ.get("GPI_GEOJSON_NAME_KEY", "NAME")

# Column names of the score CSV (external contract, case-sensitive)
COLUMNS = {"country": "Country", "score": "GPI", "year": "Year"}

FETCH_TIMEOUT = float(os.environ.get("GPI_FETCH_TIMEOUT", "30"))

# How an ambiguous boundary name resolves back to a dataset name: first | last | reject
ALIAS_POLICY = os.environ.get("GPI_ALIAS_POLICY", "last")

ALL_YEARS = "all"
TREND_TOP_N = 10
BAR_TOP_N = 20
SCORE_AXIS_MAX = 100

NO_DATA_TEXT = "No data available."
ERROR_TEXT = "Could not load data. Check the data sources and try again."

LOG_LEVEL = os.environ.get("GPI_LOG_LEVEL", "INFO")
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level=None):
    logging.basicConfig(level=(level or LOG_LEVEL).upper(), format=LOG_FORMAT)
