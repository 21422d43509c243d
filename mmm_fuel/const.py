from __future__ import annotations

NOTIFICATION_PRICELIST = "PRICELIST"

CONF_PROVIDER = "provider"
CONF_LAT = "lat"
CONF_LNG = "lng"
CONF_RADIUS = "radius"
CONF_ZIP = "zip"
CONF_TYPES = "types"
CONF_SORT_BY = "sort_by"
CONF_SHOW_OPEN_ONLY = "show_open_only"
CONF_API_KEY = "api_key"
CONF_SECRET = "secret"
CONF_STATION_IDS = "station_ids"
CONF_UPDATE_INTERVAL = "update_interval"

DEFAULT_RADIUS = 5
DEFAULT_TYPES = "diesel"
DEFAULT_SHOW_OPEN_ONLY = False
DEFAULT_UPDATE_INTERVAL = 10 * 60

UNIT_KILOMETER = "kilometer"
UNIT_MILE = "mile"

CURRENCY_EUR = "EUR"
CURRENCY_USD = "USD"
CURRENCY_AUD = "AUD"

PROVIDER_TANKERKOENIG = "tankerkoenig"
PROVIDER_SPRITPREISRECHNER = "spritpreisrechner"
PROVIDER_NSW = "nsw"
PROVIDER_AUTOBLOG = "autoblog"
PROVIDER_GASBUDDY = "gasbuddy"

# Filled value for a fuel type no station reported at all.
UNAVAILABLE = "-"

USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/97.0.4692.99 Safari/537.36"
)
