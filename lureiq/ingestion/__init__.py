"""
Ingestion layer — best-effort clients for the external data sources.

Submodules:
  weather_client     — Open-Meteo hourly precipitation/temperature + sunrise/sunset
  geocoding_client   — ZIP code → coordinates (Zippopotam.us)
  weights_client     — optional hosted base-weight overrides
  collector_client   — bulk upload of queued feedback records
  location           — device location providers
  exceptions         — client error taxonomy

Endpoint placement (.env, gitignored):
  LUREIQ_WEIGHTS_URL     — hosted {"weights": {...}} document
  LUREIQ_COLLECTOR_URL   — feedback collector endpoint
"""
