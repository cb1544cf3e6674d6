# Shared Common Library for the PilotLife services.
# Request tracing, JWT player authentication, pagination and the
# uniform DRF error envelope used by every service.

__version__ = "1.0.0"
