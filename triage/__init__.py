"""Patient risk triage.

Fetches paginated patient records from the clinical API, scores each record
from its vitals, groups patients into alert categories and submits them to the
assessment endpoint.
"""

__version__ = "0.1.0"
