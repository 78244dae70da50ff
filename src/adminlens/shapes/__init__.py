"""Response-shape classification -- decide how a JSON payload should be shown.

This sub-package runs once per API response.  It finds the record
collection inside the payload, infers field roles from a bounded sample of
records, and returns a :class:`~adminlens.models.ClassifiedData` verdict.

Typical usage::

    from adminlens.shapes import classify_response

    verdict = classify_response(payload, op.response_schema, op.summary)
    if verdict.shape is DataShape.TIME_SERIES:
        chart(verdict.items, x=verdict.fields.date_field, y=verdict.fields.metric_fields)

Sub-modules:

* :mod:`~adminlens.shapes.items` -- Envelope-aware record extraction.
* :mod:`~adminlens.shapes.rules` -- Predicates behind the field rule table.
* :mod:`~adminlens.shapes.fields` -- Field role detection.
* :mod:`~adminlens.shapes.classifier` -- The :func:`classify_response`
  decision sequence.
"""

from adminlens.shapes.classifier import classify_response
from adminlens.shapes.fields import detect_fields
from adminlens.shapes.items import extract_items

__all__ = ["classify_response", "detect_fields", "extract_items"]
