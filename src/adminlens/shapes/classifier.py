"""Classify a response payload into a presentation shape.

:func:`classify_response` is called once per API response.  It looks only
at the decoded payload (plus an optional schema for field hints) and
returns a :class:`~adminlens.models.ClassifiedData` whose ``shape`` tells
the console which renderer to use:

==============  ==========================================================
``empty``       nothing to show (``None`` or ``[]``)
``scalar``      a bare number, string or boolean
``summary``     one object -- metric cards / key-value panel
``time-series`` dated records dominated by numeric columns -- a chart
``event-log``   dated records with a description -- a timeline
``list``        any other collection -- a table
==============  ==========================================================

The ``time-series`` rule needs a date field, at least one
metric, and at least as many metric fields as all other non-date fields
together, so wide numeric tables with a date column chart as series.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping, Optional

from adminlens.models import ClassifiedData, DataShape, EngineConfig
from adminlens.shapes.fields import detect_fields
from adminlens.shapes.items import extract_items

logger = logging.getLogger(__name__)


def classify_response(
    data: Any,
    schema: Optional[Mapping[str, Any]] = None,
    operation_summary: Optional[str] = None,
    config: Optional[EngineConfig] = None,
) -> ClassifiedData:
    """Classify a decoded JSON payload.

    Args:
        data: The decoded response body.  It is not modified.
        schema: Optional resolved response schema, used for field hints.
        operation_summary: Passed through as ``title``; never used to
            decide the shape.
        config: Engine tunables; defaults apply when omitted.

    Returns:
        A new :class:`~adminlens.models.ClassifiedData`.

    Example::

        >>> classify_response(None).shape
        <DataShape.EMPTY: 'empty'>
        >>> classify_response({"total": 10, "page": 1}).shape
        <DataShape.SUMMARY: 'summary'>
    """
    config = config or EngineConfig()

    if data is None or (isinstance(data, list) and not data):
        return ClassifiedData(shape=DataShape.EMPTY, data=data)

    if not isinstance(data, (list, Mapping)):
        return ClassifiedData(shape=DataShape.SCALAR, data=data)

    is_list = isinstance(data, list)
    items = extract_items(data, config.envelope_keys)

    if not items and not is_list:
        return _verdict(DataShape.SUMMARY, data, operation_summary)

    if len(items) == 1 and not is_list:
        return _verdict(DataShape.SUMMARY, data, operation_summary)

    records = [item for item in items if isinstance(item, Mapping)]
    if not records:
        # A list of bare values has no fields to chart or date.
        return _verdict(DataShape.LIST, data, operation_summary)

    fields = detect_fields(records, schema, config)
    shape = DataShape.LIST

    if fields.date_field and fields.metric_fields:
        other_fields = [
            f for f in fields.all_fields
            if f != fields.date_field and f not in fields.metric_fields
        ]
        if len(fields.metric_fields) >= len(other_fields):
            shape = DataShape.TIME_SERIES

    if shape is DataShape.LIST and fields.date_field and fields.description_field:
        shape = DataShape.EVENT_LOG

    logger.debug("Classified %d records as %s", len(records), shape.value)
    return ClassifiedData(
        shape=shape,
        fields=fields,
        data=data,
        items=records,
        title=operation_summary,
    )


def _verdict(shape: DataShape, data: Any, title: Optional[str]) -> ClassifiedData:
    logger.debug("Classified payload as %s", shape.value)
    return ClassifiedData(shape=shape, data=data, title=title)
