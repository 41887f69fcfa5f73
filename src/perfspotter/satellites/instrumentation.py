"""
Broker driving all instrumentation satellites.
"""

import logging
from typing import Optional

from ..models import InstrumentationDescription
from ..validation import InstrumentationError
from .base import INSTRUMENTATION_EXCLUDES, INSTRUMENTATION_INCLUDES, InstrumentationAdapter, split_filter
from .broker import SatelliteBroker

logger = logging.getLogger(__name__)


def scoped_description(adapter: InstrumentationAdapter,
                       description: InstrumentationDescription) -> InstrumentationDescription:
    """
    Copy `description` and add the adapter's own include/exclude filters to
    its global restriction.
    """
    scoped = description.copy()
    properties = adapter.get_properties()
    scoped.include(split_filter(properties.get(INSTRUMENTATION_INCLUDES)))
    scoped.exclude(split_filter(properties.get(INSTRUMENTATION_EXCLUDES)))
    return scoped


class InstrumentationBroker(SatelliteBroker[InstrumentationAdapter]):
    kind = "instrumentation"
    error_type = InstrumentationError

    def instrument(self, description: Optional[InstrumentationDescription]) -> None:
        if description is None or description.is_empty():
            raise InstrumentationError("Instrumentation description must not be empty")
        logger.info(f"Instrumenting {len(self._adapters)} satellite(s)")
        self._fan_out(
            "instrument",
            lambda adapter: adapter.instrument(scoped_description(adapter, description)),
        )

    def uninstrument(self) -> None:
        logger.info(f"Uninstrumenting {len(self._adapters)} satellite(s)")
        self._fan_out("uninstrument", lambda adapter: adapter.uninstrument())
