"""Apply PatternToggled intents to the detail view's expansion state."""

from __future__ import annotations

from typing import Optional

from pebbles.core.expansion import DetailExpansion, table_rows
from pebbles.core.records import ProgressRecord
from pebbles.core.utils.logging import get_logger
from pebbles.gui.bus import EventBus
from pebbles.gui.events import Namespace, PatternRowsChanged, PatternToggled, RecordUpdated

logger = get_logger(__name__)


class ExpansionController:
    """Keep error/warning tables in sync with the record and the user's toggles.

    A RecordUpdated for the same DetailKey keeps expanded groups expanded;
    a RecordUpdated for a different key collapses everything.
    """

    def __init__(self, bus: EventBus) -> None:
        self._bus = bus
        self.expansion = DetailExpansion()
        self._record: Optional[ProgressRecord] = None
        bus.subscribe(RecordUpdated, self._on_record_updated)
        bus.subscribe(PatternToggled, self._on_pattern_toggled)

    def stop(self) -> None:
        self._bus.unsubscribe(RecordUpdated, self._on_record_updated)
        self._bus.unsubscribe(PatternToggled, self._on_pattern_toggled)

    def _groups(self, namespace: Namespace):
        if self._record is None:
            return ()
        return self._record.errors if namespace == "errors" else self._record.warnings

    def _emit_rows(self, namespace: Namespace) -> None:
        groups = self._groups(namespace)
        rows = table_rows(groups, self.expansion.namespace(namespace))
        self._bus.emit(PatternRowsChanged(namespace=namespace, rows=tuple(rows), group_count=len(groups)))

    def _on_record_updated(self, e: RecordUpdated) -> None:
        if self.expansion.bind(e.key):
            logger.debug(f"expansion reset for {e.key}")
        self._record = e.record
        self._emit_rows("errors")
        self._emit_rows("warnings")

    def _on_pattern_toggled(self, e: PatternToggled) -> None:
        groups = self._groups(e.namespace)
        if not 0 <= e.index < len(groups):
            logger.warning(f"toggle for unknown {e.namespace} group {e.index}")
            return
        self.expansion.namespace(e.namespace).toggle(e.index, groups[e.index])
        self._emit_rows(e.namespace)
