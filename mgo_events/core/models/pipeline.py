"""
Pipeline status and stream record models.

StepStatus snapshots describe one pipeline step. ProgressRecord and FinalRecord
are the two record kinds written to the outbound newline-delimited JSON stream.
"""

import json
from dataclasses import dataclass, field, replace
from typing import Any, Dict, Optional, Tuple, Union

from .enums import StepState
from .event import EventsByDate, events_by_date_to_dict, events_by_date_from_dict


@dataclass(frozen=True)
class StepStatus:
    """
    Immutable snapshot of one pipeline step.

    Attributes:
        name: Step name
        state: StepState value
        result: Small structured summary set on success
        error: Error message set on failure
        duration_ms: Wall time spent in the step, once it finished
    """

    name: str
    state: StepState = StepState.PENDING
    result: Optional[Dict[str, Any]] = None
    error: Optional[str] = None
    duration_ms: Optional[int] = None

    def start(self) -> 'StepStatus':
        return replace(self, state=StepState.RUNNING)

    def succeed(self, result: Optional[Dict[str, Any]], duration_ms: int) -> 'StepStatus':
        return replace(self, state=StepState.SUCCESS, result=result, duration_ms=duration_ms)

    def fail(self, error: str, duration_ms: Optional[int] = None) -> 'StepStatus':
        return replace(self, state=StepState.FAILED, error=error, duration_ms=duration_ms)

    def to_dict(self) -> dict:
        """Convert to the wire shape, omitting absent fields."""
        data: Dict[str, Any] = {'name': self.name, 'state': self.state.value}
        if self.result is not None:
            data['result'] = dict(self.result)
        if self.error is not None:
            data['error'] = self.error
        if self.duration_ms is not None:
            data['durationMs'] = self.duration_ms
        return data

    @classmethod
    def from_dict(cls, data: dict) -> 'StepStatus':
        return cls(
            name=data['name'],
            state=StepState(data.get('state', StepState.PENDING.value)),
            result=data.get('result'),
            error=data.get('error'),
            duration_ms=data.get('durationMs'),
        )


def encode_record(payload: dict) -> str:
    """Encode one stream record as a single newline-terminated JSON line."""
    return json.dumps(payload, ensure_ascii=False, separators=(',', ':')) + "\n"


@dataclass(frozen=True)
class ProgressRecord:
    """Progress broadcast carrying a snapshot of every step."""
    progress: int
    methods: Tuple[StepStatus, ...] = field(default_factory=tuple)

    type = "progress"

    def __post_init__(self):
        if not 0 <= self.progress <= 100:
            raise ValueError(f"Progress out of range: {self.progress}")

    def to_dict(self) -> dict:
        return {
            'type': self.type,
            'progress': self.progress,
            'methods': [step.to_dict() for step in self.methods],
        }

    def to_line(self) -> str:
        return encode_record(self.to_dict())


@dataclass(frozen=True)
class FinalRecord:
    """
    Terminal pipeline outcome.

    ``success=True`` always carries events. ``success=False`` with events is a
    degraded result (sample data); without events it is a hard failure.
    """

    success: bool
    events: Optional[EventsByDate] = None
    successful_method_name: Optional[str] = None
    error: Optional[str] = None

    type = "final"

    def __post_init__(self):
        if self.success and self.events is None:
            raise ValueError("A successful outcome must carry events")
        if not self.success and not self.error:
            raise ValueError("A failed outcome must carry an error message")

    @property
    def is_degraded(self) -> bool:
        return not self.success and self.events is not None

    def to_dict(self) -> dict:
        data: Dict[str, Any] = {'type': self.type, 'success': self.success}
        if self.events is not None:
            data['events'] = events_by_date_to_dict(self.events)
        if self.successful_method_name is not None:
            data['successfulMethodName'] = self.successful_method_name
        if self.error is not None:
            data['error'] = self.error
        return data

    def to_line(self) -> str:
        return encode_record(self.to_dict())

    @classmethod
    def from_dict(cls, data: dict) -> 'FinalRecord':
        events = data.get('events')
        return cls(
            success=bool(data['success']),
            events=events_by_date_from_dict(events) if events is not None else None,
            successful_method_name=data.get('successfulMethodName'),
            error=data.get('error'),
        )


StreamRecord = Union[ProgressRecord, FinalRecord]
