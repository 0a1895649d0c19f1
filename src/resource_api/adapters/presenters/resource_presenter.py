# Copyright (c) Arche.
# SPDX-License-Identifier: MIT
"""Resource Presenter.

Summary:
    Turns :mod:`resource_api.adapters.controllers.outcomes` into presentation
    results: success envelopes with an ETag, ``201`` with ``Location``, empty
    ``204`` for deletions and a ``RESOURCE_NOT_FOUND`` error envelope for
    :class:`NotFound`.

Layer:
    adapters/presenters
"""

from __future__ import annotations

from typing import Any

from resource_api.adapters.controllers.outcomes import (
    Created,
    DeleteOutcome,
    GetOutcome,
    Listed,
    NotFound,
    UpdateOutcome,
)
from resource_api.adapters.presenters.base_presenter import BasePresenter, PresentResult

NOT_FOUND_CODE = "RESOURCE_NOT_FOUND"


class ResourcePresenter(BasePresenter):
    """Presenter for one resource's controller outcomes."""

    def __init__(self, resource: str) -> None:
        self._resource = resource

    def present_list(
        self, outcome: Listed[Any], *, trace_id: str | None = None
    ) -> PresentResult[Any]:
        return self.present_success(data=list(outcome.items), trace_id=trace_id)

    def present_get(
        self, outcome: GetOutcome[Any], *, trace_id: str | None = None
    ) -> PresentResult[Any]:
        if isinstance(outcome, NotFound):
            return self.present_not_found(outcome, trace_id=trace_id)
        return self.present_success(data=outcome.value, trace_id=trace_id)

    def present_created(
        self,
        outcome: Created[Any],
        *,
        location: str,
        trace_id: str | None = None,
    ) -> PresentResult[Any]:
        """Return a ``201`` result whose ``Location`` points at the new record."""
        return self.present_success(
            data=outcome.value,
            trace_id=trace_id,
            status_code=201,
            headers={"Location": location},
        )

    def present_updated(
        self, outcome: UpdateOutcome[Any], *, trace_id: str | None = None
    ) -> PresentResult[Any]:
        if isinstance(outcome, NotFound):
            return self.present_not_found(outcome, trace_id=trace_id)
        return self.present_success(data=outcome.value, trace_id=trace_id)

    def present_deleted(
        self, outcome: DeleteOutcome, *, trace_id: str | None = None
    ) -> PresentResult[Any]:
        if isinstance(outcome, NotFound):
            return self.present_not_found(outcome, trace_id=trace_id)
        return self.present_empty(status_code=204, trace_id=trace_id)

    def present_not_found(
        self, outcome: NotFound, *, trace_id: str | None = None
    ) -> PresentResult[Any]:
        return self.present_error(
            code=NOT_FOUND_CODE,
            http_status=404,
            message=f"{self._resource} {outcome.id} not found.",
            details={"id": str(outcome.id)},
            trace_id=trace_id,
        )
